"""Data models for the wiki client.

Listings returned by the XML-RPC API are loosely typed structs whose keys
differ between calls (``id`` for listings, ``name`` for recent changes).
They are normalised here into DocumentInfo records.
"""

import xmlrpc.client
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DocumentInfo:
    """One remote document as reported by a listing or change feed.

    Attributes:
        id: Colon-delimited DokuWiki identifier (e.g. "wiki:syntax")
        size: Size in bytes, or None when the server did not report it
        permissions: ACL permission level, or None when not reported
        version: Modification time as integer epoch seconds
    """
    id: str
    size: Optional[int]
    permissions: Optional[int]
    version: int

    @classmethod
    def from_struct(cls, data: Dict[str, Any]) -> 'DocumentInfo':
        """Build a DocumentInfo from an XML-RPC struct.

        Args:
            data: Struct from wiki.getAllPages, wiki.getAttachments,
                  wiki.getRecentChanges or wiki.getRecentMediaChanges

        Returns:
            DocumentInfo: Normalised record

        Raises:
            ValueError: If the struct carries no identifier
        """
        document_id = data.get('id') or data.get('name')
        if not document_id:
            raise ValueError(f"Listing entry has no identifier: {data!r}")

        size = data.get('size')
        permissions = data.get('perms', data.get('perm'))
        modified = data.get('lastModified', data.get('mtime', 0))

        return cls(
            id=str(document_id),
            size=int(size) if size is not None else None,
            permissions=int(permissions) if permissions is not None else None,
            version=to_epoch(modified),
        )


def to_epoch(value: Any) -> int:
    """Convert an XML-RPC timestamp to integer epoch seconds.

    DokuWiki reports ``lastModified`` as an XML-RPC DateTime on most
    versions, as a plain integer on some, and the DateTime value carries no
    timezone. Naive values are read as UTC.

    Args:
        value: xmlrpc.client.DateTime, datetime, int, or ISO 8601 string

    Returns:
        int: Seconds since the epoch (0 for missing values)
    """
    if value is None or value == '':
        return 0
    if isinstance(value, bool):
        raise ValueError(f"Not a timestamp: {value!r}")
    if isinstance(value, (int, float)):
        return int(value)
    if isinstance(value, xmlrpc.client.DateTime):
        value = datetime.strptime(value.value, "%Y%m%dT%H:%M:%S")
    if isinstance(value, str):
        text = value.strip()
        if text.isdigit():
            return int(text)
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        if 'T' in text and '-' not in text.split('T')[0]:
            value = datetime.strptime(text[:17], "%Y%m%dT%H:%M:%S")
        else:
            value = datetime.fromisoformat(text)
    if isinstance(value, datetime):
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return int(value.timestamp())
    raise ValueError(f"Not a timestamp: {value!r}")
