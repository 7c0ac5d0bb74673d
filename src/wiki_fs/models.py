"""Data models for the wiki filesystem core.

This module defines the value types shared by the namespace tree, the
synchronization engine and the access policy. All models use dataclasses
or enums for clean, type-safe data structures.
"""

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Optional

from src.wiki_client.models import DocumentInfo


class Mode(str, Enum):
    """Which remote collection a mount projects.

    - PAGES: wiki pages, presented with a fixed file extension
    - MEDIA: attachments, presented under their own names
    """
    PAGES = "pages"
    MEDIA = "media"


class Permission(IntEnum):
    """DokuWiki ACL levels.

    The scale is ordered: a holder of a level implicitly holds every lower
    one, so permission checks are plain ``>=`` comparisons.
    """
    NONE = 0
    READ = 1
    EDIT = 2
    CREATE = 4
    UPLOAD = 8
    DELETE = 16
    ADMIN = 255


@dataclass(frozen=True)
class EntryMetadata:
    """Locally-known facts about one remote document.

    Instances are immutable and replaced wholesale whenever a new server
    state is observed. Equality is value equality, which is what lets the
    reconciliation skip changes it has already applied.

    Attributes:
        identifier: Colon-delimited remote identifier
        size: Size in bytes
        permissions: ACL level, or None when unknown (forces a remote check)
        version: Server modification time in epoch seconds
    """
    identifier: str
    size: int
    permissions: Optional[int]
    version: int

    @classmethod
    def from_document(cls, document: DocumentInfo, size: Optional[int] = None) -> 'EntryMetadata':
        """Build metadata from a listing record.

        Args:
            document: Record from the remote store client
            size: Size to use when the record carries none
        """
        return cls(
            identifier=document.id,
            size=document.size if document.size is not None else (size or 0),
            permissions=document.permissions,
            version=document.version,
        )


@dataclass
class SyncReport:
    """Outcome of one reconciliation pass.

    Attributes:
        added: Entries created from previously unknown documents
        updated: Entries whose metadata was replaced
        removed: Entries dropped because the remote document is gone
        unchanged: Changes skipped because they were already applied
        completed: False if the pass ended early (fault or cancellation)
        marker: Synchronization marker after the pass
    """
    added: int = 0
    updated: int = 0
    removed: int = 0
    unchanged: int = 0
    completed: bool = True
    marker: int = 0

    @property
    def changed(self) -> int:
        return self.added + self.updated + self.removed
