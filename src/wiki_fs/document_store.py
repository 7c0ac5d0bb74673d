"""Mode-aware access to the remote document collection.

Pages and attachments are listed, fetched, written and deleted through
different XML-RPC calls. DocumentStore hides that split so the rest of the
core talks about "documents" only.
"""

import logging
from typing import List

from src.wiki_client.models import DocumentInfo

from .models import Mode

logger = logging.getLogger(__name__)


class DocumentStore:
    """Routes document operations to the page or attachment API.

    Example:
        >>> store = DocumentStore(api, Mode.MEDIA, namespace="wiki")
        >>> [doc.id for doc in store.list_all()]
        ['wiki:logo.png', 'wiki:dokuwiki-128.png']
    """

    def __init__(self, api, mode: Mode = Mode.PAGES, namespace: str = ""):
        """Initialize the store.

        Args:
            api: Remote store client (WikiAPIWrapper or compatible)
            mode: Which collection to address
            namespace: Root namespace for attachment listings
        """
        self._api = api
        self.mode = Mode(mode)
        self.namespace = namespace

    @property
    def api(self):
        return self._api

    def list_all(self) -> List[DocumentInfo]:
        if self.mode == Mode.MEDIA:
            return self._api.list_attachments(self.namespace, recursive=True)
        return self._api.list_all_pages()

    def list_changes(self, since: int) -> List[DocumentInfo]:
        if self.mode == Mode.MEDIA:
            return self._api.get_recent_media_changes(since)
        return self._api.get_recent_changes(since)

    def fetch(self, identifier: str) -> bytes:
        if self.mode == Mode.MEDIA:
            return self._api.get_attachment(identifier)
        return self._api.get_page(identifier)

    def write(
        self,
        identifier: str,
        content: bytes,
        summary: str = "",
        minor: bool = True,
        exists: bool = False
    ) -> None:
        """Save content under identifier.

        Args:
            identifier: Remote identifier
            content: Raw content
            summary: Edit summary (pages only)
            minor: Minor edit flag (pages only)
            exists: Whether the document is already known (media overwrite)
        """
        if self.mode == Mode.MEDIA:
            self._api.put_attachment(identifier, content, overwrite=exists)
        else:
            self._api.put_page(identifier, content, summary=summary, minor=minor)

    def delete(self, identifier: str, summary: str = "") -> None:
        if self.mode == Mode.MEDIA:
            self._api.delete_attachment(identifier)
        else:
            self._api.delete_page(identifier, summary=summary)
