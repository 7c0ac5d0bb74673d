"""Filesystem-facing operations over a mounted wiki.

WikiFilesystem is the entry point a filesystem host calls into. It combines
the namespace tree, the content cache, the access policy and the
synchronization engine, and talks to the remote wiki through the document
store on cache misses and mutations.

Remote calls never happen while the tree lock is held. Operations read the
local state under the lock, release it for the network call, and take it
again to record the outcome.
"""

import logging
import re
import time
from typing import Callable, List, Optional, Tuple

from src.wiki_client.errors import WikiError

from .access_policy import AccessPolicy
from .content_cache import ContentCache, DEFAULT_CAPACITY
from .document_store import DocumentStore
from .errors import InvalidPathError
from .id_codec import DEFAULT_PAGE_EXTENSION, IdentifierCodec
from .models import EntryMetadata, Mode, SyncReport
from .namespace_tree import NamespaceTree
from .sync_engine import DEFAULT_CLOCK_SKEW, SyncEngine

logger = logging.getLogger(__name__)

DIRECTORY_SIZE = 4096

DELETE_SUMMARY = "deleted by wikifs"

# "%" on the first byte marks the first line as the edit summary
SUMMARY_LINE = re.compile(rb'\A%[ \t]?([^\n]*)\n?')


def parse_page_write(content: bytes) -> Tuple[str, bytes, bool]:
    """Split written page content into summary, body and minor flag.

    If the content starts with "%", its first line (newline included) is
    removed and used as the edit summary, and the edit is not minor.
    Otherwise the summary is empty and the edit is minor.

    Examples:
        >>> parse_page_write(b"% A new page\\nBody")
        ('A new page', b'Body', False)
        >>> parse_page_write(b"Body")
        ('', b'Body', True)
    """
    match = SUMMARY_LINE.match(content)
    if match is None:
        return "", content, True
    summary = match.group(1).decode('utf-8', errors='replace').strip()
    return summary, content[match.end():], False


class WikiFilesystem:
    """A wiki's page or media collection presented as a directory tree.

    Permission checks are separate calls (``can_*``) that the host makes
    before the corresponding operation; the operations themselves report
    failure with False or None rather than raising.

    Example:
        >>> fs = WikiFilesystem(api, mode=Mode.PAGES)
        >>> fs.mount()
        >>> fs.list("/")
        ['playground', 'start.dw', 'wiki']
        >>> fs.write_content("/playground/test.dw", b"% Try it\\nHello")
        True
    """

    def __init__(
        self,
        api,
        mode: Mode = Mode.PAGES,
        cache_size: int = DEFAULT_CAPACITY,
        page_extension: str = DEFAULT_PAGE_EXTENSION,
        namespace: str = "",
        clock_skew: int = DEFAULT_CLOCK_SKEW,
        clock: Callable[[], float] = time.time
    ):
        """Initialize the filesystem without contacting the wiki.

        Args:
            api: Remote store client (WikiAPIWrapper or compatible)
            mode: Project pages or media files
            cache_size: Content cache capacity in bytes
            page_extension: File extension of pages in page mode
            namespace: Root namespace for media listings
            clock_skew: Seconds the first poll reaches back past the newest
                listed change
            clock: Time source (epoch seconds)
        """
        self.mode = Mode(mode)
        self.codec = IdentifierCodec(self.mode, page_extension)
        self.tree = NamespaceTree(self.mode, ContentCache(cache_size))
        self.store = DocumentStore(api, self.mode, namespace)
        self.policy = AccessPolicy(self.tree, api, self.codec)
        self.engine = SyncEngine(self.tree, self.store, self.codec, clock_skew, clock)
        self._clock = clock

    def mount(self) -> int:
        """Load the complete namespace. Returns the number of entries.

        Raises:
            WikiError: If the initial listing fails
        """
        return self.engine.initial_load()

    def synchronize(self, stop_event=None) -> SyncReport:
        """Merge remote changes; never raises. See SyncEngine.synchronize."""
        return self.engine.synchronize(stop_event)

    # Structure queries

    def list(self, path: str) -> Optional[List[str]]:
        return self.tree.list(path)

    def is_directory(self, path: str) -> bool:
        return self.tree.is_directory(path)

    def is_file(self, path: str) -> bool:
        return self.tree.is_file(path)

    def size(self, path: str) -> Optional[int]:
        """Size in bytes of the file at path, DIRECTORY_SIZE for directories."""
        with self.tree.lock:
            if self.tree.is_directory(path):
                return DIRECTORY_SIZE
            metadata = self.tree.get_metadata(path)
            if metadata is None:
                return None
            if metadata.identifier in self.tree.cache:
                return len(self.tree.cache.get(metadata.identifier))
            return metadata.size

    def modified(self, path: str) -> Optional[int]:
        """Server modification time of the file at path."""
        metadata = self.tree.get_metadata(path)
        return metadata.version if metadata is not None else None

    # Permissions

    def can_read(self, path: str) -> bool:
        return self.policy.can_read(path)

    def can_write(self, path: str) -> bool:
        return self.policy.can_write(path)

    def can_delete(self, path: str) -> bool:
        return self.policy.can_delete(path)

    def can_mkdir(self, path: str) -> bool:
        return self.policy.can_mkdir(path)

    def can_rmdir(self, path: str) -> bool:
        return self.policy.can_rmdir(path)

    # Content

    def read_content(self, path: str) -> Optional[bytes]:
        """Return the content of the file at path.

        Cached content is returned directly. On a miss the document is
        fetched and cached, unless its metadata changed while the fetch was
        in flight. A failed fetch yields empty content and caches nothing.

        Returns:
            bytes, or None if path is not a file
        """
        with self.tree.lock:
            metadata = self.tree.get_metadata(path)
            if metadata is None:
                return None
            cached = self.tree.cache.get(metadata.identifier)
        if cached is not None:
            return cached

        try:
            content = self.store.fetch(metadata.identifier)
        except WikiError as e:
            logger.warning(f"Fetching {metadata.identifier} failed: {e}")
            return b""

        with self.tree.lock:
            if self.tree.get_metadata(path) == metadata:
                self.tree.cache.put(metadata.identifier, content)
            else:
                logger.debug(f"{metadata.identifier} changed during fetch, not cached")
        return content

    def write_content(self, path: str, content: bytes) -> bool:
        """Write content to the file at path, creating it if needed.

        In page mode a leading "%" line becomes the edit summary (see
        parse_page_write). Content that is empty or whitespace after that
        deletes the page if a summary was given and is rejected otherwise,
        since editors often truncate a file before writing it.

        Returns:
            bool: True if the wiki accepted the change
        """
        try:
            identifier = self.codec.path_to_id(path)
        except InvalidPathError as e:
            logger.info(f"Rejected write: {e}")
            return False

        if self.mode == Mode.PAGES:
            summary, body, minor = parse_page_write(bytes(content))
        else:
            summary, body, minor = "", bytes(content), True

        if not body.strip():
            if not summary:
                logger.info(f"Ignoring empty write to {path}")
                return False
            return self._delete(path, identifier, summary)

        with self.tree.lock:
            if self.tree.is_directory(path):
                return False
            existing = self.tree.get_metadata(path)

        try:
            self.store.write(identifier, body, summary=summary, minor=minor, exists=existing is not None)
        except WikiError as e:
            logger.error(f"Saving {identifier} failed: {e}")
            return False

        # The local save time never equals the version the wiki assigns, so the
        # next poll replaces this entry and drops the cached body. The wiki may
        # normalize saved text, and the refetch serves what it actually stored.
        metadata = EntryMetadata(
            identifier=identifier,
            size=len(body),
            permissions=existing.permissions if existing is not None else None,
            version=int(self._clock()),
        )
        with self.tree.lock:
            if not self.tree.add(path, metadata):
                logger.warning(f"Saved {identifier} but {path} cannot be placed in the tree")
                return False
            self.tree.cache.put(identifier, body)
        logger.info(f"Saved {identifier} ({len(body)} bytes)")
        return True

    def delete_file(self, path: str) -> bool:
        """Delete the file at path on the wiki and locally."""
        metadata = self.tree.get_metadata(path)
        if metadata is None:
            return False
        return self._delete(path, metadata.identifier, DELETE_SUMMARY)

    def _delete(self, path: str, identifier: str, summary: str) -> bool:
        try:
            self.store.delete(identifier, summary=summary)
        except WikiError as e:
            logger.error(f"Deleting {identifier} failed: {e}")
            return False

        with self.tree.lock:
            self.tree.remove(path)
            self.tree.cache.delete(identifier)
        logger.info(f"Deleted {identifier}")
        return True

    # Directories

    def make_directory(self, path: str) -> bool:
        return self.tree.mkdir(path)

    def remove_directory(self, path: str) -> bool:
        return self.tree.rmdir(path)
