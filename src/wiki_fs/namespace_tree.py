"""In-memory directory tree mapping paths to remote documents.

This module implements the authoritative local model of what exists on the
mounted wiki. The tree is made of NamespaceNode objects, each holding two
disjoint maps: ``entries`` (documents directly under the node) and
``children`` (sub-directories). Paths are resolved by consuming one segment
at a time and recursing into the matching child.

Only the NamespaceTree wrapping the root node owns the mount mode, the
synchronization marker, the content cache and the lock. Recursive node
methods operate purely on structure; all cache interaction happens in the
outermost call.
"""

import logging
import threading
from typing import Dict, Iterator, List, Optional, Tuple

from .content_cache import ContentCache
from .id_codec import split_path
from .models import EntryMetadata, Mode

logger = logging.getLogger(__name__)


class NamespaceNode:
    """One directory level of the namespace tree.

    Invariant: ``entries`` and ``children`` never share a key, so a name is
    either a file or a directory. Every mutating method checks it.
    """

    def __init__(self):
        self.entries: Dict[str, EntryMetadata] = {}
        self.children: Dict[str, 'NamespaceNode'] = {}

    def add(self, segments: List[str], metadata: EntryMetadata) -> bool:
        """Set the entry at segments, creating missing directories."""
        if not segments:
            return False
        base, rest = segments[0], segments[1:]
        if not rest:
            if base in self.children:
                return False
            self.entries[base] = metadata
            return True
        if base in self.entries:
            return False
        child = self.children.get(base)
        if child is None:
            child = self.children[base] = NamespaceNode()
        return child.add(rest, metadata)

    def remove(self, segments: List[str]) -> Optional[EntryMetadata]:
        """Delete the entry at segments and return its metadata."""
        if not segments:
            return None
        base, rest = segments[0], segments[1:]
        if not rest:
            return self.entries.pop(base, None)
        child = self.children.get(base)
        if child is None:
            return None
        return child.remove(rest)

    def find_node(self, segments: List[str]) -> Optional['NamespaceNode']:
        """Return the directory node at segments, or None."""
        if not segments:
            return self
        child = self.children.get(segments[0])
        if child is None:
            return None
        return child.find_node(segments[1:])

    def lookup(self, segments: List[str]) -> Optional[EntryMetadata]:
        """Return the entry metadata at segments, or None."""
        if not segments:
            return None
        parent = self.find_node(segments[:-1])
        if parent is None:
            return None
        return parent.entries.get(segments[-1])

    def mkdir(self, segments: List[str]) -> bool:
        """Create an empty directory; every parent must already exist."""
        if not segments:
            return False
        parent = self.find_node(segments[:-1])
        if parent is None:
            return False
        name = segments[-1]
        if name in parent.entries or name in parent.children:
            return False
        parent.children[name] = NamespaceNode()
        return True

    def rmdir(self, segments: List[str]) -> bool:
        """Remove a directory that holds no entries anywhere beneath it."""
        if not segments:
            return False
        parent = self.find_node(segments[:-1])
        if parent is None:
            return False
        child = parent.children.get(segments[-1])
        if child is None or not child.is_empty():
            return False
        del parent.children[segments[-1]]
        return True

    def is_empty(self) -> bool:
        """True if neither this node nor any descendant holds an entry."""
        if self.entries:
            return False
        return all(child.is_empty() for child in self.children.values())

    def names(self) -> List[str]:
        return sorted(set(self.entries) | set(self.children))

    def walk(self, prefix: str = '') -> Iterator[Tuple[str, EntryMetadata]]:
        for name, metadata in self.entries.items():
            yield f"{prefix}/{name}", metadata
        for name, child in self.children.items():
            yield from child.walk(f"{prefix}/{name}")


class NamespaceTree:
    """Root of the namespace, owner of the shared mount state.

    All public methods take slash-delimited paths and run under ``lock``, a
    re-entrant lock shared with the content cache and the synchronization
    marker. Callers that need several calls to observe a consistent state
    hold ``lock`` across them.

    A path that runs through a file where a directory is expected simply
    does not resolve: queries return None/False, they never raise.

    Example:
        >>> tree = NamespaceTree(Mode.PAGES)
        >>> tree.add("/wiki/start.dw", EntryMetadata("wiki:start", 10, 1, 0))
        True
        >>> tree.list("/")
        ['wiki']
    """

    def __init__(
        self,
        mode: Mode = Mode.PAGES,
        cache: Optional[ContentCache] = None,
        marker: int = 0
    ):
        self.mode = Mode(mode)
        self.cache = cache if cache is not None else ContentCache()
        self.marker = marker
        self.lock = threading.RLock()
        self._root = NamespaceNode()

    def add(self, path: str, metadata: EntryMetadata) -> bool:
        """Create or replace the entry at path.

        Missing intermediate directories are created. Fails (returns False)
        for the root, when a parent segment is a file, or when the final
        name is a directory.
        """
        with self.lock:
            added = self._root.add(split_path(path), metadata)
        if not added:
            logger.debug(f"Cannot add entry at {path}")
        return added

    def remove(self, path: str) -> Optional[EntryMetadata]:
        """Delete the entry at path. Parent directories are kept."""
        with self.lock:
            return self._root.remove(split_path(path))

    def list(self, path: str) -> Optional[List[str]]:
        """Sorted names directly under path, or None if it is not a directory."""
        with self.lock:
            node = self._root.find_node(split_path(path))
            return node.names() if node is not None else None

    def is_directory(self, path: str) -> bool:
        with self.lock:
            return self._root.find_node(split_path(path)) is not None

    def is_file(self, path: str) -> bool:
        with self.lock:
            return self._root.lookup(split_path(path)) is not None

    def get_metadata(self, path: str) -> Optional[EntryMetadata]:
        with self.lock:
            return self._root.lookup(split_path(path))

    def mkdir(self, path: str) -> bool:
        """Create an empty directory at path; its parent must exist."""
        with self.lock:
            return self._root.mkdir(split_path(path))

    def can_rmdir(self, path: str) -> bool:
        """True if path is a directory with no entries anywhere beneath it."""
        with self.lock:
            node = self._root.find_node(split_path(path))
            return node is not None and node.is_empty()

    def rmdir(self, path: str) -> bool:
        """Remove the directory at path if it is transitively empty.

        The root itself is never removed.
        """
        with self.lock:
            return self._root.rmdir(split_path(path))

    def walk(self) -> List[Tuple[str, EntryMetadata]]:
        """All (path, metadata) pairs in the tree."""
        with self.lock:
            return list(self._root.walk())

    def clear(self) -> None:
        """Drop every entry, directory and cached payload."""
        with self.lock:
            self._root = NamespaceNode()
            self.cache.clear()
