"""Wiki filesystem core.

This package maps a DokuWiki page or media collection onto a directory
tree: an identifier codec, a bounded content cache, the namespace tree,
the access policy and the synchronization engine that keeps them current.
"""

from .access_policy import AccessPolicy
from .content_cache import ContentCache
from .document_store import DocumentStore
from .errors import NamespaceError, InvalidPathError, InvalidCacheValueError
from .id_codec import IdentifierCodec, split_path
from .models import EntryMetadata, Mode, Permission, SyncReport
from .namespace_tree import NamespaceNode, NamespaceTree
from .poller import SyncPoller
from .sync_engine import SyncEngine
from .wiki_filesystem import WikiFilesystem, parse_page_write

__all__ = [
    'AccessPolicy',
    'ContentCache',
    'DocumentStore',
    'NamespaceError',
    'InvalidPathError',
    'InvalidCacheValueError',
    'IdentifierCodec',
    'split_path',
    'EntryMetadata',
    'Mode',
    'Permission',
    'SyncReport',
    'NamespaceNode',
    'NamespaceTree',
    'SyncPoller',
    'SyncEngine',
    'WikiFilesystem',
    'parse_page_write',
]
