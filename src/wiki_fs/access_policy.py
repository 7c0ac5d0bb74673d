"""Permission gating for filesystem operations.

The access policy decides whether a read, write, delete or directory
operation is allowed on a path. Known entries are judged by the permission
level cached in their metadata; unknown paths, and entries whose level is
not known, are judged by a remote ACL check on the would-be identifier.
"""

import logging
from typing import Optional

from src.wiki_client.errors import WikiError

from .id_codec import IdentifierCodec
from .models import Mode, Permission
from .namespace_tree import NamespaceTree

logger = logging.getLogger(__name__)


class AccessPolicy:
    """Computes operation permissions for paths.

    Required levels:
    - read: READ
    - write, page mode: EDIT for an existing page, CREATE for a new one
    - write, media mode: DELETE for an existing file (overwriting is a
      delete plus an upload), UPLOAD for a new one
    - delete: DELETE
    - mkdir: always allowed (directories are local only)
    - rmdir: allowed iff the directory is transitively empty

    Remote checks are not cached; every probe of an unknown path asks the
    wiki again.

    Example:
        >>> policy = AccessPolicy(tree, api, codec)
        >>> policy.can_write("/wiki/new-page.dw")
        True
    """

    def __init__(self, tree: NamespaceTree, api, codec: IdentifierCodec):
        """Initialize the policy.

        Args:
            tree: Namespace tree holding cached permission levels
            api: Remote store client providing acl_check()
            codec: Identifier codec for the mount's mode
        """
        self._tree = tree
        self._api = api
        self._codec = codec

    def remote_permission(self, identifier: str) -> Optional[int]:
        """Ask the wiki for the permission level on identifier.

        Returns:
            The level, or None if the check failed
        """
        try:
            return self._api.acl_check(identifier)
        except WikiError as e:
            logger.warning(f"Permission check for {identifier} failed: {e}")
            return None

    def _level(self, path: str) -> Optional[int]:
        metadata = self._tree.get_metadata(path)
        if metadata is not None and metadata.permissions is not None:
            return metadata.permissions
        identifier = metadata.identifier if metadata is not None else self._codec.path_to_id(path)
        return self.remote_permission(identifier)

    def _allows(self, path: str, required: Permission) -> bool:
        if not self._codec.is_valid_path(path):
            return False
        level = self._level(path)
        if level is None:
            return False
        allowed = level >= required
        if not allowed:
            logger.debug(f"Denied {required.name} on {path} (level {level})")
        return allowed

    def can_read(self, path: str) -> bool:
        return self._allows(path, Permission.READ)

    def can_write(self, path: str) -> bool:
        """True if content may be written to path (existing or new)."""
        if self._tree.is_directory(path):
            return False
        exists = self._tree.is_file(path)
        if self._codec.mode == Mode.MEDIA:
            required = Permission.DELETE if exists else Permission.UPLOAD
        else:
            required = Permission.EDIT if exists else Permission.CREATE
        return self._allows(path, required)

    def can_delete(self, path: str) -> bool:
        """True if path is an existing file the user may delete."""
        if not self._tree.is_file(path):
            return False
        return self._allows(path, Permission.DELETE)

    def can_mkdir(self, path: str) -> bool:
        return True

    def can_rmdir(self, path: str) -> bool:
        return self._tree.can_rmdir(path)
