"""Typed exception hierarchy for wiki filesystem core errors.

Structural mismatches and permission denials are not exceptions in the
core; they surface as None/False results. The exceptions here mark inputs
that are invalid outright.
"""

from src.wiki_client.errors import WikiFSError


class NamespaceError(WikiFSError):
    """Base exception for all namespace and cache errors."""
    pass


class InvalidPathError(NamespaceError, ValueError):
    """Raised when a path cannot be mapped to a remote identifier."""

    def __init__(self, path: str, reason: str):
        super().__init__(f"Invalid path {path!r}: {reason}")
        self.path = path
        self.reason = reason


class InvalidCacheValueError(NamespaceError, TypeError):
    """Raised when a non-bytes value is stored in the content cache."""

    def __init__(self, key: str, value: object):
        super().__init__(
            f"Cache value for {key!r} must be bytes, got {type(value).__name__}"
        )
        self.key = key
