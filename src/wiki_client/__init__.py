"""DokuWiki client library for wikifs.

This package provides a Python abstraction over the DokuWiki XML-RPC API,
exposing the named page and attachment operations the filesystem needs.
"""

from .errors import (
    WikiFSError,
    WikiError,
    InvalidCredentialsError,
    PageNotFoundError,
    APIUnreachableError,
    APIAccessError,
    RemoteFaultError,
)
from .models import DocumentInfo

__all__ = [
    "WikiFSError",
    "WikiError",
    "InvalidCredentialsError",
    "PageNotFoundError",
    "APIUnreachableError",
    "APIAccessError",
    "RemoteFaultError",
    "DocumentInfo",
]
