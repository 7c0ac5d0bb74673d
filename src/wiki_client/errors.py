"""Typed exception hierarchy for remote wiki errors.

This module defines all custom exceptions used by the wiki client library.
All exceptions inherit from WikiError for easy catching and include
descriptive messages with context to help with debugging.
"""

from typing import Optional


class WikiFSError(Exception):
    """Base exception for all wikifs errors.

    Use this to catch any application-level error from the filesystem.
    """
    pass


class WikiError(WikiFSError):
    """Base exception for all remote-store errors."""
    pass


class InvalidCredentialsError(WikiError):
    """Raised when credentials are incomplete or authentication fails."""

    def __init__(self, user: str, endpoint: str):
        super().__init__(
            f"Credentials are invalid (user: {user}, endpoint: {endpoint})"
        )
        self.user = user
        self.endpoint = endpoint


class PageNotFoundError(WikiError):
    """Raised when a requested page or attachment does not exist."""

    def __init__(self, document_id: str):
        super().__init__(f"Document {document_id} not found")
        self.document_id = document_id


class APIUnreachableError(WikiError):
    """Raised when the XML-RPC endpoint is not available or unreachable."""

    def __init__(self, endpoint: str):
        super().__init__(f"API is not available at {endpoint}")
        self.endpoint = endpoint


class APIAccessError(WikiError):
    """Raised when API access fails after retries or due to HTTP errors."""

    def __init__(self, message: str = "Wiki API failure (after 3 retries)"):
        super().__init__(message)


class RemoteFaultError(WikiError):
    """Raised when the wiki answers a call with an XML-RPC fault."""

    def __init__(self, operation: str, fault_code: int, fault_string: Optional[str] = None):
        message = f"Remote fault {fault_code} during {operation}"
        if fault_string:
            message += f": {fault_string}"
        super().__init__(message)
        self.operation = operation
        self.fault_code = fault_code
        self.fault_string = fault_string
