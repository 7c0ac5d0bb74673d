"""Authentication module for loading DokuWiki credentials.

This module handles loading DokuWiki credentials from environment variables
using python-dotenv. Anonymous access is allowed, but a user name without a
password (or the reverse) is rejected.
"""

import os
from typing import NamedTuple, Optional

from dotenv import load_dotenv

from .errors import InvalidCredentialsError


class Credentials(NamedTuple):
    """DokuWiki XML-RPC credentials."""
    url: str
    user: Optional[str]
    password: Optional[str]

    @property
    def anonymous(self) -> bool:
        return self.user is None


class Authenticator:
    """Loads and validates DokuWiki credentials from environment variables.

    Credentials are loaded from a .env file using python-dotenv and are never
    written to the configuration file or logged.

    Environment variables:
        DOKUWIKI_URL: XML-RPC endpoint, overrides the configured URL
        DOKUWIKI_USER: Wiki user name
        DOKUWIKI_PASSWORD: Wiki password

    Example:
        >>> auth = Authenticator("https://wiki.example.com/lib/exe/xmlrpc.php")
        >>> creds = auth.get_credentials()
        >>> print(f"Connecting to {creds.url}")
    """

    def __init__(self, default_url: Optional[str] = None):
        """Initialize the authenticator by loading environment variables from .env file.

        Args:
            default_url: Endpoint used when DOKUWIKI_URL is not set
        """
        load_dotenv()
        self._default_url = default_url

    def get_credentials(self) -> Credentials:
        """Get DokuWiki credentials from environment variables.

        Returns:
            Credentials: A named tuple containing url, user, and password

        Raises:
            InvalidCredentialsError: If the URL is missing or only one of
                user and password is set
        """
        url = os.getenv('DOKUWIKI_URL') or self._default_url
        user = os.getenv('DOKUWIKI_USER') or None
        password = os.getenv('DOKUWIKI_PASSWORD') or None

        if not url:
            raise InvalidCredentialsError(
                user=user if user else "unknown",
                endpoint="unknown"
            )

        if (user is None) != (password is None):
            raise InvalidCredentialsError(
                user=user if user else "unknown",
                endpoint=url
            )

        return Credentials(url=url, user=user, password=password)
