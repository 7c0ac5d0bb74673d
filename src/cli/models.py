"""Data models for CLI operations.

This module defines the exit codes and the mount configuration used by the
CLI module. All models use dataclasses or enums for clean, type-safe data
structures.
"""

from dataclasses import dataclass
from enum import IntEnum

from src.wiki_fs.content_cache import DEFAULT_CAPACITY
from src.wiki_fs.id_codec import DEFAULT_PAGE_EXTENSION
from src.wiki_fs.models import Mode
from src.wiki_fs.poller import DEFAULT_POLL_INTERVAL
from src.wiki_fs.sync_engine import DEFAULT_CLOCK_SKEW


class ExitCode(IntEnum):
    """Exit codes for CLI operations.

    - SUCCESS (0): Operation completed successfully
    - GENERAL_ERROR (1): General error (config issues, mount failures)
    - AUTH_ERROR (3): Authentication or authorization failure
    - NETWORK_ERROR (4): Network connectivity or API availability issues

    Example:
        >>> exit_code = ExitCode.SUCCESS
        >>> sys.exit(exit_code)
    """
    SUCCESS = 0
    GENERAL_ERROR = 1
    AUTH_ERROR = 3
    NETWORK_ERROR = 4


@dataclass
class MountConfig:
    """Mount configuration stored in .wikifs/config.yaml.

    Credentials are not part of the configuration; they come from the
    environment (see src.wiki_client.auth).

    Attributes:
        url: DokuWiki XML-RPC endpoint (e.g. https://wiki.example.com/lib/exe/xmlrpc.php)
        mode: Collection to mount (pages or media)
        namespace: Root namespace for media listings
        cache_size: Content cache capacity in bytes
        poll_interval: Seconds between synchronization passes
        clock_skew: Seconds the first poll reaches back past the newest change
        page_extension: File extension of pages in page mode
        verify_ssl: Whether to verify the server's TLS certificate
        timeout: Per-request timeout in seconds

    Example:
        >>> config = MountConfig(url="https://wiki.example.com/lib/exe/xmlrpc.php")
        >>> config.mode
        <Mode.PAGES: 'pages'>
    """
    url: str
    mode: Mode = Mode.PAGES
    namespace: str = ""
    cache_size: int = DEFAULT_CAPACITY
    poll_interval: int = DEFAULT_POLL_INTERVAL
    clock_skew: int = DEFAULT_CLOCK_SKEW
    page_extension: str = DEFAULT_PAGE_EXTENSION
    verify_ssl: bool = True
    timeout: int = 30
