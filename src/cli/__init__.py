"""Command-line interface for wikifs.

This package provides the `wikifs` CLI tool that loads the mount
configuration and credentials, builds the wiki filesystem, runs the
background synchronization and serves the mount through FUSE.
"""

from .config import ConfigLoader
from .models import ExitCode, MountConfig
from .errors import (
    CLIError,
    ConfigNotFoundError,
    ConfigError,
    MountError,
)

__all__ = [
    'ConfigLoader',
    'ExitCode',
    'MountConfig',
    'CLIError',
    'ConfigNotFoundError',
    'ConfigError',
    'MountError',
]
