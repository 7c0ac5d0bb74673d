"""Test fixtures for wikifs unit tests.

This module provides builders for remote listing records, entry metadata
and a remote store client mock.
"""

from .wiki_fixtures import (
    NOW,
    TWELVE_HOURS,
    doc,
    meta,
    create_mock_api,
)

__all__ = [
    "NOW",
    "TWELVE_HOURS",
    "doc",
    "meta",
    "create_mock_api",
]
