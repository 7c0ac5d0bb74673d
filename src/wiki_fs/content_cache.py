"""Bounded in-memory cache of document content.

This module provides the ContentCache class, which keeps raw document bytes
keyed by remote identifier so that unchanged documents are not fetched
again. Memory use is bounded by evicting the least recently used entries
before each insertion.
"""

import logging
from typing import Dict, List, Optional

from .errors import InvalidCacheValueError

logger = logging.getLogger(__name__)

DEFAULT_CAPACITY = 5 * 1024 * 1024


class ContentCache:
    """Recency-ordered cache of document bytes.

    The recency order is a plain list of identifiers, oldest first. Touching
    an identifier moves it to the end. This is O(n) per touch, which is fine
    for the working set of a wiki.

    Capacity is a steady-state bound: before an insertion, entries are
    evicted until ``total + len(value) < capacity``. A single value at least
    as large as the capacity empties the cache and is still stored.

    The cache does no locking of its own; callers serialise access through
    the namespace tree's lock.

    Example:
        >>> cache = ContentCache(capacity=1024)
        >>> cache.put("wiki:start", b"====== Start ======")
        >>> cache.get("wiki:start")
        b'====== Start ======'
    """

    def __init__(self, capacity: int = DEFAULT_CAPACITY):
        if capacity <= 0:
            raise ValueError(f"capacity must be positive, got {capacity}")
        self.capacity = capacity
        self._data: Dict[str, bytes] = {}
        self._lru_keys: List[str] = []
        self._total = 0

    def __contains__(self, key: str) -> bool:
        return key in self._data

    def __len__(self) -> int:
        return len(self._data)

    @property
    def total_size(self) -> int:
        """Sum of the sizes of all held values."""
        return self._total

    def keys(self) -> List[str]:
        """Identifiers in recency order, least recently used first."""
        return list(self._lru_keys)

    def get(self, key: str) -> Optional[bytes]:
        """Return cached bytes for key, or None. A hit marks the key as most recent."""
        value = self._data.get(key)
        if value is not None:
            self._touch(key)
        return value

    def put(self, key: str, value: bytes) -> None:
        """Store value under key, evicting old entries first.

        Args:
            key: Remote identifier
            value: Raw document content

        Raises:
            InvalidCacheValueError: If value is not bytes
        """
        if not isinstance(value, (bytes, bytearray)):
            raise InvalidCacheValueError(key, value)
        value = bytes(value)

        # A replaced value no longer counts against the budget
        self.delete(key)
        self._evict_for(len(value))

        self._data[key] = value
        self._total += len(value)
        self._touch(key)

    def delete(self, key: str) -> Optional[bytes]:
        """Remove key if present and return its value."""
        value = self._data.pop(key, None)
        if value is not None:
            self._total -= len(value)
            self._lru_keys.remove(key)
        return value

    def clear(self) -> None:
        """Drop every entry."""
        self._data.clear()
        self._lru_keys.clear()
        self._total = 0

    def _touch(self, key: str) -> None:
        if key in self._lru_keys:
            self._lru_keys.remove(key)
        self._lru_keys.append(key)

    def _evict_for(self, incoming: int) -> None:
        while self._lru_keys and self._total + incoming >= self.capacity:
            oldest = self._lru_keys[0]
            logger.debug(f"Evicting {oldest} from content cache")
            self.delete(oldest)
