"""Backoff for overloaded wiki endpoints.

DokuWiki never throttles on its own, but the reverse proxies and hosting
front ends placed before it answer 429 or 503 when busy. XML-RPC calls that
fail that way are repeated after 1, 2 and 4 seconds; anything else
propagates on the first attempt.
"""

import logging
import time
from typing import Callable, TypeVar

from .errors import APIAccessError

logger = logging.getLogger(__name__)

T = TypeVar('T')

MAX_RETRIES = 3

OVERLOAD_STATUSES = frozenset({429, 503})

# Lower-cased message fragments of proxy overload answers
OVERLOAD_MESSAGES = (
    'too many requests',
    'rate limit exceeded',
    '503 service unavailable',
)


def call_with_backoff(func: Callable[..., T], *args, **kwargs) -> T:
    """Call func, repeating it while the endpoint reports overload.

    Raises:
        APIAccessError: If the endpoint is still overloaded after
            MAX_RETRIES repeats
        Exception: Whatever func raised, if it is not an overload

    Example:
        >>> version = call_with_backoff(proxy.dokuwiki.getVersion)
    """
    attempt = 0
    while True:
        try:
            return func(*args, **kwargs)
        except Exception as e:
            if not is_overloaded(e):
                raise
            if attempt == MAX_RETRIES:
                logger.error(f"Endpoint still overloaded after {MAX_RETRIES} retries")
                raise APIAccessError(f"Wiki API failure (after {MAX_RETRIES} retries)") from e
            delay = 2 ** attempt
            attempt += 1
            logger.info(f"Endpoint overloaded, retry {attempt}/{MAX_RETRIES} in {delay}s")
            time.sleep(delay)


def is_overloaded(exception: Exception) -> bool:
    """True if exception is an HTTP 429/503 answer.

    The status is read from ``errcode`` (xmlrpc.client.ProtocolError),
    ``status_code`` or ``response.status_code`` (requests), and as a last
    resort from the message text.
    """
    for status in (
        getattr(exception, 'errcode', None),
        getattr(exception, 'status_code', None),
        getattr(getattr(exception, 'response', None), 'status_code', None),
    ):
        if status in OVERLOAD_STATUSES:
            return True

    message = str(exception).lower()
    if '429' in message:
        return True
    return any(fragment in message for fragment in OVERLOAD_MESSAGES)
