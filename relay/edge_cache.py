"""
In-process response cache keyed by request URL.

Served file responses are stored after a successful backend fetch and
returned verbatim on later requests for the same URL. Entries expire
according to the max-age directive of the stored Cache-Control header;
the metadata index is never consulted on a hit.
"""

import re
import threading
import time
from collections import OrderedDict
from typing import Optional, Protocol

from common.constants import EDGE_CACHE_MAX_BYTES, EDGE_CACHE_MAX_ENTRIES, EDGE_CACHE_MAX_ENTRY_BYTES
from common.logging_config import get_logger
from relay.types import CachedResponse

logger = get_logger(__name__)

_MAX_AGE = re.compile(r"max-age=(\d+)", re.IGNORECASE)


class EdgeCache(Protocol):
    def match(self, key: str) -> Optional[CachedResponse]:
        ...

    def put(self, key: str, response: CachedResponse) -> None:
        ...


def max_age_of(response: CachedResponse) -> Optional[int]:
    """
    Read the max-age directive of a cached response.

    Returns:
        Lifetime in seconds, None when the header has no max-age
    """
    cache_control = next(
        (v for k, v in response.headers.items() if k.lower() == "cache-control"),
        "",
    )
    if "no-store" in cache_control.lower():
        return 0
    match = _MAX_AGE.search(cache_control)
    return int(match.group(1)) if match else None


class MemoryEdgeCache:
    """
    Thread-safe bounded cache with least-recently-used eviction.

    Bounded both by entry count and by the total size of the cached bodies.
    A body larger than max_entry_bytes is never stored.
    """

    def __init__(
        self,
        max_entries: int = EDGE_CACHE_MAX_ENTRIES,
        max_bytes: int = EDGE_CACHE_MAX_BYTES,
        max_entry_bytes: int = EDGE_CACHE_MAX_ENTRY_BYTES,
        clock=time.monotonic,
    ):
        """
        Initialize cache.

        Args:
            max_entries: Entries kept before the least recently used is evicted
            max_bytes: Total body bytes kept before the least recently used is evicted
            max_entry_bytes: Largest body that is cached at all
            clock: Monotonic time source (tests pass a fake)
        """
        self._max_entries = max_entries
        self._max_bytes = max_bytes
        self._max_entry_bytes = min(max_entry_bytes, max_bytes)
        self._clock = clock
        self._lock = threading.RLock()
        self._entries: "OrderedDict[str, tuple[Optional[float], CachedResponse]]" = OrderedDict()
        self._total_bytes = 0

    def match(self, key: str) -> Optional[CachedResponse]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None

            expires_at, response = entry
            if expires_at is not None and self._clock() >= expires_at:
                self._discard(key)
                logger.debug(f"Edge cache entry expired [key={key}]")
                return None

            self._entries.move_to_end(key)
            return response

    def put(self, key: str, response: CachedResponse) -> None:
        max_age = max_age_of(response)
        if max_age == 0:
            return

        size = len(response.body)
        if size > self._max_entry_bytes:
            logger.debug(f"Edge cache skipped oversized body [key={key}] [bytes={size}]")
            return

        expires_at = self._clock() + max_age if max_age is not None else None

        with self._lock:
            self._discard(key)
            self._entries[key] = (expires_at, response)
            self._total_bytes += size
            while len(self._entries) > self._max_entries or self._total_bytes > self._max_bytes:
                evicted = next(iter(self._entries))
                self._discard(evicted)
                logger.debug(f"Edge cache evicted [key={evicted}]")

    def _discard(self, key: str) -> None:
        entry = self._entries.pop(key, None)
        if entry is not None:
            self._total_bytes -= len(entry[1].body)

    @property
    def total_bytes(self) -> int:
        with self._lock:
            return self._total_bytes

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
