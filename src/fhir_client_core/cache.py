"""In-memory response cache for read requests.

Entries are keyed on a canonical serialization of the outbound request, kept
in least-recently-used order and expired lazily once older than the TTL.
Only GET requests are eligible; the request executor decides eligibility with
``is_cacheable`` and builds keys with ``make_cache_key``.

Example:
    ```python
    cache = ResponseCache(max_entries=50, ttl_ms=30_000)
    key = make_cache_key(FhirRequest("GET", "Patient/123"))
    cache.set(key, patient)
    assert cache.get(key) is patient
    ```
"""

import json
import logging
import time
from collections import OrderedDict
from collections.abc import Callable
from dataclasses import dataclass
from threading import Lock
from typing import Any

from fhir_client_core.errors import ConfigurationError
from fhir_client_core.transport.base import FhirRequest

logger = logging.getLogger(__name__)

CACHEABLE_METHODS: frozenset[str] = frozenset(["GET"])

MISSING: Any = object()


def is_cacheable(method: str) -> bool:
    return method.upper() in CACHEABLE_METHODS


def make_cache_key(request: FhirRequest) -> str:
    """Serialize everything about a request that can change its response."""
    body = request.content.decode() if isinstance(request.content, bytes) else request.content
    return json.dumps(
        {
            "method": request.method.upper(),
            "url": request.url,
            "params": [list(pair) for pair in request.params or []],
            "headers": sorted([key.lower(), value] for key, value in request.headers.items()),
            "json": request.json,
            "content": body,
        },
        sort_keys=True,
        separators=(",", ":"),
        default=str,
    )


@dataclass
class _Entry:
    value: Any
    expires_at: float


class ResponseCache:
    """Bounded LRU store with per-entry time-to-live.

    Args:
        max_entries: Capacity; inserting beyond it evicts the least recently
            used entry.
        ttl_ms: Entry lifetime in milliseconds.
        enabled: A disabled cache always misses and never stores.
        clock: Monotonic time source in seconds (injectable for tests).
    """

    def __init__(
        self,
        max_entries: int = 100,
        ttl_ms: int = 300_000,
        *,
        enabled: bool = True,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_entries < 1:
            raise ConfigurationError(f"Cache max_entries must be at least 1, got {max_entries}")
        self.max_entries = max_entries
        self.ttl_ms = ttl_ms
        self.enabled = enabled
        self._clock = clock
        self._entries: OrderedDict[str, _Entry] = OrderedDict()
        self._lock = Lock()

    @classmethod
    def disabled(cls) -> "ResponseCache":
        return cls(enabled=False)

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: str) -> Any:
        """Return the cached value, or ``MISSING``.

        A hit marks the entry as most recently used; an expired entry is
        dropped and reported as a miss.
        """
        if not self.enabled:
            return MISSING

        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return MISSING
            if self._clock() >= entry.expires_at:
                del self._entries[key]
                logger.debug("Cache entry expired")
                return MISSING
            self._entries.move_to_end(key)
            return entry.value

    def set(self, key: str, value: Any) -> None:
        if not self.enabled:
            return

        with self._lock:
            self._entries[key] = _Entry(value=value, expires_at=self._clock() + self.ttl_ms / 1000)
            self._entries.move_to_end(key)
            while len(self._entries) > self.max_entries:
                self._entries.popitem(last=False)
                logger.debug(f"Cache full ({self.max_entries} entries), evicted least recently used entry")

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()
