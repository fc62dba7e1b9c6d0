# Taptik Validation Cache
# Time-limited cache of validation results keyed by package checksum

from __future__ import annotations

import copy
import logging
import threading
import time
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from taptik.validate.engine import ValidationResult

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0

CacheKey = tuple[str, bool]


class ValidationCache:
    """
    Cache of validation results with a fixed time-to-live.

    Keys are (checksum, premium flag) so tier-dependent verdicts never mix.
    Expired entries are dropped lazily on lookup and by cleanup().
    """

    def __init__(self, ttl_seconds: float = DEFAULT_TTL_SECONDS, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[CacheKey, tuple[float, ValidationResult]] = {}
        self._lock = threading.Lock()

    def get(self, key: CacheKey) -> ValidationResult | None:
        """Return a copy of the cached result, or None if absent or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            stored_at, result = entry
            if self._clock() - stored_at > self.ttl_seconds:
                del self._entries[key]
                return None
            return copy.deepcopy(result)

    def put(self, key: CacheKey, result: ValidationResult) -> None:
        with self._lock:
            self._entries[key] = (self._clock(), copy.deepcopy(result))
        self.cleanup()

    def cleanup(self) -> int:
        """
        Remove expired entries.

        Returns:
            Number of entries removed.
        """
        with self._lock:
            now = self._clock()
            expired = [k for k, (stored_at, _) in self._entries.items() if now - stored_at > self.ttl_seconds]
            for key in expired:
                del self._entries[key]
        if expired:
            logger.debug("Evicted %d expired validation results", len(expired))
        return len(expired)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __contains__(self, key: CacheKey) -> bool:
        return self.get(key) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
