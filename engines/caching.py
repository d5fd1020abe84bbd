"""Request-scoped TTL cache for learning hub payloads."""

from __future__ import annotations

import logging
import time
from collections import OrderedDict
from dataclasses import dataclass
from threading import Lock
from typing import Any, Callable, Dict, Optional, Tuple
from urllib.parse import quote

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 30 * 60
DEFAULT_MAX_ENTRIES = 1024


@dataclass
class CacheEntry:
    value: Any
    inserted_at: float


class TTLCache:
    """Thread-safe expiring map with least-recently-inserted eviction.

    Stale entries are not removed on read; they only stop being returned.
    ``max_entries=0`` disables the size bound.
    """

    def __init__(
        self,
        ttl_seconds: float = DEFAULT_TTL_SECONDS,
        *,
        max_entries: int = DEFAULT_MAX_ENTRIES,
        clock: Optional[Callable[[], float]] = None,
    ) -> None:
        if ttl_seconds <= 0:
            raise ValueError("ttl_seconds must be positive")
        if max_entries < 0:
            raise ValueError("max_entries must be >= 0")
        self.ttl_seconds = float(ttl_seconds)
        self.max_entries = int(max_entries)
        self._clock = clock or time.monotonic
        self._entries: "OrderedDict[str, CacheEntry]" = OrderedDict()
        self._lock = Lock()
        self._hits = 0
        self._misses = 0
        self._evictions = 0

    def _is_fresh(self, entry: CacheEntry, now: float) -> bool:
        return now - entry.inserted_at < self.ttl_seconds

    def lookup(self, key: str) -> Tuple[bool, Any]:
        """Return ``(hit, value)`` so a cached ``None`` is distinguishable from a miss."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is not None and self._is_fresh(entry, self._clock()):
                self._hits += 1
                return True, entry.value
            self._misses += 1
            return False, None

    def get(self, key: str, default: Any = None) -> Any:
        hit, value = self.lookup(key)
        return value if hit else default

    def set(self, key: str, value: Any) -> None:
        with self._lock:
            now = self._clock()
            if key in self._entries:
                # Overwrite counts as a fresh insertion for eviction order.
                del self._entries[key]
            elif self.max_entries and len(self._entries) >= self.max_entries:
                self._purge_expired_locked(now)
                while len(self._entries) >= self.max_entries:
                    evicted_key, _ = self._entries.popitem(last=False)
                    self._evictions += 1
                    logger.debug("Evicted cache entry %s", evicted_key)
            self._entries[key] = CacheEntry(value=value, inserted_at=now)

    def invalidate(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def _purge_expired_locked(self, now: float) -> int:
        stale = [key for key, entry in self._entries.items() if not self._is_fresh(entry, now)]
        for key in stale:
            del self._entries[key]
        return len(stale)

    def purge_expired(self) -> int:
        """Drop every stale entry and return how many were removed."""
        with self._lock:
            return self._purge_expired_locked(self._clock())

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __contains__(self, key: object) -> bool:
        if not isinstance(key, str):
            return False
        with self._lock:
            entry = self._entries.get(key)
            return entry is not None and self._is_fresh(entry, self._clock())

    def stats(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "entries": len(self._entries),
                "hits": self._hits,
                "misses": self._misses,
                "evictions": self._evictions,
                "ttl_seconds": self.ttl_seconds,
                "max_entries": self.max_entries,
            }

    @staticmethod
    def make_key(operation: str, **params: Any) -> str:
        """Build a normalised key: ``operation|a=1|b=2`` with sorted, escaped params."""
        parts = [quote(str(operation), safe="")]
        for name in sorted(params):
            value = params[name]
            rendered = "" if value is None else str(value)
            parts.append(f"{quote(name, safe='')}={quote(rendered, safe='')}")
        return "|".join(parts)
