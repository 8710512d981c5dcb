# services/cache.py
"""
In-memory TTL cache for dashboard responses.

Entries expire after their TTL; writes to donations invalidate every
dashboard entry at once (coarse invalidation, no recomputation).

Readers that compute a value after a miss pass the generation they saw
before computing to set(); if an invalidation happened in between the
value is dropped instead of cached.
"""
import os
import threading
import time
from typing import Any, Callable, Dict, Optional, Tuple

DEFAULT_TTL_SECONDS = 120


class DashboardCache:
     """Thread-safe key/value map whose entries expire after a TTL."""

     def __init__(
          self,
          ttl_seconds: int = DEFAULT_TTL_SECONDS,
          clock: Callable[[], float] = time.monotonic,
     ):
          self.ttl_seconds = ttl_seconds
          self._clock = clock
          self._entries: Dict[str, Tuple[float, Any]] = {}
          self._generation = 0
          self._lock = threading.Lock()

     @property
     def generation(self) -> int:
          """Bumped by every invalidate_pattern() and clear()."""
          with self._lock:
               return self._generation

     def get(self, key: str) -> Optional[Any]:
          with self._lock:
               entry = self._entries.get(key)
               if entry is None:
                    return None
               expires_at, value = entry
               if self._clock() >= expires_at:
                    del self._entries[key]
                    return None
               return value

     def set(
          self,
          key: str,
          value: Any,
          ttl_seconds: Optional[int] = None,
          generation: Optional[int] = None,
     ) -> bool:
          """Store value; returns False when generation is stale and nothing was stored."""
          ttl = self.ttl_seconds if ttl_seconds is None else ttl_seconds
          with self._lock:
               if generation is not None and generation != self._generation:
                    return False
               self._entries[key] = (self._clock() + ttl, value)
               return True

     def invalidate_pattern(self, pattern: str) -> int:
          """Drop every key containing pattern. Returns how many were dropped."""
          with self._lock:
               self._generation += 1
               doomed = [key for key in self._entries if pattern in key]
               for key in doomed:
                    del self._entries[key]
               return len(doomed)

     def clear(self) -> None:
          with self._lock:
               self._generation += 1
               self._entries.clear()

     def __len__(self) -> int:
          with self._lock:
               return len(self._entries)


dashboard_cache = DashboardCache(
     ttl_seconds=int(os.getenv("DASHBOARD_CACHE_TTL", str(DEFAULT_TTL_SECONDS)))
)


def get_dashboard_cache() -> DashboardCache:
     """FastAPI dependency returning the process-wide dashboard cache."""
     return dashboard_cache
