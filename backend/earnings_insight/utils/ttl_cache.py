"""
TTL Cache for Earnings Insight

Small in-memory key/value store used to memoize aggregated API responses.

Features:
- Fixed time-to-live per cache instance, checked when an entry is read
- Optional size cap that evicts the oldest-inserted entry
- Thread-safe operations
- Cache hit/miss statistics

Entries live for the lifetime of the process only.
"""

import time
import threading
import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)

@dataclass(frozen=True)
class CacheEntry:
    data: Any
    timestamp: float

class TTLCache:
    """
    Time-boxed memoization store with read-time expiry
    """

    def __init__(self, ttl: float, max_size: Optional[int] = None, clock: Callable[[], float] = time.time):
        self.ttl = ttl
        self.max_size = max_size
        self.clock = clock
        # dicts keep insertion order, which drives eviction
        self.cache: Dict[str, CacheEntry] = {}
        self.lock = threading.RLock()

        # Statistics
        self.stats = {
            'hits': 0,
            'misses': 0,
            'evictions': 0,
            'total_requests': 0
        }

    def get(self, key: str) -> Optional[CacheEntry]:
        """
        Get an entry if it is younger than the TTL

        Returns:
            CacheEntry if valid, None if expired or not found
        """
        with self.lock:
            self.stats['total_requests'] += 1

            entry = self.cache.get(key)
            if entry is None:
                self.stats['misses'] += 1
                logger.debug(f"Cache miss for key: {key}")
                return None

            if self.clock() - entry.timestamp >= self.ttl:
                del self.cache[key]
                self.stats['misses'] += 1
                logger.debug(f"Cache expired for key: {key}")
                return None

            self.stats['hits'] += 1
            logger.debug(f"Cache hit for key: {key}")
            return entry

    def set(self, key: str, data: Any) -> CacheEntry:
        """Store data under key, evicting the oldest entry past max_size"""
        with self.lock:
            entry = CacheEntry(data=data, timestamp=self.clock())
            self.cache[key] = entry
            logger.debug(f"Cache set for key: {key}, ttl: {self.ttl}s")

            if self.max_size is not None and len(self.cache) > self.max_size:
                oldest_key = next(iter(self.cache))
                del self.cache[oldest_key]
                self.stats['evictions'] += 1
                logger.debug(f"Cache evicted oldest key: {oldest_key}")

            return entry

    def clear(self) -> int:
        with self.lock:
            count = len(self.cache)
            self.cache.clear()
            logger.info(f"Cache cleared: {count} entries")
            return count

    def __len__(self) -> int:
        with self.lock:
            return len(self.cache)

    def get_stats(self) -> Dict[str, Any]:
        """Get cache statistics"""
        with self.lock:
            hit_rate = (self.stats['hits'] / max(1, self.stats['total_requests'])) * 100

            return {
                'cache_size': len(self.cache),
                'max_size': self.max_size,
                'ttl_seconds': self.ttl,
                'hit_rate': f"{hit_rate:.1f}%",
                'hits': self.stats['hits'],
                'misses': self.stats['misses'],
                'evictions': self.stats['evictions'],
                'total_requests': self.stats['total_requests']
            }
