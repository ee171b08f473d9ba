"""
Window Cache with LRU (Least Recently Used) eviction policy.

Caches processed trace windows keyed by WindowKey with automatic eviction based on:
- Maximum number of cached windows
- Maximum total memory usage
- LRU policy (least recently accessed windows evicted first)
"""
import logging
import numpy as np
from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional, Dict, Any
import threading

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WindowKey:
    """
    Identity of a processed window request. Equality is exact on all fields.

    Attributes:
        start: First display trace index
        trace_count: Number of traces in the window
        agc_enabled: Whether AGC was applied
        agc_window_ms: AGC window length in milliseconds
        reverse: Whether display order is last-to-first
    """
    start: int
    trace_count: int
    agc_enabled: bool
    agc_window_ms: float
    reverse: bool

    @property
    def end(self) -> int:
        return self.start + self.trace_count

    def same_processing(self, other: 'WindowKey') -> bool:
        """True if both keys carry identical AGC and ordering tags."""
        return (self.agc_enabled == other.agc_enabled
                and self.agc_window_ms == other.agc_window_ms
                and self.reverse == other.reverse)


class ProcessedWindow:
    """
    Processed samples for the dataset trace range [dataset_start, dataset_end).

    ``data`` is (n_traces, samples_per_trace): an owned AGC copy, or a
    zero-copy view of the raw sample buffer when AGC is off.
    """

    def __init__(self, dataset_start: int, dataset_end: int, data: np.ndarray, owns_data: bool):
        if data.shape[0] != dataset_end - dataset_start:
            raise ValueError(
                f"Window holds {data.shape[0]} traces, range [{dataset_start}, {dataset_end}) "
                f"needs {dataset_end - dataset_start}"
            )
        self.dataset_start = dataset_start
        self.dataset_end = dataset_end
        self.data = data
        self.owns_data = owns_data

    @property
    def nbytes(self) -> int:
        """Memory held by this window; views of the raw buffer count as zero."""
        return self.data.nbytes if self.owns_data else 0

    def covers(self, dataset_start: int, dataset_end: int) -> bool:
        return self.dataset_start <= dataset_start and dataset_end <= self.dataset_end

    def view(self, dataset_start: int, dataset_end: int, reverse: bool = False) -> np.ndarray:
        """
        Rows for a covered dataset range, in display order.

        Returns:
            (n, samples_per_trace) view; row i is one trace
        """
        if not self.covers(dataset_start, dataset_end):
            raise ValueError(
                f"Range [{dataset_start}, {dataset_end}) outside window "
                f"[{self.dataset_start}, {self.dataset_end})"
            )
        rows = self.data[dataset_start - self.dataset_start:dataset_end - self.dataset_start]
        return rows[::-1] if reverse else rows

    def __repr__(self) -> str:
        return (f"ProcessedWindow([{self.dataset_start}, {self.dataset_end}), "
                f"owns_data={self.owns_data})")


class WindowCache:
    """
    Thread-safe LRU cache of ProcessedWindow objects.

    Features:
    - LRU eviction when count or memory limit exceeded
    - O(1) get/put operations using OrderedDict
    - Memory tracking via ProcessedWindow.nbytes
    - Cache statistics (hits, misses, evictions)

    Example:
        >>> cache = WindowCache(max_windows=5, max_memory_mb=500)
        >>> cache.put(key, window)
        >>> window = cache.get(key)
        >>> print(cache.get_stats())
    """

    def __init__(self, max_windows: int = 5, max_memory_mb: float = 500.0):
        """
        Initialize window cache.

        Args:
            max_windows: Maximum number of windows to cache
            max_memory_mb: Maximum total memory in megabytes
        """
        if max_windows < 1:
            raise ValueError(f"max_windows must be at least 1, got {max_windows}")
        self.max_windows = max_windows
        self.max_memory_bytes = int(max_memory_mb * 1024 * 1024)

        self._cache: 'OrderedDict[WindowKey, ProcessedWindow]' = OrderedDict()
        self._sizes: Dict[WindowKey, int] = {}
        self._current_memory = 0

        # Statistics
        self._hits = 0
        self._misses = 0
        self._evictions = 0

        self._lock = threading.RLock()

    def get(self, key: WindowKey) -> Optional[ProcessedWindow]:
        """
        Get a cached window by exact key.

        Returns:
            Cached window if found, None otherwise
        """
        with self._lock:
            if key in self._cache:
                # Move to end (most recently used)
                self._cache.move_to_end(key)
                self._hits += 1
                logger.debug(f"Window cache hit: {key}")
                return self._cache[key]
            self._misses += 1
            logger.debug(f"Window cache miss: {key}")
            return None

    def find(self, predicate: Callable[[WindowKey, ProcessedWindow], bool]) -> Optional[ProcessedWindow]:
        """
        Return the most recently used window matching ``predicate``.

        A match counts as a hit and refreshes the window's LRU position.
        No match records nothing; callers look up the exact key afterwards.
        """
        with self._lock:
            for key in reversed(self._cache):
                window = self._cache[key]
                if predicate(key, window):
                    self._cache.move_to_end(key)
                    self._hits += 1
                    logger.debug(f"Window cache hit (covering window {key})")
                    return window
            return None

    def put(self, key: WindowKey, window: ProcessedWindow):
        """
        Add a window to the cache.

        The window is stored as is; views stay views. If the cache is full
        (by count or memory), least recently used windows are evicted.
        """
        with self._lock:
            data_size = window.nbytes

            if key in self._cache:
                self._current_memory -= self._sizes.pop(key)
                del self._cache[key]

            while len(self._cache) >= self.max_windows or \
                  (self._current_memory + data_size > self.max_memory_bytes and len(self._cache) > 0):
                self._evict_lru()

            self._cache[key] = window
            self._sizes[key] = data_size
            self._current_memory += data_size

    def _evict_lru(self):
        """Evict least recently used window (internal method)."""
        if not self._cache:
            return
        lru_key, _ = self._cache.popitem(last=False)
        self._current_memory -= self._sizes.pop(lru_key)
        self._evictions += 1
        logger.debug(f"Window cache evicted {lru_key}")

    def clear(self):
        """Remove all cached windows."""
        with self._lock:
            self._cache.clear()
            self._sizes.clear()
            self._current_memory = 0

    def get_memory_usage_mb(self) -> float:
        with self._lock:
            return self._current_memory / (1024 * 1024)

    def get_stats(self) -> Dict[str, Any]:
        """
        Get cache statistics.

        Returns:
            Dictionary with hits, misses, evictions, hit_rate, memory usage and window count
        """
        with self._lock:
            total_requests = self._hits + self._misses
            hit_rate = (self._hits / total_requests * 100) if total_requests > 0 else 0.0

            return {
                'hits': self._hits,
                'misses': self._misses,
                'evictions': self._evictions,
                'hit_rate': hit_rate,
                'memory_usage_mb': self.get_memory_usage_mb(),
                'memory_limit_mb': self.max_memory_bytes / (1024 * 1024),
                'window_count': len(self._cache),
                'window_limit': self.max_windows,
                'total_requests': total_requests
            }

    def contains(self, key: WindowKey) -> bool:
        """Check if key is in cache without updating LRU order."""
        with self._lock:
            return key in self._cache

    def __repr__(self) -> str:
        stats = self.get_stats()
        return (f"WindowCache(windows={stats['window_count']}/{stats['window_limit']}, "
                f"memory={stats['memory_usage_mb']:.1f}/{stats['memory_limit_mb']:.1f}MB, "
                f"hit_rate={stats['hit_rate']:.1f}%)")

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)
