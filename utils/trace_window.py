"""
Windowed access to processed traces.

A consumer asks for a contiguous display range of traces together with the
AGC settings and display order it wants. Only that range (plus an optional
margin) is ever processed; the result is cached under the exact request key.

Display order: with ``reverse`` the display index t shows dataset trace
n - 1 - t, so the display range [s, e) is the dataset range [n - e, n - s)
read backwards.
"""
import logging
from typing import Optional

import numpy as np

from models.app_settings import get_settings
from models.segy_dataset import SegyFile
from processors.agc import apply_agc_traces
from utils.window_cache import ProcessedWindow, WindowCache, WindowKey

logger = logging.getLogger(__name__)


class TraceWindowAccessor:
    """
    Serves processed trace windows for one loaded file.

    Not thread-safe: one owner drives all requests.

    Args:
        segy_file: Loaded file (dataset plus sample interval)
        cache: Window cache, by default sized from application settings
        margin_traces: Extra traces processed on each side of a window;
            requests inside a cached window with the same AGC and order
            tags are then served without recomputation
    """

    def __init__(self, segy_file: SegyFile, cache: Optional[WindowCache] = None,
                 margin_traces: Optional[int] = None):
        settings = get_settings()
        if cache is None:
            cache = WindowCache(max_windows=settings.get_window_cache_max_windows(),
                                max_memory_mb=settings.get_window_cache_max_memory_mb())
        if margin_traces is None:
            margin_traces = settings.get_window_margin_traces()
        if margin_traces < 0:
            raise ValueError(f"margin_traces must be non-negative, got {margin_traces}")

        self.segy_file = segy_file
        self.cache = cache
        self.margin_traces = margin_traces
        self.recompute_count = 0

    @property
    def n_traces(self) -> int:
        return self.segy_file.dataset.n_traces

    def reset(self, segy_file: SegyFile):
        """Switch to a new file and drop every cached window."""
        self.segy_file = segy_file
        self.cache.clear()
        logger.debug(f"Window accessor reset for {segy_file}")

    def dataset_range(self, start: int, end: int, reverse: bool):
        """Map a clamped display range to the dataset range it shows."""
        n = self.n_traces
        if reverse:
            return n - end, n - start
        return start, end

    def get_processed_window(self, start: int, end: int,
                             agc_enabled: Optional[bool] = None,
                             agc_window_ms: Optional[float] = None,
                             reverse: Optional[bool] = None) -> np.ndarray:
        """
        Processed samples for display traces [start, end).

        Unset options fall back to the application settings. The range is
        clamped to [0, n_traces].

        Returns:
            (end - start, samples_per_trace) float32 array in display order;
            row i is display trace start + i. Read-only by contract: with AGC
            off the rows are views of the dataset's sample buffer.
        """
        settings = get_settings()
        if agc_enabled is None:
            agc_enabled = settings.get_agc_enabled()
        if agc_window_ms is None:
            agc_window_ms = settings.get_agc_window_ms()
        if reverse is None:
            reverse = settings.get_reverse_order()

        n = self.n_traces
        start = max(0, min(int(start), n))
        end = max(start, min(int(end), n))

        key = WindowKey(start=start, trace_count=end - start, agc_enabled=bool(agc_enabled),
                        agc_window_ms=float(agc_window_ms), reverse=bool(reverse))
        ds_start, ds_end = self.dataset_range(start, end, key.reverse)

        window = None
        if self.margin_traces > 0 and not self.cache.contains(key):
            window = self.cache.find(
                lambda k, w: k.same_processing(key) and w.covers(ds_start, ds_end)
            )
        if window is None:
            # counts exactly one hit or miss per request
            window = self.cache.get(key)
        if window is None:
            window = self._build_window(ds_start, ds_end, key)
            self.cache.put(key, window)

        return window.view(ds_start, ds_end, key.reverse)

    def _build_window(self, ds_start: int, ds_end: int, key: WindowKey) -> ProcessedWindow:
        lo = max(0, ds_start - self.margin_traces)
        hi = min(self.n_traces, ds_end + self.margin_traces)
        raw = self.segy_file.dataset.traces[lo:hi]

        if key.agc_enabled:
            data = apply_agc_traces(raw, self.segy_file.sample_interval_ms, key.agc_window_ms)
            window = ProcessedWindow(lo, hi, data, owns_data=True)
        else:
            window = ProcessedWindow(lo, hi, raw, owns_data=False)

        self.recompute_count += 1
        logger.debug(f"Built window for dataset traces [{lo}, {hi}) with {key}")
        return window

    def __repr__(self) -> str:
        return (f"TraceWindowAccessor(n_traces={self.n_traces}, "
                f"margin={self.margin_traces}, recomputes={self.recompute_count}, {self.cache})")
