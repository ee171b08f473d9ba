"""Utilities package - SEG-Y codec, window cache and helper functions."""
from .window_cache import WindowCache, WindowKey, ProcessedWindow
from .trace_window import TraceWindowAccessor
from .sample_data import build_segy_file, generate_sine_segy, generate_reflection_segy

__all__ = [
    'WindowCache',
    'WindowKey',
    'ProcessedWindow',
    'TraceWindowAccessor',
    'build_segy_file',
    'generate_sine_segy',
    'generate_reflection_segy',
]
