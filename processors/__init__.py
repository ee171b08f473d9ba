"""
Processors package - trace processing operations.
"""
from .base_processor import BaseProcessor, ProgressCallback
from .agc import (
    AGC_EPSILON,
    apply_agc_trace,
    apply_agc_traces,
    calculate_agc_window_samples,
)
from .agc_processor import AGCProcessor

__all__ = [
    'BaseProcessor',
    'ProgressCallback',
    'AGC_EPSILON',
    'apply_agc_trace',
    'apply_agc_traces',
    'calculate_agc_window_samples',
    'AGCProcessor',
]
