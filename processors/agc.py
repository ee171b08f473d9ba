"""
AGC (Automatic Gain Control)

Sliding-window RMS normalization per trace. The window is centered on each
sample and clamped to the trace: near the ends it shrinks, and the RMS is
taken over the samples actually inside it.

    W = round(window_ms / sample_interval_ms), H = W // 2
    rms[i] = sqrt(sum(x[max(0, i-H) : min(n-1, i+H) + 1] ** 2) / count[i])
    out[i] = x[i] / (rms[i] + 1e-10)

Window sums use scipy's uniform_filter1d, which keeps a running sum along
the trace (O(n) per trace, independent of W).
"""
import math

import numpy as np
from scipy.ndimage import uniform_filter1d

AGC_EPSILON = 1e-10


def calculate_agc_window_samples(window_ms: float, sample_interval_ms: float) -> int:
    """
    Convert AGC window from milliseconds to samples.

    Args:
        window_ms: Window length in milliseconds
        sample_interval_ms: Sample interval in milliseconds

    Returns:
        Window length in samples, rounded half up, at least 1
    """
    if sample_interval_ms <= 0:
        raise ValueError(f"Sample interval must be positive, got {sample_interval_ms}")
    if window_ms <= 0:
        raise ValueError(f"AGC window must be positive, got {window_ms}")
    return max(1, int(math.floor(window_ms / sample_interval_ms + 0.5)))


def window_sample_counts(n_samples: int, half_width: int) -> np.ndarray:
    """Number of samples inside the clamped window at every index."""
    idx = np.arange(n_samples)
    return np.minimum(idx + half_width, n_samples - 1) - np.maximum(idx - half_width, 0) + 1


def apply_agc_traces(
    traces: np.ndarray,
    sample_interval_ms: float,
    window_ms: float,
    epsilon: float = AGC_EPSILON
) -> np.ndarray:
    """
    Apply AGC to every trace of a 2D block.

    Args:
        traces: 2D array (n_traces, n_samples), trace index major
        sample_interval_ms: Sample interval in milliseconds
        window_ms: AGC window length in milliseconds
        epsilon: Added to the RMS before dividing

    Returns:
        New float32 array, same shape as input
    """
    traces = np.asarray(traces)
    if traces.ndim != 2:
        raise ValueError(f"Traces must be 2D (n_traces, n_samples), got shape {traces.shape}")

    half = calculate_agc_window_samples(window_ms, sample_interval_ms) // 2
    n_traces, n_samples = traces.shape
    if n_traces == 0 or n_samples == 0:
        return np.zeros(traces.shape, dtype=np.float32)

    data = traces.astype(np.float64)
    size = 2 * half + 1

    # Zero padding outside the trace makes the mean times size the clamped window sum
    window_sum = uniform_filter1d(data * data, size=size, axis=1, mode='constant', cval=0.0) * size
    np.maximum(window_sum, 0.0, out=window_sum)

    rms = np.sqrt(window_sum / window_sample_counts(n_samples, half))
    return (data / (rms + epsilon)).astype(np.float32)


def apply_agc_trace(
    trace: np.ndarray,
    sample_interval_ms: float,
    window_ms: float,
    epsilon: float = AGC_EPSILON
) -> np.ndarray:
    """
    Apply AGC to a single trace.

    Returns:
        New float32 array of the same length; the input is not modified
    """
    trace = np.asarray(trace)
    if trace.ndim != 1:
        raise ValueError(f"Trace must be 1D, got shape {trace.shape}")
    return apply_agc_traces(trace[np.newaxis, :], sample_interval_ms, window_ms, epsilon)[0]
