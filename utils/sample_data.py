"""
Synthetic SEG-Y data for testing and demos.
Creates in-memory SegyFile objects ready to encode or display.
"""
import numpy as np
from typing import Optional

from models.segy_dataset import SegyDataset, SegyFile
from models.segy_headers import BinaryHeader, SampleFormat, TraceHeader
from utils.segy_import.text_header import make_text_header


def build_segy_file(
    traces: np.ndarray,
    sample_interval_us: int = 4000,
    sample_format: int = SampleFormat.IEEE_FLOAT,
    text_header: Optional[str] = None,
    **binary_fields
) -> SegyFile:
    """
    Wrap a (n_traces, n_samples) array in a complete SegyFile.

    Args:
        traces: Trace samples, trace index major
        sample_interval_us: Sample interval in microseconds
        sample_format: Format code written to the binary header
        text_header: Text header, blank (all spaces) when None
        **binary_fields: Additional BinaryHeader field values

    Returns:
        SegyFile with sequentially numbered trace headers
    """
    traces = np.asarray(traces, dtype=np.float32)
    n_traces, n_samples = traces.shape

    headers = [
        TraceHeader(
            trace_sequence_line=i + 1,
            trace_sequence_file=i + 1,
            trace_number=i + 1,
            cdp=i + 1,
            samples_in_this_trace=n_samples,
            sample_interval=sample_interval_us,
        )
        for i in range(n_traces)
    ]
    dataset = SegyDataset.from_traces(traces, headers)

    fields = dict(
        job_id=1,
        line_key=1,
        reel_key=1,
        traces_per_ensemble=n_traces,
        sample_interval=sample_interval_us,
        sample_interval_original=sample_interval_us,
        samples_per_trace=n_samples,
        samples_per_trace_original=n_samples,
        sample_format=int(sample_format),
        measurement_system=1,
    )
    fields.update(binary_fields)

    return SegyFile(
        text_header=text_header if text_header is not None else make_text_header([]),
        binary_header=BinaryHeader(**fields),
        dataset=dataset,
    )


def generate_sine_segy(
    n_traces: int = 50,
    n_samples: int = 100,
    sample_interval_us: int = 4000,
    sample_format: int = SampleFormat.IEEE_FLOAT
) -> SegyFile:
    """
    Generate the mock sine-wave file.

    Sample s of trace t is sin(2*pi*t/10 + 2*pi*s/20).
    """
    t = np.arange(n_traces)[:, np.newaxis]
    s = np.arange(n_samples)[np.newaxis, :]
    traces = np.sin((t / 10.0) * np.pi * 2 + (s / 20.0) * np.pi * 2)

    text_header = make_text_header([
        'C 1 SYNTHETIC SINE WAVE SEG-Y',
        f'C 2 TRACES {n_traces} SAMPLES {n_samples} INTERVAL {sample_interval_us} US',
    ])
    return build_segy_file(traces, sample_interval_us, sample_format, text_header,
                           aux_traces=n_traces)


def generate_reflection_segy(
    n_traces: int = 100,
    n_samples: int = 1000,
    sample_interval_us: int = 2000,
    noise_level: float = 0.05,
    decay_per_s: float = 3.0,
    seed: int = 42,
    sample_format: int = SampleFormat.IEEE_FLOAT
) -> SegyFile:
    """
    Generate traces with dipping Ricker reflections and amplitude decay.

    The exponential decay with time makes AGC visibly equalize the section.

    Args:
        n_traces: Number of traces
        n_samples: Number of time samples
        sample_interval_us: Sample interval in microseconds
        noise_level: Noise level (0.0 = no noise)
        decay_per_s: Exponential amplitude decay rate (1/s)
        seed: Random seed for reproducibility
        sample_format: Format code written to the binary header

    Returns:
        SegyFile with synthetic data
    """
    rng = np.random.RandomState(seed)
    dt_ms = sample_interval_us / 1000.0
    time_ms = np.arange(n_samples) * dt_ms
    traces = np.zeros((n_traces, n_samples))

    # Ricker wavelet
    freq = 30.0
    half = min(50, n_samples // 4)
    tw = (np.arange(-half, half + 1) * dt_ms) / 1000.0
    arg = (np.pi * freq * tw) ** 2
    wavelet = (1.0 - 2.0 * arg) * np.exp(-arg)

    reflection_times = [0.2, 0.4, 0.6, 0.8]
    reflection_amplitudes = [1.0, -0.8, 0.6, -0.5]
    reflection_dips = [0.0, 0.3, -0.2, 0.1]  # samples per trace

    total_ms = time_ms[-1] if n_samples else 0.0
    for frac, amplitude, dip in zip(reflection_times, reflection_amplitudes, reflection_dips):
        base_sample = int(frac * total_ms / dt_ms)
        for trace_idx in range(n_traces):
            center = base_sample + int(round(dip * trace_idx))
            lo, hi = center - half, center + half + 1
            if lo < 0 or hi > n_samples:
                continue
            traces[trace_idx, lo:hi] += amplitude * wavelet

    if noise_level > 0:
        traces += noise_level * rng.randn(n_traces, n_samples)

    traces *= np.exp(-decay_per_s * time_ms / 1000.0)[np.newaxis, :]

    return build_segy_file(traces, sample_interval_us, sample_format,
                           make_text_header(['C 1 SYNTHETIC REFLECTIONS WITH AMPLITUDE DECAY']))
