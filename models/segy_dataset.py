"""
SEG-Y dataset model - trace headers plus one flat sample buffer.

Samples of all traces live in a single contiguous float32 buffer, trace
index major: ``samples[trace * samples_per_trace + sample]``. Edits return
new objects that share the buffers they did not change.
"""
import numpy as np
import pandas as pd
from dataclasses import dataclass, replace
from typing import Optional, Sequence, Tuple

from models.segy_headers import BinaryHeader, SampleFormat, TraceHeader, get_field


@dataclass(frozen=True)
class SegyDataset:
    """
    Uniform-length trace collection.

    Attributes:
        samples_per_trace: Number of samples in every trace
        headers: One TraceHeader per trace, in file order
        samples: 1D float32 buffer of length n_traces * samples_per_trace
    """
    samples_per_trace: int
    headers: Tuple[TraceHeader, ...]
    samples: np.ndarray

    def __post_init__(self):
        """Validate data integrity."""
        if self.samples_per_trace <= 0:
            raise ValueError(f"samples_per_trace must be positive, got {self.samples_per_trace}")

        if not isinstance(self.headers, tuple):
            object.__setattr__(self, 'headers', tuple(self.headers))

        samples = np.asarray(self.samples)
        if samples.dtype != np.float32:
            samples = samples.astype(np.float32)
        if samples.ndim != 1:
            raise ValueError(f"Samples must be a flat buffer, got shape {samples.shape}")
        object.__setattr__(self, 'samples', samples)

        expected = len(self.headers) * self.samples_per_trace
        if samples.size != expected:
            raise ValueError(
                f"Sample buffer length mismatch: expected {expected} "
                f"({len(self.headers)} traces x {self.samples_per_trace}), got {samples.size}"
            )

    @classmethod
    def from_traces(cls, traces: np.ndarray,
                    headers: Optional[Sequence[TraceHeader]] = None) -> 'SegyDataset':
        """
        Build a dataset from a (n_traces, samples_per_trace) array.

        Missing headers are generated with sequence numbers and the sample count.
        """
        traces = np.asarray(traces, dtype=np.float32)
        if traces.ndim != 2:
            raise ValueError(f"Traces must be 2D (n_traces, n_samples), got shape {traces.shape}")
        n_traces, n_samples = traces.shape
        if headers is None:
            headers = [
                TraceHeader(trace_sequence_line=i + 1, trace_sequence_file=i + 1,
                            samples_in_this_trace=n_samples)
                for i in range(n_traces)
            ]
        return cls(samples_per_trace=n_samples, headers=tuple(headers),
                   samples=np.ascontiguousarray(traces).reshape(-1))

    @property
    def n_traces(self) -> int:
        return len(self.headers)

    @property
    def traces(self) -> np.ndarray:
        """Zero-copy (n_traces, samples_per_trace) view of the sample buffer."""
        return self.samples.reshape(self.n_traces, self.samples_per_trace)

    def get_trace(self, index: int) -> np.ndarray:
        """Zero-copy view of one trace."""
        if not 0 <= index < self.n_traces:
            raise IndexError(f"Trace index {index} out of range [0, {self.n_traces})")
        start = index * self.samples_per_trace
        return self.samples[start:start + self.samples_per_trace]

    def trace_header(self, index: int) -> TraceHeader:
        return self.headers[index]

    def with_trace_header(self, index: int, header: TraceHeader) -> 'SegyDataset':
        """Return a dataset with one trace header replaced."""
        if not 0 <= index < self.n_traces:
            raise IndexError(f"Trace index {index} out of range [0, {self.n_traces})")
        headers = self.headers[:index] + (header,) + self.headers[index + 1:]
        return replace(self, headers=headers)

    def with_samples(self, samples: np.ndarray) -> 'SegyDataset':
        """Return a dataset with a new sample buffer (flat or 2D) of the same size."""
        samples = np.asarray(samples, dtype=np.float32).reshape(-1)
        return replace(self, samples=samples)

    def resize_samples(self, samples_per_trace: int) -> 'SegyDataset':
        """
        Change the trace length, truncating or zero-padding every trace.

        The ``samples_in_this_trace`` header field follows the new length.
        """
        if samples_per_trace <= 0:
            raise ValueError(f"samples_per_trace must be positive, got {samples_per_trace}")
        resized = np.zeros((self.n_traces, samples_per_trace), dtype=np.float32)
        keep = min(samples_per_trace, self.samples_per_trace)
        resized[:, :keep] = self.traces[:, :keep]
        headers = tuple(h.replace(samples_in_this_trace=samples_per_trace) for h in self.headers)
        return SegyDataset(samples_per_trace=samples_per_trace, headers=headers,
                           samples=resized.reshape(-1))

    def header_values(self, name: str) -> np.ndarray:
        """Values of one trace header field for all traces (e.g. 'cdp' for axis labels)."""
        get_field(TraceHeader, name)
        return np.fromiter((getattr(h, name) for h in self.headers),
                           dtype=np.int64, count=self.n_traces)

    def headers_dataframe(self) -> pd.DataFrame:
        """Trace headers as a DataFrame, one column per field, one row per trace."""
        columns = TraceHeader.field_names()
        return pd.DataFrame([h.to_dict() for h in self.headers], columns=list(columns))

    def copy(self) -> 'SegyDataset':
        """Create a copy with an independent sample buffer."""
        return SegyDataset(samples_per_trace=self.samples_per_trace,
                           headers=self.headers, samples=self.samples.copy())

    def __eq__(self, other) -> bool:
        if not isinstance(other, SegyDataset):
            return NotImplemented
        return (self.samples_per_trace == other.samples_per_trace
                and self.headers == other.headers
                and np.array_equal(self.samples, other.samples))

    __hash__ = None

    def __repr__(self) -> str:
        return (f"SegyDataset(n_traces={self.n_traces}, "
                f"samples_per_trace={self.samples_per_trace})")


@dataclass(frozen=True)
class SegyFile:
    """Everything a SEG-Y byte stream holds: text header, binary header and traces."""
    text_header: str
    binary_header: BinaryHeader
    dataset: SegyDataset

    @property
    def sample_interval_ms(self) -> float:
        return self.binary_header.sample_interval_ms

    @property
    def n_traces(self) -> int:
        return self.dataset.n_traces

    def get_time_axis(self) -> np.ndarray:
        """Time axis in milliseconds."""
        return np.arange(self.dataset.samples_per_trace) * self.sample_interval_ms

    def with_text_header(self, text_header: str) -> 'SegyFile':
        return replace(self, text_header=text_header)

    def with_dataset(self, dataset: SegyDataset) -> 'SegyFile':
        if dataset.samples_per_trace != self.binary_header.samples_per_trace:
            raise ValueError(
                f"Sample count mismatch: header={self.binary_header.samples_per_trace}, "
                f"dataset={dataset.samples_per_trace}"
            )
        return replace(self, dataset=dataset)

    def with_binary_header(self, binary_header: BinaryHeader) -> 'SegyFile':
        """
        Return a file with an edited binary header.

        The sample count drives the buffer layout, so changing it here is
        rejected; use resize_samples() instead.
        """
        if binary_header.samples_per_trace != self.dataset.samples_per_trace:
            raise ValueError(
                f"samples_per_trace cannot change from {self.dataset.samples_per_trace} "
                f"to {binary_header.samples_per_trace} without resize_samples()"
            )
        if binary_header.sample_interval <= 0:
            raise ValueError(f"sample_interval must be positive, got {binary_header.sample_interval}")
        try:
            SampleFormat(binary_header.sample_format)
        except ValueError:
            raise ValueError(f"Unsupported sample format code: {binary_header.sample_format}")
        return replace(self, binary_header=binary_header)

    def resize_samples(self, samples_per_trace: int) -> 'SegyFile':
        """Resize every trace and keep the binary header in step."""
        dataset = self.dataset.resize_samples(samples_per_trace)
        header = self.binary_header.replace(samples_per_trace=samples_per_trace)
        return replace(self, binary_header=header, dataset=dataset)

    def __repr__(self) -> str:
        return (f"SegyFile(n_traces={self.n_traces}, "
                f"samples_per_trace={self.dataset.samples_per_trace}, "
                f"sample_interval={self.sample_interval_ms}ms, "
                f"format={self.binary_header.sample_format})")
