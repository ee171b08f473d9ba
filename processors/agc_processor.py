"""
AGC processor - applies sliding-window RMS gain to a whole dataset.

Traces are processed in chunks so the float64 working copy stays bounded
regardless of dataset size.
"""
import logging

import numpy as np

from models.segy_dataset import SegyDataset, SegyFile
from processors.agc import apply_agc_traces, calculate_agc_window_samples
from processors.base_processor import BaseProcessor

logger = logging.getLogger(__name__)

DEFAULT_AGC_CHUNK = 2000


class AGCProcessor(BaseProcessor):
    """
    Applies AGC to all traces.

    Parameters:
        window_ms: AGC window length in milliseconds
        sample_interval_ms: Sample interval in milliseconds
        chunk_size: Traces per processing chunk (default 2000)
    """

    def _validate_params(self):
        """Validate AGC parameters."""
        for key in ('window_ms', 'sample_interval_ms'):
            if key not in self.params:
                raise ValueError(f"Missing required parameter: {key}")

        self.window_ms = float(self.params['window_ms'])
        self.sample_interval_ms = float(self.params['sample_interval_ms'])
        self.chunk_size = int(self.params.get('chunk_size', DEFAULT_AGC_CHUNK))

        if self.chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {self.chunk_size}")

        # Raises ValueError for non-positive window or interval
        self.window_samples = calculate_agc_window_samples(self.window_ms, self.sample_interval_ms)

    @classmethod
    def for_file(cls, segy: SegyFile, window_ms: float, **params) -> 'AGCProcessor':
        """Create a processor using the file's sample interval."""
        return cls(window_ms=window_ms, sample_interval_ms=segy.sample_interval_ms, **params)

    def process(self, data: SegyDataset) -> SegyDataset:
        """
        Apply AGC to every trace.

        Args:
            data: Input dataset

        Returns:
            Dataset with the same headers and AGC-scaled samples
        """
        n_traces = data.n_traces
        output = np.empty((n_traces, data.samples_per_trace), dtype=np.float32)
        source = data.traces

        for start in range(0, n_traces, self.chunk_size):
            end = min(start + self.chunk_size, n_traces)
            output[start:end] = apply_agc_traces(source[start:end], self.sample_interval_ms, self.window_ms)
            self._report_progress(end, n_traces, f"AGC traces {start}-{end}")

        logger.debug(f"AGC applied to {n_traces} traces ({self.window_samples} sample window)")
        return data.with_samples(output)

    def get_description(self) -> str:
        """Get description of this processor."""
        return f"AGC: {self.window_ms:g} ms window ({self.window_samples} samples)"
