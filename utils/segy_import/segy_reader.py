"""
SEG-Y parser for uniform-trace-length files.

Single sequential pass: text header, binary header, then trace records of
240 header bytes plus samples_per_trace * bytes_per_sample sample bytes
until fewer than one full record remains.

Performance optimizations:
- Memory mapping (mmap) for file input, no intermediate copy of the file
- Pre-allocated flat sample buffer
- Chunked decode: each chunk of records is decoded with one numpy view
  for headers and one for samples
"""
import mmap
import logging
import time
import numpy as np
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Tuple

from models.segy_dataset import SegyDataset, SegyFile
from models.segy_headers import (
    FILE_HEADER_SIZE,
    TEXT_HEADER_SIZE,
    TRACE_HEADER_SIZE,
    BinaryHeader,
    SampleFormat,
)
from utils.segy_import.errors import MalformedHeaderError
from utils.segy_import.header_codec import BINARY_HEADER_CODEC, TRACE_HEADER_CODEC
from utils.segy_import.sample_codec import decode_samples, resolve_sample_format
from utils.segy_import.text_header import decode_text_header

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 10000

ProgressCallback = Callable[[int, int], None]


class LoadingProgress:
    """Track loading progress with throughput calculation."""

    def __init__(self, total: int):
        self.total = total
        self.current = 0
        self.start_time = time.time()

    def update(self, current: int):
        self.current = current

    @property
    def percent(self) -> float:
        return (self.current / self.total) * 100 if self.total > 0 else 100.0

    @property
    def throughput(self) -> float:
        """Traces per second since start."""
        elapsed = time.time() - self.start_time
        return self.current / elapsed if elapsed > 0 else 0.0


def _buffer_size(buffer) -> int:
    if isinstance(buffer, (memoryview, np.ndarray)):
        return buffer.nbytes
    return len(buffer)


class SegyParser:
    """
    Decode a complete SEG-Y byte stream.

    Usage:
        parser = SegyParser(data)
        segy = parser.parse()
        segy.dataset.n_traces

    Args:
        buffer: bytes, bytearray, memoryview, mmap or contiguous uint8 array
        chunk_size: Trace records decoded per chunk
        progress_callback: Optional callback(traces_done, traces_total)
    """

    def __init__(self, buffer, chunk_size: int = DEFAULT_CHUNK_SIZE,
                 progress_callback: Optional[ProgressCallback] = None):
        if chunk_size < 1:
            raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
        self.buffer = buffer
        self.size = _buffer_size(buffer)
        self.chunk_size = chunk_size
        self.progress_callback = progress_callback

    def _require_header_region(self):
        if self.size < FILE_HEADER_SIZE:
            raise MalformedHeaderError(
                f"File too short: {self.size} bytes, SEG-Y needs at least "
                f"{FILE_HEADER_SIZE} bytes of text and binary header"
            )

    def parse_text_header(self) -> str:
        self._require_header_region()
        return decode_text_header(self.buffer[:TEXT_HEADER_SIZE])

    def parse_binary_header(self) -> BinaryHeader:
        self._require_header_region()
        return BINARY_HEADER_CODEC.decode(self.buffer, TEXT_HEADER_SIZE)

    def trace_layout(self, binary_header: BinaryHeader) -> Tuple[SampleFormat, int, int, int]:
        """
        Validate the binary header and derive the trace record layout.

        Returns:
            Tuple of (sample_format, record_size, n_traces, trailing_bytes)

        Raises:
            MalformedHeaderError: If samples_per_trace or sample_interval is
                not positive
            UnsupportedSampleFormatError: If the format code is unknown
        """
        spt = binary_header.samples_per_trace
        if spt <= 0:
            raise MalformedHeaderError(f"Invalid samples per trace in binary header: {spt}")
        if binary_header.sample_interval <= 0:
            raise MalformedHeaderError(
                f"Invalid sample interval in binary header: {binary_header.sample_interval}"
            )
        fmt = resolve_sample_format(binary_header.sample_format)

        record_size = TRACE_HEADER_SIZE + spt * fmt.bytes_per_sample
        data_bytes = max(0, self.size - FILE_HEADER_SIZE)
        n_traces = data_bytes // record_size
        trailing = data_bytes - n_traces * record_size
        return fmt, record_size, n_traces, trailing

    def parse_traces(self, binary_header: BinaryHeader) -> SegyDataset:
        """
        Decode all complete trace records.

        A trailing partial record is ignored with a warning.
        """
        fmt, record_size, n_traces, trailing = self.trace_layout(binary_header)
        spt = binary_header.samples_per_trace

        if trailing:
            logger.warning(
                f"Ignoring {trailing} trailing bytes after {n_traces} complete traces "
                f"(record size {record_size} bytes)"
            )

        samples = np.empty(n_traces * spt, dtype=np.float32)
        headers: List = []

        if n_traces > 0:
            traces = samples.reshape(n_traces, spt)
            records = np.frombuffer(self.buffer, dtype=np.uint8,
                                    count=n_traces * record_size,
                                    offset=FILE_HEADER_SIZE).reshape(n_traces, record_size)
            progress = LoadingProgress(n_traces)
            try:
                for start in range(0, n_traces, self.chunk_size):
                    end = min(start + self.chunk_size, n_traces)
                    chunk = records[start:end]
                    headers.extend(TRACE_HEADER_CODEC.decode_many(chunk))
                    block = np.ascontiguousarray(chunk[:, TRACE_HEADER_SIZE:])
                    traces[start:end] = decode_samples(fmt, block).reshape(end - start, spt)

                    progress.update(end)
                    logger.debug(f"Decoded traces {start}-{end} of {n_traces} ({progress.percent:.0f}%)")
                    if self.progress_callback is not None:
                        self.progress_callback(end, n_traces)
            finally:
                # Release views into the source buffer so an mmap can be closed
                del records
                chunk = block = None

            logger.debug(f"Trace decode throughput: {progress.throughput:.0f} traces/s")

        return SegyDataset(samples_per_trace=spt, headers=tuple(headers), samples=samples)

    def parse(self) -> SegyFile:
        """Parse text header, binary header and traces."""
        text_header = self.parse_text_header()
        binary_header = self.parse_binary_header()
        dataset = self.parse_traces(binary_header)
        logger.info(
            f"Parsed SEG-Y: {dataset.n_traces} traces x {dataset.samples_per_trace} samples, "
            f"format {binary_header.sample_format}, interval {binary_header.sample_interval} us"
        )
        return SegyFile(text_header=text_header, binary_header=binary_header, dataset=dataset)


def parse_segy(data, chunk_size: int = DEFAULT_CHUNK_SIZE,
               progress_callback: Optional[ProgressCallback] = None) -> SegyFile:
    """Parse an in-memory SEG-Y byte stream."""
    return SegyParser(data, chunk_size, progress_callback).parse()


class SegyReader:
    """
    SEG-Y file reader.

    Usage:
        reader = SegyReader('line.sgy')
        info = reader.read_file_info()
        segy = reader.read()
    """

    def __init__(self, filename, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize SEG-Y reader.

        Args:
            filename: Path to SEG-Y file
            chunk_size: Trace records decoded per chunk
        """
        self.filename = Path(filename)
        self.chunk_size = chunk_size

        if not self.filename.exists():
            raise FileNotFoundError(f"SEG-Y file not found: {filename}")

    def read_file_info(self) -> Dict[str, Any]:
        """
        Read basic file information from the header region only.

        Returns:
            Dictionary with file metadata
        """
        with open(self.filename, 'rb') as f:
            head = f.read(FILE_HEADER_SIZE)
        file_size = self.filename.stat().st_size

        parser = SegyParser(head)
        text_header = parser.parse_text_header()
        binary_header = parser.parse_binary_header()

        parser.size = file_size
        fmt, record_size, n_traces, trailing = parser.trace_layout(binary_header)
        interval_ms = binary_header.sample_interval_ms

        return {
            'filename': self.filename.name,
            'file_size': file_size,
            'n_traces': n_traces,
            'n_samples': binary_header.samples_per_trace,
            'sample_interval': interval_ms,
            'trace_length_ms': (binary_header.samples_per_trace - 1) * interval_ms,
            'format': fmt.label,
            'record_size': record_size,
            'trailing_bytes': trailing,
            'units': binary_header.units,
            'text_header': text_header,
            'binary_header': binary_header.to_dict(),
        }

    def read(self, progress_callback: Optional[ProgressCallback] = None) -> SegyFile:
        """
        Memory-map and parse the whole file.

        Args:
            progress_callback: Optional callback(traces_done, traces_total)
        """
        file_size = self.filename.stat().st_size
        if file_size < FILE_HEADER_SIZE:
            raise MalformedHeaderError(
                f"File too short: {file_size} bytes, SEG-Y needs at least {FILE_HEADER_SIZE} bytes"
            )

        with open(self.filename, 'rb') as f:
            with mmap.mmap(f.fileno(), 0, access=mmap.ACCESS_READ) as mm:
                segy = SegyParser(mm, self.chunk_size, progress_callback).parse()

        logger.info(f"Loaded {self.filename.name}: {segy}")
        return segy


def read_segy_file(path, chunk_size: int = DEFAULT_CHUNK_SIZE,
                   progress_callback: Optional[ProgressCallback] = None) -> SegyFile:
    """Read and parse a SEG-Y file from disk."""
    return SegyReader(path, chunk_size).read(progress_callback)
