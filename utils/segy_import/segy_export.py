"""
SEG-Y export module - writes a text header, binary header and dataset to SEG-Y.

Output is a pure function of its inputs. Samples are encoded in the format
declared by the binary header passed in, which may differ from the format
the data was originally read with. Supports in-memory and chunked export.
"""
import logging
import time
import numpy as np
from pathlib import Path
from typing import Callable, Iterator, Optional

from models.segy_dataset import SegyDataset, SegyFile
from models.segy_headers import BinaryHeader, SampleFormat
from utils.segy_import.errors import MalformedHeaderError
from utils.segy_import.header_codec import BINARY_HEADER_CODEC, TRACE_HEADER_CODEC
from utils.segy_import.sample_codec import encode_samples, resolve_sample_format
from utils.segy_import.segy_reader import DEFAULT_CHUNK_SIZE
from utils.segy_import.text_header import encode_text_header

logger = logging.getLogger(__name__)

MAX_SAMPLES_PER_TRACE = 32767


def validate_for_export(binary_header: BinaryHeader, dataset: SegyDataset) -> SampleFormat:
    """
    Check that the binary header describes the dataset.

    Returns:
        Sample format to encode with

    Raises:
        ValueError: If header and dataset disagree on the sample count
        MalformedHeaderError: If the sample count cannot be represented
        UnsupportedSampleFormatError: If the format code is unknown
    """
    if binary_header.samples_per_trace != dataset.samples_per_trace:
        raise ValueError(
            f"Sample count mismatch: header={binary_header.samples_per_trace}, "
            f"dataset={dataset.samples_per_trace}"
        )
    if dataset.samples_per_trace > MAX_SAMPLES_PER_TRACE:
        raise MalformedHeaderError(
            f"{dataset.samples_per_trace} samples per trace do not fit the 16-bit header field"
        )
    return resolve_sample_format(binary_header.sample_format)


def encode_trace_records(dataset: SegyDataset, sample_format, start: int, end: int) -> bytes:
    """Encode traces [start, end) as consecutive header + sample records."""
    fmt = resolve_sample_format(sample_format)
    n = end - start
    header_block = TRACE_HEADER_CODEC.encode_many(dataset.headers[start:end])
    sample_bytes = encode_samples(fmt, dataset.traces[start:end])
    sample_block = np.frombuffer(sample_bytes, dtype=np.uint8).reshape(
        n, dataset.samples_per_trace * fmt.bytes_per_sample
    )
    return np.concatenate([header_block, sample_block], axis=1).tobytes()


def iter_segy_chunks(segy: SegyFile, chunk_size: int = DEFAULT_CHUNK_SIZE) -> Iterator[bytes]:
    """
    Yield the encoded file piece by piece.

    The first piece is the 3600-byte header region, then one piece per
    chunk of up to ``chunk_size`` trace records.
    """
    if chunk_size < 1:
        raise ValueError(f"chunk_size must be at least 1, got {chunk_size}")
    fmt = validate_for_export(segy.binary_header, segy.dataset)

    yield encode_text_header(segy.text_header) + BINARY_HEADER_CODEC.encode(segy.binary_header)

    n_traces = segy.dataset.n_traces
    for start in range(0, n_traces, chunk_size):
        end = min(start + chunk_size, n_traces)
        yield encode_trace_records(segy.dataset, fmt, start, end)


def encode_segy(segy: SegyFile) -> bytes:
    """Encode a complete SEG-Y byte stream in memory."""
    return b''.join(iter_segy_chunks(segy))


class SegyWriter:
    """
    SEG-Y file writer.

    Usage:
        SegyWriter('out.sgy').write(segy)
    """

    def __init__(self, output_path, chunk_size: int = DEFAULT_CHUNK_SIZE):
        """
        Initialize SEG-Y writer.

        Args:
            output_path: Path to output SEG-Y file
            chunk_size: Trace records encoded per write
        """
        self.output_path = Path(output_path)
        self.chunk_size = chunk_size

    @staticmethod
    def to_bytes(segy: SegyFile) -> bytes:
        return encode_segy(segy)

    def write(self, segy: SegyFile,
              progress_callback: Optional[Callable[[int, int], None]] = None) -> int:
        """
        Write the file.

        Args:
            segy: Headers and dataset to write
            progress_callback: Optional callback(traces_written, traces_total)

        Returns:
            Number of bytes written
        """
        n_traces = segy.dataset.n_traces
        start_time = time.time()
        written = 0
        traces_done = 0

        # Validation runs on the first next(), before the file is touched
        chunks = iter_segy_chunks(segy, self.chunk_size)
        first = next(chunks)

        with open(self.output_path, 'wb') as f:
            f.write(first)
            written += len(first)
            for chunk in chunks:
                f.write(chunk)
                written += len(chunk)
                traces_done = min(n_traces, traces_done + self.chunk_size)
                if progress_callback is not None:
                    progress_callback(traces_done, n_traces)

        elapsed = time.time() - start_time
        logger.info(
            f"Wrote {n_traces} traces ({written} bytes, format "
            f"{segy.binary_header.sample_format}) to {self.output_path} in {elapsed:.2f}s"
        )
        return written


def write_segy_file(path, segy: SegyFile, chunk_size: int = DEFAULT_CHUNK_SIZE,
                    progress_callback: Optional[Callable[[int, int], None]] = None) -> int:
    """Write a SEG-Y file to disk. Returns the number of bytes written."""
    return SegyWriter(path, chunk_size).write(segy, progress_callback)
