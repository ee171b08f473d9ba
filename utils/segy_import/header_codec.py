"""
Flat field codecs for the binary file header and the trace headers.

Each codec compiles its field table into a numpy structured dtype with
explicit byte offsets and big-endian integer members, so a whole chunk of
trace headers decodes or encodes with one view instead of per-field
struct calls. Bytes that no field covers are taken from the header's
``raw`` source bytes on encode, or zero when the header was built in memory.
"""
import logging
from operator import attrgetter
from typing import List, Sequence

import numpy as np

from models.segy_headers import (
    BINARY_HEADER_SIZE,
    TRACE_HEADER_SIZE,
    BinaryHeader,
    TraceHeader,
    dataclass_field_names,
)

logger = logging.getLogger(__name__)


class HeaderCodec:
    """
    Encoder/decoder for one fixed-size header record type.

    Args:
        header_cls: BinaryHeader or TraceHeader
        size: Record size in bytes
    """

    def __init__(self, header_cls, size: int):
        self.header_cls = header_cls
        self.size = size
        self.fields = tuple(header_cls.FIELDS)
        self.names = tuple(f.name for f in self.fields)

        # Headers are built positionally from decoded rows
        if self.names != dataclass_field_names(header_cls):
            raise ValueError(f"{header_cls.__name__} attributes do not follow its field table")

        for f in self.fields:
            if f.offset + f.byte_size > size:
                raise ValueError(f"Field {f.name} at byte {f.byte_position} exceeds {size}-byte header")

        self.dtype = np.dtype({
            'names': list(self.names),
            'formats': ['>' + f.format for f in self.fields],
            'offsets': [f.offset for f in self.fields],
            'itemsize': size,
        })
        self._getter = attrgetter(*self.names)

    def decode(self, raw, base: int = 0):
        """
        Decode one header starting at byte ``base`` of ``raw``.

        Raises:
            ValueError: If fewer than ``size`` bytes are available
        """
        block = bytes(raw[base:base + self.size])
        if len(block) != self.size:
            raise ValueError(
                f"{self.header_cls.__name__} needs {self.size} bytes at offset {base}, got {len(block)}"
            )
        row = np.frombuffer(block, dtype=self.dtype, count=1)[0].tolist()
        return self.header_cls(*row, raw=block)

    def decode_many(self, records: np.ndarray) -> List:
        """
        Decode the leading ``size`` bytes of every row of a 2D uint8 array.

        Args:
            records: (n, record_size) uint8 array, record_size >= size

        Returns:
            List of n headers, each keeping its own source bytes
        """
        blocks = np.ascontiguousarray(records[:, :self.size])
        n = blocks.shape[0]
        rows = blocks.view(self.dtype).reshape(n).tolist()
        data = blocks.tobytes()
        size = self.size
        cls = self.header_cls
        return [cls(*row, raw=data[i * size:(i + 1) * size]) for i, row in enumerate(rows)]

    def encode(self, header) -> bytes:
        """Encode one header to exactly ``size`` bytes."""
        return self.encode_many([header]).tobytes()

    def encode_many(self, headers: Sequence) -> np.ndarray:
        """
        Encode headers into an (n, size) uint8 array.

        Values outside a field's width saturate to the field limits.
        """
        n = len(headers)
        if n == 0:
            return np.zeros((0, self.size), dtype=np.uint8)
        zero = bytes(self.size)
        source = b''.join(h.raw if len(h.raw) == self.size else zero for h in headers)
        out = np.frombuffer(source, dtype=np.uint8).reshape(n, self.size).copy()

        values = np.array([self._getter(h) for h in headers], dtype=np.int64).reshape(n, len(self.names))
        records = out.view(self.dtype).reshape(n)

        saturated = 0
        for column, f in enumerate(self.fields):
            low, high = f.limits
            wanted = values[:, column]
            clipped = np.clip(wanted, low, high)
            saturated += int(np.count_nonzero(clipped != wanted))
            records[f.name] = clipped

        if saturated:
            logger.debug(f"{self.header_cls.__name__}: saturated {saturated} field values to their width")
        return out


BINARY_HEADER_CODEC = HeaderCodec(BinaryHeader, BINARY_HEADER_SIZE)
TRACE_HEADER_CODEC = HeaderCodec(TraceHeader, TRACE_HEADER_SIZE)


def decode_binary_header(raw, base: int = 0) -> BinaryHeader:
    return BINARY_HEADER_CODEC.decode(raw, base)


def encode_binary_header(header: BinaryHeader) -> bytes:
    return BINARY_HEADER_CODEC.encode(header)


def decode_trace_header(raw, base: int = 0) -> TraceHeader:
    return TRACE_HEADER_CODEC.decode(raw, base)


def encode_trace_header(header: TraceHeader) -> bytes:
    return TRACE_HEADER_CODEC.encode(header)
