"""
Sample codec for the five supported SEG-Y sample formats.

All formats decode to float32. Buffers are decoded in bulk with numpy
big-endian dtypes; the scalar helpers wrap the vectorised routines.

IBM System/360 float layout (32-bit word, big-endian):
    bit 31      sign
    bits 24-30  exponent, base 16, excess 64
    bits 0-23   mantissa fraction
    value = sign * (mantissa / 2**24) * 16**(exponent - 64)
"""
import logging
from typing import Union

import numpy as np

from models.segy_headers import SampleFormat
from utils.segy_import.errors import UnsupportedSampleFormatError

logger = logging.getLogger(__name__)

FLOAT32_MAX = float(np.finfo(np.float32).max)

# Big-endian storage dtype per format
_STORAGE_DTYPES = {
    SampleFormat.IBM_FLOAT: np.dtype('>u4'),
    SampleFormat.INT_4_BYTE: np.dtype('>i4'),
    SampleFormat.INT_2_BYTE: np.dtype('>i2'),
    SampleFormat.IEEE_FLOAT: np.dtype('>f4'),
    SampleFormat.INT_1_BYTE: np.dtype('i1'),
}

BufferLike = Union[bytes, bytearray, memoryview, np.ndarray]


def resolve_sample_format(code) -> SampleFormat:
    """
    Map a binary header format code to SampleFormat.

    Raises:
        UnsupportedSampleFormatError: If the code is not 1, 2, 3, 5 or 8
    """
    try:
        return SampleFormat(int(code))
    except (TypeError, ValueError):
        raise UnsupportedSampleFormatError(code) from None


def ibm_to_float32(words: np.ndarray) -> np.ndarray:
    """
    Convert IBM float words to float32.

    Args:
        words: Array of 32-bit IBM float words (any integer dtype, native values)

    Returns:
        float32 array of the same shape. A zero word maps to 0.0 exactly;
        magnitudes beyond the float32 range become +/-inf.
    """
    words = np.asarray(words).astype(np.uint32)
    sign = np.where(words >> 31, -1.0, 1.0)
    exponent = ((words >> 24) & 0x7F).astype(np.int32)
    mantissa = (words & 0x00FFFFFF).astype(np.float64)
    with np.errstate(over='ignore'):
        return (sign * np.ldexp(mantissa, 4 * (exponent - 64) - 24)).astype(np.float32)


def float32_to_ibm(values) -> np.ndarray:
    """
    Convert float values to IBM float words.

    The base-16 exponent is floor(log16(|v|)) and the fraction |v| / 16**(e + 1)
    lands in [1/16, 1); its 24 most significant bits are kept (truncated).
    When floating-point error in the logarithm puts the fraction just outside
    that interval the exponent is moved by one. NaN encodes as 0 and +/-inf
    saturate to the largest float32.

    Returns:
        uint32 array of IBM words (native byte order)
    """
    values = np.asarray(values, dtype=np.float32).astype(np.float64)
    values = np.where(np.isnan(values), 0.0, values)
    values = np.clip(values, -FLOAT32_MAX, FLOAT32_MAX)

    words = np.zeros(values.shape, dtype=np.uint32)
    nonzero = values != 0.0
    if not np.any(nonzero):
        return words

    magnitude = np.abs(values[nonzero])
    exponent = np.floor(np.log2(magnitude) / 4.0).astype(np.int64)
    fraction = magnitude / np.power(16.0, exponent + 1)

    high = fraction >= 1.0
    exponent[high] += 1
    fraction[high] /= 16.0
    low = fraction < 1.0 / 16.0
    exponent[low] -= 1
    fraction[low] *= 16.0

    mantissa = np.floor(fraction * (1 << 24)).astype(np.uint32)
    biased = (exponent + 65).astype(np.uint32)
    sign = (values[nonzero] < 0).astype(np.uint32)

    words[nonzero] = (sign << 31) | (biased << 24) | mantissa
    return words


def decode_samples(sample_format, raw: BufferLike, offset: int = 0, count: int = -1) -> np.ndarray:
    """
    Decode a run of samples.

    Args:
        sample_format: Format code or SampleFormat
        raw: Any buffer-protocol object (bytes, mmap, contiguous uint8 array)
        offset: Byte offset of the first sample
        count: Number of samples, -1 for everything after offset

    Returns:
        1D float32 array (native byte order)
    """
    fmt = resolve_sample_format(sample_format)
    stored = np.frombuffer(raw, dtype=_STORAGE_DTYPES[fmt], count=count, offset=offset)
    if fmt is SampleFormat.IBM_FLOAT:
        return ibm_to_float32(stored)
    return stored.astype(np.float32)


def _round_half_away(values: np.ndarray) -> np.ndarray:
    return np.where(values >= 0, np.floor(values + 0.5), np.ceil(values - 0.5))


def encode_samples(sample_format, values) -> bytes:
    """
    Encode samples in the given format.

    Integer formats round half away from zero and saturate to the width
    of the format; NaN writes as 0.

    Returns:
        Big-endian sample bytes, bytes_per_sample * len(values) long
    """
    fmt = resolve_sample_format(sample_format)
    values = np.asarray(values, dtype=np.float32).reshape(-1)

    if fmt is SampleFormat.IBM_FLOAT:
        return float32_to_ibm(values).astype('>u4').tobytes()
    if fmt is SampleFormat.IEEE_FLOAT:
        return values.astype('>f4').tobytes()

    dtype = _STORAGE_DTYPES[fmt]
    info = np.iinfo(dtype)
    rounded = _round_half_away(np.nan_to_num(values.astype(np.float64), nan=0.0))
    clipped = np.clip(rounded, info.min, info.max)
    n_clipped = int(np.count_nonzero(clipped != rounded))
    if n_clipped:
        logger.debug(f"Saturated {n_clipped} samples to {fmt.label} range [{info.min}, {info.max}]")
    return clipped.astype(dtype).tobytes()


def decode_sample(sample_format, raw: BufferLike, offset: int = 0) -> float:
    """Decode one sample starting at ``offset``."""
    return float(decode_samples(sample_format, raw, offset=offset, count=1)[0])


def encode_sample(sample_format, value: float, sink: bytearray, offset: int = 0) -> int:
    """
    Encode one sample into ``sink`` at ``offset``.

    Returns:
        Number of bytes written
    """
    data = encode_samples(sample_format, [value])
    sink[offset:offset + len(data)] = data
    return len(data)
