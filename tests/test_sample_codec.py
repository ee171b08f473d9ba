"""
Tests for per-format sample encode/decode, including IBM float conversion.
"""
import struct

import numpy as np
import pytest

from models.segy_headers import SampleFormat
from utils.segy_import.errors import UnsupportedSampleFormatError
from utils.segy_import.sample_codec import (
    decode_sample,
    decode_samples,
    encode_sample,
    encode_samples,
    float32_to_ibm,
    ibm_to_float32,
    resolve_sample_format,
)


class TestIBMFloat:
    """IBM System/360 float conversion."""

    @pytest.mark.parametrize("word,value", [
        (0x41100000, 1.0),
        (0xC1100000, -1.0),
        (0x42640000, 100.0),
        (0xC276A000, -118.625),
        (0x40800000, 0.5),
    ])
    def test_known_words_decode(self, word, value):
        """Reference bit patterns decode to their exact values."""
        assert ibm_to_float32(np.array([word], dtype=np.uint32))[0] == np.float32(value)

    @pytest.mark.parametrize("word,value", [
        (0x41100000, 1.0),
        (0xC1100000, -1.0),
        (0x42640000, 100.0),
        (0xC276A000, -118.625),
        (0x40800000, 0.5),
    ])
    def test_known_values_encode(self, word, value):
        """Exactly representable values encode to the reference words."""
        assert int(float32_to_ibm([value])[0]) == word

    def test_zero_word_is_exact_zero(self):
        assert ibm_to_float32(np.array([0], dtype=np.uint32))[0] == 0.0
        assert int(float32_to_ibm([0.0])[0]) == 0
        assert decode_sample(1, encode_samples(1, [0.0])) == 0.0

    @pytest.mark.parametrize("value", [1.0, -1.0, 0.0001, 12345.6789, -3.3e-5, 7.0e20])
    def test_round_trip_relative_tolerance(self, value):
        """decode(encode(x)) approximates x within 1e-3 relative."""
        decoded = decode_samples(1, encode_samples(1, [value]))[0]
        assert decoded == pytest.approx(value, rel=1e-3)

    def test_round_trip_much_tighter_than_tolerance(self):
        """Truncating a 24-bit hex mantissa loses less than 2**-20 relative."""
        np.random.seed(0)
        values = (np.random.randn(1000) * 10.0 ** np.random.randint(-5, 6, 1000)).astype(np.float32)
        decoded = decode_samples(1, encode_samples(1, values))
        rel = np.abs(decoded - values) / np.abs(values)
        assert rel.max() < 2.0 ** -20

    def test_mantissa_is_normalized(self):
        """Encoded words always carry a non-zero leading hex digit."""
        values = np.array([1e-30, 0.0625, 0.06249999, 15.999999, 16.0, 255.9, 3.0e38], dtype=np.float32)
        words = float32_to_ibm(values)
        mantissa = words & 0x00FFFFFF
        assert np.all(mantissa >= 0x100000)
        assert np.all(mantissa < 0x1000000)

    def test_nan_encodes_as_zero(self):
        assert int(float32_to_ibm([np.nan])[0]) == 0

    def test_infinity_saturates(self):
        words = float32_to_ibm(np.array([np.inf, -np.inf], dtype=np.float32))
        decoded = ibm_to_float32(words)
        assert np.all(np.isfinite(decoded))
        assert decoded[0] > 3.0e38
        assert decoded[1] < -3.0e38

    def test_out_of_float32_range_word_is_infinite(self):
        """IBM floats larger than float32 max decode to infinity."""
        assert np.isinf(ibm_to_float32(np.array([0x7FFFFFFF], dtype=np.uint32))[0])


class TestSampleFormats:
    """Integer and IEEE formats."""

    def test_ieee_passthrough(self):
        assert encode_samples(5, [1.5, -2.25]) == struct.pack('>ff', 1.5, -2.25)
        assert list(decode_samples(5, struct.pack('>ff', 1.5, -2.25))) == [1.5, -2.25]

    def test_int16_decode_big_endian(self):
        assert decode_sample(3, b'\xff\xfe') == -2.0
        assert decode_sample(3, b'\x01\x00') == 256.0

    def test_int32_decode(self):
        assert decode_sample(2, struct.pack('>i', -123456)) == -123456.0

    def test_int8_decode(self):
        assert list(decode_samples(8, b'\x7f\x80\x00')) == [127.0, -128.0, 0.0]

    def test_integer_rounding_half_away_from_zero(self):
        data = encode_samples(3, [2.5, -2.5, 1.4, -1.6])
        assert struct.unpack('>4h', data) == (3, -3, 1, -2)

    @pytest.mark.parametrize("fmt,values,expected", [
        (8, [300.0, -1000.0], (127, -128)),
        (3, [40000.0, -40000.0], (32767, -32768)),
        (2, [3.0e10, -3.0e10], (2 ** 31 - 1, -2 ** 31)),
    ])
    def test_integer_saturation(self, fmt, values, expected):
        """Out-of-range values saturate instead of raising."""
        size = SampleFormat(fmt).bytes_per_sample
        code = {1: 'b', 2: 'h', 4: 'i'}[size]
        assert struct.unpack('>' + code * len(values), encode_samples(fmt, values)) == expected

    def test_nan_writes_zero_for_integer_formats(self):
        assert encode_samples(3, [np.nan]) == b'\x00\x00'

    def test_large_int32_loses_precision_in_float32(self):
        """Values above 2**24 are represented as the nearest float32."""
        value = 2 ** 24 + 1
        assert decode_sample(2, struct.pack('>i', value)) == float(np.float32(value))

    @pytest.mark.parametrize("fmt", [1, 2, 3, 5, 8])
    def test_bytes_per_sample(self, fmt):
        data = encode_samples(fmt, np.zeros(7))
        assert len(data) == 7 * SampleFormat(fmt).bytes_per_sample

    def test_decode_with_offset_and_count(self):
        raw = b'\xAA\xBB' + struct.pack('>3f', 1.0, 2.0, 3.0)
        assert list(decode_samples(5, raw, offset=2, count=2)) == [1.0, 2.0]

    def test_decode_returns_native_float32(self):
        out = decode_samples(2, struct.pack('>2i', 1, 2))
        assert out.dtype == np.float32
        assert out.dtype.isnative


class TestScalarHelpers:
    """Single-sample encode/decode."""

    def test_encode_sample_writes_at_offset(self):
        sink = bytearray(10)
        written = encode_sample(3, -2.0, sink, offset=4)
        assert written == 2
        assert sink[4:6] == b'\xff\xfe'
        assert sink[:4] == bytes(4) and sink[6:] == bytes(4)

    def test_decode_sample_at_offset(self):
        raw = bytearray(8)
        encode_sample(1, 100.0, raw, offset=4)
        assert decode_sample(1, raw, offset=4) == 100.0


class TestUnknownFormat:
    """Unsupported format codes fail instead of producing zeros."""

    @pytest.mark.parametrize("code", [0, 4, 6, 99, -1])
    def test_resolve_rejects(self, code):
        with pytest.raises(UnsupportedSampleFormatError) as exc_info:
            resolve_sample_format(code)
        assert exc_info.value.format_code == code

    def test_decode_rejects(self):
        with pytest.raises(UnsupportedSampleFormatError):
            decode_samples(4, bytes(16))

    def test_encode_rejects(self):
        with pytest.raises(UnsupportedSampleFormatError):
            encode_samples(99, [1.0])

    def test_error_is_value_error(self):
        with pytest.raises(ValueError):
            resolve_sample_format(7)
