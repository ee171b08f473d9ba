"""
Tests for binary and trace header field codecs.
"""
import struct

import numpy as np
import pytest

from models.segy_headers import (
    BINARY_HEADER_FIELDS,
    TRACE_HEADER_FIELDS,
    BinaryHeader,
    TraceHeader,
    dataclass_field_names,
    get_field,
)
from utils.segy_import.header_codec import (
    BINARY_HEADER_CODEC,
    TRACE_HEADER_CODEC,
    HeaderCodec,
    decode_binary_header,
    decode_trace_header,
    encode_binary_header,
    encode_trace_header,
)


class TestFieldTables:
    """Field table layout."""

    @pytest.mark.parametrize("fields,size", [(BINARY_HEADER_FIELDS, 400), (TRACE_HEADER_FIELDS, 240)])
    def test_fields_do_not_overlap(self, fields, size):
        ordered = sorted(fields, key=lambda f: f.offset)
        for a, b in zip(ordered, ordered[1:]):
            assert a.offset + a.byte_size <= b.offset, f"{a.name} overlaps {b.name}"
        assert ordered[-1].offset + ordered[-1].byte_size <= size

    def test_dataclasses_mirror_tables(self):
        assert dataclass_field_names(BinaryHeader) == tuple(f.name for f in BINARY_HEADER_FIELDS)
        assert dataclass_field_names(TraceHeader) == tuple(f.name for f in TRACE_HEADER_FIELDS)

    @pytest.mark.parametrize("name,offset,fmt", [
        ('job_id', 0, 'i'), ('line_key', 4, 'i'), ('reel_key', 8, 'i'),
        ('traces_per_ensemble', 12, 'h'), ('sample_interval', 16, 'h'),
        ('samples_per_trace', 20, 'h'), ('sample_format', 24, 'h'),
        ('measurement_system', 54, 'h'), ('vibratory_polarity_code', 58, 'h'),
    ])
    def test_binary_offsets(self, name, offset, fmt):
        field = get_field(BinaryHeader, name)
        assert (field.offset, field.format) == (offset, fmt)

    @pytest.mark.parametrize("name,offset,fmt", [
        ('trace_sequence_line', 0, 'i'), ('cdp', 20, 'i'), ('offset', 36, 'i'),
        ('samples_in_this_trace', 114, 'h'), ('sample_interval', 116, 'h'),
        ('cdp_x', 180, 'i'), ('cdp_y', 184, 'i'), ('inline_number', 188, 'i'),
        ('crossline_number', 192, 'i'), ('shot_point_number', 196, 'i'),
        ('shot_point_scalar', 200, 'h'), ('trace_value_measurement_unit', 202, 'h'),
    ])
    def test_trace_offsets(self, name, offset, fmt):
        field = get_field(TraceHeader, name)
        assert (field.offset, field.format) == (offset, fmt)

    def test_unknown_field(self):
        with pytest.raises(KeyError):
            get_field(TraceHeader, 'no_such_field')

    def test_codec_rejects_too_small_record(self):
        with pytest.raises(ValueError):
            HeaderCodec(TraceHeader, 100)


class TestBinaryHeaderCodec:
    """400-byte binary header."""

    def test_decode_reads_big_endian_fields(self):
        raw = bytearray(400)
        struct.pack_into('>i', raw, 0, 1234)
        struct.pack_into('>h', raw, 16, 4000)
        struct.pack_into('>h', raw, 20, 100)
        struct.pack_into('>h', raw, 24, 5)
        header = decode_binary_header(bytes(raw))
        assert header.job_id == 1234
        assert header.sample_interval == 4000
        assert header.samples_per_trace == 100
        assert header.sample_format == 5
        assert header.sample_interval_ms == 4.0

    def test_every_field_at_its_position(self):
        """Each field value lands exactly at its table offset."""
        values = {f.name: i + 1 for i, f in enumerate(BINARY_HEADER_FIELDS)}
        encoded = encode_binary_header(BinaryHeader(**values))
        assert len(encoded) == 400
        for f in BINARY_HEADER_FIELDS:
            assert f.read_value(encoded) == values[f.name]

    def test_round_trip(self):
        header = BinaryHeader(job_id=-7, sample_interval=2000, samples_per_trace=1500,
                              sample_format=1, measurement_system=2, sweep_type=-3)
        assert decode_binary_header(encode_binary_header(header)) == header

    def test_reserved_bytes_preserved(self):
        """Bytes outside named fields survive an edit and re-encode."""
        raw = bytearray(400)
        raw[300:302] = b'\x01\x00'    # revision number, not a named field
        raw[399] = 0xAB
        struct.pack_into('>h', raw, 20, 50)
        header = decode_binary_header(bytes(raw)).replace(samples_per_trace=60)
        encoded = encode_binary_header(header)
        assert encoded[300:302] == b'\x01\x00'
        assert encoded[399] == 0xAB
        assert struct.unpack_from('>h', encoded, 20)[0] == 60

    def test_in_memory_header_zero_fills(self):
        encoded = encode_binary_header(BinaryHeader(samples_per_trace=10))
        assert encoded[60:] == bytes(340)

    def test_raw_not_part_of_equality(self):
        assert BinaryHeader(job_id=1, raw=b'x' * 400) == BinaryHeader(job_id=1)

    def test_saturates_out_of_range_values(self):
        encoded = encode_binary_header(BinaryHeader(samples_per_trace=70000, job_id=-(2 ** 40)))
        assert struct.unpack_from('>h', encoded, 20)[0] == 32767
        assert struct.unpack_from('>i', encoded, 0)[0] == -(2 ** 31)

    def test_decode_with_base_offset(self):
        raw = bytes(3200) + encode_binary_header(BinaryHeader(samples_per_trace=42))
        assert decode_binary_header(raw, 3200).samples_per_trace == 42

    def test_decode_short_buffer(self):
        with pytest.raises(ValueError):
            decode_binary_header(bytes(100))

    def test_format_properties(self):
        header = BinaryHeader(samples_per_trace=100, sample_format=3)
        assert header.bytes_per_sample == 2
        assert header.trace_record_size == 240 + 200
        with pytest.raises(ValueError):
            BinaryHeader(sample_format=99).format_code


class TestTraceHeaderCodec:
    """240-byte trace headers."""

    def test_every_field_at_its_position(self):
        values = {f.name: (i + 1) * (-1) ** i for i, f in enumerate(TRACE_HEADER_FIELDS)}
        encoded = encode_trace_header(TraceHeader(**values))
        assert len(encoded) == 240
        for f in TRACE_HEADER_FIELDS:
            assert f.read_value(encoded) == values[f.name]

    def test_round_trip(self):
        header = TraceHeader(trace_sequence_line=5, cdp=1001, cdp_x=-500000, cdp_y=6000000,
                             inline_number=12, crossline_number=300, shot_point_scalar=-10,
                             samples_in_this_trace=1000)
        decoded = decode_trace_header(encode_trace_header(header))
        assert decoded == header
        assert len(decoded.raw) == 240

    def test_unassigned_tail_preserved(self):
        """Bytes 204-239 are not modelled and must be kept verbatim."""
        raw = bytearray(240)
        raw[204:240] = bytes(range(36))
        header = decode_trace_header(bytes(raw)).replace(cdp=9)
        encoded = encode_trace_header(header)
        assert encoded[204:] == bytes(range(36))
        assert struct.unpack_from('>i', encoded, 20)[0] == 9

    def test_decode_many_matches_single_decode(self):
        headers = [TraceHeader(trace_sequence_line=i, cdp=100 + i, offset=-25 * i) for i in range(5)]
        block = TRACE_HEADER_CODEC.encode_many(headers)
        assert block.shape == (5, 240)
        records = np.concatenate([block, np.zeros((5, 16), dtype=np.uint8)], axis=1)
        decoded = TRACE_HEADER_CODEC.decode_many(records)
        assert decoded == headers
        assert decoded[3] == decode_trace_header(block[3].tobytes())

    def test_encode_many_empty(self):
        assert TRACE_HEADER_CODEC.encode_many([]).shape == (0, 240)

    def test_codec_instances(self):
        assert BINARY_HEADER_CODEC.size == 400
        assert TRACE_HEADER_CODEC.size == 240
        assert TRACE_HEADER_CODEC.dtype.itemsize == 240


class TestHeaderRecords:
    """Dataclass helpers."""

    def test_to_dict_from_dict(self):
        header = TraceHeader(cdp=5, offset=100)
        data = header.to_dict()
        assert data['cdp'] == 5
        assert 'raw' not in data
        assert TraceHeader.from_dict({**data, 'unknown': 1}) == header

    def test_replace_keeps_raw(self):
        header = TraceHeader(cdp=1, raw=bytes(240))
        edited = header.replace(cdp=2)
        assert edited.cdp == 2
        assert edited.raw == bytes(240)
        assert header.cdp == 1
