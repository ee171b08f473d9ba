"""
SEG-Y header models - field tables and typed header records.

Both the 400-byte binary header and the 240-byte trace header are flat
records of big-endian integers at fixed byte positions. The field tables
below are the single source of truth for names, positions, widths and
descriptions; the header dataclasses mirror them one attribute per field.
"""
import struct
from dataclasses import dataclass, field, fields, replace
from enum import IntEnum
from typing import Any, Dict, Tuple


TEXT_HEADER_SIZE = 3200
BINARY_HEADER_SIZE = 400
TRACE_HEADER_SIZE = 240
FILE_HEADER_SIZE = TEXT_HEADER_SIZE + BINARY_HEADER_SIZE

# Representable range per struct format code
FORMAT_LIMITS = {
    'h': (-32768, 32767),
    'i': (-2 ** 31, 2 ** 31 - 1),
}


class SampleFormat(IntEnum):
    """Sample format codes supported in the binary header (bytes 3225-3226)."""
    IBM_FLOAT = 1
    INT_4_BYTE = 2
    INT_2_BYTE = 3
    IEEE_FLOAT = 5
    INT_1_BYTE = 8

    @property
    def bytes_per_sample(self) -> int:
        if self is SampleFormat.INT_2_BYTE:
            return 2
        if self is SampleFormat.INT_1_BYTE:
            return 1
        return 4

    @property
    def label(self) -> str:
        return _FORMAT_LABELS[self]


_FORMAT_LABELS = {
    SampleFormat.IBM_FLOAT: 'IBM Float (4-byte)',
    SampleFormat.INT_4_BYTE: 'Integer (4-byte)',
    SampleFormat.INT_2_BYTE: 'Integer (2-byte)',
    SampleFormat.IEEE_FLOAT: 'IEEE Float (4-byte)',
    SampleFormat.INT_1_BYTE: 'Integer (1-byte)',
}


@dataclass(frozen=True)
class HeaderField:
    """
    Definition of one header field.

    Attributes:
        name: Attribute name on the header dataclass
        byte_position: Starting byte position (1-based, SEG-Y convention),
            relative to the start of the header block
        format: Struct format ('i'=int32, 'h'=int16), always big-endian
        description: Human-readable description
    """
    name: str
    byte_position: int
    format: str
    description: str = ""

    @property
    def offset(self) -> int:
        """0-based offset within the header block."""
        return self.byte_position - 1

    @property
    def byte_size(self) -> int:
        return struct.calcsize(self.format)

    @property
    def limits(self) -> Tuple[int, int]:
        """Representable (min, max) of the field."""
        return FORMAT_LIMITS[self.format]

    def read_value(self, header_bytes, base: int = 0) -> int:
        """Read this field from a header block starting at ``base``."""
        return struct.unpack_from('>' + self.format, header_bytes, base + self.offset)[0]


def _f(name: str, byte_position: int, fmt: str, description: str) -> HeaderField:
    return HeaderField(name, byte_position, fmt, description)


# Binary header, byte positions relative to byte 3201 of the file
BINARY_HEADER_FIELDS: Tuple[HeaderField, ...] = (
    _f('job_id', 1, 'i', 'Job identification number'),
    _f('line_key', 5, 'i', 'Line number'),
    _f('reel_key', 9, 'i', 'Reel number'),
    _f('traces_per_ensemble', 13, 'h', 'Number of data traces per ensemble'),
    _f('aux_traces', 15, 'h', 'Number of auxiliary traces per ensemble'),
    _f('sample_interval', 17, 'h', 'Sample interval (µs)'),
    _f('sample_interval_original', 19, 'h', 'Sample interval of original field recording (µs)'),
    _f('samples_per_trace', 21, 'h', 'Number of samples per data trace'),
    _f('samples_per_trace_original', 23, 'h', 'Number of samples per trace of original recording'),
    _f('sample_format', 25, 'h', 'Data sample format code'),
    _f('ensemble_fold', 27, 'h', 'Ensemble fold'),
    _f('trace_sorting', 29, 'h', 'Trace sorting code'),
    _f('vertical_sum_code', 31, 'h', 'Vertical sum code'),
    _f('sweep_frequency_start', 33, 'h', 'Sweep frequency at start (Hz)'),
    _f('sweep_frequency_end', 35, 'h', 'Sweep frequency at end (Hz)'),
    _f('sweep_length', 37, 'h', 'Sweep length (ms)'),
    _f('sweep_type', 39, 'h', 'Sweep type code'),
    _f('trace_number_sweep_channel', 41, 'h', 'Trace number of sweep channel'),
    _f('sweep_taper_start', 43, 'h', 'Sweep trace taper length at start (ms)'),
    _f('sweep_taper_end', 45, 'h', 'Sweep trace taper length at end (ms)'),
    _f('taper_type', 47, 'h', 'Taper type'),
    _f('correlated_data_traces', 49, 'h', 'Correlated data traces (1-no, 2-yes)'),
    _f('binary_gain', 51, 'h', 'Binary gain recovered (1-yes, 2-no)'),
    _f('amplitude_recovery_method', 53, 'h', 'Amplitude recovery method'),
    _f('measurement_system', 55, 'h', 'Measurement system (1-meters, 2-feet)'),
    _f('impulse_signal_polarity', 57, 'h', 'Impulse signal polarity'),
    _f('vibratory_polarity_code', 59, 'h', 'Vibratory polarity code'),
)

TRACE_HEADER_FIELDS: Tuple[HeaderField, ...] = (
    _f('trace_sequence_line', 1, 'i', 'Trace sequence number within line'),
    _f('trace_sequence_file', 5, 'i', 'Trace sequence number within reel'),
    _f('field_record', 9, 'i', 'FFID - Original field record number'),
    _f('trace_number', 13, 'i', 'Trace number within field record'),
    _f('energy_source_point', 17, 'i', 'SP - Energy source point number'),
    _f('cdp', 21, 'i', 'CDP ensemble number'),
    _f('cdp_trace', 25, 'i', 'Trace number within CDP ensemble'),
    _f('trace_id', 29, 'h', 'Trace identification code'),
    _f('n_summed_traces', 31, 'h', 'Number of vertically summed traces'),
    _f('n_stacked_traces', 33, 'h', 'Number of horizontally stacked traces'),
    _f('data_use', 35, 'h', 'Data use (1-production, 2-test)'),
    _f('offset', 37, 'i', 'Distance from source point to receiver group'),
    _f('receiver_elevation', 41, 'i', 'Receiver group elevation'),
    _f('source_elevation', 45, 'i', 'Surface elevation at source'),
    _f('source_depth', 49, 'i', 'Source depth below surface'),
    _f('receiver_datum_elevation', 53, 'i', 'Datum elevation at receiver group'),
    _f('source_datum_elevation', 57, 'i', 'Datum elevation at source'),
    _f('source_water_depth', 61, 'i', 'Water depth at source'),
    _f('receiver_water_depth', 65, 'i', 'Water depth at group'),
    _f('scalar_elevation', 69, 'h', 'Scalar to all elevations and depths'),
    _f('scalar_coordinates', 71, 'h', 'Scalar to all coordinates'),
    _f('source_x', 73, 'i', 'Source X coordinate'),
    _f('source_y', 77, 'i', 'Source Y coordinate'),
    _f('group_x', 81, 'i', 'Group X coordinate'),
    _f('group_y', 85, 'i', 'Group Y coordinate'),
    _f('coordinate_units', 89, 'h', 'Coordinate units (1-length, 2-seconds of arc)'),
    _f('weathering_velocity', 91, 'h', 'Weathering velocity'),
    _f('subweathering_velocity', 93, 'h', 'Subweathering velocity'),
    _f('source_uphole_time', 95, 'h', 'Uphole time at source (ms)'),
    _f('group_uphole_time', 97, 'h', 'Uphole time at group (ms)'),
    _f('source_static_correction', 99, 'h', 'Source static correction (ms)'),
    _f('group_static_correction', 101, 'h', 'Group static correction (ms)'),
    _f('total_static_applied', 103, 'h', 'Total static applied (ms)'),
    _f('lag_time_a', 105, 'h', 'Lag time A (ms)'),
    _f('lag_time_b', 107, 'h', 'Lag time B (ms)'),
    _f('delay_recording_time', 109, 'h', 'Delay recording time (ms)'),
    _f('mute_time_start', 111, 'h', 'Mute time start (ms)'),
    _f('mute_time_end', 113, 'h', 'Mute time end (ms)'),
    _f('samples_in_this_trace', 115, 'h', 'Number of samples in this trace'),
    _f('sample_interval', 117, 'h', 'Sample interval for this trace (µs)'),
    _f('gain_type', 119, 'h', 'Gain type of field instruments'),
    _f('instrument_gain_constant', 121, 'h', 'Instrument gain constant (dB)'),
    _f('instrument_initial_gain', 123, 'h', 'Instrument early or initial gain (dB)'),
    _f('correlated', 125, 'h', 'Correlated (1-no, 2-yes)'),
    _f('sweep_frequency_start', 127, 'h', 'Sweep frequency at start (Hz)'),
    _f('sweep_frequency_end', 129, 'h', 'Sweep frequency at end (Hz)'),
    _f('sweep_length', 131, 'h', 'Sweep length (ms)'),
    _f('sweep_type', 133, 'h', 'Sweep type (1-linear, 2-parabolic, 3-exponential, 4-other)'),
    _f('sweep_taper_start', 135, 'h', 'Sweep trace taper length at start (ms)'),
    _f('sweep_taper_end', 137, 'h', 'Sweep trace taper length at end (ms)'),
    _f('taper_type', 139, 'h', 'Taper type (1-linear, 2-cos squared, 3-other)'),
    _f('alias_filter_frequency', 141, 'h', 'Alias filter frequency (Hz)'),
    _f('alias_filter_slope', 143, 'h', 'Alias filter slope (dB/octave)'),
    _f('notch_filter_frequency', 145, 'h', 'Notch filter frequency (Hz)'),
    _f('notch_filter_slope', 147, 'h', 'Notch filter slope (dB/octave)'),
    _f('low_cut_frequency', 149, 'h', 'Low-cut frequency (Hz)'),
    _f('high_cut_frequency', 151, 'h', 'High-cut frequency (Hz)'),
    _f('low_cut_slope', 153, 'h', 'Low-cut slope (dB/octave)'),
    _f('high_cut_slope', 155, 'h', 'High-cut slope (dB/octave)'),
    _f('year_data_recorded', 157, 'h', 'Year data recorded'),
    _f('day_of_year', 159, 'h', 'Day of year'),
    _f('hour', 161, 'h', 'Hour of day'),
    _f('minute', 163, 'h', 'Minute of hour'),
    _f('second', 165, 'h', 'Second of minute'),
    _f('time_basis_code', 167, 'h', 'Time basis code (1-local, 2-GMT, 3-other)'),
    _f('trace_weighting_factor', 169, 'h', 'Trace weighting factor'),
    _f('geophone_group_number_roll1', 171, 'h', 'Geophone group number of roll switch position one'),
    _f('geophone_group_number_first_trace', 173, 'h', 'Geophone group number of trace number one'),
    _f('geophone_group_number_last_trace', 175, 'h', 'Geophone group number of last trace'),
    _f('gap_size', 177, 'h', 'Gap size (total number of groups dropped)'),
    _f('over_travel', 179, 'h', 'Over travel associated with taper'),
    _f('cdp_x', 181, 'i', 'X coordinate of ensemble (CDP) position'),
    _f('cdp_y', 185, 'i', 'Y coordinate of ensemble (CDP) position'),
    _f('inline_number', 189, 'i', 'Inline number (3D)'),
    _f('crossline_number', 193, 'i', 'Crossline number (3D)'),
    _f('shot_point_number', 197, 'i', 'Shot point number'),
    _f('shot_point_scalar', 201, 'h', 'Scalar applied to shot point number'),
    _f('trace_value_measurement_unit', 203, 'h', 'Trace value measurement unit'),
)


class _HeaderRecord:
    """Shared behaviour of the binary and trace header dataclasses."""

    FIELDS: Tuple[HeaderField, ...] = ()

    def replace(self, **changes):
        """Return a copy with the given fields changed (source bytes are kept)."""
        return replace(self, **changes)

    def to_dict(self) -> Dict[str, int]:
        return {f.name: getattr(self, f.name) for f in self.FIELDS}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]):
        """Create a header from a field dictionary; unknown keys are ignored."""
        known = {f.name for f in cls.FIELDS}
        return cls(**{k: int(v) for k, v in data.items() if k in known})

    @classmethod
    def field_names(cls) -> Tuple[str, ...]:
        return tuple(f.name for f in cls.FIELDS)


@dataclass(frozen=True)
class BinaryHeader(_HeaderRecord):
    """
    400-byte binary file header.

    ``raw`` keeps the bytes the header was decoded from, so that reserved
    and unassigned bytes survive an edit/write round trip. It does not take
    part in equality.
    """
    job_id: int = 0
    line_key: int = 0
    reel_key: int = 0
    traces_per_ensemble: int = 0
    aux_traces: int = 0
    sample_interval: int = 0
    sample_interval_original: int = 0
    samples_per_trace: int = 0
    samples_per_trace_original: int = 0
    sample_format: int = SampleFormat.IEEE_FLOAT.value
    ensemble_fold: int = 0
    trace_sorting: int = 0
    vertical_sum_code: int = 0
    sweep_frequency_start: int = 0
    sweep_frequency_end: int = 0
    sweep_length: int = 0
    sweep_type: int = 0
    trace_number_sweep_channel: int = 0
    sweep_taper_start: int = 0
    sweep_taper_end: int = 0
    taper_type: int = 0
    correlated_data_traces: int = 0
    binary_gain: int = 0
    amplitude_recovery_method: int = 0
    measurement_system: int = 0
    impulse_signal_polarity: int = 0
    vibratory_polarity_code: int = 0
    raw: bytes = field(default=b'', compare=False, repr=False)

    FIELDS = BINARY_HEADER_FIELDS

    @property
    def format_code(self) -> SampleFormat:
        """Sample format as enum. Raises ValueError for unknown codes."""
        return SampleFormat(self.sample_format)

    @property
    def bytes_per_sample(self) -> int:
        return self.format_code.bytes_per_sample

    @property
    def trace_record_size(self) -> int:
        """Trace header plus sample block, in bytes."""
        return TRACE_HEADER_SIZE + self.samples_per_trace * self.bytes_per_sample

    @property
    def sample_interval_ms(self) -> float:
        return self.sample_interval / 1000.0

    @property
    def units(self) -> str:
        return 'feet' if self.measurement_system == 2 else 'meters'


@dataclass(frozen=True)
class TraceHeader(_HeaderRecord):
    """240-byte trace header. ``raw`` as in BinaryHeader."""
    trace_sequence_line: int = 0
    trace_sequence_file: int = 0
    field_record: int = 0
    trace_number: int = 0
    energy_source_point: int = 0
    cdp: int = 0
    cdp_trace: int = 0
    trace_id: int = 0
    n_summed_traces: int = 0
    n_stacked_traces: int = 0
    data_use: int = 0
    offset: int = 0
    receiver_elevation: int = 0
    source_elevation: int = 0
    source_depth: int = 0
    receiver_datum_elevation: int = 0
    source_datum_elevation: int = 0
    source_water_depth: int = 0
    receiver_water_depth: int = 0
    scalar_elevation: int = 0
    scalar_coordinates: int = 0
    source_x: int = 0
    source_y: int = 0
    group_x: int = 0
    group_y: int = 0
    coordinate_units: int = 0
    weathering_velocity: int = 0
    subweathering_velocity: int = 0
    source_uphole_time: int = 0
    group_uphole_time: int = 0
    source_static_correction: int = 0
    group_static_correction: int = 0
    total_static_applied: int = 0
    lag_time_a: int = 0
    lag_time_b: int = 0
    delay_recording_time: int = 0
    mute_time_start: int = 0
    mute_time_end: int = 0
    samples_in_this_trace: int = 0
    sample_interval: int = 0
    gain_type: int = 0
    instrument_gain_constant: int = 0
    instrument_initial_gain: int = 0
    correlated: int = 0
    sweep_frequency_start: int = 0
    sweep_frequency_end: int = 0
    sweep_length: int = 0
    sweep_type: int = 0
    sweep_taper_start: int = 0
    sweep_taper_end: int = 0
    taper_type: int = 0
    alias_filter_frequency: int = 0
    alias_filter_slope: int = 0
    notch_filter_frequency: int = 0
    notch_filter_slope: int = 0
    low_cut_frequency: int = 0
    high_cut_frequency: int = 0
    low_cut_slope: int = 0
    high_cut_slope: int = 0
    year_data_recorded: int = 0
    day_of_year: int = 0
    hour: int = 0
    minute: int = 0
    second: int = 0
    time_basis_code: int = 0
    trace_weighting_factor: int = 0
    geophone_group_number_roll1: int = 0
    geophone_group_number_first_trace: int = 0
    geophone_group_number_last_trace: int = 0
    gap_size: int = 0
    over_travel: int = 0
    cdp_x: int = 0
    cdp_y: int = 0
    inline_number: int = 0
    crossline_number: int = 0
    shot_point_number: int = 0
    shot_point_scalar: int = 0
    trace_value_measurement_unit: int = 0
    raw: bytes = field(default=b'', compare=False, repr=False)

    FIELDS = TRACE_HEADER_FIELDS


def get_field(header_cls, name: str) -> HeaderField:
    """Look up a field definition by name on BinaryHeader or TraceHeader."""
    for header_field in header_cls.FIELDS:
        if header_field.name == name:
            return header_field
    raise KeyError(f"Unknown {header_cls.__name__} field: {name}")


def dataclass_field_names(header_cls) -> Tuple[str, ...]:
    """Dataclass attributes that correspond to wire fields (excludes ``raw``)."""
    return tuple(f.name for f in fields(header_cls) if f.name != 'raw')
