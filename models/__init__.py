"""Models package - data structures and state management."""
from .segy_headers import (
    TEXT_HEADER_SIZE,
    BINARY_HEADER_SIZE,
    TRACE_HEADER_SIZE,
    FILE_HEADER_SIZE,
    SampleFormat,
    HeaderField,
    BINARY_HEADER_FIELDS,
    TRACE_HEADER_FIELDS,
    BinaryHeader,
    TraceHeader,
    get_field,
)
from .segy_dataset import SegyDataset, SegyFile
from .app_settings import AppSettings, get_settings

__all__ = [
    'TEXT_HEADER_SIZE',
    'BINARY_HEADER_SIZE',
    'TRACE_HEADER_SIZE',
    'FILE_HEADER_SIZE',
    'SampleFormat',
    'HeaderField',
    'BINARY_HEADER_FIELDS',
    'TRACE_HEADER_FIELDS',
    'BinaryHeader',
    'TraceHeader',
    'get_field',
    'SegyDataset',
    'SegyFile',
    'AppSettings',
    'get_settings',
]
