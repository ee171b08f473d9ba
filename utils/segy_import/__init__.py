"""
SEG-Y codec: byte-exact decode/encode of text header, binary header,
trace headers and samples, plus a background parse worker.

Performance notes:
- Memory mapping (mmap) for file input
- Pre-allocated flat sample buffer
- Chunked, vectorised header and sample decode
"""

from .errors import SegyFormatError, MalformedHeaderError, UnsupportedSampleFormatError
from .sample_codec import (
    decode_sample,
    encode_sample,
    decode_samples,
    encode_samples,
    ibm_to_float32,
    float32_to_ibm,
    resolve_sample_format,
)
from .text_header import decode_text_header, encode_text_header, text_header_lines, make_text_header
from .header_codec import (
    HeaderCodec,
    BINARY_HEADER_CODEC,
    TRACE_HEADER_CODEC,
    decode_binary_header,
    encode_binary_header,
    decode_trace_header,
    encode_trace_header,
)
from .segy_reader import DEFAULT_CHUNK_SIZE, SegyParser, SegyReader, parse_segy, read_segy_file
from .segy_export import SegyWriter, encode_segy, iter_segy_chunks, write_segy_file
from .parse_worker import (
    MessageType,
    ParseRequest,
    ParseSuccess,
    ParseFailure,
    ParseProgress,
    SegyParseWorker,
    handle_request,
)

__all__ = [
    # Configuration constants
    'DEFAULT_CHUNK_SIZE',
    # Errors
    'SegyFormatError',
    'MalformedHeaderError',
    'UnsupportedSampleFormatError',
    # Sample codec
    'decode_sample',
    'encode_sample',
    'decode_samples',
    'encode_samples',
    'ibm_to_float32',
    'float32_to_ibm',
    'resolve_sample_format',
    # Text header
    'decode_text_header',
    'encode_text_header',
    'text_header_lines',
    'make_text_header',
    # Binary and trace headers
    'HeaderCodec',
    'BINARY_HEADER_CODEC',
    'TRACE_HEADER_CODEC',
    'decode_binary_header',
    'encode_binary_header',
    'decode_trace_header',
    'encode_trace_header',
    # Parse
    'SegyParser',
    'SegyReader',
    'parse_segy',
    'read_segy_file',
    # Export
    'SegyWriter',
    'encode_segy',
    'iter_segy_chunks',
    'write_segy_file',
    # Worker
    'MessageType',
    'ParseRequest',
    'ParseSuccess',
    'ParseFailure',
    'ParseProgress',
    'SegyParseWorker',
    'handle_request',
]
