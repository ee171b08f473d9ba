"""
Textual file header codec (3200-byte EBCDIC block).

Every byte maps through a fixed 256-entry EBCDIC to ASCII table. The table
is a permutation of 0..255, so decoding to a Latin-1 string and encoding it
back reproduces the original bytes exactly.
"""
import logging
from typing import Iterable, List

from models.segy_headers import TEXT_HEADER_SIZE

logger = logging.getLogger(__name__)

CARD_COUNT = 40
CARD_WIDTH = 80
EBCDIC_SPACE = 0x40

EBCDIC_TO_ASCII = bytes([
    0, 1, 2, 3, 156, 9, 134, 127, 151, 141, 142, 11, 12, 13, 14, 15,
    16, 17, 18, 19, 157, 133, 8, 135, 24, 25, 146, 143, 28, 29, 30, 31,
    128, 129, 130, 131, 132, 10, 23, 27, 136, 137, 138, 139, 140, 5, 6, 7,
    144, 145, 22, 147, 148, 149, 150, 4, 152, 153, 154, 155, 20, 21, 158, 26,
    32, 160, 161, 162, 163, 164, 165, 166, 167, 168, 91, 46, 60, 40, 43, 33,
    38, 169, 170, 171, 172, 173, 174, 175, 176, 177, 93, 36, 42, 41, 59, 94,
    45, 47, 178, 179, 180, 181, 182, 183, 184, 185, 124, 44, 37, 95, 62, 63,
    186, 187, 188, 189, 190, 191, 192, 193, 194, 96, 58, 35, 64, 39, 61, 34,
    195, 97, 98, 99, 100, 101, 102, 103, 104, 105, 196, 197, 198, 199, 200, 201,
    202, 106, 107, 108, 109, 110, 111, 112, 113, 114, 203, 204, 205, 206, 207, 208,
    209, 126, 115, 116, 117, 118, 119, 120, 121, 122, 210, 211, 212, 213, 214, 215,
    216, 217, 218, 219, 220, 221, 222, 223, 224, 225, 226, 227, 228, 229, 230, 231,
    123, 65, 66, 67, 68, 69, 70, 71, 72, 73, 232, 233, 234, 235, 236, 237,
    125, 74, 75, 76, 77, 78, 79, 80, 81, 82, 238, 239, 240, 241, 242, 243,
    92, 159, 83, 84, 85, 86, 87, 88, 89, 90, 244, 245, 246, 247, 248, 249,
    48, 49, 50, 51, 52, 53, 54, 55, 56, 57, 250, 251, 252, 253, 254, 255,
])

_inverse = bytearray(256)
for _ebcdic, _ascii in enumerate(EBCDIC_TO_ASCII):
    _inverse[_ascii] = _ebcdic
ASCII_TO_EBCDIC = bytes(_inverse)
del _inverse, _ebcdic, _ascii


def decode_text_header(raw) -> str:
    """
    Decode the textual header.

    Args:
        raw: Bytes-like object holding at least 3200 bytes

    Returns:
        3200-character string
    """
    block = bytes(raw[:TEXT_HEADER_SIZE])
    if len(block) != TEXT_HEADER_SIZE:
        raise ValueError(f"Text header needs {TEXT_HEADER_SIZE} bytes, got {len(block)}")
    return block.translate(EBCDIC_TO_ASCII).decode('latin-1')


def encode_text_header(text: str) -> bytes:
    """
    Encode text as a 3200-byte EBCDIC block.

    Longer text is truncated, shorter text is padded with EBCDIC spaces.
    Characters outside the table (code point above 255) become spaces.
    """
    text = text[:TEXT_HEADER_SIZE]
    unmapped = sum(1 for c in text if ord(c) > 0xFF)
    if unmapped:
        logger.debug(f"Text header: {unmapped} characters outside the EBCDIC table written as spaces")
        text = ''.join(c if ord(c) <= 0xFF else ' ' for c in text)
    encoded = text.encode('latin-1').translate(ASCII_TO_EBCDIC)
    return encoded + bytes([EBCDIC_SPACE]) * (TEXT_HEADER_SIZE - len(encoded))


def text_header_lines(text: str) -> List[str]:
    """Split a text header into its 40 card images of 80 columns."""
    text = text[:TEXT_HEADER_SIZE].ljust(TEXT_HEADER_SIZE)
    return [text[i:i + CARD_WIDTH] for i in range(0, TEXT_HEADER_SIZE, CARD_WIDTH)]


def make_text_header(lines: Iterable[str]) -> str:
    """
    Build a 3200-character text header from card lines.

    Each line is padded or cut to 80 columns; missing cards are blank.
    Extra lines beyond 40 are dropped.
    """
    cards = [line[:CARD_WIDTH].ljust(CARD_WIDTH) for line in list(lines)[:CARD_COUNT]]
    return ''.join(cards).ljust(TEXT_HEADER_SIZE)
