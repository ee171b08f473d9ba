"""
Tests for the EBCDIC textual header codec.
"""
import pytest

from utils.segy_import.text_header import (
    ASCII_TO_EBCDIC,
    EBCDIC_TO_ASCII,
    decode_text_header,
    encode_text_header,
    make_text_header,
    text_header_lines,
)


class TestTable:
    """The translation table covers every byte value exactly once."""

    def test_table_is_permutation(self):
        assert len(EBCDIC_TO_ASCII) == 256
        assert sorted(EBCDIC_TO_ASCII) == list(range(256))

    def test_inverse_table(self):
        for ebcdic in range(256):
            assert ASCII_TO_EBCDIC[EBCDIC_TO_ASCII[ebcdic]] == ebcdic

    @pytest.mark.parametrize("char,code", [(' ', 0x40), ('A', 0xC1), ('Z', 0xE9), ('a', 0x81),
                                           ('0', 0xF0), ('9', 0xF9), ('.', 0x4B), ('C', 0xC3)])
    def test_common_characters(self, char, code):
        assert ASCII_TO_EBCDIC[ord(char)] == code


class TestTextHeaderCodec:
    """3200-byte encode/decode."""

    def test_all_byte_values_round_trip(self):
        """Every byte survives decode followed by encode."""
        raw = bytes(range(256)) * 12 + bytes(range(128))
        assert len(raw) == 3200
        assert encode_text_header(decode_text_header(raw)) == raw

    def test_string_round_trip(self):
        text = ''.join(chr(i) for i in range(256)) * 12 + 'C 1 CLIENT ACME'.ljust(128)
        assert decode_text_header(encode_text_header(text)) == text

    def test_short_text_is_padded_with_ebcdic_space(self):
        encoded = encode_text_header('C 1 HELLO')
        assert len(encoded) == 3200
        assert encoded[9:] == b'\x40' * 3191
        assert decode_text_header(encoded) == 'C 1 HELLO'.ljust(3200)

    def test_long_text_is_truncated(self):
        encoded = encode_text_header('X' * 5000)
        assert len(encoded) == 3200
        assert decode_text_header(encoded) == 'X' * 3200

    def test_unmapped_characters_become_spaces(self):
        decoded = decode_text_header(encode_text_header('A€B'))
        assert decoded.startswith('A B')

    def test_all_spaces_block_decodes_to_spaces(self):
        assert decode_text_header(b'\x40' * 3200) == ' ' * 3200

    def test_short_block_rejected(self):
        with pytest.raises(ValueError):
            decode_text_header(b'\x40' * 100)


class TestCardImages:
    """40 x 80 card helpers."""

    def test_make_text_header_pads_cards(self):
        text = make_text_header(['C 1 LINE ONE', 'C 2 LINE TWO'])
        assert len(text) == 3200
        lines = text_header_lines(text)
        assert len(lines) == 40
        assert lines[0] == 'C 1 LINE ONE'.ljust(80)
        assert lines[1] == 'C 2 LINE TWO'.ljust(80)
        assert lines[2] == ' ' * 80

    def test_long_card_is_cut(self):
        lines = text_header_lines(make_text_header(['Y' * 100]))
        assert lines[0] == 'Y' * 80
        assert lines[1] == ' ' * 80

    def test_extra_cards_dropped(self):
        text = make_text_header([f'C{i}' for i in range(50)])
        assert text_header_lines(text)[-1].rstrip() == 'C39'
