"""Exceptions raised while decoding or encoding SEG-Y byte streams."""


class SegyFormatError(ValueError):
    """Base class for structural SEG-Y errors. No partial result accompanies it."""
    pass


class MalformedHeaderError(SegyFormatError):
    """File shorter than the 3600-byte header region, or unusable binary header values."""
    pass


class UnsupportedSampleFormatError(SegyFormatError):
    """Sample format code outside 1, 2, 3, 5 and 8."""

    def __init__(self, format_code):
        self.format_code = format_code
        super().__init__(
            f"Unsupported sample format code: {format_code} "
            f"(supported: 1=IBM float, 2=int32, 3=int16, 5=IEEE float, 8=int8)"
        )
