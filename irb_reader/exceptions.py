"""
Errors raised while decoding IRB files.

Every error carries its payload as attributes so callers can branch on the
failure kind without parsing messages.
"""

from typing import Optional


class IrbError(ValueError):
    """Base class for all IRB decoding errors."""


class InvalidHeaderError(IrbError):
    """Binary file does not start with the IRB magic bytes."""

    def __init__(self, actual: bytes):
        self.actual = bytes(actual)
        super().__init__(f"Invalid IRB header: {self.actual.hex(' ')}")


class InteriorNulByteError(IrbError):
    """Fixed-length string has a non-NUL byte after its first NUL."""

    def __init__(self, data: bytes):
        self.data = bytes(data)
        super().__init__(f"Interior NUL byte in fixed-length string: {self.data!r}")


class DimensionError(IrbError):
    """Counted size does not match the declared one."""

    what = "dimension"

    def __init__(self, actual: int, expected: int):
        self.actual = actual
        self.expected = expected
        super().__init__(f"Unexpected {self.what}: got {actual}, expected {expected}")


class ImageWidthError(DimensionError):
    """A data row has the wrong number of values."""

    what = "image width"


class ImageHeightError(DimensionError):
    """The matrix has the wrong number of rows."""

    what = "image height"


class ImageLengthError(DimensionError):
    """Pixel buffer length differs from width * height."""

    what = "image data length"


class MissingWidthError(IrbError):
    def __init__(self):
        super().__init__("Text header has no ImageWidth declaration")


class MissingHeightError(IrbError):
    def __init__(self):
        super().__init__("Text header has no ImageHeight declaration")


class MissingEqualsSignError(IrbError):
    """Header declaration without '='."""

    def __init__(self, line: str):
        self.line = line
        super().__init__(f"Missing '=' in header line: {line!r}")


class ParseNumericError(IrbError):
    """Token could not be parsed as a number."""

    def __init__(self, token: str, expected_type: str = "float"):
        self.token = token
        self.expected_type = expected_type
        super().__init__(f"Could not parse {token!r} as {expected_type}")


class IrbIOError(IrbError, OSError):
    """Reading, seeking or opening the underlying file failed."""


class StreamConsumedError(IrbError):
    """The image of an opened file has already been read."""


class SdkError(IrbError):
    """
    A call into the vendor library failed.

    The library reports failures only through sentinel return values, so the
    message names the call that failed and nothing more.
    """

    def __init__(self, call: str, reason: Optional[str] = None):
        self.call = call
        self.reason = reason
        message = f"irbacs error: {call}"
        if reason:
            message += f" ({reason})"
        super().__init__(message)
