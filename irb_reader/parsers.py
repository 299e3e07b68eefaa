"""Parse InfraTec .irb files: binary header + raw float payload, or text export (header + matrix)."""

import logging
import struct
from typing import BinaryIO, Iterable, Iterator, List, Optional, Union

import numpy as np

from .exceptions import (
    ImageHeightError,
    ImageWidthError,
    InvalidHeaderError,
    IrbIOError,
    MissingEqualsSignError,
    MissingHeightError,
    MissingWidthError,
    ParseNumericError,
    StreamConsumedError,
)
from .layout import (
    FIELD_HEIGHT,
    FIELD_INDEX_COUNT,
    FIELD_MAGIC,
    FIELD_SOFTWARE_VERSION,
    FIELD_VERSION_MAJOR,
    FIELD_VERSION_MINOR,
    FIELD_WIDTH,
    MAGIC,
    PIXEL_DATA_OFFSET,
    PIXEL_DTYPE,
    PIXEL_SIZE,
    SOFTWARE_VERSION_LENGTH,
    TEXT_DATA_ENCODING,
    TEXT_DATA_MARKER,
    TEXT_DECIMAL_COMMA,
    TEXT_FIELD_SEPARATOR,
    TEXT_HEADER_ENCODING,
    TEXT_HEIGHT_KEY,
    TEXT_WIDTH_KEY,
    field_format,
    field_offset,
)
from .models import BinaryHeader, Image, TextHeader, Version
from .utilities import decode_fixed_length_string

logger = logging.getLogger(__name__)

Line = Union[bytes, str]


# -----------------------------------------------------------------------------
# Binary format
# -----------------------------------------------------------------------------

def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    """Read exactly ``size`` bytes or raise IrbIOError."""
    try:
        raw = stream.read(size)
    except OSError as e:
        raise IrbIOError(f"Cannot read {what}: {e}") from e
    if len(raw) != size:
        raise IrbIOError(f"Unexpected end of file reading {what}: got {len(raw)} of {size} bytes")
    return raw


def _seek(stream: BinaryIO, offset: int):
    try:
        stream.seek(offset)
    except OSError as e:
        raise IrbIOError(f"Cannot seek to byte {offset}: {e}") from e


def _read_field(stream: BinaryIO, name: str):
    """Read one header field per BINARY_HEADER_LAYOUT (seeking first if it has an absolute offset)."""
    offset = field_offset(name)
    if offset is not None:
        _seek(stream, offset)
    fmt = field_format(name)
    raw = _read_exact(stream, struct.calcsize(fmt), name)
    return struct.unpack(fmt, raw)[0]


def parse_binary_header(stream: BinaryIO) -> BinaryHeader:
    """
    Read the binary header and leave ``stream`` at the start of the pixel payload.

    Args:
        stream: Seekable binary stream positioned anywhere; the magic bytes are
            read from offset 0.

    Returns:
        BinaryHeader with software version, version and dimensions.

    Raises:
        InvalidHeaderError: If the magic bytes do not match.
        InteriorNulByteError: If the software version field is corrupt.
        IrbIOError: On short reads or failed seeks.
    """
    magic = _read_field(stream, FIELD_MAGIC)
    if magic != MAGIC:
        raise InvalidHeaderError(magic)

    software_version = decode_fixed_length_string(
        _read_field(stream, FIELD_SOFTWARE_VERSION), SOFTWARE_VERSION_LENGTH
    )
    version = Version(
        _read_field(stream, FIELD_VERSION_MAJOR),
        _read_field(stream, FIELD_VERSION_MINOR),
    )
    _read_field(stream, FIELD_INDEX_COUNT)

    width = _read_field(stream, FIELD_WIDTH)
    height = _read_field(stream, FIELD_HEIGHT)
    _seek(stream, PIXEL_DATA_OFFSET)

    header = BinaryHeader(
        software_version=software_version, version=version, width=width, height=height
    )
    logger.debug("Binary IRB header: %s", header)
    return header


class _IrbFile:
    """An opened IRB file whose image can be read exactly once."""

    def __init__(self, stream, owns_stream: bool = True):
        self._stream = stream
        self._owns_stream = owns_stream

    @property
    def consumed(self) -> bool:
        return self._stream is None

    def _take_stream(self):
        if self._stream is None:
            raise StreamConsumedError("Image data has already been read from this file")
        stream, self._stream = self._stream, None
        return stream

    def _release(self, stream):
        if self._owns_stream and hasattr(stream, "close"):
            stream.close()

    def close(self):
        """Release the underlying file without reading the image."""
        if self._stream is not None:
            self._release(self._take_stream())

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()


class BinaryIrbFile(_IrbFile):
    """Binary .irb file; opening parses the header, read_image() reads the raw float grid."""

    def __init__(self, header: BinaryHeader, stream: BinaryIO, owns_stream: bool = True):
        super().__init__(stream, owns_stream)
        self.header = header

    @classmethod
    def open(cls, path) -> "BinaryIrbFile":
        try:
            stream = open(path, "rb")
        except OSError as e:
            raise IrbIOError(f"Cannot open {path}: {e}") from e
        try:
            header = parse_binary_header(stream)
        except BaseException:
            stream.close()
            raise
        return cls(header, stream)

    @classmethod
    def from_stream(cls, stream: BinaryIO) -> "BinaryIrbFile":
        """Parse the header of an already open stream; the caller keeps ownership of it."""
        return cls(parse_binary_header(stream), stream, owns_stream=False)

    @property
    def software_version(self) -> str:
        return self.header.software_version

    @property
    def version(self) -> Version:
        return self.header.version

    @property
    def width(self) -> int:
        return self.header.width

    @property
    def height(self) -> int:
        return self.header.height

    def read_image(self) -> Image:
        """
        Read the pixel payload as an Image of raw little-endian float32 values.

        No calibration is applied: the meaning of the raw values is not
        documented for the binary format.
        """
        stream = self._take_stream()
        try:
            n_pixels = self.width * self.height
            raw = _read_exact(stream, n_pixels * PIXEL_SIZE, "pixel data")
        finally:
            self._release(stream)
        data = np.frombuffer(raw, dtype=PIXEL_DTYPE)
        return Image(data, self.width, self.height)


# -----------------------------------------------------------------------------
# Text export
# -----------------------------------------------------------------------------

def _decode_header_line(raw: Line) -> Optional[str]:
    if isinstance(raw, bytes):
        try:
            raw = raw.decode(TEXT_HEADER_ENCODING)
        except UnicodeDecodeError:
            logger.warning("Skipping undecodable header line: %r", raw)
            return None
    return raw.rstrip("\r\n")


def _parse_declaration(line: str) -> int:
    """Unsigned integer value of a ``Key=value`` header line."""
    _, sep, value = line.partition("=")
    if not sep:
        raise MissingEqualsSignError(line)
    value = value.strip()
    if not (value.isascii() and value.isdigit()):
        raise ParseNumericError(value, "unsigned integer")
    return int(value)


def parse_text_header(lines: Iterable[Line]) -> TextHeader:
    """
    Scan header lines for ImageWidth/ImageHeight until the ``[Data]`` marker.

    Pass an iterator (or an open file) to keep it positioned at the first data
    line afterwards. Lines that are not valid UTF-8 are skipped.
    """
    width = None
    height = None
    for raw in lines:
        line = _decode_header_line(raw)
        if line is None:
            continue
        if line == TEXT_DATA_MARKER:
            break
        if line.startswith(TEXT_WIDTH_KEY):
            width = _parse_declaration(line)
        elif line.startswith(TEXT_HEIGHT_KEY):
            height = _parse_declaration(line)

    if width is None:
        raise MissingWidthError()
    if height is None:
        raise MissingHeightError()
    header = TextHeader(width=width, height=height)
    logger.debug("Text IRB header: %s", header)
    return header


def _parse_float(token: str) -> float:
    # float() accepts digit-group underscores
    if "_" in token:
        raise ParseNumericError(token)
    try:
        return float(token.replace(TEXT_DECIMAL_COMMA, "."))
    except ValueError:
        raise ParseNumericError(token) from None


def read_matrix(lines: Iterable[Line], width: int, height: int) -> List[float]:
    """
    Read data lines into a flat row-major list of ``width * height`` floats.

    ``;`` counts as whitespace and ``,`` as decimal point. Blank lines are
    skipped. Each row is parsed before its value count is checked, and
    reading stops at the first row whose count is not ``width``.

    Raises:
        ImageWidthError: A row has the wrong number of values.
        ImageHeightError: The number of rows is not ``height``.
        ParseNumericError: A value is not a number.
    """
    values: List[float] = []
    rows = 0
    for raw in lines:
        line = raw.decode(TEXT_DATA_ENCODING) if isinstance(raw, bytes) else raw
        if not line.strip():
            continue
        row = [_parse_float(token) for token in line.replace(TEXT_FIELD_SEPARATOR, " ").split()]
        if len(row) != width:
            raise ImageWidthError(len(row), width)
        values.extend(row)
        rows += 1
    if rows != height:
        raise ImageHeightError(rows, height)
    return values


class TextIrbFile(_IrbFile):
    """Text export of an .irb file; opening parses the header, read_image() the matrix."""

    def __init__(self, header: TextHeader, lines: Iterator[Line], owns_stream: bool = True):
        super().__init__(lines, owns_stream)
        self.header = header

    @classmethod
    def open(cls, path) -> "TextIrbFile":
        try:
            stream = open(path, "rb")
        except OSError as e:
            raise IrbIOError(f"Cannot open {path}: {e}") from e
        try:
            header = parse_text_header(stream)
        except OSError as e:
            stream.close()
            raise IrbIOError(f"Cannot read header of {path}: {e}") from e
        except BaseException:
            stream.close()
            raise
        return cls(header, stream)

    @classmethod
    def from_lines(cls, lines: Iterable[Line]) -> "TextIrbFile":
        """Parse the header from an iterable of lines (bytes or str)."""
        lines = iter(lines)
        return cls(parse_text_header(lines), lines, owns_stream=False)

    @property
    def width(self) -> int:
        return self.header.width

    @property
    def height(self) -> int:
        return self.header.height

    def read_image(self) -> Image:
        lines = self._take_stream()
        try:
            values = read_matrix(lines, self.width, self.height)
        except OSError as e:
            raise IrbIOError(f"Cannot read data lines: {e}") from e
        finally:
            self._release(lines)
        return Image(values, self.width, self.height)
