"""
Byte layout of binary IRB files and tokens of the text export.

The binary offsets are reverse-engineered from sample files written by
IRBACS; there is no published format definition. They hold for the file
version described here only.

Each binary field maps to (absolute offset or None, struct format). An offset
of None means the field directly follows the previous one.
"""

from typing import Dict, Optional, Tuple

BYTE_ORDER = "<"
CHAR_ENCODING = "latin-1"

MAGIC = b"\xffIRB\x00"

# -----------------------------------------------------------------------------
# Binary header
# -----------------------------------------------------------------------------
FIELD_MAGIC = "magic"
FIELD_SOFTWARE_VERSION = "software_version"
FIELD_VERSION_MAJOR = "version_major"
FIELD_VERSION_MINOR = "version_minor"
FIELD_INDEX_COUNT = "index_count"
FIELD_WIDTH = "width"
FIELD_HEIGHT = "height"

SOFTWARE_VERSION_LENGTH = 15

BINARY_HEADER_LAYOUT: Dict[str, Tuple[Optional[int], str]] = {
    FIELD_MAGIC: (0, f"{len(MAGIC)}s"),
    FIELD_SOFTWARE_VERSION: (None, f"{SOFTWARE_VERSION_LENGTH}s"),
    FIELD_VERSION_MAJOR: (None, "I"),
    FIELD_VERSION_MINOR: (None, "I"),
    FIELD_INDEX_COUNT: (None, "I"),
    FIELD_WIDTH: (6059, "H"),
    FIELD_HEIGHT: (None, "H"),
}

PIXEL_DATA_OFFSET = 6119
PIXEL_DTYPE = BYTE_ORDER + "f4"
PIXEL_SIZE = 4

# -----------------------------------------------------------------------------
# Text export
# -----------------------------------------------------------------------------
TEXT_WIDTH_KEY = "ImageWidth"
TEXT_HEIGHT_KEY = "ImageHeight"
TEXT_DATA_MARKER = "[Data]"
TEXT_HEADER_ENCODING = "utf-8"
TEXT_DATA_ENCODING = "latin-1"
TEXT_FIELD_SEPARATOR = ";"
TEXT_DECIMAL_COMMA = ","

FORMAT_BINARY = "binary"
FORMAT_TEXT = "text"
SUPPORTED_FORMATS = (FORMAT_BINARY, FORMAT_TEXT)


def field_offset(name: str) -> Optional[int]:
    """Absolute offset of a binary header field, or None if it follows the previous one."""
    return BINARY_HEADER_LAYOUT[name][0]


def field_format(name: str) -> str:
    """struct format (with byte order) of a binary header field."""
    return BYTE_ORDER + BINARY_HEADER_LAYOUT[name][1]
