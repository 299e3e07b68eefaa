"""
irb-reader - Python library for reading InfraTec thermal files (.irb)

Reads both the binary .irb format and the text export written by the
InfraTec software, and exposes pixel values as an immutable Image.

Main usage:
    import irb_reader

    image = irb_reader.read_irb("thermal_image.irb")
    print(image.width, image.height, image[0, 0])
"""

__version__ = "0.1.0"

from .exceptions import (
    DimensionError,
    ImageHeightError,
    ImageLengthError,
    ImageWidthError,
    InteriorNulByteError,
    InvalidHeaderError,
    IrbError,
    IrbIOError,
    MissingEqualsSignError,
    MissingHeightError,
    MissingWidthError,
    ParseNumericError,
    SdkError,
    StreamConsumedError,
)
from .models import BinaryHeader, Image, TextHeader, Version
from .parsers import BinaryIrbFile, TextIrbFile, parse_binary_header, parse_text_header, read_matrix
from .reader import IrbReader, detect_format, open_irb, read_irb
from .sdk import CtypesIrbacs, Irb, IrbacsLibrary
from .utilities import decode_fixed_length_string

__all__ = [
    "read_irb",
    "open_irb",
    "detect_format",
    "IrbReader",
    "Image",
    "BinaryHeader",
    "TextHeader",
    "Version",
    "BinaryIrbFile",
    "TextIrbFile",
    "parse_binary_header",
    "parse_text_header",
    "read_matrix",
    "decode_fixed_length_string",
    "Irb",
    "IrbacsLibrary",
    "CtypesIrbacs",
    "IrbError",
    "InvalidHeaderError",
    "InteriorNulByteError",
    "DimensionError",
    "ImageWidthError",
    "ImageHeightError",
    "ImageLengthError",
    "MissingWidthError",
    "MissingHeightError",
    "MissingEqualsSignError",
    "ParseNumericError",
    "IrbIOError",
    "StreamConsumedError",
    "SdkError",
]
