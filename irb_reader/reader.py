"""Read InfraTec .irb thermal files (binary or text export); returns an Image of pixel values."""

import logging
from pathlib import Path
from typing import List, Union

from .exceptions import IrbError
from .layout import FORMAT_BINARY, FORMAT_TEXT, MAGIC, SUPPORTED_FORMATS
from .models import BinaryHeader, Image, TextHeader
from .parsers import BinaryIrbFile, TextIrbFile

logger = logging.getLogger(__name__)

FORMAT_AUTO = "auto"
FILE_EXTENSIONS = (".irb", ".txt")


def detect_format(file_path: Union[str, Path]) -> str:
    """Return 'binary' if the file starts with the IRB magic bytes, else 'text'."""
    with open(file_path, "rb") as f:
        head = f.read(len(MAGIC))
    fmt = FORMAT_BINARY if head == MAGIC else FORMAT_TEXT
    logger.debug("Detected %s format for %s", fmt, file_path)
    return fmt


def open_irb(file_path: Union[str, Path], format: str = FORMAT_AUTO):
    """Open a file and parse its header; returns a BinaryIrbFile or TextIrbFile."""
    file_path = Path(file_path)

    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    if format == FORMAT_AUTO:
        format = detect_format(file_path)
    if format == FORMAT_BINARY:
        return BinaryIrbFile.open(file_path)
    elif format == FORMAT_TEXT:
        return TextIrbFile.open(file_path)
    raise ValueError(
        f"Unsupported format: {format}. Supported formats: {', '.join(SUPPORTED_FORMATS)}"
    )


def read_irb(file_path: Union[str, Path], format: str = FORMAT_AUTO) -> Image:
    """Read a binary or text .irb file and return its Image."""
    with open_irb(file_path, format) as irb_file:
        return irb_file.read_image()


class IrbReader:
    """Read .irb files (binary and text export)."""

    def __init__(self, format: str = FORMAT_AUTO):
        self.format = format

    def read_file(self, file_path: Union[str, Path]) -> Image:
        return read_irb(file_path, self.format)

    def read_header(self, file_path: Union[str, Path]) -> Union[BinaryHeader, TextHeader]:
        """Parse only the header of a file."""
        with open_irb(file_path, self.format) as irb_file:
            return irb_file.header

    def read_directory(self, directory_path: Union[str, Path], recursive: bool = False) -> List[Image]:
        """Return images of the .irb/.txt files in directory; unreadable files are skipped."""
        directory_path = Path(directory_path)
        if not directory_path.is_dir():
            raise NotADirectoryError(f"Not a directory: {directory_path}")
        out = []
        pattern = "**/*" if recursive else "*"
        for file_path in sorted(directory_path.glob(pattern)):
            if file_path.suffix.lower() in FILE_EXTENSIONS and file_path.is_file():
                try:
                    out.append(self.read_file(file_path))
                except (IrbError, OSError) as e:
                    logger.warning("Skipping %s: %s", file_path, e)
        return out

    def get_supported_formats(self) -> List[str]:
        return list(SUPPORTED_FORMATS)

    def validate_file(self, file_path: Union[str, Path]) -> bool:
        """Return True if file can be read without error."""
        try:
            self.read_file(file_path)
            return True
        except (IrbError, OSError):
            return False
