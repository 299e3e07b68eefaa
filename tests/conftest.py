"""
Shared fixtures: synthetic binary/text .irb files and a fake IRBACS library.
"""
import struct

import numpy as np
import pytest

from irb_reader.sdk import IrbacsLibrary, SdkVersion
from irb_reader.exceptions import SdkError

MAGIC = b"\xffIRB\x00"


def make_binary_irb(width, height, values=None, software=b"IRBACS", version=(25600, 16384), magic=MAGIC):
    """Bytes of a minimal binary .irb file."""
    buf = bytearray(6119)
    buf[0:5] = magic
    buf[5:20] = software.ljust(15, b"\x00")
    struct.pack_into("<III", buf, 20, version[0], version[1], 1)
    struct.pack_into("<HH", buf, 6059, width, height)
    if values is None:
        values = np.arange(width * height, dtype=np.float32)
    return bytes(buf) + np.asarray(values, dtype="<f4").tobytes()


def make_text_irb(rows, width=None, height=None, extra_header=(), newline="\n"):
    """Text export with the given data rows (list of lists of str tokens)."""
    width = len(rows[0]) if width is None and rows else width
    height = len(rows) if height is None else height
    lines = ["[Settings]", "Version=2"]
    if width is not None:
        lines.append(f"ImageWidth={width}")
    if height is not None:
        lines.append(f"ImageHeight={height}")
    lines.extend(extra_header)
    lines.append("[Data]")
    lines.extend(";".join(row) for row in rows)
    return newline.join(lines) + newline


@pytest.fixture
def binary_irb(tmp_path):
    """Write a binary .irb file and return its path."""
    def _write(width=2, height=2, values=None, name="image.irb", **kwargs):
        path = tmp_path / name
        path.write_bytes(make_binary_irb(width, height, values, **kwargs))
        return path
    return _write


@pytest.fixture
def text_irb(tmp_path):
    """Write a text export and return its path."""
    def _write(rows, name="image.txt", **kwargs):
        path = tmp_path / name
        path.write_text(make_text_irb(rows, **kwargs), encoding="utf-8")
        return path
    return _write


class FakeIrbacs(IrbacsLibrary):
    """In-memory stand-in for the vendor library (temperatures in Kelvin)."""

    def __init__(self, temperatures=None, frames=1, indices=1):
        if temperatures is None:
            temperatures = np.array([[293.15, 294.15, 295.15], [296.15, 297.15, 298.15]])
        self.temperatures = np.asarray(temperatures, dtype=float)
        self.frames = frames
        self.indices = indices
        self.open_handles = set()
        self.closed_handles = []
        self._next_handle = 1

    def version(self):
        return SdkVersion(3, 1)

    def open(self, path):
        if not path.endswith(".irb"):
            raise SdkError(f"loadIRB: {path}")
        handle = self._next_handle
        self._next_handle += 1
        self.open_handles.add(handle)
        return handle

    def close(self, handle):
        self.open_handles.discard(handle)
        self.closed_handles.append(handle)

    def get_param(self, handle, parameter_id):
        height, width = self.temperatures.shape
        if parameter_id == 0:
            return float(width)
        if parameter_id == 1:
            return float(height)
        raise SdkError(f"getParam({parameter_id})")

    def get_frame_count(self, handle):
        return self.frames

    def get_index_count(self, handle):
        return self.indices

    def get_temperature(self, handle, col, row):
        height, width = self.temperatures.shape
        if not (0 <= col < width and 0 <= row < height):
            raise SdkError(f"getTempXY({col}, {row})")
        return float(self.temperatures[row, col])

    def get_blackbody_temperature(self, handle, col, row):
        return self.get_temperature(handle, col, row) + 1.0


@pytest.fixture
def fake_irbacs():
    return FakeIrbacs()
