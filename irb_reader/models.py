"""
Data models for IRB files.
"""

from dataclasses import dataclass
from typing import List, NamedTuple, Optional, Sequence, Tuple, Union

import numpy as np

from .exceptions import ImageLengthError


class Version(NamedTuple):
    """File version stored in the binary header."""

    major: int
    minor: int


@dataclass(frozen=True)
class BinaryHeader:
    """Metadata read from the fixed offsets of a binary IRB file."""

    software_version: str
    version: Version
    width: int
    height: int


@dataclass(frozen=True)
class TextHeader:
    """Dimensions declared in the header block of a text export."""

    width: int
    height: int


@dataclass(frozen=True, eq=False, repr=False)
class Image:
    """
    An immutable grid of floating-point samples stored in row-major order.

    A floating-point ndarray keeps its dtype (binary payloads stay float32);
    any other data is stored as float64. ``data`` is either flat or a 2D
    array of shape ``(height, width)``.

    Pixels are addressed as (column, row), i.e. (x, y), by both ``get`` and
    ``image[col, row]``; the sample is ``data[row * width + col]``.

    Raises:
        ImageLengthError: if ``len(data) != width * height``.
        ValueError: if ``data`` has any other shape.
    """

    data: Union[np.ndarray, Sequence[float]]
    width: int
    height: int

    def __post_init__(self):
        width, height = int(self.width), int(self.height)
        if width < 0 or height < 0:
            raise ValueError(f"Image dimensions must be non-negative, got {width}x{height}")
        array = np.asarray(self.data)
        dtype = array.dtype if np.issubdtype(array.dtype, np.floating) else np.float64
        if array.ndim == 2 and array.shape != (height, width):
            raise ValueError(
                f"Expected a ({height}, {width}) array for a {width}x{height} image, got {array.shape}"
            )
        if array.ndim not in (1, 2):
            raise ValueError(f"Image data must be flat or 2D, got shape {array.shape}")
        flat = np.array(array, dtype=dtype).reshape(-1)
        if flat.size != width * height:
            raise ImageLengthError(flat.size, width * height)
        grid = flat.reshape((height, width))
        grid.flags.writeable = False
        object.__setattr__(self, "data", grid)
        object.__setattr__(self, "width", width)
        object.__setattr__(self, "height", height)

    def __repr__(self):
        return f"Image(width={self.width}, height={self.height})"

    def __len__(self):
        return self.width * self.height

    def __getitem__(self, key: Tuple[int, int]) -> float:
        col, row = key
        value = self.get(col, row)
        if value is None:
            raise IndexError(
                f"Index out of bounds for {self.width}x{self.height} image: ({col}, {row})"
            )
        return value

    def get(self, col: int, row: int, default: Optional[float] = None) -> Optional[float]:
        """Return the sample at (col, row), or ``default`` when out of bounds."""
        if 0 <= col < self.width and 0 <= row < self.height:
            return float(self.data[row, col])
        return default

    @property
    def shape(self) -> tuple:
        """Array shape, (height, width)."""
        return (self.height, self.width)

    @property
    def values(self) -> np.ndarray:
        """Read-only 2D view of the samples, indexed [row, col]."""
        return self.data

    def to_list(self) -> List[float]:
        """Flat row-major list of samples."""
        return self.data.reshape(-1).tolist()

    def value_range(self) -> tuple:
        """Return (min, max) over all samples."""
        self._require_samples()
        return float(np.min(self.data)), float(np.max(self.data))

    def mean(self) -> float:
        """Return the average sample value."""
        self._require_samples()
        return float(np.mean(self.data))

    def _require_samples(self):
        if self.data.size == 0:
            raise ValueError("Image has no samples")
