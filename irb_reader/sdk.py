"""Access to the InfraTec IRBACS library for binary .irb files.

The native library is loaded lazily through ``ctypes`` so that modules which
only decode files by themselves work without it. Anything that talks to the
library goes through the ``IrbacsLibrary`` interface, which tests replace
with a fake.
"""

import ctypes
import ctypes.util
import logging
import os
from abc import ABC, abstractmethod
from typing import NamedTuple, Optional

from .exceptions import SdkError
from .models import Image

logger = logging.getLogger(__name__)

DEFAULT_LIBRARY_NAME = "irbacs_l64"
LIBRARY_ENV_VAR = "IRBACS_LIBRARY"

# getParam identifiers
PARAM_IMAGE_WIDTH = 0
PARAM_IMAGE_HEIGHT = 1


class SdkVersion(NamedTuple):
    main: int
    sub: int


class IrbacsLibrary(ABC):
    """
    Capabilities of the vendor library.

    Every method raises SdkError when the library reports a failure.
    Temperatures are in Kelvin.
    """

    @abstractmethod
    def version(self) -> SdkVersion:
        ...

    @abstractmethod
    def open(self, path: str) -> int:
        """Load a file and return its handle."""

    @abstractmethod
    def close(self, handle: int) -> None:
        ...

    @abstractmethod
    def get_param(self, handle: int, parameter_id: int) -> float:
        ...

    @abstractmethod
    def get_frame_count(self, handle: int) -> int:
        ...

    @abstractmethod
    def get_index_count(self, handle: int) -> int:
        ...

    @abstractmethod
    def get_temperature(self, handle: int, col: int, row: int) -> float:
        ...

    @abstractmethod
    def get_blackbody_temperature(self, handle: int, col: int, row: int) -> float:
        ...


def _load_library(name: str):
    """Load the native library, raising a clear error if missing."""
    path = ctypes.util.find_library(name) or name
    try:
        lib = ctypes.CDLL(path)
    except OSError as exc:
        raise SdkError(
            "load library",
            f"{name} could not be loaded; install the IRBACS library or set {LIBRARY_ENV_VAR}",
        ) from exc

    handle_t = ctypes.c_size_t
    lib.version.argtypes = [ctypes.POINTER(ctypes.c_int), ctypes.POINTER(ctypes.c_int)]
    lib.version.restype = ctypes.c_int
    lib.loadIRB.argtypes = [ctypes.c_char_p]
    lib.loadIRB.restype = handle_t
    lib.unloadIRB.argtypes = [handle_t]
    lib.unloadIRB.restype = None
    lib.getParam.argtypes = [handle_t, ctypes.c_int, ctypes.POINTER(ctypes.c_double)]
    lib.getParam.restype = ctypes.c_int
    lib.getFrameCount.argtypes = [handle_t]
    lib.getFrameCount.restype = ctypes.c_int
    lib.getIRBIndices.argtypes = [handle_t, ctypes.c_void_p]
    lib.getIRBIndices.restype = ctypes.c_int
    for fn in (lib.getTempXY, lib.getTempBBXY):
        fn.argtypes = [handle_t, ctypes.c_int, ctypes.c_int]
        fn.restype = ctypes.c_double
    logger.debug("Loaded IRBACS library from %s", path)
    return lib


class CtypesIrbacs(IrbacsLibrary):
    """IrbacsLibrary backed by the native library.

    A zero handle, a status other than 1, a zero count and a zero temperature
    are the library's failure sentinels.
    """

    def __init__(self, library_name: Optional[str] = None):
        self.library_name = library_name or os.environ.get(LIBRARY_ENV_VAR, DEFAULT_LIBRARY_NAME)
        self._lib = None

    @property
    def lib(self):
        if self._lib is None:
            self._lib = _load_library(self.library_name)
        return self._lib

    def version(self) -> SdkVersion:
        main, sub = ctypes.c_int(0), ctypes.c_int(0)
        if self.lib.version(ctypes.byref(main), ctypes.byref(sub)) != 1:
            raise SdkError("version")
        return SdkVersion(main.value, sub.value)

    def open(self, path: str) -> int:
        handle = self.lib.loadIRB(os.fsencode(path))
        if not handle:
            raise SdkError(f"loadIRB: {path}")
        return handle

    def close(self, handle: int) -> None:
        self.lib.unloadIRB(handle)

    def get_param(self, handle: int, parameter_id: int) -> float:
        value = ctypes.c_double(0.0)
        if self.lib.getParam(handle, parameter_id, ctypes.byref(value)) != 1:
            raise SdkError(f"getParam({parameter_id})")
        return value.value

    def get_frame_count(self, handle: int) -> int:
        count = self.lib.getFrameCount(handle)
        if count == 0:
            raise SdkError("getFrameCount")
        return count

    def get_index_count(self, handle: int) -> int:
        count = self.lib.getIRBIndices(handle, None)
        if count == 0:
            raise SdkError("getIRBIndices (with null)")
        return count

    def get_temperature(self, handle: int, col: int, row: int) -> float:
        value = self.lib.getTempXY(handle, col, row)
        if value == 0.0:
            raise SdkError(f"getTempXY({col}, {row})")
        return value

    def get_blackbody_temperature(self, handle: int, col: int, row: int) -> float:
        value = self.lib.getTempBBXY(handle, col, row)
        if value == 0.0:
            raise SdkError(f"getTempBBXY({col}, {row})")
        return value


def version(library: Optional[IrbacsLibrary] = None) -> SdkVersion:
    """Return the version of the vendor library."""
    return (library or CtypesIrbacs()).version()


class Irb:
    """
    An .irb file opened through the vendor library.

    The native handle is released by close(), on leaving a ``with`` block,
    or when the object is garbage collected.

    Usage example:
        with Irb("image.irb") as irb:
            print(irb.image_width(), irb.temperature(0, 0))
    """

    def __init__(self, path, library: Optional[IrbacsLibrary] = None):
        self.path = str(path)
        self._library = library if library is not None else CtypesIrbacs()
        self._handle = self._library.open(self.path)
        logger.debug("Opened %s through IRBACS (handle %s)", self.path, self._handle)

    @property
    def closed(self) -> bool:
        return self._handle is None

    def close(self):
        if self._handle is not None:
            handle, self._handle = self._handle, None
            self._library.close(handle)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __del__(self):
        if getattr(self, "_handle", None) is not None:
            self.close()

    def _require_handle(self, call: str) -> int:
        if self._handle is None:
            raise SdkError(call, "file is closed")
        return self._handle

    def image_width(self) -> int:
        return int(self._library.get_param(self._require_handle("getParam"), PARAM_IMAGE_WIDTH))

    def image_height(self) -> int:
        return int(self._library.get_param(self._require_handle("getParam"), PARAM_IMAGE_HEIGHT))

    def frame_count(self) -> int:
        return self._library.get_frame_count(self._require_handle("getFrameCount"))

    def index_count(self) -> int:
        return self._library.get_index_count(self._require_handle("getIRBIndices"))

    def temperature(self, col: int, row: int) -> float:
        """Temperature at (col, row) in Kelvin."""
        return self._library.get_temperature(self._require_handle("getTempXY"), col, row)

    def blackbody_temperature(self, col: int, row: int) -> float:
        """Blackbody temperature at (col, row) in Kelvin."""
        return self._library.get_blackbody_temperature(self._require_handle("getTempBBXY"), col, row)

    def read_image(self) -> Image:
        """Image of per-pixel temperatures in Kelvin."""
        width, height = self.image_width(), self.image_height()
        data = [self.temperature(col, row) for row in range(height) for col in range(width)]
        return Image(data, width, height)
