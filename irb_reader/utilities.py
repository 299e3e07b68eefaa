"""Fixed-length string decoding and temperature unit conversions."""

from .exceptions import InteriorNulByteError
from .layout import CHAR_ENCODING


def decode_fixed_length_string(buffer: bytes, length: int) -> str:
    """
    Decode a NUL-padded fixed-length byte field.

    Bytes before the first NUL are characters (one byte per character); every
    byte after it must be NUL as well.

    Raises:
        InteriorNulByteError: if a non-NUL byte follows a NUL.
        ValueError: if the buffer is not exactly ``length`` bytes long.
    """
    buffer = bytes(buffer)
    if len(buffer) != length:
        raise ValueError(f"Expected a {length}-byte field, got {len(buffer)} bytes")
    chars = bytearray()
    terminated = False
    for byte in buffer:
        if byte == 0:
            terminated = True
        elif terminated:
            raise InteriorNulByteError(buffer)
        else:
            chars.append(byte)
    return chars.decode(CHAR_ENCODING)


class UnitConversion:
    """Temperature conversions (K->°C, °C->°F)."""

    @staticmethod
    def k2c(k):
        return k - 273.15

    @staticmethod
    def c2f(c, diff=False):
        """Celsius to Fahrenheit; diff=True for delta conversion."""
        return c * (9.0 / 5.0) + (0 if diff else 32)
