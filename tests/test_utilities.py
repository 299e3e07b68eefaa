"""
Tests for fixed-length string decoding and unit conversions.
"""
import pytest

from irb_reader import InteriorNulByteError, decode_fixed_length_string
from irb_reader.utilities import UnitConversion


def test_trailing_padding_is_stripped():
    assert decode_fixed_length_string(b"AB\x00", 3) == "AB"
    assert decode_fixed_length_string(b"IRBACS" + b"\x00" * 9, 15) == "IRBACS"


def test_unpadded_and_empty():
    assert decode_fixed_length_string(b"ABC", 3) == "ABC"
    assert decode_fixed_length_string(b"\x00\x00\x00", 3) == ""
    assert decode_fixed_length_string(b"", 0) == ""


def test_interior_nul_byte():
    """A non-NUL byte after a NUL is corruption, reported with the original bytes."""
    with pytest.raises(InteriorNulByteError) as excinfo:
        decode_fixed_length_string(b"A\x00B", 3)
    assert excinfo.value.data == b"A\x00B"


def test_single_byte_mapping():
    """Bytes map to characters one to one, not as UTF-8."""
    assert decode_fixed_length_string(b"\xb0C\x00", 3) == "°C"


def test_length_mismatch():
    with pytest.raises(ValueError, match="3-byte"):
        decode_fixed_length_string(b"AB", 3)


def test_unit_conversion():
    assert UnitConversion.k2c(273.15) == pytest.approx(0.0)
    assert UnitConversion.c2f(100.0) == pytest.approx(212.0)
    assert UnitConversion.c2f(10.0, diff=True) == pytest.approx(18.0)
