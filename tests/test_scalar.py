"""Tests for pystruc.scalar."""

import math
import struct

import pytest

from pystruc.errors import EncodeOverflow, LengthMismatch, TypeMismatch, UnsupportedMode
from pystruc.scalar import (
    byteorder_for,
    pack_scalar,
    pack_string,
    unpack_scalar,
    unpack_string,
)
from pystruc.tags import Mode
from pystruc.values import NULL, Pointer


def _pack(mode, abi, tag, value, size=16, offset=0):
    buf = bytearray(size)
    end = pack_scalar(mode, abi, tag, value, buf, offset)
    return bytes(buf[offset:end])


class TestByteOrder:
    def test_explicit_modes(self, lp64_be):
        assert byteorder_for(Mode.LITTLE, lp64_be) == "little"
        assert byteorder_for(Mode.BIG, lp64_be) == "big"

    def test_native_and_standard_follow_abi(self, lp64, lp64_be):
        assert byteorder_for(Mode.NATIVE, lp64_be) == "big"
        assert byteorder_for(Mode.STANDARD, lp64_be) == "big"
        assert byteorder_for(Mode.STANDARD, lp64) == "little"


class TestPackIntegers:
    def test_little(self, lp64):
        assert _pack(Mode.LITTLE, lp64, "h", -2) == b"\xfe\xff"

    def test_big(self, lp64):
        assert _pack(Mode.BIG, lp64, "L", 0x76451298) == b"\x76\x45\x12\x98"

    def test_wraps_to_width(self, lp64):
        assert _pack(Mode.LITTLE, lp64, "H", 0x12345) == b"\x45\x23"
        assert _pack(Mode.LITTLE, lp64, "B", 256) == b"\x00"
        assert _pack(Mode.LITTLE, lp64, "b", -1) == b"\xff"

    def test_bool_accepted(self, lp64):
        assert _pack(Mode.LITTLE, lp64, "i", True) == b"\x01\x00\x00\x00"

    def test_native_long_uses_abi(self, lp64, ilp32):
        assert len(_pack(Mode.NATIVE, lp64, "l", 1)) == 8
        assert len(_pack(Mode.NATIVE, ilp32, "l", 1)) == 4

    def test_native_alignment_zero_fills(self, lp64):
        buf = bytearray(b"\xaa" * 16)
        end = pack_scalar(Mode.NATIVE, lp64, "i", 1, buf, 1)
        assert end == 8
        assert bytes(buf[1:8]) == b"\x00\x00\x00\x01\x00\x00\x00"

    def test_no_alignment_outside_native(self, lp64):
        buf = bytearray(8)
        assert pack_scalar(Mode.LITTLE, lp64, "i", 1, buf, 1) == 5

    def test_float_rejected(self, lp64):
        with pytest.raises(TypeMismatch, match="expects an integer"):
            _pack(Mode.LITTLE, lp64, "h", 1.5)

    def test_string_rejected(self, lp64):
        with pytest.raises(TypeMismatch):
            _pack(Mode.LITTLE, lp64, "h", "1")

    def test_pointer_value_rejected(self, lp64):
        with pytest.raises(TypeMismatch, match="non-pointer"):
            _pack(Mode.NATIVE, lp64, "Q", Pointer(1))


class TestPackBytes:
    def test_char(self, lp64):
        assert _pack(Mode.NATIVE, lp64, "c", b"A") == b"A"
        assert _pack(Mode.NATIVE, lp64, "c", "B") == b"B"
        assert _pack(Mode.NATIVE, lp64, "c", 0x43) == b"C"

    def test_char_outside_latin1(self, lp64):
        with pytest.raises(TypeMismatch):
            _pack(Mode.NATIVE, lp64, "c", "\u20ac")

    def test_char_too_long(self, lp64):
        with pytest.raises(TypeMismatch):
            _pack(Mode.NATIVE, lp64, "c", b"AB")

    def test_bool(self, lp64):
        assert _pack(Mode.NATIVE, lp64, "?", 2) == b"\x01"
        assert _pack(Mode.NATIVE, lp64, "?", 0.0) == b"\x00"
        assert _pack(Mode.NATIVE, lp64, "?", True) == b"\x01"

    def test_bool_rejects_bytes(self, lp64):
        with pytest.raises(TypeMismatch):
            _pack(Mode.NATIVE, lp64, "?", b"x")

    def test_byte_never_aligned(self, lp64):
        buf = bytearray(4)
        assert pack_scalar(Mode.NATIVE, lp64, "B", 1, buf, 3) == 4


class TestPackFloats:
    def test_raw_little(self, lp64):
        assert _pack(Mode.LITTLE, lp64, "f", 1.5) == struct.pack("<f", 1.5)

    def test_raw_big(self, lp64):
        assert _pack(Mode.BIG, lp64, "d", math.pi) == struct.pack(">d", math.pi)

    def test_native_big_endian_profile(self, lp64_be):
        assert _pack(Mode.NATIVE, lp64_be, "d", 0.1) == struct.pack(">d", 0.1)

    def test_raw_single_overflow(self, lp64):
        with pytest.raises(EncodeOverflow):
            _pack(Mode.LITTLE, lp64, "f", 1e39)

    def test_raw_keeps_infinity(self, lp64):
        assert _pack(Mode.LITTLE, lp64, "d", math.inf) == struct.pack("<d", math.inf)

    def test_software_codec(self, softfloat):
        assert _pack(Mode.NATIVE, softfloat, "d", 0.1) == struct.pack("<d", 0.1)
        assert _pack(Mode.BIG, softfloat, "f", -2.5) == struct.pack(">f", -2.5)

    def test_software_codec_rejects_infinity(self, softfloat):
        with pytest.raises(EncodeOverflow):
            _pack(Mode.LITTLE, softfloat, "d", math.inf)

    def test_integer_value(self, lp64):
        assert _pack(Mode.LITTLE, lp64, "d", 2) == struct.pack("<d", 2.0)

    def test_bytes_rejected(self, lp64):
        with pytest.raises(TypeMismatch, match="expects a float"):
            _pack(Mode.LITTLE, lp64, "d", b"1")


class TestPackPointer:
    def test_native(self, lp64, ilp32):
        assert _pack(Mode.NATIVE, lp64, "P", Pointer(0x1234)) == b"\x34\x12" + b"\x00" * 6
        assert _pack(Mode.NATIVE, ilp32, "P", None) == b"\x00" * 4

    def test_big_endian_profile(self, lp64_be):
        assert _pack(Mode.NATIVE, lp64_be, "P", Pointer(1)) == b"\x00" * 7 + b"\x01"

    def test_non_pointer_value(self, lp64):
        with pytest.raises(TypeMismatch, match="expects a pointer"):
            _pack(Mode.NATIVE, lp64, "P", 5)

    def test_requires_native(self, lp64):
        with pytest.raises(UnsupportedMode):
            _pack(Mode.LITTLE, lp64, "P", NULL)


class TestPackString:
    def test_exact(self):
        buf = bytearray(5)
        assert pack_string("s", 3, "abc", buf, 1) == 4
        assert bytes(buf) == b"\x00abc\x00"

    def test_wrong_length(self):
        with pytest.raises(LengthMismatch, match="String has wrong length 2, expected 3"):
            pack_string("s", 3, b"ab", bytearray(3), 0)

    def test_non_latin1_str(self):
        with pytest.raises(TypeMismatch, match="bytes or latin-1 str"):
            pack_string("s", 3, "\u20acab", bytearray(3), 0)

    def test_not_bytes(self):
        with pytest.raises(TypeMismatch):
            pack_string("p", 3, 123, bytearray(3), 0)


class TestUnpack:
    def test_integers(self, lp64):
        assert unpack_scalar(Mode.LITTLE, lp64, "h", b"\xfe\xff", 0) == (-2, 2)
        assert unpack_scalar(Mode.BIG, lp64, "H", b"\xfe\xff", 0) == (0xFEFF, 2)

    def test_byte_tags(self, lp64):
        data = b"\xff"
        assert unpack_scalar(Mode.NATIVE, lp64, "b", data, 0) == (-1, 1)
        assert unpack_scalar(Mode.NATIVE, lp64, "B", data, 0) == (255, 1)
        assert unpack_scalar(Mode.NATIVE, lp64, "c", data, 0) == (b"\xff", 1)
        assert unpack_scalar(Mode.NATIVE, lp64, "?", data, 0) == (True, 1)

    def test_native_alignment_skipped(self, lp64):
        data = b"\x01\x00\x00\x00\x00\x00\x00\x00" + (7).to_bytes(8, "little")
        assert unpack_scalar(Mode.NATIVE, lp64, "q", data, 1) == (7, 16)

    def test_pointer(self, lp64):
        value, end = unpack_scalar(Mode.NATIVE, lp64, "P", (0x99).to_bytes(8, "little"), 0)
        assert value == Pointer(0x99)
        assert end == 8

    def test_floats(self, lp64, softfloat):
        data = struct.pack("<d", 0.1)
        assert unpack_scalar(Mode.LITTLE, lp64, "d", data, 0) == (0.1, 8)
        assert unpack_scalar(Mode.LITTLE, softfloat, "d", data, 0) == (0.1, 8)

    def test_string(self):
        assert unpack_string(3, memoryview(b"xabcx"), 1) == (b"abc", 4)
