"""Encode and decode one field element for one type tag.

``buffer`` arguments are byte-format memoryviews (or bytearrays); offsets are
relative to the start of the layout.  Every function returns the offset just
past what it wrote or read.
"""

from __future__ import annotations

import logging
import math
from typing import Any

from pystruc import ieee754
from pystruc.abi import HOST, AbiProfile, host_float_bits, host_float_from_bits
from pystruc.errors import EncodeOverflow, LengthMismatch, TypeMismatch
from pystruc.layout import padding_before, size_of
from pystruc.tags import Category, Mode, lookup
from pystruc.values import Pointer, ValueKind, as_pointer, classify

logger = logging.getLogger(__name__)


def byteorder_for(mode: Mode, abi: AbiProfile) -> str:
    """Byte order of multi-byte fields under *mode*."""
    if mode is Mode.LITTLE:
        return "little"
    if mode is Mode.BIG:
        return "big"
    # "=" follows the ABI byte order like Python's struct, not always big-endian
    return abi.byteorder


def _align(mode: Mode, abi: AbiProfile, tag: str, buffer, offset: int, fill: bool) -> int:
    if mode is not Mode.NATIVE:
        return offset
    pad = padding_before(offset, tag, abi)
    if pad and fill:
        buffer[offset:offset + pad] = bytes(pad)
    return offset + pad


def latin1_bytes(tag: str, value: str) -> bytes:
    """Encode a str field value; only latin-1 text maps onto single bytes."""
    try:
        return value.encode("latin-1")
    except UnicodeEncodeError:
        raise TypeMismatch(tag, value, "bytes or latin-1 str") from None


def _software_floats(abi: AbiProfile, width: int) -> bool:
    return not (abi.is_ieee(width) and HOST.is_ieee(width))


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def _encode_int(tag: str, value: Any, size: int, byteorder: str) -> bytes:
    if classify(value) not in (ValueKind.INTEGER, ValueKind.BOOLEAN):
        raise TypeMismatch(tag, value, "an integer")
    # C conversion semantics: wrap to the target width
    return (int(value) & ((1 << (size * 8)) - 1)).to_bytes(size, byteorder)


def _encode_char(value: Any) -> bytes:
    kind = classify(value)
    if kind is ValueKind.BYTES and len(value) == 1:
        if isinstance(value, str):
            return latin1_bytes("c", value)
        return bytes(value)
    if kind in (ValueKind.INTEGER, ValueKind.BOOLEAN):
        return bytes([int(value) & 0xFF])
    raise TypeMismatch("c", value, "a char (bytes of length 1)")


def _encode_byte(tag: str, value: Any) -> bytes:
    kind = classify(value)
    if tag == "?":
        if kind not in (ValueKind.BOOLEAN, ValueKind.INTEGER, ValueKind.FLOATING):
            raise TypeMismatch(tag, value, "a bool")
        return b"\x01" if value else b"\x00"
    if tag == "c":
        return _encode_char(value)
    if kind not in (ValueKind.INTEGER, ValueKind.BOOLEAN):
        raise TypeMismatch(tag, value, "an integer")
    return bytes([int(value) & 0xFF])


def encode_float(tag: str, value: Any, width: int, byteorder: str, abi: AbiProfile) -> bytes:
    """Encode a float or double, natively when the ABI is IEEE 754."""
    if classify(value) not in (ValueKind.INTEGER, ValueKind.FLOATING, ValueKind.BOOLEAN):
        raise TypeMismatch(tag, value, "a float")
    value = float(value)
    if _software_floats(abi, width):
        logger.debug("Packing %d-bit float %r with the software IEEE codec", width, value)
        return ieee754.encode_float(value, width, byteorder)
    bits = host_float_bits(value, width)
    if width == 32 and math.isfinite(value) and math.isinf(host_float_from_bits(bits, 32)):
        raise EncodeOverflow(value, width)
    return bits.to_bytes(width // 8, byteorder)


def pack_scalar(mode: Mode, abi: AbiProfile, tag: str, value: Any,
                buffer, offset: int) -> int:
    """Write one element of *tag* at *offset*, padding first in native mode."""
    info = lookup(tag)
    category = info.category

    if isinstance(value, Pointer) and category is not Category.POINTER:
        raise TypeMismatch(tag, value, "a non-pointer value")

    if category is Category.BYTE:
        raw = _encode_byte(tag, value)
    elif category is Category.INTEGER:
        offset = _align(mode, abi, tag, buffer, offset, fill=True)
        raw = _encode_int(tag, value, size_of(mode, tag, abi), byteorder_for(mode, abi))
    elif category is Category.FLOATING:
        offset = _align(mode, abi, tag, buffer, offset, fill=True)
        width = size_of(mode, tag, abi) * 8
        raw = encode_float(tag, value, width, byteorder_for(mode, abi), abi)
    elif category is Category.POINTER:
        size = size_of(mode, tag, abi)
        if classify(value) is not ValueKind.POINTER:
            raise TypeMismatch(tag, value, "a pointer")
        offset = _align(mode, abi, tag, buffer, offset, fill=True)
        address = as_pointer(value).address & ((1 << (size * 8)) - 1)
        raw = address.to_bytes(size, abi.byteorder)
    else:
        raise TypeMismatch(tag, value, "a scalar field")

    buffer[offset:offset + len(raw)] = raw
    return offset + len(raw)


def pack_string(tag: str, length: int, value: Any, buffer, offset: int) -> int:
    """Write a fixed-length ``s``/``p`` field; *value* must be exactly *length* bytes."""
    if classify(value) is not ValueKind.BYTES:
        raise TypeMismatch(tag, value, "bytes or str")
    raw = latin1_bytes(tag, value) if isinstance(value, str) else bytes(value)
    if len(raw) != length:
        raise LengthMismatch(length, len(raw), "string")
    buffer[offset:offset + length] = raw
    return offset + length


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def decode_float(raw, width: int, byteorder: str, abi: AbiProfile) -> float:
    if _software_floats(abi, width):
        return ieee754.decode_float(bytes(raw), width, byteorder)
    return host_float_from_bits(int.from_bytes(raw, byteorder), width)


def unpack_scalar(mode: Mode, abi: AbiProfile, tag: str, buffer, offset: int) -> tuple[Any, int]:
    """Read one element of *tag*; return ``(value, new_offset)``.

    Values come back in their natural Python form: ``int`` for integer
    tags and ``b``/``B``, ``bytes`` of length 1 for ``c``, ``bool`` for
    ``?``, ``float`` for ``f``/``d`` and :class:`Pointer` for ``P``.
    """
    info = lookup(tag)
    category = info.category

    if category is Category.BYTE:
        byte = buffer[offset]
        if tag == "c":
            value = bytes([byte])
        elif tag == "?":
            value = byte != 0
        elif tag == "b":
            value = byte - 256 if byte > 127 else byte
        else:
            value = byte
        return value, offset + 1

    size = size_of(mode, tag, abi)
    offset = _align(mode, abi, tag, buffer, offset, fill=False)
    raw = buffer[offset:offset + size]

    if category is Category.INTEGER:
        value = int.from_bytes(raw, byteorder_for(mode, abi), signed=info.signed)
    elif category is Category.FLOATING:
        value = decode_float(raw, size * 8, byteorder_for(mode, abi), abi)
    elif category is Category.POINTER:
        value = Pointer(int.from_bytes(raw, abi.byteorder))
    else:
        raise TypeMismatch(tag, None, "a scalar field")
    return value, offset + size


def unpack_string(length: int, buffer, offset: int) -> tuple[bytes, int]:
    return bytes(buffer[offset:offset + length]), offset + length
