"""Runtime kinds of caller values and typed unpack slots."""

from __future__ import annotations

import ctypes
import numbers
from dataclasses import dataclass
from enum import Enum
from typing import Any

from pystruc.errors import TypeMismatch
from pystruc.tags import TAGS, Category


class ValueKind(Enum):
    INTEGER = "integer"
    FLOATING = "floating"
    BOOLEAN = "boolean"
    CHAR = "char"
    BYTES = "bytes"
    POINTER = "pointer"
    ARRAY = "array"


@dataclass(frozen=True)
class Pointer:
    """A raw machine address, the only value accepted by the ``P`` tag."""

    address: int = 0

    def __repr__(self) -> str:
        return f"Pointer(0x{self.address:x})"


NULL = Pointer(0)


def classify(value: Any) -> ValueKind | None:
    """Return the kind of a caller value, or None if it has no usable shape."""
    if value is None or isinstance(value, (Pointer, ctypes.c_void_p)):
        return ValueKind.POINTER
    if isinstance(value, bool):
        return ValueKind.BOOLEAN
    if isinstance(value, numbers.Integral):
        return ValueKind.INTEGER
    if isinstance(value, numbers.Real):
        return ValueKind.FLOATING
    if isinstance(value, (bytes, bytearray, memoryview, str)):
        return ValueKind.BYTES
    if isinstance(value, (list, tuple)):
        return ValueKind.ARRAY
    return None


def as_pointer(value: Any) -> Pointer:
    if isinstance(value, Pointer):
        return value
    if value is None:
        return NULL
    return Pointer(value.value or 0)


@dataclass
class Slot:
    """A typed destination filled in place by :meth:`FormatDescriptor.unpack`.

    ``length`` is the element count of an ``ARRAY`` slot, or the expected
    byte length of a ``BYTES`` slot (``None`` accepts whatever the layout
    declares).
    """

    kind: ValueKind
    length: int | None = None
    element: ValueKind = ValueKind.INTEGER
    value: Any = None

    @classmethod
    def integer(cls) -> "Slot":
        return cls(ValueKind.INTEGER)

    @classmethod
    def floating(cls) -> "Slot":
        return cls(ValueKind.FLOATING)

    @classmethod
    def boolean(cls) -> "Slot":
        return cls(ValueKind.BOOLEAN)

    @classmethod
    def char(cls) -> "Slot":
        return cls(ValueKind.CHAR)

    @classmethod
    def bytes(cls, length: int | None = None) -> "Slot":
        return cls(ValueKind.BYTES, length)

    @classmethod
    def pointer(cls) -> "Slot":
        return cls(ValueKind.POINTER)

    @classmethod
    def array(cls, length: int, element: ValueKind = ValueKind.INTEGER) -> "Slot":
        return cls(ValueKind.ARRAY, length, element)


_DEFAULT_KINDS = {
    Category.INTEGER: ValueKind.INTEGER,
    Category.FLOATING: ValueKind.FLOATING,
    Category.STRING: ValueKind.BYTES,
    Category.POINTER: ValueKind.POINTER,
}


def default_slot(tag: str) -> Slot:
    """The slot ``unpack_values`` uses for one item of *tag*."""
    if tag == "c":
        return Slot.char()
    if tag == "?":
        return Slot.boolean()
    if tag in "bB":
        return Slot.integer()
    return Slot(_DEFAULT_KINDS[TAGS[tag].category])


def convert(kind: ValueKind, tag: str, raw: Any) -> Any:
    """Convert a decoded scalar of *tag* into the Python type of *kind*."""
    category = TAGS[tag].category
    if kind is ValueKind.POINTER or category is Category.POINTER:
        if kind is ValueKind.POINTER and category is Category.POINTER:
            return raw
        expected = "a pointer slot" if category is Category.POINTER else "a non-pointer slot"
        raise TypeMismatch(tag, Slot(kind), expected)

    if kind in (ValueKind.CHAR, ValueKind.BYTES):
        if tag == "c":
            return raw
        if kind is ValueKind.CHAR and tag in "bB":
            return bytes([raw & 0xFF])
        raise TypeMismatch(tag, Slot(kind), "a numeric slot")

    number = raw[0] if tag == "c" else raw
    if kind is ValueKind.INTEGER:
        if category is Category.FLOATING:
            raise TypeMismatch(tag, Slot(kind), "a floating or boolean slot")
        return int(number)
    if kind is ValueKind.FLOATING:
        return float(number)
    if kind is ValueKind.BOOLEAN:
        return bool(number)
    raise TypeMismatch(tag, Slot(kind), "a scalar slot")
