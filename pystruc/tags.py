"""Static knowledge about format modes and type tags."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from pystruc.errors import InvalidFormat


class Mode(Enum):
    NATIVE = "native"
    STANDARD = "standard"
    LITTLE = "little"
    BIG = "big"


# Leading characters selecting the byte-order/alignment mode
MODE_PREFIXES: dict[str, Mode] = {
    "@": Mode.NATIVE,
    "=": Mode.STANDARD,
    "<": Mode.LITTLE,
    ">": Mode.BIG,
    "!": Mode.BIG,
}


class Category(Enum):
    INTEGER = "integer"
    FLOATING = "floating"
    BYTE = "byte"          # c, b, B, ?
    STRING = "string"      # s, p
    POINTER = "pointer"    # P
    PAD = "pad"            # x


@dataclass(frozen=True)
class TagInfo:
    """One row of the type-tag table.

    ``ctype`` names the C type whose native size/alignment the active ABI
    profile supplies; it is ``None`` for single-byte and string tags, which
    are never aligned.
    """

    tag: str
    category: Category
    standard_size: int
    ctype: str | None = None
    signed: bool = False
    description: str = ""


TAGS: dict[str, TagInfo] = {
    "x": TagInfo("x", Category.PAD, 1, description="pad byte"),
    "c": TagInfo("c", Category.BYTE, 1, description="char"),
    "b": TagInfo("b", Category.BYTE, 1, signed=True, description="signed char"),
    "B": TagInfo("B", Category.BYTE, 1, description="unsigned char"),
    "?": TagInfo("?", Category.BYTE, 1, description="bool"),
    "h": TagInfo("h", Category.INTEGER, 2, "short", True, "short"),
    "H": TagInfo("H", Category.INTEGER, 2, "short", False, "unsigned short"),
    "i": TagInfo("i", Category.INTEGER, 4, "int", True, "int"),
    "I": TagInfo("I", Category.INTEGER, 4, "int", False, "unsigned int"),
    "l": TagInfo("l", Category.INTEGER, 4, "long", True, "long"),
    "L": TagInfo("L", Category.INTEGER, 4, "long", False, "unsigned long"),
    "q": TagInfo("q", Category.INTEGER, 8, "longlong", True, "long long"),
    "Q": TagInfo("Q", Category.INTEGER, 8, "longlong", False, "unsigned long long"),
    "f": TagInfo("f", Category.FLOATING, 4, "float", True, "float"),
    "d": TagInfo("d", Category.FLOATING, 8, "double", True, "double"),
    "s": TagInfo("s", Category.STRING, 1, description="char[]"),
    "p": TagInfo("p", Category.STRING, 1, description="char[]"),
    "P": TagInfo("P", Category.POINTER, 0, "pointer", description="void *"),
}

# C types an ABI profile has to describe
CTYPES = ("short", "int", "long", "longlong", "float", "double", "pointer")


def lookup(tag: str, position: int | None = None) -> TagInfo:
    """Return the table entry for *tag* or raise :class:`InvalidFormat`."""
    info = TAGS.get(tag)
    if info is None:
        raise InvalidFormat(tag, position)
    return info
