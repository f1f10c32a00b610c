"""Field widths and native alignment padding.

Padding is only ever inserted *between* fields in native mode.  A layout
gets no implicit tail padding; a trailing zero-count tag such as the ``0l``
in ``"llh0l"`` is the way to ask for it.
"""

from __future__ import annotations

from pystruc.abi import AbiProfile
from pystruc.errors import UnsupportedMode
from pystruc.tags import Category, Mode, lookup


def size_of(mode: Mode, tag: str, abi: AbiProfile) -> int:
    """Return the encoded width of one scalar of *tag* under *mode*.

    For ``s``/``p`` this is the width of one character; the field width is
    the repeat count.
    """
    info = lookup(tag)
    if info.category is Category.POINTER:
        if mode is not Mode.NATIVE:
            raise UnsupportedMode(tag)
        return abi.pointer_size
    if mode is Mode.NATIVE and info.ctype is not None:
        return abi.size(info.ctype)
    return info.standard_size


def alignment_of(tag: str, abi: AbiProfile) -> int:
    """Return the native alignment of *tag* (1 for byte, string and pad tags)."""
    info = lookup(tag)
    if info.ctype is None:
        return 1
    return abi.alignment(info.ctype)


def padding(offset: int, alignment: int) -> int:
    pad = offset % alignment
    return 0 if pad == 0 else alignment - pad


def padding_before(offset: int, tag: str, abi: AbiProfile) -> int:
    """Number of filler bytes so that a *tag* field starting after *offset* is aligned."""
    return padding(offset, alignment_of(tag, abi))
