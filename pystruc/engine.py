"""Format descriptors and the pack / unpack / calcsize operations.

A :class:`FormatDescriptor` only extracts the mode prefix when it is built.
Each operation then walks the descriptor body with a fresh
:class:`~pystruc.cursor.DescriptorCursor`, pulling a token whenever the
active one is used up and consuming caller values (or slots) in lockstep:

* ``x`` advances the offset and consumes nothing;
* ``s``/``p`` consume one value whose length is the repeat count;
* a zero count consumes nothing (in native mode it still aligns, which is
  how ``"llh0l"`` gets its tail padding);
* every other tag consumes one value per repetition, or one list/tuple
  covering all remaining repetitions.
"""

from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Iterable

from pystruc.abi import HOST, AbiProfile
from pystruc.cursor import DescriptorCursor
from pystruc.errors import (
    BufferTooSmall,
    LengthMismatch,
    TooFewArguments,
    TooManyArguments,
    TypeMismatch,
)
from pystruc.layout import alignment_of, padding_before, size_of
from pystruc.scalar import (
    latin1_bytes,
    pack_scalar,
    pack_string,
    unpack_scalar,
    unpack_string,
)
from pystruc.tags import MODE_PREFIXES, Category, Mode, lookup
from pystruc.values import Slot, ValueKind, classify, convert, default_slot

logger = logging.getLogger(__name__)


class FormatDescriptor:
    """A parsed format pattern: its mode and the remaining descriptor body.

    Parameters
    ----------
    pattern : str
        Format text, e.g. ``"<2hI10s"``.
    abi : AbiProfile, optional
        ABI used for native (``@``) sizes, alignment, byte order and float
        format.  Defaults to the detected host.
    """

    def __init__(self, pattern: str, abi: AbiProfile | None = None):
        self._pattern = pattern
        self._abi = abi if abi is not None else HOST
        mode = MODE_PREFIXES.get(pattern[:1])
        if mode is None:
            self._mode = Mode.NATIVE
            self._body = pattern
        else:
            self._mode = mode
            self._body = pattern[1:]
        logger.debug("Descriptor %r: mode=%s abi=%s", pattern, self._mode.value, self._abi.name)

    @property
    def pattern(self) -> str:
        return self._pattern

    @property
    def mode(self) -> Mode:
        return self._mode

    @property
    def body(self) -> str:
        return self._body

    @property
    def abi(self) -> AbiProfile:
        return self._abi

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self._pattern!r}, abi={self._abi.name!r})"

    # ------------------------------------------------------------------
    # Size computation
    # ------------------------------------------------------------------

    def _scan(self, cursor: DescriptorCursor) -> tuple[int, int]:
        """Consume the rest of *cursor*; return ``(end_offset, item_count)``."""
        native = self._mode is Mode.NATIVE
        offset = cursor.offset
        items = 0
        for count, tag in cursor:
            category = lookup(tag).category
            if native:
                offset += padding_before(offset, tag, self._abi)
                cursor.note_alignment(alignment_of(tag, self._abi))
            if category is Category.PAD:
                offset += count
            elif category is Category.STRING:
                offset += count
                items += 1
            else:
                offset += size_of(self._mode, tag, self._abi) * count
                items += count
        cursor.offset = offset
        return offset, items

    def calcsize(self) -> int:
        """Byte size of the layout (inter-field padding included, no tail padding)."""
        size, _ = self._scan(DescriptorCursor(self._body))
        return size

    @property
    def size(self) -> int:
        return self.calcsize()

    @property
    def item_count(self) -> int:
        """Number of values :meth:`pack` expects."""
        _, items = self._scan(DescriptorCursor(self._body))
        return items

    @property
    def alignment(self) -> int:
        """Largest native alignment among the fields (1 outside native mode)."""
        cursor = DescriptorCursor(self._body)
        self._scan(cursor)
        return cursor.max_alignment

    # ------------------------------------------------------------------
    # Traversal
    # ------------------------------------------------------------------

    def _advance(self, cursor: DescriptorCursor, fill) -> bool:
        """Make sure a value-consuming token is active.

        Applies pad and zero-count tokens on the way (zero-filling skipped
        bytes when *fill* is a writable view).  Returns False once the
        descriptor is exhausted.
        """
        native = self._mode is Mode.NATIVE
        while cursor.remaining == 0:
            token = cursor.next_token()
            if token is None:
                return False
            category = lookup(token.tag).category
            if category is Category.PAD:
                skip = token.count
            elif category is Category.STRING:
                cursor.remaining = 1
                continue
            elif token.count == 0:
                if not native:
                    continue
                skip = padding_before(cursor.offset, token.tag, self._abi)
                cursor.note_alignment(alignment_of(token.tag, self._abi))
            else:
                cursor.remaining = token.count
                continue
            if fill is not None and skip:
                fill[cursor.offset:cursor.offset + skip] = bytes(skip)
            cursor.offset += skip
        return True

    def _finish(self, cursor: DescriptorCursor, fill, given: int, used: int,
                operation: str) -> None:
        if used < given:
            raise TooManyArguments(given - used, operation)
        self._advance(cursor, fill)
        missing = cursor.remaining
        if missing:
            cursor.remaining = 0
            missing += self._scan(cursor)[1]
            raise TooFewArguments(missing, operation)

    def _note(self, cursor: DescriptorCursor, tag: str) -> None:
        if self._mode is Mode.NATIVE:
            cursor.note_alignment(alignment_of(tag, self._abi))

    # ------------------------------------------------------------------
    # Packing
    # ------------------------------------------------------------------

    def _pack_value(self, cursor: DescriptorCursor, view, value: Any) -> None:
        tag = cursor.tag
        category = lookup(tag).category
        kind = classify(value)

        if category is Category.STRING:
            cursor.offset = pack_string(tag, cursor.count, value, view, cursor.offset)
            cursor.remaining = 0
        elif kind is ValueKind.ARRAY or (tag == "c" and kind is ValueKind.BYTES and len(value) != 1):
            if len(value) != cursor.remaining:
                raise LengthMismatch(cursor.remaining, len(value))
            if isinstance(value, str):
                elements: Iterable = latin1_bytes(tag, value)
            else:
                elements = value
            for element in elements:
                cursor.offset = pack_scalar(self._mode, self._abi, tag, element,
                                            view, cursor.offset)
            cursor.remaining = 0
        else:
            cursor.offset = pack_scalar(self._mode, self._abi, tag, value, view, cursor.offset)
            cursor.remaining -= 1
        self._note(cursor, tag)

    def _pack(self, view, values: tuple) -> None:
        cursor = DescriptorCursor(self._body)
        used = 0
        for value in values:
            if not self._advance(cursor, view):
                break
            self._pack_value(cursor, view, value)
            used += 1
        self._finish(cursor, view, len(values), used, "pack")

    def pack(self, *values: Any) -> bytes:
        """Return *values* serialized into a new buffer of :meth:`calcsize` bytes."""
        buffer = bytearray(self.calcsize())
        self._pack(memoryview(buffer), values)
        return bytes(buffer)

    def pack_into(self, buffer, *values: Any, offset: int = 0) -> None:
        """Serialize *values* into the writable *buffer* starting at *offset*.

        Padding bytes inside the layout are zeroed, so the written bytes are
        identical to :meth:`pack`.
        """
        size = self.calcsize()
        view = _byte_view(buffer)
        if view.readonly:
            raise TypeError("pack_into requires a writable buffer")
        if offset < 0 or len(view) - offset < size:
            raise BufferTooSmall(offset + size, len(view))
        self._pack(view[offset:offset + size], values)

    # ------------------------------------------------------------------
    # Unpacking
    # ------------------------------------------------------------------

    def _unpack_slot(self, cursor: DescriptorCursor, view, slot: Slot) -> None:
        tag = cursor.tag
        category = lookup(tag).category

        if not isinstance(slot, Slot):
            raise TypeMismatch(tag, slot, "a Slot")

        if category is Category.STRING:
            if slot.kind is not ValueKind.BYTES:
                raise TypeMismatch(tag, slot, "a bytes slot")
            if slot.length is not None and slot.length != cursor.count:
                raise LengthMismatch(cursor.count, slot.length, "string")
            slot.value, cursor.offset = unpack_string(cursor.count, view, cursor.offset)
            cursor.remaining = 0
        elif slot.kind is ValueKind.ARRAY or (tag == "c" and slot.kind is ValueKind.BYTES):
            if slot.length is not None and slot.length != cursor.remaining:
                raise LengthMismatch(cursor.remaining, slot.length)
            element = ValueKind.CHAR if slot.kind is ValueKind.BYTES else slot.element
            elements = []
            for _ in range(cursor.remaining):
                raw, cursor.offset = unpack_scalar(self._mode, self._abi, tag, view, cursor.offset)
                elements.append(convert(element, tag, raw))
            slot.value = b"".join(elements) if slot.kind is ValueKind.BYTES else elements
            cursor.remaining = 0
        else:
            raw, cursor.offset = unpack_scalar(self._mode, self._abi, tag, view, cursor.offset)
            slot.value = convert(slot.kind, tag, raw)
            cursor.remaining -= 1
        self._note(cursor, tag)

    def _unpack(self, buffer, slots: tuple, offset: int = 0) -> tuple:
        size = self.calcsize()
        view = _byte_view(buffer)
        if offset < 0 or len(view) - offset < size:
            raise BufferTooSmall(offset + size, len(view))
        view = view[offset:offset + size]

        cursor = DescriptorCursor(self._body)
        used = 0
        for slot in slots:
            if not self._advance(cursor, None):
                break
            self._unpack_slot(cursor, view, slot)
            used += 1
        self._finish(cursor, None, len(slots), used, "unpack")
        return tuple(slot.value for slot in slots)

    def unpack(self, buffer, *slots: Slot, offset: int = 0) -> tuple:
        """Decode *buffer* into the caller's *slots*, in place.

        Returns the slot values as a tuple for convenience.
        """
        return self._unpack(buffer, slots, offset)

    def default_slots(self) -> list[Slot]:
        """One default slot per item, as used by :meth:`unpack_values`."""
        slots = []
        for count, tag in DescriptorCursor(self._body):
            category = lookup(tag).category
            if category is Category.PAD:
                continue
            if category is Category.STRING:
                slots.append(default_slot(tag))
            else:
                slots.extend(default_slot(tag) for _ in range(count))
        return slots

    def unpack_values(self, buffer, offset: int = 0) -> tuple:
        """Decode *buffer* into a tuple of plain Python values."""
        return self._unpack(buffer, tuple(self.default_slots()), offset)


def _byte_view(buffer) -> memoryview:
    view = memoryview(buffer)
    if view.format != "B" or view.ndim != 1:
        view = view.cast("B")
    return view


# ---------------------------------------------------------------------------
# Module-level helpers
# ---------------------------------------------------------------------------

@lru_cache(maxsize=256)
def _descriptor(pattern: str, abi: AbiProfile) -> FormatDescriptor:
    return FormatDescriptor(pattern, abi)


def descriptor(pattern: str, abi: AbiProfile | None = None) -> FormatDescriptor:
    """Return a (cached) :class:`FormatDescriptor` for *pattern*."""
    return _descriptor(pattern, abi if abi is not None else HOST)


def calcsize(pattern: str, abi: AbiProfile | None = None) -> int:
    return descriptor(pattern, abi).calcsize()


def pack(pattern: str, *values: Any, abi: AbiProfile | None = None) -> bytes:
    return descriptor(pattern, abi).pack(*values)


def pack_into(pattern: str, buffer, *values: Any, offset: int = 0,
              abi: AbiProfile | None = None) -> None:
    descriptor(pattern, abi).pack_into(buffer, *values, offset=offset)


def unpack(pattern: str, buffer, *slots: Slot, offset: int = 0,
           abi: AbiProfile | None = None) -> tuple:
    return descriptor(pattern, abi).unpack(buffer, *slots, offset=offset)


def unpack_values(pattern: str, buffer, offset: int = 0,
                  abi: AbiProfile | None = None) -> tuple:
    return descriptor(pattern, abi).unpack_values(buffer, offset)
