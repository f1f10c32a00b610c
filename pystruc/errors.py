"""Exceptions raised by the pystruc codec.

Every error derives from :class:`StrucError` and from the closest builtin
exception, so ``except ValueError`` style handlers keep working.
"""

from __future__ import annotations


class StrucError(Exception):
    """Base for all codec failures."""


class InvalidFormat(StrucError, ValueError):
    def __init__(self, tag: str, position: int | None = None):
        where = f" at position {position}" if position is not None else ""
        super().__init__(f"Encountered illegal type: {tag!r}{where}")
        self.tag = tag
        self.position = position


class UnsupportedMode(StrucError, ValueError):
    def __init__(self, tag: str = "P"):
        super().__init__(f"native byte order is required for the {tag} format")
        self.tag = tag


class TypeMismatch(StrucError, TypeError):
    def __init__(self, tag: str, value, expected: str):
        super().__init__(
            f"Format {tag!r} expects {expected}, got {type(value).__name__}"
        )
        self.tag = tag
        self.value = value
        self.expected = expected


class LengthMismatch(StrucError, ValueError):
    """A fixed-length string or array does not match its field length."""

    def __init__(self, expected: int, actual: int, what: str = "array"):
        if what == "string":
            msg = f"String has wrong length {actual}, expected {expected}"
        elif actual < expected:
            msg = f"Provided {what} too small ({actual}), expected {expected}"
        else:
            msg = f"Provided {what} too large ({actual}), expected {expected}"
        super().__init__(msg)
        self.expected = expected
        self.actual = actual

    @property
    def too_small(self) -> bool:
        return self.actual < self.expected

    @property
    def too_large(self) -> bool:
        return self.actual > self.expected


class TooManyArguments(StrucError, ValueError):
    def __init__(self, surplus: int, operation: str = "pack"):
        super().__init__(f"Extra {surplus} arguments to {operation}")
        self.surplus = surplus
        self.operation = operation


class TooFewArguments(StrucError, ValueError):
    def __init__(self, missing: int, operation: str = "pack"):
        super().__init__(f"Missing {missing} arguments to {operation}")
        self.missing = missing
        self.operation = operation


class EncodeOverflow(StrucError, OverflowError):
    def __init__(self, value: float, width: int, reason: str = "too large to represent"):
        super().__init__(f"value {value!r} {reason} in {width}-bit IEEE format")
        self.value = value
        self.width = width


class DecodeUnsupported(StrucError, ValueError):
    def __init__(self, width: int):
        super().__init__(
            f"special values not representable ({width}-bit pattern has all-ones exponent)"
        )
        self.width = width


class BufferTooSmall(StrucError, ValueError):
    def __init__(self, required: int, available: int):
        super().__init__(
            f"buffer too small: layout needs {required} bytes, {available} available"
        )
        self.required = required
        self.available = available
