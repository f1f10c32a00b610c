"""pystruc - Pack and unpack binary layouts described by struct-style format patterns."""

__version__ = "0.1.0"

from pystruc.abi import HOST, AbiProfile, detect_host
from pystruc.config import LayoutDefinition, load_layouts, load_profiles
from pystruc.engine import (
    FormatDescriptor,
    calcsize,
    descriptor,
    pack,
    pack_into,
    unpack,
    unpack_values,
)
from pystruc.errors import (
    BufferTooSmall,
    DecodeUnsupported,
    EncodeOverflow,
    InvalidFormat,
    LengthMismatch,
    StrucError,
    TooFewArguments,
    TooManyArguments,
    TypeMismatch,
    UnsupportedMode,
)
from pystruc.tags import Mode
from pystruc.values import NULL, Pointer, Slot, ValueKind

__all__ = [
    "HOST",
    "AbiProfile",
    "detect_host",
    "LayoutDefinition",
    "load_layouts",
    "load_profiles",
    "FormatDescriptor",
    "calcsize",
    "descriptor",
    "pack",
    "pack_into",
    "unpack",
    "unpack_values",
    "BufferTooSmall",
    "DecodeUnsupported",
    "EncodeOverflow",
    "InvalidFormat",
    "LengthMismatch",
    "StrucError",
    "TooFewArguments",
    "TooManyArguments",
    "TypeMismatch",
    "UnsupportedMode",
    "Mode",
    "NULL",
    "Pointer",
    "Slot",
    "ValueKind",
]
