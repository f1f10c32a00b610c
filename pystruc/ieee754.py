"""Software IEEE 754 binary32/binary64 encoder and decoder.

Builds and takes apart the bit patterns by hand (sign, biased exponent,
mantissa) without relying on the host's float representation.  The native
codec falls back to these routines whenever an ABI profile reports that its
``float`` or ``double`` is not IEEE 754.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from pystruc.errors import DecodeUnsupported, EncodeOverflow


@dataclass(frozen=True)
class BinaryFormat:
    """Field layout of an IEEE 754 binary interchange format."""

    width: int
    exponent_bits: int
    mantissa_bits: int
    bias: int

    @property
    def max_exponent(self) -> int:
        """The reserved all-ones biased exponent (inf/NaN)."""
        return (1 << self.exponent_bits) - 1

    @property
    def min_exponent(self) -> int:
        """Smallest unbiased exponent of a normal number."""
        return 1 - self.bias

    @property
    def byte_width(self) -> int:
        return self.width // 8


BINARY32 = BinaryFormat(width=32, exponent_bits=8, mantissa_bits=23, bias=127)
BINARY64 = BinaryFormat(width=64, exponent_bits=11, mantissa_bits=52, bias=1023)

FORMATS = {32: BINARY32, 64: BINARY64}


def _format(width: int) -> BinaryFormat:
    fmt = FORMATS.get(width)
    if fmt is None:
        raise ValueError(f"Unsupported float width: {width!r}")
    return fmt


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------

def float_to_bits(value: float, width: int) -> int:
    """Return the IEEE 754 bit pattern of *value* as an unsigned integer.

    The magnitude is split with :func:`math.frexp` into a fraction in
    ``[1, 2)`` and an unbiased exponent.  Values below the normal range are
    shifted into a subnormal mantissa.  The mantissa is rounded to nearest
    with ties rounded up; a carry out of the mantissa bumps the exponent.

    Raises
    ------
    EncodeOverflow
        If the biased exponent would reach the reserved all-ones value, or
        *value* is infinite or NaN.
    """
    fmt = _format(width)
    value = float(value)
    if math.isnan(value):
        raise EncodeOverflow(value, width, "is not representable")

    sign = 1 if math.copysign(1.0, value) < 0 else 0
    value = abs(value)
    if math.isinf(value):
        raise EncodeOverflow(value, width)

    fraction, exponent = math.frexp(value)
    if value == 0.0:
        exponent = 0
    else:
        # frexp gives a fraction in [0.5, 1); IEEE wants [1, 2)
        fraction *= 2.0
        exponent -= 1

    if exponent > fmt.bias:
        raise EncodeOverflow(value, width)
    elif exponent < fmt.min_exponent:
        # Subnormal: no hidden bit, exponent field is zero
        fraction = math.ldexp(fraction, exponent - fmt.min_exponent)
        exponent = 0
    elif value != 0.0:
        exponent += fmt.bias
        fraction -= 1.0

    # Exact round-half-up: ldexp and the remainder are free of rounding error
    scaled = math.ldexp(fraction, fmt.mantissa_bits)
    mantissa = int(scaled)
    if scaled - mantissa >= 0.5:
        mantissa += 1
    if mantissa >> fmt.mantissa_bits:
        mantissa = 0
        exponent += 1
        if exponent >= fmt.max_exponent:
            raise EncodeOverflow(value, width)

    return (sign << (width - 1)) | (exponent << fmt.mantissa_bits) | mantissa


def encode_float(value: float, width: int, byteorder: str = "little") -> bytes:
    """Encode *value* as a *width*-bit IEEE 754 float.

    Parameters
    ----------
    value : float
        Value to encode.
    width : int
        ``32`` or ``64``.
    byteorder : str
        ``"little"`` (least significant byte first) or ``"big"``.
    """
    bits = float_to_bits(value, width)
    return bits.to_bytes(width // 8, byteorder)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------

def bits_to_float(bits: int, width: int) -> float:
    """Rebuild a float from an IEEE 754 bit pattern.

    Raises :class:`DecodeUnsupported` for the all-ones exponent (inf/NaN).
    """
    fmt = _format(width)
    sign = (bits >> (width - 1)) & 1
    exponent = (bits >> fmt.mantissa_bits) & fmt.max_exponent
    mantissa = bits & ((1 << fmt.mantissa_bits) - 1)

    if exponent == fmt.max_exponent:
        raise DecodeUnsupported(width)

    value = mantissa / (1 << fmt.mantissa_bits)
    if exponent == 0:
        exponent = fmt.min_exponent
    else:
        value += 1.0
        exponent -= fmt.bias
    value = math.ldexp(value, exponent)
    return -value if sign else value


def decode_float(data: bytes, width: int, byteorder: str = "little") -> float:
    """Decode a *width*-bit IEEE 754 float stored in *byteorder*."""
    fmt = _format(width)
    if len(data) != fmt.byte_width:
        raise ValueError(f"Expected exactly {fmt.byte_width} bytes, got {len(data)}")
    return bits_to_float(int.from_bytes(data, byteorder), width)
