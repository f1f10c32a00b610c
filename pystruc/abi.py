"""Native C ABI description used by ``@`` (native) mode.

The profile of the running interpreter is detected once, eagerly, when this
module is imported.  Other profiles (ILP32, LLP64, big-endian, soft-float)
are loaded from YAML by :mod:`pystruc.config` and let native layouts of
other platforms be produced and read on any host.
"""

from __future__ import annotations

import ctypes
import logging
import sys
from dataclasses import dataclass, field

from pystruc.tags import CTYPES

logger = logging.getLogger(__name__)

_HOST_CTYPES = {
    "short": ctypes.c_short,
    "int": ctypes.c_int,
    "long": ctypes.c_long,
    "longlong": ctypes.c_longlong,
    "float": ctypes.c_float,
    "double": ctypes.c_double,
    "pointer": ctypes.c_void_p,
}

# Probe values whose IEEE-754 bit patterns (little-endian) are known
_FLOAT_PROBE = (16711938.0, b"\x02\x01\x7f\x4b")
_DOUBLE_PROBE = (9006104071832581.0, b"\x05\x04\x03\x02\x01\xff\x3f\x43")


@dataclass(frozen=True, eq=False)
class AbiProfile:
    """Sizes, alignments, byte order and float format of one C ABI."""

    name: str
    byteorder: str = "little"
    sizes: dict[str, int] = field(default_factory=dict)
    alignments: dict[str, int] = field(default_factory=dict)
    float_ieee: bool = True
    double_ieee: bool = True
    description: str = ""

    def size(self, ctype: str) -> int:
        return self.sizes[ctype]

    def alignment(self, ctype: str) -> int:
        return self.alignments[ctype]

    def is_ieee(self, width: int) -> bool:
        """Return True if floats of *width* bits are IEEE-754 on this ABI."""
        return self.float_ieee if width == 32 else self.double_ieee

    @property
    def pointer_size(self) -> int:
        return self.sizes["pointer"]

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "byteorder": self.byteorder,
            "sizes": dict(self.sizes),
            "alignments": dict(self.alignments),
            "float_ieee": self.float_ieee,
            "double_ieee": self.double_ieee,
            "description": self.description,
        }


def _probe_ieee(ctype, probe: tuple[float, bytes]) -> bool:
    value, expected = probe
    if sys.byteorder == "big":
        expected = expected[::-1]
    return bytes(ctype(value)) == expected


def detect_host() -> AbiProfile:
    """Describe the ABI of the running interpreter via :mod:`ctypes`."""
    profile = AbiProfile(
        name="host",
        byteorder=sys.byteorder,
        sizes={name: ctypes.sizeof(_HOST_CTYPES[name]) for name in CTYPES},
        alignments={name: ctypes.alignment(_HOST_CTYPES[name]) for name in CTYPES},
        float_ieee=_probe_ieee(ctypes.c_float, _FLOAT_PROBE),
        double_ieee=(ctypes.sizeof(ctypes.c_double) == 8
                     and _probe_ieee(ctypes.c_double, _DOUBLE_PROBE)),
        description="ABI of the running interpreter",
    )
    logger.debug(
        "Detected host ABI: byteorder=%s sizes=%s float_ieee=%s double_ieee=%s",
        profile.byteorder, profile.sizes, profile.float_ieee, profile.double_ieee,
    )
    return profile


HOST = detect_host()


def host_float_bits(value: float, width: int) -> int:
    """Reinterpret *value* as the host's native float/double bit pattern."""
    ctype = ctypes.c_float if width == 32 else ctypes.c_double
    return int.from_bytes(bytes(ctype(value)), sys.byteorder)


def host_float_from_bits(bits: int, width: int) -> float:
    """Inverse of :func:`host_float_bits`."""
    ctype = ctypes.c_float if width == 32 else ctypes.c_double
    raw = bits.to_bytes(width // 8, sys.byteorder)
    return ctype.from_buffer_copy(raw).value
