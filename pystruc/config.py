"""Configuration system for ABI profiles and named layouts.

Loads YAML files that describe C ABIs (type sizes, alignments, byte order,
float format) and named record layouts built from format patterns.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from pystruc.abi import HOST, AbiProfile
from pystruc.engine import FormatDescriptor
from pystruc.tags import CTYPES

logger = logging.getLogger(__name__)

DEFAULT_PROFILES = Path(__file__).parent / "configs" / "abi_profiles.yaml"


@dataclass
class LayoutDefinition:
    """A named record layout: a format pattern plus optional field names."""

    name: str
    pattern: str
    fields: list[str] = field(default_factory=list)
    description: str = ""
    abi: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def descriptor(self, profiles: dict[str, AbiProfile] | None = None) -> FormatDescriptor:
        """Build the :class:`FormatDescriptor` for this layout.

        *profiles* resolves the ``abi`` name; the shipped profiles are used
        when it is omitted.
        """
        if self.abi is None:
            return FormatDescriptor(self.pattern)
        if profiles is None:
            profiles = load_profiles()
        try:
            profile = profiles[self.abi]
        except KeyError:
            raise ValueError(f"Layout {self.name!r} names unknown ABI profile {self.abi!r}") from None
        return FormatDescriptor(self.pattern, profile)

    @property
    def size(self) -> int:
        return self.descriptor().calcsize()

    def unpack_dict(self, buffer, profiles: dict[str, AbiProfile] | None = None) -> dict[str, Any]:
        """Decode *buffer* and map each field name to its value."""
        values = self.descriptor(profiles).unpack_values(buffer)
        if len(self.fields) != len(values):
            raise ValueError(
                f"Layout {self.name!r} names {len(self.fields)} fields "
                f"but its pattern yields {len(values)} items"
            )
        return dict(zip(self.fields, values))


def _parse_profile(data: dict) -> AbiProfile:
    """Build an :class:`AbiProfile` from a dictionary.

    ``types`` maps each C type name to ``{size, align}``; ``align`` defaults
    to ``size``.
    """
    name = data["name"]
    byteorder = data.get("byteorder", "little")
    if byteorder not in ("little", "big"):
        raise ValueError(f"Profile {name!r}: byteorder must be 'little' or 'big', got {byteorder!r}")

    types = data.get("types", {})
    missing = [ctype for ctype in CTYPES if ctype not in types]
    if missing:
        raise ValueError(f"Profile {name!r} is missing C types: {', '.join(missing)}")

    sizes = {}
    alignments = {}
    for ctype in CTYPES:
        entry = types[ctype]
        if isinstance(entry, int):
            entry = {"size": entry}
        if "size" not in entry:
            raise ValueError(f"Profile {name!r}: {ctype} has no size")
        sizes[ctype] = int(entry["size"])
        alignments[ctype] = int(entry.get("align", entry["size"]))
        if sizes[ctype] <= 0 or alignments[ctype] <= 0:
            raise ValueError(f"Profile {name!r}: {ctype} size and alignment must be positive")
        if sizes[ctype] % alignments[ctype]:
            raise ValueError(
                f"Profile {name!r}: {ctype} size {sizes[ctype]} is not a multiple of its alignment {alignments[ctype]}"
            )

    for ctype, width in (("float", 4), ("double", 8)):
        if sizes[ctype] != width:
            raise ValueError(f"Profile {name!r}: {ctype} must be {width} bytes wide")

    return AbiProfile(
        name=name,
        byteorder=byteorder,
        sizes=sizes,
        alignments=alignments,
        float_ieee=data.get("float_ieee", True),
        double_ieee=data.get("double_ieee", True),
        description=data.get("description", ""),
    )


def _parse_layout(data: dict) -> LayoutDefinition:
    """Build a :class:`LayoutDefinition` from a dictionary."""
    return LayoutDefinition(
        name=data["name"],
        pattern=data["pattern"],
        fields=list(data.get("fields", [])),
        description=data.get("description", ""),
        abi=data.get("abi"),
        metadata=data.get("metadata", {}),
    )


def _read_yaml(path: Path) -> dict:
    with open(path, "r") as fh:
        data = yaml.safe_load(fh)
    return data or {}


def load_profiles(path: str | Path | None = None) -> dict[str, AbiProfile]:
    """Load ABI profiles from a YAML file.

    Parameters
    ----------
    path : str or Path, optional
        Path to a YAML profile file.  When *None* the built-in
        ``abi_profiles.yaml`` shipped with the package is used.

    Returns
    -------
    dict[str, AbiProfile]
        Profiles keyed by name.  The detected host is always present as
        ``"host"``.
    """
    path = DEFAULT_PROFILES if path is None else Path(path)
    data = _read_yaml(path)

    profiles = {"host": HOST}
    for entry in data.get("profiles", []):
        profile = _parse_profile(entry)
        profiles[profile.name] = profile
    logger.debug("Loaded %d ABI profiles from %s", len(profiles) - 1, path)
    return profiles


def load_layouts(path: str | Path) -> list[LayoutDefinition]:
    """Load named layout definitions from a YAML file."""
    path = Path(path)
    data = _read_yaml(path)
    layouts = [_parse_layout(entry) for entry in data.get("layouts", [])]
    logger.debug("Loaded %d layouts from %s", len(layouts), path)
    return layouts
