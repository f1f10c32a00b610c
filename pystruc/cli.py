"""Command-line interface for pystruc."""

from __future__ import annotations

import argparse
import ast
import json
import logging
import sys

from pystruc.abi import AbiProfile
from pystruc.config import load_layouts, load_profiles
from pystruc.engine import FormatDescriptor
from pystruc.errors import StrucError
from pystruc.values import Pointer


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="pystruc",
        description="Compute sizes of, pack and unpack binary layouts described by format patterns.",
    )
    parser.add_argument("--abi", default="host",
                        help="ABI profile used for native (@) layouts (default: host)")
    parser.add_argument("--profiles", default=None,
                        help="Path to a YAML ABI profile file")
    parser.add_argument("--json", dest="output_json", action="store_true",
                        help="Output results as JSON")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Enable debug logging")
    sub = parser.add_subparsers(dest="command")

    # --- calcsize ---
    cs_p = sub.add_parser("calcsize", help="Print the byte size of a layout")
    cs_p.add_argument("pattern", help="Format pattern, e.g. '<2hI10s'")

    # --- pack ---
    pk_p = sub.add_parser("pack", help="Pack values and print the bytes as hex")
    pk_p.add_argument("pattern", help="Format pattern")
    pk_p.add_argument("values", nargs="*",
                      help="Values as Python literals (1, 2.5, b'ab', None for a null pointer)")

    # --- unpack ---
    up_p = sub.add_parser("unpack", help="Unpack hex-encoded bytes")
    up_p.add_argument("pattern", help="Format pattern")
    up_p.add_argument("data", nargs="+", help="Hex bytes, spaces allowed")

    # --- profiles ---
    sub.add_parser("profiles", help="List the available ABI profiles")

    # --- layouts ---
    ly_p = sub.add_parser("layouts", help="List the layouts defined in a YAML file")
    ly_p.add_argument("config", help="Path to a YAML layout file")

    return parser


def _parse_value(text: str):
    """Interpret a command-line value as a Python literal, else as a str."""
    try:
        value = ast.literal_eval(text)
    except (ValueError, SyntaxError):
        return text
    if value is None:
        return Pointer(0)
    return value


def _to_json(value):
    if isinstance(value, bytes):
        return value.hex()
    if isinstance(value, Pointer):
        return value.address
    if isinstance(value, list):
        return [_to_json(v) for v in value]
    return value


def _profile(args) -> AbiProfile:
    profiles = load_profiles(args.profiles)
    try:
        return profiles[args.abi]
    except KeyError:
        raise StrucError(
            f"Unknown ABI profile {args.abi!r} (available: {', '.join(sorted(profiles))})"
        ) from None


def cmd_calcsize(args) -> int:
    """Execute the ``calcsize`` subcommand."""
    desc = FormatDescriptor(args.pattern, _profile(args))
    size = desc.calcsize()
    if args.output_json:
        print(json.dumps({
            "pattern": desc.pattern,
            "mode": desc.mode.value,
            "abi": desc.abi.name,
            "size": size,
            "items": desc.item_count,
            "alignment": desc.alignment,
        }, indent=2))
    else:
        print(size)
    return 0


def cmd_pack(args) -> int:
    """Execute the ``pack`` subcommand."""
    desc = FormatDescriptor(args.pattern, _profile(args))
    data = desc.pack(*[_parse_value(v) for v in args.values])
    if args.output_json:
        print(json.dumps({"pattern": desc.pattern, "size": len(data), "hex": data.hex()}, indent=2))
    else:
        print(data.hex(" "))
    return 0


def cmd_unpack(args) -> int:
    """Execute the ``unpack`` subcommand."""
    desc = FormatDescriptor(args.pattern, _profile(args))
    try:
        data = bytes.fromhex("".join(args.data))
    except ValueError as exc:
        print(f"Error: invalid hex data: {exc}", file=sys.stderr)
        return 1
    values = desc.unpack_values(data)
    if args.output_json:
        print(json.dumps([_to_json(v) for v in values], indent=2))
    else:
        for v in values:
            print(repr(v))
    return 0


def cmd_profiles(args) -> int:
    """Execute the ``profiles`` subcommand."""
    profiles = load_profiles(args.profiles)
    if args.output_json:
        print(json.dumps({name: p.to_dict() for name, p in profiles.items()}, indent=2))
        return 0
    for name, p in profiles.items():
        floats = "ieee" if p.float_ieee and p.double_ieee else "software"
        print(f"{name:<16} {p.byteorder:<7} long={p.size('long')} "
              f"pointer={p.pointer_size} floats={floats}")
        if p.description:
            print(f"  {p.description}")
    return 0


def cmd_layouts(args) -> int:
    """Execute the ``layouts`` subcommand."""
    profiles = load_profiles(args.profiles)
    layouts = load_layouts(args.config)
    rows = []
    for layout in layouts:
        desc = layout.descriptor(profiles)
        rows.append({
            "name": layout.name,
            "pattern": layout.pattern,
            "abi": desc.abi.name,
            "size": desc.calcsize(),
            "fields": layout.fields,
            "description": layout.description,
        })
    if args.output_json:
        print(json.dumps(rows, indent=2))
    else:
        for row in rows:
            print(f"{row['name']}: {row['pattern']!r} ({row['size']} bytes, abi={row['abi']})")
            if row["description"]:
                print(f"  {row['description']}")
            if row["fields"]:
                print(f"  fields: {', '.join(row['fields'])}")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point for the CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format="%(levelname)s %(name)s: %(message)s")

    if args.command is None:
        parser.print_help()
        return 0

    dispatch = {
        "calcsize": cmd_calcsize,
        "pack": cmd_pack,
        "unpack": cmd_unpack,
        "profiles": cmd_profiles,
        "layouts": cmd_layouts,
    }
    handler = dispatch.get(args.command)
    if handler is None:
        parser.print_help()
        return 1
    try:
        return handler(args)
    except (StrucError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
