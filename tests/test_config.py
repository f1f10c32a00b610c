"""Tests for pystruc.config."""

import pytest

from pystruc.abi import HOST
from pystruc.config import (
    LayoutDefinition,
    _parse_profile,
    load_layouts,
    load_profiles,
)
from pystruc.engine import pack


def _types(**overrides):
    types = {
        "short": 2, "int": 4, "long": 8, "longlong": 8,
        "float": 4, "double": 8, "pointer": 8,
    }
    types.update(overrides)
    return types


class TestParseProfile:
    def test_plain_sizes_align_to_size(self):
        profile = _parse_profile({"name": "x", "types": _types()})
        assert profile.size("long") == 8
        assert profile.alignment("long") == 8
        assert profile.byteorder == "little"
        assert profile.float_ieee and profile.double_ieee

    def test_explicit_alignment(self):
        profile = _parse_profile({"name": "x", "types": _types(double={"size": 8, "align": 4})})
        assert profile.alignment("double") == 4

    def test_missing_ctype(self):
        types = _types()
        del types["pointer"]
        with pytest.raises(ValueError, match="missing C types: pointer"):
            _parse_profile({"name": "x", "types": types})

    def test_missing_size(self):
        with pytest.raises(ValueError, match="has no size"):
            _parse_profile({"name": "x", "types": _types(int={"align": 4})})

    def test_bad_byteorder(self):
        with pytest.raises(ValueError, match="byteorder"):
            _parse_profile({"name": "x", "byteorder": "middle", "types": _types()})

    def test_bad_float_width(self):
        with pytest.raises(ValueError, match="double must be 8 bytes"):
            _parse_profile({"name": "x", "types": _types(double=12)})

    def test_size_not_multiple_of_alignment(self):
        with pytest.raises(ValueError, match="short size 2 is not a multiple of its alignment 4"):
            _parse_profile({"name": "x", "types": _types(short={"size": 2, "align": 4})})

    def test_alignment_smaller_than_size(self):
        profile = _parse_profile({"name": "x", "types": _types(longlong={"size": 8, "align": 4})})
        assert profile.alignment("longlong") == 4

    def test_non_positive_size(self):
        with pytest.raises(ValueError, match="positive"):
            _parse_profile({"name": "x", "types": _types(short=0)})


class TestLoadProfiles:
    def test_shipped_profiles(self, profiles):
        assert set(profiles) == {"host", "lp64", "ilp32", "llp64", "lp64-be", "lp64-softfloat"}
        assert profiles["host"] is HOST

    def test_shipped_values(self, profiles):
        assert profiles["lp64"].size("long") == 8
        assert profiles["ilp32"].pointer_size == 4
        assert profiles["ilp32"].alignment("longlong") == 4
        assert profiles["llp64"].size("long") == 4
        assert profiles["lp64-be"].byteorder == "big"
        assert not profiles["lp64-softfloat"].is_ieee(32)
        assert not profiles["lp64-softfloat"].is_ieee(64)

    def test_user_file(self, profiles_file):
        profiles = load_profiles(profiles_file)
        assert set(profiles) == {"host", "tiny"}
        tiny = profiles["tiny"]
        assert tiny.byteorder == "big"
        assert tiny.size("int") == 2
        assert tiny.alignment("short") == 2
        assert tiny.alignment("long") == 2
        assert tiny.description == "16-bit ints, 32-bit pointers"

    def test_to_dict(self, lp64):
        d = lp64.to_dict()
        assert d["name"] == "lp64"
        assert d["sizes"]["pointer"] == 8


class TestLayouts:
    def test_load(self, layouts_file):
        layouts = load_layouts(layouts_file)
        assert [l.name for l in layouts] == ["header", "record", "point"]
        header = layouts[0]
        assert header.pattern == "<4sHHI"
        assert header.fields == ["magic", "major", "minor", "length"]
        assert header.description == "File header"
        assert header.abi is None
        assert layouts[1].abi == "ilp32"

    def test_size(self, layouts_file):
        header, record, point = load_layouts(layouts_file)
        assert header.size == 12
        assert record.size == 12
        assert point.size == 16

    def test_descriptor_uses_abi(self, layouts_file, profiles):
        record = load_layouts(layouts_file)[1]
        assert record.descriptor(profiles).abi is profiles["ilp32"]

    def test_unpack_dict(self, layouts_file):
        header = load_layouts(layouts_file)[0]
        data = pack("<4sHHI", b"GRID", 1, 2, 100)
        assert header.unpack_dict(data) == {
            "magic": b"GRID", "major": 1, "minor": 2, "length": 100,
        }

    def test_unpack_dict_field_count_mismatch(self, layouts_file):
        point = load_layouts(layouts_file)[2]
        with pytest.raises(ValueError, match="names 0 fields but its pattern yields 2 items"):
            point.unpack_dict(bytes(16))

    def test_unknown_abi(self):
        layout = LayoutDefinition(name="x", pattern="l", abi="vax")
        with pytest.raises(ValueError, match="unknown ABI profile 'vax'"):
            layout.descriptor()

    def test_empty_file(self, tmp_path):
        p = tmp_path / "empty.yaml"
        p.write_text("")
        assert load_layouts(p) == []
