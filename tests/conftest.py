"""Shared test fixtures for pystruc."""

import pytest

from pystruc.config import load_profiles


@pytest.fixture(scope="session")
def profiles():
    """The shipped ABI profiles plus the detected host."""
    return load_profiles()


@pytest.fixture
def lp64(profiles):
    return profiles["lp64"]


@pytest.fixture
def ilp32(profiles):
    return profiles["ilp32"]


@pytest.fixture
def llp64(profiles):
    return profiles["llp64"]


@pytest.fixture
def lp64_be(profiles):
    return profiles["lp64-be"]


@pytest.fixture
def softfloat(profiles):
    """LP64 with both float widths routed through the software codec."""
    return profiles["lp64-softfloat"]


@pytest.fixture
def profiles_file(tmp_path):
    """Write a one-profile YAML file and return its path."""
    text = """\
profiles:
  - name: tiny
    description: 16-bit ints, 32-bit pointers
    byteorder: big
    types:
      short: 2
      int: 2
      long: {size: 4, align: 2}
      longlong: {size: 8, align: 2}
      float: {size: 4, align: 2}
      double: {size: 8, align: 2}
      pointer: {size: 4, align: 2}
"""
    p = tmp_path / "profiles.yaml"
    p.write_text(text)
    return p


@pytest.fixture
def layouts_file(tmp_path):
    """Write a YAML file with a few named layouts and return its path."""
    text = """\
layouts:
  - name: header
    pattern: "<4sHHI"
    fields: [magic, major, minor, length]
    description: File header
  - name: record
    pattern: "llh0l"
    abi: ilp32
    fields: [start, stop, flags]
  - name: point
    pattern: ">2d"
"""
    p = tmp_path / "layouts.yaml"
    p.write_text(text)
    return p
