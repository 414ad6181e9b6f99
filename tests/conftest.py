"""Shared test fixtures."""

import struct
from pathlib import Path

import pytest

RECORD_SIZE = 212

SCHEMA_TEXT = """\
[MegaTune]
   signature = "MS3 Format 0435.14P"

[Datalog]
   entry = time,    "Time", float, "%.3f"
   entry = rpm,     "RPM",  int,   "%d"
   entry = coolant, "CLT",  float, "%.1f"

[OutputChannels]
   ochBlockSize = 212
   time     = { timeNow }
   seconds  = scalar, U16,  0, "s",   1.000, 0.0
   rpm      = scalar, U16,  6, "RPM", 1.000, 0.0
   advance  = scalar, S16,  8, "deg", 0.100, 0.0
   map      = scalar, S16, 18, { bitStringValue( algorithmUnits , algorithm ) }, 0.100, 0.0
   coolant  = scalar, S16, 22, "°F",  0.100, 0.0
   ready    = bits,   U08, 11, [0:0]
   crank    = bits,   U08, 11, [1:1]
   accDecEnrich = { (accelEnrich + tpsaccden) }
"""


def build_record(
    seconds: int = 120,
    rpm: int = 850,
    advance: int = -50,
    map_kpa: int = 1013,
    coolant: int = 1805,
    status: int = 0b10000000,
    size: int = RECORD_SIZE,
) -> bytes:
    """Build a realtime record matching SCHEMA_TEXT offsets (flag byte first)."""
    record = bytearray(size)
    struct.pack_into(">H", record, 1 + 0, seconds)
    struct.pack_into(">H", record, 1 + 6, rpm)
    struct.pack_into(">h", record, 1 + 8, advance)
    struct.pack_into(">B", record, 1 + 11, status)
    struct.pack_into(">h", record, 1 + 18, map_kpa)
    struct.pack_into(">h", record, 1 + 22, coolant)
    return bytes(record)


@pytest.fixture
def schema_text() -> str:
    return SCHEMA_TEXT


@pytest.fixture
def schema_file(tmp_path: Path) -> Path:
    """Write the sample schema to a temporary INI file."""
    f = tmp_path / "mainController.ini"
    f.write_text(SCHEMA_TEXT, encoding="utf-8")
    return f


@pytest.fixture
def record() -> bytes:
    return build_record()
