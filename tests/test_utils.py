from datetime import datetime, timezone
from decimal import Decimal
from zoneinfo import ZoneInfo

import pytest

from stockboard.utils.io_utils import atomic_write_bytes, atomic_write_text
from stockboard.utils.validators import ensure_int, normalize_name, parse_iso_datetime, to_decimal


def test_atomic_write_text(tmp_path):
    path = tmp_path / "nested" / "out.txt"
    atomic_write_text(path, "Olá mundo")
    assert path.read_text(encoding="utf-8") == "Olá mundo"
    atomic_write_text(path, "replaced")
    assert path.read_text(encoding="utf-8") == "replaced"
    assert [p.name for p in path.parent.iterdir()] == ["out.txt"]


def test_atomic_write_bytes(tmp_path):
    path = tmp_path / "out.bin"
    atomic_write_bytes(path, b"\x00\x01")
    assert path.read_bytes() == b"\x00\x01"


def test_normalize_name():
    assert normalize_name("  Pão   de  Açúcar ") == "pão de açúcar"
    assert normalize_name("Pão de Açúcar!", ascii_only=True) == "pao de acucar"
    assert normalize_name(None) == ""


@pytest.mark.parametrize("value, expected", [
    ("12,50", Decimal("12.50")),
    (0.1, Decimal("0.1")),
    (3, Decimal("3")),
])
def test_to_decimal(value, expected):
    assert to_decimal(value) == expected


@pytest.mark.parametrize("value", ["abc", True, "NaN", "inf", None])
def test_to_decimal_rejects(value):
    with pytest.raises(ValueError):
        to_decimal(value)


def test_to_decimal_default_for_blank():
    assert to_decimal("", default=Decimal("0")) == 0


def test_ensure_int():
    assert ensure_int("3.0") == 3
    assert ensure_int(None, default=0) == 0
    for bad in ("1.5", False, "x"):
        with pytest.raises(ValueError):
            ensure_int(bad)


def test_parse_iso_datetime():
    sp = ZoneInfo("America/Sao_Paulo")
    assert parse_iso_datetime("") is None
    assert parse_iso_datetime("2024-03-15T10:00:00") == datetime(2024, 3, 15, 10, tzinfo=sp)
    utc = parse_iso_datetime("2024-03-15T10:00:00+00:00")
    assert utc == datetime(2024, 3, 15, 10, tzinfo=timezone.utc)
    assert parse_iso_datetime("2024-03-15T10:00:00", tz=timezone.utc).tzinfo is timezone.utc
    with pytest.raises(ValueError):
        parse_iso_datetime("yesterday")
