from __future__ import annotations

from datetime import date, datetime, timedelta

import numpy as np
import pytest

from gridbook.cells import EMPTY, CellKind, CellValue, coerce_edit


@pytest.mark.parametrize(
    "text, expected",
    [
        ("3.14", CellValue.number(3.14)),
        ("42", CellValue.number(42.0)),
        ("-1e3", CellValue.number(-1000.0)),
        ("TRUE", CellValue.boolean(True)),
        ("false", CellValue.boolean(False)),
        ("", EMPTY),
        ("N/A", CellValue.text("N/A")),
        (" 12", CellValue.text(" 12")),
        ("1_000", CellValue.text("1_000")),
    ],
)
def test_coerce_edit_priority(text, expected):
    assert coerce_edit(text) == expected


def test_coerce_edit_never_produces_integer():
    value = coerce_edit("7")
    assert value.kind is CellKind.NUMBER
    assert isinstance(value.payload, float)


def test_from_raw_maps_parser_values():
    assert CellValue.from_raw("abc") == CellValue.text("abc")
    assert CellValue.from_raw(True).kind is CellKind.BOOLEAN
    assert CellValue.from_raw(5) == CellValue.integer(5)
    assert CellValue.from_raw(np.int64(5)) == CellValue.integer(5)
    assert CellValue.from_raw(2.5) == CellValue.number(2.5)
    assert CellValue.from_raw(None) is EMPTY
    assert CellValue.from_raw(float("nan")) is EMPTY
    assert CellValue.from_raw(object()) is EMPTY


def test_from_raw_keeps_dates_as_display_text():
    assert CellValue.from_raw(datetime(2024, 1, 15, 8, 30)) == CellValue.text("2024-01-15T08:30:00")
    assert CellValue.from_raw(date(2024, 1, 15)) == CellValue.text("2024-01-15")
    assert CellValue.from_raw(timedelta(hours=1, minutes=30)) == CellValue.text("1:30:00")


def test_display_formats_header_labels():
    assert CellValue.number(2024.0).display() == "2024"
    assert CellValue.number(0.25).display() == "0.25"
    assert CellValue.integer(7).display() == "7"
    assert CellValue.boolean(False).display() == "FALSE"
    assert EMPTY.display() == ""


def test_transfer_shape_and_legacy_payloads():
    value = CellValue.integer(12)
    assert value.to_dict() == {"type": "Integer", "value": 12}
    assert CellValue.from_dict(value.to_dict()) == value

    assert CellValue.from_dict({"Text": "hello"}) == CellValue.text("hello")
    assert CellValue.from_dict({"Empty": None}) is EMPTY
    assert CellValue.from_dict(3) == CellValue.number(3.0)
    assert CellValue.from_dict(True) == CellValue.boolean(True)
    assert CellValue.from_dict(None) is EMPTY
    assert CellValue.from_dict({"type": "Bogus", "value": 1}) is EMPTY
