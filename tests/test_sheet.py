from __future__ import annotations

import numpy as np
import pandas as pd
import pytest

from gridbook.cells import EMPTY, CellValue
from gridbook.sheet import SheetTable, Workbook


def _table(rows: int = 3) -> SheetTable:
    return SheetTable(
        name="Budget",
        headers=["Activity", "Budget", "Actual"],
        rows=[[CellValue.text(f"A{index}"), CellValue.integer(index)] for index in range(rows)],
    )


def test_ensure_row_grows_to_requested_row_with_header_width():
    table = _table(3)

    table.ensure_row(10)

    assert len(table.rows) == 10
    for row in table.rows[3:]:
        assert row == [EMPTY, EMPTY, EMPTY]

    table.ensure_row(5)
    assert len(table.rows) == 10


def test_ensure_column_pads_only_the_target_row():
    table = _table(3)

    table.ensure_column(2, 5)

    assert len(table.rows[1]) == 6
    assert len(table.rows[0]) == 2
    assert len(table.rows[2]) == 2


def test_set_cell_extends_and_overwrites():
    table = _table(1)

    table.set_cell(4, 4, CellValue.number(1.5))
    table.set_cell(1, 0, CellValue.text("Design"))

    assert table.cell(4, 4) == CellValue.number(1.5)
    assert table.cell(1, 0) == CellValue.text("Design")
    assert table.cell(1, 9) is EMPTY
    assert table.cell(99, 0) is EMPTY
    assert table.width == 5


def test_row_zero_is_rejected():
    table = _table(1)
    with pytest.raises(ValueError):
        table.ensure_row(0)
    with pytest.raises(ValueError):
        table.set_cell(1, -1, EMPTY)


def test_workbook_get_is_exact_and_case_sensitive():
    workbook = Workbook(sheets=[_table(1)])

    assert workbook.get("Budget") is workbook.sheets[0]
    assert workbook.get("budget") is None
    assert workbook.get("Budget ") is None


def test_to_frame_pads_ragged_rows_and_labels_extra_columns():
    table = SheetTable(
        name="Budget",
        headers=["Activity", "Activity"],
        rows=[
            [CellValue.text("Design"), CellValue.integer(3), CellValue.boolean(True)],
            [CellValue.text("Build")],
        ],
    )

    frame = table.to_frame()

    assert list(frame.columns) == ["Activity", "Activity.1", "Col2"]
    assert frame.iloc[0, 2] is True
    assert np.isnan(frame.iloc[1, 1])


def test_from_frame_turns_missing_values_into_empty_cells():
    frame = pd.DataFrame({"Activity": ["Design", None], "Hours": [1.5, np.nan]})

    table = SheetTable.from_frame("Edited", frame)

    assert table.headers == ["Activity", "Hours"]
    assert table.rows[0] == [CellValue.text("Design"), CellValue.number(1.5)]
    assert table.rows[1] == [EMPTY, EMPTY]


def test_transfer_shape_round_trip():
    table = _table(2)
    table.header_row = None

    restored = SheetTable.from_dict(table.to_dict())

    assert restored == table
    assert table.to_dict()["sheetName"] == "Budget"


def test_put_replaces_in_place_or_appends():
    workbook = Workbook(sheets=[_table(1), SheetTable(name="Revenue", headers=["Month"])])

    workbook.put(SheetTable(name="Budget", headers=["Activity"]))
    workbook.put(SheetTable(name="Hours", headers=["Week"]))

    assert workbook.sheet_names == ["Budget", "Revenue", "Hours"]
    assert workbook.get("Budget").headers == ["Activity"]
