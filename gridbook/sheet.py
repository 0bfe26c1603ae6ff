"""In-memory tabular model for workbook sheets."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, List, Mapping, Optional

import numpy as np
import pandas as pd

from .cells import EMPTY, CellValue

Row = List[CellValue]


def synthetic_headers(width: int) -> List[str]:
    return [f"Col{index}" for index in range(width)]


@dataclass
class SheetTable:
    """A named sheet: header labels plus ragged rows of :class:`CellValue`.

    Rows are addressed 1-based (row 1 is the first row after the header),
    columns 0-based.  ``header_row`` records where the headers were found in
    the source file; ``None`` means the labels are synthetic.
    """

    name: str
    headers: List[str] = field(default_factory=list)
    rows: List[Row] = field(default_factory=list)
    header_row: Optional[int] = 0

    @property
    def synthetic(self) -> bool:
        return self.header_row is None

    @property
    def width(self) -> int:
        widest = max((len(row) for row in self.rows), default=0)
        return max(len(self.headers), widest)

    def __len__(self) -> int:
        return len(self.rows)

    def __iter__(self) -> Iterator[Row]:
        return iter(self.rows)

    # ------------ Read helpers ------------
    def cell(self, row: int, column: int) -> CellValue:
        """Return the cell at (``row``, ``column``); missing cells read as empty."""

        _check_address(row, column)
        if row > len(self.rows):
            return EMPTY
        cells = self.rows[row - 1]
        if column >= len(cells):
            return EMPTY
        return cells[column]

    # ------------ Write helpers ------------
    def ensure_row(self, row: int) -> None:
        """Append empty rows, one cell per header, until ``row`` exists."""

        _check_address(row, 0)
        while len(self.rows) < row:
            self.rows.append([EMPTY] * len(self.headers))

    def ensure_column(self, row: int, column: int) -> None:
        """Pad only ``row`` with empty cells until ``column`` exists."""

        _check_address(row, column)
        cells = self.rows[row - 1]
        while len(cells) <= column:
            cells.append(EMPTY)

    def set_cell(self, row: int, column: int, value: CellValue) -> None:
        self.ensure_row(row)
        self.ensure_column(row, column)
        self.rows[row - 1][column] = value

    # ------------ Transfer shapes ------------
    def to_dict(self) -> Dict[str, Any]:
        return {
            "sheetName": self.name,
            "headers": list(self.headers),
            "rows": [[cell.to_dict() for cell in row] for row in self.rows],
            "headerRow": self.header_row,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SheetTable":
        name = data.get("sheetName", data.get("sheet_name"))
        if name is None:
            raise ValueError("Sheet payload is missing 'sheetName'")
        rows = [[CellValue.from_dict(cell) for cell in row] for row in data.get("rows") or []]
        headers = [str(header) for header in data.get("headers") or []]
        header_row = data.get("headerRow", 0)
        return cls(name=str(name), headers=headers, rows=rows, header_row=header_row)

    def to_frame(self) -> pd.DataFrame:
        """Return a DataFrame view of the sheet for grid display.

        Columns are the headers, de-duplicated and padded with positional
        labels for cells beyond the header width.  Empty cells become NaN.
        """

        width = self.width
        columns = _unique_labels(list(self.headers) + synthetic_headers(width)[len(self.headers):])
        records = [
            [np.nan if cell.is_empty else cell.to_python() for cell in row]
            + [np.nan] * (width - len(row))
            for row in self.rows
        ]
        return pd.DataFrame(records, columns=columns, dtype=object)

    @classmethod
    def from_frame(cls, name: str, frame: pd.DataFrame) -> "SheetTable":
        """Build a table from a (possibly edited) grid DataFrame."""

        headers = [str(column) for column in frame.columns]
        rows = [
            [CellValue.from_raw(value) for value in record]
            for record in frame.itertuples(index=False, name=None)
        ]
        return cls(name=name, headers=headers, rows=rows, header_row=0)


@dataclass
class Workbook:
    """Ordered collection of sheets read from one file."""

    sheets: List[SheetTable] = field(default_factory=list)

    def __iter__(self) -> Iterator[SheetTable]:
        return iter(self.sheets)

    def __len__(self) -> int:
        return len(self.sheets)

    @property
    def sheet_names(self) -> List[str]:
        return [sheet.name for sheet in self.sheets]

    def get(self, sheet_name: str) -> Optional[SheetTable]:
        """Return the sheet whose name matches exactly, or ``None``."""

        for sheet in self.sheets:
            if sheet.name == sheet_name:
                return sheet
        return None

    def put(self, sheet: SheetTable) -> None:
        """Replace the sheet with the same name, or append ``sheet``."""

        for index, existing in enumerate(self.sheets):
            if existing.name == sheet.name:
                self.sheets[index] = sheet
                return
        self.sheets.append(sheet)

    def to_dict(self) -> List[Dict[str, Any]]:
        return [sheet.to_dict() for sheet in self.sheets]

    @classmethod
    def from_dict(cls, payload: List[Mapping[str, Any]]) -> "Workbook":
        return cls(sheets=[SheetTable.from_dict(item) for item in payload])


def _check_address(row: int, column: int) -> None:
    if row < 1:
        raise ValueError(f"Row numbers start at 1, got {row}")
    if column < 0:
        raise ValueError(f"Column indexes start at 0, got {column}")


def _unique_labels(labels: List[str]) -> List[str]:
    seen: Dict[str, int] = {}
    unique: List[str] = []
    for index, label in enumerate(labels):
        candidate = label or f"Col{index}"
        if candidate in seen:
            seen[candidate] += 1
            candidate = f"{candidate}.{seen[candidate]}"
        seen.setdefault(candidate, 0)
        unique.append(candidate)
    return unique


__all__ = ["Row", "SheetTable", "Workbook", "synthetic_headers"]
