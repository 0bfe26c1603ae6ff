"""Batch cell edits applied as a full read, mutate and rewrite of a workbook."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Union

import pandas as pd

from .cells import CellValue, coerce_edit
from .config import HeaderRules
from .io import SheetNotFoundError, read_workbook, write_workbook
from .sheet import SheetTable, Workbook

logger = logging.getLogger(__name__)

EditValue = Union[str, CellValue]


@dataclass(frozen=True)
class CellUpdate:
    """One requested edit.

    ``row`` is 1-based (row 1 is the first row below the header), ``column``
    is 0-based.  ``header`` is informational and never used for addressing.
    """

    row: int
    column: int
    value: EditValue
    header: Optional[str] = None

    def __post_init__(self) -> None:
        if isinstance(self.row, bool) or int(self.row) < 1:
            raise ValueError(f"Update row must be 1 or greater, got {self.row!r}")
        if isinstance(self.column, bool) or int(self.column) < 0:
            raise ValueError(f"Update column must be 0 or greater, got {self.column!r}")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "CellUpdate":
        missing = [key for key in ("row", "column", "value") if key not in data]
        if missing:
            raise ValueError(f"Cell update is missing {', '.join(missing)}")
        value = data["value"]
        header = data.get("header")
        return cls(
            row=int(data["row"]),
            column=int(data["column"]),
            value="" if value is None else str(value),
            header=None if header is None else str(header),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "row": self.row,
            "column": self.column,
            "value": self.value.display() if isinstance(self.value, CellValue) else self.value,
            "header": self.header,
        }

    def cell_value(self) -> CellValue:
        if isinstance(self.value, CellValue):
            return self.value
        return coerce_edit(self.value)


def apply_updates(workbook: Workbook, sheet_name: str, updates: Sequence[CellUpdate]) -> bool:
    """Apply ``updates`` in order to ``sheet_name``; later edits win.

    Returns ``False`` without touching anything when the sheet is missing.
    """

    sheet = workbook.get(sheet_name)
    if sheet is None:
        return False
    for update in updates:
        sheet.set_cell(update.row, update.column, update.cell_value())
    logger.debug("Applied %s updates to sheet '%s'", len(updates), sheet_name)
    return True


def update_cells(
    path: Path,
    sheet_name: str,
    updates: Iterable[Union[CellUpdate, Mapping[str, Any]]],
    *,
    strict: bool = False,
    rules: Optional[HeaderRules] = None,
) -> bool:
    """Re-read ``path``, apply ``updates`` to ``sheet_name`` and rewrite the file.

    A missing sheet leaves the file untouched.  It is reported by the return
    value, or by :class:`SheetNotFoundError` when ``strict`` is set.
    """

    batch = _as_updates(updates)
    workbook = read_workbook(path, rules=rules)
    if not apply_updates(workbook, sheet_name, batch):
        if strict:
            raise SheetNotFoundError(sheet_name, workbook.sheet_names)
        logger.warning("Sheet '%s' not found in %s; %s updates skipped", sheet_name, path, len(batch))
        return False
    write_workbook(path, workbook.sheets)
    return True


def update_cell(
    path: Path,
    sheet_name: str,
    row: int,
    column: int,
    value: EditValue,
    *,
    strict: bool = False,
    rules: Optional[HeaderRules] = None,
) -> bool:
    """Single-cell form of :func:`update_cells`.

    ``value`` may be an edit string or an already typed :class:`CellValue`.
    """

    update = CellUpdate(row=row, column=column, value=value)
    return update_cells(path, sheet_name, [update], strict=strict, rules=rules)


def import_frame(
    path: Path,
    sheet_name: str,
    frame: pd.DataFrame,
    *,
    rules: Optional[HeaderRules] = None,
) -> None:
    """Store ``frame`` as ``sheet_name`` in the workbook at ``path``.

    An existing sheet with that name is replaced in place; otherwise the
    sheet is appended after the others.
    """

    workbook = read_workbook(path, rules=rules)
    workbook.put(SheetTable.from_frame(sheet_name, frame))
    logger.info("Importing %s rows into sheet '%s' of %s", len(frame), sheet_name, path)
    write_workbook(path, workbook.sheets)


def _as_updates(updates: Iterable[Union[CellUpdate, Mapping[str, Any]]]) -> List[CellUpdate]:
    batch: List[CellUpdate] = []
    for update in updates:
        if isinstance(update, CellUpdate):
            batch.append(update)
        elif isinstance(update, Mapping):
            batch.append(CellUpdate.from_dict(update))
        else:
            raise TypeError(f"Unsupported cell update {update!r}")
    return batch


__all__ = ["CellUpdate", "apply_updates", "import_frame", "update_cell", "update_cells"]
