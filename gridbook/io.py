"""Read and write workbook files as :class:`~gridbook.sheet.Workbook` objects."""

from __future__ import annotations

import json
import logging
import math
import os
import re
import shutil
import tempfile
import zipfile
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set

from openpyxl import Workbook as OpenpyxlWorkbook
from openpyxl import load_workbook
from openpyxl.cell.cell import TYPE_ERROR
from openpyxl.packaging.custom import StringProperty
from openpyxl.utils.exceptions import IllegalCharacterError, InvalidFileException

from .cells import EMPTY, CellKind, CellValue
from .config import HeaderRules
from .sheet import Row, SheetTable, Workbook, synthetic_headers

logger = logging.getLogger(__name__)

MAX_SHEET_NAME_LENGTH = 31
INVALID_SHEET_NAME = re.compile(r"[\[\]:*?/\\]")

# custom document properties marking files written by write_workbook
LAYOUT_PROPERTY = "gridbook.layout"
SYNTHETIC_PROPERTY = "gridbook.synthetic_sheets"
NORMALIZED_LAYOUT = "headers-first"


class WorkbookError(Exception):
    """Base class for workbook round-trip failures."""


class WorkbookReadError(WorkbookError):
    """The file is missing, corrupt or not a spreadsheet container."""


class WorkbookNotFoundError(WorkbookReadError, FileNotFoundError):
    """The workbook path does not exist."""


class WorkbookWriteError(WorkbookError, ValueError):
    """The sheets could not be serialised to a workbook file."""


class SheetNotFoundError(WorkbookError, KeyError):
    """A sheet name did not match any sheet in the workbook."""

    def __init__(self, sheet_name: str, available: Sequence[str] = ()) -> None:
        self.sheet_name = sheet_name
        self.available = list(available)
        super().__init__(sheet_name)

    def __str__(self) -> str:
        names = ", ".join(repr(name) for name in self.available) or "none"
        return f"Sheet '{self.sheet_name}' not found (available: {names})"


def read_workbook(path: Path, rules: Optional[HeaderRules] = None) -> Workbook:
    """Load every sheet of the workbook at ``path``.

    The header row of each sheet is picked with ``rules`` (the default header
    conventions when omitted).  Files written by :func:`write_workbook` carry
    their own layout and always have the headers in the first row, so
    ``rules`` only applies to untouched source files.  The header row is
    removed from the sheet's rows; every other row is kept in file order.
    """

    file_path = Path(path)
    if not file_path.exists():
        raise WorkbookNotFoundError(f"Workbook '{file_path}' does not exist")

    rules = rules or HeaderRules.default()
    logger.info("Reading workbook %s", file_path)
    try:
        book = load_workbook(file_path, data_only=True, read_only=False)
    except (InvalidFileException, zipfile.BadZipFile, KeyError, ValueError, OSError) as exc:
        raise WorkbookReadError(f"Unable to open workbook '{file_path}': {exc}") from exc

    try:
        synthetic = _written_synthetic_sheets(book)
        if synthetic is None:
            header_rows = {ws.title: rules.header_row_for(ws.title) for ws in book.worksheets}
        else:
            logger.debug("Workbook %s has a headers-first layout", file_path)
            header_rows = {
                ws.title: None if ws.title in synthetic else 0 for ws in book.worksheets
            }
        sheets = [_read_sheet(ws, header_rows[ws.title]) for ws in book.worksheets]
    finally:
        book.close()
    return Workbook(sheets=sheets)


def _read_sheet(ws, header_row: Optional[int]) -> SheetTable:
    raw_rows: List[Row] = [
        [_cell_value(cell) for cell in row]
        for row in ws.iter_rows()
    ]
    if header_row is None:
        width = len(raw_rows[0]) if raw_rows else 0
        logger.debug("Sheet '%s': synthetic headers for %s columns", ws.title, width)
        return SheetTable(
            name=ws.title,
            headers=synthetic_headers(width),
            rows=raw_rows,
            header_row=None,
        )

    headers: List[str] = []
    rows = raw_rows
    if header_row < len(raw_rows):
        headers = [cell.display() for cell in raw_rows[header_row]]
        rows = raw_rows[:header_row] + raw_rows[header_row + 1 :]
    logger.debug(
        "Sheet '%s': header row %s, %s data rows", ws.title, header_row, len(rows)
    )
    return SheetTable(name=ws.title, headers=headers, rows=rows, header_row=header_row)


def _written_synthetic_sheets(book) -> Optional[Set[str]]:
    """Return the synthetic-header sheet names of a headers-first file.

    ``None`` means the file was not written by :func:`write_workbook`.
    """

    props = {prop.name: prop.value for prop in book.custom_doc_props}
    if props.get(LAYOUT_PROPERTY) != NORMALIZED_LAYOUT:
        return None
    try:
        names = json.loads(props.get(SYNTHETIC_PROPERTY) or "[]")
    except ValueError:
        names = []
    return {str(name) for name in names}


def _cell_value(cell) -> CellValue:
    if getattr(cell, "data_type", None) == TYPE_ERROR:
        return EMPTY
    return CellValue.from_raw(cell.value)


def write_workbook(path: Path, sheets: Iterable[SheetTable]) -> None:
    """Serialise ``sheets`` to a new workbook at ``path``.

    Headers land in the first spreadsheet row and data rows follow, whatever
    row the headers came from originally.  Sheets with synthetic headers are
    written from the first row without the labels.  Only values survive:
    formulas, styles and merged cells are not carried over.
    """

    file_path = Path(path)
    sheets = list(sheets)
    validate_sheet_names([sheet.name for sheet in sheets])

    book = OpenpyxlWorkbook()
    book.remove(book.active)
    for sheet in sheets:
        ws = book.create_sheet(title=sheet.name)
        _write_sheet(ws, sheet)
    _mark_layout(book, [sheet.name for sheet in sheets if sheet.synthetic])

    logger.info("Writing workbook %s (%s sheets)", file_path, len(sheets))
    _save_atomically(book, file_path)


def validate_sheet_names(names: Sequence[str]) -> None:
    if not names:
        raise WorkbookWriteError("A workbook needs at least one sheet")

    seen = set()
    for name in names:
        if not name or not name.strip():
            raise WorkbookWriteError("Sheet names must not be empty")
        if len(name) > MAX_SHEET_NAME_LENGTH:
            raise WorkbookWriteError(
                f"Sheet name '{name}' is longer than {MAX_SHEET_NAME_LENGTH} characters"
            )
        if INVALID_SHEET_NAME.search(name):
            raise WorkbookWriteError(f"Sheet name '{name}' contains an invalid character")
        key = name.casefold()
        if key in seen:
            raise WorkbookWriteError(f"Duplicate sheet name '{name}'")
        seen.add(key)


def _mark_layout(book: OpenpyxlWorkbook, synthetic: List[str]) -> None:
    book.custom_doc_props.append(StringProperty(name=LAYOUT_PROPERTY, value=NORMALIZED_LAYOUT))
    book.custom_doc_props.append(
        StringProperty(name=SYNTHETIC_PROPERTY, value=json.dumps(synthetic, ensure_ascii=False))
    )


def _write_sheet(ws, sheet: SheetTable) -> None:
    first_data_row = 1
    if not sheet.synthetic:
        for col_idx, header in enumerate(sheet.headers, start=1):
            if header:
                _write_text(ws, 1, col_idx, header, sheet.name)
        first_data_row = 2

    for row_offset, row in enumerate(sheet.rows):
        row_idx = first_data_row + row_offset
        for col_idx, value in enumerate(row, start=1):
            _write_value(ws, row_idx, col_idx, value, sheet.name)


def _write_value(ws, row: int, column: int, value: CellValue, sheet_name: str) -> None:
    if value.kind is CellKind.EMPTY:
        return
    if value.kind is CellKind.TEXT:
        _write_text(ws, row, column, str(value.payload), sheet_name)
        return
    if value.kind is CellKind.NUMBER and not math.isfinite(value.payload):
        raise WorkbookWriteError(
            f"Sheet '{sheet_name}' row {row} column {column}: "
            f"non-finite number {value.display()} cannot be stored"
        )
    ws.cell(row=row, column=column, value=value.payload)


def _write_text(ws, row: int, column: int, text: str, sheet_name: str) -> None:
    try:
        cell = ws.cell(row=row, column=column, value=text)
    except IllegalCharacterError as exc:
        raise WorkbookWriteError(
            f"Sheet '{sheet_name}' row {row} column {column}: {exc}"
        ) from exc
    # literal text, never a formula
    cell.data_type = "s"


def _save_atomically(book: OpenpyxlWorkbook, path: Path) -> None:
    # replace the link target, not the link
    path = path.resolve()
    directory = path.parent
    if not directory.exists():
        raise WorkbookWriteError(f"Directory '{directory}' does not exist")

    handle, temp_name = tempfile.mkstemp(prefix=f".{path.stem}-", suffix=".xlsx", dir=directory)
    os.close(handle)
    try:
        book.save(temp_name)
        if path.exists():
            shutil.copymode(path, temp_name)
        else:
            os.chmod(temp_name, 0o666 & ~_current_umask())
        os.replace(temp_name, path)
    except OSError as exc:
        raise WorkbookWriteError(f"Unable to write workbook '{path}': {exc}") from exc
    finally:
        if os.path.exists(temp_name):
            os.remove(temp_name)


def _current_umask() -> int:
    mask = os.umask(0)
    os.umask(mask)
    return mask


__all__ = [
    "SheetNotFoundError",
    "WorkbookError",
    "WorkbookNotFoundError",
    "WorkbookReadError",
    "WorkbookWriteError",
    "read_workbook",
    "validate_sheet_names",
    "write_workbook",
]
