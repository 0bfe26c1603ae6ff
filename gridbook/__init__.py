"""Gridbook core package.

Loads project-performance workbooks (budget vs. actual cost, hours and
revenue per activity) into an editable in-memory table model and writes
edits back.  Every edit re-reads the whole file, mutates the in-memory copy
and rewrites the file; no workbook object outlives a single call.
"""

from .cells import CellKind, CellValue, coerce_edit
from .commands import CommandError, Commands
from .config import AppConfig, HeaderRule, HeaderRules, load_config
from .editing import CellUpdate, apply_updates, import_frame, update_cell, update_cells
from .io import (
    SheetNotFoundError,
    WorkbookError,
    WorkbookNotFoundError,
    WorkbookReadError,
    WorkbookWriteError,
    read_workbook,
    write_workbook,
)
from .notes import NoteStore
from .sheet import SheetTable, Workbook

__all__ = [
    "AppConfig",
    "CellKind",
    "CellUpdate",
    "CellValue",
    "CommandError",
    "Commands",
    "HeaderRule",
    "HeaderRules",
    "NoteStore",
    "SheetNotFoundError",
    "SheetTable",
    "Workbook",
    "WorkbookError",
    "WorkbookNotFoundError",
    "WorkbookReadError",
    "WorkbookWriteError",
    "apply_updates",
    "coerce_edit",
    "import_frame",
    "load_config",
    "read_workbook",
    "update_cell",
    "update_cells",
    "write_workbook",
]
