"""Request/response command surface consumed by a UI layer.

Every command takes and returns plain JSON-compatible values.  Failures are
re-raised as :class:`CommandError` carrying a message for display.
"""

from __future__ import annotations

import functools
import logging
import re
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, TypeVar

from .cells import CellValue
from .config import AppConfig
from .editing import update_cell as _update_cell
from .editing import update_cells as _update_cells
from .io import WorkbookError
from .io import read_workbook as _read_workbook
from .io import write_workbook as _write_workbook
from .notes import NoteStore
from .sheet import SheetTable

logger = logging.getLogger(__name__)
frontend_logger = logging.getLogger("gridbook.frontend")

T = TypeVar("T")

# command names used by the original desktop frontend
LEGACY_NAMES = {
    "read_excel": "read_workbook",
    "write_excel": "write_workbook",
    "update_excel_cells": "update_cells",
}


class CommandError(Exception):
    """A command failed; ``str(error)`` is safe to show to the user."""


def _command(func: Callable[..., T]) -> Callable[..., T]:
    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> T:
        try:
            return func(*args, **kwargs)
        except CommandError:
            raise
        except (WorkbookError, OSError, ValueError, KeyError, TypeError) as exc:
            logger.error("Command %s failed: %s", func.__name__, exc)
            raise CommandError(str(exc)) from exc

    return wrapper


class Commands:
    """Command handlers bound to an :class:`AppConfig`."""

    def __init__(self, config: Optional[AppConfig] = None) -> None:
        self.config = config or AppConfig()
        self.notes = NoteStore(self.config.notes.directory)

    @_command
    def read_workbook(self, file_path: str) -> List[Dict[str, Any]]:
        workbook = _read_workbook(Path(file_path), rules=self.config.header_rules)
        return workbook.to_dict()

    @_command
    def write_workbook(self, file_path: str, data: Sequence[Mapping[str, Any]]) -> None:
        sheets = [SheetTable.from_dict(item) for item in data]
        _write_workbook(Path(file_path), sheets)

    @_command
    def update_cell(
        self,
        file_path: str,
        sheet_name: str,
        row: int,
        col: int,
        value: Any,
    ) -> None:
        # typed payloads are written as is; plain strings go through edit coercion
        if isinstance(value, str):
            edit: Any = value
        else:
            edit = CellValue.from_dict(value)
        _update_cell(
            Path(file_path),
            sheet_name,
            int(row),
            int(col),
            edit,
            rules=self.config.header_rules,
        )

    @_command
    def update_cells(
        self,
        file_path: str,
        sheet_name: str,
        updates: Sequence[Mapping[str, Any]],
    ) -> None:
        _update_cells(Path(file_path), sheet_name, updates, rules=self.config.header_rules)

    @_command
    def save_project_notes(self, project_id: str, notes: str) -> None:
        self.notes.save(project_id, notes)

    @_command
    def load_project_notes(self, project_id: str) -> str:
        return self.notes.load(project_id)

    def file_exists(self, path: str) -> bool:
        return Path(path).exists()

    def ping(self) -> str:
        return "pong"

    def write_debug_log(self, message: str) -> None:
        frontend_logger.debug("Frontend: %s", message)

    def dispatch(self, name: str, **kwargs: Any) -> Any:
        """Invoke the command ``name`` with keyword arguments."""

        name = LEGACY_NAMES.get(name, name)
        handler = getattr(self, name, None)
        if name.startswith("_") or name == "dispatch" or not callable(handler):
            raise CommandError(f"Unknown command '{name}'")
        try:
            return handler(**{_snake_case(key): value for key, value in kwargs.items()})
        except TypeError as exc:
            raise CommandError(f"Invalid arguments for '{name}': {exc}") from exc


def _snake_case(name: str) -> str:
    return re.sub(r"(?<!^)(?=[A-Z])", "_", name).lower()


__all__ = ["CommandError", "Commands"]
