"""Command line interface for inspecting and editing workbooks."""

from __future__ import annotations

import argparse
import json
import logging
from pathlib import Path
from typing import Iterable, List, Optional

import pandas as pd
from tabulate import tabulate

from .config import AppConfig, load_config
from .editing import CellUpdate, import_frame, update_cell, update_cells
from .io import WorkbookError, read_workbook
from .notes import NoteStore
from .sheet import SheetTable

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("config/config.yaml")
LOG_FORMAT = "%(asctime)s | %(levelname)s | %(name)s | %(message)s"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Read and edit project performance workbooks")
    parser.add_argument(
        "--config",
        type=Path,
        help=f"Path to YAML configuration (default: {DEFAULT_CONFIG_PATH} when present)",
    )
    parser.add_argument("--log-level", help="Logging level (DEBUG, INFO, WARNING)")
    parser.add_argument("--log-file", type=Path, help="Also append log records to this file")
    subparsers = parser.add_subparsers(dest="command", required=True)

    sheets = subparsers.add_parser("sheets", help="List sheets with header row and row counts")
    sheets.add_argument("path", type=Path)

    show = subparsers.add_parser("show", help="Print one sheet as a table")
    show.add_argument("path", type=Path)
    show.add_argument("sheet")
    show.add_argument("--limit", type=int, default=20, help="Maximum number of rows to print")

    set_cell = subparsers.add_parser("set", help="Update a single cell")
    set_cell.add_argument("path", type=Path)
    set_cell.add_argument("sheet")
    set_cell.add_argument("row", type=int, help="1-based row below the header")
    set_cell.add_argument("column", type=int, help="0-based column")
    set_cell.add_argument("value")
    set_cell.add_argument("--strict", action="store_true", help="Fail when the sheet is missing")

    apply = subparsers.add_parser("apply", help="Apply a JSON list of cell updates")
    apply.add_argument("path", type=Path)
    apply.add_argument("sheet")
    apply.add_argument("updates", type=Path, help="JSON file with [{row, column, value}, ...]")
    apply.add_argument("--strict", action="store_true", help="Fail when the sheet is missing")

    import_csv = subparsers.add_parser("import", help="Replace or add a sheet from a CSV file")
    import_csv.add_argument("path", type=Path)
    import_csv.add_argument("sheet")
    import_csv.add_argument("csv", type=Path, help="CSV file whose first line holds the headers")
    import_csv.add_argument("--sep", default=",", help="Field separator")

    export = subparsers.add_parser("export", help="Dump all sheets as JSON")
    export.add_argument("path", type=Path)
    export.add_argument("output", type=Path)

    notes = subparsers.add_parser("notes", help="Read or write project notes")
    notes_sub = notes.add_subparsers(dest="notes_command", required=True)
    notes_get = notes_sub.add_parser("get")
    notes_get.add_argument("project_id")
    notes_set = notes_sub.add_parser("set")
    notes_set.add_argument("project_id")
    notes_set.add_argument("text")

    return parser


def configure_logging(level: str, log_file: Optional[Path] = None) -> None:
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_file, encoding="utf-8"))
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format=LOG_FORMAT,
        handlers=handlers,
        force=True,
    )


def main(argv: Optional[Iterable[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = load_config(_config_path(args.config))
    except (OSError, ValueError) as exc:
        configure_logging(args.log_level or "INFO")
        logger.error("Failed to load configuration: %s", exc)
        return 1

    configure_logging(args.log_level or config.logging.level, args.log_file or config.logging.file)

    try:
        return _run(args, config)
    except (WorkbookError, OSError, ValueError) as exc:
        logger.error("%s failed: %s", args.command, exc)
        return 1


def _config_path(explicit: Optional[Path]) -> Optional[Path]:
    if explicit is not None:
        return explicit
    if DEFAULT_CONFIG_PATH.exists():
        return DEFAULT_CONFIG_PATH
    logger.debug("No %s found, using built-in defaults", DEFAULT_CONFIG_PATH)
    return None


def _run(args: argparse.Namespace, config: AppConfig) -> int:
    rules = config.header_rules

    if args.command == "sheets":
        workbook = read_workbook(args.path, rules=rules)
        table = [
            [
                sheet.name,
                "synthetic" if sheet.synthetic else sheet.header_row,
                len(sheet.headers),
                len(sheet.rows),
            ]
            for sheet in workbook
        ]
        print(tabulate(table, headers=["sheet", "header row", "columns", "rows"]))
        return 0

    if args.command == "show":
        workbook = read_workbook(args.path, rules=rules)
        sheet = workbook.get(args.sheet)
        if sheet is None:
            logger.error("Sheet '%s' not found; available: %s", args.sheet, ", ".join(workbook.sheet_names))
            return 1
        _print_sheet(sheet, args.limit)
        return 0

    if args.command == "set":
        found = update_cell(
            args.path, args.sheet, args.row, args.column, args.value, strict=args.strict, rules=rules
        )
        if found:
            print(f"Updated {args.sheet}!R{args.row}C{args.column}")
        return 0

    if args.command == "apply":
        payload = json.loads(args.updates.read_text(encoding="utf-8"))
        if not isinstance(payload, list):
            raise ValueError("Updates file must contain a JSON list")
        updates = [CellUpdate.from_dict(item) for item in payload]
        found = update_cells(args.path, args.sheet, updates, strict=args.strict, rules=rules)
        if found:
            print(f"Applied {len(updates)} updates to {args.sheet}")
        return 0

    if args.command == "import":
        frame = pd.read_csv(args.csv, sep=args.sep)
        import_frame(args.path, args.sheet, frame, rules=rules)
        print(f"Imported {len(frame)} rows into {args.sheet}")
        return 0

    if args.command == "export":
        workbook = read_workbook(args.path, rules=rules)
        args.output.parent.mkdir(parents=True, exist_ok=True)
        with args.output.open("w", encoding="utf-8") as handle:
            json.dump(workbook.to_dict(), handle, ensure_ascii=False, indent=2)
        logger.info("Exported %s sheets to %s", len(workbook), args.output)
        return 0

    if args.command == "notes":
        store = NoteStore(config.notes.directory)
        if args.notes_command == "get":
            print(store.load(args.project_id))
        else:
            store.save(args.project_id, args.text)
        return 0

    raise ValueError(f"Unknown command '{args.command}'")  # pragma: no cover - argparse guards


def _print_sheet(sheet: SheetTable, limit: int) -> None:
    frame = sheet.to_frame()
    shown = frame.head(limit) if limit and limit > 0 else frame
    shown = shown.set_axis(range(1, len(shown) + 1)).rename_axis("row")
    print(tabulate(shown.fillna(""), headers="keys", tablefmt="github"))
    if len(shown) < len(frame):
        print(f"... {len(frame) - len(shown)} more rows")


if __name__ == "__main__":  # pragma: no cover - manual execution entry point
    raise SystemExit(main())
