from __future__ import annotations

from datetime import datetime
from pathlib import Path
import sys

import pytest
from openpyxl import Workbook

# Ensure project root is on sys.path for absolute imports
ROOT = Path(__file__).resolve().parent.parent
if str(ROOT) not in sys.path:
    sys.path.append(str(ROOT))

PIPELINE_HEADERS = ["Opportunity", "Stage", "Value", "Probability"]
PROGRAM_HEADERS = ["Project", "Budget Cost", "Actual Cost", "Remaining"]
BUDGET_HEADERS = ["Activity", "Budget Hours", "Actual Hours", "Approved"]


@pytest.fixture
def performance_workbook(tmp_path: Path) -> Path:
    """A workbook mixing the sheet layouts the header rules know about."""

    book = Workbook()
    budget = book.active
    budget.title = "Budget"
    budget.append(BUDGET_HEADERS)
    budget.append(["Design", 120, 98.5, True])
    budget.append(["Build", 300, 310.25, False])
    budget.append(["Test", 80, None, None])
    budget["B5"] = "#DIV/0!"
    budget["A6"] = datetime(2024, 1, 15)

    program = book.create_sheet("Program Management")
    program.append(["Program overview FY24"])
    program.append([])
    program.append(PROGRAM_HEADERS)
    program.append(["P-100", 50000.0, 42000.0, 8000.0])
    program.append(["P-200", 75000, 80000, -5000])

    pipeline = book.create_sheet("Resource Pipeline")
    pipeline.append(["Pipeline summary"])
    for index in range(9):
        pipeline.append([f"note {index}"])
    pipeline.append(PIPELINE_HEADERS)
    pipeline.append(["Grid upgrade", "Proposal", 125000.5, 0.4])

    vacation = book.create_sheet("Vacation Tracker")
    vacation.append(["Name", "Jan", "Feb"])
    vacation.append(["Alex", 2, 0])
    vacation.append(["Sam", 1])

    path = tmp_path / "performance.xlsx"
    book.save(path)
    return path


@pytest.fixture
def simple_workbook(tmp_path: Path) -> Path:
    """A workbook whose sheets all carry their headers in the first row."""

    book = Workbook()
    sheet = book.active
    sheet.title = "Activities"
    sheet.append(BUDGET_HEADERS)
    sheet.append(["Design", 120, 98.5, True])
    sheet.append(["Build", 300, 310.25, False])

    other = book.create_sheet("Revenue")
    other.append(["Month", "Revenue"])
    other.append(["Jan", 1000.5])

    path = tmp_path / "simple.xlsx"
    book.save(path)
    return path
