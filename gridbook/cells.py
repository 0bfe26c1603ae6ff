"""Cell value model shared by the reader, the editor and the writer."""

from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import date, datetime, time, timedelta
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

import numpy as np


class CellKind(str, Enum):
    """Discriminant of :class:`CellValue`."""

    TEXT = "Text"
    NUMBER = "Number"
    INTEGER = "Integer"
    BOOLEAN = "Boolean"
    EMPTY = "Empty"


Payload = Union[str, float, int, bool, None]


@dataclass(frozen=True)
class CellValue:
    """Content of a single spreadsheet cell.

    Exactly one kind is active.  ``payload`` is ``None`` only for
    :attr:`CellKind.EMPTY`; use the constructors below rather than building
    instances by hand.
    """

    kind: CellKind
    payload: Payload = None

    # ------------ Constructors ------------
    @classmethod
    def text(cls, value: str) -> "CellValue":
        return cls(CellKind.TEXT, str(value))

    @classmethod
    def number(cls, value: float) -> "CellValue":
        return cls(CellKind.NUMBER, float(value))

    @classmethod
    def integer(cls, value: int) -> "CellValue":
        return cls(CellKind.INTEGER, int(value))

    @classmethod
    def boolean(cls, value: bool) -> "CellValue":
        return cls(CellKind.BOOLEAN, bool(value))

    @classmethod
    def empty(cls) -> "CellValue":
        return EMPTY

    @classmethod
    def from_raw(cls, raw: Any) -> "CellValue":
        """Convert a value produced by the workbook parser (or a DataFrame)."""

        if raw is None:
            return EMPTY
        if isinstance(raw, str):
            return cls.text(raw)
        # bool is a subclass of int, so it has to be checked first
        if isinstance(raw, (bool, np.bool_)):
            return cls.boolean(bool(raw))
        if isinstance(raw, (int, np.integer)):
            return cls.integer(int(raw))
        if isinstance(raw, (float, np.floating)):
            if math.isnan(raw):
                return EMPTY
            return cls.number(float(raw))
        if isinstance(raw, (datetime, date, time)):
            return cls.text(raw.isoformat())
        if isinstance(raw, timedelta):
            return cls.text(str(raw))
        return EMPTY

    @classmethod
    def from_dict(cls, data: Any) -> "CellValue":
        """Parse the transfer shape, tolerating the untagged legacy forms."""

        if isinstance(data, Mapping):
            if "type" in data:
                try:
                    kind = CellKind(data["type"])
                except ValueError:
                    return EMPTY
                return _from_kind(kind, data.get("value"))
            if len(data) == 1:
                key, value = next(iter(data.items()))
                try:
                    kind = CellKind(key)
                except ValueError:
                    return EMPTY
                return _from_kind(kind, value)
            return EMPTY
        # untagged JSON numbers were always decoded as doubles
        if isinstance(data, int) and not isinstance(data, bool):
            return cls.number(data)
        return cls.from_raw(data)

    # ------------ Accessors ------------
    @property
    def is_empty(self) -> bool:
        return self.kind is CellKind.EMPTY

    def to_python(self) -> Payload:
        return self.payload

    def to_dict(self) -> Dict[str, Payload]:
        return {"type": self.kind.value, "value": self.payload}

    def display(self) -> str:
        """Render the value the way it appears as a column label."""

        if self.kind is CellKind.TEXT:
            return str(self.payload)
        if self.kind is CellKind.NUMBER:
            return format_number(float(self.payload))
        if self.kind is CellKind.INTEGER:
            return str(self.payload)
        if self.kind is CellKind.BOOLEAN:
            return "TRUE" if self.payload else "FALSE"
        return ""

    def __str__(self) -> str:
        return self.display()


EMPTY = CellValue(CellKind.EMPTY)


def _from_kind(kind: CellKind, value: Any) -> CellValue:
    try:
        if kind is CellKind.TEXT and value is not None:
            return CellValue.text(value)
        if kind is CellKind.NUMBER and value is not None:
            return CellValue.number(value)
        if kind is CellKind.INTEGER and value is not None:
            return CellValue.integer(value)
        if kind is CellKind.BOOLEAN and value is not None:
            return CellValue.boolean(value)
    except (TypeError, ValueError):
        return EMPTY
    return EMPTY


def format_number(value: float) -> str:
    if math.isfinite(value) and value.is_integer():
        return str(int(value))
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "inf" if value > 0 else "-inf"
    return repr(value)


def parse_float(text: str) -> Optional[float]:
    """Parse ``text`` as a 64-bit float or return ``None``.

    Surrounding whitespace and ``_`` digit separators are rejected even though
    :func:`float` would accept them.
    """

    if not text or text != text.strip() or "_" in text:
        return None
    try:
        return float(text)
    except ValueError:
        return None


def coerce_edit(text: str) -> CellValue:
    """Turn a user-typed edit string into a :class:`CellValue`.

    Numeric input always becomes :attr:`CellKind.NUMBER`; the edit path never
    yields an integer cell even though reading a workbook can.
    """

    text = "" if text is None else str(text)
    number = parse_float(text)
    if number is not None:
        return CellValue.number(number)
    lowered = text.lower()
    if lowered == "true":
        return CellValue.boolean(True)
    if lowered == "false":
        return CellValue.boolean(False)
    if not text:
        return EMPTY
    return CellValue.text(text)


__all__ = [
    "EMPTY",
    "CellKind",
    "CellValue",
    "coerce_edit",
    "format_number",
    "parse_float",
]
