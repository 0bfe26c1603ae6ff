"""Configuration loading utilities for Gridbook."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import yaml

DEFAULT_NOTES_DIRECTORY = Path("project_notes")


@dataclass
class HeaderRule:
    """Header-row convention for sheets whose name contains ``contains``."""

    contains: str
    header_row: Optional[int] = None
    synthetic: bool = False
    excludes: List[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        if not self.contains:
            raise ValueError("Header rules need a non-empty 'contains' pattern")
        if self.synthetic and self.header_row is not None:
            raise ValueError(
                f"Header rule '{self.contains}' cannot set both header_row and synthetic"
            )
        if not self.synthetic:
            if self.header_row is None:
                raise ValueError(
                    f"Header rule '{self.contains}' needs either header_row or synthetic"
                )
            if int(self.header_row) < 0:
                raise ValueError(f"Header rule '{self.contains}' has a negative header_row")
            self.header_row = int(self.header_row)

    def matches(self, sheet_name: str) -> bool:
        lowered = sheet_name.lower()
        if self.contains.lower() not in lowered:
            return False
        return not any(token.lower() in lowered for token in self.excludes)


@dataclass
class HeaderRules:
    """Ordered header rules; the first matching rule wins."""

    rules: List[HeaderRule] = field(default_factory=list)
    fallback_row: int = 0

    @classmethod
    def default(cls) -> "HeaderRules":
        return cls(
            rules=[
                HeaderRule(contains="vacation", synthetic=True),
                HeaderRule(contains="pipeline", header_row=10),
                HeaderRule(contains="program", header_row=2, excludes=["vacation"]),
            ],
            fallback_row=0,
        )

    def header_row_for(self, sheet_name: str) -> Optional[int]:
        """Return the 0-based header row, or ``None`` for synthetic headers."""

        for rule in self.rules:
            if rule.matches(sheet_name):
                return None if rule.synthetic else rule.header_row
        return self.fallback_row


@dataclass
class NotesConfig:
    directory: Path = DEFAULT_NOTES_DIRECTORY

    def resolved(self, base_path: Path) -> "NotesConfig":
        return NotesConfig(directory=_resolve_path(self.directory, base_path))


@dataclass
class LoggingConfig:
    level: str = "INFO"
    file: Optional[Path] = None

    def resolved(self, base_path: Path) -> "LoggingConfig":
        log_file = _resolve_path(self.file, base_path) if self.file else None
        return LoggingConfig(level=self.level, file=log_file)


@dataclass
class AppConfig:
    """Container for all settings used by the commands and the CLI."""

    header_rules: HeaderRules = field(default_factory=HeaderRules.default)
    notes: NotesConfig = field(default_factory=NotesConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def resolved(self, base_path: Path) -> "AppConfig":
        return AppConfig(
            header_rules=self.header_rules,
            notes=self.notes.resolved(base_path),
            logging=self.logging.resolved(base_path),
        )


def load_config(path: Optional[Path] = None) -> AppConfig:
    """Load :class:`AppConfig` from a YAML file.

    When ``path`` is omitted the built-in defaults are returned.
    """

    if path is None:
        return AppConfig()

    config_path = Path(path).expanduser()
    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file '{config_path}' does not exist")

    with config_path.open("r", encoding="utf-8") as stream:
        raw_config: Mapping[str, Any] = yaml.safe_load(stream) or {}

    if not isinstance(raw_config, Mapping):
        raise ValueError("Configuration root must be a mapping")

    config = AppConfig(
        header_rules=_parse_header_rules(raw_config.get("header_rules")),
        notes=NotesConfig(**_parse_notes_section(raw_config.get("notes") or {})),
        logging=LoggingConfig(**_parse_logging_section(raw_config.get("logging") or {})),
    )
    return config.resolved(config_path.parent)


def _parse_header_rules(section: Any) -> HeaderRules:
    if section is None:
        return HeaderRules.default()
    if not isinstance(section, Mapping):
        raise ValueError("header_rules must be a mapping with 'rules' and 'fallback_row'")

    entries = section.get("rules", [])
    if not isinstance(entries, Sequence) or isinstance(entries, str):
        raise ValueError("header_rules.rules must be a list of rule descriptors")

    rules = [_parse_rule(entry) for entry in entries]
    fallback_row = int(section.get("fallback_row", 0))
    if fallback_row < 0:
        raise ValueError("header_rules.fallback_row must not be negative")
    return HeaderRules(rules=rules, fallback_row=fallback_row)


def _parse_rule(entry: Any) -> HeaderRule:
    if not isinstance(entry, Mapping) or "contains" not in entry:
        raise ValueError(f"Invalid header rule {entry!r}; expected a mapping with 'contains'")
    header_row = entry.get("header_row")
    return HeaderRule(
        contains=str(entry["contains"]).strip(),
        header_row=int(header_row) if header_row is not None else None,
        synthetic=bool(entry.get("synthetic", False)),
        excludes=_string_list(entry.get("excludes")),
    )


def _string_list(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [value]
    if isinstance(value, Iterable):
        return [str(item) for item in value if str(item).strip()]
    raise ValueError(f"Expected a list of strings, got {value!r}")


def _parse_notes_section(section: Mapping[str, Any]) -> Dict[str, Any]:
    parsed: Dict[str, Any] = {}
    if "directory" in section and section["directory"]:
        parsed["directory"] = Path(section["directory"])
    return parsed


def _parse_logging_section(section: Mapping[str, Any]) -> Dict[str, Any]:
    parsed: Dict[str, Any] = {}
    if section.get("level"):
        parsed["level"] = str(section["level"]).upper()
    if section.get("file"):
        parsed["file"] = Path(section["file"])
    return parsed


def _resolve_path(path: Path, base_path: Path) -> Path:
    expanded = Path(path).expanduser()
    if expanded.is_absolute():
        return expanded
    return (base_path / expanded).resolve()
