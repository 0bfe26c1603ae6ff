from __future__ import annotations

import logging
from pathlib import Path
from typing import Optional

from .config import DEFAULT_NOTES_DIRECTORY

logger = logging.getLogger(__name__)


def sanitize_project_id(project_id: str) -> str:
    return project_id.replace("/", "_").replace("\\", "_")


class NoteStore:
    """Plain-text project notes, one ``<project id>.txt`` file per project."""

    def __init__(self, directory: Optional[Path] = None) -> None:
        self.directory = Path(directory) if directory else DEFAULT_NOTES_DIRECTORY

    def path_for(self, project_id: str) -> Path:
        return self.directory / f"{sanitize_project_id(project_id)}.txt"

    def save(self, project_id: str, notes: str) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        path = self.path_for(project_id)
        path.write_text(notes, encoding="utf-8")
        logger.info("Saved notes for project '%s' to %s", project_id, path)
        return path

    def load(self, project_id: str) -> str:
        path = self.path_for(project_id)
        if not path.exists():
            return ""
        return path.read_text(encoding="utf-8")
