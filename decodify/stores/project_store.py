"""Persistent snapshot store keyed by project identifier."""

from __future__ import annotations

import json
import os
import re
import tempfile
from pathlib import Path
from typing import List, Optional

from ..logging import get_logger
from ..models import ProjectSnapshot

_STORE_VERSION = 1
_SAFE_ID = re.compile(r"^[A-Za-z0-9][A-Za-z0-9._-]*$")

logger = get_logger("stores.project")


class ProjectStore:
    """Stores one JSON snapshot per project, replacing files atomically on save."""

    def __init__(self, directory: Path) -> None:
        self._directory = Path(directory)

    @property
    def directory(self) -> Path:
        return self._directory

    def path_for(self, project_id: str) -> Path:
        if not _SAFE_ID.match(project_id) or ".." in project_id:
            raise ValueError(f"Invalid project id: {project_id!r}")
        return self._directory / f"{project_id}.json"

    def save(self, snapshot: ProjectSnapshot) -> Path:
        target = self.path_for(snapshot.project_id)
        self._directory.mkdir(parents=True, exist_ok=True)
        payload = {"version": _STORE_VERSION, "snapshot": snapshot.to_dict()}

        handle, temp_name = tempfile.mkstemp(dir=self._directory, prefix=f".{snapshot.project_id}.", suffix=".tmp")
        try:
            with os.fdopen(handle, "w", encoding="utf-8") as stream:
                json.dump(payload, stream, indent=2, sort_keys=True)
            os.replace(temp_name, target)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
        logger.debug("Stored snapshot for %s at %s", snapshot.project_id, target)
        return target

    def load(self, project_id: str) -> Optional[ProjectSnapshot]:
        """Return the stored snapshot, or ``None`` when it is missing or unreadable."""
        path = self.path_for(project_id)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return None
        except (OSError, json.JSONDecodeError) as exc:
            logger.warning("Ignoring unreadable snapshot %s: %s", path, exc)
            return None
        if not isinstance(data, dict) or data.get("version") != _STORE_VERSION:
            return None
        snapshot = data.get("snapshot")
        if not isinstance(snapshot, dict):
            return None
        try:
            return ProjectSnapshot.from_dict(snapshot)
        except (KeyError, TypeError, ValueError) as exc:
            logger.warning("Ignoring malformed snapshot %s: %s", path, exc)
            return None

    def delete(self, project_id: str) -> bool:
        path = self.path_for(project_id)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        return True

    def list_projects(self) -> List[str]:
        if not self._directory.is_dir():
            return []
        return sorted(path.stem for path in self._directory.glob("*.json"))


__all__ = ["ProjectStore"]
