"""Whole-document JSON persistence with atomic replacement."""

from __future__ import annotations

import json
import os
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

from ..logging_config import logger
from .errors import PersistenceError


def atomic_write_text(path: Path, text: str) -> None:
    """Write ``text`` to a sibling temp file, then rename it over ``path``."""
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        with tmp_path.open("w", encoding="utf-8", newline="") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(tmp_path, path)
    except OSError as exc:
        try:
            tmp_path.unlink(missing_ok=True)
        except OSError:  # pragma: no cover - defensive
            logger.debug("temp file cleanup failed", extra={"path": str(tmp_path)})
        raise PersistenceError(f"Failed to write {path}: {exc}") from exc


class DocumentStorage(ABC):
    """Load/save interface for a single JSON object."""

    @abstractmethod
    def exists(self) -> bool:
        ...

    @abstractmethod
    def load(self) -> Optional[Dict[str, Any]]:
        """Return the stored document, or None when nothing has been saved."""

    @abstractmethod
    def save(self, document: Dict[str, Any]) -> None:
        ...


class JsonFileStorage(DocumentStorage):
    """Stores one JSON object per file; every save rewrites the whole file."""

    def __init__(self, path: Path) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def exists(self) -> bool:
        return self._path.is_file()

    def load(self) -> Optional[Dict[str, Any]]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise PersistenceError(f"Failed to read {self._path}: {exc}") from exc

        try:
            data = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise PersistenceError(f"Corrupt JSON in {self._path}: {exc}") from exc

        if not isinstance(data, dict):
            raise PersistenceError(f"Expected a JSON object in {self._path}")
        return data

    def save(self, document: Dict[str, Any]) -> None:
        try:
            text = json.dumps(document, indent=2, ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise PersistenceError(f"Document for {self._path} is not serializable: {exc}") from exc
        atomic_write_text(self._path, text + "\n")

    def __repr__(self) -> str:
        return f"JsonFileStorage({str(self._path)!r})"


__all__ = ["DocumentStorage", "JsonFileStorage", "atomic_write_text"]
