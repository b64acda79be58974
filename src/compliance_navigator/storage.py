"""Local progress stores: in-memory and a single JSON file.

``JsonFileProgressStore`` is the single-user analogue of browser local
storage: one document, overwritten on every save.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path

from pydantic import ValidationError

from compliance_navigator.errors import ProgressCorrupt
from compliance_navigator.interfaces import ProgressStore
from compliance_navigator.models.state import SavedProgress

logger = logging.getLogger(__name__)


class InMemoryProgressStore(ProgressStore):
    """Keeps the snapshot as a JSON document in memory."""

    def __init__(self) -> None:
        self._document: str | None = None

    def save(self, progress: SavedProgress) -> None:
        self._document = progress.model_dump_json(by_alias=True)

    def load(self) -> SavedProgress | None:
        if self._document is None:
            return None
        try:
            return SavedProgress.model_validate_json(self._document)
        except ValidationError as exc:
            raise ProgressCorrupt(f"Saved progress is corrupt: {exc}") from exc

    def clear(self) -> None:
        self._document = None

    def exists(self) -> bool:
        return self._document is not None


class JsonFileProgressStore(ProgressStore):
    """Stores the snapshot as a camelCase JSON document at ``path``."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    def save(self, progress: SavedProgress) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        # Write-then-rename so a crash never leaves a half-written file
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with tmp.open("w", encoding="utf-8") as f:
            json.dump(progress.to_document(), f, ensure_ascii=False, indent=2)
        tmp.replace(self._path)
        logger.debug("Progress saved to %s", self._path)

    def load(self) -> SavedProgress | None:
        if not self._path.exists():
            return None
        try:
            with self._path.open("r", encoding="utf-8") as f:
                document = json.load(f)
            return SavedProgress.model_validate(document)
        except (json.JSONDecodeError, UnicodeDecodeError, ValidationError) as exc:
            raise ProgressCorrupt(f"Saved progress at {self._path} is corrupt: {exc}") from exc

    def clear(self) -> None:
        self._path.unlink(missing_ok=True)

    def exists(self) -> bool:
        return self._path.exists()
