"""JSON file data provider: a key/value store persisted to one local file."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import TYPE_CHECKING

from remote_backup._provider import DataProvider

if TYPE_CHECKING:
    from remote_backup._types import Snapshot


class JsonFileProvider(DataProvider):
    """Key/value store persisted as a JSON object in a local file.

    Every mutation rewrites the whole file via temp file + rename. A missing
    file reads as an empty store.

    :param path: Location of the JSON file. Parent directories are created.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path).resolve()
        self._path.parent.mkdir(parents=True, exist_ok=True)

    @property
    def name(self) -> str:
        return "json-file"

    @property
    def path(self) -> Path:
        return self._path

    def __repr__(self) -> str:
        return f"JsonFileProvider(path={str(self._path)!r})"

    # region: file helpers
    def _load(self) -> dict[str, object]:
        try:
            text = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        data = json.loads(text)
        if not isinstance(data, dict):
            raise ValueError(f"Store file does not contain a JSON object: {self._path}")
        return data

    def _save(self, items: dict[str, object]) -> None:
        fd, tmp_path = tempfile.mkstemp(dir=str(self._path.parent), suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(items, f)
            os.replace(tmp_path, self._path)
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    # endregion

    # region: item access
    def get_item(self, key: str, default: object = None) -> object:
        return self._load().get(key, default)

    def set_item(self, key: str, value: object) -> None:
        items = self._load()
        items[key] = value
        self._save(items)

    def remove_item(self, key: str) -> None:
        items = self._load()
        if key in items:
            del items[key]
            self._save(items)

    def keys(self) -> list[str]:
        return list(self._load())

    # endregion

    # region: bulk operations
    def export_all(self) -> Snapshot:
        return self._load()

    def import_all(self, snapshot: Snapshot) -> None:
        if not isinstance(snapshot, dict):
            raise TypeError(f"Snapshot must be a JSON object, got {type(snapshot).__name__}")
        items = self._load()
        items.update(snapshot)
        self._save(items)

    def clear_all(self) -> None:
        self._save({})

    # endregion
