"""In-memory data provider: reference implementation of the bulk contract."""

from __future__ import annotations

import copy
from typing import TYPE_CHECKING

from remote_backup._provider import DataProvider

if TYPE_CHECKING:
    from collections.abc import Iterator, Mapping

    from remote_backup._types import Snapshot


class MemoryProvider(DataProvider):
    """Key/value store held in a dict.

    Snapshots are deep copies, so later mutations of the store never leak
    into an exported snapshot and vice versa.

    :param items: Optional initial items.
    """

    def __init__(self, items: Mapping[str, object] | None = None) -> None:
        self._items: dict[str, object] = copy.deepcopy(dict(items or {}))

    @property
    def name(self) -> str:
        return "memory"

    def __repr__(self) -> str:
        return f"MemoryProvider(keys={sorted(self._items)!r})"

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[str]:
        return iter(self._items)

    # region: item access
    def get_item(self, key: str, default: object = None) -> object:
        return self._items.get(key, default)

    def set_item(self, key: str, value: object) -> None:
        self._items[key] = copy.deepcopy(value)

    def remove_item(self, key: str) -> None:
        self._items.pop(key, None)

    # endregion

    # region: bulk operations
    def export_all(self) -> Snapshot:
        return copy.deepcopy(self._items)

    def import_all(self, snapshot: Snapshot) -> None:
        if not isinstance(snapshot, dict):
            raise TypeError(f"Snapshot must be a JSON object, got {type(snapshot).__name__}")
        self._items.update(copy.deepcopy(snapshot))

    def clear_all(self) -> None:
        self._items.clear()

    # endregion
