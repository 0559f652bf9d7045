"""In-memory packet store."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

from ..config import label_for
from ..utils import normalize_key
from .base import DEFAULT_HEADER, ERROR_COLUMN, STATUS_COLUMN, WRITE_BACK_COLUMNS


class MemoryStore:
    """Dictionary and list backed store, useful when embedding the library."""

    def __init__(
        self,
        settings: Optional[Mapping[str, Any]] = None,
        rows: Optional[Iterable[Sequence[Any]]] = None,
        *,
        header: Sequence[str] = DEFAULT_HEADER,
    ) -> None:
        self.settings: Dict[str, Any] = dict(settings or {})
        self.rows: List[List[Any]] = [list(header)]
        self.rows.extend(list(row) for row in rows or [])

    def _existing_key(self, key: str) -> Optional[str]:
        folded = normalize_key(key)
        for existing in self.settings:
            if normalize_key(existing) == folded:
                return existing
        return None

    def read_settings(self) -> Dict[str, Any]:
        return dict(self.settings)

    def write_settings(self, values: Mapping[str, Any]) -> None:
        for key, value in values.items():
            target = self._existing_key(key) or label_for(key)
            self.settings[target] = value

    def get_setting(self, key: str) -> Any:
        existing = self._existing_key(key)
        return self.settings.get(existing) if existing is not None else None

    def read_rows(self) -> List[List[Any]]:
        return [list(row) for row in self.rows]

    def write_item_status(self, row_index: int, status: str, error: Optional[str]) -> None:
        if row_index < 2 or row_index > len(self.rows):
            raise IndexError(f"Row {row_index} is outside the source list")
        row = self.rows[row_index - 1]
        while len(row) < ERROR_COLUMN:
            row.append("")
        row[STATUS_COLUMN - 1] = status
        row[ERROR_COLUMN - 1] = error or ""

    def clear_item_statuses(self) -> None:
        for row in self.rows[1:]:
            for column in WRITE_BACK_COLUMNS:
                if len(row) >= column:
                    row[column - 1] = ""

    def item_status(self, row_index: int) -> tuple[str, str]:
        row = self.rows[row_index - 1]
        padded = list(row) + [""] * max(0, ERROR_COLUMN - len(row))
        return padded[STATUS_COLUMN - 1] or "", padded[ERROR_COLUMN - 1] or ""
