"""openpyxl backed packet store using a ``Config`` and a ``Documents`` sheet."""

from __future__ import annotations

import logging
import tempfile
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import openpyxl
from openpyxl.workbook.workbook import Workbook
from openpyxl.worksheet.worksheet import Worksheet

from ..config import (
    OUTPUT_FOLDER_ID,
    PDF_NAME,
    PROCESS_STATUS,
    STATUS_LABELS,
    label_for,
)
from ..exceptions import ConfigurationError
from ..types import RunStatus
from ..utils import PathLike, cell_text, ensure_path, normalize_key
from .base import DEFAULT_HEADER, ERROR_COLUMN, STATUS_COLUMN, WRITE_BACK_COLUMNS

LOGGER = logging.getLogger("pdf_packet.stores")

CONFIG_SHEET = "Config"
DOCUMENTS_SHEET = "Documents"


class WorkbookStore:
    """Read settings and rows from, and write status back to, an ``.xlsx`` workbook.

    Every write is saved immediately so progress is visible to anyone opening
    the workbook while a run is in flight.
    """

    def __init__(
        self,
        path: PathLike,
        *,
        config_sheet: str = CONFIG_SHEET,
        documents_sheet: str = DOCUMENTS_SHEET,
    ) -> None:
        self.path = ensure_path(path)
        if not self.path.is_file():
            raise ConfigurationError(f"Workbook not found: {self.path}")

        try:
            self._workbook: Workbook = openpyxl.load_workbook(self.path)
        except Exception as exc:  # pragma: no cover - openpyxl errors vary
            raise ConfigurationError(f"Unable to open workbook {self.path}: {exc}") from exc

        self._config = self._sheet(config_sheet)
        self._documents = self._sheet(documents_sheet)

    def _sheet(self, name: str) -> Worksheet:
        if name not in self._workbook.sheetnames:
            raise ConfigurationError(f"Workbook {self.path.name} has no '{name}' sheet")
        return self._workbook[name]

    @classmethod
    def create_template(
        cls,
        path: PathLike,
        *,
        settings: Optional[Mapping[str, Any]] = None,
        rows: Optional[Iterable[Sequence[Any]]] = None,
    ) -> "WorkbookStore":
        """Write a new workbook with both sheets and return a store for it."""

        target = ensure_path(path)
        target.parent.mkdir(parents=True, exist_ok=True)

        workbook = Workbook()
        config = workbook.active
        config.title = CONFIG_SHEET

        entries: Dict[str, List[Any]] = {}

        def put(key: str, value: Any) -> None:
            folded = normalize_key(key)
            if folded in entries:
                entries[folded][1] = value
            else:
                entries[folded] = [label_for(key), value]

        put(OUTPUT_FOLDER_ID, "")
        put(PDF_NAME, "")
        for key, value in (settings or {}).items():
            put(key, value)
        for key in STATUS_LABELS:
            put(key, "")
        put(PROCESS_STATUS, RunStatus.NOT_STARTED)
        for label, value in entries.values():
            config.append([label, value])

        documents = workbook.create_sheet(DOCUMENTS_SHEET)
        documents.append(list(DEFAULT_HEADER))
        for row in rows or []:
            documents.append(list(row))

        _save_atomic(workbook, target)
        LOGGER.info("Created workbook template %s", target)
        return cls(target)

    def save(self) -> None:
        _save_atomic(self._workbook, self.path)

    def read_settings(self) -> Dict[str, Any]:
        settings: Dict[str, Any] = {}
        for key, value in self._config.iter_rows(min_row=1, max_col=2, values_only=True):
            if key is None or not cell_text(key).strip():
                continue
            settings[cell_text(key).strip()] = value
        return settings

    def write_settings(self, values: Mapping[str, Any]) -> None:
        rows_by_key: Dict[str, int] = {}
        for row_number in range(1, self._config.max_row + 1):
            key = self._config.cell(row=row_number, column=1).value
            if key is not None and cell_text(key).strip():
                rows_by_key.setdefault(normalize_key(key), row_number)

        for key, value in values.items():
            row_number = rows_by_key.get(normalize_key(key))
            if row_number is None:
                self._config.append([label_for(key), value])
                rows_by_key[normalize_key(key)] = self._config.max_row
            else:
                self._config.cell(row=row_number, column=2, value=value)
        self.save()

    def read_rows(self) -> List[List[Any]]:
        return [list(row) for row in self._documents.iter_rows(values_only=True)]

    def write_item_status(self, row_index: int, status: str, error: Optional[str]) -> None:
        if row_index < 2 or row_index > self._documents.max_row:
            raise IndexError(f"Row {row_index} is outside the source list")
        self._documents.cell(row=row_index, column=STATUS_COLUMN, value=status or None)
        self._documents.cell(row=row_index, column=ERROR_COLUMN, value=error or None)
        self.save()

    def clear_item_statuses(self) -> None:
        last_column = self._documents.max_column
        for row_number in range(2, self._documents.max_row + 1):
            for column in WRITE_BACK_COLUMNS:
                if column <= last_column:
                    self._documents.cell(row=row_number, column=column, value=None)
        self.save()


def _save_atomic(workbook: Workbook, path: Path) -> None:
    with tempfile.NamedTemporaryFile(delete=False, dir=path.parent, suffix=".tmp") as handle:
        temp_path = Path(handle.name)
    try:
        workbook.save(temp_path)
        temp_path.replace(path)
    except Exception:
        temp_path.unlink(missing_ok=True)
        raise


__all__ = ["WorkbookStore", "CONFIG_SHEET", "DOCUMENTS_SHEET"]
