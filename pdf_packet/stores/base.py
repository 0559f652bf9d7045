"""Store protocol for the settings table and the source list."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional, Protocol

LABEL_COLUMN = 1
SOURCE_ID_COLUMN = 2
STATUS_COLUMN = 3
ERROR_COLUMN = 4
# Written only by the legacy batched variant; cleared on reset.
BATCH_COLUMN = 5

WRITE_BACK_COLUMNS = (STATUS_COLUMN, ERROR_COLUMN, BATCH_COLUMN)

DEFAULT_HEADER = ("Name", "Document ID", "Status", "Error")


class PacketStore(Protocol):
    """Protocol defining the narrow read/write surface the core needs."""

    def read_settings(self) -> Dict[str, Any]:
        """Return the raw key/value settings, including status fields."""

    def write_settings(self, values: Mapping[str, Any]) -> None:
        """Write the given settings, matching existing keys case-insensitively."""

    def read_rows(self) -> List[List[Any]]:
        """Return every row of the source list, header row first."""

    def write_item_status(self, row_index: int, status: str, error: Optional[str]) -> None:
        """Write the status and error cells of the 1-based sheet row *row_index*."""

    def clear_item_statuses(self) -> None:
        """Clear every write-back column of every data row."""
