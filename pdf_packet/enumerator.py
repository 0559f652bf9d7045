"""Read the ordered list of source items from a packet store."""

from __future__ import annotations

import logging
from typing import List

from .stores.base import LABEL_COLUMN, SOURCE_ID_COLUMN, PacketStore
from .types import SourceItem
from .utils import cell_text

LOGGER = logging.getLogger("pdf_packet.enumerator")


class SourceEnumerator:
    """Turn the rows of the source list into :class:`SourceItem` objects.

    Table order is preserved exactly; it is the page order of the merged
    output. Duplicate source ids are kept and yield duplicate pages.
    """

    def __init__(self, store: PacketStore) -> None:
        self.store = store

    def enumerate(self) -> List[SourceItem]:
        rows = self.store.read_rows()
        items: List[SourceItem] = []

        # Row 1 is the header; data rows keep their sheet row number.
        for row_index, row in enumerate(rows[1:], start=2):
            label = cell_text(row[LABEL_COLUMN - 1]) if len(row) >= LABEL_COLUMN else ""
            source_id = (
                cell_text(row[SOURCE_ID_COLUMN - 1]).strip()
                if len(row) >= SOURCE_ID_COLUMN
                else ""
            )
            if not label or not source_id:
                LOGGER.debug("Skipping incomplete row %d", row_index)
                continue
            items.append(SourceItem(label=label, source_id=source_id, row_index=row_index))

        LOGGER.info("Enumerated %d source item(s) from %d row(s)", len(items), max(0, len(rows) - 1))
        return items


__all__ = ["SourceEnumerator"]
