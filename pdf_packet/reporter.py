"""Best-effort status write-back to a packet store."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from .config import (
    COMPLETION_TIME,
    ERROR_MESSAGE,
    FAILED,
    FINAL_PDF_URL,
    PROCESS_STATUS,
    START_TIME,
    STATUS_LABELS,
    SUCCEEDED,
    TOTAL_DOCUMENTS,
    TOTAL_PAGES,
)
from .stores.base import PacketStore
from .types import RunReport, RunStatus
from .utils import truncate

LOGGER = logging.getLogger("pdf_packet.reporter")

DEFAULT_MAX_ERROR_LENGTH = 200


class StatusReporter:
    """Write per-item and run-level status.

    Writes are independent: a failure to persist one of them is logged and
    the run carries on. Error text is cut to *max_error_length* characters.
    """

    def __init__(self, store: PacketStore, *, max_error_length: int = DEFAULT_MAX_ERROR_LENGTH) -> None:
        self.store = store
        self.max_error_length = max_error_length
        self.failed_writes = 0

    def report_item(self, row_index: int, status: str, error: Optional[str] = None) -> bool:
        message = truncate(error, self.max_error_length)
        try:
            self.store.write_item_status(row_index, status, message or None)
        except Exception as exc:  # best-effort; store errors vary
            self.failed_writes += 1
            LOGGER.warning("Failed to write status for row %d: %s", row_index, exc)
            return False
        LOGGER.debug("Row %d status: %s %s", row_index, status, message)
        return True

    def report_run(self, report: RunReport) -> bool:
        return self._write_settings(self._run_fields(report))

    def reset(self) -> bool:
        """Clear item statuses and restore run-level fields to their initial values."""

        cleared = True
        try:
            self.store.clear_item_statuses()
        except Exception as exc:  # best-effort; store errors vary
            self.failed_writes += 1
            LOGGER.warning("Failed to clear item statuses: %s", exc)
            cleared = False

        initial: Dict[str, Any] = {key: "" for key in STATUS_LABELS}
        initial[PROCESS_STATUS] = RunStatus.NOT_STARTED
        return self._write_settings(initial) and cleared

    def _run_fields(self, report: RunReport) -> Dict[str, Any]:
        return {
            PROCESS_STATUS: report.status,
            TOTAL_DOCUMENTS: report.total,
            SUCCEEDED: report.succeeded,
            FAILED: report.failed,
            TOTAL_PAGES: report.page_count,
            START_TIME: report.started_at or "",
            COMPLETION_TIME: report.completed_at or "",
            ERROR_MESSAGE: truncate(report.error, self.max_error_length),
            FINAL_PDF_URL: report.output_location or "",
        }

    def _write_settings(self, values: Dict[str, Any]) -> bool:
        try:
            self.store.write_settings(values)
        except Exception as exc:  # best-effort; store errors vary
            self.failed_writes += 1
            LOGGER.warning("Failed to write run status: %s", exc)
            return False
        return True


__all__ = ["StatusReporter", "DEFAULT_MAX_ERROR_LENGTH"]
