"""
Type definitions and dataclasses for pdf-packet.

This module defines data structures used throughout the library.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Optional


class ItemStatus:
    """Values written to the status column of a source row."""

    SUCCESS = "SUCCESS"
    ERROR = "ERROR"
    SKIPPED = "SKIPPED"
    NOT_PROCESSED = ""


class RunStatus:
    """Values written to the run-level process status field."""

    NOT_STARTED = "NOT STARTED"
    RUNNING = "RUNNING"
    COMPLETE = "COMPLETE"
    ERROR = "ERROR"


@dataclass(frozen=True)
class SourceItem:
    """
    One unit of work read from the source list.

    Attributes:
        label: Human readable name for the document (e.g. a person's name)
        source_id: Identifier resolvable by a renderer
        row_index: 1-based sheet row of the item, used for status write-back
    """
    label: str
    source_id: str
    row_index: int


@dataclass(frozen=True)
class RenderResult:
    """Outcome of rendering one :class:`SourceItem`; exactly one of ``data``/``error`` is set."""

    item: SourceItem
    data: Optional[bytes] = None
    error: Optional[str] = None

    def __post_init__(self) -> None:
        if (self.data is None) == (self.error is None):
            raise ValueError("RenderResult requires exactly one of data or error")

    @classmethod
    def success(cls, item: SourceItem, data: bytes) -> "RenderResult":
        return cls(item=item, data=data)

    @classmethod
    def failure(cls, item: SourceItem, error: str) -> "RenderResult":
        return cls(item=item, error=error)

    @property
    def ok(self) -> bool:
        return self.data is not None


@dataclass(frozen=True)
class MergeFailure:
    """A merge input that was skipped, by position in the input sequence."""

    index: int
    reason: str


@dataclass(frozen=True)
class MergeSection:
    """Where one copied input landed in the merged document."""

    index: int
    title: Optional[str]
    start_page: int
    page_count: int


@dataclass
class MergeResult:
    """
    Result of a merge pass.

    Attributes:
        data: Serialized merged PDF
        page_count: Total number of pages in ``data``
        sections: One entry per successfully copied input, in order
        failures: One entry per skipped input, in order
    """
    data: bytes
    page_count: int
    sections: List[MergeSection] = field(default_factory=list)
    failures: List[MergeFailure] = field(default_factory=list)

    def __str__(self) -> str:
        return (
            f"MergeResult(pages={self.page_count}, inputs={len(self.sections)}, "
            f"failures={len(self.failures)})"
        )


@dataclass
class RunReport:
    """
    Aggregate outcome of one run.

    Attributes:
        status: One of the :class:`RunStatus` values
        total: Number of enumerated source items
        succeeded: Items whose pages are part of the merged output
        render_failed: Items whose render failed
        merge_failed: Items that rendered but could not be merged
        page_count: Pages in the merged output
        output_location: Location of the merged artifact, if produced
        started_at: ISO-8601 start timestamp
        completed_at: ISO-8601 completion timestamp
        error: Run-level error message, if any
    """
    status: str = RunStatus.NOT_STARTED
    total: int = 0
    succeeded: int = 0
    render_failed: int = 0
    merge_failed: int = 0
    page_count: int = 0
    output_location: Optional[str] = None
    started_at: Optional[str] = None
    completed_at: Optional[str] = None
    error: Optional[str] = None

    @property
    def failed(self) -> int:
        return self.render_failed + self.merge_failed

    def __str__(self) -> str:
        return (
            "RunReport(status={status}, total={total}, succeeded={succeeded}, "
            "failed={failed}, pages={pages})"
        ).format(
            status=self.status,
            total=self.total,
            succeeded=self.succeeded,
            failed=self.failed,
            pages=self.page_count,
        )
