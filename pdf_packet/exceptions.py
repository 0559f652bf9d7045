"""
Custom exceptions for pdf-packet.

Per-item failures (:class:`RenderError`, :class:`MergeParseError`) are
recovered by the orchestrator. Run-level failures carry the persisted
:class:`~pdf_packet.types.RunReport` on their ``report`` attribute once the
orchestrator has written the terminal status.
"""

from __future__ import annotations

from typing import Any, Iterable, Optional


class PDFPacketException(Exception):
    """Base exception for all pdf-packet errors."""

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.default_message)
        self.message = message or self.default_message
        self.report: Optional[Any] = None

    @property
    def default_message(self) -> str:
        return "An unknown pdf-packet error occurred."


class ConfigurationError(PDFPacketException):
    """Raised when required settings are missing or the destination is unusable."""

    def __init__(self, message: str = "", *, missing: Iterable[str] = ()) -> None:
        self.missing = tuple(missing)
        if not message and self.missing:
            message = f"Missing required configuration: {', '.join(self.missing)}"
        super().__init__(message)

    @property
    def default_message(self) -> str:
        return "Invalid configuration."


class RenderError(PDFPacketException):
    """Raised when a single source document cannot be rendered to PDF."""

    @property
    def reason(self) -> str:
        return self.message

    @property
    def default_message(self) -> str:
        return "Unable to render document."


class MergeError(PDFPacketException):
    """Base class for merge failures tied to an input position."""

    def __init__(self, message: str = "", *, index: Optional[int] = None) -> None:
        super().__init__(message)
        self.index = index

    @property
    def reason(self) -> str:
        return self.message

    @property
    def default_message(self) -> str:
        return "PDF merge failed."


class MergeParseError(MergeError):
    """Raised when one merge input is not a usable PDF document."""

    @property
    def default_message(self) -> str:
        return "Input is not a valid PDF document."


class MergeEmptyError(MergeError):
    """Raised when no pages at all could be copied into the merged document."""

    @property
    def default_message(self) -> str:
        return "No pages could be merged from the provided inputs."


class NoInputsError(PDFPacketException):
    """Raised when every render failed and there is nothing to merge."""

    @property
    def default_message(self) -> str:
        return "No inputs available to merge."


class PersistError(PDFPacketException):
    """Raised when the merged artifact or a status update cannot be written."""

    @property
    def default_message(self) -> str:
        return "Failed to persist data."


class PdfOptimizationError(PDFPacketException):
    """Raised when optimization of the merged output cannot be performed."""

    @property
    def default_message(self) -> str:
        return "PDF optimization failed."


class UnhandledRunError(PDFPacketException):
    """Raised when an unexpected exception aborted a run."""

    @property
    def default_message(self) -> str:
        return "The run failed with an unexpected error."
