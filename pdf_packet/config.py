"""Run configuration read from the settings table of a packet store."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Tuple, Union

from .utils import cell_text, normalize_key

OUTPUT_FOLDER_ID = "outputFolderId"
PDF_NAME = "pdfName"
TEMP_FOLDER_ID = "tempFolderId"
BOOKMARKS = "bookmarks"
TITLE = "title"

REQUIRED_SETTINGS = (OUTPUT_FOLDER_ID, PDF_NAME)

# Display labels used when a store has to create a settings row.
SETTING_LABELS: Dict[str, str] = {
    OUTPUT_FOLDER_ID: "Output Folder ID",
    PDF_NAME: "PDF Name",
    TEMP_FOLDER_ID: "Temp Folder ID",
    BOOKMARKS: "Bookmarks",
    TITLE: "Title",
}

PROCESS_STATUS = "processStatus"
TOTAL_DOCUMENTS = "totalDocuments"
SUCCEEDED = "succeeded"
FAILED = "failed"
TOTAL_PAGES = "totalPages"
START_TIME = "startTime"
COMPLETION_TIME = "completionTime"
ERROR_MESSAGE = "errorMessage"
FINAL_PDF_URL = "finalPdfUrl"

STATUS_LABELS: Dict[str, str] = {
    PROCESS_STATUS: "Process Status",
    TOTAL_DOCUMENTS: "Total Documents",
    SUCCEEDED: "Succeeded",
    FAILED: "Failed",
    TOTAL_PAGES: "Total Pages",
    START_TIME: "Start Time",
    COMPLETION_TIME: "Completion Time",
    ERROR_MESSAGE: "Error Message",
    FINAL_PDF_URL: "Final PDF URL",
}

_TRUE_VALUES = {"1", "true", "yes", "y", "on"}
_FALSE_VALUES = {"0", "false", "no", "n", "off"}


def label_for(key: str) -> str:
    """Return the display label for a known settings or status key."""

    return SETTING_LABELS.get(key) or STATUS_LABELS.get(key) or key


@dataclass(frozen=True)
class PacketConfig:
    """
    Validated run settings.

    Attributes:
        output_folder_id: Destination location for the merged artifact
        pdf_name: Base name of the artifact; ``.pdf`` is appended
        temp_folder_id: Scratch location of the legacy batched variant, unused
        bookmarks: Add one outline entry per merged document
        title: Optional ``/Title`` metadata for the merged document
    """
    output_folder_id: str
    pdf_name: str
    temp_folder_id: Optional[str] = None
    bookmarks: bool = True
    title: Optional[str] = None

    @property
    def output_filename(self) -> str:
        name = self.pdf_name
        if name.lower().endswith(".pdf"):
            name = name[:-4]
        return f"{name}.pdf"


@dataclass(frozen=True)
class ValidConfig:
    config: PacketConfig


@dataclass(frozen=True)
class InvalidConfig:
    missing: Tuple[str, ...] = ()
    invalid: Tuple[str, ...] = ()

    @property
    def message(self) -> str:
        parts = []
        if self.missing:
            parts.append(f"Missing required configuration: {', '.join(self.missing)}")
        parts.extend(self.invalid)
        return "; ".join(parts)


ConfigValidation = Union[ValidConfig, InvalidConfig]


def normalize_settings(settings: Mapping[object, object]) -> Dict[str, str]:
    """Return *settings* keyed by folded key with stripped string values."""

    return {
        normalize_key(key): cell_text(value).strip()
        for key, value in settings.items()
        if key is not None and cell_text(key).strip()
    }


def _pdf_name_problem(pdf_name: str) -> Optional[str]:
    if "/" in pdf_name or "\\" in pdf_name:
        return f"PDF Name must not contain path separators: {pdf_name!r}"
    stem = pdf_name[:-4] if pdf_name.lower().endswith(".pdf") else pdf_name
    if not stem.strip() or stem.strip() in (".", ".."):
        return f"PDF Name has no file name before the extension: {pdf_name!r}"
    return None


def _parse_flag(value: str, default: bool) -> bool:
    lowered = value.strip().lower()
    if lowered in _TRUE_VALUES:
        return True
    if lowered in _FALSE_VALUES:
        return False
    return default


def validate_config(settings: Mapping[object, object]) -> ConfigValidation:
    """Validate raw *settings* and return :class:`ValidConfig` or :class:`InvalidConfig`."""

    values = normalize_settings(settings)

    missing = tuple(
        key for key in REQUIRED_SETTINGS if not values.get(normalize_key(key))
    )
    if missing:
        return InvalidConfig(missing=missing)

    name_problem = _pdf_name_problem(values[normalize_key(PDF_NAME)])
    if name_problem:
        return InvalidConfig(invalid=(name_problem,))

    return ValidConfig(
        PacketConfig(
            output_folder_id=values[normalize_key(OUTPUT_FOLDER_ID)],
            pdf_name=values[normalize_key(PDF_NAME)],
            temp_folder_id=values.get(normalize_key(TEMP_FOLDER_ID)) or None,
            bookmarks=_parse_flag(values.get(normalize_key(BOOKMARKS), ""), True),
            title=values.get(normalize_key(TITLE)) or None,
        )
    )


__all__ = [
    "PacketConfig",
    "ValidConfig",
    "InvalidConfig",
    "ConfigValidation",
    "validate_config",
    "normalize_settings",
    "label_for",
    "REQUIRED_SETTINGS",
    "SETTING_LABELS",
    "STATUS_LABELS",
]
