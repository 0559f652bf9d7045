"""Utilities shared across pdf-packet modules."""

from __future__ import annotations

import logging
import re
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional, Union

PathLike = Union[str, Path]

_KEY_PATTERN = re.compile(r"[^a-z0-9]+")


def get_logger(name: str = "pdf_packet", level: int = logging.INFO) -> logging.Logger:
    logger = logging.getLogger(name)
    if not logger.handlers:
        handler = logging.StreamHandler()
        formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")
        handler.setFormatter(formatter)
        logger.addHandler(handler)
        logger.propagate = False
    logger.setLevel(level)
    return logger


def ensure_path(path: PathLike) -> Path:
    """Return an absolute :class:`~pathlib.Path` for *path*, expanding ``~``."""

    return Path(path).expanduser().resolve(strict=False)


def normalize_key(key: object) -> str:
    """Fold a settings key so ``"Output Folder ID"`` and ``"outputFolderId"`` compare equal."""

    return _KEY_PATTERN.sub("", str(key).lower())


def utc_now() -> str:
    return datetime.now(tz=timezone.utc).isoformat(timespec="seconds")


def truncate(text: Optional[str], limit: int) -> str:
    if not text:
        return ""
    text = str(text)
    if limit <= 0 or len(text) <= limit:
        return text
    return text[:limit]


def cell_text(value: object) -> str:
    """Return the string content of a table cell, treating ``None`` as empty."""

    if value is None:
        return ""
    return str(value)


def format_file_size(size_bytes: float) -> str:
    """Return *size_bytes* as a short human-readable size such as ``"1.5 MB"``."""

    for unit in ("B", "KB", "MB", "GB", "TB"):
        if size_bytes < 1024.0:
            return f"{size_bytes:.1f} {unit}"
        size_bytes /= 1024.0
    return f"{size_bytes:.1f} PB"


__all__ = [
    "PathLike",
    "get_logger",
    "ensure_path",
    "normalize_key",
    "utc_now",
    "truncate",
    "cell_text",
    "format_file_size",
]
