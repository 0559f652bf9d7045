"""Output sinks for the merged artifact."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path
from typing import Optional, Protocol

from .exceptions import ConfigurationError, PersistError
from .utils import PathLike, ensure_path, format_file_size

LOGGER = logging.getLogger("pdf_packet.sinks")


class OutputSink(Protocol):
    """Destination for the merged PDF."""

    def resolve(self, folder_id: str) -> object:
        """Return the destination for *folder_id* or raise :class:`ConfigurationError`."""

    def write(self, folder_id: str, filename: str, data: bytes) -> str:
        """Persist *data* and return the artifact location."""


class DirectorySink:
    """Write artifacts into local directories.

    ``folder_id`` is a directory path; relative ids are resolved against
    *base_dir* (the current directory by default). The directory must
    already exist.
    """

    def __init__(self, base_dir: Optional[PathLike] = None) -> None:
        self.base_dir = ensure_path(base_dir) if base_dir is not None else None

    def resolve(self, folder_id: str) -> Path:
        folder = Path(folder_id).expanduser()
        if not folder.is_absolute() and self.base_dir is not None:
            folder = self.base_dir / folder
        folder = ensure_path(folder)

        if not folder.exists():
            raise ConfigurationError(f"Output folder not found: {folder_id}")
        if not folder.is_dir():
            raise ConfigurationError(f"Output folder is not a directory: {folder_id}")
        if not os.access(folder, os.W_OK):
            raise ConfigurationError(f"Output folder is not writable: {folder_id}")
        return folder

    def write(self, folder_id: str, filename: str, data: bytes) -> str:
        if not filename or os.sep in filename or (os.altsep and os.altsep in filename):
            raise PersistError(f"Invalid output file name: {filename!r}")

        try:
            folder = self.resolve(folder_id)
        except ConfigurationError as exc:
            raise PersistError(str(exc)) from exc

        destination = folder / filename
        temp_path: Optional[Path] = None
        try:
            with tempfile.NamedTemporaryFile(
                "wb", delete=False, dir=folder, suffix=".tmp"
            ) as handle:
                temp_path = Path(handle.name)
                handle.write(data)
            temp_path.replace(destination)
        except OSError as exc:
            LOGGER.error("Failed to write merged PDF to %s: %s", destination, exc)
            if temp_path is not None:
                temp_path.unlink(missing_ok=True)
            raise PersistError(f"Failed to write merged PDF to {destination}: {exc}") from exc

        LOGGER.info("Wrote %s to %s", format_file_size(len(data)), destination)
        return destination.as_uri()


__all__ = ["OutputSink", "DirectorySink"]
