"""Renderer resolving source ids to files inside a source directory."""

from __future__ import annotations

import glob
import logging
import os
from pathlib import Path
from typing import Optional

from ..exceptions import RenderError
from ..utils import PathLike, ensure_path
from .soffice import SofficeConverter

LOGGER = logging.getLogger("pdf_packet.renderers")

PDF_SUFFIX = ".pdf"


class FileRenderer:
    """Render source ids that name files below *source_dir*.

    A source id is either an exact file name (``report.docx``) or a stem that
    matches exactly one file (``report`` -> ``report.docx``). PDFs are returned
    unchanged; anything else goes through *converter* when one is configured.
    """

    def __init__(self, source_dir: PathLike, converter: Optional[SofficeConverter] = None) -> None:
        self.source_dir = ensure_path(source_dir)
        self.converter = converter

    def _resolve(self, source_id: str) -> Path:
        candidate = ensure_path(self.source_dir / source_id)
        if candidate == self.source_dir or not candidate.is_relative_to(self.source_dir):
            raise RenderError(f"Access denied for document {source_id!r}")

        if candidate.is_file():
            return candidate

        matches = sorted(
            path
            for path in candidate.parent.glob(f"{glob.escape(candidate.name)}.*")
            if path.is_file() and ensure_path(path).is_relative_to(self.source_dir)
        )
        if not matches:
            raise RenderError(f"Document not found: {source_id!r}")
        if len(matches) > 1:
            names = ", ".join(path.name for path in matches)
            raise RenderError(f"Document id {source_id!r} is ambiguous: {names}")
        return matches[0]

    def render(self, source_id: str) -> bytes:
        source = self._resolve(source_id)
        if not os.access(source, os.R_OK):
            raise RenderError(f"Access denied for document {source_id!r}")

        if source.suffix.lower() == PDF_SUFFIX:
            try:
                data = source.read_bytes()
            except OSError as exc:
                raise RenderError(f"Unable to read {source.name}: {exc}") from exc
            LOGGER.debug("Read %d bytes from %s", len(data), source)
            return data

        if self.converter is None:
            raise RenderError(
                f"Unsupported document type {source.suffix or '(none)'} for {source.name}"
            )
        return self.converter.convert(source)


__all__ = ["FileRenderer"]
