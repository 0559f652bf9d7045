"""Office document to PDF conversion through a headless LibreOffice."""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from pathlib import Path
from typing import Optional

from ..exceptions import RenderError

LOGGER = logging.getLogger("pdf_packet.renderers")

_EXECUTABLES = ("soffice", "libreoffice")


def _soffice_available() -> str | None:
    for name in _EXECUTABLES:
        found = shutil.which(name)
        if found:
            return found
    return None


class SofficeConverter:
    """Convert a document to PDF with ``soffice --headless --convert-to pdf``."""

    def __init__(self, executable: Optional[str] = None, *, timeout: Optional[float] = 120.0) -> None:
        self.executable = executable
        self.timeout = timeout

    def convert(self, source: Path) -> bytes:
        executable = self.executable or _soffice_available()
        if not executable:
            raise RenderError(
                f"Cannot convert {source.name}: LibreOffice (soffice) is not installed"
            )

        with tempfile.TemporaryDirectory(prefix="pdf-packet-") as outdir:
            command = [
                executable,
                "--headless",
                "--convert-to",
                "pdf",
                "--outdir",
                outdir,
                str(source),
            ]
            LOGGER.debug("Running soffice command: %s", command)
            try:
                result = subprocess.run(
                    command,
                    capture_output=True,
                    text=True,
                    check=False,
                    timeout=self.timeout,
                )
            except subprocess.TimeoutExpired as exc:
                LOGGER.error("soffice timed out after %ss converting %s", self.timeout, source)
                raise RenderError(
                    f"Export of {source.name} timed out after {self.timeout}s"
                ) from exc
            except OSError as exc:
                LOGGER.error("Failed to execute soffice: %s", exc)
                raise RenderError(f"Failed to execute soffice: {exc}") from exc

            if result.returncode != 0:
                LOGGER.error(
                    "soffice failed with code %s: %s", result.returncode, result.stderr
                )
                raise RenderError(
                    f"Export of {source.name} failed: {result.stderr.strip() or result.returncode}"
                )

            produced = Path(outdir) / f"{source.stem}.pdf"
            if not produced.is_file():
                raise RenderError(f"Export of {source.name} produced no PDF")

            LOGGER.info("Converted %s to PDF", source.name)
            return produced.read_bytes()


__all__ = ["SofficeConverter"]
