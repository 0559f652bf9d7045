"""Optional optimization of the merged PDF with ``qpdf``."""

from __future__ import annotations

import logging
import shutil
import subprocess
import tempfile
from pathlib import Path

from .exceptions import PdfOptimizationError

LOGGER = logging.getLogger("pdf_packet.optimize")


def _qpdf_available() -> str | None:
    return shutil.which("qpdf")


def linearize_pdf(data: bytes) -> bytes:
    """Linearize *data* using ``qpdf`` when available.

    Returns *data* unchanged when ``qpdf`` is not installed.
    """

    qpdf_executable = _qpdf_available()
    if not qpdf_executable:
        LOGGER.debug("qpdf not available; leaving merged PDF as is")
        return data

    with tempfile.TemporaryDirectory(prefix="pdf-packet-") as workdir:
        input_path = Path(workdir) / "input.pdf"
        output_path = Path(workdir) / "output.pdf"
        input_path.write_bytes(data)

        command = [
            qpdf_executable,
            "--linearize",
            str(input_path),
            str(output_path),
        ]
        LOGGER.debug("Running qpdf command: %s", command)
        try:
            result = subprocess.run(
                command,
                capture_output=True,
                text=True,
                check=False,
            )
        except OSError as exc:  # pragma: no cover - OS errors vary
            LOGGER.error("Failed to execute qpdf: %s", exc)
            raise PdfOptimizationError("Failed to execute qpdf") from exc

        # qpdf exits with 3 when it succeeded with warnings.
        if result.returncode not in (0, 3):
            LOGGER.error(
                "qpdf failed with code %s: %s", result.returncode, result.stderr
            )
            raise PdfOptimizationError(f"qpdf failed: {result.stderr.strip()}")

        optimized = output_path.read_bytes()

    LOGGER.info("Linearized merged PDF (%d -> %d bytes)", len(data), len(optimized))
    return optimized


__all__ = ["linearize_pdf"]
