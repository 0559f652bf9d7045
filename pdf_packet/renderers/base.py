"""Renderer protocol: turn a source id into PDF bytes."""

from __future__ import annotations

from typing import Protocol


class Renderer(Protocol):
    """Capability the orchestrator depends on to obtain PDF renditions.

    Implementations raise :class:`~pdf_packet.exceptions.RenderError` when the
    id does not resolve, access is denied or the export fails. They do not
    retry.
    """

    def render(self, source_id: str) -> bytes:
        """Return the PDF rendition of *source_id*."""
