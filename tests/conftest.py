from __future__ import annotations

import io
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional, Sequence

import pytest
from pypdf import PdfReader, PdfWriter

from pdf_packet.exceptions import RenderError
from pdf_packet.stores import MemoryStore

PdfFactory = Callable[..., bytes]


def build_pdf(widths: Sequence[float], *, title: Optional[str] = None, height: float = 72) -> bytes:
    writer = PdfWriter()
    for width in widths:
        writer.add_blank_page(width=width, height=height)
    if title is not None:
        writer.add_metadata({"/Title": title})
    buffer = io.BytesIO()
    writer.write(buffer)
    return buffer.getvalue()


def page_widths(data: bytes) -> List[float]:
    reader = PdfReader(io.BytesIO(data))
    return [float(page.mediabox.width) for page in reader.pages]


@pytest.fixture()
def make_pdf() -> PdfFactory:
    """Build a PDF whose page widths identify each page."""

    def _create(*widths: float, title: Optional[str] = None) -> bytes:
        return build_pdf(widths or (72,), title=title)

    return _create


@pytest.fixture()
def empty_pdf() -> bytes:
    buffer = io.BytesIO()
    PdfWriter().write(buffer)
    return buffer.getvalue()


@pytest.fixture()
def output_dir(tmp_path: Path) -> Path:
    path = tmp_path / "out"
    path.mkdir()
    return path


@pytest.fixture()
def store_factory(output_dir: Path) -> Callable[..., MemoryStore]:
    def _create(
        rows: Iterable[Sequence[object]],
        *,
        settings: Optional[Dict[str, object]] = None,
    ) -> MemoryStore:
        values: Dict[str, object] = {
            "Output Folder ID": str(output_dir),
            "PDF Name": "packet",
        }
        if settings is not None:
            values = settings
        return MemoryStore(settings=values, rows=rows)

    return _create


class FakeRenderer:
    """Renderer returning canned payloads, or raising RenderError for string entries."""

    def __init__(self, outputs: Dict[str, object]) -> None:
        self.outputs = outputs
        self.calls: List[str] = []

    def render(self, source_id: str) -> bytes:
        self.calls.append(source_id)
        outcome = self.outputs.get(source_id)
        if outcome is None:
            raise RenderError(f"Document not found: {source_id!r}")
        if isinstance(outcome, str):
            raise RenderError(outcome)
        if isinstance(outcome, BaseException):
            raise outcome
        return outcome  # type: ignore[return-value]


@pytest.fixture()
def fake_renderer() -> Callable[[Dict[str, object]], FakeRenderer]:
    return FakeRenderer


@pytest.fixture()
def read_widths() -> Callable[[bytes], List[float]]:
    return page_widths
