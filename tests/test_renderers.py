from __future__ import annotations

import subprocess
from pathlib import Path
from types import SimpleNamespace

import pytest

from pdf_packet.exceptions import RenderError
from pdf_packet.renderers import FileRenderer, SofficeConverter


@pytest.fixture()
def source_dir(tmp_path: Path, make_pdf) -> Path:
    directory = tmp_path / "docs"
    directory.mkdir()
    (directory / "alice.pdf").write_bytes(make_pdf(101))
    (directory / "notes.docx").write_bytes(b"docx-bytes")
    (directory / "twin.pdf").write_bytes(make_pdf(102))
    (directory / "twin.docx").write_bytes(b"docx-bytes")
    return directory


def test_renders_pdf_by_exact_name(source_dir: Path) -> None:
    renderer = FileRenderer(source_dir)

    assert renderer.render("alice.pdf") == (source_dir / "alice.pdf").read_bytes()


def test_renders_pdf_by_stem(source_dir: Path) -> None:
    renderer = FileRenderer(source_dir)

    assert renderer.render("alice") == (source_dir / "alice.pdf").read_bytes()


def test_missing_document(source_dir: Path) -> None:
    with pytest.raises(RenderError, match="not found"):
        FileRenderer(source_dir).render("nobody")


def test_ambiguous_stem(source_dir: Path) -> None:
    with pytest.raises(RenderError, match="ambiguous"):
        FileRenderer(source_dir).render("twin")


def test_ids_outside_source_dir_are_denied(source_dir: Path, tmp_path: Path) -> None:
    (tmp_path / "secret.pdf").write_bytes(b"%PDF-1.4")

    with pytest.raises(RenderError, match="Access denied"):
        FileRenderer(source_dir).render("../secret.pdf")


@pytest.mark.parametrize("source_id", [".", "sub/..", ""])
def test_source_dir_itself_is_denied(source_dir: Path, tmp_path: Path, make_pdf, source_id: str) -> None:
    (source_dir / "sub").mkdir()
    (tmp_path / "docs.pdf").write_bytes(make_pdf(500))

    with pytest.raises(RenderError, match="Access denied"):
        FileRenderer(source_dir).render(source_id)


def test_stem_matches_stay_inside_source_dir(source_dir: Path, tmp_path: Path, make_pdf) -> None:
    outside = tmp_path / "elsewhere"
    outside.mkdir()
    (outside / "leak.pdf").write_bytes(make_pdf(500))
    (source_dir / "leak.pdf").symlink_to(outside / "leak.pdf")

    with pytest.raises(RenderError, match="not found"):
        FileRenderer(source_dir).render("leak")


def test_non_pdf_without_converter(source_dir: Path) -> None:
    with pytest.raises(RenderError, match="Unsupported document type .docx"):
        FileRenderer(source_dir).render("notes")


def test_non_pdf_goes_through_converter(source_dir: Path) -> None:
    class StubConverter:
        def __init__(self) -> None:
            self.paths = []

        def convert(self, source: Path) -> bytes:
            self.paths.append(source)
            return b"%PDF-converted"

    converter = StubConverter()
    renderer = FileRenderer(source_dir, converter=converter)  # type: ignore[arg-type]

    assert renderer.render("notes.docx") == b"%PDF-converted"
    assert converter.paths == [source_dir / "notes.docx"]


def test_soffice_missing_executable(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr("pdf_packet.renderers.soffice._soffice_available", lambda: None)

    with pytest.raises(RenderError, match="not installed"):
        SofficeConverter().convert(tmp_path / "doc.docx")


def test_soffice_converts_into_temporary_directory(
    monkeypatch: pytest.MonkeyPatch, tmp_path: Path
) -> None:
    source = tmp_path / "report.docx"
    source.write_bytes(b"docx")
    seen = {}

    def fake_run(command, capture_output, text, check, timeout):
        outdir = Path(command[command.index("--outdir") + 1])
        (outdir / "report.pdf").write_bytes(b"%PDF-report")
        seen["command"] = command
        seen["timeout"] = timeout
        return SimpleNamespace(returncode=0, stderr="")

    monkeypatch.setattr("pdf_packet.renderers.soffice.subprocess.run", fake_run)

    data = SofficeConverter("soffice", timeout=30).convert(source)

    assert data == b"%PDF-report"
    assert seen["command"][:4] == ["soffice", "--headless", "--convert-to", "pdf"]
    assert seen["timeout"] == 30


def test_soffice_failure_exit_code(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(
        "pdf_packet.renderers.soffice.subprocess.run",
        lambda *args, **kwargs: SimpleNamespace(returncode=1, stderr="source file could not be loaded"),
    )

    with pytest.raises(RenderError, match="could not be loaded"):
        SofficeConverter("soffice").convert(tmp_path / "broken.docx")


def test_soffice_timeout(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    def fake_run(command, **kwargs):
        raise subprocess.TimeoutExpired(command, kwargs["timeout"])

    monkeypatch.setattr("pdf_packet.renderers.soffice.subprocess.run", fake_run)

    with pytest.raises(RenderError, match="timed out"):
        SofficeConverter("soffice", timeout=5).convert(tmp_path / "slow.docx")


def test_soffice_without_output(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setattr(
        "pdf_packet.renderers.soffice.subprocess.run",
        lambda *args, **kwargs: SimpleNamespace(returncode=0, stderr=""),
    )

    with pytest.raises(RenderError, match="produced no PDF"):
        SofficeConverter("soffice").convert(tmp_path / "empty.docx")
