from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from pdf_packet.exceptions import ConfigurationError, PdfOptimizationError, PersistError
from pdf_packet.optimizers import linearize_pdf
from pdf_packet.sinks import DirectorySink


def test_directory_sink_writes_file(output_dir: Path) -> None:
    location = DirectorySink().write(str(output_dir), "packet.pdf", b"%PDF-data")

    assert (output_dir / "packet.pdf").read_bytes() == b"%PDF-data"
    assert location == (output_dir / "packet.pdf").resolve().as_uri()
    assert list(output_dir.iterdir()) == [output_dir / "packet.pdf"]


def test_directory_sink_resolves_relative_ids(tmp_path: Path, output_dir: Path) -> None:
    sink = DirectorySink(tmp_path)

    assert sink.resolve("out") == output_dir.resolve()


def test_directory_sink_overwrites_previous_output(output_dir: Path) -> None:
    sink = DirectorySink()
    sink.write(str(output_dir), "packet.pdf", b"old")
    sink.write(str(output_dir), "packet.pdf", b"new")

    assert (output_dir / "packet.pdf").read_bytes() == b"new"


def test_directory_sink_rejects_missing_folder(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="not found"):
        DirectorySink().resolve(str(tmp_path / "nowhere"))


def test_directory_sink_rejects_files(tmp_path: Path) -> None:
    target = tmp_path / "file.txt"
    target.write_text("x")

    with pytest.raises(ConfigurationError, match="not a directory"):
        DirectorySink().resolve(str(target))


def test_directory_sink_rejects_nested_names(output_dir: Path) -> None:
    with pytest.raises(PersistError):
        DirectorySink().write(str(output_dir), "../escape.pdf", b"data")


def test_directory_sink_write_failure(monkeypatch: pytest.MonkeyPatch, output_dir: Path) -> None:
    def broken_replace(self, target):
        raise OSError("read-only file system")

    monkeypatch.setattr(Path, "replace", broken_replace)

    with pytest.raises(PersistError, match="read-only"):
        DirectorySink().write(str(output_dir), "packet.pdf", b"data")
    assert list(output_dir.iterdir()) == []


def test_linearize_without_qpdf(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("pdf_packet.optimizers._qpdf_available", lambda: None)

    assert linearize_pdf(b"%PDF-data") == b"%PDF-data"


def test_linearize_with_qpdf(monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(command, capture_output, text, check):
        assert command[1] == "--linearize"
        Path(command[3]).write_bytes(Path(command[2]).read_bytes() + b"-linear")
        return SimpleNamespace(returncode=0, stderr="")

    monkeypatch.setattr("pdf_packet.optimizers._qpdf_available", lambda: "qpdf")
    monkeypatch.setattr("pdf_packet.optimizers.subprocess.run", fake_run)

    assert linearize_pdf(b"%PDF-data") == b"%PDF-data-linear"


def test_linearize_failure(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr("pdf_packet.optimizers._qpdf_available", lambda: "qpdf")
    monkeypatch.setattr(
        "pdf_packet.optimizers.subprocess.run",
        lambda *args, **kwargs: SimpleNamespace(returncode=2, stderr="damaged file"),
    )

    with pytest.raises(PdfOptimizationError, match="damaged file"):
        linearize_pdf(b"%PDF-data")
