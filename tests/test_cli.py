from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterator

import pytest
from click.testing import CliRunner
from rich.console import Console

from pdf_packet.cli import cli
from pdf_packet.stores import WorkbookStore
from pdf_packet.types import ItemStatus, RunStatus


@pytest.fixture()
def runner(monkeypatch: pytest.MonkeyPatch) -> Iterator[CliRunner]:
    monkeypatch.setattr("pdf_packet.cli.console", Console(width=240))
    yield CliRunner()
    # ``run`` attaches a handler bound to the runner's captured stderr.
    logger = logging.getLogger("pdf_packet")
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
    logger.propagate = True


@pytest.fixture()
def workspace(tmp_path: Path, make_pdf) -> Path:
    """Workbook, source directory and output folder laid out side by side."""

    sources = tmp_path / "documents"
    sources.mkdir()
    (sources / "cover.pdf").write_bytes(make_pdf(101, 102))
    (sources / "appendix.pdf").write_bytes(make_pdf(301))
    (tmp_path / "out").mkdir()

    WorkbookStore.create_template(
        tmp_path / "packet.xlsx",
        settings={"Output Folder ID": "out", "PDF Name": "bundle.pdf"},
        rows=[("Cover", "cover"), ("Missing", "nowhere.pdf"), ("Appendix", "appendix.pdf")],
    )
    return tmp_path


def test_init_creates_workbook(runner: CliRunner, tmp_path: Path) -> None:
    target = tmp_path / "new.xlsx"

    result = runner.invoke(cli, ["init", str(target), "--output-folder", "out", "--pdf-name", "p"])

    assert result.exit_code == 0, result.output
    settings = WorkbookStore(target).read_settings()
    assert settings["Output Folder ID"] == "out"
    assert settings["PDF Name"] == "p"
    assert settings["Process Status"] == RunStatus.NOT_STARTED


def test_init_refuses_to_overwrite(runner: CliRunner, workspace: Path) -> None:
    result = runner.invoke(cli, ["init", str(workspace / "packet.xlsx")])

    assert result.exit_code == 1
    assert "already exists" in result.output


def test_run_merges_and_writes_back(runner: CliRunner, workspace: Path, read_widths) -> None:
    result = runner.invoke(
        cli, ["run", str(workspace / "packet.xlsx"), "--source-dir", str(workspace / "documents")]
    )

    assert result.exit_code == 0, result.output
    assert "Packet created" in result.output
    assert "left out" in result.output

    output = workspace / "out" / "bundle.pdf"
    assert read_widths(output.read_bytes()) == [101, 102, 301]

    store = WorkbookStore(workspace / "packet.xlsx")
    rows = store.read_rows()
    assert rows[1][2] == ItemStatus.SUCCESS
    assert rows[2][2] == ItemStatus.ERROR
    assert "not found" in rows[2][3]
    assert rows[3][2] == ItemStatus.SUCCESS

    settings = store.read_settings()
    assert settings["Process Status"] == RunStatus.COMPLETE
    assert settings["Final PDF URL"] == output.resolve().as_uri()


def test_run_reads_workbook_from_environment(
    runner: CliRunner, workspace: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("PDF_PACKET_WORKBOOK", str(workspace / "packet.xlsx"))

    result = runner.invoke(cli, ["run", "-s", str(workspace / "documents"), "-w", "2"])

    assert result.exit_code == 0, result.output
    assert (workspace / "out" / "bundle.pdf").exists()


def test_run_fails_without_output_folder(runner: CliRunner, workspace: Path) -> None:
    (workspace / "out").rmdir()

    result = runner.invoke(
        cli, ["run", str(workspace / "packet.xlsx"), "--source-dir", str(workspace / "documents")]
    )

    assert result.exit_code == 1
    assert "Output folder not found" in result.output
    settings = WorkbookStore(workspace / "packet.xlsx").read_settings()
    assert settings["Process Status"] == RunStatus.ERROR


def test_run_rejects_workbook_without_sheets(runner: CliRunner, tmp_path: Path) -> None:
    from openpyxl import Workbook

    path = tmp_path / "plain.xlsx"
    Workbook().save(path)

    result = runner.invoke(cli, ["run", str(path), "--source-dir", str(tmp_path)])

    assert result.exit_code == 1
    assert "Config" in result.output


def test_status_and_reset(runner: CliRunner, workspace: Path) -> None:
    workbook = str(workspace / "packet.xlsx")
    runner.invoke(cli, ["run", workbook, "--source-dir", str(workspace / "documents")])

    shown = runner.invoke(cli, ["status", workbook])
    assert shown.exit_code == 0, shown.output
    assert "Cover" in shown.output
    assert RunStatus.COMPLETE in shown.output

    cleared = runner.invoke(cli, ["reset", workbook])
    assert cleared.exit_code == 0, cleared.output

    store = WorkbookStore(workbook)
    assert all(row[2] is None and row[3] is None for row in store.read_rows()[1:])
    settings = store.read_settings()
    assert settings["Process Status"] == RunStatus.NOT_STARTED
    assert not settings["Final PDF URL"]


def test_run_timeout_bounds_the_converter_first(
    runner: CliRunner, workspace: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    from pdf_packet import cli as cli_module
    from pdf_packet.orchestrator import RunOrchestrator

    seen = {}

    class RecordingOrchestrator(RunOrchestrator):
        def __init__(self, store, renderer, sink=None, **kwargs):
            seen["converter_timeout"] = renderer.converter.timeout
            seen["render_timeout"] = kwargs["render_timeout"]
            super().__init__(store, renderer, sink, **kwargs)

    monkeypatch.setattr(cli_module, "RunOrchestrator", RecordingOrchestrator)

    result = runner.invoke(
        cli, ["run", str(workspace / "packet.xlsx"), "-s", str(workspace / "documents"), "-t", "5"]
    )

    assert result.exit_code == 0, result.output
    assert seen["converter_timeout"] == 5.0
    assert seen["render_timeout"] == 5.0 + cli_module.RENDER_TIMEOUT_GRACE
