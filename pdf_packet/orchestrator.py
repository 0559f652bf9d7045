"""Sequence one run: enumerate, render, merge, persist and report."""

from __future__ import annotations

import logging
from collections import deque
from concurrent.futures import Future, ThreadPoolExecutor
from concurrent.futures import TimeoutError as FuturesTimeoutError
from typing import Callable, Deque, Dict, Iterator, List, Optional, Set, Tuple

from .config import InvalidConfig, PacketConfig, validate_config
from .enumerator import SourceEnumerator
from .exceptions import (
    ConfigurationError,
    MergeError,
    NoInputsError,
    PdfOptimizationError,
    PersistError,
    RenderError,
    UnhandledRunError,
)
from .merger import MergeEngine
from .optimizers import linearize_pdf
from .renderers.base import Renderer
from .reporter import StatusReporter
from .sinks import DirectorySink, OutputSink
from .stores.base import PacketStore
from .types import ItemStatus, RenderResult, RunReport, RunStatus, SourceItem
from .utils import utc_now

LOGGER = logging.getLogger("pdf_packet.orchestrator")

ProgressCallback = Callable[[str, int, int], None]

_RUN_LEVEL_ERRORS = (ConfigurationError, NoInputsError, MergeError, PersistError)


class RunOrchestrator:
    """Run the whole packet pipeline against one store.

    Args:
        store: Settings and source list, also receives status write-back.
        renderer: Turns source ids into PDF bytes.
        sink: Destination of the merged PDF, a :class:`DirectorySink` by default.
        reporter: Status reporter; one writing to *store* by default.
        workers: Number of renders allowed in flight. Results are always
            handed to the merge in source order.
        render_timeout: Seconds to wait for one render before treating it as
            failed. ``None`` waits indefinitely. The timed-out call cannot be
            interrupted and keeps its worker thread, which the interpreter
            still joins at exit; renderers should bound their own work (as
            :class:`~pdf_packet.renderers.SofficeConverter` does) and use this
            as a backstop.
        linearize: Pass the merged output through ``qpdf --linearize``.
        progress_callback: Called as ``callback(label, current, total)`` after
            each item has been rendered.
    """

    def __init__(
        self,
        store: PacketStore,
        renderer: Renderer,
        sink: Optional[OutputSink] = None,
        *,
        reporter: Optional[StatusReporter] = None,
        workers: int = 1,
        render_timeout: Optional[float] = None,
        linearize: bool = False,
        progress_callback: Optional[ProgressCallback] = None,
    ) -> None:
        self.store = store
        self.renderer = renderer
        self.sink: OutputSink = sink or DirectorySink()
        self.reporter = reporter or StatusReporter(store)
        self.workers = max(1, workers)
        self.render_timeout = render_timeout
        self.linearize = linearize
        self.progress_callback = progress_callback

    def run(self) -> RunReport:
        """Execute one run and return its report.

        Raises:
            ConfigurationError: Required settings are missing or the output
                folder cannot be resolved. No item is touched.
            NoInputsError: Every render failed.
            MergeEmptyError: No rendered input contained a usable page.
            PersistError: The merged PDF could not be written.
            UnhandledRunError: Any other failure.

        Each exception carries the final :class:`RunReport` as ``report``.
        """

        report = RunReport(status=RunStatus.RUNNING, started_at=utc_now())
        items: List[SourceItem] = []
        reported_rows: Set[int] = set()

        try:
            config = self._load_config()
            items = SourceEnumerator(self.store).enumerate()
            report.total = len(items)
            self.reporter.report_run(report)
            LOGGER.info("Starting run over %d document(s)", report.total)

            payloads = self._render_items(items, report, reported_rows)
            if not payloads:
                raise NoInputsError(
                    f"No inputs available to merge: all {report.total} render(s) failed"
                    if report.total
                    else "No inputs available to merge: the source list is empty"
                )

            data = self._merge(payloads, config, report)
            if self.linearize:
                data = self._optimize(data)
            report.output_location = self.sink.write(
                config.output_folder_id, config.output_filename, data
            )
        except _RUN_LEVEL_ERRORS as exc:
            self._fail(report, exc.message)
            exc.report = report
            raise
        except Exception as exc:
            LOGGER.exception("Run aborted by an unexpected error")
            self._skip_unreported(items, reported_rows)
            self._fail(report, str(exc) or type(exc).__name__)
            error = UnhandledRunError(f"Run failed: {exc}")
            error.report = report
            raise error from exc

        report.status = RunStatus.COMPLETE
        report.completed_at = utc_now()
        self.reporter.report_run(report)
        LOGGER.info(
            "Run complete: %d of %d document(s) merged into %d page(s) at %s",
            report.succeeded,
            report.total,
            report.page_count,
            report.output_location,
        )
        return report

    def _load_config(self) -> PacketConfig:
        validation = validate_config(self.store.read_settings())
        if isinstance(validation, InvalidConfig):
            raise ConfigurationError(validation.message, missing=validation.missing)
        config = validation.config
        self.sink.resolve(config.output_folder_id)
        return config

    def _render_one(self, item: SourceItem) -> RenderResult:
        try:
            data = self.renderer.render(item.source_id)
        except RenderError as exc:
            return RenderResult.failure(item, exc.reason)
        return RenderResult.success(item, data)

    def _new_executor(self) -> ThreadPoolExecutor:
        return ThreadPoolExecutor(max_workers=self.workers, thread_name_prefix="pdf-packet-render")

    def _iter_renders(self, items: List[SourceItem]) -> Iterator[RenderResult]:
        if self.workers == 1 and self.render_timeout is None:
            for item in items:
                yield self._render_one(item)
            return

        executor = self._new_executor()
        futures: Dict[int, Future] = {}
        next_submit = 0
        try:
            for position, item in enumerate(items):
                while next_submit < len(items) and next_submit < position + self.workers:
                    futures[next_submit] = executor.submit(self._render_one, items[next_submit])
                    next_submit += 1

                future = futures.pop(position)
                try:
                    yield future.result(timeout=self.render_timeout)
                except FuturesTimeoutError:
                    LOGGER.error(
                        "Render of %r timed out after %ss", item.source_id, self.render_timeout
                    )
                    yield RenderResult.failure(
                        item, f"Render timed out after {self.render_timeout}s"
                    )
                    # The stuck call keeps its thread; queued renders move to a fresh pool.
                    stale = executor
                    executor = self._new_executor()
                    for later, pending in list(futures.items()):
                        if pending.cancel():
                            futures[later] = executor.submit(self._render_one, items[later])
                    stale.shutdown(wait=False)
        finally:
            executor.shutdown(wait=False, cancel_futures=True)

    def _render_items(
        self,
        items: List[SourceItem],
        report: RunReport,
        reported_rows: Set[int],
    ) -> Deque[Tuple[SourceItem, bytes]]:
        payloads: Deque[Tuple[SourceItem, bytes]] = deque()

        for current, result in enumerate(self._iter_renders(items), start=1):
            item = result.item
            if result.ok:
                payloads.append((item, result.data))
                self.reporter.report_item(item.row_index, ItemStatus.SUCCESS)
                LOGGER.debug("Rendered %r (%d bytes)", item.label, len(result.data))
            else:
                report.render_failed += 1
                self.reporter.report_item(item.row_index, ItemStatus.ERROR, result.error)
                LOGGER.warning("Render failed for %r: %s", item.label, result.error)
            reported_rows.add(item.row_index)

            if self.progress_callback:
                self.progress_callback(item.label, current, len(items))

        return payloads

    def _merge(
        self,
        payloads: Deque[Tuple[SourceItem, bytes]],
        config: PacketConfig,
        report: RunReport,
    ) -> bytes:
        engine = MergeEngine(
            bookmarks=config.bookmarks,
            document_info={"title": config.title or config.output_filename[:-4]},
        )

        while payloads:
            item, data = payloads.popleft()
            if engine.add(data, title=item.label):
                report.succeeded += 1
            else:
                report.merge_failed += 1
                reason = engine.failures[-1].reason
                self.reporter.report_item(item.row_index, ItemStatus.ERROR, f"Invalid PDF: {reason}")
            # Release the rendered buffer before the next one is merged.
            del data

        result = engine.finalize()
        report.page_count = result.page_count
        return result.data

    def _optimize(self, data: bytes) -> bytes:
        try:
            return linearize_pdf(data)
        except PdfOptimizationError as exc:
            LOGGER.warning("Keeping unoptimized output: %s", exc)
            return data

    def _skip_unreported(self, items: List[SourceItem], reported_rows: Set[int]) -> None:
        for item in items:
            if item.row_index not in reported_rows:
                self.reporter.report_item(
                    item.row_index,
                    ItemStatus.SKIPPED,
                    "Run aborted before this document was processed",
                )

    def _fail(self, report: RunReport, message: str) -> None:
        report.status = RunStatus.ERROR
        report.error = message
        report.completed_at = utc_now()
        self.reporter.report_run(report)
        LOGGER.error("Run failed: %s", message)


__all__ = ["RunOrchestrator", "ProgressCallback"]
