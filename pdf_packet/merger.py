"""Merge independently rendered PDF byte streams into one document.

The :class:`MergeEngine` is a single-use accumulator around a pypdf
:class:`~pypdf.PdfWriter`. Inputs are appended strictly in the order they are
added; an input that cannot be parsed is recorded and skipped without
affecting the others. The merged document is serialized once by
:meth:`MergeEngine.finalize`.
"""

from __future__ import annotations

import io
import logging
from typing import Iterable, List, Mapping, Optional, Sequence

from pypdf import PasswordType, PdfReader, PdfWriter

from .exceptions import MergeEmptyError, MergeError, MergeParseError
from .types import MergeFailure, MergeResult, MergeSection

LOGGER = logging.getLogger("pdf_packet.merge")

PRODUCER = "pdf-packet"

_METADATA_KEY_MAP = {
    "title": "/Title",
    "author": "/Author",
    "subject": "/Subject",
    "keywords": "/Keywords",
    "creator": "/Creator",
}


class MergeState:
    EMPTY = "EMPTY"
    ACCUMULATING = "ACCUMULATING"
    FINALIZED = "FINALIZED"


def _document_info(values: Optional[Mapping[str, object]]) -> dict[str, str]:
    metadata: dict[str, str] = {}
    for key, value in (values or {}).items():
        if value is None:
            continue
        string_value = str(value).strip()
        if not string_value:
            continue
        pdf_key = _METADATA_KEY_MAP.get(key.lower())
        if pdf_key is None:
            pdf_key = key if key.startswith("/") else f"/{key}"
        metadata[pdf_key] = string_value
    metadata.setdefault("/Producer", PRODUCER)
    return metadata


class MergeEngine:
    """Accumulate pages from PDF buffers and serialize them as one PDF.

    Args:
        bookmarks: Add one outline entry per copied input, pointing at its
            first page.
        document_info: Document information applied to the merged output.
            Keys such as ``title`` or ``author`` are mapped to their PDF names.
    """

    def __init__(
        self,
        *,
        bookmarks: bool = False,
        document_info: Optional[Mapping[str, object]] = None,
    ) -> None:
        self.bookmarks = bookmarks
        self.document_info = dict(document_info or {})
        self._writer: Optional[PdfWriter] = PdfWriter()
        self._state = MergeState.EMPTY
        self._next_index = 0
        self._page_count = 0
        self.sections: List[MergeSection] = []
        self.failures: List[MergeFailure] = []

    @property
    def state(self) -> str:
        return self._state

    @property
    def page_count(self) -> int:
        return self._page_count

    def _require_open(self) -> PdfWriter:
        if self._state == MergeState.FINALIZED or self._writer is None:
            raise RuntimeError("MergeEngine has already been finalized")
        return self._writer

    @staticmethod
    def _parse(data: bytes, index: int) -> PdfReader:
        try:
            reader = PdfReader(io.BytesIO(data))
        except Exception as exc:  # dependency exceptions vary
            raise MergeParseError(f"Unable to parse PDF: {exc}", index=index) from exc

        if reader.is_encrypted:
            LOGGER.debug("Attempting to decrypt encrypted input %d", index)
            try:
                outcome = reader.decrypt("")
            except Exception as exc:  # pragma: no cover - decrypt errors vary
                raise MergeParseError(
                    f"Unable to decrypt encrypted PDF: {exc}", index=index
                ) from exc
            if outcome == PasswordType.NOT_DECRYPTED:
                raise MergeParseError("Encrypted PDF cannot be decrypted", index=index)

        try:
            page_count = len(reader.pages)
        except Exception as exc:  # broken page trees surface here
            raise MergeParseError(f"Unable to read page tree: {exc}", index=index) from exc

        if page_count == 0:
            raise MergeParseError("PDF contains no pages", index=index)
        return reader

    def _rollback(self, writer: PdfWriter, start: int) -> None:
        while len(writer.pages) > start:
            del writer.pages[len(writer.pages) - 1]

    def add(self, data: bytes, *, title: Optional[str] = None) -> bool:
        """Append every page of *data* after the pages copied so far.

        Returns ``True`` when the input was copied and ``False`` when it was
        skipped; skipped inputs are listed in :attr:`failures`.
        """

        writer = self._require_open()
        index = self._next_index
        self._next_index += 1

        try:
            reader = self._parse(data, index)
        except MergeParseError as exc:
            LOGGER.warning("Skipping merge input %d: %s", index, exc.reason)
            self.failures.append(MergeFailure(index=index, reason=exc.reason))
            return False

        start = len(writer.pages)
        try:
            for page_index, page in enumerate(reader.pages):
                LOGGER.debug("Adding page %s of input %d", page_index, index)
                writer.add_page(page)
        except Exception as exc:  # dependency exceptions vary
            self._rollback(writer, start)
            reason = f"Unable to copy pages: {exc}"
            LOGGER.warning("Skipping merge input %d: %s", index, reason)
            self.failures.append(MergeFailure(index=index, reason=reason))
            return False

        copied = len(writer.pages) - start
        self.sections.append(
            MergeSection(index=index, title=title, start_page=start, page_count=copied)
        )
        self._page_count = len(writer.pages)
        self._state = MergeState.ACCUMULATING
        LOGGER.debug("Copied %d page(s) from input %d", copied, index)
        return True

    def finalize(self) -> MergeResult:
        """Serialize the merged document.

        Raises:
            MergeEmptyError: If no page was copied from any input.
            MergeError: If serialization fails.
        """

        writer = self._require_open()
        self._state = MergeState.FINALIZED
        self._writer = None

        if self._page_count == 0:
            LOGGER.error(
                "No pages merged from %d input(s), %d failure(s)",
                self._next_index,
                len(self.failures),
            )
            raise MergeEmptyError(
                f"No pages could be merged from {self._next_index} input(s)"
            )

        if self.bookmarks:
            LOGGER.debug("Adding %d bookmark(s) to merged PDF", len(self.sections))
            for section in self.sections:
                title = section.title or f"Document {section.index + 1}"
                try:
                    writer.add_outline_item(title, writer.pages[section.start_page])
                except Exception as exc:  # pragma: no cover - outline errors vary
                    LOGGER.warning("Failed to add bookmark '%s': %s", title, exc)

        writer.add_metadata(_document_info(self.document_info))

        buffer = io.BytesIO()
        try:
            writer.write(buffer)
        except Exception as exc:  # pragma: no cover - dependency exceptions vary
            LOGGER.error("Failed to serialize merged PDF: %s", exc)
            raise MergeError(f"Failed to serialize merged PDF: {exc}") from exc

        result = MergeResult(
            data=buffer.getvalue(),
            page_count=self._page_count,
            sections=list(self.sections),
            failures=list(self.failures),
        )
        LOGGER.info(
            "Merged %d of %d input(s) into %d page(s)",
            len(self.sections),
            self._next_index,
            result.page_count,
        )
        return result


def merge_pdf_bytes(
    inputs: Iterable[bytes],
    *,
    titles: Optional[Sequence[Optional[str]]] = None,
    document_info: Optional[Mapping[str, object]] = None,
    bookmarks: bool = False,
) -> MergeResult:
    """Merge *inputs*, in order, into one PDF.

    Inputs that are not usable PDFs are skipped and reported in
    :attr:`MergeResult.failures`.

    Raises:
        MergeEmptyError: If no input contributed a page.
    """

    engine = MergeEngine(bookmarks=bookmarks, document_info=document_info)
    title_list = list(titles or [])
    for index, data in enumerate(inputs):
        title = title_list[index] if index < len(title_list) else None
        engine.add(data, title=title)
    return engine.finalize()


__all__ = ["MergeEngine", "MergeState", "merge_pdf_bytes", "PRODUCER"]
