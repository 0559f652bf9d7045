"""
pdf-packet - render a list of documents to PDF and merge them into one packet.

Quick Start:
    >>> from pdf_packet import FileRenderer, MemoryStore, RunOrchestrator
    >>> store = MemoryStore(
    ...     settings={"Output Folder ID": "out", "PDF Name": "packet"},
    ...     rows=[("Alice", "alice.pdf"), ("Bob", "bob.pdf")],
    ... )
    >>> report = RunOrchestrator(store, FileRenderer("docs")).run()

Main Classes:
    - RunOrchestrator: Runs enumerate -> render -> merge -> persist -> report
    - MergeEngine: Order-preserving, fault-isolating PDF merge
    - SourceEnumerator: Reads source items from a store
    - StatusReporter: Best-effort status write-back

Stores:
    - WorkbookStore: ``.xlsx`` workbook with ``Config`` and ``Documents`` sheets
    - MemoryStore: In-memory store

For CLI usage, use the 'pdf-packet' command after installation.
"""

from pdf_packet.config import (
    ConfigValidation,
    InvalidConfig,
    PacketConfig,
    ValidConfig,
    validate_config,
)
from pdf_packet.enumerator import SourceEnumerator
from pdf_packet.exceptions import (
    ConfigurationError,
    MergeEmptyError,
    MergeError,
    MergeParseError,
    NoInputsError,
    PDFPacketException,
    PdfOptimizationError,
    PersistError,
    RenderError,
    UnhandledRunError,
)
from pdf_packet.merger import MergeEngine, MergeState, merge_pdf_bytes
from pdf_packet.orchestrator import RunOrchestrator
from pdf_packet.renderers import FileRenderer, Renderer, SofficeConverter
from pdf_packet.reporter import StatusReporter
from pdf_packet.sinks import DirectorySink, OutputSink
from pdf_packet.stores import MemoryStore, PacketStore, WorkbookStore
from pdf_packet.types import (
    ItemStatus,
    MergeFailure,
    MergeResult,
    MergeSection,
    RenderResult,
    RunReport,
    RunStatus,
    SourceItem,
)

__version__ = "1.0.0"
__license__ = "MIT"

__all__ = [
    # Pipeline
    "RunOrchestrator",
    "SourceEnumerator",
    "StatusReporter",
    "MergeEngine",
    "MergeState",
    "merge_pdf_bytes",
    # Collaborators
    "FileRenderer",
    "Renderer",
    "SofficeConverter",
    "DirectorySink",
    "OutputSink",
    "MemoryStore",
    "PacketStore",
    "WorkbookStore",
    # Configuration
    "PacketConfig",
    "ValidConfig",
    "InvalidConfig",
    "ConfigValidation",
    "validate_config",
    # Data types
    "SourceItem",
    "RenderResult",
    "MergeFailure",
    "MergeSection",
    "MergeResult",
    "RunReport",
    "ItemStatus",
    "RunStatus",
    # Exceptions
    "PDFPacketException",
    "ConfigurationError",
    "RenderError",
    "MergeError",
    "MergeParseError",
    "MergeEmptyError",
    "NoInputsError",
    "PersistError",
    "PdfOptimizationError",
    "UnhandledRunError",
    # Version info
    "__version__",
]
