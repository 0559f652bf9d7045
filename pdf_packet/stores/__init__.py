"""Store implementations for settings, source rows and status write-back."""

from .base import DEFAULT_HEADER, PacketStore
from .memory import MemoryStore
from .workbook import WorkbookStore

__all__ = [
    "DEFAULT_HEADER",
    "PacketStore",
    "MemoryStore",
    "WorkbookStore",
]
