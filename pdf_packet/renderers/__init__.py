"""Renderer implementations for pdf-packet."""

from .base import Renderer
from .filesystem import FileRenderer
from .soffice import SofficeConverter

__all__ = [
    "Renderer",
    "FileRenderer",
    "SofficeConverter",
]
