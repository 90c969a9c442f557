"""SARC Toolkit - read-only access to sarc archives."""

__version__ = "0.1.0"

from .archive import ArchiveCursor, ArchiveParser, FileView, ParseResult

__all__ = ["ArchiveCursor", "ArchiveParser", "FileView", "ParseResult", "__version__"]
