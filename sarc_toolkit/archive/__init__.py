"""SARC archive parsing."""

from .cursor import ArchiveCursor
from .file_view import FileView
from .header import SARC_MAGIC, SARC_VERSION, ParseResult, SARCHeader, SARCRecordHeader
from .reader import ArchiveParser

__all__ = [
    "ArchiveCursor",
    "ArchiveParser",
    "FileView",
    "ParseResult",
    "SARCHeader",
    "SARCRecordHeader",
    "SARC_MAGIC",
    "SARC_VERSION",
]
