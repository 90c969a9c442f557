"""SARC archive reader."""

import logging
from pathlib import Path
from typing import Iterator, Optional, Union

from ..utils.binary import Buffer, BinaryReader, read_u32_be
from .cursor import ArchiveCursor
from .file_view import FileView
from .header import (
    HEADER_SIZE,
    OFFSET_ENTRY_SIZE,
    ParseResult,
    SARCHeader,
    SARCRecordHeader,
)

logger = logging.getLogger(__name__)

NameLike = Union[str, bytes, bytearray, memoryview]


class ArchiveParser:
    """Validates an in-memory SARC archive and provides access to its files.

    The parser borrows ``data``; it never copies it. Every ``FileView`` and
    cursor handed out refers back into the same buffer, which must outlive
    them and must not be modified while they are in use.

    Parsing happens once, in the constructor. A failed parse is reported
    through ``parse_result`` rather than an exception, and every query on a
    failed archive returns an empty result (no files, invalid views).

    With ``strict=True`` the offset table and every file record are also
    checked against the buffer length, and an archive whose records point
    outside the buffer fails with ``ParseResult.RECORD_OUT_OF_BOUNDS``.
    """

    def __init__(self, data: Optional[Buffer], data_size: Optional[int] = None, strict: bool = False):
        self._data: Optional[memoryview] = None
        self._header: Optional[SARCHeader] = None
        self._strict = strict
        self._parse_result = self._parse(data, data_size)

        if self._parse_result.succeeded:
            logger.debug("Parsed sarc archive: %d files, %d bytes", self.num_files, self.data_size)
        else:
            logger.warning("Failed to parse sarc archive: %s", self._parse_result.description)

    def _parse(self, data: Optional[Buffer], data_size: Optional[int]) -> ParseResult:
        """Validate the header, stopping at the first failed check."""
        if data is None:
            return ParseResult.NULL_DATA

        view = memoryview(data).cast("B")
        if data_size is not None:
            view = view[: max(0, data_size)]
        self._data = view

        if len(view) < HEADER_SIZE:
            return ParseResult.TOO_FEW_DATA_SIZE

        header = SARCHeader.from_reader(BinaryReader(view))
        if not header.is_valid:
            return ParseResult.DATA_CORRUPTED
        if not header.is_supported:
            return ParseResult.UNSUPPORTED_VERSION
        self._header = header

        if self._strict and not self._records_in_bounds():
            return ParseResult.RECORD_OUT_OF_BOUNDS

        return ParseResult.SUCCEEDED

    @property
    def parse_result(self) -> ParseResult:
        return self._parse_result

    @property
    def succeeded(self) -> bool:
        return self._parse_result.succeeded

    @property
    def strict(self) -> bool:
        return self._strict

    @property
    def header(self) -> Optional[SARCHeader]:
        """Decoded header, or None when the header did not validate."""
        return self._header

    @property
    def data(self) -> Optional[memoryview]:
        return self._data

    @property
    def data_size(self) -> int:
        return len(self._data) if self._data is not None else 0

    @property
    def num_files(self) -> int:
        """Number of files in the archive. Always zero for a failed parse."""
        if not self.succeeded:
            return 0
        return self._header.num_files

    def get_file(self, file_index: int) -> FileView:
        """Return the file at ``file_index``.

        Returns an invalid view when the archive failed to parse or the index
        is outside ``[0, num_files)``.
        """
        if not self.succeeded:
            return FileView.invalid()
        if file_index < 0 or file_index >= self.num_files:
            return FileView.invalid()

        try:
            record = self._read_record(file_index)
            reader = BinaryReader(self._data, record.name_offset)
            name = reader.read_cstring_view()
        except EOFError as e:
            logger.warning("File record %d is outside the archive data: %s", file_index, e)
            return FileView.invalid()

        if record.body_end > len(self._data):
            logger.warning(
                "File %d body (%d bytes at offset %d) is outside the archive data",
                file_index,
                record.size,
                record.absolute_body_offset,
            )
            return FileView.invalid()

        body = self._data[record.absolute_body_offset : record.body_end]
        return FileView(body=body, name=name, size=record.size, alignment=record.alignment)

    def find_file(self, file_name: Optional[NameLike]) -> FileView:
        """Find a file by exact name.

        This is a linear scan over every file, O(num_files).
        ``file_name`` may be a ``str`` (matched by its UTF-8 encoding) or a
        bytes-like object. Returns an invalid view when nothing matches.
        """
        if not self.succeeded or file_name is None:
            return FileView.invalid()

        if isinstance(file_name, str):
            file_name = file_name.encode("utf-8")
        target = bytes(file_name)

        for i in range(self.num_files):
            file = self.get_file(i)
            if file.is_valid() and file.name == target:
                return file
        return FileView.invalid()

    def begin(self) -> ArchiveCursor:
        return ArchiveCursor(self, 0)

    def end(self) -> ArchiveCursor:
        return ArchiveCursor(self, self.num_files)

    def check_bounds(self) -> bool:
        """Check every file record against the buffer length.

        Always False when the header did not validate.
        """
        if self._header is None:
            return False
        return self._records_in_bounds()

    def offset_table_in_bounds(self) -> bool:
        """Check that the offset table for every file fits in the buffer.

        Always False when the header did not validate.
        """
        if self._header is None:
            return False
        return self._header.offset_table_end <= len(self._data)

    def _read_record(self, file_index: int) -> SARCRecordHeader:
        record_offset = read_u32_be(self._data, HEADER_SIZE + file_index * OFFSET_ENTRY_SIZE)
        return SARCRecordHeader.from_reader(BinaryReader(self._data, record_offset))

    def _records_in_bounds(self) -> bool:
        size = len(self._data)
        if not self.offset_table_in_bounds():
            logger.debug("Offset table ends at %d, past the %d-byte buffer", self._header.offset_table_end, size)
            return False

        for i in range(self._header.num_files):
            try:
                record = self._read_record(i)
                BinaryReader(self._data, record.name_offset).read_cstring_view()
            except EOFError as e:
                logger.debug("File record %d is out of bounds: %s", i, e)
                return False
            if record.body_end > size:
                logger.debug("File %d body ends at %d, past the %d-byte buffer", i, record.body_end, size)
                return False
        return True

    def __len__(self) -> int:
        return self.num_files

    def __iter__(self) -> Iterator[FileView]:
        return iter(self.begin())

    def __contains__(self, file_name: NameLike) -> bool:
        return self.find_file(file_name).is_valid()

    @classmethod
    def from_file(cls, path: Path, strict: bool = False) -> "ArchiveParser":
        """Read an archive file into memory and parse it."""
        return cls(Path(path).read_bytes(), strict=strict)

    @classmethod
    def from_bytes(cls, data: Buffer, strict: bool = False) -> "ArchiveParser":
        return cls(data, strict=strict)

    def __repr__(self) -> str:
        if self.succeeded:
            return f"ArchiveParser(files={self.num_files}, size={self.data_size})"
        return f"ArchiveParser(invalid: {self._parse_result.name})"
