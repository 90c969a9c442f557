"""SARC header and record structures."""

from dataclasses import dataclass
from enum import Enum

from ..utils.binary import BinaryReader

# SARC magic bytes: 's' 'a' 'r' 'c'
SARC_MAGIC = b"sarc"

SARC_VERSION = 1

# Magic + version + file count
HEADER_SIZE = 4 + 4 + 4

# Body offset + size + alignment, followed by the null-terminated name
RECORD_HEADER_SIZE = 4 + 4 + 4

OFFSET_ENTRY_SIZE = 4


class ParseResult(Enum):
    """Outcome of parsing an archive buffer.

    Anything other than SUCCEEDED means the archive contents are inaccessible.
    """

    SUCCEEDED = "succeeded"
    NULL_DATA = "null_data"  # No buffer was supplied
    TOO_FEW_DATA_SIZE = "too_few_data_size"  # Shorter than the 12-byte header
    DATA_CORRUPTED = "data_corrupted"  # Magic is not "sarc"
    UNSUPPORTED_VERSION = "unsupported_version"  # Version field is not 1
    RECORD_OUT_OF_BOUNDS = "record_out_of_bounds"  # Strict mode only

    @property
    def succeeded(self) -> bool:
        return self is ParseResult.SUCCEEDED

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]


_DESCRIPTIONS = {
    ParseResult.SUCCEEDED: "archive parsed successfully",
    ParseResult.NULL_DATA: "no archive data supplied",
    ParseResult.TOO_FEW_DATA_SIZE: f"data is smaller than the {HEADER_SIZE}-byte archive header",
    ParseResult.DATA_CORRUPTED: "data is corrupted or is not a sarc archive",
    ParseResult.UNSUPPORTED_VERSION: "archive version is not supported",
    ParseResult.RECORD_OUT_OF_BOUNDS: "a file record lies outside the archive data",
}


@dataclass(frozen=True)
class SARCHeader:
    """SARC archive header (12 bytes)."""

    magic: bytes  # 4 bytes: "sarc"
    version: int  # 4 bytes: must be 1
    num_files: int  # 4 bytes: number of entries in the offset table

    @property
    def is_valid(self) -> bool:
        return self.magic == SARC_MAGIC

    @property
    def is_supported(self) -> bool:
        return self.is_valid and self.version == SARC_VERSION

    @property
    def offset_table_size(self) -> int:
        return self.num_files * OFFSET_ENTRY_SIZE

    @property
    def offset_table_end(self) -> int:
        return HEADER_SIZE + self.offset_table_size

    @classmethod
    def from_reader(cls, reader: BinaryReader) -> "SARCHeader":
        magic = reader.read_bytes(4)
        version = reader.read_u32()
        num_files = reader.read_u32()
        return cls(magic=magic, version=version, num_files=num_files)


@dataclass(frozen=True)
class SARCRecordHeader:
    """Per-file record header found at each offset-table target."""

    record_offset: int  # Absolute offset of the record head
    body_offset: int  # 4 bytes: body start, relative to the record head
    size: int  # 4 bytes: body length
    alignment: int  # 4 bytes: reserved, only informational for readers

    @property
    def name_offset(self) -> int:
        return self.record_offset + RECORD_HEADER_SIZE

    @property
    def absolute_body_offset(self) -> int:
        return self.record_offset + self.body_offset

    @property
    def body_end(self) -> int:
        return self.absolute_body_offset + self.size

    @classmethod
    def from_reader(cls, reader: BinaryReader) -> "SARCRecordHeader":
        record_offset = reader.tell()
        body_offset = reader.read_u32()
        size = reader.read_u32()
        alignment = reader.read_u32()
        return cls(
            record_offset=record_offset,
            body_offset=body_offset,
            size=size,
            alignment=alignment,
        )
