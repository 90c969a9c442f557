"""Tests for the sarc archive parser."""

import logging
import struct

import pytest

from sarc_toolkit.archive import ArchiveParser, FileView, ParseResult, SARCHeader
from archive_builder import build_archive

# One file "foo" with a 3-byte body: header, offset table, record at 16,
# name at 28, body at 32.
SINGLE_FILE_ARCHIVE = (
    b"sarc"
    b"\x00\x00\x00\x01"
    b"\x00\x00\x00\x01"
    b"\x00\x00\x00\x10"
    b"\x00\x00\x00\x10"
    b"\x00\x00\x00\x03"
    b"\x00\x00\x00\x00"
    b"foo\x00"
    b"xyz"
)

ENTRIES = [
    ("readme.txt", b"hello, world\n"),
    ("data/level1.bin", bytes(range(40))),
    ("empty", b""),
    ("data/level2.bin", b"\xAB" * 17),
]


@pytest.fixture
def archive():
    return ArchiveParser(build_archive(ENTRIES))


class TestParseResult:
    """Header validation, in the order the checks are applied."""

    def test_null_data(self):
        parser = ArchiveParser(None)
        assert parser.parse_result is ParseResult.NULL_DATA
        assert parser.num_files == 0
        assert parser.data_size == 0

    @pytest.mark.parametrize("size", [0, 1, 4, 11])
    def test_too_few_data_size(self, size):
        parser = ArchiveParser(b"sarc\x00\x00\x00\x01\x00\x00\x00\x00"[:size])
        assert parser.parse_result is ParseResult.TOO_FEW_DATA_SIZE
        assert parser.num_files == 0

    def test_explicit_size_truncates(self):
        data = build_archive(ENTRIES)
        parser = ArchiveParser(data, 8)
        assert parser.parse_result is ParseResult.TOO_FEW_DATA_SIZE
        assert parser.data_size == 8

    def test_explicit_size_never_extends(self):
        data = build_archive(ENTRIES)
        parser = ArchiveParser(data, len(data) + 100)
        assert parser.succeeded
        assert parser.data_size == len(data)

    def test_data_corrupted(self):
        data = build_archive(ENTRIES, magic=b"SARC")
        parser = ArchiveParser(data)
        assert parser.parse_result is ParseResult.DATA_CORRUPTED
        assert parser.num_files == 0

    def test_size_checked_before_magic(self):
        assert ArchiveParser(b"xxxx").parse_result is ParseResult.TOO_FEW_DATA_SIZE

    @pytest.mark.parametrize("version", [0, 2, 0x01000000])
    def test_unsupported_version(self, version):
        parser = ArchiveParser(build_archive(ENTRIES, version=version))
        assert parser.parse_result is ParseResult.UNSUPPORTED_VERSION
        assert parser.num_files == 0
        assert not parser.get_file(0).is_valid()

    def test_magic_checked_before_version(self):
        parser = ArchiveParser(build_archive(ENTRIES, magic=b"zarc", version=7))
        assert parser.parse_result is ParseResult.DATA_CORRUPTED

    def test_empty_archive(self):
        parser = ArchiveParser(build_archive([]))
        assert parser.succeeded
        assert parser.num_files == 0
        assert list(parser) == []

    def test_header(self, archive):
        assert archive.header == SARCHeader(magic=b"sarc", version=1, num_files=4)

    def test_no_header_on_failure(self):
        assert ArchiveParser(b"nope" * 4).header is None

    def test_failure_is_logged(self, caplog):
        with caplog.at_level(logging.WARNING, logger="sarc_toolkit.archive.reader"):
            ArchiveParser(b"nope" * 4)
        assert "not a sarc archive" in caplog.text


class TestGetFile:
    """Tests for indexed file access."""

    def test_single_file_example(self):
        parser = ArchiveParser(SINGLE_FILE_ARCHIVE)
        assert parser.succeeded
        assert parser.num_files == 1

        file = parser.get_file(0)
        assert file.is_valid()
        assert file.file_name == "foo"
        assert file.file_size == 3
        assert file.data == b"xyz"
        assert not parser.find_file("bar").is_valid()

    def test_all_files_valid(self, archive):
        assert archive.num_files == len(ENTRIES)
        for i, (name, body) in enumerate(ENTRIES):
            file = archive.get_file(i)
            assert file.is_valid()
            assert file.file_name == name
            assert file.file_size == len(body)
            assert file.data == body

    @pytest.mark.parametrize("index", [4, 5, 1000, -1])
    def test_out_of_range(self, archive, index):
        assert not archive.get_file(index).is_valid()

    def test_zero_size_file_has_body(self, archive):
        file = archive.get_file(2)
        assert file.is_valid()
        assert file.data is not None
        assert len(file.data) == 0
        assert file.file_size == 0

    def test_views_borrow_buffer(self):
        data = bytearray(build_archive(ENTRIES))
        parser = ArchiveParser(data)
        file = parser.get_file(0)
        assert file.data.obj is data
        assert file.name.obj is data

    def test_alignment_is_decoded(self):
        data = build_archive(ENTRIES, alignment=16)
        parser = ArchiveParser(data)
        assert [file.alignment for file in parser] == [16] * len(ENTRIES)

        # Alignment is informational; bodies are still found via their offsets
        for i in range(len(ENTRIES)):
            record = struct.unpack_from(">I", data, 12 + 4 * i)[0]
            body_offset = record + struct.unpack_from(">I", data, record)[0]
            assert body_offset % 16 == 0

    def test_accepts_memoryview(self):
        parser = ArchiveParser(memoryview(build_archive(ENTRIES)))
        assert parser.succeeded
        assert parser.get_file(1).data == ENTRIES[1][1]

    def test_round_trip(self, archive):
        assert [(f.file_name, f.tobytes()) for f in archive] == ENTRIES


class TestFindFile:
    """Tests for name lookup."""

    def test_find_by_str(self, archive):
        file = archive.find_file("data/level1.bin")
        assert file.is_valid()
        assert file.file_name == "data/level1.bin"
        assert file.data == bytes(range(40))

    def test_find_by_bytes(self, archive):
        assert archive.find_file(b"readme.txt").file_size == 13

    def test_not_found(self, archive):
        assert not archive.find_file("missing").is_valid()

    def test_exact_match_only(self, archive):
        assert not archive.find_file("readme").is_valid()
        assert not archive.find_file("README.TXT").is_valid()
        assert not archive.find_file("readme.txt\x00").is_valid()

    def test_none_name(self, archive):
        assert not archive.find_file(None).is_valid()

    def test_first_match_wins(self):
        parser = ArchiveParser(build_archive([("dup", b"first"), ("dup", b"second")]))
        assert parser.find_file("dup").data == b"first"

    def test_utf8_name(self):
        parser = ArchiveParser(build_archive([("テクスチャ.dds", b"\x01\x02")]))
        assert parser.find_file("テクスチャ.dds").file_size == 2

    def test_failed_parse(self):
        assert not ArchiveParser(b"\x00" * 16).find_file("readme.txt").is_valid()

    def test_contains(self, archive):
        assert "empty" in archive
        assert "nothing" not in archive


class TestEnumeration:
    """Tests for iterating an archive."""

    def test_len(self, archive):
        assert len(archive) == 4

    def test_iteration_matches_get_file(self, archive):
        names = [file.file_name for file in archive]
        assert names == [archive.get_file(i).file_name for i in range(archive.num_files)]

    def test_cursor_loop(self, archive):
        visited = []
        it = archive.begin()
        while it != archive.end():
            visited.append(it.file.file_name)
            it.increment()
        assert visited == [name for name, _ in ENTRIES]

    def test_begin_end(self, archive):
        assert archive.begin().index == 0
        assert archive.end().index == archive.num_files

    def test_failed_parse_begin_equals_end(self):
        parser = ArchiveParser(None)
        assert parser.begin() == parser.end()
        assert list(parser) == []


class TestBounds:
    """Tests for archives whose records point outside the buffer."""

    @staticmethod
    def _truncated():
        data = build_archive(ENTRIES)
        # Cut into the last file's body
        return data[:-5]

    def test_lenient_out_of_bounds_body(self, caplog):
        parser = ArchiveParser(self._truncated())
        assert parser.succeeded
        assert parser.get_file(0).is_valid()
        with caplog.at_level(logging.WARNING, logger="sarc_toolkit.archive.reader"):
            assert not parser.get_file(3).is_valid()
        assert "outside the archive data" in caplog.text

    def test_lenient_bad_record_offset(self):
        data = bytearray(build_archive(ENTRIES))
        struct.pack_into(">I", data, 12, 0xFFFFFF00)
        parser = ArchiveParser(data)
        assert parser.succeeded
        assert not parser.get_file(0).is_valid()
        assert parser.get_file(1).is_valid()

    def test_lenient_missing_offset_table(self):
        parser = ArchiveParser(b"sarc\x00\x00\x00\x01\x00\x00\x00\x05")
        assert parser.succeeded
        assert parser.num_files == 5
        assert not parser.get_file(0).is_valid()

    def test_strict_rejects_truncated_body(self):
        parser = ArchiveParser(self._truncated(), strict=True)
        assert parser.parse_result is ParseResult.RECORD_OUT_OF_BOUNDS
        assert parser.num_files == 0
        assert not parser.get_file(0).is_valid()

    def test_strict_rejects_missing_offset_table(self):
        parser = ArchiveParser(b"sarc\x00\x00\x00\x01\x00\x00\x00\x05", strict=True)
        assert parser.parse_result is ParseResult.RECORD_OUT_OF_BOUNDS

    def test_strict_rejects_unterminated_name(self):
        data = b"sarc\x00\x00\x00\x01\x00\x00\x00\x01\x00\x00\x00\x10" + struct.pack(">III", 12, 0, 0) + b"abc"
        parser = ArchiveParser(data, strict=True)
        assert parser.parse_result is ParseResult.RECORD_OUT_OF_BOUNDS

    def test_strict_accepts_valid_archive(self):
        parser = ArchiveParser(build_archive(ENTRIES), strict=True)
        assert parser.succeeded
        assert parser.num_files == 4

    def test_offset_table_in_bounds(self):
        assert ArchiveParser(build_archive(ENTRIES)).offset_table_in_bounds()
        assert ArchiveParser(self._truncated()).offset_table_in_bounds()
        oversized = ArchiveParser(b"sarc\x00\x00\x00\x01\xff\xff\xff\xff")
        assert oversized.succeeded
        assert not oversized.offset_table_in_bounds()
        assert not ArchiveParser(None).offset_table_in_bounds()

    def test_check_bounds(self):
        assert ArchiveParser(build_archive(ENTRIES)).check_bounds()
        assert not ArchiveParser(self._truncated()).check_bounds()
        assert not ArchiveParser(None).check_bounds()


class TestFromFile:
    """Tests for loading archives from disk."""

    def test_from_file(self, tmp_path):
        path = tmp_path / "test.sarc"
        path.write_bytes(build_archive(ENTRIES))
        parser = ArchiveParser.from_file(path)
        assert parser.succeeded
        assert parser.find_file("empty").is_valid()

    def test_from_bytes(self):
        parser = ArchiveParser.from_bytes(build_archive(ENTRIES), strict=True)
        assert parser.succeeded
        assert parser.strict
        assert parser.get_file(0).file_name == "readme.txt"

    def test_missing_file(self, tmp_path):
        with pytest.raises(OSError):
            ArchiveParser.from_file(tmp_path / "missing.sarc")

    def test_repr(self, archive):
        assert "files=4" in repr(archive)
        assert "DATA_CORRUPTED" in repr(ArchiveParser(b"\x00" * 12))


class TestFileView:
    """Tests for FileView."""

    def test_invalid_defaults(self):
        view = FileView.invalid()
        assert not view.is_valid()
        assert not view
        assert view.data is None
        assert view.name is None
        assert view.file_name is None
        assert view.file_size == 0
        assert view.alignment == 0
        assert view.tobytes() == b""

    def test_invalid_hides_garbage(self):
        view = FileView(body=None, name=memoryview(b"junk"), size=1234, alignment=8)
        assert view.name is None
        assert view.file_name is None
        assert view.file_size == 0
        assert view.alignment == 0

    def test_immutable(self, archive):
        view = archive.get_file(0)
        with pytest.raises(AttributeError):
            view._size = 1
        with pytest.raises(AttributeError):
            view.extra = 1

    def test_repr(self, archive):
        assert repr(archive.get_file(0)) == "FileView(name='readme.txt', size=13)"
        assert repr(FileView.invalid()) == "FileView(invalid)"
