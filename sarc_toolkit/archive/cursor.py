"""Random-access cursor over the files of a SARC archive."""

from typing import TYPE_CHECKING

from .file_view import FileView

if TYPE_CHECKING:
    from .reader import ArchiveParser


class ArchiveCursor:
    """Position in ``[0, num_files]`` of an archive.

    ``num_files`` is the end position: a cursor may sit there but cannot be
    dereferenced. Moving outside the range, dereferencing the end position,
    and comparing cursors of different archives are programming errors and
    raise instead of returning an invalid view.

    Iterating a cursor yields the file at the current position and advances
    it, stopping at the end position.
    """

    __slots__ = ("_archive", "_index")

    def __init__(self, archive: "ArchiveParser", file_index: int = 0):
        if archive is None:
            raise ValueError("Cursor requires an archive")
        self._archive = archive
        self._index = self._checked_index(file_index)

    @property
    def archive(self) -> "ArchiveParser":
        return self._archive

    @property
    def index(self) -> int:
        return self._index

    def _checked_index(self, file_index: int) -> int:
        if not isinstance(file_index, int) or isinstance(file_index, bool):
            raise TypeError(f"Cursor index must be an int, got {type(file_index).__name__}")
        if file_index < 0 or file_index > self._archive.num_files:
            raise IndexError(f"Cursor index {file_index} out of range [0, {self._archive.num_files}]")
        return file_index

    def _check_same_archive(self, other: "ArchiveCursor") -> None:
        if self._archive is not other._archive:
            raise ValueError("Cannot compare cursors from different archives")

    # Dereference

    def deref(self) -> FileView:
        if self._index >= self._archive.num_files:
            raise IndexError(f"Cannot dereference cursor at end position {self._index}")
        return self._archive.get_file(self._index)

    @property
    def file(self) -> FileView:
        return self.deref()

    def __getitem__(self, offset: int) -> FileView:
        target = self._checked_index(self._index + self._checked_offset(offset))
        if target >= self._archive.num_files:
            raise IndexError(f"Cannot dereference cursor at end position {target}")
        return self._archive.get_file(target)

    # Stepping

    def increment(self) -> "ArchiveCursor":
        """Advance by one in place and return self."""
        if self._index >= self._archive.num_files:
            raise IndexError("Cannot increment cursor past the end")
        self._index += 1
        return self

    def decrement(self) -> "ArchiveCursor":
        """Step back by one in place and return self."""
        if self._index <= 0:
            raise IndexError("Cannot decrement cursor before the beginning")
        self._index -= 1
        return self

    def post_increment(self) -> "ArchiveCursor":
        """Advance by one in place and return a cursor at the old position."""
        previous = self.copy()
        self.increment()
        return previous

    def post_decrement(self) -> "ArchiveCursor":
        """Step back by one in place and return a cursor at the old position."""
        previous = self.copy()
        self.decrement()
        return previous

    # Arithmetic

    @staticmethod
    def _checked_offset(offset) -> int:
        if not isinstance(offset, int) or isinstance(offset, bool):
            raise TypeError(f"Cursor offset must be an int, got {type(offset).__name__}")
        return offset

    def __iadd__(self, offset: int) -> "ArchiveCursor":
        self._index = self._checked_index(self._index + self._checked_offset(offset))
        return self

    def __isub__(self, offset: int) -> "ArchiveCursor":
        self._index = self._checked_index(self._index - self._checked_offset(offset))
        return self

    def __add__(self, offset: int) -> "ArchiveCursor":
        if not isinstance(offset, int) or isinstance(offset, bool):
            return NotImplemented
        return ArchiveCursor(self._archive, self._index + offset)

    __radd__ = __add__

    def __sub__(self, other):
        if isinstance(other, ArchiveCursor):
            self._check_same_archive(other)
            return self._index - other._index
        if not isinstance(other, int) or isinstance(other, bool):
            return NotImplemented
        return ArchiveCursor(self._archive, self._index - other)

    # Comparison

    def __eq__(self, other) -> bool:
        if not isinstance(other, ArchiveCursor):
            return NotImplemented
        self._check_same_archive(other)
        return self._index == other._index

    def __ne__(self, other) -> bool:
        if not isinstance(other, ArchiveCursor):
            return NotImplemented
        return not self == other

    def __lt__(self, other) -> bool:
        if not isinstance(other, ArchiveCursor):
            return NotImplemented
        self._check_same_archive(other)
        return self._index < other._index

    def __le__(self, other) -> bool:
        if not isinstance(other, ArchiveCursor):
            return NotImplemented
        self._check_same_archive(other)
        return self._index <= other._index

    def __gt__(self, other) -> bool:
        if not isinstance(other, ArchiveCursor):
            return NotImplemented
        self._check_same_archive(other)
        return self._index > other._index

    def __ge__(self, other) -> bool:
        if not isinstance(other, ArchiveCursor):
            return NotImplemented
        self._check_same_archive(other)
        return self._index >= other._index

    __hash__ = None

    # Copying and iteration

    def copy(self) -> "ArchiveCursor":
        return ArchiveCursor(self._archive, self._index)

    __copy__ = copy

    def __iter__(self) -> "ArchiveCursor":
        return self

    def __next__(self) -> FileView:
        if self._index >= self._archive.num_files:
            raise StopIteration
        return self.post_increment().deref()

    def __repr__(self) -> str:
        return f"ArchiveCursor(index={self._index}, end={self._archive.num_files})"
