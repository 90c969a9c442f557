"""Read-only view of a single file stored in a SARC archive."""

from typing import Optional


class FileView:
    """Non-owning view of one archived file's name, body, and size.

    Views borrow from the archive buffer: ``data`` and ``name`` are
    ``memoryview`` slices of it, so the buffer must stay alive and unchanged
    for as long as the view is used. A view without a body is invalid and
    reports no name, no data, and a size of zero.
    """

    __slots__ = ("_body", "_name", "_size", "_alignment")

    def __init__(
        self,
        body: Optional[memoryview] = None,
        name: Optional[memoryview] = None,
        size: int = 0,
        alignment: int = 0,
    ):
        object.__setattr__(self, "_body", body)
        object.__setattr__(self, "_name", name)
        object.__setattr__(self, "_size", size)
        object.__setattr__(self, "_alignment", alignment)

    def __setattr__(self, key, value):
        raise AttributeError(f"{type(self).__name__} is immutable")

    def __delattr__(self, key):
        raise AttributeError(f"{type(self).__name__} is immutable")

    @classmethod
    def invalid(cls) -> "FileView":
        return cls()

    def is_valid(self) -> bool:
        return self._body is not None

    def __bool__(self) -> bool:
        return self.is_valid()

    @property
    def data(self) -> Optional[memoryview]:
        """File body. Zero-size files get an empty view, not None."""
        return self._body if self.is_valid() else None

    @property
    def name(self) -> Optional[memoryview]:
        """Raw name bytes, without the null terminator."""
        return self._name if self.is_valid() else None

    @property
    def file_name(self) -> Optional[str]:
        if not self.is_valid() or self._name is None:
            return None
        return self._name.tobytes().decode("utf-8", errors="replace")

    @property
    def file_size(self) -> int:
        return self._size if self.is_valid() else 0

    @property
    def alignment(self) -> int:
        return self._alignment if self.is_valid() else 0

    def tobytes(self) -> bytes:
        """Copy the file body out of the archive."""
        if not self.is_valid():
            return b""
        return self._body.tobytes()

    def __repr__(self) -> str:
        if self.is_valid():
            return f"FileView(name={self.file_name!r}, size={self.file_size})"
        return "FileView(invalid)"
