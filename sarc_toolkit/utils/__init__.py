"""Shared helpers."""

from .binary import BinaryReader, find_cstring_end, read_u32_be

__all__ = ["BinaryReader", "find_cstring_end", "read_u32_be"]
