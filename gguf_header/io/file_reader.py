"""
Zero-copy local file source for GGUF headers (mmap + memoryview).
"""

from __future__ import annotations

import mmap
import os
from dataclasses import dataclass
from typing import Optional

from loguru import logger


@dataclass
class LocalFileSource:
    """Local GGUF file whose bytes are handed to the header decoder.

    Attributes:
        path: Path to the local file.
    """

    path: str

    def open(self) -> "MappedFile":
        """Open and memory-map the file read-only."""
        return MappedFile(self.path)


class MappedFile:
    """Context manager that wraps an mmapped file and exposes a memoryview.

    Zero-length files cannot be mapped; they expose an empty view so the
    decoder reports a bad magic instead of the reader failing.
    """

    __slots__ = ("_fd", "_m", "_mv", "size", "path")

    def __init__(self, path: str):
        self.path = path
        self._fd: Optional[int] = None
        self._m: Optional[mmap.mmap] = None
        self._mv: Optional[memoryview] = None
        self.size: int = 0

    def __enter__(self) -> "MappedFile":
        self._fd = os.open(self.path, os.O_RDONLY | getattr(os, "O_BINARY", 0))
        try:
            self.size = os.fstat(self._fd).st_size
            if self.size:
                self._m = mmap.mmap(self._fd, self.size, access=mmap.ACCESS_READ)
                self._mv = memoryview(self._m)
            else:
                self._mv = memoryview(b"")
        except OSError:
            self.__exit__(None, None, None)
            raise
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        # Slices of the view may outlive the block (e.g. held by an in-flight
        # traceback); the mapping is then unmapped when the last one is collected.
        if self._mv is not None:
            try:
                self._mv.release()
            except BufferError:
                logger.debug("View of {path} still exported; release deferred", path=self.path)
            self._mv = None
        if self._m is not None:
            try:
                self._m.close()
            except BufferError:
                logger.debug("Mapping of {path} still exported; close deferred", path=self.path)
            self._m = None
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None

    @property
    def view(self) -> memoryview:
        """Zero-copy memoryview over the file bytes."""
        if self._mv is None:
            raise RuntimeError("MappedFile is not entered")
        return self._mv
