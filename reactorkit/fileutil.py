"""Reading small files whole and appending to files through a large buffer."""

from __future__ import annotations

import os
import stat
from dataclasses import dataclass
from os import PathLike
from typing import Optional, Union

BUFFER_SIZE = 64 * 1024

_PathArg = Union[str, bytes, PathLike]


@dataclass(frozen=True)
class FileContent:
    """What ``ReadSmallFile.read_to_string`` returns.

    ``file_size`` is ``None`` unless the file is a regular file.
    """

    content: bytes
    file_size: Optional[int]
    modify_time: int
    create_time: int


class ReadSmallFile:
    """A read-only file meant to be read whole, up to a size limit."""

    def __init__(self, filename: _PathArg) -> None:
        self._fd = os.open(filename, os.O_RDONLY | getattr(os, "O_CLOEXEC", 0))
        self._buf = b""

    def _require_open(self) -> int:
        if self._fd < 0:
            raise ValueError("I/O operation on closed file")
        return self._fd

    def read_to_string(self, max_size: int) -> FileContent:
        """Read at most ``max_size`` bytes from the current position, with file times."""
        fd = self._require_open()
        info = os.fstat(fd)
        if stat.S_ISDIR(info.st_mode):
            raise IsADirectoryError(
                os.strerror(21), getattr(self, "_name", "directory")
            )
        file_size = info.st_size if stat.S_ISREG(info.st_mode) else None
        chunks = []
        total = 0
        while total < max_size:
            chunk = os.read(fd, min(max_size - total, BUFFER_SIZE))
            if not chunk:
                break
            chunks.append(chunk)
            total += len(chunk)
        return FileContent(
            content=b"".join(chunks),
            file_size=file_size,
            modify_time=int(info.st_mtime),
            create_time=int(info.st_ctime),
        )

    def read_to_buffer(self) -> int:
        """Read from offset 0 at most ``BUFFER_SIZE - 1`` bytes into the buffer.

        Returns the number of bytes read.
        """
        fd = self._require_open()
        self._buf = os.pread(fd, BUFFER_SIZE - 1, 0)
        return len(self._buf)

    def buffer(self) -> bytes:
        return self._buf

    def close(self) -> None:
        if self._fd >= 0:
            os.close(self._fd)
            self._fd = -1

    def __enter__(self) -> ReadSmallFile:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def __del__(self) -> None:
        try:
            self.close()
        except (OSError, AttributeError):
            pass


def read_file(filename: _PathArg, max_size: int) -> FileContent:
    """Read at most ``max_size`` bytes of ``filename``; raise ``OSError`` on failure."""
    with ReadSmallFile(filename) as handle:
        return handle.read_to_string(max_size)


class AppendFile:
    """A file opened for appending with a 64 KiB buffer; not thread safe."""

    def __init__(self, filename: _PathArg) -> None:
        self._file = open(filename, "ab", buffering=BUFFER_SIZE)
        self._written = 0

    def append(self, data: bytes) -> None:
        self._file.write(data)
        self._written += len(data)

    def flush(self) -> None:
        self._file.flush()

    def written_bytes(self) -> int:
        return self._written

    def close(self) -> None:
        self._file.close()

    def __enter__(self) -> AppendFile:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()