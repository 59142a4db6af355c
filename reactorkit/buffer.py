"""A growable byte buffer with a readable region and cheap prepend space.

Layout::

    | prependable bytes | readable bytes | writable bytes |
    0          <=   reader   <=    writer    <=     size
"""

from __future__ import annotations

import os
from typing import Optional, Union

CHEAP_PREPEND = 8
INITIAL_SIZE = 1024

_CRLF = b"\r\n"
_EXTRA_BUFFER = 65536

_Data = Union[bytes, bytearray, memoryview, str]


def _as_bytes(data: _Data) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


class Buffer:
    """A byte buffer read from the front and written at the back.

    Offsets given to and returned by the ``find_*`` and ``retrieve_until``
    methods count from the start of the readable bytes.
    """

    CHEAP_PREPEND = CHEAP_PREPEND
    INITIAL_SIZE = INITIAL_SIZE

    def __init__(self, initial_size: int = INITIAL_SIZE) -> None:
        if initial_size < 0:
            raise ValueError("initial_size must not be negative")
        self._buf = bytearray(CHEAP_PREPEND + initial_size)
        self._reader = CHEAP_PREPEND
        self._writer = CHEAP_PREPEND

    def swap(self, other: Buffer) -> None:
        self._buf, other._buf = other._buf, self._buf
        self._reader, other._reader = other._reader, self._reader
        self._writer, other._writer = other._writer, self._writer

    def readable_bytes(self) -> int:
        return self._writer - self._reader

    def writable_bytes(self) -> int:
        return len(self._buf) - self._writer

    def prependable_bytes(self) -> int:
        return self._reader

    def peek(self) -> bytes:
        """Return a copy of the readable bytes without consuming them."""
        return bytes(self._buf[self._reader:self._writer])

    def _check_offset(self, start: int) -> None:
        if not 0 <= start <= self.readable_bytes():
            raise ValueError("offset outside the readable bytes")

    def find_crlf(self, start: int = 0) -> Optional[int]:
        """Return the offset of the first ``\\r\\n`` at or after ``start``, or ``None``."""
        self._check_offset(start)
        pos = self._buf.find(_CRLF, self._reader + start, self._writer)
        return None if pos < 0 else pos - self._reader

    def find_eol(self, start: int = 0) -> Optional[int]:
        """Return the offset of the first ``\\n`` at or after ``start``, or ``None``."""
        self._check_offset(start)
        pos = self._buf.find(b"\n", self._reader + start, self._writer)
        return None if pos < 0 else pos - self._reader

    def retrieve(self, length: int) -> None:
        """Consume ``length`` readable bytes."""
        if not 0 <= length <= self.readable_bytes():
            raise ValueError("cannot retrieve more than the readable bytes")
        if length < self.readable_bytes():
            self._reader += length
        else:
            self.retrieve_all()

    def retrieve_until(self, end: int) -> None:
        """Consume the readable bytes before offset ``end``."""
        self._check_offset(end)
        self.retrieve(end)

    def retrieve_all(self) -> None:
        self._reader = CHEAP_PREPEND
        self._writer = CHEAP_PREPEND

    def retrieve_all_as_bytes(self) -> bytes:
        return self.retrieve_as_bytes(self.readable_bytes())

    def retrieve_as_bytes(self, length: int) -> bytes:
        if not 0 <= length <= self.readable_bytes():
            raise ValueError("cannot retrieve more than the readable bytes")
        result = bytes(self._buf[self._reader:self._reader + length])
        self.retrieve(length)
        return result

    def append(self, data: _Data) -> None:
        """Append bytes, or text encoded as UTF-8."""
        chunk = _as_bytes(data)
        n = len(chunk)
        self.ensure_writable_bytes(n)
        self._buf[self._writer:self._writer + n] = chunk
        self._writer += n

    def ensure_writable_bytes(self, length: int) -> None:
        if self.writable_bytes() < length:
            self._make_space(length)

    def has_written(self, length: int) -> None:
        """Mark ``length`` bytes of the writable region as readable."""
        if not 0 <= length <= self.writable_bytes():
            raise ValueError("cannot mark more than the writable bytes")
        self._writer += length

    def unwrite(self, length: int) -> None:
        """Drop the last ``length`` readable bytes."""
        if not 0 <= length <= self.readable_bytes():
            raise ValueError("cannot unwrite more than the readable bytes")
        self._writer -= length

    def _append_int(self, x: int, size: int) -> None:
        self.append(int(x).to_bytes(size, "big", signed=True))

    def append_int64(self, x: int) -> None:
        self._append_int(x, 8)

    def append_int32(self, x: int) -> None:
        self._append_int(x, 4)

    def append_int16(self, x: int) -> None:
        self._append_int(x, 2)

    def append_int8(self, x: int) -> None:
        self._append_int(x, 1)

    def _peek_int(self, size: int) -> int:
        if self.readable_bytes() < size:
            raise ValueError("not enough readable bytes")
        return int.from_bytes(self._buf[self._reader:self._reader + size], "big", signed=True)

    def peek_int64(self) -> int:
        return self._peek_int(8)

    def peek_int32(self) -> int:
        return self._peek_int(4)

    def peek_int16(self) -> int:
        return self._peek_int(2)

    def peek_int8(self) -> int:
        return self._peek_int(1)

    def _read_int(self, size: int) -> int:
        value = self._peek_int(size)
        self.retrieve(size)
        return value

    def read_int64(self) -> int:
        return self._read_int(8)

    def read_int32(self) -> int:
        return self._read_int(4)

    def read_int16(self) -> int:
        return self._read_int(2)

    def read_int8(self) -> int:
        return self._read_int(1)

    def _prepend_int(self, x: int, size: int) -> None:
        self.prepend(int(x).to_bytes(size, "big", signed=True))

    def prepend_int64(self, x: int) -> None:
        self._prepend_int(x, 8)

    def prepend_int32(self, x: int) -> None:
        self._prepend_int(x, 4)

    def prepend_int16(self, x: int) -> None:
        self._prepend_int(x, 2)

    def prepend_int8(self, x: int) -> None:
        self._prepend_int(x, 1)

    def prepend(self, data: _Data) -> None:
        """Put bytes in front of the readable bytes, using the prepend space."""
        chunk = _as_bytes(data)
        n = len(chunk)
        if n > self.prependable_bytes():
            raise ValueError("not enough prependable space")
        self._reader -= n
        self._buf[self._reader:self._reader + n] = chunk

    def shrink(self, reserve: int) -> None:
        """Reallocate to fit the readable bytes plus ``reserve`` writable bytes."""
        other = Buffer()
        other.ensure_writable_bytes(self.readable_bytes() + reserve)
        other.append(self.peek())
        self.swap(other)

    def internal_capacity(self) -> int:
        return len(self._buf)

    def read_fd(self, fd: int) -> int:
        """Read once from ``fd`` into the buffer, growing it if needed.

        Returns the byte count read; raises ``OSError`` on failure.
        """
        writable = self.writable_bytes()
        extra = bytearray(_EXTRA_BUFFER)
        with memoryview(self._buf)[self._writer:] as target:
            buffers = [target, extra] if writable < len(extra) else [target]
            n = os.readv(fd, buffers)
        if n <= writable:
            self._writer += n
        else:
            self._writer = len(self._buf)
            self.append(memoryview(extra)[:n - writable])
        return n

    def _make_space(self, length: int) -> None:
        if self.writable_bytes() + self.prependable_bytes() < length + CHEAP_PREPEND:
            self._buf.extend(bytes(self._writer + length - len(self._buf)))
        else:
            readable = self.readable_bytes()
            self._buf[CHEAP_PREPEND:CHEAP_PREPEND + readable] = self._buf[
                self._reader:self._writer
            ]
            self._reader = CHEAP_PREPEND
            self._writer = CHEAP_PREPEND + readable