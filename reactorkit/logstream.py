"""Fixed-size log buffers, a stream that formats values into them, and unit formatting."""

from __future__ import annotations

import numbers

SMALL_BUFFER = 4000
LARGE_BUFFER = 4000 * 1000
MAX_NUMERIC_SIZE = 32
_FMT_SIZE = 32


class FixedBuffer:
    """A byte buffer of fixed capacity; appends that do not fit are dropped."""

    def __init__(self, size: int = SMALL_BUFFER) -> None:
        if size <= 0:
            raise ValueError("buffer size must be positive")
        self._data = bytearray(size)
        self._cur = 0

    def append(self, data: bytes) -> None:
        """Append ``data`` whole if strictly less than ``avail()`` bytes, else drop it."""
        n = len(data)
        if self.avail() > n:
            self._data[self._cur:self._cur + n] = data
            self._cur += n

    def data(self) -> bytes:
        return bytes(self._data[:self._cur])

    def __len__(self) -> int:
        return self._cur

    def avail(self) -> int:
        return len(self._data) - self._cur

    def reset(self) -> None:
        self._cur = 0

    def bzero(self) -> None:
        """Zero the storage without moving the write position."""
        self._data[:] = bytes(len(self._data))

    def to_string(self) -> str:
        return self.data().decode("utf-8", errors="replace")


class Fmt:
    """A single number formatted with a printf-style format, at most 31 bytes."""

    def __init__(self, fmt: str, value: numbers.Real) -> None:
        if not isinstance(value, numbers.Real):
            raise TypeError("Fmt requires an arithmetic value")
        text = (fmt % value).encode("utf-8")
        if len(text) >= _FMT_SIZE:
            raise ValueError("formatted value too long")
        self._data = text

    def data(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return len(self._data)


class LogStream:
    """Accumulates formatted values in a small fixed buffer via ``<<``."""

    def __init__(self) -> None:
        self._buffer = FixedBuffer(SMALL_BUFFER)

    def _append_numeric(self, text: str) -> None:
        if self._buffer.avail() >= MAX_NUMERIC_SIZE:
            self._buffer.append(text.encode("ascii"))

    def __lshift__(self, value: object) -> LogStream:
        if isinstance(value, bool):
            self._buffer.append(b"1" if value else b"0")
        elif isinstance(value, int):
            self._append_numeric(str(value))
        elif isinstance(value, float):
            self._append_numeric("%.12g" % value)
        elif isinstance(value, str):
            self._buffer.append(value.encode("utf-8"))
        elif isinstance(value, (bytes, bytearray, memoryview)):
            self._buffer.append(value)
        elif value is None:
            self._buffer.append(b"(null)")
        elif isinstance(value, (FixedBuffer, Fmt)):
            self._buffer.append(value.data())
        else:
            self._append_numeric("0x%X" % id(value))
        return self

    def append(self, data: bytes) -> None:
        self._buffer.append(data)

    def buffer(self) -> FixedBuffer:
        return self._buffer

    def reset_buffer(self) -> None:
        self._buffer.reset()


def format_si(n: int) -> str:
    """Format a non-negative quantity in SI units, at most 5 characters."""
    x = float(n)
    if n < 1000:
        return "%d" % n
    steps = [
        (9995, "%.2fk", 1e3),
        (99950, "%.1fk", 1e3),
        (999500, "%.0fk", 1e3),
        (9995000, "%.2fM", 1e6),
        (99950000, "%.1fM", 1e6),
        (999500000, "%.0fM", 1e6),
        (9995000000, "%.2fG", 1e9),
        (99950000000, "%.1fG", 1e9),
        (999500000000, "%.0fG", 1e9),
        (9995000000000, "%.2fT", 1e12),
        (99950000000000, "%.1fT", 1e12),
        (999500000000000, "%.0fT", 1e12),
        (9995000000000000, "%.2fP", 1e15),
        (99950000000000000, "%.1fP", 1e15),
        (999500000000000000, "%.0fP", 1e15),
    ]
    for limit, fmt, scale in steps:
        if n < limit:
            return fmt % (x / scale)
    return "%.2fE" % (x / 1e18)


def format_iec(n: int) -> str:
    """Format a non-negative quantity in IEC binary units, at most 6 characters."""
    x = float(n)
    ki = 1024.0
    if x < ki:
        return "%d" % n
    for unit_index, unit in enumerate(("Ki", "Mi", "Gi", "Ti", "Pi")):
        scale = ki ** (unit_index + 1)
        if x < scale * 9.995:
            return "%.2f%s" % (x / scale, unit)
        if x < scale * 99.95:
            return "%.1f%s" % (x / scale, unit)
        if x < scale * 1023.5:
            return "%.0f%s" % (x / scale, unit)
    ei = ki ** 6
    if x < ei * 9.995:
        return "%.2fEi" % (x / ei)
    return "%.1fEi" % (x / ei)