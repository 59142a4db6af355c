"""UTC timestamps with microsecond resolution."""

from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone

MICRO_SECONDS_PER_SECOND = 1_000_000

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def _trunc_divmod(value: int, divisor: int) -> tuple[int, int]:
    """Divide truncating toward zero; the remainder takes the dividend's sign."""
    quotient = abs(value) // divisor
    if value < 0:
        quotient = -quotient
    return quotient, value - quotient * divisor


@dataclass(frozen=True, order=True, slots=True)
class Timestamp:
    """An immutable point in time, counted in microseconds since the epoch."""

    micro_seconds_since_epoch: int = 0

    def to_string(self) -> str:
        """Return ``seconds.microseconds`` with six fractional digits."""
        seconds, micros = _trunc_divmod(
            self.micro_seconds_since_epoch, MICRO_SECONDS_PER_SECOND
        )
        return "%d.%06d" % (seconds, micros)

    def to_formatted_string(self, show_microseconds: bool = True) -> str:
        """Return ``YYYYMMDD HH:MM:SS[.uuuuuu]`` in UTC."""
        seconds, micros = _trunc_divmod(
            self.micro_seconds_since_epoch, MICRO_SECONDS_PER_SECOND
        )
        moment = _EPOCH + timedelta(seconds=seconds)
        text = "%4d%02d%02d %02d:%02d:%02d" % (
            moment.year,
            moment.month,
            moment.day,
            moment.hour,
            moment.minute,
            moment.second,
        )
        if show_microseconds:
            text += ".%06d" % micros
        return text

    def valid(self) -> bool:
        return self.micro_seconds_since_epoch > 0

    def seconds_since_epoch(self) -> int:
        return _trunc_divmod(self.micro_seconds_since_epoch, MICRO_SECONDS_PER_SECOND)[0]

    @classmethod
    def now(cls) -> Timestamp:
        return cls(time.time_ns() // 1000)

    @classmethod
    def invalid(cls) -> Timestamp:
        return cls()

    @classmethod
    def from_unix_time(cls, t: int, microseconds: int = 0) -> Timestamp:
        return cls(int(t) * MICRO_SECONDS_PER_SECOND + microseconds)


def time_difference(high: Timestamp, low: Timestamp) -> float:
    """Return ``high - low`` in seconds."""
    diff = high.micro_seconds_since_epoch - low.micro_seconds_since_epoch
    return diff / MICRO_SECONDS_PER_SECOND


def add_time(timestamp: Timestamp, seconds: float) -> Timestamp:
    """Return ``timestamp`` moved forward by ``seconds``."""
    delta = int(seconds * MICRO_SECONDS_PER_SECOND)
    return Timestamp(timestamp.micro_seconds_since_epoch + delta)