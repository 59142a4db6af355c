"""Time zones read from TZif files or fixed offsets, and UTC calendar helpers."""

from __future__ import annotations

import struct
from bisect import bisect_left
from dataclasses import dataclass, replace
from os import PathLike
from typing import Union

from reactorkit.date import JULIAN_DAY_OF_1970_01_01, Date

SECONDS_PER_DAY = 24 * 60 * 60

_HEADER = b"TZif"


@dataclass(frozen=True)
class BrokenDownTime:
    """Calendar fields of a moment, like ``struct tm`` but with a full year.

    ``month`` is 1..12, ``week_day`` is 0 for Sunday, ``year_day`` is 0-based.
    """

    year: int
    month: int
    day: int
    hour: int = 0
    minute: int = 0
    second: int = 0
    week_day: int = 0
    year_day: int = 0
    is_dst: bool = False
    gmt_offset: int = 0
    zone: str = ""


@dataclass(frozen=True)
class _Transition:
    gmt_time: int
    local_time: int
    localtime_index: int


@dataclass(frozen=True)
class _LocalTime:
    gmt_offset: int
    is_dst: bool
    abbr_index: int


@dataclass(frozen=True)
class _ZoneData:
    transitions: tuple[_Transition, ...]
    localtimes: tuple[_LocalTime, ...]
    abbreviation: str

    @property
    def gmt_keys(self) -> list[int]:
        return [t.gmt_time for t in self.transitions]

    @property
    def local_keys(self) -> list[int]:
        return [t.local_time for t in self.transitions]

    def zone_name(self, index: int) -> str:
        return self.abbreviation[index:].split("\0", 1)[0]

    def find_localtime(self, key: int, by_gmt: bool) -> _LocalTime:
        if not self.localtimes:
            raise ValueError("time zone has no local time types")
        keys = self.gmt_keys if by_gmt else self.local_keys
        if not keys or key < keys[0]:
            return self.localtimes[0]
        pos = bisect_left(keys, key)
        if pos < len(keys):
            if keys[pos] != key:
                pos -= 1
            return self.localtimes[self.transitions[pos].localtime_index]
        return self.localtimes[self.transitions[-1].localtime_index]


class _Reader:
    """Sequential big-endian reader over the bytes of a zone file."""

    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    def read_bytes(self, n: int) -> bytes:
        if n < 0 or self._pos + n > len(self._data):
            raise ValueError("no enough data")
        chunk = self._data[self._pos:self._pos + n]
        self._pos += n
        return chunk

    def read_int32(self) -> int:
        if self._pos + 4 > len(self._data):
            raise ValueError("bad int32_t data")
        (value,) = struct.unpack_from(">i", self._data, self._pos)
        self._pos += 4
        return value

    def read_uint8(self) -> int:
        if self._pos + 1 > len(self._data):
            raise ValueError("bad uint8_t data")
        value = self._data[self._pos]
        self._pos += 1
        return value


def _parse_zone(content: bytes) -> _ZoneData:
    reader = _Reader(content)
    if reader.read_bytes(4) != _HEADER:
        raise ValueError("bad head")
    reader.read_bytes(1)  # version
    reader.read_bytes(15)

    reader.read_int32()  # isgmtcnt
    reader.read_int32()  # isstdcnt
    reader.read_int32()  # leapcnt
    timecnt = reader.read_int32()
    typecnt = reader.read_int32()
    charcnt = reader.read_int32()

    trans = [reader.read_int32() for _ in range(timecnt)]
    indices = [reader.read_uint8() for _ in range(timecnt)]

    localtimes = []
    for _ in range(typecnt):
        gmtoff = reader.read_int32()
        isdst = reader.read_uint8()
        abbrind = reader.read_uint8()
        localtimes.append(_LocalTime(gmtoff, bool(isdst), abbrind))

    transitions = []
    for gmt_time, index in zip(trans, indices):
        if index >= len(localtimes):
            raise ValueError("bad local time index")
        local_time = gmt_time + localtimes[index].gmt_offset
        transitions.append(_Transition(gmt_time, local_time, index))

    abbreviation = reader.read_bytes(charcnt).decode("latin-1")
    return _ZoneData(tuple(transitions), tuple(localtimes), abbreviation)


class TimeZone:
    """A time zone for 1970..2030; ``TimeZone()`` is an invalid zone."""

    def __init__(self, data: _ZoneData | None = None) -> None:
        self._data = data

    @classmethod
    def from_file(cls, zonefile: Union[str, PathLike]) -> TimeZone:
        """Load a zone from a TZif file; raise ``OSError`` or ``ValueError``."""
        with open(zonefile, "rb") as handle:
            content = handle.read()
        return cls(_parse_zone(content))

    @classmethod
    def fixed(cls, east_of_utc: int, name: str) -> TimeZone:
        """Return a zone with a constant offset east of UTC, in seconds."""
        return cls(_ZoneData((), (_LocalTime(east_of_utc, False, 0),), name))

    def valid(self) -> bool:
        return self._data is not None

    def _require_data(self) -> _ZoneData:
        if self._data is None:
            raise ValueError("invalid time zone")
        return self._data

    def to_local_time(self, seconds_since_epoch: int) -> BrokenDownTime:
        data = self._require_data()
        local = data.find_localtime(seconds_since_epoch, True)
        tm = TimeZone.to_utc_time(seconds_since_epoch + local.gmt_offset, True)
        return replace(
            tm,
            is_dst=local.is_dst,
            gmt_offset=local.gmt_offset,
            zone=data.zone_name(local.abbr_index),
        )

    def from_local_time(self, local_tm: BrokenDownTime) -> int:
        data = self._require_data()
        seconds = TimeZone.from_utc_tm(local_tm)
        local = data.find_localtime(seconds, False)
        if local_tm.is_dst:
            try_tm = self.to_local_time(seconds - local.gmt_offset)
            if (
                not try_tm.is_dst
                and try_tm.hour == local_tm.hour
                and try_tm.minute == local_tm.minute
            ):
                seconds -= 3600
        return seconds - local.gmt_offset

    @staticmethod
    def to_utc_time(seconds_since_epoch: int, yday: bool = False) -> BrokenDownTime:
        """Break down seconds since the epoch in UTC, like ``gmtime``."""
        days, seconds = divmod(int(seconds_since_epoch), SECONDS_PER_DAY)
        minutes, second = divmod(seconds, 60)
        hour, minute = divmod(minutes, 60)
        date = Date(days + JULIAN_DAY_OF_1970_01_01)
        ymd = date.year_month_day()
        year_day = 0
        if yday:
            start = Date.from_ymd(ymd.year, 1, 1)
            year_day = date.julian_day_number - start.julian_day_number
        return BrokenDownTime(
            year=ymd.year,
            month=ymd.month,
            day=ymd.day,
            hour=hour,
            minute=minute,
            second=second,
            week_day=date.week_day(),
            year_day=year_day,
            zone="GMT",
        )

    @staticmethod
    def from_utc_tm(utc: BrokenDownTime) -> int:
        """Return seconds since the epoch of UTC fields, like ``timegm``."""
        return TimeZone.from_utc_time(
            utc.year, utc.month, utc.day, utc.hour, utc.minute, utc.second
        )

    @staticmethod
    def from_utc_time(
        year: int, month: int, day: int, hour: int, minute: int, seconds: int
    ) -> int:
        date = Date.from_ymd(year, month, day)
        seconds_in_day = hour * 3600 + minute * 60 + seconds
        days = date.julian_day_number - JULIAN_DAY_OF_1970_01_01
        return days * SECONDS_PER_DAY + seconds_in_day