"""Line-oriented logging with a pluggable output and optional time zone."""

from __future__ import annotations

import enum
import os
import sys
from typing import Callable, ClassVar, Optional, TypeVar

from reactorkit import current_thread
from reactorkit.logstream import Fmt, LogStream
from reactorkit.timestamp import MICRO_SECONDS_PER_SECOND, Timestamp
from reactorkit.timezone import TimeZone

T = TypeVar("T")


class LogLevel(enum.IntEnum):
    TRACE = 0
    DEBUG = 1
    INFO = 2
    WARN = 3
    ERROR = 4
    FATAL = 5


_LEVEL_NAMES = {
    LogLevel.TRACE: "TRACE ",
    LogLevel.DEBUG: "DEBUG ",
    LogLevel.INFO: "INFO  ",
    LogLevel.WARN: "WARN  ",
    LogLevel.ERROR: "ERROR ",
    LogLevel.FATAL: "FATAL ",
}


def _init_log_level() -> LogLevel:
    if os.environ.get("REACTORKIT_LOG_TRACE"):
        return LogLevel.TRACE
    if os.environ.get("REACTORKIT_LOG_DEBUG"):
        return LogLevel.DEBUG
    return LogLevel.INFO


def _default_output(msg: bytes) -> None:
    stream = getattr(sys.stdout, "buffer", None)
    if stream is not None:
        stream.write(msg)
    else:
        sys.stdout.write(msg.decode("utf-8", "replace"))


def _default_flush() -> None:
    sys.stdout.flush()


def strerror_tl(saved_errno: int) -> str:
    return os.strerror(saved_errno)


class FatalLogError(RuntimeError):
    """Raised after a FATAL message has been written and flushed."""


class SourceFile:
    """The base name of a source file path."""

    def __init__(self, filename: str) -> None:
        self.data = str(filename).rsplit("/", 1)[-1]

    def __str__(self) -> str:
        return self.data


class Logger:
    """One log line: a header is written at creation, ``finish`` emits it."""

    _level: ClassVar[LogLevel] = _init_log_level()
    _output: ClassVar[Callable[[bytes], None]] = staticmethod(_default_output)
    _flush: ClassVar[Callable[[], None]] = staticmethod(_default_flush)
    _time_zone: ClassVar[TimeZone] = TimeZone()

    def __init__(
        self,
        file: str | SourceFile,
        line: int,
        level: LogLevel = LogLevel.INFO,
        func: Optional[str] = None,
        saved_errno: int = 0,
    ) -> None:
        self._time = Timestamp.now()
        self._stream = LogStream()
        self._level_of_line = LogLevel(level)
        self._line = line
        self._basename = file if isinstance(file, SourceFile) else SourceFile(file)
        self._finished = False
        self._format_time()
        self._stream << current_thread.tid_string()
        self._stream << _LEVEL_NAMES[self._level_of_line]
        if saved_errno != 0:
            self._stream << strerror_tl(saved_errno) << " (errno=" << saved_errno << ") "
        if func is not None:
            self._stream << func << " "

    def _format_time(self) -> None:
        micros_total = self._time.micro_seconds_since_epoch
        seconds, micros = divmod(micros_total, MICRO_SECONDS_PER_SECOND)
        zone = Logger._time_zone
        if zone.valid():
            tm = zone.to_local_time(seconds)
        else:
            tm = TimeZone.to_utc_time(seconds)
        self._stream << "%4d%02d%02d %02d:%02d:%02d" % (
            tm.year, tm.month, tm.day, tm.hour, tm.minute, tm.second
        )
        if zone.valid():
            self._stream << Fmt(".%06d ", micros)
        else:
            self._stream << Fmt(".%06dZ ", micros)

    def stream(self) -> LogStream:
        return self._stream

    def finish(self) -> None:
        """Emit the line; after a FATAL line, flush and raise ``FatalLogError``."""
        if self._finished:
            return
        self._finished = True
        self._stream << " - " << self._basename.data << ":" << self._line << "\n"
        data = self._stream.buffer().data()
        Logger._output(data)
        if self._level_of_line == LogLevel.FATAL:
            Logger._flush()
            raise FatalLogError(data.decode("utf-8", "replace").rstrip("\n"))

    def __enter__(self) -> LogStream:
        return self._stream

    def __exit__(self, *args: object) -> None:
        self.finish()

    @classmethod
    def log_level(cls) -> LogLevel:
        return Logger._level

    @classmethod
    def set_log_level(cls, level: LogLevel) -> None:
        Logger._level = LogLevel(level)

    @classmethod
    def set_output(cls, out: Optional[Callable[[bytes], None]]) -> None:
        """Send finished lines to ``out``; ``None`` restores standard output."""
        Logger._output = staticmethod(out if out is not None else _default_output)

    @classmethod
    def set_flush(cls, flush: Optional[Callable[[], None]]) -> None:
        """Use ``flush`` after FATAL lines; ``None`` restores the default."""
        Logger._flush = staticmethod(flush if flush is not None else _default_flush)

    @classmethod
    def set_time_zone(cls, tz: Optional[TimeZone]) -> None:
        """Format times in ``tz``; ``None`` or an invalid zone means UTC."""
        Logger._time_zone = tz if tz is not None else TimeZone()


def _emit(level: LogLevel, saved_errno: int, args: tuple, depth: int) -> None:
    frame = sys._getframe(depth)
    func = frame.f_code.co_name if level <= LogLevel.DEBUG else None
    logger = Logger(frame.f_code.co_filename, frame.f_lineno, level, func, saved_errno)
    stream = logger.stream()
    for arg in args:
        stream << arg
    logger.finish()


def log(level: LogLevel, *args: object) -> None:
    """Log ``args`` from the caller's location.

    TRACE, DEBUG and INFO lines are dropped below the current level;
    WARN and above are always written.
    """
    level = LogLevel(level)
    if level <= LogLevel.INFO and Logger.log_level() > level:
        return
    _emit(level, 0, args, 2)


def log_syserr(*args: object) -> None:
    """Log at ERROR with the errno of the ``OSError`` being handled, if any."""
    exc = sys.exc_info()[1]
    saved_errno = getattr(exc, "errno", 0) if isinstance(exc, OSError) else 0
    _emit(LogLevel.ERROR, saved_errno or 0, args, 2)


def check_not_null(file: str, line: int, names: str, value: Optional[T]) -> T:
    """Return ``value``; log FATAL and raise ``FatalLogError`` when it is ``None``."""
    if value is None:
        logger = Logger(file, line, LogLevel.FATAL)
        logger.stream() << names
        logger.finish()
    return value