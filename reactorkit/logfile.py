"""Log files that roll over by size and by day."""

from __future__ import annotations

import contextlib
import threading
import time
from typing import Optional, Union

from reactorkit import processinfo
from reactorkit.fileutil import AppendFile

ROLL_PER_SECONDS = 60 * 60 * 24


class LogFile:
    """Appends to ``basename.<time>.<host>.<pid>.log`` in the working directory.

    A new file is started when the written size exceeds ``roll_size`` or a new
    day begins; both are checked only when at least a second has passed.
    """

    def __init__(
        self,
        basename: str,
        roll_size: int,
        thread_safe: bool = True,
        flush_interval: int = 3,
        check_every_n: int = 1024,
    ) -> None:
        if "/" in basename:
            raise ValueError("basename must not contain '/'")
        self._basename = basename
        self._roll_size = roll_size
        self._flush_interval = flush_interval
        self._check_every_n = check_every_n
        self._count = 0
        self._lock = threading.Lock() if thread_safe else contextlib.nullcontext()
        self._start_of_period = 0
        self._last_roll = 0
        self._last_flush = 0
        self._file: Optional[AppendFile] = None
        self.roll_file()

    def append(self, data: Union[bytes, str]) -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        with self._lock:
            self._append_unlocked(data)

    def flush(self) -> None:
        with self._lock:
            self._file.flush()

    def _append_unlocked(self, data: bytes) -> None:
        self._file.append(data)
        if self._file.written_bytes() > self._roll_size:
            self.roll_file()
            return
        self._count += 1
        if self._count >= self._check_every_n:
            self._count = 0
            now = int(time.time())
            this_period = now // ROLL_PER_SECONDS * ROLL_PER_SECONDS
            if this_period != self._start_of_period:
                self.roll_file()
            elif now - self._last_flush > self._flush_interval:
                self._last_flush = now
                self._file.flush()

    def roll_file(self) -> bool:
        """Start a new file unless one was started this same second."""
        now = int(time.time())
        filename = LogFile.get_log_file_name(self._basename, now)
        start = now // ROLL_PER_SECONDS * ROLL_PER_SECONDS
        if now > self._last_roll:
            self._last_roll = now
            self._last_flush = now
            self._start_of_period = start
            old = self._file
            self._file = AppendFile(filename)
            if old is not None:
                old.close()
            return True
        return False

    def close(self) -> None:
        with self._lock:
            self._file.close()

    @staticmethod
    def get_log_file_name(basename: str, now: Optional[float] = None) -> str:
        """Return the file name for a log started at ``now`` (UTC seconds)."""
        if now is None:
            now = time.time()
        stamp = time.strftime(".%Y%m%d-%H%M%S.", time.gmtime(int(now)))
        return "%s%s%s.%d.log" % (
            basename,
            stamp,
            processinfo.hostname(),
            processinfo.pid(),
        )