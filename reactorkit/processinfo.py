"""Facts about the running process, mostly read from ``/proc/self``."""

from __future__ import annotations

import os
import socket
from dataclasses import dataclass
from typing import Optional

from reactorkit import current_thread
from reactorkit.fileutil import read_file
from reactorkit.timestamp import Timestamp

try:
    import pwd
except ImportError:  # pragma: no cover - non-Unix systems
    pwd = None

try:
    import resource
except ImportError:  # pragma: no cover - non-Unix systems
    resource = None

_MAX_PROC_FILE = 65536

_START_TIME = Timestamp.now()


def _sysconf(name: str, fallback: int) -> int:
    try:
        return int(os.sysconf(name))
    except (AttributeError, ValueError, OSError):
        return fallback


_CLOCK_TICKS = _sysconf("SC_CLK_TCK", 100)
_PAGE_SIZE = _sysconf("SC_PAGE_SIZE", 4096)


@dataclass(frozen=True)
class CpuTime:
    user_seconds: float = 0.0
    system_seconds: float = 0.0

    def total(self) -> float:
        return self.user_seconds + self.system_seconds


def _read_text(path: str) -> str:
    try:
        return read_file(path, _MAX_PROC_FILE).content.decode("utf-8", "replace")
    except OSError:
        return ""


def pid() -> int:
    return os.getpid()


def pid_string() -> str:
    return "%d" % pid()


def uid() -> int:
    return os.getuid()


def username() -> str:
    """Return the login name of the real user, or ``unknownuser``."""
    if pwd is None:
        return "unknownuser"
    try:
        return pwd.getpwuid(uid()).pw_name
    except KeyError:
        return "unknownuser"


def euid() -> int:
    return os.geteuid()


def start_time() -> Timestamp:
    """Return the time this module was first loaded."""
    return _START_TIME


def clock_ticks_per_second() -> int:
    return _CLOCK_TICKS


def page_size() -> int:
    return _PAGE_SIZE


def is_debug_build() -> bool:
    return __debug__


def hostname() -> str:
    try:
        return socket.gethostname()
    except OSError:
        return "unknownhost"


def procname(stat: Optional[str] = None) -> str:
    """Return the name between the first ``(`` and last ``)`` of a stat line.

    Without ``stat`` the process's own ``/proc/self/stat`` is used.
    """
    if stat is None:
        stat = proc_stat()
    lp = stat.find("(")
    rp = stat.rfind(")")
    if lp >= 0 and rp >= 0 and lp < rp:
        return stat[lp + 1:rp]
    return ""


def proc_status() -> str:
    return _read_text("/proc/self/status")


def proc_stat() -> str:
    return _read_text("/proc/self/stat")


def thread_stat() -> str:
    return _read_text("/proc/self/task/%d/stat" % current_thread.tid())


def exe_path() -> str:
    try:
        return os.readlink("/proc/self/exe")
    except OSError:
        return ""


def opened_files() -> int:
    try:
        return sum(1 for entry in os.listdir("/proc/self/fd") if entry[:1].isdigit())
    except OSError:
        return 0


def max_open_files() -> int:
    if resource is None:
        return opened_files()
    try:
        soft, _hard = resource.getrlimit(resource.RLIMIT_NOFILE)
    except (OSError, ValueError):
        return opened_files()
    return int(soft)


def cpu_time() -> CpuTime:
    times = os.times()
    return CpuTime(user_seconds=times.user, system_seconds=times.system)


def num_threads() -> int:
    status = proc_status()
    pos = status.find("Threads:")
    if pos < 0:
        return 0
    rest = status[pos + len("Threads:"):].lstrip()
    digits = ""
    for ch in rest:
        if not ch.isdigit():
            break
        digits += ch
    return int(digits) if digits else 0


def threads() -> list[int]:
    """Return the sorted thread ids of this process."""
    try:
        entries = os.listdir("/proc/self/task")
    except OSError:
        return []
    return sorted(int(entry) for entry in entries if entry.isdigit())