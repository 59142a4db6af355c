"""Per-thread identity helpers: cached thread id, thread name, stack traces."""

from __future__ import annotations

import sys
import threading
import time

_local = threading.local()


def tid() -> int:
    """Return the kernel thread id of the calling thread, cached per thread."""
    cached = getattr(_local, "tid", 0)
    if cached == 0:
        cached = threading.get_native_id()
        _local.tid = cached
        _local.tid_string = "%5d " % cached
    return cached


def tid_string() -> str:
    """Return the thread id right-aligned in five columns plus a space."""
    tid()
    return _local.tid_string


def name() -> str:
    """Return the name given to this thread, ``main`` or ``unknown``."""
    assigned = getattr(_local, "name", None)
    if assigned is not None:
        return assigned
    return "main" if is_main_thread() else "unknown"


def set_name(name: str) -> None:
    _local.name = name


def is_main_thread() -> bool:
    return threading.current_thread() is threading.main_thread()


def sleep_usec(usec: int) -> None:
    time.sleep(max(usec, 0) / 1_000_000)


def stack_trace(demangle: bool = False) -> str:
    """Return the caller's stack, innermost frame first, one frame per line.

    With ``demangle`` the qualified function name is shown where available.
    """
    lines = []
    frame = sys._getframe(1)
    while frame is not None:
        code = frame.f_code
        func = getattr(code, "co_qualname", code.co_name) if demangle else code.co_name
        lines.append(f"{code.co_filename}:{frame.f_lineno} ({func})\n")
        frame = frame.f_back
    return "".join(lines)