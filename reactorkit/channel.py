"""A selectable I/O channel: the events wanted on a descriptor and their handlers."""

from __future__ import annotations

import select
import weakref
from typing import Any, Callable, Optional

from reactorkit.logger import LogLevel, log
from reactorkit.timestamp import Timestamp

POLLIN = getattr(select, "POLLIN", 0x001)
POLLPRI = getattr(select, "POLLPRI", 0x002)
POLLOUT = getattr(select, "POLLOUT", 0x004)
POLLERR = getattr(select, "POLLERR", 0x008)
POLLHUP = getattr(select, "POLLHUP", 0x010)
POLLNVAL = getattr(select, "POLLNVAL", 0x020)
POLLRDHUP = getattr(select, "POLLRDHUP", 0x2000)

NONE_EVENT = 0
READ_EVENT = POLLIN | POLLPRI
WRITE_EVENT = POLLOUT

_EVENT_NAMES = (
    (POLLIN, "IN"),
    (POLLPRI, "PRI"),
    (POLLOUT, "OUT"),
    (POLLHUP, "HUP"),
    (POLLRDHUP, "RDHUP"),
    (POLLERR, "ERR"),
    (POLLNVAL, "NVAL"),
)

EventCallback = Callable[[], None]
ReadEventCallback = Callable[[Timestamp], None]


def events_to_string(fd: int, ev: int) -> str:
    """Describe a poll event mask, e.g. ``"3: IN OUT "``."""
    return "%d: " % fd + "".join(name + " " for bit, name in _EVENT_NAMES if ev & bit)


class Channel:
    """Dispatches poll events on one descriptor to callbacks; does not own it.

    ``loop`` must provide ``update_channel(channel)`` and
    ``remove_channel(channel)``. Callbacks are plain attributes.
    """

    def __init__(self, loop: Any, fd: int) -> None:
        self._loop = loop
        self._fd = fd
        self._events = NONE_EVENT
        self.revents = 0
        self.index = -1
        self._log_hup = True
        self._tie: Optional[weakref.ref] = None
        self._event_handling = False
        self._added_to_loop = False
        self.read_callback: Optional[ReadEventCallback] = None
        self.write_callback: Optional[EventCallback] = None
        self.close_callback: Optional[EventCallback] = None
        self.error_callback: Optional[EventCallback] = None

    @property
    def fd(self) -> int:
        return self._fd

    @property
    def events(self) -> int:
        return self._events

    @property
    def owner_loop(self) -> Any:
        return self._loop

    def handle_event(self, receive_time: Timestamp) -> None:
        """Run the callbacks for ``revents``; skipped if the tied owner is gone."""
        if self._tie is not None:
            guard = self._tie()
            if guard is not None:
                self._handle_event_with_guard(receive_time)
        else:
            self._handle_event_with_guard(receive_time)

    def tie(self, obj: object) -> None:
        """Handle events only while ``obj`` is still alive."""
        self._tie = weakref.ref(obj)

    def is_none_event(self) -> bool:
        return self._events == NONE_EVENT

    def enable_reading(self) -> None:
        self._events |= READ_EVENT
        self._update()

    def disable_reading(self) -> None:
        self._events &= ~READ_EVENT
        self._update()

    def enable_writing(self) -> None:
        self._events |= WRITE_EVENT
        self._update()

    def disable_writing(self) -> None:
        self._events &= ~WRITE_EVENT
        self._update()

    def disable_all(self) -> None:
        self._events = NONE_EVENT
        self._update()

    def is_writing(self) -> bool:
        return bool(self._events & WRITE_EVENT)

    def is_reading(self) -> bool:
        return bool(self._events & READ_EVENT)

    def revents_to_string(self) -> str:
        return events_to_string(self._fd, self.revents)

    def events_to_string(self) -> str:
        return events_to_string(self._fd, self._events)

    def do_not_log_hup(self) -> None:
        self._log_hup = False

    def remove(self) -> None:
        """Detach from the loop; all events must be disabled first."""
        if not self.is_none_event():
            raise RuntimeError("channel still has events enabled")
        self._added_to_loop = False
        self._loop.remove_channel(self)

    def _update(self) -> None:
        self._added_to_loop = True
        self._loop.update_channel(self)

    def _handle_event_with_guard(self, receive_time: Timestamp) -> None:
        self._event_handling = True
        try:
            revents = self.revents
            log(LogLevel.TRACE, self.revents_to_string())
            if revents & POLLHUP and not revents & POLLIN:
                if self._log_hup:
                    log(LogLevel.WARN, "fd = ", self._fd, " Channel.handle_event() POLLHUP")
                if self.close_callback is not None:
                    self.close_callback()
            if revents & POLLNVAL:
                log(LogLevel.WARN, "fd = ", self._fd, " Channel.handle_event() POLLNVAL")
            if revents & (POLLERR | POLLNVAL):
                if self.error_callback is not None:
                    self.error_callback()
            if revents & (POLLIN | POLLPRI | POLLRDHUP):
                if self.read_callback is not None:
                    self.read_callback(receive_time)
            if revents & POLLOUT:
                if self.write_callback is not None:
                    self.write_callback()
        finally:
            self._event_handling = False