import gc

import pytest

from reactorkit.channel import (
    POLLERR,
    POLLHUP,
    POLLIN,
    POLLNVAL,
    POLLOUT,
    POLLPRI,
    Channel,
    events_to_string,
)
from reactorkit.logger import Logger
from reactorkit.timestamp import Timestamp


class FakeLoop:
    def __init__(self):
        self.updated = []
        self.removed = []

    def update_channel(self, channel):
        self.updated.append(channel)

    def remove_channel(self, channel):
        self.removed.append(channel)


class Owner:
    pass


@pytest.fixture
def captured():
    lines = []
    Logger.set_output(lines.append)
    yield lines
    Logger.set_output(None)


@pytest.fixture
def recorder():
    calls = []
    loop = FakeLoop()
    channel = Channel(loop, 7)
    channel.read_callback = lambda t: calls.append(("read", t))
    channel.write_callback = lambda: calls.append("write")
    channel.close_callback = lambda: calls.append("close")
    channel.error_callback = lambda: calls.append("error")
    return channel, calls, loop


def test_new_channel_has_no_events():
    channel = Channel(FakeLoop(), 3)
    assert channel.is_none_event()
    assert channel.fd == 3
    assert channel.index == -1
    assert not channel.is_reading()
    assert not channel.is_writing()


def test_enable_and_disable_update_loop():
    loop = FakeLoop()
    channel = Channel(loop, 3)
    channel.enable_reading()
    assert channel.is_reading()
    assert channel.events == POLLIN | POLLPRI
    channel.enable_writing()
    assert channel.is_writing()
    channel.disable_reading()
    assert not channel.is_reading()
    assert channel.is_writing()
    channel.disable_writing()
    assert channel.is_none_event()
    assert loop.updated == [channel] * 4


def test_disable_all_clears_events():
    loop = FakeLoop()
    channel = Channel(loop, 3)
    channel.enable_reading()
    channel.enable_writing()
    channel.disable_all()
    assert channel.events == 0
    assert len(loop.updated) == 3


def test_remove_requires_no_events():
    loop = FakeLoop()
    channel = Channel(loop, 3)
    channel.enable_reading()
    with pytest.raises(RuntimeError):
        channel.remove()
    channel.disable_all()
    channel.remove()
    assert loop.removed == [channel]


def test_events_to_string_names():
    assert events_to_string(3, POLLIN | POLLOUT) == "3: IN OUT "
    assert events_to_string(5, 0) == "5: "


def test_channel_event_strings():
    channel = Channel(FakeLoop(), 4)
    channel.enable_reading()
    channel.revents = POLLOUT
    assert channel.events_to_string() == "4: IN PRI "
    assert channel.revents_to_string() == "4: OUT "


def test_read_event_passes_receive_time(recorder):
    channel, calls, _loop = recorder
    stamp = Timestamp(123)
    channel.revents = POLLIN
    channel.handle_event(stamp)
    assert calls == [("read", stamp)]


def test_write_event(recorder):
    channel, calls, _loop = recorder
    channel.revents = POLLOUT
    channel.handle_event(Timestamp(1))
    assert calls == ["write"]


def test_error_event(recorder):
    channel, calls, _loop = recorder
    channel.revents = POLLERR
    channel.handle_event(Timestamp(1))
    assert calls == ["error"]


def test_hangup_without_input_closes_and_warns(recorder, captured):
    channel, calls, _loop = recorder
    channel.revents = POLLHUP
    channel.handle_event(Timestamp(1))
    assert calls == ["close"]
    assert any(b"WARN" in line and b"POLLHUP" in line for line in captured)


def test_hangup_warning_can_be_silenced(recorder, captured):
    channel, calls, _loop = recorder
    channel.do_not_log_hup()
    channel.revents = POLLHUP
    channel.handle_event(Timestamp(1))
    assert calls == ["close"]
    assert captured == []


def test_hangup_with_input_reads_instead_of_closing(recorder):
    channel, calls, _loop = recorder
    channel.revents = POLLHUP | POLLIN
    channel.handle_event(Timestamp(1))
    assert calls == [("read", Timestamp(1))]


def test_invalid_descriptor_reports_error(recorder, captured):
    channel, calls, _loop = recorder
    channel.revents = POLLNVAL
    channel.handle_event(Timestamp(1))
    assert calls == ["error"]
    assert any(b"POLLNVAL" in line for line in captured)


def test_tied_owner_alive_allows_handling(recorder):
    channel, calls, _loop = recorder
    owner = Owner()
    channel.tie(owner)
    channel.revents = POLLOUT
    channel.handle_event(Timestamp(1))
    assert calls == ["write"]


def test_tied_owner_gone_skips_handling(recorder):
    channel, calls, _loop = recorder
    owner = Owner()
    channel.tie(owner)
    del owner
    gc.collect()
    channel.revents = POLLIN | POLLOUT
    channel.handle_event(Timestamp(1))
    assert calls == []