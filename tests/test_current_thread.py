import threading

from reactorkit import current_thread
from reactorkit.timestamp import Timestamp, time_difference


def _in_thread(func):
    result = {}

    def runner():
        result["value"] = func()

    worker = threading.Thread(target=runner)
    worker.start()
    worker.join()
    return result["value"]


def test_tid_is_native_id():
    assert current_thread.tid() == threading.get_native_id()


def test_tid_string_format():
    text = current_thread.tid_string()
    assert text.endswith(" ")
    assert len(text) >= 6
    assert int(text) == current_thread.tid()


def test_tid_differs_between_threads():
    def probe():
        return current_thread.tid(), threading.get_native_id()

    other_tid, other_native = _in_thread(probe)
    assert other_tid == other_native
    assert current_thread.tid() == threading.get_native_id()
    assert (other_tid == current_thread.tid()) is False


def test_main_thread_name():
    assert current_thread.is_main_thread()
    assert current_thread.name() == "main"


def test_other_thread_defaults_unknown():
    def probe():
        return current_thread.name(), current_thread.is_main_thread()

    assert _in_thread(probe) == ("unknown", False)


def test_set_name_is_thread_local():
    def work():
        current_thread.set_name("worker-7")
        return current_thread.name()

    assert _in_thread(work) == "worker-7"
    assert current_thread.name() == "main"


def test_sleep_usec_waits():
    before = Timestamp.now()
    current_thread.sleep_usec(20_000)
    after = Timestamp.now()
    assert time_difference(after, before) >= 0.015


def test_stack_trace_innermost_first():
    def inner_helper():
        return current_thread.stack_trace(False)

    lines = inner_helper().splitlines()
    assert "inner_helper" in lines[0]
    assert any("test_stack_trace_innermost_first" in line for line in lines[1:])
    assert all("stack_trace)" not in line for line in lines)


def test_stack_trace_demangled_contains_caller():
    trace = current_thread.stack_trace(True)
    assert "test_stack_trace_demangled_contains_caller" in trace.splitlines()[0]