import threading

import pytest

from reactorkit.sync import (
    AtomicInteger,
    BlockingQueue,
    BoundedBlockingQueue,
    CountDownLatch,
)


def test_latch_counts_down():
    latch = CountDownLatch(3)
    latch.count_down()
    assert latch.count() == 2


def test_latch_wait_releases_after_other_thread_counts_down():
    latch = CountDownLatch(2)
    done = threading.Event()

    def waiter():
        latch.wait()
        done.set()

    t = threading.Thread(target=waiter)
    t.start()
    latch.count_down()
    assert not done.wait(0.1)
    latch.count_down()
    assert done.wait(5)
    t.join()
    assert latch.count() == 0


def test_latch_wait_returns_at_zero():
    latch = CountDownLatch(0)
    latch.wait()
    assert latch.count() == 0


def test_blocking_queue_fifo():
    q = BlockingQueue()
    for i in range(5):
        q.put(i)
    assert len(q) == 5
    assert [q.take() for _ in range(5)] == [0, 1, 2, 3, 4]
    assert len(q) == 0


def test_blocking_queue_take_waits_for_put():
    q = BlockingQueue()
    got = []

    def consumer():
        got.append(q.take())

    t = threading.Thread(target=consumer)
    t.start()
    q.put("item")
    t.join(5)
    assert got == ["item"]
    assert len(q) == 0
    q.put("next")
    assert q.take() == "next"


def test_bounded_queue_capacity_and_state():
    q = BoundedBlockingQueue(2)
    assert q.capacity() == 2
    assert q.empty()
    q.put("a")
    q.put("b")
    assert q.full()
    assert len(q) == 2
    assert q.take() == "a"
    assert not q.full()


def test_bounded_queue_put_blocks_while_full():
    q = BoundedBlockingQueue(1)
    q.put(1)
    placed = threading.Event()

    def producer():
        q.put(2)
        placed.set()

    t = threading.Thread(target=producer)
    t.start()
    assert not placed.wait(0.1)
    assert q.take() == 1
    assert placed.wait(5)
    t.join()
    assert q.take() == 2


def test_bounded_queue_rejects_nonpositive_size():
    with pytest.raises(ValueError):
        BoundedBlockingQueue(0)


def test_atomic_integer_operations():
    a = AtomicInteger()
    assert a.get() == 0
    assert a.get_and_add(5) == 0
    assert a.add_and_get(3) == 8
    assert a.increment_and_get() == 9
    assert a.decrement_and_get() == 8
    a.add(2)
    a.increment()
    a.decrement()
    assert a.get() == 10
    assert a.get_and_set(42) == 10
    assert a.get() == 42


def test_atomic_integer_concurrent_increments():
    a = AtomicInteger(0)

    def work():
        for _ in range(1000):
            a.increment()

    threads = [threading.Thread(target=work) for _ in range(4)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    assert a.get() == 4000