"""Thread synchronisation helpers: a countdown latch, blocking queues and an atomic integer."""

from __future__ import annotations

import threading
from collections import deque
from typing import Deque, Generic, TypeVar

T = TypeVar("T")


class CountDownLatch:
    """Lets threads wait until a counter has been counted down to zero."""

    def __init__(self, count: int) -> None:
        self._cond = threading.Condition()
        self._count = count

    def wait(self) -> None:
        """Block until the count reaches zero."""
        with self._cond:
            while self._count > 0:
                self._cond.wait()

    def count_down(self) -> None:
        with self._cond:
            self._count -= 1
            if self._count == 0:
                self._cond.notify_all()

    def count(self) -> int:
        with self._cond:
            return self._count


class BlockingQueue(Generic[T]):
    """An unbounded FIFO queue whose ``take`` blocks while it is empty."""

    def __init__(self) -> None:
        self._not_empty = threading.Condition()
        self._queue: Deque[T] = deque()

    def put(self, item: T) -> None:
        with self._not_empty:
            self._queue.append(item)
            self._not_empty.notify()

    def take(self) -> T:
        with self._not_empty:
            while not self._queue:
                self._not_empty.wait()
            return self._queue.popleft()

    def __len__(self) -> int:
        with self._not_empty:
            return len(self._queue)


class BoundedBlockingQueue(Generic[T]):
    """A FIFO queue of fixed capacity; ``put`` blocks while full, ``take`` while empty."""

    def __init__(self, max_size: int) -> None:
        if max_size <= 0:
            raise ValueError("max_size must be positive")
        self._lock = threading.Lock()
        self._not_empty = threading.Condition(self._lock)
        self._not_full = threading.Condition(self._lock)
        self._queue: Deque[T] = deque()
        self._capacity = max_size

    def put(self, item: T) -> None:
        with self._lock:
            while len(self._queue) >= self._capacity:
                self._not_full.wait()
            self._queue.append(item)
            self._not_empty.notify()

    def take(self) -> T:
        with self._lock:
            while not self._queue:
                self._not_empty.wait()
            item = self._queue.popleft()
            self._not_full.notify()
            return item

    def empty(self) -> bool:
        with self._lock:
            return not self._queue

    def full(self) -> bool:
        with self._lock:
            return len(self._queue) >= self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._queue)

    def capacity(self) -> int:
        return self._capacity


class AtomicInteger:
    """An integer whose read-modify-write operations are atomic across threads."""

    def __init__(self, value: int = 0) -> None:
        self._lock = threading.Lock()
        self._value = value

    def get(self) -> int:
        with self._lock:
            return self._value

    def get_and_add(self, x: int) -> int:
        with self._lock:
            old = self._value
            self._value = old + x
            return old

    def add_and_get(self, x: int) -> int:
        return self.get_and_add(x) + x

    def increment_and_get(self) -> int:
        return self.add_and_get(1)

    def decrement_and_get(self) -> int:
        return self.add_and_get(-1)

    def add(self, x: int) -> None:
        self.get_and_add(x)

    def increment(self) -> None:
        self.increment_and_get()

    def decrement(self) -> None:
        self.decrement_and_get()

    def get_and_set(self, new_value: int) -> int:
        with self._lock:
            old = self._value
            self._value = new_value
            return old