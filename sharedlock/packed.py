"""Reader/writer mutex whose whole state lives in one 64-bit word."""

from __future__ import annotations

import threading

__all__ = ["PackedSharedMutex", "READERS", "WRITERS"]

READERS = (1 << 32) - 1
WRITERS = ((1 << 64) - 1) ^ READERS


class PackedSharedMutex:
    """Shared mutex with readers in the lower half of a word, writers in the upper.

    Waiters park on one of two wait queues, one for each half of the word:
    threads blocked by a writer wait on the upper half, and a writer waiting
    for readers to drain waits on the lower half.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._upper = threading.Condition(self._guard)
        self._lower = threading.Condition(self._guard)
        self._state = 0
        self._waiters = 0

    def readers(self) -> int:
        """Number of shared holders."""
        with self._guard:
            return self._state & READERS

    def write_entered(self) -> bool:
        """Whether a writer holds the lock or is waiting for readers to leave."""
        with self._guard:
            return bool(self._state & WRITERS)

    def waiters(self) -> int:
        """Number of threads parked behind a writer."""
        with self._guard:
            return self._waiters

    def _wait_for_writer(self) -> None:
        while self._state & WRITERS:
            self._waiters += 1
            try:
                self._upper.wait()
            finally:
                self._waiters -= 1

    def lock(self) -> None:
        """Acquire exclusive ownership, blocking as needed."""
        with self._guard:
            self._wait_for_writer()
            self._state |= WRITERS
            while self._state & READERS:
                self._lower.wait()

    def try_lock(self) -> bool:
        """Acquire exclusive ownership only if the word is entirely clear."""
        with self._guard:
            if self._state != 0:
                return False
            self._state = WRITERS
            return True

    def unlock(self) -> None:
        """Release exclusive ownership and wake everyone parked behind it."""
        with self._guard:
            self._state = 0
            if self._waiters:
                self._upper.notify_all()

    def lock_shared(self) -> None:
        """Acquire shared ownership, blocking while a writer is entered."""
        with self._guard:
            self._wait_for_writer()
            self._add_reader()

    def try_lock_shared(self) -> bool:
        """Acquire shared ownership unless a writer is entered."""
        with self._guard:
            if self._state & WRITERS:
                return False
            self._add_reader()
            return True

    def _add_reader(self) -> None:
        if self._state & READERS == READERS:
            raise RuntimeError("too many shared holders")
        self._state += 1

    def unlock_shared(self) -> None:
        """Release shared ownership, waking a writer if it was the last reader."""
        with self._guard:
            if self._state & READERS == 0:
                raise RuntimeError("unlock_shared() called without a shared holder")
            self._state -= 1
            if self._state == WRITERS:
                self._lower.notify()