"""Reader/writer mutex built from one lock and two condition variables."""

from __future__ import annotations

import threading

__all__ = ["GatedSharedMutex", "WRITE_ENTERED", "MAX_READERS"]

WRITE_ENTERED = 1 << 31
MAX_READERS = WRITE_ENTERED - 1


class GatedSharedMutex:
    """Shared mutex that prefers writers once readers hold the lock.

    The high bit of the state is the write-entered flag; the remaining bits
    count the readers. A writer first waits on gate 1 until it can set the
    flag, then waits on gate 2 until the readers drain. Readers wait on
    gate 1 while the flag is set or the reader count is saturated.
    """

    def __init__(self) -> None:
        self._mutex = threading.Lock()
        self._gate1 = threading.Condition(self._mutex)
        self._gate2 = threading.Condition(self._mutex)
        self._state = 0

    def _write_entered(self) -> bool:
        return bool(self._state & WRITE_ENTERED)

    def _readers(self) -> int:
        return self._state & MAX_READERS

    def write_entered(self) -> bool:
        """Whether a writer holds the lock or is queued for it."""
        with self._mutex:
            return self._write_entered()

    def readers(self) -> int:
        """Number of shared holders."""
        with self._mutex:
            return self._readers()

    def lock(self) -> None:
        """Acquire exclusive ownership, blocking as needed."""
        with self._mutex:
            self._gate1.wait_for(lambda: not self._write_entered())
            self._state |= WRITE_ENTERED
            self._gate2.wait_for(lambda: self._readers() == 0)

    def try_lock(self) -> bool:
        """Acquire exclusive ownership only if nobody holds the lock."""
        if not self._mutex.acquire(blocking=False):
            return False
        try:
            if self._state != 0:
                return False
            self._state = WRITE_ENTERED
            return True
        finally:
            self._mutex.release()

    def unlock(self) -> None:
        """Release exclusive ownership and wake every waiter on gate 1."""
        with self._mutex:
            self._state = 0
            self._gate1.notify_all()

    def lock_shared(self) -> None:
        """Acquire shared ownership, blocking while a writer is entered."""
        with self._mutex:
            self._gate1.wait_for(lambda: self._state < MAX_READERS)
            self._state += 1

    def try_lock_shared(self) -> bool:
        """Acquire shared ownership only if it can be done without waiting."""
        if not self._mutex.acquire(blocking=False):
            return False
        try:
            if self._state < MAX_READERS:
                self._state += 1
                return True
            return False
        finally:
            self._mutex.release()

    def unlock_shared(self) -> None:
        """Release shared ownership."""
        with self._mutex:
            if self._readers() == 0:
                raise RuntimeError("unlock_shared() called without a shared holder")
            previous = self._state
            self._state -= 1
            if self._write_entered():
                if self._readers() == 0:
                    self._gate2.notify()
            elif previous == MAX_READERS:
                self._gate1.notify()