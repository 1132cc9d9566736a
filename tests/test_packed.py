import threading
import time

import pytest

from sharedlock.packed import READERS, WRITERS, PackedSharedMutex


def _wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.001)
    return predicate()


def test_halves_split_the_word():
    assert READERS == 0xFFFFFFFF
    assert WRITERS == 0xFFFFFFFF00000000
    assert READERS & WRITERS == 0
    m = PackedSharedMutex()
    m.lock_shared()
    assert m.readers() == 1
    assert m.write_entered() is False
    m.unlock_shared()
    assert m.try_lock() is True
    assert m.readers() == 0
    assert m.write_entered() is True


def test_try_lock_and_unlock():
    m = PackedSharedMutex()
    assert m.try_lock() is True
    assert m.write_entered() is True
    assert m.try_lock() is False
    assert m.try_lock_shared() is False
    m.unlock()
    assert m.write_entered() is False
    assert m.try_lock_shared() is True


def test_readers_counted_and_block_try_lock():
    m = PackedSharedMutex()
    m.lock_shared()
    m.lock_shared()
    assert m.readers() == 2
    assert m.try_lock() is False
    m.unlock_shared()
    m.unlock_shared()
    assert m.readers() == 0
    assert m.try_lock() is True


def test_unlock_shared_without_holder_raises():
    m = PackedSharedMutex()
    with pytest.raises(RuntimeError):
        m.unlock_shared()


def test_blocked_reader_is_counted_as_waiter():
    m = PackedSharedMutex()
    m.lock()
    got = threading.Event()

    def reader():
        m.lock_shared()
        got.set()

    t = threading.Thread(target=reader)
    t.start()
    assert _wait_until(lambda: m.waiters() == 1)
    assert not got.is_set()
    m.unlock()
    assert got.wait(5)
    t.join(5)
    assert m.waiters() == 0
    assert m.readers() == 1


def test_writer_waits_for_last_reader():
    m = PackedSharedMutex()
    m.lock_shared()
    acquired = threading.Event()

    def writer():
        m.lock()
        acquired.set()

    t = threading.Thread(target=writer)
    t.start()
    assert _wait_until(m.write_entered)
    assert not acquired.is_set()
    assert m.try_lock_shared() is False
    m.unlock_shared()
    assert acquired.wait(5)
    t.join(5)
    assert not t.is_alive()
    m.unlock()
    assert m.try_lock() is True