import threading
import time

import pytest

from sharedlock.gated import GatedSharedMutex


def _wait_until(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.001)
    return predicate()


def test_try_lock_on_fresh_mutex():
    m = GatedSharedMutex()
    assert m.try_lock() is True
    assert m.write_entered() is True
    assert m.try_lock() is False
    assert m.try_lock_shared() is False
    m.unlock()
    assert m.write_entered() is False


def test_shared_holders_are_counted():
    m = GatedSharedMutex()
    for _ in range(3):
        assert m.try_lock_shared() is True
    assert m.readers() == 3
    assert m.try_lock() is False
    for _ in range(3):
        m.unlock_shared()
    assert m.readers() == 0
    assert m.try_lock() is True


def test_unlock_shared_without_holder_raises():
    m = GatedSharedMutex()
    with pytest.raises(RuntimeError):
        m.unlock_shared()


def test_queued_writer_blocks_new_readers():
    m = GatedSharedMutex()
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
    assert m.readers() == 0
    m.unlock()
    assert m.try_lock_shared() is True


def test_reader_waits_for_writer_release():
    m = GatedSharedMutex()
    m.lock()
    got = threading.Event()

    def reader():
        m.lock_shared()
        got.set()

    t = threading.Thread(target=reader)
    t.start()
    assert not got.wait(0.05)
    m.unlock()
    assert got.wait(5)
    t.join(5)
    assert m.readers() == 1