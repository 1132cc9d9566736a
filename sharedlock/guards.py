"""Scoped ownership of a shared mutex."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, TypeVar

__all__ = ["shared_lock", "unique_lock"]

M = TypeVar("M")


@contextmanager
def shared_lock(mutex: M) -> Iterator[M]:
    """Hold shared ownership of ``mutex`` for the duration of the block."""
    mutex.lock_shared()
    try:
        yield mutex
    finally:
        mutex.unlock_shared()


@contextmanager
def unique_lock(mutex: M) -> Iterator[M]:
    """Hold exclusive ownership of ``mutex`` for the duration of the block."""
    mutex.lock()
    try:
        yield mutex
    finally:
        mutex.unlock()