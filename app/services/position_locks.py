"""
In-process locks keyed by position id.

Every mutation that depends on a position's occupancy runs its
check-then-write transaction while holding the position's lock. Across
processes the row lock taken on the position (``SELECT ... FOR UPDATE``) and
the partial unique index on occupying deals provide the same guarantee.
"""

from __future__ import annotations

import threading
import uuid
import weakref
from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache


class PositionLockRegistry:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        # Entries drop out once no holder or waiter references the lock.
        self._locks: weakref.WeakValueDictionary[uuid.UUID, threading.Lock] = (
            weakref.WeakValueDictionary()
        )

    def active_count(self) -> int:
        return len(self._locks)

    def _lock_for(self, position_id: uuid.UUID) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(position_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[position_id] = lock
            return lock

    @contextmanager
    def hold(self, *position_ids: uuid.UUID | None) -> Iterator[None]:
        """
        Hold the locks for all given positions. Locks are taken in sorted
        order so overlapping holders cannot deadlock.
        """

        unique_ids = sorted({pid for pid in position_ids if pid is not None}, key=str)
        locks = [self._lock_for(pid) for pid in unique_ids]
        acquired: list[threading.Lock] = []
        try:
            for lock in locks:
                lock.acquire()
                acquired.append(lock)
            yield
        finally:
            for lock in reversed(acquired):
                lock.release()


@lru_cache(maxsize=1)
def get_position_lock_registry() -> PositionLockRegistry:
    """
    Process-wide registry shared by every service instance.
    """

    return PositionLockRegistry()
