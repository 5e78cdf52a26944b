# Overview: Per-key serialization for check-then-act sequences.

"""
Capacity checks and single-use check-ins are check-then-act sequences.
They are serialized twice:

- in process, with a lock per key ("event:<id>", "ticket:<id>")
- in the database, with SELECT ... FOR UPDATE or a guarded UPDATE

No retries: a failure inside a critical section surfaces to the caller.
"""

from __future__ import annotations

import threading
from contextlib import contextmanager


def lock_for_update(query):
    """
    Apply row-level locking for critical operations.

    NOTE: SQLite ignores SELECT ... FOR UPDATE, but other DBs will honor it.
    """
    return query.with_for_update()


class KeyedLockRegistry:
    """Hands out one lock per key; idle entries are dropped on release."""

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, list] = {}

    @contextmanager
    def hold(self, key: str, timeout: float | None = None):
        with self._guard:
            entry = self._locks.get(key)
            if entry is None:
                entry = [threading.Lock(), 0]
                self._locks[key] = entry
            entry[1] += 1

        lock = entry[0]
        acquired = lock.acquire(timeout=-1 if timeout is None else timeout)
        try:
            if not acquired:
                raise TimeoutError(f"Timed out waiting for lock {key}")
            yield
        finally:
            if acquired:
                lock.release()
            with self._guard:
                entry[1] -= 1
                if entry[1] == 0:
                    self._locks.pop(key, None)

    def active_keys(self) -> list[str]:
        with self._guard:
            return list(self._locks)


key_locks = KeyedLockRegistry()


def serialize_on(key: str, timeout: float | None = None):
    """Context manager: run the block while holding the process-wide lock for key."""
    return key_locks.hold(key, timeout=timeout)
