"""Per-key mutual exclusion for read-validate-write sequences.

Two reservations against the same equipment item must not both read the
ledger, both see enough stock, and both commit.  Holding the item's lock
across the read and the write closes that window; writes against
different items still run in parallel.

A key's lock is discarded once nobody holds or waits for it, so the
registry only ever tracks items with writes in flight.
"""

from __future__ import annotations

import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager


class KeyedLock:

    def __init__(self) -> None:
        self._locks: dict[Hashable, threading.Lock] = {}
        self._users: dict[Hashable, int] = {}
        self._guard = threading.Lock()

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        lock = self._enter(key)
        try:
            with lock:
                yield
        finally:
            self._leave(key)

    def _enter(self, key: Hashable) -> threading.Lock:
        with self._guard:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            self._users[key] = self._users.get(key, 0) + 1
            return lock

    def _leave(self, key: Hashable) -> None:
        with self._guard:
            self._users[key] -= 1
            if self._users[key] == 0:
                del self._users[key]
                del self._locks[key]
