"""
locking.py: Mutual exclusion for player-scoped and round-wide state.

Lock order is always: player lock, then the global lock.
"""

import threading
from contextlib import contextmanager
from typing import Dict


class KeyedLocks:
    """One lock per player address plus a single global lock."""

    def __init__(self):
        self._locks: Dict[str, threading.Lock] = {}
        self._registry_lock = threading.Lock()
        self.global_lock = threading.RLock()

    def _lock_for(self, key: str) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(key)
            if lock is None:
                lock = self._locks[key] = threading.Lock()
            return lock

    @contextmanager
    def player(self, address: str):
        with self._lock_for(address):
            yield

    @contextmanager
    def player_and_global(self, address: str):
        with self._lock_for(address):
            with self.global_lock:
                yield

    @contextmanager
    def global_only(self):
        with self.global_lock:
            yield
