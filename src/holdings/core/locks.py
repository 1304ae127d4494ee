"""Per-owner lock registry serializing portfolio writes."""

import threading
from contextlib import contextmanager
from typing import Iterator


class OwnerLockRegistry:
    """
    Hands out one lock per owner id; different owners never block each other.

    An owner's entry lives only while some thread holds or waits for it,
    so the registry does not grow with every owner ever seen.
    """

    def __init__(self):
        self._guard = threading.Lock()
        self._locks: dict[str, threading.RLock] = {}
        self._holders: dict[str, int] = {}

    @property
    def owner_count(self) -> int:
        """Owners with a live lock entry."""
        with self._guard:
            return len(self._locks)

    def get(self, owner_id: str) -> threading.RLock:
        """Current lock for an owner, created if absent."""
        with self._guard:
            return self._get_locked(owner_id)

    def _get_locked(self, owner_id: str) -> threading.RLock:
        lock = self._locks.get(owner_id)
        if lock is None:
            lock = threading.RLock()
            self._locks[owner_id] = lock
        return lock

    @contextmanager
    def hold(self, owner_id: str) -> Iterator[None]:
        """Hold the owner's lock for the duration of the block."""
        with self._guard:
            lock = self._get_locked(owner_id)
            self._holders[owner_id] = self._holders.get(owner_id, 0) + 1
        try:
            with lock:
                yield
        finally:
            with self._guard:
                remaining = self._holders[owner_id] - 1
                if remaining:
                    self._holders[owner_id] = remaining
                else:
                    del self._holders[owner_id]
                    del self._locks[owner_id]


_registry = OwnerLockRegistry()


def get_lock_registry() -> OwnerLockRegistry:
    """Process-wide registry shared by every service instance."""
    return _registry
