"""Per-workflow instance locks.

Each order id maps to one ``threading.Lock``. Locks are held only for the
duration of a single transition; there is no cross-order locking.

An entry lives only while some thread holds or waits for it, so the
registry stays as small as the number of orders being worked right now.
"""

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from production.errors import ConcurrentModification


@dataclass
class _Entry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    users: int = 0


class InstanceLocks:
    """Registry of one lock per workflow instance."""

    def __init__(self):
        self._entries: dict[str, _Entry] = {}
        self._registry_lock = threading.Lock()

    def __len__(self) -> int:
        with self._registry_lock:
            return len(self._entries)

    def _checkout(self, key: str) -> _Entry:
        with self._registry_lock:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _Entry()
            entry.users += 1
            return entry

    def _checkin(self, key: str, entry: _Entry) -> None:
        with self._registry_lock:
            entry.users -= 1
            if entry.users == 0:
                del self._entries[key]

    @contextmanager
    def claim(self, key: str, blocking: bool = True, timeout: float = -1) -> Iterator[None]:
        """Hold the lock for ``key`` or raise ConcurrentModification.

        ``blocking=False`` fails immediately on contention; otherwise the
        caller waits up to ``timeout`` seconds (forever when negative).
        """
        entry = self._checkout(key)
        try:
            acquired = entry.lock.acquire(blocking=False) if not blocking else entry.lock.acquire(timeout=timeout)
            if not acquired:
                raise ConcurrentModification(key)
            try:
                yield
            finally:
                entry.lock.release()
        finally:
            self._checkin(key, entry)

    def is_locked(self, key: str) -> bool:
        with self._registry_lock:
            entry = self._entries.get(key)
            return entry is not None and entry.lock.locked()
