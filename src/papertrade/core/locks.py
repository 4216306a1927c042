"""Per-owner mutual exclusion for ledger writes."""

import threading
from contextlib import contextmanager
from typing import Iterator


class _OwnerLock:
    __slots__ = ("lock", "holders")

    def __init__(self) -> None:
        self.lock = threading.Lock()
        self.holders = 0


class OwnerLockRegistry:
    """
    Hands out one lock per owner id.

    Settlement for a given owner runs under that owner's lock so two
    requests in the same process never interleave their read-modify-write
    of the ledger. Different owners do not contend. A lock is kept only
    while some thread holds or waits for it.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._locks: dict[str, _OwnerLock] = {}

    def _acquire_entry(self, owner_id: str) -> _OwnerLock:
        with self._guard:
            entry = self._locks.get(owner_id)
            if entry is None:
                entry = _OwnerLock()
                self._locks[owner_id] = entry
            entry.holders += 1
            return entry

    def _release_entry(self, owner_id: str, entry: _OwnerLock) -> None:
        with self._guard:
            entry.holders -= 1
            if entry.holders == 0:
                del self._locks[owner_id]

    @contextmanager
    def hold(self, owner_id: str) -> Iterator[None]:
        """Hold the owner's lock for the duration of the block."""
        entry = self._acquire_entry(owner_id)
        try:
            with entry.lock:
                yield
        finally:
            self._release_entry(owner_id, entry)

    def __len__(self) -> int:
        with self._guard:
            return len(self._locks)
