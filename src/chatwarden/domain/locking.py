"""Per-key mutual exclusion for read-then-write sequences."""

from __future__ import annotations

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Hashable, Iterator

log = logging.getLogger(__name__)


@dataclass(slots=True)
class _Slot:
    lock: threading.Lock = field(default_factory=threading.Lock)
    waiters: int = 0


class KeyedLocks:
    """Hand out one lock per key, dropping it once nobody holds or awaits it.

    Used where the storage engine cannot lock a row that does not exist yet
    (SQLite in particular): holding the key lock across the whole unit of work
    serialises competing create-if-absent attempts for the same identifier.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._slots: dict[Hashable, _Slot] = {}

    @contextmanager
    def hold(self, key: Hashable) -> Iterator[None]:
        with self._guard:
            slot = self._slots.setdefault(key, _Slot())
            slot.waiters += 1
        slot.lock.acquire()
        log.debug("Acquired lock for %s", key)
        try:
            yield
        finally:
            slot.lock.release()
            with self._guard:
                slot.waiters -= 1
                if slot.waiters == 0:
                    del self._slots[key]

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)
