"""
Key-scoped mutual exclusion for bookings.

A create holds one lock per (provider, date) and one per (patient, date) while
it validates and inserts, so two concurrent requests for the same calendar can
never both pass validation against the same snapshot. Entries only live while
some request holds or waits for them.
"""

import logging
import threading
import time as time_module
from contextlib import contextmanager
from datetime import date
from typing import Dict, Generator, List, Optional, Tuple

from physio_scheduler.core.exceptions import BookingTimeoutError

logger = logging.getLogger(__name__)

LockKey = Tuple[str, str, str]


class _LockEntry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class BookingLocks:
    """Registry of reference-counted locks keyed by (party kind, party id, date)."""

    def __init__(self):
        self._entries: Dict[LockKey, _LockEntry] = {}
        self._guard = threading.Lock()

    @staticmethod
    def keys_for(provider_id: str, patient_id: str, on_date: date) -> List[LockKey]:
        """Lock keys a booking must hold, in acquisition order."""
        day = on_date.isoformat()
        return sorted([("patient", patient_id, day), ("provider", provider_id, day)])

    def _checkout(self, key: LockKey) -> _LockEntry:
        with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = self._entries[key] = _LockEntry()
            entry.users += 1
            return entry

    def _checkin(self, key: LockKey) -> None:
        with self._guard:
            entry = self._entries[key]
            entry.users -= 1
            if entry.users == 0:
                del self._entries[key]

    def active_keys(self) -> List[LockKey]:
        """Keys currently held or waited on."""
        with self._guard:
            return list(self._entries)

    @contextmanager
    def hold(
        self,
        provider_id: str,
        patient_id: str,
        on_date: date,
        timeout: Optional[float] = None
    ) -> Generator[None, None, None]:
        """
        Hold the provider and patient locks for a date.

        Keys are always acquired in sorted order so concurrent bookings cannot
        deadlock. ``timeout`` bounds the total wait across both keys.

        Raises:
            BookingTimeoutError: If the locks are not obtained in time
        """
        deadline = None if timeout is None else time_module.monotonic() + timeout
        checked_out: List[Tuple[LockKey, _LockEntry]] = []
        acquired: List[_LockEntry] = []
        try:
            for key in self.keys_for(provider_id, patient_id, on_date):
                entry = self._checkout(key)
                checked_out.append((key, entry))
                if deadline is None:
                    ok = entry.lock.acquire()
                else:
                    ok = entry.lock.acquire(timeout=max(0.0, deadline - time_module.monotonic()))
                if not ok:
                    logger.warning(f"Timed out waiting for booking lock {key}")
                    raise BookingTimeoutError(
                        "Another booking for this calendar is in progress, please retry",
                        {"provider_id": provider_id, "date": on_date.isoformat()},
                    )
                acquired.append(entry)
            yield
        finally:
            for entry in reversed(acquired):
                entry.lock.release()
            for key, _ in reversed(checked_out):
                self._checkin(key)
