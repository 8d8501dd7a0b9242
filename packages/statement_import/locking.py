"""Per-account exclusivity for imports.

Duplicate detection reads a snapshot of the ledger and the commit writes
against it; two imports for the same account interleaving between those
steps could both miss each other's rows. :class:`AccountLocks` hands out one
lock per account so the snapshot-and-commit section is serialized per
account while unrelated accounts proceed concurrently.
"""

from __future__ import annotations

import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field

from .errors import ImportInProgressError
from .logging_setup import get_logger

_logger = get_logger("statement_import.locking")


@dataclass(slots=True)
class _Slot:
    lock: threading.Lock = field(default_factory=threading.Lock)
    # Holder plus waiters; the slot is dropped when this reaches zero.
    users: int = 0


class AccountLocks:
    """Registry of per-account locks.

    Only accounts with a current holder or waiter are tracked, so a
    long-running process importing into many accounts does not accumulate
    idle locks.
    """

    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._slots: dict[str, _Slot] = {}

    def __len__(self) -> int:
        with self._guard:
            return len(self._slots)

    def _checkout(self, account_id: str) -> _Slot:
        with self._guard:
            slot = self._slots.get(account_id)
            if slot is None:
                slot = self._slots[account_id] = _Slot()
            slot.users += 1
            return slot

    def _checkin(self, account_id: str, slot: _Slot) -> None:
        with self._guard:
            slot.users -= 1
            if slot.users == 0:
                del self._slots[account_id]

    def is_held(self, account_id: str) -> bool:
        with self._guard:
            slot = self._slots.get(account_id)
        return slot is not None and slot.lock.locked()

    @contextmanager
    def hold(self, account_id: str, *, timeout: float | None = None) -> Iterator[None]:
        """Hold the account's lock for the duration of the ``with`` block.

        Waits indefinitely when ``timeout`` is ``None``; otherwise raises
        :class:`ImportInProgressError` if the lock is not acquired in time.
        """

        slot = self._checkout(account_id)
        try:
            lock = slot.lock
            acquired = lock.acquire() if timeout is None else lock.acquire(timeout=timeout)
            if not acquired:
                _logger.warning("import already in progress for account %s", account_id)
                raise ImportInProgressError(account_id)
            try:
                yield
            finally:
                lock.release()
        finally:
            self._checkin(account_id, slot)


# Process-wide registry used when callers do not supply their own.
DEFAULT_ACCOUNT_LOCKS = AccountLocks()


__all__ = ["AccountLocks", "DEFAULT_ACCOUNT_LOCKS"]
