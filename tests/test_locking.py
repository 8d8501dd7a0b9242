from __future__ import annotations

import threading

import pytest
from statement_import.errors import ImportInProgressError
from statement_import.locking import AccountLocks


def test_hold_is_exclusive_per_account() -> None:
    locks = AccountLocks()
    with locks.hold("a"):
        assert locks.is_held("a")
        assert not locks.is_held("b")
        with pytest.raises(ImportInProgressError) as ei:
            with locks.hold("a", timeout=0.01):
                pass
        assert ei.value.account_id == "a"
        with locks.hold("b", timeout=0.01):
            assert locks.is_held("b")
    assert not locks.is_held("a")


def test_lock_is_released_when_block_raises() -> None:
    locks = AccountLocks()
    with pytest.raises(RuntimeError):
        with locks.hold("a"):
            raise RuntimeError("boom")
    assert not locks.is_held("a")


def test_waiters_are_serialized() -> None:
    locks = AccountLocks()
    order: list[str] = []
    entered = threading.Event()
    release = threading.Event()

    def first() -> None:
        with locks.hold("a"):
            order.append("first-in")
            entered.set()
            release.wait(timeout=5)
            order.append("first-out")

    def second() -> None:
        with locks.hold("a", timeout=5):
            order.append("second-in")

    t1 = threading.Thread(target=first)
    t1.start()
    assert entered.wait(timeout=5)
    t2 = threading.Thread(target=second)
    t2.start()
    release.set()
    t1.join(timeout=5)
    t2.join(timeout=5)

    assert order == ["first-in", "first-out", "second-in"]


def test_idle_accounts_are_not_retained() -> None:
    locks = AccountLocks()
    for n in range(100):
        with locks.hold(f"acct-{n}"):
            assert len(locks) == 1
    assert len(locks) == 0

    with locks.hold("a"):
        with pytest.raises(ImportInProgressError):
            with locks.hold("a", timeout=0.01):
                pass
        # The timed-out waiter is gone; the holder is still tracked.
        assert len(locks) == 1
        assert locks.is_held("a")
    assert len(locks) == 0
