"""Pytest configuration for test isolation.

Settings are read from ``SI_*`` variables and the database from
``DATABASE_URL``; a developer's shell or ``.env`` must not leak into tests.
Engines are cached per URL by ``db.client``, so they are disposed after each
test to release the temporary SQLite files.
"""

from __future__ import annotations

import logging
import os
from collections.abc import Iterator
from pathlib import Path

import pytest
from db.client import dispose_engines

from tests.helpers.db import bootstrap_sqlite_db
from tests.helpers.ledger import InMemoryLedgerStore

ACCOUNT_ID = "acct-checking"


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    for var in list(os.environ):
        if var.startswith("SI_") or var == "DATABASE_URL":
            monkeypatch.delenv(var, raising=False)
    yield
    # The CLI loads .env straight into os.environ; drop anything it added.
    for var in list(os.environ):
        if var.startswith("SI_") or var == "DATABASE_URL":
            del os.environ[var]
    dispose_engines()


@pytest.fixture(autouse=True)
def _isolate_package_logger() -> Iterator[None]:
    # The CLI calls configure_logging(), which swaps handlers and turns off
    # propagation on the package logger; restore it so later tests start clean.
    logger = logging.getLogger("statement_import")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


@pytest.fixture
def account_id() -> str:
    return ACCOUNT_ID


@pytest.fixture
def memory_store() -> InMemoryLedgerStore:
    return InMemoryLedgerStore(accounts={ACCOUNT_ID: True, "acct-savings": True})


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    return bootstrap_sqlite_db(
        tmp_path / "ledger.db",
        accounts={ACCOUNT_ID: "Everyday Checking", "acct-savings": "Savings"},
    )
