"""End-to-end: migrate a fresh SQLite DB with Alembic, then import through the CLI."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from alembic import command
from alembic.config import Config
from db.client import session_scope
from sqlalchemy import inspect
from statement_import.cli import app
from typer.testing import CliRunner

from tests.helpers.db import count_transactions

ALEMBIC_INI = Path(__file__).resolve().parents[2] / "libs" / "db" / "alembic.ini"


def test_migrated_schema_supports_repeat_imports(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    url = f"sqlite+pysqlite:///{tmp_path / 'migrated.db'}"
    monkeypatch.setenv("DATABASE_URL", url)

    command.upgrade(Config(str(ALEMBIC_INI)), "head")

    with session_scope(database_url=url) as session:
        tables = set(inspect(session.get_bind()).get_table_names())
    assert {"si_bank_accounts", "si_transactions"} <= tables

    rows = tmp_path / "statement.json"
    rows.write_text(
        json.dumps(
            [
                {"date": "03/01/2024", "description": "Uber trip", "amount": "(18.25)"},
                {"date": "03/02/2024", "description": "CVS Pharmacy", "amount": "-9.99"},
                {"date": "03/15/2024", "description": "PAYROLL", "amount": "1800"},
            ]
        ),
        encoding="utf-8",
    )

    runner = CliRunner()
    assert runner.invoke(app, ["add-account", "--account-id", "acct-1", "--name", "Main"]).exit_code == 0

    first = runner.invoke(app, ["import", "--rows-path", str(rows), "--account-id", "acct-1"])
    assert first.exit_code == 0, first.output
    second = runner.invoke(app, ["import", "--rows-path", str(rows), "--account-id", "acct-1"])
    assert second.exit_code == 0, second.output

    summary = json.JSONDecoder().raw_decode(second.stdout[second.stdout.index("{") :])[0]["summary"]
    assert summary["successful_imports"] == 0
    assert summary["duplicates_skipped"] == 3
    assert count_transactions(url, "acct-1") == 3

    command.downgrade(Config(str(ALEMBIC_INI)), "base")
    with session_scope(database_url=url) as session:
        assert "si_transactions" not in set(inspect(session.get_bind()).get_table_names())
