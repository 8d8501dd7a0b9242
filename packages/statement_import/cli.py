# ruff: noqa: I001
"""CLI for the ``statement_import`` package.

This module exposes callable command handlers (``cmd_preview``,
``cmd_import`` and friends) and a Typer-based console interface. Environment
variables (notably ``DATABASE_URL`` and the ``SI_*`` tunables) are loaded from
a local ``.env`` using ``python-dotenv`` before delegating to command logic.
Business logic lives in ``statement_import.api``.

Rows are read from a JSON array produced by the external Row Extractor;
output is a JSON document on stdout, diagnostics go to stderr.
"""

from __future__ import annotations

import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import Annotated, Any

import typer
from dotenv import load_dotenv
from pydantic import ValidationError as SettingsValidationError
from typer.models import OptionInfo

from .config import ImportSettings, load_settings
from .logging_setup import configure_logging


# ---- Small module-level helpers used by CLI commands -------------------------


def _dump(payload: Any) -> None:
    # Decimal and date values render as their canonical strings.
    print(json.dumps(payload, indent=2, sort_keys=True, default=str))


def _settings_or_none() -> ImportSettings | None:
    try:
        return load_settings()
    except SettingsValidationError as e:
        print(f"Error: invalid SI_* configuration: {e}", file=sys.stderr)
        return None


def _load_rows(rows_path: str) -> list[Any] | None:
    from .ingest import load_rows_from_json

    try:
        return load_rows_from_json(rows_path)
    except FileNotFoundError:
        print(f"Error: File not found: {rows_path}", file=sys.stderr)
    except PermissionError:
        print(f"Error: Permission denied: {rows_path}", file=sys.stderr)
    except (OSError, ValueError) as e:
        # json.JSONDecodeError is a ValueError
        print(f"Error: Failed to read rows from '{rows_path}': {e}", file=sys.stderr)
    return None


# ---- Command handlers -----------------------------------------------------------


def cmd_init_db(*, database_url: str | None) -> int:
    from db.client import create_schema

    try:
        create_schema(database_url=database_url)
    except Exception as e:
        print(f"Error: schema creation failed: {e}", file=sys.stderr)
        return 1
    print("Ledger schema is ready.", file=sys.stderr)
    return 0


def cmd_add_account(account_id: str, *, name: str, database_url: str | None) -> int:
    from .persistence import create_account

    try:
        create_account(account_id, name=name, database_url=database_url)
    except Exception as e:
        print(f"Error: could not create account {account_id!r}: {e}", file=sys.stderr)
        return 1
    print(f"Account {account_id!r} is ready.", file=sys.stderr)
    return 0


def cmd_preview(
    rows_path: str,
    *,
    account_id: str | None,
    fuzzy: bool,
    database_url: str | None,
) -> int:
    """Print what an import would do without writing anything."""

    from .api import preview_import
    from .errors import StatementImportError
    from .persistence import SqlLedgerStore

    settings = _settings_or_none()
    rows = _load_rows(rows_path)
    if settings is None or rows is None:
        return 1

    try:
        preview = preview_import(
            account_id,
            rows,
            store=SqlLedgerStore(database_url=database_url),
            fuzzy_match=fuzzy,
            settings=settings,
        )
    except StatementImportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _dump(
        {
            "account_id": preview.account_id,
            "is_valid": preview.validation.is_valid,
            "errors": [asdict(e) for e in preview.validation.errors],
            "warnings": [asdict(w) for w in preview.validation.warnings],
            "duplicate_rows": list(preview.duplicate_indices),
            "rows_to_import": [
                {"row": i, **asdict(preview.transactions[i])} for i in preview.to_import_indices
            ],
        }
    )
    return 0


def cmd_import(
    rows_path: str,
    *,
    account_id: str | None,
    fuzzy: bool,
    database_url: str | None,
) -> int:
    """Import rows, then print the import summary and row errors."""

    from .api import get_import_summary, run_import
    from .errors import ImportCommitError, StatementImportError
    from .persistence import SqlLedgerStore

    settings = _settings_or_none()
    rows = _load_rows(rows_path)
    if settings is None or rows is None:
        return 1

    try:
        result = run_import(
            account_id,
            rows,
            store=SqlLedgerStore(database_url=database_url),
            fuzzy_match=fuzzy,
            settings=settings,
        )
    except ImportCommitError as e:
        print(f"Error: {e}", file=sys.stderr)
        _dump({"success": False, "errors": [asdict(x) for x in e.result.errors]})
        return 1
    except StatementImportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    _dump(
        {
            "success": result.success,
            "summary": asdict(get_import_summary(result)),
            "errors": [asdict(e) for e in result.errors],
            "warnings": [asdict(w) for w in result.warnings],
        }
    )
    return 0


# ---- Typer application -----------------------------------------------------------

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    help="Import bank statement rows into an account ledger without duplicates.",
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Inside `Annotated`, Typer reads positional strings as option
# names; defaults come from the function signature.
ROWS_PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--rows-path",
    help="Path to a JSON array of extracted rows (date, description, amount, type).",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
ACCOUNT_ID_OPTION: OptionInfo = typer.Option("--account-id", help="Target bank account identifier.")
DATABASE_URL_OPTION: OptionInfo = typer.Option(
    "--database-url", help="Override DATABASE_URL (falls back to env var)."
)
FUZZY_OPTION: OptionInfo = typer.Option(
    "--fuzzy/--exact", help="Also skip rows whose description is merely similar."
)


def _exit(code: int) -> None:
    if code:
        raise typer.Exit(code)


@app.command("init-db")
def init_db_cmd(database_url: Annotated[str | None, DATABASE_URL_OPTION] = None) -> None:
    """Create the ledger tables (development and tests; use Alembic elsewhere)."""

    _exit(cmd_init_db(database_url=database_url))


@app.command("add-account")
def add_account_cmd(
    account_id: Annotated[str, typer.Option(..., "--account-id", help="Account identifier.")],
    name: Annotated[str, typer.Option(..., "--name", help="Display name.")],
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """Register a bank account that imports can target."""

    _exit(cmd_add_account(account_id, name=name, database_url=database_url))


@app.command("preview")
def preview_cmd(
    rows_path: Annotated[Path, ROWS_PATH_OPTION],
    account_id: Annotated[str | None, ACCOUNT_ID_OPTION] = None,
    fuzzy: Annotated[bool, FUZZY_OPTION] = False,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """Validate, categorize and duplicate-check rows without importing them."""

    _exit(
        cmd_preview(str(rows_path), account_id=account_id, fuzzy=fuzzy, database_url=database_url)
    )


@app.command("import")
def import_cmd(
    rows_path: Annotated[Path, ROWS_PATH_OPTION],
    account_id: Annotated[str | None, ACCOUNT_ID_OPTION] = None,
    fuzzy: Annotated[bool, FUZZY_OPTION] = False,
    database_url: Annotated[str | None, DATABASE_URL_OPTION] = None,
) -> None:
    """Import rows into the account ledger, skipping duplicates."""

    _exit(
        cmd_import(str(rows_path), account_id=account_id, fuzzy=fuzzy, database_url=database_url)
    )


@app.callback()
def _root() -> None:
    """Load ``.env`` from the working directory and configure logging."""

    # override=False keeps already-set environment variables
    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()


if __name__ == "__main__":  # pragma: no cover
    # Running as a module: `python -m statement_import.cli`
    app()
