"""Logging for the ``statement_import`` package.

Engine modules log through children of the ``statement_import`` logger and
never attach handlers. The package logger carries a ``NullHandler`` so library
use stays silent; entrypoints (the CLI) call :func:`configure_logging` to
route records to stderr at the level named by ``SI_LOG_LEVEL``.

Import runs log one INFO line when they start and one when they finish,
rejected-row counts at INFO, fuzzy matches at DEBUG and commit failures at
ERROR with the traceback.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "statement_import"
LEVEL_ENV = "SI_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Marks the handler owned by configure_logging so a later call replaces it.
_HANDLER_ATTR = "_statement_import_handler"

logging.getLogger(PACKAGE_LOGGER).addHandler(logging.NullHandler())


def resolve_level(level: int | str | None = None) -> tuple[int, str | None]:
    """Return ``(level, unknown_name)`` for an explicit level or ``SI_LOG_LEVEL``.

    Unrecognized names resolve to INFO and are handed back as ``unknown_name``
    so the caller can report them once logging works.
    """

    raw: int | str = level if level is not None else os.getenv(LEVEL_ENV, "") or "INFO"
    if isinstance(raw, int):
        return raw, None
    name = raw.strip().upper()
    if name.isdigit():
        return int(name), None
    numeric = logging.getLevelNamesMapping().get(name)
    if numeric is None:
        return logging.INFO, raw
    return numeric, None


def configure_logging(
    level: int | str | None = None, *, stream: IO[str] | None = None
) -> logging.Handler:
    """Route package logs to ``stream`` (current ``sys.stderr`` by default).

    Calling it again replaces the previously installed handler, so each CLI
    invocation writes to the stderr in effect at that moment.
    """

    logger = logging.getLogger(PACKAGE_LOGGER)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler) or getattr(h, _HANDLER_ATTR, False):
            logger.removeHandler(h)

    resolved, unknown = resolve_level(level)
    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    setattr(handler, _HANDLER_ATTR, True)
    handler.setFormatter(logging.Formatter(DEFAULT_FORMAT))
    logger.addHandler(handler)
    logger.setLevel(resolved)
    # The CLI owns stderr; the root logger must not print records twice.
    logger.propagate = False

    if unknown is not None:
        logger.warning("unknown %s value %r; using INFO", LEVEL_ENV, unknown)
    return handler


def get_logger(name: str) -> logging.Logger:
    """Return a logger inside the package hierarchy."""

    if name != PACKAGE_LOGGER and not name.startswith(PACKAGE_LOGGER + "."):
        name = f"{PACKAGE_LOGGER}.{name}"
    return logging.getLogger(name)


__all__ = ["LEVEL_ENV", "configure_logging", "get_logger", "resolve_level"]
