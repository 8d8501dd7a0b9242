from __future__ import annotations

import io
import logging
from collections.abc import Iterator

import pytest
from statement_import.logging_setup import configure_logging, get_logger, resolve_level


@pytest.fixture
def pkg_logger() -> Iterator[logging.Logger]:
    logger = logging.getLogger("statement_import")
    saved = (list(logger.handlers), logger.level, logger.propagate)
    yield logger
    logger.handlers[:] = saved[0]
    logger.setLevel(saved[1])
    logger.propagate = saved[2]


def test_reconfiguring_replaces_handler(pkg_logger: logging.Logger) -> None:
    first, second = io.StringIO(), io.StringIO()
    configure_logging("INFO", stream=first)
    configure_logging("INFO", stream=second)

    get_logger("statement_import.importer").info("import start")

    owned = [h for h in pkg_logger.handlers if not isinstance(h, logging.NullHandler)]
    assert len(owned) == 1
    assert first.getvalue() == ""
    assert "statement_import.importer: import start" in second.getvalue()
    assert pkg_logger.propagate is False


def test_level_comes_from_env(pkg_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("SI_LOG_LEVEL", "warning")
    out = io.StringIO()
    configure_logging(stream=out)

    log = get_logger("statement_import.duplicates")
    log.info("hidden")
    log.warning("shown")

    assert "hidden" not in out.getvalue()
    assert "shown" in out.getvalue()


def test_unknown_level_falls_back_to_info_with_warning(pkg_logger: logging.Logger) -> None:
    out = io.StringIO()
    configure_logging("LOUD", stream=out)
    assert pkg_logger.level == logging.INFO
    assert "unknown SI_LOG_LEVEL value 'LOUD'" in out.getvalue()


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(None, (logging.INFO, None)), ("debug", (logging.DEBUG, None)), ("15", (15, None)), (logging.ERROR, (logging.ERROR, None))],
)
def test_resolve_level(raw, expected) -> None:
    assert resolve_level(raw) == expected


def test_get_logger_stays_in_package_hierarchy() -> None:
    assert get_logger("statement_import.cli").name == "statement_import.cli"
    assert get_logger("locking").name == "statement_import.locking"
