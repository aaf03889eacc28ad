"""Tests for the logging setup."""

import logging

import pytest

from koperasi.logger import LOG_FORMAT, CriticalModuleFilter, setup_logging


def _record(name, level):
    return logging.LogRecord(name, level, __file__, 1, "message", None, None)


def test_filter_passes_records_at_level():
    f = CriticalModuleFilter(logging.WARNING)
    assert f.filter(_record("koperasi.services.tabungan", logging.ERROR))
    assert not f.filter(_record("koperasi.services.tabungan", logging.INFO))


def test_filter_passes_critical_modules_below_level():
    f = CriticalModuleFilter(logging.WARNING)
    assert f.filter(_record("koperasi.auth", logging.DEBUG))
    assert f.filter(_record("koperasi.auth.context", logging.INFO))
    assert f.filter(_record("koperasi.backend", logging.DEBUG))
    assert not f.filter(_record("koperasi.authx", logging.DEBUG))


@pytest.fixture
def log_file(tmp_path):
    path = tmp_path / "koperasi.log"
    yield path
    for name in ("koperasi", "discord"):
        logger = logging.getLogger(name)
        for handler in logger.handlers[:]:
            handler.close()
            logger.removeHandler(handler)


def test_setup_logging_writes_to_file(log_file):
    logger = setup_logging(str(log_file), "WARNING")

    logging.getLogger("koperasi.services.tabungan").info("hidden")
    logging.getLogger("koperasi.services.tabungan").error("shown")
    logging.getLogger("koperasi.storage").debug("critical module")
    for handler in logger.handlers:
        handler.flush()

    content = log_file.read_text(encoding="utf-8")
    assert "hidden" not in content
    assert "ERROR:koperasi.services.tabungan: shown" in content
    assert "DEBUG:koperasi.storage: critical module" in content


def test_setup_logging_replaces_handlers(log_file):
    setup_logging(str(log_file))
    logger = setup_logging(str(log_file))

    assert len(logger.handlers) == 1
    assert logger.handlers[0].formatter._fmt == LOG_FORMAT
