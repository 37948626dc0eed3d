from __future__ import annotations

import logging

import pytest

from src.hr_portal.hr_portal.logging_setup import _ConsoleNoiseFilter, setup_logging


@pytest.fixture()
def clean_root_logger():
    root = logging.getLogger()
    before = list(root.handlers)
    level = root.level
    yield root
    for h in list(root.handlers):
        if h not in before:
            root.removeHandler(h)
            h.close()
    root.setLevel(level)
    logging.captureWarnings(False)


def _record(name: str, level: int) -> logging.LogRecord:
    return logging.LogRecord(name, level, __file__, 1, "msg", None, None)


def test_console_filter_keeps_app_logs_and_quiets_libraries():
    f = _ConsoleNoiseFilter()

    assert f.filter(_record("hr_portal.tasks.service", logging.DEBUG))
    assert not f.filter(_record("hr_portal.gateway.realtime", logging.INFO))
    assert f.filter(_record("hr_portal.gateway.realtime", logging.WARNING))
    assert not f.filter(_record("urllib3.connectionpool", logging.WARNING))
    assert f.filter(_record("werkzeug", logging.ERROR))


def test_setup_logging_is_idempotent_and_writes_file(clean_root_logger, tmp_path):
    before = len(clean_root_logger.handlers)

    setup_logging(level="warning", log_dir=tmp_path)
    setup_logging(level="warning", log_dir=tmp_path)

    assert len(clean_root_logger.handlers) == before + 2
    logging.getLogger("hr_portal.test").debug("to the file only")
    for h in clean_root_logger.handlers:
        h.flush()
    assert "to the file only" in (tmp_path / "hr_portal.log").read_text(encoding="utf-8")
