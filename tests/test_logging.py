from __future__ import annotations

import logging
from io import StringIO

import pytest
from rich.console import Console

from passentry.core.config import AppConfig, GeneralConfig
from passentry.utils.logging import (
    SeverityOverrideFilter,
    get_current_log_level,
    set_logging_level,
    setup_logging,
)


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        if handler not in handlers:
            handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_setup_logging_console_only(restore_root_logger):
    stream = StringIO()
    setup_logging(AppConfig(), level_name="warning", console=Console(file=stream))

    assert restore_root_logger.level == logging.WARNING
    assert len(restore_root_logger.handlers) == 1
    assert get_current_log_level() == "WARNING"

    logging.getLogger("passentry.test").warning("record is corrupt")
    assert "record is corrupt" in stream.getvalue()


def test_setup_logging_with_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "logs" / "passentry.log"
    cfg = AppConfig(general=GeneralConfig(log_file=log_file))

    setup_logging(cfg, console=Console(file=StringIO()))
    logging.getLogger("passentry.test").info("hello file")
    for handler in restore_root_logger.handlers:
        handler.flush()

    assert "hello file" in log_file.read_text()


def test_set_logging_level(restore_root_logger):
    setup_logging(AppConfig(), console=Console(file=StringIO()))

    set_logging_level("error")

    assert restore_root_logger.level == logging.ERROR
    assert all(h.level == logging.ERROR for h in restore_root_logger.handlers)
    assert get_current_log_level() == "ERROR"

    with pytest.raises(ValueError):
        set_logging_level("loud")


def test_severity_override_by_logger_category():
    filter_ = SeverityOverrideFilter({"otp": "WARNING"})
    record = logging.LogRecord("passentry.core.otp", logging.DEBUG, __file__, 1, "msg", None, None)

    assert filter_.filter(record)
    assert record.levelno == logging.WARNING
    assert record.levelname == "WARNING"


def test_severity_override_forced_level():
    filter_ = SeverityOverrideFilter({})
    record = logging.LogRecord("passentry.cli", logging.INFO, __file__, 1, "msg", None, None)
    record.force_level = "ERROR"

    filter_.filter(record)

    assert record.levelno == logging.ERROR
