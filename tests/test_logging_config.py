"""
Logging Setup Tests
===================
Covers:
    - Console only vs console + dated file
    - Level names accepted, unknown names rejected
    - Repeated setup replaces handlers instead of stacking them
    - Plain console output when color is off
"""
import logging
import os

import pytest

from dashboard.utils.logging_config import ColoredFormatter, setup_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    level = root.level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    root.setLevel(level)


def test_console_only(root_logger):
    assert setup_logging("DEBUG", file_logging=False) is None
    root = root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 1
    assert isinstance(root.handlers[0].formatter, ColoredFormatter)


def test_file_logging_writes_dated_file(root_logger, tmp_path):
    path = setup_logging(logging.INFO, log_dir=str(tmp_path / "logs"), file_logging=True)
    logging.getLogger("dashboard.test").info("[TEST] hello")
    for handler in root_logger.handlers:
        handler.flush()

    assert os.path.basename(path).startswith("dashboard_")
    with open(path, encoding="utf-8") as fh:
        assert "[TEST] hello" in fh.read()


def test_repeated_setup_does_not_stack_handlers(root_logger, tmp_path):
    setup_logging(file_logging=True, log_dir=str(tmp_path))
    setup_logging(file_logging=True, log_dir=str(tmp_path))
    assert len(root_logger.handlers) == 2


def test_unknown_level_rejected(root_logger):
    with pytest.raises(ValueError, match="Unknown log level"):
        setup_logging("LOUD", file_logging=False)


def test_access_log_quieted(root_logger):
    setup_logging(logging.INFO, file_logging=False)
    assert logging.getLogger("uvicorn.access").level == logging.WARNING


def test_plain_output_without_color():
    record = logging.LogRecord("dashboard", logging.WARNING, __file__, 1, "[STATE] msg", None, None)
    assert "\x1b[" not in ColoredFormatter(use_color=False).format(record)
    assert ColoredFormatter(use_color=True).format(record).startswith("\x1b[33m")
