"""
tests/unit/test_logger.py

Unit tests for logger.py.
Each test restores the root logger so handler state never leaks between tests.
"""

from __future__ import annotations

import logging
import re

import pytest

import logger as updater_logging

_LINE_PATTERN = re.compile(r"^\[\d{4}-\d\d-\d\d \d\d:\d\d:\d\d\] \[INFO\] hello world$")


@pytest.fixture(autouse=True)
def _restore_root_logger():
    root = logging.getLogger()
    saved_level = root.level
    yield
    while updater_logging._installed_handlers:
        handler = updater_logging._installed_handlers.pop()
        root.removeHandler(handler)
        handler.close()
    root.setLevel(saved_level)


def _installed_stream_handlers():
    return [
        h for h in logging.getLogger().handlers
        if h in updater_logging._installed_handlers and not isinstance(h, logging.FileHandler)
    ]


def test_log_file_lines_use_timestamped_format(tmp_path):
    log_file = tmp_path / "logs" / "updater.log"
    updater_logging.configure_logging("INFO", str(log_file))

    logging.getLogger("test").info("hello world")
    for handler in updater_logging._installed_handlers:
        handler.flush()

    lines = log_file.read_text(encoding="utf-8").splitlines()
    assert len(lines) == 1
    assert _LINE_PATTERN.match(lines[0])


def test_reconfiguring_replaces_own_handlers_only():
    """A second call swaps out earlier handlers but keeps foreign ones."""
    foreign = logging.NullHandler()
    root = logging.getLogger()
    root.addHandler(foreign)
    try:
        updater_logging.configure_logging()
        updater_logging.configure_logging("DEBUG")

        assert len(_installed_stream_handlers()) == 1
        assert foreign in root.handlers
        assert root.level == logging.DEBUG
    finally:
        root.removeHandler(foreign)


@pytest.mark.parametrize("level", ["nonsense", "basic_format"])
def test_unknown_level_falls_back_to_info(level):
    updater_logging.configure_logging(level)

    assert logging.getLogger().level == logging.INFO


def test_httpx_request_logging_is_quieted():
    updater_logging.configure_logging("DEBUG")

    assert logging.getLogger("httpx").level == logging.WARNING
