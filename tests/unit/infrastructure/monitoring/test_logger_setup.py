import logging

import pytest

from triagecli.infrastructure.monitoring.logger_setup import level_from_name, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    httpx_level = logging.getLogger("httpx").level
    yield root
    for handler in root.handlers[:]:
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)
    logging.getLogger("httpx").setLevel(httpx_level)


def test_setup_logging_replaces_handlers(restore_root_logger, tmp_path):
    log_file = tmp_path / "triage.log"

    setup_logging(log_level=logging.DEBUG, log_file=str(log_file))
    logging.getLogger("triagecli.test").debug("hello file")

    root = restore_root_logger
    assert root.level == logging.DEBUG
    assert len(root.handlers) == 2
    assert "hello file" in log_file.read_text(encoding="utf-8")


def test_httpx_request_logs_are_quiet_at_info(restore_root_logger):
    setup_logging(log_level=logging.INFO)
    assert logging.getLogger("httpx").level == logging.WARNING


@pytest.mark.parametrize(
    "name, expected",
    [("debug", logging.DEBUG), ("WARNING", logging.WARNING), (None, logging.INFO), ("nonsense", logging.INFO)],
)
def test_level_from_name(name, expected):
    assert level_from_name(name) == expected
