"""Tests for logging setup."""

import logging

import pytest

from bidbot.core.logging import ROOT_LOGGER_NAME, get_logger, resolve_level, setup_logging


@pytest.fixture
def restore_logging():
    app_logger = logging.getLogger(ROOT_LOGGER_NAME)
    httpx_logger = logging.getLogger("httpx")
    saved = (list(app_logger.handlers), app_logger.level, httpx_logger.level)
    yield
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
        handler.close()
    for handler in saved[0]:
        app_logger.addHandler(handler)
    app_logger.setLevel(saved[1])
    httpx_logger.setLevel(saved[2])


class TestGetLogger:
    def test_component_names_nested_under_root(self):
        assert get_logger("monitor.service").name == "bidbot.monitor.service"

    def test_qualified_names_not_doubled(self):
        assert get_logger("bidbot.dedup.store").name == "bidbot.dedup.store"


class TestSetupLogging:
    """Tests for handler installation."""

    @pytest.mark.parametrize(
        "name, expected",
        [("debug", logging.DEBUG), (" WARNING ", logging.WARNING), ("verbose", logging.INFO)],
    )
    def test_resolve_level(self, name, expected):
        assert resolve_level(name) == expected

    def test_repeated_setup_replaces_handlers(self, restore_logging):
        setup_logging("INFO")
        app_logger = setup_logging("DEBUG")

        assert len(app_logger.handlers) == 1
        assert app_logger.level == logging.DEBUG

    def test_log_file_receives_records(self, restore_logging, tmp_path):
        log_file = tmp_path / "logs" / "bidbot.log"
        app_logger = setup_logging("INFO", log_file)

        get_logger("monitor.service").info("cycle finished")
        for handler in app_logger.handlers:
            handler.flush()

        assert len(app_logger.handlers) == 2
        assert "| INFO     | bidbot.monitor.service | cycle finished" in log_file.read_text(
            encoding="utf-8"
        )

    def test_http_client_loggers_quieted(self, restore_logging):
        setup_logging("DEBUG")
        assert logging.getLogger("httpx").level == logging.WARNING
