"""Tests for logging configuration."""

import logging

from meeting_sessions.api.app import create_app
from meeting_sessions.app_logging import configure_logging
from meeting_sessions.containers import AppContainer


def test_configure_logging_installs_single_handler() -> None:
    logger = logging.getLogger("meeting_sessions")
    logger.handlers.clear()

    configure_logging()
    configure_logging()

    assert len(logger.handlers) == 1
    assert logger.propagate is False
    assert logger.level == logging.INFO


def test_configure_logging_updates_level_on_repeat_call() -> None:
    logger = logging.getLogger("meeting_sessions")
    logger.handlers.clear()

    configure_logging("info")
    returned = configure_logging("debug")

    assert returned is logger
    assert logger.level == logging.DEBUG
    assert len(logger.handlers) == 1

    configure_logging()


def test_create_app_applies_configured_level(container: AppContainer) -> None:
    container.settings.log_level = "WARNING"

    create_app(container)

    assert logging.getLogger("meeting_sessions").level == logging.WARNING
    configure_logging()
