"""
Tests for the console manager: level configuration and how tool failures
reach the log.
"""

import logging

import pytest

from compass.utils.logger import SUCCESS_LEVEL_NUM, ConsoleManager, resolve_level


class ListHandler(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


def attach(manager):
    handler = ListHandler()
    manager.logger.addHandler(handler)
    return handler


def test_level_names_resolve_in_any_case():
    assert resolve_level("debug") == logging.DEBUG
    assert resolve_level(" Success ") == SUCCESS_LEVEL_NUM
    assert resolve_level(logging.ERROR) == logging.ERROR
    with pytest.raises(ValueError):
        resolve_level("chatty")


def test_level_is_applied_at_construction_and_changeable():
    manager = ConsoleManager(name="compass-test-level", level="DEBUG")
    assert manager.logger.level == logging.DEBUG

    manager.set_level("WARNING")
    handler = attach(manager)
    manager.info("hidden")
    manager.success("also hidden")
    manager.warning("shown")

    assert [r.getMessage() for r in handler.records] == ["shown"]


def test_success_sits_between_info_and_warning():
    manager = ConsoleManager(name="compass-test-success", level="SUCCESS")
    handler = attach(manager)

    manager.info("routine")
    manager.success("PDF written")

    assert [(r.levelname, r.getMessage()) for r in handler.records] == [("SUCCESS", "PDF written")]


def test_tool_failure_is_logged_as_an_error():
    manager = ConsoleManager(name="compass-test-failure")
    handler = attach(manager)

    manager.tool_failure("get_course_summary", "Search quota exceeded")

    assert [(r.levelno, r.getMessage()) for r in handler.records] == [
        (logging.ERROR, "Tool 'get_course_summary' failed: Search quota exceeded"),
    ]

