"""Tests for the application logger"""

import logging

from utils.logger import get_logger, logger


def test_module_logger_is_application_logger():
    assert logger.name == "roadmap"
    assert logger.propagate is False


def test_child_logger():
    assert get_logger("engine.rollup").name == "roadmap.engine.rollup"


def test_handler_attached_once():
    get_logger()
    get_logger("views")

    handlers = [h for h in logging.getLogger("roadmap").handlers if isinstance(h, logging.StreamHandler)]
    assert len(handlers) == 1
