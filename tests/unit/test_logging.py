"""Tests for logger setup."""

import logging

from labelq.observability.logging import get_logger, resolve_level


def test_level_from_env(monkeypatch):
    monkeypatch.setenv("LABELQ_LOG_LEVEL", "debug")
    assert resolve_level() == logging.DEBUG


def test_unknown_level_falls_back_to_info(monkeypatch):
    monkeypatch.setenv("LABELQ_LOG_LEVEL", "chatty")
    assert resolve_level() == logging.INFO


def test_root_handler_attached_once(monkeypatch):
    monkeypatch.setenv("LABELQ_LOG_LEVEL", "WARNING")
    root = logging.getLogger()
    previous = root.level
    try:
        get_logger("labelq.a")
        handlers = list(root.handlers)

        logger = get_logger("labelq.b")
    finally:
        root.setLevel(previous)

    assert root.handlers == handlers
    assert logger.level == logging.WARNING
