"""
Tests for logging configuration.
"""

import json
import logging

from appmirror.logging_config import HumanFormatter, JSONFormatter, setup_logging


def _record(msg="Fetched config", **extra):
    record = logging.LogRecord("appmirror.mirror.manager", logging.INFO, __file__, 1, msg, None, None)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_includes_context():
    data = json.loads(JSONFormatter().format(_record(app="immich", mode="import")))

    assert data["level"] == "INFO"
    assert data["message"] == "Fetched config"
    assert data["app"] == "immich"
    assert data["mode"] == "import"


def test_json_formatter_without_context():
    data = json.loads(JSONFormatter().format(_record()))
    assert "app" not in data


def test_human_formatter_prefixes_app():
    line = HumanFormatter().format(_record(app="immich"))
    assert "[manager        ]" in line
    assert "(immich) Fetched config" in line


def test_human_formatter_colors_level_when_enabled():
    record = _record()
    assert "\033[32mINFO" in HumanFormatter(color=True).format(record)
    assert "\033[" not in HumanFormatter().format(record)


def test_setup_logging_json(monkeypatch):
    root = logging.getLogger()
    saved_handlers, saved_level = root.handlers[:], root.level
    monkeypatch.setenv("LOG_FORMAT", "json")

    try:
        setup_logging(level="debug")

        assert root.level == logging.DEBUG
        assert isinstance(root.handlers[0].formatter, JSONFormatter)
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers[:] = saved_handlers
        root.setLevel(saved_level)
