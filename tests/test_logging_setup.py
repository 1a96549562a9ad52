"""Tests for the JSONL log sink."""

import json
import logging
import sys

import pytest
from rich.logging import RichHandler

from flatmod.logging_setup import JsonlHandler
from flatmod.logging_setup import enable_console_debug
from flatmod.logging_setup import init_json_logging


@pytest.fixture
def root_logger():
    root = logging.getLogger()
    saved_level = root.level
    saved_handlers = list(root.handlers)
    yield root
    for handler in list(root.handlers):
        if handler not in saved_handlers:
            root.removeHandler(handler)
    root.setLevel(saved_level)


def read_lines(path):
    return [json.loads(line) for line in path.read_text().splitlines()]


def test_records_written_as_json_lines(tmp_path, root_logger):
    log_path = tmp_path / "logs" / "flatmod.jsonl"
    init_json_logging(log_path, "debug")

    logging.getLogger("flatmod.test").info("resolved foo")

    [line] = read_lines(log_path)
    assert set(line) == {"ts", "lvl", "schema", "logger", "message"}
    assert line["lvl"] == "INFO"
    assert line["logger"] == "flatmod.test"
    assert line["message"] == "resolved foo"
    assert line["schema"] == {"name": "flatmod.log", "ver": "1.0.0"}


def test_exception_text_attached(tmp_path):
    handler = JsonlHandler(tmp_path / "x.jsonl")
    try:
        raise ValueError("bad store")
    except ValueError:
        record = logging.LogRecord("flatmod", logging.ERROR, __file__, 1, "failed %s", ("foo",), sys.exc_info())

    data = handler.format_record(record)

    assert data["message"] == "failed foo"
    assert "ValueError: bad store" in data["exc"]


def test_environment_read_at_init(tmp_path, root_logger, monkeypatch):
    monkeypatch.setenv("FLATMOD_LOG_PATH", str(tmp_path / "env.jsonl"))
    monkeypatch.setenv("FLATMOD_LOG_LEVEL", "warning")

    init_json_logging()

    [handler] = [h for h in root_logger.handlers if isinstance(h, JsonlHandler)]
    assert handler.path == tmp_path / "env.jsonl"
    assert root_logger.level == logging.WARNING


def test_reinit_replaces_handler(tmp_path, root_logger):
    init_json_logging(tmp_path / "a.jsonl", "INFO")
    init_json_logging(tmp_path / "b.jsonl", "INFO")

    handlers = [h for h in root_logger.handlers if isinstance(h, JsonlHandler)]
    assert [h.path for h in handlers] == [tmp_path / "b.jsonl"]


def test_level_filters_records(tmp_path, root_logger):
    log_path = tmp_path / "flatmod.jsonl"
    init_json_logging(log_path, "WARNING")

    logging.getLogger("flatmod.test").debug("hidden")
    logging.getLogger("flatmod.test").warning("shown")

    assert [line["message"] for line in read_lines(log_path)] == ["shown"]


def test_console_debug_attaches_single_rich_handler(root_logger):
    enable_console_debug()
    enable_console_debug()

    assert root_logger.level == logging.DEBUG
    assert len([h for h in root_logger.handlers if isinstance(h, RichHandler)]) == 1
