"""
JSONL logging bootstrap for the flatmod CLI.
The library itself only logs; handlers are attached here, at CLI startup.

Each line holds ``ts``, ``lvl``, ``schema``, ``logger`` and ``message``, plus
``exc`` when the record carries an exception.
"""

import json
import logging
import os
from datetime import UTC
from datetime import datetime
from pathlib import Path

from rich.logging import RichHandler

from .console import err_console

SCHEMA = {"name": "flatmod.log", "ver": "1.0.0"}


class JsonlHandler(logging.Handler):
    """Append one JSON object per record to ``path``."""

    def __init__(self, path: str | Path):
        super().__init__()
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def format_record(self, record: logging.LogRecord) -> dict:
        line = {
            "ts": datetime.fromtimestamp(record.created, UTC).isoformat(timespec="milliseconds"),
            "lvl": record.levelname,
            "schema": SCHEMA,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info:
            line["exc"] = logging.Formatter().formatException(record.exc_info)
        return line

    def emit(self, record: logging.LogRecord) -> None:
        try:
            line = json.dumps(self.format_record(record), ensure_ascii=False)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
        except Exception:
            self.handleError(record)


def init_json_logging(path: str | Path | None = None, level: str | None = None) -> None:
    """Route root logger records to a JSONL file.

    Args:
        path: Log file; defaults to $FLATMOD_LOG_PATH or ./flatmod.log.jsonl
        level: Level name; defaults to $FLATMOD_LOG_LEVEL or INFO
    """
    path = path or os.environ.get("FLATMOD_LOG_PATH", "./flatmod.log.jsonl")
    level = (level or os.environ.get("FLATMOD_LOG_LEVEL", "INFO")).upper()
    root = logging.getLogger()
    root.setLevel(getattr(logging, level, logging.INFO))
    for h in list(root.handlers):
        if isinstance(h, JsonlHandler):
            root.removeHandler(h)
    root.addHandler(JsonlHandler(path))


def enable_console_debug() -> None:
    """Echo DEBUG records to stderr through rich (``--verbose``)."""
    root = logging.getLogger()
    root.setLevel(logging.DEBUG)
    for h in list(root.handlers):
        if isinstance(h, RichHandler):
            root.removeHandler(h)
    handler = RichHandler(console=err_console, show_path=False, markup=False)
    handler.setLevel(logging.DEBUG)
    root.addHandler(handler)
