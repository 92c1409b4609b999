"""
logging_setup.py - Console and file logging for the launcher
------------------------------------------------------------
Everything goes to stderr through the root logger. Records from the
"dnl.launcher" tree, including the per-server console loggers, are also kept
in <logs_dir>/launcher.log, rotated at LOG_FILE_MAX_BYTES. LOG_JSON switches
both outputs to one JSON object per line.
"""

from __future__ import annotations
import json
import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from .settings import Settings

LAUNCHER_LOGGER = "dnl.launcher"
LOG_FILE_NAME = "launcher.log"
LOG_FILE_MAX_BYTES = 5_000_000
LOG_FILE_BACKUPS = 3
TEXT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
TEXT_DATEFMT = "%Y-%m-%d %H:%M:%S"


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _formatter(settings: Settings) -> logging.Formatter:
    if settings.log_json:
        return _JsonFormatter()
    return logging.Formatter(fmt=TEXT_FORMAT, datefmt=TEXT_DATEFMT)


def _replace_file_handler(logger: logging.Logger, path: Path, fmt: logging.Formatter, level: str) -> None:
    # setup_logging may run more than once per process; keep a single file handler
    for h in list(logger.handlers):
        if isinstance(h, RotatingFileHandler):
            logger.removeHandler(h)
            h.close()
    fh = RotatingFileHandler(path, maxBytes=LOG_FILE_MAX_BYTES, backupCount=LOG_FILE_BACKUPS, encoding="utf-8")
    fh.setFormatter(fmt)
    fh.setLevel(level)
    logger.addHandler(fh)


def setup_logging(settings: Settings) -> Path:
    """Configure root and launcher logging from settings. Returns the launcher log file path."""
    logs_dir = settings.logs_dir
    logs_dir.mkdir(parents=True, exist_ok=True)
    level = settings.log_level.upper()
    fmt = _formatter(settings)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    ch = logging.StreamHandler()
    ch.setFormatter(fmt)
    root.addHandler(ch)

    log_file = logs_dir / LOG_FILE_NAME
    launcher_log = logging.getLogger(LAUNCHER_LOGGER)
    _replace_file_handler(launcher_log, log_file, fmt, level)
    launcher_log.propagate = True
    return log_file


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)
