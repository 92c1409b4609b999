from __future__ import annotations
import logging
import threading
from collections import deque
from typing import Deque, Dict, List, Protocol
from .logging_setup import get_logger


class ConsoleSink(Protocol):
    def add_output(self, server_id: str, line: str) -> None: ...


class ServerConsole:
    """Keeps the most recent console lines of each server in memory."""

    def __init__(self, max_lines: int = 400):
        self.max_lines = max_lines
        self._lines: Dict[str, Deque[str]] = {}
        self._lock = threading.Lock()

    def add_output(self, server_id: str, line: str) -> None:
        with self._lock:
            buf = self._lines.get(server_id)
            if buf is None:
                buf = self._lines[server_id] = deque(maxlen=self.max_lines)
            buf.append(line)

    def lines(self, server_id: str) -> List[str]:
        with self._lock:
            return list(self._lines.get(server_id, ()))

    def clear(self, server_id: str) -> None:
        with self._lock:
            self._lines.pop(server_id, None)


class LoggingConsole:
    """Routes console lines to a logger per server (dnl.launcher.console.<id>)."""

    def __init__(self, level: int = logging.INFO):
        self.level = level

    def add_output(self, server_id: str, line: str) -> None:
        get_logger(f"dnl.launcher.console.{server_id}").log(self.level, "%s", line)
