"""Process-wide logging front end that forwards to a registered logger."""

from __future__ import annotations

import enum
import sys
from typing import Any


class LogLevel(enum.IntEnum):
    """How much to log: ALL shows everything, OFF shows nothing."""

    ALL = 0
    INFO = 1
    WARN = 2
    ERROR = 3
    FATAL = 4
    OFF = 5


class EmptyLogger:
    """Logger that drops every message, counting them; fatal calls still exit."""

    def __init__(self) -> None:
        self.level: Any = LogLevel.ALL
        self.writer: Any = None
        self.dropped = 0

    def _drop(self) -> None:
        self.dropped += 1

    def set_log_level(self, level: LogLevel) -> None:
        self.level = level

    def set_output(self, writer: Any) -> None:
        self.writer = writer

    def fatal(self, *args: Any) -> None:
        self._drop()
        sys.exit(1)

    def fatalf(self, fmt: str, *args: Any) -> None:
        self._drop()
        sys.exit(1)

    def error(self, *args: Any) -> None:
        self._drop()

    def errorf(self, fmt: str, *args: Any) -> None:
        self._drop()

    def warn(self, *args: Any) -> None:
        self._drop()

    def warnf(self, fmt: str, *args: Any) -> None:
        self._drop()

    def info(self, *args: Any) -> None:
        self._drop()

    def infof(self, fmt: str, *args: Any) -> None:
        self._drop()

    def debug(self, *args: Any) -> None:
        self._drop()

    def debugf(self, fmt: str, *args: Any) -> None:
        self._drop()

    def trace(self, *args: Any) -> None:
        self._drop()

    def tracef(self, fmt: str, *args: Any) -> None:
        self._drop()


_logger: Any = EmptyLogger()


def fatal(*args: Any) -> None:
    _logger.fatal(*args)


def fatalf(fmt: str, *args: Any) -> None:
    _logger.fatalf(fmt, *args)


def error(*args: Any) -> None:
    _logger.error(*args)


def errorf(fmt: str, *args: Any) -> None:
    _logger.errorf(fmt, *args)


def warn(*args: Any) -> None:
    _logger.warn(*args)


def warnf(fmt: str, *args: Any) -> None:
    _logger.warnf(fmt, *args)


def info(*args: Any) -> None:
    _logger.info(*args)


def infof(fmt: str, *args: Any) -> None:
    _logger.infof(fmt, *args)


def debug(*args: Any) -> None:
    _logger.debug(*args)


def debugf(fmt: str, *args: Any) -> None:
    _logger.debugf(fmt, *args)


def trace(*args: Any) -> None:
    _logger.trace(*args)


def tracef(fmt: str, *args: Any) -> None:
    _logger.tracef(fmt, *args)


def set_log_level(level: LogLevel) -> None:
    _logger.set_log_level(level)


def set_output(writer: Any) -> None:
    _logger.set_output(writer)


def register_logger(logger: Any) -> None:
    """Make ``logger`` receive every message from this module."""
    global _logger
    _logger = logger