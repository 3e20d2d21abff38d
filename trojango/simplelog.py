"""Minimal logger in the standard "date time message" format on standard error."""

from __future__ import annotations

import datetime
import re
import sys
from typing import Any

from trojango.logger import LogLevel

_VERB = re.compile(r"%([-+# 0]*\d*(?:\.\d+)?)v")


def _println(args: tuple) -> str:
    return " ".join(str(arg) for arg in args)


def _printf(fmt: str, args: tuple) -> str:
    pattern = _VERB.sub(r"%\1s", fmt)
    if not args:
        return pattern.replace("%%", "%")
    try:
        return pattern % args
    except (TypeError, ValueError):
        return fmt + " " + " ".join(str(arg) for arg in args)


def _emit(message: str) -> None:
    stamp = datetime.datetime.now().strftime("%Y/%m/%d %H:%M:%S")
    if not message.endswith("\n"):
        message += "\n"
    sys.stderr.write(f"{stamp} {message}")
    sys.stderr.flush()


class SimpleLogger:
    """Writes every enabled message to standard error; output cannot be redirected."""

    def __init__(self, level: LogLevel = LogLevel.ALL) -> None:
        self.log_level = int(level)
        self.requested_output: Any = None

    def set_log_level(self, level: LogLevel) -> None:
        self.log_level = int(level)

    def set_output(self, writer: Any) -> None:
        """Record the requested writer; messages still go to standard error."""
        self.requested_output = writer

    def _enabled(self, threshold: LogLevel) -> bool:
        return self.log_level <= threshold

    def fatal(self, *args: Any) -> None:
        if self._enabled(LogLevel.FATAL):
            _emit(_println(args))
        sys.exit(1)

    def fatalf(self, fmt: str, *args: Any) -> None:
        if self._enabled(LogLevel.FATAL):
            _emit(_printf(fmt, args))
        sys.exit(1)

    def error(self, *args: Any) -> None:
        if self._enabled(LogLevel.ERROR):
            _emit(_println(args))

    def errorf(self, fmt: str, *args: Any) -> None:
        if self._enabled(LogLevel.ERROR):
            _emit(_printf(fmt, args))

    def warn(self, *args: Any) -> None:
        if self._enabled(LogLevel.WARN):
            _emit(_println(args))

    def warnf(self, fmt: str, *args: Any) -> None:
        if self._enabled(LogLevel.WARN):
            _emit(_printf(fmt, args))

    def info(self, *args: Any) -> None:
        if self._enabled(LogLevel.INFO):
            _emit(_println(args))

    def infof(self, fmt: str, *args: Any) -> None:
        if self._enabled(LogLevel.INFO):
            _emit(_printf(fmt, args))

    def debug(self, *args: Any) -> None:
        if self._enabled(LogLevel.ALL):
            _emit(_println(args))

    def debugf(self, fmt: str, *args: Any) -> None:
        if self._enabled(LogLevel.ALL):
            _emit(_printf(fmt, args))

    def trace(self, *args: Any) -> None:
        if self._enabled(LogLevel.ALL):
            _emit(_println(args))

    def tracef(self, fmt: str, *args: Any) -> None:
        if self._enabled(LogLevel.ALL):
            _emit(_printf(fmt, args))