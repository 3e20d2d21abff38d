"""Coloured, timestamped logger writing to a stream; registered on import."""

from __future__ import annotations

import datetime
import io
import os
import re
import sys
import threading
from dataclasses import dataclass
from typing import Any

from trojango import colorful
from trojango.colorful import ColorBuffer
from trojango.logger import LogLevel, register_logger


@dataclass(frozen=True)
class Prefix:
    """Plain and coloured label of a level, and whether to show the caller."""

    plain: bytes
    color: bytes
    file: bool = False


_PLAIN_FATAL = b"[FATAL] "
_PLAIN_ERROR = b"[ERROR] "
_PLAIN_WARN = b"[WARN]  "
_PLAIN_INFO = b"[INFO]  "
_PLAIN_DEBUG = b"[DEBUG] "
_PLAIN_TRACE = b"[TRACE] "

FATAL_PREFIX = Prefix(_PLAIN_FATAL, colorful.red(_PLAIN_FATAL), True)
ERROR_PREFIX = Prefix(_PLAIN_ERROR, colorful.red(_PLAIN_ERROR), True)
WARN_PREFIX = Prefix(_PLAIN_WARN, colorful.orange(_PLAIN_WARN))
INFO_PREFIX = Prefix(_PLAIN_INFO, colorful.green(_PLAIN_INFO))
DEBUG_PREFIX = Prefix(_PLAIN_DEBUG, colorful.purple(_PLAIN_DEBUG), True)
TRACE_PREFIX = Prefix(_PLAIN_TRACE, colorful.cyan(_PLAIN_TRACE))

_VERB = re.compile(r"%([-+# 0]*\d*(?:\.\d+)?)v")


def _sprintln(args: tuple) -> str:
    return " ".join(str(arg) for arg in args) + "\n"


def _sprintf(fmt: str, args: tuple) -> str:
    pattern = _VERB.sub(r"%\1s", fmt)
    if not args:
        return pattern.replace("%%", "%")
    try:
        return pattern % args
    except (TypeError, ValueError):
        return fmt + " " + " ".join(str(arg) for arg in args)


def _is_terminal(out: Any) -> bool:
    isatty = getattr(out, "isatty", None)
    if isatty is None:
        return False
    try:
        return bool(isatty())
    except (OSError, ValueError):
        return False


def _caller(skip: int) -> tuple[str, str, int]:
    try:
        frame = sys._getframe(skip + 1)
    except ValueError:
        return "<unknown function>", "<unknown file>", 0
    file = os.path.basename(frame.f_code.co_filename)
    module = os.path.splitext(file)[0]
    return f"{module}.{frame.f_code.co_name}", file, frame.f_lineno


class Logger:
    """Writes prefixed, optionally coloured and timestamped lines to ``out``."""

    def __init__(self, out: Any) -> None:
        self._lock = threading.RLock()
        self._color = _is_terminal(out)
        self._out = out
        self._debug = False
        self._timestamp = True
        self._quiet = False
        self._level = int(LogLevel.ALL)

    def set_log_level(self, level: LogLevel) -> None:
        with self._lock:
            self._level = int(level)

    def set_output(self, writer: Any) -> None:
        with self._lock:
            self._color = _is_terminal(writer)
            self._out = writer

    def with_color(self) -> "Logger":
        with self._lock:
            self._color = True
        return self

    def without_color(self) -> "Logger":
        with self._lock:
            self._color = False
        return self

    def with_debug(self) -> "Logger":
        with self._lock:
            self._debug = True
        return self

    def without_debug(self) -> "Logger":
        with self._lock:
            self._debug = False
        return self

    def is_debug(self) -> bool:
        with self._lock:
            return self._debug

    def with_timestamp(self) -> "Logger":
        with self._lock:
            self._timestamp = True
        return self

    def without_timestamp(self) -> "Logger":
        with self._lock:
            self._timestamp = False
        return self

    def quiet(self) -> "Logger":
        with self._lock:
            self._quiet = True
        return self

    def no_quiet(self) -> "Logger":
        with self._lock:
            self._quiet = False
        return self

    def is_quiet(self) -> bool:
        with self._lock:
            return self._quiet

    def output(self, depth: int, prefix: Prefix, data: str) -> None:
        """Write one line; ``depth`` counts frames between the caller and this logger."""
        if self.is_quiet():
            return
        now = datetime.datetime.now()
        fn = file = ""
        line = 0
        if prefix.file:
            fn, file, line = _caller(depth + 2)
        with self._lock:
            color = self._color
            buf = ColorBuffer()
            buf.append(prefix.color if color else prefix.plain)
            if self._timestamp:
                if color:
                    buf.blue()
                buf.append_int(now.year, 4)
                buf.append_byte(ord("/"))
                buf.append_int(now.month, 2)
                buf.append_byte(ord("/"))
                buf.append_int(now.day, 2)
                buf.append_byte(ord(" "))
                buf.append_int(now.hour, 2)
                buf.append_byte(ord(":"))
                buf.append_int(now.minute, 2)
                buf.append_byte(ord(":"))
                buf.append_int(now.second, 2)
                buf.append_byte(ord(" "))
                if color:
                    buf.off()
            if prefix.file:
                if color:
                    buf.orange()
                buf.append(fn.encode("utf-8"))
                buf.append_byte(ord(":"))
                buf.append(file.encode("utf-8"))
                buf.append_byte(ord(":"))
                buf.append_int(line, 0)
                buf.append_byte(ord(" "))
                if color:
                    buf.off()
            buf.append(data.encode("utf-8"))
            if not data.endswith("\n"):
                buf.append_byte(ord("\n"))
            self._write(buf.getvalue())

    def _write(self, payload: bytes) -> None:
        out = self._out
        if isinstance(out, io.TextIOBase):
            out.write(payload.decode("utf-8", errors="replace"))
        else:
            out.write(payload)
        flush = getattr(out, "flush", None)
        if flush is not None:
            flush()

    def _enabled(self, threshold: int) -> bool:
        with self._lock:
            return self._level <= threshold

    def fatal(self, *args: Any) -> None:
        if self._enabled(LogLevel.FATAL):
            self.output(1, FATAL_PREFIX, _sprintln(args))
        sys.exit(1)

    def fatalf(self, fmt: str, *args: Any) -> None:
        if self._enabled(LogLevel.FATAL):
            self.output(1, FATAL_PREFIX, _sprintf(fmt, args))
        sys.exit(1)

    def error(self, *args: Any) -> None:
        if self._enabled(LogLevel.ERROR):
            self.output(1, ERROR_PREFIX, _sprintln(args))

    def errorf(self, fmt: str, *args: Any) -> None:
        if self._enabled(LogLevel.ERROR):
            self.output(1, ERROR_PREFIX, _sprintf(fmt, args))

    def warn(self, *args: Any) -> None:
        if self._enabled(LogLevel.WARN):
            self.output(1, WARN_PREFIX, _sprintln(args))

    def warnf(self, fmt: str, *args: Any) -> None:
        if self._enabled(LogLevel.WARN):
            self.output(1, WARN_PREFIX, _sprintf(fmt, args))

    def info(self, *args: Any) -> None:
        if self._enabled(LogLevel.INFO):
            self.output(1, INFO_PREFIX, _sprintln(args))

    def infof(self, fmt: str, *args: Any) -> None:
        if self._enabled(LogLevel.INFO):
            self.output(1, INFO_PREFIX, _sprintf(fmt, args))

    def debug(self, *args: Any) -> None:
        if self._enabled(LogLevel.ALL):
            self.output(1, DEBUG_PREFIX, _sprintln(args))

    def debugf(self, fmt: str, *args: Any) -> None:
        if self._enabled(LogLevel.ALL):
            self.output(1, DEBUG_PREFIX, _sprintf(fmt, args))

    def trace(self, *args: Any) -> None:
        if self._enabled(LogLevel.ALL):
            self.output(1, TRACE_PREFIX, _sprintln(args))

    def tracef(self, fmt: str, *args: Any) -> None:
        if self._enabled(LogLevel.ALL):
            self.output(1, TRACE_PREFIX, _sprintf(fmt, args))


register_logger(Logger(sys.stdout))