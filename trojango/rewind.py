"""Readers that can replay what they have read, and a delayed-flush writer."""

from __future__ import annotations

import logging
import socket
import threading
from typing import Any

_log = logging.getLogger(__name__)

_DISCARD_CHUNK = 128


class RewindReader:
    """Wraps a reader so that buffered bytes can be read again after ``rewind``.

    ``raw_reader`` is any object with a ``read(size)`` method returning bytes.
    """

    def __init__(self, raw_reader: Any) -> None:
        self._lock = threading.Lock()
        self._raw = raw_reader
        self._buf = bytearray()
        self._read_idx = 0
        self._rewound = False
        self._buffering = False
        self._buffer_size = 0

    def read(self, size: int) -> bytes:
        """Read up to ``size`` bytes, replaying buffered data after a rewind."""
        with self._lock:
            if self._rewound:
                if len(self._buf) > self._read_idx:
                    data = bytes(self._buf[self._read_idx:self._read_idx + size])
                    self._read_idx += len(data)
                    return data
                self._rewound = False
            data = self._raw.read(size)
            if self._buffering:
                self._buf += data
                if len(self._buf) > self._buffer_size * 2:
                    _log.debug("read too many bytes!")
            return data

    def read_byte(self) -> int:
        """Read a single byte; raise EOFError at end of stream."""
        data = self.read(1)
        if not data:
            raise EOFError("end of stream")
        return data[0]

    def discard(self, n: int) -> int:
        """Skip up to ``n`` bytes and return how many were skipped."""
        discarded = 0
        while discarded < n:
            chunk = self.read(min(_DISCARD_CHUNK, n - discarded))
            if not chunk:
                break
            discarded += len(chunk)
        return discarded

    def rewind(self) -> None:
        """Restart reading from the first buffered byte."""
        with self._lock:
            if self._buffer_size == 0:
                raise RuntimeError("no buffer")
            self._rewound = True
            self._read_idx = 0

    def stop_buffering(self) -> None:
        """Stop recording newly read bytes; already buffered bytes stay."""
        with self._lock:
            self._buffering = False

    def set_buffer_size(self, size: int) -> None:
        """Start buffering with ``size`` bytes capacity, or disable it with 0."""
        with self._lock:
            if size == 0:
                if not self._buffering:
                    raise RuntimeError("reader is disabled")
                self._buffering = False
                self._buf = bytearray()
                self._read_idx = 0
                self._buffer_size = 0
            else:
                if self._buffering:
                    raise RuntimeError("reader is buffering")
                self._buffering = True
                self._read_idx = 0
                self._buffer_size = size
                self._buf = bytearray()


class _SocketSource:
    def __init__(self, conn: socket.socket) -> None:
        self._conn = conn

    def read(self, size: int) -> bytes:
        return self._conn.recv(size)


class RewindConn(RewindReader):
    """A socket whose received bytes can be replayed."""

    def __init__(self, conn: socket.socket) -> None:
        super().__init__(_SocketSource(conn))
        self.conn = conn

    def recv(self, size: int) -> bytes:
        return self.read(size)

    def sendall(self, data: bytes) -> None:
        self.conn.sendall(data)

    def close(self) -> None:
        self.conn.close()

    def __enter__(self) -> "RewindConn":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


class StickyWriter:
    """Collects the first ``max_buffered`` writes and flushes them as one."""

    def __init__(self, raw_writer: Any, max_buffered: int = 0) -> None:
        self.raw_writer = raw_writer
        self.max_buffered = max_buffered
        self._pending = bytearray()

    def write(self, data: bytes) -> int:
        if self.max_buffered > 0:
            self.max_buffered -= 1
            self._pending += data
            if self.max_buffered != 0:
                return len(data)
            pending = bytes(self._pending)
            self._pending = bytearray()
            self.raw_writer.write(pending)
            return len(data)
        return self.raw_writer.write(data)