"""Forwards rejected inbound connections to another address in the background."""

from __future__ import annotations

import queue
import socket
import threading
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from trojango import logger as log
from trojango.common import TrojanError

_QUEUE_SIZE = 64
_POLL = 0.1
_CHUNK = 32 * 1024


def _default_dial(addr: Any) -> socket.socket:
    return socket.create_connection(addr)


@dataclass
class Redirection:
    """An inbound connection to be relayed to ``redirect_to``."""

    redirect_to: Any = None
    inbound_conn: Any = None
    dial: Callable[[Any], Any] | None = None


def _copy(dst: Any, src: Any, results: queue.Queue) -> None:
    try:
        while True:
            data = src.recv(_CHUNK)
            if not data:
                break
            dst.sendall(data)
    except OSError as exc:
        results.put(exc)
        return
    results.put(None)


class Redirector:
    """Runs queued redirections on background threads until closed."""

    def __init__(self) -> None:
        self._queue: queue.Queue[Redirection] = queue.Queue(maxsize=_QUEUE_SIZE)
        self._closed = threading.Event()
        self._worker = threading.Thread(target=self._work, daemon=True)
        self._worker.start()

    def redirect(self, redirection: Redirection) -> None:
        """Queue ``redirection``; gives up silently once the redirector is closed."""
        while not self._closed.is_set():
            try:
                self._queue.put(redirection, timeout=_POLL)
            except queue.Full:
                continue
            log.debug("redirect request")
            return
        log.debug("exiting")

    def close(self) -> None:
        """Stop the worker and abandon running relays."""
        self._closed.set()

    def __enter__(self) -> "Redirector":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()

    def _work(self) -> None:
        while not self._closed.is_set():
            try:
                redirection = self._queue.get(timeout=_POLL)
            except queue.Empty:
                continue
            threading.Thread(target=self._handle, args=(redirection,), daemon=True).start()
        log.debug("shutting down redirector")

    def _handle(self, redirection: Redirection) -> None:
        inbound = redirection.inbound_conn
        if inbound is None:
            log.error("nil inbound conn")
            return
        try:
            if redirection.redirect_to is None:
                log.error("nil redirection addr")
                return
            dial = redirection.dial or _default_dial
            try:
                peer = inbound.getpeername()
            except (OSError, AttributeError):
                peer = "unknown"
            log.warn("redirecting connection from", peer, "to", redirection.redirect_to)
            try:
                outbound = dial(redirection.redirect_to)
            except OSError as exc:
                log.error(TrojanError("failed to redirect to target address").base(exc))
                return
            try:
                self._relay(inbound, outbound)
            finally:
                outbound.close()
        finally:
            inbound.close()

    def _relay(self, inbound: Any, outbound: Any) -> None:
        results: queue.Queue = queue.Queue()
        threading.Thread(target=_copy, args=(outbound, inbound, results), daemon=True).start()
        threading.Thread(target=_copy, args=(inbound, outbound, results), daemon=True).start()
        while not self._closed.is_set():
            try:
                err = results.get(timeout=_POLL)
            except queue.Empty:
                continue
            if err is not None:
                log.error(TrojanError("failed to redirect").base(err))
            log.info("redirection done")
            return
        log.debug("exiting")