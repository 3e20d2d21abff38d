"""Proxy relaying connections and packets from inbound servers to an outbound client."""

from __future__ import annotations

import os
import platform
import queue
import random
import sys
import threading
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from trojango import config
from trojango import logger as log
from trojango.common import VERSION, TrojanError

NAME = "PROXY"
MAX_PACKET_SIZE = 1024 * 8
_CHUNK = 32 * 1024
_POLL = 0.2


@dataclass
class ProxyConfig:
    """Settings shared by every run type."""

    run_type: str = field(default="", metadata={"json": "run_type", "yaml": "run-type"})
    log_level: int = field(default=1, metadata={"json": "log_level", "yaml": "log-level"})
    log_file: str = field(default="", metadata={"json": "log_file", "yaml": "log-file"})


config.register_config_creator(NAME, ProxyConfig)


def _copy_stream(dst: Any, src: Any, results: queue.Queue) -> None:
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


def _copy_packets(dst: Any, src: Any, results: queue.Queue) -> None:
    try:
        while True:
            data, metadata = src.read_with_metadata(MAX_PACKET_SIZE)
            if not data:
                break
            dst.write_with_metadata(data, metadata)
    except OSError as exc:
        results.put(exc)
        return
    results.put(None)


class Proxy:
    """Relays between inbound ``sources`` and the outbound ``sink``.

    A source offers ``accept_conn()``, ``accept_packet()`` and ``close()``.
    Accepted connections have ``metadata.address``, ``recv``, ``sendall`` and
    ``close``; packet connections have ``read_with_metadata(size)`` returning
    ``(data, metadata)``, ``write_with_metadata(data, metadata)`` and ``close``.
    The sink offers ``dial_conn(address)``, ``dial_packet()`` and ``close()``.
    """

    def __init__(self, sources: list[Any], sink: Any) -> None:
        self.sources = list(sources)
        self.sink = sink
        self._closed = threading.Event()

    def run(self) -> None:
        """Start relaying and block until ``close`` is called."""
        for source in self.sources:
            threading.Thread(target=self._conn_loop, args=(source,), daemon=True).start()
            threading.Thread(target=self._packet_loop, args=(source,), daemon=True).start()
        self._closed.wait()

    def close(self) -> None:
        """Stop relaying and close the sink and every source."""
        self._closed.set()
        self.sink.close()
        for source in self.sources:
            source.close()

    def _conn_loop(self, source: Any) -> None:
        while True:
            try:
                inbound = source.accept_conn()
            except Exception as exc:
                if self._closed.is_set():
                    log.debug("exiting")
                    return
                log.error(TrojanError("failed to accept connection").base(exc))
                continue
            threading.Thread(target=self._relay_conn, args=(inbound,), daemon=True).start()

    def _packet_loop(self, source: Any) -> None:
        while True:
            try:
                inbound = source.accept_packet()
            except Exception as exc:
                if self._closed.is_set():
                    log.debug("exiting")
                    return
                log.error(TrojanError("failed to accept packet").base(exc))
                continue
            threading.Thread(target=self._relay_packet, args=(inbound,), daemon=True).start()

    def _wait(self, results: queue.Queue, what: str) -> None:
        while not self._closed.is_set():
            try:
                err = results.get(timeout=_POLL)
            except queue.Empty:
                continue
            if err is not None:
                log.error(err)
            log.debug(f"{what} relay ends")
            return
        log.debug(f"shutting down {what} relay")

    def _relay_conn(self, inbound: Any) -> None:
        try:
            try:
                outbound = self.sink.dial_conn(inbound.metadata.address)
            except Exception as exc:
                log.error(TrojanError("proxy failed to dial connection").base(exc))
                return
            try:
                results: queue.Queue = queue.Queue()
                threading.Thread(target=_copy_stream, args=(inbound, outbound, results), daemon=True).start()
                threading.Thread(target=_copy_stream, args=(outbound, inbound, results), daemon=True).start()
                self._wait(results, "conn")
            finally:
                outbound.close()
        finally:
            inbound.close()

    def _relay_packet(self, inbound: Any) -> None:
        try:
            try:
                outbound = self.sink.dial_packet()
            except Exception as exc:
                log.error(TrojanError("proxy failed to dial packet").base(exc))
                return
            try:
                results: queue.Queue = queue.Queue()
                threading.Thread(target=_copy_packets, args=(inbound, outbound, results), daemon=True).start()
                threading.Thread(target=_copy_packets, args=(outbound, inbound, results), daemon=True).start()
                self._wait(results, "packet")
            finally:
                outbound.close()
        finally:
            inbound.close()


Creator = Callable[[dict], Proxy]
_creators: dict[str, Creator] = {}


def register_proxy_creator(name: str, creator: Creator) -> None:
    """Register the factory building a proxy for run type ``name``."""
    _creators[name] = creator


def new_proxy_from_config_data(data: bytes | str, is_json: bool) -> Any:
    """Parse configuration data and build the proxy its run type names."""
    ctx = {NAME + "_ID": random.getrandbits(63)}
    if is_json:
        ctx = config.with_json_config(ctx, data)
    else:
        ctx = config.with_yaml_config(ctx, data)
    cfg = config.from_context(ctx, NAME)
    create = _creators.get(cfg.run_type.upper())
    if create is None:
        raise TrojanError("unknown proxy type: " + cfg.run_type)
    log.set_log_level(cfg.log_level)
    if cfg.log_file:
        try:
            handle = open(cfg.log_file, "a", encoding="utf-8")
        except OSError as exc:
            raise TrojanError("failed to open log file").base(exc) from exc
        log.set_output(handle)
    return create(ctx)


def _detect_and_read_config(path: str) -> tuple[bytes, bool]:
    if path.endswith(".json"):
        is_json = True
    elif path.endswith((".yaml", ".yml")):
        is_json = False
    else:
        log.fatalf("unsupported config format: %s. use .yaml or .json instead.", path)
        raise TrojanError(f"unsupported config format: {path}")
    with open(path, "rb") as handle:
        return handle.read(), is_json


def _start(data: bytes, is_json: bool) -> None:
    try:
        proxy = new_proxy_from_config_data(data, is_json)
    except (TrojanError, OSError) as exc:
        log.fatal(exc)
        raise
    proxy.run()


class ConfigOption:
    """Runs the proxy from a config file, or from a default file name."""

    DEFAULT_PATHS = ("config.json", "config.yml", "config.yaml")

    def __init__(self, path: str = "") -> None:
        self.path = path

    def name(self) -> str:
        return NAME

    def handle(self) -> None:
        data: bytes | None = None
        is_json = False
        if not self.path:
            log.warn("no specified config file, use default path to detect config file")
            for candidate in self.DEFAULT_PATHS:
                log.warn("try to load config from default path:", candidate)
                try:
                    data, is_json = _detect_and_read_config(candidate)
                except OSError as exc:
                    log.warn(exc)
                    continue
                break
        else:
            try:
                data, is_json = _detect_and_read_config(self.path)
            except OSError as exc:
                log.fatal(exc)
                raise
        if data is not None:
            log.info("trojan-go", VERSION, "initializing")
            _start(data, is_json)
        log.fatal("no valid config")

    def priority(self) -> int:
        return -1


class StdinOption:
    """Runs the proxy from configuration read on standard input."""

    def __init__(self, fmt: str | None = "disabled", suppress_hint: bool = False) -> None:
        self.fmt = fmt
        self.suppress_hint = suppress_hint

    def name(self) -> str:
        return NAME + "_STDIN"

    def is_format_json(self) -> bool:
        """Return whether the input is JSON; raise if reading stdin is disabled."""
        if self.fmt is None:
            raise TrojanError("format specifier is nil")
        if self.fmt == "disabled":
            raise TrojanError("reading from stdin is disabled")
        return self.fmt.lower() == "json"

    def handle(self) -> None:
        is_json = self.is_format_json()
        if not self.suppress_hint:
            print(f"Trojan-Go {VERSION} ({sys.platform}/{platform.machine() or os.name})")
            kind = "JSON" if is_json else "YAML"
            print(f"Reading {kind} configuration from stdin.")
        try:
            data = sys.stdin.buffer.read() if hasattr(sys.stdin, "buffer") else sys.stdin.read().encode()
        except OSError as exc:
            log.fatalf("Failed to read from stdin: %s", exc)
            raise
        _start(data, is_json)

    def priority(self) -> int:
        return 0