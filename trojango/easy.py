"""Quick start: build a client or server configuration from a few options."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field

from trojango import logger as log
from trojango.common import TrojanError
from trojango.proxy import new_proxy_from_config_data

DEFAULT_CLIENT_LOCAL = "127.0.0.1:1080"
DEFAULT_SERVER_REMOTE = "127.0.0.1:80"
DEFAULT_SERVER_LOCAL = "0.0.0.0:443"


@dataclass
class ClientConfig:
    run_type: str
    local_addr: str
    local_port: int
    remote_addr: str
    remote_port: int
    password: list[str]

    def as_dict(self) -> dict:
        return asdict(self)


@dataclass
class TLSConfig:
    sni: str = ""
    cert: str = ""
    key: str = ""


@dataclass
class ServerConfig:
    run_type: str
    local_addr: str
    local_port: int
    remote_addr: str
    remote_port: int
    password: list[str]
    ssl: TLSConfig = field(default_factory=TLSConfig)

    def as_dict(self) -> dict:
        return asdict(self)


def _split_host_port(address: str) -> tuple[str, str]:
    if address.startswith("["):
        end = address.find("]")
        if end < 0:
            raise ValueError("missing ']' in address")
        rest = address[end + 1:]
        if not rest.startswith(":"):
            raise ValueError("missing port in address")
        return address[1:end], rest[1:]
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError("missing port in address")
    if ":" in host:
        raise ValueError("too many colons in address")
    return host, port


def _parse(address: str, which: str) -> tuple[str, int]:
    try:
        host, port = _split_host_port(address)
    except ValueError as exc:
        raise TrojanError(f"invalid {which} addr format:" + address).base(exc) from exc
    try:
        return host, int(port)
    except ValueError as exc:
        raise TrojanError(f"invalid {which} port: {port}") from exc


class EasyOption:
    """Handler for the -server / -client quick-start options."""

    def __init__(self, server: bool = False, client: bool = False, password: str = "",
                 local: str = "", remote: str = "", cert: str = "server.crt",
                 key: str = "server.key") -> None:
        self.server = server
        self.client = client
        self.password = password
        self.local = local
        self.remote = remote
        self.cert = cert
        self.key = key

    def name(self) -> str:
        return "easy"

    def priority(self) -> int:
        return 50

    def client_config(self) -> ClientConfig:
        """Build the client configuration; raise TrojanError on a bad address."""
        if not self.local:
            log.warn("client local addr is unspecified, using " + DEFAULT_CLIENT_LOCAL)
        local_host, local_port = _parse(self.local or DEFAULT_CLIENT_LOCAL, "local")
        remote_host, remote_port = _parse(self.remote, "remote")
        return ClientConfig("client", local_host, local_port, remote_host, remote_port, [self.password])

    def server_config(self) -> ServerConfig:
        """Build the server configuration; raise TrojanError on a bad address."""
        if not self.remote:
            log.warn("server remote addr is unspecified, using " + DEFAULT_SERVER_REMOTE)
        if not self.local:
            log.warn("server local addr is unspecified, using " + DEFAULT_SERVER_LOCAL)
        local_host, local_port = _parse(self.local or DEFAULT_SERVER_LOCAL, "local")
        remote_host, remote_port = _parse(self.remote or DEFAULT_SERVER_REMOTE, "remote")
        return ServerConfig("server", local_host, local_port, remote_host, remote_port,
                            [self.password], TLSConfig(cert=self.cert, key=self.key))

    def handle(self) -> None:
        if not self.server and not self.client:
            raise TrojanError("empty")
        if not self.password:
            log.fatal("empty password is not allowed")
            raise TrojanError("empty password is not allowed")
        log.info("easy mode enabled, trojan-go will NOT use the config file")
        try:
            cfg = self.client_config() if self.client else self.server_config()
        except TrojanError as exc:
            log.fatal(exc)
            raise
        data = json.dumps(cfg.as_dict(), separators=(",", ":"))
        log.info("generated config:")
        log.info(data)
        try:
            proxy = new_proxy_from_config_data(data.encode("utf-8"), True)
        except (TrojanError, OSError) as exc:
            log.fatal(exc)
            raise
        proxy.run()