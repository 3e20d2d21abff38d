"""Shared helpers: errors, hashing, asset lookup, traffic formatting and I/O."""

from __future__ import annotations

import hashlib
import logging
import os
import socket
import struct
import sys
import urllib.error
import urllib.parse
import urllib.request
from typing import Any

VERSION = "Custom Version"
COMMIT = "Unknown Git Commit ID"

KIB = 1024
MIB = KIB * 1024
GIB = MIB * 1024

ASSET_LOCATION_ENV = "TROJAN_GO_LOCATION_ASSET"

_log = logging.getLogger(__name__)


class TrojanError(Exception):
    """Error whose message can be chained with underlying causes."""

    def __init__(self, info: str = "") -> None:
        super().__init__(info)
        self.info = info

    def base(self, err: BaseException | None) -> "TrojanError":
        """Append the message of ``err`` to this error and return it."""
        if err is not None:
            self.info += " | " + str(err)
            self.args = (self.info,)
        return self

    def __str__(self) -> str:
        return self.info


def sha224_string(password: str) -> str:
    """Return the lower-case hex SHA-224 digest of ``password``."""
    return hashlib.sha224(password.encode("utf-8")).hexdigest()


def get_program_dir() -> str:
    """Return the absolute directory holding the running program."""
    program = sys.argv[0] if sys.argv else ""
    return os.path.abspath(os.path.dirname(program))


def get_asset_location(file: str) -> str:
    """Locate an asset file, honouring the asset location environment variable."""
    location = os.environ.get(ASSET_LOCATION_ENV, "")
    if location:
        _log.debug("env set: %s=%s", ASSET_LOCATION_ENV, location)
        return os.path.join(location, file)
    return os.path.join(get_program_dir(), file)


def _float32(value: float) -> float:
    return struct.unpack("f", struct.pack("f", value))[0]


def human_friendly_traffic(num_bytes: int) -> str:
    """Format a byte count as B, KiB, MiB or GiB."""
    if num_bytes <= KIB:
        return f"{num_bytes} B"
    if num_bytes <= MIB:
        return f"{_float32(_float32(num_bytes) / KIB):.2f} KiB"
    if num_bytes <= GIB:
        return f"{_float32(_float32(num_bytes) / MIB):.2f} MiB"
    return f"{_float32(_float32(num_bytes) / GIB):.2f} GiB"


def pick_port(network: str, host: str) -> int:
    """Return a currently free port for ``network`` ("tcp" or "udp") on ``host``, or 0."""
    kinds = {"tcp": socket.SOCK_STREAM, "udp": socket.SOCK_DGRAM}
    kind = kinds.get(network)
    if kind is None:
        return 0
    family = socket.AF_INET6 if ":" in host else socket.AF_INET
    for _ in range(16):
        try:
            with socket.socket(family, kind) as sock:
                sock.bind((host, 0))
                return int(sock.getsockname()[1])
        except OSError:
            continue
    return 0


def write_all_bytes(writer: Any, payload: bytes) -> None:
    """Write the whole payload, retrying on short writes."""
    view = memoryview(bytes(payload))
    while len(view) > 0:
        written = writer.write(view)
        if written is None:
            return
        if written <= 0:
            raise OSError("short write")
        view = view[written:]


def write_file(path: str | os.PathLike, payload: bytes) -> None:
    """Create or truncate ``path`` and write ``payload`` to it."""
    with open(path, "wb") as handle:
        write_all_bytes(handle, payload)


def fetch_http_content(target: str) -> bytes:
    """GET an http(s) URL and return the body; raise TrojanError on failure."""
    try:
        parsed = urllib.parse.urlsplit(target)
    except ValueError as exc:
        raise TrojanError(f"invalid URL: {target}") from exc

    if parsed.scheme.lower() not in ("http", "https"):
        raise TrojanError(f"invalid scheme: {parsed.scheme}")

    request = urllib.request.Request(target, method="GET", headers={"Connection": "close"})
    try:
        response = urllib.request.urlopen(request, timeout=30)
    except urllib.error.HTTPError as exc:
        exc.close()
        raise TrojanError(f"unexpected HTTP status code: {exc.code}") from exc
    except (urllib.error.URLError, OSError, ValueError) as exc:
        raise TrojanError(f"failed to dial to {target}") from exc

    with response:
        if response.status != 200:
            raise TrojanError(f"unexpected HTTP status code: {response.status}")
        try:
            return response.read()
        except OSError as exc:
            raise TrojanError("failed to read HTTP response") from exc