import io
import socket
import threading
from types import SimpleNamespace

import pytest

from trojango import config
from trojango import proxy as proxy_mod
from trojango.common import TrojanError
from trojango.proxy import ConfigOption, Proxy, ProxyConfig, StdinOption


class _Conn:
    def __init__(self, sock, address=None):
        self.sock = sock
        self.metadata = SimpleNamespace(address=address)

    def recv(self, size):
        return self.sock.recv(size)

    def sendall(self, data):
        self.sock.sendall(data)

    def close(self):
        self.sock.close()


class _Source:
    def __init__(self, conn):
        self._conns = [conn]
        self._closed = threading.Event()

    def accept_conn(self):
        if self._conns:
            return self._conns.pop()
        self._closed.wait()
        raise OSError("closed")

    def accept_packet(self):
        self._closed.wait()
        raise OSError("closed")

    def close(self):
        self._closed.set()


class _Sink:
    def __init__(self, sock):
        self.sock = sock
        self.dialled = []
        self.closed = False

    def dial_conn(self, address):
        self.dialled.append(address)
        return _Conn(self.sock)

    def dial_packet(self):
        raise OSError("no packets")

    def close(self):
        self.closed = True


def test_relays_connection():
    a1, a2 = socket.socketpair()
    b1, b2 = socket.socketpair()
    source = _Source(_Conn(a2, address="target:1"))
    sink = _Sink(b2)
    p = Proxy([source], sink)
    runner = threading.Thread(target=p.run, daemon=True)
    runner.start()
    b1.settimeout(5)
    a1.settimeout(5)
    a1.sendall(b"ping")
    assert b1.recv(16) == b"ping"
    b1.sendall(b"pong")
    assert a1.recv(16) == b"pong"
    p.close()
    runner.join(5)
    assert not runner.is_alive()
    assert sink.closed
    assert sink.dialled == ["target:1"]
    a1.close()
    b1.close()


def test_new_proxy_dispatches_by_run_type():
    built = []

    def creator(ctx):
        built.append(config.from_context(ctx, proxy_mod.NAME))
        return "proxy"

    proxy_mod.register_proxy_creator("TESTRUN", creator)
    assert proxy_mod.new_proxy_from_config_data(b'{"run_type": "testrun", "log_level": 5}', True) == "proxy"
    assert built[-1].run_type == "testrun"
    assert built[-1].log_level == 5
    assert proxy_mod.new_proxy_from_config_data(b"run-type: TestRun\nlog-level: 5\n", False) == "proxy"
    assert built[-1].run_type == "TestRun"


def test_unknown_run_type():
    with pytest.raises(TrojanError, match="unknown proxy type: nope"):
        proxy_mod.new_proxy_from_config_data(b'{"run_type": "nope"}', True)


def test_default_config_values():
    cfg = ProxyConfig()
    assert (cfg.run_type, cfg.log_level, cfg.log_file) == ("", 1, "")


def test_option_names_and_priorities():
    assert (ConfigOption().name(), ConfigOption().priority()) == ("PROXY", -1)
    assert (StdinOption().name(), StdinOption().priority()) == ("PROXY_STDIN", 0)


def test_stdin_format():
    assert StdinOption("JSON").is_format_json() is True
    assert StdinOption("yaml").is_format_json() is False
    with pytest.raises(TrojanError, match="disabled"):
        StdinOption("disabled").is_format_json()
    with pytest.raises(TrojanError, match="nil"):
        StdinOption(None).is_format_json()


def test_disabled_stdin_handle_raises():
    with pytest.raises(TrojanError):
        StdinOption().handle()


def test_stdin_bad_config_exits(monkeypatch):
    monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(b'{"run_type": "nope"}')))
    with pytest.raises(SystemExit):
        StdinOption("json", True).handle()


def test_config_option_unsupported_suffix_exits():
    with pytest.raises(SystemExit):
        ConfigOption("config.txt").handle()


def test_config_option_missing_file_exits(tmp_path):
    with pytest.raises(SystemExit):
        ConfigOption(str(tmp_path / "missing.json")).handle()


def test_config_option_no_default_file_exits(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(SystemExit) as info:
        ConfigOption().handle()
    assert info.value.code == 1