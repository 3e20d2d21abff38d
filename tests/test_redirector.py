import http.server
import socket
import threading
import time

import pytest

from trojango.redirector import Redirection, Redirector


class _Hello(http.server.BaseHTTPRequestHandler):
    protocol_version = "HTTP/1.1"

    def do_GET(self):
        body = b"HelloWorld"
        self.send_response(200)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, *args):
        pass


@pytest.fixture
def http_server():
    server = http.server.ThreadingHTTPServer(("127.0.0.1", 0), _Hello)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield server.server_address
    server.shutdown()
    server.server_close()


def _pair():
    listener = socket.socket()
    listener.bind(("127.0.0.1", 0))
    listener.listen(1)
    conn1 = socket.create_connection(listener.getsockname())
    conn2, _ = listener.accept()
    listener.close()
    return conn1, conn2


def _wait_closed(sock, timeout=5.0):
    deadline = time.monotonic() + timeout
    while sock.fileno() != -1 and time.monotonic() < deadline:
        time.sleep(0.05)
    return sock.fileno()


def test_redirects_to_http_server(http_server):
    redir = Redirector()
    redir.redirect(Redirection())
    redir.redirect(Redirection(redirect_to=None, inbound_conn=None))
    conn1, conn2 = _pair()
    redirection = Redirection(redirect_to=http_server, inbound_conn=conn2)
    redir.redirect(redirection)
    conn1.settimeout(5)
    conn1.sendall(b"GET / HTTP/1.1\r\nHost: localhost\r\n\r\n")
    data = b""
    while b"HelloWorld" not in data:
        chunk = conn1.recv(1024)
        if not chunk:
            break
        data += chunk
    conn1.close()
    redir.close()
    assert data[:15] == b"HTTP/1.1 200 OK"
    assert data[-10:] == b"HelloWorld"
    assert _wait_closed(redirection.inbound_conn) == -1


def test_missing_address_closes_inbound():
    with Redirector() as redir:
        conn1, conn2 = _pair()
        conn1.settimeout(5)
        redirection = Redirection(redirect_to=None, inbound_conn=conn2)
        redir.redirect(redirection)
        assert conn1.recv(16) == b""
        conn1.close()
        assert _wait_closed(redirection.inbound_conn) == -1


def test_custom_dial_is_used():
    dialled = []
    done = threading.Event()

    def dial(addr):
        dialled.append(addr)
        done.set()
        raise OSError("refused")

    with Redirector() as redir:
        conn1, conn2 = _pair()
        conn1.settimeout(5)
        redirection = Redirection(redirect_to=("192.0.2.1", 1), inbound_conn=conn2, dial=dial)
        redir.redirect(redirection)
        assert done.wait(5) is True
        assert conn1.recv(16) == b""
        conn1.close()
        assert _wait_closed(redirection.inbound_conn) == -1
    assert dialled == [redirection.redirect_to]
    assert dialled == [("192.0.2.1", 1)]