import threading
import time
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer

import pytest

PROXY_VARIABLES = (
    "HTTP_PROXY",
    "HTTPS_PROXY",
    "ALL_PROXY",
    "http_proxy",
    "https_proxy",
    "all_proxy",
)


class _PageHandler(BaseHTTPRequestHandler):
    routes: dict[str, tuple[int, str, bytes]] = {}
    drips: dict[str, tuple[str, int, float]] = {}

    def do_GET(self):  # noqa: N802 - stdlib hook name
        if self.path in self.drips:
            self._drip(*self.drips[self.path])
            return
        status, content_type, body = self.routes.get(
            self.path, (404, "text/plain", b"not found")
        )
        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def _drip(self, phase: str, rounds: int, interval: float) -> None:
        """Write the response a few bytes at a time, never idle long enough to trip a read timeout."""

        try:
            self.wfile.write(b"HTTP/1.0 200 OK\r\nContent-Type: text/html\r\n")
            if phase == "headers":
                for _ in range(rounds):
                    self.wfile.write(b"X-Slow: 1\r\n")
                    time.sleep(interval)
            self.wfile.write(b"\r\n<!DOCTYPE html>")
            if phase == "body":
                for _ in range(rounds):
                    self.wfile.write(b"<p>x</p>")
                    time.sleep(interval)
        except (BrokenPipeError, ConnectionResetError):
            pass

    def log_message(self, format, *args):  # noqa: A002 - stdlib signature
        pass


class LocalSite:
    def __init__(self, server: ThreadingHTTPServer, routes: dict, drips: dict) -> None:
        self._server = server
        self._routes = routes
        self._drips = drips

    @property
    def base_url(self) -> str:
        host, port = self._server.server_address[:2]
        return f"http://{host}:{port}"

    def add(self, path: str, body: str | bytes, status: int = 200, content_type: str = "text/html; charset=utf-8") -> str:
        if isinstance(body, str):
            body = body.encode("utf-8")
        self._routes[path] = (status, content_type, body)
        return self.base_url + path

    def add_drip(self, path: str, phase: str = "body", rounds: int = 30, interval: float = 0.2) -> str:
        self._drips[path] = (phase, rounds, interval)
        return self.base_url + path


@pytest.fixture
def direct_connection(monkeypatch):
    """Make requests connect directly rather than through an ambient proxy."""

    for name in PROXY_VARIABLES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("NO_PROXY", "*")


@pytest.fixture
def local_site(direct_connection):
    """Serve registered pages from 127.0.0.1 on a free port."""

    routes: dict[str, tuple[int, str, bytes]] = {}
    drips: dict[str, tuple[str, int, float]] = {}
    handler = type("Handler", (_PageHandler,), {"routes": routes, "drips": drips})
    server = ThreadingHTTPServer(("127.0.0.1", 0), handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield LocalSite(server, routes, drips)
    finally:
        server.shutdown()
        server.server_close()
        thread.join(timeout=5)
