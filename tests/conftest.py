"""
Pytest configuration and shared fixtures for the smoke harness tests.

Provides a mock metrics server that mimics the exporter's /metrics endpoint,
including an endpoint that only starts listening after a delay.
"""

import os
import socket
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer

import pytest

SAMPLE_EXPOSITION = """\
# TYPE java_lang_Memory_NonHeapMemoryUsage_committed gauge
# HELP java_lang_Memory_NonHeapMemoryUsage_committed java.lang.management.MemoryUsage (java.lang<type=Memory><NonHeapMemoryUsage>committed)
java_lang_Memory_NonHeapMemoryUsage_committed 2.4510464E7
# TYPE io_prometheus_jmx_tabularData_Server_1_Disk_Usage_Table_size gauge
io_prometheus_jmx_tabularData_Server_1_Disk_Usage_Table_size{source="/dev/sda1"} 7.516192768E9
io_prometheus_jmx_tabularData_Server_1_Disk_Usage_Table_size{source="/dev/sda2"} 1.5032385536E10
# TYPE io_prometheus_jmx_tabularData_Server_2_Disk_Usage_Table_size gauge
io_prometheus_jmx_tabularData_Server_2_Disk_Usage_Table_size{source="/dev/sda1"} 2.5769803776E10
io_prometheus_jmx_tabularData_Server_2_Disk_Usage_Table_size{source="/dev/sda2"} 1.073741824E11
# EOF
"""


def find_free_port():
    """Find a free local port."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
        s.bind(("127.0.0.1", 0))
        return s.getsockname()[1]


class MockMetricsHandler(BaseHTTPRequestHandler):
    """HTTP request handler that serves a fixed exposition body."""

    def do_GET(self):
        self.server.requests.append(
            {"path": self.path, "accept": self.headers.get("Accept")}
        )
        if self.path != "/metrics":
            self.send_response(404)
            self.end_headers()
            return

        body = self.server.body.encode("utf-8")
        self.send_response(self.server.status)
        self.send_header("Content-Type", "application/openmetrics-text; version=1.0.0; charset=utf-8")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        pass  # Suppress default request logging


class MockMetricsServer:
    """Mock exporter endpoint running in a background thread."""

    def __init__(self, body=SAMPLE_EXPOSITION, status=200, host="127.0.0.1", port=None):
        self.host = host
        self.port = port or find_free_port()
        self.body = body
        self.status = status
        self.requests = []
        self.server = None
        self.thread = None
        self._timer = None

    def start(self, delay=0.0):
        """Start serving, optionally only after delay seconds."""
        if delay > 0:
            self._timer = threading.Timer(delay, self._serve)
            self._timer.daemon = True
            self._timer.start()
        else:
            self._serve()

    def _serve(self):
        server = HTTPServer((self.host, self.port), MockMetricsHandler)
        server.body = self.body
        server.status = self.status
        server.requests = self.requests
        self.thread = threading.Thread(target=server.serve_forever, daemon=True)
        self.thread.start()
        self.server = server

    def stop(self):
        if self._timer:
            self._timer.cancel()
        if self.server:
            self.server.shutdown()
            self.server.server_close()
        if self.thread:
            self.thread.join(timeout=1)

    @property
    def url(self):
        return f"http://{self.host}:{self.port}/metrics"


@pytest.fixture
def metrics_server_factory():
    """Create mock metrics servers that are stopped after the test."""
    servers = []

    def create(**kwargs):
        server = MockMetricsServer(**kwargs)
        servers.append(server)
        return server

    yield create

    for server in servers:
        server.stop()


@pytest.fixture
def metrics_server(metrics_server_factory):
    """A running mock exporter serving SAMPLE_EXPOSITION."""
    server = metrics_server_factory()
    server.start()
    return server


@pytest.fixture
def sample_lines():
    """Scraped lines of SAMPLE_EXPOSITION."""
    return SAMPLE_EXPOSITION.rstrip("\n").split("\n")


@pytest.fixture
def unused_url():
    """A metrics URL nothing is listening on."""
    return f"http://127.0.0.1:{find_free_port()}/metrics"


@pytest.fixture
def clean_env(monkeypatch):
    """Remove harness settings inherited from the calling environment."""
    for name in list(os.environ):
        if name.startswith("AGENT_SMOKE_") or name == "LOG_LEVEL":
            monkeypatch.delenv(name, raising=False)
    return monkeypatch


def pytest_collection_modifyitems(config, items):
    """Automatically mark tests based on their location."""
    for item in items:
        if "unit" in str(item.fspath):
            item.add_marker(pytest.mark.unit)
        elif "integration" in str(item.fspath):
            item.add_marker(pytest.mark.integration)
            item.add_marker(pytest.mark.slow)

        if "docker" in str(item.fspath) or "docker" in item.name.lower():
            item.add_marker(pytest.mark.docker)
