"""Shared fixtures: a fake Logstash API served from a background thread."""

import socket
import threading

import pytest

from logstash_exporter.mock.fake_logstash_server import make_fake_server


@pytest.fixture
def logstash_server():
    """Factory: start a fake Logstash API and return its base URL."""
    servers = []

    def start(routes=None) -> str:
        server = make_fake_server(routes=routes)
        thread = threading.Thread(target=server.serve_forever, daemon=True)
        thread.start()
        servers.append(server)
        return f"http://127.0.0.1:{server.server_port}"

    yield start

    for server in servers:
        server.shutdown()
        server.server_close()


@pytest.fixture
def unreachable_endpoint() -> str:
    """A base URL nothing is listening on."""
    with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as sock:
        sock.bind(("127.0.0.1", 0))
        port = sock.getsockname()[1]
    return f"http://127.0.0.1:{port}"
