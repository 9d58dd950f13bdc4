"""
Fake Logstash monitoring API for testing without a Logstash node.

    python -m logstash_exporter.mock.fake_logstash_server
    logstash_exporter --logstash.endpoint http://localhost:9600
"""

from __future__ import annotations

import json
import logging
from http.server import BaseHTTPRequestHandler, ThreadingHTTPServer
from typing import Dict, Optional, Tuple, Union

import click

log = logging.getLogger(__name__)

# Trimmed from a Logstash 7.17 node
NODE_STATS = {
    "host": "ls-1",
    "version": "7.17.9",
    "http_address": "127.0.0.1:9600",
    "id": "2c0d6a3e-5b3a-4f0c-9d8e-7b1f0b0a2a11",
    "name": "ls-1",
    "jvm": {
        "threads": {"count": 43, "peak_count": 45},
        "mem": {
            "heap_used_percent": 22,
            "heap_committed_in_bytes": 1037959168,
            "heap_max_in_bytes": 1037959168,
            "heap_used_in_bytes": 234881024,
            "non_heap_used_in_bytes": 154327040,
            "non_heap_committed_in_bytes": 170000384,
            "pools": {
                "young": {
                    "peak_used_in_bytes": 71630848,
                    "used_in_bytes": 28311552,
                    "peak_max_in_bytes": 71630848,
                    "max_in_bytes": 71630848,
                    "committed_in_bytes": 71630848,
                },
                "old": {
                    "peak_used_in_bytes": 198000000,
                    "used_in_bytes": 197000000,
                    "peak_max_in_bytes": 957415424,
                    "max_in_bytes": 957415424,
                    "committed_in_bytes": 957415424,
                },
            },
        },
        "gc": {
            "collectors": {
                "old": {"collection_time_in_millis": 120, "collection_count": 2},
                "young": {"collection_time_in_millis": 3400, "collection_count": 85},
            },
        },
        "uptime_in_millis": 3600000,
    },
    "process": {
        "open_file_descriptors": 110,
        "peak_open_file_descriptors": 112,
        "max_file_descriptors": 1048576,
        "mem": {"total_virtual_in_bytes": 5486432256},
        "cpu": {
            "total_in_millis": 251000,
            "percent": 3,
            "load_average": {"1m": 0.52, "5m": 0.41, "15m": 0.33},
        },
    },
    "events": {
        "in": 1000,
        "filtered": 1000,
        "out": 990,
        "duration_in_millis": 4500,
        "queue_push_duration_in_millis": 120,
    },
    "reloads": {"successes": 1, "failures": 0},
    "pipelines": {
        "main": {
            "events": {
                "in": 1000,
                "filtered": 1000,
                "out": 990,
                "duration_in_millis": 4500,
                "queue_push_duration_in_millis": 120,
            },
            "plugins": {
                "inputs": [
                    {"id": "beats-in", "name": "beats",
                     "events": {"out": 1000, "queue_push_duration_in_millis": 120}},
                ],
                "codecs": [],
                "filters": [
                    {"id": "grok-1", "name": "grok",
                     "events": {"in": 1000, "out": 1000, "duration_in_millis": 2100},
                     "matches": 960, "failures": 40},
                ],
                "outputs": [
                    {"id": "es-out", "name": "elasticsearch",
                     "events": {"in": 1000, "out": 990, "duration_in_millis": 2300}},
                ],
            },
            "reloads": {"successes": 0, "failures": 0},
            "queue": {"type": "memory", "events_count": 0, "queue_size_in_bytes": 0,
                      "max_queue_size_in_bytes": 0},
            "dead_letter_queue": {"queue_size_in_bytes": 1},
        },
    },
}

NODE_INFO = {
    "host": "ls-1",
    "version": "7.17.9",
    "http_address": "127.0.0.1:9600",
    "id": "2c0d6a3e-5b3a-4f0c-9d8e-7b1f0b0a2a11",
    "name": "ls-1",
    "status": "green",
    "pipelines": {
        "main": {"workers": 4, "batch_size": 125, "batch_delay": 50},
    },
    "os": {"name": "Linux", "arch": "amd64", "version": "5.15.0", "available_processors": 4},
    "jvm": {
        "pid": 1,
        "version": "11.0.18",
        "vm_name": "OpenJDK 64-Bit Server VM",
        "vm_version": "11.0.18",
        "vm_vendor": "Eclipse Adoptium",
        "start_time_in_millis": 1700000000000,
    },
}

# path -> (status, body); dict bodies are sent as JSON
Route = Tuple[int, Union[dict, str]]

DEFAULT_ROUTES: Dict[str, Route] = {
    "/_node/stats": (200, NODE_STATS),
    "/_node": (200, NODE_INFO),
}


class _LogstashHandler(BaseHTTPRequestHandler):
    routes: Dict[str, Route] = DEFAULT_ROUTES

    def do_GET(self):
        path = self.path.split("?", 1)[0].rstrip("/") or "/"
        route = self.routes.get(path)
        if route is None:
            self.send_response(404)
            self.end_headers()
            return

        status, payload = route
        if 300 <= status < 400:
            # payload is the redirect target
            self.send_response(status)
            self.send_header("Location", payload)
            self.send_header("Content-Length", "0")
            self.end_headers()
            return

        if isinstance(payload, str):
            body = payload.encode()
            content_type = "text/plain; charset=utf-8"
        else:
            body = json.dumps(payload).encode()
            content_type = "application/json"

        self.send_response(status)
        self.send_header("Content-Type", content_type)
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format, *args):
        log.debug("fake logstash: %s", format % args)


def make_handler(routes: Dict[str, Route]) -> type:
    """A handler class answering `routes` instead of the defaults."""
    return type("_CustomLogstashHandler", (_LogstashHandler,), {"routes": routes})


def make_fake_server(host: str = "127.0.0.1", port: int = 0,
                     routes: Optional[Dict[str, Route]] = None) -> ThreadingHTTPServer:
    """Bind a fake API; port 0 picks a free one. Call serve_forever() to run it."""
    handler = _LogstashHandler if routes is None else make_handler(routes)
    return ThreadingHTTPServer((host, port), handler)


@click.command()
@click.option("--host", default="127.0.0.1", show_default=True)
@click.option("--port", default=9600, show_default=True)
def run_fake_server(host: str, port: int):
    """Serve canned /_node and /_node/stats responses until Ctrl+C."""
    logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")
    server = make_fake_server(host, port)
    log.info("Fake Logstash API on http://%s:%d (%s)", host, server.server_port,
             ", ".join(sorted(server.RequestHandlerClass.routes)))
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()


if __name__ == "__main__":
    run_fake_server()
