"""
Prometheus exposition of orchestrator output.

LogstashCollector plugs the orchestrator into a prometheus_client
registry: every scrape of /metrics runs one orchestrator invocation and
turns the samples into metric families. The HTTP side is prometheus_client's
WSGI app served by wsgiref.
"""

from __future__ import annotations

import logging
import platform
from typing import Dict, Iterable, Iterator, List
from wsgiref.simple_server import WSGIRequestHandler, make_server

from prometheus_client import CollectorRegistry, make_wsgi_app
from prometheus_client.exposition import ThreadingWSGIServer
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from logstash_exporter import __version__
from logstash_exporter.config import parse_listen_address
from logstash_exporter.metrics import NAMESPACE, MetricKind, MetricSample
from logstash_exporter.orchestrator import Orchestrator

log = logging.getLogger(__name__)

METRICS_PATH = "/metrics"


def to_metric_families(samples: Iterable[MetricSample]) -> List[Metric]:
    """Group samples into families, in the order families are first seen.

    Label names of a family come from its first sample.
    """
    families: Dict[str, Metric] = {}
    label_names: Dict[str, List[str]] = {}

    for sample in samples:
        family = families.get(sample.family)
        if family is None:
            names = list(sample.labels)
            if sample.kind is MetricKind.COUNTER:
                family = CounterMetricFamily(sample.family, sample.help, labels=names)
            else:
                family = GaugeMetricFamily(sample.family, sample.help, labels=names)
            families[sample.family] = family
            label_names[sample.family] = names
        family.add_metric(sample.label_values(label_names[sample.family]), sample.value)

    return list(families.values())


def build_info() -> GaugeMetricFamily:
    info = GaugeMetricFamily(
        f"{NAMESPACE}_exporter_build_info",
        "A metric with a constant '1' value labeled by version and pythonversion.",
        labels=["version", "pythonversion"],
    )
    info.add_metric([__version__, platform.python_version()], 1.0)
    return info


class LogstashCollector:
    """prometheus_client custom collector backed by an Orchestrator."""

    def __init__(self, orchestrator: Orchestrator):
        self._orchestrator = orchestrator

    def describe(self) -> List[Metric]:
        # Keeps registration from running a scrape
        return []

    def collect(self) -> Iterator[Metric]:
        result = self._orchestrator.collect()
        if result.failed:
            log.debug("Scrape finished with failing collectors: %s", ", ".join(result.failed))
        yield from to_metric_families(result.samples)
        yield build_info()


def make_registry(orchestrator: Orchestrator) -> CollectorRegistry:
    registry = CollectorRegistry()
    registry.register(LogstashCollector(orchestrator))
    return registry


def make_app(registry: CollectorRegistry):
    """WSGI app serving /metrics and redirecting everything else there."""
    metrics_app = make_wsgi_app(registry)

    def app(environ, start_response):
        if environ.get("PATH_INFO", "/") == METRICS_PATH:
            return metrics_app(environ, start_response)
        start_response("301 Moved Permanently", [("Location", METRICS_PATH)])
        return [b""]

    return app


class _QuietHandler(WSGIRequestHandler):
    def log_message(self, format, *args):
        log.debug("%s - %s", self.address_string(), format % args)


def make_server_for(app, host: str, port: int):
    # One thread per request
    return make_server(host, port, app, server_class=ThreadingWSGIServer, handler_class=_QuietHandler)


def serve(app, listen_address: str) -> None:
    """Serve `app` on "host:port" until interrupted."""
    host, port = parse_listen_address(listen_address)
    server = make_server_for(app, host, port)
    log.info("Starting server on %s:%d", host, server.server_port)
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        pass
    finally:
        server.server_close()
        log.info("Server stopped")
