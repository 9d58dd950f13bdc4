"""Tests for the Prometheus bridge and the /metrics HTTP surface."""

import threading
import time

import httpx
import pytest
from prometheus_client import generate_latest

from logstash_exporter import exposition
from logstash_exporter.collector import build_collectors
from logstash_exporter.collector.base import Collector
from logstash_exporter.exposition import (
    make_app,
    make_registry,
    make_server_for,
    to_metric_families,
)
from logstash_exporter.metrics import MetricKind, MetricSample
from logstash_exporter.orchestrator import Orchestrator


class _BrokenCollector(Collector):
    def collect(self, sink):
        raise RuntimeError("upstream exploded")

    def name(self) -> str:
        return "broken"


@pytest.fixture
def exporter_url():
    """Factory: serve an orchestrator's /metrics and return the base URL."""
    servers = []

    def start(orchestrator: Orchestrator) -> str:
        server = make_server_for(make_app(make_registry(orchestrator)), "127.0.0.1", 0)
        threading.Thread(target=server.serve_forever, daemon=True).start()
        servers.append(server)
        return f"http://127.0.0.1:{server.server_port}"

    yield start

    for server in servers:
        server.shutdown()
        server.server_close()


def test_samples_grouped_into_families_in_first_seen_order():
    samples = [
        MetricSample("b_gauge", "B.", MetricKind.GAUGE, {"x": "1"}, 1.0),
        MetricSample("a_total", "A.", MetricKind.COUNTER, {}, 5.0),
        MetricSample("b_gauge", "B.", MetricKind.GAUGE, {"x": "2"}, 2.0),
    ]

    families = to_metric_families(samples)

    assert [f.name for f in families] == ["b_gauge", "a"]
    assert families[0].type == "gauge"
    assert [s.labels for s in families[0].samples] == [{"x": "1"}, {"x": "2"}]
    assert families[1].type == "counter"
    assert families[1].samples[0].name == "a_total"
    assert families[1].samples[0].value == 5.0


def test_registry_output_is_prometheus_text(logstash_server):
    orchestrator = Orchestrator(build_collectors(logstash_server()))
    text = generate_latest(make_registry(orchestrator)).decode()
    orchestrator.close()

    assert "# TYPE logstash_node_jvm_uptime_seconds gauge" in text
    assert "logstash_node_jvm_uptime_seconds 3600.0" in text
    assert "# TYPE logstash_node_events_in_total counter" in text
    assert "logstash_node_events_in_total 1000.0" in text
    assert 'logstash_exporter_scrape_duration_seconds{collector="node",result="success"}' in text
    assert 'logstash_exporter_scrape_duration_seconds{collector="info",result="success"}' in text
    assert "logstash_exporter_build_info{" in text


def test_registration_does_not_scrape():
    calls = []

    class _Counting(Collector):
        def collect(self, sink):
            calls.append(1)

        def name(self) -> str:
            return "counting"

    make_registry(Orchestrator({"counting": _Counting()}))
    assert calls == []


def test_metrics_endpoint_serves_partial_results(exporter_url):
    orchestrator = Orchestrator({"broken": _BrokenCollector()})
    url = exporter_url(orchestrator)

    response = httpx.get(url + "/metrics")

    assert response.status_code == 200
    assert response.headers["content-type"].startswith("text/plain")
    assert 'logstash_exporter_scrape_duration_seconds{collector="broken",result="error"}' in response.text


def test_every_scrape_runs_a_fresh_collection(exporter_url, logstash_server):
    orchestrator = Orchestrator(build_collectors(logstash_server()))
    url = exporter_url(orchestrator)

    try:
        first = httpx.get(url + "/metrics")
        second = httpx.get(url + "/metrics")
    finally:
        orchestrator.close()

    assert first.status_code == second.status_code == 200
    assert "logstash_info_node{" in first.text
    assert "logstash_info_node{" in second.text


def test_root_redirects_to_metrics(exporter_url):
    url = exporter_url(Orchestrator({}))

    response = httpx.get(url + "/")

    assert response.status_code == 301
    assert response.headers["location"] == "/metrics"


class _SleepyCollector(Collector):
    def __init__(self, delay: float):
        self._delay = delay

    def collect(self, sink):
        time.sleep(self._delay)
        sink.emit(MetricSample("sleepy_metric", "Sleepy.", MetricKind.GAUGE, {}, 1.0))

    def name(self) -> str:
        return "sleepy"


def test_concurrent_scrapes_are_served_in_parallel(exporter_url):
    url = exporter_url(Orchestrator({"sleepy": _SleepyCollector(1.0)}))
    statuses = []

    def scrape():
        statuses.append(httpx.get(url + "/metrics", timeout=10).status_code)

    threads = [threading.Thread(target=scrape) for _ in range(3)]
    began = time.perf_counter()
    for t in threads:
        t.start()
    for t in threads:
        t.join()
    elapsed = time.perf_counter() - began

    assert statuses == [200, 200, 200]
    assert elapsed < 2.0


def test_serve_binds_the_listen_address(monkeypatch):
    bound = []

    class _Server:
        server_port = 9198

        def serve_forever(self):
            raise KeyboardInterrupt

        def server_close(self):
            bound.append("closed")

    def fake_make_server_for(app, host, port):
        bound.append((host, port))
        return _Server()

    monkeypatch.setattr(exposition, "make_server_for", fake_make_server_for)

    exposition.serve(make_app(make_registry(Orchestrator({}))), "127.0.0.1:9198")

    assert bound == [("127.0.0.1", 9198), "closed"]


def test_serve_rejects_a_malformed_listen_address():
    with pytest.raises(ValueError):
        exposition.serve(make_app(make_registry(Orchestrator({}))), "no-port-here")
