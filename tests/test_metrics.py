"""Tests for the sample types and the shared sink."""

import threading

import pytest

from logstash_exporter.collector.node_stats import NodeStatsCollector
from logstash_exporter.metrics import (
    SCRAPE_DURATION_FAMILY,
    MetricKind,
    MetricSample,
    MetricSink,
    ScrapeOutcome,
)


def _sample(value: float, **labels) -> MetricSample:
    return MetricSample("test_gauge", "A test gauge.", MetricKind.GAUGE, labels, value)


def test_samples_are_immutable():
    sample = _sample(1.0)
    with pytest.raises(AttributeError):
        sample.value = 2.0


def test_labels_are_read_only():
    sample = _sample(1.0, pipeline="main")
    with pytest.raises(TypeError):
        sample.labels["pipeline"] = "other"
    assert sample.labels == {"pipeline": "main"}


def test_samples_sharing_a_labels_dict_do_not_share_changes():
    labels = {"pipeline": "main"}
    first = MetricSample("a", "A.", MetricKind.GAUGE, labels, 1.0)
    second = MetricSample("b", "B.", MetricKind.GAUGE, labels, 2.0)

    labels["pipeline"] = "changed"

    assert first.labels["pipeline"] == "main"
    assert second.labels["pipeline"] == "main"


def test_collected_samples_cannot_be_relabelled(logstash_server):
    collector = NodeStatsCollector(logstash_server())
    sink = MetricSink()
    try:
        collector.collect(sink)
    finally:
        collector.close()

    pipeline = [s for s in sink.snapshot() if s.labels.get("pipeline") == "main"]
    assert len(pipeline) > 1
    with pytest.raises(TypeError):
        pipeline[0].labels["pipeline"] = "other"
    assert all(s.labels["pipeline"] == "main" for s in pipeline)


def test_label_values_follow_requested_order_and_default_to_empty():
    sample = _sample(1.0, b="2", a="1")
    assert sample.label_values(["a", "b", "c"]) == ["1", "2", ""]


def test_outcome_renders_as_labelled_duration_gauge():
    sample = ScrapeOutcome(collector="node", duration=0.25, result="error").to_sample()
    assert sample.family == SCRAPE_DURATION_FAMILY
    assert sample.kind is MetricKind.GAUGE
    assert sample.labels == {"collector": "node", "result": "error"}
    assert sample.value == 0.25


def test_sink_keeps_emission_order():
    sink = MetricSink()
    sink.emit(_sample(1))
    sink.extend([_sample(2), _sample(3)])
    assert [s.value for s in sink.snapshot()] == [1, 2, 3]


def test_extend_with_failing_iterable_appends_nothing():
    def broken():
        yield _sample(1)
        raise RuntimeError("mapping blew up")

    sink = MetricSink()
    with pytest.raises(RuntimeError):
        sink.extend(broken())
    assert len(sink) == 0


def test_snapshot_is_a_copy():
    sink = MetricSink()
    sink.emit(_sample(1))
    snapshot = sink.snapshot()
    snapshot.clear()
    assert len(sink) == 1


def test_concurrent_appends_lose_nothing():
    sink = MetricSink()
    start = threading.Barrier(50)

    def writer(worker: int):
        start.wait()
        for i in range(100):
            sink.emit(_sample(i, worker=str(worker)))

    threads = [threading.Thread(target=writer, args=(w,)) for w in range(50)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    samples = sink.snapshot()
    assert len(samples) == 5000
    for worker in range(50):
        values = [s.value for s in samples if s.labels["worker"] == str(worker)]
        assert values == list(range(100))
