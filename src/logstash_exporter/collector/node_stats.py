"""
Collector for /_node/stats.

Maps JVM, process, event, reload, queue and per-plugin statistics into
samples prefixed logstash_node_. Whether a field is a counter or a gauge
is fixed in the tables below. Millisecond fields are exported in seconds.
"""

from __future__ import annotations

from typing import Iterator

from logstash_exporter.collector.base import APICollector, FieldSpec, map_fields
from logstash_exporter.collector.shapes import NodeStats, PipelineStats
from logstash_exporter.metrics import NAMESPACE, MetricKind, MetricSample

PREFIX = f"{NAMESPACE}_node_"
GAUGE = MetricKind.GAUGE
COUNTER = MetricKind.COUNTER
MILLIS = 0.001


def _f(name: str, help_text: str, kind: MetricKind, path: str, scale: float = 1.0) -> FieldSpec:
    return FieldSpec(PREFIX + name, help_text, kind, tuple(path.split(".")), scale)


JVM_FIELDS = (
    _f("jvm_uptime_seconds", "JVM uptime.", GAUGE, "uptime_in_millis", MILLIS),
    _f("jvm_threads_count", "Number of live threads.", GAUGE, "threads.count"),
    _f("jvm_threads_peak_count", "Peak number of live threads.", GAUGE, "threads.peak_count"),
    _f("mem_heap_used_percent", "Percentage of the heap in use.", GAUGE, "mem.heap_used_percent"),
    _f("mem_heap_committed_bytes", "Heap memory committed.", GAUGE, "mem.heap_committed_in_bytes"),
    _f("mem_heap_max_bytes", "Maximum heap memory.", GAUGE, "mem.heap_max_in_bytes"),
    _f("mem_heap_used_bytes", "Heap memory in use.", GAUGE, "mem.heap_used_in_bytes"),
    _f("mem_nonheap_used_bytes", "Non-heap memory in use.", GAUGE, "mem.non_heap_used_in_bytes"),
    _f("mem_nonheap_committed_bytes", "Non-heap memory committed.", GAUGE, "mem.non_heap_committed_in_bytes"),
)

POOL_FIELDS = (
    _f("mem_pool_peak_used_bytes", "Peak memory used by the pool.", GAUGE, "peak_used_in_bytes"),
    _f("mem_pool_used_bytes", "Memory used by the pool.", GAUGE, "used_in_bytes"),
    _f("mem_pool_peak_max_bytes", "Peak maximum memory of the pool.", GAUGE, "peak_max_in_bytes"),
    _f("mem_pool_max_bytes", "Maximum memory of the pool.", GAUGE, "max_in_bytes"),
    _f("mem_pool_committed_bytes", "Memory committed to the pool.", GAUGE, "committed_in_bytes"),
)

GC_FIELDS = (
    _f("gc_collection_duration_seconds_total", "Time spent in garbage collection.",
       COUNTER, "collection_time_in_millis", MILLIS),
    _f("gc_collection_count_total", "Number of garbage collections.", COUNTER, "collection_count"),
)

PROCESS_FIELDS = (
    _f("process_open_filedescriptors", "Open file descriptors.", GAUGE, "open_file_descriptors"),
    _f("process_peak_open_filedescriptors", "Peak open file descriptors.", GAUGE, "peak_open_file_descriptors"),
    _f("process_max_filedescriptors", "Maximum file descriptors.", GAUGE, "max_file_descriptors"),
    _f("process_mem_total_virtual_bytes", "Total virtual memory.", GAUGE, "mem.total_virtual_in_bytes"),
    _f("process_cpu_percent", "CPU usage in percent.", GAUGE, "cpu.percent"),
    _f("process_cpu_seconds_total", "CPU time consumed.", COUNTER, "cpu.total_in_millis", MILLIS),
)

LOAD_AVERAGE_WINDOWS = (("1m", "one"), ("5m", "five"), ("15m", "fifteen"))
LOAD_AVERAGE_FAMILY = PREFIX + "process_cpu_load_average"


def _event_fields(prefix: str, scope: str) -> tuple:
    return (
        _f(f"{prefix}events_in_total", f"Events received by the {scope}.", COUNTER, "in_"),
        _f(f"{prefix}events_filtered_total", f"Events filtered by the {scope}.", COUNTER, "filtered"),
        _f(f"{prefix}events_out_total", f"Events emitted by the {scope}.", COUNTER, "out"),
        _f(f"{prefix}events_duration_seconds_total", f"Time the {scope} spent processing events.",
           COUNTER, "duration_in_millis", MILLIS),
        _f(f"{prefix}events_queue_push_duration_seconds_total",
           f"Time the {scope} spent pushing events to the queue.",
           COUNTER, "queue_push_duration_in_millis", MILLIS),
    )


def _reload_fields(prefix: str, scope: str) -> tuple:
    return (
        _f(f"{prefix}reloads_successes_total", f"Successful {scope} reloads.", COUNTER, "successes"),
        _f(f"{prefix}reloads_failures_total", f"Failed {scope} reloads.", COUNTER, "failures"),
    )


NODE_EVENT_FIELDS = _event_fields("", "node")
NODE_RELOAD_FIELDS = _reload_fields("", "configuration")
PIPELINE_EVENT_FIELDS = _event_fields("pipeline_", "pipeline")
PIPELINE_RELOAD_FIELDS = _reload_fields("pipeline_", "pipeline")

QUEUE_FIELDS = (
    _f("pipeline_queue_size_bytes", "Size of the persisted queue.", GAUGE, "queue_size_in_bytes"),
    _f("pipeline_queue_max_size_bytes", "Maximum size of the persisted queue.", GAUGE, "max_queue_size_in_bytes"),
)
QUEUE_EVENTS_FAMILY = PREFIX + "pipeline_queue_events"

DLQ_FIELDS = (
    _f("pipeline_dead_letter_queue_size_bytes", "Size of the dead letter queue.", GAUGE, "queue_size_in_bytes"),
)

PLUGIN_EVENT_FIELDS = (
    _f("plugin_events_in_total", "Events received by the plugin.", COUNTER, "events.in_"),
    _f("plugin_events_out_total", "Events emitted by the plugin.", COUNTER, "events.out"),
    _f("plugin_events_duration_seconds_total", "Time the plugin spent processing events.",
       COUNTER, "events.duration_in_millis", MILLIS),
    _f("plugin_queue_push_duration_seconds_total", "Time the plugin spent pushing events to the queue.",
       COUNTER, "events.queue_push_duration_in_millis", MILLIS),
    _f("plugin_matches_total", "Events matched by the plugin.", COUNTER, "matches"),
    _f("plugin_failures_total", "Events the plugin failed to process.", COUNTER, "failures"),
)

PLUGIN_TYPES = (("inputs", "input"), ("codecs", "codec"), ("filters", "filter"), ("outputs", "output"))


class NodeStatsCollector(APICollector):

    path = "/_node/stats"
    shape = NodeStats

    def name(self) -> str:
        return f"Logstash node stats ({self.endpoint})"

    def samples(self, data: NodeStats) -> Iterator[MetricSample]:
        yield from map_fields(data.jvm, JVM_FIELDS)

        if data.jvm.mem is not None:
            for pool in sorted(data.jvm.mem.pools):
                yield from map_fields(data.jvm.mem.pools[pool], POOL_FIELDS, {"pool": pool})

        if data.jvm.gc is not None:
            for collector in sorted(data.jvm.gc.collectors):
                yield from map_fields(data.jvm.gc.collectors[collector], GC_FIELDS, {"collector": collector})

        if data.process is not None:
            yield from map_fields(data.process, PROCESS_FIELDS)
            yield from self._load_average(data)

        yield from map_fields(data.events, NODE_EVENT_FIELDS)
        yield from map_fields(data.reloads, NODE_RELOAD_FIELDS)

        pipelines = data.all_pipelines()
        for pipeline in sorted(pipelines):
            yield from self._pipeline(pipeline, pipelines[pipeline])

    def _load_average(self, data: NodeStats) -> Iterator[MetricSample]:
        load = data.process.cpu.load_average if data.process.cpu else None
        if load is None:
            return
        for window, attr in LOAD_AVERAGE_WINDOWS:
            value = getattr(load, attr)
            if value is None:
                continue
            yield MetricSample(
                family=LOAD_AVERAGE_FAMILY,
                help="System load average.",
                kind=GAUGE,
                labels={"window": window},
                value=value,
            )

    def _pipeline(self, pipeline: str, stats: PipelineStats) -> Iterator[MetricSample]:
        labels = {"pipeline": pipeline}
        yield from map_fields(stats.events, PIPELINE_EVENT_FIELDS, labels)
        yield from map_fields(stats.reloads, PIPELINE_RELOAD_FIELDS, labels)

        queue = stats.queue
        if queue is not None:
            # "events" was renamed "events_count" in Logstash 7
            events = queue.events_count if queue.events_count is not None else queue.events
            if events is not None:
                yield MetricSample(
                    family=QUEUE_EVENTS_FAMILY,
                    help="Events waiting in the queue.",
                    kind=GAUGE,
                    labels=labels,
                    value=events,
                )
            yield from map_fields(queue, QUEUE_FIELDS, labels)

        yield from map_fields(stats.dead_letter_queue, DLQ_FIELDS, labels)

        if stats.plugins is None:
            return
        for attr, plugin_type in PLUGIN_TYPES:
            for plugin in getattr(stats.plugins, attr):
                plugin_labels = {
                    "pipeline": pipeline,
                    "plugin_type": plugin_type,
                    "plugin": plugin.name,
                    "plugin_id": plugin.id,
                }
                yield from map_fields(plugin, PLUGIN_EVENT_FIELDS, plugin_labels)
