"""
Collector for /_node.

Exposes the node's identity (version, host, OS, JVM) as constant "info"
gauges with the details in labels, plus per-pipeline worker settings.
"""

from __future__ import annotations

from typing import Dict, Iterator

from logstash_exporter.collector.base import APICollector, FieldSpec, map_fields
from logstash_exporter.collector.shapes import NodeInfo
from logstash_exporter.metrics import NAMESPACE, MetricKind, MetricSample

PREFIX = f"{NAMESPACE}_info_"

PIPELINE_FIELDS = (
    FieldSpec(PREFIX + "pipeline_workers", "Number of pipeline workers.", MetricKind.GAUGE, ("workers",)),
    FieldSpec(PREFIX + "pipeline_batch_size", "Events per pipeline batch.", MetricKind.GAUGE, ("batch_size",)),
    FieldSpec(PREFIX + "pipeline_batch_delay_seconds", "Maximum wait for a full batch.",
              MetricKind.GAUGE, ("batch_delay",), 0.001),
)


def _info(suffix: str, help_text: str, labels: Dict[str, str]) -> MetricSample:
    return MetricSample(PREFIX + suffix, help_text, MetricKind.GAUGE, labels, 1.0)


class NodeInfoCollector(APICollector):

    path = "/_node"
    shape = NodeInfo

    def name(self) -> str:
        return f"Logstash node info ({self.endpoint})"

    def samples(self, data: NodeInfo) -> Iterator[MetricSample]:
        yield _info("node", "A constant 1 labelled with the node's identity.", {
            "id": data.id,
            "name": data.name,
            "host": data.host,
            "version": data.version,
            "http_address": data.http_address,
            "status": data.status,
        })

        if data.os is not None:
            yield _info("os", "A constant 1 labelled with the node's OS.",
                        {"name": data.os.name, "arch": data.os.arch, "version": data.os.version})
            if data.os.available_processors is not None:
                yield MetricSample(
                    PREFIX + "os_available_processors",
                    "Processors available to the node.",
                    MetricKind.GAUGE,
                    {},
                    data.os.available_processors,
                )

        if data.jvm is not None:
            yield _info("jvm", "A constant 1 labelled with the node's JVM.",
                        {"name": data.jvm.vm_name, "version": data.jvm.version, "vendor": data.jvm.vm_vendor})
            if data.jvm.start_time_in_millis is not None:
                yield MetricSample(
                    PREFIX + "jvm_start_time_seconds",
                    "JVM start time since the Unix epoch.",
                    MetricKind.GAUGE,
                    {},
                    data.jvm.start_time_in_millis / 1000.0,
                )

        pipelines = data.all_pipelines()
        for pipeline in sorted(pipelines):
            yield from map_fields(pipelines[pipeline], PIPELINE_FIELDS, {"pipeline": pipeline})
