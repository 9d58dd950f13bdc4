"""Metric sources, and the factory that builds the default set."""

from __future__ import annotations

import logging
from typing import Dict

from logstash_exporter.collector.base import Collector
from logstash_exporter.collector.node_info import NodeInfoCollector
from logstash_exporter.collector.node_stats import NodeStatsCollector
from logstash_exporter.errors import InvalidEndpointError

log = logging.getLogger(__name__)

COLLECTOR_TYPES = {
    "node": NodeStatsCollector,
    "info": NodeInfoCollector,
}


def build_collectors(endpoint: str) -> Dict[str, Collector]:
    """Build every known collector against `endpoint`.

    One that can't be built is logged and left out; the rest still run.
    """
    collectors: Dict[str, Collector] = {}
    for name, factory in COLLECTOR_TYPES.items():
        try:
            collectors[name] = factory(endpoint)
        except InvalidEndpointError as exc:
            log.error("Cannot register a new collector %r: %s", name, exc)
    return collectors
