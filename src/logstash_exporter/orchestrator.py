"""
Runs every registered collector concurrently and merges their output.

Each invocation starts one worker thread per collector, waits for all of
them, and returns everything they emitted plus one scrape duration
sample per collector. A collector that fails only loses its own samples.
There is no per-collector timeout: a hung collector holds up the scrape.
"""

from __future__ import annotations

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from types import MappingProxyType
from typing import Dict, List, Mapping

from logstash_exporter.collector.base import Collector
from logstash_exporter.metrics import (
    RESULT_ERROR,
    RESULT_SUCCESS,
    MetricSink,
    ScrapeOutcome,
    ScrapeResult,
)

log = logging.getLogger(__name__)


class Orchestrator:

    def __init__(self, collectors: Mapping[str, Collector]):
        self._collectors = MappingProxyType(dict(collectors))

    @property
    def names(self) -> List[str]:
        return list(self._collectors)

    @property
    def collectors(self) -> Mapping[str, Collector]:
        return self._collectors

    def collect(self) -> ScrapeResult:
        """Run one scrape across all collectors."""
        sink = MetricSink()
        outcomes: Dict[str, ScrapeOutcome] = {}

        if self._collectors:
            # Leaving the with-block joins every worker
            with ThreadPoolExecutor(
                max_workers=len(self._collectors),
                thread_name_prefix="collector",
            ) as pool:
                futures = {
                    name: pool.submit(_execute, name, collector, sink)
                    for name, collector in self._collectors.items()
                }
            outcomes = {name: future.result() for name, future in futures.items()}

        return ScrapeResult(samples=sink.snapshot(), outcomes=outcomes)

    def close(self):
        for collector in self._collectors.values():
            collector.close()


def _execute(name: str, collector: Collector, sink: MetricSink) -> ScrapeOutcome:
    begin = time.perf_counter()
    try:
        collector.collect(sink)
    except Exception as exc:
        duration = time.perf_counter() - begin
        log.warning("ERROR: %s collector failed after %fs: %s", name, duration, exc)
        result = RESULT_ERROR
    else:
        duration = time.perf_counter() - begin
        log.debug("OK: %s collector succeeded after %fs.", name, duration)
        result = RESULT_SUCCESS

    outcome = ScrapeOutcome(collector=name, duration=duration, result=result)
    sink.emit(outcome.to_sample())
    return outcome
