"""
Base collector interface.

A collector is anything that can append MetricSamples to a sink when
asked. The orchestrator only sees this interface, so new metric sources
plug in without touching it.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Iterator, NamedTuple, Optional, Sequence, Type

import httpx
from pydantic import BaseModel

from logstash_exporter.collector.fetcher import Fetcher, validate_endpoint
from logstash_exporter.metrics import MetricKind, MetricSample, MetricSink


class Collector(ABC):
    """Interface for all metric sources."""

    @abstractmethod
    def collect(self, sink: MetricSink) -> None:
        """Append this source's samples to `sink`.

        Raises on failure, in which case nothing was appended.
        """
        ...

    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this source."""
        ...

    def close(self):
        pass


class FieldSpec(NamedTuple):
    """One row of a collector's mapping table."""

    family: str
    help: str
    kind: MetricKind
    path: Sequence[str]
    scale: float = 1.0


def lookup(obj, path: Sequence[str]):
    """Follow attribute `path` from `obj`; None if any step is missing."""
    for attr in path:
        if obj is None:
            return None
        obj = getattr(obj, attr, None)
    return obj


def map_fields(obj, specs: Sequence[FieldSpec], labels=None) -> Iterator[MetricSample]:
    """Yield a sample for every spec whose value is present on `obj`."""
    labels = dict(labels or {})
    for spec in specs:
        value = lookup(obj, spec.path)
        if value is None:
            continue
        yield MetricSample(
            family=spec.family,
            help=spec.help,
            kind=spec.kind,
            labels=labels,
            value=float(value) * spec.scale,
        )


class APICollector(Collector):
    """A collector backed by one JSON endpoint of the Logstash API.

    Subclasses set `path` and `shape` and implement `samples()`.
    """

    path: str = ""
    shape: Type[BaseModel]

    def __init__(self, base_url: str, client: Optional[httpx.Client] = None):
        self._endpoint = validate_endpoint(base_url) + self.path
        self._fetcher = Fetcher(client=client)

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def collect(self, sink: MetricSink) -> None:
        data = self._fetcher.fetch(self._endpoint, self.shape)
        sink.extend(self.samples(data))

    @abstractmethod
    def samples(self, data) -> Iterator[MetricSample]:
        """Map a decoded response to samples, in a fixed order."""
        ...

    def close(self):
        self._fetcher.close()
