"""
Core metric definitions for the exporter.

Collectors turn Logstash API responses into MetricSamples and append them
to a MetricSink. The orchestrator adds one ScrapeOutcome per collector
run, and the exposition layer serializes the lot.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping


NAMESPACE = "logstash"

SCRAPE_DURATION_FAMILY = f"{NAMESPACE}_exporter_scrape_duration_seconds"
SCRAPE_DURATION_HELP = "logstash_exporter: Duration of a scrape job."

RESULT_SUCCESS = "success"
RESULT_ERROR = "error"


class MetricKind(str, Enum):
    COUNTER = "counter"
    GAUGE = "gauge"


@dataclass(frozen=True)
class MetricSample:
    """One labelled value of a metric family."""

    family: str
    help: str
    kind: MetricKind
    labels: Mapping[str, str] = field(default_factory=dict)
    value: float = 0.0

    def __post_init__(self):
        # Own read-only copy; callers often reuse one dict for many samples
        object.__setattr__(self, "labels", MappingProxyType(dict(self.labels)))

    def label_values(self, names: Iterable[str]) -> List[str]:
        return [self.labels.get(name, "") for name in names]


@dataclass(frozen=True)
class ScrapeOutcome:
    """How long one collector run took and whether it worked."""

    collector: str
    duration: float
    result: str

    @property
    def ok(self) -> bool:
        return self.result == RESULT_SUCCESS

    def to_sample(self) -> MetricSample:
        return MetricSample(
            family=SCRAPE_DURATION_FAMILY,
            help=SCRAPE_DURATION_HELP,
            kind=MetricKind.GAUGE,
            labels={"collector": self.collector, "result": self.result},
            value=self.duration,
        )


class MetricSink:
    """Append-only sample buffer shared by concurrently running collectors."""

    def __init__(self):
        self._lock = threading.Lock()
        self._samples: List[MetricSample] = []

    def emit(self, sample: MetricSample) -> None:
        with self._lock:
            self._samples.append(sample)

    def extend(self, samples: Iterable[MetricSample]) -> None:
        # Materialize first so a failing generator appends nothing
        batch = list(samples)
        with self._lock:
            self._samples.extend(batch)

    def snapshot(self) -> List[MetricSample]:
        with self._lock:
            return list(self._samples)

    def __len__(self) -> int:
        with self._lock:
            return len(self._samples)


@dataclass
class ScrapeResult:
    """Everything one orchestrator invocation produced."""

    samples: List[MetricSample]
    outcomes: Dict[str, ScrapeOutcome]

    @property
    def failed(self) -> List[str]:
        return sorted(name for name, outcome in self.outcomes.items() if not outcome.ok)

    def samples_for(self, family: str) -> List[MetricSample]:
        return [s for s in self.samples if s.family == family]
