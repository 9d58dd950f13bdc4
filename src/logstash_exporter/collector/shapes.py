"""
Pydantic models for the parts of the Logstash monitoring API we read.

Only what the collectors map is modelled; unknown keys are ignored.
Optional blocks default to None (or empty) because their presence varies
with the Logstash version and pipeline settings. The few required fields
make a body that is clearly not a Logstash response fail validation.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class Shape(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)


# --- /_node/stats -----------------------------------------------------------

class JVMThreads(Shape):
    count: Optional[float] = None
    peak_count: Optional[float] = None


class MemoryPool(Shape):
    peak_used_in_bytes: Optional[float] = None
    used_in_bytes: Optional[float] = None
    peak_max_in_bytes: Optional[float] = None
    max_in_bytes: Optional[float] = None
    committed_in_bytes: Optional[float] = None


class JVMMemory(Shape):
    heap_used_percent: Optional[float] = None
    heap_committed_in_bytes: Optional[float] = None
    heap_max_in_bytes: Optional[float] = None
    heap_used_in_bytes: Optional[float] = None
    non_heap_used_in_bytes: Optional[float] = None
    non_heap_committed_in_bytes: Optional[float] = None
    pools: Dict[str, MemoryPool] = Field(default_factory=dict)


class GCCollector(Shape):
    collection_time_in_millis: Optional[float] = None
    collection_count: Optional[float] = None


class JVMGC(Shape):
    collectors: Dict[str, GCCollector] = Field(default_factory=dict)


class JVMStats(Shape):
    uptime_in_millis: float
    threads: Optional[JVMThreads] = None
    mem: Optional[JVMMemory] = None
    gc: Optional[JVMGC] = None


class LoadAverage(Shape):
    one: Optional[float] = Field(default=None, alias="1m")
    five: Optional[float] = Field(default=None, alias="5m")
    fifteen: Optional[float] = Field(default=None, alias="15m")


class ProcessCPU(Shape):
    total_in_millis: Optional[float] = None
    percent: Optional[float] = None
    load_average: Optional[LoadAverage] = None


class ProcessMemory(Shape):
    total_virtual_in_bytes: Optional[float] = None


class ProcessStats(Shape):
    open_file_descriptors: Optional[float] = None
    peak_open_file_descriptors: Optional[float] = None
    max_file_descriptors: Optional[float] = None
    mem: Optional[ProcessMemory] = None
    cpu: Optional[ProcessCPU] = None


class EventStats(Shape):
    # "in" is a keyword
    in_: Optional[float] = Field(default=None, alias="in")
    filtered: Optional[float] = None
    out: Optional[float] = None
    duration_in_millis: Optional[float] = None
    queue_push_duration_in_millis: Optional[float] = None


class ReloadStats(Shape):
    successes: Optional[float] = None
    failures: Optional[float] = None


class Plugin(Shape):
    id: str
    name: str = ""
    events: Optional[EventStats] = None
    matches: Optional[float] = None
    failures: Optional[float] = None


class Plugins(Shape):
    inputs: List[Plugin] = Field(default_factory=list)
    codecs: List[Plugin] = Field(default_factory=list)
    filters: List[Plugin] = Field(default_factory=list)
    outputs: List[Plugin] = Field(default_factory=list)


class QueueStats(Shape):
    type: Optional[str] = None
    events: Optional[float] = None
    events_count: Optional[float] = None
    queue_size_in_bytes: Optional[float] = None
    max_queue_size_in_bytes: Optional[float] = None


class DeadLetterQueue(Shape):
    queue_size_in_bytes: Optional[float] = None


class PipelineStats(Shape):
    events: Optional[EventStats] = None
    plugins: Optional[Plugins] = None
    reloads: Optional[ReloadStats] = None
    queue: Optional[QueueStats] = None
    dead_letter_queue: Optional[DeadLetterQueue] = None


class NodeStats(Shape):
    jvm: JVMStats
    id: Optional[str] = None
    name: Optional[str] = None
    host: Optional[str] = None
    version: Optional[str] = None
    process: Optional[ProcessStats] = None
    events: Optional[EventStats] = None
    reloads: Optional[ReloadStats] = None
    pipelines: Dict[str, PipelineStats] = Field(default_factory=dict)
    # Logstash 5.x reports a single pipeline under this key
    pipeline: Optional[PipelineStats] = None

    def all_pipelines(self) -> Dict[str, PipelineStats]:
        if self.pipelines:
            return self.pipelines
        if self.pipeline is not None:
            return {"main": self.pipeline}
        return {}


# --- /_node -----------------------------------------------------------------

class PipelineSettings(Shape):
    workers: Optional[float] = None
    batch_size: Optional[float] = None
    batch_delay: Optional[float] = None


class OSInfo(Shape):
    name: str = ""
    arch: str = ""
    version: str = ""
    available_processors: Optional[float] = None


class JVMInfo(Shape):
    version: str = ""
    vm_name: str = ""
    vm_vendor: str = ""
    start_time_in_millis: Optional[float] = None


class NodeInfo(Shape):
    version: str
    id: str = ""
    name: str = ""
    host: str = ""
    http_address: str = ""
    status: str = ""
    os: Optional[OSInfo] = None
    jvm: Optional[JVMInfo] = None
    pipelines: Dict[str, PipelineSettings] = Field(default_factory=dict)
    pipeline: Optional[PipelineSettings] = None

    def all_pipelines(self) -> Dict[str, PipelineSettings]:
        if self.pipelines:
            return self.pipelines
        if self.pipeline is not None:
            return {"main": self.pipeline}
        return {}
