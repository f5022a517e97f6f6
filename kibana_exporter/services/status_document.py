"""Pydantic models for the Kibana /api/status response.

Unknown fields are ignored so newer Kibana releases decode cleanly. Every
field is Optional: None means Kibana did not report it (or sent null), and
no series is emitted for it.
"""

from pydantic import BaseModel, Field, field_validator
from typing import Dict, Optional


class VersionInfo(BaseModel):
    """Kibana build information."""
    number: Optional[str] = None
    build_hash: Optional[str] = None
    build_number: Optional[int] = None
    build_snapshot: Optional[bool] = None


class ServiceStatus(BaseModel):
    """Level and summary of the whole instance or a single subsystem."""
    level: Optional[str] = None
    summary: Optional[str] = None


class StatusInfo(BaseModel):
    """Overall status plus per-subsystem status maps."""
    overall: Optional[ServiceStatus] = None
    core: Optional[Dict[str, Optional[ServiceStatus]]] = None
    plugins: Optional[Dict[str, Optional[ServiceStatus]]] = None


class HeapMetrics(BaseModel):
    """V8 heap usage in bytes; missing or null fields read as 0 once the heap block exists."""
    total_in_bytes: float = 0
    used_in_bytes: float = 0
    size_limit: float = 0

    @field_validator("total_in_bytes", "used_in_bytes", "size_limit", mode="before")
    @classmethod
    def null_as_zero(cls, v):
        return 0 if v is None else v


class MemoryMetrics(BaseModel):
    heap: Optional[HeapMetrics] = None
    resident_set_size_in_bytes: Optional[float] = None


class ProcessMetrics(BaseModel):
    """Node.js process metrics; durations are in milliseconds."""
    memory: Optional[MemoryMetrics] = None
    event_loop_delay: Optional[float] = None
    uptime_in_millis: Optional[float] = None


class ControlGroupCPU(BaseModel):
    cpu_percent: Optional[float] = None


class CPUMetrics(BaseModel):
    cgroup: Optional[ControlGroupCPU] = None


class LoadMetrics(BaseModel):
    """Load averages, keyed "1m"/"5m"/"15m" in the payload."""
    load_1m: Optional[float] = Field(default=None, alias="1m")
    load_5m: Optional[float] = Field(default=None, alias="5m")
    load_15m: Optional[float] = Field(default=None, alias="15m")


class OSMemoryMetrics(BaseModel):
    total_in_bytes: Optional[float] = None
    free_in_bytes: Optional[float] = None
    used_in_bytes: Optional[float] = None


class OSMetrics(BaseModel):
    cpu: Optional[CPUMetrics] = None
    load: Optional[LoadMetrics] = None
    memory: Optional[OSMemoryMetrics] = None


class RequestMetrics(BaseModel):
    """Request counters since Kibana started."""
    total: Optional[float] = None
    disconnects: Optional[float] = None
    status_codes: Optional[Dict[str, Optional[float]]] = None


class ResponseTimeMetrics(BaseModel):
    avg_in_millis: Optional[float] = None
    max_in_millis: Optional[float] = None


class MetricsInfo(BaseModel):
    """Performance data block of the status document."""
    collected_at: Optional[str] = None
    concurrent_connections: Optional[float] = None
    process: Optional[ProcessMetrics] = None
    os: Optional[OSMetrics] = None
    requests: Optional[RequestMetrics] = None
    response_times: Optional[ResponseTimeMetrics] = None


class StatusDocument(BaseModel):
    """Root of the /api/status response."""
    name: Optional[str] = None
    uuid: Optional[str] = None
    version: Optional[VersionInfo] = None
    status: Optional[StatusInfo] = None
    metrics: Optional[MetricsInfo] = None
