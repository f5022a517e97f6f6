"""Kibana status collector."""

import logging
import threading
import time
from typing import List, Optional

from ..services.status_client import StatusClient
from ..services.status_document import StatusDocument
from ..utils.metrics import MetricDescriptor, MetricKind, Sample, build_fq_name
from ..utils.status import StatusLevel, availability
from .base import BaseCollector, safe_scrape


NAMESPACE = "kibana"


def _desc(subsystem: str, name: str, help_text: str, *label_names: str,
          kind: MetricKind = MetricKind.GAUGE) -> MetricDescriptor:
    return MetricDescriptor(
        name=build_fq_name(NAMESPACE, subsystem, name),
        help=help_text,
        label_names=label_names,
        kind=kind
    )


class KibanaCollector(BaseCollector):
    """
    Translate Kibana's /api/status document into Prometheus samples.

    One collect() call performs exactly one upstream request. Calls are
    serialised by an internal lock so concurrent scrapes never overlap
    their fetches.
    """

    def __init__(self, client: StatusClient, logger: logging.Logger):
        """
        Initialize Kibana collector and build the descriptor catalog.

        Args:
            client: Status client for the monitored Kibana
            logger: Logger instance
        """
        super().__init__(client, logger)
        self._lock = threading.Lock()

        self.up = _desc("", "up", "Was the last scrape of Kibana successful")
        self.status_overall = _desc(
            "status", "overall",
            "Kibana overall status (1=green, 0.5=yellow, 0=red, -1=unknown)"
        )
        self.status_core = _desc(
            "status", "core", "Kibana core status (1=available, 0=unavailable)", "name"
        )
        self.status_elasticsearch = _desc(
            "status", "elasticsearch", "Elasticsearch connection status (1=available, 0=unavailable)"
        )
        self.status_saved_objects = _desc(
            "status", "saved_objects", "Saved objects status (1=available, 0=unavailable)"
        )

        self.heap_total = _desc("heap", "total_bytes", "Total heap size in bytes")
        self.heap_used = _desc("heap", "used_bytes", "Used heap size in bytes")
        self.heap_size_limit = _desc("heap", "size_limit_bytes", "Heap size limit in bytes")
        self.resident_set = _desc("memory", "resident_set_bytes", "Resident set size in bytes")
        self.event_loop_delay = _desc("event_loop", "delay_seconds", "Event loop delay in seconds")

        self.requests_total = _desc(
            "requests", "total", "Total number of requests", "status", kind=MetricKind.COUNTER
        )
        self.response_time = _desc(
            "response_time", "seconds", "Response time statistics", "quantile"
        )
        self.concurrent_connections = _desc(
            "concurrent_connections", "total", "Number of concurrent connections"
        )
        self.uptime = _desc("process", "uptime_seconds", "Kibana process uptime in seconds")

        self.os_cpu_percent = _desc("os", "cpu_percent", "OS CPU usage percentage")
        self.os_load_1m = _desc("os", "load_average_1m", "OS load average 1 minute")
        self.os_load_5m = _desc("os", "load_average_5m", "OS load average 5 minutes")
        self.os_load_15m = _desc("os", "load_average_15m", "OS load average 15 minutes")
        self.os_memory_total = _desc("os", "memory_total_bytes", "OS total memory in bytes")
        self.os_memory_free = _desc("os", "memory_free_bytes", "OS free memory in bytes")
        self.os_memory_used = _desc("os", "memory_used_bytes", "OS used memory in bytes")

        self.scrape_duration = _desc("scrape", "duration_seconds", "Duration of Kibana scrape")
        self.scrape_success = _desc("scrape", "success", "Was the last scrape successful")

        self._descriptors = (
            self.up,
            self.status_overall,
            self.status_core,
            self.status_elasticsearch,
            self.status_saved_objects,
            self.heap_total,
            self.heap_used,
            self.heap_size_limit,
            self.resident_set,
            self.event_loop_delay,
            self.requests_total,
            self.response_time,
            self.concurrent_connections,
            self.uptime,
            self.os_cpu_percent,
            self.os_load_1m,
            self.os_load_5m,
            self.os_load_15m,
            self.os_memory_total,
            self.os_memory_free,
            self.os_memory_used,
            self.scrape_duration,
            self.scrape_success,
        )

    def describe(self) -> List[MetricDescriptor]:
        """
        Return the full descriptor catalog.

        Returns:
            List[MetricDescriptor]: Catalog in a stable order
        """
        return list(self._descriptors)

    def collect(self) -> List[Sample]:
        """
        Scrape Kibana once and translate the result.

        Always emits scrape_duration_seconds. On failure only up=0 and
        scrape_success=0 follow; on success up=1, scrape_success=1 and the
        translated status document.

        Returns:
            List[Sample]: Samples for this pass
        """
        with self._lock:
            start = time.perf_counter()
            document = self._scrape()
            duration = time.perf_counter() - start

            samples = [Sample(self.scrape_duration, duration)]

            if document is None:
                samples.append(Sample(self.up, 0))
                samples.append(Sample(self.scrape_success, 0))
                return samples

            samples.append(Sample(self.up, 1))
            samples.append(Sample(self.scrape_success, 1))
            samples.extend(self.translate(document))
            return samples

    def check_health(self) -> None:
        """
        Check Kibana reachability for readiness checks.

        Does not take the collection lock and produces no samples.

        Raises:
            StatusClientError: Kibana is unreachable or not answering 200
        """
        self.client.check_health()

    def close(self) -> None:
        """Close the underlying status client."""
        self.client.close()

    @safe_scrape
    def _scrape(self) -> Optional[StatusDocument]:
        return self.client.fetch()

    def translate(self, document: StatusDocument) -> List[Sample]:
        """
        Convert a status document into samples.

        Fields missing from the document produce no samples.

        Args:
            document: Decoded /api/status response

        Returns:
            List[Sample]: Translated samples (excludes up/scrape samples)
        """
        samples = []
        samples.extend(self._status_samples(document))

        metrics = document.metrics
        if metrics is None:
            return samples

        samples.extend(self._process_samples(metrics.process))

        requests = metrics.requests
        if requests is not None:
            if requests.total is not None:
                samples.append(Sample(self.requests_total, requests.total, ("total",)))
            if requests.disconnects is not None:
                samples.append(Sample(self.requests_total, requests.disconnects, ("disconnects",)))
            if requests.status_codes is not None:
                for code, count in requests.status_codes.items():
                    if count is None:
                        continue
                    samples.append(Sample(self.requests_total, count, (code,)))

        if metrics.concurrent_connections is not None:
            samples.append(Sample(self.concurrent_connections, metrics.concurrent_connections))

        response_times = metrics.response_times
        if response_times is not None:
            if response_times.avg_in_millis is not None:
                samples.append(Sample(self.response_time, response_times.avg_in_millis / 1000.0, ("avg",)))
            if response_times.max_in_millis is not None:
                samples.append(Sample(self.response_time, response_times.max_in_millis / 1000.0, ("max",)))

        samples.extend(self._os_samples(metrics.os))
        return samples

    def _status_samples(self, document: StatusDocument) -> List[Sample]:
        status = document.status
        overall = status.overall if status is not None else None
        level = StatusLevel.from_level(overall.level if overall is not None else None)
        samples = [Sample(self.status_overall, level.to_gauge())]

        core = (status.core if status is not None else None) or {}
        for name, service in core.items():
            # null entries carry no level
            if service is None:
                continue
            samples.append(Sample(self.status_core, availability(service.level), (name,)))

        elasticsearch = core.get("elasticsearch")
        if elasticsearch is not None:
            samples.append(Sample(self.status_elasticsearch, availability(elasticsearch.level)))

        saved_objects = core.get("savedObjects")
        if saved_objects is not None:
            samples.append(Sample(self.status_saved_objects, availability(saved_objects.level)))

        return samples

    def _process_samples(self, process) -> List[Sample]:
        if process is None:
            return []

        samples = []
        memory = process.memory
        if memory is not None:
            if memory.heap is not None:
                samples.append(Sample(self.heap_total, memory.heap.total_in_bytes))
                samples.append(Sample(self.heap_used, memory.heap.used_in_bytes))
                samples.append(Sample(self.heap_size_limit, memory.heap.size_limit))
            if memory.resident_set_size_in_bytes is not None:
                samples.append(Sample(self.resident_set, memory.resident_set_size_in_bytes))

        if process.event_loop_delay is not None:
            samples.append(Sample(self.event_loop_delay, process.event_loop_delay / 1000.0))

        if process.uptime_in_millis is not None:
            samples.append(Sample(self.uptime, process.uptime_in_millis / 1000.0))

        return samples

    def _os_samples(self, os_metrics) -> List[Sample]:
        if os_metrics is None:
            return []

        samples = []
        cgroup = os_metrics.cpu.cgroup if os_metrics.cpu is not None else None
        if cgroup is not None and cgroup.cpu_percent is not None:
            samples.append(Sample(self.os_cpu_percent, cgroup.cpu_percent))

        load = os_metrics.load
        if load is not None:
            for descriptor, value in (
                (self.os_load_1m, load.load_1m),
                (self.os_load_5m, load.load_5m),
                (self.os_load_15m, load.load_15m),
            ):
                if value is not None:
                    samples.append(Sample(descriptor, value))

        memory = os_metrics.memory
        if memory is not None:
            for descriptor, value in (
                (self.os_memory_total, memory.total_in_bytes),
                (self.os_memory_free, memory.free_in_bytes),
                (self.os_memory_used, memory.used_in_bytes),
            ):
                if value is not None:
                    samples.append(Sample(descriptor, value))

        return samples
