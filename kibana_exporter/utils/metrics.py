"""Metric data structures for collectors."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterable, List, Tuple

from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric


class MetricKind(Enum):
    """Prometheus metric type of a descriptor."""

    GAUGE = "gauge"
    COUNTER = "counter"


def build_fq_name(namespace: str, subsystem: str, name: str) -> str:
    """
    Join non-empty name parts with underscores.

    Args:
        namespace: Metric namespace (e.g. "kibana")
        subsystem: Optional subsystem (e.g. "heap"), may be empty
        name: Metric name (e.g. "total_bytes")

    Returns:
        str: Fully qualified metric name, or "" when name is empty
    """
    if not name:
        return ""
    return "_".join(part for part in (namespace, subsystem, name) if part)


@dataclass(frozen=True)
class MetricDescriptor:
    """Static description of one metric series family."""

    name: str
    help: str
    label_names: Tuple[str, ...] = ()
    kind: MetricKind = MetricKind.GAUGE

    def empty_family(self) -> Metric:
        """Build a sample-less metric family for registry describe calls."""
        family_class = CounterMetricFamily if self.kind is MetricKind.COUNTER else GaugeMetricFamily
        return family_class(self.name, self.help, labels=list(self.label_names))


@dataclass
class Sample:
    """One value produced for a descriptor during a single collection pass."""

    descriptor: MetricDescriptor
    value: float
    label_values: Tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self):
        """Normalise value and check label cardinality."""
        self.value = float(self.value)
        self.label_values = tuple(str(v) for v in self.label_values)
        if len(self.label_values) != len(self.descriptor.label_names):
            raise ValueError(
                f"{self.descriptor.name} expects labels {self.descriptor.label_names}, "
                f"got {len(self.label_values)} value(s)"
            )


def to_metric_families(
    descriptors: Iterable[MetricDescriptor],
    samples: Iterable[Sample]
) -> List[Metric]:
    """
    Group samples into prometheus_client metric families.

    Families are returned in descriptor order; descriptors that received no
    samples this pass are omitted.

    Args:
        descriptors: Catalog of descriptors
        samples: Samples produced by one collection pass

    Returns:
        List[Metric]: Families ready to be yielded from a custom collector
    """
    by_name: Dict[str, List[Sample]] = {}
    for sample in samples:
        by_name.setdefault(sample.descriptor.name, []).append(sample)

    families = []
    for descriptor in descriptors:
        grouped = by_name.get(descriptor.name)
        if not grouped:
            continue
        family = descriptor.empty_family()
        for sample in grouped:
            family.add_metric(list(sample.label_values), sample.value)
        families.append(family)
    return families
