"""
Metric family assembly.

Turns a set of discovered cache statistics resources into the five
Infinispan metric families, one sample per resource in each family.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import structlog
from prometheus_client.core import CounterMetricFamily, GaugeMetricFamily, Metric

from infinispan_exporter.collector.labels import sanitize_label
from infinispan_exporter.errors import (
    AttributeReadError,
    ManagementError,
    ManagementUnavailableError,
)
from infinispan_exporter.management.base import ManagementClient
from infinispan_exporter.management.object_name import ObjectName

logger = structlog.get_logger()

LABEL_NAMES = ("name", "manager")


class MetricKind(str, Enum):
    GAUGE = "gauge"
    COUNTER = "counter"


class FailurePolicy(str, Enum):
    """What to do when reading one resource's statistics fails."""

    ISOLATE = "isolate"  # skip the resource, keep the rest
    ABORT = "abort"  # fail the whole pass


@dataclass(frozen=True)
class Statistic:
    attribute: str
    metric: str
    help: str
    kind: MetricKind


STATISTICS: tuple[Statistic, ...] = (
    Statistic("hitRatio", "infinispan_hit_ratio", "Cache hit ratio", MetricKind.GAUGE),
    Statistic("hits", "infinispan_hit_total", "Number of hits", MetricKind.COUNTER),
    Statistic("misses", "infinispan_miss_total", "Number of misses", MetricKind.COUNTER),
    Statistic("numberOfEntries", "infinispan_entries_total", "Number of entries", MetricKind.GAUGE),
    Statistic("evictions", "infinispan_evictions_total", "Number of evictions", MetricKind.COUNTER),
)


@dataclass
class AssemblyReport:
    """Outcome of one assembly run."""

    discovered: int = 0
    exported: int = 0
    skipped_resources: list[str] = field(default_factory=list)

    @property
    def skipped(self) -> int:
        return len(self.skipped_resources)


def coerce_value(value: Any, *, resource: str, attribute: str) -> float:
    """
    Convert a raw attribute value to a float sample value.

    Numeric strings are accepted since JSON bridges may serialize longs as
    strings. Booleans, missing values and anything non-numeric are rejected.
    """
    if isinstance(value, bool) or value is None:
        raise AttributeReadError(
            f"Attribute {attribute} is not numeric: {value!r}",
            resource=resource,
            attribute=attribute,
        )
    try:
        return float(value)
    except (TypeError, ValueError, OverflowError) as exc:
        raise AttributeReadError(
            f"Attribute {attribute} is not numeric: {value!r}",
            resource=resource,
            attribute=attribute,
        ) from exc


def _new_family(statistic: Statistic) -> Metric:
    if statistic.kind is MetricKind.COUNTER:
        return CounterMetricFamily(statistic.metric, statistic.help, labels=LABEL_NAMES)
    return GaugeMetricFamily(statistic.metric, statistic.help, labels=LABEL_NAMES)


class MetricAssembler:
    """Reads cache statistics and builds the Infinispan metric families."""

    def __init__(
        self,
        client: ManagementClient,
        *,
        failure_policy: FailurePolicy = FailurePolicy.ISOLATE,
        statistics: tuple[Statistic, ...] = STATISTICS,
    ) -> None:
        self.client = client
        self.failure_policy = FailurePolicy(failure_policy)
        self.statistics = statistics

    def assemble(self, resources: Iterable[ObjectName]) -> list[Metric]:
        """Build the metric families for the given resources."""
        families, _ = self.assemble_with_report(resources)
        return families

    def assemble_with_report(
        self, resources: Iterable[ObjectName]
    ) -> tuple[list[Metric], AssemblyReport]:
        """
        Build the metric families and report which resources were skipped.

        Resources are processed in canonical name order, so samples at the
        same index across families describe the same resource. No families
        are returned when there is nothing to report. A resource whose
        sanitized labels equal those of a resource already exported is
        skipped under either policy.

        Raises:
            AttributeReadError: Under the abort policy, on the first failed read
            ManagementUnavailableError: If the server stops answering mid-pass
        """
        ordered = sorted(resources, key=lambda name: name.canonical)
        report = AssemblyReport(discovered=len(ordered))
        if not ordered:
            return [], report

        families = [_new_family(statistic) for statistic in self.statistics]
        seen: dict[tuple[str, ...], str] = {}

        for resource in ordered:
            labels = self._labels(resource)
            if tuple(labels) in seen:
                # Distinct raw names can sanitize to the same labels.
                logger.warning(
                    "resource_label_collision",
                    resource=resource.canonical,
                    exported_as=seen[tuple(labels)],
                    labels=dict(zip(LABEL_NAMES, labels)),
                )
                report.skipped_resources.append(resource.canonical)
                continue

            try:
                values = self._read_resource(resource)
            except AttributeReadError as exc:
                if self.failure_policy is FailurePolicy.ABORT:
                    raise
                logger.warning(
                    "resource_skipped",
                    resource=exc.resource,
                    attribute=exc.attribute,
                    error=exc.message,
                )
                report.skipped_resources.append(resource.canonical)
                continue

            for family, value in zip(families, values):
                family.add_metric(labels, value)
            seen[tuple(labels)] = resource.canonical
            report.exported += 1

        if report.exported == 0:
            return [], report
        return families, report

    @staticmethod
    def _labels(resource: ObjectName) -> list[str]:
        # Discovery guarantees both keys are present.
        return [sanitize_label(resource.key_property(key) or "") for key in LABEL_NAMES]

    def _read_resource(self, resource: ObjectName) -> list[float]:
        """Read every statistic of one resource before any sample is added."""
        return [self._read(resource, statistic.attribute) for statistic in self.statistics]

    def _read(self, resource: ObjectName, attribute: str) -> float:
        try:
            raw = self.client.get_attribute(resource, attribute)
        except ManagementUnavailableError:
            # The server is gone, not just this resource.
            raise
        except ManagementError as exc:
            raise AttributeReadError(
                f"Failed to read {attribute}: {exc.message}",
                resource=resource.canonical,
                attribute=attribute,
            ) from exc
        return coerce_value(raw, resource=resource.canonical, attribute=attribute)
