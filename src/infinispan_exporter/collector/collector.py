"""
Prometheus collector for Infinispan cache statistics.

Each call to ``collect()`` is one collection pass: discover the cache
statistics resources, read their attributes and return fresh metric
families. Nothing is kept between passes.
"""

from __future__ import annotations

import time
from collections.abc import Iterable

import structlog
from prometheus_client.core import Metric
from prometheus_client.registry import Collector

from infinispan_exporter.collector.assembler import (
    AssemblyReport,
    FailurePolicy,
    MetricAssembler,
)
from infinispan_exporter.collector.discovery import CACHE_STATISTICS_PATTERN, ResourceDiscoverer
from infinispan_exporter.collector.self_metrics import ExporterMetrics
from infinispan_exporter.logging import bind_context
from infinispan_exporter.management.base import ManagementClient
from infinispan_exporter.management.object_name import ObjectName

logger = structlog.get_logger()


class InfinispanCollector(Collector):
    """
    Custom collector exposing per-cache Infinispan statistics.

    Usage:
        >>> registry = CollectorRegistry()
        >>> registry.register(InfinispanCollector(JolokiaClient(url)))
    """

    def __init__(
        self,
        client: ManagementClient,
        *,
        failure_policy: FailurePolicy = FailurePolicy.ISOLATE,
        pattern: ObjectName = CACHE_STATISTICS_PATTERN,
        metrics: ExporterMetrics | None = None,
    ) -> None:
        self.discoverer = ResourceDiscoverer(client, pattern)
        self.assembler = MetricAssembler(client, failure_policy=failure_policy)
        self.metrics = metrics

    def describe(self) -> Iterable[Metric]:
        # Metric names depend on what is discovered at scrape time.
        return []

    def collect(self) -> Iterable[Metric]:
        families, _ = self.collect_with_report()
        return families

    def collect_with_report(self) -> tuple[list[Metric], AssemblyReport | None]:
        """
        Run one collection pass.

        Never raises: any failure is logged and yields an empty snapshot
        with no report.
        """
        log = bind_context(pattern=self.discoverer.pattern.canonical)
        started = time.perf_counter()
        try:
            resources = self.discoverer.discover()
            families, report = self.assembler.assemble_with_report(resources)
        except Exception as exc:
            log.error(
                "collection_failed",
                error_type=type(exc).__name__,
                error=str(exc),
                exc_info=True,
            )
            if self.metrics is not None:
                self.metrics.collection_errors.labels(error_type=type(exc).__name__).inc()
            return [], None
        finally:
            if self.metrics is not None:
                self.metrics.collection_duration.observe(time.perf_counter() - started)

        if self.metrics is not None:
            self.metrics.discovered_resources.set(report.discovered)
            if report.skipped:
                self.metrics.skipped_resources.inc(report.skipped)

        log.debug(
            "collection_complete",
            discovered=report.discovered,
            exported=report.exported,
            skipped=report.skipped,
        )
        return families, report
