"""
Exporter wiring.

Builds the management client and a dedicated collector registry from
settings. Nothing is registered in the process-wide default registry;
the caller decides where the registry is served.
"""

from __future__ import annotations

from prometheus_client import CollectorRegistry

from infinispan_exporter.collector import ExporterMetrics, InfinispanCollector
from infinispan_exporter.config.settings import Settings
from infinispan_exporter.management.base import ManagementClient
from infinispan_exporter.management.jolokia import JolokiaClient


def create_client(settings: Settings) -> JolokiaClient:
    """Create a Jolokia client from settings."""
    return JolokiaClient(
        settings.jolokia_url,
        username=settings.jolokia_username,
        password=settings.jolokia_password,
        timeout=settings.http_timeout,
        max_retries=settings.http_max_retries,
        backoff_factor=settings.http_retry_backoff_factor,
    )


def create_collector(
    client: ManagementClient,
    settings: Settings,
    registry: CollectorRegistry | None = None,
) -> InfinispanCollector:
    """
    Create a collector.

    When a registry is given, the collector and its self-metrics are
    registered in it, the collector first: a registry collects in
    registration order, so the self-metrics then describe the pass run
    by the same scrape.
    """
    if registry is None:
        return InfinispanCollector(client, failure_policy=settings.failure_policy)

    metrics = ExporterMetrics()
    collector = InfinispanCollector(client, failure_policy=settings.failure_policy, metrics=metrics)
    registry.register(collector)
    metrics.register(registry)
    return collector


def build_registry(client: ManagementClient, settings: Settings) -> CollectorRegistry:
    """Return a fresh registry holding the cache collector and its self-metrics."""
    registry = CollectorRegistry()
    create_collector(client, settings, registry)
    return registry
