from __future__ import annotations

from prometheus_client import CollectorRegistry, Counter, Gauge, Histogram


class ExporterMetrics:
    """Operational metrics about the exporter's own collection passes.

    With no registry the instruments are created unregistered; call
    ``register`` once the cache collector is in place so a scrape renders
    these after the pass they describe.
    """

    def __init__(self, registry: CollectorRegistry | None = None) -> None:
        self.collection_errors = Counter(
            "infinispan_exporter_collection_errors",
            "Collection passes that failed and produced no metrics",
            ["error_type"],
            registry=registry,
        )
        self.skipped_resources = Counter(
            "infinispan_exporter_skipped_resources",
            "Cache resources skipped because their statistics could not be read",
            registry=registry,
        )
        self.collection_duration = Histogram(
            "infinispan_exporter_collection_duration_seconds",
            "Duration of collection passes",
            buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
            registry=registry,
        )
        self.discovered_resources = Gauge(
            "infinispan_exporter_discovered_resources",
            "Cache resources found by the last collection pass",
            registry=registry,
        )

    def register(self, registry: CollectorRegistry) -> None:
        for instrument in (
            self.collection_errors,
            self.skipped_resources,
            self.collection_duration,
            self.discovered_resources,
        ):
            registry.register(instrument)
