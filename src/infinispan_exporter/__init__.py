"""
Prometheus exporter for Infinispan cache statistics.

Discovers every cache statistics resource exposed by a WildFly/Infinispan
management interface and reports hit ratio, hits, misses, entries and
evictions per cache.
"""

from infinispan_exporter.collector import FailurePolicy, InfinispanCollector
from infinispan_exporter.exporter import build_registry, create_client

__version__ = "0.1.0"

__all__ = [
    "FailurePolicy",
    "InfinispanCollector",
    "build_registry",
    "create_client",
    "__version__",
]
