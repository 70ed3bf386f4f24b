"""
Infinispan cache statistics collection.

A collection pass discovers every cache statistics resource, reads five
attributes from each and returns the resulting metric families.
"""

from .assembler import (
    STATISTICS,
    AssemblyReport,
    FailurePolicy,
    MetricAssembler,
    Statistic,
)
from .collector import InfinispanCollector
from .discovery import CACHE_STATISTICS_PATTERN, ResourceDiscoverer
from .labels import sanitize_label
from .self_metrics import ExporterMetrics

__all__ = [
    "CACHE_STATISTICS_PATTERN",
    "STATISTICS",
    "AssemblyReport",
    "ExporterMetrics",
    "FailurePolicy",
    "InfinispanCollector",
    "MetricAssembler",
    "ResourceDiscoverer",
    "Statistic",
    "sanitize_label",
]
