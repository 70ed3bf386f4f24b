"""Root test configuration."""

import logging

import pytest
import structlog
from infinispan_exporter.management import ObjectName, StaticManagementClient


def pytest_configure(config):
    """Configure structlog for tests to suppress debug/info output."""
    logging.basicConfig(level=logging.WARNING, force=True)
    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.add_log_level,
            structlog.processors.format_exc_info,
            structlog.dev.ConsoleRenderer(),
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def cache_name(name: str, manager: str) -> ObjectName:
    """Build a cache statistics object name the way WildFly registers it."""
    return ObjectName.parse(
        f"org.wildfly.clustering.infinispan:component=Statistics,"
        f"name={name},manager={manager},type=Cache"
    )


def cache_stats(
    hit_ratio: float = 0.93,
    hits: int = 930,
    misses: int = 70,
    entries: int = 1021,
    evictions: int = 0,
) -> dict:
    return {
        "hitRatio": hit_ratio,
        "hits": hits,
        "misses": misses,
        "numberOfEntries": entries,
        "evictions": evictions,
    }


@pytest.fixture
def my_cache() -> ObjectName:
    return cache_name("myCache", "myContainer")


@pytest.fixture
def static_client(my_cache) -> StaticManagementClient:
    """Management namespace holding one cache plus an unrelated resource."""
    client = StaticManagementClient({my_cache: cache_stats()})
    client.register("java.lang:type=Memory", {"HeapMemoryUsage": 1})
    return client
