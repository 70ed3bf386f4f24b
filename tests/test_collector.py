"""
Tests for the Infinispan collector.

A collection pass must never raise: failures degrade to an empty snapshot.
"""

from unittest.mock import MagicMock

import pytest
from conftest import cache_name, cache_stats
from infinispan_exporter.collector import ExporterMetrics, FailurePolicy, InfinispanCollector
from infinispan_exporter.errors import ManagementUnavailableError
from infinispan_exporter.management import StaticManagementClient
from prometheus_client import CollectorRegistry, generate_latest
from structlog.testing import capture_logs


@pytest.fixture
def registry():
    return CollectorRegistry()


class TestCollect:
    def test_collects_cache_statistics(self, static_client):
        families = list(InfinispanCollector(static_client).collect())

        assert len(families) == 5
        assert [family.samples[0].value for family in families] == [0.93, 930.0, 70.0, 1021.0, 0.0]

    def test_nothing_discovered_yields_nothing(self):
        assert list(InfinispanCollector(StaticManagementClient()).collect()) == []

    def test_discovery_failure_yields_nothing(self):
        client = MagicMock()
        client.query_names.side_effect = ManagementUnavailableError("connection refused")

        with capture_logs() as logs:
            families, report = InfinispanCollector(client).collect_with_report()

        assert families == []
        assert report is None
        failures = [log for log in logs if log["event"] == "collection_failed"]
        assert len(failures) == 1
        assert failures[0]["log_level"] == "error"
        assert failures[0]["error_type"] == "DiscoveryError"

    def test_unexpected_error_yields_nothing(self):
        client = MagicMock()
        client.query_names.side_effect = RuntimeError("bug")

        assert list(InfinispanCollector(client).collect()) == []

    def test_abort_policy_discards_whole_pass(self):
        broken = cache_stats()
        broken["hits"] = "not-a-number"
        client = StaticManagementClient(
            {cache_name("a", "web"): cache_stats(), cache_name("b", "web"): broken}
        )

        collector = InfinispanCollector(client, failure_policy=FailurePolicy.ABORT)

        assert list(collector.collect()) == []

    def test_isolate_policy_keeps_healthy_resources(self):
        broken = cache_stats()
        broken["hits"] = "not-a-number"
        client = StaticManagementClient(
            {cache_name("a", "web"): cache_stats(), cache_name("b", "web"): broken}
        )

        with capture_logs() as logs:
            families, report = InfinispanCollector(client).collect_with_report()

        assert all(len(family.samples) == 1 for family in families)
        assert report.skipped == 1
        assert [log["event"] for log in logs if log["log_level"] == "warning"] == ["resource_skipped"]
        assert not any(log["event"] == "collection_failed" for log in logs)

    def test_passes_are_independent(self, static_client, my_cache):
        collector = InfinispanCollector(static_client)
        first = list(collector.collect())

        static_client.unregister(my_cache)
        second = list(collector.collect())

        assert len(first) == 5
        assert second == []

    def test_describe_is_empty(self, static_client):
        assert list(InfinispanCollector(static_client).describe()) == []


class TestRegistry:
    def test_exposition_output(self, static_client, registry):
        registry.register(InfinispanCollector(static_client))

        output = generate_latest(registry).decode()

        assert "# TYPE infinispan_hit_ratio gauge" in output
        assert "# TYPE infinispan_hit_total counter" in output
        assert 'infinispan_hit_ratio{manager="myContainer",name="myCache"} 0.93' in output
        assert 'infinispan_hit_total{manager="myContainer",name="myCache"} 930.0' in output
        assert 'infinispan_miss_total{manager="myContainer",name="myCache"} 70.0' in output
        assert 'infinispan_entries_total{manager="myContainer",name="myCache"} 1021.0' in output
        assert 'infinispan_evictions_total{manager="myContainer",name="myCache"} 0.0' in output

    def test_sample_lookup(self, static_client, registry):
        registry.register(InfinispanCollector(static_client))
        labels = {"name": "myCache", "manager": "myContainer"}

        assert registry.get_sample_value("infinispan_hit_total", labels) == 930.0
        assert registry.get_sample_value("infinispan_entries_total", labels) == 1021.0

    def test_empty_pass_exposes_no_cache_metrics(self, registry):
        registry.register(InfinispanCollector(StaticManagementClient()))

        assert "infinispan_hit" not in generate_latest(registry).decode()


class TestSelfMetrics:
    def test_failed_pass_counted(self, registry):
        client = MagicMock()
        client.query_names.side_effect = ManagementUnavailableError("down")
        collector = InfinispanCollector(client, metrics=ExporterMetrics(registry))

        collector.collect()
        collector.collect()

        value = registry.get_sample_value(
            "infinispan_exporter_collection_errors_total", {"error_type": "DiscoveryError"}
        )
        assert value == 2.0
        assert registry.get_sample_value("infinispan_exporter_collection_duration_seconds_count") == 2.0

    def test_skipped_and_discovered_recorded(self, registry):
        broken = cache_stats()
        del broken["misses"]
        client = StaticManagementClient(
            {cache_name("a", "web"): cache_stats(), cache_name("b", "web"): broken}
        )
        collector = InfinispanCollector(client, metrics=ExporterMetrics(registry))

        collector.collect()

        assert registry.get_sample_value("infinispan_exporter_skipped_resources_total") == 1.0
        assert registry.get_sample_value("infinispan_exporter_discovered_resources") == 2.0
