"""
Cache statistics resource discovery.
"""

from __future__ import annotations

import structlog

from infinispan_exporter.errors import DiscoveryError, ManagementError
from infinispan_exporter.management.base import ManagementClient
from infinispan_exporter.management.object_name import ObjectName

logger = structlog.get_logger()

CACHE_STATISTICS_PATTERN = ObjectName.parse(
    "org.wildfly.clustering.infinispan:component=Statistics,name=*,manager=*,type=Cache"
)

REQUIRED_KEYS = ("name", "manager")


class ResourceDiscoverer:
    """Finds every cache statistics resource registered with the server."""

    def __init__(
        self,
        client: ManagementClient,
        pattern: ObjectName = CACHE_STATISTICS_PATTERN,
    ) -> None:
        self.client = client
        self.pattern = pattern

    def discover(self) -> set[ObjectName]:
        """
        Query the management interface for matching resources.

        Returns:
            Set of resource names, each carrying ``name`` and ``manager`` keys

        Raises:
            DiscoveryError: If the management interface fails; no partial
                result is ever returned
        """
        try:
            names = self.client.query_names(self.pattern)
        except ManagementError as exc:
            raise DiscoveryError(
                f"Resource discovery failed: {exc}",
                {"pattern": self.pattern.canonical},
            ) from exc

        resources = set()
        for name in names:
            missing = [key for key in REQUIRED_KEYS if name.key_property(key) is None]
            if missing:
                logger.warning("resource_missing_keys", resource=str(name), missing=missing)
                continue
            resources.add(name)

        logger.debug("resources_discovered", pattern=self.pattern.canonical, count=len(resources))
        return resources
