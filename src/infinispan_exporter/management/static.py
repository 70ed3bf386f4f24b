"""
In-process management namespace.

Holds resources and their attributes in memory and answers the same
queries as a remote management server. Used for demos and for embedding
the collector next to an application that already has the statistics.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from infinispan_exporter.errors import AttributeLookupError, ManagementProtocolError
from infinispan_exporter.management.object_name import ObjectName


class StaticManagementClient:
    """Management client backed by a mapping of object names to attributes."""

    def __init__(self, resources: Mapping[ObjectName | str, Mapping[str, Any]] | None = None) -> None:
        self._resources: dict[ObjectName, dict[str, Any]] = {}
        for name, attributes in (resources or {}).items():
            self.register(name, attributes)

    def register(self, name: ObjectName | str, attributes: Mapping[str, Any]) -> ObjectName:
        """Add or replace a resource."""
        object_name = ObjectName.parse(name) if isinstance(name, str) else name
        if object_name.is_pattern:
            raise ValueError(f"Cannot register a pattern as a resource: {object_name}")
        self._resources[object_name] = dict(attributes)
        return object_name

    def unregister(self, name: ObjectName | str) -> None:
        object_name = ObjectName.parse(name) if isinstance(name, str) else name
        self._resources.pop(object_name, None)

    def query_names(self, pattern: ObjectName) -> set[ObjectName]:
        if not isinstance(pattern, ObjectName):
            raise ManagementProtocolError(f"Invalid query pattern: {pattern!r}")
        return {name for name in self._resources if pattern.matches(name)}

    def get_attribute(self, name: ObjectName, attribute: str) -> Any:
        try:
            attributes = self._resources[name]
        except KeyError:
            raise AttributeLookupError(
                "Resource not found", {"resource": str(name)}
            ) from None
        try:
            return attributes[attribute]
        except KeyError:
            raise AttributeLookupError(
                "Attribute not found", {"resource": str(name), "attribute": attribute}
            ) from None

    def __len__(self) -> int:
        return len(self._resources)
