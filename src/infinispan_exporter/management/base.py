from __future__ import annotations

from typing import Any, Protocol

from infinispan_exporter.management.object_name import ObjectName


class ManagementClient(Protocol):
    """Read-only view of a management (JMX) namespace.

    Implementations raise ``ManagementUnavailableError`` when the server
    cannot be reached, ``ManagementProtocolError`` for malformed patterns or
    unexpected answers, and ``AttributeLookupError`` when a resource or one
    of its attributes does not exist.
    """

    def query_names(self, pattern: ObjectName) -> set[ObjectName]:
        ...

    def get_attribute(self, name: ObjectName, attribute: str) -> Any:
        ...
