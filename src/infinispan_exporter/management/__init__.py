"""
Management interface access.

The collector consumes a ``ManagementClient``: something that can list
resources matching an object name pattern and read their attributes.
"""

from .base import ManagementClient
from .jolokia import JolokiaClient
from .object_name import ObjectName, unquote
from .static import StaticManagementClient

__all__ = [
    "ManagementClient",
    "JolokiaClient",
    "ObjectName",
    "StaticManagementClient",
    "unquote",
]
