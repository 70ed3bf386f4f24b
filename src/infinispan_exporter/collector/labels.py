"""
Label value sanitization.

Cache and container identifiers come straight from object name key
properties. They are unquoted, then any character that the Prometheus
text exposition format reserves inside a label value (double quote and
backslash) or any control character is replaced with ``_``.
"""

from __future__ import annotations

import re

from infinispan_exporter.management.object_name import unquote

REPLACEMENT = "_"

_RESERVED = re.compile(r'["\\\x00-\x1f\x7f-\x9f]')


def sanitize_label(value: str) -> str:
    """Return a label-safe form of a raw object name property value."""
    if not isinstance(value, str):
        raise TypeError(f"Label value must be a string, got {type(value).__name__}")
    return _RESERVED.sub(REPLACEMENT, unquote(value))
