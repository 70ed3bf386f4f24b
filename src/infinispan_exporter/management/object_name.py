"""
JMX object names.

An object name identifies one management resource: a domain plus a set of
key properties, written ``domain:key=value,key=value``. Values may be
quoted (``name="a,b"``) and patterns may use ``*`` and ``?`` wildcards in
the domain and in property values, or end the property list with ``,*``.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field

_QUOTE_ESCAPES = {'"': '"', "\\": "\\", "n": "\n", "*": "*", "?": "?"}


@dataclass(frozen=True)
class ObjectName:
    """Immutable, hashable JMX object name (or object name pattern)."""

    domain: str
    properties: tuple[tuple[str, str], ...] = ()
    property_list_pattern: bool = field(default=False)

    def __post_init__(self) -> None:
        # Canonical key order makes equal names compare and hash equal.
        object.__setattr__(self, "properties", tuple(sorted(self.properties)))

    @classmethod
    def parse(cls, text: str) -> ObjectName:
        """
        Parse an object name from its string form.

        Raises:
            ValueError: If the text is not a well-formed object name
        """
        domain, sep, rest = text.partition(":")
        if not sep:
            raise ValueError(f"Object name has no domain separator: {text!r}")
        if not rest:
            raise ValueError(f"Object name has no key properties: {text!r}")

        properties: dict[str, str] = {}
        list_pattern = False
        for token in _split_properties(rest, text):
            if token == "*":
                if list_pattern:
                    raise ValueError(f"Repeated property list wildcard: {text!r}")
                list_pattern = True
                continue
            key, eq, value = token.partition("=")
            if not eq or not key or not value:
                raise ValueError(f"Malformed key property {token!r} in {text!r}")
            if key in properties:
                raise ValueError(f"Duplicate key {key!r} in {text!r}")
            properties[key] = value

        if not properties and not list_pattern:
            raise ValueError(f"Object name has no key properties: {text!r}")

        return cls(domain, tuple(properties.items()), list_pattern)

    @property
    def canonical(self) -> str:
        props = ",".join(f"{key}={value}" for key, value in self.properties)
        if self.property_list_pattern:
            props = f"{props},*" if props else "*"
        return f"{self.domain}:{props}"

    def key_property(self, key: str) -> str | None:
        """Return the raw value of a key property, or None if absent."""
        for name, value in self.properties:
            if name == key:
                return value
        return None

    @property
    def is_pattern(self) -> bool:
        return (
            self.property_list_pattern
            or _has_wildcard(self.domain)
            or any(_has_wildcard(value) for _, value in self.properties)
        )

    def matches(self, other: ObjectName) -> bool:
        """Return True if ``other`` is selected by this name used as a pattern."""
        if not _wildcard_regex(self.domain).fullmatch(other.domain):
            return False

        other_props = dict(other.properties)
        for key, value in self.properties:
            candidate = other_props.get(key)
            if candidate is None or not _wildcard_regex(value).fullmatch(candidate):
                return False

        if self.property_list_pattern:
            return True
        return len(other_props) == len(self.properties)

    def __str__(self) -> str:
        return self.canonical


def unquote(value: str) -> str:
    """
    Resolve a JMX quoted value (``"..."``) to its plain form.

    Values that are not quoted are returned unchanged. Unknown escapes keep
    the escaped character.
    """
    if len(value) < 2 or not (value.startswith('"') and value.endswith('"')):
        return value

    out: list[str] = []
    chars = iter(value[1:-1])
    for char in chars:
        if char == "\\":
            escaped = next(chars, "\\")
            out.append(_QUOTE_ESCAPES.get(escaped, escaped))
        else:
            out.append(char)
    return "".join(out)


def _split_properties(rest: str, text: str) -> list[str]:
    """Split a key property list on commas that are not inside quotes."""
    tokens: list[str] = []
    current: list[str] = []
    in_quotes = False
    escaped = False

    for char in rest:
        if escaped:
            current.append(char)
            escaped = False
        elif char == "\\" and in_quotes:
            current.append(char)
            escaped = True
        elif char == '"':
            current.append(char)
            in_quotes = not in_quotes
        elif char == "," and not in_quotes:
            tokens.append("".join(current))
            current = []
        else:
            current.append(char)

    if in_quotes:
        raise ValueError(f"Unterminated quoted value in {text!r}")
    tokens.append("".join(current))
    return tokens


def _has_wildcard(value: str) -> bool:
    escaped = False
    for char in value:
        if escaped:
            escaped = False
        elif char == "\\":
            escaped = True
        elif char in "*?":
            return True
    return False


def _wildcard_regex(value: str) -> re.Pattern[str]:
    parts: list[str] = []
    chars = iter(value)
    for char in chars:
        if char == "\\":
            # Escaped characters match themselves, escape included.
            parts.append(re.escape(char + next(chars, "")))
        elif char == "*":
            parts.append(".*")
        elif char == "?":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)
