"""Tests for label value sanitization."""

import pytest
from infinispan_exporter.collector.labels import sanitize_label


def test_plain_value_unchanged():
    assert sanitize_label("myCache") == "myCache"


def test_parentheses_and_dots_kept():
    assert sanitize_label("myReplicatedCache(repl_sync)") == "myReplicatedCache(repl_sync)"


def test_quoted_jmx_value_is_unquoted():
    assert sanitize_label('"default(dist_sync)"') == "default(dist_sync)"


@pytest.mark.parametrize(
    "raw, expected",
    [
        ('my"cache', "my_cache"),
        ("my\\cache", "my_cache"),
        ("line\nbreak", "line_break"),
        ("tab\there", "tab_here"),
        ("bell\x07", "bell_"),
        (r'"quoted \"inner\""', "quoted _inner_"),
        (r'"a\nb"', "a_b"),
    ],
)
def test_reserved_characters_replaced(raw, expected):
    assert sanitize_label(raw) == expected


@pytest.mark.parametrize("raw", ['"', '\\', '"\\"', '\n"\\\r', "", '""', "ünïcødé"])
def test_total_and_free_of_reserved_characters(raw):
    result = sanitize_label(raw)

    assert isinstance(result, str)
    assert '"' not in result
    assert "\\" not in result
    assert "\n" not in result


def test_deterministic():
    raw = 'weird "name"\\with\nstuff'

    assert sanitize_label(raw) == sanitize_label(raw)


def test_non_string_rejected():
    with pytest.raises(TypeError):
        sanitize_label(None)
