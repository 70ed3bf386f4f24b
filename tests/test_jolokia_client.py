"""Tests for the Jolokia management client.

Covers request payloads, response decoding, error translation and retry.
"""

import json

import httpx
import pytest
import respx
from httpx import Response
from infinispan_exporter.collector.discovery import CACHE_STATISTICS_PATTERN
from infinispan_exporter.errors import (
    AttributeLookupError,
    ManagementProtocolError,
    ManagementUnavailableError,
)
from infinispan_exporter.management import JolokiaClient, ObjectName

URL = "http://wildfly:8080/jolokia"

CACHE = (
    "org.wildfly.clustering.infinispan:component=Statistics,"
    'manager=web,name="users(dist_sync)",type=Cache'
)


@pytest.fixture
def client():
    with JolokiaClient(URL, max_retries=1, backoff_factor=0) as client:
        yield client


def _ok(value):
    return Response(200, json={"status": 200, "value": value, "timestamp": 1700000000})


def test_strips_trailing_slash():
    assert JolokiaClient(URL + "/").url == URL


@respx.mock
def test_query_names_sends_search(client):
    route = respx.post(URL).mock(return_value=_ok([CACHE]))

    names = client.query_names(CACHE_STATISTICS_PATTERN)

    assert names == {ObjectName.parse(CACHE)}
    payload = json.loads(route.calls.last.request.content)
    assert payload == {"type": "search", "mbean": CACHE_STATISTICS_PATTERN.canonical}


@respx.mock
def test_query_names_empty(client):
    respx.post(URL).mock(return_value=_ok([]))

    assert client.query_names(CACHE_STATISTICS_PATTERN) == set()


@respx.mock
def test_query_names_rejects_invalid_names(client):
    respx.post(URL).mock(return_value=_ok(["not an object name"]))

    with pytest.raises(ManagementProtocolError):
        client.query_names(CACHE_STATISTICS_PATTERN)


@respx.mock
def test_query_names_rejects_unexpected_value(client):
    respx.post(URL).mock(return_value=_ok({"oops": 1}))

    with pytest.raises(ManagementProtocolError):
        client.query_names(CACHE_STATISTICS_PATTERN)


@respx.mock
def test_malformed_pattern_is_protocol_error(client):
    respx.post(URL).mock(
        return_value=Response(
            200,
            json={
                "status": 400,
                "error_type": "javax.management.MalformedObjectNameException",
                "error": "Key properties cannot be empty",
            },
        )
    )

    with pytest.raises(ManagementProtocolError):
        client.query_names(CACHE_STATISTICS_PATTERN)


@respx.mock
def test_get_attribute_sends_read(client):
    route = respx.post(URL).mock(return_value=_ok(930))

    value = client.get_attribute(ObjectName.parse(CACHE), "hits")

    assert value == 930
    payload = json.loads(route.calls.last.request.content)
    assert payload["type"] == "read"
    assert payload["attribute"] == "hits"
    assert ObjectName.parse(payload["mbean"]) == ObjectName.parse(CACHE)


@respx.mock
@pytest.mark.parametrize(
    "error_type",
    ["javax.management.InstanceNotFoundException", "javax.management.AttributeNotFoundException"],
)
def test_missing_resource_or_attribute(client, error_type):
    respx.post(URL).mock(
        return_value=Response(200, json={"status": 404, "error_type": error_type, "error": "gone"})
    )

    with pytest.raises(AttributeLookupError) as exc_info:
        client.get_attribute(ObjectName.parse(CACHE), "hits")

    assert exc_info.value.details["attribute"] == "hits"


@respx.mock
def test_retries_on_503(client):
    route = respx.post(URL)
    route.side_effect = [Response(503), _ok(1)]

    assert client.get_attribute(ObjectName.parse(CACHE), "evictions") == 1
    assert route.call_count == 2


@respx.mock
def test_gives_up_after_max_retries(client):
    route = respx.post(URL).mock(return_value=Response(503))

    with pytest.raises(ManagementUnavailableError):
        client.get_attribute(ObjectName.parse(CACHE), "hits")

    assert route.call_count == 2


@respx.mock
@pytest.mark.parametrize("max_retries, expected_calls", [(0, 1), (1, 2), (3, 4)])
def test_max_retries_counts_retries_not_attempts(max_retries, expected_calls):
    route = respx.post(URL).mock(return_value=Response(503))

    with JolokiaClient(URL, max_retries=max_retries, backoff_factor=0) as client:
        with pytest.raises(ManagementUnavailableError):
            client.version()

    assert route.call_count == expected_calls


@respx.mock
def test_connection_error_is_unavailable(client):
    route = respx.post(URL).mock(side_effect=httpx.ConnectError("refused"))

    with pytest.raises(ManagementUnavailableError):
        client.query_names(CACHE_STATISTICS_PATTERN)

    assert route.call_count == 2


@respx.mock
def test_unauthorized_not_retried(client):
    route = respx.post(URL).mock(return_value=Response(401))

    with pytest.raises(ManagementUnavailableError):
        client.version()

    assert route.call_count == 1


@respx.mock
def test_permanent_http_error(client):
    route = respx.post(URL).mock(return_value=Response(404))

    with pytest.raises(ManagementProtocolError):
        client.version()

    assert route.call_count == 1


@respx.mock
def test_non_json_response(client):
    respx.post(URL).mock(return_value=Response(200, text="<html>login</html>"))

    with pytest.raises(ManagementProtocolError):
        client.version()


@respx.mock
def test_version(client):
    respx.post(URL).mock(return_value=_ok({"agent": "1.7.2", "protocol": "7.2"}))

    assert client.version()["agent"] == "1.7.2"


@respx.mock
def test_basic_auth_header():
    route = respx.post(URL).mock(return_value=_ok({"agent": "1.7.2"}))

    with JolokiaClient(URL, username="admin", password="secret") as client:
        client.version()

    assert route.calls.last.request.headers["Authorization"].startswith("Basic ")
