"""
Jolokia management client.

Talks to a Jolokia agent (JMX over HTTP) deployed in the application
server. Only the read-only ``search``, ``read`` and ``version`` operations
are used.
"""

from __future__ import annotations

from typing import Any

import httpx
import structlog
from tenacity import (
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from infinispan_exporter.errors import (
    AttributeLookupError,
    ManagementProtocolError,
    ManagementUnavailableError,
)
from infinispan_exporter.management.object_name import ObjectName

logger = structlog.get_logger()

DEFAULT_USER_AGENT = "infinispan-exporter/0.1.0"

# Jolokia reports JMX lookup failures in the response body, not the HTTP status.
_NOT_FOUND_ERRORS = (
    "javax.management.InstanceNotFoundException",
    "javax.management.AttributeNotFoundException",
)


class RetryableHTTPError(Exception):
    """HTTP errors that should be retried."""


def is_retryable_status(status_code: int) -> bool:
    """Determine if HTTP status code is retryable."""
    return status_code in (408, 429, 500, 502, 503, 504)


class JolokiaClient:
    """Synchronous Jolokia client with retry on transient failures."""

    def __init__(
        self,
        url: str,
        *,
        username: str | None = None,
        password: str | None = None,
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff_factor: float = 0.5,
        user_agent: str = DEFAULT_USER_AGENT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._url = url.rstrip("/")
        self._max_retries = max(0, max_retries)
        self._backoff_factor = backoff_factor
        auth = httpx.BasicAuth(username, password) if username and password else None
        self._client = httpx.Client(
            timeout=timeout,
            auth=auth,
            headers={"User-Agent": user_agent, "Content-Type": "application/json"},
            transport=transport,
        )

    @property
    def url(self) -> str:
        return self._url

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> JolokiaClient:
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.close()

    def version(self) -> dict[str, Any]:
        """Return agent and protocol version information."""
        value = self._execute({"type": "version"})
        if not isinstance(value, dict):
            raise ManagementProtocolError("Unexpected version response", {"url": self._url})
        return value

    def query_names(self, pattern: ObjectName) -> set[ObjectName]:
        value = self._execute({"type": "search", "mbean": pattern.canonical})
        if not isinstance(value, list):
            raise ManagementProtocolError(
                "Unexpected search response", {"pattern": pattern.canonical}
            )

        names: set[ObjectName] = set()
        for raw in value:
            try:
                names.add(ObjectName.parse(raw))
            except (TypeError, ValueError) as exc:
                raise ManagementProtocolError(
                    f"Agent returned an invalid object name: {raw!r}",
                    {"pattern": pattern.canonical},
                ) from exc
        return names

    def get_attribute(self, name: ObjectName, attribute: str) -> Any:
        return self._execute({"type": "read", "mbean": name.canonical, "attribute": attribute})

    def _execute(self, request: dict[str, Any]) -> Any:
        """Send one Jolokia request and return its ``value``."""
        body = self._post(request)
        if not isinstance(body, dict):
            raise ManagementProtocolError("Unexpected Jolokia response", {"url": self._url})

        status = body.get("status")
        if status == 200:
            return body.get("value")

        error_type = body.get("error_type", "")
        error = body.get("error", "Unknown error")
        details = {
            "type": request["type"],
            "mbean": request.get("mbean"),
            "status": status,
            "error_type": error_type,
        }
        if status == 404 or error_type in _NOT_FOUND_ERRORS:
            if request.get("attribute"):
                details["attribute"] = request["attribute"]
            raise AttributeLookupError(f"Jolokia lookup failed: {error}", details)
        raise ManagementProtocolError(f"Jolokia request failed: {error}", details)

    def _post(self, payload: dict[str, Any]) -> Any:
        retrying = Retrying(
            retry=retry_if_exception_type(RetryableHTTPError),
            stop=stop_after_attempt(self._max_retries + 1),
            wait=wait_exponential(multiplier=self._backoff_factor, min=0, max=10),
            reraise=True,
        )
        try:
            for attempt in retrying:
                with attempt:
                    return self._send(payload)
        except RetryableHTTPError as exc:
            raise ManagementUnavailableError(
                f"Management interface unavailable: {exc}", {"url": self._url}
            ) from exc
        raise AssertionError("unreachable")  # pragma: no cover

    def _send(self, payload: dict[str, Any]) -> Any:
        try:
            response = self._client.post(self._url, json=payload)
        except (httpx.TimeoutException, httpx.TransportError) as exc:
            logger.warning("jolokia_network_error", url=self._url, error=str(exc))
            raise RetryableHTTPError(str(exc)) from exc

        if is_retryable_status(response.status_code):
            logger.warning("jolokia_retryable_error", status=response.status_code, url=self._url)
            raise RetryableHTTPError(f"HTTP {response.status_code}")

        if response.status_code in (401, 403):
            raise ManagementUnavailableError(
                "Management interface rejected credentials",
                {"url": self._url, "status": response.status_code},
            )

        try:
            response.raise_for_status()
            return response.json()
        except httpx.HTTPStatusError as exc:
            logger.error("jolokia_permanent_error", status=response.status_code, url=self._url)
            raise ManagementProtocolError(
                str(exc), {"url": self._url, "status": response.status_code}
            ) from exc
        except ValueError as exc:
            raise ManagementProtocolError(
                "Jolokia response is not JSON", {"url": self._url}
            ) from exc
