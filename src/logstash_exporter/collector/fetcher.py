"""
Fetch a JSON document over HTTP and decode it into a pydantic model.

Every collector goes through here. One GET, no retries, no caching.
Failures come back as EndpointConnectionError or DecodeError so the
caller can tell "couldn't reach Logstash" from "Logstash said something
we don't understand".
"""

from __future__ import annotations

import logging
from typing import Optional, Type, TypeVar

import httpx
from pydantic import BaseModel, ValidationError

from logstash_exporter.errors import (
    DecodeError,
    EndpointConnectionError,
    InvalidEndpointError,
    ResourceReleaseError,
)

log = logging.getLogger(__name__)

ShapeT = TypeVar("ShapeT", bound=BaseModel)


def validate_endpoint(endpoint: str) -> str:
    """Return the endpoint without a trailing slash, or raise InvalidEndpointError.

    Purely syntactic; nothing is sent over the network.
    """
    try:
        url = httpx.URL(endpoint)
    except (httpx.InvalidURL, TypeError) as exc:
        raise InvalidEndpointError(str(endpoint), str(exc)) from exc

    if url.scheme not in ("http", "https"):
        raise InvalidEndpointError(endpoint, "scheme must be http or https")
    if not url.host:
        raise InvalidEndpointError(endpoint, "missing host")
    # Collector paths are appended to the base, so it must end in a path
    if url.query or url.fragment or "?" in endpoint or "#" in endpoint:
        raise InvalidEndpointError(endpoint, "query strings and fragments are not allowed")

    return endpoint.rstrip("/")


class Fetcher:

    def __init__(self, client: Optional[httpx.Client] = None):
        # httpx default timeout; no override
        self._owns_client = client is None
        self._client = client if client is not None else httpx.Client(follow_redirects=True)

    def fetch(self, endpoint: str, shape: Type[ShapeT]) -> ShapeT:
        """GET `endpoint` and validate the JSON body against `shape`."""
        try:
            request = self._client.build_request("GET", endpoint)
            response = self._client.send(request, stream=True, follow_redirects=True)
        except httpx.RequestError as exc:
            log.error("Cannot retrieve metrics from %s: %s", endpoint, exc)
            raise EndpointConnectionError(endpoint, f"request failed: {exc}") from exc

        try:
            if response.is_error:
                log.error("Cannot retrieve metrics from %s: HTTP %d", endpoint, response.status_code)
                raise EndpointConnectionError(endpoint, f"HTTP {response.status_code}")

            try:
                body = response.read()
            except httpx.RequestError as exc:
                log.error("Cannot read response body from %s: %s", endpoint, exc)
                raise EndpointConnectionError(endpoint, f"reading body failed: {exc}") from exc

            try:
                return shape.model_validate_json(body)
            except ValidationError as exc:
                log.error("Cannot parse Logstash response json from %s: %s", endpoint, exc)
                raise DecodeError(endpoint, f"{shape.__name__}: {exc}") from exc
        finally:
            _release(endpoint, response)

    def close(self):
        if self._owns_client:
            self._client.close()


def _release(endpoint: str, response) -> None:
    """Close the response, logging (never raising) if that fails."""
    try:
        response.close()
    except (httpx.HTTPError, OSError, RuntimeError) as exc:
        log.error("Cannot close response body: %s", ResourceReleaseError(endpoint, str(exc)))
