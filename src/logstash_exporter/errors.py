"""
Errors raised while fetching and decoding Logstash API responses.

Collectors let these propagate unchanged; the orchestrator turns them
into a result="error" scrape outcome instead of failing the scrape.
"""


class ExporterError(Exception):
    """Base class for everything this package raises on purpose."""


class FetchError(ExporterError):

    def __init__(self, endpoint: str, message: str):
        super().__init__(f"{endpoint}: {message}")
        self.endpoint = endpoint


class EndpointConnectionError(FetchError, ConnectionError):
    """The endpoint could not be reached, or answered with a non-2xx status."""


class DecodeError(FetchError):
    """The body was not JSON, or did not match the expected shape."""


class ResourceReleaseError(FetchError):
    """Closing the response body failed. Only ever logged."""


class InvalidEndpointError(ExporterError, ValueError):

    def __init__(self, endpoint: str, reason: str):
        super().__init__(f"invalid endpoint {endpoint!r}: {reason}")
        self.endpoint = endpoint
