"""Runtime settings, as collected from the command line."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

DEFAULT_ENDPOINT = "http://localhost:9600"
DEFAULT_LISTEN_ADDRESS = ":9198"
LOG_LEVELS = ("debug", "info", "warning", "error")


@dataclass(frozen=True)
class ExporterConfig:
    endpoint: str = DEFAULT_ENDPOINT
    listen_address: str = DEFAULT_LISTEN_ADDRESS
    log_level: str = "info"

    @property
    def bind(self) -> Tuple[str, int]:
        return parse_listen_address(self.listen_address)


def parse_listen_address(address: str) -> Tuple[str, int]:
    """Split "host:port" (host may be empty, meaning all interfaces)."""
    host, sep, port = address.rpartition(":")
    if not sep:
        raise ValueError(f"listen address {address!r} must look like host:port")
    try:
        port_number = int(port)
    except ValueError:
        raise ValueError(f"invalid port in listen address {address!r}") from None
    if not 0 <= port_number <= 65535:
        raise ValueError(f"port out of range in listen address {address!r}")
    # [::1]:9198
    host = host.strip("[]")
    return host or "0.0.0.0", port_number
