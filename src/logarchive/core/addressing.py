"""
Managing-service address lookup.

Maps a protocol type to the configured network address of the cluster's
managing service. No connection is made here; transport and authentication
belong to the caller.

Usage::

    addr = resolve_service_address(config.cluster, ServiceProtocol.SCHEDULER,
                                   retarget_tokens=tokens.retarget)
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import Enum
from typing import NamedTuple

from logarchive.core.config import ClusterConfig
from logarchive.core.constants import (
    DEFAULT_ADMIN_PORT,
    DEFAULT_CLIENT_PORT,
    DEFAULT_SCHEDULER_PORT,
)
from logarchive.core.exceptions import ConfigError, UnsupportedProtocolError

logger = logging.getLogger(__name__)


class ServiceProtocol(str, Enum):
    CLIENT = "client"
    ADMIN = "admin"
    SCHEDULER = "scheduler"


class ServiceAddress(NamedTuple):
    host: str
    port: int

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"


def parse_address(value: str, default_port: int) -> ServiceAddress:
    """Parse ``host[:port]``; a missing port falls back to ``default_port``."""
    value = value.strip()
    if not value:
        raise ConfigError("Empty service address")
    host, sep, port = value.rpartition(":")
    if not sep:
        return ServiceAddress(value, default_port)
    if not host:
        raise ConfigError(f"Missing host in service address: {value!r}")
    try:
        return ServiceAddress(host, int(port))
    except ValueError as exc:
        raise ConfigError(f"Invalid port in service address: {value!r}") from exc


def resolve_service_address(
    cluster: ClusterConfig,
    protocol: ServiceProtocol | str,
    retarget_tokens: Callable[[ServiceAddress], None] | None = None,
) -> ServiceAddress:
    """
    Return the address serving ``protocol``.

    Scheduler tokens are bound to the scheduler address, so
    ``retarget_tokens`` is invoked with the resolved address for
    SCHEDULER lookups only.
    """
    try:
        protocol = ServiceProtocol(protocol)
    except ValueError:
        message = f"Unsupported protocol for the managing service: {protocol!r}"
        logger.error(message)
        raise UnsupportedProtocolError(message) from None

    if protocol is ServiceProtocol.CLIENT:
        return parse_address(cluster.address, DEFAULT_CLIENT_PORT)
    if protocol is ServiceProtocol.ADMIN:
        return parse_address(cluster.admin_address, DEFAULT_ADMIN_PORT)

    addr = parse_address(cluster.scheduler_address, DEFAULT_SCHEDULER_PORT)
    if retarget_tokens is not None:
        retarget_tokens(addr)
    return addr
