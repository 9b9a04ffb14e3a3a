"""Host identity: pod name or host name, and the host's IPv4 address."""

from __future__ import annotations

import ipaddress
import socket
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import psutil

from packages.knaudit_core.errors import CollectionError

InterfaceLister = Callable[[], Mapping[str, Sequence[Any]]]


def local_ipv4(list_interfaces: InterfaceLister | None = None) -> str:
    """Return the first non-loopback IPv4 address bound to any interface.

    Interfaces come from ``psutil.net_if_addrs`` unless a lister is given.
    """
    try:
        interfaces = (list_interfaces or psutil.net_if_addrs)()
    except OSError as exc:
        raise CollectionError(f"cannot enumerate network interfaces: {exc}") from exc

    for addresses in interfaces.values():
        for address in addresses:
            if address.family != socket.AF_INET:
                continue
            try:
                ip = ipaddress.IPv4Address(address.address)
            except ValueError:
                continue
            if not ip.is_loopback:
                return str(ip)
    raise CollectionError("no non-loopback IPv4 address found")


def host_name(configured: str | None) -> str:
    """Return the configured pod name, falling back to the machine host name."""
    if configured and configured.strip():
        return configured.strip()
    return socket.gethostname()
