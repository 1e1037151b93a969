"""
core/targets.py
Target expansion and work-item enumeration.

Accepts, comma-separated:
  "10.0.0.5"        single IPv4/IPv6 address
  "10.0.0.0/24"     CIDR (usable hosts; /32 and /128 yield the address)
  "example.org"     hostname, resolved once to its first address

Resolution happens here, at startup. The engine only ever sees addresses.
"""

from __future__ import annotations

import ipaddress
import socket
from typing import Iterable, List, Sequence

from core.models import WorkItem
from utils.constants import MAX_HOSTS
from utils.logger import get_logger

log = get_logger("portprobe.targets")


class TargetError(ValueError):
    """Raised when a target cannot be parsed or resolved."""


def resolve_host(name: str) -> str:
    """First address for ``name`` (IPv4 preferred)."""
    try:
        infos = socket.getaddrinfo(name, None, type=socket.SOCK_STREAM)
    except (socket.gaierror, UnicodeError) as exc:
        raise TargetError(f"Could not resolve target {name!r}: {exc}") from exc
    addrs = [info[4][0] for info in infos]
    if not addrs:
        raise TargetError(f"Could not resolve target {name!r}: no addresses")
    v4 = [a for a in addrs if ":" not in a]
    return (v4 or addrs)[0]


def _expand_one(spec: str) -> List[str]:
    try:
        return [str(ipaddress.ip_address(spec))]
    except ValueError:
        pass

    if "/" in spec:
        try:
            net = ipaddress.ip_network(spec, strict=False)
        except ValueError as exc:
            raise TargetError(f"Invalid CIDR {spec!r}: {exc}") from exc
        if net.num_addresses > MAX_HOSTS + 2:
            raise TargetError(
                f"CIDR {spec} has {net.num_addresses} addresses, limit is {MAX_HOSTS}"
            )
        hosts = [str(ip) for ip in net.hosts()]
        if not hosts:
            hosts = [str(net.network_address)]
        return hosts

    addr = resolve_host(spec)
    log.debug(f"Resolved {spec} → {addr}")
    return [addr]


def expand_targets(target: str) -> List[str]:
    """
    Expand a target spec into an ordered, de-duplicated address list.

    Raises TargetError if any part is invalid or nothing remains.
    """
    if not isinstance(target, str) or not target.strip():
        raise TargetError("Target must be a non-empty string")

    hosts: List[str] = []
    for part in target.split(","):
        part = part.strip()
        if part:
            hosts.extend(_expand_one(part))

    hosts = list(dict.fromkeys(hosts))
    if not hosts:
        raise TargetError(f"No hosts in target {target!r}")
    if len(hosts) > MAX_HOSTS:
        raise TargetError(f"{len(hosts)} hosts requested, limit is {MAX_HOSTS}")
    return hosts


def build_work_items(hosts: Sequence[str], ports: Iterable[int]) -> List[WorkItem]:
    """Host-major (host, port) cross product, first occurrence wins on repeats."""
    ports = list(dict.fromkeys(ports))
    items = (WorkItem(h, p) for h in dict.fromkeys(hosts) for p in ports)
    return list(dict.fromkeys(items))
