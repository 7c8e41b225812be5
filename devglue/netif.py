"""Network interface queries: IPv6 address scopes, scope ids and the primary MAC address."""

from __future__ import annotations

import ipaddress
import re
import socket
import sys
from collections.abc import Iterator
from dataclasses import dataclass

import psutil

SCOPE_GLOBAL = 0
SCOPE_NODE_LOCAL = 1
SCOPE_LINK_LOCAL = 2
SCOPE_SITE_LOCAL = 5

_MAC_LENGTH = 6
_MAC_SEPARATORS = re.compile(r"[:-]")
_LINK_LOCAL = ipaddress.IPv6Network("fe80::/10")
_SITE_LOCAL = ipaddress.IPv6Network("fec0::/10")


@dataclass(frozen=True)
class _Inet6Entry:
    name: str
    address: ipaddress.IPv6Address
    scope_id: int
    loopback: bool


def _split_scope(text: str) -> tuple[str, str | None]:
    if "%" in text:
        address, suffix = text.split("%", 1)
        return address, suffix
    return text, None


def _to_ipv6(address) -> ipaddress.IPv6Address:
    """Return ``address`` as an IPv6Address without any zone suffix."""
    if isinstance(address, ipaddress.IPv6Address):
        return ipaddress.IPv6Address(address.packed)
    if isinstance(address, str):
        address, _ = _split_scope(address)
    return ipaddress.IPv6Address(address)


def in6_addr_scope(address) -> int:
    """Return the scope of an IPv6 address: 0 global, 1 node, 2 link, 5 site.

    Loopback counts as link scope; multicast scopes other than node, link
    and site yield 0.
    """
    addr = _to_ipv6(address)
    if addr.is_multicast:
        multicast_scope = addr.packed[1] & 0x0F
        if multicast_scope in (SCOPE_NODE_LOCAL, SCOPE_LINK_LOCAL, SCOPE_SITE_LOCAL):
            return multicast_scope
        return SCOPE_GLOBAL
    if addr in _LINK_LOCAL or addr == ipaddress.IPv6Address("::1"):
        return SCOPE_LINK_LOCAL
    if addr in _SITE_LOCAL:
        return SCOPE_SITE_LOCAL
    return SCOPE_GLOBAL


def _flag_set(stats) -> set[str]:
    flags = getattr(stats, "flags", "") or ""
    return {flag.strip() for flag in flags.split(",") if flag.strip()}


def _is_loopback(name: str, stats) -> bool:
    return "loopback" in _flag_set(stats) or name in ("lo", "lo0")


def _name_to_index(name: str) -> int:
    try:
        return socket.if_nametoindex(name)
    except (OSError, ValueError):
        return 0


def _entry_scope_id(name: str, address: ipaddress.IPv6Address, suffix: str | None) -> int:
    if suffix:
        return int(suffix) if suffix.isdigit() else _name_to_index(suffix)
    if address in _LINK_LOCAL or (address.is_multicast and address.packed[1] & 0x0F == SCOPE_LINK_LOCAL):
        return _name_to_index(name)
    return 0


def _inet6_entries() -> Iterator[_Inet6Entry]:
    """Yield the IPv6 addresses of interfaces that are up and running."""
    stats_by_name = psutil.net_if_stats()
    for name, entries in psutil.net_if_addrs().items():
        stats = stats_by_name.get(name)
        if stats is None or not stats.isup:
            continue
        flags = _flag_set(stats)
        if flags and "running" not in flags:
            continue
        loopback = _is_loopback(name, stats)
        for entry in entries:
            if entry.family != socket.AF_INET6 or not entry.address:
                continue
            text, suffix = _split_scope(entry.address)
            try:
                address = ipaddress.IPv6Address(text)
            except ValueError:
                continue
            yield _Inet6Entry(name, address, _entry_scope_id(name, address, suffix), loopback)


def _parse_mac(text: str) -> bytes | None:
    parts = _MAC_SEPARATORS.split(text)
    if len(parts) != _MAC_LENGTH:
        return None
    try:
        return bytes(int(part, 16) for part in parts)
    except ValueError:
        return None


def primary_mac_address() -> bytes:
    """Return the 6-byte hardware address of the primary network interface.

    Loopback and interfaces that are down are ignored; on macOS only en0
    qualifies. Raises LookupError if no suitable interface exists.
    """
    stats_by_name = psutil.net_if_stats()
    on_darwin = sys.platform == "darwin"
    for name, entries in psutil.net_if_addrs().items():
        stats = stats_by_name.get(name)
        if stats is None or not stats.isup or _is_loopback(name, stats):
            continue
        if on_darwin and name != "en0":
            continue
        for entry in entries:
            if entry.family != psutil.AF_LINK or not entry.address:
                continue
            mac = _parse_mac(entry.address)
            if mac is not None:
                return mac
    raise LookupError("no network interface with a hardware address found")


def sockaddr_in6_scope_id(address, scope_id: int) -> int | None:
    """Return the scope id to use when connecting to ``address``.

    Global addresses need none and yield 0. Otherwise an interface address
    of the same scope is chosen, preferring one that equals ``address`` or
    whose scope id equals ``scope_id``. Returns None if nothing matches.
    """
    wanted = _to_ipv6(address)
    addr_scope = in6_addr_scope(wanted)
    if addr_scope == SCOPE_GLOBAL:
        return 0

    result = None
    for entry in _inet6_entries():
        if in6_addr_scope(entry.address) != addr_scope:
            continue
        if entry.address == wanted:
            result = entry.scope_id
            if entry.scope_id == scope_id:
                break
            continue
        if entry.loopback:
            continue
        result = entry.scope_id
        if entry.scope_id == scope_id:
            break
    return result