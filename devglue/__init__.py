"""Helpers for device tooling: hashing, TLV, network interfaces, sockets, threads and terminal colours."""

__version__ = "1.0.0"
__all__ = ["netif", "sha512", "sockets", "termcolors", "thread", "tlv", "utils"]