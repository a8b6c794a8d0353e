"""Dotted IPv4 address conversions and the reserved address check."""

from __future__ import annotations

import re

__all__ = [
    "ip_format_to_int",
    "ip_format_no_port_to_int",
    "ip_format_to_string",
    "ip_format_to_string_le",
    "ip_format_bytes",
    "is_reserved_ip",
]

_INT_RE = re.compile(r"[+-]?[0-9]+")


def _atoi(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid number in address: {text!r}")
    return int(text)


def _to_int32(value: int) -> int:
    value &= 0xFFFFFFFF
    return value - (1 << 32) if value & 0x80000000 else value


def ip_format_to_int(ip: str) -> tuple[int, int]:
    """Parse 'a.b.c.d[:port]' into a signed 32-bit address and a port."""
    port = 0
    if ":" in ip:
        parts = ip.split(":")
        port = _atoi(parts[1])
        ip = parts[0]
    value = 0
    for index, part in enumerate(ip.split(".")):
        shift = 24 - index * 8
        if shift < 0:
            raise ValueError(f"too many address components: {ip!r}")
        value |= _atoi(part) << shift
    return _to_int32(value), port & 0xFFFF


def ip_format_no_port_to_int(ip: str) -> int:
    """Parse an address, ignoring any port."""
    return ip_format_to_int(ip)[0]


def ip_format_to_string(ip: str) -> tuple[str, str]:
    """Return the address and port as decimal strings."""
    address, port = ip_format_to_int(ip)
    return str(address), str(port)


def ip_format_to_string_le(ip: str) -> tuple[str, str]:
    """Like ip_format_to_string, with the address bytes swapped."""
    address, port = ip_format_to_int(ip)
    swapped = int.from_bytes((address & 0xFFFFFFFF).to_bytes(4, "big"), "little")
    return str(_to_int32(swapped)), str(port)


def ip_format_bytes(ip: str) -> bytes:
    """Return the address components as bytes, ignoring any port."""
    host = ip.split(":")[0]
    return bytes(_atoi(part) & 0xFF for part in host.split("."))


_RESERVED_NETWORKS = tuple(
    (ip_format_no_port_to_int(address), prefix)
    for address, prefix in (
        ("0.0.0.0", 8),
        ("10.0.0.0", 8),
        ("100.64.0.0", 10),
        ("127.0.0.0", 8),
        ("169.254.0.0", 16),
        ("172.16.0.0", 12),
        ("192.0.0.0", 24),
        ("192.0.2.0", 24),
        ("192.31.196.0", 24),
        ("192.52.193.0", 24),
        ("192.88.99.0", 24),
        ("192.168.0.0", 16),
        ("192.175.48.0", 24),
        ("198.18.0.0", 15),
        ("198.51.100.0", 24),
        ("203.0.113.0", 24),
        ("224.0.0.0", 4),
        ("240.0.0.0", 4),
    )
)


def is_reserved_ip(ip: int) -> bool:
    """True if a 32-bit address lies in a private or special-use range."""
    ip = _to_int32(ip)
    return any(
        ip >> (32 - prefix) == network >> (32 - prefix)
        for network, prefix in _RESERVED_NETWORKS
    )