"""Mii data helpers: the RFL checksum and the list of official Mii IDs."""

from __future__ import annotations

__all__ = ["MII_SIZE", "rfl_calculate_crc", "rfl_search_official_data"]

MII_SIZE = 0x4C

_OFFICIAL_MII_IDS = (
    0x80000000ECFF82D2,
    0x80000001ECFF82D2,
    0x80000002ECFF82D2,
    0x80000003ECFF82D2,
    0x80000004ECFF82D2,
    0x80000005ECFF82D2,
)


def rfl_calculate_crc(data: bytes) -> int:
    """CRC-16 (polynomial 0x1021) over a 0x4C-byte Mii; valid Miis give 0."""
    if len(data) != MII_SIZE:
        raise ValueError(f"Mii data must be {MII_SIZE} bytes, got {len(data)}")
    crc = 0
    for value in bytes(data):
        for _ in range(8):
            carry = crc & 0x8000
            crc = (crc << 1) & 0xFFFF
            if carry:
                crc ^= 0x1021
            if value & 0x80:
                crc ^= 0x1
            value = (value << 1) & 0xFF
    return crc


def rfl_search_official_data(mii_id: int) -> int | None:
    """Return the index of an official Mii ID, or None if it is not one."""
    try:
        return _OFFICIAL_MII_IDS.index(mii_id)
    except ValueError:
        return None