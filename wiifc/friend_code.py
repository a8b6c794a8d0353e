"""Friend code computation for Wii and DS titles."""

from __future__ import annotations

import hashlib

__all__ = ["calc_friend_code", "calc_friend_code_string", "raw_friend_code_string"]

_CRC8 = "crc8"
_MD5 = "md5"
_MAX_FRIEND_CODE = 999_999_999_999


def _build_crc8_table() -> tuple[int, ...]:
    table = []
    for byte in range(256):
        crc = byte
        for _ in range(8):
            crc = ((crc << 1) ^ 0x07) & 0xFF if crc & 0x80 else (crc << 1) & 0xFF
        table.append(crc)
    return tuple(table)


_CRC8_TABLE = _build_crc8_table()


def _crc8(data: bytes) -> int:
    crc = 0
    for byte in data:
        crc = _CRC8_TABLE[crc ^ byte]
    return crc


def _crc_type(game_id: str) -> tuple[str, bool]:
    """Return the checksum kind and whether the digits are shown reversed."""
    if not game_id:
        raise ValueError("game ID must not be empty")
    if game_id.startswith("RSB"):
        return _CRC8, False
    if game_id.startswith(("HDM", "WDM")):
        return _CRC8, True
    if game_id[0] in "RSHWXY":
        return _MD5, False
    return _CRC8, False


def calc_friend_code(pid: int, game_id: str) -> int:
    """Compute the friend code for a profile ID in a game."""
    if not 0 <= pid <= 0xFFFFFFFF:
        raise ValueError("profile ID must fit in 32 bits")
    if pid == 0:
        return 0
    code = game_id.encode("utf-8")
    if len(code) < 4:
        raise ValueError("game ID must be at least 4 characters")
    buffer = pid.to_bytes(4, "little") + code[3::-1]
    kind, _ = _crc_type(game_id)
    if kind == _CRC8:
        return pid | ((_crc8(buffer) & 0x7F) << 32)
    digest = hashlib.md5(buffer).digest()
    return pid | ((digest[0] & 0xFE) << 31)


def calc_friend_code_string(pid: int, game_id: str) -> str:
    """Compute the friend code and format it as shown by the game."""
    _, reverse = _crc_type(game_id)
    return raw_friend_code_string(calc_friend_code(pid, game_id), reverse)


def raw_friend_code_string(fc: int, reverse: bool) -> str:
    """Format a friend code as 'xxxx-xxxx-xxxx', optionally digit-reversed."""
    digits = f"{max(min(fc, _MAX_FRIEND_CODE), 0):012d}"
    if reverse:
        digits = digits[::-1]
    return f"{digits[:4]}-{digits[4:8]}-{digits[8:]}"