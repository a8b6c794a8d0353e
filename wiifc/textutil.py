"""Small string helpers: random identifiers and fixed-buffer string decoding."""

from __future__ import annotations

import itertools
import random
import string
from typing import Iterable

__all__ = [
    "random_string",
    "random_hex_string",
    "utf16_to_bytes",
    "get_string",
    "get_wide_string",
    "is_uppercase_alphanumeric",
]

_LETTERS = string.ascii_uppercase
# Hex strings draw from the first 22 upper-case letters.
_HEX_LETTERS = _LETTERS[:22]
_UPPER_ALNUM = frozenset(string.digits + string.ascii_uppercase)
_WIDE_CODECS = {"big": "utf-16-be", "little": "utf-16-le"}


def random_string(n: int) -> str:
    """Return n random upper-case ASCII letters."""
    return "".join(random.choice(_LETTERS) for _ in range(n))


def random_hex_string(n: int) -> str:
    """Return n random characters drawn from 'A' to 'V'."""
    return "".join(random.choice(_HEX_LETTERS) for _ in range(n))


def utf16_to_bytes(wide: Iterable[int]) -> bytes:
    """Pack UTF-16 code units as big-endian bytes."""
    return b"".join(unit.to_bytes(2, "big") for unit in wide)


def get_string(buf: bytes) -> str:
    """Return the text before the first NUL byte; raise ValueError if none."""
    raw = bytes(buf)
    end = raw.find(b"\0")
    if end == -1:
        raise ValueError("buffer is not null-terminated")
    return raw[:end].decode("utf-8", errors="replace")


def get_wide_string(buf: bytes, byteorder: str) -> str:
    """Decode UTF-16 text up to a NUL code unit or the end of the buffer."""
    try:
        codec = _WIDE_CODECS[byteorder]
    except KeyError:
        raise ValueError("byteorder must be 'big' or 'little'") from None
    raw = bytes(buf)
    raw = raw[: len(raw) // 2 * 2]
    units = (raw[i : i + 2] for i in range(0, len(raw), 2))
    text = b"".join(itertools.takewhile(lambda unit: unit != b"\0\0", units))
    return text.decode(codec, errors="replace")


def is_uppercase_alphanumeric(text: str) -> bool:
    """True if text is non-empty and only holds 0-9 and A-Z."""
    return bool(text) and all(ch in _UPPER_ALNUM for ch in text)