"""Base64 and base32 variants used by the Nintendo Wi-Fi and GameSpy protocols."""

from __future__ import annotations

import base64
import binascii
import string
from enum import IntEnum

__all__ = [
    "GameSpyBase64Encoding",
    "dwc_b64encode",
    "dwc_b64decode",
    "base32_encode",
    "gamespy_base64_to_base64",
    "decode_gamespy_base64",
]


class GameSpyBase64Encoding(IntEnum):
    """The base64 dialects GameSpy clients may send."""

    DEFAULT = 0
    ALTERNATE = 1
    URL_SAFE = 2


_STD_TO_DWC = str.maketrans("+/=", ".-*")
_DWC_TO_STD = str.maketrans(".-*", "+/=")
_DWC_CHARS = frozenset(string.ascii_letters + string.digits + ".-*")

_GAMESPY_TRANSLATIONS = {
    GameSpyBase64Encoding.DEFAULT: str.maketrans({}),
    GameSpyBase64Encoding.ALTERNATE: str.maketrans("[]_", "+/="),
    GameSpyBase64Encoding.URL_SAFE: str.maketrans("-_", "+/"),
}

_BASE32_ALPHABET = "0123456789abcdefghijklmnopqrstuv"


def dwc_b64encode(data: bytes) -> str:
    """Encode bytes with the DWC base64 alphabet ('.' '-' and '*' padding)."""
    return base64.b64encode(bytes(data)).decode("ascii").translate(_STD_TO_DWC)


def dwc_b64decode(text: str) -> bytes:
    """Decode DWC base64 text; raise ValueError on malformed input."""
    bad = set(text) - _DWC_CHARS
    if bad:
        raise ValueError(f"illegal DWC base64 characters: {''.join(sorted(bad))!r}")
    try:
        return base64.b64decode(text.translate(_DWC_TO_STD), validate=True)
    except binascii.Error as exc:
        raise ValueError(f"invalid DWC base64 data: {exc}") from exc


def base32_encode(value: int) -> str:
    """Encode a non-negative integer in lower-case base 32; zero gives ''."""
    if value < 0:
        raise ValueError("value must not be negative")
    digits = []
    while value > 0:
        digits.append(_BASE32_ALPHABET[value & 0x1F])
        value >>= 5
    return "".join(reversed(digits))


def gamespy_base64_to_base64(text: str, encoding: int) -> str:
    """Rewrite GameSpy base64 in the given dialect as standard base64."""
    try:
        dialect = GameSpyBase64Encoding(encoding)
    except ValueError:
        raise ValueError("invalid GameSpy Base64 encoding specified") from None
    return text.translate(_GAMESPY_TRANSLATIONS[dialect])


def decode_gamespy_base64(text: str, encoding: int) -> bytes:
    """Decode GameSpy base64 in the given dialect."""
    standard = gamespy_base64_to_base64(text, encoding)
    try:
        return base64.b64decode(standard, validate=True)
    except binascii.Error as exc:
        raise ValueError(f"invalid base64 data: {exc}") from exc