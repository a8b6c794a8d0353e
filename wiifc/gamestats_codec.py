"""Wire encryption of the GameStats TCP service and signing of its web replies."""

from __future__ import annotations

import base64
import hashlib
import struct
from itertools import cycle
from urllib.parse import parse_qs, urlencode, urlsplit, urlunsplit

from .gamespy_message import GameSpyCommand, create_gamespy_message

__all__ = [
    "BufferOverflowError",
    "PacketBuffer",
    "MAX_BUFFER_SIZE",
    "encrypt_message",
    "decrypt_stream",
    "calculate_token",
    "expected_hash",
    "sign_response",
    "build_get2_response",
    "http_error_page",
]

MAX_BUFFER_SIZE = 0x4000

_XOR_KEY = b"GameSpy3D"
_FINAL = b"\\final\\"
_FINAL_TEXT = "\\final\\"
_RESPONSE_PADDING = 13
_RNK_GET = 1


class BufferOverflowError(ValueError):
    """Raised when buffered packet data would exceed the maximum size."""


def encrypt_message(command: GameSpyCommand) -> bytes:
    """Serialise a command and XOR it with the GameStats key, leaving the trailing \\final\\ plain."""
    payload = create_gamespy_message(command).encode("utf-8")
    body, tail = payload[: -len(_FINAL)], payload[-len(_FINAL) :]
    return bytes(b ^ k for b, k in zip(body, cycle(_XOR_KEY))) + tail


def decrypt_stream(data: bytes) -> str:
    """Decrypt one or more GameStats packets; the key restarts after each \\final\\."""
    data = bytes(data)
    out: list[str] = []
    position = 0
    i = 0
    while i < len(data):
        if data[i : i + len(_FINAL)] == _FINAL:
            out.append(_FINAL_TEXT)
            i += len(_FINAL)
            position = 0
            continue
        out.append(chr(data[i] ^ _XOR_KEY[position]))
        position = (position + 1) % len(_XOR_KEY)
        i += 1
    return "".join(out)


class PacketBuffer:
    """Collects packet fragments until a complete message has arrived."""

    def __init__(self, max_size: int = MAX_BUFFER_SIZE) -> None:
        self._max_size = max_size
        self._buffer = bytearray()

    def __len__(self) -> int:
        return len(self._buffer)

    def feed(self, data: bytes) -> str | None:
        """Add received bytes; return the decrypted messages once they end in \\final\\.

        Raises BufferOverflowError, keeping what was buffered before, if the
        data would push the buffer past its maximum size.
        """
        data = bytes(data)
        if len(self._buffer) + len(data) > self._max_size:
            raise BufferOverflowError("packet buffer overflow")
        self._buffer += data
        if not self._buffer.endswith(_FINAL):
            return None
        message = decrypt_stream(bytes(self._buffer))
        self._buffer = bytearray()
        return message


def calculate_token(url: str, host: str, salt: str) -> str:
    """Derive the 32-character request token from the host, path, pid and a salt."""
    parts = urlsplit(url)
    pid = parse_qs(parts.query, keep_blank_values=True).get("pid", [""])[0]
    canonical = urlunsplit(
        (parts.scheme, parts.netloc, parts.path, urlencode({"pid": pid}), parts.fragment)
    )
    digest = hashlib.sha256((host + canonical + salt).encode("utf-8")).digest()
    return base64.urlsafe_b64encode(digest).decode("ascii")[:32]


def expected_hash(game_stats_key: str, token: str) -> str:
    """The hex SHA-1 a client must send for a token."""
    return hashlib.sha1((game_stats_key + token).encode("utf-8")).hexdigest()


def sign_response(game_stats_key: str, response: bytes, version: int) -> bytes:
    """Pad a reply for DWC and, for stats version 2 and up, append its hex SHA-1."""
    padded = bytes(response) + bytes(_RESPONSE_PADDING)
    if version <= 1:
        return padded
    encoded = base64.urlsafe_b64encode(padded).decode("ascii")
    signature = hashlib.sha1((game_stats_key + encoded + game_stats_key).encode("utf-8"))
    return padded + signature.hexdigest().encode("ascii")


def build_get2_response() -> bytes:
    """An empty ranking reply: RNK_GET with a count of zero."""
    return struct.pack("<II", _RNK_GET, 0)


def http_error_page(error_string: str, server_name: str) -> str:
    """The HTML body sent with an HTTP error status."""
    return (
        "<html>\n"
        f"<head><title>{error_string}</title></head>\n"
        "<body>\n"
        f"<center><h1>{error_string}</h1></center>\n"
        f"<hr><center>{server_name}</center>\n"
        "</body>\n"
        "</html>\n"
    )