"""Encrypted NAS auth tokens and GPCM login tickets."""

from __future__ import annotations

import os
import struct
import time
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Callable

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from .encoding import dwc_b64decode, dwc_b64encode
from .textutil import random_string

__all__ = ["AuthTokenError", "NASAuthToken", "AuthTokenCodec"]

_TOKEN_PREFIX = "NDS"
_TOKEN_SIZE = 0xA0
_TICKET_SIZE = 0x10
_KEY_SIZE = 16
_IV_SIZE = 16
_TOKEN_MAGIC_SIZE = 14
_TICKET_MAGIC_SIZE = 4
_CHALLENGE_SIZE = 8


class AuthTokenError(ValueError):
    """Raised when a token or ticket cannot be decoded or verified."""


@dataclass(frozen=True)
class NASAuthToken:
    """The fields carried inside a NAS auth token."""

    gamecd: str
    issue_time: datetime
    userid: int
    gsbrcd: str
    cfc: int
    region: int
    lang: int
    ingamesn: str
    challenge: str
    unitcd: int
    is_localhost: bool
    csnum: str


def _sized_field(value: str, size: int) -> tuple[int, bytes]:
    """Return the clamped length and the value cut or NUL-padded to size."""
    raw = value.encode("utf-8")
    return min(len(raw), size), raw[:size].ljust(size, b"\0")


def _text(raw: bytes) -> str:
    return raw.decode("utf-8", errors="replace")


def _check_size(name: str, value: bytes, size: int) -> bytes:
    value = bytes(value)
    if len(value) != size:
        raise ValueError(f"{name} must be {size} bytes, got {len(value)}")
    return value


class AuthTokenCodec:
    """Issues and verifies tokens with its own AES keys and magic values.

    Keys not given are drawn at random, so tokens only decode with the
    codec that issued them.
    """

    def __init__(
        self,
        auth_key: bytes | None = None,
        auth_iv: bytes | None = None,
        auth_magic: bytes | None = None,
        ticket_key: bytes | None = None,
        ticket_iv: bytes | None = None,
        ticket_magic: bytes | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        def pick(name: str, value: bytes | None, size: int) -> bytes:
            return os.urandom(size) if value is None else _check_size(name, value, size)

        self._auth_key = pick("auth_key", auth_key, _KEY_SIZE)
        self._auth_iv = pick("auth_iv", auth_iv, _IV_SIZE)
        self._auth_magic = pick("auth_magic", auth_magic, _TOKEN_MAGIC_SIZE)
        self._ticket_key = pick("ticket_key", ticket_key, _KEY_SIZE)
        self._ticket_iv = pick("ticket_iv", ticket_iv, _IV_SIZE)
        self._ticket_magic = pick("ticket_magic", ticket_magic, _TICKET_MAGIC_SIZE)
        self._clock = clock

    @staticmethod
    def _encrypt(key: bytes, iv: bytes, blob: bytes) -> bytes:
        encryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).encryptor()
        return encryptor.update(blob) + encryptor.finalize()

    @staticmethod
    def _decrypt(key: bytes, iv: bytes, blob: bytes) -> bytes:
        decryptor = Cipher(algorithms.AES(key), modes.CBC(iv)).decryptor()
        return decryptor.update(blob) + decryptor.finalize()

    def _now(self) -> int:
        return int(self._clock())

    def marshal_nas_auth_token(
        self,
        gamecd: str,
        userid: int,
        gsbrcd: str,
        cfc: int,
        region: int,
        lang: int,
        ingamesn: str,
        unitcd: int,
        is_localhost: bool,
        csnum: str,
    ) -> tuple[str, str]:
        """Build an auth token; return the token and its challenge."""
        _, gamecd_raw = _sized_field(gamecd, 4)
        gsbrcd_len, gsbrcd_raw = _sized_field(gsbrcd, 16)
        name_len, name_raw = _sized_field(ingamesn, 75)
        csnum_len, csnum_raw = _sized_field(csnum, 15)
        challenge = random_string(_CHALLENGE_SIZE)

        blob = b"".join(
            (
                struct.pack("<Q", self._now()),
                gamecd_raw,
                (userid & 0xFFFF_FFFF_FFFF).to_bytes(6, "little"),
                bytes([gsbrcd_len]),
                gsbrcd_raw,
                (cfc & 0xFF_FFFF_FFFF_FFFF).to_bytes(7, "little"),
                bytes([region, lang, name_len]),
                name_raw,
                challenge.encode("ascii"),
                bytes([unitcd, 1 if is_localhost else 0, csnum_len]),
                csnum_raw,
                self._auth_magic,
            )
        )
        encrypted = self._encrypt(self._auth_key, self._auth_iv, blob)
        return _TOKEN_PREFIX + dwc_b64encode(encrypted), challenge

    def unmarshal_nas_auth_token(self, token: str) -> NASAuthToken:
        """Decrypt and verify an auth token."""
        if not token.startswith(_TOKEN_PREFIX):
            raise AuthTokenError("invalid auth token prefix")
        try:
            blob = dwc_b64decode(token[len(_TOKEN_PREFIX) :])
        except ValueError as exc:
            raise AuthTokenError(str(exc)) from exc
        if len(blob) != _TOKEN_SIZE:
            raise AuthTokenError("invalid auth token length")

        blob = self._decrypt(self._auth_key, self._auth_iv, blob)
        if blob[_TOKEN_SIZE - _TOKEN_MAGIC_SIZE :] != self._auth_magic:
            raise AuthTokenError("invalid auth token magic")

        (issued,) = struct.unpack_from("<q", blob, 0x0)
        return NASAuthToken(
            gamecd=_text(blob[0x8:0xC]),
            issue_time=datetime.fromtimestamp(issued, tz=timezone.utc),
            userid=int.from_bytes(blob[0xC:0x12], "little"),
            gsbrcd=_text(blob[0x13 : 0x13 + min(blob[0x12], 16)]),
            cfc=int.from_bytes(blob[0x23:0x2A], "little"),
            region=blob[0x2A],
            lang=blob[0x2B],
            ingamesn=_text(blob[0x2D : 0x2D + min(blob[0x2C], 75)]),
            challenge=_text(blob[0x78:0x80]),
            unitcd=blob[0x80],
            is_localhost=blob[0x81] == 0x01,
            csnum=_text(blob[0x83 : 0x83 + min(blob[0x82], 15)]),
        )

    def marshal_login_ticket(self, profile_id: int) -> str:
        """Build a login ticket for a profile ID."""
        blob = struct.pack("<QI", self._now(), profile_id & 0xFFFFFFFF) + self._ticket_magic
        return dwc_b64encode(self._encrypt(self._ticket_key, self._ticket_iv, blob))

    def unmarshal_login_ticket(self, ticket: str) -> tuple[int, datetime]:
        """Decrypt a login ticket; return the profile ID and issue time."""
        try:
            blob = dwc_b64decode(ticket)
        except ValueError as exc:
            raise AuthTokenError(str(exc)) from exc
        if len(blob) != _TICKET_SIZE:
            raise AuthTokenError("invalid login ticket length")

        blob = self._decrypt(self._ticket_key, self._ticket_iv, blob)
        if blob[0xC:0x10] != self._ticket_magic:
            raise AuthTokenError("invalid login ticket magic")

        issued, profile_id = struct.unpack_from("<qI", blob, 0)
        return profile_id, datetime.fromtimestamp(issued, tz=timezone.utc)