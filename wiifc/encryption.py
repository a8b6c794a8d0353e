"""GameSpy 'enctype X' stream encryption used for server list replies."""

from __future__ import annotations

import time

__all__ = ["encrypt_type_x"]

_HEADER_SIZE = 20
_HEADER_LEN = 7
_CHALLENGE_LEN = 8
_MASK64 = (1 << 64) - 1


def encrypt_type_x(key: bytes, challenge: bytes, data: bytes, seed: int | None = None) -> bytes:
    """Encrypt data with enctype X; seed defaults to the current Unix time."""
    key = bytes(key)
    challenge = bytearray(challenge)
    data = bytes(data)
    if not key:
        raise ValueError("key must not be empty")
    if len(challenge) < _CHALLENGE_LEN:
        raise ValueError(f"challenge must be at least {_CHALLENGE_LEN} bytes")

    rnd = int(time.time()) if seed is None else seed
    header = bytearray(_HEADER_SIZE)
    for i in range(_HEADER_SIZE):
        rnd = (rnd * 0x343FD + 0x269EC3) & _MASK64
        header[i] = (rnd ^ key[i % len(key)] ^ challenge[i % len(challenge)]) & 0xFF

    header[0] = (_HEADER_LEN - 2) ^ 0xEC
    header[1] = 0
    header[2] = 0
    header[_HEADER_LEN - 1] = (_HEADER_SIZE - _HEADER_LEN) ^ 0xEA

    state = _key_schedule(key, challenge, bytes(header[_HEADER_LEN:]))
    body = bytes(_crypt_byte(state, byte) for byte in data)
    return bytes(header) + body


def _key_schedule(key: bytes, challenge: bytearray, salt: bytes) -> bytearray:
    for i, byte in enumerate(salt):
        challenge[(key[i % len(key)] * i) & 7] ^= challenge[i & 7] ^ byte

    state = bytearray(range(256)) + bytearray(5)
    n1 = n2 = 0
    for i in range(255, -1, -1):
        swap, n1, n2 = _pick_index(state, i, challenge, n1, n2)
        state[i], state[swap] = state[swap], state[i]

    state[256] = state[1]
    state[257] = state[3]
    state[258] = state[5]
    state[259] = state[7]
    state[260] = state[n1 & 0xFF]
    return state


def _pick_index(state: bytearray, count: int, ident: bytearray, n1: int, n2: int) -> tuple[int, int, int]:
    if count == 0:
        return 0, n1, n2

    mask = 1
    while mask < count:
        mask = (mask << 1) + 1

    attempts = 0
    while True:
        n1 = (state[n1 & 0xFF] + ident[n2]) & 0xFF
        n2 += 1
        if n2 >= _CHALLENGE_LEN:
            n2 = 0
            n1 += _CHALLENGE_LEN
        candidate = n1 & mask
        attempts += 1
        if attempts > 11:
            candidate %= count
        if candidate <= count:
            return candidate, n1, n2


def _crypt_byte(k: bytearray, d: int) -> int:
    a = k[256]
    b = k[257]
    c = k[a]
    k[256] = (a + 1) & 0xFF
    k[257] = (b + c) & 0xFF

    a = k[260]
    b = k[k[257]]
    c = k[a]
    k[a] = b

    a = k[k[259]]
    b = k[257]
    k[b] = a

    a = k[k[256]]
    b = k[259]
    k[b] = a

    a = k[256]
    k[a] = c

    b = k[258]
    a = k[c]
    c = k[259]
    b = (a + b) & 0xFF
    k[258] = b

    a = b
    c = k[c]
    b = k[k[257]]
    a = k[a]
    c = (b + c) & 0xFF
    b = k[k[260]]
    c = (b + c) & 0xFF
    b = k[c]
    c = k[k[256]]
    a = (a + c) & 0xFF
    c = k[b]
    b = k[a]
    c ^= b ^ d
    k[260] = c
    k[259] = d
    return c