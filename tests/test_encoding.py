import base64

import pytest

from wiifc.encoding import (
    GameSpyBase64Encoding,
    base32_encode,
    decode_gamespy_base64,
    dwc_b64decode,
    dwc_b64encode,
    gamespy_base64_to_base64,
)

SAMPLES = [b"", b"a", b"ab", b"abc", bytes(range(256)), b"\xfb\xff\xfe" * 7]

DWC_ALPHABET = set(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789.-*"
)


@pytest.mark.parametrize("data", SAMPLES)
def test_dwc_round_trip(data):
    assert dwc_b64decode(dwc_b64encode(data)) == data


@pytest.mark.parametrize("data", SAMPLES)
def test_dwc_uses_own_alphabet(data):
    encoded = dwc_b64encode(data)
    assert set(encoded) <= DWC_ALPHABET
    assert len(encoded) == len(base64.b64encode(data))


def test_dwc_pinned_value():
    assert dwc_b64encode(b"\xfb\xff") == ".-8*"


@pytest.mark.parametrize("text", ["abc$", "+/8=", "abc"])
def test_dwc_rejects_bad_input(text):
    with pytest.raises(ValueError):
        dwc_b64decode(text)


def test_base32_zero_and_single_digit():
    assert base32_encode(0) == ""
    assert base32_encode(31) == "v"


@pytest.mark.parametrize("value", [1, 32, 12345, 2**40 + 17, 0x80000000000 - 1])
def test_base32_round_trip(value):
    assert int(base32_encode(value), 32) == value


def test_base32_negative_raises():
    with pytest.raises(ValueError):
        base32_encode(-1)


def test_default_dialect_is_identity():
    text = "q[]_-"
    assert gamespy_base64_to_base64(text, GameSpyBase64Encoding.DEFAULT) == text


@pytest.mark.parametrize("data", SAMPLES)
def test_alternate_dialect_decodes(data):
    std = base64.b64encode(data).decode()
    alt = std.replace("+", "[").replace("/", "]").replace("=", "_")
    assert decode_gamespy_base64(alt, GameSpyBase64Encoding.ALTERNATE) == data


@pytest.mark.parametrize("data", SAMPLES)
def test_url_safe_dialect_decodes(data):
    std = base64.b64encode(data).decode()
    url = std.replace("+", "-").replace("/", "_")
    assert decode_gamespy_base64(url, 2) == data


def test_invalid_dialect_raises():
    with pytest.raises(ValueError):
        gamespy_base64_to_base64("abcd", 5)
    with pytest.raises(ValueError):
        decode_gamespy_base64("abcd", -1)


def test_decode_bad_base64_raises():
    with pytest.raises(ValueError):
        decode_gamespy_base64("a$cd", GameSpyBase64Encoding.DEFAULT)