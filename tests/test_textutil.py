import string

import pytest

from wiifc.textutil import (
    get_string,
    get_wide_string,
    is_uppercase_alphanumeric,
    random_hex_string,
    random_string,
    utf16_to_bytes,
)


@pytest.mark.parametrize("n", [0, 1, 8, 32])
def test_random_string_shape(n):
    s = random_string(n)
    assert len(s) == n
    assert set(s) <= set(string.ascii_uppercase)


def test_random_hex_string_shape():
    s = random_hex_string(200)
    assert len(s) == 200
    assert set(s) <= set(string.ascii_uppercase[:22])


def test_utf16_to_bytes_pinned():
    assert utf16_to_bytes([0x0041, 0x3042]) == b"\x00A\x30\x42"


@pytest.mark.parametrize("text", ["", "Mario", "マリオ", "a\u00e9z"])
def test_wide_round_trip(text):
    units = [int.from_bytes(text.encode("utf-16-be")[i : i + 2], "big")
             for i in range(0, len(text.encode("utf-16-be")), 2)]
    encoded = utf16_to_bytes(units) + b"\0\0" + b"junk"
    assert get_wide_string(encoded, "big") == text


def test_wide_little_endian_stops_at_terminator():
    buf = "hi".encode("utf-16-le") + b"\0\0" + "xx".encode("utf-16-le")
    assert get_wide_string(buf, "little") == "hi"


def test_wide_without_terminator_reads_whole_buffer():
    buf = "abc".encode("utf-16-be") + b"\x00"
    assert get_wide_string(buf, "big") == "abc"


def test_wide_bad_byteorder():
    with pytest.raises(ValueError):
        get_wide_string(b"\0A", "middle")


def test_get_string():
    assert get_string(b"abc\0def") == "abc"
    assert get_string(b"\0") == ""


def test_get_string_requires_terminator():
    with pytest.raises(ValueError):
        get_string(b"abc")


@pytest.mark.parametrize(
    "text,expected",
    [("ABC123", True), ("Z", True), ("", False), ("abc", False), ("AB-C", False), ("ÄB", False)],
)
def test_is_uppercase_alphanumeric(text, expected):
    assert is_uppercase_alphanumeric(text) is expected