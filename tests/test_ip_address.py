import pytest

from wiifc.ip_address import (
    ip_format_bytes,
    ip_format_no_port_to_int,
    ip_format_to_int,
    ip_format_to_string,
    ip_format_to_string_le,
    is_reserved_ip,
)

ADDRESSES = ["127.0.0.1:8080", "8.8.4.4", "192.168.1.20:27900", "255.255.255.255", "0.0.0.0"]


def test_pinned_values():
    assert ip_format_to_int("127.0.0.1:8080") == (2130706433, 8080)
    assert ip_format_to_int("255.255.255.255") == (-1, 0)


@pytest.mark.parametrize("ip", ADDRESSES)
def test_bytes_match_int(ip):
    raw = ip_format_bytes(ip)
    assert len(raw) == 4
    assert int.from_bytes(raw, "big", signed=True) == ip_format_no_port_to_int(ip)


@pytest.mark.parametrize("ip", ADDRESSES)
def test_string_matches_int(ip):
    address, port = ip_format_to_int(ip)
    assert ip_format_to_string(ip) == (str(address), str(port))


@pytest.mark.parametrize("ip", ADDRESSES)
def test_little_endian_string(ip):
    address, port = ip_format_to_string_le(ip)
    assert int(address) == int.from_bytes(ip_format_bytes(ip), "little", signed=True)
    assert port == ip_format_to_string(ip)[1]


@pytest.mark.parametrize(
    "ip,reserved",
    [
        ("10.1.2.3", True),
        ("127.0.0.1", True),
        ("172.20.0.1", True),
        ("172.32.0.1", False),
        ("192.168.0.1", True),
        ("224.0.0.1", True),
        ("250.1.1.1", True),
        ("8.8.8.8", False),
        ("100.63.255.255", False),
        ("100.64.0.1", True),
    ],
)
def test_is_reserved(ip, reserved):
    assert is_reserved_ip(ip_format_no_port_to_int(ip)) is reserved


def test_is_reserved_accepts_unsigned():
    value = ip_format_no_port_to_int("240.0.0.1")
    assert is_reserved_ip(value & 0xFFFFFFFF) is is_reserved_ip(value)
    assert is_reserved_ip(value) is True


@pytest.mark.parametrize("ip", ["1.2.x.4", "1.2.3.4.5", "1.2.3.4:abc", ""])
def test_invalid_addresses(ip):
    with pytest.raises(ValueError):
        ip_format_to_int(ip)


def test_invalid_bytes():
    with pytest.raises(ValueError):
        ip_format_bytes("1..3.4")