import pytest

from wiifc.mii import MII_SIZE, rfl_calculate_crc, rfl_search_official_data


def test_crc_of_zero_data():
    assert rfl_calculate_crc(bytes(MII_SIZE)) == 0


@pytest.mark.parametrize("seed", [0, 1, 77, 200])
def test_appending_crc_validates(seed):
    payload = bytes((seed + i * 31) & 0xFF for i in range(MII_SIZE - 2))
    crc = rfl_calculate_crc(payload + b"\0\0")
    assert 0 <= crc <= 0xFFFF
    assert rfl_calculate_crc(payload + crc.to_bytes(2, "big")) == 0


def test_corruption_breaks_crc():
    payload = bytes(range(MII_SIZE - 2))
    crc = rfl_calculate_crc(payload + b"\0\0")
    good = bytearray(payload + crc.to_bytes(2, "big"))
    good[5] ^= 0x01
    assert rfl_calculate_crc(bytes(good)) != 0
    assert len(good) == MII_SIZE


def test_wrong_length_raises():
    with pytest.raises(ValueError):
        rfl_calculate_crc(bytes(10))


def test_official_mii_found():
    assert rfl_search_official_data(0x80000003ECFF82D2) == 3
    assert rfl_search_official_data(0x80000000ECFF82D2) == 0


def test_unofficial_mii_not_found():
    assert rfl_search_official_data(0x1234) is None