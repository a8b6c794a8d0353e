import pytest

from wiifc.gamespy_message import create_gamespy_message, parse_gamespy_message
from wiifc.gamestats_codec import (
    MAX_BUFFER_SIZE,
    BufferOverflowError,
    PacketBuffer,
    build_get2_response,
    calculate_token,
    decrypt_stream,
    encrypt_message,
    expected_hash,
    http_error_page,
    sign_response,
)

FINAL = b"\\final\\"
LOGIN = (
    "\\login\\\\challenge\\abcdef\\partnerid\\11\\gamename\\mariokartwii"
    "\\id\\1\\final\\"
)


def _command(text):
    return parse_gamespy_message(text)[0]


def test_encrypt_keeps_final_plain():
    encrypted = encrypt_message(_command("\\ka\\\\final\\"))
    assert encrypted.endswith(FINAL)


def test_encrypt_hides_body():
    command = _command(LOGIN)
    encrypted = encrypt_message(command)
    plain = create_gamespy_message(command).encode()
    assert len(encrypted) == len(plain)
    assert encrypted[:-7] != plain[:-7]


def test_round_trip():
    command = _command(LOGIN)
    assert decrypt_stream(encrypt_message(command)) == create_gamespy_message(command)


def test_key_restarts_after_each_packet():
    first = _command(LOGIN)
    second = _command("\\ka\\\\final\\")
    stream = encrypt_message(first) + encrypt_message(second)
    assert decrypt_stream(stream) == create_gamespy_message(first) + create_gamespy_message(second)


def test_decrypt_only_final():
    assert decrypt_stream(FINAL) == "\\final\\"


def test_packet_buffer_waits_for_final():
    encrypted = encrypt_message(_command(LOGIN))
    buffer = PacketBuffer()
    assert buffer.feed(encrypted[:10]) is None
    assert len(buffer) == 10
    message = buffer.feed(encrypted[10:])
    assert message == create_gamespy_message(_command(LOGIN))
    assert len(buffer) == 0


def test_packet_buffer_overflow_keeps_earlier_data():
    buffer = PacketBuffer()
    assert buffer.feed(b"x" * MAX_BUFFER_SIZE) is None
    with pytest.raises(BufferOverflowError):
        buffer.feed(b"y")
    assert len(buffer) == MAX_BUFFER_SIZE


def test_packet_buffer_accepts_exact_limit():
    buffer = PacketBuffer(max_size=len(FINAL))
    assert buffer.feed(FINAL) == "\\final\\"


def test_token_depends_only_on_pid():
    a = calculate_token("/mariokartwii/web/client/get2.asp?pid=5&hash=abc", "example.com", "salt")
    b = calculate_token("/mariokartwii/web/client/get2.asp?pid=5", "example.com", "salt")
    assert a == b
    assert len(a) == 32


def test_token_changes_with_inputs():
    base = calculate_token("/game/x?pid=5", "example.com", "salt")
    assert calculate_token("/game/x?pid=6", "example.com", "salt") != base
    assert calculate_token("/game/x?pid=5", "example.com", "other") != base
    assert calculate_token("/game/y?pid=5", "example.com", "salt") != base


def test_expected_hash_of_empty_input():
    assert expected_hash("", "") == "da39a3ee5e6b4b0d3255bfef95601890afd80709"


def test_expected_hash_depends_on_key():
    assert expected_hash("a", "tok") != expected_hash("b", "tok")
    assert len(expected_hash("a", "tok")) == 40


def test_sign_response_version_one_pads_only():
    data = build_get2_response()
    assert sign_response("key", data, 1) == data + bytes(13)


def test_sign_response_version_two_appends_hex():
    data = build_get2_response()
    signed = sign_response("key", data, 2)
    assert signed[: len(data) + 13] == data + bytes(13)
    tail = signed[len(data) + 13 :]
    assert len(tail) == 40
    assert set(tail.decode()) <= set("0123456789abcdef")
    assert sign_response("other", data, 2)[len(data) + 13 :] != tail


def test_get2_response():
    assert build_get2_response() == b"\x01\x00\x00\x00\x00\x00\x00\x00"


def test_http_error_page():
    page = http_error_page("404 Not Found", "WiiLink")
    assert page.startswith("<html>\n")
    assert page.endswith("</html>\n")
    assert "<head><title>404 Not Found</title></head>" in page
    assert "<center><h1>404 Not Found</h1></center>" in page
    assert "<hr><center>WiiLink</center>" in page