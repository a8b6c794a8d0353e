import logging
import struct

import pytest

from wiifc.match_command import (
    MatchCommand,
    MatchCommandData,
    MatchCommandError,
    Reservation,
    ResvDeny,
    ResvOK,
    ServerCloseClient,
    SuspendMatch,
    TellAddr,
    decode_match_command,
)
from wiifc.match_encode import encode_match_command, log_match_command

IP = bytes([192, 168, 0, 1])


def roundtrip(command, buf, version):
    data = decode_match_command(command, buf, version)
    return encode_match_command(command, data)


def test_tell_addr_wire_format():
    data = MatchCommandData(
        version=3,
        command=MatchCommand.TELL_ADDR,
        tell_addr=TellAddr(local_ip=0xC0A80001, local_port=0x1234),
    )
    assert encode_match_command(MatchCommand.TELL_ADDR, data) == IP + b"\x34\x12\x00\x00"


@pytest.mark.parametrize(
    "version,buf",
    [
        (3, struct.pack("<I", 1)),
        (3, struct.pack("<I", 2) + IP + struct.pack("<I", 1000) + b"user"),
        (11, struct.pack("<I", 3) + IP + struct.pack("<III", 1000, 1, 2) + b"data"),
        (
            90,
            struct.pack("<I", 2)
            + IP
            + struct.pack("<I", 1000)
            + bytes([10, 0, 0, 5])
            + struct.pack("<IIIII", 2000, 7, 1, 2, 99)
            + b"ud!!",
        ),
    ],
)
def test_reservation_roundtrip(version, buf):
    assert roundtrip(MatchCommand.RESERVATION, buf, version) == buf


def test_resv_ok_v3_roundtrip():
    buf = struct.pack("<II", 1, 111) + IP + struct.pack("<I", 4000)
    assert roundtrip(MatchCommand.RESV_OK, buf, 3) == buf


def test_resv_ok_v11_roundtrip():
    buf = (
        struct.pack("<III", 2, 111, 222)
        + IP
        + struct.pack("<IIIII", 4000, 1, 3, 55, 12)
        + b"abcd"
    )
    assert roundtrip(MatchCommand.RESV_OK, buf, 11) == buf


def test_resv_ok_v90_dataclass_roundtrip():
    ok = ResvOK(
        max_players=12,
        sender_aid=1,
        profile_id=1000000004,
        public_ip=0x01020304,
        public_port=5000,
        local_ip=0x0A000005,
        local_port=6000,
        unknown=3,
        local_player_count=2,
        group_id=77,
        receiver_new_aid=4,
        client_count=5,
        resv_check_value=9,
        user_data=b"xyzw",
    )
    data = MatchCommandData(version=90, command=MatchCommand.RESV_OK, resv_ok=ok)
    encoded = encode_match_command(MatchCommand.RESV_OK, data)
    assert len(encoded) == 0x34 + 4
    assert decode_match_command(MatchCommand.RESV_OK, encoded, 90).resv_ok == ok


def test_resv_ok_count_mismatch_raises():
    data = MatchCommandData(
        version=3,
        command=MatchCommand.RESV_OK,
        resv_ok=ResvOK(client_count=2, profile_ids=[1]),
    )
    with pytest.raises(MatchCommandError):
        encode_match_command(MatchCommand.RESV_OK, data)


def test_resv_deny_roundtrip_with_user_data():
    buf = struct.pack("<I", 0x10) + b"more"
    assert roundtrip(MatchCommand.RESV_DENY, buf, 11) == buf


def test_resv_deny_unspecified_returns_user_data():
    data = MatchCommandData(
        version=3,
        command=MatchCommand.RESV_DENY,
        resv_deny=ResvDeny(reason=0x11, reason_specified=False, user_data=b"abcd"),
    )
    assert encode_match_command(MatchCommand.RESV_DENY, data) == b"abcd"


@pytest.mark.parametrize(
    "command", [MatchCommand.RESV_WAIT, MatchCommand.RESV_CANCEL, MatchCommand.POLL_TIMEOUT]
)
def test_empty_commands(command):
    data = MatchCommandData(version=11, command=command, other=b"ignored!")
    assert encode_match_command(command, data) == b""


def test_server_close_client_roundtrip():
    buf = struct.pack("<III", 5, 6, 7)
    assert roundtrip(MatchCommand.SERVER_CLOSE_CLIENT, buf, 90) == buf


def test_poll_to_ack_roundtrip():
    buf = b"\x01\x02\x03\x04"
    assert roundtrip(MatchCommand.POLL_TO_ACK, buf, 3) == buf


@pytest.mark.parametrize(
    "buf", [struct.pack("<II", 1000, 1), struct.pack("<IIII", 1000, 0, 5, 6)]
)
def test_suspend_match_roundtrip(buf):
    assert roundtrip(MatchCommand.SUSPEND_MATCH, buf, 90) == buf


def test_short_suspend_omits_values():
    data = MatchCommandData(
        version=90,
        command=MatchCommand.SUSPEND_MATCH,
        suspend_match=SuspendMatch(host_profile_id=1, is_host_flag=0, short=True, suspend_value=9),
    )
    assert len(encode_match_command(MatchCommand.SUSPEND_MATCH, data)) == 8


def test_unknown_command_returns_other():
    data = MatchCommandData(version=3, command=0x70, other=b"rawbytes")
    assert encode_match_command(0x70, data) == b"rawbytes"


def test_unsupported_version_raises():
    data = MatchCommandData(version=4, command=MatchCommand.RESV_WAIT)
    with pytest.raises(MatchCommandError):
        encode_match_command(MatchCommand.RESV_WAIT, data)


def test_misaligned_user_data_raises():
    data = MatchCommandData(
        version=3,
        command=MatchCommand.RESERVATION,
        reservation=Reservation(match_type=1, has_public_ip=True, user_data=b"abc"),
    )
    with pytest.raises(MatchCommandError):
        encode_match_command(MatchCommand.RESERVATION, data)


def test_port_out_of_range_raises():
    data = MatchCommandData(
        version=3,
        command=MatchCommand.TELL_ADDR,
        tell_addr=TellAddr(local_ip=1, local_port=0x10000),
    )
    with pytest.raises(MatchCommandError):
        encode_match_command(MatchCommand.TELL_ADDR, data)


def test_missing_part_raises():
    data = MatchCommandData(version=3, command=MatchCommand.SERVER_CLOSE_CLIENT)
    with pytest.raises(MatchCommandError):
        encode_match_command(MatchCommand.SERVER_CLOSE_CLIENT, data)


def test_close_client_encodes_each_id():
    data = MatchCommandData(
        version=3,
        command=MatchCommand.SERVER_CLOSE_CLIENT,
        server_close_client=ServerCloseClient(profile_ids=[1, 2]),
    )
    encoded = encode_match_command(MatchCommand.SERVER_CLOSE_CLIENT, data)
    assert decode_match_command(MatchCommand.SERVER_CLOSE_CLIENT, encoded, 3).server_close_client.profile_ids == [1, 2]


def test_log_resv_deny(caplog):
    data = decode_match_command(MatchCommand.RESV_DENY, struct.pack("<I", 0x10) + b"more", 11)
    with caplog.at_level(logging.INFO, logger="wiifc.match_encode"):
        log_match_command("NATNEG", "1.2.3.4", MatchCommand.RESV_DENY, data)
    assert "RESV_DENY" in caplog.text
    assert "Game server is fully occupied." in caplog.text
    assert "1.2.3.4" in caplog.text