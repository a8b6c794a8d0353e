"""Decoding of the match commands peers exchange through the NAT negotiation relay."""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from enum import IntEnum

__all__ = [
    "MatchCommand",
    "MatchCommandError",
    "Reservation",
    "ResvOK",
    "ResvDeny",
    "TellAddr",
    "ServerCloseClient",
    "SuspendMatch",
    "MatchCommandData",
    "DENY_REASONS",
    "SUPPORTED_VERSIONS",
    "match_command_name",
    "decode_match_command",
]

SUPPORTED_VERSIONS = frozenset({3, 11, 90})

# Largest match command buffer QR2/GT2 allows: 32 profile IDs.
_MAX_CLOSE_CLIENT_SIZE = 0x80


class MatchCommand(IntEnum):
    RESERVATION = 0x01
    RESV_OK = 0x02
    RESV_DENY = 0x03
    RESV_WAIT = 0x04
    RESV_CANCEL = 0x05
    TELL_ADDR = 0x06
    NEW_PID_AID = 0x07
    LINK_CLIENTS_REQUEST = 0x08
    LINK_CLIENTS_SUCCESS = 0x09
    CLOSE_LINK = 0x0A
    RESV_PRIOR = 0x0B
    CANCEL = 0x0C
    CANCEL_SYN = 0x0D
    CANCEL_SYN_ACK = 0x0E
    CANCEL_ACK = 0x0F
    SERVER_CLOSE_CLIENT = 0x10
    POLL_TIMEOUT = 0x11
    POLL_TO_ACK = 0x12
    SERVER_CONN_BLOCK = 0x13
    FRIEND_ACCEPT = 0x20
    CLIENT_WAIT_POLL = 0x40
    KEEP_ALIVE_TO_CLIENT = 0x41
    SERVER_DOWN_QUERY = 0x52
    SERVER_DOWN_ACK = 0x53
    SERVER_DOWN_NAK = 0x54
    SERVER_DOWN_KEEP = 0x55
    SUSPEND_MATCH = 0x82
    CLIENT_AID_USAGE = 0x83


_NAMES = {
    MatchCommand.RESERVATION: "RESERVATION",
    MatchCommand.RESV_OK: "RESV_OK",
    MatchCommand.RESV_DENY: "RESV_DENY",
    MatchCommand.RESV_WAIT: "RESV_WAIT",
    MatchCommand.RESV_CANCEL: "RESV_CANCEL",
    MatchCommand.TELL_ADDR: "TELL_ADDR",
    MatchCommand.NEW_PID_AID: "NEW_PID_AID",
    MatchCommand.LINK_CLIENTS_REQUEST: "LINK_CLS_REQ",
    MatchCommand.LINK_CLIENTS_SUCCESS: "LINK_CLS_SUC",
    MatchCommand.CLOSE_LINK: "CLOSE_LINK",
    MatchCommand.RESV_PRIOR: "RESV_PRIOR",
    MatchCommand.CANCEL: "CANCEL",
    MatchCommand.CANCEL_SYN: "CANCEL_SYN",
    MatchCommand.CANCEL_SYN_ACK: "CANCEL_SYN_ACK",
    MatchCommand.CANCEL_ACK: "CANCEL_ACK",
    MatchCommand.SERVER_CLOSE_CLIENT: "SC_CLOSE_CL",
    MatchCommand.POLL_TIMEOUT: "POLL_TIMEOUT",
    MatchCommand.POLL_TO_ACK: "POLL_TO_ACK",
    MatchCommand.SERVER_CONN_BLOCK: "SC_CONN_BLOCK",
    MatchCommand.FRIEND_ACCEPT: "FRIEND_ACCEPT",
    MatchCommand.CLIENT_WAIT_POLL: "CL_WAIT_POLL",
    MatchCommand.KEEP_ALIVE_TO_CLIENT: "SV_KA_TO_CL",
    MatchCommand.SERVER_DOWN_QUERY: "SVDOWNQUERY",
    MatchCommand.SERVER_DOWN_ACK: "SVDOWN_ACK",
    MatchCommand.SERVER_DOWN_NAK: "SVDOWN_NAK",
    MatchCommand.SERVER_DOWN_KEEP: "SVDOWN_KEEP",
    MatchCommand.SUSPEND_MATCH: "SUSPEND_MATCH",
    MatchCommand.CLIENT_AID_USAGE: "CLIENT_AID_USAGE",
}

DENY_REASONS = {
    0x00: "Unspecified reason.",
    0x10: "Game server is fully occupied.",
    0x11: "This Domain is already closed.",
    0x12: "The condition was not satisfied.",
    0x13: "This Domain is already locked.",
    0x14: "It tried to go to the client for the reservation.",
    0x15: "It is a reservation to the friend who doesn't exist in the list.",
    0x16: "It was rejected by the attempt callback.",
    0x17: "The reservation came from a different other host.",
    0x18: "Illegal mesh reservation.",
}


class MatchCommandError(ValueError):
    """Raised when a match command buffer is malformed or unsupported."""


@dataclass
class Reservation:
    match_type: int = 0
    has_public_ip: bool = False
    public_ip: int = 0
    public_port: int = 0
    local_ip: int = 0
    local_port: int = 0
    unknown: int = 0
    is_friend: bool = False
    local_player_count: int = 0
    resv_check_value: int = 0
    user_data: bytes = b""


@dataclass
class ResvOK:
    max_players: int = 0
    sender_aid: int = 0
    profile_id: int = 0
    public_ip: int = 0
    public_port: int = 0
    local_ip: int = 0
    local_port: int = 0
    unknown: int = 0
    local_player_count: int = 0
    group_id: int = 0
    receiver_new_aid: int = 0
    client_count: int = 0
    resv_check_value: int = 0
    # Versions 3 and 11 only.
    profile_ids: list[int] = field(default_factory=list)
    # Version 11 only.
    is_friend: bool = False
    user_data: bytes = b""


@dataclass
class ResvDeny:
    reason: int = 0
    reason_string: str = ""
    reason_specified: bool = False
    user_data: bytes = b""


@dataclass
class TellAddr:
    local_ip: int = 0
    local_port: int = 0


@dataclass
class ServerCloseClient:
    profile_ids: list[int] = field(default_factory=list)


@dataclass
class SuspendMatch:
    host_profile_id: int = 0
    is_host_flag: int = 0
    short: bool = False
    suspend_value: int = 0
    client_aid_value: int = 0


@dataclass
class MatchCommandData:
    """A decoded match command; only the part matching the command is set."""

    version: int
    command: int
    reservation: Reservation | None = None
    resv_ok: ResvOK | None = None
    resv_deny: ResvDeny | None = None
    tell_addr: TellAddr | None = None
    server_close_client: ServerCloseClient | None = None
    suspend_match: SuspendMatch | None = None
    other: bytes = b""


def match_command_name(command: int) -> str:
    """Return the protocol name of a command byte, or 'UNKNOWN'."""
    try:
        return _NAMES[MatchCommand(command)]
    except ValueError:
        return "UNKNOWN"


def _le(buf: bytes, offset: int) -> int:
    return struct.unpack_from("<I", buf, offset)[0]


def _be(buf: bytes, offset: int) -> int:
    return struct.unpack_from(">I", buf, offset)[0]


def _port(buf: bytes, offset: int, what: str) -> int:
    value = _le(buf, offset)
    if value > 0xFFFF:
        raise MatchCommandError(f"{what} out of range: {value}")
    return value


def _flag(buf: bytes, offset: int) -> bool:
    value = _le(buf, offset)
    if value > 1:
        raise MatchCommandError(f"invalid is-friend flag: {value}")
    return value != 0


def _le_list(buf: bytes, offset: int, count: int) -> list[int]:
    return list(struct.unpack_from(f"<{count}I", buf, offset))


def _decode_reservation(buf: bytes, version: int) -> Reservation:
    size = len(buf)
    if version == 3 and size < 0x04:
        raise MatchCommandError("reservation too short")
    if (version == 11 and size < 0x14) or (version == 90 and size < 0x24):
        raise MatchCommandError("reservation too short")

    match_type = _le(buf, 0x00)
    if match_type > 3:
        raise MatchCommandError(f"invalid match type: {match_type}")

    if version == 3 and size < 0x0C:
        return Reservation(match_type=match_type, has_public_ip=False)

    public_port = _port(buf, 0x08, "public port")
    public_ip = _be(buf, 0x04)

    if version == 3:
        return Reservation(
            match_type=match_type,
            has_public_ip=True,
            public_ip=public_ip,
            public_port=public_port,
            user_data=buf[0x0C:],
        )

    if version == 11:
        return Reservation(
            match_type=match_type,
            has_public_ip=True,
            public_ip=public_ip,
            public_port=public_port,
            is_friend=_flag(buf, 0x0C),
            local_player_count=_le(buf, 0x10),
            user_data=buf[0x14:],
        )

    local_port = _port(buf, 0x10, "local port")
    return Reservation(
        match_type=match_type,
        has_public_ip=True,
        public_ip=public_ip,
        public_port=public_port,
        local_ip=_be(buf, 0x0C),
        local_port=local_port,
        unknown=_le(buf, 0x14),
        is_friend=_flag(buf, 0x18),
        local_player_count=_le(buf, 0x1C),
        resv_check_value=_le(buf, 0x20),
        user_data=buf[0x24:],
    )


def _decode_resv_ok(buf: bytes, version: int) -> ResvOK:
    size = len(buf)
    if version in (3, 11):
        if size < 0x0C:
            raise MatchCommandError("RESV_OK too short")
        client_count = _le(buf, 0x00)
        if version == 3 and (client_count > 29 or size < 0x0C + client_count * 4):
            raise MatchCommandError(f"invalid RESV_OK client count: {client_count}")
        if version == 11 and (client_count > 24 or size < 0x20 + client_count * 4):
            raise MatchCommandError(f"invalid RESV_OK client count: {client_count}")

        profile_ids = _le_list(buf, 0x04, client_count)
        index = 0x04 + client_count * 4
        public_port = _port(buf, index + 0x04, "public port")
        public_ip = _be(buf, index)

        if version == 3:
            return ResvOK(
                public_ip=public_ip,
                public_port=public_port,
                client_count=client_count,
                profile_ids=profile_ids,
                user_data=buf[index + 0x08 :],
            )

        return ResvOK(
            max_players=_le(buf, index + 0x14),
            sender_aid=_le(buf, index + 0x0C),
            public_ip=public_ip,
            public_port=public_port,
            group_id=_le(buf, index + 0x10),
            client_count=client_count,
            profile_ids=profile_ids,
            is_friend=_flag(buf, index + 0x08),
            user_data=buf[index + 0x18 :],
        )

    if size < 0x34:
        raise MatchCommandError("RESV_OK too short")
    public_port = _port(buf, 0x10, "public port")
    local_port = _port(buf, 0x18, "local port")
    return ResvOK(
        max_players=_le(buf, 0x00),
        sender_aid=_le(buf, 0x04),
        profile_id=_le(buf, 0x08),
        public_ip=_be(buf, 0x0C),
        public_port=public_port,
        local_ip=_be(buf, 0x14),
        local_port=local_port,
        unknown=_le(buf, 0x1C),
        local_player_count=_le(buf, 0x20),
        group_id=_le(buf, 0x24),
        receiver_new_aid=_le(buf, 0x28),
        client_count=_le(buf, 0x2C),
        resv_check_value=_le(buf, 0x30),
        user_data=buf[0x34:],
    )


def _decode_resv_deny(buf: bytes) -> ResvDeny:
    if len(buf) >= 0x04:
        reason = _le(buf, 0x00)
        user_data = buf[0x04:]
    else:
        reason = 0
        user_data = buf
    return ResvDeny(
        reason=reason,
        reason_string=DENY_REASONS.get(reason, ""),
        reason_specified=len(buf) > 0x04,
        user_data=user_data,
    )


def _require_empty(buf: bytes, name: str) -> None:
    if buf:
        raise MatchCommandError(f"{name} must carry no data")


def decode_match_command(command: int, buffer: bytes, version: int) -> MatchCommandData:
    """Decode a match command body; raise MatchCommandError if it is malformed."""
    buf = bytes(buffer)
    if version not in SUPPORTED_VERSIONS:
        raise MatchCommandError(f"unsupported match command version: {version}")
    if len(buf) & 3:
        raise MatchCommandError("match command length is not 4-byte aligned")

    result = MatchCommandData(version=version, command=command)

    if command == MatchCommand.RESERVATION:
        result.reservation = _decode_reservation(buf, version)
    elif command == MatchCommand.RESV_OK:
        result.resv_ok = _decode_resv_ok(buf, version)
    elif command == MatchCommand.RESV_DENY:
        result.resv_deny = _decode_resv_deny(buf)
    elif command in (MatchCommand.RESV_WAIT, MatchCommand.RESV_CANCEL, MatchCommand.POLL_TIMEOUT):
        _require_empty(buf, match_command_name(command))
    elif command == MatchCommand.TELL_ADDR:
        if len(buf) != 0x08:
            raise MatchCommandError("TELL_ADDR must be 8 bytes")
        local_port = _port(buf, 0x04, "local port")
        result.tell_addr = TellAddr(local_ip=_be(buf, 0x00), local_port=local_port)
    elif command == MatchCommand.SERVER_CLOSE_CLIENT:
        if len(buf) > _MAX_CLOSE_CLIENT_SIZE:
            raise MatchCommandError("SC_CLOSE_CL carries too many profile IDs")
        result.server_close_client = ServerCloseClient(
            profile_ids=_le_list(buf, 0, len(buf) // 4)
        )
    elif command == MatchCommand.POLL_TO_ACK:
        if len(buf) != 0x04:
            raise MatchCommandError("POLL_TO_ACK must be 4 bytes")
        result.other = buf
    elif command == MatchCommand.SUSPEND_MATCH:
        if len(buf) == 0x08:
            result.suspend_match = SuspendMatch(
                host_profile_id=_le(buf, 0x00),
                is_host_flag=_le(buf, 0x04),
                short=True,
            )
        elif len(buf) == 0x10:
            result.suspend_match = SuspendMatch(
                host_profile_id=_le(buf, 0x00),
                is_host_flag=_le(buf, 0x04),
                short=False,
                suspend_value=_le(buf, 0x08),
                client_aid_value=_le(buf, 0x0C),
            )
        else:
            raise MatchCommandError("SUSPEND_MATCH must be 8 or 16 bytes")
    else:
        result.other = buf

    return result