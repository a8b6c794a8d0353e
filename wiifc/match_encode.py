"""Encoding and logging of match commands."""

from __future__ import annotations

import logging
import struct

from .match_command import (
    SUPPORTED_VERSIONS,
    MatchCommand,
    MatchCommandData,
    MatchCommandError,
    match_command_name,
)

__all__ = ["encode_match_command", "log_match_command"]

logger = logging.getLogger(__name__)


def _le(value: int) -> bytes:
    return struct.pack("<I", value)


def _be(value: int) -> bytes:
    return struct.pack(">I", value)


def _port(value: int, what: str) -> bytes:
    if not 0 <= value <= 0xFFFF:
        raise MatchCommandError(f"{what} out of range: {value}")
    return _le(value)


def _flag(value: bool) -> bytes:
    return _le(1 if value else 0)


def _aligned(message: bytes) -> bytes:
    if len(message) & 3:
        raise MatchCommandError("match command length is not 4-byte aligned")
    return message


def _require(part, name: str):
    if part is None:
        raise MatchCommandError(f"{name} data missing")
    return part


def _encode_reservation(data: MatchCommandData) -> bytes:
    resv = _require(data.reservation, "RESERVATION")
    version = data.version
    parts = [_le(resv.match_type)]
    if version == 3 and not resv.has_public_ip:
        return parts[0]

    parts += [_be(resv.public_ip), _port(resv.public_port, "public port")]
    if version == 11:
        parts += [_flag(resv.is_friend), _le(resv.local_player_count)]
    elif version == 90:
        parts += [
            _be(resv.local_ip),
            _port(resv.local_port, "local port"),
            _le(resv.unknown),
            _flag(resv.is_friend),
            _le(resv.local_player_count),
            _le(resv.resv_check_value),
        ]
    parts.append(bytes(resv.user_data))
    return _aligned(b"".join(parts))


def _encode_resv_ok(data: MatchCommandData) -> bytes:
    ok = _require(data.resv_ok, "RESV_OK")
    version = data.version
    if version in (3, 11):
        if ok.client_count != len(ok.profile_ids):
            raise MatchCommandError(
                f"client count {ok.client_count} does not match {len(ok.profile_ids)} profile IDs"
            )
        parts = [_le(ok.client_count)]
        parts += [_le(pid) for pid in ok.profile_ids]
        parts += [_be(ok.public_ip), _port(ok.public_port, "public port")]
        if version == 11:
            parts += [
                _flag(ok.is_friend),
                _le(ok.sender_aid),
                _le(ok.group_id),
                _le(ok.max_players),
            ]
        parts.append(bytes(ok.user_data))
        return _aligned(b"".join(parts))

    parts = [
        _le(ok.max_players),
        _le(ok.sender_aid),
        _le(ok.profile_id),
        _be(ok.public_ip),
        _port(ok.public_port, "public port"),
        _be(ok.local_ip),
        _port(ok.local_port, "local port"),
        _le(ok.unknown),
        _le(ok.local_player_count),
        _le(ok.group_id),
        _le(ok.receiver_new_aid),
        _le(ok.client_count),
        _le(ok.resv_check_value),
        bytes(ok.user_data),
    ]
    return _aligned(b"".join(parts))


def _encode_resv_deny(data: MatchCommandData) -> bytes:
    deny = _require(data.resv_deny, "RESV_DENY")
    if not deny.reason_specified:
        return bytes(deny.user_data)
    return _aligned(_le(deny.reason) + bytes(deny.user_data))


def _encode_tell_addr(data: MatchCommandData) -> bytes:
    tell = _require(data.tell_addr, "TELL_ADDR")
    return _be(tell.local_ip) + _port(tell.local_port, "local port")


def _encode_close_client(data: MatchCommandData) -> bytes:
    close = _require(data.server_close_client, "SC_CLOSE_CL")
    return b"".join(_le(pid) for pid in close.profile_ids)


def _encode_suspend(data: MatchCommandData) -> bytes:
    suspend = _require(data.suspend_match, "SUSPEND_MATCH")
    message = _le(suspend.host_profile_id) + _le(suspend.is_host_flag)
    if not suspend.short:
        message += _le(suspend.suspend_value) + _le(suspend.client_aid_value)
    return message


_ENCODERS = {
    MatchCommand.RESERVATION: _encode_reservation,
    MatchCommand.RESV_OK: _encode_resv_ok,
    MatchCommand.RESV_DENY: _encode_resv_deny,
    MatchCommand.RESV_WAIT: lambda data: b"",
    MatchCommand.RESV_CANCEL: lambda data: b"",
    MatchCommand.TELL_ADDR: _encode_tell_addr,
    MatchCommand.SERVER_CLOSE_CLIENT: _encode_close_client,
    MatchCommand.POLL_TIMEOUT: lambda data: b"",
    MatchCommand.POLL_TO_ACK: lambda data: bytes(data.other),
    MatchCommand.SUSPEND_MATCH: _encode_suspend,
}


def encode_match_command(command: int, data: MatchCommandData) -> bytes:
    """Encode a match command body; raise MatchCommandError if it cannot be."""
    if data.version not in SUPPORTED_VERSIONS:
        raise MatchCommandError(f"unsupported match command version: {data.version}")

    encoder = _ENCODERS.get(command)
    if encoder is None:
        logger.info("Unknown match command: %d data: %r", command, data.other)
        return bytes(data.other)

    try:
        return encoder(data)
    except struct.error as exc:
        raise MatchCommandError(f"value out of range: {exc}") from exc


def log_match_command(module_name: str, dest: str, command: int, data: MatchCommandData) -> None:
    """Log a match command and the fields that matter for it."""
    logger.info("%s: Match %s to %s", module_name, match_command_name(command), dest)

    if command == MatchCommand.RESERVATION and data.reservation is not None:
        logger.info("%s: Match type: 0x%02X", module_name, data.reservation.match_type)
        logger.info("%s: Local player count: %d", module_name, data.reservation.local_player_count)
    elif command == MatchCommand.RESV_OK and data.resv_ok is not None:
        ok = data.resv_ok
        logger.info("%s: Group ID: %d", module_name, ok.group_id)
        logger.info("%s: Local player count: %d", module_name, ok.local_player_count)
        logger.info("%s: Current client count: %d", module_name, ok.client_count)
        logger.info("%s: Max client count: %d", module_name, ok.max_players)
        logger.info("%s: Sender slot: %d", module_name, ok.sender_aid)
        logger.info("%s: Receiver's new slot: %d", module_name, ok.receiver_new_aid)
    elif command == MatchCommand.RESV_DENY and data.resv_deny is not None:
        deny = data.resv_deny
        logger.info("%s: Reason: %s (0x%02X)", module_name, deny.reason_string, deny.reason)