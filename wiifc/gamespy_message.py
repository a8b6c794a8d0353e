"""Parsing and building backslash-delimited GameSpy messages."""

from __future__ import annotations

from dataclasses import dataclass, field

__all__ = [
    "GameSpyCommand",
    "GameSpyMessageError",
    "parse_gamespy_message",
    "parse_gamestats_message",
    "create_gamespy_message",
]

_FINAL = "\\final\\"


class GameSpyMessageError(ValueError):
    """Raised when a GameSpy message cannot be parsed."""


@dataclass
class GameSpyCommand:
    """One command of a GameSpy message with its key/value pairs."""

    command: str = ""
    command_value: str = ""
    other_values: dict[str, str] = field(default_factory=dict)


def _parse(msg: str, game_stats: bool) -> list[GameSpyCommand]:
    if _FINAL not in msg:
        raise GameSpyMessageError("invalid GameSpy command received")

    commands: list[GameSpyCommand] = []
    while msg.startswith("\\") and _FINAL in msg:
        found_command = False
        current = GameSpyCommand()

        while msg.startswith("\\"):
            key_end = msg.find("\\", 1)
            if key_end < 2:
                raise GameSpyMessageError("invalid GameSpy command received")

            key = msg[1:key_end]
            value = ""
            msg = msg[key_end + 1 :]

            if key == "final":
                break

            if game_stats and key == "data":
                length_text = current.other_values.get("length", "")
                if not length_text:
                    raise GameSpyMessageError("no data length found in GameStats message")
                try:
                    data_length = int(length_text)
                except ValueError as exc:
                    raise GameSpyMessageError(f"invalid data length: {length_text!r}") from exc
                if data_length < 0 or len(msg) < data_length + 1:
                    raise GameSpyMessageError("invalid GameSpy command received")
                value = msg[:data_length]
                msg = msg[data_length:]
                if msg.startswith("\\"):
                    msg = msg[1:]
            elif "\\" in msg:
                if not msg.startswith("\\"):
                    value_end = msg.index("\\")
                    value = msg[:value_end]
                    msg = msg[value_end:]
            else:
                # Last key of the line: keep whatever remains as its value.
                value = msg

            if not found_command:
                current.command = key
                current.command_value = value
                found_command = True
            else:
                current.other_values[key] = value

        commands.append(current)

    return commands


def parse_gamespy_message(msg: str) -> list[GameSpyCommand]:
    """Parse a GameSpy message into its commands."""
    return _parse(msg, game_stats=False)


def parse_gamestats_message(msg: str) -> list[GameSpyCommand]:
    """Parse a GameStats message, where 'data' runs for 'length' characters."""
    return _parse(msg, game_stats=True)


def create_gamespy_message(command: GameSpyCommand) -> str:
    """Serialise a command; a getpdr 'data' value is always written last."""
    parts = []
    trailing = []
    for key, value in command.other_values.items():
        pair = f"\\{key}\\{value}"
        if command.command == "getpdr" and key == "data":
            trailing.append(pair)
        else:
            parts.append(pair)
    body = "".join(parts + trailing)
    if command.command:
        body = f"\\{command.command}\\{command.command_value}{body}"
    return body + _FINAL