"""The table of known games and per-game platform rules."""

from __future__ import annotations

import csv
import io
import os
import re
from dataclasses import dataclass
from typing import Iterable, Iterator

__all__ = ["GameInfo", "GameList", "expected_unit_code", "game_needs_exploit"]

_INT_RE = re.compile(r"[+-]?[0-9]+")
_FIELD_COUNT = 6


@dataclass(frozen=True)
class GameInfo:
    """One row of the game list."""

    game_id: int
    name: str
    secret_key: str
    game_stats_version: int
    game_stats_key: str
    description: str


def _optional_int(text: str) -> int:
    if text == "":
        return -1
    if not _INT_RE.fullmatch(text):
        raise ValueError(f"invalid number in game list: {text!r}")
    return int(text)


class GameList:
    """Games looked up by numeric ID or by game name."""

    def __init__(self, games: Iterable[GameInfo]) -> None:
        self._games = list(games)
        self._by_id: dict[int, GameInfo] = {}
        self._by_name: dict[str, GameInfo] = {}
        for game in self._games:
            if game.game_id != -1:
                self._by_id[game.game_id] = game
            self._by_name[game.name] = game

    @classmethod
    def parse(cls, text: str) -> "GameList":
        """Parse tab-separated rows: description, name, ID, key, stats version, stats key."""
        rows = [row for row in csv.reader(io.StringIO(text), delimiter="\t") if row]
        games = []
        for line, row in enumerate(rows, start=1):
            if len(row) != len(rows[0]):
                raise ValueError(f"line {line}: wrong number of fields")
            if len(row) < _FIELD_COUNT:
                raise ValueError(f"line {line}: expected at least {_FIELD_COUNT} fields")
            games.append(
                GameInfo(
                    game_id=_optional_int(row[2]),
                    name=row[1],
                    secret_key=row[3],
                    game_stats_version=_optional_int(row[4]),
                    game_stats_key=row[5],
                    description=row[0],
                )
            )
        return cls(games)

    @classmethod
    def from_file(cls, path: str | os.PathLike = "game_list.tsv") -> "GameList":
        """Read the game list from a file."""
        with open(path, encoding="utf-8", newline="") as handle:
            return cls.parse(handle.read())

    def __len__(self) -> int:
        return len(self._games)

    def __iter__(self) -> Iterator[GameInfo]:
        return iter(self._games)

    def by_id(self, game_id: int) -> GameInfo | None:
        """Return the game with this numeric ID, or None."""
        return self._by_id.get(game_id)

    def by_name(self, name: str) -> GameInfo | None:
        """Return the game with this name, or None."""
        return self._by_name.get(name)

    def game_id(self, name: str) -> int:
        """Return the numeric ID of a game, or -1 if unknown."""
        game = self.by_name(name)
        return game.game_id if game is not None else -1

    def game_id_or_raise(self, name: str) -> int:
        """Return the numeric ID of a game; raise KeyError if unknown."""
        game_id = self.game_id(name)
        if game_id == -1:
            raise KeyError(f"Game not found: {name}")
        return game_id


_WII_GAMES = frozenset({"sneezieswiiw", "wormswiiware", "wormswiiwaream"})
_OTHER_REGION_WII_GAMES = frozenset({"jockracerna", "jockracereu", "sengo3wiijp"})
_CROSS_PLATFORM_GAMES = frozenset({"mahjongkcds", "puyopuyo7ds", "puyopuyo20ds"})
_EXPLOIT_GAMES = frozenset({"mariokartwii", "mariokartds"})


def expected_unit_code(game_name: str) -> int:
    """Return 1 for Wii games, 0xFF for cross-platform games, else 0 (DS)."""
    if game_name.endswith(("wii", "wiiam")):
        return 1
    if game_name in _WII_GAMES or game_name in _OTHER_REGION_WII_GAMES:
        return 1
    if game_name in _CROSS_PLATFORM_GAMES:
        return 0xFF
    return 0


def game_needs_exploit(game_name: str) -> bool:
    """True for the games the HTTPS exploit is implemented for."""
    return game_name in _EXPLOIT_GAMES