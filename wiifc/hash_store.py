"""In-memory store of accepted pack hashes per pack, version and region."""

from __future__ import annotations

import re
import threading
from dataclasses import dataclass
from enum import IntEnum
from typing import Iterable

__all__ = [
    "Region",
    "HashesByRegion",
    "HashStoreError",
    "PackIDMissingError",
    "VersionMissingError",
    "HashStore",
    "flatten_blank",
]

_BLANK_RE = re.compile(r"[\t\n\f\r ]+")


class Region(IntEnum):
    NTSCU = 0
    NTSCJ = 1
    NTSCK = 2
    PAL = 3


def flatten_blank(text: str) -> str:
    """Turn a whitespace-only string into ''; leave anything else unchanged."""
    return "" if _BLANK_RE.fullmatch(text) else text


@dataclass(frozen=True)
class HashesByRegion:
    """The hash of one pack version for each console region."""

    ntscu: str = ""
    ntscj: str = ""
    ntsck: str = ""
    pal: str = ""

    def for_region(self, region: int) -> str:
        """Return the hash for a region, or '' for an unknown region."""
        return {
            Region.NTSCU: self.ntscu,
            Region.NTSCJ: self.ntscj,
            Region.NTSCK: self.ntsck,
            Region.PAL: self.pal,
        }.get(region, "")


class HashStoreError(LookupError):
    """Raised when a hash entry cannot be found."""


class PackIDMissingError(HashStoreError):
    def __init__(self, pack_id: int) -> None:
        super().__init__(f"The specified PackID does not exist: {pack_id}")
        self.pack_id = pack_id


class VersionMissingError(HashStoreError):
    def __init__(self, pack_id: int, version: int) -> None:
        super().__init__(f"The specified version does not exist: {pack_id}/{version}")
        self.pack_id = pack_id
        self.version = version


def _entry(ntscu: str, ntscj: str, ntsck: str, pal: str) -> HashesByRegion:
    return HashesByRegion(
        ntscu=flatten_blank(ntscu),
        ntscj=flatten_blank(ntscj),
        ntsck=flatten_blank(ntsck),
        pal=flatten_blank(pal),
    )


class HashStore:
    """Thread-safe map of pack ID -> version -> regional hashes."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._hashes: dict[int, dict[int, HashesByRegion]] = {}

    def load(self, rows: Iterable[tuple[int, int, str, str, str, str]]) -> None:
        """Add rows of (pack_id, version, ntscu, ntscj, ntsck, pal)."""
        with self._lock:
            for pack_id, version, ntscu, ntscj, ntsck, pal in rows:
                self._hashes.setdefault(pack_id, {})[version] = _entry(ntscu, ntscj, ntsck, pal)

    def snapshot(self) -> dict[int, dict[int, HashesByRegion]]:
        """Return a copy of every stored entry."""
        with self._lock:
            return {pack_id: dict(versions) for pack_id, versions in self._hashes.items()}

    def remove(self, pack_id: int, version: int) -> None:
        """Remove one version of a pack; raise if the pack or version is unknown."""
        with self._lock:
            versions = self._hashes.get(pack_id)
            if versions is None:
                raise PackIDMissingError(pack_id)
            if version not in versions:
                raise VersionMissingError(pack_id, version)
            del versions[version]

    def update(self, pack_id: int, version: int, ntscu: str, ntscj: str, ntsck: str, pal: str) -> None:
        """Set the hashes of one pack version, replacing any earlier ones."""
        with self._lock:
            self._hashes.setdefault(pack_id, {})[version] = _entry(ntscu, ntscj, ntsck, pal)

    def validate(self, pack_id: int, version: int, region: int, digest: str) -> bool:
        """True if a non-empty hash is stored for the region and equals digest."""
        with self._lock:
            entry = self._hashes.get(pack_id, {}).get(version)
        if entry is None:
            return False
        expected = entry.for_region(region)
        return expected != "" and expected == digest