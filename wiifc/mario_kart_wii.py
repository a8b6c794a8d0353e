"""Mario Kart Wii identifiers and validation of uploaded ghost (RKGD) files."""

from __future__ import annotations

import logging
import zlib
from enum import IntEnum

from .mii import MII_SIZE, rfl_calculate_crc

__all__ = [
    "LeaderboardRegion",
    "Course",
    "Character",
    "Vehicle",
    "Controller",
    "WeightClass",
    "GhostValidationError",
    "RKGhostData",
    "RKGD_FILE_MIN_SIZE",
    "RKGD_FILE_MAX_SIZE",
    "is_valid_region",
    "is_valid_course",
    "is_valid_character",
    "is_valid_vehicle",
    "is_valid_controller",
    "character_weight_class",
    "vehicle_weight_class",
    "verify_yaz1_data",
]

logger = logging.getLogger(__name__)

RKGD_FILE_MAX_SIZE = 0x2800
RKGD_FILE_MIN_SIZE = 0x0088 + 0x0014 + 0x0004

_RKGD_MAGIC = b"RKGD"
_YAZ1_MAGIC = b"Yaz1"
_MII_OFFSET = 0x3C
_COMPRESSED_SIZE_OFFSET = 0x88
_COMPRESSED_DATA_OFFSET = 0x8C
_SZS_HEADER_SIZE = 0x10


class LeaderboardRegion(IntEnum):
    WORLDWIDE = 0x00
    JAPAN = 0x01
    UNITED_STATES = 0x02
    EUROPE = 0x03
    AUSTRALIA = 0x04
    TAIWAN = 0x05
    KOREA = 0x06
    CHINA = 0x07


class Course(IntEnum):
    MARIO_CIRCUIT = 0x00
    MOO_MOO_MEADOWS = 0x01
    MUSHROOM_GORGE = 0x02
    GRUMBLE_VOLCANO = 0x03
    TOADS_FACTORY = 0x04
    COCONUT_MALL = 0x05
    DK_SUMMIT = 0x06
    WARIO_GOLD_MINE = 0x07
    LUIGI_CIRCUIT = 0x08
    DAISY_CIRCUIT = 0x09
    MOONVIEW_HIGHWAY = 0x0A
    MAPLE_TREEWAY = 0x0B
    BOWSERS_CASTLE = 0x0C
    RAINBOW_ROAD = 0x0D
    DRY_DRY_RUINS = 0x0E
    KOOPA_CAPE = 0x0F
    GCN_PEACH_BEACH = 0x10
    GCN_MARIO_CIRCUIT = 0x11
    GCN_WALUIGI_STADIUM = 0x12
    GCN_DK_MOUNTAIN = 0x13
    DS_YOSHI_FALLS = 0x14
    DS_DESERT_HILLS = 0x15
    DS_PEACH_GARDENS = 0x16
    DS_DELFINO_SQUARE = 0x17
    SNES_MARIO_CIRCUIT_3 = 0x18
    SNES_GHOST_VALLEY_2 = 0x19
    N64_MARIO_RACEWAY = 0x1A
    N64_SHERBET_LAND = 0x1B
    N64_BOWSERS_CASTLE = 0x1C
    N64_DKS_JUNGLE_PARKWAY = 0x1D
    GBA_BOWSER_CASTLE_3 = 0x1E
    GBA_SHY_GUY_BEACH = 0x1F


class Character(IntEnum):
    MARIO = 0x00
    BABY_PEACH = 0x01
    WALUIGI = 0x02
    BOWSER = 0x03
    BABY_DAISY = 0x04
    DRY_BONES = 0x05
    BABY_MARIO = 0x06
    LUIGI = 0x07
    TOAD = 0x08
    DONKEY_KONG = 0x09
    YOSHI = 0x0A
    WARIO = 0x0B
    BABY_LUIGI = 0x0C
    TOADETTE = 0x0D
    KOOPA_TROOPA = 0x0E
    DAISY = 0x0F
    PEACH = 0x10
    BIRDO = 0x11
    DIDDY_KONG = 0x12
    KING_BOO = 0x13
    BOWSER_JR = 0x14
    DRY_BOWSER = 0x15
    FUNKY_KONG = 0x16
    ROSALINA = 0x17
    SMALL_MII_OUTFIT_A_MALE = 0x18
    SMALL_MII_OUTFIT_A_FEMALE = 0x19
    SMALL_MII_OUTFIT_B_MALE = 0x1A
    SMALL_MII_OUTFIT_B_FEMALE = 0x1B
    SMALL_MII_OUTFIT_C_MALE = 0x1C
    SMALL_MII_OUTFIT_C_FEMALE = 0x1D
    MEDIUM_MII_OUTFIT_A_MALE = 0x1E
    MEDIUM_MII_OUTFIT_A_FEMALE = 0x1F
    MEDIUM_MII_OUTFIT_B_MALE = 0x20
    MEDIUM_MII_OUTFIT_B_FEMALE = 0x21
    MEDIUM_MII_OUTFIT_C_MALE = 0x22
    MEDIUM_MII_OUTFIT_C_FEMALE = 0x23
    LARGE_MII_OUTFIT_A_MALE = 0x24
    LARGE_MII_OUTFIT_A_FEMALE = 0x25
    LARGE_MII_OUTFIT_B_MALE = 0x26
    LARGE_MII_OUTFIT_B_FEMALE = 0x27
    LARGE_MII_OUTFIT_C_MALE = 0x28
    LARGE_MII_OUTFIT_C_FEMALE = 0x29


class Vehicle(IntEnum):
    STANDARD_KART_SMALL = 0x00
    STANDARD_KART_MEDIUM = 0x01
    STANDARD_KART_LARGE = 0x02
    BOOSTER_SEAT = 0x03
    CLASSIC_DRAGSTER = 0x04
    OFFROADER = 0x05
    MINI_BEAST = 0x06
    WILD_WING = 0x07
    FLAME_FLYER = 0x08
    CHEEP_CHARGER = 0x09
    SUPER_BLOOPER = 0x0A
    PIRANHA_PROWLER = 0x0B
    TINY_TITAN = 0x0C
    DAYTRIPPER = 0x0D
    JETSETTER = 0x0E
    BLUE_FALCON = 0x0F
    SPRINTER = 0x10
    HONEYCOUPE = 0x11
    STANDARD_BIKE_SMALL = 0x12
    STANDARD_BIKE_MEDIUM = 0x13
    STANDARD_BIKE_LARGE = 0x14
    BULLET_BIKE = 0x15
    MACH_BIKE = 0x16
    FLAME_RUNNER = 0x17
    BIT_BIKE = 0x18
    SUGARSCOOT = 0x19
    WARIO_BIKE = 0x1A
    QUACKER = 0x1B
    ZIP_ZIP = 0x1C
    SHOOTING_STAR = 0x1D
    MAGIKRUISER = 0x1E
    SNEAKSTER = 0x1F
    SPEAR = 0x20
    JET_BUBBLE = 0x21
    DOLPHIN_DASHER = 0x22
    PHANTOM = 0x23


class Controller(IntEnum):
    WII_WHEEL = 0x00
    WII_REMOTE_AND_NUNCHUCK = 0x01
    CLASSIC = 0x02
    GAMECUBE = 0x03


class WeightClass(IntEnum):
    LIGHT = 0
    MIDDLE = 1
    HEAVY = 2


class GhostValidationError(ValueError):
    """Raised when ghost data or its compressed input stream is malformed."""


_C = Character
_LIGHT = frozenset({
    _C.BABY_PEACH, _C.BABY_DAISY, _C.DRY_BONES, _C.BABY_MARIO, _C.TOAD,
    _C.BABY_LUIGI, _C.TOADETTE, _C.KOOPA_TROOPA,
    _C.SMALL_MII_OUTFIT_A_MALE, _C.SMALL_MII_OUTFIT_A_FEMALE,
    _C.SMALL_MII_OUTFIT_B_MALE, _C.SMALL_MII_OUTFIT_B_FEMALE,
    _C.SMALL_MII_OUTFIT_C_MALE, _C.SMALL_MII_OUTFIT_C_FEMALE,
})
_MIDDLE = frozenset({
    _C.MARIO, _C.LUIGI, _C.YOSHI, _C.DAISY, _C.PEACH, _C.BIRDO,
    _C.DIDDY_KONG, _C.BOWSER_JR,
    _C.MEDIUM_MII_OUTFIT_A_MALE, _C.MEDIUM_MII_OUTFIT_A_FEMALE,
    _C.MEDIUM_MII_OUTFIT_B_MALE, _C.MEDIUM_MII_OUTFIT_B_FEMALE,
    _C.MEDIUM_MII_OUTFIT_C_MALE, _C.MEDIUM_MII_OUTFIT_C_FEMALE,
})
_HEAVY = frozenset({
    _C.WALUIGI, _C.BOWSER, _C.WARIO, _C.DONKEY_KONG, _C.KING_BOO,
    _C.DRY_BOWSER, _C.FUNKY_KONG, _C.ROSALINA,
    _C.LARGE_MII_OUTFIT_A_MALE, _C.LARGE_MII_OUTFIT_A_FEMALE,
    _C.LARGE_MII_OUTFIT_B_MALE, _C.LARGE_MII_OUTFIT_B_FEMALE,
    _C.LARGE_MII_OUTFIT_C_MALE, _C.LARGE_MII_OUTFIT_C_FEMALE,
})
# Mii Outfit C is not allowed in uploaded ghosts.
_FORBIDDEN_CHARACTERS = frozenset({
    _C.SMALL_MII_OUTFIT_C_MALE, _C.SMALL_MII_OUTFIT_C_FEMALE,
    _C.MEDIUM_MII_OUTFIT_C_MALE, _C.MEDIUM_MII_OUTFIT_C_FEMALE,
})


def is_valid_region(region: int) -> bool:
    return LeaderboardRegion.WORLDWIDE <= region <= LeaderboardRegion.CHINA


def is_valid_course(course: int) -> bool:
    return Course.MARIO_CIRCUIT <= course <= Course.GBA_SHY_GUY_BEACH


def is_valid_character(character: int) -> bool:
    if character in _FORBIDDEN_CHARACTERS:
        return False
    return Character.MARIO <= character <= Character.LARGE_MII_OUTFIT_B_FEMALE


def is_valid_vehicle(vehicle: int) -> bool:
    return Vehicle.STANDARD_KART_SMALL <= vehicle <= Vehicle.PHANTOM


def is_valid_controller(controller: int) -> bool:
    return Controller.WII_WHEEL <= controller <= Controller.GAMECUBE


def character_weight_class(character: int) -> WeightClass | None:
    """Return the weight class of a character, or None for unknown IDs."""
    if character in _LIGHT:
        return WeightClass.LIGHT
    if character in _MIDDLE:
        return WeightClass.MIDDLE
    if character in _HEAVY:
        return WeightClass.HEAVY
    return None


def vehicle_weight_class(vehicle: int) -> WeightClass | None:
    """Return the weight class of a vehicle, or None for negative IDs."""
    if vehicle < 0:
        return None
    return WeightClass(vehicle % 3)


def verify_yaz1_data(data: bytes, expected_size: int, decoded: int = 0) -> int:
    """Check a Yaz1 stream decodes to exactly expected_size bytes.

    Returns the number of input bytes consumed; raises GhostValidationError
    on truncated data, out-of-range back-references or overruns.
    """
    data = bytes(data)
    size = len(data)
    i = 0
    while decoded < expected_size:
        if i >= size:
            raise GhostValidationError("Yaz1: unexpected end of data")
        flags = data[i]
        i += 1

        if flags == 0xFF:
            decoded += 8
            i += 8
            continue

        for _ in range(8):
            if flags & 0x80 == 0:
                if i + 1 >= size:
                    raise GhostValidationError("Yaz1: unexpected end of data")
                copy_len = (data[i] >> 4) + 2
                distance = ((data[i] & 0x0F) << 8) | data[i + 1]
                i += 2
                if decoded - distance - 1 < 0:
                    raise GhostValidationError("Yaz1: copy source is out of bounds")
                if copy_len == 2:
                    if i >= size:
                        raise GhostValidationError("Yaz1: unexpected end of data")
                    copy_len = (data[i] + 0x12) & 0xFF
                    i += 1
                decoded += copy_len
            else:
                decoded += 1
                i += 1

            if decoded >= expected_size:
                break
            flags = (flags << 1) & 0xFF

    if decoded > expected_size:
        raise GhostValidationError("Yaz1: overran expected decompressed size")
    if i > size:
        raise GhostValidationError("Yaz1: unexpected end of data")
    return i


class RKGhostData:
    """A Mario Kart Wii ghost file with bit-field accessors."""

    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)

    def __bytes__(self) -> bytes:
        return self._data

    def __len__(self) -> int:
        return len(self._data)

    def get_bits(self, byte_offset: int, bit_offset: int, bit_length: int) -> int:
        """Read a big-endian bit field starting bit_offset bits past byte_offset."""
        if bit_length == 0:
            return 0
        byte_index = byte_offset + bit_offset // 8
        bit_index = bit_offset % 8
        byte_count = (bit_length + bit_index + 7) // 8
        if byte_index < 0 or byte_index + byte_count > len(self._data):
            raise IndexError("bit field lies outside the ghost data")
        chunk = self._data[byte_index : byte_index + byte_count]
        value = int.from_bytes(chunk, "big") & 0xFFFFFFFF
        end_bit = (bit_index + bit_length) % 8
        value >>= (8 - end_bit) % 8
        return value & ((1 << bit_length) - 1)

    def _time_field(self, lap: int, bit_offset: int, bit_length: int, total_offset: tuple[int, int]) -> int:
        if lap == 0:
            return self.get_bits(total_offset[0], total_offset[1], bit_length)
        if not 1 <= lap <= 5:
            return 0
        return self.get_bits(0x11 + (lap - 1) * 3, bit_offset, bit_length)

    def minutes(self, lap: int) -> int:
        """Minutes of the total time (lap 0) or of lap 1-5."""
        return self._time_field(lap, 0, 7, (0x04, 0))

    def seconds(self, lap: int) -> int:
        return self._time_field(lap, 7, 7, (0x04, 7))

    def milliseconds(self, lap: int) -> int:
        return self._time_field(lap, 14, 10, (0x05, 6))

    def time(self, lap: int) -> int:
        """Time in milliseconds of the total (lap 0) or of lap 1-5."""
        return self.minutes(lap) * 60000 + self.seconds(lap) * 1000 + self.milliseconds(lap)

    def course(self) -> int:
        return self.get_bits(0x07, 0, 6)

    def vehicle(self) -> int:
        return self.get_bits(0x08, 0, 6)

    def character(self) -> int:
        return self.get_bits(0x08, 6, 6)

    def year(self) -> int:
        return self.get_bits(0x09, 4, 7)

    def month(self) -> int:
        return self.get_bits(0x0A, 3, 4)

    def day(self) -> int:
        return self.get_bits(0x0A, 7, 5)

    def controller(self) -> int:
        return self.get_bits(0x0B, 4, 4)

    def is_compressed(self) -> bool:
        return self.get_bits(0x0C, 4, 1) == 1

    def ghost_type(self) -> int:
        return self.get_bits(0x0C, 7, 7)

    def drift_type(self) -> int:
        return self.get_bits(0x0D, 6, 1)

    def input_data_length(self) -> int:
        return self.get_bits(0x0E, 0, 16)

    def lap_count(self) -> int:
        return self.get_bits(0x10, 0, 8)

    def country_code(self) -> int:
        return self.get_bits(0x34, 0, 8)

    def state_code(self) -> int:
        return self.get_bits(0x35, 0, 8)

    def location_code(self) -> int:
        return self.get_bits(0x36, 0, 16)

    def mii_data(self) -> bytes:
        return self._data[_MII_OFFSET : _MII_OFFSET + MII_SIZE]

    def compressed_size(self) -> int:
        return int.from_bytes(
            self._data[_COMPRESSED_SIZE_OFFSET : _COMPRESSED_SIZE_OFFSET + 4], "big"
        )

    def compressed_data(self) -> bytes:
        return self._data[_COMPRESSED_DATA_OFFSET : len(self._data) - 4]

    def validate(self, expected_course: int | None = None, expected_score: int | None = None) -> None:
        """Check the ghost is safe to store; raise GhostValidationError if not."""
        data = self._data
        length = len(data)
        if not RKGD_FILE_MIN_SIZE <= length <= RKGD_FILE_MAX_SIZE:
            raise GhostValidationError(f"invalid RKGD length: {length}")
        if data[:4] != _RKGD_MAGIC:
            raise GhostValidationError(f"invalid RKGD magic: {data[:4]!r}")

        expected_checksum = int.from_bytes(data[-4:], "big")
        checksum = zlib.crc32(data[:-4])
        if checksum != expected_checksum:
            raise GhostValidationError(
                f"invalid RKGD checksum: {checksum:#010x}, expected {expected_checksum:#010x}"
            )

        # Must stay <= 5: the game overflows a stack buffer otherwise.
        lap_count = self.lap_count()
        if lap_count != 3:
            raise GhostValidationError(f"invalid RKGD lap count: {lap_count}")

        lap_score = 0
        for lap in range(lap_count + 1):
            if self.time(lap) == 0:
                raise GhostValidationError(f"zero RKGD time for lap {lap}")
            m, s, ms = self.minutes(lap), self.seconds(lap), self.milliseconds(lap)
            if m > 5 or s > 59 or ms > 999:
                raise GhostValidationError(f"invalid RKGD time for lap {lap}: m={m} s={s} ms={ms}")
            if lap > 0:
                lap_score += self.time(lap)

        total_score = self.time(0)
        if expected_score is not None and total_score != expected_score:
            raise GhostValidationError(
                f"RKGD total score mismatch: {total_score}, expected {expected_score}"
            )

        # Allow a millisecond of rounding between the laps and the total.
        if lap_score + 1 < total_score or lap_score - 1 > total_score:
            raise GhostValidationError(f"RKGD lap score mismatch: {lap_score}, total {total_score}")

        course = self.course()
        if expected_course is not None and course != expected_course:
            raise GhostValidationError(f"RKGD course mismatch: {course}, expected {expected_course}")
        if not is_valid_course(course):
            raise GhostValidationError(f"invalid RKGD course: {course}")

        character = self.character()
        if not is_valid_character(character):
            raise GhostValidationError(f"invalid RKGD character: {character}")

        vehicle = self.vehicle()
        if not is_valid_vehicle(vehicle):
            raise GhostValidationError(f"invalid RKGD vehicle: {vehicle}")

        if character_weight_class(character) != vehicle_weight_class(vehicle):
            logger.warning("RKGD character/vehicle weight class mismatch: c=%d v=%d", character, vehicle)

        controller = self.controller()
        if not is_valid_controller(controller):
            raise GhostValidationError(f"invalid RKGD controller: {controller}")

        if rfl_calculate_crc(self.mii_data()) != 0:
            raise GhostValidationError("invalid RKGD Mii data CRC")

        if not self.is_compressed():
            raise GhostValidationError("RKGD is not compressed")

        szs = self.compressed_data()
        if szs[:4] != _YAZ1_MAGIC:
            raise GhostValidationError(f"invalid Yaz1 magic: {szs[:4]!r}")

        decompressed_size = int.from_bytes(szs[4:8], "big")
        if self.input_data_length() != decompressed_size:
            logger.warning(
                "invalid RKGD input data length: %d, actual %d",
                self.input_data_length(), decompressed_size,
            )
        if self.compressed_size() != len(szs):
            logger.warning("invalid RKGD compressed size: %d, actual %d", self.compressed_size(), len(szs))
        if szs[8:16] != bytes(8):
            logger.warning("invalid SZS header padding")

        consumed = verify_yaz1_data(szs[_SZS_HEADER_SIZE:], decompressed_size, 0)
        if consumed + 3 < len(szs) - _SZS_HEADER_SIZE:
            raise GhostValidationError("too much padding at end of RKGD")

    def is_valid(self, expected_course: int | None = None, expected_score: int | None = None) -> bool:
        """Like validate, but return False instead of raising."""
        try:
            self.validate(expected_course, expected_score)
        except GhostValidationError as exc:
            logger.error("%s", exc)
            return False
        return True