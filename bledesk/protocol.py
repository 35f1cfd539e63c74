"""
Linak / IKEA Idåsen BLE protocol.

Position characteristic: 2 bytes, little-endian unsigned, hundredths of a
centimeter above a 63.00 cm base.
Control characteristic: 2 bytes, little-endian unsigned opcode.
"""

import struct
from dataclasses import dataclass
from enum import IntEnum

from bledesk.errors import MalformedReadingError, OutOfRangeError

# === LINAK BLE UUIDS ===
UUID_POSITION = "99fa0021-338a-1024-8a49-009c0215f78a"
UUID_CONTROL = "99fa0002-338a-1024-8a49-009c0215f78a"

# === CONSTANTS ===
BASE_HEIGHT_CM = 63.00
MIN_HEIGHT_CM = 65.0
MAX_HEIGHT_CM = 128.0
TOLERANCE_CM = 1.0
POLL_INTERVAL = 0.5

STOP_OPCODE = 0xFF


class Direction(IntEnum):
    """Motor direction, valued by its control opcode."""

    UP = 71
    DOWN = 70


@dataclass(frozen=True)
class DeskProfile:
    """Characteristic UUIDs and calibration for one desk model."""

    position_uuid: str = UUID_POSITION
    control_uuid: str = UUID_CONTROL
    base_height: float = BASE_HEIGHT_CM
    min_height: float = MIN_HEIGHT_CM
    max_height: float = MAX_HEIGHT_CM
    # Some firmware appends a 2-byte speed to the height (4 bytes total)
    position_size: int = 2


DEFAULT_PROFILE = DeskProfile()


def decode_position(data: bytes, base_height: float = BASE_HEIGHT_CM, size: int = 2) -> float:
    """Convert a position reading to centimeters. Only the first two bytes carry the height."""
    if len(data) != size:
        raise MalformedReadingError(f"Expected {size} bytes of position data, got {len(data)}")
    raw = struct.unpack("<H", bytes(data[:2]))[0]
    return base_height + raw / 100.0


def encode_command(direction: Direction) -> bytes:
    """Encode a motor command for the control characteristic."""
    return struct.pack("<H", int(direction))


def encode_stop() -> bytes:
    return struct.pack("<H", STOP_OPCODE)


def check_height(height: float, profile: DeskProfile = DEFAULT_PROFILE) -> float:
    """Return ``height`` unchanged, or raise OutOfRangeError if the desk can't reach it."""
    if not profile.min_height <= height <= profile.max_height:
        raise OutOfRangeError(
            f"Height must be between {profile.min_height:g} and {profile.max_height:g} cm, "
            f"got {height:g}"
        )
    return height
