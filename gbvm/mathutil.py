"""Integer helpers, directions and angle constants used across the engine."""

from __future__ import annotations

import math
from enum import IntEnum

ANGLE_UP = 0
ANGLE_RIGHT = 64
ANGLE_DOWN = 128
ANGLE_LEFT = 192

ANGLE_0DEG = 0
ANGLE_45DEG = 32
ANGLE_90DEG = 64
ANGLE_135DEG = 96
ANGLE_180DEG = 128
ANGLE_225DEG = 160
ANGLE_270DEG = 192
ANGLE_315DEG = 224

N_DIRECTIONS = 4


class Direction(IntEnum):
    """Facing direction of an actor."""

    DOWN = 0
    RIGHT = 1
    UP = 2
    LEFT = 3
    NONE = 4


def flipped_dir(direction: int) -> Direction:
    """Return the opposite of one of the four directions."""
    return Direction((int(direction) + 2) & 3)


def is_dir_horizontal(direction: int) -> bool:
    """True for left and right."""
    return bool(int(direction) & 1)


def is_dir_vertical(direction: int) -> bool:
    """True for up and down."""
    return not int(direction) & 1


def clamp(value, low, high):
    """Limit value to the closed range [low, high]."""
    if value < low:
        return low
    if value > high:
        return high
    return value


def to_int16(value: int) -> int:
    """Wrap an integer to a signed 16-bit value."""
    value &= 0xFFFF
    return value - 0x10000 if value & 0x8000 else value


def to_uint16(value: int) -> int:
    """Wrap an integer to an unsigned 16-bit value."""
    return value & 0xFFFF


def to_int8(value: int) -> int:
    """Wrap an integer to a signed 8-bit value."""
    value &= 0xFF
    return value - 0x100 if value & 0x80 else value


def isqrt(value: int) -> int:
    """Integer square root of an unsigned 16-bit value."""
    return math.isqrt(to_uint16(value))