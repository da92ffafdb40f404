"""Camera position, scripted camera moves and screen shake."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Callable

from .mathutil import to_int16

SCREEN_WIDTH = 160
SCREEN_HEIGHT = 144
SCREEN_WIDTH_HALF = 80
SCREEN_HEIGHT_HALF = 72

CAMERA_LOCK_FLAG = 0x03
CAMERA_LOCK_X_FLAG = 0x01
CAMERA_LOCK_Y_FLAG = 0x02
CAMERA_UNLOCKED = 0x00

CAMERA_SHAKE_X = 1
CAMERA_SHAKE_Y = 2


def _shake_offset(rng: Callable[[], int]) -> int:
    value = rng() & 0x0F
    if value > 10:
        value -= 10
    return value - 5


@dataclass
class Camera:
    """Camera state: position in pixels, follow settings and shake offsets."""

    x: int = 0
    y: int = 0
    offset_x: int = 0
    offset_y: int = 0
    deadzone_x: int = 0
    deadzone_y: int = 0
    settings: int = CAMERA_UNLOCKED
    scroll_offset_x: int = 0
    scroll_offset_y: int = 0

    def move_towards(
        self, x: int, y: int, speed: int, after_lock: int, game_time: int
    ) -> bool:
        """Advance one pixel per axis towards (x, y); True once it is there.

        The camera only moves on frames where ``game_time & speed`` is zero.
        On arrival the lock bits of ``after_lock`` are applied.
        """
        x = to_int16(x)
        y = to_int16(y)
        self.settings &= ~CAMERA_LOCK_FLAG
        if self.x == x and self.y == y:
            self.settings |= after_lock & CAMERA_LOCK_FLAG
            return True
        if (game_time & speed) == 0:
            if self.x > x:
                self.x -= 1
            elif self.x < x:
                self.x += 1
            if self.y > y:
                self.y -= 1
            elif self.y < y:
                self.y += 1
        return False

    def set_pos(self, x: int, y: int) -> None:
        """Jump the camera to (x, y) and release any lock on the player."""
        self.x = to_int16(x)
        self.y = to_int16(y)
        self.settings &= ~CAMERA_LOCK_FLAG

    def shake(self, rng: Callable[[], int], axes: int) -> None:
        """Set a random scroll offset in [-5, 5] on each axis named in axes."""
        if axes & CAMERA_SHAKE_X:
            self.scroll_offset_x = _shake_offset(rng)
        if axes & CAMERA_SHAKE_Y:
            self.scroll_offset_y = _shake_offset(rng)

    def end_shake(self) -> None:
        """Clear the shake offsets."""
        self.scroll_offset_x = 0
        self.scroll_offset_y = 0