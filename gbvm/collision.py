"""Bounding boxes and the tile collision map."""

from __future__ import annotations

from dataclasses import dataclass

COLLISION_TOP = 0x1
COLLISION_BOTTOM = 0x2
COLLISION_LEFT = 0x4
COLLISION_RIGHT = 0x8
COLLISION_ALL = 0xF
TILE_PROP_LADDER = 0x10


@dataclass
class BoundingBox:
    """Box edges in pixels relative to an owner's position."""

    left: int
    right: int
    top: int
    bottom: int


@dataclass
class Point:
    """A position; actor positions are in 1/16 pixel units."""

    x: int
    y: int


def bb_contains(bb: BoundingBox, offset: Point, point: Point) -> bool:
    """True if the pixel point lies within bb placed at offset."""
    ox = offset.x >> 4
    oy = offset.y >> 4
    if point.x < ox + bb.left or point.x > ox + bb.right:
        return False
    if point.y < oy + bb.top or point.y > oy + bb.bottom:
        return False
    return True


def bb_intersects(
    bb_a: BoundingBox, offset_a: Point, bb_b: BoundingBox, offset_b: Point
) -> bool:
    """True if the two placed bounding boxes overlap."""
    ax, ay = offset_a.x >> 4, offset_a.y >> 4
    bx, by = offset_b.x >> 4, offset_b.y >> 4
    if bx + bb_b.left > ax + bb_a.right or bx + bb_b.right < ax + bb_a.left:
        return False
    if by + bb_b.top > ay + bb_a.bottom or by + bb_b.bottom < ay + bb_a.top:
        return False
    return True


@dataclass
class CollisionMap:
    """Row-major collision flags for a scene, one byte per tile."""

    width: int
    height: int
    data: bytes

    def __post_init__(self) -> None:
        self.data = bytes(self.data)
        if len(self.data) < self.width * self.height:
            raise ValueError(
                f"collision data holds {len(self.data)} bytes, "
                f"need {self.width * self.height}"
            )

    def tile_at(self, tx: int, ty: int) -> int:
        """Collision value at a tile; COLLISION_ALL outside the map."""
        tx &= 0xFF
        ty &= 0xFF
        if tx < self.width and ty < self.height:
            return self.data[ty * self.width + tx]
        return COLLISION_ALL