"""Stack of saved scenes for returning to earlier locations."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterator

from .collision import Point
from .mathutil import Direction

SCENE_STACK_SIZE = 8


@dataclass
class SceneStackItem:
    """A saved scene with the player's position and facing there."""

    scene: Any
    pos: Point
    direction: Direction


@dataclass
class SceneStack:
    """Bounded stack of saved scenes."""

    capacity: int = SCENE_STACK_SIZE
    items: list[SceneStackItem] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[SceneStackItem]:
        return iter(self.items)

    def push(self, scene: Any, pos: Point, direction: int) -> None:
        """Save a scene and where the player stood in it."""
        if len(self.items) >= self.capacity:
            raise IndexError("scene stack is full")
        self.items.append(
            SceneStackItem(scene, Point(pos.x, pos.y), Direction(direction))
        )

    def pop(self) -> SceneStackItem:
        """Remove and return the most recently saved scene."""
        if not self.items:
            raise IndexError("scene stack is empty")
        return self.items.pop()

    def pop_all(self) -> SceneStackItem:
        """Empty the stack and return the first scene that was saved."""
        if not self.items:
            raise IndexError("scene stack is empty")
        first = self.items[0]
        self.items.clear()
        return first

    def reset(self) -> None:
        """Discard every saved scene."""
        self.items.clear()