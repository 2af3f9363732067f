"""Core types for tile maps."""

from enum import IntEnum

from pydantic import BaseModel


class Direction(IntEnum):
    """4-direction neighbour enum.

    Values double as the bitmask weight for that neighbour.
    """

    TOP = 1
    RIGHT = 2
    BOTTOM = 4
    LEFT = 8


# Direction deltas for neighbour lookup
# Coordinate system: +X is right, +Y is down (towards Bottom)
DIRECTION_DELTAS: dict[Direction, tuple[int, int]] = {
    Direction.TOP: (0, -1),
    Direction.RIGHT: (1, 0),
    Direction.BOTTOM: (0, 1),
    Direction.LEFT: (-1, 0),
}


# Tie-break order when several neighbours share the lowest height
RIVER_DIRECTION_PRIORITY: tuple[Direction, ...] = (
    Direction.LEFT,
    Direction.RIGHT,
    Direction.TOP,
    Direction.BOTTOM,
)


class Position(BaseModel, frozen=True):
    """Immutable 2D tile coordinate."""

    x: int
    y: int

    def __hash__(self) -> int:
        return hash((self.x, self.y))

    def __str__(self) -> str:
        return f"({self.x}, {self.y})"

    def __repr__(self) -> str:
        return f"Position(x={self.x}, y={self.y})"
