"""Tile grid state with toroidal neighbour lookup."""

from enum import Enum
from typing import Iterator

import numpy as np
from numpy.typing import NDArray
from pydantic import BaseModel

from .exceptions import ConfigurationError, PipelineOrderError, TileOutOfBoundsError
from .tile_types import BiomeType, HeatType, HeightType, MoistureType
from .types import DIRECTION_DELTAS, Direction, Position


class GenerationStage(str, Enum):
    """Pipeline stages that mutate a grid, in execution order."""

    HEIGHT = "height"
    CLIMATE = "climate"
    REGIONS = "regions"
    RIVERS = "rivers"
    BIOMES = "biomes"
    BITMASK = "bitmask"


class Tile(BaseModel, frozen=True):
    """Immutable snapshot of one tile, built on demand from the grid."""

    position: Position
    height_value: float
    raw_height_value: float
    height_type: HeightType
    heat_type: HeatType | None = None
    moisture_type: MoistureType | None = None
    biome_type: BiomeType = BiomeType.NONE
    bitmask: int = 0
    collidable: bool = True
    flood_filled: bool = False
    rivers: tuple[int, ...] = ()
    river_size: int = 0


class TileGrid:
    """Dense width x height tile storage.

    Tile attributes live in parallel numpy arrays of shape (height, width),
    indexed [y, x], so no Tile objects exist until requested with
    get_tile(). Neighbours are derived by wrapped coordinate arithmetic on
    both axes; tiles hold no references to each other.
    """

    def __init__(self, width: int, height: int) -> None:
        if width <= 0 or height <= 0:
            raise ConfigurationError(
                f"Grid dimensions must be positive, got {width}x{height}"
            )
        self.width = width
        self.height = height

        shape = (height, width)
        self.raw_height: NDArray[np.float64] = np.zeros(shape, dtype=np.float64)
        self.height_value: NDArray[np.float64] = np.zeros(shape, dtype=np.float64)
        self.height_type: NDArray[np.uint8] = np.full(
            shape, HeightType.DEEP_WATER, dtype=np.uint8
        )
        self.heat_type: NDArray[np.uint8] = np.zeros(shape, dtype=np.uint8)
        self.moisture_type: NDArray[np.uint8] = np.zeros(shape, dtype=np.uint8)
        self.biome_type: NDArray[np.uint8] = np.full(
            shape, BiomeType.NONE, dtype=np.uint8
        )
        self.bitmask: NDArray[np.uint8] = np.zeros(shape, dtype=np.uint8)
        self.collidable: NDArray[np.bool_] = np.zeros(shape, dtype=bool)
        self.flood_filled: NDArray[np.bool_] = np.zeros(shape, dtype=bool)
        self.river_size: NDArray[np.uint8] = np.zeros(shape, dtype=np.uint8)

        # Sparse river membership: (x, y) -> river ids
        self._rivers: dict[tuple[int, int], set[int]] = {}

        self._stages: set[GenerationStage] = set()

    # --- Coordinates ---

    @property
    def shape(self) -> tuple[int, int]:
        """Array shape (height, width)."""
        return (self.height, self.width)

    def in_bounds(self, x: int, y: int) -> bool:
        """Check if (x, y) is inside the grid without wrapping."""
        return 0 <= x < self.width and 0 <= y < self.height

    def wrap(self, x: int, y: int) -> tuple[int, int]:
        """Wrap any integer coordinate onto the torus."""
        return x % self.width, y % self.height

    def neighbor(self, x: int, y: int, direction: Direction) -> tuple[int, int]:
        """Wrapped coordinate of the neighbour in the given direction."""
        dx, dy = DIRECTION_DELTAS[direction]
        return (x + dx) % self.width, (y + dy) % self.height

    def neighbors(self, x: int, y: int) -> list[tuple[Direction, tuple[int, int]]]:
        """All four wrapped neighbours as (direction, (x, y)) pairs."""
        return [(d, self.neighbor(x, y, d)) for d in Direction]

    def coordinates(self) -> Iterator[tuple[int, int]]:
        """Iterate all coordinates in row-major order."""
        for y in range(self.height):
            for x in range(self.width):
                yield x, y

    # --- Tile access ---

    def get_tile(self, x: int, y: int) -> Tile:
        """Build an immutable snapshot of the tile at (x, y).

        Raises:
            TileOutOfBoundsError: If (x, y) lies outside the grid.
        """
        if not self.in_bounds(x, y):
            raise TileOutOfBoundsError(
                f"Tile ({x}, {y}) outside {self.width}x{self.height} grid"
            )

        has_climate = GenerationStage.CLIMATE in self._stages
        return Tile(
            position=Position(x=x, y=y),
            height_value=float(self.height_value[y, x]),
            raw_height_value=float(self.raw_height[y, x]),
            height_type=HeightType(int(self.height_type[y, x])),
            heat_type=HeatType(int(self.heat_type[y, x])) if has_climate else None,
            moisture_type=(
                MoistureType(int(self.moisture_type[y, x])) if has_climate else None
            ),
            biome_type=BiomeType(int(self.biome_type[y, x])),
            bitmask=int(self.bitmask[y, x]),
            collidable=bool(self.collidable[y, x]),
            flood_filled=bool(self.flood_filled[y, x]),
            rivers=tuple(sorted(self._rivers.get((x, y), ()))),
            river_size=int(self.river_size[y, x]),
        )

    def band_at(self, x: int, y: int) -> HeightType:
        """Height band at (x, y), wrapping the coordinate."""
        x, y = self.wrap(x, y)
        return HeightType(int(self.height_type[y, x]))

    # --- Rivers ---

    def river_ids(self, x: int, y: int) -> set[int]:
        """Copy of the river ids the tile at (x, y) belongs to."""
        return set(self._rivers.get((x, y), ()))

    def add_river(self, x: int, y: int, river_id: int) -> None:
        """Add a river id to a tile (membership is additive)."""
        self._rivers.setdefault((x, y), set()).add(river_id)

    def river_mask(self) -> NDArray[np.bool_]:
        """Boolean mask of tiles belonging to at least one river."""
        mask = np.zeros(self.shape, dtype=bool)
        for x, y in self._rivers:
            mask[y, x] = True
        return mask

    # --- Stage bookkeeping ---

    def mark_stage(self, stage: GenerationStage) -> None:
        """Record that a stage has completed."""
        self._stages.add(stage)

    def has_stage(self, stage: GenerationStage) -> bool:
        """Whether a stage has completed."""
        return stage in self._stages

    def require_stages(self, step: str, *stages: GenerationStage) -> None:
        """Ensure prerequisite stages have completed.

        Raises:
            PipelineOrderError: If any stage is missing.
        """
        missing = [s.value for s in stages if s not in self._stages]
        if missing:
            raise PipelineOrderError(
                f"{step} requires stages {missing} to run first"
            )
