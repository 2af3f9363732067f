"""Region segmentation: flood fill tiles into connected land and water groups."""

import logging
from dataclasses import dataclass, field
from enum import Enum

from ..grid import GenerationStage, TileGrid

logger = logging.getLogger(__name__)


class RegionType(str, Enum):
    """Kind of region, matching the collidable value of its tiles."""

    LAND = "land"
    WATER = "water"

    @classmethod
    def for_collidable(cls, collidable: bool) -> "RegionType":
        return cls.LAND if collidable else cls.WATER


@dataclass
class Region:
    """A maximal 4-connected group of tiles sharing one collidable value.

    Tiles are (x, y) coordinates into the owning grid, in the order they
    were filled.
    """

    region_type: RegionType
    tiles: list[tuple[int, int]] = field(default_factory=list)

    @property
    def collidable(self) -> bool:
        return self.region_type == RegionType.LAND

    def __len__(self) -> int:
        return len(self.tiles)


@dataclass
class RegionSet:
    """Output of one segmentation pass."""

    land: list[Region] = field(default_factory=list)
    water: list[Region] = field(default_factory=list)

    def all(self) -> list[Region]:
        return self.land + self.water


def flood_fill(grid: TileGrid, start: tuple[int, int]) -> Region:
    """Grow a region from a start tile using an explicit stack.

    A tile may be pushed several times before it is popped; the filled
    check at pop time is what keeps each tile in at most one region.
    Neighbours are pushed only when they share the popped tile's collidable
    value, so the region never crosses a land/water boundary.

    Args:
        grid: Grid to fill; ``flood_filled`` is updated in place.
        start: (x, y) of the first tile.

    Returns:
        The region, empty if the start tile was already filled.
    """
    sx, sy = start
    region = Region(region_type=RegionType.for_collidable(bool(grid.collidable[sy, sx])))
    collidable = grid.collidable
    filled = grid.flood_filled

    stack = [start]
    while stack:
        x, y = stack.pop()

        # Skip tiles filled since they were pushed, or of the wrong kind
        if filled[y, x] or collidable[y, x] != region.collidable:
            continue

        filled[y, x] = True
        region.tiles.append((x, y))

        value = collidable[y, x]
        for _, (nx, ny) in grid.neighbors(x, y):
            if not filled[ny, nx] and collidable[ny, nx] == value:
                stack.append((nx, ny))

    return region


def segment_regions(grid: TileGrid) -> RegionSet:
    """Partition all tiles into connected land and water regions.

    Tiles are visited in row-major order; each unfilled tile seeds a new
    region. Empty regions are dropped.

    Args:
        grid: Classified grid.

    Returns:
        RegionSet with land and water regions.
    """
    grid.require_stages("segment_regions", GenerationStage.HEIGHT)

    regions = RegionSet()
    for x, y in grid.coordinates():
        if grid.flood_filled[y, x]:
            continue

        region = flood_fill(grid, (x, y))
        if not region.tiles:
            continue

        if region.region_type == RegionType.LAND:
            regions.land.append(region)
        else:
            regions.water.append(region)

    logger.debug(
        f"Segmented {len(regions.land)} land and {len(regions.water)} water regions"
    )
    grid.mark_stage(GenerationStage.REGIONS)
    return regions
