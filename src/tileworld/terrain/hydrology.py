"""Hydrology: trace rivers downhill from high sources and carve them into the grid.

Rivers follow the strictly lowest of the four wrapped neighbours. When
several neighbours tie for lowest, the first in RIVER_DIRECTION_PRIORITY
(Left, Right, Top, Bottom) wins.
"""

import logging
from dataclasses import dataclass
from enum import Enum

import numpy as np
from numpy.typing import NDArray

from ..grid import GenerationStage, TileGrid
from ..tile_types import HeightType
from ..types import DIRECTION_DELTAS, RIVER_DIRECTION_PRIORITY
from .config import RiverConfig, SourcePolicy

logger = logging.getLogger(__name__)


# Width class -> (dx, dy) offsets converted around every path tile, in
# addition to the path tile itself. +dx is Right, +dy is Bottom.
RIVER_STAMPS: dict[int, tuple[tuple[int, int], ...]] = {
    # Bottom, Bottom-Right, Right
    1: ((0, 1), (1, 1), (1, 0)),
    # ... plus Top, Top-Left, Top-Right, Left, Left-Bottom
    2: (
        (0, 1), (1, 1), (1, 0),
        (0, -1), (-1, -1), (1, -1), (-1, 0), (-1, 1),
    ),
    # ... plus two cells down and right
    3: (
        (0, 1), (1, 1), (1, 0),
        (0, -1), (-1, -1), (1, -1), (-1, 0), (-1, 1),
        (0, 2), (1, 2), (2, 0), (2, 1),
    ),
    # ... plus the outer up-left / down-right ring
    4: (
        (0, 1), (1, 1), (1, 0),
        (0, -1), (-1, -1), (1, -1), (-1, 0), (-1, 1),
        (0, 2), (1, 2), (2, 0), (2, 1),
        (2, -1), (0, -2), (1, -2), (-1, 2), (-2, 0), (-2, 1),
    ),
}


class TerminationReason(str, Enum):
    """Why river tracing stopped."""

    REACHED_WATER = "reached_water"
    LOCAL_MINIMUM = "local_minimum"
    STEP_LIMIT = "step_limit"


@dataclass
class River:
    """A carved river.

    Attributes:
        river_id: Identifier stored on every tile the river touches.
        path: (x, y) tiles from source to terminus; consecutive entries are
            wrapped 4-neighbours.
        width: Width class (1-4) selecting the stamp pattern.
        termination: Why tracing stopped.
    """

    river_id: int
    path: list[tuple[int, int]]
    width: int
    termination: TerminationReason

    @property
    def source(self) -> tuple[int, int]:
        return self.path[0]

    @property
    def terminus(self) -> tuple[int, int]:
        return self.path[-1]


def lowest_neighbor(
    heights: NDArray[np.float64],
    x: int,
    y: int,
) -> tuple[int, int] | None:
    """Wrapped neighbour strictly lower than (x, y) with the least height.

    Returns:
        (x, y) of the chosen neighbour, or None at a local minimum.
    """
    height, width = heights.shape
    best: tuple[int, int] | None = None
    best_height = heights[y, x]

    for direction in RIVER_DIRECTION_PRIORITY:
        dx, dy = DIRECTION_DELTAS[direction]
        nx, ny = (x + dx) % width, (y + dy) % height
        # Strict comparison keeps the earlier direction on ties
        if heights[ny, nx] < best_height:
            best = (nx, ny)
            best_height = heights[ny, nx]

    return best


def trace_river(
    heights: NDArray[np.float64],
    collidable: NDArray[np.bool_],
    source: tuple[int, int],
    max_steps: int = 1000,
) -> tuple[list[tuple[int, int]], TerminationReason]:
    """Follow steepest descent from a source without modifying anything.

    Args:
        heights: Height array, shape (height, width).
        collidable: Land mask, shape (height, width).
        source: (x, y) start tile.
        max_steps: Maximum number of moves.

    Returns:
        Tuple of (path from source to terminus, termination reason). The
        path holds at most max_steps + 1 tiles.
    """
    path = [source]
    x, y = source

    for _ in range(max_steps):
        if not collidable[y, x]:
            return path, TerminationReason.REACHED_WATER

        step = lowest_neighbor(heights, x, y)
        if step is None:
            return path, TerminationReason.LOCAL_MINIMUM

        x, y = step
        path.append(step)

    if not collidable[y, x]:
        return path, TerminationReason.REACHED_WATER
    return path, TerminationReason.STEP_LIMIT


def make_river(grid: TileGrid, x: int, y: int, river_id: int, width: int = 1) -> None:
    """Convert one tile into river.

    Any band is converted, including open water at the mouth. Membership is
    additive: a tile already in another river keeps that river's id.
    """
    grid.add_river(x, y, river_id)
    grid.height_type[y, x] = HeightType.RIVER
    grid.height_value[y, x] = 0.0
    grid.collidable[y, x] = False
    grid.river_size[y, x] = max(int(grid.river_size[y, x]), width)


def stamp_river(grid: TileGrid, x: int, y: int, river_id: int, width: int) -> None:
    """Convert the path tile at (x, y) and its width stamp into river."""
    make_river(grid, x, y, river_id, width)
    for dx, dy in RIVER_STAMPS[width]:
        sx, sy = grid.wrap(x + dx, y + dy)
        make_river(grid, sx, sy, river_id, width)


def select_river_sources(
    grid: TileGrid,
    rng: np.random.Generator,
    config: RiverConfig,
) -> list[tuple[int, int]]:
    """Candidate river sources in the order they should be tried.

    Candidates are land tiles at or above ``min_source_height``. HIGHEST
    orders them by descending height (row-major among equal heights);
    RANDOM_HIGH shuffles them with the generation RNG.

    Args:
        grid: Classified grid.
        rng: Random number generator.
        config: River configuration.

    Returns:
        List of (x, y) candidates.
    """
    candidate = grid.collidable & (grid.height_value >= config.min_source_height)
    ys, xs = np.nonzero(candidate)
    if len(ys) == 0:
        return []

    if config.source_policy == SourcePolicy.HIGHEST:
        order = np.argsort(-grid.height_value[ys, xs], kind="stable")
    else:
        order = rng.permutation(len(ys))

    return [(int(xs[i]), int(ys[i])) for i in order]


def carve_rivers(
    grid: TileGrid,
    rng: np.random.Generator,
    config: RiverConfig,
) -> list[River]:
    """Trace and carve rivers into the grid.

    Runs after region segmentation: carved channels may cut through land
    regions and regions are not recomputed. Each river is fully traced
    before it is carved, so later rivers see earlier channels as water and
    join them.

    Args:
        grid: Segmented grid.
        rng: Random number generator (river widths, random sources).
        config: River configuration.

    Returns:
        List of carved rivers, ids starting at 0.
    """
    grid.require_stages("carve_rivers", GenerationStage.HEIGHT, GenerationStage.REGIONS)

    rivers: list[River] = []
    attempts = 0

    for source in select_river_sources(grid, rng, config):
        if len(rivers) >= config.count or attempts >= config.max_attempts:
            break

        sx, sy = source
        if not grid.collidable[sy, sx]:
            # Already carved by an earlier river
            continue

        attempts += 1
        path, reason = trace_river(
            grid.height_value, grid.collidable, source, config.max_steps
        )

        if len(path) < config.min_length:
            logger.debug(f"Rejected river at {source}: length {len(path)}")
            continue

        width = int(rng.integers(config.width_min, config.width_max + 1))
        river = River(river_id=len(rivers), path=path, width=width, termination=reason)

        for x, y in path:
            stamp_river(grid, x, y, river.river_id, width)

        logger.debug(
            f"River {river.river_id}: {len(path)} tiles, width {width}, "
            f"{reason.value}"
        )
        rivers.append(river)

    if len(rivers) < config.count:
        logger.info(
            f"Carved {len(rivers)} of {config.count} rivers after {attempts} attempts"
        )

    grid.mark_stage(GenerationStage.RIVERS)
    return rivers
