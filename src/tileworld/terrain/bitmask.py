"""Per-tile 4-neighbour bitmasks for edge-aware tile rendering.

Bit layout (fixed for tileset consumers):
    1 = Top, 2 = Right, 4 = Bottom, 8 = Left
A bit is set when that neighbour has exactly the same height band.
"""

import numpy as np
from numpy.typing import NDArray

from ..grid import GenerationStage, TileGrid
from ..types import DIRECTION_DELTAS, Direction


def tile_bitmask(grid: TileGrid, x: int, y: int) -> int:
    """Bitmask of the tile at (x, y) from its four wrapped neighbours."""
    band = grid.height_type[y, x]
    mask = 0
    for direction, (nx, ny) in grid.neighbors(x, y):
        if grid.height_type[ny, nx] == band:
            mask += int(direction)
    return mask


def compute_bitmasks(bands: NDArray[np.uint8]) -> NDArray[np.uint8]:
    """Bitmasks for a whole band array with wrap-around on both axes.

    Args:
        bands: Height band array, shape (height, width).

    Returns:
        uint8 array of masks in [0, 15].
    """
    masks = np.zeros(bands.shape, dtype=np.uint8)
    for direction in Direction:
        dx, dy = DIRECTION_DELTAS[direction]
        # Roll so each cell lines up with its neighbour's value
        neighbor = np.roll(np.roll(bands, -dy, axis=0), -dx, axis=1)
        masks[neighbor == bands] += int(direction)
    return masks


def annotate_bitmasks(grid: TileGrid, collidable_only: bool = False) -> None:
    """Store bitmasks for every tile on the grid.

    Must run after classification and after river carving, since carving
    changes bands.

    Args:
        grid: Classified grid.
        collidable_only: Leave non-collidable tiles at 0.
    """
    grid.require_stages("annotate_bitmasks", GenerationStage.HEIGHT)

    masks = compute_bitmasks(grid.height_type)
    if collidable_only:
        masks[~grid.collidable] = 0
    grid.bitmask[:] = masks

    grid.mark_stage(GenerationStage.BITMASK)
