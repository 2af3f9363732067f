"""Field sampling: project the grid onto a 4D torus and read noise values."""

import math
from dataclasses import dataclass

import numpy as np
from numpy.typing import NDArray

from ..exceptions import ConfigurationError
from .noise import NoiseField


@dataclass
class HeightField:
    """Raw noise samples with the range observed while sampling.

    Attributes:
        data: Samples, shape (height, width), indexed [y, x].
        min: Smallest sample seen.
        max: Largest sample seen.
    """

    data: NDArray[np.float64]
    min: float
    max: float

    @property
    def width(self) -> int:
        return self.data.shape[1]

    @property
    def height(self) -> int:
        return self.data.shape[0]


def toroidal_coordinates(
    width: int,
    height: int,
    radius: float,
) -> tuple[
    NDArray[np.float64], NDArray[np.float64], NDArray[np.float64], NDArray[np.float64]
]:
    """Map grid columns and rows onto two circles in 4D.

    Column x becomes the angle 2*pi*x/width on the (nx, nz) circle and row y
    the angle 2*pi*y/height on the (ny, nw) circle, so the first and last
    column (and row) sample neighbouring points.

    Args:
        width: Grid width in tiles.
        height: Grid height in tiles.
        radius: Circle radius in noise space.

    Returns:
        Tuple (nx, nz) of length-width arrays followed by (ny, nw) of
        length-height arrays, ordered (nx, ny, nz, nw).
    """
    s = np.arange(width, dtype=np.float64) / width
    t = np.arange(height, dtype=np.float64) / height

    nx = np.cos(s * 2.0 * math.pi) * radius
    ny = np.cos(t * 2.0 * math.pi) * radius
    nz = np.sin(s * 2.0 * math.pi) * radius
    nw = np.sin(t * 2.0 * math.pi) * radius

    return nx, ny, nz, nw


def sample_height_field(
    width: int,
    height: int,
    noise: NoiseField,
    radius: float = 1.0 / math.pi,
) -> HeightField:
    """Sample a noise field over the whole grid.

    Rows are sampled one at a time and the running min/max is updated as
    each row is produced.

    Args:
        width: Grid width in tiles.
        height: Grid height in tiles.
        noise: Noise function to sample.
        radius: Circle radius in noise space.

    Returns:
        HeightField with every cell filled.

    Raises:
        ConfigurationError: If width or height is not positive.
    """
    if width <= 0 or height <= 0:
        raise ConfigurationError(
            f"Field dimensions must be positive, got {width}x{height}"
        )

    nx, ny, nz, nw = toroidal_coordinates(width, height, radius)
    data = np.empty((height, width), dtype=np.float64)
    low = math.inf
    high = -math.inf

    for y in range(height):
        row = noise.get(nx, ny[y], nz, nw[y])
        data[y, :] = row
        low = min(low, float(row.min()))
        high = max(high, float(row.max()))

    return HeightField(data=data, min=low, max=high)
