"""Post-stage validation of grid invariants."""

import logging

import numpy as np
from numpy.typing import NDArray
from scipy import ndimage

from ..grid import TileGrid
from .hydrology import RIVER_STAMPS, River
from .regions import RegionSet, RegionType

logger = logging.getLogger(__name__)


class ValidationResult:
    """Result of grid validation."""

    def __init__(self) -> None:
        self.errors: list[str] = []
        self.warnings: list[str] = []
        self.passed = True

    def add_error(self, message: str) -> None:
        """Add validation error."""
        self.errors.append(message)
        self.passed = False

    def add_warning(self, message: str) -> None:
        """Add validation warning."""
        self.warnings.append(message)

    def log(self, name: str) -> None:
        """Log the outcome under a check name."""
        if self.passed:
            logger.info(f"{name} validation passed")
        else:
            logger.warning(f"{name} validation failed with {len(self.errors)} errors")
            for error in self.errors:
                logger.error(f"  - {error}")

        for warning in self.warnings:
            logger.warning(f"  - {warning}")


def count_wrapped_components(mask: NDArray[np.bool_]) -> int:
    """Count 4-connected components of a mask on a torus.

    Labels the mask with scipy, then merges labels that touch across the
    left/right and top/bottom seams.
    """
    structure = ndimage.generate_binary_structure(2, 1)
    labeled, num_features = ndimage.label(mask, structure=structure)
    if num_features == 0:
        return 0

    parent = list(range(num_features + 1))

    def find(label: int) -> int:
        while parent[label] != label:
            parent[label] = parent[parent[label]]
            label = parent[label]
        return label

    def union(a: int, b: int) -> None:
        root_a, root_b = find(a), find(b)
        if root_a != root_b:
            parent[root_b] = root_a

    # Left/right seam
    for a, b in zip(labeled[:, 0], labeled[:, -1]):
        if a and b:
            union(int(a), int(b))

    # Top/bottom seam
    for a, b in zip(labeled[0, :], labeled[-1, :]):
        if a and b:
            union(int(a), int(b))

    return len({find(label) for label in range(1, num_features + 1)})


def validate_regions(
    grid: TileGrid,
    regions: RegionSet,
    collidable: NDArray[np.bool_] | None = None,
) -> ValidationResult:
    """Check that regions partition the grid into connected groups.

    Args:
        grid: Segmented grid.
        regions: Output of segment_regions.
        collidable: Collidable mask at segmentation time. Defaults to the
            grid's current mask, which river carving later changes.

    Returns:
        ValidationResult with any errors/warnings.
    """
    result = ValidationResult()
    if collidable is None:
        collidable = grid.collidable

    coverage = np.zeros(grid.shape, dtype=np.int32)
    mismatched = 0

    for region in regions.all():
        if not region.tiles:
            result.add_error(f"Empty {region.region_type.value} region")
        expected = region.region_type == RegionType.LAND
        for x, y in region.tiles:
            coverage[y, x] += 1
            if collidable[y, x] != expected:
                mismatched += 1

    duplicated = int(np.sum(coverage > 1))
    missing = int(np.sum(coverage == 0))

    if duplicated:
        result.add_error(f"{duplicated} tiles belong to more than one region")
    if missing:
        result.add_error(f"{missing} tiles belong to no region")
    if mismatched:
        result.add_error(f"{mismatched} tiles disagree with their region type")

    land_components = count_wrapped_components(collidable)
    water_components = count_wrapped_components(~collidable)

    if len(regions.land) != land_components:
        result.add_error(
            f"Found {len(regions.land)} land regions, expected {land_components}"
        )
    if len(regions.water) != water_components:
        result.add_error(
            f"Found {len(regions.water)} water regions, expected {water_components}"
        )

    return result


def _wrapped_adjacent(
    a: tuple[int, int],
    b: tuple[int, int],
    width: int,
    height: int,
) -> bool:
    dx = (b[0] - a[0]) % width
    dy = (b[1] - a[1]) % height
    if dy == 0 and dx in (1, width - 1):
        return True
    return dx == 0 and dy in (1, height - 1)


def validate_rivers(
    grid: TileGrid,
    rivers: list[River],
    max_steps: int,
) -> ValidationResult:
    """Check river paths and carved tiles.

    Args:
        grid: Grid after river carving.
        rivers: Carved rivers.
        max_steps: Step bound used when tracing.

    Returns:
        ValidationResult with any errors/warnings.
    """
    result = ValidationResult()

    for river in rivers:
        label = f"River {river.river_id}"

        if river.width not in RIVER_STAMPS:
            result.add_error(f"{label} has unknown width {river.width}")

        if len(river.path) > max_steps + 1:
            result.add_error(
                f"{label} has {len(river.path)} tiles, bound is {max_steps + 1}"
            )

        for a, b in zip(river.path, river.path[1:]):
            if not _wrapped_adjacent(a, b, grid.width, grid.height):
                result.add_error(f"{label} jumps from {a} to {b}")
                break

        still_land = [(x, y) for x, y in river.path if grid.collidable[y, x]]
        if still_land:
            result.add_error(f"{label} left {len(still_land)} collidable tiles")

    return result
