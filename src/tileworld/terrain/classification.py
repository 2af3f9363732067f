"""Tile classification: height bands, heat/moisture bands, biomes."""

import logging
from collections.abc import Sequence

import numpy as np
from numpy.typing import NDArray

from ..grid import GenerationStage, TileGrid
from ..tile_types import BiomeType, HeatType, HeightType, MoistureType
from .config import ClimateConfig, HeightBandConfig, check_thresholds
from .fields import HeightField

logger = logging.getLogger(__name__)


# Rows are moisture (DRYEST..WETTEST), columns are heat (COLDEST..WARMEST)
BIOME_TABLE: tuple[tuple[BiomeType, ...], ...] = (
    (BiomeType.ICE, BiomeType.TUNDRA, BiomeType.GRASSLAND, BiomeType.DESERT,
     BiomeType.DESERT, BiomeType.DESERT),
    (BiomeType.ICE, BiomeType.TUNDRA, BiomeType.GRASSLAND, BiomeType.DESERT,
     BiomeType.DESERT, BiomeType.DESERT),
    (BiomeType.ICE, BiomeType.TUNDRA, BiomeType.WOODLAND, BiomeType.WOODLAND,
     BiomeType.SAVANNA, BiomeType.SAVANNA),
    (BiomeType.ICE, BiomeType.TUNDRA, BiomeType.BOREAL_FOREST, BiomeType.WOODLAND,
     BiomeType.SAVANNA, BiomeType.SAVANNA),
    (BiomeType.ICE, BiomeType.TUNDRA, BiomeType.BOREAL_FOREST,
     BiomeType.SEASONAL_FOREST, BiomeType.TROPICAL_RAINFOREST,
     BiomeType.TROPICAL_RAINFOREST),
    (BiomeType.ICE, BiomeType.TUNDRA, BiomeType.BOREAL_FOREST,
     BiomeType.TEMPERATE_RAINFOREST, BiomeType.TROPICAL_RAINFOREST,
     BiomeType.TROPICAL_RAINFOREST),
)

_BIOME_LOOKUP = np.array(BIOME_TABLE, dtype=np.uint8)


def normalize_field(field: HeightField) -> NDArray[np.float64]:
    """Rescale samples to [0, 1] using the field's observed range.

    A field with no range (max == min) normalizes to all zeros, which puts
    every tile in the lowest band instead of propagating NaN.

    Args:
        field: Sampled field.

    Returns:
        Normalized copy of the samples.
    """
    span = field.max - field.min
    if not span > 0:
        logger.warning(
            f"Field has no range (min={field.min}, max={field.max}); "
            "all tiles normalize to 0"
        )
        return np.zeros_like(field.data)

    normalized = (field.data - field.min) / span
    return np.clip(normalized, 0.0, 1.0)


def band_indices(
    values: NDArray[np.float64],
    thresholds: Sequence[float],
) -> NDArray[np.intp]:
    """Index of the band each value falls into.

    A value belongs to the first threshold it is strictly less than; values
    at or above every threshold get index len(thresholds).
    """
    return np.searchsorted(np.asarray(thresholds, dtype=np.float64), values, side="right")


def classify_heights(field: HeightField, config: HeightBandConfig) -> TileGrid:
    """Build a tile grid from a sampled height field.

    Args:
        field: Raw height samples with their min/max.
        config: Band list and cut points.

    Returns:
        New TileGrid with heights, bands and collidable flags set.

    Raises:
        ConfigurationError: If the thresholds do not match the bands or are
            not strictly increasing inside (0, 1).
    """
    check_thresholds(config.thresholds, len(config.bands), "height_bands")

    grid = TileGrid(field.width, field.height)
    grid.raw_height[:] = field.data
    grid.height_value[:] = normalize_field(field)

    indices = band_indices(grid.height_value, config.thresholds)
    band_values = np.array([int(b) for b in config.bands], dtype=np.uint8)
    band_collidable = np.array([b.collidable for b in config.bands], dtype=bool)

    grid.height_type[:] = band_values[indices]
    grid.collidable[:] = band_collidable[indices]

    grid.mark_stage(GenerationStage.HEIGHT)
    return grid


def classify_heat(grid: TileGrid, field: HeightField, config: ClimateConfig) -> None:
    """Assign heat bands from a sampled heat field.

    Land tiles lose heat in proportion to their normalized height, so high
    ground classifies colder than the raw heat noise suggests.
    """
    grid.require_stages("classify_heat", GenerationStage.HEIGHT)
    check_thresholds(config.heat_thresholds, len(HeatType), "climate.heat")

    heat = normalize_field(field)
    land = grid.collidable
    heat[land] -= config.altitude_cooling * grid.height_value[land]
    heat = np.clip(heat, 0.0, 1.0)

    grid.heat_type[:] = band_indices(heat, config.heat_thresholds)


def classify_moisture(grid: TileGrid, field: HeightField, config: ClimateConfig) -> None:
    """Assign moisture bands from a sampled moisture field."""
    grid.require_stages("classify_moisture", GenerationStage.HEIGHT)
    check_thresholds(config.moisture_thresholds, len(MoistureType), "climate.moisture")

    moisture = normalize_field(field)
    grid.moisture_type[:] = band_indices(moisture, config.moisture_thresholds)


def classify_climate(
    grid: TileGrid,
    heat_field: HeightField,
    moisture_field: HeightField,
    config: ClimateConfig,
) -> None:
    """Assign heat and moisture bands from independently sampled fields.

    Args:
        grid: Grid with height classification done.
        heat_field: Sampled heat noise.
        moisture_field: Sampled moisture noise.
        config: Climate thresholds and altitude cooling.
    """
    grid.require_stages("classify_climate", GenerationStage.HEIGHT)

    classify_heat(grid, heat_field, config)
    classify_moisture(grid, moisture_field, config)

    grid.mark_stage(GenerationStage.CLIMATE)


def biome_for(moisture: MoistureType, heat: HeatType) -> BiomeType:
    """Look up the land biome for a moisture/heat pair."""
    return BIOME_TABLE[moisture][heat]


def assign_biomes(grid: TileGrid) -> None:
    """Set every tile's biome from its heat and moisture bands.

    Non-collidable tiles (open water and rivers) are WATER. Run after river
    carving so carved channels read as water.
    """
    grid.require_stages("assign_biomes", GenerationStage.CLIMATE)

    biomes = _BIOME_LOOKUP[grid.moisture_type, grid.heat_type]
    biomes[~grid.collidable] = BiomeType.WATER
    grid.biome_type[:] = biomes

    grid.mark_stage(GenerationStage.BIOMES)


def band_counts(grid: TileGrid) -> dict[HeightType, int]:
    """Number of tiles in each height band present on the grid."""
    values, counts = np.unique(grid.height_type, return_counts=True)
    return {HeightType(int(v)): int(c) for v, c in zip(values, counts)}
