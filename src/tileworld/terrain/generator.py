"""Main terrain generation orchestration."""

import logging

import numpy as np

from ..grid import TileGrid
from ..tile_types import HeightType
from .bitmask import annotate_bitmasks
from .classification import (
    assign_biomes,
    band_counts,
    classify_climate,
    classify_heights,
)
from .config import NoiseConfig, TerrainConfig, validate_config
from .fields import HeightField, sample_height_field
from .hydrology import River, carve_rivers
from .noise import NoiseField
from .regions import RegionSet, segment_regions
from .validation import validate_regions, validate_rivers

logger = logging.getLogger(__name__)

# Seed offsets for the independent climate fields
HEAT_SEED_OFFSET = 100
MOISTURE_SEED_OFFSET = 200


class GenerationResult:
    """Result of terrain generation.

    The grid is handed over only once every stage has finished; regions
    describe the grid as it was before river carving.
    """

    def __init__(
        self,
        grid: TileGrid,
        regions: RegionSet,
        rivers: list[River],
        config: TerrainConfig,
    ):
        self.grid = grid
        self.regions = regions
        self.rivers = rivers
        self.config = config


def sample_field(
    config: TerrainConfig,
    noise_config: NoiseConfig,
    seed: int,
) -> HeightField:
    """Sample one noise field over the configured grid."""
    noise = NoiseField(noise_config, seed)
    return sample_height_field(
        config.width, config.height, noise, config.coordinate_radius
    )


def generate_terrain(config: TerrainConfig) -> GenerationResult:
    """Generate a complete tile map from configuration.

    Stages run strictly in order: height sampling, height classification,
    heat/moisture classification, region segmentation, river carving,
    biome assignment, bitmask annotation.

    Args:
        config: Terrain generation configuration.

    Returns:
        GenerationResult with the finished grid.

    Raises:
        ConfigurationError: If the configuration is invalid.
    """
    validate_config(config)
    rng = np.random.default_rng(config.seed)
    width, height = config.width, config.height

    logger.info(f"Generating terrain {width}x{height} with seed {config.seed}")

    # Stage A: Height field
    logger.info("Stage A: Sampling height field...")
    height_field = sample_field(config, config.noise, config.seed)
    logger.debug(f"Height range: {height_field.min:.3f} .. {height_field.max:.3f}")

    # Stage B: Height classification
    logger.info("Stage B: Classifying heights...")
    grid = classify_heights(height_field, config.height_bands)

    # Stage C: Climate
    if config.climate.enabled:
        logger.info("Stage C: Classifying heat and moisture...")
        heat_field = sample_field(
            config, config.climate.heat_noise, config.seed + HEAT_SEED_OFFSET
        )
        moisture_field = sample_field(
            config, config.climate.moisture_noise, config.seed + MOISTURE_SEED_OFFSET
        )
        classify_climate(grid, heat_field, moisture_field, config.climate)

    # Stage D: Regions
    logger.info("Stage D: Segmenting regions...")
    regions = segment_regions(grid)
    logger.info(
        f"Found {len(regions.land)} land and {len(regions.water)} water regions"
    )
    if config.validate_output:
        validate_regions(grid, regions).log("Region")

    # Stage E: Rivers
    logger.info("Stage E: Carving rivers...")
    rivers = carve_rivers(grid, rng, config.rivers)
    logger.info(f"Carved {len(rivers)} rivers")
    if config.validate_output:
        validate_rivers(grid, rivers, config.rivers.max_steps).log("River")

    # Stage F: Biomes
    if config.climate.enabled:
        logger.info("Stage F: Assigning biomes...")
        assign_biomes(grid)

    # Stage G: Bitmasks
    logger.info("Stage G: Computing bitmasks...")
    annotate_bitmasks(grid, collidable_only=config.bitmask.collidable_only)

    _log_terrain_stats(grid)

    return GenerationResult(grid=grid, regions=regions, rivers=rivers, config=config)


def _log_terrain_stats(grid: TileGrid) -> None:
    """Log terrain generation statistics."""
    total = grid.width * grid.height
    counts = band_counts(grid)

    logger.info(f"Terrain stats ({total:,} tiles):")
    for band in HeightType:
        count = counts.get(band, 0)
        if count:
            pct = count / total * 100
            logger.info(f"  {band.name.lower()}: {count:,} ({pct:.1f}%)")
