"""Tile classification bands and their properties."""

from enum import IntEnum


class HeightType(IntEnum):
    """Height bands, ordered from lowest to highest, plus carved rivers.

    SHORE is not in the default band list; it is available for custom
    HeightBandConfig.bands that want a beach strip between water and sand.
    """

    DEEP_WATER = 1
    SHALLOW_WATER = 2
    SHORE = 3
    SAND = 4
    GRASS = 5
    FOREST = 6
    ROCK = 7
    SNOW = 8
    RIVER = 9

    @property
    def collidable(self) -> bool:
        """Whether this band is land-like (everything except water)."""
        return self not in _WATER_TYPES


class HeatType(IntEnum):
    """Heat bands, coldest first."""

    COLDEST = 0
    COLDER = 1
    COLD = 2
    WARM = 3
    WARMER = 4
    WARMEST = 5


class MoistureType(IntEnum):
    """Moisture bands, driest first."""

    DRYEST = 0
    DRYER = 1
    DRY = 2
    WET = 3
    WETTER = 4
    WETTEST = 5


class BiomeType(IntEnum):
    """Biome classification derived from heat and moisture."""

    NONE = 0
    WATER = 1
    ICE = 2
    TUNDRA = 3
    GRASSLAND = 4
    DESERT = 5
    WOODLAND = 6
    SAVANNA = 7
    BOREAL_FOREST = 8
    SEASONAL_FOREST = 9
    TEMPERATE_RAINFOREST = 10
    TROPICAL_RAINFOREST = 11


# Define sets for O(1) lookup
_WATER_TYPES = frozenset({
    HeightType.DEEP_WATER,
    HeightType.SHALLOW_WATER,
    HeightType.RIVER,
})

