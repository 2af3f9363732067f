"""Tests for tile classification."""

import numpy as np
import pytest

from tileworld.exceptions import ConfigurationError, PipelineOrderError
from tileworld.grid import GenerationStage, TileGrid
from tileworld.terrain.classification import (
    BIOME_TABLE,
    assign_biomes,
    band_counts,
    band_indices,
    biome_for,
    classify_climate,
    classify_heat,
    classify_heights,
    classify_moisture,
    normalize_field,
)
from tileworld.terrain.config import ClimateConfig, HeightBandConfig
from tileworld.tile_types import BiomeType, HeatType, HeightType, MoistureType


class TestNormalizeField:
    """Tests for min/max normalization."""

    def test_range_is_unit_interval(self, field_factory) -> None:
        rng = np.random.default_rng(0)
        field = field_factory(rng.normal(size=(10, 10)) * 5 - 3)
        normalized = normalize_field(field)
        assert normalized.min() == pytest.approx(0.0)
        assert normalized.max() == pytest.approx(1.0)

    def test_flat_field_is_zero_not_nan(self, field_factory) -> None:
        field = field_factory(np.full((4, 4), 0.7))
        normalized = normalize_field(field)
        assert not np.isnan(normalized).any()
        np.testing.assert_array_equal(normalized, 0.0)


class TestBandIndices:
    """Threshold comparison semantics."""

    def test_strictly_less_than(self) -> None:
        """A value equal to a threshold belongs to the next band."""
        values = np.array([0.0, 0.09, 0.1, 0.2, 0.95])
        indices = band_indices(values, [0.1, 0.2, 0.9])
        np.testing.assert_array_equal(indices, [0, 0, 1, 2, 3])

    def test_max_value_gets_last_band(self) -> None:
        assert band_indices(np.array([1.0]), [0.5])[0] == 1


class TestClassifyHeights:
    """Tests for height band classification."""

    def test_default_bands(self, grid_factory) -> None:
        data = np.array([[0.0, 0.05, 0.15, 0.25, 0.4, 0.6, 0.85, 1.0]])
        grid = grid_factory(data)
        assert [grid.band_at(x, 0) for x in range(8)] == [
            HeightType.DEEP_WATER,
            HeightType.DEEP_WATER,
            HeightType.SHALLOW_WATER,
            HeightType.SAND,
            HeightType.GRASS,
            HeightType.FOREST,
            HeightType.ROCK,
            HeightType.SNOW,
        ]

    def test_values_on_thresholds(self, grid_factory) -> None:
        grid = grid_factory(np.array([[0.0, 0.1, 0.2, 1.0]]))
        assert grid.band_at(1, 0) == HeightType.SHALLOW_WATER
        assert grid.band_at(2, 0) == HeightType.SAND

    def test_collidable_follows_band(self, grid_factory) -> None:
        data = np.array([[0.0, 0.15, 0.25, 1.0]])
        grid = grid_factory(data)
        np.testing.assert_array_equal(grid.collidable[0], [False, False, True, True])

    def test_normalized_heights_in_unit_range(self, grid_factory) -> None:
        rng = np.random.default_rng(5)
        grid = grid_factory(rng.uniform(-4, 9, size=(12, 12)))
        assert grid.height_value.min() >= 0.0
        assert grid.height_value.max() <= 1.0

    def test_raw_heights_kept(self, grid_factory) -> None:
        data = np.array([[-2.0, 3.0]])
        grid = grid_factory(data)
        np.testing.assert_array_equal(grid.raw_height, data)

    def test_flat_field_single_band(self, grid_factory, two_band_config) -> None:
        grid = grid_factory(np.full((4, 4), 0.3), two_band_config)
        assert np.unique(grid.height_type).size == 1
        assert not np.isnan(grid.height_value).any()

    def test_marks_stage(self, grid_factory) -> None:
        grid = grid_factory(np.array([[0.0, 1.0]]))
        assert grid.has_stage(GenerationStage.HEIGHT)

    def test_custom_bands_with_shore(self, grid_factory) -> None:
        config = HeightBandConfig(
            bands=[HeightType.DEEP_WATER, HeightType.SHORE, HeightType.GRASS],
            thresholds=[0.3, 0.6],
        )
        grid = grid_factory(np.array([[0.0, 0.35, 1.0]]), config)

        assert grid.band_at(1, 0) == HeightType.SHORE
        assert grid.collidable[0, 1]

    def test_band_counts(self, grid_factory, two_band_config) -> None:
        grid = grid_factory(np.array([[0.0, 0.0, 1.0]]), two_band_config)
        assert band_counts(grid) == {HeightType.DEEP_WATER: 2, HeightType.GRASS: 1}


class TestThresholdConfiguration:
    """Invalid cut points are configuration errors."""

    def test_non_increasing_rejected(self, field_factory) -> None:
        config = HeightBandConfig(
            bands=[HeightType.DEEP_WATER, HeightType.SAND, HeightType.GRASS],
            thresholds=[0.5, 0.5],
        )
        with pytest.raises(ConfigurationError):
            classify_heights(field_factory(np.array([[0.0, 1.0]])), config)

    def test_decreasing_rejected(self, field_factory) -> None:
        config = HeightBandConfig(
            bands=[HeightType.DEEP_WATER, HeightType.SAND, HeightType.GRASS],
            thresholds=[0.6, 0.3],
        )
        with pytest.raises(ConfigurationError):
            classify_heights(field_factory(np.array([[0.0, 1.0]])), config)

    def test_wrong_count_rejected(self, field_factory) -> None:
        config = HeightBandConfig(
            bands=[HeightType.DEEP_WATER, HeightType.GRASS],
            thresholds=[0.3, 0.6],
        )
        with pytest.raises(ConfigurationError):
            classify_heights(field_factory(np.array([[0.0, 1.0]])), config)

    def test_out_of_range_rejected(self, field_factory) -> None:
        config = HeightBandConfig(
            bands=[HeightType.DEEP_WATER, HeightType.GRASS],
            thresholds=[1.0],
        )
        with pytest.raises(ConfigurationError):
            classify_heights(field_factory(np.array([[0.0, 1.0]])), config)


class TestClassifyClimate:
    """Tests for heat and moisture bands."""

    def test_requires_height_stage(self, field_factory) -> None:
        grid = TileGrid(2, 1)
        field = field_factory(np.array([[0.0, 1.0]]))
        with pytest.raises(PipelineOrderError):
            classify_climate(grid, field, field, ClimateConfig())

    def test_bands_from_fields(self, grid_factory, field_factory) -> None:
        # Flat height field is all water, so no altitude cooling applies
        grid = grid_factory(np.zeros((1, 3)))
        heat = field_factory(np.array([[0.0, 0.5, 1.0]]))
        moisture = field_factory(np.array([[1.0, 0.5, 0.0]]))
        classify_climate(grid, heat, moisture, ClimateConfig())

        assert list(grid.heat_type[0]) == [
            HeatType.COLDEST, HeatType.WARM, HeatType.WARMEST,
        ]
        assert list(grid.moisture_type[0]) == [
            MoistureType.WETTEST, MoistureType.DRY, MoistureType.DRYEST,
        ]
        assert grid.get_tile(0, 0).heat_type == HeatType.COLDEST

    def test_altitude_cooling(self, grid_factory, field_factory) -> None:
        """High land is colder than low land with the same heat noise."""
        grid = grid_factory(np.array([[0.0, 0.35, 1.0, 0.0]]))
        heat = field_factory(np.array([[0.0, 0.7, 0.7, 1.0]]))
        moisture = field_factory(np.array([[0.0, 0.5, 1.0, 0.5]]))
        classify_climate(grid, heat, moisture, ClimateConfig(altitude_cooling=0.5))

        # 0.7 - 0.5 * 0.35 = 0.525 -> WARM; 0.7 - 0.5 * 1.0 = 0.2 -> COLD
        # without cooling both would be WARMER
        assert grid.heat_type[0, 1] == HeatType.WARM
        assert grid.heat_type[0, 2] == HeatType.COLD
        assert grid.heat_type[0, 3] == HeatType.WARMEST

    def test_bad_heat_thresholds(self, grid_factory, field_factory) -> None:
        grid = grid_factory(np.array([[0.0, 1.0]]))
        field = field_factory(np.array([[0.0, 1.0]]))
        config = ClimateConfig(heat_thresholds=[0.2, 0.4])
        with pytest.raises(ConfigurationError):
            classify_climate(grid, field, field, config)


class TestBiomes:
    """Tests for the biome lookup."""

    def test_table_shape(self) -> None:
        assert len(BIOME_TABLE) == len(MoistureType)
        assert all(len(row) == len(HeatType) for row in BIOME_TABLE)

    def test_lookup(self) -> None:
        assert biome_for(MoistureType.DRYEST, HeatType.WARMEST) == BiomeType.DESERT
        assert biome_for(MoistureType.WETTEST, HeatType.WARMEST) == (
            BiomeType.TROPICAL_RAINFOREST
        )
        assert biome_for(MoistureType.WET, HeatType.COLDEST) == BiomeType.ICE
        assert biome_for(MoistureType.WETTER, HeatType.WARM) == BiomeType.SEASONAL_FOREST

    def test_requires_climate(self, grid_factory) -> None:
        grid = grid_factory(np.array([[0.0, 1.0]]))
        with pytest.raises(PipelineOrderError):
            assign_biomes(grid)

    def test_water_tiles_get_water_biome(self, grid_factory, field_factory) -> None:
        grid = grid_factory(np.array([[0.0, 0.6, 1.0]]))
        heat = field_factory(np.array([[0.0, 1.0, 1.0]]))
        moisture = field_factory(np.array([[0.0, 0.0, 1.0]]))
        classify_climate(grid, heat, moisture, ClimateConfig(altitude_cooling=0.0))
        assign_biomes(grid)

        assert grid.biome_type[0, 0] == BiomeType.WATER
        assert grid.biome_type[0, 1] == BiomeType.DESERT
        assert grid.biome_type[0, 2] == BiomeType.TROPICAL_RAINFOREST
        assert grid.has_stage(GenerationStage.BIOMES)


class TestSingleClimateFields:
    """Heat and moisture can be classified on their own."""

    def test_moisture_only(self, grid_factory, field_factory) -> None:
        grid = grid_factory(np.array([[0.0, 1.0]]))
        classify_moisture(grid, field_factory(np.array([[0.0, 1.0]])), ClimateConfig())

        assert list(grid.moisture_type[0]) == [MoistureType.DRYEST, MoistureType.WETTEST]
        assert not grid.has_stage(GenerationStage.CLIMATE)

    def test_heat_without_cooling(self, grid_factory, field_factory) -> None:
        grid = grid_factory(np.array([[0.0, 1.0]]))
        config = ClimateConfig(altitude_cooling=0.0)
        classify_heat(grid, field_factory(np.array([[1.0, 0.0]])), config)

        assert list(grid.heat_type[0]) == [HeatType.WARMEST, HeatType.COLDEST]
