"""Custom exceptions for map generation."""


class TileWorldError(Exception):
    """Base exception for map generation errors."""

    pass


class ConfigurationError(TileWorldError):
    """Raised when generation parameters are invalid.

    Covers non-positive dimensions, non-increasing band thresholds and
    out-of-range river settings.
    """

    pass


class PipelineOrderError(TileWorldError):
    """Raised when a generation stage runs before its prerequisites."""

    pass


class TileOutOfBoundsError(TileWorldError):
    """Raised when a tile is requested outside the grid."""

    pass
