"""Configuration management for Atlasworks.

This module provides centralized configuration management using Pydantic Settings.
All configuration is loaded from environment variables with the ATLASWORKS_ prefix,
allowing the engine heuristics to be tuned without code changes.

Environment Variable Loading
-----------------------------
Configuration values are loaded in the following priority order:
1. Environment variables (ATLASWORKS_* prefix)
2. .env file in the project root
3. Default values defined in AtlasworksConfig

Example .env file:
    ATLASWORKS_ALPHA_THRESHOLD=10
    ATLASWORKS_BRIDGE_SEARCH_RADIUS=20
    ATLASWORKS_OUTPUTS_DIR=outputs

Global Configuration Instance
------------------------------
A global `config` instance is created automatically at module import time.
Every component falls back to it when no explicit config is passed.

Usage Example
-------------
    from atlasworks.core.config import config

    print(config.alpha_threshold)
    print(config.silhouette_min_size, config.silhouette_max_size)

Golden Output Constraints
-------------------------
The defaults reproduce the reference atlases byte-for-byte. Changing any of
the heuristic thresholds below changes which parts survive and where they
land, so golden-image comparisons are only meaningful with the defaults:
- alpha_threshold: 10 (alpha must be strictly greater)
- min_part_pixels: 4 (parts of 3 pixels or fewer are noise)
- bridge_search_radius: 20 px on either side of the expected split
- bridge_expected_fill: 0.85, so 1.5x the expected width (435 px) stays above
  silhouette_max_size and a single accepted silhouette is never split
- silhouette size range: 200-400 px on both axes

See Also
--------
- AtlasworksConfig: Full configuration class documentation
"""

from pathlib import Path
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class AtlasworksConfig(BaseSettings):
    """Main configuration for the Atlasworks engine and CLI.

    Values are loaded from environment variables with the ATLASWORKS_ prefix,
    with fallback to defaults defined here.

    Attributes
    ----------
    Raster Settings:
        atlas_size : int
            Required width and height of an atlas in pixels
        grid_size : int
            Number of cells along each axis of the atlas grid
        alpha_threshold : int
            Pixels with alpha strictly above this value are opaque

    Extraction Settings:
        min_part_pixels : int
            Smallest connected part that is kept (smaller parts are noise)

    Bridge Separation:
        bridge_min_extent : int
            Minimum extent (px) across the band for a part to be examined
        bridge_band_mass_ratio : float
            Fraction of a part's pixels that must fall inside the band
        bridge_search_radius : int
            Half-width of the window searched for the narrowest bridge
        bridge_expected_fill : float
            Expected silhouette size as a fraction of the cell size
        bridge_max_neck : int
            Maximum growth of a cut on either side of the narrowest column
        bridge_max_thickness : int
            A cut only grows past the narrowest column when that column is at
            most this thick; thicker bridges are cut along a single column

    Ownership Filters:
        icon_max_span : int
            Largest cell span accepted in icon policy
        generic_max_span : int
            Largest cell span accepted in generic policy
        silhouette_max_span : int
            Largest cell span accepted in silhouette policy
        silhouette_min_size : int
            Smallest accepted silhouette bounding-box side
        silhouette_max_size : int
            Largest accepted silhouette bounding-box side
        silhouette_edge_tolerance : float
            Allowed overhang past the cell grid lines, as a fraction of the
            cell size

    Paths and Logging:
        outputs_dir : Path
            Default directory for processed atlases written by the CLI
        log_level : Literal["DEBUG", "INFO", "WARNING", "ERROR"]
            Level used when the CLI configures logging

    Notes
    -----
    - outputs_dir is created automatically if it doesn't exist
    - To modify config, set environment variables and restart

    Examples
    --------
    Create a custom configuration:

        >>> custom_config = AtlasworksConfig(bridge_search_radius=30)
        >>> custom_config.bridge_search_radius
        30
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="ATLASWORKS_",
        case_sensitive=False,
    )

    # Raster settings
    atlas_size: int = Field(
        default=1024,
        description="Required atlas width and height in pixels",
        ge=3,
    )
    grid_size: int = Field(
        default=3,
        description="Number of grid cells along each axis",
        ge=1,
        le=16,
    )
    alpha_threshold: int = Field(
        default=10,
        description="Pixels with alpha above this value count as opaque",
        ge=0,
        le=254,
    )

    # Extraction settings
    min_part_pixels: int = Field(
        default=4,
        description="Parts with fewer pixels are discarded as rendering noise",
        ge=1,
    )

    # Bridge separation settings
    bridge_min_extent: int = Field(
        default=50,
        description="A part must extend further than this across a band to be split",
        ge=0,
    )
    bridge_band_mass_ratio: float = Field(
        default=0.3,
        description="Minimum share of a part's pixels inside the band",
        ge=0.0,
        le=1.0,
    )
    bridge_search_radius: int = Field(
        default=20,
        description="Half-width of the narrowest-bridge search window",
        ge=0,
    )
    bridge_expected_fill: float = Field(
        default=0.85,
        description="Expected silhouette size relative to the cell size",
        gt=0.0,
        le=1.0,
    )
    bridge_max_neck: int = Field(
        default=64,
        description="How far a cut may grow past the narrowest column on each side",
        ge=0,
    )
    bridge_max_thickness: int = Field(
        default=16,
        description="Thickest bridge whose whole neck is erased",
        ge=0,
    )

    # Ownership filter settings
    icon_max_span: int = Field(default=2, ge=1, le=9)
    generic_max_span: int = Field(default=5, ge=1, le=9)
    silhouette_max_span: int = Field(default=4, ge=1, le=9)
    silhouette_min_size: int = Field(
        default=200,
        description="Smallest accepted silhouette width/height",
        ge=1,
    )
    silhouette_max_size: int = Field(
        default=400,
        description="Largest accepted silhouette width/height",
        ge=1,
    )
    silhouette_edge_tolerance: float = Field(
        default=0.2,
        description="Allowed overhang past cell grid lines (fraction of cell size)",
        ge=0.0,
        le=1.0,
    )

    # Paths
    outputs_dir: Path = Field(
        default=Path("outputs"),
        description="Directory for processed atlases",
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Log level used by the command-line entry point",
    )

    def __init__(self, **kwargs):
        """Initialize configuration and create the outputs directory.

        Args:
            **kwargs: Configuration overrides (typically from environment variables)
        """
        super().__init__(**kwargs)

        # parents=True and exist_ok=True make this safe to call repeatedly
        self.outputs_dir.mkdir(parents=True, exist_ok=True)

    @property
    def cell_size(self) -> float:
        """Nominal (fractional) cell size, e.g. 341.33 for a 1024 atlas."""
        return self.atlas_size / self.grid_size


# Global configuration instance
# Loads values from environment variables (ATLASWORKS_* prefix) and .env file.
config = AtlasworksConfig()
