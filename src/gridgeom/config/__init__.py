"""Configuration management for gridgeom.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- TriangulationConfig: Ear clipping and fan triangulation settings
- GraphConfig: Intersection graph construction settings
- LoggingConfig: Logging settings
- GridGeomSettings: Main application settings
"""

from gridgeom.config.settings import (
    GraphConfig,
    GridGeomSettings,
    LoggingConfig,
    TriangulationConfig,
    get_default_settings,
)

__all__ = [
    "GraphConfig",
    "GridGeomSettings",
    "LoggingConfig",
    "TriangulationConfig",
    "get_default_settings",
]
