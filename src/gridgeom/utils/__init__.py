"""Utility functions for gridgeom.

This module provides utility functions including:

- Logging setup and configuration
- Per-shape processing statistics
"""

from gridgeom.utils.logging import (
    ShapeProcessingLogger,
    ShapeProcessingStats,
    configure_logging,
)

__all__ = [
    "ShapeProcessingLogger",
    "ShapeProcessingStats",
    "configure_logging",
]
