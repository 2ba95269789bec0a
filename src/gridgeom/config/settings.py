"""Configuration settings for gridgeom."""

from pathlib import Path

from pydantic import BaseModel, Field


class TriangulationConfig(BaseModel):
    """Configuration for polygon triangulation."""

    ear_clip_attempt_factor: int = Field(
        default=5,
        ge=1,
        le=100,
        description="Ear clipping gives up after this many failed attempts per remaining vertex",
    )
    prefer_convex_fan: bool = Field(
        default=True,
        description="Triangulate convex polygons with a fan from vertex 0 instead of ear clipping",
    )


class GraphConfig(BaseModel):
    """Configuration for intersection graph construction."""

    split_collinear_overlaps: bool = Field(
        default=True,
        description="Split coincident collinear segments at each other's endpoints",
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    log_file: Path | None = Field(
        default=None,
        description="Path to log file",
    )
    log_level: str = Field(
        default="WARNING",
        description="Console log level",
    )
    file_log_level: str = Field(
        default="DEBUG",
        description="File log level (more verbose)",
    )


class GridGeomSettings(BaseModel):
    """Main application settings."""

    triangulation: TriangulationConfig = Field(default_factory=TriangulationConfig)
    graph: GraphConfig = Field(default_factory=GraphConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)


def get_default_settings() -> GridGeomSettings:
    """Get default application settings."""
    return GridGeomSettings()
