"""
Centralized configuration management.
Uses environment variables with sensible defaults.
"""
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


def _find_project_root() -> Path:
    """Find project root by looking for pyproject.toml."""
    current = Path(__file__).resolve().parent
    for parent in [current] + list(current.parents):
        if (parent / "pyproject.toml").exists():
            return parent
    return current.parent.parent  # Fallback: src/densityscan -> project root


class Settings(BaseSettings):
    """Application settings with validation."""

    # Project paths
    PROJECT_ROOT: Path = _find_project_root()
    RESULTS_DIR: Path = PROJECT_ROOT / "results"

    # Spatial index configuration
    SPATIAL_INDEX: str = "kdtree"
    LEAF_SIZE: int = 20

    # Logging
    LOG_LEVEL: str = "WARNING"
    LOG_FORMAT: str = "text"
    LOG_FILE: Optional[Path] = None  # None disables the file sink

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )


# Global settings instance
settings = Settings()
