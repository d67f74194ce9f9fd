"""
Tract Lookup - Configuration Loader

Pydantic-based configuration management with:
- Environment-based configuration (dev/prod)
- YAML file loading with inheritance
- Environment variable overrides
- Type validation via Pydantic

Usage:
    from tract_lookup.shared.config import get_config

    config = get_config()  # Uses TL_ENVIRONMENT env var
    config = get_config("dev")  # Explicit environment

    # Access config values
    num_classes = config.classification.num_classes
    workers = config.lookup.max_workers
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# =============================================================================
# Configuration Models
# =============================================================================


class ProjectConfig(BaseModel):
    """Project metadata configuration."""

    name: str = "tract-lookup"
    version: str = "0.1.0"
    description: str = "Census tract resolution and choropleth classification"


class VintageConfig(BaseModel):
    """Supported TIGER/Line shapefile vintages."""

    min_year: int = 2007
    max_year: int | None = None


class IndexConfig(BaseModel):
    """Spatial index configuration."""

    # Maximum children per R-tree node
    node_capacity: int = Field(default=10, ge=2)


class LookupConfig(BaseModel):
    """Coordinate lookup configuration."""

    verbose: bool = False
    max_workers: int = Field(default=1, ge=1)
    latitude_column: str = "latitude"
    longitude_column: str = "longitude"


class AggregationConfig(BaseModel):
    """Per-tract tally configuration."""

    count_column: str = "ncases"
    zero_fill: bool = False


class ClassificationConfig(BaseModel):
    """Choropleth classification configuration."""

    num_classes: int = Field(default=5, ge=2)
    method: Literal["quantile", "equal_interval"] = "quantile"
    class_column: str = "ncases_class"
    color_column: str = "fill_color"
    label_column: str = "ncases_label"
    palette: str = "Reds"
    no_data_color: str = "#ffffff"


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["json", "text"] = "text"
    include_timestamp: bool = True


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """
    Main configuration class for Tract Lookup.

    Loads configuration from:
    1. YAML files in configs/environments/
    2. Environment variables

    Environment variables take precedence over YAML values.
    """

    model_config = SettingsConfigDict(
        env_prefix="TL_",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # Environment
    environment: Literal["dev", "prod"] = "dev"

    # Configuration sections
    project: ProjectConfig = Field(default_factory=ProjectConfig)
    vintages: VintageConfig = Field(default_factory=VintageConfig)
    index: IndexConfig = Field(default_factory=IndexConfig)
    lookup: LookupConfig = Field(default_factory=LookupConfig)
    aggregation: AggregationConfig = Field(default_factory=AggregationConfig)
    classification: ClassificationConfig = Field(default_factory=ClassificationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("environment", mode="before")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        valid_envs = {"dev", "prod"}
        if v not in valid_envs:
            raise ValueError(f"Invalid environment: {v}. Must be one of: {valid_envs}")
        return v


# =============================================================================
# Configuration Loading Functions
# =============================================================================


def _get_config_dir() -> Path:
    """Get the configuration directory path."""
    # Try relative path from the project root
    config_dir = Path(__file__).parent.parent.parent / "configs"
    if config_dir.exists():
        return config_dir

    # Try from current working directory
    config_dir = Path.cwd() / "configs"
    if config_dir.exists():
        return config_dir

    raise FileNotFoundError(
        "Could not find configs directory. Ensure you're running from the project root."
    )


def _load_yaml_file(path: Path) -> dict[str, Any]:
    """Load a YAML file and return its contents."""
    if not path.exists():
        return {}
    with open(path) as f:
        return yaml.safe_load(f) or {}


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dictionaries, with override taking precedence."""
    result = base.copy()
    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value
    return result


def _load_config_for_environment(environment: str) -> dict[str, Any]:
    """Load and merge configuration for a specific environment."""
    config_dir = _get_config_dir()
    env_dir = config_dir / "environments"

    # Load base config
    base_config = _load_yaml_file(env_dir / "base.yaml")

    # Load environment-specific config
    env_config = _load_yaml_file(env_dir / f"{environment}.yaml")

    # Remove inheritance marker if present
    env_config.pop("_inherit", None)

    merged = _deep_merge(base_config, env_config)
    merged["environment"] = environment

    return merged


@lru_cache(maxsize=4)
def get_config(environment: str | None = None) -> Settings:
    """
    Get configuration for the specified environment.

    Args:
        environment: Environment name (dev, prod).
                    If None, uses TL_ENVIRONMENT env var, defaulting to "dev".

    Returns:
        Settings: Validated configuration object.

    Example:
        config = get_config()  # Uses TL_ENVIRONMENT or defaults to dev
        config = get_config("prod")  # Explicit production config

        method = config.classification.method
    """
    if environment is None:
        environment = os.getenv("TL_ENVIRONMENT", "dev")

    yaml_config = _load_config_for_environment(environment)

    # Create Settings object (also loads env vars)
    return Settings(**yaml_config)


def reload_config(environment: str | None = None) -> Settings:
    """
    Reload configuration, clearing the cache.

    Useful for testing or when config files have changed.
    """
    get_config.cache_clear()
    return get_config(environment)
