"""
Configuration management for ScalpFinder.

Loads configuration from YAML files and environment variables.
Environment variables take precedence over YAML config.
"""

import json
import os
from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class PolymarketConfig(BaseSettings):
    """Upstream API configuration."""

    gamma_url: str = "https://gamma-api.polymarket.com"
    clob_url: str = "https://clob.polymarket.com"
    request_timeout: float = 10.0


class ScannerConfig(BaseSettings):
    """Thresholds for the hard exclusion ladder and the ranking pass."""

    default_tick_size: float = 0.01
    depth_bands: list[int] = Field(default_factory=lambda: [1, 3, 5])
    max_spread_ticks: float = 5.0
    min_price: float = 0.08
    max_price: float = 0.92
    min_hours_to_resolution: float = 48.0
    candidate_oversample: int = 2
    max_concurrency: int = 20

    @field_validator("depth_bands")
    @classmethod
    def validate_depth_bands(cls, v: list[int]) -> list[int]:
        """Depth bands must be positive; 1 and 5 are always required by scoring."""
        if any(band <= 0 for band in v):
            raise ValueError("depth bands must be positive tick distances")
        return sorted(set(v) | {1, 5})


class ScoringWeights(BaseSettings):
    """Weights of the five composite components."""

    spread: float = 0.25
    volume_churn: float = 0.25
    mean_reversion: float = 0.20
    depth_quality: float = 0.15
    time_safety: float = 0.10

    def total(self) -> float:
        """Sum of all weights."""
        return (
            self.spread
            + self.volume_churn
            + self.mean_reversion
            + self.depth_quality
            + self.time_safety
        )


class APIConfig(BaseSettings):
    """API server configuration."""

    host: str = "0.0.0.0"
    port: int = 5202
    debug: bool = False
    cors_origins: list[str] = Field(default_factory=lambda: ["*"])

    @field_validator("cors_origins", mode="before")
    @classmethod
    def parse_cors_origins(cls, v: Any) -> list[str]:
        """Parse CORS origins from various formats."""
        if isinstance(v, list):
            return v
        if isinstance(v, str):
            # Try to parse as JSON first
            try:
                parsed = json.loads(v)
                if isinstance(parsed, list):
                    return parsed
            except (json.JSONDecodeError, TypeError):
                pass
            if "," in v:
                return [origin.strip() for origin in v.split(",")]
            return [v]
        return ["*"]


class LoggingConfig(BaseSettings):
    """Logging configuration."""

    level: str = "INFO"
    format: str = "json"
    include_timestamp: bool = True


class Settings(BaseSettings):
    """
    Main settings class for ScalpFinder.

    Settings are loaded from:
    1. Default values
    2. config/config.yaml
    3. Environment variables (highest priority)
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    environment: str = Field(default="development")

    # Nested configs
    polymarket: PolymarketConfig = Field(default_factory=PolymarketConfig)
    scanner: ScannerConfig = Field(default_factory=ScannerConfig)
    scoring_weights: ScoringWeights = Field(default_factory=ScoringWeights)
    api: APIConfig = Field(default_factory=APIConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment value."""
        allowed = {"development", "staging", "production", "test"}
        if v.lower() not in allowed:
            raise ValueError(f"environment must be one of {allowed}")
        return v.lower()

    @property
    def is_production(self) -> bool:
        """Check if running in production."""
        return self.environment == "production"

    @property
    def is_test(self) -> bool:
        """Check if running in test mode."""
        return self.environment == "test"


def load_yaml_config(config_path: Path | None = None) -> dict[str, Any]:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to config file. Defaults to config/config.yaml

    Returns:
        Dictionary with configuration values
    """
    if config_path is None:
        # Try multiple locations
        possible_paths = [
            Path("config/config.yaml"),
            Path("../config/config.yaml"),
            Path(__file__).parent.parent / "config" / "config.yaml",
        ]
        for path in possible_paths:
            if path.exists():
                config_path = path
                break

    if config_path is None or not config_path.exists():
        return {}

    with open(config_path) as f:
        return yaml.safe_load(f) or {}


def flatten_dict(d: dict[str, Any], parent_key: str = "", sep: str = "__") -> dict[str, Any]:
    """
    Flatten a nested dictionary for environment variable style keys.

    Args:
        d: Dictionary to flatten
        parent_key: Parent key prefix
        sep: Separator between keys

    Returns:
        Flattened dictionary
    """
    items: list[tuple[str, Any]] = []
    for k, v in d.items():
        new_key = f"{parent_key}{sep}{k}" if parent_key else k
        if isinstance(v, dict):
            items.extend(flatten_dict(v, new_key, sep).items())
        else:
            items.append((new_key, v))
    return dict(items)


@lru_cache
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Settings are loaded once and cached. Call this function to access
    settings throughout the application.

    Returns:
        Settings instance
    """
    yaml_config = load_yaml_config()

    # Flatten nested config for pydantic-settings
    flat_config = flatten_dict(yaml_config)

    env_style_config = {k.upper(): v for k, v in flat_config.items()}

    # Set as environment variables (only if not already set)
    for key, value in env_style_config.items():
        if key not in os.environ and value is not None:
            if isinstance(value, (list, dict)):
                os.environ[key] = json.dumps(value)
            elif isinstance(value, bool):
                os.environ[key] = str(value).lower()
            else:
                os.environ[key] = str(value)

    return Settings()


def reset_settings() -> None:
    """Reset cached settings. Useful for testing."""
    get_settings.cache_clear()
