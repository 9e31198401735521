"""
Unit tests for shared/config.py
"""

import os
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from shared.config import (
    APIConfig,
    ScannerConfig,
    ScoringWeights,
    Settings,
    flatten_dict,
    get_settings,
    load_yaml_config,
    reset_settings,
)


@pytest.fixture(autouse=True)
def reset_settings_cache():
    """Reset settings cache before each test."""
    reset_settings()
    yield
    reset_settings()


class TestScannerConfig:
    """Tests for ScannerConfig model."""

    def test_default_values(self):
        """Test default exclusion thresholds."""
        config = ScannerConfig()
        assert config.default_tick_size == 0.01
        assert config.depth_bands == [1, 3, 5]
        assert config.max_spread_ticks == 5.0
        assert config.min_price == 0.08
        assert config.max_price == 0.92
        assert config.min_hours_to_resolution == 48.0
        assert config.candidate_oversample == 2

    def test_depth_bands_always_include_scoring_bands(self):
        """Test bands 1 and 5 are added and the list is sorted."""
        config = ScannerConfig(depth_bands=[10, 3, 3])
        assert config.depth_bands == [1, 3, 5, 10]

    def test_depth_bands_must_be_positive(self):
        """Test zero or negative bands are rejected."""
        with pytest.raises(ValidationError):
            ScannerConfig(depth_bands=[0, 3])


class TestScoringWeights:
    """Tests for ScoringWeights model."""

    def test_default_weights_sum_to_one(self):
        """Test the default weights sum to 1."""
        assert ScoringWeights().total() == pytest.approx(1.0)

    def test_custom_weights(self):
        """Test custom weights are kept as given."""
        weights = ScoringWeights(spread=0.5, volume_churn=0.5, mean_reversion=0,
                                 depth_quality=0, time_safety=0)
        assert weights.spread == 0.5
        assert weights.total() == pytest.approx(1.0)


class TestAPIConfig:
    """Tests for APIConfig model."""

    def test_default_values(self):
        """Test default API configuration."""
        config = APIConfig()
        assert config.host == "0.0.0.0"
        assert config.port == 5202
        assert config.debug is False

    def test_cors_origins_list(self):
        """Test CORS origins as list."""
        config = APIConfig(cors_origins=["http://localhost:3000"])
        assert config.cors_origins == ["http://localhost:3000"]

    def test_cors_origins_comma_separated(self):
        """Test CORS origins as comma-separated string."""
        config = APIConfig(cors_origins="http://a.test, http://b.test")
        assert config.cors_origins == ["http://a.test", "http://b.test"]

    def test_cors_origins_single_string(self):
        """Test CORS origins as a single origin."""
        config = APIConfig(cors_origins="http://a.test")
        assert config.cors_origins == ["http://a.test"]


class TestSettings:
    """Tests for main Settings class."""

    def test_environment_from_env(self):
        """Test the test environment is picked up."""
        settings = Settings()
        assert settings.environment == "test"
        assert settings.is_test is True
        assert settings.is_production is False

    def test_invalid_environment(self):
        """Test invalid environment raises error."""
        with pytest.raises(ValidationError):
            Settings(environment="invalid")

    def test_environment_case_insensitive(self):
        """Test environment validation is case-insensitive."""
        settings = Settings(environment="PRODUCTION")
        assert settings.environment == "production"
        assert settings.is_production is True

    def test_nested_env_override(self):
        """Test nested settings are read from double-underscore variables."""
        os.environ["SCANNER__MAX_SPREAD_TICKS"] = "3"
        os.environ["SCORING_WEIGHTS__SPREAD"] = "0.4"

        settings = Settings()

        assert settings.scanner.max_spread_ticks == 3.0
        assert settings.scoring_weights.spread == 0.4


class TestLoadYamlConfig:
    """Tests for YAML loading."""

    def test_load_existing_file(self, tmp_path: Path):
        """Test loading a YAML file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text(yaml.safe_dump({"scanner": {"min_price": 0.1}}))

        assert load_yaml_config(config_file) == {"scanner": {"min_price": 0.1}}

    def test_missing_file(self, tmp_path: Path):
        """Test a missing file yields an empty config."""
        assert load_yaml_config(tmp_path / "missing.yaml") == {}

    def test_empty_file(self, tmp_path: Path):
        """Test an empty file yields an empty config."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("")

        assert load_yaml_config(config_file) == {}


class TestFlattenDict:
    """Tests for flatten_dict helper."""

    def test_nested(self):
        """Test nested keys are joined with double underscores."""
        flat = flatten_dict({"scanner": {"min_price": 0.1, "bands": [1]}, "environment": "test"})

        assert flat == {"scanner__min_price": 0.1, "scanner__bands": [1], "environment": "test"}

    def test_empty(self):
        """Test flattening an empty dict."""
        assert flatten_dict({}) == {}


class TestGetSettings:
    """Tests for cached settings."""

    def test_cached(self):
        """Test the same instance is returned until reset."""
        first = get_settings()
        assert get_settings() is first

        reset_settings()
        assert get_settings() is not first

    def test_env_wins_over_yaml(self):
        """Test environment variables take precedence over YAML values."""
        os.environ["SCANNER__MIN_HOURS_TO_RESOLUTION"] = "72"

        settings = get_settings()

        assert settings.scanner.min_hours_to_resolution == 72.0
