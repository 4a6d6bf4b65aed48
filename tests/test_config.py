"""
Unit tests for environment-based settings.
"""

import pytest
from pydantic import ValidationError

from phylopic_layers.core.config import PhyloPicSettings, get_settings, settings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for var in ("PHYLOPIC_BASE_URL", "PHYLOPIC_TIMEOUT", "PHYLOPIC_BUILD", "PHYLOPIC_IMAGE_FORMAT"):
        monkeypatch.delenv(var, raising=False)


class TestPhyloPicSettings:
    """Test settings defaults and overrides."""

    def test_defaults(self):
        """Test the default service configuration."""
        config = PhyloPicSettings(_env_file=None)

        assert config.base_url == "https://api.phylopic.org"
        assert config.timeout == 30.0
        assert config.build is None
        assert config.image_format == "vector"
        assert config.raster_height == 512

    def test_environment_override(self, monkeypatch):
        """Test that PHYLOPIC_ variables override defaults."""
        monkeypatch.setenv("PHYLOPIC_TIMEOUT", "5")
        monkeypatch.setenv("PHYLOPIC_BUILD", "418")

        config = PhyloPicSettings(_env_file=None)

        assert config.timeout == 5.0
        assert config.build == 418

    def test_image_format_is_normalised(self):
        """Test that image formats are case-insensitive."""
        assert PhyloPicSettings(image_format=" Raster ", _env_file=None).image_format == "raster"

    def test_invalid_image_format(self):
        """Test that unknown image formats are rejected."""
        with pytest.raises(ValidationError, match="image_format"):
            PhyloPicSettings(image_format="gif", _env_file=None)


def test_get_settings_returns_global_instance():
    """Test that get_settings returns the shared settings object."""
    assert get_settings() is settings
