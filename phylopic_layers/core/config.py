"""
Configuration management for the PhyloPic client.
Handles environment-based settings for the remote image service.
"""

from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


class PhyloPicSettings(BaseSettings):
    """PhyloPic configuration settings with environment variable support."""

    # Service Configuration
    base_url: str = Field(
        default="https://api.phylopic.org",
        description="PhyloPic API base URL"
    )
    timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    build: Optional[int] = Field(
        default=None,
        description="PhyloPic build number; the service redirects to the current build when unset"
    )
    user_agent: str = Field(
        default="phylopic-layers/0.1",
        description="User-Agent header sent with every request"
    )

    # Image Configuration
    image_format: str = Field(
        default="vector",
        description="Format fetched by uuid ('vector' or 'raster')"
    )
    raster_height: int = Field(
        default=512,
        description="Preferred height in pixels when fetching raster images"
    )

    @field_validator('image_format', mode='before')
    @classmethod
    def parse_image_format(cls, v):
        if isinstance(v, str):
            v = v.strip().lower()
        if v not in ("vector", "raster"):
            raise ValueError("image_format must be 'vector' or 'raster'")
        return v

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")

    class Config:
        env_file = ".env"
        env_prefix = "PHYLOPIC_"
        case_sensitive = False
        extra = "ignore"  # Allow extra environment variables


# Global settings instance
settings = PhyloPicSettings()


def get_settings() -> PhyloPicSettings:
    """Get the current PhyloPic settings."""
    return settings
