"""Image model, transforms and PhyloPic service access."""

from .client import PhyloPicClient, get_default_client
from .config import PhyloPicSettings, get_settings
from .images import RasterImage, VectorImage, VectorPath, read_image
from .transforms import flip, recolor, rotate

__all__ = [
    "PhyloPicClient",
    "get_default_client",
    "PhyloPicSettings",
    "get_settings",
    "RasterImage",
    "VectorImage",
    "VectorPath",
    "read_image",
    "flip",
    "recolor",
    "rotate",
]
