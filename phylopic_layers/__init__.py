"""
Add PhyloPic silhouettes to matplotlib charts.

This package resolves silhouette images (by image handle, taxonomic name or
PhyloPic uuid), transforms and recolors them, and places them as inset
layers positioned in chart data coordinates.

Usage:
    import matplotlib.pyplot as plt
    from phylopic_layers import add_silhouette

    fig, ax = plt.subplots()
    ax.scatter(x, y)

    # Fill the whole plot with a faded silhouette
    add_silhouette(name="Iris", alpha=0.2, ax=ax)

    # Or place one at a given position and height
    layer = add_silhouette(uuid="23cd6aa4-9587-4a2e-8e26-de42885004c9",
                           x=5, y=5, ysize=2, color="darkorange")
    layer.add_to(ax)
"""

import logging

from phylopic_layers.core.client import (
    PhyloPicAPIError,
    PhyloPicClient,
    PhyloPicError,
    PhyloPicResponseError,
)
from phylopic_layers.core.config import PhyloPicSettings, get_settings
from phylopic_layers.core.images import (
    ImageFormatError,
    RasterImage,
    VectorImage,
    VectorPath,
    parse_png,
    parse_svg,
    read_image,
)
from phylopic_layers.core.transforms import ImageTransformError, flip, recolor, rotate
from phylopic_layers.visual.inset import SilhouetteLayer
from phylopic_layers.visual.silhouette import (
    InputCombinationError,
    NoResultsError,
    OpacityRangeError,
    SilhouetteError,
    SilhouetteStyle,
    SilhouetteTypeError,
    UnsupportedImageTypeError,
    add_silhouette,
    add_silhouettes,
)

logging.getLogger(__name__).setLevel(get_settings().log_level.upper())

__all__ = [
    "add_silhouette",
    "add_silhouettes",
    "SilhouetteLayer",
    "SilhouetteStyle",
    "PhyloPicClient",
    "PhyloPicSettings",
    "VectorImage",
    "VectorPath",
    "RasterImage",
    "parse_svg",
    "parse_png",
    "read_image",
    "flip",
    "rotate",
    "recolor",
    "SilhouetteError",
    "InputCombinationError",
    "OpacityRangeError",
    "SilhouetteTypeError",
    "NoResultsError",
    "UnsupportedImageTypeError",
    "ImageFormatError",
    "ImageTransformError",
    "PhyloPicError",
    "PhyloPicAPIError",
    "PhyloPicResponseError",
]
