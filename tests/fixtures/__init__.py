"""Test fixtures for phylopic-layers."""

from .sample_images import (
    EMPTY_SVG,
    L_SHAPE_SVG,
    SEMI_TRANSPARENT_SVG,
    STROKED_SQUARE_SVG,
    TOP_LEFT_SQUARE_SVG,
    create_asymmetric_pixels,
    create_png_bytes,
    create_square_pixels,
)

__all__ = [
    "TOP_LEFT_SQUARE_SVG",
    "L_SHAPE_SVG",
    "EMPTY_SVG",
    "SEMI_TRANSPARENT_SVG",
    "STROKED_SQUARE_SVG",
    "create_asymmetric_pixels",
    "create_square_pixels",
    "create_png_bytes",
]
