"""
Geometric and color transforms for silhouette images.

Each primitive accepts either a VectorImage or a RasterImage and returns a
new image of the same kind; inputs are never modified.
"""

import logging
import numbers
from dataclasses import replace
from typing import Optional

import numpy as np
from matplotlib.transforms import Affine2D

from phylopic_layers.core.images import (
    RasterImage,
    SilhouetteImage,
    VectorImage,
    is_silhouette_image,
    parse_color,
)

__all__ = ["flip", "rotate", "recolor", "ImageTransformError"]

logger = logging.getLogger(__name__)


class ImageTransformError(ValueError):
    """Raised when a transform cannot be applied to an image."""

    pass


def _check_image(img) -> None:
    if not is_silhouette_image(img):
        raise TypeError(
            f"Expected a VectorImage or RasterImage, got {type(img).__name__}"
        )


def _transform_paths(img: VectorImage, affine: Affine2D):
    return [replace(p, path=p.path.transformed(affine)) for p in img.paths]


def flip(img: SilhouetteImage, horizontal: bool = True, vertical: bool = False) -> SilhouetteImage:
    """
    Mirror a silhouette horizontally and/or vertically.

    Vector images are mirrored inside their own bounding box, so the box is
    unchanged. Raster images have their columns and/or rows reversed.

    Args:
        img: Image to flip
        horizontal: Mirror left to right
        vertical: Mirror top to bottom

    Returns:
        SilhouetteImage: The flipped image
    """
    _check_image(img)

    if not horizontal and not vertical:
        return img

    if isinstance(img, RasterImage):
        pixels = img.pixels
        if horizontal:
            pixels = pixels[:, ::-1]
        if vertical:
            pixels = pixels[::-1, :]
        return img.with_pixels(np.ascontiguousarray(pixels))

    (x0, x1), (y0, y1) = img.xscale, img.yscale
    affine = Affine2D()
    if horizontal:
        affine.scale(-1, 1).translate(x0 + x1, 0)
    if vertical:
        affine.scale(1, -1).translate(0, y0 + y1)
    return img.with_paths(_transform_paths(img, affine))


def rotate(img: SilhouetteImage, angle: float = 90) -> SilhouetteImage:
    """
    Rotate a silhouette clockwise by ``angle`` degrees.

    Vector images rotate around the centre of their bounding box, and the box
    is recomputed from the extents of the rotated paths. Raster images can
    only be rotated by multiples of 90 degrees.

    Raises:
        TypeError: If ``angle`` is not a number
        ImageTransformError: If a raster image is rotated by a non-multiple of 90
    """
    _check_image(img)

    if isinstance(angle, bool) or not isinstance(angle, numbers.Real):
        raise TypeError(f"angle must be a number, got {type(angle).__name__}")

    if isinstance(img, RasterImage):
        if angle % 90 != 0:
            raise ImageTransformError(
                f"Raster images can only be rotated by multiples of 90 degrees, got {angle}"
            )
        quarter_turns = int(round(angle / 90)) % 4
        if quarter_turns == 0:
            return img
        # np.rot90 turns counterclockwise for positive k
        return img.with_pixels(np.ascontiguousarray(np.rot90(img.pixels, k=-quarter_turns)))

    if angle % 360 == 0:
        return img

    cx = (img.xscale[0] + img.xscale[1]) / 2
    cy = (img.yscale[0] + img.yscale[1]) / 2
    # y points up in image space, so clockwise is a negative rotation
    affine = Affine2D().rotate_deg_around(cx, cy, -angle)
    paths = _transform_paths(img, affine)

    boxes = [p.path.get_extents() for p in paths]
    xscale = (min(b.x0 for b in boxes), max(b.x1 for b in boxes))
    yscale = (min(b.y0 for b in boxes), max(b.y1 for b in boxes))
    return img.with_paths(paths, xscale=xscale, yscale=yscale)


def _scale_alpha(rgba, alpha: float, color=None):
    if rgba is None:
        return None
    if color is not None:
        rgba = color[:3] + (rgba[3],)
    return rgba[:3] + (rgba[3] * alpha,)


def recolor(img: SilhouetteImage, alpha: float = 1, color: Optional[str] = None) -> SilhouetteImage:
    """
    Recolor a silhouette and scale its opacity.

    For raster images the RGB channels are overwritten with ``color`` (when
    given) and the alpha channel is multiplied by ``alpha``. Vector images get
    the same treatment applied to every path's fill and stroke.

    Args:
        img: Image to recolor
        alpha: Opacity multiplier in [0, 1]
        color: Any matplotlib color specification, or None to keep colors
    """
    _check_image(img)

    if not 0 <= alpha <= 1:
        raise ValueError(f"alpha must be between 0 and 1, got {alpha}")

    rgba = parse_color(color) if color is not None else None

    if isinstance(img, RasterImage):
        pixels = img.pixels.copy()
        if rgba is not None:
            pixels[..., :3] = rgba[:3]
        pixels[..., 3] = pixels[..., 3] * alpha
        return img.with_pixels(pixels)

    paths = [
        replace(
            p,
            fill=_scale_alpha(p.fill, alpha, rgba),
            stroke=_scale_alpha(p.stroke, alpha, rgba),
        )
        for p in img.paths
    ]
    return img.with_paths(paths)
