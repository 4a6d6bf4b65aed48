"""
Add PhyloPic silhouettes to matplotlib charts.

This module implements the main entry points of the package. A silhouette is
resolved from an image handle, a taxonomic name or a PhyloPic uuid, flipped
and rotated, recolored, and wrapped in a SilhouetteLayer positioned in chart
data coordinates (or spanning the whole axes).
"""

import logging
import math
import numbers
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Tuple, Union

import matplotlib.pyplot as plt
import pandas as pd

from phylopic_layers.core.client import PhyloPicClient, get_default_client
from phylopic_layers.core.config import get_settings
from phylopic_layers.core.images import SilhouetteImage, VectorImage, is_silhouette_image, parse_color
from phylopic_layers.core.transforms import flip, recolor, rotate
from phylopic_layers.visual.inset import SilhouetteLayer
from phylopic_layers.visual.nodes import PathGroupNode, RasterNode, RenderNode

__all__ = [
    "add_silhouette",
    "add_silhouettes",
    "resolve_source",
    "resolve_image",
    "transform_image",
    "placement_bounds",
    "ImageSource",
    "NameSource",
    "UuidSource",
    "SilhouetteSource",
    "SilhouetteStyle",
    "SilhouetteError",
    "InputCombinationError",
    "OpacityRangeError",
    "SilhouetteTypeError",
    "NoResultsError",
    "UnsupportedImageTypeError",
]

logger = logging.getLogger(__name__)


class SilhouetteError(Exception):
    """Base exception for silhouette placement errors."""

    pass


class InputCombinationError(SilhouetteError, ValueError):
    """Raised when none, or more than one, of img/name/uuid is given."""

    pass


class OpacityRangeError(SilhouetteError, ValueError):
    """Raised when alpha is outside [0, 1]."""

    pass


class SilhouetteTypeError(SilhouetteError, TypeError):
    """Raised when an argument has the wrong type."""

    pass


class NoResultsError(SilhouetteError, LookupError):
    """Raised when a taxonomic name matches no PhyloPic image."""

    pass


class UnsupportedImageTypeError(SilhouetteTypeError):
    """Raised when an image handle is neither a vector nor a raster image."""

    pass


@dataclass(frozen=True)
class ImageSource:
    img: Any


@dataclass(frozen=True)
class NameSource:
    name: Any


@dataclass(frozen=True)
class UuidSource:
    uuid: Any


SilhouetteSource = Union[ImageSource, NameSource, UuidSource]


@dataclass
class SilhouetteStyle:
    """
    Appearance of a placed silhouette.

    Attributes:
        alpha: Opacity between 0 (transparent) and 1 (opaque)
        color: Fill color, or None to keep the image's own colors
        horizontal: Flip the silhouette horizontally
        vertical: Flip the silhouette vertically
        angle: Clockwise rotation in degrees
    """
    alpha: float = 1
    color: Optional[str] = "black"
    horizontal: bool = False
    vertical: bool = False
    angle: float = 0

    def validate(self) -> None:
        if isinstance(self.alpha, bool) or not isinstance(self.alpha, numbers.Real):
            raise SilhouetteTypeError("`alpha` should be a number.")
        if not 0 <= self.alpha <= 1:
            raise OpacityRangeError("`alpha` must be between 0 and 1.")
        if self.angle is not None and (
            isinstance(self.angle, bool) or not isinstance(self.angle, numbers.Real)
        ):
            raise SilhouetteTypeError("`angle` should be a number.")
        if self.color is not None:
            parse_color(self.color)


def resolve_source(img=None, name=None, uuid=None) -> SilhouetteSource:
    """
    Build a SilhouetteSource from the three mutually exclusive arguments.

    Raises:
        InputCombinationError: If none, or more than one, argument is given
    """
    given = [arg is not None for arg in (img, name, uuid)]
    if not any(given):
        raise InputCombinationError("One of `img`, `name`, or `uuid` is required.")
    if sum(given) > 1:
        raise InputCombinationError("Only one of `img`, `name`, or `uuid` may be specified.")

    if img is not None:
        return ImageSource(img)
    if name is not None:
        return NameSource(name)
    return UuidSource(uuid)


def resolve_image(source: SilhouetteSource, client: Optional[PhyloPicClient] = None) -> SilhouetteImage:
    """
    Produce a silhouette image from a source.

    Name sources are resolved to a uuid and then fetched like uuid sources.
    Network access only happens for name and uuid sources.

    Args:
        source: Where the image comes from
        client: PhyloPic client; a default client is created when needed

    Returns:
        SilhouetteImage: The resolved image

    Raises:
        SilhouetteTypeError: If name or uuid is not a string
        NoResultsError: If the name matches no image
        UnsupportedImageTypeError: If an image handle is not a supported type
    """
    if isinstance(source, ImageSource):
        if not is_silhouette_image(source.img):
            raise UnsupportedImageTypeError(
                "`img` should be a VectorImage (for a vector image) or a "
                "RasterImage (for a raster image)."
            )
        return source.img

    if isinstance(source, NameSource):
        if not isinstance(source.name, str):
            raise SilhouetteTypeError("`name` should be of class str.")
        client = client or get_default_client()
        logger.debug("Resolving silhouette by name %r", source.name)
        uuid = client.resolve_name(source.name)
        if uuid is None:
            raise NoResultsError("`name` returned no PhyloPic results.")
        source = UuidSource(uuid)

    if isinstance(source, UuidSource):
        if not isinstance(source.uuid, str):
            raise SilhouetteTypeError("`uuid` should be of class str.")
        client = client or get_default_client()
        settings = get_settings()
        logger.debug("Fetching silhouette by uuid %s", source.uuid)
        return client.get_phylopic(
            source.uuid, format=settings.image_format, height=settings.raster_height
        )

    raise SilhouetteTypeError(f"Unknown silhouette source: {type(source).__name__}")


def transform_image(img: SilhouetteImage, style: SilhouetteStyle) -> SilhouetteImage:
    """Apply the flip (first) and rotation (second) requested by ``style``."""
    if style.horizontal or style.vertical:
        img = flip(img, horizontal=style.horizontal, vertical=style.vertical)
    if style.angle is not None and style.angle != 0:
        img = rotate(img, style.angle)
    return img


def placement_bounds(
    aspect_ratio: float,
    x: Optional[float] = None,
    y: Optional[float] = None,
    ysize: Optional[float] = None,
) -> Tuple[float, float, float, float]:
    """
    Compute ``(xmin, xmax, ymin, ymax)`` for a silhouette.

    The silhouette is centred on ``(x, y)`` with height ``ysize`` and a width
    given by the aspect ratio. If any of the three is missing the bounds are
    infinite, filling the whole chart.
    """
    if x is None or y is None or ysize is None:
        return -math.inf, math.inf, -math.inf, math.inf

    half_height = ysize / 2
    half_width = ysize * aspect_ratio / 2
    return x - half_width, x + half_width, y - half_height, y + half_height


def _build_node(img: SilhouetteImage, style: SilhouetteStyle) -> RenderNode:
    if isinstance(img, VectorImage):
        color = style.color
        alpha = style.alpha

        def gp_fun(pars: Dict[str, Any]) -> Dict[str, Any]:
            if color is not None:
                pars["fill"] = color
            pars["alpha"] = alpha
            return pars

        return PathGroupNode(img, gp_fun=gp_fun)

    return RasterNode(recolor(img, style.alpha, style.color))


def add_silhouette(
    img: Optional[SilhouetteImage] = None,
    name: Optional[str] = None,
    uuid: Optional[str] = None,
    x: Optional[float] = None,
    y: Optional[float] = None,
    ysize: Optional[float] = None,
    alpha: float = 1,
    color: Optional[str] = "black",
    horizontal: bool = False,
    vertical: bool = False,
    angle: float = 0,
    *,
    ax: Optional[plt.Axes] = None,
    client: Optional[PhyloPicClient] = None,
    zorder: float = 0.5,
) -> SilhouetteLayer:
    """
    Add a PhyloPic silhouette as a separate layer of a chart.

    One (and only one) of ``img``, ``name`` or ``uuid`` must be given. Use
    ``x``, ``y`` and ``ysize`` to place the silhouette; if any of them is
    missing the silhouette fills the whole plot area. The aspect ratio of the
    silhouette is always kept.

    When both a flip and a rotation are requested the flip always happens
    first. Use :func:`~phylopic_layers.core.transforms.flip` and
    :func:`~phylopic_layers.core.transforms.rotate` directly for a different
    order. Raster images can only be rotated by multiples of 90 degrees.

    Args:
        img: A VectorImage or RasterImage, e.g. from ``PhyloPicClient.get_phylopic``
        name: Taxonomic name looked up on PhyloPic
        uuid: PhyloPic image uuid
        x: x value of the silhouette centre
        y: y value of the silhouette centre
        ysize: Height of the silhouette in data units
        alpha: Opacity between 0 (transparent) and 1 (opaque)
        color: Color to draw the silhouette in; None keeps the original colors
        horizontal: Flip the silhouette horizontally
        vertical: Flip the silhouette vertically
        angle: Degrees to rotate the silhouette clockwise
        ax: If given, the layer is attached to this axes immediately
        client: PhyloPic client used for name and uuid lookups
        zorder: Drawing order of the layer within ``ax``

    Returns:
        SilhouetteLayer: The layer, ready to be added with ``layer.add_to(ax)``

    Raises:
        InputCombinationError: If none, or more than one, of img/name/uuid is given
        OpacityRangeError: If ``alpha`` is outside [0, 1]
        SilhouetteTypeError: If name/uuid is not a string or alpha/angle is not a number
        NoResultsError: If ``name`` matches no PhyloPic image
        UnsupportedImageTypeError: If ``img`` is not a supported image type

    Example:
        ```python
        fig, ax = plt.subplots()
        ax.scatter(iris["sepal_length"], iris["sepal_width"])
        add_silhouette(name="Iris", alpha=0.2, ax=ax)
        ```
    """
    source = resolve_source(img, name, uuid)

    style = SilhouetteStyle(
        alpha=alpha,
        color=color,
        horizontal=horizontal,
        vertical=vertical,
        angle=angle,
    )
    style.validate()

    image = resolve_image(source, client)
    image = transform_image(image, style)

    xmin, xmax, ymin, ymax = placement_bounds(image.aspect_ratio, x, y, ysize)
    layer = SilhouetteLayer(_build_node(image, style), xmin, xmax, ymin, ymax, zorder=zorder)

    if ax is not None:
        layer.add_to(ax)
    return layer


STYLE_COLUMNS = ("alpha", "color", "horizontal", "vertical", "angle")


def _row_value(row: pd.Series, column: str, default):
    if column not in row.index:
        return default
    value = row[column]
    if not isinstance(value, str) and pd.isna(value):
        return default
    # unwrap numpy scalars so type checks see plain Python numbers
    return value.item() if hasattr(value, "item") else value


def add_silhouettes(
    data: pd.DataFrame,
    img: Optional[SilhouetteImage] = None,
    name: Optional[str] = None,
    uuid: Optional[str] = None,
    *,
    x: str = "x",
    y: str = "y",
    ysize: str = "ysize",
    ax: Optional[plt.Axes] = None,
    client: Optional[PhyloPicClient] = None,
    zorder: float = 0.5,
    **style,
) -> List[SilhouetteLayer]:
    """
    Place the same silhouette once per row of a DataFrame.

    The image is resolved a single time. Rows give the position through the
    ``x``, ``y`` and ``ysize`` columns and may override the keyword style
    (``alpha``, ``color``, ``horizontal``, ``vertical``, ``angle``) through
    columns of the same names. Every row needs all three position values;
    a missing one raises SilhouetteError.

    Example:
        ```python
        herd = pd.DataFrame({"x": posx, "y": posy, "ysize": sizey, "angle": angle})
        layers = add_silhouettes(herd, uuid="23cd6aa4-9587-4a2e-8e26-de42885004c9", ax=ax)
        ```
    """
    unknown = set(style) - set(STYLE_COLUMNS)
    if unknown:
        raise TypeError(f"Unexpected style arguments: {sorted(unknown)}")

    missing = [col for col in (x, y, ysize) if col not in data.columns]
    if missing:
        raise SilhouetteError(f"Missing required position columns: {missing}")

    defaults = SilhouetteStyle(**style)
    defaults.validate()
    image = resolve_image(resolve_source(img, name, uuid), client)

    layers = []
    for index, row in data.iterrows():
        position = {}
        for arg, column in (("x", x), ("y", y), ("ysize", ysize)):
            position[arg] = _row_value(row, column, None)
            if position[arg] is None:
                raise SilhouetteError(f"Row {index!r} has no value in position column {column!r}")

        row_style = {
            column: _row_value(row, column, getattr(defaults, column))
            for column in STYLE_COLUMNS
        }
        layers.append(add_silhouette(
            img=image,
            **position,
            ax=ax,
            zorder=zorder,
            **row_style,
        ))

    logger.debug("Placed %d silhouettes", len(layers))
    return layers
