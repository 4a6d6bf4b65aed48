"""
Silhouette image representations and loaders.

A silhouette is either a vector image (filled paths with an intrinsic
bounding box) or a raster image (an RGBA pixel grid). This module defines
both types and decodes SVG and PNG payloads into them.
"""

import io
import logging
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Optional, Tuple, Union

import numpy as np
from matplotlib.colors import to_rgba
from matplotlib.path import Path as MplPath
from PIL import Image, UnidentifiedImageError
from svgelements import SVG, Arc, Close, CubicBezier, Line, Move, QuadraticBezier, Shape

__all__ = [
    "VectorPath",
    "VectorImage",
    "RasterImage",
    "SilhouetteImage",
    "ImageFormatError",
    "parse_svg",
    "parse_png",
    "read_image",
    "is_silhouette_image",
    "parse_color",
]

logger = logging.getLogger(__name__)

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

RGBA = Tuple[float, float, float, float]


class ImageFormatError(ValueError):
    """Raised when image data cannot be decoded into a silhouette."""

    pass


@dataclass(frozen=True, eq=False)
class VectorPath:
    """
    One drawable primitive of a vector silhouette.

    Attributes:
        path: Path geometry in the image's y-up coordinate space
        fill: Fill color as an RGBA tuple, or None for no fill
        stroke: Stroke color as an RGBA tuple, or None for no stroke
        stroke_width: Stroke width in image units
    """
    path: MplPath
    fill: Optional[RGBA] = (0.0, 0.0, 0.0, 1.0)
    stroke: Optional[RGBA] = None
    stroke_width: float = 0.0


@dataclass(frozen=True, eq=False)
class VectorImage:
    """
    A scalable silhouette made of paths.

    ``xscale`` and ``yscale`` hold the intrinsic bounding box of the image
    in its own coordinate space, as ``(start, end)`` pairs.
    """
    paths: Tuple[VectorPath, ...]
    xscale: Tuple[float, float]
    yscale: Tuple[float, float]
    metadata: dict = field(default_factory=dict)

    @property
    def width(self) -> float:
        return abs(self.xscale[1] - self.xscale[0])

    @property
    def height(self) -> float:
        return abs(self.yscale[1] - self.yscale[0])

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height of the intrinsic bounding box."""
        return self.width / self.height

    def with_paths(self, paths, xscale=None, yscale=None) -> "VectorImage":
        """Return a copy holding new paths (and optionally a new bounding box)."""
        return replace(
            self,
            paths=tuple(paths),
            xscale=self.xscale if xscale is None else tuple(xscale),
            yscale=self.yscale if yscale is None else tuple(yscale),
            metadata=dict(self.metadata),
        )


class RasterImage:
    """
    A silhouette stored as a fixed RGBA pixel grid.

    Pixels are held as a float array of shape ``(rows, cols, 4)`` with values
    in ``[0, 1]``. Grayscale and RGB arrays are promoted to RGBA, and integer
    arrays are scaled by their dtype's maximum value.

    Example:
        >>> img = RasterImage(np.zeros((10, 20, 4)))
        >>> img.aspect_ratio
        2.0
    """

    def __init__(self, pixels, metadata: Optional[dict] = None):
        self.pixels = self._normalize(pixels)
        self.metadata = dict(metadata or {})

    @staticmethod
    def _normalize(pixels) -> np.ndarray:
        arr = np.asarray(pixels)

        if arr.dtype == bool:
            arr = arr.astype(float)
        elif np.issubdtype(arr.dtype, np.integer):
            arr = arr.astype(float) / np.iinfo(arr.dtype).max
        elif np.issubdtype(arr.dtype, np.floating):
            arr = arr.astype(float)
        else:
            raise ImageFormatError(f"Unsupported pixel dtype: {arr.dtype}")

        if arr.ndim == 2:
            arr = np.stack([arr, arr, arr, np.ones_like(arr)], axis=-1)
        elif arr.ndim == 3 and arr.shape[2] == 3:
            arr = np.concatenate([arr, np.ones(arr.shape[:2] + (1,))], axis=-1)
        elif arr.ndim == 3 and arr.shape[2] == 2:
            # gray + alpha
            gray, alpha = arr[..., 0], arr[..., 1]
            arr = np.stack([gray, gray, gray, alpha], axis=-1)
        elif not (arr.ndim == 3 and arr.shape[2] == 4):
            raise ImageFormatError(
                f"Raster images must have shape (rows, cols[, 1-4 channels]), got {arr.shape}"
            )

        if arr.shape[0] == 0 or arr.shape[1] == 0:
            raise ImageFormatError("Raster image is empty")

        return np.clip(arr, 0.0, 1.0)

    @property
    def shape(self) -> Tuple[int, int]:
        return self.pixels.shape[0], self.pixels.shape[1]

    @property
    def nrow(self) -> int:
        return self.pixels.shape[0]

    @property
    def ncol(self) -> int:
        return self.pixels.shape[1]

    @property
    def aspect_ratio(self) -> float:
        """Pixel columns divided by pixel rows."""
        return self.ncol / self.nrow

    @property
    def alpha(self) -> np.ndarray:
        return self.pixels[..., 3]

    def with_pixels(self, pixels) -> "RasterImage":
        return RasterImage(pixels, metadata=self.metadata)

    def __repr__(self) -> str:
        return f"RasterImage(rows={self.nrow}, cols={self.ncol})"


SilhouetteImage = Union[VectorImage, RasterImage]


def is_silhouette_image(obj) -> bool:
    """Return True if ``obj`` is one of the two supported image types."""
    return isinstance(obj, (VectorImage, RasterImage))


def _svg_color(color) -> Optional[RGBA]:
    """Convert an svgelements Color into an RGBA tuple (None for 'none')."""
    if color is None or color.value is None:
        return None
    return (color.red / 255.0, color.green / 255.0, color.blue / 255.0, color.opacity)


def _shape_to_path(shape: Shape) -> Optional[MplPath]:
    vertices = []
    codes = []
    start = None

    for segment in shape.segments(transformed=True):
        if isinstance(segment, Move):
            start = (segment.end.x, segment.end.y)
            vertices.append(start)
            codes.append(MplPath.MOVETO)
        elif isinstance(segment, Close):
            if start is not None:
                vertices.append(start)
                codes.append(MplPath.CLOSEPOLY)
        elif isinstance(segment, Line):
            vertices.append((segment.end.x, segment.end.y))
            codes.append(MplPath.LINETO)
        elif isinstance(segment, QuadraticBezier):
            vertices.extend([(segment.control.x, segment.control.y),
                             (segment.end.x, segment.end.y)])
            codes.extend([MplPath.CURVE3] * 2)
        elif isinstance(segment, CubicBezier):
            vertices.extend([(segment.control1.x, segment.control1.y),
                             (segment.control2.x, segment.control2.y),
                             (segment.end.x, segment.end.y)])
            codes.extend([MplPath.CURVE4] * 3)
        elif isinstance(segment, Arc):
            for curve in segment.as_cubic_curves():
                vertices.extend([(curve.control1.x, curve.control1.y),
                                 (curve.control2.x, curve.control2.y),
                                 (curve.end.x, curve.end.y)])
                codes.extend([MplPath.CURVE4] * 3)

    if len(vertices) < 2:
        return None

    # Paths that do not open with a move start at their first point
    if codes[0] != MplPath.MOVETO:
        codes[0] = MplPath.MOVETO

    return MplPath(np.asarray(vertices, dtype=float), codes)


def _extents(paths) -> Tuple[Tuple[float, float], Tuple[float, float]]:
    boxes = [p.path.get_extents() for p in paths]
    x0 = min(b.x0 for b in boxes)
    x1 = max(b.x1 for b in boxes)
    y0 = min(b.y0 for b in boxes)
    y1 = max(b.y1 for b in boxes)
    return (x0, x1), (y0, y1)


def parse_svg(data: Union[bytes, str]) -> VectorImage:
    """
    Parse SVG markup into a VectorImage.

    Every filled or stroked shape becomes one VectorPath. Coordinates are
    flipped from SVG's y-down convention to a y-up space whose vertical range
    matches the document height, so the bounding box is unchanged.

    Args:
        data: SVG document as bytes or text

    Returns:
        VectorImage: Parsed silhouette

    Raises:
        ImageFormatError: If the document cannot be parsed or has no paths
    """
    if isinstance(data, str):
        data = data.encode("utf-8")

    try:
        svg = SVG.parse(io.BytesIO(data))
    except Exception as e:
        raise ImageFormatError(f"Invalid SVG data: {e}") from e

    raw_paths = []
    for element in svg.elements():
        if not isinstance(element, Shape):
            continue
        path = _shape_to_path(element)
        if path is None:
            continue
        fill = _svg_color(element.fill) if element.fill is not None else (0.0, 0.0, 0.0, 1.0)
        stroke = _svg_color(element.stroke)
        stroke_width = float(element.stroke_width or 0.0) if stroke is not None else 0.0
        if fill is None and stroke is None:
            continue
        raw_paths.append(VectorPath(path, fill, stroke, stroke_width))

    if not raw_paths:
        raise ImageFormatError("SVG data contains no drawable paths")

    width = float(svg.width or 0.0)
    height = float(svg.height or 0.0)
    if width > 0 and height > 0:
        xscale, yscale = (0.0, width), (0.0, height)
    else:
        xscale, yscale = _extents(raw_paths)

    y0, y1 = yscale
    paths = []
    for vp in raw_paths:
        vertices = vp.path.vertices.copy()
        vertices[:, 1] = y0 + y1 - vertices[:, 1]
        paths.append(replace(vp, path=MplPath(vertices, vp.path.codes)))

    logger.debug("Parsed SVG with %d paths, bbox x=%s y=%s", len(paths), xscale, yscale)
    return VectorImage(tuple(paths), xscale, yscale)


def parse_png(data: bytes) -> RasterImage:
    """
    Decode PNG bytes into a RasterImage.

    Raises:
        ImageFormatError: If the bytes are not a decodable image
    """
    try:
        with Image.open(io.BytesIO(data)) as im:
            pixels = np.asarray(im.convert("RGBA"), dtype=np.uint8)
    except (UnidentifiedImageError, OSError) as e:
        raise ImageFormatError(f"Invalid PNG data: {e}") from e

    return RasterImage(pixels)


def read_image(source: Union[str, Path, bytes]) -> SilhouetteImage:
    """
    Load a silhouette from a file path or raw bytes.

    PNG data is recognised by its signature; anything else is parsed as SVG.
    """
    if isinstance(source, (str, Path)):
        data = Path(source).read_bytes()
    else:
        data = bytes(source)

    if data.startswith(PNG_SIGNATURE):
        return parse_png(data)
    return parse_svg(data)


def parse_color(color) -> RGBA:
    """Resolve any matplotlib color specification to an RGBA tuple."""
    try:
        return tuple(float(c) for c in to_rgba(color))
    except ValueError as e:
        raise ValueError(f"Invalid color: {color!r}") from e
