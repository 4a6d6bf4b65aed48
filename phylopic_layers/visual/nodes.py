"""
Renderable nodes for silhouette layers.

A node wraps a silhouette image and knows how to draw itself into a
matplotlib axes whose data coordinates are the image's own coordinates.
Nodes are created before any figure exists and drawn when a layer is
attached to an axes.
"""

from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np
from matplotlib.artist import Artist
from matplotlib.collections import PatchCollection
from matplotlib.colors import to_rgba
from matplotlib.patches import PathPatch

from phylopic_layers.core.images import RasterImage, VectorImage

__all__ = ["RenderNode", "PathGroupNode", "RasterNode", "ImageUnitPatchCollection", "StyleOverride"]

StyleOverride = Callable[[Dict[str, Any]], Dict[str, Any]]


class RenderNode(ABC):
    """
    Abstract base class for renderable silhouette nodes.

    Subclasses implement:

    1. `extent`: the ``(x0, x1, y0, y1)`` box of the image in its own units
    2. `draw_into()`: add the artists for the image to an axes
    """

    @property
    @abstractmethod
    def extent(self) -> Tuple[float, float, float, float]:
        """Return ``(x0, x1, y0, y1)`` in image coordinates."""
        pass

    @abstractmethod
    def draw_into(self, ax: plt.Axes) -> Artist:
        """
        Draw the node into ``ax`` using the axes' data coordinates.

        Args:
            ax: Axes whose data space matches the image coordinates

        Returns:
            Artist: The artist that was added to the axes
        """
        pass


class PathGroupNode(RenderNode):
    """
    A vector silhouette drawn as one group of path patches.

    The optional ``gp_fun`` is a style override applied to every primitive
    at draw time. It receives a dict with the keys ``fill``, ``col``
    (stroke), ``lwd`` (stroke width in image units) and ``alpha`` (multiplies
    the fill and stroke opacity) and returns the dict to draw with.

    Example:
        ```python
        def gp_fun(pars):
            pars["fill"] = "darkorange"
            pars["alpha"] = 0.5
            return pars

        node = PathGroupNode(img, gp_fun=gp_fun)
        ```
    """

    def __init__(self, image: VectorImage, gp_fun: Optional[StyleOverride] = None):
        self.image = image
        self.gp_fun = gp_fun

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        (x0, x1), (y0, y1) = self.image.xscale, self.image.yscale
        return min(x0, x1), max(x0, x1), min(y0, y1), max(y0, y1)

    def primitive_styles(self) -> List[Dict[str, Any]]:
        """Return the resolved style of every path, after the style override."""
        styles = []
        for vpath in self.image.paths:
            pars = {
                "fill": vpath.fill,
                "col": vpath.stroke,
                "lwd": vpath.stroke_width,
                "alpha": None,
            }
            if self.gp_fun is not None:
                pars = self.gp_fun(dict(pars))
            styles.append(pars)
        return styles

    def build_patches(self) -> List[PathPatch]:
        """
        Build one patch per path.

        The override's ``alpha`` multiplies the alpha of the fill and stroke
        colors, so per-path opacity from the source image is kept. Line
        widths are in image units.
        """
        patches = []
        for vpath, pars in zip(self.image.paths, self.primitive_styles()):
            alpha = pars.get("alpha")
            stroke = pars.get("col")
            patches.append(PathPatch(
                vpath.path,
                facecolor=_with_alpha(pars.get("fill"), alpha),
                edgecolor=_with_alpha(stroke, alpha),
                linewidth=pars.get("lwd", 0.0) if stroke is not None else 0.0,
            ))
        return patches

    def draw_into(self, ax: plt.Axes) -> Artist:
        patches = self.build_patches()
        collection = ImageUnitPatchCollection(
            patches, [p.get_linewidth() for p in patches]
        )
        ax.add_collection(collection, autolim=False)
        return collection


def _with_alpha(color, alpha: Optional[float]):
    if color is None:
        return (0.0, 0.0, 0.0, 0.0)
    rgba = to_rgba(color)
    if alpha is None:
        return rgba
    return rgba[:3] + (rgba[3] * alpha,)


class ImageUnitPatchCollection(PatchCollection):
    """
    Patch collection whose line widths are given in data units.

    Matplotlib line widths are in points, so the widths are converted on every
    draw using the current data-to-display scale of the axes. Strokes then
    grow and shrink with the placed silhouette.
    """

    def __init__(self, patches: List[PathPatch], data_linewidths: List[float]):
        super().__init__(patches, match_original=True)
        self.data_linewidths = np.asarray(data_linewidths, dtype=float)

    def points_per_unit(self, renderer) -> float:
        origin, unit = self.axes.transData.transform([(0.0, 0.0), (1.0, 0.0)])
        return abs(unit[0] - origin[0]) / renderer.points_to_pixels(1.0)

    def draw(self, renderer):
        if self.axes is not None and self.data_linewidths.size:
            self.set_linewidths(self.data_linewidths * self.points_per_unit(renderer))
        super().draw(renderer)


class RasterNode(RenderNode):
    """A raster silhouette drawn as an image spanning its pixel grid."""

    def __init__(self, image: RasterImage, interpolation: str = "antialiased"):
        self.image = image
        self.interpolation = interpolation

    @property
    def extent(self) -> Tuple[float, float, float, float]:
        return 0.0, float(self.image.ncol), 0.0, float(self.image.nrow)

    def draw_into(self, ax: plt.Axes) -> Artist:
        return ax.imshow(
            self.image.pixels,
            extent=self.extent,
            origin="upper",
            interpolation=self.interpolation,
        )
