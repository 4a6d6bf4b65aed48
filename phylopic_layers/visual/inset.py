"""
Positioned inset layers for silhouettes.

A SilhouetteLayer pairs a renderable node with a bounding box in chart data
coordinates. Attaching the layer to an axes creates a child inset axes whose
position is recomputed from the parent's transform on every draw, so the
silhouette follows zooming, log scales and other coordinate systems.
"""

import logging
import math
from typing import Optional, Tuple

import matplotlib.pyplot as plt

from phylopic_layers.visual.nodes import RenderNode

__all__ = ["SilhouetteLayer"]

logger = logging.getLogger(__name__)


class SilhouetteLayer:
    """
    A silhouette positioned within a chart.

    Bounds are data coordinates of the parent axes. When all four bounds are
    infinite the layer fills the whole axes area. The silhouette always keeps
    its aspect ratio and is centred within the bounds.

    Example:
        ```python
        layer = add_silhouette(img, x=5, y=5, ysize=2)
        fig, ax = plt.subplots()
        ax.set_xlim(0, 10)
        ax.set_ylim(0, 10)
        layer.add_to(ax)
        ```
    """

    def __init__(self, node: RenderNode, xmin: float = -math.inf, xmax: float = math.inf,
                 ymin: float = -math.inf, ymax: float = math.inf, zorder: float = 0.5):
        self.node = node
        self.xmin = float(xmin)
        self.xmax = float(xmax)
        self.ymin = float(ymin)
        self.ymax = float(ymax)
        self.zorder = zorder

    @property
    def bounds(self) -> Tuple[float, float, float, float]:
        """Return ``(xmin, xmax, ymin, ymax)``."""
        return self.xmin, self.xmax, self.ymin, self.ymax

    @property
    def fills_panel(self) -> bool:
        """True if the layer spans the whole axes area."""
        return not any(math.isfinite(v) for v in self.bounds)

    def add_to(self, ax: plt.Axes) -> plt.Axes:
        """
        Draw the layer into ``ax``.

        Args:
            ax: Parent axes

        Returns:
            plt.Axes: The inset axes holding the silhouette
        """
        if self.fills_panel:
            inset = ax.inset_axes([0, 0, 1, 1], transform=ax.transAxes, zorder=self.zorder)
        else:
            inset = ax.inset_axes(
                [self.xmin, self.ymin, self.xmax - self.xmin, self.ymax - self.ymin],
                transform=ax.transData,
                zorder=self.zorder,
            )

        self.node.draw_into(inset)

        x0, x1, y0, y1 = self.node.extent
        inset.set_xlim(x0, x1)
        inset.set_ylim(y0, y1)
        inset.set_aspect("equal", adjustable="box", anchor="C")
        inset.set_axis_off()
        inset.set_navigate(False)

        logger.debug("Attached silhouette layer with bounds %s", self.bounds)
        return inset

    def __repr__(self) -> str:
        return (
            f"SilhouetteLayer(node={type(self.node).__name__}, "
            f"xmin={self.xmin}, xmax={self.xmax}, ymin={self.ymin}, ymax={self.ymax})"
        )
