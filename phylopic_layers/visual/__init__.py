"""
Chart layers for silhouettes.

This package turns silhouette images into renderable nodes and positions
them as inset layers on matplotlib axes.
"""

from phylopic_layers.visual.inset import SilhouetteLayer
from phylopic_layers.visual.nodes import PathGroupNode, RasterNode, RenderNode
from phylopic_layers.visual.silhouette import add_silhouette, add_silhouettes

__all__ = [
    "SilhouetteLayer",
    "RenderNode",
    "PathGroupNode",
    "RasterNode",
    "add_silhouette",
    "add_silhouettes",
]
