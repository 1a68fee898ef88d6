"""
OcifPlace - Force-Directed Layout for OCIF Canvas Documents

Positions the nodes of generated canvas graphs so related nodes cluster,
unrelated nodes spread out, and the drawing fits a padded canvas.
"""

__version__ = "0.1.0"
__author__ = "OcifPlace Team"

from .document.abstraction import Graph, Node, Relation
from .layout.force_directed import ForceDirectedLayout, LayoutConfig, apply_auto_layout
from .layout.profiles import get_profile

__all__ = [
    "Graph",
    "Node",
    "Relation",
    "ForceDirectedLayout",
    "LayoutConfig",
    "apply_auto_layout",
    "get_profile",
]
