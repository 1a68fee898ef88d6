"""
Bounds Fitting

Shrinks and translates a laid-out graph so its bounding box sits inside the
padded canvas. Only ever shrinks: a layout that already fits keeps its
spacing and is just moved to the padding corner.
"""

import logging
import math
from dataclasses import dataclass
from typing import Iterable, Optional, Tuple

from ..document.abstraction import Graph, Node, as_vector
from .arrows import update_arrow_endpoints

logger = logging.getLogger(__name__)


@dataclass
class NormalizationResult:
    """Outcome of a bounds-fitting pass."""
    applied: bool
    scale: float = 1.0
    bbox: Optional[Tuple[float, float, float, float]] = None
    scaled_x: bool = False  # False when the x extent is zero
    scaled_y: bool = False
    arrows_updated: int = 0


def _clamp(value: float, low: float, high: float) -> float:
    return min(max(value, low), high)


def _clamp_positions(graph: Graph, config: 'LayoutConfig') -> int:
    """Clamp finite positions into the padded canvas; returns nodes moved."""
    moved = 0
    for node in graph.nodes:
        pos = as_vector(node.position)
        if pos is None:
            continue
        x = _clamp(pos[0], config.padding, config.canvas_width - config.padding)
        y = _clamp(pos[1], config.padding, config.canvas_height - config.padding)
        if (x, y) != (pos[0], pos[1]):
            node.position = [x, y]
            moved += 1
    return moved


def compute_bounding_box(nodes: Iterable[Node]
                         ) -> Optional[Tuple[float, float, float, float]]:
    """
    Get (min_x, min_y, max_x, max_y) over nodes with finite positions.

    Returns:
        The bounding box, or None when no node has a usable position
    """
    min_x = min_y = math.inf
    max_x = max_y = -math.inf
    found = False

    for node in nodes:
        pos = as_vector(node.position)
        if pos is None:
            continue
        found = True
        min_x = min(min_x, pos[0])
        min_y = min(min_y, pos[1])
        max_x = max(max_x, pos[0])
        max_y = max(max_y, pos[1])

    if not found:
        return None
    return (min_x, min_y, max_x, max_y)


def compute_scale_factor(bbox: Tuple[float, float, float, float],
                         config: 'LayoutConfig') -> float:
    """
    Uniform scale that fits ``bbox`` inside the padded canvas.

    Axes with zero extent do not constrain the scale. The result is capped
    at 1.0 so compact layouts are never magnified.
    """
    min_x, min_y, max_x, max_y = bbox
    width = max_x - min_x
    height = max_y - min_y

    scale = 1.0
    if width > 0:
        scale = min(scale, (config.canvas_width - 2 * config.padding) / width)
    if height > 0:
        scale = min(scale, (config.canvas_height - 2 * config.padding) / height)
    return scale


def normalize_positions(graph: Graph, config: 'LayoutConfig',
                        update_arrows: bool = True) -> NormalizationResult:
    """
    Fit all node positions inside the padded canvas.

    Maps ``p -> padding + (p - min) * scale`` on every axis with a non-zero
    extent. A degenerate (zero-extent) axis is not rescaled; its coordinate
    is only clamped into ``[padding, size - padding]``. If no node has a
    finite position the graph is returned unchanged.

    Args:
        graph: Graph to normalize in place
        config: Layout configuration providing canvas size and padding
        update_arrows: Re-derive arrow endpoints after moving nodes

    Returns:
        NormalizationResult describing what was done
    """
    bbox = compute_bounding_box(graph.nodes)
    if bbox is None:
        logger.debug("Normalization skipped: no positioned nodes")
        return NormalizationResult(applied=False)

    min_x, min_y, max_x, max_y = bbox
    scale_x = (max_x - min_x) > 0
    scale_y = (max_y - min_y) > 0

    padding = config.padding
    max_x_bound = config.canvas_width - padding
    max_y_bound = config.canvas_height - padding

    if not scale_x and not scale_y:
        logger.debug("Zero-area bounding box %s, clamping only", bbox)
        moved = _clamp_positions(graph, config)
        arrows = update_arrow_endpoints(graph) if update_arrows and moved else 0
        return NormalizationResult(applied=False, bbox=bbox, arrows_updated=arrows)

    scale = compute_scale_factor(bbox, config)

    for node in graph.nodes:
        if as_vector(node.position) is None:
            continue
        x, y = node.position[0], node.position[1]
        # A degenerate axis is not rescaled, only kept on the canvas
        if scale_x:
            x = padding + (x - min_x) * scale
        else:
            x = _clamp(x, padding, max_x_bound)
        if scale_y:
            y = padding + (y - min_y) * scale
        else:
            y = _clamp(y, padding, max_y_bound)
        node.position = [x, y]

    arrows = update_arrow_endpoints(graph) if update_arrows else 0

    if logger.isEnabledFor(logging.DEBUG):
        logger.debug(
            "Normalized bbox=(%.1f, %.1f, %.1f, %.1f) scale=%.4f axes=%s%s",
            min_x, min_y, max_x, max_y, scale,
            "x" if scale_x else "", "y" if scale_y else "",
        )

    return NormalizationResult(
        applied=True,
        scale=scale,
        bbox=bbox,
        scaled_x=scale_x,
        scaled_y=scale_y,
        arrows_updated=arrows,
    )
