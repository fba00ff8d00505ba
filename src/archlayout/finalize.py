"""
Finalization: place the finished layout on a canvas.

Computes the bounding box of every node and waypoint, adds padding, enforces
the minimum canvas size and shifts everything by one grid-aligned offset so
the padded box starts at (0, 0).
"""

import math
from dataclasses import dataclass
from typing import List, Sequence, Tuple

from .config import LayoutConfig
from .errors import LayoutError
from .geometry import EPSILON, Point, is_axis_aligned, snap
from .models import Edge, Node


@dataclass
class Canvas:
    """Canvas size and the translation applied to reach it."""

    width: float
    height: float
    offset: Point


def layout_bounds(
    nodes: Sequence[Node], edges: Sequence[Edge]
) -> Tuple[float, float, float, float]:
    """
    Union bounding box of all node bodies and edge waypoints.

    Returns:
        (min_x, min_y, max_x, max_y); all zeros for an empty layout.
    """
    xs: List[float] = []
    ys: List[float] = []
    for node in nodes:
        xs.extend((node.x, node.x + node.width))
        ys.extend((node.y, node.y + node.height))
    for edge in edges:
        for point in edge.waypoints:
            xs.append(point.x)
            ys.append(point.y)
    if not xs:
        return 0.0, 0.0, 0.0, 0.0
    return min(xs), min(ys), max(xs), max(ys)


def finalize_layout(
    nodes: List[Node], edges: List[Edge], config: LayoutConfig
) -> Canvas:
    """
    Translate nodes and waypoints in place and compute the canvas size.

    Raises:
        LayoutError: If an edge lost its orthogonality (cannot happen for a
            pure translation of a valid routing).
    """
    cell = config.grid_cell_size
    padding = config.effective_padding
    min_x, min_y, max_x, max_y = layout_bounds(nodes, edges)

    width = _round_up(max(max_x - min_x, config.canvas_min_width) + 2 * padding, cell)
    height = _round_up(
        max(max_y - min_y, config.canvas_min_height) + 2 * padding, cell
    )

    # min_x/min_y are grid aligned, so the offset is too
    offset = Point(snap(padding - min_x, cell), snap(padding - min_y, cell))

    for node in nodes:
        node.x += offset.x
        node.y += offset.y
    for edge in edges:
        edge.waypoints = [point.translate(offset.x, offset.y) for point in edge.waypoints]

    if not config.allow_diagonals:
        valid, errors = validate_orthogonal(edges)
        if not valid:
            raise LayoutError("; ".join(errors))

    return Canvas(width=width, height=height, offset=offset)


def validate_orthogonal(edges: Sequence[Edge]) -> Tuple[bool, List[str]]:
    """
    Validate that every edge segment is horizontal or vertical.

    Returns:
        Tuple of (is_valid, list of error messages)
    """
    errors = []
    for index, edge in enumerate(edges):
        for a, b in zip(edge.waypoints, edge.waypoints[1:]):
            if not is_axis_aligned(a, b):
                errors.append(
                    f"Edge {index} has a diagonal segment "
                    f"({a.x}, {a.y}) -> ({b.x}, {b.y})"
                )
    return (len(errors) == 0, errors)


def _round_up(value: float, cell: float) -> float:
    return math.ceil(value / cell - EPSILON) * cell
