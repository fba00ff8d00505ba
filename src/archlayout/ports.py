"""
Port model and port assignment.

Ports sit on the sides of a node, evenly spaced along each side. For every
edge the router asks this module where the edge attaches:
- nodes with ports use the port whose offset from the node center points
  most nearly toward the other node (ports may be shared by many edges)
- nodes without ports use their grid-snapped center, projected onto the side
  facing the other node
"""

import math
from dataclasses import dataclass
from typing import List, Optional, Tuple

from .geometry import Point, snap, snap_down, snap_up
from .models import Node, Port, PortSide


@dataclass
class Connection:
    """
    Where one end of an edge attaches to a node.

    Attributes:
        node: Index of the node.
        port: Index into the node's ports, or None for port-less nodes.
        side: Side of the node the edge leaves through.
        point: Grid-aligned connection point on (or just outside) the side.
    """

    node: int
    port: Optional[int]
    side: PortSide
    point: Point


def ports_on_side(node: Node, side: PortSide) -> List[int]:
    """Indices of the node's ports on one side, in spacing order."""
    indices = [i for i, port in enumerate(node.ports) if port.side == side]
    return sorted(indices, key=lambda i: (node.ports[i].index, i))


def port_anchor(node: Node, port_index: int) -> Point:
    """
    Exact position of a port on its node's boundary.

    The k-th of n ports on a side sits at fraction (k + 1) / (n + 1) along it.
    """
    port: Port = node.ports[port_index]
    siblings = ports_on_side(node, port.side)
    fraction = (siblings.index(port_index) + 1) / (len(siblings) + 1)

    if port.side == PortSide.TOP:
        return Point(node.x + node.width * fraction, node.y)
    if port.side == PortSide.BOTTOM:
        return Point(node.x + node.width * fraction, node.y + node.height)
    if port.side == PortSide.LEFT:
        return Point(node.x, node.y + node.height * fraction)
    return Point(node.x + node.width, node.y + node.height * fraction)


def select_port(node: Node, direction: Tuple[float, float]) -> Optional[int]:
    """
    Pick the port best aligned with a direction.

    Scores each port by the cosine between its offset from the node center
    and ``direction``; the highest score wins, ties go to the lower index.

    Returns:
        Port index, or None if the node has no ports.
    """
    if not node.ports:
        return None

    dx, dy = direction
    target_magnitude = math.hypot(dx, dy)
    if target_magnitude == 0:
        return 0

    center = node.center
    best_port = 0
    best_score = -math.inf
    for i in range(len(node.ports)):
        anchor = port_anchor(node, i)
        port_dx = anchor.x - center.x
        port_dy = anchor.y - center.y
        port_magnitude = math.hypot(port_dx, port_dy)
        if port_magnitude == 0:
            continue
        score = (port_dx * dx + port_dy * dy) / (port_magnitude * target_magnitude)
        if score > best_score:
            best_score = score
            best_port = i
    return best_port


def facing_side(direction: Tuple[float, float]) -> PortSide:
    """Side of a node facing along ``direction`` (dominant axis wins)."""
    dx, dy = direction
    if abs(dx) >= abs(dy):
        return PortSide.RIGHT if dx >= 0 else PortSide.LEFT
    return PortSide.BOTTOM if dy > 0 else PortSide.TOP


def resolve_connection(
    nodes: List[Node], node_index: int, other_index: int, cell_size: float
) -> Connection:
    """
    Resolve where an edge between two nodes attaches to ``node_index``.

    Args:
        nodes: All nodes, already positioned.
        node_index: Node whose end is being resolved.
        other_index: Node at the other end of the edge.
        cell_size: Grid cell size used to align the connection point.
    """
    node = nodes[node_index]
    center = node.center
    other = nodes[other_index].center
    direction = (other.x - center.x, other.y - center.y)

    port_index = select_port(node, direction)
    if port_index is None:
        side = facing_side(direction)
        anchor = center
    else:
        side = node.ports[port_index].side
        anchor = port_anchor(node, port_index)

    return Connection(
        node=node_index,
        port=port_index,
        side=side,
        point=_align_to_side(node, side, anchor, cell_size),
    )


def _align_to_side(node: Node, side: PortSide, anchor: Point, cell_size: float) -> Point:
    """Snap an anchor to the grid: along the side by rounding, across it outward."""
    if side.is_horizontal:
        y = _snap_within(anchor.y, node.y, node.y + node.height, cell_size)
        if side == PortSide.RIGHT:
            return Point(snap_up(node.x + node.width, cell_size), y)
        return Point(snap_down(node.x, cell_size), y)

    x = _snap_within(anchor.x, node.x, node.x + node.width, cell_size)
    if side == PortSide.BOTTOM:
        return Point(x, snap_up(node.y + node.height, cell_size))
    return Point(x, snap_down(node.y, cell_size))


def _snap_within(value: float, low: float, high: float, cell_size: float) -> float:
    """Snap to the grid, staying within [low, high] when a grid line fits there."""
    lo = snap_up(low, cell_size)
    hi = snap_down(high, cell_size)
    snapped = snap(value, cell_size)
    if lo > hi:
        return snapped
    return min(max(snapped, lo), hi)
