"""
Data models for the layout engine.

This module contains the dataclasses exchanged with callers: the nodes and
edges that go into a layout call and the result that comes out of it.

Classes:
    PortSide: The rectangle side a port sits on.
    PortDirection: Whether a port is an input or an output.
    Port: A connection point on a node.
    Node: A sized rectangle to be positioned.
    Edge: A connection between two nodes, routed into waypoints.
    WarningKind: Categories of non-fatal layout degradations.
    LayoutWarning: A single non-fatal degradation.
    LayoutResult: Output of the non-mutating layout call.
    LayoutReport: Outcome of the in-place layout call.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Dict, List, Optional, Tuple

from .geometry import Point, Rect

if TYPE_CHECKING:
    from .errors import LayoutError
    from .tracer import LayoutTrace

# A node exposes at most this many ports
MAX_PORTS = 8


class PortSide(Enum):
    """Which side of a node a port is on."""

    TOP = "top"
    RIGHT = "right"
    BOTTOM = "bottom"
    LEFT = "left"

    @property
    def normal(self) -> Tuple[int, int]:
        """Unit vector pointing away from the node through this side."""
        return _SIDE_NORMALS[self]

    @property
    def is_horizontal(self) -> bool:
        """True for sides whose edges leave horizontally (left/right)."""
        return self in (PortSide.LEFT, PortSide.RIGHT)


_SIDE_NORMALS = {
    PortSide.TOP: (0, -1),
    PortSide.RIGHT: (1, 0),
    PortSide.BOTTOM: (0, 1),
    PortSide.LEFT: (-1, 0),
}


class PortDirection(Enum):
    """Direction of the data flowing through a port."""

    INPUT = "input"
    OUTPUT = "output"


@dataclass
class Port:
    """
    A connection point on a node boundary.

    Attributes:
        side: Side of the node the port sits on.
        index: Order of the port along its side. Ports on one side are spaced
            evenly in ascending index order.
        direction: Input or output port.
    """

    side: PortSide
    index: int = 0
    direction: PortDirection = PortDirection.OUTPUT


@dataclass
class Node:
    """
    A rectangular node to be positioned.

    Attributes:
        id: Caller-defined identifier, used in messages and exports.
        width: Node width in layout units.
        height: Node height in layout units.
        x: Left edge, mutated by the layout.
        y: Top edge, mutated by the layout.
        ports: Up to eight connection ports.
        attributes: Free-form key/value pairs (e.g. ``color``) passed through.
    """

    id: str
    width: float
    height: float
    x: float = 0.0
    y: float = 0.0
    ports: List[Port] = field(default_factory=list)
    attributes: Dict[str, str] = field(default_factory=dict)

    @property
    def bounds(self) -> Rect:
        return Rect(self.x, self.y, self.width, self.height)

    @property
    def center(self) -> Point:
        return Point(self.x + self.width / 2, self.y + self.height / 2)


@dataclass
class Edge:
    """
    A connection between two nodes.

    Attributes:
        source: Index of the source node.
        target: Index of the target node.
        source_port: Index into the source node's ports chosen during routing,
            or None when the node has no ports.
        target_port: Same for the target node.
        waypoints: Routed path from the source connection to the target
            connection.
    """

    source: int
    target: int
    source_port: Optional[int] = None
    target_port: Optional[int] = None
    waypoints: List[Point] = field(default_factory=list)


class WarningKind(Enum):
    """Non-fatal conditions reported alongside a successful layout."""

    UNREACHABLE_ROUTE = "unreachable_route"
    NON_CONVERGENCE = "non_convergence"


@dataclass
class LayoutWarning:
    """A degradation the caller may react to (e.g. by changing the config)."""

    kind: WarningKind
    message: str
    edge: Optional[int] = None
    nodes: Optional[Tuple[int, int]] = None

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"


@dataclass
class LayoutResult:
    """
    Result of a layout call.

    Attributes:
        nodes: Positioned copies of the input nodes.
        edges: Copies of the input edges with ports and waypoints resolved.
        canvas_width: Width of the canvas holding the layout.
        canvas_height: Height of the canvas holding the layout.
        offset: Translation applied to move the layout to the (0, 0) origin.
        warnings: Non-fatal degradations met along the way.
        trace: Pipeline trace, only populated in debug mode.
    """

    nodes: List[Node] = field(default_factory=list)
    edges: List[Edge] = field(default_factory=list)
    canvas_width: float = 0.0
    canvas_height: float = 0.0
    offset: Point = Point(0.0, 0.0)
    warnings: List[LayoutWarning] = field(default_factory=list)
    trace: Optional["LayoutTrace"] = None

    def warnings_of(self, kind: WarningKind) -> List[LayoutWarning]:
        return [w for w in self.warnings if w.kind == kind]


@dataclass
class LayoutReport:
    """
    Outcome of an in-place layout call.

    Fatal problems are stored in ``error`` instead of being raised, and the
    caller's buffers are left untouched in that case.
    """

    error: Optional["LayoutError"] = None
    warnings: List[LayoutWarning] = field(default_factory=list)
    canvas_width: float = 0.0
    canvas_height: float = 0.0
    offset: Point = Point(0.0, 0.0)

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> None:
        """Re-raise the stored fatal error, if any."""
        if self.error is not None:
            raise self.error
