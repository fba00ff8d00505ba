"""
archlayout - Automatic layout for architecture diagrams

A Python library that positions variably-sized nodes and routes orthogonal
edges between their ports, avoiding obstacles.

Example:
    >>> from archlayout import Node, Port, PortSide, layout
    >>> nodes = [
    ...     Node("gateway", 100, 50, ports=[Port(PortSide.RIGHT)]),
    ...     Node("service", 80, 80, ports=[Port(PortSide.LEFT)]),
    ... ]
    >>> result = layout(nodes, [(0, 1)])
    >>> result.edges[0].waypoints  # doctest: +SKIP

Debug Mode Example:
    >>> engine = LayoutEngine()
    >>> result = engine.layout(nodes, [(0, 1)], debug=True)
    >>> print(result.trace.summary())  # doctest: +SKIP
"""

from .config import LayoutConfig
from .engine import LayoutEngine, layout, layout_in_place
from .errors import ConfigurationError, InvalidInputError, LayoutError
from .export import export_png, export_svg, render_svg
from .forces import ForceDirectedRefiner, ForceModel, SpringElectricalModel
from .geometry import Point, Rect
from .grid import CellType, ObstacleGrid
from .models import (
    Edge,
    LayoutReport,
    LayoutResult,
    LayoutWarning,
    Node,
    Port,
    PortDirection,
    PortSide,
    WarningKind,
)
from .placement import ClusterShelfPlacement, PlacementStrategy
from .routing import GridRouter, RoutingStrategy
from .tracer import LayoutTrace, PipelineStage

__version__ = "0.1.0"

__all__ = [
    # Main API
    "LayoutEngine",
    "layout",
    "layout_in_place",
    "LayoutConfig",
    # Data model
    "Node",
    "Port",
    "PortSide",
    "PortDirection",
    "Edge",
    "LayoutResult",
    "LayoutReport",
    "LayoutWarning",
    "WarningKind",
    "Point",
    "Rect",
    # Errors
    "LayoutError",
    "InvalidInputError",
    "ConfigurationError",
    # Strategies
    "PlacementStrategy",
    "ClusterShelfPlacement",
    "ForceModel",
    "SpringElectricalModel",
    "ForceDirectedRefiner",
    "RoutingStrategy",
    "GridRouter",
    "ObstacleGrid",
    "CellType",
    # Export
    "render_svg",
    "export_svg",
    "export_png",
    # Debug/Tracing
    "LayoutTrace",
    "PipelineStage",
]
