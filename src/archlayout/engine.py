"""
Main layout engine module.

Combines placement, force-directed refinement, routing and finalization into
a single batch computation over the whole graph.

Example:
    >>> from archlayout import Node, layout
    >>> nodes = [Node("api", 100, 50), Node("db", 80, 80)]
    >>> result = layout(nodes, [(0, 1)])
    >>> result.canvas_width >= 400
    True
"""

import copy
import logging
from typing import List, Optional, Sequence, Tuple, Union

from .config import LayoutConfig
from .errors import InvalidInputError, LayoutError
from .finalize import finalize_layout
from .forces import ForceDirectedRefiner, ForceModel
from .models import Edge, LayoutReport, LayoutResult, Node
from .placement import ClusterShelfPlacement, PlacementStrategy
from .routing import GridRouter, RoutingStrategy
from .tracer import LayoutTrace
from .validation import validate_input

logger = logging.getLogger(__name__)

EdgeLike = Union[Edge, Tuple[int, int]]


class LayoutEngine:
    """
    Lays out nodes and routes edges.

    The three phases that have alternatives are strategies chosen at
    construction; each call is independent of previous calls.

    Example:
        >>> engine = LayoutEngine(LayoutConfig(spaced_edges=True))
        >>> result = engine.layout(nodes, edges)
    """

    def __init__(
        self,
        config: Optional[LayoutConfig] = None,
        placement: Optional[PlacementStrategy] = None,
        force_model: Optional[ForceModel] = None,
        routing: Optional[RoutingStrategy] = None,
    ):
        """
        Initialize the layout engine.

        Args:
            config: Layout settings; defaults to ``LayoutConfig()``.
            placement: Seed placement strategy (clustering + shelf packing).
            force_model: Force model for refinement (spring-electrical).
            routing: Edge routing strategy (grid router).

        Raises:
            ConfigurationError: If the config is invalid.
        """
        self.config = config if config is not None else LayoutConfig()
        self.config.validate()
        self.placement = placement if placement is not None else ClusterShelfPlacement()
        self.force_model = force_model
        self.routing = routing

    def layout(
        self,
        nodes: Sequence[Node],
        edges: Sequence[EdgeLike],
        debug: bool = False,
    ) -> LayoutResult:
        """
        Lay out copies of the given nodes and edges.

        The inputs are not modified.

        Args:
            nodes: Nodes to position.
            edges: Edges as ``Edge`` objects or ``(source, target)`` tuples.
            debug: Record a pipeline trace in ``result.trace``.

        Returns:
            LayoutResult with positioned nodes, routed edges and canvas size.

        Raises:
            ConfigurationError: If the config is invalid.
            InvalidInputError: If the graph is malformed.
        """
        self.config.validate()
        work_nodes = copy.deepcopy(list(nodes))
        work_edges = [_to_edge(edge) for edge in edges]
        validate_input(work_nodes, work_edges)
        return self._run(work_nodes, work_edges, debug)

    def layout_in_place(
        self, nodes: List[Node], edges: List[Edge]
    ) -> LayoutReport:
        """
        Lay out the caller's nodes and edges directly.

        Writes node positions and edge ports/waypoints back into the given
        objects. Fatal errors are returned in the report instead of raised,
        and leave every node and edge untouched.

        Returns:
            LayoutReport with warnings and canvas size, or the error.
        """
        try:
            self.config.validate()
            if not all(isinstance(edge, Edge) for edge in edges):
                raise InvalidInputError("layout_in_place requires Edge objects")
            validate_input(nodes, edges)
            result = self._run(copy.deepcopy(list(nodes)), copy.deepcopy(list(edges)))
        except LayoutError as error:
            logger.error("In-place layout failed: %s", error)
            return LayoutReport(error=error)

        for node, placed in zip(nodes, result.nodes):
            node.x = placed.x
            node.y = placed.y
        for edge, routed in zip(edges, result.edges):
            edge.source_port = routed.source_port
            edge.target_port = routed.target_port
            edge.waypoints = list(routed.waypoints)

        return LayoutReport(
            warnings=result.warnings,
            canvas_width=result.canvas_width,
            canvas_height=result.canvas_height,
            offset=result.offset,
        )

    def _run(
        self, nodes: List[Node], edges: List[Edge], debug: bool = False
    ) -> LayoutResult:
        """Run every phase on working copies."""
        config = self.config
        trace = LayoutTrace() if debug else None
        warnings = []

        self.placement.place(nodes, edges, config)
        if trace:
            trace.add_stage("placement", {"nodes": len(nodes)}, nodes)

        refiner = ForceDirectedRefiner(self.force_model)
        warnings.extend(refiner.refine(nodes, edges, config))
        if trace:
            trace.add_stage(
                "refinement",
                {
                    "iterations": refiner.iterations_run,
                    "final_energy": refiner.final_energy,
                },
                nodes,
            )

        router = self.routing if self.routing is not None else GridRouter()
        warnings.extend(router.route(nodes, edges, config))
        if trace:
            trace.add_stage("routing", {"edges": len(edges)}, nodes, edges)

        canvas = finalize_layout(nodes, edges, config)
        if trace:
            trace.add_stage(
                "finalization",
                {
                    "canvas": (canvas.width, canvas.height),
                    "offset": canvas.offset.as_tuple(),
                },
                nodes,
                edges,
            )
            trace.warnings.extend(warnings)

        logger.debug(
            "Layout finished: %d nodes, %d edges, canvas %gx%g, %d warnings",
            len(nodes),
            len(edges),
            canvas.width,
            canvas.height,
            len(warnings),
        )

        return LayoutResult(
            nodes=nodes,
            edges=edges,
            canvas_width=canvas.width,
            canvas_height=canvas.height,
            offset=canvas.offset,
            warnings=warnings,
            trace=trace,
        )


def _to_edge(edge: EdgeLike) -> Edge:
    if isinstance(edge, Edge):
        return copy.deepcopy(edge)
    try:
        source, target = edge
    except (TypeError, ValueError):
        raise InvalidInputError(f"Cannot interpret {edge!r} as an edge")
    return Edge(source=source, target=target)


def layout(
    nodes: Sequence[Node],
    edges: Sequence[EdgeLike],
    config: Optional[LayoutConfig] = None,
) -> LayoutResult:
    """
    Convenience function to lay out a graph with the default strategies.

    Args:
        nodes: Nodes to position (not modified).
        edges: Edges as ``Edge`` objects or ``(source, target)`` tuples.
        config: Optional layout settings.

    Returns:
        LayoutResult for copies of the inputs.
    """
    return LayoutEngine(config).layout(nodes, edges)


def layout_in_place(
    nodes: List[Node],
    edges: List[Edge],
    config: Optional[LayoutConfig] = None,
) -> LayoutReport:
    """
    Convenience function to lay out a graph in place.

    Configuration errors are reported through the returned LayoutReport like
    every other fatal error.
    """
    try:
        engine = LayoutEngine(config)
    except LayoutError as error:
        return LayoutReport(error=error)
    return engine.layout_in_place(nodes, edges)
