"""
Input validation for layout calls.

Everything here runs before the pipeline touches any node, so a rejected call
never leaves partially updated positions behind.
"""

import math
from typing import List, Sequence

from .errors import InvalidInputError
from .models import MAX_PORTS, Edge, Node, Port, PortSide


def validate_input(nodes: Sequence[Node], edges: Sequence[Edge]) -> None:
    """
    Check the node/edge graph for problems the engine cannot recover from.

    Args:
        nodes: Nodes of the graph.
        edges: Edges referencing nodes by index.

    Raises:
        InvalidInputError: On the first problem found.
    """
    errors = collect_input_errors(nodes, edges)
    if errors:
        raise InvalidInputError(errors[0])


def collect_input_errors(nodes: Sequence[Node], edges: Sequence[Edge]) -> List[str]:
    """Return every validation problem as a human readable message."""
    errors = []

    for i, node in enumerate(nodes):
        for name, value in (("width", node.width), ("height", node.height)):
            if not isinstance(value, (int, float)) or not math.isfinite(value):
                errors.append(f"Node {i} ({node.id}): {name} is not a finite number")
            elif value <= 0:
                errors.append(f"Node {i} ({node.id}): {name} must be positive, got {value}")
        if len(node.ports) > MAX_PORTS:
            errors.append(
                f"Node {i} ({node.id}): {len(node.ports)} ports declared, "
                f"at most {MAX_PORTS} supported"
            )
        for k, port in enumerate(node.ports):
            if not isinstance(port, Port):
                errors.append(f"Node {i} ({node.id}): port {k} is not a Port")
                continue
            if not isinstance(port.side, PortSide):
                errors.append(
                    f"Node {i} ({node.id}): port {k} has invalid side {port.side!r}"
                )
            if isinstance(port.index, bool) or not isinstance(port.index, int):
                errors.append(
                    f"Node {i} ({node.id}): port {k} index must be an integer, "
                    f"got {port.index!r}"
                )
            elif port.index < 0:
                errors.append(
                    f"Node {i} ({node.id}): negative port index {port.index}"
                )

    count = len(nodes)
    for i, edge in enumerate(edges):
        for name, index in (("source", edge.source), ("target", edge.target)):
            if not isinstance(index, int) or not 0 <= index < count:
                errors.append(
                    f"Edge {i}: {name} index {index} out of range for {count} nodes"
                )
        if edge.source == edge.target:
            errors.append(f"Edge {i}: self-loops are not supported (node {edge.source})")

    return errors
