"""
Force-directed refinement of node positions.

Each iteration first computes the net force on every node from the current
positions, then applies all displacements at once:
- every node pair repels, inversely to the square of the gap between their
  bounding boxes (nodes are boxes, not point masses)
- every edge pulls its endpoints together like a spring
- displacements are capped by a temperature that cools every iteration

A spacing pass then pushes apart any pair still closer than the minimum
spacing, and positions are snapped to the routing grid.
"""

import logging
import math
from typing import List, Optional, Protocol, Sequence, Tuple

from .config import LayoutConfig
from .geometry import EPSILON, Rect, snap
from .models import Edge, LayoutWarning, Node, WarningKind

logger = logging.getLogger(__name__)

# Gaps below this are treated as this value to keep repulsion bounded
MIN_EFFECTIVE_GAP = 1.0

# Golden angle, used to spread nodes sharing the same center
GOLDEN_ANGLE = math.pi * (3 - math.sqrt(5))

Force = Tuple[float, float]


class ForceModel(Protocol):
    """Computes the net force on every node for one iteration."""

    def compute_forces(
        self, rects: Sequence[Rect], edges: Sequence[Edge], config: LayoutConfig
    ) -> List[Force]:
        ...


class SpringElectricalModel:
    """Box-gap repulsion between all pairs plus Hooke attraction along edges."""

    def compute_forces(
        self, rects: Sequence[Rect], edges: Sequence[Edge], config: LayoutConfig
    ) -> List[Force]:
        fx = [0.0] * len(rects)
        fy = [0.0] * len(rects)

        for i in range(len(rects)):
            for j in range(i + 1, len(rects)):
                ux, uy = _unit_direction(rects[i], rects[j], i, j)
                gap = max(rects[i].separation(rects[j]), MIN_EFFECTIVE_GAP)
                force = config.repulsion_strength / (gap * gap)
                fx[i] -= force * ux
                fy[i] -= force * uy
                fx[j] += force * ux
                fy[j] += force * uy

        for edge in edges:
            a = rects[edge.source]
            b = rects[edge.target]
            dx = b.center_x - a.center_x
            dy = b.center_y - a.center_y
            # Hooke's law with zero rest length: force = k * distance
            force_x = config.attraction_strength * dx
            force_y = config.attraction_strength * dy
            fx[edge.source] += force_x
            fy[edge.source] += force_y
            fx[edge.target] -= force_x
            fy[edge.target] -= force_y

        return list(zip(fx, fy))


def _unit_direction(a: Rect, b: Rect, i: int, j: int) -> Tuple[float, float]:
    """Unit vector from a's center to b's center."""
    dx = b.center_x - a.center_x
    dy = b.center_y - a.center_y
    dist = math.hypot(dx, dy)
    if dist < EPSILON:
        angle = GOLDEN_ANGLE * (i + 1) * (j + 1)
        return math.cos(angle), math.sin(angle)
    return dx / dist, dy / dist


class ForceDirectedRefiner:
    """
    Runs the force simulation, the spacing pass and grid snapping.

    Attributes:
        model: Force model used for every iteration.
        iterations_run: Iterations executed by the last refine() call.
        final_energy: Total squared force of the last executed iteration.
    """

    def __init__(self, model: Optional[ForceModel] = None):
        self.model = model if model is not None else SpringElectricalModel()
        self.iterations_run = 0
        self.final_energy = 0.0

    def refine(
        self, nodes: List[Node], edges: Sequence[Edge], config: LayoutConfig
    ) -> List[LayoutWarning]:
        """
        Refine node positions in place.

        Args:
            nodes: Nodes with seed positions.
            edges: Edges of the graph.
            config: Layout settings.

        Returns:
            A non-convergence warning if spacing could not be established.
        """
        self._simulate(nodes, edges, config)

        if config.prevent_overlap:
            separate_nodes(
                nodes,
                config.min_spacing + config.grid_cell_size,
                config.separation_sweeps,
            )

        for node in nodes:
            node.x = snap(node.x, config.grid_cell_size)
            node.y = snap(node.y, config.grid_cell_size)

        if not config.prevent_overlap:
            return []

        violations = find_spacing_violations(nodes, config.min_spacing)
        if not violations:
            return []

        first_a, first_b = violations[0]
        message = (
            f"{len(violations)} node pair(s) closer than min_spacing "
            f"{config.min_spacing} after refinement "
            f"(e.g. '{nodes[first_a].id}' and '{nodes[first_b].id}')"
        )
        logger.warning(message)
        return [
            LayoutWarning(
                kind=WarningKind.NON_CONVERGENCE,
                message=message,
                nodes=violations[0],
            )
        ]

    def _simulate(
        self, nodes: List[Node], edges: Sequence[Edge], config: LayoutConfig
    ) -> None:
        self.iterations_run = 0
        self.final_energy = 0.0
        if len(nodes) < 2:
            return

        temperature = config.initial_temperature
        calm_iterations = 0

        for iteration in range(config.iterations):
            rects = [node.bounds for node in nodes]
            forces = self.model.compute_forces(rects, edges, config)

            # All forces are known before any node moves
            energy = 0.0
            for node, (fx, fy) in zip(nodes, forces):
                energy += fx * fx + fy * fy
                dx = fx * config.step_factor
                dy = fy * config.step_factor
                length = math.hypot(dx, dy)
                if length > temperature:
                    dx *= temperature / length
                    dy *= temperature / length
                node.x += dx
                node.y += dy

            temperature *= config.cooling_rate
            self.iterations_run = iteration + 1
            self.final_energy = energy

            if config.early_stop_energy is not None:
                if energy < config.early_stop_energy:
                    calm_iterations += 1
                    if calm_iterations >= config.early_stop_patience:
                        logger.debug(
                            "Force simulation settled after %d iterations",
                            self.iterations_run,
                        )
                        break
                else:
                    calm_iterations = 0

        logger.debug(
            "Force simulation: %d iterations, final energy %.3f",
            self.iterations_run,
            self.final_energy,
        )


def separate_nodes(nodes: List[Node], spacing: float, max_sweeps: int) -> int:
    """
    Push apart node pairs closer than ``spacing``.

    Each violating pair is moved apart along the axis where it needs the
    smaller correction, each node taking half of it.

    Returns:
        Number of sweeps performed.
    """
    for sweep in range(max_sweeps):
        moved = False
        for i in range(len(nodes)):
            for j in range(i + 1, len(nodes)):
                a = nodes[i]
                b = nodes[j]
                gap_x, gap_y = a.bounds.gap(b.bounds)
                need_x = spacing - gap_x
                need_y = spacing - gap_y
                if need_x <= EPSILON or need_y <= EPSILON:
                    continue

                if need_x <= need_y:
                    push = need_x / 2 + EPSILON
                    sign = 1.0 if b.center.x >= a.center.x else -1.0
                    a.x -= sign * push
                    b.x += sign * push
                else:
                    push = need_y / 2 + EPSILON
                    sign = 1.0 if b.center.y >= a.center.y else -1.0
                    a.y -= sign * push
                    b.y += sign * push
                moved = True

        if not moved:
            return sweep
    return max_sweeps


def find_spacing_violations(
    nodes: Sequence[Node], spacing: float, tolerance: float = 1e-6
) -> List[Tuple[int, int]]:
    """Return index pairs whose bounding boxes are closer than ``spacing``."""
    violations = []
    for i in range(len(nodes)):
        for j in range(i + 1, len(nodes)):
            if nodes[i].bounds.separation(nodes[j].bounds) < spacing - tolerance:
                violations.append((i, j))
    return violations
