"""
Orthogonal edge routing over the obstacle grid.

Implements grid-based routing with:
- Port assignment for both ends of every edge
- Dynamic port extensions out of node bodies
- A* (Manhattan heuristic, bend penalty) or BFS path search
- Optional edge-vs-edge avoidance ("spaced edges")
- Fallback Manhattan paths when a target is unreachable
"""

import heapq
import logging
import math
from collections import deque
from typing import Dict, List, Optional, Protocol, Sequence, Tuple

from .config import LayoutConfig
from .geometry import EPSILON, Point
from .grid import Cell, ObstacleGrid
from .models import Edge, LayoutWarning, Node, WarningKind
from .ports import Connection, resolve_connection

logger = logging.getLogger(__name__)

# Move directions: the first four are orthogonal, the rest diagonal
ORTHOGONAL_MOVES = [(1, 0), (-1, 0), (0, 1), (0, -1)]
DIAGONAL_MOVES = [(1, 1), (1, -1), (-1, 1), (-1, -1)]

SQRT2 = math.sqrt(2)


class RoutingStrategy(Protocol):
    """Routes every edge, filling in ports and waypoints."""

    def route(
        self, nodes: Sequence[Node], edges: List[Edge], config: LayoutConfig
    ) -> List[LayoutWarning]:
        ...


class GridRouter:
    """
    Routes edges one by one on an obstacle grid built from the node positions.

    Edges are routed in input order. With ``spaced_edges`` each routed edge
    becomes an obstacle for the edges after it.

    Attributes:
        grid: Grid of the last route() call, kept for inspection.
    """

    def __init__(self):
        self.grid: Optional[ObstacleGrid] = None

    def route(
        self, nodes: Sequence[Node], edges: List[Edge], config: LayoutConfig
    ) -> List[LayoutWarning]:
        """
        Route all edges in place.

        Args:
            nodes: Positioned nodes.
            edges: Edges to route; ports and waypoints are overwritten.
            config: Layout settings.

        Returns:
            One warning per edge that needed a fallback path.
        """
        self.grid = ObstacleGrid.from_nodes(
            nodes, config.grid_cell_size, config.effective_grid_padding
        )
        warnings = []
        for index, edge in enumerate(edges):
            warning = self.route_edge(index, edge, nodes, config)
            if warning is not None:
                warnings.append(warning)
        logger.debug(
            "Routed %d edges on a %dx%d grid (%d degraded)",
            len(edges),
            self.grid.columns,
            self.grid.rows,
            len(warnings),
        )
        return warnings

    def route_edge(
        self, index: int, edge: Edge, nodes: Sequence[Node], config: LayoutConfig
    ) -> Optional[LayoutWarning]:
        """Route a single edge; returns a warning if it fell back."""
        grid = self.grid
        cell_size = config.grid_cell_size
        source = resolve_connection(nodes, edge.source, edge.target, cell_size)
        target = resolve_connection(nodes, edge.target, edge.source, cell_size)
        edge.source_port = source.port
        edge.target_port = target.port

        start = grid.extension(grid.to_cell(source.point), source.side)
        goal = grid.extension(grid.to_cell(target.point), target.side)

        cells = find_path(
            grid,
            start,
            goal,
            allow_diagonals=config.allow_diagonals,
            avoid_edges=config.spaced_edges,
            algorithm=config.search,
            bend_penalty=config.bend_penalty,
        )

        warning = None
        if cells is None:
            middle = fallback_path(grid.to_point(start), grid.to_point(goal), source)
            message = (
                f"No route found for edge {index} "
                f"('{nodes[edge.source].id}' -> '{nodes[edge.target].id}'), "
                f"using a direct fallback path"
            )
            logger.warning(message)
            warning = LayoutWarning(
                kind=WarningKind.UNREACHABLE_ROUTE,
                message=message,
                edge=index,
                nodes=(edge.source, edge.target),
            )
        else:
            middle = [grid.to_point(cell) for cell in cells]

        edge.waypoints = simplify_waypoints([source.point] + middle + [target.point])

        if config.spaced_edges:
            grid.mark_path(middle)

        return warning


def find_path(
    grid: ObstacleGrid,
    start: Cell,
    goal: Cell,
    allow_diagonals: bool = False,
    avoid_edges: bool = False,
    algorithm: str = "astar",
    bend_penalty: float = 0.0,
) -> Optional[List[Cell]]:
    """
    Search a path of cells from start to goal.

    The start and goal cells are always enterable, even if marked. With
    ``avoid_edges`` a path may cross a routed edge at a right angle but may
    not run along it, and diagonal moves may not touch routed edges at all.

    Returns:
        The cells of the path including both ends, or None if unreachable.
    """
    if start == goal:
        return [start]

    moves = ORTHOGONAL_MOVES + (DIAGONAL_MOVES if allow_diagonals else [])
    ends = (start, goal)

    def passable(cell: Cell) -> bool:
        if cell in ends:
            return grid.in_bounds(cell)
        return grid.is_passable(cell)

    def along_edge(cell: Cell, move: Tuple[int, int]) -> bool:
        return avoid_edges and cell not in ends and grid.runs_along(cell, move)

    def can_move(cell: Cell, move: Tuple[int, int]) -> bool:
        target = (cell[0] + move[0], cell[1] + move[1])
        if not passable(target):
            return False
        if along_edge(cell, move) or along_edge(target, move):
            return False
        if move[0] != 0 and move[1] != 0:
            # No cutting corners past blocked cells
            corners = ((cell[0] + move[0], cell[1]), (cell[0], cell[1] + move[1]))
            return all(
                passable(corner) and not along_edge(corner, move) for corner in corners
            )
        return True

    if algorithm == "bfs":
        return _breadth_first(start, goal, moves, can_move)
    return _a_star(start, goal, moves, can_move, allow_diagonals, bend_penalty)


def _breadth_first(start, goal, moves, can_move) -> Optional[List[Cell]]:
    came_from: Dict[Cell, Optional[Cell]] = {start: None}
    queue = deque([start])
    while queue:
        current = queue.popleft()
        if current == goal:
            path = []
            node: Optional[Cell] = current
            while node is not None:
                path.append(node)
                node = came_from[node]
            path.reverse()
            return path
        for move in moves:
            if not can_move(current, move):
                continue
            neighbor = (current[0] + move[0], current[1] + move[1])
            if neighbor not in came_from:
                came_from[neighbor] = current
                queue.append(neighbor)
    return None


def _a_star(
    start, goal, moves, can_move, allow_diagonals, bend_penalty
) -> Optional[List[Cell]]:
    """A* over (cell, incoming move) states so bends can be penalised."""

    def heuristic(cell: Cell) -> float:
        dx = abs(cell[0] - goal[0])
        dy = abs(cell[1] - goal[1])
        if allow_diagonals:
            return dx + dy + (SQRT2 - 2) * min(dx, dy)
        return dx + dy

    State = Tuple[Cell, int]
    start_state: State = (start, -1)
    g_score: Dict[State, float] = {start_state: 0.0}
    came_from: Dict[State, Optional[State]] = {start_state: None}
    counter = 0
    open_set = [(heuristic(start), counter, start_state)]
    closed = set()

    while open_set:
        _, _, state = heapq.heappop(open_set)
        if state in closed:
            continue
        closed.add(state)
        cell, incoming = state

        if cell == goal:
            path = []
            current: Optional[State] = state
            while current is not None:
                path.append(current[0])
                current = came_from[current]
            path.reverse()
            return path

        for move_index, move in enumerate(moves):
            if not can_move(cell, move):
                continue
            step = SQRT2 if move_index >= len(ORTHOGONAL_MOVES) else 1.0
            if incoming != -1 and incoming != move_index:
                step += bend_penalty
            neighbor: State = ((cell[0] + move[0], cell[1] + move[1]), move_index)
            tentative = g_score[state] + step
            if tentative < g_score.get(neighbor, math.inf):
                g_score[neighbor] = tentative
                came_from[neighbor] = state
                counter += 1
                heapq.heappush(
                    open_set, (tentative + heuristic(neighbor[0]), counter, neighbor)
                )
    return None


def fallback_path(start: Point, goal: Point, source: Connection) -> List[Point]:
    """
    Direct Manhattan path between two extension points, ignoring obstacles.

    Leaves along the source side's axis first, then turns once.
    """
    if source.side.is_horizontal:
        corner = Point(goal.x, start.y)
    else:
        corner = Point(start.x, goal.y)
    return [start, corner, goal]


def simplify_waypoints(points: Sequence[Point]) -> List[Point]:
    """
    Drop repeated points and merge collinear runs into single segments.

    Always returns at least two points for a non-empty input.
    """
    unique: List[Point] = []
    for point in points:
        if unique and _same(unique[-1], point):
            continue
        unique.append(point)

    if len(unique) <= 2:
        if len(unique) == 1:
            return [unique[0], unique[0]]
        return unique

    result = [unique[0]]
    for i in range(1, len(unique) - 1):
        if _direction(result[-1], unique[i]) != _direction(unique[i], unique[i + 1]):
            result.append(unique[i])
    result.append(unique[-1])
    return result


def _same(a: Point, b: Point) -> bool:
    return abs(a.x - b.x) <= EPSILON and abs(a.y - b.y) <= EPSILON


def _direction(a: Point, b: Point) -> Tuple[int, int]:
    """Direction of the segment a-b, normalised to -1/0/1 per axis (or slope)."""
    dx = b.x - a.x
    dy = b.y - a.y
    if abs(dx) <= EPSILON:
        return (0, 1 if dy > 0 else -1)
    if abs(dy) <= EPSILON:
        return (1 if dx > 0 else -1, 0)
    # Diagonal segments: compare by reduced slope
    g = math.gcd(int(round(abs(dx) * 1000)), int(round(abs(dy) * 1000))) or 1
    return (
        int(math.copysign(round(abs(dx) * 1000) // g, dx)),
        int(math.copysign(round(abs(dy) * 1000) // g, dy)),
    )
