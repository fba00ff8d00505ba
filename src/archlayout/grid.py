"""
Obstacle grid for edge routing.

The grid is a lattice of points spaced one cell apart, with its origin on a
multiple of the cell size so coordinates map to the same cell every time.
It uses a sparse representation: only blocked cells are stored.
"""

import math
from enum import Enum
from typing import Dict, List, Sequence, Tuple

from .geometry import EPSILON, Point, Rect
from .models import Node, PortSide

Cell = Tuple[int, int]


class CellType(Enum):
    """Types of cells in the obstacle grid."""

    EMPTY = 0
    NODE = 1
    EDGE = 2


# Axes a routed edge runs along through a cell, as bit flags
AXIS_HORIZONTAL = 1
AXIS_VERTICAL = 2
AXIS_BOTH = AXIS_HORIZONTAL | AXIS_VERTICAL


class ObstacleGrid:
    """
    Tracks which grid cells are blocked by node bodies or routed edges.

    Cells are addressed as (column, row) relative to the grid origin. The
    origin itself is stored as a whole number of cells so converting a cell
    back to a coordinate yields an exact multiple of the cell size.
    """

    def __init__(
        self,
        origin_col: int,
        origin_row: int,
        columns: int,
        rows: int,
        cell_size: float,
    ):
        """
        Initialize an empty grid.

        Args:
            origin_col: Origin x as a multiple of ``cell_size``.
            origin_row: Origin y as a multiple of ``cell_size``.
            columns: Number of lattice columns.
            rows: Number of lattice rows.
            cell_size: Distance between neighbouring lattice points.
        """
        self.origin_col = origin_col
        self.origin_row = origin_row
        self.columns = columns
        self.rows = rows
        self.cell_size = cell_size
        self.cells: Dict[Cell, CellType] = {}
        self.edge_axes: Dict[Cell, int] = {}

    @classmethod
    def from_nodes(
        cls, nodes: Sequence[Node], cell_size: float, padding: float
    ) -> "ObstacleGrid":
        """
        Build a grid covering all nodes plus padding, with node bodies marked.

        Args:
            nodes: Positioned nodes.
            cell_size: Grid resolution.
            padding: Free border kept around the nodes for routing corridors.
        """
        if not nodes:
            return cls(0, 0, 1, 1, cell_size)

        min_x = min(node.x for node in nodes) - padding
        min_y = min(node.y for node in nodes) - padding
        max_x = max(node.x + node.width for node in nodes) + padding
        max_y = max(node.y + node.height for node in nodes) + padding

        origin_col = math.floor(min_x / cell_size + EPSILON)
        origin_row = math.floor(min_y / cell_size + EPSILON)
        far_col = math.ceil(max_x / cell_size - EPSILON)
        far_row = math.ceil(max_y / cell_size - EPSILON)

        grid = cls(
            origin_col,
            origin_row,
            far_col - origin_col + 1,
            far_row - origin_row + 1,
            cell_size,
        )
        for node in nodes:
            grid.mark_rect(node.bounds)
        return grid

    def to_cell(self, point: Point) -> Cell:
        """Nearest cell to a coordinate, clamped to the grid."""
        col = round(point.x / self.cell_size) - self.origin_col
        row = round(point.y / self.cell_size) - self.origin_row
        return (
            min(max(col, 0), self.columns - 1),
            min(max(row, 0), self.rows - 1),
        )

    def to_point(self, cell: Cell) -> Point:
        """Coordinate of a cell."""
        col, row = cell
        return Point(
            (self.origin_col + col) * self.cell_size,
            (self.origin_row + row) * self.cell_size,
        )

    def in_bounds(self, cell: Cell) -> bool:
        col, row = cell
        return 0 <= col < self.columns and 0 <= row < self.rows

    def mark_rect(self, rect: Rect) -> None:
        """Mark every cell inside or on the border of a rectangle as NODE."""
        col1 = math.ceil(rect.x / self.cell_size - EPSILON) - self.origin_col
        col2 = math.floor(rect.x2 / self.cell_size + EPSILON) - self.origin_col
        row1 = math.ceil(rect.y / self.cell_size - EPSILON) - self.origin_row
        row2 = math.floor(rect.y2 / self.cell_size + EPSILON) - self.origin_row

        for col in range(max(col1, 0), min(col2, self.columns - 1) + 1):
            for row in range(max(row1, 0), min(row2, self.rows - 1) + 1):
                self.cells[(col, row)] = CellType.NODE

    def mark_path(self, points: Sequence[Point]) -> None:
        """
        Mark the cells along a routed polyline as EDGE.

        Each cell also remembers the axes the polyline runs along through it,
        so later routes can cross it at a right angle but not follow it.
        """
        if len(points) == 1:
            self._mark_edge_cell(self.to_cell(points[0]), AXIS_BOTH)
            return
        for start, end in zip(points, points[1:]):
            axis = _segment_axis(self.to_cell(start), self.to_cell(end))
            for cell in self.path_cells([start, end]):
                self._mark_edge_cell(cell, axis)

    def _mark_edge_cell(self, cell: Cell, axis: int) -> None:
        if self.is_node(cell):
            return
        self.cells[cell] = CellType.EDGE
        self.edge_axes[cell] = self.edge_axes.get(cell, 0) | axis

    def path_cells(self, points: Sequence[Point]) -> List[Cell]:
        """Cells visited by a polyline of grid-aligned points."""
        cells: List[Cell] = []
        for start, end in zip(points, points[1:]):
            a = self.to_cell(start)
            b = self.to_cell(end)
            steps = max(abs(b[0] - a[0]), abs(b[1] - a[1]))
            step_col = _sign(b[0] - a[0])
            step_row = _sign(b[1] - a[1])
            for k in range(steps + 1):
                cells.append((a[0] + k * step_col, a[1] + k * step_row))
        return cells

    def get_cell_type(self, cell: Cell) -> CellType:
        return self.cells.get(cell, CellType.EMPTY)

    def is_node(self, cell: Cell) -> bool:
        return self.get_cell_type(cell) == CellType.NODE

    def is_passable(self, cell: Cell) -> bool:
        """Check if a route may enter a cell at all (inside, not a node)."""
        return self.in_bounds(cell) and not self.is_node(cell)

    def runs_along(self, cell: Cell, move: Tuple[int, int]) -> bool:
        """Check if a routed edge passes through ``cell`` along ``move``'s axis."""
        return bool(self.edge_axes.get(cell, 0) & _move_axis(move))

    def extension(self, cell: Cell, side: PortSide) -> Cell:
        """
        Extend outward from a connection cell to the nearest routable cell.

        Steps away from the node through ``side`` at least once and keeps
        going while the cell is covered by a node body, so tightly packed
        neighbours do not swallow the stub. Stops at the grid border.
        """
        step_col, step_row = side.normal
        current = cell
        while True:
            candidate = (current[0] + step_col, current[1] + step_row)
            if not self.in_bounds(candidate):
                return current
            current = candidate
            if not self.is_node(current):
                return current


def _sign(value: int) -> int:
    return (value > 0) - (value < 0)


def _move_axis(move: Tuple[int, int]) -> int:
    if move[1] == 0:
        return AXIS_HORIZONTAL
    if move[0] == 0:
        return AXIS_VERTICAL
    return AXIS_BOTH


def _segment_axis(a: Cell, b: Cell) -> int:
    if a == b:
        return AXIS_BOTH
    return _move_axis((b[0] - a[0], b[1] - a[1]))
