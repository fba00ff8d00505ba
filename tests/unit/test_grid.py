"""Unit tests for the obstacle grid."""

from archlayout import CellType, Node, ObstacleGrid, PortSide
from archlayout.geometry import Point, Rect


class TestObstacleGridConstruction:
    """Tests for building grids from nodes."""

    def test_covers_nodes_and_padding(self):
        nodes = [Node("a", 40, 40), Node("b", 20, 20, x=100, y=60)]
        grid = ObstacleGrid.from_nodes(nodes, 5, 10)
        assert grid.to_point((0, 0)) == Point(-10, -10)
        assert grid.to_point((grid.columns - 1, grid.rows - 1)) == Point(130, 90)

    def test_origin_is_grid_aligned(self):
        """An off-grid node still gives a lattice on cell multiples."""
        grid = ObstacleGrid.from_nodes([Node("a", 10, 10, x=3, y=-2)], 5, 0)
        origin = grid.to_point((0, 0))
        assert origin == Point(0, -5)

    def test_node_cells_marked(self):
        """Cells inside and on the border of a node are blocked."""
        grid = ObstacleGrid.from_nodes([Node("a", 20, 10)], 5, 10)
        assert grid.is_node(grid.to_cell(Point(0, 0)))
        assert grid.is_node(grid.to_cell(Point(20, 10)))
        assert grid.is_node(grid.to_cell(Point(10, 5)))
        assert not grid.is_node(grid.to_cell(Point(25, 5)))
        assert grid.get_cell_type(grid.to_cell(Point(-5, 0))) == CellType.EMPTY

    def test_empty_node_list(self):
        grid = ObstacleGrid.from_nodes([], 5, 10)
        assert (grid.columns, grid.rows) == (1, 1)


class TestObstacleGridCells:
    """Tests for coordinate conversion and cell queries."""

    def test_to_cell_round_trip(self):
        grid = ObstacleGrid(-2, -2, 10, 10, 5)
        cell = grid.to_cell(Point(15, 5))
        assert cell == (5, 3)
        assert grid.to_point(cell) == Point(15, 5)

    def test_to_cell_clamps(self):
        grid = ObstacleGrid(0, 0, 4, 4, 5)
        assert grid.to_cell(Point(-100, 500)) == (0, 3)

    def test_in_bounds(self):
        grid = ObstacleGrid(0, 0, 4, 3, 5)
        assert grid.in_bounds((3, 2))
        assert not grid.in_bounds((4, 0))
        assert not grid.in_bounds((0, -1))

    def test_is_passable(self):
        """Only node cells and cells outside the grid stop a route."""
        grid = ObstacleGrid(0, 0, 10, 10, 5)
        grid.mark_rect(Rect(10, 10, 10, 10))
        grid.mark_path([Point(0, 40), Point(20, 40)])
        assert grid.is_passable((0, 0))
        assert not grid.is_passable((2, 2))
        assert grid.is_passable((1, 8))
        assert not grid.is_passable((20, 20))

    def test_mark_path_records_axes(self):
        """Routed cells remember which way the edge runs through them."""
        grid = ObstacleGrid(0, 0, 10, 10, 5)
        grid.mark_path([Point(0, 10), Point(20, 10), Point(20, 30)])
        assert grid.get_cell_type((2, 2)) == CellType.EDGE
        assert grid.runs_along((2, 2), (1, 0))
        assert not grid.runs_along((2, 2), (0, 1))
        assert grid.runs_along((4, 4), (0, 1))
        assert not grid.runs_along((4, 4), (-1, 0))
        # The corner runs both ways
        assert grid.runs_along((4, 2), (1, 0))
        assert grid.runs_along((4, 2), (0, -1))
        assert not grid.runs_along((7, 7), (1, 0))

    def test_mark_single_point_path(self):
        grid = ObstacleGrid(0, 0, 10, 10, 5)
        grid.mark_path([Point(15, 15)])
        assert grid.runs_along((3, 3), (1, 0))
        assert grid.runs_along((3, 3), (0, 1))

    def test_diagonal_moves_run_along_every_edge(self):
        grid = ObstacleGrid(0, 0, 10, 10, 5)
        grid.mark_path([Point(0, 10), Point(20, 10)])
        assert grid.runs_along((2, 2), (1, 1))

    def test_mark_path_keeps_node_cells(self):
        """Edges crossing a node do not overwrite its cells."""
        grid = ObstacleGrid(0, 0, 10, 10, 5)
        grid.mark_rect(Rect(10, 10, 10, 10))
        grid.mark_path([Point(0, 15), Point(40, 15)])
        assert grid.get_cell_type((3, 3)) == CellType.NODE
        assert grid.get_cell_type((5, 3)) == CellType.EDGE

    def test_path_cells(self):
        grid = ObstacleGrid(0, 0, 10, 10, 5)
        cells = grid.path_cells([Point(0, 0), Point(10, 0), Point(10, 10)])
        assert cells == [(0, 0), (1, 0), (2, 0), (2, 0), (2, 1), (2, 2)]


class TestExtension:
    """Tests for stub extension out of node bodies."""

    def test_one_step_outward(self):
        grid = ObstacleGrid.from_nodes([Node("a", 40, 40)], 5, 20)
        start = grid.to_cell(Point(40, 20))
        assert grid.to_point(grid.extension(start, PortSide.RIGHT)) == Point(45, 20)

    def test_each_side(self):
        grid = ObstacleGrid.from_nodes([Node("a", 40, 40)], 5, 20)
        top = grid.extension(grid.to_cell(Point(20, 0)), PortSide.TOP)
        left = grid.extension(grid.to_cell(Point(0, 20)), PortSide.LEFT)
        bottom = grid.extension(grid.to_cell(Point(20, 40)), PortSide.BOTTOM)
        assert grid.to_point(top) == Point(20, -5)
        assert grid.to_point(left) == Point(-5, 20)
        assert grid.to_point(bottom) == Point(20, 45)

    def test_extends_through_adjacent_node(self):
        """The stub passes through a neighbour touching the side."""
        nodes = [Node("a", 40, 40), Node("b", 40, 40, x=45)]
        grid = ObstacleGrid.from_nodes(nodes, 5, 20)
        start = grid.to_cell(Point(40, 20))
        assert grid.to_point(grid.extension(start, PortSide.RIGHT)) == Point(90, 20)

    def test_stops_at_grid_border(self):
        grid = ObstacleGrid.from_nodes([Node("a", 40, 40)], 5, 0)
        start = grid.to_cell(Point(40, 20))
        assert grid.extension(start, PortSide.RIGHT) == start
