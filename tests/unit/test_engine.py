"""Unit tests for the layout engine entry points."""

import copy

import pytest

from archlayout import (
    ConfigurationError,
    Edge,
    InvalidInputError,
    LayoutConfig,
    LayoutEngine,
    Node,
    Port,
    PortSide,
    layout,
    layout_in_place,
)


class TestLayout:
    """Tests for the non-mutating layout call."""

    def test_inputs_not_modified(self, two_nodes, fast_config):
        nodes, edges = two_nodes
        before = copy.deepcopy((nodes, edges))
        layout(nodes, edges, fast_config)
        assert (nodes, edges) == before

    def test_result_has_copies(self, two_nodes, fast_config):
        nodes, edges = two_nodes
        result = layout(nodes, edges, fast_config)
        assert len(result.nodes) == 2
        assert len(result.edges) == 1
        assert result.nodes[0] is not nodes[0]
        assert result.nodes[0].id == "A"
        assert len(result.edges[0].waypoints) >= 2

    def test_accepts_tuples(self, fast_config):
        nodes = [Node("a", 40, 40), Node("b", 40, 40)]
        result = layout(nodes, [(0, 1)], fast_config)
        assert result.edges[0].source == 0
        assert result.edges[0].target == 1

    def test_rejects_malformed_edge(self):
        with pytest.raises(InvalidInputError):
            layout([Node("a", 40, 40)], [(0,)])

    def test_empty_graph(self):
        result = layout([], [])
        assert result.nodes == []
        assert result.canvas_width == 460
        assert result.canvas_height == 360
        assert result.warnings == []

    def test_single_node(self):
        result = layout([Node("solo", 70, 30)], [])
        node = result.nodes[0]
        assert node.x >= 0 and node.y >= 0
        assert node.x + node.width <= result.canvas_width

    def test_invalid_node_raises(self):
        with pytest.raises(InvalidInputError):
            layout([Node("a", -1, 10)], [])

    def test_self_loop_raises(self):
        with pytest.raises(InvalidInputError):
            layout([Node("a", 10, 10)], [Edge(0, 0)])

    def test_invalid_config_raises(self):
        with pytest.raises(ConfigurationError):
            layout([Node("a", 10, 10)], [], LayoutConfig(grid_cell_size=0))

    def test_engine_validates_config_on_creation(self):
        with pytest.raises(ConfigurationError):
            LayoutEngine(LayoutConfig(min_spacing=-1))


class TestLayoutInPlace:
    """Tests for the in-place layout call."""

    def test_writes_results_back(self, two_nodes, fast_config):
        nodes, edges = two_nodes
        report = layout_in_place(nodes, edges, fast_config)
        assert report.ok
        assert report.canvas_width >= 400
        assert len(edges[0].waypoints) >= 2

    def test_invalid_input_leaves_buffers_untouched(self):
        nodes = [Node("a", 40, 40, x=7, y=9), Node("b", 0, 40)]
        edges = [Edge(0, 1)]
        report = layout_in_place(nodes, edges)
        assert not report.ok
        assert isinstance(report.error, InvalidInputError)
        assert (nodes[0].x, nodes[0].y) == (7, 9)
        assert edges[0].waypoints == []

    def test_invalid_config_reported(self, two_nodes):
        nodes, edges = two_nodes
        report = layout_in_place(nodes, edges, LayoutConfig(cooling_rate=2))
        assert isinstance(report.error, ConfigurationError)
        assert edges[0].waypoints == []

    def test_float_iterations_from_json_reported(self, two_nodes):
        """A wrongly typed setting is reported, not raised mid-computation."""
        nodes, edges = two_nodes
        config = LayoutConfig.from_dict({"iterations": 150.0})
        report = layout_in_place(nodes, edges, config)
        assert isinstance(report.error, ConfigurationError)
        assert (nodes[0].x, nodes[0].y) == (0, 0)
        assert edges[0].waypoints == []

    def test_config_changed_after_construction_reported(self, two_nodes):
        nodes, edges = two_nodes
        engine = LayoutEngine(LayoutConfig(iterations=10))
        engine.config.separation_sweeps = None
        report = engine.layout_in_place(nodes, edges)
        assert isinstance(report.error, ConfigurationError)

    def test_untyped_port_index_reported(self):
        nodes = [
            Node("a", 40, 40, ports=[Port(PortSide.TOP, None)]),
            Node("b", 40, 40),
        ]
        edges = [Edge(0, 1)]
        report = layout_in_place(nodes, edges)
        assert isinstance(report.error, InvalidInputError)
        assert edges[0].waypoints == []

    def test_requires_edge_objects(self, fast_config):
        nodes = [Node("a", 40, 40), Node("b", 40, 40)]
        report = layout_in_place(nodes, [(0, 1)], fast_config)
        assert isinstance(report.error, InvalidInputError)

    def test_report_raise_for_error(self):
        report = layout_in_place([Node("a", 10, 10)], [Edge(0, 3)])
        with pytest.raises(InvalidInputError):
            report.raise_for_error()


class TestStrategies:
    """Tests for pluggable strategies."""

    def test_custom_placement(self):
        class Diagonal:
            def place(self, nodes, edges, config):
                for i, node in enumerate(nodes):
                    node.x = i * 200
                    node.y = i * 200

        config = LayoutConfig(iterations=0)
        engine = LayoutEngine(config, placement=Diagonal())
        nodes = [Node("a", 40, 40), Node("b", 40, 40)]
        result = engine.layout(nodes, [Edge(0, 1)])
        dx = result.nodes[1].x - result.nodes[0].x
        dy = result.nodes[1].y - result.nodes[0].y
        assert (dx, dy) == (200, 200)

    def test_custom_router(self, two_nodes, fast_config):
        class Recorder:
            calls = 0

            def route(self, nodes, edges, config):
                Recorder.calls += 1
                for edge in edges:
                    a = nodes[edge.source].center
                    edge.waypoints = [a, a]
                return []

        nodes, edges = two_nodes
        LayoutEngine(fast_config, routing=Recorder()).layout(nodes, edges)
        assert Recorder.calls == 1

    def test_engine_is_reusable(self, two_nodes, fast_config):
        """Each call is independent of earlier ones."""
        nodes, edges = two_nodes
        engine = LayoutEngine(fast_config)
        first = engine.layout(nodes, edges)
        second = engine.layout(nodes, edges)
        assert [(n.x, n.y) for n in first.nodes] == [(n.x, n.y) for n in second.nodes]
