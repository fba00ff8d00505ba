"""Unit tests for input validation."""

import pytest

from archlayout import Edge, InvalidInputError, Node, Port, PortSide
from archlayout.validation import collect_input_errors, validate_input


class TestValidateInput:
    """Tests for validate_input."""

    def test_valid_graph(self, two_nodes):
        nodes, edges = two_nodes
        validate_input(nodes, edges)

    def test_empty_graph_is_valid(self):
        validate_input([], [])

    @pytest.mark.parametrize("width,height", [(0, 10), (10, -1), (float("inf"), 10)])
    def test_bad_dimensions(self, width, height):
        """Widths and heights must be positive finite numbers."""
        with pytest.raises(InvalidInputError):
            validate_input([Node("n", width, height)], [])

    def test_nan_dimension(self):
        with pytest.raises(InvalidInputError, match="finite"):
            validate_input([Node("n", float("nan"), 10)], [])

    def test_too_many_ports(self):
        """At most eight ports per node."""
        node = Node("n", 10, 10, ports=[Port(PortSide.TOP, i) for i in range(9)])
        with pytest.raises(InvalidInputError, match="ports"):
            validate_input([node], [])

    def test_eight_ports_allowed(self):
        node = Node("n", 10, 10, ports=[Port(PortSide.TOP, i) for i in range(8)])
        validate_input([node], [])

    def test_negative_port_index(self):
        node = Node("n", 10, 10, ports=[Port(PortSide.TOP, -1)])
        with pytest.raises(InvalidInputError):
            validate_input([node], [])

    @pytest.mark.parametrize("index", [None, 1.0, "0", True])
    def test_port_index_must_be_int(self, index):
        """Port indices of the wrong type are input errors, not TypeErrors."""
        node = Node("n", 10, 10, ports=[Port(PortSide.TOP, index)])
        with pytest.raises(InvalidInputError, match="index must be an integer"):
            validate_input([node], [])

    def test_port_side_must_be_port_side(self):
        node = Node("n", 10, 10, ports=[Port("top")])
        with pytest.raises(InvalidInputError, match="invalid side"):
            validate_input([node], [])

    def test_port_must_be_port(self):
        node = Node("n", 10, 10, ports=[(PortSide.TOP, 0)])
        with pytest.raises(InvalidInputError, match="not a Port"):
            validate_input([node], [])

    def test_edge_out_of_range(self):
        nodes = [Node("a", 10, 10), Node("b", 10, 10)]
        with pytest.raises(InvalidInputError, match="out of range"):
            validate_input(nodes, [Edge(0, 2)])

    def test_negative_edge_index(self):
        nodes = [Node("a", 10, 10), Node("b", 10, 10)]
        with pytest.raises(InvalidInputError):
            validate_input(nodes, [Edge(-1, 0)])

    def test_self_loop_rejected(self):
        nodes = [Node("a", 10, 10)]
        with pytest.raises(InvalidInputError, match="self-loop"):
            validate_input(nodes, [Edge(0, 0)])


class TestCollectInputErrors:
    """Tests for collect_input_errors."""

    def test_collects_every_problem(self):
        nodes = [Node("a", 0, 10), Node("b", 10, 0)]
        errors = collect_input_errors(nodes, [Edge(0, 5)])
        assert len(errors) == 3

    def test_no_errors(self, two_nodes):
        nodes, edges = two_nodes
        assert collect_input_errors(nodes, edges) == []
