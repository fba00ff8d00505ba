"""Pytest configuration and shared fixtures for archlayout tests."""

import pytest

from archlayout import Edge, LayoutConfig, Node, Port, PortDirection, PortSide


@pytest.fixture
def fast_config():
    """Config with a short force simulation to keep tests quick."""
    return LayoutConfig(iterations=30)


@pytest.fixture
def two_nodes():
    """A 100x50 node connected to an 80x80 node."""
    nodes = [Node("A", 100, 50), Node("B", 80, 80)]
    edges = [Edge(0, 1)]
    return nodes, edges


@pytest.fixture
def four_port_node():
    """A 60x60 node with one port on every side."""
    return Node(
        "hub",
        60,
        60,
        ports=[
            Port(PortSide.TOP, direction=PortDirection.INPUT),
            Port(PortSide.RIGHT),
            Port(PortSide.BOTTOM),
            Port(PortSide.LEFT, direction=PortDirection.INPUT),
        ],
    )


@pytest.fixture
def service_graph():
    """A small architecture: gateway, three services, two stores, a queue."""
    nodes = [
        Node("gateway", 120, 40, ports=[Port(PortSide.BOTTOM)]),
        Node("auth", 80, 60),
        Node("orders", 100, 60),
        Node("billing", 90, 50),
        Node("users-db", 60, 80, attributes={"color": "khaki"}),
        Node("orders-db", 60, 80, attributes={"color": "khaki"}),
        Node("queue", 140, 30),
    ]
    edges = [
        Edge(0, 1),
        Edge(0, 2),
        Edge(0, 3),
        Edge(1, 4),
        Edge(2, 5),
        Edge(2, 6),
        Edge(3, 6),
    ]
    return nodes, edges


@pytest.fixture
def blocked_nodes():
    """Two nodes with a tall third node walled in between them."""
    return [
        Node("A", 40, 40, x=0, y=0),
        Node("C", 20, 80, x=60, y=-20),
        Node("B", 40, 40, x=100, y=0),
    ]
