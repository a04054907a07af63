from __future__ import annotations

import pytest

from wallplanner.core.graph import SpatialGraph
from wallplanner.core.model import Edge, Vertex
from wallplanner.engine.commands import AddEdge, AddVertex
from wallplanner.engine.history import CommandManager

SQUARE_VERTICES = {"A": (0.0, 0.0), "B": (100.0, 0.0), "C": (100.0, 100.0), "D": (0.0, 100.0)}
SQUARE_EDGES = [("AB", "A", "B"), ("BC", "B", "C"), ("CD", "C", "D"), ("DA", "D", "A")]

SECOND_SQUARE_VERTICES = {
    "E": (300.0, 0.0),
    "F": (400.0, 0.0),
    "G": (400.0, 100.0),
    "H": (300.0, 100.0),
}
SECOND_SQUARE_EDGES = [("EF", "E", "F"), ("FG", "F", "G"), ("GH", "G", "H"), ("HE", "H", "E")]


def draw(manager: CommandManager, vertices: dict, edges: list) -> CommandManager:
    """Dispatch one AddVertex per vertex, then one AddEdge per wall."""
    for vertex_id, (x, y) in vertices.items():
        manager.dispatch(AddVertex(Vertex(vertex_id, x, y)))
    for edge_id, start, end in edges:
        manager.dispatch(AddEdge(Edge(edge_id, start, end)))
    return manager


def build_graph(vertices: dict, edges: list) -> SpatialGraph:
    """Build a graph straight through the store, without room detection."""
    graph = SpatialGraph()
    for vertex_id, (x, y) in vertices.items():
        graph = graph.add_vertex(Vertex(vertex_id, x, y))
    for edge_id, start, end in edges:
        graph = graph.add_edge(Edge(edge_id, start, end))
    return graph


@pytest.fixture
def manager():
    return CommandManager()


@pytest.fixture
def square(manager):
    """Manager holding Scenario A: one 100x100 room."""
    return draw(manager, SQUARE_VERTICES, SQUARE_EDGES)


@pytest.fixture
def split_square(square):
    """Manager holding Scenario B: the square cut by the diagonal A-C."""
    square.dispatch(AddEdge(Edge("AC", "A", "C")))
    return square


@pytest.fixture
def two_squares(manager):
    """Manager holding Scenario C: two disjoint rooms."""
    draw(manager, SQUARE_VERTICES, SQUARE_EDGES)
    return draw(manager, SECOND_SQUARE_VERTICES, SECOND_SQUARE_EDGES)
