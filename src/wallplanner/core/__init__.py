"""Core data models for wall graph planning."""

from .errors import (
    DegenerateGeometry,
    DuplicateId,
    GraphError,
    InvalidReference,
    InvariantViolation,
    NestedDispatch,
    StructuralConflict,
)
from .graph import SpatialGraph
from .model import Edge, Point, Surface, Vertex
from .state import PlanState
from .topology import build_room_graph, build_wall_adjacency

__all__ = [
    "Edge",
    "Point",
    "Surface",
    "Vertex",
    "SpatialGraph",
    "PlanState",
    "GraphError",
    "DuplicateId",
    "InvalidReference",
    "DegenerateGeometry",
    "StructuralConflict",
    "InvariantViolation",
    "NestedDispatch",
    "build_wall_adjacency",
    "build_room_graph",
]
