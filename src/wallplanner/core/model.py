"""Core data models for wall graph planning.

This module defines the fundamental data structures used to represent
a drawn floor plan: vertices joined by walls (edges), and the rooms
(surfaces) derived from the closed regions they enclose.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Point:
    """Represents a 2D point in space.

    Attributes:
        x: The x-coordinate of the point.
        y: The y-coordinate of the point.
    """

    x: float
    y: float


@dataclass(frozen=True)
class Vertex:
    """Represents a wall endpoint.

    Attributes:
        id: Unique identifier for the vertex.
        x: The x-coordinate of the vertex.
        y: The y-coordinate of the vertex.
    """

    id: str
    x: float
    y: float

    @property
    def point(self) -> Point:
        return Point(self.x, self.y)


@dataclass(frozen=True)
class Edge:
    """Represents an undirected wall between two vertices.

    Endpoints are referenced by id only; coordinates always come from
    the vertex map of the owning graph.

    Attributes:
        id: Unique identifier for the edge.
        start_vertex_id: ID of the vertex the wall was drawn from.
        end_vertex_id: ID of the vertex the wall was drawn to.
    """

    id: str
    start_vertex_id: str
    end_vertex_id: str

    @property
    def vertex_ids(self) -> tuple[str, str]:
        return (self.start_vertex_id, self.end_vertex_id)

    @property
    def pair(self) -> frozenset[str]:
        """Unordered endpoint pair, used to reject duplicate walls."""
        return frozenset(self.vertex_ids)

    def touches(self, vertex_id: str) -> bool:
        return vertex_id == self.start_vertex_id or vertex_id == self.end_vertex_id

    def other_end(self, vertex_id: str) -> str:
        """Return the endpoint opposite to ``vertex_id``.

        Raises:
            ValueError: If ``vertex_id`` is not an endpoint of this edge.
        """
        if vertex_id == self.start_vertex_id:
            return self.end_vertex_id
        if vertex_id == self.end_vertex_id:
            return self.start_vertex_id
        raise ValueError(f"Vertex '{vertex_id}' is not an endpoint of edge '{self.id}'")


@dataclass(frozen=True)
class Surface:
    """Represents a room derived from an enclosed region of the wall graph.

    Surfaces are never built by hand: the face detector produces them
    after every structural change.

    Attributes:
        id: Session-unique integer identifier of the room.
        edge_ids: IDs of the bounding walls, in boundary order.
        area: Signed area of the boundary (positive for rooms).
        centroid: Area centroid of the boundary polygon.
        label: User-assigned name, if any.
    """

    id: int
    edge_ids: tuple[str, ...]
    area: float
    centroid: Point
    label: str | None = None

    @property
    def name(self) -> str:
        return self.label if self.label else f"Room {self.id}"

    @property
    def signature(self) -> tuple[str, ...]:
        return surface_signature(self.edge_ids)


def surface_signature(edge_ids) -> tuple[str, ...]:
    """Canonical identity of a room: its member edge ids, sorted."""
    return tuple(sorted(set(edge_ids)))
