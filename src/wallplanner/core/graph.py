"""Graph store for the wall graph.

This module owns the normalized entity maps (vertices, walls and the
derived rooms) and exposes structural CRUD with referential integrity.
A ``SpatialGraph`` is immutable: every mutation returns a new graph and
a rejected mutation raises before anything is built, so the caller's
graph is never partially modified.

Adjacency is computed on demand from the flat maps and cached per graph
instance; entities never hold references to each other.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from functools import cached_property
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from ..geom.snap import distance
from .errors import DegenerateGeometry, DuplicateId, InvalidReference, StructuralConflict
from .model import Edge, Point, Surface, Vertex

LOGGER = logging.getLogger(__name__)

# Global parameters for algorithm sensitivity
EPSILON = 1e-9  # Walls shorter than this are zero-length


@dataclass(frozen=True)
class SpatialGraph:
    """Vertices, walls and rooms of a floor plan.

    Attributes:
        vertices: Mapping of vertex ID to Vertex objects.
        edges: Mapping of edge ID to Edge objects.
        surfaces: Mapping of surface ID to Surface objects.
        surface_id_high_water: Highest surface ID ever assigned in the
            session. Not part of equality.
    """

    vertices: Mapping[str, Vertex] = field(default_factory=dict)
    edges: Mapping[str, Edge] = field(default_factory=dict)
    surfaces: Mapping[int, Surface] = field(default_factory=dict)
    surface_id_high_water: int = field(default=0, compare=False)

    # ------------------------------------------------------------------ #
    # Cached indexes
    # ------------------------------------------------------------------ #

    @cached_property
    def _incidence(self) -> Dict[str, Tuple[str, ...]]:
        incidence: Dict[str, List[str]] = {vertex_id: [] for vertex_id in self.vertices}
        for edge in self.edges.values():
            incidence.setdefault(edge.start_vertex_id, []).append(edge.id)
            incidence.setdefault(edge.end_vertex_id, []).append(edge.id)
        return {vertex_id: tuple(edge_ids) for vertex_id, edge_ids in incidence.items()}

    @cached_property
    def _pairs(self) -> Dict[frozenset, str]:
        return {edge.pair: edge.id for edge in self.edges.values()}

    # ------------------------------------------------------------------ #
    # Queries
    # ------------------------------------------------------------------ #

    def get_vertex(self, vertex_id: str) -> Optional[Vertex]:
        return self.vertices.get(vertex_id)

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        return self.edges.get(edge_id)

    def get_surface(self, surface_id: int) -> Optional[Surface]:
        return self.surfaces.get(surface_id)

    def get_surfaces(self) -> List[Surface]:
        """All rooms, ordered by ID."""
        return [self.surfaces[key] for key in sorted(self.surfaces)]

    def has_vertex(self, vertex_id: str) -> bool:
        return vertex_id in self.vertices

    def has_edge(self, edge_id: str) -> bool:
        return edge_id in self.edges

    def has_id(self, entity_id: str) -> bool:
        """Check if a vertex or wall already uses ``entity_id``."""
        return entity_id in self.vertices or entity_id in self.edges

    def incident_edges(self, vertex_id: str) -> List[Edge]:
        """Walls touching a vertex.

        Raises:
            InvalidReference: If the vertex doesn't exist.
        """
        if vertex_id not in self.vertices:
            raise InvalidReference(f"Vertex '{vertex_id}' does not exist")
        return [self.edges[edge_id] for edge_id in self._incidence.get(vertex_id, ())]

    def neighbors(self, vertex_id: str) -> List[str]:
        """IDs of the vertices joined to ``vertex_id`` by a wall."""
        return [edge.other_end(vertex_id) for edge in self.incident_edges(vertex_id)]

    def degree(self, vertex_id: str) -> int:
        return len(self.incident_edges(vertex_id))

    def find_edge_between(self, vertex_a: str, vertex_b: str) -> Optional[Edge]:
        edge_id = self._pairs.get(frozenset((vertex_a, vertex_b)))
        return self.edges[edge_id] if edge_id is not None else None

    def isolated_vertices(self) -> List[Vertex]:
        return [v for v in self.vertices.values() if not self._incidence.get(v.id)]

    def edge_endpoints(self, edge_id: str) -> Tuple[Vertex, Vertex]:
        edge = self.edges.get(edge_id)
        if edge is None:
            raise InvalidReference(f"Edge '{edge_id}' does not exist")
        return self.vertices[edge.start_vertex_id], self.vertices[edge.end_vertex_id]

    def edge_length(self, edge_id: str) -> float:
        start, end = self.edge_endpoints(edge_id)
        return distance(start, end)

    def surfaces_containing_edge(self, edge_id: str) -> List[Surface]:
        return [s for s in self.get_surfaces() if edge_id in s.edge_ids]

    def counts(self) -> Dict[str, int]:
        return {
            "vertices": len(self.vertices),
            "edges": len(self.edges),
            "surfaces": len(self.surfaces),
        }

    # ------------------------------------------------------------------ #
    # Structural mutations
    # ------------------------------------------------------------------ #

    def add_vertex(self, vertex: Vertex) -> "SpatialGraph":
        """Return a new graph with ``vertex`` inserted.

        Raises:
            DuplicateId: If the ID is already used by a vertex or wall.
        """
        if self.has_id(vertex.id):
            raise DuplicateId(f"ID '{vertex.id}' already exists")

        new_vertices = dict(self.vertices)
        new_vertices[vertex.id] = vertex
        LOGGER.debug("Added vertex %s at (%s, %s)", vertex.id, vertex.x, vertex.y)
        return replace(self, vertices=new_vertices)

    def _check_new_edge(self, edge: Edge) -> None:
        if self.has_id(edge.id):
            raise DuplicateId(f"ID '{edge.id}' already exists")
        for vertex_id in edge.vertex_ids:
            if vertex_id not in self.vertices:
                raise InvalidReference(
                    f"Edge '{edge.id}' references nonexistent vertex '{vertex_id}'"
                )
        if edge.start_vertex_id == edge.end_vertex_id:
            raise DegenerateGeometry(f"Edge '{edge.id}' starts and ends at the same vertex")
        start = self.vertices[edge.start_vertex_id]
        end = self.vertices[edge.end_vertex_id]
        if distance(start, end) < EPSILON:
            raise DegenerateGeometry(f"Edge '{edge.id}' has zero length")
        existing = self._pairs.get(edge.pair)
        if existing is not None:
            raise StructuralConflict(
                f"Vertices '{edge.start_vertex_id}' and '{edge.end_vertex_id}' "
                f"are already joined by edge '{existing}'"
            )

    def add_edge(self, edge: Edge) -> "SpatialGraph":
        """Return a new graph with ``edge`` inserted.

        Raises:
            DuplicateId: If the ID is already used.
            InvalidReference: If an endpoint doesn't exist.
            DegenerateGeometry: If the wall would have zero length.
            StructuralConflict: If the two vertices are already joined.
        """
        self._check_new_edge(edge)

        new_edges = dict(self.edges)
        new_edges[edge.id] = edge
        LOGGER.debug("Added edge %s (%s-%s)", edge.id, edge.start_vertex_id, edge.end_vertex_id)
        return replace(self, edges=new_edges)

    def _without_edges(self, removed: Iterable[str], vertices: Mapping[str, Vertex]) -> "SpatialGraph":
        removed = set(removed)
        new_edges = {k: v for k, v in self.edges.items() if k not in removed}
        # Rooms bounded by a removed wall no longer exist
        new_surfaces = {
            k: s for k, s in self.surfaces.items() if not removed.intersection(s.edge_ids)
        }
        return replace(self, vertices=vertices, edges=new_edges, surfaces=new_surfaces)

    def remove_vertex(self, vertex_id: str) -> "SpatialGraph":
        """Return a new graph without the vertex and every wall touching it.

        Raises:
            InvalidReference: If the vertex doesn't exist.
        """
        if vertex_id not in self.vertices:
            raise InvalidReference(f"Vertex '{vertex_id}' does not exist")

        cascaded = self._incidence.get(vertex_id, ())
        new_vertices = {k: v for k, v in self.vertices.items() if k != vertex_id}
        LOGGER.debug("Removed vertex %s (cascaded edges: %s)", vertex_id, list(cascaded))
        return self._without_edges(cascaded, new_vertices)

    def remove_edge(self, edge_id: str) -> "SpatialGraph":
        """Return a new graph without the wall; its endpoints are kept.

        Raises:
            InvalidReference: If the wall doesn't exist.
        """
        if edge_id not in self.edges:
            raise InvalidReference(f"Edge '{edge_id}' does not exist")

        LOGGER.debug("Removed edge %s", edge_id)
        return self._without_edges((edge_id,), self.vertices)

    def split_edge(
        self,
        edge_id: str,
        point: Point,
        vertex_id: str,
        first_edge_id: str,
        second_edge_id: str,
    ) -> "SpatialGraph":
        """Replace a wall with two walls meeting at a new vertex.

        The original wall ID is retired. The first new wall runs from the
        original start to the new vertex, the second from the new vertex
        to the original end.

        Raises:
            InvalidReference: If the wall doesn't exist.
            DuplicateId: If any new ID is already used or repeated.
            DegenerateGeometry: If ``point`` coincides with an endpoint.
        """
        edge = self.edges.get(edge_id)
        if edge is None:
            raise InvalidReference(f"Edge '{edge_id}' does not exist")

        new_ids = (vertex_id, first_edge_id, second_edge_id)
        if len(set(new_ids)) != len(new_ids):
            raise DuplicateId(f"Split IDs must be distinct, got: {new_ids}")
        for new_id in new_ids:
            if self.has_id(new_id):
                raise DuplicateId(f"ID '{new_id}' already exists")

        start, end = self.edge_endpoints(edge_id)
        if distance(point, start) < EPSILON or distance(point, end) < EPSILON:
            raise DegenerateGeometry(
                f"Split point ({point.x}, {point.y}) coincides with an endpoint of edge '{edge_id}'"
            )

        graph = self.remove_edge(edge_id)
        graph = graph.add_vertex(Vertex(vertex_id, point.x, point.y))
        graph = graph.add_edge(Edge(first_edge_id, edge.start_vertex_id, vertex_id))
        graph = graph.add_edge(Edge(second_edge_id, vertex_id, edge.end_vertex_id))
        return graph

    def clear(self) -> "SpatialGraph":
        """Return an empty graph that keeps the surface ID high-water mark."""
        return SpatialGraph(surface_id_high_water=self.surface_id_high_water)

    # ------------------------------------------------------------------ #
    # Derived rooms
    # ------------------------------------------------------------------ #

    def with_surfaces(self, surfaces: Mapping[int, Surface], high_water: int) -> "SpatialGraph":
        """Return a new graph carrying a freshly detected set of rooms."""
        high_water = max(high_water, self.surface_id_high_water, max(surfaces, default=0))
        return replace(self, surfaces=dict(surfaces), surface_id_high_water=high_water)

    def with_label(self, surface_id: int, label: Optional[str]) -> "SpatialGraph":
        """Return a new graph with a room renamed.

        Raises:
            InvalidReference: If the room doesn't exist.
        """
        surface = self.surfaces.get(surface_id)
        if surface is None:
            raise InvalidReference(f"Surface '{surface_id}' does not exist")

        new_surfaces = dict(self.surfaces)
        new_surfaces[surface_id] = replace(surface, label=label)
        return replace(self, surfaces=new_surfaces)
