"""Room detection by planar face traversal.

Every wall is split into two directed half-edges. Outgoing half-edges are
sorted by direction angle around each vertex; a walk that arrives at a
vertex continues on the half-edge that comes next clockwise after the
incoming one's twin. Each such walk closes on itself and traces exactly one
face, and every half-edge belongs to exactly one face, so the whole pass
is linear in the size of the graph (plus the per-vertex sort).

Under this rule bounded faces come out with positive signed area and the
outer boundary of each connected cluster of walls comes out negative,
which is how it is excluded.
"""

from __future__ import annotations

import logging
import math
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Mapping, Optional, Tuple

from ..core.errors import InvariantViolation
from ..core.graph import SpatialGraph
from ..core.model import Point, Surface, surface_signature
from ..geom.polygon import polygon_centroid, signed_polygon_area

LOGGER = logging.getLogger(__name__)

# Global parameters for algorithm sensitivity
MIN_SURFACE_AREA = 1e-6  # Faces at or below this are outer boundaries or degenerate
MIN_SURFACE_EDGES = 3


@dataclass(frozen=True)
class HalfEdge:
    """One traversal direction of a wall."""

    origin: str
    target: str
    edge_id: str
    angle: float
    length: float


@dataclass(frozen=True)
class TracedFace:
    """A closed walk produced by the traversal.

    Attributes:
        half_edges: The directed half-edges of the walk, in order.
        vertex_ids: Origins of those half-edges (the boundary ring).
        area: Signed Shoelace area of the ring.
        centroid: Area centroid of the ring.
    """

    half_edges: Tuple[HalfEdge, ...]
    vertex_ids: Tuple[str, ...]
    area: float
    centroid: Point

    @property
    def edge_ids(self) -> Tuple[str, ...]:
        """Member walls in boundary order, without filament walls.

        A wall walked in both directions within one face has the same
        face on both sides: it is a dangling wall or a bridge, not part
        of the room boundary.
        """
        counts = Counter(h.edge_id for h in self.half_edges)
        seen = []
        for half_edge in self.half_edges:
            if counts[half_edge.edge_id] == 1:
                seen.append(half_edge.edge_id)
        return tuple(seen)

    @property
    def is_filament(self) -> bool:
        return not self.edge_ids

    @property
    def is_outer(self) -> bool:
        return self.area <= MIN_SURFACE_AREA

    @property
    def is_room(self) -> bool:
        return (
            not self.is_filament
            and not self.is_outer
            and len(self.edge_ids) >= MIN_SURFACE_EDGES
        )


class FaceDetector:
    """Traces faces of a wall graph.

    Args:
        graph: The graph to analyze. Only vertices and walls are read.
    """

    def __init__(self, graph: SpatialGraph):
        self.graph = graph
        self._outgoing: Dict[str, List[HalfEdge]] = {}
        self._position: Dict[Tuple[str, str], int] = {}
        self._build_rotation()

    def _build_rotation(self) -> None:
        vertices = self.graph.vertices
        outgoing: Dict[str, List[HalfEdge]] = {}

        for edge in self.graph.edges.values():
            start = vertices.get(edge.start_vertex_id)
            end = vertices.get(edge.end_vertex_id)
            if start is None or end is None:
                raise InvariantViolation(f"Edge '{edge.id}' references a missing vertex")

            length = math.hypot(end.x - start.x, end.y - start.y)
            forward = HalfEdge(
                start.id, end.id, edge.id, math.atan2(end.y - start.y, end.x - start.x), length
            )
            backward = HalfEdge(
                end.id, start.id, edge.id, math.atan2(start.y - end.y, start.x - end.x), length
            )
            outgoing.setdefault(start.id, []).append(forward)
            outgoing.setdefault(end.id, []).append(backward)

        for vertex_id, half_edges in outgoing.items():
            # Ties only occur for overlapping collinear walls
            half_edges.sort(key=lambda h: (h.angle, h.length, h.edge_id))
            for index, half_edge in enumerate(half_edges):
                self._position[(vertex_id, half_edge.edge_id)] = index

        self._outgoing = outgoing

    def twin(self, half_edge: HalfEdge) -> HalfEdge:
        """Return the opposite direction of ``half_edge``.

        Raises:
            InvariantViolation: If the twin is missing.
        """
        index = self._position.get((half_edge.target, half_edge.edge_id))
        if index is None:
            raise InvariantViolation(
                f"Half-edge {half_edge.origin}->{half_edge.target} of edge "
                f"'{half_edge.edge_id}' has no twin"
            )
        return self._outgoing[half_edge.target][index]

    def next_half_edge(self, half_edge: HalfEdge) -> HalfEdge:
        """Half-edge following ``half_edge`` along the same face.

        Rotations are stored counter-clockwise, so the next half-edge
        clockwise from the twin is the previous entry, wrapping around.
        """
        twin = self.twin(half_edge)
        rotation = self._outgoing[twin.origin]
        index = self._position[(twin.origin, twin.edge_id)]
        return rotation[(index - 1) % len(rotation)]

    def _trace(self, start: HalfEdge, visited: set) -> TracedFace:
        walk = []
        current = start
        limit = 2 * len(self.graph.edges) + 1

        while True:
            key = (current.origin, current.edge_id)
            if key in visited:
                raise InvariantViolation(
                    f"Half-edge {current.origin}->{current.target} traversed twice"
                )
            visited.add(key)
            walk.append(current)
            current = self.next_half_edge(current)
            if current == start:
                break
            if len(walk) > limit:
                raise InvariantViolation("Face traversal did not close")

        vertex_ids = tuple(h.origin for h in walk)
        points = [self.graph.vertices[v].point for v in vertex_ids]
        return TracedFace(
            half_edges=tuple(walk),
            vertex_ids=vertex_ids,
            area=signed_polygon_area(points),
            centroid=polygon_centroid(points),
        )

    def trace_faces(self) -> List[TracedFace]:
        """Trace every face of the graph, outer boundaries included.

        Walls are visited in insertion order, start-to-end before
        end-to-start, so the result is deterministic.
        """
        visited: set = set()
        faces = []

        for edge in self.graph.edges.values():
            for origin in edge.vertex_ids:
                if (origin, edge.id) in visited:
                    continue
                start = self._outgoing[origin][self._position[(origin, edge.id)]]
                faces.append(self._trace(start, visited))

        return faces

    def rooms(self) -> List[TracedFace]:
        """Faces that qualify as rooms."""
        return [face for face in self.trace_faces() if face.is_room]


def reconcile_surfaces(
    faces: List[TracedFace],
    previous: Mapping[int, Surface],
    high_water: int,
) -> Tuple[Dict[int, Surface], int]:
    """Assign stable ids to freshly traced rooms.

    A face whose sorted member-edge set equals that of a previous room
    keeps the room's id and label. Any other face receives the next id
    after ``high_water``; ids are never reused.

    Args:
        faces: Room faces from the current pass.
        previous: Rooms from the previous pass.
        high_water: Highest id ever assigned in the session.

    Returns:
        Tuple of (surfaces by id, new high-water mark).
    """
    by_signature = {s.signature: s for s in previous.values()}
    high_water = max(high_water, max(previous, default=0))
    surfaces: Dict[int, Surface] = {}

    for face in faces:
        edge_ids = face.edge_ids
        existing = by_signature.pop(surface_signature(edge_ids), None)
        if existing is not None:
            surface_id = existing.id
            label = existing.label
        else:
            high_water += 1
            surface_id = high_water
            label = None

        surfaces[surface_id] = Surface(
            id=surface_id,
            edge_ids=edge_ids,
            area=face.area,
            centroid=face.centroid,
            label=label,
        )

    return surfaces, high_water


def detect_surfaces(graph: SpatialGraph, previous: Optional[Mapping[int, Surface]] = None) -> SpatialGraph:
    """Re-derive all rooms of ``graph`` and return the updated graph.

    Args:
        graph: Graph whose vertices and walls are current.
        previous: Rooms to reconcile ids against. Defaults to the rooms
            the graph already carries.

    Returns:
        A new graph with the reconciled rooms and high-water mark.

    Raises:
        InvariantViolation: If the graph is internally inconsistent.
    """
    if previous is None:
        previous = graph.surfaces

    faces = FaceDetector(graph).rooms()
    surfaces, high_water = reconcile_surfaces(faces, previous, graph.surface_id_high_water)

    kept = set(surfaces) & set(previous)
    LOGGER.debug(
        "Detected %d rooms (%d kept, %d new)", len(surfaces), len(kept), len(surfaces) - len(kept)
    )
    return graph.with_surfaces(surfaces, high_water)
