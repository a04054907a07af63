"""Point utilities for snapping and hit-testing.

This module provides the distance and proximity predicates used to turn
a raw cursor position into a world-space point: snapping onto existing
vertices, onto the grid, or onto the interior of an existing wall.

Anything with ``x`` and ``y`` attributes is accepted as a point.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Iterable, List, Optional, Tuple

from ..config import SCREEN_SNAP_RADIUS, DrawingSettings
from ..core.model import Point, Vertex

if TYPE_CHECKING:
    from ..core.graph import SpatialGraph

# Global parameters for algorithm sensitivity
EPSILON = 1e-9  # Tolerance for degenerate segments
LANDING_TOLERANCE = 1e-6  # Snapped points this close to a vertex or wall hit it


def distance(p, q) -> float:
    """Calculate Euclidean distance between two points."""
    return math.hypot(q.x - p.x, q.y - p.y)


def is_near_point(p, q, threshold: float) -> bool:
    """Check if two points are within ``threshold`` of each other."""
    return distance(p, q) <= threshold


def point_to_segment_distance(p, a, b) -> Tuple[float, Point, float]:
    """Distance from a point to the segment ``a``-``b``.

    Args:
        p: The point to measure from.
        a: Segment start.
        b: Segment end.

    Returns:
        Tuple of (distance, closest point on the segment, t), where t in
        [0, 1] is the position of the closest point along the segment.
    """
    dx = b.x - a.x
    dy = b.y - a.y
    length_sq = dx * dx + dy * dy

    if length_sq < EPSILON:
        return distance(p, a), Point(a.x, a.y), 0.0

    t = ((p.x - a.x) * dx + (p.y - a.y) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    closest = Point(a.x + t * dx, a.y + t * dy)
    return distance(p, closest), closest, t


def is_point_on_segment(p, a, b, threshold: float) -> bool:
    """Check if a point lands on the interior of the segment ``a``-``b``.

    Points within ``threshold`` of either endpoint are not on the
    interior: those belong to vertex snapping.
    """
    dist, _, _ = point_to_segment_distance(p, a, b)
    if dist > threshold:
        return False
    return distance(p, a) > threshold and distance(p, b) > threshold


def _round_half_up(value: float, resolution: float) -> float:
    return math.floor(value / resolution + 0.5) * resolution


def snap_to_grid(p, resolution: float) -> Point:
    """Round each coordinate to the nearest multiple of ``resolution``.

    Exact halves round up, so 50 and 150 on a 100 grid go to 100 and 200.
    """
    if resolution <= 0:
        return Point(p.x, p.y)
    return Point(_round_half_up(p.x, resolution), _round_half_up(p.y, resolution))


def snap_length(p, start, resolution: float) -> Point:
    """Stretch the segment ``start``-``p`` to a multiple of ``resolution``.

    The direction from ``start`` is kept, so diagonal walls also get
    round lengths. A cursor on ``start`` returns ``start``.
    """
    length = distance(start, p)
    if length < EPSILON:
        return Point(start.x, start.y)
    factor = _round_half_up(length, resolution) / length
    return Point(start.x + (p.x - start.x) * factor, start.y + (p.y - start.y) * factor)


def _closest_vertex(cursor, vertices: Iterable[Vertex]) -> Tuple[Optional[Vertex], float]:
    closest = None
    min_distance = math.inf
    for vertex in vertices:
        dist = distance(cursor, vertex)
        if dist < min_distance:
            min_distance = dist
            closest = vertex
    return closest, min_distance


def get_snapped_point(
    cursor,
    resolution: float,
    vertices: Iterable[Vertex],
    scale: float = 1.0,
    enabled: bool = True,
    snap_radius: float = SCREEN_SNAP_RADIUS,
    start=None,
) -> Point:
    """Resolve a cursor position to the point a click should use.

    Vertex snapping always wins: if an existing vertex lies within
    ``snap_radius`` screen pixels (converted to world units with
    ``scale``), its exact coordinates are returned. Otherwise, while a
    wall is being drawn from ``start``, the wall length is rounded to a
    multiple of ``resolution``; without a start point each coordinate is
    rounded to the nearest multiple of ``resolution``.

    Args:
        cursor: Raw world-space cursor position.
        resolution: Grid spacing.
        vertices: Existing vertices to snap onto.
        scale: Current zoom factor (screen pixels per world unit).
        enabled: Whether grid snapping is active.
        snap_radius: Vertex snap radius in screen pixels.
        start: First endpoint of the wall being drawn, if any.

    Returns:
        The snapped point; the raw cursor when nothing applies.
    """
    world_radius = snap_radius / scale
    closest, min_distance = _closest_vertex(cursor, vertices)
    if closest is not None and min_distance <= world_radius:
        return Point(closest.x, closest.y)

    if not enabled or resolution <= 0:
        return Point(cursor.x, cursor.y)

    if start is not None:
        return snap_length(cursor, start, resolution)
    return snap_to_grid(cursor, resolution)


def find_nearby_vertices(graph: "SpatialGraph", point, radius: float) -> List[Vertex]:
    """Find vertices within ``radius`` of a point, nearest first."""
    nearby = [v for v in graph.vertices.values() if distance(point, v) <= radius]
    nearby.sort(key=lambda v: distance(point, v))
    return nearby


@dataclass(frozen=True)
class SnapTarget:
    """Where a click resolves to.

    Attributes:
        kind: "vertex" (an existing vertex), "edge" (the interior of an
            existing wall, which should be split), or "free".
        point: Resolved world-space position.
        vertex_id: Target vertex for kind "vertex".
        edge_id: Target wall for kind "edge".
    """

    kind: str
    point: Point
    vertex_id: Optional[str] = None
    edge_id: Optional[str] = None


def _closest_wall(point, graph: "SpatialGraph", threshold: float) -> Tuple[Optional[str], Optional[Point]]:
    best_edge = None
    best_point = None
    best_distance = math.inf
    for edge in graph.edges.values():
        a = graph.vertices[edge.start_vertex_id]
        b = graph.vertices[edge.end_vertex_id]
        if not is_point_on_segment(point, a, b, threshold):
            continue
        dist, closest_point, _ = point_to_segment_distance(point, a, b)
        if dist < best_distance:
            best_distance = dist
            best_edge = edge.id
            best_point = closest_point
    return best_edge, best_point


def resolve_click(
    cursor,
    graph: "SpatialGraph",
    settings: DrawingSettings = DrawingSettings(),
    scale: float = 1.0,
    start=None,
) -> SnapTarget:
    """Decide what a click at ``cursor`` refers to.

    Priority: existing vertex, then the interior of an existing wall,
    then a free (grid or length snapped) point. A free point that lands
    exactly on a vertex or on a wall resolves to that vertex or wall, so
    a new wall never overlaps an existing one without joining it.

    Args:
        cursor: Raw world-space cursor position.
        graph: Graph whose vertices and walls can be hit.
        settings: Snapping settings.
        scale: Current zoom factor.
        start: First endpoint of the wall being drawn, if any.
    """
    world_radius = settings.snap_radius / scale

    closest, min_distance = _closest_vertex(cursor, graph.vertices.values())
    if closest is not None and min_distance <= world_radius:
        return SnapTarget("vertex", closest.point, vertex_id=closest.id)

    edge_id, point = _closest_wall(cursor, graph, world_radius)
    if edge_id is not None:
        return SnapTarget("edge", point, edge_id=edge_id)

    point = get_snapped_point(
        cursor,
        settings.resolution,
        (),
        scale=scale,
        enabled=settings.snap_enabled,
        snap_radius=settings.snap_radius,
        start=start,
    )

    landed = find_nearby_vertices(graph, point, LANDING_TOLERANCE)
    if landed:
        return SnapTarget("vertex", landed[0].point, vertex_id=landed[0].id)

    edge_id, on_wall = _closest_wall(point, graph, LANDING_TOLERANCE)
    if edge_id is not None:
        return SnapTarget("edge", on_wall, edge_id=edge_id)

    return SnapTarget("free", point)
