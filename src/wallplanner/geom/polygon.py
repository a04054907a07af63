"""Polygon geometry utilities for room calculations.

This module provides functions to compute signed areas and centroids of
traced room boundaries, and to reconstruct a room outline as a Shapely
polygon for perimeter and containment queries.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Sequence

from shapely.geometry import Point as ShapelyPoint
from shapely.geometry import Polygon

from ..core.model import Point
from .snap import distance

if TYPE_CHECKING:
    from ..core.graph import SpatialGraph

# Global parameters for algorithm sensitivity
MIN_POLYGON_AREA = 1e-9  # Below this a ring has no usable centroid


def signed_polygon_area(points: Sequence) -> float:
    """Signed area of a closed ring using the Shoelace formula.

    Positive for counter-clockwise winding (y axis up), negative for
    clockwise winding. Fewer than three points have zero area.
    """
    n = len(points)
    if n < 3:
        return 0.0

    area = 0.0
    for i in range(n):
        p = points[i]
        q = points[(i + 1) % n]
        area += p.x * q.y - q.x * p.y
    return area / 2.0


def polygon_centroid(points: Sequence) -> Point:
    """Area centroid of a closed ring.

    Segments walked out and back (dangling walls inside a room) cancel
    out. Rings without area fall back to the vertex average.
    """
    if not points:
        return Point(0.0, 0.0)

    area = signed_polygon_area(points)
    if abs(area) < MIN_POLYGON_AREA:
        n = len(points)
        return Point(sum(p.x for p in points) / n, sum(p.y for p in points) / n)

    cx = 0.0
    cy = 0.0
    n = len(points)
    for i in range(n):
        p = points[i]
        q = points[(i + 1) % n]
        cross = p.x * q.y - q.x * p.y
        cx += (p.x + q.x) * cross
        cy += (p.y + q.y) * cross
    factor = 1.0 / (6.0 * area)
    return Point(cx * factor, cy * factor)


def _surface_ring(graph: "SpatialGraph", surface_id: int) -> List[Point]:
    """Walk a surface's ordered edges and return its vertex ring."""
    surface = graph.surfaces[surface_id]
    edges = [graph.edges[edge_id] for edge_id in surface.edge_ids if edge_id in graph.edges]
    if len(edges) < 3:
        return []

    # Start from the endpoint of the first edge not shared with the second
    first, second = edges[0], edges[1]
    if first.start_vertex_id in second.vertex_ids:
        current = first.end_vertex_id
    else:
        current = first.start_vertex_id

    ring = []
    for edge in edges:
        if not edge.touches(current):
            # Boundary is not a simple chain (holes or bridges)
            return []
        ring.append(graph.vertices[current].point)
        current = edge.other_end(current)
    return ring


def surface_outline(graph: "SpatialGraph", surface_id: int) -> Polygon | None:
    """Reconstruct a room outline as a Shapely polygon.

    Args:
        graph: Graph containing the surface and its walls.
        surface_id: ID of the surface to reconstruct.

    Returns:
        Shapely Polygon of the room boundary, or None if the boundary is
        not a simple closed chain.
    """
    if surface_id not in graph.surfaces:
        return None

    ring = _surface_ring(graph, surface_id)
    if len(ring) < 3:
        return None

    polygon = Polygon([(p.x, p.y) for p in ring])
    if not polygon.is_valid or polygon.area <= MIN_POLYGON_AREA:
        return None
    return polygon


def surface_perimeter(graph: "SpatialGraph", surface_id: int) -> float:
    """Total length of a room's bounding walls."""
    if surface_id not in graph.surfaces:
        return 0.0

    total = 0.0
    for edge_id in graph.surfaces[surface_id].edge_ids:
        edge = graph.edges.get(edge_id)
        if edge is None:
            continue
        total += distance(graph.vertices[edge.start_vertex_id], graph.vertices[edge.end_vertex_id])
    return total


def surface_contains(graph: "SpatialGraph", surface_id: int, point) -> bool:
    """Check if a point lies inside a room outline."""
    polygon = surface_outline(graph, surface_id)
    if polygon is None:
        return False
    return polygon.contains(ShapelyPoint(point.x, point.y))
