"""Parser for exported floor plan JSON files.

This module provides functionality to load an export document back into
a ``PlanState``. Vertices and walls are rebuilt through the graph store
so every integrity check applies; rooms are re-derived by the face
detector, keeping the exported id and label of every room whose walls
are unchanged. The session's room-id high-water mark is restored from the
document metadata, so ids retired before the export stay retired.
"""

import json
from pathlib import Path

from ..core.errors import GraphError
from ..core.graph import SpatialGraph
from ..core.model import Edge, Point, Surface, Vertex
from ..core.state import PlanState
from ..engine.faces import detect_surfaces


def _parse_surface(surface_id: str, surface_data: dict) -> Surface:
    centroid = surface_data.get("centroid") or {"x": 0.0, "y": 0.0}
    return Surface(
        id=int(surface_id),
        edge_ids=tuple(surface_data["edgeIds"]),
        area=float(surface_data.get("area", 0.0)),
        centroid=Point(float(centroid["x"]), float(centroid["y"])),
        label=surface_data.get("label"),
    )


def plan_from_dict(data: dict) -> PlanState:
    """Rebuild a plan from an export document.

    Args:
        data: Export document, or just its ``data`` section.

    Returns:
        PlanState with an empty selection.

    Raises:
        ValueError: If the document is malformed or violates graph
            integrity.
    """
    if not isinstance(data, dict):
        raise ValueError(f"Plan must be a JSON object, got: {type(data).__name__}")

    # Accept both the full document and its bare data section
    content = data.get("data", data)
    metadata = data.get("metadata")
    if not isinstance(metadata, dict):
        metadata = {}

    try:
        high_water = int(metadata.get("surfaceIdHighWater", 0))
    except (TypeError, ValueError) as e:
        raise ValueError(f"Invalid surfaceIdHighWater: {e}") from e

    graph = SpatialGraph(surface_id_high_water=high_water)

    for vertex_id, vertex_data in content.get("vertices", {}).items():
        try:
            vertex = Vertex(vertex_id, float(vertex_data["x"]), float(vertex_data["y"]))
            graph = graph.add_vertex(vertex)
        except (KeyError, TypeError, ValueError, GraphError) as e:
            raise ValueError(f"Invalid vertex data for {vertex_id}: {e}") from e

    for edge_id, edge_data in content.get("edges", {}).items():
        try:
            # Older exports use startId/endId
            start = edge_data.get("startVertexId", edge_data.get("startId"))
            end = edge_data.get("endVertexId", edge_data.get("endId"))
            if start is None or end is None:
                raise KeyError("startVertexId/endVertexId")
            graph = graph.add_edge(Edge(edge_id, str(start), str(end)))
        except (KeyError, TypeError, ValueError, GraphError) as e:
            raise ValueError(f"Invalid edge data for {edge_id}: {e}") from e

    previous = {}
    for surface_id, surface_data in content.get("surfaces", {}).items():
        try:
            surface = _parse_surface(surface_id, surface_data)
        except (KeyError, TypeError, ValueError) as e:
            raise ValueError(f"Invalid surface data for {surface_id}: {e}") from e
        previous[surface.id] = surface

    try:
        graph = detect_surfaces(graph, previous)
    except GraphError as e:
        raise ValueError(f"Invalid plan geometry: {e}") from e

    return PlanState(graph=graph)


def load_plan(path: str) -> PlanState:
    """Load a floor plan from an exported JSON file.

    Args:
        path: Path to the JSON file containing plan data.

    Returns:
        PlanState representing the floor plan.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the JSON data is invalid or malformed.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(file_path, encoding="utf-8") as f:
        data = json.load(f)

    return plan_from_dict(data)
