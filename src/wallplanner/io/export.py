"""Export of floor plans to JSON documents and CSV reports.

The JSON document is the canonical read model of a plan::

    {
      "version": "1.0.0",
      "timestamp": "2024-01-01T00:00:00+00:00",
      "data": {"vertices": {...}, "edges": {...}, "surfaces": {...}},
      "metadata": {"totalArea": ..., "roomCount": ..., "wallCount": ...,
                   "surfaceIdHighWater": ...}
    }

``surfaceIdHighWater`` carries the highest room id ever assigned, so room
ids deleted before an export are not handed out again after a reload.

The CSV reports are a tabular projection of the same model with lengths
and areas converted to real-world units.
"""

from __future__ import annotations

import csv
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from ..config import DEFAULT_PIXELS_PER_MM, EXPORT_VERSION
from ..core.graph import SpatialGraph
from ..core.state import PlanState

LOGGER = logging.getLogger(__name__)

WALL_COLUMNS = ["ID", "Start X", "Start Y", "End X", "End Y", "Length (mm)"]
ROOM_COLUMNS = ["ID", "Name", "Area (m²)"]

MM2_PER_M2 = 1_000_000


def pixels_to_mm(pixels: float, pixels_per_mm: float = DEFAULT_PIXELS_PER_MM) -> float:
    """Convert a drawing length to millimeters."""
    if pixels_per_mm <= 0:
        raise ValueError(f"pixels_per_mm must be positive, got: {pixels_per_mm}")
    return pixels / pixels_per_mm


def mm_to_pixels(mm: float, pixels_per_mm: float = DEFAULT_PIXELS_PER_MM) -> float:
    """Convert millimeters to a drawing length."""
    return mm * pixels_per_mm


def area_to_m2(area: float, pixels_per_mm: float = DEFAULT_PIXELS_PER_MM) -> float:
    """Convert a drawing area to square meters."""
    return pixels_to_mm(pixels_to_mm(area, pixels_per_mm), pixels_per_mm) / MM2_PER_M2


def format_measurement(value_mm: float) -> str:
    """Format a length for display, rounded to whole millimeters."""
    return f"{round(value_mm)} mm"


def _as_graph(plan) -> SpatialGraph:
    return plan.graph if isinstance(plan, PlanState) else plan


def to_export_dict(plan, version: str = EXPORT_VERSION, timestamp: Optional[str] = None) -> Dict[str, Any]:
    """Build the canonical export document of a plan.

    Args:
        plan: A PlanState or SpatialGraph.
        version: Format version written to the document.
        timestamp: ISO timestamp; the current UTC time when omitted.

    Returns:
        JSON-serializable dictionary.
    """
    graph = _as_graph(plan)
    if timestamp is None:
        timestamp = datetime.now(timezone.utc).isoformat()

    vertices = {v.id: {"x": v.x, "y": v.y} for v in graph.vertices.values()}
    edges = {
        e.id: {"startVertexId": e.start_vertex_id, "endVertexId": e.end_vertex_id}
        for e in graph.edges.values()
    }

    surfaces = {}
    for surface in graph.get_surfaces():
        entry = {
            "edgeIds": list(surface.edge_ids),
            "area": surface.area,
            "centroid": {"x": surface.centroid.x, "y": surface.centroid.y},
        }
        if surface.label:
            entry["label"] = surface.label
        surfaces[str(surface.id)] = entry

    return {
        "version": version,
        "timestamp": timestamp,
        "data": {"vertices": vertices, "edges": edges, "surfaces": surfaces},
        "metadata": {
            "totalArea": sum(s.area for s in graph.surfaces.values()),
            "roomCount": len(graph.surfaces),
            "wallCount": len(graph.edges),
            "surfaceIdHighWater": graph.surface_id_high_water,
        },
    }


def export_json(plan, output_path: str, **kwargs) -> Path:
    """Write the export document to ``output_path``.

    Missing parent directories are created.
    """
    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    with open(path, "w", encoding="utf-8") as f:
        json.dump(to_export_dict(plan, **kwargs), f, indent=2, ensure_ascii=False)

    LOGGER.info("Exported plan to %s", path)
    return path


def wall_rows(plan, pixels_per_mm: float = DEFAULT_PIXELS_PER_MM) -> List[List[Any]]:
    """One row per wall: id, endpoint coordinates and length in mm."""
    graph = _as_graph(plan)
    rows = []
    for edge in graph.edges.values():
        start, end = graph.edge_endpoints(edge.id)
        length_mm = pixels_to_mm(graph.edge_length(edge.id), pixels_per_mm)
        rows.append([edge.id, start.x, start.y, end.x, end.y, f"{length_mm:.2f}"])
    return rows


def room_rows(plan, pixels_per_mm: float = DEFAULT_PIXELS_PER_MM) -> List[List[Any]]:
    """One row per room: id, display name and area in square meters."""
    graph = _as_graph(plan)
    return [
        [surface.id, surface.name, f"{area_to_m2(surface.area, pixels_per_mm):.2f}"]
        for surface in graph.get_surfaces()
    ]


def export_csv(
    plan, output_dir: str, pixels_per_mm: float = DEFAULT_PIXELS_PER_MM
) -> Tuple[Path, Path]:
    """Write ``walls.csv`` and ``rooms.csv`` into ``output_dir``.

    Returns:
        Tuple of (walls path, rooms path).
    """
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)

    outputs = (
        (directory / "walls.csv", WALL_COLUMNS, wall_rows(plan, pixels_per_mm)),
        (directory / "rooms.csv", ROOM_COLUMNS, room_rows(plan, pixels_per_mm)),
    )
    for path, header, rows in outputs:
        with open(path, "w", newline="", encoding="utf-8") as f:
            writer = csv.writer(f)
            writer.writerow(header)
            writer.writerows(rows)

    LOGGER.info("Exported CSV reports to %s", directory)
    return outputs[0][0], outputs[1][0]
