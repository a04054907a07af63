"""
Configuration for drawing sessions
"""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path

# Snapping
SCREEN_SNAP_RADIUS = 10.0  # pixels on screen, divided by zoom scale
DEFAULT_RESOLUTION = 10.0
SNAP_ENABLED = True

# Measurements
DEFAULT_PIXELS_PER_MM = 0.1  # 10px = 100mm

# History
MAX_HISTORY_SIZE = 100

# Export
EXPORT_VERSION = "1.0.0"


@dataclass(frozen=True)
class DrawingSettings:
    """Settings consumed by snapping, measurement and history.

    Attributes:
        resolution: Grid spacing used for grid snapping (world units).
        snap_enabled: Whether grid snapping is applied at all.
        snap_radius: Vertex snap radius in screen pixels.
        pixels_per_mm: Drawing scale used by measurements and reports.
        max_history: Number of undoable commands kept.
    """

    resolution: float = DEFAULT_RESOLUTION
    snap_enabled: bool = SNAP_ENABLED
    snap_radius: float = SCREEN_SNAP_RADIUS
    pixels_per_mm: float = DEFAULT_PIXELS_PER_MM
    max_history: int = MAX_HISTORY_SIZE

    def with_updates(self, **changes) -> "DrawingSettings":
        return replace(self, **changes)

    def to_dict(self) -> dict:
        return asdict(self)


def load_settings(path: str) -> DrawingSettings:
    """Load drawing settings from a JSON file.

    Args:
        path: Path to a JSON object whose keys are DrawingSettings fields.

    Returns:
        DrawingSettings with the file values applied over the defaults.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file contains unknown keys or is not an object.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(file_path, encoding="utf-8") as f:
        data = json.load(f)

    if not isinstance(data, dict):
        raise ValueError(f"Settings must be a JSON object, got: {type(data).__name__}")

    known = {f.name for f in fields(DrawingSettings)}
    unknown = set(data) - known
    if unknown:
        raise ValueError(f"Unknown settings: {', '.join(sorted(unknown))}")

    return DrawingSettings(**data)
