"""Wall Planner - Draw wall graphs and derive rooms with full undo/redo."""

__version__ = "0.1.0"

from .core.graph import SpatialGraph
from .core.model import Edge, Point, Surface, Vertex
from .core.state import PlanState
from .engine.history import CommandManager

__all__ = ["CommandManager", "Edge", "PlanState", "Point", "SpatialGraph", "Surface", "Vertex"]
