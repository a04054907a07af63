"""Engine module for plan editing.

This module provides the face detector that derives rooms from walls,
the reversible commands, and the history manager that applies them.
"""

from .api import apply, apply_commands
from .commands import (
    AddEdge,
    AddVertex,
    ClearAll,
    Composite,
    DrawWall,
    RemoveEntity,
    RenameSurface,
    SetSelection,
    SplitEdge,
    command_from_dict,
)
from .faces import FaceDetector, detect_surfaces
from .history import CommandManager

__all__ = [
    "apply",
    "apply_commands",
    "AddEdge",
    "AddVertex",
    "ClearAll",
    "Composite",
    "DrawWall",
    "RemoveEntity",
    "RenameSurface",
    "SetSelection",
    "SplitEdge",
    "command_from_dict",
    "FaceDetector",
    "detect_surfaces",
    "CommandManager",
]
