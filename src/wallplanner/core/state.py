"""Snapshot of a drawing session that commands operate on."""

from __future__ import annotations

from dataclasses import dataclass, field

from .graph import SpatialGraph


@dataclass(frozen=True)
class PlanState:
    """Full graph snapshot plus the current selection.

    Attributes:
        graph: Vertices, walls and rooms.
        selection: IDs of the selected vertices and walls.
    """

    graph: SpatialGraph = field(default_factory=SpatialGraph)
    selection: frozenset = frozenset()

    @property
    def vertices(self):
        return self.graph.vertices

    @property
    def edges(self):
        return self.graph.edges

    @property
    def surfaces(self):
        return self.graph.surfaces
