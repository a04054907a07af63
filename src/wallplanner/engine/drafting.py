"""Click-by-click wall drawing.

The first click of a wall only remembers where it started; nothing
reaches the command history until the second click commits the whole
wall as one command. Cancelling in between leaves the plan untouched.
After a commit the draft continues from the wall's end point, so a run
of clicks draws a chain of walls. While a wall is in progress its
length, not its end point, snaps to the grid resolution.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from ..config import DrawingSettings
from ..core.errors import DegenerateGeometry, InvalidReference, StructuralConflict
from ..core.model import Point, Vertex
from ..core.state import PlanState
from ..geom.snap import EPSILON, SnapTarget, distance, resolve_click
from .commands import Command, Composite, DrawWall, SplitEdge, new_id
from .history import CommandManager

LOGGER = logging.getLogger(__name__)


class WallDraft:
    """Transient wall-drawing state kept outside the command history.

    Args:
        manager: Manager that receives the committed walls.
        settings: Snapping settings applied to every click.
        scale: Current zoom factor, used to size the vertex snap radius.
    """

    def __init__(
        self,
        manager: CommandManager,
        settings: Optional[DrawingSettings] = None,
        scale: float = 1.0,
    ):
        self.manager = manager
        self.settings = settings or DrawingSettings()
        self.scale = scale
        self.pending: Optional[SnapTarget] = None

    @property
    def is_drawing(self) -> bool:
        return self.pending is not None

    def cancel(self) -> None:
        """Abandon the wall in progress."""
        if self.pending is not None:
            LOGGER.debug("Wall draft cancelled at (%s, %s)", self.pending.point.x, self.pending.point.y)
        self.pending = None

    def click(self, cursor: Point) -> Optional[PlanState]:
        """Handle a click in draw mode.

        Args:
            cursor: World-space cursor position.

        Returns:
            The new plan state when the click committed a wall, None when
            it only started one or landed on the start point again.

        Raises:
            GraphError: If the wall is rejected. The draft keeps its start
                point so the user can click somewhere else.
        """
        start = self.pending.point if self.pending is not None else None
        target = resolve_click(cursor, self.manager.graph, self.settings, self.scale, start=start)

        if self.pending is None:
            self.pending = target
            return None

        if _same_spot(self.pending, target):
            return None

        command, end_vertex = self._build(self.pending, target)
        state = self.manager.dispatch(command)
        self.pending = SnapTarget("vertex", end_vertex.point, vertex_id=end_vertex.id)
        return state

    def _build(self, start: SnapTarget, end: SnapTarget) -> Tuple[Command, Vertex]:
        if start.kind == "edge" and end.kind == "edge" and start.edge_id == end.edge_id:
            raise StructuralConflict(f"Wall would overlap edge '{start.edge_id}'")

        steps: List[Command] = []
        start_vertex = self._endpoint(start, steps)
        end_vertex = self._endpoint(end, steps)
        if distance(start_vertex, end_vertex) < EPSILON:
            raise DegenerateGeometry("Wall start and end coincide")

        steps.append(DrawWall(start_vertex, end_vertex))
        if len(steps) == 1:
            return steps[0], end_vertex
        return Composite(steps, description=f"Draw wall {steps[-1].edge_id}"), end_vertex

    def _endpoint(self, target: SnapTarget, steps: List[Command]) -> Vertex:
        graph = self.manager.graph
        if target.kind == "vertex":
            vertex = graph.get_vertex(target.vertex_id)
            if vertex is None:
                raise InvalidReference(f"Vertex '{target.vertex_id}' no longer exists")
            return vertex

        vertex = Vertex(new_id("v"), target.point.x, target.point.y)
        if target.kind == "edge":
            # Clicking inside a wall splits it so the new wall joins it
            steps.append(SplitEdge(target.edge_id, target.point, vertex_id=vertex.id))
        return vertex


def _same_spot(a: SnapTarget, b: SnapTarget) -> bool:
    if a.kind == "vertex" and b.kind == "vertex":
        return a.vertex_id == b.vertex_id
    return distance(a.point, b.point) < EPSILON
