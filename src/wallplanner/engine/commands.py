"""Reversible commands for editing a floor plan.

Each command turns one ``PlanState`` into the next and carries just
enough captured state to turn it back. Commands that change walls
re-derive the rooms through the face detector; the rooms produced by the
first execution are remembered so that a redo hands back the same room
ids instead of minting new ones.

Commands are built directly or from plain dicts through the registry at
the bottom of this module.
"""

from __future__ import annotations

import uuid
from dataclasses import replace
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Protocol, Sequence

from ..core.errors import InvalidReference, StructuralConflict
from ..core.graph import SpatialGraph
from ..core.model import Edge, Point, Surface, Vertex
from ..core.state import PlanState
from .faces import detect_surfaces


class Command(Protocol):
    """Protocol for plan editing commands.

    All commands must implement this interface to be dispatched through
    the ``CommandManager``.
    """

    def execute(self, state: PlanState) -> PlanState:
        """Apply the command.

        Args:
            state: The state to modify.

        Returns:
            A new state with the command applied.

        Raises:
            GraphError: If a precondition fails. ``state`` is unchanged.
        """
        ...

    def undo(self, state: PlanState) -> PlanState:
        """Revert the command on the state ``execute`` returned."""
        ...

    def describe(self) -> str:
        """Short human-readable label for history listings."""
        ...


def new_id(prefix: str) -> str:
    """Generate a fresh entity id such as ``"v-1a2b3c4d5e6f"``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class _SurfaceMemo:
    """Remembers the rooms detected after a structural change."""

    def __init__(self):
        self._structure = None
        self._surfaces: Optional[Dict[int, Surface]] = None

    def recompute(self, graph: SpatialGraph, previous: Mapping[int, Surface]) -> SpatialGraph:
        structure = (graph.vertices, graph.edges)
        if self._surfaces is not None and self._structure == structure:
            return graph.with_surfaces(self._surfaces, graph.surface_id_high_water)

        graph = detect_surfaces(graph, previous)
        self._structure = structure
        self._surfaces = dict(graph.surfaces)
        return graph


def _restore_surfaces(graph: SpatialGraph, surfaces: Mapping[int, Surface]) -> SpatialGraph:
    # The high-water mark only ever grows, so undo keeps the current one
    return graph.with_surfaces(surfaces, graph.surface_id_high_water)


def _prune_selection(selection: frozenset, graph: SpatialGraph) -> frozenset:
    return frozenset(entity_id for entity_id in selection if graph.has_id(entity_id))


class AddVertex:
    """Insert a single vertex. Rooms are unaffected by a lone vertex."""

    def __init__(self, vertex: Vertex):
        self.vertex = vertex

    def execute(self, state: PlanState) -> PlanState:
        return replace(state, graph=state.graph.add_vertex(self.vertex))

    def undo(self, state: PlanState) -> PlanState:
        graph = state.graph
        if graph.has_vertex(self.vertex.id) and graph.degree(self.vertex.id) > 0:
            raise StructuralConflict(
                f"Vertex '{self.vertex.id}' is still referenced by walls and cannot be removed"
            )
        return replace(state, graph=graph.remove_vertex(self.vertex.id))

    def describe(self) -> str:
        return f"Add vertex {self.vertex.id}"


class AddEdge:
    """Join two existing vertices with a wall."""

    def __init__(self, edge: Edge):
        self.edge = edge
        self._memo = _SurfaceMemo()
        self._previous_surfaces: Mapping[int, Surface] = {}

    def execute(self, state: PlanState) -> PlanState:
        before = state.graph
        graph = self._memo.recompute(before.add_edge(self.edge), before.surfaces)
        self._previous_surfaces = before.surfaces
        return replace(state, graph=graph)

    def undo(self, state: PlanState) -> PlanState:
        graph = state.graph.remove_edge(self.edge.id)
        graph = _restore_surfaces(graph, self._previous_surfaces)
        return replace(state, graph=graph)

    def describe(self) -> str:
        return f"Add wall {self.edge.id}"


class DrawWall:
    """Draw a wall between two points as one undoable step.

    Endpoints whose id is not in the graph yet are created; endpoints that
    already exist (the user snapped onto them) are reused as they are.

    Args:
        start: Vertex the wall is drawn from.
        end: Vertex the wall is drawn to.
        edge_id: ID for the new wall. Generated when omitted.
    """

    def __init__(self, start: Vertex, end: Vertex, edge_id: Optional[str] = None):
        self.start = start
        self.end = end
        self.edge_id = edge_id or new_id("e")
        self._memo = _SurfaceMemo()
        self._created: List[str] = []
        self._previous_surfaces: Mapping[int, Surface] = {}

    def execute(self, state: PlanState) -> PlanState:
        before = state.graph
        graph = before
        created = []
        for vertex in (self.start, self.end):
            if not graph.has_vertex(vertex.id):
                graph = graph.add_vertex(vertex)
                created.append(vertex.id)

        graph = graph.add_edge(Edge(self.edge_id, self.start.id, self.end.id))
        graph = self._memo.recompute(graph, before.surfaces)

        self._created = created
        self._previous_surfaces = before.surfaces
        return replace(state, graph=graph)

    def undo(self, state: PlanState) -> PlanState:
        graph = state.graph.remove_edge(self.edge_id)
        for vertex_id in reversed(self._created):
            graph = graph.remove_vertex(vertex_id)
        graph = _restore_surfaces(graph, self._previous_surfaces)
        return replace(state, graph=graph)

    def describe(self) -> str:
        return f"Draw wall {self.edge_id}"


class RemoveEntity:
    """Delete a vertex (with every wall touching it) or a single wall."""

    def __init__(self, entity_id: str):
        self.entity_id = entity_id
        self._memo = _SurfaceMemo()
        self._vertex: Optional[Vertex] = None
        self._edges: List[Edge] = []
        self._previous: Optional[PlanState] = None
        self._kind = "entity"

    def execute(self, state: PlanState) -> PlanState:
        before = state.graph
        if before.has_vertex(self.entity_id):
            vertex = before.vertices[self.entity_id]
            edges = before.incident_edges(self.entity_id)
            graph = before.remove_vertex(self.entity_id)
        elif before.has_edge(self.entity_id):
            vertex = None
            edges = [before.edges[self.entity_id]]
            graph = before.remove_edge(self.entity_id)
        else:
            raise InvalidReference(f"No vertex or edge with ID '{self.entity_id}'")

        graph = self._memo.recompute(graph, before.surfaces)

        self._vertex = vertex
        self._edges = edges
        self._kind = "vertex" if vertex is not None else "wall"
        self._previous = state
        return PlanState(graph=graph, selection=_prune_selection(state.selection, graph))

    def undo(self, state: PlanState) -> PlanState:
        if self._previous is None:
            raise InvalidReference(f"Removal of '{self.entity_id}' was never applied")

        graph = state.graph
        if self._vertex is not None:
            graph = graph.add_vertex(self._vertex)
        for edge in self._edges:
            graph = graph.add_edge(edge)
        graph = _restore_surfaces(graph, self._previous.graph.surfaces)
        return PlanState(graph=graph, selection=self._previous.selection)

    def describe(self) -> str:
        return f"Remove {self._kind} {self.entity_id}"


class SplitEdge:
    """Insert a vertex on a wall, replacing it with two walls.

    IDs for the new vertex and walls are generated up front when not
    given, so a redo recreates exactly the same entities.
    """

    def __init__(
        self,
        edge_id: str,
        point: Point,
        vertex_id: Optional[str] = None,
        first_edge_id: Optional[str] = None,
        second_edge_id: Optional[str] = None,
    ):
        self.edge_id = edge_id
        self.point = point
        self.vertex_id = vertex_id or new_id("v")
        self.first_edge_id = first_edge_id or new_id("e")
        self.second_edge_id = second_edge_id or new_id("e")
        self._memo = _SurfaceMemo()
        self._original: Optional[Edge] = None
        self._previous: Optional[PlanState] = None

    def execute(self, state: PlanState) -> PlanState:
        before = state.graph
        graph = before.split_edge(
            self.edge_id, self.point, self.vertex_id, self.first_edge_id, self.second_edge_id
        )
        graph = self._memo.recompute(graph, before.surfaces)

        self._original = before.edges[self.edge_id]
        self._previous = state
        return PlanState(graph=graph, selection=_prune_selection(state.selection, graph))

    def undo(self, state: PlanState) -> PlanState:
        if self._original is None or self._previous is None:
            raise InvalidReference(f"Split of edge '{self.edge_id}' was never applied")

        graph = state.graph.remove_vertex(self.vertex_id)
        graph = graph.add_edge(self._original)
        graph = _restore_surfaces(graph, self._previous.graph.surfaces)
        return PlanState(graph=graph, selection=self._previous.selection)

    def describe(self) -> str:
        return f"Split wall {self.edge_id} at ({self.point.x:g}, {self.point.y:g})"


class ClearAll:
    """Remove everything; undo brings back the whole prior snapshot."""

    def __init__(self):
        self._previous: Optional[PlanState] = None

    def execute(self, state: PlanState) -> PlanState:
        self._previous = state
        return PlanState(graph=state.graph.clear())

    def undo(self, state: PlanState) -> PlanState:
        if self._previous is None:
            raise InvalidReference("Nothing was cleared")
        previous = self._previous
        graph = previous.graph.with_surfaces(
            previous.graph.surfaces, state.graph.surface_id_high_water
        )
        return replace(previous, graph=graph)

    def describe(self) -> str:
        return "Clear all"


class RenameSurface:
    """Set or clear the label of a room."""

    def __init__(self, surface_id: int, label: Optional[str]):
        self.surface_id = surface_id
        self.label = label
        self._old_label: Optional[str] = None

    def execute(self, state: PlanState) -> PlanState:
        graph = state.graph.with_label(self.surface_id, self.label)
        self._old_label = state.graph.surfaces[self.surface_id].label
        return replace(state, graph=graph)

    def undo(self, state: PlanState) -> PlanState:
        return replace(state, graph=state.graph.with_label(self.surface_id, self._old_label))

    def describe(self) -> str:
        if self.label:
            return f"Rename room {self.surface_id} to '{self.label}'"
        return f"Clear name of room {self.surface_id}"


class SetSelection:
    """Replace the current selection."""

    def __init__(self, entity_ids: Iterable[str]):
        self.entity_ids = frozenset(entity_ids)
        self._previous: frozenset = frozenset()

    def execute(self, state: PlanState) -> PlanState:
        for entity_id in sorted(self.entity_ids):
            if not state.graph.has_id(entity_id):
                raise InvalidReference(f"Cannot select unknown ID '{entity_id}'")
        self._previous = state.selection
        return replace(state, selection=self.entity_ids)

    def undo(self, state: PlanState) -> PlanState:
        return replace(state, selection=self._previous)

    def describe(self) -> str:
        if not self.entity_ids:
            return "Clear selection"
        return f"Select {len(self.entity_ids)} item(s)"


class Composite:
    """Run several commands as a single undo unit.

    Sub-commands run in order and are undone in reverse. If any of them
    fails the error propagates and the input state is left as it was.
    """

    def __init__(self, commands: Sequence[Command], description: Optional[str] = None):
        self.commands = list(commands)
        self.description = description

    def execute(self, state: PlanState) -> PlanState:
        for command in self.commands:
            state = command.execute(state)
        return state

    def undo(self, state: PlanState) -> PlanState:
        for command in reversed(self.commands):
            state = command.undo(state)
        return state

    def describe(self) -> str:
        if self.description:
            return self.description
        return "; ".join(command.describe() for command in self.commands)


# --------------------------------------------------------------------------- #
# Command registry
# --------------------------------------------------------------------------- #


def _vertex_from(data: Mapping[str, Any]) -> Vertex:
    return Vertex(str(data["id"]), float(data["x"]), float(data["y"]))


def _add_vertex(params: Mapping[str, Any]) -> Command:
    return AddVertex(_vertex_from(params))


def _add_edge(params: Mapping[str, Any]) -> Command:
    return AddEdge(Edge(str(params["id"]), str(params["start"]), str(params["end"])))


def _draw_wall(params: Mapping[str, Any]) -> Command:
    return DrawWall(_vertex_from(params["start"]), _vertex_from(params["end"]), params.get("id"))


def _remove(params: Mapping[str, Any]) -> Command:
    return RemoveEntity(str(params["id"]))


def _split_edge(params: Mapping[str, Any]) -> Command:
    edge_ids = params.get("edge_ids") or (None, None)
    return SplitEdge(
        str(params["edge"]),
        Point(float(params["x"]), float(params["y"])),
        vertex_id=params.get("vertex_id"),
        first_edge_id=edge_ids[0],
        second_edge_id=edge_ids[1],
    )


def _clear_all(params: Mapping[str, Any]) -> Command:
    return ClearAll()


def _rename_surface(params: Mapping[str, Any]) -> Command:
    return RenameSurface(int(params["surface"]), params.get("label"))


def _select(params: Mapping[str, Any]) -> Command:
    return SetSelection(str(entity_id) for entity_id in params.get("ids", []))


def _composite(params: Mapping[str, Any]) -> Command:
    commands = [command_from_dict(item) for item in params.get("commands", [])]
    return Composite(commands, params.get("description"))


_COMMANDS: Dict[str, Callable[[Mapping[str, Any]], Command]] = {
    "add_vertex": _add_vertex,
    "add_edge": _add_edge,
    "draw_wall": _draw_wall,
    "remove": _remove,
    "split_edge": _split_edge,
    "clear_all": _clear_all,
    "rename_surface": _rename_surface,
    "select": _select,
    "composite": _composite,
}


def register_command(name: str, factory: Callable[[Mapping[str, Any]], Command]) -> None:
    """Register a new command factory in the registry.

    Args:
        name: Name used in the ``op`` field of command dicts.
        factory: Callable building a command from the dict's parameters.
    """
    _COMMANDS[name] = factory


def get_command_factory(name: str) -> Callable[[Mapping[str, Any]], Command]:
    """Get a command factory by name.

    Raises:
        KeyError: If the command is not registered.
    """
    if name not in _COMMANDS:
        raise KeyError(f"Command '{name}' is not registered")
    return _COMMANDS[name]


def list_commands() -> list[str]:
    """List all registered command names."""
    return list(_COMMANDS.keys())


def command_from_dict(data: Mapping[str, Any]) -> Command:
    """Build a command from a dict such as ``{"op": "remove", "id": "v1"}``.

    Args:
        data: Command description with an ``op`` (or ``type``) field.

    Returns:
        The command, ready to be dispatched.

    Raises:
        ValueError: If the type is missing or unknown, or a parameter is
            missing or malformed.
    """
    command_type = data.get("op") or data.get("type")

    if command_type is None:
        raise ValueError("Command must have an 'op' or 'type' field")

    try:
        factory = get_command_factory(command_type)
    except KeyError:
        raise ValueError(f"Unknown command type: {command_type}")

    params = {k: v for k, v in data.items() if k not in ["op", "type"]}

    try:
        return factory(params)
    except KeyError as e:
        raise ValueError(f"Command '{command_type}' is missing parameter {e}") from e
    except (TypeError, IndexError) as e:
        raise ValueError(f"Command '{command_type}' has malformed parameters: {e}") from e
