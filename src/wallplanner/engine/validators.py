"""Integrity validators for plan states.

This module provides checks that a state is internally consistent:
every reference resolves, every wall bounds at most two rooms and room
ids stay within the session's high-water mark. A failure here points at
a bug in the graph store, never at user input.
"""

from __future__ import annotations

from collections import Counter
from typing import List

from ..core.errors import InvariantViolation
from ..core.graph import SpatialGraph
from ..core.state import PlanState
from .faces import MIN_SURFACE_EDGES


def find_issues(graph: SpatialGraph) -> List[str]:
    """Collect every integrity problem of a graph.

    Args:
        graph: The graph to inspect.

    Returns:
        List of human-readable issues, empty when the graph is sound.
    """
    issues = []

    for edge_id, edge in graph.edges.items():
        if edge.start_vertex_id not in graph.vertices:
            issues.append(f"Edge {edge_id} references missing start vertex {edge.start_vertex_id}")
        if edge.end_vertex_id not in graph.vertices:
            issues.append(f"Edge {edge_id} references missing end vertex {edge.end_vertex_id}")

    sides = Counter()
    for surface_id, surface in graph.surfaces.items():
        for edge_id in surface.edge_ids:
            if edge_id not in graph.edges:
                issues.append(f"Surface {surface_id} references missing edge {edge_id}")
        sides.update(set(surface.edge_ids))
        if len(set(surface.edge_ids)) < MIN_SURFACE_EDGES:
            issues.append(f"Surface {surface_id} has fewer than {MIN_SURFACE_EDGES} edges")
        if surface_id < 1 or surface_id > graph.surface_id_high_water:
            issues.append(
                f"Surface {surface_id} is outside the assigned range 1..{graph.surface_id_high_water}"
            )

    for edge_id, count in sides.items():
        if count > 2:
            issues.append(f"Edge {edge_id} bounds {count} surfaces")

    return issues


def validate_references(graph: SpatialGraph) -> bool:
    """Check that walls and rooms only reference live entities."""
    for edge in graph.edges.values():
        if edge.start_vertex_id not in graph.vertices or edge.end_vertex_id not in graph.vertices:
            return False

    for surface in graph.surfaces.values():
        if any(edge_id not in graph.edges for edge_id in surface.edge_ids):
            return False

    return True


def validate_surface_sides(graph: SpatialGraph) -> bool:
    """Check that no wall bounds more than two rooms (one per side)."""
    sides = Counter()
    for surface in graph.surfaces.values():
        sides.update(set(surface.edge_ids))
    return all(count <= 2 for count in sides.values())


def validate_selection(state: PlanState) -> bool:
    """Check that every selected id names a live vertex or wall."""
    return all(state.graph.has_id(entity_id) for entity_id in state.selection)


def validate_all(state: PlanState) -> bool:
    """Run all validators on the state.

    Args:
        state: The state to validate.

    Returns:
        True if all validations pass.

    Raises:
        InvariantViolation: If any validation fails, listing the issues.
    """
    issues = find_issues(state.graph)

    if not validate_selection(state):
        stale = sorted(i for i in state.selection if not state.graph.has_id(i))
        issues.append(f"Selection references missing ids: {', '.join(stale)}")

    if issues:
        raise InvariantViolation("State validation failed: " + "; ".join(issues))

    return True
