"""Topology analysis for wall graphs.

This module provides functionality to analyze the topological relationships
between rooms and walls, including wall-to-room adjacency mapping and
NetworkX graph construction.
"""

from __future__ import annotations

from typing import Dict, List, Set

import networkx as nx

from .graph import SpatialGraph


def build_wall_adjacency(graph: SpatialGraph) -> Dict[str, Set[int]]:
    """Build adjacency mapping from walls to rooms.

    Args:
        graph: Graph containing walls and detected rooms.

    Returns:
        Dictionary mapping edge_id to set of adjacent surface ids. Every
        wall appears, with an empty set when it bounds no room.
    """
    adjacency: Dict[str, Set[int]] = {edge_id: set() for edge_id in graph.edges}

    for surface in graph.surfaces.values():
        for edge_id in surface.edge_ids:
            adjacency.setdefault(edge_id, set()).add(surface.id)

    return adjacency


def build_wall_graph(graph: SpatialGraph) -> nx.Graph:
    """Build a NetworkX graph of vertices joined by walls.

    Nodes carry ``x``/``y`` attributes, edges carry ``edge_id`` and
    ``length``.
    """
    G = nx.Graph()

    for vertex in graph.vertices.values():
        G.add_node(vertex.id, x=vertex.x, y=vertex.y)

    for edge in graph.edges.values():
        G.add_edge(
            edge.start_vertex_id,
            edge.end_vertex_id,
            edge_id=edge.id,
            length=graph.edge_length(edge.id),
        )

    return G


def build_room_graph(graph: SpatialGraph) -> nx.Graph:
    """Build a graph of rooms that share a wall.

    Args:
        graph: Graph containing walls and detected rooms.

    Returns:
        NetworkX Graph whose nodes are surface ids; an edge joins two
        rooms separated by a common wall and records that wall's id.
    """
    G = nx.Graph()

    for surface in graph.get_surfaces():
        G.add_node(surface.id, name=surface.name, area=surface.area)

    for edge_id, rooms in build_wall_adjacency(graph).items():
        if len(rooms) == 2:
            r1, r2 = sorted(rooms)
            G.add_edge(r1, r2, edge_id=edge_id)

    return G


def wall_components(graph: SpatialGraph) -> List[Set[str]]:
    """Group vertex ids into connected clusters of walls.

    Isolated vertices form their own single-vertex component.
    """
    components = nx.connected_components(build_wall_graph(graph))
    return sorted((set(c) for c in components), key=lambda c: min(c))
