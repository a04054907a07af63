import pytest

from conftest import SQUARE_EDGES, SQUARE_VERTICES, build_graph

from wallplanner.config import DrawingSettings
from wallplanner.core.graph import SpatialGraph
from wallplanner.core.model import Point, Vertex
from wallplanner.geom.snap import (
    distance,
    find_nearby_vertices,
    get_snapped_point,
    is_near_point,
    is_point_on_segment,
    point_to_segment_distance,
    resolve_click,
    snap_length,
    snap_to_grid,
)


@pytest.fixture
def graph():
    return build_graph(SQUARE_VERTICES, SQUARE_EDGES)


def test_distance():
    assert distance(Point(0, 0), Point(3, 4)) == pytest.approx(5.0)
    assert is_near_point(Point(0, 0), Point(3, 4), 5)
    assert not is_near_point(Point(0, 0), Point(3, 4), 4.9)


def test_scenario_d_grid_snap():
    assert get_snapped_point(Point(37, 142), 100, []) == Point(0, 100)


def test_scenario_d_vertex_snap_wins():
    vertices = [Vertex("V", 40, 140)]

    assert get_snapped_point(Point(37, 142), 100, vertices) == Point(40, 140)
    assert get_snapped_point(Point(37, 142), 7, vertices) == Point(40, 140)


def test_snap_radius_shrinks_with_zoom():
    vertices = [Vertex("V", 40, 140)]

    assert get_snapped_point(Point(48, 140), 100, vertices) == Point(40, 140)
    assert get_snapped_point(Point(48, 140), 100, vertices, scale=2.0) == Point(0, 100)


def test_snapping_disabled_returns_cursor():
    assert get_snapped_point(Point(37, 142), 100, [], enabled=False) == Point(37, 142)
    assert get_snapped_point(Point(37, 142), 0, []) == Point(37, 142)


def test_snap_to_grid():
    assert snap_to_grid(Point(14, 26), 10) == Point(10, 30)
    assert snap_to_grid(Point(-14, 26), 10) == Point(-10, 30)


def test_point_to_segment_distance():
    a, b = Point(0, 0), Point(100, 0)

    dist, closest, t = point_to_segment_distance(Point(50, 10), a, b)
    assert dist == pytest.approx(10.0)
    assert closest == Point(50, 0)
    assert t == pytest.approx(0.5)

    dist, closest, t = point_to_segment_distance(Point(150, 0), a, b)
    assert dist == pytest.approx(50.0)
    assert closest == Point(100, 0)
    assert t == 1.0

    dist, closest, t = point_to_segment_distance(Point(3, 4), a, a)
    assert dist == pytest.approx(5.0)
    assert closest == a


def test_point_on_segment_excludes_endpoints():
    a, b = Point(0, 0), Point(100, 0)

    assert is_point_on_segment(Point(50, 5), a, b, 10)
    assert not is_point_on_segment(Point(50, 20), a, b, 10)
    assert not is_point_on_segment(Point(5, 0), a, b, 10)
    assert not is_point_on_segment(Point(97, 1), a, b, 10)


def test_find_nearby_vertices(graph):
    nearby = find_nearby_vertices(graph, Point(10, 5), 120)

    assert [v.id for v in nearby] == ["A", "B", "D"]
    assert find_nearby_vertices(graph, Point(50, 50), 10) == []


def test_resolve_click_on_vertex(graph):
    target = resolve_click(Point(2, 3), graph)

    assert target.kind == "vertex"
    assert target.vertex_id == "A"
    assert target.point == Point(0, 0)


def test_resolve_click_on_wall(graph):
    target = resolve_click(Point(50, 4), graph)

    assert target.kind == "edge"
    assert target.edge_id == "AB"
    assert target.point == Point(50, 0)


def test_resolve_click_prefers_vertex_over_wall(graph):
    # Within the snap radius of A and also within reach of wall AB
    target = resolve_click(Point(8, 1), graph)

    assert target.kind == "vertex"
    assert target.vertex_id == "A"


def test_resolve_click_free_point_uses_grid(graph):
    target = resolve_click(Point(52, 47), graph)
    assert target.kind == "free"
    assert target.point == Point(50, 50)

    loose = resolve_click(Point(52, 47), graph, DrawingSettings(snap_enabled=False))
    assert loose.point == Point(52, 47)


def test_resolve_click_on_empty_graph():
    target = resolve_click(Point(37, 142), SpatialGraph(), DrawingSettings(resolution=100))

    assert target.kind == "free"
    assert target.point == Point(0, 100)


def test_grid_snap_rounds_halves_up():
    assert get_snapped_point(Point(50, 150), 100, []) == Point(100, 200)
    assert get_snapped_point(Point(250, 350), 100, []) == Point(300, 400)
    assert snap_to_grid(Point(-150, 5), 10) == Point(-150, 10)


def test_length_snap_keeps_direction_on_diagonal():
    start = Point(0, 0)
    point = get_snapped_point(Point(70, 72), 10, [], start=start)

    assert distance(start, point) == pytest.approx(100.0)
    assert point.y / point.x == pytest.approx(72 / 70)


def test_length_snap_yields_to_vertex_snap():
    vertices = [Vertex("V", 68, 70)]

    assert get_snapped_point(Point(70, 72), 10, vertices, start=Point(0, 0)) == Point(68, 70)
    assert snap_length(Point(0, 0), Point(0, 0), 10) == Point(0, 0)


def test_resolve_click_free_point_landing_on_wall(graph):
    # Too far from AB to hit it directly, but the grid puts it on AB
    target = resolve_click(Point(47, -20), graph, DrawingSettings(resolution=50))

    assert target.kind == "edge"
    assert target.edge_id == "AB"
    assert target.point == Point(50, 0)


def test_resolve_click_free_point_landing_on_vertex(graph):
    target = resolve_click(Point(80, 125), graph, DrawingSettings(resolution=100))

    assert target.kind == "vertex"
    assert target.vertex_id == "C"


def test_resolve_click_snaps_length_from_start():
    target = resolve_click(Point(70, 72), SpatialGraph(), start=Point(0, 0))

    assert target.kind == "free"
    assert distance(Point(0, 0), target.point) == pytest.approx(100.0)
