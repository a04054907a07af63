import pytest

from conftest import draw

from wallplanner.config import DrawingSettings
from wallplanner.core.errors import StructuralConflict
from wallplanner.core.model import Point
from wallplanner.core.state import PlanState
from wallplanner.engine.drafting import WallDraft


def test_first_click_stays_out_of_history(manager):
    draft = WallDraft(manager)

    assert draft.click(Point(1, 2)) is None
    assert draft.is_drawing
    assert draft.pending.point == Point(0, 0)
    assert manager.history_size() == 0
    assert manager.state == PlanState()


def test_cancel_leaves_plan_untouched(square):
    state = square.state
    draft = WallDraft(square)

    draft.click(Point(50, 50))
    draft.cancel()

    assert not draft.is_drawing
    assert square.state is state
    assert square.history_size() == 8


def test_chain_of_clicks_draws_a_room(manager):
    draft = WallDraft(manager)

    for x, y in [(0, 0), (100, 0), (100, 100), (0, 100), (0, 0)]:
        draft.click(Point(x, y))

    assert manager.history_size() == 4
    assert len(manager.graph.vertices) == 4
    (room,) = manager.graph.get_surfaces()
    assert room.area == pytest.approx(10000.0)

    # The chain continues from the last vertex
    assert draft.pending.kind == "vertex"
    assert draft.pending.point == Point(0, 0)


def test_clicking_start_again_does_nothing(square):
    draft = WallDraft(square)

    draft.click(Point(1, 1))
    assert draft.click(Point(2, 2)) is None
    assert square.history_size() == 8


def test_wall_between_two_walls_splits_both(square):
    before = square.state
    draft = WallDraft(square)

    draft.click(Point(50, 2))
    draft.click(Point(50, 99))

    graph = square.graph
    assert square.history_size() == 9
    assert len(graph.vertices) == 6
    assert len(graph.edges) == 7
    areas = sorted(s.area for s in graph.get_surfaces())
    assert areas == [pytest.approx(5000.0), pytest.approx(5000.0)]

    # One undo removes the wall and both splits
    square.undo()
    assert square.state == before


def test_rejected_wall_keeps_start_point(square):
    draft = WallDraft(square)

    draft.click(Point(30, 2))
    with pytest.raises(StructuralConflict):
        draft.click(Point(70, 2))

    assert draft.is_drawing
    assert draft.pending.edge_id == "AB"
    assert square.history_size() == 8


def test_snapped_end_on_wall_interior_splits_it(manager):
    draw(manager, {"A": (0.0, 0.0), "B": (400.0, 0.0)}, [("AB", "A", "B")])
    draft = WallDraft(manager, DrawingSettings(resolution=100))

    draft.click(Point(230, 200))
    # 40 units below AB, outside the snap radius; the 200 long wall ends on AB
    draft.click(Point(200, -40))

    graph = manager.graph
    junction = draft.pending.vertex_id
    assert "AB" not in graph.edges
    assert len(graph.edges) == 3
    assert graph.degree(junction) == 3
    assert graph.vertices[junction].point == Point(200, 0)


def test_wall_length_snaps_along_the_cursor_direction(manager):
    draft = WallDraft(manager)

    draft.click(Point(0, 0))
    draft.click(Point(70, 72))

    (edge,) = manager.graph.edges
    assert manager.graph.edge_length(edge) == pytest.approx(100.0)
