import csv
import json

import pytest

from wallplanner.core.graph import SpatialGraph
from wallplanner.core.model import Edge
from wallplanner.engine.commands import AddEdge, RemoveEntity, RenameSurface
from wallplanner.engine.history import CommandManager
from wallplanner.io.export import (
    ROOM_COLUMNS,
    WALL_COLUMNS,
    area_to_m2,
    export_csv,
    export_json,
    format_measurement,
    mm_to_pixels,
    pixels_to_mm,
    room_rows,
    to_export_dict,
    wall_rows,
)
from wallplanner.io.parser import load_plan, plan_from_dict


def test_export_document(square):
    square.dispatch(RenameSurface(1, "Kitchen"))
    doc = to_export_dict(square.state, timestamp="2024-01-01T00:00:00+00:00")

    assert doc["version"] == "1.0.0"
    assert doc["timestamp"] == "2024-01-01T00:00:00+00:00"
    assert doc["data"]["vertices"]["B"] == {"x": 100.0, "y": 0.0}
    assert doc["data"]["edges"]["AB"] == {"startVertexId": "A", "endVertexId": "B"}

    room = doc["data"]["surfaces"]["1"]
    assert room["edgeIds"] == ["AB", "BC", "CD", "DA"]
    assert room["area"] == pytest.approx(10000.0)
    assert room["label"] == "Kitchen"
    assert doc["metadata"] == {
        "totalArea": pytest.approx(10000.0),
        "roomCount": 1,
        "wallCount": 4,
        "surfaceIdHighWater": 1,
    }


def test_unlabelled_rooms_have_no_label_key(square):
    doc = to_export_dict(square.graph)
    assert "label" not in doc["data"]["surfaces"]["1"]
    assert doc["timestamp"]


def test_round_trip(split_square, tmp_path):
    split_square.dispatch(RenameSurface(3, "Bath"))
    path = export_json(split_square.state, str(tmp_path / "out" / "plan.json"))

    loaded = load_plan(str(path))

    assert loaded == split_square.state
    assert loaded.surfaces[3].label == "Bath"
    assert loaded.graph.surface_id_high_water == 3


def test_reload_keeps_retired_room_ids_retired(split_square, tmp_path):
    split_square.dispatch(RemoveEntity("AC"))
    assert list(split_square.graph.surfaces) == [4]

    path = export_json(split_square.state, str(tmp_path / "plan.json"))
    reloaded = CommandManager(load_plan(str(path)))
    assert reloaded.graph.surface_id_high_water == 4

    reloaded.dispatch(AddEdge(Edge("AC", "A", "C")))
    assert sorted(reloaded.graph.surfaces) == [5, 6]


def test_exported_ids_advance_the_counter(square):
    doc = to_export_dict(square.state)
    doc["data"]["surfaces"] = {"7": {"edgeIds": ["gone1", "gone2", "gone3"], "area": 1.0}}

    state = plan_from_dict(doc)
    assert list(state.surfaces) == [8]


def test_parser_accepts_bare_data_and_legacy_edges():
    state = plan_from_dict(
        {
            "vertices": {"A": {"x": 0, "y": 0}, "B": {"x": 10, "y": 0}, "C": {"x": 0, "y": 10}},
            "edges": {
                "AB": {"startId": "A", "endId": "B"},
                "BC": {"startId": "B", "endId": "C"},
                "CA": {"startId": "C", "endId": "A"},
            },
        }
    )

    (room,) = state.graph.get_surfaces()
    assert room.id == 1
    assert room.area == pytest.approx(50.0)


def test_parser_errors(tmp_path):
    with pytest.raises(ValueError, match="Invalid edge data for AZ"):
        plan_from_dict({"vertices": {"A": {"x": 0, "y": 0}}, "edges": {"AZ": {"startVertexId": "A", "endVertexId": "Z"}}})
    with pytest.raises(ValueError, match="Invalid vertex data for A"):
        plan_from_dict({"vertices": {"A": {"x": 0}}})
    with pytest.raises(ValueError, match="Invalid surface data for x"):
        plan_from_dict({"surfaces": {"x": {"edgeIds": []}}})
    with pytest.raises(ValueError):
        plan_from_dict([])
    with pytest.raises(FileNotFoundError):
        load_plan(str(tmp_path / "missing.json"))


def test_measurements():
    assert pixels_to_mm(10, 0.1) == pytest.approx(100.0)
    assert mm_to_pixels(100, 0.1) == pytest.approx(10.0)
    assert area_to_m2(10000, 0.1) == pytest.approx(1.0)
    assert format_measurement(1234.4) == "1234 mm"
    with pytest.raises(ValueError):
        pixels_to_mm(10, 0)


def test_rows(square):
    walls = wall_rows(square.state)
    assert [row[0] for row in walls] == ["AB", "BC", "CD", "DA"]
    assert walls[0][-1] == "1000.00"

    assert room_rows(square.state) == [[1, "Room 1", "1.00"]]


def test_export_csv(square, tmp_path):
    walls_path, rooms_path = export_csv(square.state, str(tmp_path / "reports"))

    with open(walls_path, newline="", encoding="utf-8") as f:
        walls = list(csv.reader(f))
    with open(rooms_path, newline="", encoding="utf-8") as f:
        rooms = list(csv.reader(f))

    assert walls[0] == WALL_COLUMNS
    assert len(walls) == 5
    assert walls[1][0] == "AB" and walls[1][5] == "1000.00"
    assert rooms == [ROOM_COLUMNS, ["1", "Room 1", "1.00"]]


def test_empty_graph_exports(tmp_path):
    doc = to_export_dict(SpatialGraph(), timestamp="t")
    assert doc["metadata"] == {"totalArea": 0, "roomCount": 0, "wallCount": 0, "surfaceIdHighWater": 0}

    path = export_json(SpatialGraph(), str(tmp_path / "empty.json"))
    assert json.loads(path.read_text(encoding="utf-8"))["data"]["edges"] == {}
