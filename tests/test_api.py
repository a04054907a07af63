import json

import pytest

from wallplanner.core.errors import InvalidReference
from wallplanner.core.state import PlanState
from wallplanner.engine.api import apply, apply_commands, load_commands

SQUARE_SCRIPT = [
    {"op": "add_vertex", "id": "A", "x": 0, "y": 0},
    {"op": "add_vertex", "id": "B", "x": 100, "y": 0},
    {"op": "add_vertex", "id": "C", "x": 100, "y": 100},
    {"op": "add_vertex", "id": "D", "x": 0, "y": 100},
    {"op": "add_edge", "id": "AB", "start": "A", "end": "B"},
    {"op": "add_edge", "id": "BC", "start": "B", "end": "C"},
    {"op": "add_edge", "id": "CD", "start": "C", "end": "D"},
    {"op": "add_edge", "id": "DA", "start": "D", "end": "A"},
]


def test_apply_single_command():
    state = apply(PlanState(), {"op": "add_vertex", "id": "A", "x": 1, "y": 2})

    assert state.vertices["A"].x == 1.0


def test_apply_rejects_unknown_command():
    with pytest.raises(ValueError):
        apply(PlanState(), {"op": "teleport"})


def test_script_with_history_steps(manager):
    script = SQUARE_SCRIPT + [
        {"op": "rename_surface", "surface": 1, "label": "Kitchen"},
        {"op": "undo"},
        {"op": "redo"},
        {"op": "redo"},
    ]

    results = apply_commands(manager, script)

    assert len(results) == len(script)
    assert results[-3] == {
        "step": 9,
        "op": "undo",
        "description": "Rename room 1 to 'Kitchen'",
        "changed": True,
    }
    assert results[-1]["changed"] is False
    assert manager.graph.surfaces[1].label == "Kitchen"


def test_script_stops_at_first_rejection(manager):
    script = SQUARE_SCRIPT[:2] + [{"op": "add_edge", "id": "AZ", "start": "A", "end": "Z"}]

    with pytest.raises(InvalidReference):
        apply_commands(manager, script)

    assert sorted(manager.state.vertices) == ["A", "B"]


def test_load_commands(tmp_path):
    listed = tmp_path / "list.json"
    listed.write_text(json.dumps(SQUARE_SCRIPT))
    wrapped = tmp_path / "wrapped.json"
    wrapped.write_text(json.dumps({"commands": SQUARE_SCRIPT}))

    assert load_commands(str(listed)) == SQUARE_SCRIPT
    assert load_commands(str(wrapped)) == SQUARE_SCRIPT


def test_load_commands_errors(tmp_path):
    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"op": "undo"}))

    with pytest.raises(ValueError):
        load_commands(str(bad))
    with pytest.raises(FileNotFoundError):
        load_commands(str(tmp_path / "missing.json"))
