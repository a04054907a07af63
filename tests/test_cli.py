import json

import pytest
from typer.testing import CliRunner

from wallplanner.cli import app
from wallplanner.io.export import export_json
from wallplanner.io.parser import load_plan

runner = CliRunner()


@pytest.fixture
def plan_file(square, tmp_path):
    return export_json(square.state, str(tmp_path / "plan.json"))


def test_snap_to_grid():
    result = runner.invoke(app, ["snap", "--x", "37", "--y", "142", "--resolution", "100"])

    assert result.exit_code == 0
    assert "Snapped: (0, 100) -> free point" in result.output


def test_snap_onto_plan_vertex(plan_file):
    result = runner.invoke(app, ["snap", "--x", "97", "--y", "2", "--plan", str(plan_file)])

    assert result.exit_code == 0
    assert "Snapped: (100, 0) -> vertex B" in result.output


def test_info(plan_file):
    result = runner.invoke(app, ["info", "--plan", str(plan_file)])

    assert result.exit_code == 0
    assert "Rooms: 1" in result.output
    assert "Room 1" in result.output


def test_info_missing_file(tmp_path):
    result = runner.invoke(app, ["info", "--plan", str(tmp_path / "missing.json")])

    assert result.exit_code == 1
    assert "Error" in result.output


def test_apply_script(plan_file, tmp_path):
    commands = tmp_path / "commands.json"
    commands.write_text(
        json.dumps(
            [
                {"op": "add_edge", "id": "AC", "start": "A", "end": "C"},
                {"op": "rename_surface", "surface": 2, "label": "Bath"},
            ]
        )
    )
    out = tmp_path / "result.json"

    result = runner.invoke(
        app, ["apply", "--plan", str(plan_file), "--commands", str(commands), "--out", str(out)]
    )

    assert result.exit_code == 0
    state = load_plan(str(out))
    assert sorted(state.surfaces) == [2, 3]
    assert state.surfaces[2].label == "Bath"


def test_apply_without_plan_starts_empty(tmp_path):
    commands = tmp_path / "commands.json"
    commands.write_text(
        json.dumps(
            [
                {"op": "draw_wall", "id": "AB", "start": {"id": "A", "x": 0, "y": 0}, "end": {"id": "B", "x": 10, "y": 0}},
            ]
        )
    )
    out = tmp_path / "result.json"

    result = runner.invoke(app, ["apply", "--commands", str(commands), "--out", str(out)])

    assert result.exit_code == 0
    assert list(load_plan(str(out)).edges) == ["AB"]


def test_apply_reports_rejection(plan_file, tmp_path):
    commands = tmp_path / "commands.json"
    commands.write_text(json.dumps([{"op": "add_edge", "id": "BA", "start": "B", "end": "A"}]))
    out = tmp_path / "result.json"

    result = runner.invoke(
        app, ["apply", "--plan", str(plan_file), "--commands", str(commands), "--out", str(out)]
    )

    assert result.exit_code == 1
    assert "Rejected" in result.output
    assert not out.exists()


def test_export_csv(plan_file, tmp_path):
    out_dir = tmp_path / "reports"

    result = runner.invoke(app, ["export-csv", "--plan", str(plan_file), "--out-dir", str(out_dir)])

    assert result.exit_code == 0
    assert (out_dir / "walls.csv").exists()
    assert (out_dir / "rooms.csv").read_text(encoding="utf-8").splitlines()[1] == "1,Room 1,1.00"
