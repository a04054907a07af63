"""Command Line Interface for Wall Planner.

This module provides a simple CLI for inspecting exported plans, running
scripted editing sessions against them, writing CSV reports and trying
out click snapping.
"""

import logging
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.table import Table

from .config import DEFAULT_PIXELS_PER_MM, DEFAULT_RESOLUTION, DrawingSettings, load_settings
from .core.errors import GraphError
from .core.model import Point
from .core.state import PlanState
from .core.topology import build_wall_adjacency, wall_components
from .engine.api import apply_commands, load_commands
from .engine.history import CommandManager
from .engine.validators import find_issues
from .geom.polygon import surface_perimeter
from .geom.snap import resolve_click
from .io.export import area_to_m2, export_csv, export_json, format_measurement, pixels_to_mm
from .io.parser import load_plan

app = typer.Typer(
    name="wall-planner",
    help="A CLI tool for wall graph editing and room detection",
    no_args_is_help=True,
)
console = Console()


@app.callback()
def setup(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Configure logging for every command."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


@app.command()
def info(
    plan: Path = typer.Option(..., "--plan", "-p", help="Path to plan JSON file"),
    pixels_per_mm: float = typer.Option(
        DEFAULT_PIXELS_PER_MM, "--pixels-per-mm", help="Drawing scale for measurements"
    ),
):
    """Show information about a plan."""
    try:
        state = load_plan(str(plan))
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    graph = state.graph
    counts = graph.counts()
    console.print(f"[bold]Plan Information: {plan}[/bold]")
    console.print(
        f"Vertices: {counts['vertices']}  Walls: {counts['edges']}  "
        f"Rooms: {counts['surfaces']}  Clusters: {len(wall_components(graph))}"
    )
    console.print()

    console.print(f"[cyan]Rooms: {counts['surfaces']}[/cyan]")
    table = Table()
    table.add_column("Room ID", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Walls", justify="center")
    table.add_column("Area (m²)", justify="right")
    table.add_column("Perimeter", justify="right")

    for surface in graph.get_surfaces():
        perimeter = pixels_to_mm(surface_perimeter(graph, surface.id), pixels_per_mm)
        table.add_row(
            str(surface.id),
            surface.name,
            str(len(surface.edge_ids)),
            f"{area_to_m2(surface.area, pixels_per_mm):.2f}",
            format_measurement(perimeter),
        )

    console.print(table)

    console.print(f"\n[cyan]Walls: {counts['edges']}[/cyan]")
    wall_table = Table()
    wall_table.add_column("Wall ID", style="cyan")
    wall_table.add_column("From", style="green")
    wall_table.add_column("To", style="green")
    wall_table.add_column("Length", justify="right")
    wall_table.add_column("Rooms", style="yellow")

    adjacency = build_wall_adjacency(graph)
    for edge_id, edge in graph.edges.items():
        length = pixels_to_mm(graph.edge_length(edge_id), pixels_per_mm)
        rooms = ", ".join(str(r) for r in sorted(adjacency[edge_id])) or "-"
        wall_table.add_row(
            edge_id, edge.start_vertex_id, edge.end_vertex_id, format_measurement(length), rooms
        )

    console.print(wall_table)

    issues = find_issues(graph)
    if issues:
        console.print("\n[bold red]Integrity issues:[/bold red]")
        for issue in issues:
            console.print(f"  [red]- {issue}[/red]")
        raise typer.Exit(1)


@app.command()
def apply(
    commands: Path = typer.Option(..., "--commands", "-c", help="Path to command script JSON file"),
    output: Path = typer.Option(..., "--out", help="Path to output plan JSON file"),
    plan: Optional[Path] = typer.Option(
        None, "--plan", "-p", help="Path to plan JSON file (starts empty when omitted)"
    ),
    validate: bool = typer.Option(True, "--validate/--no-validate", help="Check integrity after each step"),
):
    """Run a command script against a plan and save the result."""
    try:
        state = load_plan(str(plan)) if plan else PlanState()
        script = load_commands(str(commands))
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if plan:
        console.print(f"[green]✓[/green] Loaded plan from {plan}")
    console.print(f"[green]✓[/green] Loaded {len(script)} command(s) from {commands}")

    manager = CommandManager(state)
    try:
        results = apply_commands(manager, script, validate=validate)
    except (GraphError, ValueError) as e:
        console.print(f"[red]✗ Rejected: {e}[/red]")
        raise typer.Exit(1)

    table = Table(title="Applied steps")
    table.add_column("#", justify="right")
    table.add_column("Op", style="cyan")
    table.add_column("Description")
    table.add_column("Changed", justify="center")
    for result in results:
        table.add_row(
            str(result["step"]),
            str(result["op"]),
            result["description"] or "-",
            "✓" if result["changed"] else "-",
        )
    console.print(table)

    export_json(manager.state, str(output))
    counts = manager.graph.counts()
    console.print(
        f"[green]✓[/green] Saved plan to {output} "
        f"({counts['edges']} walls, {counts['surfaces']} rooms)"
    )


@app.command("export-csv")
def export_csv_command(
    plan: Path = typer.Option(..., "--plan", "-p", help="Path to plan JSON file"),
    out_dir: Path = typer.Option(..., "--out-dir", "-o", help="Directory for walls.csv and rooms.csv"),
    pixels_per_mm: float = typer.Option(
        DEFAULT_PIXELS_PER_MM, "--pixels-per-mm", help="Drawing scale for measurements"
    ),
):
    """Write wall and room reports as CSV files."""
    try:
        state = load_plan(str(plan))
        walls_path, rooms_path = export_csv(state, str(out_dir), pixels_per_mm)
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"[green]✓[/green] Wrote {walls_path}")
    console.print(f"[green]✓[/green] Wrote {rooms_path}")


@app.command()
def snap(
    x: float = typer.Option(..., "--x", help="Cursor x coordinate"),
    y: float = typer.Option(..., "--y", help="Cursor y coordinate"),
    resolution: float = typer.Option(DEFAULT_RESOLUTION, "--resolution", "-r", help="Grid spacing"),
    plan: Optional[Path] = typer.Option(None, "--plan", "-p", help="Plan whose vertices and walls to snap onto"),
    scale: float = typer.Option(1.0, "--scale", help="Zoom factor"),
    grid: bool = typer.Option(True, "--grid/--no-grid", help="Enable grid snapping"),
    settings_file: Optional[Path] = typer.Option(None, "--settings", help="Drawing settings JSON file"),
):
    """Show where a click at (x, y) would land."""
    try:
        settings = load_settings(str(settings_file)) if settings_file else DrawingSettings()
        state = load_plan(str(plan)) if plan else PlanState()
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    settings = settings.with_updates(resolution=resolution, snap_enabled=grid)
    target = resolve_click(Point(x, y), state.graph, settings, scale)

    where = "free point"
    if target.kind == "vertex":
        where = f"vertex {target.vertex_id}"
    elif target.kind == "edge":
        where = f"wall {target.edge_id}"
    console.print(f"Snapped: ({target.point.x:g}, {target.point.y:g}) -> {where}")


def main():
    """Main entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
