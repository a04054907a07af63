"""Core API for scripted plan editing.

This module provides the main interface for applying command dicts to
plans, either one-off against a state or as a session script run
through a ``CommandManager`` with undo and redo steps.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any, Dict, List, Mapping, Sequence

from ..core.errors import InvariantViolation
from ..core.state import PlanState
from .commands import command_from_dict
from .history import CommandManager
from .validators import validate_all

LOGGER = logging.getLogger(__name__)

_HISTORY_STEPS = ("undo", "redo")


def apply(state: PlanState, command: Mapping[str, Any]) -> PlanState:
    """Apply a single command dict to a state and return the new state.

    Args:
        state: The state to modify.
        command: Dictionary describing the command to apply.

    Returns:
        A new PlanState with the command applied.

    Raises:
        ValueError: If the command type is not recognized.
        GraphError: If the command is rejected.
        InvariantViolation: If the result fails validation.
    """
    new_state = command_from_dict(command).execute(state)

    try:
        validate_all(new_state)
    except InvariantViolation as e:
        raise InvariantViolation(f"Command failed validation: {e.reason}") from e

    return new_state


def apply_commands(
    manager: CommandManager,
    commands: Sequence[Mapping[str, Any]],
    validate: bool = True,
) -> List[Dict[str, Any]]:
    """Run a session script through a command manager.

    Besides registered commands, a step may be ``{"op": "undo"}`` or
    ``{"op": "redo"}``. The script stops at the first rejected step;
    the error propagates and every earlier step stays applied.

    Args:
        manager: Manager owning the session.
        commands: Steps to run, in order.
        validate: Whether to validate the state after every step.

    Returns:
        One record per step with the step index, operation name, a
        description and whether it changed anything.
    """
    results = []

    for index, step in enumerate(commands):
        op = step.get("op") or step.get("type")

        if op in _HISTORY_STEPS:
            description = manager.undo_description() if op == "undo" else manager.redo_description()
            changed = manager.undo() if op == "undo" else manager.redo()
            if not changed:
                LOGGER.info("Step %d: nothing to %s", index, op)
        else:
            command = command_from_dict(step)
            manager.dispatch(command)
            description = command.describe()
            changed = True

        if validate:
            validate_all(manager.state)

        results.append({"step": index, "op": op, "description": description, "changed": changed})

    return results


def load_commands(path: str) -> List[Dict[str, Any]]:
    """Load a session script from a JSON file.

    The file holds either a list of command dicts or an object with a
    ``commands`` list.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file has the wrong shape.
    """
    file_path = Path(path)
    if not file_path.exists():
        raise FileNotFoundError(f"File not found: {path}")

    with open(file_path, encoding="utf-8") as f:
        data = json.load(f)

    if isinstance(data, dict):
        data = data.get("commands")

    if not isinstance(data, list) or not all(isinstance(item, dict) for item in data):
        raise ValueError("Command file must contain a list of command objects")

    return data
