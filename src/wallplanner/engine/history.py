"""Undo/redo history for plan editing commands."""

from __future__ import annotations

import logging
from collections import deque
from contextlib import contextmanager
from typing import Deque, Iterator, List, Optional

from ..config import MAX_HISTORY_SIZE
from ..core.errors import GraphError, NestedDispatch
from ..core.graph import SpatialGraph
from ..core.state import PlanState
from .commands import Command

LOGGER = logging.getLogger(__name__)


class CommandManager:
    """Owns the current plan state and the command history.

    The only way to change the state is ``dispatch``; ``undo`` and
    ``redo`` walk strictly LIFO over the dispatched commands. Dispatching
    a new command discards the redo branch.

    Args:
        state: Initial state. Defaults to an empty plan.
        max_history: Number of undoable commands kept; the oldest are
            dropped first.
    """

    def __init__(self, state: Optional[PlanState] = None, max_history: int = MAX_HISTORY_SIZE):
        if max_history < 1:
            raise ValueError(f"max_history must be positive, got: {max_history}")
        self._state = state if state is not None else PlanState()
        self._history: Deque[Command] = deque(maxlen=max_history)
        self._redo: List[Command] = []
        self._busy = False

    @property
    def state(self) -> PlanState:
        return self._state

    @property
    def graph(self) -> SpatialGraph:
        return self._state.graph

    @contextmanager
    def _running(self, action: str) -> Iterator[None]:
        if self._busy:
            raise NestedDispatch(f"Cannot {action} while another command is running")
        self._busy = True
        try:
            yield
        finally:
            self._busy = False

    def dispatch(self, command: Command) -> PlanState:
        """Execute a command and record it in the history.

        Args:
            command: The command to apply.

        Returns:
            The new current state.

        Raises:
            GraphError: If the command is rejected. State and history are
                left unchanged.
        """
        with self._running("dispatch"):
            try:
                new_state = command.execute(self._state)
            except GraphError as e:
                LOGGER.warning("Rejected: %s: %s", command.describe(), e.reason)
                raise

        self._state = new_state
        self._history.append(command)
        self._redo.clear()
        LOGGER.info("Executed: %s", command.describe())
        return new_state

    def undo(self) -> bool:
        """Revert the most recent command.

        Returns:
            True if a command was undone, False if the history was empty.
        """
        if not self._history:
            return False

        with self._running("undo"):
            command = self._history[-1]
            self._state = command.undo(self._state)
            self._history.pop()

        self._redo.append(command)
        LOGGER.info("Undone: %s", command.describe())
        return True

    def redo(self) -> bool:
        """Re-apply the most recently undone command.

        Returns:
            True if a command was redone, False if there was nothing to redo.
        """
        if not self._redo:
            return False

        with self._running("redo"):
            command = self._redo[-1]
            self._state = command.execute(self._state)
            self._redo.pop()

        self._history.append(command)
        LOGGER.info("Redone: %s", command.describe())
        return True

    def can_undo(self) -> bool:
        return bool(self._history)

    def can_redo(self) -> bool:
        return bool(self._redo)

    def undo_description(self) -> Optional[str]:
        return self._history[-1].describe() if self._history else None

    def redo_description(self) -> Optional[str]:
        return self._redo[-1].describe() if self._redo else None

    def history_size(self) -> int:
        return len(self._history)

    def clear_history(self) -> None:
        """Forget all undo and redo steps; the current state is kept."""
        self._history.clear()
        self._redo.clear()
