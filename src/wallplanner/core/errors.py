"""Error taxonomy for graph mutations and detection passes."""

from __future__ import annotations


class GraphError(Exception):
    """Base class for every rejected graph operation.

    Attributes:
        reason: Human-readable explanation of the rejection.
    """

    def __init__(self, reason: str):
        super().__init__(reason)
        self.reason = reason


class DuplicateId(GraphError):
    """Raised when an entity id is already taken."""


class InvalidReference(GraphError):
    """Raised when an operation touches a nonexistent vertex or edge id."""


class DegenerateGeometry(GraphError):
    """Raised when a zero-length wall would be created."""


class StructuralConflict(GraphError):
    """Raised when two walls would join the same pair of vertices."""


class InvariantViolation(GraphError):
    """Raised when internal graph consistency is broken.

    This signals a bug in the graph store, not bad user input.
    """


class NestedDispatch(GraphError):
    """Raised when a command tries to dispatch while another is running."""
