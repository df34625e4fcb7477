"""
Editorial workflow: statuses, the role-gated transition table and the engine.
"""

from .states import (
    DEFAULT_TRANSITIONS,
    AssignmentStatus,
    Transition,
    TransitionTable,
    WorkflowStatus,
)

__all__ = [
    "DEFAULT_TRANSITIONS",
    "AssignmentStatus",
    "Transition",
    "TransitionTable",
    "WorkflowStatus",
]
