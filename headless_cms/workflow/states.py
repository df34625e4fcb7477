"""
Workflow statuses and the role-gated transition table.
"""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, NamedTuple, Set, Tuple


class WorkflowStatus(str, Enum):
    DRAFT = "draft"
    IN_REVIEW = "in_review"
    READY_FOR_APPROVAL = "ready_for_approval"
    APPROVED = "approved"
    PUBLISHED = "published"
    REJECTED = "rejected"


class AssignmentStatus(str, Enum):
    PENDING = "pending"
    COMPLETED = "completed"


class Transition(NamedTuple):
    from_status: str
    to_status: str
    required_role: str


def _rows(from_status: WorkflowStatus, to_status: WorkflowStatus, *roles: str) -> List[Transition]:
    return [Transition(from_status.value, to_status.value, role) for role in roles]


# Seeded into workflow_transitions; the engine reads the stored rows.
DEFAULT_TRANSITIONS: Tuple[Transition, ...] = tuple(
    _rows(WorkflowStatus.DRAFT, WorkflowStatus.IN_REVIEW, "editor", "admin")
    + _rows(WorkflowStatus.IN_REVIEW, WorkflowStatus.READY_FOR_APPROVAL, "editor", "admin")
    + _rows(WorkflowStatus.IN_REVIEW, WorkflowStatus.REJECTED, "editor", "admin")
    + _rows(WorkflowStatus.IN_REVIEW, WorkflowStatus.DRAFT, "editor", "admin")
    + _rows(WorkflowStatus.READY_FOR_APPROVAL, WorkflowStatus.APPROVED, "manager", "admin")
    + _rows(WorkflowStatus.READY_FOR_APPROVAL, WorkflowStatus.REJECTED, "manager", "admin")
    + _rows(WorkflowStatus.APPROVED, WorkflowStatus.PUBLISHED, "manager", "admin")
    + _rows(WorkflowStatus.REJECTED, WorkflowStatus.DRAFT, "editor", "admin")
)


class TransitionTable:
    """Lookup over a set of (from, to, role) rows."""

    def __init__(self, rows: Iterable[Transition]):
        self._rows: Set[Transition] = {
            Transition(r.from_status, r.to_status, r.required_role) for r in rows
        }

    def __len__(self) -> int:
        return len(self._rows)

    def allows(self, from_status: str, to_status: str, role: str) -> bool:
        return Transition(from_status, to_status, role) in self._rows

    def has_pair(self, from_status: str, to_status: str) -> bool:
        return any(
            r.from_status == from_status and r.to_status == to_status for r in self._rows
        )

    def allowed_targets(self, from_status: str, role: str) -> List[str]:
        """Statuses reachable from ``from_status`` for ``role``."""
        return sorted(
            {
                r.to_status
                for r in self._rows
                if r.from_status == from_status and r.required_role == role
            }
        )


def is_valid_status(value: str) -> bool:
    return value in {s.value for s in WorkflowStatus}
