"""Sweep run summary model.

Represents one complete run with its plan, outcomes, and every per-item error.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Optional

from ..errors import ItemFailure
from .group import GroupDecision
from .removal import RemovalOutcome, RemovalStatus


class OperationMode(Enum):
    """Run execution mode."""

    DRY_RUN = "dry-run"
    EXECUTE = "execute"


class OperationStatus(Enum):
    """Run status.

    planned: dry run, nothing removed
    completed: every issued removal succeeded or was already absent
    partial: some removals failed
    failed: every issued removal failed
    cancelled: stopped mid-batch; undispatched removals were skipped
    """

    PLANNED = "planned"
    COMPLETED = "completed"
    PARTIAL = "partial"
    FAILED = "failed"
    CANCELLED = "cancelled"


class ErrorPhase(Enum):
    """Phase in which a per-item error occurred."""

    KEY_EXTRACTION = "key_extraction"
    PREDICATE = "predicate"
    PROTECTION = "protection"
    REMOVAL = "removal"


@dataclass(frozen=True)
class ItemError:
    """A per-resource error isolated from the rest of the batch."""

    resource_id: str
    phase: ErrorPhase
    reason: str
    error_type: str = ""

    @classmethod
    def from_failure(cls, failure: ItemFailure, phase: ErrorPhase) -> "ItemError":
        return cls(
            resource_id=failure.resource_id,
            phase=phase,
            reason=failure.reason,
            error_type=type(failure).__name__,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.resource_id,
            "phase": self.phase.value,
            "reason": self.reason,
            "error_type": self.error_type,
        }


@dataclass
class SweepSummary:
    """Structured report of one sweep run.

    Attributes:
        operation_id: Unique identifier for the run
        mode: dry-run or execute
        status: Final run status
        started_at: When the run began (UTC)
        completed_at: When all outcomes were joined (UTC)
        scope: Scope the snapshot was captured for (optional)
        resources_seen: Resources in the snapshot
        groups_found: Groups meeting the minimum size
        survivors_kept: One per group
        decisions: Per-group survivor choices
        removals_planned: Ids in the final removal set
        planned_ids: The final removal set, in execution order
        protected: Ids withheld from removal by the protection predicate
        outcomes: Per-id removal outcomes (empty for dry runs)
        extraction_errors: Resources excluded from grouping
        predicate_errors: Resources excluded from the predicate pass
        protection_errors: Resources protected because the protection check failed
    """

    operation_id: str
    mode: OperationMode
    status: OperationStatus
    started_at: datetime
    completed_at: Optional[datetime] = None
    scope: Optional[str] = None
    resources_seen: int = 0
    groups_found: int = 0
    survivors_kept: int = 0
    decisions: list[GroupDecision] = field(default_factory=list)
    removals_planned: int = 0
    planned_ids: list[str] = field(default_factory=list)
    protected: list[str] = field(default_factory=list)
    outcomes: list[RemovalOutcome] = field(default_factory=list)
    extraction_errors: list[ItemError] = field(default_factory=list)
    predicate_errors: list[ItemError] = field(default_factory=list)
    protection_errors: list[ItemError] = field(default_factory=list)

    def _count(self, status: RemovalStatus) -> int:
        return sum(1 for o in self.outcomes if o.status == status)

    @property
    def removals_issued(self) -> int:
        """Removal requests actually dispatched."""
        return sum(1 for o in self.outcomes if o.status != RemovalStatus.SKIPPED)

    @property
    def removals_succeeded(self) -> int:
        return self._count(RemovalStatus.SUCCEEDED)

    @property
    def removals_absent(self) -> int:
        return self._count(RemovalStatus.ABSENT)

    @property
    def removals_skipped(self) -> int:
        return self._count(RemovalStatus.SKIPPED)

    @property
    def removals_failed(self) -> list[dict[str, Optional[str]]]:
        return [{"id": o.resource_id, "reason": o.reason} for o in self.outcomes if o.is_error]

    @property
    def errors(self) -> list[ItemError]:
        """Every error encountered during the run, by phase."""
        removal_errors = [
            ItemError(resource_id=o.resource_id, phase=ErrorPhase.REMOVAL, reason=o.reason or "", error_type="RemovalFailure")
            for o in self.outcomes
            if o.is_error
        ]
        return [*self.extraction_errors, *self.predicate_errors, *self.protection_errors, *removal_errors]

    @property
    def duration_seconds(self) -> Optional[float]:
        if self.completed_at is None:
            return None
        return (self.completed_at - self.started_at).total_seconds()

    def to_dict(self) -> dict[str, Any]:
        """Convert summary to dictionary for serialization."""
        return {
            "operation_id": self.operation_id,
            "mode": self.mode.value,
            "status": self.status.value,
            "scope": self.scope,
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat() if self.completed_at else None,
            "duration_seconds": self.duration_seconds,
            "resources_seen": self.resources_seen,
            "groups_found": self.groups_found,
            "survivors_kept": self.survivors_kept,
            "removals_planned": self.removals_planned,
            "removals_issued": self.removals_issued,
            "removals_succeeded": self.removals_succeeded,
            "removals_absent": self.removals_absent,
            "removals_skipped": self.removals_skipped,
            "removals_failed": self.removals_failed,
            "extraction_errors": [e.to_dict() for e in self.extraction_errors],
            "predicate_errors": [e.to_dict() for e in self.predicate_errors],
            "protection_errors": [e.to_dict() for e in self.protection_errors],
            "protected": list(self.protected),
            "planned_ids": list(self.planned_ids),
            "groups": [d.to_dict() for d in self.decisions],
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
