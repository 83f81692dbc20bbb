"""Removal set and per-resource removal outcome models."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, Iterator, Mapping, Optional, Tuple


class RemovalStatus(Enum):
    """Individual resource removal status."""

    SUCCEEDED = "succeeded"
    FAILED = "failed"
    ABSENT = "absent"
    SKIPPED = "skipped"


class RemovalSet:
    """Insertion-ordered set of resource ids selected for removal.

    Each id carries the reason it was selected ("duplicate of X", "matched
    predicate Y"). Instances are immutable; ``|`` and ``without`` return new
    sets. When the same id is selected twice, the first reason wins.
    """

    __slots__ = ("_reasons",)

    def __init__(self, reasons: Optional[Mapping[str, str]] = None) -> None:
        self._reasons: Dict[str, str] = dict(reasons or {})

    @classmethod
    def from_ids(cls, ids: Iterable[str], reason: str = "") -> "RemovalSet":
        return cls({resource_id: reason for resource_id in ids})

    def __contains__(self, resource_id: object) -> bool:
        return resource_id in self._reasons

    def __iter__(self) -> Iterator[str]:
        return iter(self._reasons)

    def __len__(self) -> int:
        return len(self._reasons)

    def __bool__(self) -> bool:
        return bool(self._reasons)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, RemovalSet):
            return set(self._reasons) == set(other._reasons)
        if isinstance(other, (set, frozenset)):
            return set(self._reasons) == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"RemovalSet({list(self._reasons)!r})"

    def __or__(self, other: "RemovalSet") -> "RemovalSet":
        return self.union(other)

    def union(self, other: "RemovalSet") -> "RemovalSet":
        merged = dict(self._reasons)
        for resource_id, reason in other.items():
            merged.setdefault(resource_id, reason)
        return RemovalSet(merged)

    def without(self, ids: Iterable[str]) -> "RemovalSet":
        """Return a copy with ``ids`` removed (shrinks a plan before execution)."""
        excluded = set(ids)
        return RemovalSet({k: v for k, v in self._reasons.items() if k not in excluded})

    def reason(self, resource_id: str) -> str:
        return self._reasons[resource_id]

    def items(self) -> Iterator[Tuple[str, str]]:
        return iter(self._reasons.items())

    @property
    def ids(self) -> Tuple[str, ...]:
        return tuple(self._reasons)


@dataclass
class RemovalOutcome:
    """Result of a single removal attempt.

    Validation rules:
        - status=failed: requires reason
        - status=succeeded: no reason

    Attributes:
        resource_id: Resource the request targeted
        status: Outcome of the request
        reason: Failure, absence or skip explanation (optional)
        attempts: Number of removal requests issued (0 when skipped)
        timestamp: When the outcome was recorded (UTC)
    """

    resource_id: str
    status: RemovalStatus
    reason: Optional[str] = None
    attempts: int = 1
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    @classmethod
    def succeeded(cls, resource_id: str, attempts: int = 1) -> "RemovalOutcome":
        return cls(resource_id=resource_id, status=RemovalStatus.SUCCEEDED, attempts=attempts)

    @classmethod
    def failed(cls, resource_id: str, reason: str, attempts: int = 1) -> "RemovalOutcome":
        return cls(resource_id=resource_id, status=RemovalStatus.FAILED, reason=reason, attempts=attempts)

    @classmethod
    def absent(cls, resource_id: str, reason: Optional[str] = None, attempts: int = 1) -> "RemovalOutcome":
        return cls(
            resource_id=resource_id,
            status=RemovalStatus.ABSENT,
            reason=reason or "already absent",
            attempts=attempts,
        )

    @classmethod
    def skipped(cls, resource_id: str, reason: str) -> "RemovalOutcome":
        return cls(resource_id=resource_id, status=RemovalStatus.SKIPPED, reason=reason, attempts=0)

    @property
    def is_error(self) -> bool:
        """Only failed outcomes count as errors; absent is a benign no-op."""
        return self.status == RemovalStatus.FAILED

    def validate(self) -> bool:
        """Validate outcome invariants.

        Returns:
            True if validation passes

        Raises:
            ValueError: If any validation rule fails
        """
        if self.status == RemovalStatus.FAILED and not self.reason:
            raise ValueError("Failed status requires reason")
        if self.status == RemovalStatus.SUCCEEDED and self.reason:
            raise ValueError("Succeeded status cannot have a reason")
        if self.attempts < 0:
            raise ValueError("Attempts cannot be negative")
        return True

    def to_dict(self) -> dict[str, Any]:
        return {
            "resource_id": self.resource_id,
            "status": self.status.value,
            "reason": self.reason,
            "attempts": self.attempts,
            "timestamp": self.timestamp.isoformat(),
        }
