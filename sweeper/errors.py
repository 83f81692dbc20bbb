"""Exception taxonomy for sweep runs.

Collection-level failures (``SnapshotUnavailable``) and invariant breaches
(``InvariantViolation``) abort a run. Per-item failures (``KeyExtractionError``, ``PredicateError``,
``RemovalFailure``) are recorded in the run summary and the batch continues.
``RemovalCancelled`` derives from ``asyncio.CancelledError`` and carries the
outcomes of a cancelled batch.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from .models.removal import RemovalOutcome
    from .models.summary import SweepSummary


class SweeperError(Exception):
    """Base class for all sweeper errors."""


class ConfigError(SweeperError):
    """Invalid configuration file or environment value."""


class SnapshotUnavailable(SweeperError):
    """The enumeration call failed; nothing may be removed in this run."""


class InvariantViolation(SweeperError):
    """Internal consistency check failed."""


class EmptyGroup(InvariantViolation):
    """A selection policy was invoked on a group with no members."""


class ItemFailure(SweeperError):
    """Failure confined to a single resource.

    Attributes:
        resource_id: Identity of the resource that failed
        reason: Human-readable failure reason
    """

    def __init__(self, resource_id: str, reason: str) -> None:
        super().__init__(f"{resource_id}: {reason}")
        self.resource_id = resource_id
        self.reason = reason


class KeyExtractionError(ItemFailure):
    """A key extractor failed for one resource."""


class PredicateError(ItemFailure):
    """A predicate failed for one resource."""


class RemovalFailure(ItemFailure):
    """A removal request failed for one resource."""


class ResourceNotFound(SweeperError):
    """Raised by removers when the target no longer exists."""

    def __init__(self, resource_id: str, message: Optional[str] = None) -> None:
        super().__init__(message or f"Resource {resource_id} not found")
        self.resource_id = resource_id


class TransientRemovalError(SweeperError):
    """Raised by removers for failures worth retrying (throttling, busy resource)."""


class RemovalCancelled(asyncio.CancelledError):
    """A removal batch was cancelled after some requests were dispatched.

    Subclasses ``asyncio.CancelledError`` so cancellation keeps propagating
    through tasks and timeouts, while carrying every outcome collected before
    the batch stopped.

    Attributes:
        outcomes: One outcome per id; undispatched ids are ``skipped``
        summary: Run summary, attached by the orchestrator (optional)
    """

    def __init__(self, outcomes: list[RemovalOutcome]) -> None:
        super().__init__(f"Removal batch cancelled after {len(outcomes)} outcomes")
        self.outcomes = outcomes
        self.summary: Optional[SweepSummary] = None
