"""Sweep orchestrator.

Sequences snapshot capture, planning (grouping + selection and/or predicate
filtering), and removal, and produces the run summary. Supports preview
(dry-run) and execution modes.
"""

from __future__ import annotations

import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Hashable, Optional

from ..backends.base import ResourceRemover, ResourceSource
from ..errors import PredicateError, RemovalCancelled
from ..models.group import GroupDecision
from ..models.removal import RemovalOutcome, RemovalSet, RemovalStatus
from ..models.resource import Resource
from ..models.snapshot import Snapshot
from ..models.summary import ErrorPhase, ItemError, OperationMode, OperationStatus, SweepSummary
from ..planning.grouping import group, select_groups
from ..planning.keys import FunctionKey, KeyExtractor
from ..planning.predicates import Predicate, as_predicate, evaluate, filter_resources
from ..planning.selection import KeepFirst, SelectionPolicy, plan_removals
from ..snapshot.capture import capture
from .audit import AuditStorage
from .executor import RemovalExecutor

logger = logging.getLogger(__name__)


@dataclass
class SweepRequest:
    """Parameters of one sweep run.

    At least one of ``key_extractor`` or ``predicate`` is required; with both,
    the union of their removal sets is executed. Plain callables are accepted
    for ``key_extractor``, ``predicate`` and ``protect`` and wrapped on
    construction.

    Attributes:
        scope: Scope passed to the resource source (optional)
        key_extractor: Groups resources for deduplication (optional)
        predicate: Selects resources for removal directly (optional)
        selection_policy: Chooses each group's survivor (default: KeepFirst)
        min_group_size: Smallest group treated as duplicates (default: 2)
        dry_run: Plan and report without removing anything
        protect: Resources matching this predicate are never removed (optional)
    """

    scope: Optional[str] = None
    key_extractor: Optional[KeyExtractor | Callable[[Resource], Hashable]] = None
    predicate: Optional[Predicate | Callable[[Resource], bool]] = None
    selection_policy: SelectionPolicy = field(default_factory=KeepFirst)
    min_group_size: int = 2
    dry_run: bool = True
    protect: Optional[Predicate | Callable[[Resource], bool]] = None

    def __post_init__(self) -> None:
        if self.key_extractor is not None and not isinstance(self.key_extractor, KeyExtractor):
            self.key_extractor = FunctionKey(self.key_extractor)
        if self.predicate is not None:
            self.predicate = as_predicate(self.predicate)
        if self.protect is not None:
            self.protect = as_predicate(self.protect)

    def validate(self) -> bool:
        """Validate request parameters.

        Raises:
            ValueError: If no selection mechanism is given or min_group_size < 1
        """
        if self.key_extractor is None and self.predicate is None:
            raise ValueError("A sweep needs a key extractor, a predicate, or both")
        if self.min_group_size < 1:
            raise ValueError(f"min_group_size must be at least 1, got {self.min_group_size}")
        return True


@dataclass(frozen=True)
class SweepPlan:
    """Fully computed plan; nothing has been removed yet."""

    snapshot: Snapshot
    groups_found: int
    decisions: tuple[GroupDecision, ...]
    removal_set: RemovalSet
    protected: tuple[str, ...] = ()
    extraction_errors: tuple[ItemError, ...] = ()
    predicate_errors: tuple[ItemError, ...] = ()
    protection_errors: tuple[ItemError, ...] = ()


class SweepOrchestrator:
    """Sweep orchestrator.

    Holds no state between runs; each run owns its snapshot and removal set,
    so the orchestrator is safe to invoke repeatedly and concurrently.

    Attributes:
        source: Enumeration interface of the external system
        executor: Removal executor wrapping the deletion interface
        audit_storage: Audit log for executed runs (optional)
    """

    def __init__(
        self,
        source: ResourceSource,
        remover: Optional[ResourceRemover] = None,
        executor: Optional[RemovalExecutor] = None,
        audit_storage: Optional[AuditStorage] = None,
    ) -> None:
        """Initialize sweep orchestrator.

        Args:
            source: Enumeration interface
            remover: Deletion interface (wrapped in a default RemovalExecutor)
            executor: Preconfigured executor (takes precedence over remover)
            audit_storage: Audit storage for executed runs (optional)

        Raises:
            ValueError: If neither remover nor executor is given
        """
        if executor is None:
            if remover is None:
                raise ValueError("SweepOrchestrator needs a remover or an executor")
            executor = RemovalExecutor(remover)

        self.source = source
        self.executor = executor
        self.audit_storage = audit_storage

    def plan(self, snapshot: Snapshot, request: SweepRequest) -> SweepPlan:
        """Compute the removal plan for a snapshot (pure, no I/O).

        Args:
            snapshot: Captured snapshot
            request: Sweep parameters

        Returns:
            SweepPlan with the final removal set

        Raises:
            ValueError: If the request is invalid
            InvariantViolation: If selection breaks a plan invariant
        """
        request.validate()

        decisions: tuple[GroupDecision, ...] = ()
        groups_found = 0
        removal_set = RemovalSet()
        extraction_errors: tuple[ItemError, ...] = ()
        predicate_errors: tuple[ItemError, ...] = ()

        if request.key_extractor is not None:
            grouping = group(snapshot, request.key_extractor)
            duplicates = select_groups(grouping.groups, request.min_group_size)
            dedup = plan_removals(duplicates, request.selection_policy)
            decisions = dedup.decisions
            groups_found = len(duplicates)
            removal_set = removal_set | dedup.removal_set
            extraction_errors = grouping.errors

        if request.predicate is not None:
            filtered = filter_resources(snapshot, request.predicate)
            removal_set = removal_set | filtered.removal_set
            predicate_errors = filtered.errors

        protected: list[str] = []
        protection_errors: list[ItemError] = []
        if request.protect is not None:
            for resource_id in removal_set:
                resource = snapshot.get(resource_id)
                try:
                    is_protected = evaluate(request.protect, resource)
                except PredicateError as e:
                    logger.warning(f"Protection check failed for {resource_id}, keeping it: {e.reason}")
                    protection_errors.append(ItemError.from_failure(e, ErrorPhase.PROTECTION))
                    is_protected = True
                if is_protected:
                    protected.append(resource_id)
            removal_set = removal_set.without(protected)

        return SweepPlan(
            snapshot=snapshot,
            groups_found=groups_found,
            decisions=decisions,
            removal_set=removal_set,
            protected=tuple(protected),
            extraction_errors=extraction_errors,
            predicate_errors=predicate_errors,
            protection_errors=tuple(protection_errors),
        )

    async def preview(self, request: SweepRequest) -> SweepSummary:
        """Preview what a sweep would remove (dry-run mode).

        Captures a snapshot and computes the plan without issuing any removal.

        Returns:
            SweepSummary in planned status

        Raises:
            SnapshotUnavailable: If the collection cannot be captured
            ValueError: If the request is invalid
        """
        request.validate()
        started_at = datetime.now(timezone.utc)
        snapshot = await capture(self.source, scope=request.scope)
        plan = self.plan(snapshot, request)

        logger.info(
            f"Dry run: {len(plan.snapshot)} resources, {plan.groups_found} duplicate groups, "
            f"{len(plan.removal_set)} removals planned"
        )
        return self._summarize(plan, OperationMode.DRY_RUN, started_at, outcomes=[])

    async def execute(self, request: SweepRequest, confirmed: bool = False) -> SweepSummary:
        """Capture, plan, and remove (execution mode).

        The plan is computed completely before any removal is issued, and all
        outcomes are joined before the summary is produced.

        Args:
            request: Sweep parameters
            confirmed: Must be True to proceed with removal

        Returns:
            SweepSummary with execution results

        Raises:
            ValueError: If not confirmed or the request is invalid
            SnapshotUnavailable: If the collection cannot be captured
            RemovalCancelled: If cancelled mid-batch; carries the cancelled
                run's summary, which is audited before propagating
        """
        if not confirmed:
            raise ValueError("Removal requires explicit confirmation. Set confirmed=True or use --yes flag.")

        request.validate()
        started_at = datetime.now(timezone.utc)
        snapshot = await capture(self.source, scope=request.scope)
        plan = self.plan(snapshot, request)

        try:
            outcomes = await self.executor.remove(plan.removal_set)
        except RemovalCancelled as e:
            summary = self._summarize(plan, OperationMode.EXECUTE, started_at, outcomes=e.outcomes, cancelled=True)
            e.summary = summary
            self._audit(summary)
            logger.warning(
                f"Sweep {summary.operation_id} cancelled: {summary.removals_succeeded} removed, "
                f"{summary.removals_skipped} skipped"
            )
            raise

        summary = self._summarize(plan, OperationMode.EXECUTE, started_at, outcomes=outcomes)
        self._audit(summary)

        logger.info(
            f"Sweep {summary.operation_id} {summary.status.value}: {summary.removals_succeeded} removed, "
            f"{summary.removals_absent} already absent, {len(summary.removals_failed)} failed"
        )
        return summary

    async def run(self, request: SweepRequest) -> SweepSummary:
        """Preview or execute depending on ``request.dry_run``.

        Execution through ``run`` counts as confirmed: the caller opted out of
        the dry run explicitly.
        """
        if request.dry_run:
            return await self.preview(request)
        return await self.execute(request, confirmed=True)

    def _audit(self, summary: SweepSummary) -> None:
        if self.audit_storage is not None:
            self.audit_storage.log_run(summary)

    def _summarize(
        self,
        plan: SweepPlan,
        mode: OperationMode,
        started_at: datetime,
        outcomes: list[RemovalOutcome],
        cancelled: bool = False,
    ) -> SweepSummary:
        status = OperationStatus.CANCELLED if cancelled else self._final_status(mode, outcomes)
        return SweepSummary(
            operation_id=f"op_{uuid.uuid4()}",
            mode=mode,
            status=status,
            started_at=started_at,
            completed_at=datetime.now(timezone.utc),
            scope=plan.snapshot.scope,
            resources_seen=len(plan.snapshot),
            groups_found=plan.groups_found,
            survivors_kept=sum(1 for d in plan.decisions if d.survivor.id not in plan.removal_set),
            decisions=list(plan.decisions),
            removals_planned=len(plan.removal_set),
            planned_ids=list(plan.removal_set.ids),
            protected=list(plan.protected),
            outcomes=outcomes,
            extraction_errors=list(plan.extraction_errors),
            predicate_errors=list(plan.predicate_errors),
            protection_errors=list(plan.protection_errors),
        )

    @staticmethod
    def _final_status(mode: OperationMode, outcomes: list[RemovalOutcome]) -> OperationStatus:
        if mode == OperationMode.DRY_RUN:
            return OperationStatus.PLANNED

        failed_count = sum(1 for o in outcomes if o.status == RemovalStatus.FAILED)
        if failed_count == 0:
            return OperationStatus.COMPLETED
        if failed_count < len(outcomes):
            return OperationStatus.PARTIAL
        return OperationStatus.FAILED
