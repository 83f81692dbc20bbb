"""Tests for RemovalSet, RemovalOutcome and SweepSummary models."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from sweeper.errors import KeyExtractionError
from sweeper.models.group import Group, GroupDecision
from sweeper.models.removal import RemovalOutcome, RemovalSet, RemovalStatus
from sweeper.models.resource import Resource
from sweeper.models.summary import ErrorPhase, ItemError, OperationMode, OperationStatus, SweepSummary


class TestRemovalSet:
    """Test suite for RemovalSet."""

    def test_preserves_insertion_order(self) -> None:
        """Test ids iterate in the order they were selected."""
        removal_set = RemovalSet.from_ids(["c", "a", "b"], reason="duplicate")

        assert list(removal_set) == ["c", "a", "b"]
        assert removal_set.ids == ("c", "a", "b")
        assert removal_set.reason("a") == "duplicate"

    def test_union_keeps_first_reason(self) -> None:
        """Test union merges ids without duplicating them."""
        left = RemovalSet({"a": "duplicate of x", "b": "duplicate of x"})
        right = RemovalSet({"b": "matched predicate", "c": "matched predicate"})

        merged = left | right

        assert merged.ids == ("a", "b", "c")
        assert merged.reason("b") == "duplicate of x"
        assert len(left) == 2

    def test_without_shrinks_copy(self) -> None:
        """Test shrinking a plan returns a new set."""
        removal_set = RemovalSet.from_ids(["a", "b", "c"])

        shrunk = removal_set.without(["b"])

        assert shrunk == {"a", "c"}
        assert "b" in removal_set

    def test_empty_set_is_falsy(self) -> None:
        """Test empty removal sets evaluate false."""
        assert not RemovalSet()
        assert RemovalSet.from_ids(["a"])


class TestRemovalOutcome:
    """Test suite for RemovalOutcome."""

    def test_absent_is_not_an_error(self) -> None:
        """Test already-absent resources are benign."""
        outcome = RemovalOutcome.absent("id4")

        assert outcome.status == RemovalStatus.ABSENT
        assert outcome.is_error is False
        assert outcome.validate() is True

    def test_failed_requires_reason(self) -> None:
        """Test failed outcomes must carry a reason."""
        outcome = RemovalOutcome(resource_id="x", status=RemovalStatus.FAILED)

        with pytest.raises(ValueError, match="requires reason"):
            outcome.validate()

    def test_succeeded_cannot_have_reason(self) -> None:
        """Test succeeded outcomes carry no reason."""
        outcome = RemovalOutcome(resource_id="x", status=RemovalStatus.SUCCEEDED, reason="oops")

        with pytest.raises(ValueError):
            outcome.validate()

    def test_skipped_has_zero_attempts(self) -> None:
        """Test skipped outcomes were never dispatched."""
        outcome = RemovalOutcome.skipped("x", "cancelled")

        assert outcome.attempts == 0
        assert outcome.to_dict()["status"] == "skipped"


class TestSweepSummary:
    """Test suite for SweepSummary."""

    @pytest.fixture
    def summary(self) -> SweepSummary:
        """Create an executed summary with mixed outcomes."""
        started = datetime(2026, 10, 18, 9, 0, tzinfo=timezone.utc)
        r1, r2 = Resource(id="id1"), Resource(id="id2")
        decision = GroupDecision(group=Group(key=("a", 1), members=(r1, r2)), survivor=r1, removed=(r2,))
        return SweepSummary(
            operation_id="op_1",
            mode=OperationMode.EXECUTE,
            status=OperationStatus.PARTIAL,
            started_at=started,
            completed_at=started + timedelta(seconds=2),
            resources_seen=5,
            groups_found=1,
            survivors_kept=1,
            decisions=[decision],
            removals_planned=4,
            planned_ids=["id2", "id4", "id5", "id6"],
            outcomes=[
                RemovalOutcome.succeeded("id2"),
                RemovalOutcome.absent("id4"),
                RemovalOutcome.failed("id5", "AccessDenied"),
                RemovalOutcome.skipped("id6", "cancelled"),
            ],
            extraction_errors=[
                ItemError.from_failure(KeyExtractionError("id3", "missing attribute 'key'"), ErrorPhase.KEY_EXTRACTION)
            ],
        )

    def test_counts(self, summary: SweepSummary) -> None:
        """Test derived removal counters."""
        assert summary.removals_issued == 3
        assert summary.removals_succeeded == 1
        assert summary.removals_absent == 1
        assert summary.removals_skipped == 1
        assert summary.removals_failed == [{"id": "id5", "reason": "AccessDenied"}]
        assert summary.duration_seconds == 2.0

    def test_errors_enumerates_every_phase(self, summary: SweepSummary) -> None:
        """Test every error is listed with id, phase and reason."""
        errors = summary.errors

        assert [(e.resource_id, e.phase) for e in errors] == [
            ("id3", ErrorPhase.KEY_EXTRACTION),
            ("id5", ErrorPhase.REMOVAL),
        ]
        assert errors[0].error_type == "KeyExtractionError"

    def test_to_dict_is_plain_data(self, summary: SweepSummary) -> None:
        """Test serialization renders enums, keys and timestamps."""
        data = summary.to_dict()

        assert data["mode"] == "execute"
        assert data["status"] == "partial"
        assert data["groups"] == [{"key": ["a", 1], "survivor": "id1", "removed": ["id2"]}]
        assert data["extraction_errors"][0] == {
            "id": "id3",
            "phase": "key_extraction",
            "reason": "missing attribute 'key'",
            "error_type": "KeyExtractionError",
        }
        assert data["removals_succeeded"] == 1
        assert len(data["outcomes"]) == 4
