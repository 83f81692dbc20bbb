"""Tests for SummaryReporter."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from pathlib import Path

import yaml

from sweeper.cleanup.reporter import SummaryReporter
from sweeper.models.group import Group, GroupDecision
from sweeper.models.removal import RemovalOutcome
from sweeper.models.summary import ErrorPhase, ItemError, OperationMode, OperationStatus, SweepSummary
from tests.fixtures.resources import keyed


def _summary(mode: OperationMode = OperationMode.EXECUTE) -> SweepSummary:
    group = Group(key="a", members=(keyed("id1", "a"), keyed("id2", "a")))
    return SweepSummary(
        operation_id="op_test",
        mode=mode,
        status=OperationStatus.PARTIAL if mode == OperationMode.EXECUTE else OperationStatus.PLANNED,
        started_at=datetime(2026, 10, 18, tzinfo=timezone.utc),
        completed_at=datetime(2026, 10, 18, 0, 0, 2, tzinfo=timezone.utc),
        resources_seen=4,
        groups_found=1,
        survivors_kept=1,
        decisions=[GroupDecision(group=group, survivor=group.members[0], removed=group.members[1:])],
        removals_planned=2,
        planned_ids=["id2", "id4"],
        outcomes=(
            [RemovalOutcome.succeeded("id2"), RemovalOutcome.failed("id4", "tab is pinned")]
            if mode == OperationMode.EXECUTE
            else []
        ),
        extraction_errors=[ItemError("id9", ErrorPhase.KEY_EXTRACTION, "missing attribute 'key'", "KeyExtractionError")],
    )


class TestSummaryReporter:
    """Test suite for SummaryReporter."""

    def test_build_tables_execute(self) -> None:
        """Test executed runs get group, outcome and error tables."""
        titles = [t.title for t in SummaryReporter().build_tables(_summary())]

        assert titles == ["Sweep Results", "Duplicate Groups", "Removal Outcomes", "Errors"]

    def test_build_tables_dry_run(self) -> None:
        """Test dry runs do not show outcomes."""
        titles = [t.title for t in SummaryReporter().build_tables(_summary(OperationMode.DRY_RUN))]

        assert titles == ["Sweep Preview (dry run)", "Duplicate Groups", "Errors"]

    def test_format_terminal(self) -> None:
        """Test terminal output mentions ids and failure reasons."""
        output = SummaryReporter().format_terminal(_summary())

        assert "Sweep Results" in output
        assert "id4" in output
        assert "tab is pinned" in output

    def test_export_json(self, tmp_path: Path) -> None:
        """Test JSON export of a summary."""
        path = SummaryReporter().export(_summary(), str(tmp_path / "out" / "summary.json"))

        data = json.loads(path.read_text())

        assert data["operation_id"] == "op_test"
        assert data["removals_failed"] == [{"id": "id4", "reason": "tab is pinned"}]
        assert data["groups"] == [{"key": "a", "survivor": "id1", "removed": ["id2"]}]

    def test_export_yaml(self, tmp_path: Path) -> None:
        """Test YAML export is chosen by file extension."""
        path = SummaryReporter().export(_summary(), str(tmp_path / "summary.yaml"))

        data = yaml.safe_load(path.read_text())

        assert data["status"] == "partial"
        assert data["extraction_errors"][0]["phase"] == "key_extraction"
