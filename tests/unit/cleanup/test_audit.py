"""Tests for AuditStorage."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path

import pytest

from sweeper.cleanup.audit import AuditStorage
from sweeper.models.removal import RemovalOutcome
from sweeper.models.summary import OperationMode, OperationStatus, SweepSummary


def _summary(operation_id: str, started_at: datetime) -> SweepSummary:
    return SweepSummary(
        operation_id=operation_id,
        mode=OperationMode.EXECUTE,
        status=OperationStatus.COMPLETED,
        started_at=started_at,
        completed_at=started_at,
        resources_seen=3,
        removals_planned=1,
        planned_ids=["id2"],
        outcomes=[RemovalOutcome.succeeded("id2")],
    )


class TestAuditStorage:
    """Test suite for AuditStorage."""

    @pytest.fixture
    def storage(self, tmp_path: Path) -> AuditStorage:
        return AuditStorage(storage_dir=str(tmp_path / "audit"))

    def test_log_run_writes_year_month_file(self, storage: AuditStorage) -> None:
        """Test audit files are organized by year and month."""
        path = storage.log_run(_summary("op_1", datetime(2026, 3, 4, 12, 0, tzinfo=timezone.utc)))

        assert path == storage.storage_dir / "2026" / "03" / "run-op_1.yaml"
        assert path.exists()

    def test_get_run(self, storage: AuditStorage) -> None:
        """Test a logged run can be read back by operation ID."""
        storage.log_run(_summary("op_1", datetime(2026, 3, 4, tzinfo=timezone.utc)))

        data = storage.get_run("op_1")

        assert data["metadata"]["log_type"] == "resource_sweep"
        assert data["run"]["operation_id"] == "op_1"
        assert data["run"]["removals_succeeded"] == 1
        assert data["run"]["outcomes"][0]["resource_id"] == "id2"

    def test_get_run_missing(self, storage: AuditStorage) -> None:
        """Test unknown operation IDs return None."""
        assert storage.get_run("op_missing") is None

    def test_query_runs_by_date_range(self, storage: AuditStorage) -> None:
        """Test date filtering and oldest-first ordering."""
        storage.log_run(_summary("op_late", datetime(2026, 5, 1, tzinfo=timezone.utc)))
        storage.log_run(_summary("op_early", datetime(2026, 1, 1, tzinfo=timezone.utc)))
        storage.log_run(_summary("op_mid", datetime(2026, 3, 1, tzinfo=timezone.utc)))

        all_runs = storage.query_runs()
        since_feb = storage.query_runs(since=datetime(2026, 2, 1))
        window = storage.query_runs(since=datetime(2026, 2, 1), until=datetime(2026, 4, 1, tzinfo=timezone.utc))

        assert [r["run"]["operation_id"] for r in all_runs] == ["op_early", "op_mid", "op_late"]
        assert [r["run"]["operation_id"] for r in since_feb] == ["op_mid", "op_late"]
        assert [r["run"]["operation_id"] for r in window] == ["op_mid"]
