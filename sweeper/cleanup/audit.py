"""Audit storage for sweep runs.

Stores and retrieves run summaries in YAML format for later review.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

import yaml

from ..models.summary import SweepSummary

logger = logging.getLogger(__name__)


def _as_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value


class AuditStorage:
    """Audit log storage and retrieval.

    Stores one YAML file per run, organized by year/month.

    Storage structure:
        ~/.sweeper/audit-logs/
            2026/
                10/
                    run-op_123.yaml
                    run-op_456.yaml

    Attributes:
        storage_dir: Base directory for audit logs
    """

    def __init__(self, storage_dir: Optional[str] = None) -> None:
        """Initialize audit storage.

        Args:
            storage_dir: Base directory for audit logs (default: ~/.sweeper/audit-logs)
        """
        if storage_dir is None:
            storage_dir = str(Path.home() / ".sweeper" / "audit-logs")

        self.storage_dir = Path(storage_dir).expanduser()
        self.storage_dir.mkdir(parents=True, exist_ok=True)

    def log_run(self, summary: SweepSummary) -> Path:
        """Write a run summary to the audit log.

        Overwrites an existing log with the same operation ID.

        Args:
            summary: Completed run summary

        Returns:
            Path of the written audit file
        """
        year_month_dir = self.storage_dir / str(summary.started_at.year) / f"{summary.started_at.month:02d}"
        year_month_dir.mkdir(parents=True, exist_ok=True)

        audit_data = {
            "metadata": {
                "version": "1.0",
                "log_type": "resource_sweep",
                "created_at": datetime.now(timezone.utc).isoformat(),
            },
            "run": summary.to_dict(),
        }

        audit_file = year_month_dir / f"run-{summary.operation_id}.yaml"
        with open(audit_file, "w") as f:
            yaml.safe_dump(audit_data, f, default_flow_style=False, sort_keys=False)

        logger.debug(f"Wrote audit log {audit_file}")
        return audit_file

    def get_run(self, operation_id: str) -> Optional[dict]:
        """Retrieve a run audit log by operation ID.

        Returns:
            Audit log dictionary if found, None otherwise
        """
        for audit_file in self.storage_dir.glob(f"*/*/run-{operation_id}.yaml"):
            with open(audit_file, "r") as f:
                return yaml.safe_load(f)
        return None

    def query_runs(self, since: Optional[datetime] = None, until: Optional[datetime] = None) -> list[dict]:
        """Query runs started within a date range.

        Args:
            since: Start date (inclusive), None for all
            until: End date (inclusive), None for all

        Returns:
            Audit logs matching the range, oldest first
        """
        since = _as_naive_utc(since) if since else None
        until = _as_naive_utc(until) if until else None
        results = []

        for audit_file in self.storage_dir.glob("*/*/run-*.yaml"):
            with open(audit_file, "r") as f:
                audit_data = yaml.safe_load(f)

            started_at = _as_naive_utc(datetime.fromisoformat(audit_data["run"]["started_at"]))
            if since and started_at < since:
                continue
            if until and started_at > until:
                continue

            results.append(audit_data)

        results.sort(key=lambda data: data["run"]["started_at"])
        return results
