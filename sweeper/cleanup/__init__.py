"""Resource cleanup module.

This module executes removal plans against the external system and records
their results.

Classes:
    SweepOrchestrator: Main orchestrator for sweep runs
    RemovalExecutor: Batch-tolerant removal of a RemovalSet
    AuditStorage: Audit log storage and retrieval
    SummaryReporter: Terminal and file rendering of run summaries
"""

from __future__ import annotations

from .audit import AuditStorage
from .executor import RemovalExecutor
from .orchestrator import SweepOrchestrator, SweepPlan, SweepRequest
from .reporter import SummaryReporter

__all__ = [
    "SweepOrchestrator",
    "SweepPlan",
    "SweepRequest",
    "RemovalExecutor",
    "AuditStorage",
    "SummaryReporter",
]
