"""Data models for sweep runs."""

from __future__ import annotations

from .group import Group, GroupDecision
from .removal import RemovalOutcome, RemovalSet, RemovalStatus
from .resource import Resource
from .snapshot import Snapshot
from .summary import ErrorPhase, ItemError, OperationMode, OperationStatus, SweepSummary

__all__ = [
    "ErrorPhase",
    "Group",
    "GroupDecision",
    "ItemError",
    "OperationMode",
    "OperationStatus",
    "RemovalOutcome",
    "RemovalSet",
    "RemovalStatus",
    "Resource",
    "Snapshot",
    "SweepSummary",
]
