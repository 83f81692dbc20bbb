"""Snapshot acquisition."""

from __future__ import annotations

from .capture import capture

__all__ = ["capture"]
