"""AWS session helpers."""

from __future__ import annotations

from .client import create_boto_client

__all__ = ["create_boto_client"]
