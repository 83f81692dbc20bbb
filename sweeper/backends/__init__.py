"""Resource sources and removers for concrete external systems.

The AWS backend lives in ``sweeper.backends.aws`` and is imported explicitly.
"""

from __future__ import annotations

from .base import ResourceRemover, ResourceSource
from .file import FileResourceStore
from .memory import InMemoryResourceStore

__all__ = [
    "FileResourceStore",
    "InMemoryResourceStore",
    "ResourceRemover",
    "ResourceSource",
]
