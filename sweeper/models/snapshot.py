"""Snapshot data model representing a point-in-time capture of live resources."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional, Sequence, Tuple

from .resource import Resource


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class Snapshot:
    """Immutable, ordered capture of a resource collection.

    Order defines "first occurrence" for tie-breaking. Later mutations of the
    external collection are invisible to a snapshot once it is taken.
    """

    resources: Tuple[Resource, ...]
    captured_at: datetime = field(default_factory=_utcnow)
    scope: Optional[str] = None

    def __post_init__(self) -> None:
        """Normalize to a tuple and enforce unique resource ids."""
        resources = tuple(self.resources)
        object.__setattr__(self, "resources", resources)

        seen: set[str] = set()
        for resource in resources:
            if resource.id in seen:
                raise ValueError(f"Duplicate resource id in snapshot: {resource.id}")
            seen.add(resource.id)

    def __iter__(self) -> Iterator[Resource]:
        return iter(self.resources)

    def __len__(self) -> int:
        return len(self.resources)

    def __contains__(self, resource_id: object) -> bool:
        return any(r.id == resource_id for r in self.resources)

    @property
    def ids(self) -> Tuple[str, ...]:
        """Resource ids in snapshot order."""
        return tuple(r.id for r in self.resources)

    def get(self, resource_id: str) -> Optional[Resource]:
        """Look up a resource by id."""
        for resource in self.resources:
            if resource.id == resource_id:
                return resource
        return None

    def to_dict(self) -> Dict[str, Any]:
        """Convert snapshot to dictionary for serialization."""
        return {
            "captured_at": self.captured_at.isoformat(),
            "scope": self.scope,
            "resource_count": len(self.resources),
            "resources": [r.to_dict() for r in self.resources],
        }

    @classmethod
    def from_resources(
        cls,
        records: Sequence[Any],
        scope: Optional[str] = None,
        captured_at: Optional[datetime] = None,
    ) -> "Snapshot":
        """Build a snapshot from Resource objects or plain mappings.

        Args:
            records: Resources or mappings accepted by ``Resource.from_dict``
            scope: Scope the snapshot was captured for (optional)
            captured_at: Capture time (default: now, UTC)

        Returns:
            Snapshot preserving the order of ``records``
        """
        resources = tuple(r if isinstance(r, Resource) else Resource.from_dict(r) for r in records)
        return cls(resources=resources, captured_at=captured_at or _utcnow(), scope=scope)
