"""Group model: resources sharing one extracted key."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Hashable, Iterator, Tuple

from .resource import Resource


@dataclass(frozen=True)
class Group:
    """Resources sharing a key, in snapshot order.

    Attributes:
        key: Key shared by every member
        members: Members in their relative snapshot order
    """

    key: Hashable
    members: Tuple[Resource, ...]

    def __post_init__(self) -> None:
        object.__setattr__(self, "members", tuple(self.members))

    def __iter__(self) -> Iterator[Resource]:
        return iter(self.members)

    def __len__(self) -> int:
        return len(self.members)

    @property
    def size(self) -> int:
        return len(self.members)

    @property
    def member_ids(self) -> Tuple[str, ...]:
        return tuple(m.id for m in self.members)

    def to_dict(self) -> dict[str, Any]:
        return {"key": render_key(self.key), "members": list(self.member_ids)}


def render_key(key: Any) -> Any:
    """Render a key as plain data for JSON/YAML export."""
    if isinstance(key, tuple):
        return [render_key(part) for part in key]
    if key is None or isinstance(key, (str, int, float, bool)):
        return key
    return str(key)


@dataclass(frozen=True)
class GroupDecision:
    """Survivor choice for one group.

    Attributes:
        group: Group the decision was made for
        survivor: Member kept by the selection policy
        removed: Remaining members, in group order
    """

    group: Group
    survivor: Resource
    removed: Tuple[Resource, ...]

    @property
    def removed_ids(self) -> Tuple[str, ...]:
        return tuple(r.id for r in self.removed)

    def to_dict(self) -> dict[str, Any]:
        return {
            "key": render_key(self.group.key),
            "survivor": self.survivor.id,
            "removed": list(self.removed_ids),
        }
