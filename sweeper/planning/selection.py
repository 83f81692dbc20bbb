"""Selection policies: choose the survivor of each duplicate group."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Iterable

from ..errors import EmptyGroup, InvariantViolation
from ..models.group import Group, GroupDecision
from ..models.removal import RemovalSet
from ..models.resource import Resource

logger = logging.getLogger(__name__)


class SelectionPolicy(ABC):
    """Abstract base class for survivor selection.

    Policies must be total and deterministic over any non-empty group and
    must return one of the group's members.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Policy identifier (e.g., "first")."""
        pass

    @abstractmethod
    def choose(self, members: tuple[Resource, ...]) -> Resource:
        """Pick the survivor among a non-empty member tuple."""
        pass

    def select_survivor(self, group: Group) -> Resource:
        """Designate exactly one survivor for a group.

        Args:
            group: Group to decide

        Returns:
            The surviving member

        Raises:
            EmptyGroup: If the group has no members
            InvariantViolation: If the policy returned a non-member
        """
        if not group.members:
            raise EmptyGroup(f"Selection policy '{self.name}' invoked on empty group {group.key!r}")

        survivor = self.choose(group.members)
        if not any(m is survivor or m == survivor for m in group.members):
            raise InvariantViolation(
                f"Selection policy '{self.name}' returned {survivor!r}, not a member of group {group.key!r}"
            )
        return survivor


class KeepFirst(SelectionPolicy):
    """Earliest resource in snapshot order survives."""

    name = "first"

    def choose(self, members: tuple[Resource, ...]) -> Resource:
        return members[0]


class KeepLast(SelectionPolicy):
    """Latest resource in snapshot order survives."""

    name = "last"

    def choose(self, members: tuple[Resource, ...]) -> Resource:
        return members[-1]


class _RankedPolicy(SelectionPolicy):
    """Highest attribute value survives; ties go to the earliest member.

    Members missing the attribute rank below every member that has it.
    Values that cannot be compared with each other are compared as strings.
    """

    def __init__(self, attribute: str) -> None:
        self.attribute = attribute

    def choose(self, members: tuple[Resource, ...]) -> Resource:
        ranked = [(m, m.get(self.attribute)) for m in members]
        present = [(m, v) for m, v in ranked if v is not None]
        if not present:
            return members[0]

        best, best_value = present[0]
        for member, value in present[1:]:
            if _greater(value, best_value):
                best, best_value = member, value
        return best


def _greater(left: Any, right: Any) -> bool:
    try:
        return bool(left > right)
    except TypeError:
        return str(left) > str(right)


class KeepMostRecent(_RankedPolicy):
    """Most recently used resource survives (e.g., a tab's last access time)."""

    name = "recent"

    def __init__(self, attribute: str = "last_accessed") -> None:
        super().__init__(attribute)


class KeepHighestPriority(_RankedPolicy):
    """Resource with the highest explicit priority survives."""

    name = "priority"

    def __init__(self, attribute: str = "priority") -> None:
        super().__init__(attribute)


POLICIES = {
    "first": KeepFirst,
    "last": KeepLast,
    "recent": KeepMostRecent,
    "priority": KeepHighestPriority,
}


def get_policy(name: str) -> SelectionPolicy:
    """Instantiate a built-in policy by name.

    Raises:
        ValueError: If the name is unknown
    """
    try:
        return POLICIES[name]()
    except KeyError:
        raise ValueError(f"Unknown selection policy: {name} (choose from {', '.join(POLICIES)})")


@dataclass(frozen=True)
class DedupPlan:
    """Per-group decisions and the removal set derived from them."""

    decisions: tuple[GroupDecision, ...]
    removal_set: RemovalSet

    @property
    def survivors(self) -> tuple[Resource, ...]:
        return tuple(d.survivor for d in self.decisions)


def plan_removals(groups: Iterable[Group], policy: SelectionPolicy | None = None) -> DedupPlan:
    """Choose a survivor per group and mark every other member for removal.

    Args:
        groups: Groups to decide (normally from ``select_groups``)
        policy: Selection policy (default: KeepFirst)

    Returns:
        DedupPlan; each group contributes member count - 1 ids

    Raises:
        EmptyGroup: If any group has no members
        InvariantViolation: If a survivor would end up in the removal set
    """
    policy = policy or KeepFirst()
    decisions: list[GroupDecision] = []
    reasons: dict[str, str] = {}

    for g in groups:
        survivor = policy.select_survivor(g)
        removed = tuple(m for m in g.members if m.id != survivor.id)
        decisions.append(GroupDecision(group=g, survivor=survivor, removed=removed))
        for member in removed:
            reasons.setdefault(member.id, f"duplicate of {survivor.id}")

    removal_set = RemovalSet(reasons)
    for decision in decisions:
        if decision.survivor.id in removal_set:
            raise InvariantViolation(f"Survivor {decision.survivor.id} selected for removal")

    logger.debug(f"Policy '{policy.name}' kept {len(decisions)} survivors, marked {len(removal_set)} for removal")
    return DedupPlan(decisions=tuple(decisions), removal_set=removal_set)
