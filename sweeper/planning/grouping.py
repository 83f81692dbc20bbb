"""Grouping engine: partition a snapshot by extracted key."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Hashable, Iterable

from ..errors import KeyExtractionError
from ..models.group import Group
from ..models.resource import Resource
from ..models.snapshot import Snapshot
from ..models.summary import ErrorPhase, ItemError
from .keys import KeyExtractor

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GroupingResult:
    """Groups built from one pass, plus resources that could not be keyed."""

    groups: tuple[Group, ...]
    errors: tuple[ItemError, ...] = field(default_factory=tuple)

    @property
    def excluded_ids(self) -> tuple[str, ...]:
        return tuple(e.resource_id for e in self.errors)


def _extract(extractor: KeyExtractor, resource: Resource) -> Hashable:
    """Run the extractor, classifying every failure as KeyExtractionError."""
    try:
        key = extractor.extract(resource)
    except KeyExtractionError:
        raise
    except Exception as e:
        raise KeyExtractionError(resource.id, f"{type(e).__name__}: {e}") from e

    try:
        hash(key)
    except TypeError as e:
        raise KeyExtractionError(resource.id, f"unhashable key: {e}") from e
    return key


def group(snapshot: Snapshot | Iterable[Resource], extractor: KeyExtractor) -> GroupingResult:
    """Partition resources by key in a single ordered pass.

    Groups are ordered by the first appearance of their key; members keep
    their relative snapshot order. Resources the extractor fails on are
    excluded and reported, the rest are still grouped.

    Args:
        snapshot: Snapshot (or ordered resources) to partition
        extractor: Key extractor defining group membership

    Returns:
        GroupingResult with every group (including singletons) and errors
    """
    buckets: dict[Hashable, list[Resource]] = {}
    errors: list[ItemError] = []

    for resource in snapshot:
        try:
            key = _extract(extractor, resource)
        except KeyExtractionError as e:
            logger.warning(f"Excluding {resource.id} from grouping by {extractor.name}: {e.reason}")
            errors.append(ItemError.from_failure(e, ErrorPhase.KEY_EXTRACTION))
            continue
        buckets.setdefault(key, []).append(resource)

    groups = tuple(Group(key=key, members=tuple(members)) for key, members in buckets.items())
    logger.debug(f"Grouped {len(groups)} keys by {extractor.name} ({len(errors)} excluded)")
    return GroupingResult(groups=groups, errors=tuple(errors))


def select_groups(groups: Iterable[Group], min_size: int = 2) -> tuple[Group, ...]:
    """Keep groups with at least ``min_size`` members, preserving order.

    Args:
        groups: Groups from ``group``
        min_size: Minimum member count (default 2: only actual duplicates)

    Raises:
        ValueError: If min_size is below 1
    """
    if min_size < 1:
        raise ValueError(f"min_size must be at least 1, got {min_size}")
    return tuple(g for g in groups if len(g) >= min_size)
