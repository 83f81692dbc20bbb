"""Snapshot acquisition from a live resource source."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, Optional, Union

from ..backends.base import ResourceSource
from ..errors import SnapshotUnavailable
from ..models.resource import Resource
from ..models.snapshot import Snapshot
from ..planning.predicates import Predicate, as_predicate

logger = logging.getLogger(__name__)

ResourceFilter = Union[Predicate, Callable[[Resource], bool]]


async def capture(
    source: ResourceSource,
    scope: Optional[str] = None,
    resource_filter: Optional[ResourceFilter] = None,
) -> Snapshot:
    """Capture the live collection once.

    The enumeration call is awaited exactly once. Any failure (transport,
    permission, malformed record, duplicate id, failing filter) raises
    SnapshotUnavailable; a partial snapshot is never returned.

    Args:
        source: Enumeration interface of the external system
        scope: Scope passed to the source (optional)
        resource_filter: Keeps only resources it accepts (optional)

    Returns:
        Immutable snapshot in enumeration order

    Raises:
        SnapshotUnavailable: If the collection cannot be captured
    """
    captured_at = datetime.now(timezone.utc)

    try:
        records = await source.list_resources(scope)
    except Exception as e:
        logger.error(f"Resource enumeration failed (scope={scope}): {e}")
        raise SnapshotUnavailable(f"Resource enumeration failed: {e}") from e

    try:
        resources = [r if isinstance(r, Resource) else Resource.from_dict(r) for r in records]
    except (ValueError, TypeError, AttributeError) as e:
        raise SnapshotUnavailable(f"Malformed resource record: {e}") from e

    if resource_filter is not None:
        keep = as_predicate(resource_filter)
        try:
            resources = [r for r in resources if keep.matches(r)]
        except Exception as e:
            raise SnapshotUnavailable(f"Snapshot filter failed: {e}") from e

    try:
        snapshot = Snapshot(resources=tuple(resources), captured_at=captured_at, scope=scope)
    except ValueError as e:
        raise SnapshotUnavailable(str(e)) from e

    logger.info(f"Captured {len(snapshot)} resources (scope={scope or 'all'})")
    return snapshot
