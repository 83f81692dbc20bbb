"""Pure planning phase: key extraction, grouping, survivor selection, predicates.

Nothing in this package performs I/O; it operates on immutable snapshots so
plans can be inspected and dry-run before any removal is issued.
"""

from __future__ import annotations

from .grouping import GroupingResult, group, select_groups
from .keys import (
    AttributeKey,
    CompositeKey,
    DisplayNameKey,
    FunctionKey,
    KeyExtractor,
    LocationKey,
    by_display_name,
    by_location,
    parse_key_expression,
)
from .predicates import (
    AllOf,
    AnyOf,
    AttributeContains,
    AttributeEquals,
    AttributeMatches,
    FilterResult,
    FunctionPredicate,
    Not,
    Predicate,
    filter_resources,
)
from .selection import (
    DedupPlan,
    KeepFirst,
    KeepHighestPriority,
    KeepLast,
    KeepMostRecent,
    SelectionPolicy,
    get_policy,
    plan_removals,
)

__all__ = [
    "AllOf",
    "AnyOf",
    "AttributeContains",
    "AttributeEquals",
    "AttributeKey",
    "AttributeMatches",
    "CompositeKey",
    "DedupPlan",
    "DisplayNameKey",
    "FilterResult",
    "FunctionKey",
    "FunctionPredicate",
    "GroupingResult",
    "KeepFirst",
    "KeepHighestPriority",
    "KeepLast",
    "KeepMostRecent",
    "KeyExtractor",
    "LocationKey",
    "Not",
    "Predicate",
    "SelectionPolicy",
    "by_display_name",
    "by_location",
    "filter_resources",
    "get_policy",
    "group",
    "parse_key_expression",
    "plan_removals",
    "select_groups",
]
