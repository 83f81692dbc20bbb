"""Predicate filter: select resources for removal by a boolean test."""

from __future__ import annotations

import logging
import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Callable, Iterable, Optional, Sequence

from ..errors import PredicateError
from ..models.removal import RemovalSet
from ..models.resource import Resource
from ..models.snapshot import Snapshot
from ..models.summary import ErrorPhase, ItemError

logger = logging.getLogger(__name__)


class Predicate(ABC):
    """Abstract base class for resource predicates.

    Predicates are pure tests over a single resource. Combine them with
    ``&``, ``|`` and ``~``.
    """

    @abstractmethod
    def matches(self, resource: Resource) -> bool:
        """Return True if the resource is selected."""
        pass

    @abstractmethod
    def describe(self) -> str:
        """Human-readable description, used as the removal reason."""
        pass

    def __call__(self, resource: Resource) -> bool:
        return self.matches(resource)

    def __and__(self, other: "Predicate") -> "Predicate":
        return AllOf([self, other])

    def __or__(self, other: "Predicate") -> "Predicate":
        return AnyOf([self, other])

    def __invert__(self) -> "Predicate":
        return Not(self)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.describe()})"


class _AttributePredicate(Predicate):
    def __init__(self, attribute: str) -> None:
        self.attribute = attribute

    def _value(self, resource: Resource) -> Optional[Any]:
        return resource.get(self.attribute)


class AttributeEquals(_AttributePredicate):
    """Attribute equals a value exactly."""

    def __init__(self, attribute: str, value: Any) -> None:
        super().__init__(attribute)
        self.value = value

    def matches(self, resource: Resource) -> bool:
        return self._value(resource) == self.value

    def describe(self) -> str:
        return f"{self.attribute} == {self.value!r}"


class AttributeContains(_AttributePredicate):
    """Attribute contains a substring; resources missing it never match."""

    def __init__(self, attribute: str, text: str, case_sensitive: bool = False) -> None:
        super().__init__(attribute)
        self.text = text
        self.case_sensitive = case_sensitive

    def matches(self, resource: Resource) -> bool:
        value = self._value(resource)
        if value is None:
            return False
        if self.case_sensitive:
            return self.text in str(value)
        return self.text.casefold() in str(value).casefold()

    def describe(self) -> str:
        return f"{self.attribute} contains {self.text!r}"


class AttributeMatches(_AttributePredicate):
    """Attribute matches a regular expression (``re.search`` semantics)."""

    def __init__(self, attribute: str, pattern: str, flags: int = 0) -> None:
        super().__init__(attribute)
        self.pattern = re.compile(pattern, flags)

    def matches(self, resource: Resource) -> bool:
        value = self._value(resource)
        if value is None:
            return False
        return self.pattern.search(str(value)) is not None

    def describe(self) -> str:
        return f"{self.attribute} matches /{self.pattern.pattern}/"


class FunctionPredicate(Predicate):
    """Adapt a caller-supplied callable to the predicate contract."""

    def __init__(self, func: Callable[[Resource], bool], description: Optional[str] = None) -> None:
        self.func = func
        self.description = description or getattr(func, "__name__", "custom predicate")

    def matches(self, resource: Resource) -> bool:
        return bool(self.func(resource))

    def describe(self) -> str:
        return self.description


class AllOf(Predicate):
    def __init__(self, predicates: Sequence[Predicate]) -> None:
        self.predicates = tuple(predicates)

    def matches(self, resource: Resource) -> bool:
        return all(p.matches(resource) for p in self.predicates)

    def describe(self) -> str:
        return " and ".join(f"({p.describe()})" for p in self.predicates)


class AnyOf(Predicate):
    def __init__(self, predicates: Sequence[Predicate]) -> None:
        self.predicates = tuple(predicates)

    def matches(self, resource: Resource) -> bool:
        return any(p.matches(resource) for p in self.predicates)

    def describe(self) -> str:
        return " or ".join(f"({p.describe()})" for p in self.predicates)


class Not(Predicate):
    def __init__(self, predicate: Predicate) -> None:
        self.predicate = predicate

    def matches(self, resource: Resource) -> bool:
        return not self.predicate.matches(resource)

    def describe(self) -> str:
        return f"not ({self.predicate.describe()})"


def as_predicate(value: Predicate | Callable[[Resource], bool]) -> Predicate:
    """Wrap plain callables so they can be used wherever a Predicate is expected."""
    if isinstance(value, Predicate):
        return value
    if callable(value):
        return FunctionPredicate(value)
    raise TypeError(f"Expected a Predicate or callable, got {type(value).__name__}")


def evaluate(predicate: Predicate, resource: Resource) -> bool:
    """Evaluate a predicate, classifying every failure as PredicateError."""
    try:
        return bool(predicate.matches(resource))
    except PredicateError:
        raise
    except Exception as e:
        raise PredicateError(resource.id, f"{type(e).__name__}: {e}") from e


@dataclass(frozen=True)
class FilterResult:
    """Resources selected by a predicate pass, plus resources that errored."""

    removal_set: RemovalSet
    errors: tuple[ItemError, ...] = field(default_factory=tuple)


def filter_resources(
    snapshot: Snapshot | Iterable[Resource],
    predicate: Predicate | Callable[[Resource], bool],
) -> FilterResult:
    """Select every resource for which the predicate holds.

    A predicate failure excludes only the offending resource; the pass
    continues over the rest of the snapshot.

    Args:
        snapshot: Snapshot (or ordered resources) to test
        predicate: Predicate or plain callable

    Returns:
        FilterResult with the selected ids in snapshot order
    """
    predicate = as_predicate(predicate)
    reason = f"matched {predicate.describe()}"
    selected: dict[str, str] = {}
    errors: list[ItemError] = []

    for resource in snapshot:
        try:
            if evaluate(predicate, resource):
                selected[resource.id] = reason
        except PredicateError as e:
            logger.warning(f"Excluding {resource.id} from predicate filter: {e.reason}")
            errors.append(ItemError.from_failure(e, ErrorPhase.PREDICATE))

    logger.debug(f"Predicate {predicate.describe()} selected {len(selected)} resources ({len(errors)} errors)")
    return FilterResult(removal_set=RemovalSet(selected), errors=tuple(errors))


def parse_attribute_pair(text: str) -> tuple[str, str]:
    """Split ``ATTR=VALUE`` as accepted by the CLI.

    Raises:
        ValueError: If there is no ``=`` or the attribute is empty
    """
    attribute, sep, value = text.partition("=")
    if not sep or not attribute.strip():
        raise ValueError(f"Expected ATTR=VALUE, got '{text}'")
    return attribute.strip(), value
