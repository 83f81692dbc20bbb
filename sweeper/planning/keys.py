"""Key extractors: pure strategies mapping a resource to a grouping key."""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Hashable, Optional, Sequence
from urllib.parse import urlsplit, urlunsplit

from ..errors import KeyExtractionError
from ..models.resource import Resource


class KeyExtractor(ABC):
    """Abstract base class for key extractors.

    Each extractor should:
    1. Have a descriptive name (shown in run summaries)
    2. Be total and deterministic over resources, with no I/O
    3. Return a hashable key, or raise KeyExtractionError for resources it
       cannot key
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Human-readable name for this extractor."""
        pass

    @abstractmethod
    def extract(self, resource: Resource) -> Hashable:
        """Derive the grouping key for a resource.

        Args:
            resource: Resource to key

        Returns:
            Hashable key; equal keys mean the same group

        Raises:
            KeyExtractionError: If the resource cannot be keyed
        """
        pass

    def __call__(self, resource: Resource) -> Hashable:
        return self.extract(resource)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.name})"


class AttributeKey(KeyExtractor):
    """Key on the value of a single attribute.

    Resources missing the attribute (or holding None) cannot be keyed.
    """

    def __init__(self, attribute: str, normalize: Optional[Callable[[Any], Hashable]] = None) -> None:
        self.attribute = attribute
        self.normalize = normalize

    @property
    def name(self) -> str:
        return self.attribute

    def extract(self, resource: Resource) -> Hashable:
        value = resource.get(self.attribute)
        if value is None:
            raise KeyExtractionError(resource.id, f"missing attribute '{self.attribute}'")
        if self.normalize is not None:
            value = self.normalize(value)
        return value


def normalize_url(url: str) -> str:
    """Canonical form of a URL for duplicate detection.

    Lowercases scheme and host, drops the fragment, and strips a trailing
    slash from non-root paths. Query strings are kept as-is.
    """
    parts = urlsplit(str(url).strip())
    path = parts.path
    if len(path) > 1 and path.endswith("/"):
        path = path.rstrip("/")
    return urlunsplit((parts.scheme.lower(), parts.netloc.lower(), path, parts.query, ""))


class LocationKey(AttributeKey):
    """Key on a location attribute (a tab's URL, an object's path)."""

    def __init__(self, attribute: str = "url", normalize: bool = False) -> None:
        super().__init__(attribute, normalize=normalize_url if normalize else None)


class DisplayNameKey(AttributeKey):
    """Key on a display-name attribute (a tab's title, a Name tag)."""

    def __init__(self, attribute: str = "title", case_sensitive: bool = True) -> None:
        folder = None if case_sensitive else (lambda value: str(value).strip().casefold())
        super().__init__(attribute, normalize=folder)


class CompositeKey(KeyExtractor):
    """Tuple of keys from several extractors; all must succeed."""

    def __init__(self, extractors: Sequence[KeyExtractor]) -> None:
        if not extractors:
            raise ValueError("CompositeKey needs at least one extractor")
        self.extractors = tuple(extractors)

    @property
    def name(self) -> str:
        return "+".join(e.name for e in self.extractors)

    def extract(self, resource: Resource) -> Hashable:
        return tuple(e.extract(resource) for e in self.extractors)


class FunctionKey(KeyExtractor):
    """Adapt any caller-supplied callable to the extractor contract."""

    def __init__(self, func: Callable[[Resource], Hashable], name: Optional[str] = None) -> None:
        self.func = func
        self._name = name or getattr(func, "__name__", "custom")

    @property
    def name(self) -> str:
        return self._name

    def extract(self, resource: Resource) -> Hashable:
        return self.func(resource)


def by_location(attribute: str = "url", normalize: bool = False) -> LocationKey:
    """Canonical extractor grouping resources by location."""
    return LocationKey(attribute=attribute, normalize=normalize)


def by_display_name(attribute: str = "title", case_sensitive: bool = True) -> DisplayNameKey:
    """Canonical extractor grouping resources by display name."""
    return DisplayNameKey(attribute=attribute, case_sensitive=case_sensitive)


def parse_key_expression(expression: str) -> KeyExtractor:
    """Build an extractor from a short key expression.

    Accepted forms: ``location``, ``location:normalized``, ``name``,
    ``name:casefold``, ``attr:<attribute>``, and ``a,b`` for composites of
    those forms.

    Raises:
        ValueError: If the expression is not recognised
    """
    parts = [p.strip() for p in expression.split(",") if p.strip()]
    if not parts:
        raise ValueError("Empty key expression")
    if len(parts) > 1:
        return CompositeKey([parse_key_expression(p) for p in parts])

    kind, _, option = parts[0].partition(":")
    if kind == "location":
        if option not in ("", "normalized"):
            raise ValueError(f"Unknown location option: {option}")
        return by_location(normalize=option == "normalized")
    if kind == "name":
        if option not in ("", "casefold"):
            raise ValueError(f"Unknown name option: {option}")
        return by_display_name(case_sensitive=option != "casefold")
    if kind == "attr" and option:
        return AttributeKey(option)
    raise ValueError(f"Unknown key expression: {expression}")
