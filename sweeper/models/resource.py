"""Resource model: an externally-owned item with identity and attributes."""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping, Optional


@dataclass(frozen=True)
class Resource:
    """A live resource owned by an external system.

    The sweeper never mutates resources. Equality covers both identity and
    attributes; hashing uses the identity only.

    Attributes:
        id: Stable identifier, unique within a snapshot
        attributes: Read-only attribute mapping used for key extraction
    """

    id: str
    attributes: Mapping[str, Any] = field(default_factory=dict, hash=False)

    def __post_init__(self) -> None:
        """Freeze the attribute mapping."""
        if not isinstance(self.id, str) or not self.id:
            raise ValueError(f"Resource id must be a non-empty string, got {self.id!r}")
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    def get(self, name: str, default: Optional[Any] = None) -> Any:
        """Return an attribute value, or ``default`` when missing."""
        return self.attributes.get(name, default)

    def __getitem__(self, name: str) -> Any:
        return self.attributes[name]

    def to_dict(self) -> dict[str, Any]:
        """Convert resource to dictionary for serialization."""
        return {"id": self.id, **dict(self.attributes)}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any], id_field: str = "id") -> "Resource":
        """Create resource from a mapping.

        Args:
            data: Mapping holding the identifier and attributes
            id_field: Key holding the identifier (default: "id")

        Returns:
            Resource with every other key as an attribute

        Raises:
            ValueError: If the identifier is missing
        """
        if id_field not in data or data[id_field] in (None, ""):
            raise ValueError(f"Resource record is missing '{id_field}': {dict(data)!r}")

        attributes = {k: v for k, v in data.items() if k != id_field}
        return cls(id=str(data[id_field]), attributes=attributes)
