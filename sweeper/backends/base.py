"""Interfaces to the external system that owns the resources."""

from __future__ import annotations

from typing import Any, Mapping, Optional, Protocol, Sequence, Union, runtime_checkable

from ..models.resource import Resource

ResourceRecord = Union[Resource, Mapping[str, Any]]


@runtime_checkable
class ResourceSource(Protocol):
    """Enumerates the live resource collection."""

    async def list_resources(self, scope: Optional[str] = None) -> Sequence[ResourceRecord]:
        """Return every live resource, optionally narrowed to a scope.

        Raises:
            Exception: Any transport or permission error; the caller treats
                it as fatal to the run
        """
        ...


@runtime_checkable
class ResourceRemover(Protocol):
    """Removes one resource per call."""

    async def remove_resource(self, resource_id: str) -> tuple[bool, Optional[str]]:
        """Remove a resource.

        Returns:
            Tuple of (success, error_message)

        Raises:
            ResourceNotFound: If the resource no longer exists
            TransientRemovalError: For failures worth retrying
        """
        ...
