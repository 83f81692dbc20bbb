"""In-memory resource store (embedding and tests)."""

from __future__ import annotations

import logging
from typing import Any, Iterable, Mapping, Optional, Union

from ..errors import ResourceNotFound
from ..models.resource import Resource

logger = logging.getLogger(__name__)


class InMemoryResourceStore:
    """List-backed source and remover.

    Attributes:
        resources: Live resources in enumeration order
        scope_attribute: Attribute compared against the capture scope
        failures: Resource id -> error message returned instead of removing
        removed: Ids removed so far, in removal order
    """

    def __init__(
        self,
        resources: Iterable[Union[Resource, Mapping[str, Any]]] = (),
        scope_attribute: str = "scope",
        failures: Optional[Mapping[str, str]] = None,
    ) -> None:
        self.resources: list[Resource] = [
            r if isinstance(r, Resource) else Resource.from_dict(r) for r in resources
        ]
        self.scope_attribute = scope_attribute
        self.failures = dict(failures or {})
        self.removed: list[str] = []

    async def list_resources(self, scope: Optional[str] = None) -> list[Resource]:
        if scope is None:
            return list(self.resources)
        return [r for r in self.resources if str(r.get(self.scope_attribute)) == str(scope)]

    async def remove_resource(self, resource_id: str) -> tuple[bool, Optional[str]]:
        if resource_id in self.failures:
            return False, self.failures[resource_id]

        for index, resource in enumerate(self.resources):
            if resource.id == resource_id:
                del self.resources[index]
                self.removed.append(resource_id)
                logger.debug(f"Removed {resource_id} from memory store")
                return True, None

        raise ResourceNotFound(resource_id)
