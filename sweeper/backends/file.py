"""File-backed resource store.

Reads an inventory of resources (for example exported browser tabs) from a
YAML or JSON file and removes entries by rewriting the file.

Accepted layouts::

    resources:
      - id: "tab-1"
        url: "https://example.com/"
        title: "Example"
        window: "1"

or a bare top-level list of the same records.
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Any, Optional

import yaml

from ..errors import ResourceNotFound
from ..models.resource import Resource

logger = logging.getLogger(__name__)


class FileResourceStore:
    """Source and remover over an inventory file.

    Removals are serialised with an asyncio lock so concurrent requests never
    interleave read-modify-write cycles on the file. File I/O runs in a worker
    thread so the event loop stays responsive.

    Attributes:
        path: Inventory file path
        id_field: Record key holding the resource id
        scope_attribute: Record key compared against the capture scope
    """

    def __init__(self, path: str, id_field: str = "id", scope_attribute: str = "window") -> None:
        self.path = Path(path).expanduser()
        self.id_field = id_field
        self.scope_attribute = scope_attribute
        self._lock = asyncio.Lock()

    @property
    def _is_json(self) -> bool:
        return self.path.suffix.lower() == ".json"

    def _load(self) -> tuple[Any, list[dict]]:
        """Return the raw document and its record list.

        Raises:
            FileNotFoundError: If the inventory file does not exist
            ValueError: If the document layout is not recognised
        """
        with open(self.path, "r") as f:
            document = json.load(f) if self._is_json else yaml.safe_load(f)

        if document is None:
            return {"resources": []}, []
        if isinstance(document, list):
            return document, document
        if isinstance(document, dict) and isinstance(document.get("resources", []), list):
            document.setdefault("resources", [])
            return document, document["resources"]
        raise ValueError(f"Unrecognised inventory layout in {self.path}")

    def _save(self, document: Any) -> None:
        with open(self.path, "w") as f:
            if self._is_json:
                json.dump(document, f, indent=2)
            else:
                yaml.safe_dump(document, f, default_flow_style=False, sort_keys=False)

    async def list_resources(self, scope: Optional[str] = None) -> list[Resource]:
        _, records = await asyncio.to_thread(self._load)
        resources = [Resource.from_dict(r, id_field=self.id_field) for r in records]
        if scope is None:
            return resources
        return [r for r in resources if str(r.get(self.scope_attribute)) == str(scope)]

    async def remove_resource(self, resource_id: str) -> tuple[bool, Optional[str]]:
        async with self._lock:
            try:
                document, records = await asyncio.to_thread(self._load)
            except (OSError, ValueError, yaml.YAMLError) as e:
                return False, f"Cannot read inventory: {e}"

            remaining = [r for r in records if str(r.get(self.id_field)) != resource_id]
            if len(remaining) == len(records):
                raise ResourceNotFound(resource_id)

            if isinstance(document, list):
                document = remaining
            else:
                document["resources"] = remaining

            try:
                await asyncio.to_thread(self._save, document)
            except OSError as e:
                return False, f"Cannot write inventory: {e}"

        logger.debug(f"Removed {resource_id} from {self.path}")
        return True, None
