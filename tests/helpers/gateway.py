"""In-memory persistence gateway recording every call."""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from mapflow.domain.model import (
    PersistenceError,
    ResourceAttribute,
    ResourceNotFoundError,
    ResourcePage,
)

if TYPE_CHECKING:
    from collections.abc import Mapping

    from mapflow.domain.model import AttributeType, NewResource, Permissions, ResourceUpdate

STORE_URL = "http://store.example/geostore/rest/"


class FakeGateway:
    """Gateway fake with per-call failures and gates.

    ``fail(method, key)`` makes the matching call raise; ``key`` is the resource
    id for most calls, the category for ``create_resource`` and the attribute
    name for ``update_resource_attribute``. ``gate(method)`` returns an event
    the call waits on before answering.
    """

    def __init__(
        self,
        *,
        resources: Mapping[int, str] | None = None,
        attributes: Mapping[int, list[ResourceAttribute]] | None = None,
        page: ResourcePage | None = None,
        next_id: int = 100,
    ) -> None:
        self.resources: dict[int, object] = dict(resources or {})
        self.attributes: dict[int, list[ResourceAttribute]] = {
            key: list(value) for key, value in (attributes or {}).items()
        }
        self.page = page or ResourcePage()
        self.calls: list[tuple[str, tuple[object, ...]]] = []
        self.created: list[tuple[int, NewResource]] = []
        self._failures: dict[tuple[str, object], Exception] = {}
        self._gates: dict[str, asyncio.Event] = {}
        self._next_id = next_id

    def fail(self, method: str, key: object = None, error: Exception | None = None) -> None:
        self._failures[(method, key)] = error or PersistenceError(f"{method} failed", status=500)

    def gate(self, method: str) -> asyncio.Event:
        event = asyncio.Event()
        self._gates[method] = event
        return event

    def calls_to(self, method: str) -> list[tuple[object, ...]]:
        return [args for name, args in self.calls if name == method]

    @property
    def method_names(self) -> list[str]:
        return [name for name, _ in self.calls]

    async def _enter(self, method: str, key: object, *args: object) -> None:
        self.calls.append((method, args))
        gate = self._gates.get(method)
        if gate is not None:
            await gate.wait()
        error = self._failures.get((method, key)) or self._failures.get((method, None))
        if error is not None:
            raise error

    async def get_resource(self, resource_id: int) -> str:
        await self._enter("get_resource", resource_id, resource_id)
        if resource_id not in self.resources:
            raise ResourceNotFoundError(f"resource {resource_id} not found")
        return str(self.resources[resource_id])

    async def get_resource_attributes(self, resource_id: int) -> list[ResourceAttribute]:
        await self._enter("get_resource_attributes", resource_id, resource_id)
        return list(self.attributes.get(resource_id, []))

    async def create_resource(self, resource: NewResource) -> int:
        await self._enter("create_resource", str(resource.category), resource.category)
        resource_id = self._next_id
        self._next_id += 1
        self.resources[resource_id] = resource.data
        self.created.append((resource_id, resource))
        return resource_id

    async def update_resource(self, update: ResourceUpdate) -> None:
        await self._enter("update_resource", update.resource_id, update.resource_id)
        if update.value is not None:
            self.resources[update.resource_id] = update.value

    async def delete_resource(
        self,
        resource_id: int,
        options: Mapping[str, object] | None = None,
    ) -> None:
        await self._enter("delete_resource", resource_id, resource_id)
        del options
        self.resources.pop(resource_id, None)

    async def update_resource_attribute(
        self,
        resource_id: int,
        name: str,
        value: str,
        attribute_type: AttributeType,
    ) -> None:
        await self._enter("update_resource_attribute", name, resource_id, name, value)
        stored = [a for a in self.attributes.get(resource_id, []) if a.name != name]
        stored.append(ResourceAttribute(name=name, value=value, type=attribute_type))
        self.attributes[resource_id] = stored

    async def update_resource_permissions(self, resource_id: int, rules: Permissions) -> None:
        await self._enter("update_resource_permissions", resource_id, resource_id, rules)

    async def get_resources_by_category(
        self,
        category: str,
        search_text: str,
        options: Mapping[str, object] | None = None,
    ) -> ResourcePage:
        await self._enter("get_resources_by_category", category, category, search_text, options)
        return self.page
