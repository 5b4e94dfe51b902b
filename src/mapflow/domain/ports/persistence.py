"""Port for the remote persistence service that stores maps and their resources."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from collections.abc import Mapping

    from mapflow.domain.model import (
        AttributeType,
        NewResource,
        Permissions,
        ResourceAttribute,
        ResourcePage,
        ResourceUpdate,
    )


@runtime_checkable
class PersistenceGateway(Protocol):
    """Asynchronous access to the resource store.

    Every call may fail on its own with ``PersistenceError``; no two calls are
    atomic with respect to each other.
    """

    async def get_resource(self, resource_id: int) -> str: ...

    async def get_resource_attributes(self, resource_id: int) -> list[ResourceAttribute]: ...

    async def create_resource(self, resource: NewResource) -> int: ...

    async def update_resource(self, update: ResourceUpdate) -> None: ...

    async def delete_resource(
        self,
        resource_id: int,
        options: Mapping[str, object] | None = None,
    ) -> None: ...

    async def update_resource_attribute(
        self,
        resource_id: int,
        name: str,
        value: str,
        attribute_type: AttributeType,
    ) -> None: ...

    async def update_resource_permissions(
        self,
        resource_id: int,
        rules: Permissions,
    ) -> None: ...

    async def get_resources_by_category(
        self,
        category: str,
        search_text: str,
        options: Mapping[str, object] | None = None,
    ) -> ResourcePage: ...
