"""``PersistenceGateway`` backed by the GeoStore REST API."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING
from urllib.parse import quote

from mapflow.config import get_geostore_config

from .client import GeoStoreAPIError, GeoStoreClient
from .translator import (
    metadata_body,
    resource_request_body,
    security_rules_body,
    serialize_data,
    translate_attributes,
    translate_search_response,
)

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    from mapflow.adapters.http_resilience import ResilientClient
    from mapflow.config.geostore import GeoStoreConfig
    from mapflow.config.http_resilience import ResilienceConfig
    from mapflow.domain.model import (
        AttributeType,
        NewResource,
        Permissions,
        ResourceAttribute,
        ResourcePage,
        ResourceUpdate,
    )

log = getLogger(__name__)


def search_pattern(search_text: str) -> str:
    text = search_text.strip().strip("*")
    return f"*{text}*" if text else "*"


class GeoStoreGateway:
    """Resource store operations over one shared GeoStore connection."""

    def __init__(
        self,
        config: GeoStoreConfig | None = None,
        *,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self.config = config or get_geostore_config()
        self._client = GeoStoreClient(config=self.config, client_factory=client_factory)

    async def __aenter__(self) -> GeoStoreGateway:
        self._client.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self._client.aclose()

    async def get_resource(self, resource_id: int) -> str:
        return await self._client.get_text(f"data/{resource_id}")

    async def get_resource_attributes(self, resource_id: int) -> list[ResourceAttribute]:
        payload = await self._client.get_json(f"resources/resource/{resource_id}/attributes")
        return translate_attributes(payload)

    async def create_resource(self, resource: NewResource) -> int:
        text = await self._client.post_json("resources/", resource_request_body(resource))
        try:
            resource_id = int(text.strip())
        except ValueError as exc:
            raise GeoStoreAPIError(f"GeoStore returned an invalid resource id: {text!r}") from exc
        log.debug("Created %s resource %s", resource.category, resource_id)
        if resource.permissions is not None:
            await self.update_resource_permissions(resource_id, resource.permissions)
        return resource_id

    async def update_resource(self, update: ResourceUpdate) -> None:
        resource_id = update.resource_id
        if update.value is not None:
            await self._client.put_text(f"data/{resource_id}", serialize_data(update.value))
        if update.metadata:
            await self._client.put_json(
                f"resources/resource/{resource_id}", metadata_body(update.metadata)
            )
        if update.permissions is not None:
            await self.update_resource_permissions(resource_id, update.permissions)

    async def delete_resource(
        self,
        resource_id: int,
        options: Mapping[str, object] | None = None,
    ) -> None:
        await self._client.delete(f"resources/resource/{resource_id}", options=options)
        log.debug("Deleted resource %s", resource_id)

    async def update_resource_attribute(
        self,
        resource_id: int,
        name: str,
        value: str,
        attribute_type: AttributeType,
    ) -> None:
        path = (
            f"resources/resource/{resource_id}/attributes/"
            f"{quote(name, safe='')}/{quote(value, safe='')}/{attribute_type}"
        )
        await self._client.put_json(path, None)

    async def update_resource_permissions(self, resource_id: int, rules: Permissions) -> None:
        await self._client.post_json(
            f"resources/resource/{resource_id}/permissions", security_rules_body(rules)
        )

    async def get_resources_by_category(
        self,
        category: str,
        search_text: str,
        options: Mapping[str, object] | None = None,
    ) -> ResourcePage:
        merged: dict[str, object] = dict(options or {})
        raw_params = merged.get("params")
        params = dict(raw_params) if isinstance(raw_params, dict) else {}
        params.setdefault("includeAttributes", "true")
        merged["params"] = params
        pattern = quote(search_pattern(search_text), safe="*")
        path = f"extjs/search/category/{quote(category, safe='')}/{pattern}"
        payload = await self._client.get_json(path, options=merged)
        return translate_search_response(payload)
