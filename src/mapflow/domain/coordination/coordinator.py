"""Drive store calls for a map and the resources linked to it.

The coordinator turns a logical operation on a map into concurrent gateway
calls and hands back aggregated outcomes. It does not decide what users are
told; the orchestration engine maps outcomes to events and notices.
"""

from __future__ import annotations

import asyncio
from logging import getLogger
from typing import TYPE_CHECKING
from uuid import uuid1

from mapflow.domain.lifecycle import decide
from mapflow.domain.model import (
    NO_DATA,
    AttributeChangeOutcome,
    AttributeType,
    BackgroundThumbnailOutcome,
    BackgroundThumbnailsOutcome,
    DeleteEntityOutcome,
    LifecycleAction,
    NewResource,
    OperationOutcome,
    PendingChange,
    ResourceCategory,
    ResourceKind,
    ResourceRef,
    ResourceUpdate,
    SaveEntityOutcome,
    build_resource_uri,
    decode_attribute_uri,
    encode_attribute_uri,
)
from mapflow.domain.ports.projections import DETAILS_ATTRIBUTE, THUMBNAIL_ATTRIBUTE

from .barrier import settle, settle_all

if TYPE_CHECKING:
    from collections.abc import Mapping, Sequence

    from mapflow.domain.lifecycle import Decision
    from mapflow.domain.model import BackgroundThumbnail, LinkedResource, MapResource
    from mapflow.domain.ports import PersistenceGateway

log = getLogger(__name__)

_KIND_BY_ATTRIBUTE = {
    DETAILS_ATTRIBUTE: ResourceKind.DETAILS,
    THUMBNAIL_ATTRIBUTE: ResourceKind.THUMBNAIL,
}


def resource_kind_for(attribute: str) -> ResourceKind:
    return _KIND_BY_ATTRIBUTE.get(attribute, ResourceKind.MAP)


def removed_resources[T](before: Sequence[T | None], after: Sequence[T | None]) -> list[T]:
    """Ids present in ``before`` but gone from ``after``, in ``before`` order."""

    remaining = {item for item in after if item is not None}
    return [item for item in before if item is not None and item not in remaining]


def plan_changes(
    resource: MapResource,
    current: Mapping[str, ResourceRef],
) -> list[PendingChange]:
    return [
        PendingChange(
            attribute=attribute,
            desired=desired,
            current=current.get(attribute, ResourceRef()),
        )
        for attribute, desired in resource.linked_resources.items()
    ]


class LinkedResourceCoordinator:
    """Concurrent store operations for one map and its linked resources."""

    def __init__(self, gateway: PersistenceGateway, *, store_url: str) -> None:
        self._gateway = gateway
        self._store_url = store_url

    async def delete_entity(
        self,
        map_id: int,
        *,
        details: ResourceRef,
        thumbnail: ResourceRef,
        options: Mapping[str, object] | None = None,
    ) -> DeleteEntityOutcome:
        thumbnail_outcome, details_outcome, map_outcome = await settle_all(
            [
                self._delete_by_id(ResourceKind.THUMBNAIL, thumbnail.id, options),
                self._delete_by_id(ResourceKind.DETAILS, details.id, options),
                self._delete_by_id(ResourceKind.MAP, map_id, options),
            ]
        )
        return DeleteEntityOutcome(
            map_id=map_id,
            thumbnail=thumbnail_outcome,
            details=details_outcome,
            map=map_outcome,
        )

    async def delete_resources(
        self,
        resource_ids: Sequence[int],
        *,
        kind: ResourceKind = ResourceKind.BACKGROUND_THUMBNAIL,
    ) -> list[OperationOutcome]:
        return await settle_all(self._delete_by_id(kind, rid, None) for rid in resource_ids)

    async def apply_change(self, map_id: int, change: PendingChange) -> AttributeChangeOutcome:
        decision = decide(change.current, change.desired)
        kind = resource_kind_for(change.attribute)
        log.debug("Attribute %s of map %s: %s", change.attribute, map_id, decision.action)

        match decision.action:
            case LifecycleAction.NOOP:
                outcome = OperationOutcome.success(kind, subject=change.attribute)
                return AttributeChangeOutcome(
                    attribute=change.attribute,
                    action=decision.action,
                    outcome=outcome,
                )
            case LifecycleAction.CREATE:
                operation = self._create_linked(map_id, change.attribute, decision)
            case LifecycleAction.UPDATE:
                operation = self._update_linked(map_id, change, decision)
            case LifecycleAction.DELETE:
                operation = self._delete_linked(map_id, change.attribute, decision)

        outcome = await settle(
            kind,
            operation,
            resource_id=decision.resource_id,
            subject=change.attribute,
        )
        value = outcome.payload if outcome.succeeded and isinstance(outcome.payload, str) else None
        return AttributeChangeOutcome(
            attribute=change.attribute,
            action=decision.action,
            outcome=outcome,
            attribute_value=value,
        )

    async def save_entity(
        self,
        resource: MapResource,
        current: Mapping[str, ResourceRef],
    ) -> SaveEntityOutcome:
        """Create or update ``resource`` and reconcile its linked resources.

        A new map must exist before linked resources can be attached to it, so
        creation runs first and the attribute changes fan out afterwards. An
        existing map is updated concurrently with its attribute changes.
        """

        if resource.id is None:
            entity = await settle(
                ResourceKind.MAP,
                self._gateway.create_resource(
                    NewResource(
                        metadata=resource.metadata,
                        data=resource.data,
                        category=resource.category,
                        permissions=resource.permissions,
                    )
                ),
            )
            if entity.failed:
                return SaveEntityOutcome(created=True, entity=entity)
            map_id = _as_resource_id(entity.payload)
            entity = OperationOutcome.success(ResourceKind.MAP, map_id, resource_id=map_id)
            changes = plan_changes(resource, {})
            attributes = await settle_all(self.apply_change(map_id, change) for change in changes)
            return SaveEntityOutcome(created=True, entity=entity, attributes=tuple(attributes))

        map_id = resource.id
        changes = plan_changes(resource, current)
        entity, attributes = await asyncio.gather(
            settle(
                ResourceKind.MAP,
                self._gateway.update_resource(
                    ResourceUpdate(
                        resource_id=map_id,
                        value=resource.data,
                        metadata=resource.metadata,
                        permissions=resource.permissions,
                    )
                ),
                resource_id=map_id,
            ),
            settle_all(self.apply_change(map_id, change) for change in changes),
        )
        return SaveEntityOutcome(created=False, entity=entity, attributes=tuple(attributes))

    async def create_background_thumbnails(
        self,
        backgrounds: Sequence[BackgroundThumbnail],
    ) -> BackgroundThumbnailsOutcome:
        """Create or clear each background thumbnail independently."""

        results = await settle_all(self._save_background_thumbnail(bg) for bg in backgrounds)
        settled = tuple(result for result in results if result is not None)

        after: list[int | None] = []
        for background, result in zip(backgrounds, results, strict=True):
            if result is None or result.outcome.failed:
                after.append(background.existing_thumb_id)
            elif result.action is LifecycleAction.CREATE:
                after.append(result.thumb_id)
            else:
                after.append(None)

        before = [background.existing_thumb_id for background in backgrounds]
        return BackgroundThumbnailsOutcome(
            results=settled,
            removed_resources=tuple(removed_resources(before, after)),
        )

    async def _save_background_thumbnail(
        self,
        background: BackgroundThumbnail,
    ) -> BackgroundThumbnailOutcome | None:
        if background.has_new_thumbnail:
            outcome = await settle(
                ResourceKind.BACKGROUND_THUMBNAIL,
                self._gateway.create_resource(
                    NewResource(
                        metadata={"name": background.new_name},
                        data=background.new_data,
                        category=ResourceCategory.BACKGROUND_THUMBNAIL,
                    )
                ),
                subject=background.background_id,
            )
            if outcome.failed:
                return BackgroundThumbnailOutcome(
                    background_id=background.background_id,
                    action=LifecycleAction.CREATE,
                    outcome=outcome,
                )
            thumb_id = _as_resource_id(outcome.payload)
            return BackgroundThumbnailOutcome(
                background_id=background.background_id,
                action=LifecycleAction.CREATE,
                outcome=OperationOutcome.success(
                    ResourceKind.BACKGROUND_THUMBNAIL,
                    thumb_id,
                    resource_id=thumb_id,
                    subject=background.background_id,
                ),
                source=build_resource_uri(self._store_url, thumb_id),
            )
        if background.clears_thumbnail:
            # only the layer link is cleared; the orphaned resource is removed on resave
            return BackgroundThumbnailOutcome(
                background_id=background.background_id,
                action=LifecycleAction.DELETE,
                outcome=OperationOutcome.success(
                    ResourceKind.BACKGROUND_THUMBNAIL,
                    resource_id=background.existing_thumb_id,
                    subject=background.background_id,
                ),
            )
        return None

    async def _delete_by_id(
        self,
        kind: ResourceKind,
        resource_id: int | None,
        options: Mapping[str, object] | None,
    ) -> OperationOutcome:
        if resource_id is None:
            # nothing linked, nothing to delete
            return OperationOutcome.success(kind)
        return await settle(
            kind,
            self._gateway.delete_resource(resource_id, options),
            resource_id=resource_id,
        )

    async def _create_linked(self, map_id: int, attribute: str, decision: Decision) -> str:
        resource = _require_resource(decision)
        metadata = dict(resource.metadata) or {"name": uuid1().hex}
        new_id = await self._gateway.create_resource(
            NewResource(metadata=metadata, data=resource.value, category=resource.category)
        )
        if resource.permissions is not None:
            await self._gateway.update_resource_permissions(new_id, resource.permissions)
        value = encode_attribute_uri(
            build_resource_uri(self._store_url, new_id, tail=resource.tail)
        )
        await self._gateway.update_resource_attribute(
            map_id, attribute, value, resource.attribute_type
        )
        return value

    async def _update_linked(self, map_id: int, change: PendingChange, decision: Decision) -> str:
        resource = _require_resource(decision)
        resource_id = _require_id(decision)
        await self._gateway.update_resource(
            ResourceUpdate(
                resource_id=resource_id,
                value=resource.value,
                permissions=decision.permissions,
                attribute=change.attribute,
                options=resource.attribute_options,
            )
        )
        uri = build_resource_uri(self._store_url, resource_id, tail=resource.tail)
        value = encode_attribute_uri(uri)
        current_uri = change.current.uri
        if current_uri is None or decode_attribute_uri(current_uri) != uri:
            # a new cache-busting tail has to reach the map attribute
            await self._gateway.update_resource_attribute(
                map_id, change.attribute, value, resource.attribute_type
            )
            return value
        return current_uri

    async def _delete_linked(self, map_id: int, attribute: str, decision: Decision) -> str:
        await self._gateway.delete_resource(_require_id(decision), None)
        await self._gateway.update_resource_attribute(
            map_id, attribute, NO_DATA, AttributeType.STRING
        )
        return NO_DATA


def _require_resource(decision: Decision) -> LinkedResource:
    if decision.resource is None:
        raise ValueError(f"{decision.action} decision without a resource")
    return decision.resource


def _require_id(decision: Decision) -> int:
    if decision.resource_id is None:
        raise ValueError(f"{decision.action} decision without a resource id")
    return decision.resource_id


def _as_resource_id(payload: object) -> int:
    if isinstance(payload, bool) or not isinstance(payload, int):
        raise TypeError(f"Store returned a non-integer resource id: {payload!r}")
    return payload
