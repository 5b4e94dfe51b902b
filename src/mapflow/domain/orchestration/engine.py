"""Intent handlers for map saving, deletion, details and background thumbnails.

``OrchestrationEngine.handle`` maps one intent plus one state snapshot to an
async stream of effects. An effect is either an ``OrchestrationEvent`` for the
application store or a follow-up intent for the dispatcher. Handlers never
mutate the snapshot and never retry; store failures become events and notices.
"""

from __future__ import annotations

import re
from logging import getLogger
from typing import TYPE_CHECKING, assert_never
from uuid import uuid1

from mapflow.domain.coordination import LinkedResourceCoordinator, removed_resources
from mapflow.domain.model import (
    RAW_DATA_URI_TAIL,
    LifecycleAction,
    LinkedResource,
    MapResource,
    OutcomeResult,
    PendingChange,
    PersistenceError,
    ResourceCategory,
    ResourceKind,
    ResourceRef,
)
from mapflow.domain.ports.projections import DETAILS_ATTRIBUTE, THUMBNAIL_ATTRIBUTE

from . import messages
from .events import (
    NO_DETAILS_AVAILABLE,
    AttributeUpdated,
    BackgroundsCleared,
    BackgroundThumbnailsRemoved,
    ControlToggled,
    CurrentMapReset,
    DetailsChanged,
    DetailsEditabilityToggled,
    DetailsLoaded,
    DetailsSaving,
    DetailsSheetToggled,
    DetailsUpdated,
    FeatureGridClosed,
    LayerUpdated,
    MapCreated,
    MapDeleted,
    MapDeleting,
    MapError,
    MapsLoaded,
    MapsLoadError,
    MapsLoading,
    MapUpdating,
    MetadataEditDisplayed,
    ModalParametersCleared,
    NoticeLevel,
    Notification,
    OrchestrationEvent,
    SavingMap,
    ThumbnailError,
    ThumbnailReset,
)
from .intents import (
    BackgroundThumbnailsCreated,
    BackgroundThumbnailsUpdated,
    CloseDetailsPanel,
    DeleteMap,
    EditMap,
    FetchMapsByCategory,
    LoadMaps,
    MapInfoLoaded,
    OpenDetailsPanel,
    ResetUpdating,
    SaveDetails,
    SaveMapResource,
    SaveResourceDetails,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator, Iterable, Iterator

    from mapflow.config import OrchestrationConfig
    from mapflow.domain.model import AttributeChangeOutcome
    from mapflow.domain.ports import MapsSnapshot, PersistenceGateway

    from .intents import AnyIntent

type Effect = OrchestrationEvent | AnyIntent

log = getLogger(__name__)

MAP_CATEGORY = "MAP"
DETAILS_CONTROL = "details"

# characters GeoStore cannot take inside a search path segment
_SEARCH_TEXT_NOISE = re.compile(r"[/?:;@=&\\]+")


def sanitize_search_text(text: str) -> str:
    return _SEARCH_TEXT_NOISE.sub("", text)


class OrchestrationEngine:
    """Handlers for every intent in ``AnyIntent``."""

    def __init__(
        self,
        gateway: PersistenceGateway,
        *,
        config: OrchestrationConfig,
        coordinator: LinkedResourceCoordinator | None = None,
    ) -> None:
        self._gateway = gateway
        self._config = config
        self._coordinator = coordinator or LinkedResourceCoordinator(
            gateway, store_url=config.store_url
        )

    def handle(self, intent: AnyIntent, snapshot: MapsSnapshot) -> AsyncGenerator[Effect, None]:
        log.debug("Handling %s", type(intent).__name__)
        match intent:
            case LoadMaps():
                return self._load_maps(intent)
            case FetchMapsByCategory():
                return self._fetch_maps(intent)
            case SaveDetails():
                return self._save_details(intent, snapshot)
            case SaveResourceDetails():
                return self._save_resource_details(snapshot)
            case EditMap():
                return self._edit_map(snapshot)
            case OpenDetailsPanel():
                return self._open_details_panel(snapshot)
            case CloseDetailsPanel():
                return self._close_details_panel()
            case ResetUpdating():
                return self._reset_updating()
            case MapInfoLoaded():
                return self._map_info_loaded(snapshot)
            case SaveMapResource():
                return self._save_map_resource(intent, snapshot)
            case DeleteMap():
                return self._delete_map(intent, snapshot)
            case BackgroundThumbnailsCreated():
                return self._background_thumbnails_created(intent)
            case BackgroundThumbnailsUpdated():
                return self._background_thumbnails_updated(intent, snapshot)
            case _:
                assert_never(intent)

    # catalogue

    async def _load_maps(self, intent: LoadMaps) -> AsyncGenerator[Effect, None]:
        search_text = sanitize_search_text(intent.search_text)
        options: dict[str, object] = {"params": dict(intent.params)}
        if intent.geostore_url:
            options["base_url"] = intent.geostore_url
        yield MapsLoading(search_text, intent.params)
        yield FetchMapsByCategory(MAP_CATEGORY, search_text, options)

    async def _fetch_maps(self, intent: FetchMapsByCategory) -> AsyncGenerator[Effect, None]:
        try:
            page = await self._gateway.get_resources_by_category(
                intent.category, intent.search_text, intent.options
            )
        except PersistenceError as exc:
            log.warning("Loading %s resources failed: %s", intent.category, exc)
            yield MapsLoadError(exc)
            return
        params = intent.options.get("params", {})
        yield MapsLoaded(page, params if isinstance(params, dict) else {}, intent.search_text)

    # details

    async def _save_details(
        self,
        intent: SaveDetails,
        snapshot: MapsSnapshot,
    ) -> AsyncGenerator[Effect, None]:
        text = intent.details_text
        if self._fits(text):
            yield DetailsSheetToggled(readonly=True)
        else:
            yield self._error(messages.SIZE_EXCEEDED, scope=ResourceKind.DETAILS)

        current = snapshot.current_map
        if not current.details_uri:
            yield DetailsChanged(text != self._config.empty_details_marker)
        else:
            yield DetailsChanged(current.original_details_text != text)

    async def _save_resource_details(self, snapshot: MapsSnapshot) -> AsyncGenerator[Effect, None]:
        current = snapshot.current_map
        if not current.details_changed:
            return
        text = current.details_text
        if not self._fits(text):
            yield self._error(messages.SIZE_EXCEEDED, scope=ResourceKind.DETAILS)
            return
        if current.id is None:
            log.warning("Details changed but no map is being edited")
            return

        desired = None
        if text:
            desired = LinkedResource(
                value=text,
                category=ResourceCategory.DETAILS,
                metadata={"name": uuid1().hex},
                permissions=snapshot.map_permissions(current.id),
            )
        change = PendingChange(
            attribute=DETAILS_ATTRIBUTE,
            desired=desired,
            current=ResourceRef(current.details_uri),
        )

        yield DetailsSaving(saving=True)
        outcome = await self._coordinator.apply_change(current.id, change)
        for event in self._attribute_events(current.id, (outcome,)):
            yield event
        yield DetailsSaving(saving=False)
        yield ResetUpdating(current.id)

    async def _edit_map(self, snapshot: MapsSnapshot) -> AsyncGenerator[Effect, None]:
        current = snapshot.current_map
        details_id = ResourceRef(current.details_uri).id
        if details_id is None:
            yield DetailsUpdated("", do_update=True, original_details="")
            return
        try:
            details = await self._gateway.get_resource(details_id)
        except PersistenceError as exc:
            log.warning("Fetching details %s of map %s failed: %s", details_id, current.id, exc)
            yield self._error(messages.FETCHING_DETAILS_FAILED, scope=ResourceKind.DETAILS)
            yield _details_not_available()
            yield DetailsEditabilityToggled(current.id)
            return
        yield DetailsUpdated(details, do_update=True, original_details=details)

    async def _open_details_panel(self, snapshot: MapsSnapshot) -> AsyncGenerator[Effect, None]:
        yield ControlToggled(DETAILS_CONTROL, "enabled")
        details_id = ResourceRef(snapshot.map_info_details_uri).id
        details = ""
        if details_id is not None:
            try:
                details = await self._gateway.get_resource(details_id)
            except PersistenceError as exc:
                log.warning("Fetching details %s for the panel failed: %s", details_id, exc)
                yield self._error(messages.FETCHING_DETAILS_FAILED, scope=ResourceKind.DETAILS)
                yield _details_not_available()
                return
        yield FeatureGridClosed()
        yield DetailsUpdated(details, do_update=True, original_details=details)

    async def _close_details_panel(self) -> AsyncGenerator[Effect, None]:
        yield ControlToggled(DETAILS_CONTROL, "enabled")
        yield CurrentMapReset()

    async def _reset_updating(self) -> AsyncGenerator[Effect, None]:
        yield MetadataEditDisplayed(show=False)
        yield CurrentMapReset()

    async def _map_info_loaded(self, snapshot: MapsSnapshot) -> AsyncGenerator[Effect, None]:
        map_id = snapshot.map_id
        if map_id is None:
            return
        try:
            attributes = await self._gateway.get_resource_attributes(map_id)
        except PersistenceError as exc:
            log.warning("Reading attributes of map %s failed: %s", map_id, exc)
            yield self._error(messages.LOADING_MAP_INFO_FAILED, scope=ResourceKind.MAP)
            return
        details = next((a for a in attributes if a.name == DETAILS_ATTRIBUTE), None)
        if details is not None and details.value is not None:
            yield DetailsLoaded(map_id, details.value)

    # map lifecycle

    async def _save_map_resource(
        self,
        intent: SaveMapResource,
        snapshot: MapsSnapshot,
    ) -> AsyncGenerator[Effect, None]:
        resource = intent.resource
        creating = resource.id is None
        if creating:
            yield SavingMap(resource.metadata)
            current = {}
        else:
            yield MapUpdating(resource.metadata)
            current = snapshot.attribute_refs(resource.id)

        outcome = await self._coordinator.save_entity(resource, current)
        map_id = outcome.map_id if creating else resource.id

        if outcome.entity.failed or map_id is None:
            error = outcome.entity.error
            if map_id is not None:
                # sibling attribute changes of an update ran regardless
                for event in self._attribute_events(map_id, outcome.attributes):
                    yield event
            yield MapError(error) if creating else MapsLoadError(error)
            yield self._error(
                messages.error_message_for(error),
                title=messages.MAP_ERROR_TITLE,
                scope=ResourceKind.MAP,
                dismissable=True,
            )
            return

        if creating:
            metadata = {
                "id": map_id,
                "canDelete": True,
                "canEdit": True,
                "canCopy": True,
                **resource.metadata,
            }
            yield MapCreated(map_id, metadata, resource.data)
        for event in self._attribute_events(map_id, outcome.attributes):
            yield event
        if creating:
            yield MetadataEditDisplayed(show=False)
        yield self._success(
            messages.MAP_SAVED_MESSAGE,
            title=messages.MAP_SAVED_TITLE,
            scope=ResourceKind.MAP,
            dismissable=True,
        )

    async def _delete_map(
        self,
        intent: DeleteMap,
        snapshot: MapsSnapshot,
    ) -> AsyncGenerator[Effect, None]:
        map_id = intent.map_id
        refs = snapshot.attribute_refs(map_id)
        yield MapDeleting(map_id)

        outcome = await self._coordinator.delete_entity(
            map_id,
            details=refs.get(DETAILS_ATTRIBUTE, ResourceRef()),
            thumbnail=refs.get(THUMBNAIL_ATTRIBUTE, ResourceRef()),
            options=intent.options,
        )
        for linked in (outcome.details, outcome.thumbnail):
            if linked.failed:
                yield self._error(messages.delete_failed_message(linked.kind), scope=linked.kind)

        if outcome.map.failed:
            yield self._error(messages.DELETING_MAP_FAILED, scope=ResourceKind.MAP)
            yield MapDeleted(map_id, OutcomeResult.ERROR, outcome.map.error)
            return
        yield MapDeleted(map_id, OutcomeResult.SUCCESS)
        yield self._success(messages.MAP_DELETED, scope=ResourceKind.MAP)
        if outcome.all_succeeded:
            yield self._success(messages.ALL_RESOURCES_DELETED)

    # backgrounds

    async def _background_thumbnails_created(
        self,
        intent: BackgroundThumbnailsCreated,
    ) -> AsyncGenerator[Effect, None]:
        outcome = await self._coordinator.create_background_thumbnails(intent.backgrounds)
        for result in outcome.results:
            if result.outcome.failed:
                yield ThumbnailError(result.background_id, result.outcome.error)
                yield self._error(
                    messages.CREATING_BACKGROUND_THUMBNAIL_FAILED,
                    scope=ResourceKind.BACKGROUND_THUMBNAIL,
                )
            elif result.action is LifecycleAction.CREATE:
                yield LayerUpdated(result.background_id, result.source, result.thumb_id)
                yield ThumbnailReset(result.background_id)
            else:
                yield LayerUpdated(result.background_id, None, None)

        yield BackgroundsCleared()
        yield ModalParametersCleared()
        yield BackgroundThumbnailsUpdated(
            map_thumb=intent.map_thumb,
            metadata=intent.metadata,
            data=intent.data,
            removed_resources=outcome.removed_resources,
        )

    async def _background_thumbnails_updated(
        self,
        intent: BackgroundThumbnailsUpdated,
        snapshot: MapsSnapshot,
    ) -> AsyncGenerator[Effect, None]:
        orphaned = removed_resources(
            snapshot.background_source_ids, snapshot.current_background_thumb_ids()
        )
        if orphaned:
            log.debug("Deleting orphaned background thumbnails %s", orphaned)
            outcomes = await self._coordinator.delete_resources(orphaned)
            for _ in (o for o in outcomes if o.failed):
                yield self._error(
                    messages.DELETING_BACKGROUND_THUMBNAIL_FAILED,
                    scope=ResourceKind.BACKGROUND_THUMBNAIL,
                )
            deleted = tuple(
                o.resource_id for o in outcomes if o.succeeded and o.resource_id is not None
            )
            if deleted:
                yield BackgroundThumbnailsRemoved(deleted)

        linked: dict[str, LinkedResource | None] = {}
        if intent.data:
            linked[THUMBNAIL_ATTRIBUTE] = LinkedResource(
                value=intent.data,
                category=ResourceCategory.THUMBNAIL,
                metadata={"name": intent.map_thumb} if intent.map_thumb else {},
                tail=f"{RAW_DATA_URI_TAIL}&v={uuid1()}",
            )
        yield SaveMapResource(
            MapResource(
                id=snapshot.map_id,
                metadata=intent.metadata,
                data=snapshot.map_configuration,
                linked_resources=linked,
            )
        )

    # helpers

    def _fits(self, text: str) -> bool:
        return len(text) <= self._config.max_details_length

    def _attribute_events(
        self,
        map_id: int,
        changes: Iterable[AttributeChangeOutcome],
    ) -> Iterator[Effect]:
        for change in changes:
            if change.outcome.failed:
                yield self._error(
                    messages.save_failed_message(change.attribute),
                    scope=change.outcome.kind,
                )
            elif change.attribute_value is not None:
                yield AttributeUpdated(map_id, change.attribute, change.attribute_value)

    def _error(
        self,
        message: str,
        *,
        title: str | None = None,
        scope: ResourceKind | None = None,
        dismissable: bool = False,
    ) -> Notification:
        return self._notice(NoticeLevel.ERROR, message, title, scope, dismissable=dismissable)

    def _success(
        self,
        message: str,
        *,
        title: str | None = None,
        scope: ResourceKind | None = None,
        dismissable: bool = False,
    ) -> Notification:
        return self._notice(NoticeLevel.SUCCESS, message, title, scope, dismissable=dismissable)

    def _notice(
        self,
        level: NoticeLevel,
        message: str,
        title: str | None,
        scope: ResourceKind | None,
        *,
        dismissable: bool,
    ) -> Notification:
        defaults = self._config.notifications
        return Notification(
            level=level,
            message=message,
            title=title,
            scope=scope,
            auto_dismiss=defaults.auto_dismiss if dismissable else None,
            position=defaults.position if dismissable else None,
        )


def _details_not_available() -> DetailsUpdated:
    return DetailsUpdated(
        NO_DETAILS_AVAILABLE,
        do_update=True,
        original_details=NO_DETAILS_AVAILABLE,
    )
