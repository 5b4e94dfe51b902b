"""Application entry points wiring the GeoStore adapter to the engine."""

from __future__ import annotations

import asyncio
from contextlib import asynccontextmanager
from dataclasses import replace
from logging import getLogger
from typing import TYPE_CHECKING

from mapflow.adapters.geostore import GeoStoreGateway
from mapflow.config import get_geostore_config, get_orchestration_config
from mapflow.domain.model import OutcomeResult, extract_resource_id
from mapflow.domain.orchestration import (
    DeleteMap,
    DetailsLoaded,
    DetailsUpdated,
    IntentDispatcher,
    LoadMaps,
    MapDeleted,
    MapInfoLoaded,
    MapsLoaded,
    OpenDetailsPanel,
    OrchestrationEngine,
)
from mapflow.domain.ports import (
    DETAILS_ATTRIBUTE,
    THUMBNAIL_ATTRIBUTE,
    MapRecord,
    MapsSnapshot,
)

if TYPE_CHECKING:
    from collections.abc import AsyncIterator, Mapping

    from mapflow.domain.model import ResourceAttribute
    from mapflow.domain.orchestration import AnyIntent, OrchestrationEvent
    from mapflow.domain.ports import PersistenceGateway

log = getLogger(__name__)


class MapsStateStore:
    """Minimal application store: folds published events into a snapshot."""

    def __init__(self, state: MapsSnapshot | None = None) -> None:
        self._state = state or MapsSnapshot()

    def snapshot(self) -> MapsSnapshot:
        return self._state

    def apply(self, event: OrchestrationEvent) -> None:
        match event:
            case MapsLoaded(page=page):
                maps = {
                    item.id: MapRecord(
                        id=item.id,
                        name=item.name,
                        details_uri=_reference_or_none(item.details),
                        thumbnail_uri=_reference_or_none(item.thumbnail),
                    )
                    for item in page.results
                }
                self._state = replace(self._state, maps=maps)
            case DetailsLoaded(map_id=map_id, details_uri=details_uri):
                if self._state.map_id == map_id:
                    self._state = replace(self._state, map_info_details_uri=details_uri)
            case MapDeleted(map_id=map_id, result=OutcomeResult.SUCCESS):
                maps = {key: value for key, value in self._state.maps.items() if key != map_id}
                self._state = replace(self._state, maps=maps)
            case MapDeleted(map_id=map_id) if map_id in self._state.maps:
                # the entity is still stored, keep listing it
                record = replace(self._state.maps[map_id], delete_failed=True)
                self._state = replace(self._state, maps={**self._state.maps, map_id: record})
            case _:
                pass


async def run_intents(
    gateway: PersistenceGateway,
    *intents: AnyIntent,
    store_url: str,
    store: MapsStateStore | None = None,
) -> list[OrchestrationEvent]:
    """Dispatch ``intents`` against ``gateway`` and return every published event."""

    state = store or MapsStateStore()
    engine = OrchestrationEngine(gateway, config=get_orchestration_config(store_url=store_url))
    dispatcher = IntentDispatcher(engine, state)
    dispatcher.subscribe(state.apply)
    return await dispatcher.run(*intents)


def load_maps(
    search_text: str = "*",
    *,
    start: int = 0,
    limit: int = 12,
    gateway: PersistenceGateway | None = None,
    store_url: str | None = None,
) -> list[OrchestrationEvent]:
    """Search the catalogue for maps matching ``search_text``."""

    async def run() -> list[OrchestrationEvent]:
        async with _open_gateway(gateway, store_url) as (effective, url):
            intent = LoadMaps(search_text=search_text, params={"start": start, "limit": limit})
            return await run_intents(effective, intent, store_url=url)

    return asyncio.run(run())


def delete_map(
    map_id: int,
    *,
    gateway: PersistenceGateway | None = None,
    store_url: str | None = None,
) -> list[OrchestrationEvent]:
    """Delete a map together with its details and thumbnail resources."""

    async def run() -> list[OrchestrationEvent]:
        async with _open_gateway(gateway, store_url) as (effective, url):
            attributes = await effective.get_resource_attributes(map_id)
            record = _map_record(map_id, attributes)
            log.info(
                "Deleting map %s (details=%s, thumbnail=%s)",
                map_id,
                record.details_ref.id,
                record.thumbnail_ref.id,
            )
            store = MapsStateStore(MapsSnapshot(maps={map_id: record}))
            return await run_intents(effective, DeleteMap(map_id), store_url=url, store=store)

    return asyncio.run(run())


def show_map_details(
    map_id: int,
    *,
    gateway: PersistenceGateway | None = None,
    store_url: str | None = None,
) -> str | None:
    """Return the details document of ``map_id``; ``None`` when it has none."""

    async def run() -> str | None:
        async with _open_gateway(gateway, store_url) as (effective, url):
            store = MapsStateStore(MapsSnapshot(map_id=map_id))
            events = await run_intents(effective, MapInfoLoaded(), store_url=url, store=store)
            if not any(isinstance(event, DetailsLoaded) for event in events):
                return None
            events = await run_intents(effective, OpenDetailsPanel(), store_url=url, store=store)
            for event in events:
                if isinstance(event, DetailsUpdated):
                    return event.details_text
            return None

    return asyncio.run(run())


@asynccontextmanager
async def _open_gateway(
    gateway: PersistenceGateway | None,
    store_url: str | None,
) -> AsyncIterator[tuple[PersistenceGateway, str]]:
    if gateway is not None:
        yield gateway, store_url or get_geostore_config().base_url
        return
    config = get_geostore_config()
    async with GeoStoreGateway(config) as geostore:
        yield geostore, store_url or config.base_url


def _map_record(map_id: int, attributes: list[ResourceAttribute]) -> MapRecord:
    values: Mapping[str, str | None] = {attribute.name: attribute.value for attribute in attributes}
    return MapRecord(
        id=map_id,
        details_uri=_reference_or_none(values.get(DETAILS_ATTRIBUTE)),
        thumbnail_uri=_reference_or_none(values.get(THUMBNAIL_ATTRIBUTE)),
    )


def _reference_or_none(value: str | None) -> str | None:
    # attributes may hold anything; only values pointing at a stored resource count
    return value if extract_resource_id(value) is not None else None
