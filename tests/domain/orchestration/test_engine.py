from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from mapflow.config import OrchestrationConfig
from mapflow.domain.model import (
    NO_DATA,
    BackgroundThumbnail,
    LinkedResource,
    MapResource,
    OutcomeResult,
    PersistenceError,
    ResourceAttribute,
    ResourceCategory,
    ResourceKind,
    ResourcePage,
    ResourceSummary,
    SecurityRule,
    build_resource_uri,
    encode_attribute_uri,
)
from mapflow.domain.orchestration import (
    NO_DETAILS_AVAILABLE,
    AttributeUpdated,
    BackgroundsCleared,
    BackgroundThumbnailsCreated,
    BackgroundThumbnailsRemoved,
    BackgroundThumbnailsUpdated,
    CloseDetailsPanel,
    ControlToggled,
    CurrentMapReset,
    DeleteMap,
    DetailsChanged,
    DetailsEditabilityToggled,
    DetailsLoaded,
    DetailsSaving,
    DetailsSheetToggled,
    DetailsUpdated,
    EditMap,
    FeatureGridClosed,
    FetchMapsByCategory,
    LayerUpdated,
    LoadMaps,
    MapCreated,
    MapDeleted,
    MapDeleting,
    MapError,
    MapInfoLoaded,
    MapsLoaded,
    MapsLoadError,
    MapsLoading,
    MapUpdating,
    MetadataEditDisplayed,
    ModalParametersCleared,
    NoticeLevel,
    Notification,
    OpenDetailsPanel,
    OrchestrationEngine,
    ResetUpdating,
    SaveDetails,
    SaveMapResource,
    SaveResourceDetails,
    SavingMap,
    ThumbnailReset,
)
from mapflow.domain.orchestration import messages
from mapflow.domain.ports import BackgroundLayer, CurrentMap, MapRecord, MapsSnapshot
from tests.helpers.gateway import STORE_URL, FakeGateway

if TYPE_CHECKING:
    from mapflow.domain.orchestration import AnyIntent, Effect


def _engine(gateway: FakeGateway) -> OrchestrationEngine:
    return OrchestrationEngine(gateway, config=OrchestrationConfig(store_url=STORE_URL))


def _effects(
    gateway: FakeGateway,
    intent: AnyIntent,
    snapshot: MapsSnapshot | None = None,
) -> list[Effect]:
    engine = _engine(gateway)

    async def collect() -> list[Effect]:
        return [effect async for effect in engine.handle(intent, snapshot or MapsSnapshot())]

    return asyncio.run(collect())


def _ref(resource_id: int) -> str:
    return encode_attribute_uri(build_resource_uri(STORE_URL, resource_id))


def _notices(effects: list[Effect]) -> list[tuple[NoticeLevel, str]]:
    return [(e.level, e.message) for e in effects if isinstance(e, Notification)]


def _editing(**kwargs: object) -> MapsSnapshot:
    return MapsSnapshot(current_map=CurrentMap(**kwargs))  # type: ignore[arg-type]


# catalogue


def test_load_maps_sanitises_search_text() -> None:
    gateway = FakeGateway()
    params = {"start": 0, "limit": 12}

    effects = _effects(gateway, LoadMaps(search_text="a/b?c:d;e@f=g&h\\i", params=params))

    assert effects == [
        MapsLoading("abcdefghi", params),
        FetchMapsByCategory("MAP", "abcdefghi", {"params": params}),
    ]
    assert gateway.calls == []


def test_load_maps_passes_alternative_store_url() -> None:
    effects = _effects(FakeGateway(), LoadMaps(geostore_url="http://other/rest/"))

    fetch = effects[1]
    assert isinstance(fetch, FetchMapsByCategory)
    assert fetch.options["base_url"] == "http://other/rest/"


def test_fetch_maps_by_category() -> None:
    page = ResourcePage(results=(ResourceSummary(id=1, name="map"),), total_count=1)
    gateway = FakeGateway(page=page)
    options = {"params": {"start": 0, "limit": 12}}

    effects = _effects(gateway, FetchMapsByCategory("MAP", "map", options))

    assert effects == [MapsLoaded(page, {"start": 0, "limit": 12}, "map")]
    assert gateway.calls_to("get_resources_by_category") == [("MAP", "map", options)]


def test_fetch_maps_failure() -> None:
    gateway = FakeGateway()
    gateway.fail("get_resources_by_category", "MAP")

    (effect,) = _effects(gateway, FetchMapsByCategory("MAP", "*"))

    assert isinstance(effect, MapsLoadError)
    assert isinstance(effect.error, PersistenceError)


# details


def test_save_details_too_large_is_rejected_without_remote_call() -> None:
    gateway = FakeGateway()

    effects = _effects(gateway, SaveDetails("x" * 500_001))

    assert _notices(effects) == [(NoticeLevel.ERROR, messages.SIZE_EXCEEDED)]
    assert effects[-1] == DetailsChanged(changed=True)
    assert not any(isinstance(e, DetailsSheetToggled) for e in effects)
    assert gateway.calls == []


def test_save_details_empty_marker_is_not_a_change() -> None:
    effects = _effects(FakeGateway(), SaveDetails("<p><br></p>"))

    assert effects == [DetailsSheetToggled(readonly=True), DetailsChanged(changed=False)]


def test_save_details_compares_with_original_text() -> None:
    snapshot = _editing(id=1, details_uri=_ref(2), original_details_text="<p>a</p>")

    same = _effects(FakeGateway(), SaveDetails("<p>a</p>"), snapshot)
    different = _effects(FakeGateway(), SaveDetails("<p>b</p>"), snapshot)

    assert same[-1] == DetailsChanged(changed=False)
    assert different[-1] == DetailsChanged(changed=True)


def test_save_resource_details_unchanged_does_nothing() -> None:
    gateway = FakeGateway()

    effects = _effects(gateway, SaveResourceDetails(), _editing(id=1, details_text="<p>a</p>"))

    assert effects == []
    assert gateway.calls == []


def test_save_resource_details_too_large() -> None:
    gateway = FakeGateway()
    snapshot = _editing(id=1, details_text="x" * 500_001, details_changed=True)

    effects = _effects(gateway, SaveResourceDetails(), snapshot)

    assert _notices(effects) == [(NoticeLevel.ERROR, messages.SIZE_EXCEEDED)]
    assert len(effects) == 1
    assert gateway.calls == []


def test_save_resource_details_creates_details_with_map_permissions() -> None:
    gateway = FakeGateway(next_id=20)
    rules = (SecurityRule(user="alice", can_write=True),)
    snapshot = MapsSnapshot(
        current_map=CurrentMap(id=1, details_text="<p>new</p>", details_changed=True),
        maps={1: MapRecord(id=1, permissions=rules)},
    )

    effects = _effects(gateway, SaveResourceDetails(), snapshot)

    assert effects == [
        DetailsSaving(saving=True),
        AttributeUpdated(1, "details", _ref(20)),
        DetailsSaving(saving=False),
        ResetUpdating(1),
    ]
    assert gateway.calls_to("update_resource_permissions") == [(20, rules)]
    assert gateway.resources[20] == "<p>new</p>"


def test_save_resource_details_failure_is_reported_per_resource() -> None:
    gateway = FakeGateway()
    gateway.fail("create_resource", "DETAILS")
    snapshot = _editing(id=1, details_text="<p>new</p>", details_changed=True)

    effects = _effects(gateway, SaveResourceDetails(), snapshot)

    assert effects[0] == DetailsSaving(saving=True)
    assert _notices(effects) == [(NoticeLevel.ERROR, messages.SAVING_DETAILS_FAILED)]
    assert effects[-2:] == [DetailsSaving(saving=False), ResetUpdating(1)]


def test_save_resource_details_cleared_text_deletes_resource() -> None:
    gateway = FakeGateway(resources={2: "<p>old</p>"})
    snapshot = _editing(id=1, details_uri=_ref(2), details_text="", details_changed=True)

    effects = _effects(gateway, SaveResourceDetails(), snapshot)

    assert AttributeUpdated(1, "details", NO_DATA) in effects
    assert gateway.calls_to("delete_resource") == [(2,)]


def test_edit_map_without_details_uri_makes_no_call() -> None:
    gateway = FakeGateway()

    effects = _effects(gateway, EditMap(), _editing(id=1, details_uri="NODATA"))

    assert effects == [DetailsUpdated("", do_update=True, original_details="")]
    assert gateway.calls == []


def test_edit_map_fetches_details() -> None:
    gateway = FakeGateway(resources={2: "<p>stored</p>"})

    effects = _effects(gateway, EditMap(), _editing(id=1, details_uri=_ref(2)))

    assert effects == [
        DetailsUpdated("<p>stored</p>", do_update=True, original_details="<p>stored</p>")
    ]


def test_edit_map_fetch_failure() -> None:
    effects = _effects(FakeGateway(), EditMap(), _editing(id=1, details_uri=_ref(2)))

    assert _notices(effects) == [(NoticeLevel.ERROR, messages.FETCHING_DETAILS_FAILED)]
    assert effects[1:] == [
        DetailsUpdated(NO_DETAILS_AVAILABLE, do_update=True, original_details=NO_DETAILS_AVAILABLE),
        DetailsEditabilityToggled(1),
    ]


def test_open_details_panel() -> None:
    gateway = FakeGateway(resources={2: "<p>info</p>"})

    effects = _effects(gateway, OpenDetailsPanel(), MapsSnapshot(map_info_details_uri=_ref(2)))

    assert effects == [
        ControlToggled("details", "enabled"),
        FeatureGridClosed(),
        DetailsUpdated("<p>info</p>", do_update=True, original_details="<p>info</p>"),
    ]


def test_open_details_panel_failure() -> None:
    snapshot = MapsSnapshot(map_info_details_uri=_ref(2))

    effects = _effects(FakeGateway(), OpenDetailsPanel(), snapshot)

    assert effects[0] == ControlToggled("details", "enabled")
    assert _notices(effects) == [(NoticeLevel.ERROR, messages.FETCHING_DETAILS_FAILED)]
    assert effects[-1] == DetailsUpdated(
        NO_DETAILS_AVAILABLE, do_update=True, original_details=NO_DETAILS_AVAILABLE
    )


def test_close_details_panel_and_reset_updating() -> None:
    assert _effects(FakeGateway(), CloseDetailsPanel()) == [
        ControlToggled("details", "enabled"),
        CurrentMapReset(),
    ]
    assert _effects(FakeGateway(), ResetUpdating(1)) == [
        MetadataEditDisplayed(show=False),
        CurrentMapReset(),
    ]


def test_map_info_loaded_reads_details_attribute() -> None:
    gateway = FakeGateway(
        attributes={
            1: [
                ResourceAttribute(name="thumbnail", value=_ref(3)),
                ResourceAttribute(name="details", value=_ref(2)),
            ]
        }
    )

    assert _effects(gateway, MapInfoLoaded(), MapsSnapshot(map_id=1)) == [DetailsLoaded(1, _ref(2))]
    assert _effects(gateway, MapInfoLoaded(), MapsSnapshot()) == []


def test_map_info_loaded_failure_emits_notice() -> None:
    gateway = FakeGateway()
    gateway.fail("get_resource_attributes", 1)

    effects = _effects(gateway, MapInfoLoaded(), MapsSnapshot(map_id=1))

    assert _notices(effects) == [(NoticeLevel.ERROR, messages.LOADING_MAP_INFO_FAILED)]


# map lifecycle


def _new_map(**linked: LinkedResource | None) -> MapResource:
    return MapResource(metadata={"name": "m"}, data="{}", linked_resources=linked)


def test_save_map_resource_create_flow() -> None:
    gateway = FakeGateway(next_id=100)
    thumbnail = LinkedResource(value="data:png", category=ResourceCategory.THUMBNAIL)

    effects = _effects(gateway, SaveMapResource(_new_map(thumbnail=thumbnail)))

    assert effects[:4] == [
        SavingMap({"name": "m"}),
        MapCreated(
            100,
            {"id": 100, "canDelete": True, "canEdit": True, "canCopy": True, "name": "m"},
            "{}",
        ),
        AttributeUpdated(100, "thumbnail", _ref(101)),
        MetadataEditDisplayed(show=False),
    ]
    success = effects[4]
    assert success == Notification(
        level=NoticeLevel.SUCCESS,
        message=messages.MAP_SAVED_MESSAGE,
        title=messages.MAP_SAVED_TITLE,
        scope=ResourceKind.MAP,
        auto_dismiss=6,
        position="tc",
    )
    assert len(effects) == 5


def test_save_map_resource_linked_failure_still_reports_entity_success() -> None:
    gateway = FakeGateway()
    gateway.fail("create_resource", "THUMBNAIL")
    thumbnail = LinkedResource(value="data:png", category=ResourceCategory.THUMBNAIL)

    effects = _effects(gateway, SaveMapResource(_new_map(thumbnail=thumbnail)))

    assert _notices(effects) == [
        (NoticeLevel.ERROR, messages.SAVING_THUMBNAIL_FAILED),
        (NoticeLevel.SUCCESS, messages.MAP_SAVED_MESSAGE),
    ]


def test_save_map_resource_create_failure() -> None:
    gateway = FakeGateway()
    error = PersistenceError("conflict", status=409)
    gateway.fail("create_resource", "MAP", error)

    effects = _effects(gateway, SaveMapResource(_new_map()))

    assert effects[:2] == [SavingMap({"name": "m"}), MapError(error)]
    notice = effects[2]
    assert isinstance(notice, Notification)
    assert notice.level is NoticeLevel.ERROR
    assert notice.message == "map.mapError.error409"
    assert notice.title == messages.MAP_ERROR_TITLE


def test_save_map_resource_update_flow() -> None:
    gateway = FakeGateway(resources={1: "{}"})
    resource = MapResource(id=1, metadata={"name": "m"}, data="{}")

    effects = _effects(gateway, SaveMapResource(resource))

    assert effects[0] == MapUpdating({"name": "m"})
    assert _notices(effects) == [(NoticeLevel.SUCCESS, messages.MAP_SAVED_MESSAGE)]
    assert not any(isinstance(e, MapCreated | MetadataEditDisplayed) for e in effects)


def test_save_map_resource_update_failure() -> None:
    gateway = FakeGateway()
    gateway.fail("update_resource", 1)

    effects = _effects(gateway, SaveMapResource(MapResource(id=1, data="{}")))

    assert isinstance(effects[1], MapsLoadError)
    assert _notices(effects) == [(NoticeLevel.ERROR, messages.MAP_ERROR_DEFAULT)]


def _stored_map() -> MapsSnapshot:
    record = MapRecord(id=1, details_uri=_ref(2), thumbnail_uri=_ref(3))
    return MapsSnapshot(maps={1: record})


def test_delete_map_thumbnail_failure() -> None:
    gateway = FakeGateway()
    gateway.fail("delete_resource", 3)

    effects = _effects(gateway, DeleteMap(1), _stored_map())

    assert effects[0] == MapDeleting(1)
    assert MapDeleted(1, OutcomeResult.SUCCESS) in effects
    assert _notices(effects) == [
        (NoticeLevel.ERROR, messages.DELETING_THUMBNAIL_FAILED),
        (NoticeLevel.SUCCESS, messages.MAP_DELETED),
    ]
    scopes = [e.scope for e in effects if isinstance(e, Notification)]
    assert scopes[0] is ResourceKind.THUMBNAIL


def test_delete_map_all_resources() -> None:
    gateway = FakeGateway()

    effects = _effects(gateway, DeleteMap(1), _stored_map())

    assert _notices(effects) == [
        (NoticeLevel.SUCCESS, messages.MAP_DELETED),
        (NoticeLevel.SUCCESS, messages.ALL_RESOURCES_DELETED),
    ]
    assert sorted(args[0] for args in gateway.calls_to("delete_resource")) == [1, 2, 3]


def test_delete_map_failure() -> None:
    gateway = FakeGateway()
    error = PersistenceError("forbidden", status=403)
    gateway.fail("delete_resource", 1, error)

    effects = _effects(gateway, DeleteMap(1), _stored_map())

    assert _notices(effects) == [(NoticeLevel.ERROR, messages.DELETING_MAP_FAILED)]
    assert effects[-1] == MapDeleted(1, OutcomeResult.ERROR, error)


def test_delete_map_without_linked_resources() -> None:
    gateway = FakeGateway()

    effects = _effects(gateway, DeleteMap(5))

    assert gateway.calls_to("delete_resource") == [(5,)]
    assert (NoticeLevel.SUCCESS, messages.ALL_RESOURCES_DELETED) in _notices(effects)


# backgrounds


def test_background_thumbnails_created() -> None:
    gateway = FakeGateway(next_id=50)
    intent = BackgroundThumbnailsCreated(
        backgrounds=(
            BackgroundThumbnail(
                background_id="osm", new_name="osm", new_data="d", existing_thumb_id=5
            ),
            BackgroundThumbnail(background_id="sat", existing_thumb_id=6),
        ),
        map_thumb="thumb",
        metadata={"name": "m"},
        data="data:map",
    )

    effects = _effects(gateway, intent)

    assert effects == [
        LayerUpdated("osm", build_resource_uri(STORE_URL, 50), 50),
        ThumbnailReset("osm"),
        LayerUpdated("sat", None, None),
        BackgroundsCleared(),
        ModalParametersCleared(),
        BackgroundThumbnailsUpdated(
            map_thumb="thumb",
            metadata={"name": "m"},
            data="data:map",
            removed_resources=(5, 6),
        ),
    ]


def test_background_thumbnails_updated_drops_orphans_and_resaves() -> None:
    gateway = FakeGateway()
    gateway.fail("delete_resource", 6)
    snapshot = MapsSnapshot(
        map_id=1,
        map_configuration={"map": {"layers": []}},
        background_source_ids=(5, 6, 7),
        background_layers=(BackgroundLayer(id="osm", thumb_id=7),),
    )
    intent = BackgroundThumbnailsUpdated(map_thumb="thumb", metadata={"name": "m"}, data="data:png")

    effects = _effects(gateway, intent, snapshot)

    assert sorted(args[0] for args in gateway.calls_to("delete_resource")) == [5, 6]
    assert _notices(effects) == [(NoticeLevel.ERROR, messages.DELETING_BACKGROUND_THUMBNAIL_FAILED)]
    assert BackgroundThumbnailsRemoved((5,)) in effects
    save = effects[-1]
    assert isinstance(save, SaveMapResource)
    assert save.resource.id == 1
    assert save.resource.data == {"map": {"layers": []}}
    thumbnail = save.resource.linked_resources["thumbnail"]
    assert thumbnail is not None
    assert thumbnail.value == "data:png"
    assert thumbnail.metadata == {"name": "thumb"}
    assert thumbnail.tail.startswith("/raw?decode=datauri&v=")


def test_background_thumbnails_updated_without_map_thumbnail() -> None:
    gateway = FakeGateway()

    effects = _effects(gateway, BackgroundThumbnailsUpdated(), MapsSnapshot(map_id=1))

    assert gateway.calls == []
    (save,) = effects
    assert isinstance(save, SaveMapResource)
    assert save.resource.linked_resources == {}


def test_persistence_errors_never_escape_handlers() -> None:
    gateway = FakeGateway()
    gateway.fail("delete_resource")

    effects = _effects(gateway, DeleteMap(1), _stored_map())

    deleted = effects[-1]
    assert isinstance(deleted, MapDeleted)
    assert deleted.result is OutcomeResult.ERROR
    assert isinstance(deleted.error, PersistenceError)
