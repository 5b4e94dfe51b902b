"""Read-only views of application state consumed by the orchestration engine.

The application store owns this state. The engine receives one immutable
``MapsSnapshot`` per dispatched intent and never writes to it; changes flow
back to the store as events.
"""

# pyright: reportUnknownVariableType=false

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Protocol, runtime_checkable

from mapflow.domain.model import ResourceRef

if TYPE_CHECKING:
    from collections.abc import Mapping

    from mapflow.domain.model import Permissions


DETAILS_ATTRIBUTE = "details"
THUMBNAIL_ATTRIBUTE = "thumbnail"


@dataclass(frozen=True, slots=True, kw_only=True)
class MapRecord:
    """A map as listed in the catalogue."""

    id: int
    name: str | None = None
    details_uri: str | None = None
    thumbnail_uri: str | None = None
    permissions: Permissions | None = None
    delete_failed: bool = False

    @property
    def details_ref(self) -> ResourceRef:
        return ResourceRef(self.details_uri)

    @property
    def thumbnail_ref(self) -> ResourceRef:
        return ResourceRef(self.thumbnail_uri)


@dataclass(frozen=True, slots=True, kw_only=True)
class CurrentMap:
    """The map whose metadata/details are being edited."""

    id: int | None = None
    details_uri: str | None = None
    details_text: str = ""
    original_details_text: str = ""
    details_changed: bool = False
    thumbnail_uri: str | None = None
    permissions: Permissions | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class BackgroundLayer:
    id: str
    thumb_id: int | None = None
    source: str | None = None


@dataclass(frozen=True, slots=True, kw_only=True)
class MapsSnapshot:
    current_map: CurrentMap = field(default_factory=CurrentMap)
    maps: Mapping[int, MapRecord] = field(default_factory=dict)
    # map open in the viewer, with its details link as loaded from map info
    map_id: int | None = None
    map_info_details_uri: str | None = None
    map_configuration: object = None
    # thumbnail ids of the backgrounds as last saved, and the live layers
    background_source_ids: tuple[int, ...] = ()
    background_layers: tuple[BackgroundLayer, ...] = ()
    user_params: Mapping[str, str] = field(default_factory=dict)

    def map_record(self, map_id: int | None) -> MapRecord | None:
        if map_id is None:
            return None
        return self.maps.get(map_id)

    def map_permissions(self, map_id: int | None) -> Permissions | None:
        record = self.map_record(map_id)
        if record is not None and record.permissions is not None:
            return record.permissions
        if map_id is not None and self.current_map.id == map_id:
            return self.current_map.permissions
        return None

    def attribute_refs(self, map_id: int | None) -> dict[str, ResourceRef]:
        """Current linked-resource references of ``map_id``, keyed by attribute."""

        record = self.map_record(map_id)
        if record is not None:
            return {
                DETAILS_ATTRIBUTE: record.details_ref,
                THUMBNAIL_ATTRIBUTE: record.thumbnail_ref,
            }
        if map_id is not None and self.current_map.id == map_id:
            return {
                DETAILS_ATTRIBUTE: ResourceRef(self.current_map.details_uri),
                THUMBNAIL_ATTRIBUTE: ResourceRef(self.current_map.thumbnail_uri),
            }
        return {}

    def current_background_thumb_ids(self) -> tuple[int, ...]:
        return tuple(
            layer.thumb_id for layer in self.background_layers if layer.thumb_id is not None
        )


@runtime_checkable
class StateProjection(Protocol):
    """Source of snapshots; called once per dispatched intent."""

    def snapshot(self) -> MapsSnapshot: ...


@dataclass(slots=True)
class StaticProjection:
    """Projection over a fixed snapshot, for one-shot runs and tests."""

    state: MapsSnapshot = field(default_factory=MapsSnapshot)

    def snapshot(self) -> MapsSnapshot:
        return self.state
