"""Intents: typed requests the orchestration engine reacts to.

``AnyIntent`` is the closed union the engine dispatches on. Each intent class
declares how concurrent instances of itself are scheduled.
"""

# pyright: reportUnknownVariableType=false

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING, ClassVar

if TYPE_CHECKING:
    from collections.abc import Mapping

    from mapflow.domain.model import BackgroundThumbnail, MapResource

DEFAULT_PAGE_PARAMS: Mapping[str, object] = {"start": 0, "limit": 12}


class Concurrency(StrEnum):
    """Scheduling of a new intent relative to running ones of the same kind."""

    EXHAUST = "exhaust"  # ignore the newcomer while one is in flight
    SWITCH = "switch"  # newcomer supersedes; older results are dropped
    MERGE = "merge"  # all instances run and report


class Intent:
    __slots__ = ()

    concurrency: ClassVar[Concurrency] = Concurrency.SWITCH


@dataclass(frozen=True, slots=True)
class LoadMaps(Intent):
    search_text: str = "*"
    params: Mapping[str, object] = field(default_factory=lambda: dict(DEFAULT_PAGE_PARAMS))
    geostore_url: str | None = None


@dataclass(frozen=True, slots=True)
class FetchMapsByCategory(Intent):
    category: str
    search_text: str
    options: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class SaveDetails(Intent):
    """The details editor content changed; no remote call is involved."""

    details_text: str


@dataclass(frozen=True, slots=True)
class SaveResourceDetails(Intent):
    """Persist the current map's edited details."""


@dataclass(frozen=True, slots=True)
class EditMap(Intent):
    """Metadata editing started; details are fetched for the editor."""


@dataclass(frozen=True, slots=True)
class OpenDetailsPanel(Intent):
    pass


@dataclass(frozen=True, slots=True)
class CloseDetailsPanel(Intent):
    pass


@dataclass(frozen=True, slots=True)
class ResetUpdating(Intent):
    map_id: int | None = None


@dataclass(frozen=True, slots=True)
class MapInfoLoaded(Intent):
    pass


@dataclass(frozen=True, slots=True)
class SaveMapResource(Intent):
    concurrency: ClassVar[Concurrency] = Concurrency.EXHAUST

    resource: MapResource


@dataclass(frozen=True, slots=True)
class DeleteMap(Intent):
    concurrency: ClassVar[Concurrency] = Concurrency.MERGE

    map_id: int
    options: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class BackgroundThumbnailsCreated(Intent):
    """Thumbnail dialog confirmed: store new background thumbnails."""

    backgrounds: tuple[BackgroundThumbnail, ...] = ()
    map_thumb: str | None = None
    metadata: Mapping[str, object] = field(default_factory=dict)
    data: str | None = None


@dataclass(frozen=True, slots=True)
class BackgroundThumbnailsUpdated(Intent):
    """Background thumbnails are settled: drop orphans and resave the map."""

    map_thumb: str | None = None
    metadata: Mapping[str, object] = field(default_factory=dict)
    data: str | None = None
    removed_resources: tuple[int, ...] = ()


type AnyIntent = (
    LoadMaps
    | FetchMapsByCategory
    | SaveDetails
    | SaveResourceDetails
    | EditMap
    | OpenDetailsPanel
    | CloseDetailsPanel
    | ResetUpdating
    | MapInfoLoaded
    | SaveMapResource
    | DeleteMap
    | BackgroundThumbnailsCreated
    | BackgroundThumbnailsUpdated
)
