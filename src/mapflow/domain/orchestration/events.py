"""Events published by the engine for the application store to apply.

Events are plain immutable records. ``Notification`` carries user-facing
notices keyed by a stable message id; everything else is a state transition.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from mapflow.domain.model import OutcomeResult

if TYPE_CHECKING:
    from collections.abc import Mapping

    from mapflow.domain.model import ResourceKind, ResourcePage

    from .intents import AnyIntent

# shown in place of a details document that could not be fetched
NO_DETAILS_AVAILABLE = "NO_DETAILS_AVAILABLE"


class OrchestrationEvent:
    __slots__ = ()


class NoticeLevel(StrEnum):
    SUCCESS = "success"
    ERROR = "error"


@dataclass(frozen=True, slots=True, kw_only=True)
class Notification(OrchestrationEvent):
    level: NoticeLevel
    message: str
    title: str | None = None
    scope: ResourceKind | None = None
    auto_dismiss: int | None = None
    position: str | None = None


@dataclass(frozen=True, slots=True)
class IntentFailed(OrchestrationEvent):
    """A handler crashed; the dispatcher keeps serving other intents."""

    intent: AnyIntent
    error: Exception


# catalogue


@dataclass(frozen=True, slots=True)
class MapsLoading(OrchestrationEvent):
    search_text: str
    params: Mapping[str, object]


@dataclass(frozen=True, slots=True)
class MapsLoaded(OrchestrationEvent):
    page: ResourcePage
    params: Mapping[str, object]
    search_text: str


@dataclass(frozen=True, slots=True)
class MapsLoadError(OrchestrationEvent):
    error: Exception


# details


@dataclass(frozen=True, slots=True)
class DetailsSheetToggled(OrchestrationEvent):
    readonly: bool


@dataclass(frozen=True, slots=True)
class DetailsChanged(OrchestrationEvent):
    changed: bool


@dataclass(frozen=True, slots=True)
class DetailsSaving(OrchestrationEvent):
    saving: bool


@dataclass(frozen=True, slots=True)
class DetailsUpdated(OrchestrationEvent):
    details_text: str
    do_update: bool
    original_details: str


@dataclass(frozen=True, slots=True)
class DetailsEditabilityToggled(OrchestrationEvent):
    map_id: int | None


@dataclass(frozen=True, slots=True)
class DetailsLoaded(OrchestrationEvent):
    map_id: int
    details_uri: str


@dataclass(frozen=True, slots=True)
class ControlToggled(OrchestrationEvent):
    control: str
    property: str


@dataclass(frozen=True, slots=True)
class FeatureGridClosed(OrchestrationEvent):
    pass


@dataclass(frozen=True, slots=True)
class CurrentMapReset(OrchestrationEvent):
    pass


@dataclass(frozen=True, slots=True)
class MetadataEditDisplayed(OrchestrationEvent):
    show: bool


# map lifecycle


@dataclass(frozen=True, slots=True)
class MapDeleting(OrchestrationEvent):
    map_id: int


@dataclass(frozen=True, slots=True)
class MapDeleted(OrchestrationEvent):
    map_id: int
    result: OutcomeResult
    error: Exception | None = None


@dataclass(frozen=True, slots=True)
class SavingMap(OrchestrationEvent):
    metadata: Mapping[str, object]


@dataclass(frozen=True, slots=True)
class MapUpdating(OrchestrationEvent):
    metadata: Mapping[str, object]


@dataclass(frozen=True, slots=True)
class MapCreated(OrchestrationEvent):
    map_id: int
    metadata: Mapping[str, object]
    data: object


@dataclass(frozen=True, slots=True)
class MapError(OrchestrationEvent):
    error: Exception


@dataclass(frozen=True, slots=True)
class AttributeUpdated(OrchestrationEvent):
    map_id: int
    attribute: str
    value: str


# backgrounds


@dataclass(frozen=True, slots=True)
class LayerUpdated(OrchestrationEvent):
    layer_id: str
    source: str | None
    thumb_id: int | None


@dataclass(frozen=True, slots=True)
class ThumbnailReset(OrchestrationEvent):
    background_id: str


@dataclass(frozen=True, slots=True)
class ThumbnailError(OrchestrationEvent):
    background_id: str | None
    error: Exception | None


@dataclass(frozen=True, slots=True)
class BackgroundsCleared(OrchestrationEvent):
    pass


@dataclass(frozen=True, slots=True)
class ModalParametersCleared(OrchestrationEvent):
    pass


@dataclass(frozen=True, slots=True)
class BackgroundThumbnailsRemoved(OrchestrationEvent):
    """Orphaned background thumbnails were deleted from the store."""

    resource_ids: tuple[int, ...] = ()
