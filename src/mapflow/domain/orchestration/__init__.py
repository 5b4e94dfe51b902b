"""Intent handling for map resources: intents in, ordered events out."""

from __future__ import annotations

from .dispatcher import IntentDispatcher, Listener
from .engine import Effect, OrchestrationEngine, sanitize_search_text
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
    IntentFailed,
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
    AnyIntent,
    BackgroundThumbnailsCreated,
    BackgroundThumbnailsUpdated,
    CloseDetailsPanel,
    Concurrency,
    DeleteMap,
    EditMap,
    FetchMapsByCategory,
    Intent,
    LoadMaps,
    MapInfoLoaded,
    OpenDetailsPanel,
    ResetUpdating,
    SaveDetails,
    SaveMapResource,
    SaveResourceDetails,
)

__all__ = [
    "NO_DETAILS_AVAILABLE",
    "AnyIntent",
    "AttributeUpdated",
    "BackgroundThumbnailsCreated",
    "BackgroundThumbnailsRemoved",
    "BackgroundThumbnailsUpdated",
    "BackgroundsCleared",
    "CloseDetailsPanel",
    "Concurrency",
    "ControlToggled",
    "CurrentMapReset",
    "DeleteMap",
    "DetailsChanged",
    "DetailsEditabilityToggled",
    "DetailsLoaded",
    "DetailsSaving",
    "DetailsSheetToggled",
    "DetailsUpdated",
    "EditMap",
    "Effect",
    "FeatureGridClosed",
    "FetchMapsByCategory",
    "Intent",
    "IntentDispatcher",
    "IntentFailed",
    "LayerUpdated",
    "Listener",
    "LoadMaps",
    "MapCreated",
    "MapDeleted",
    "MapDeleting",
    "MapError",
    "MapInfoLoaded",
    "MapUpdating",
    "MapsLoadError",
    "MapsLoaded",
    "MapsLoading",
    "MetadataEditDisplayed",
    "ModalParametersCleared",
    "NoticeLevel",
    "Notification",
    "OpenDetailsPanel",
    "OrchestrationEngine",
    "OrchestrationEvent",
    "ResetUpdating",
    "SaveDetails",
    "SaveMapResource",
    "SaveResourceDetails",
    "SavingMap",
    "ThumbnailError",
    "ThumbnailReset",
    "sanitize_search_text",
]
