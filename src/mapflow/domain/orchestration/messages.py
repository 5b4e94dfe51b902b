"""Stable message ids for user notices and the mapping from store errors."""

from __future__ import annotations

from typing import Final

from mapflow.domain.model import PersistenceError, ResourceKind

SIZE_EXCEEDED: Final[str] = "maps.feedback.errorSizeExceeded"
FETCHING_DETAILS_FAILED: Final[str] = "maps.feedback.errorFetchingDetailsOfMap"
SAVING_DETAILS_FAILED: Final[str] = "maps.feedback.errorSavingDetailsOfMap"
SAVING_THUMBNAIL_FAILED: Final[str] = "maps.feedback.errorSavingThumbnailOfMap"
DELETING_DETAILS_FAILED: Final[str] = "maps.feedback.errorDeletingDetailsOfMap"
DELETING_THUMBNAIL_FAILED: Final[str] = "maps.feedback.errorDeletingThumbnailOfMap"
DELETING_MAP_FAILED: Final[str] = "maps.feedback.errorDeletingMap"
MAP_DELETED: Final[str] = "maps.feedback.mapDeleted"
ALL_RESOURCES_DELETED: Final[str] = "maps.feedback.allResDeleted"
LOADING_MAP_INFO_FAILED: Final[str] = "maps.feedback.errorLoadingMapInfo"
CREATING_BACKGROUND_THUMBNAIL_FAILED: Final[str] = "backgroundSelector.errorCreatingThumbnail"
DELETING_BACKGROUND_THUMBNAIL_FAILED: Final[str] = "backgroundSelector.errorDeletingThumbnail"

MAP_SAVED_TITLE: Final[str] = "map.savedMapTitle"
MAP_SAVED_MESSAGE: Final[str] = "map.savedMapMessage"
MAP_ERROR_TITLE: Final[str] = "map.mapError.errorTitle"
MAP_ERROR_DEFAULT: Final[str] = "map.mapError.errorDefault"

_MAP_ERROR_BY_STATUS: Final[dict[int, str]] = {
    403: "map.mapError.error403",
    404: "map.mapError.error404",
    409: "map.mapError.error409",
}

_SAVE_FAILED_BY_ATTRIBUTE: Final[dict[str, str]] = {
    "details": SAVING_DETAILS_FAILED,
    "thumbnail": SAVING_THUMBNAIL_FAILED,
}

_DELETE_FAILED_BY_KIND: Final[dict[ResourceKind, str]] = {
    ResourceKind.MAP: DELETING_MAP_FAILED,
    ResourceKind.DETAILS: DELETING_DETAILS_FAILED,
    ResourceKind.THUMBNAIL: DELETING_THUMBNAIL_FAILED,
    ResourceKind.BACKGROUND_THUMBNAIL: DELETING_BACKGROUND_THUMBNAIL_FAILED,
}


def error_message_for(exc: Exception | None) -> str:
    """Map a failed map save to the message id shown to the user."""

    status = exc.status if isinstance(exc, PersistenceError) else None
    if status is None:
        return MAP_ERROR_DEFAULT
    return _MAP_ERROR_BY_STATUS.get(status, MAP_ERROR_DEFAULT)


def save_failed_message(attribute: str) -> str:
    return _SAVE_FAILED_BY_ATTRIBUTE.get(attribute, f"maps.feedback.errorSaving_{attribute}")


def delete_failed_message(kind: ResourceKind) -> str:
    return _DELETE_FAILED_BY_KIND[kind]
