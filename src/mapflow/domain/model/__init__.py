"""Domain model for map resources and their linked store resources."""

from __future__ import annotations

from .enums import (
    AttributeType,
    LifecycleAction,
    OutcomeResult,
    ResourceCategory,
    ResourceKind,
)
from .errors import InvalidResourceReferenceError, PersistenceError, ResourceNotFoundError
from .outcomes import (
    AttributeChangeOutcome,
    BackgroundThumbnailOutcome,
    BackgroundThumbnailsOutcome,
    DeleteEntityOutcome,
    OperationOutcome,
    SaveEntityOutcome,
)
from .references import (
    NO_DATA,
    RAW_DATA_URI_TAIL,
    ResourceRef,
    build_resource_uri,
    decode_attribute_uri,
    encode_attribute_uri,
    extract_resource_id,
    is_absent,
)
from .resources import (
    BackgroundThumbnail,
    LinkedResource,
    MapResource,
    NewResource,
    PendingChange,
    Permissions,
    ResourceAttribute,
    ResourcePage,
    ResourceSummary,
    ResourceUpdate,
    SecurityRule,
)

__all__ = [
    "NO_DATA",
    "RAW_DATA_URI_TAIL",
    "AttributeChangeOutcome",
    "AttributeType",
    "BackgroundThumbnail",
    "BackgroundThumbnailOutcome",
    "BackgroundThumbnailsOutcome",
    "DeleteEntityOutcome",
    "InvalidResourceReferenceError",
    "LifecycleAction",
    "LinkedResource",
    "MapResource",
    "NewResource",
    "OperationOutcome",
    "OutcomeResult",
    "PendingChange",
    "Permissions",
    "PersistenceError",
    "ResourceAttribute",
    "ResourceCategory",
    "ResourceKind",
    "ResourceNotFoundError",
    "ResourcePage",
    "ResourceRef",
    "ResourceSummary",
    "ResourceUpdate",
    "SaveEntityOutcome",
    "SecurityRule",
    "build_resource_uri",
    "decode_attribute_uri",
    "encode_attribute_uri",
    "extract_resource_id",
    "is_absent",
]
