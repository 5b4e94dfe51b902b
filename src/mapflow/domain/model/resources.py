"""Store resources and the changes the engine asks the store to make."""

# switch off type warnings because of default_factory=dict
# pyright: reportUnknownVariableType=false

from __future__ import annotations

from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING

from .enums import AttributeType, ResourceCategory
from .references import RAW_DATA_URI_TAIL, ResourceRef

if TYPE_CHECKING:
    from collections.abc import Mapping


@dataclass(frozen=True, slots=True, kw_only=True)
class SecurityRule:
    """One permission entry; exactly one of ``user`` or ``group`` is set."""

    user: str | None = None
    group: str | None = None
    can_read: bool = True
    can_write: bool = False

    def __post_init__(self) -> None:
        if (self.user is None) == (self.group is None):
            raise ValueError("SecurityRule needs exactly one of user or group")


type Permissions = tuple[SecurityRule, ...]


@dataclass(frozen=True, slots=True, kw_only=True)
class LinkedResource:
    """Desired content of a resource hanging off a map attribute."""

    value: str
    category: ResourceCategory
    metadata: Mapping[str, object] = field(default_factory=dict)
    # None keeps whatever permissions the stored resource already has
    permissions: Permissions | None = None
    attribute_type: AttributeType = AttributeType.STRING
    attribute_options: Mapping[str, object] = field(default_factory=dict)
    resource_options: Mapping[str, object] = field(default_factory=dict)
    tail: str = RAW_DATA_URI_TAIL


@dataclass(frozen=True, slots=True, kw_only=True)
class MapResource:
    """A map document plus the linked resources to reconcile with it.

    Only attributes present in ``linked_resources`` are touched on save; an
    explicit ``None`` value asks for the backing resource to be removed.
    """

    id: int | None = None
    category: ResourceCategory = ResourceCategory.MAP
    metadata: Mapping[str, object] = field(default_factory=dict)
    data: object = None
    permissions: Permissions | None = None
    linked_resources: Mapping[str, LinkedResource | None] = field(default_factory=dict)

    def with_id(self, map_id: int) -> MapResource:
        return replace(self, id=map_id)


@dataclass(frozen=True, slots=True, kw_only=True)
class NewResource:
    metadata: Mapping[str, object]
    data: object
    category: ResourceCategory
    permissions: Permissions | None = None
    attributes: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True, slots=True, kw_only=True)
class ResourceUpdate:
    """Update of an existing resource; ``None`` fields are left untouched."""

    resource_id: int
    value: object = None
    metadata: Mapping[str, object] | None = None
    permissions: Permissions | None = None
    attribute: str | None = None
    options: Mapping[str, object] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class ResourceAttribute:
    name: str
    value: str | None
    type: AttributeType = AttributeType.STRING


@dataclass(frozen=True, slots=True, kw_only=True)
class ResourceSummary:
    id: int
    name: str
    description: str | None = None
    owner: str | None = None
    details: str | None = None
    thumbnail: str | None = None
    can_edit: bool = False
    can_delete: bool = False
    can_copy: bool = False


@dataclass(frozen=True, slots=True, kw_only=True)
class ResourcePage:
    results: tuple[ResourceSummary, ...] = ()
    total_count: int = 0
    success: bool = True


@dataclass(frozen=True, slots=True, kw_only=True)
class PendingChange:
    """Desired state for one attribute next to what the attribute points at now."""

    attribute: str
    desired: LinkedResource | None
    current: ResourceRef = field(default_factory=ResourceRef)


@dataclass(frozen=True, slots=True, kw_only=True)
class BackgroundThumbnail:
    """A background layer as edited in the thumbnail dialog."""

    background_id: str
    new_name: str | None = None
    new_data: str | None = None
    existing_thumb_id: int | None = None
    source: str | None = None

    @property
    def has_new_thumbnail(self) -> bool:
        return bool(self.new_name) and bool(self.new_data)

    @property
    def clears_thumbnail(self) -> bool:
        return not self.has_new_thumbnail and self.existing_thumb_id is not None
