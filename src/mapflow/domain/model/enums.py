"""Domain enums (pure, dependency-light)."""

from __future__ import annotations

from enum import StrEnum


class ResourceKind(StrEnum):
    """Which part of a map an operation touched; used to scope notices."""

    MAP = "map"
    DETAILS = "details"
    THUMBNAIL = "thumbnail"
    BACKGROUND_THUMBNAIL = "background_thumbnail"


class ResourceCategory(StrEnum):
    MAP = "MAP"
    DETAILS = "DETAILS"
    THUMBNAIL = "THUMBNAIL"
    BACKGROUND_THUMBNAIL = "BACKGROUND_THUMBNAIL"


class AttributeType(StrEnum):
    STRING = "STRING"
    NUMBER = "NUMBER"
    DATE = "DATE"


class LifecycleAction(StrEnum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"
    NOOP = "noop"


class OutcomeResult(StrEnum):
    SUCCESS = "success"
    ERROR = "error"
