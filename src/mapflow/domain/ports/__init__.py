"""Domain port definitions for adapters."""

from __future__ import annotations

from .persistence import PersistenceGateway
from .projections import (
    DETAILS_ATTRIBUTE,
    THUMBNAIL_ATTRIBUTE,
    BackgroundLayer,
    CurrentMap,
    MapRecord,
    MapsSnapshot,
    StateProjection,
    StaticProjection,
)

__all__ = [
    "DETAILS_ATTRIBUTE",
    "THUMBNAIL_ATTRIBUTE",
    "BackgroundLayer",
    "CurrentMap",
    "MapRecord",
    "MapsSnapshot",
    "PersistenceGateway",
    "StateProjection",
    "StaticProjection",
]
