"""Concurrent store calls for a map and its linked resources."""

from __future__ import annotations

from .barrier import settle, settle_all
from .coordinator import (
    LinkedResourceCoordinator,
    plan_changes,
    removed_resources,
    resource_kind_for,
)

__all__ = [
    "LinkedResourceCoordinator",
    "plan_changes",
    "removed_resources",
    "resource_kind_for",
    "settle",
    "settle_all",
]
