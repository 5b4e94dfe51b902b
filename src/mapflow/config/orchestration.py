"""Tunables for the orchestration engine."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Final

from .env import env_int

DEFAULT_MAX_DETAILS_LENGTH: Final[int] = 500_000
EMPTY_DETAILS_MARKER: Final[str] = "<p><br></p>"


@dataclass(frozen=True, slots=True)
class NotificationDefaults:
    auto_dismiss: int = 6
    position: str = "tc"


@dataclass(frozen=True, slots=True)
class OrchestrationConfig:
    """Values the engine needs besides the gateway itself.

    ``store_url`` is the public REST root used to build ``data/<id>/raw`` links
    that get embedded in map attributes and background layers.
    """

    store_url: str
    max_details_length: int = DEFAULT_MAX_DETAILS_LENGTH
    empty_details_marker: str = EMPTY_DETAILS_MARKER
    notifications: NotificationDefaults = field(default_factory=NotificationDefaults)


def get_orchestration_config(*, store_url: str) -> OrchestrationConfig:
    return OrchestrationConfig(
        store_url=store_url,
        max_details_length=env_int("MAPFLOW_MAX_DETAILS_LENGTH", DEFAULT_MAX_DETAILS_LENGTH),
    )
