"""GeoStore connection settings."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_var, require_env_vars
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

GEOSTORE_TIMEOUT_SECONDS = 20.0


@dataclass(frozen=True, slots=True)
class GeoStoreConfig:
    """Where the persistence service lives and how to talk to it."""

    base_url: str
    resilience: ResilienceConfig
    username: str | None = None
    password: str | None = None

    @property
    def has_credentials(self) -> bool:
        return self.username is not None and self.password is not None


def normalize_base_url(url: str) -> str:
    """GeoStore paths are joined relative to the REST root, which must end with a slash."""

    stripped = url.strip()
    return stripped if stripped.endswith("/") else f"{stripped}/"


def get_geostore_config(*, resilience: ResilienceConfig | None = None) -> GeoStoreConfig:
    values = require_env_vars(("GEOSTORE_URL",))
    base_url = normalize_base_url(values["GEOSTORE_URL"])
    return GeoStoreConfig(
        base_url=base_url,
        username=optional_env_var("GEOSTORE_USER"),
        password=optional_env_var("GEOSTORE_PASSWORD"),
        resilience=resilience
        or ResilienceConfig(
            name="geostore",
            base_url=base_url,
            timeout_seconds=GEOSTORE_TIMEOUT_SECONDS,
            retry=RetryPolicy(total=3),
            ratelimit=RateLimit(max_calls=10, per_seconds=1.0),
            cache=CacheConfig(backend="memory"),
        ),
    )
