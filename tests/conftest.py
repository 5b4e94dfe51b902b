from __future__ import annotations

import pytest

_ENVIRONMENT = (
    "GEOSTORE_URL",
    "GEOSTORE_USER",
    "GEOSTORE_PASSWORD",
    "MAPFLOW_MAX_DETAILS_LENGTH",
)


@pytest.fixture(autouse=True)
def _isolated_environment(monkeypatch: pytest.MonkeyPatch) -> None:
    # a developer's .env must not leak into tests
    for name in _ENVIRONMENT:
        monkeypatch.delenv(name, raising=False)
