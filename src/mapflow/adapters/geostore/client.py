"""GeoStore REST client."""

from __future__ import annotations

from logging import getLogger
from typing import TYPE_CHECKING

import httpx

from mapflow.adapters.http_resilience import ResilientClient
from mapflow.domain.model import PersistenceError, ResourceNotFoundError

if TYPE_CHECKING:
    from collections.abc import Callable, Mapping
    from types import TracebackType

    from mapflow.adapters.http_resilience import RequestOptions
    from mapflow.config.geostore import GeoStoreConfig
    from mapflow.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

JSON_HEADERS = {"Accept": "application/json"}
TEXT_HEADERS = {"Content-Type": "text/plain; charset=utf-8"}


class GeoStoreAPIError(PersistenceError):
    """Raised when GeoStore answers with an error status or cannot be reached."""


class GeoStoreClient:
    """Low-level HTTP access to one GeoStore instance.

    Use as an async context manager; one underlying ``ResilientClient`` is
    shared by every request made inside the block, so rate limiting and the
    response cache apply across concurrent calls.
    """

    def __init__(
        self,
        *,
        config: GeoStoreConfig,
        client_factory: Callable[[ResilienceConfig], ResilientClient] | None = None,
    ) -> None:
        self._config = config
        self._client_factory = client_factory or ResilientClient
        self._http: ResilientClient | None = None
        self._auth = (
            httpx.BasicAuth(config.username or "", config.password or "")
            if config.has_credentials
            else None
        )

    async def __aenter__(self) -> GeoStoreClient:
        self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def open(self) -> None:
        if self._http is None:
            self._http = self._client_factory(self._config.resilience)

    async def aclose(self) -> None:
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def get_json(self, path: str, *, options: Mapping[str, object] | None = None) -> object:
        response = await self._call("GET", path, options=options, headers=JSON_HEADERS)
        try:
            return response.json()
        except ValueError as exc:
            raise GeoStoreAPIError(f"GeoStore returned non-JSON payload for {path}") from exc

    async def get_text(self, path: str, *, options: Mapping[str, object] | None = None) -> str:
        response = await self._call("GET", path, options=options)
        return response.text

    async def post_json(self, path: str, body: object) -> str:
        response = await self._call("POST", path, json=body)
        return response.text

    async def put_json(self, path: str, body: object) -> None:
        await self._call("PUT", path, json=body)

    async def put_text(self, path: str, content: str) -> None:
        await self._call("PUT", path, content=content.encode("utf-8"), headers=TEXT_HEADERS)

    async def delete(self, path: str, *, options: Mapping[str, object] | None = None) -> None:
        await self._call("DELETE", path, options=options)

    async def _call(
        self,
        method: str,
        path: str,
        *,
        options: Mapping[str, object] | None = None,
        headers: Mapping[str, str] | None = None,
        json: object = None,
        content: bytes | None = None,
    ) -> httpx.Response:
        client = self._require_client()
        url, request_options = self._request_options(path, options, headers)
        if json is not None:
            request_options["json"] = json
        if content is not None:
            request_options["content"] = content

        log.debug("GeoStore %s %s", method, url)
        try:
            response = await client.request(method, url, **request_options)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            message = f"GeoStore {method} {path} failed with HTTP {status}"
            if status == 404:
                raise ResourceNotFoundError(message) from exc
            raise GeoStoreAPIError(message, status=status) from exc
        except httpx.HTTPError as exc:
            raise GeoStoreAPIError(f"GeoStore {method} {path} failed: {exc}") from exc
        return response

    def _request_options(
        self,
        path: str,
        options: Mapping[str, object] | None,
        headers: Mapping[str, str] | None,
    ) -> tuple[str, RequestOptions]:
        request_options: RequestOptions = {}
        merged_headers = dict(headers or {})
        url = path
        if options:
            params = options.get("params")
            if isinstance(params, dict):
                request_options["params"] = {str(k): str(v) for k, v in params.items()}
            extra_headers = options.get("headers")
            if isinstance(extra_headers, dict):
                merged_headers.update({str(k): str(v) for k, v in extra_headers.items()})
            base_url = options.get("base_url")
            if isinstance(base_url, str) and base_url:
                url = str(httpx.URL(base_url.rstrip("/") + "/").join(path))
        if merged_headers:
            request_options["headers"] = merged_headers
        if self._auth is not None:
            request_options["auth"] = self._auth
        return url, request_options

    def _require_client(self) -> ResilientClient:
        if self._http is None:
            raise GeoStoreAPIError("GeoStore client used outside of its context")
        return self._http
