"""Async HTTP client for the storefront theme-asset API."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, TypeVar
from urllib.parse import quote

import httpx
from pydantic import BaseModel, ValidationError

from themesync.api.schemas import (
    Asset,
    AssetEnvelope,
    AssetListEnvelope,
    AssetSummary,
    AssetUpload,
    Theme,
    ThemeListEnvelope,
)
from themesync.config import ConnectionSettings
from themesync.errors import (
    ApiError,
    AuthenticationError,
    ConfigError,
    InvalidRequestError,
    MissingDataError,
    TransportError,
)

logger = logging.getLogger(__name__)

_INVALID_REQUEST_STATUSES = frozenset({400, 404, 406, 422})
_AUTH_STATUSES = frozenset({401, 403})

# "%" stays unescaped so encoded keys are not encoded twice.
_KEY_QUERY_SAFE = "/%:@,;$!*'()"

EnvelopeT = TypeVar("EnvelopeT", bound=BaseModel)


def _error_detail(response: httpx.Response) -> Any:
    """Pull the structured error body out of a failed response."""

    try:
        body = response.json()
    except ValueError:
        return response.text or None
    if isinstance(body, dict) and "errors" in body:
        return body["errors"]
    return body


def _raise_for_status(response: httpx.Response) -> None:
    status = response.status_code
    if status < 400:
        return
    request = response.request
    message = f"HTTP {status} for {request.method} {request.url.path}"
    detail = _error_detail(response)
    if status in _INVALID_REQUEST_STATUSES:
        raise InvalidRequestError(message, status_code=status, detail=detail)
    if status in _AUTH_STATUSES:
        raise AuthenticationError(message, status_code=status, detail=detail)
    raise ApiError(message, status_code=status, detail=detail)


@dataclass(slots=True)
class AssetResource:
    """Asset collection of one theme, or of the active theme when ``theme_id`` is None."""

    client: ThemeClient
    theme_id: int | None = None

    @property
    def path(self) -> str:
        if self.theme_id is None:
            return "/admin/assets.json"
        return f"/admin/themes/{self.theme_id}/assets.json"

    def _keyed(self, key: str) -> str:
        # Keys arrive URI-encoded; only the query delimiters still need escaping.
        return f"{self.path}?asset[key]={quote(key, safe=_KEY_QUERY_SAFE)}"

    async def list(self) -> list[AssetSummary]:
        envelope = await self.client.request("GET", self.path, AssetListEnvelope)
        if envelope.assets is None:
            raise MissingDataError("Failed to get theme assets list")
        return envelope.assets

    async def retrieve(self, key: str) -> Asset:
        envelope = await self.client.request("GET", self._keyed(key), AssetEnvelope)
        if envelope.asset is None:
            raise MissingDataError("Failed to get asset data")
        return envelope.asset

    async def update(self, upload: AssetUpload) -> Asset | None:
        envelope = await self.client.request(
            "PUT", self.path, AssetEnvelope, json=upload.to_request()
        )
        return envelope.asset

    async def destroy(self, key: str) -> None:
        await self.client.request("DELETE", self._keyed(key), None)


class ThemeClient:
    """Client for the theme and asset endpoints of the storefront admin API."""

    def __init__(
        self,
        settings: ConnectionSettings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not settings.url:
            raise ConfigError(
                "Store url not configured. Set connection.url or THEMESYNC_URL."
            )
        if not settings.api_key or not settings.password:
            raise ConfigError(
                "API credentials not configured. Set THEMESYNC_API_KEY and THEMESYNC_PASSWORD."
            )
        self.settings = settings
        self.base_url = f"{settings.scheme}://{settings.url}:{settings.port}"
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            auth=(settings.api_key, settings.password),
            timeout=httpx.Timeout(settings.timeout),
            headers={"Accept": "application/json"},
            follow_redirects=True,
            transport=transport,
        )

    async def __aenter__(self) -> ThemeClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    def assets(self, theme_id: int | None = None) -> AssetResource:
        """Return the theme-scoped asset collection, or the legacy one when no id is given."""

        return AssetResource(self, theme_id)

    async def list_themes(self) -> list[Theme]:
        envelope = await self.request("GET", "/admin/themes.json", ThemeListEnvelope)
        if envelope.themes is None:
            raise MissingDataError("Failed to get themes list")
        return envelope.themes

    async def request(
        self,
        method: str,
        url: str,
        envelope: type[EnvelopeT] | None,
        *,
        json: Any = None,
    ) -> EnvelopeT | None:
        """Send one request and validate the body against ``envelope``.

        There is no retry: a single failure is terminal for the caller.
        """

        logger.debug("%s %s", method, url)
        try:
            response = await self._client.request(method, url, json=json)
        except httpx.TimeoutException as exc:
            raise TransportError(f"Timeout calling {method} {url}: {exc}") from exc
        except httpx.HTTPError as exc:
            raise TransportError(f"HTTP error calling {method} {url}: {exc}") from exc

        _raise_for_status(response)
        if envelope is None:
            return None

        try:
            payload = response.json() if response.content else {}
        except ValueError as exc:
            raise MissingDataError(f"Response to {method} {url} is not JSON") from exc
        if not isinstance(payload, dict):
            raise MissingDataError(f"Response to {method} {url} is not an object")
        try:
            return envelope.model_validate(payload)
        except ValidationError as exc:
            raise MissingDataError(f"Malformed response to {method} {url}: {exc}") from exc
