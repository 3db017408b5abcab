"""Async HTTP client for the cloud API."""

import logging
from typing import Any, Protocol

import httpx
from pydantic import ValidationError

from cloud_auth import __version__
from cloud_auth.api.models import APIErrorDetail, APIFailure, APIResult, APISuccess
from cloud_auth.config import Settings, get_settings
from cloud_auth.exceptions import TransportError

logger = logging.getLogger(__name__)


class TokenSource(Protocol):
    """Anything that can hand out the current auth token."""

    def get(self) -> str | None: ...


class CloudClient:
    """Async HTTP client for the cloud API.

    The underlying ``httpx.AsyncClient`` is created on first use and lives
    until ``aclose()``. When a token source is given, its current token is
    sent as a bearer token on every request.
    """

    def __init__(
        self,
        settings: Settings | None = None,
        token_source: TokenSource | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.settings = settings or get_settings()
        self.token_source = token_source
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    def base_url(self) -> str:
        return self.settings.api_url

    async def __aenter__(self) -> "CloudClient":
        self._ensure_client()
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()

    def _ensure_client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self.base_url,
                headers={
                    "Accept": "application/json",
                    "User-Agent": f"cloud-auth/{__version__}",
                },
                timeout=self.settings.timeout,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _auth_headers(self) -> dict[str, str]:
        if self.token_source is None:
            return {}
        token = self.token_source.get()
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    def _handle_response(self, response: httpx.Response) -> APIResult:
        """Classify a response as success or structured failure."""
        try:
            body = response.json()
        except ValueError:
            body = None

        if response.status_code < 400:
            data = body.get("data") if isinstance(body, dict) else body
            return APISuccess(status_code=response.status_code, data=data)

        message = f"API request failed ({response.status_code})"
        details: list[APIErrorDetail] = []
        error = body.get("error") if isinstance(body, dict) else None
        if isinstance(error, dict):
            message = error.get("message") or message
            raw_details = error.get("details")
            if isinstance(raw_details, list):
                try:
                    details = [APIErrorDetail.model_validate(d) for d in raw_details]
                except ValidationError:
                    logger.warning("Ignoring malformed error details in API response")
                    details = []

        # Log status only; response bodies may echo credentials back
        logger.error(f"API error: {response.request.method} {response.request.url.path} -> {response.status_code}")
        return APIFailure(status_code=response.status_code, message=message, details=details)

    async def request(self, method: str, path: str, **kwargs: Any) -> APIResult:
        """Send a request and return the classified result.

        Raises:
            TransportError: If the backend could not be reached.
        """
        client = self._ensure_client()
        headers = {**self._auth_headers(), **kwargs.pop("headers", {})}
        try:
            response = await client.request(method, path, headers=headers, **kwargs)
        except httpx.TransportError as e:
            raise TransportError(f"Could not reach {self.base_url}{path}: {e}") from e
        return self._handle_response(response)

    async def post(self, path: str, json: dict[str, Any] | None = None) -> APIResult:
        """Convenience method for POST requests with a JSON body."""
        return await self.request("POST", path, json=json or {})

    async def get(self, path: str, **kwargs: Any) -> APIResult:
        """Convenience method for GET requests."""
        return await self.request("GET", path, **kwargs)
