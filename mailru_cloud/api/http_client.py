"""
Async HTTP client for the Mail.Ru Cloud API.

Owns the cookie jar and the session token, routes requests to the
authentication or cloud host and unwraps the JSON response envelope.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from enum import StrEnum
from typing import Any

import httpx
import structlog

from mailru_cloud.config import MailRuCloudConfig
from mailru_cloud.exceptions import APIError

logger = structlog.get_logger(__name__)

SENSITIVE_KEYS = frozenset(
    {
        "Password",
        "password",
        "token",
        "key",
    }
)


def sanitize_for_log(data: dict[str, Any]) -> dict[str, Any]:
    """
    Remove sensitive fields from a dict before logging.

    Recursively sanitizes nested dictionaries and lists.

    Args:
        data: Dictionary that may contain sensitive values.

    Returns:
        Copy with sensitive values replaced by "***".
    """
    result = {}
    for key, value in data.items():
        if key in SENSITIVE_KEYS:
            result[key] = "***"
        elif isinstance(value, dict):
            result[key] = sanitize_for_log(value)
        elif isinstance(value, list):
            result[key] = [
                sanitize_for_log(item) if isinstance(item, dict) else item for item in value
            ]
        else:
            result[key] = value
    return result


@dataclass(frozen=True, slots=True)
class Session:
    """Immutable session data set after a successful login."""

    email: str
    token: str


class Host(StrEnum):
    """API hosts a request can be routed to."""

    AUTH = "auth"
    CLOUD = "cloud"


class AsyncHttpClient:
    """Async HTTP client for the Mail.Ru Cloud API."""

    def __init__(
        self,
        config: MailRuCloudConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """
        Args:
            config: Client configuration.
            transport: Optional transport for testing (mock transport).
        """
        self._config = config
        self._transport = transport

        self._session: Session | None = None
        self._client: httpx.AsyncClient | None = None
        self._client_lock = asyncio.Lock()

    async def __aenter__(self) -> "AsyncHttpClient":
        await self._ensure_client()
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self._close()

    async def _ensure_client(self) -> httpx.AsyncClient:
        async with self._client_lock:
            if self._client is None:
                # Redirects are part of the login handshake.
                self._client = httpx.AsyncClient(
                    timeout=self._config.timeout,
                    transport=self._transport,
                    follow_redirects=True,
                    headers={"User-Agent": self._config.user_agent},
                )
        return self._client

    async def _close(self) -> None:
        async with self._client_lock:
            if self._client is None:
                logger.debug("Client not open.")
                return
            await self._client.aclose()
            self._client = None

    def set_session(self, email: str, token: str) -> None:
        """
        Set the session after a successful login.

        Note:
            Internal use only. Called by AuthService.login().
        """
        self._session = Session(email=email, token=token)

    def clear_session(self) -> None:
        """Forget the session token and every cookie."""
        self._session = None
        if self._client is not None:
            self._client.cookies.clear()

    @property
    def session(self) -> Session | None:
        return self._session

    @property
    def is_authenticated(self) -> bool:
        """Check if we have a session token."""
        return self._session is not None

    @property
    def has_cookies(self) -> bool:
        """Check if the cookie jar holds at least one cookie."""
        return self._client is not None and len(self._client.cookies.jar) > 0

    def url_for(self, endpoint: str, host: Host = Host.CLOUD) -> str:
        """
        Resolve an endpoint against a host.

        Absolute URLs (shard endpoints, ZIP links) are returned unchanged.
        """
        if endpoint.startswith(("http://", "https://")):
            return endpoint
        base = self._config.auth_url if host == Host.AUTH else self._config.cloud_url
        return base.rstrip("/") + endpoint

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        host: Host = Host.CLOUD,
        data: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        content: Any = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Make a single request and return the raw response.

        Status codes are not checked here; callers classify them.

        Args:
            method: HTTP method (GET, POST, PUT).
            endpoint: Path on the host, or an absolute URL.
            host: Host used for relative endpoints.
            data: Form fields, sent url-encoded.
            params: Query parameters.
            content: Raw body (bytes or async iterator of bytes).
            headers: Extra headers.

        Returns:
            The httpx response, fully read.

        Raises:
            httpx.HTTPError: If the request fails due to network issues.
        """
        client = self._require_client()
        logger.debug(
            "HTTP request",
            method=method,
            endpoint=endpoint,
            host=host.value,
            data=sanitize_for_log(data) if data else None,
        )
        response = await client.request(
            method=method,
            url=self.url_for(endpoint, host),
            data=data,
            params=params,
            content=content,
            headers=headers,
        )
        logger.debug("HTTP response", endpoint=endpoint, status_code=response.status_code)
        return response

    async def request_body(
        self,
        method: str,
        endpoint: str,
        **kwargs: Any,
    ) -> Any:
        """
        Make a request that must succeed and return the unwrapped envelope body.

        Raises:
            APIError: On a non-success status or a malformed body.
        """
        response = await self.request(method, endpoint, **kwargs)
        raise_for_status(response, endpoint)
        return unwrap_body(response, endpoint)

    @asynccontextmanager
    async def stream(
        self,
        method: str,
        endpoint: str,
        *,
        host: Host = Host.CLOUD,
        params: dict[str, Any] | None = None,
    ) -> AsyncIterator[httpx.Response]:
        """
        Open a streamed response (for downloads).

        The body is not read; the response is closed when the context exits.

        Security:
            Only pass URLs obtained from trusted API responses (shard URLs,
            ZIP links). NEVER pass user-supplied URLs directly.
        """
        client = self._require_client()
        logger.debug("HTTP stream", method=method, endpoint=endpoint)
        async with client.stream(
            method=method, url=self.url_for(endpoint, host), params=params
        ) as response:
            yield response

    def _require_client(self) -> httpx.AsyncClient:
        if self._client is None:
            msg = "HTTP client not initialized. Use 'async with' first."
            raise RuntimeError(msg)
        return self._client


def raise_for_status(response: httpx.Response, endpoint: str) -> None:
    """
    Raise APIError for any non-success status.

    Callers map the statuses that carry domain meaning (404, 400, 422)
    before calling this.
    """
    if response.is_success:
        return
    msg = f"Request failed with status {response.status_code}"
    raise APIError(msg, status_code=response.status_code, endpoint=endpoint)


def unwrap_body(response: httpx.Response, endpoint: str) -> Any:
    """
    Extract ``body`` from the ``{email, body, status}`` response envelope.

    Raises:
        APIError: If the response is not JSON or has no body.
    """
    try:
        data = response.json()
    except ValueError as e:
        raise APIError(
            "Invalid JSON response from API",
            status_code=response.status_code,
            endpoint=endpoint,
        ) from e

    if not isinstance(data, dict) or "body" not in data:
        raise APIError(
            "Response envelope has no body",
            status_code=response.status_code,
            endpoint=endpoint,
        )
    return data["body"]
