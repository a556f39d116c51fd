"""Shard resolution: which server handles which kind of operation."""

import structlog

from mailru_cloud.api.endpoints.cloud import get_dispatcher
from mailru_cloud.api.http_client import AsyncHttpClient
from mailru_cloud.models.shards import ShardMap
from mailru_cloud.services.auth_service import AuthService

logger = structlog.get_logger(__name__)


class ShardService:
    """
    Fetches the shard map from the dispatcher.

    The map is not cached: every call is one dispatcher request. Callers that
    need it twice within an operation reuse the returned value.
    """

    def __init__(self, http: AsyncHttpClient, auth: AuthService) -> None:
        self._http = http
        self._auth = auth

    async def resolve_shards(self, *, authorized: bool = False) -> ShardMap:
        """
        Fetch the current shard map.

        Args:
            authorized: Skip the authorization probe when the caller already
                ran it for the current operation.

        Raises:
            NotAuthorizedError: If the session is missing or rejected.
            APIError: If the dispatcher response is malformed.
        """
        if not authorized:
            await self._auth.ensure_authorized()
        shards = await get_dispatcher(self._http, self._auth.require_session())
        logger.debug("Shards resolved", classes=sorted(c.value for c in shards.shards))
        return shards
