"""
Authentication service for Mail.Ru Cloud.

Handles the login handshake, session checks and account tariffs.
"""

from dataclasses import replace

import httpx
import structlog

from mailru_cloud.api.endpoints.auth import (
    ensure_sdc_cookies,
    get_csrf_token,
    get_disk_usage,
    get_rates,
    post_credentials,
)
from mailru_cloud.api.http_client import AsyncHttpClient, Session
from mailru_cloud.config import MailRuCloudConfig
from mailru_cloud.exceptions import APIError, NotAuthorizedError
from mailru_cloud.models.account import FREE_RATE_ID, AuthState, Credentials, DiskUsage, Rate

logger = structlog.get_logger(__name__)


class AuthService:
    """
    Owns the session lifecycle of one account.

    The token and cookies live in AsyncHttpClient; this service keeps the
    credentials, the lifecycle state and the activated tariffs.

    States go UNAUTHENTICATED -> AUTHENTICATING -> AUTHENTICATED. A rejected
    login falls back to UNAUTHENTICATED; later failed calls never change the
    state.

    Concurrency:
    - No internal locking; one high-level operation at a time per instance.
    """

    def __init__(
        self,
        http_client: AsyncHttpClient,
        config: MailRuCloudConfig,
        credentials: Credentials | None = None,
    ) -> None:
        """
        Args:
            http_client: HTTP client holding the session and cookies.
            config: Client configuration.
            credentials: Account credentials, may be supplied later to login().
        """
        self._http = http_client
        self._config = config
        self._credentials = credentials

        self._state = AuthState.UNAUTHENTICATED
        self._activated_tariffs: tuple[Rate, ...] = ()

    @property
    def state(self) -> AuthState:
        return self._state

    @property
    def credentials(self) -> Credentials | None:
        return self._credentials

    @property
    def activated_tariffs(self) -> tuple[Rate, ...]:
        """Active tariffs fetched by the last successful login."""
        return self._activated_tariffs

    @property
    def has_2gb_upload_limit(self) -> bool:
        """True unless an active tariff other than the free one is present."""
        return not any(rate.id != FREE_RATE_ID for rate in self._activated_tariffs)

    @property
    def upload_size_limit(self) -> int:
        """Upload ceiling in bytes for the account's tier."""
        if self.has_2gb_upload_limit:
            return self._config.restricted_upload_limit
        return self._config.extended_upload_limit

    async def login(self, email: str | None = None, password: str | None = None) -> bool:
        """
        Log in with the stored or the given credentials.

        Args:
            email: Replaces the stored email when given.
            password: Replaces the stored password when given.

        Returns:
            True on success, False if the authentication host rejected the
            credentials.

        Raises:
            NotAuthorizedError: If the email or the password is empty.
            APIError: If the token or tariff responses are malformed.
            httpx.HTTPError: On network failures.
        """
        credentials = self._credentials or Credentials(email="", password="")
        if email is not None:
            credentials = replace(credentials, email=email)
        if password is not None:
            credentials = replace(credentials, password=password)
        self._credentials = credentials

        await self.ensure_authorized(credentials_only=True)

        logger.info("Starting authentication")
        self._state = AuthState.AUTHENTICATING
        self._http.clear_session()
        self._activated_tariffs = ()

        try:
            if not await post_credentials(
                self._http, credentials.email, credentials.password, self._config.domain
            ):
                logger.warning("Credentials rejected")
                self._state = AuthState.UNAUTHENTICATED
                return False

            if not await ensure_sdc_cookies(self._http, self._config.cloud_url.rstrip("/") + "/home"):
                logger.warning("SDC cookies not granted")
                self._state = AuthState.UNAUTHENTICATED
                return False

            token = await get_csrf_token(self._http)
            self._http.set_session(credentials.email, token)

            rates = await get_rates(self._http, self._require_session_value())
            self._activated_tariffs = tuple(rate for rate in rates if rate.is_active)
        except Exception:
            self._clear_state()
            raise

        self._state = AuthState.AUTHENTICATED
        logger.info(
            "Authentication successful",
            tariffs=[rate.id for rate in self._activated_tariffs],
            has_2gb_upload_limit=self.has_2gb_upload_limit,
        )
        return True

    async def ensure_authorized(self, *, credentials_only: bool = False) -> None:
        """
        Check the session.

        Args:
            credentials_only: Only check that the email and password are set.
                Otherwise the cookies and token are required too and one
                disk-usage probe verifies that the server accepts the session.

        Raises:
            NotAuthorizedError: With ``field`` naming what is missing
                (email, password, cookies, token) or ``session`` if the
                server rejected the probe.
        """
        if credentials_only:
            self._require_credentials()
            return

        session = self.require_session()
        await get_disk_usage(self._http, session)

    def require_session(self) -> Session:
        """
        Local part of the authorization check, without any network call.

        Returns:
            The current session.

        Raises:
            NotAuthorizedError: If the credentials, cookies or token are missing.
        """
        self._require_credentials()
        if not self._http.has_cookies:
            msg = "Missing cookies"
            raise NotAuthorizedError(msg, field="cookies")
        return self._require_session_value()

    async def check_authorization(self) -> bool:
        """Non-raising variant of ensure_authorized()."""
        try:
            await self.ensure_authorized()
        except (NotAuthorizedError, APIError, httpx.HTTPError) as e:
            logger.debug("Authorization check failed", error_type=type(e).__name__)
            return False
        return True

    async def get_disk_usage(self) -> DiskUsage:
        """
        Get the account disk usage.

        Raises:
            NotAuthorizedError: If the session is missing or rejected.
        """
        return await get_disk_usage(self._http, self.require_session())

    def _require_credentials(self) -> Credentials:
        credentials = self._credentials
        if credentials is None or not credentials.email:
            msg = "Email is not defined"
            raise NotAuthorizedError(msg, field="email")
        if not credentials.password:
            msg = "Password is not defined"
            raise NotAuthorizedError(msg, field="password")
        return credentials

    def _require_session_value(self) -> Session:
        session = self._http.session
        if session is None or not session.token:
            msg = "Missing authorization token"
            raise NotAuthorizedError(msg, field="token")
        return session

    def _clear_state(self) -> None:
        """Forget the token, cookies and tariffs. Credentials are kept."""
        self._http.clear_session()
        self._activated_tariffs = ()
        self._state = AuthState.UNAUTHENTICATED
