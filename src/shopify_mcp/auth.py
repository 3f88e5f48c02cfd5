"""Authentication management with proactive token refresh."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from datetime import UTC, datetime, timedelta

import httpx

from .config import Config
from .consts import (
    DEFAULT_TOKEN_EXPIRY_SECONDS,
    TOKEN_REFRESH_BUFFER_MINUTES,
    TOKEN_REFRESH_RETRY_SECONDS,
)
from .exceptions import AuthenticationError
from .models import ClientCredentials, StaticToken, TokenState
from .protocols import TokenProvider

logger = logging.getLogger("shopify-mcp.auth")

TokenCallback = Callable[[str], None]
Sleep = Callable[[float], Awaitable[None]]


class StaticTokenProvider:
    """Passthrough provider for a pre-issued Admin API token."""

    def __init__(self, credential: StaticToken):
        self._access_token = credential.access_token.get_secret_value()

    async def initialize(self) -> str:
        logger.info("Using static Admin API access token")
        return self._access_token

    def get_access_token(self) -> str:
        return self._access_token

    def on_refresh(self, callback: TokenCallback) -> None:
        # static tokens never change
        pass

    def destroy(self) -> None:
        pass


class ClientCredentialsTokenProvider:
    """OAuth client-credentials token manager.

    Responsibilities:
    - Exchange the app's client id/secret for a short-lived access token
    - Refresh the token in the background 5 minutes before it expires
    - Hand every new token to registered hooks (the RPC client swaps its header)

    A failed background refresh is logged and retried after 60 seconds; the
    previous token stays in use until a refresh succeeds.
    """

    def __init__(
        self,
        config: Config,
        http_client: httpx.AsyncClient,
        *,
        credential: ClientCredentials | None = None,
        sleep: Sleep = asyncio.sleep,
    ):
        """Initialize ClientCredentialsTokenProvider.

        Args:
            config: Config instance with the token endpoint.
            http_client: HTTP client (for token requests only).
            credential: Client id/secret pair. If None, taken from config.
            sleep: Awaitable delay used by the refresh loop.
        """
        self.config = config
        self.http_client = http_client
        self.credential = credential or config.credential()
        self._sleep = sleep
        self._state: TokenState | None = None
        self._refresh_task: asyncio.Task | None = None
        self._callbacks: list[TokenCallback] = []

    @property
    def token_state(self) -> TokenState | None:
        return self._state

    @property
    def refresh_task(self) -> asyncio.Task | None:
        return self._refresh_task

    async def initialize(self) -> str:
        """Fetch the first token and start the background refresh.

        Returns:
            The issued access token.

        Raises:
            AuthenticationError: If the exchange is rejected or unreachable.
        """
        await self._fetch_token()
        self._schedule_refresh()
        return self._state.access_token

    def get_access_token(self) -> str:
        if self._state is None:
            raise RuntimeError(
                "Token provider not initialized - call initialize() first"
            )
        return self._state.access_token

    def on_refresh(self, callback: TokenCallback) -> None:
        self._callbacks.append(callback)

    def destroy(self) -> None:
        """Cancel the pending refresh for a clean shutdown."""
        if self._refresh_task is not None:
            self._refresh_task.cancel()
            self._refresh_task = None
            logger.debug("Token refresh cancelled")

    def seconds_until_refresh(self, now: datetime | None = None) -> float:
        """Delay until the next proactive refresh, clamped at zero."""
        if self._state is None:
            return 0.0
        now = now or datetime.now(UTC)
        refresh_at = self._state.expires_at - timedelta(
            minutes=TOKEN_REFRESH_BUFFER_MINUTES
        )
        return max((refresh_at - now).total_seconds(), 0.0)

    def _schedule_refresh(self) -> None:
        if self._refresh_task is not None:
            self._refresh_task.cancel()
        self._refresh_task = asyncio.create_task(
            self._refresh_loop(), name="shopify-token-refresh"
        )

    async def _refresh_loop(self) -> None:
        delay = self.seconds_until_refresh()
        while True:
            logger.debug(f"Next token refresh in {delay:.0f}s")
            await self._sleep(delay)
            try:
                await self._fetch_token()
            except Exception as e:
                logger.error(
                    f"Failed to refresh Shopify access token, retrying in "
                    f"{TOKEN_REFRESH_RETRY_SECONDS}s: {e}"
                )
                delay = TOKEN_REFRESH_RETRY_SECONDS
            else:
                delay = self.seconds_until_refresh()

    async def _fetch_token(self) -> None:
        """Exchange client credentials for a new access token."""
        logger.debug(f"Requesting access token from {self.config.token_url}")

        form = {
            "grant_type": "client_credentials",
            "client_id": self.credential.client_id,
            "client_secret": self.credential.client_secret.get_secret_value(),
        }

        try:
            response = await self.http_client.post(
                self.config.token_url,
                data=form,
                headers={"Accept": "application/json"},
            )
        except httpx.RequestError as e:
            raise AuthenticationError(
                f"Shopify token exchange failed: {e}",
                suggestions=["Check the store domain and network connectivity"],
                context={"token_url": self.config.token_url},
            ) from e

        if not response.is_success:
            raise AuthenticationError(
                f"Shopify token exchange failed ({response.status_code}): {response.text}",
                status_code=response.status_code,
                body=response.text,
                suggestions=[
                    "Verify SHOPIFY_CLIENT_ID and SHOPIFY_CLIENT_SECRET",
                    "Check that the app is installed on the store",
                ],
                context={"token_url": self.config.token_url},
            )

        try:
            token_data = response.json()
            access_token = token_data["access_token"]
        except (KeyError, TypeError, ValueError) as e:
            logger.error("Missing access_token in token response")
            raise AuthenticationError(
                "Token endpoint returned a response without access_token",
                status_code=response.status_code,
                errors=[f"Unexpected token response: {e}"],
                context={"token_url": self.config.token_url},
            ) from e

        expires_in = token_data.get("expires_in") or DEFAULT_TOKEN_EXPIRY_SECONDS
        self._state = TokenState(
            access_token=access_token,
            expires_at=datetime.now(UTC) + timedelta(seconds=expires_in),
        )
        logger.info(f"Access token issued, expires in {expires_in}s")

        for callback in self._callbacks:
            callback(access_token)


def create_token_provider(
    config: Config, http_client: httpx.AsyncClient
) -> TokenProvider:
    """Select the token provider matching the configured credential.

    Raises:
        ConfigError: If no credential is configured.
    """
    credential = config.credential()
    if isinstance(credential, StaticToken):
        return StaticTokenProvider(credential)
    return ClientCredentialsTokenProvider(config, http_client, credential=credential)
