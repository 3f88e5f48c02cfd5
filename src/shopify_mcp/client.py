"""Shopify Admin API client with retry policy and typed failures."""

import asyncio
import logging
import random
import time
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from .auth import create_token_provider
from .config import Config
from .consts import (
    ACCESS_TOKEN_HEADER,
    RETRY_BASE_DELAY_SECONDS,
    RETRY_MAX_DELAY_SECONDS,
    RETRY_MAX_JITTER_SECONDS,
    USER_AGENT,
)
from .exceptions import ErrorKind, GraphQLError
from .graphql_parser import describe_operation
from .protocols import TokenProvider
from .utils import sanitize_metadata, truncate_query, variable_keys

logger = logging.getLogger("shopify-mcp.client")

SHOP_HEALTH_QUERY = """
query ShopHealth {
  shop {
    id
    name
  }
}
"""

SHOP_INFO_QUERY = """
query ShopInfo {
  shop {
    id
    name
    email
    myshopifyDomain
    currencyCode
    ianaTimezone
    plan {
      displayName
    }
  }
}
"""


def compute_retry_delay(
    attempt: int, rand: Callable[[], float] = random.random
) -> float:
    """Exponential backoff with jitter, in seconds.

    Attempt 0 waits 1s plus up to 1s of jitter, doubling per attempt and
    capped at 30s.
    """
    delay = RETRY_BASE_DELAY_SECONDS * (2**attempt)
    jitter = rand() * RETRY_MAX_JITTER_SECONDS
    return min(delay + jitter, RETRY_MAX_DELAY_SECONDS)


def is_client_error(status_code: int) -> bool:
    # 429 means throttled, which is transient even though it is a 4xx
    return 400 <= status_code < 500 and status_code != 429


class ShopifyClient:
    """Shopify Admin GraphQL client.

    Responsibilities:
    - Attach the current access token to every request
    - Retry read queries with exponential backoff; never retry mutations
    - Convert every failure into a classified GraphQLError
    """

    def __init__(
        self,
        config: Config,
        token_provider: TokenProvider | None = None,
        http_client: httpx.AsyncClient | None = None,
        *,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """Initialize ShopifyClient.

        Args:
            config: Config instance.
            token_provider: Access token provider. If None, chosen from config.
            http_client: HTTP client. If None, creates (and owns) a new one.
            sleep: Awaitable delay used between query retries.
        """
        self.config = config
        self._owns_http_client = http_client is None

        self.http_client = http_client or httpx.AsyncClient(
            headers={
                "User-Agent": USER_AGENT,
                "Accept": "application/json",
            },
            timeout=httpx.Timeout(config.timeout_seconds),
            verify=config.ssl_verify,
        )

        self.token_provider = token_provider or create_token_provider(
            config, self.http_client
        )
        self._access_token: str | None = None
        self._sleep = sleep

        logger.info(
            f"Shopify client created for {config.shop_domain} "
            f"(API {config.api_version}, timeout {config.timeout_ms}ms, "
            f"retries {config.retry_attempts})"
        )

    async def __aenter__(self) -> "ShopifyClient":
        await self.start()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def start(self) -> None:
        """Obtain the first token and subscribe to refreshes.

        Raises:
            AuthenticationError: If the initial credential exchange fails.
        """
        token = await self.token_provider.initialize()
        self.set_access_token(token)
        self.token_provider.on_refresh(self.set_access_token)

    def set_access_token(self, token: str) -> None:
        """Swap the credential header used by subsequent requests."""
        self._access_token = token
        logger.debug("Access token header updated")

    async def aclose(self) -> None:
        self.token_provider.destroy()
        if self._owns_http_client:
            await self.http_client.aclose()

    async def query(
        self, document: str, variables: dict[str, Any] | None = None
    ) -> dict:
        """Execute a read query, retrying transient failures.

        Args:
            document: GraphQL query document.
            variables: Operation variables.

        Returns:
            The ``data`` member of the GraphQL response.

        Raises:
            GraphQLError: kind=CLIENT after a single 4xx attempt, or
                kind=TRANSIENT once all retry attempts are exhausted.
        """
        max_attempts = self.config.retry_attempts + 1
        started = time.monotonic()
        last_error: GraphQLError | None = None

        for attempt in range(max_attempts):
            try:
                data = await self._execute(document, variables)
            except GraphQLError as e:
                e.attempts = attempt + 1
                last_error = e
                if e.kind is ErrorKind.CLIENT:
                    logger.warning(f"GraphQL client error, not retrying: {e.message}")
                    raise

                if attempt < max_attempts - 1:
                    delay = compute_retry_delay(attempt)
                    logger.warning(
                        f"GraphQL request failed, retrying in {delay:.2f}s "
                        f"(attempt {attempt + 1}/{max_attempts}): {e.message}"
                    )
                    await self._sleep(delay)
            else:
                logger.debug(
                    f"GraphQL query completed in {_elapsed_ms(started)}ms "
                    f"after {attempt + 1} attempt(s)"
                )
                return data

        logger.error(
            f"GraphQL query failed after {max_attempts} attempts "
            f"({_elapsed_ms(started)}ms)"
        )
        raise GraphQLError(
            f"GraphQL request failed after {max_attempts} attempts: {last_error.message}",
            kind=ErrorKind.TRANSIENT,
            attempts=max_attempts,
            errors=last_error.errors,
            context={
                **last_error.context,
                "last_error": last_error.message,
                "attempts": max_attempts,
            },
        ) from last_error

    async def mutate(
        self, document: str, variables: dict[str, Any] | None = None
    ) -> dict:
        """Execute a mutation exactly once.

        A failed mutation may have been partially applied, so it is never
        retried.

        Raises:
            GraphQLError: On any failure, after a single attempt.
        """
        started = time.monotonic()
        try:
            data = await self._execute(document, variables)
        except GraphQLError as e:
            logger.error(f"GraphQL mutation failed ({_elapsed_ms(started)}ms): {e.message}")
            raise GraphQLError(
                f"GraphQL mutation failed: {e.message}",
                kind=e.kind,
                attempts=1,
                errors=e.errors,
                context={**e.context, "last_error": e.message, "attempts": 1},
            ) from e

        logger.debug(f"GraphQL mutation completed in {_elapsed_ms(started)}ms")
        return data

    async def health_check(self) -> bool:
        """Confirm the store is reachable with the current token; never raises."""
        try:
            await self.query(SHOP_HEALTH_QUERY)
        except Exception as e:
            logger.error(f"Shopify connection health check failed: {e}")
            return False

        logger.debug("Shopify connection health check passed")
        return True

    async def get_shop_info(self) -> dict:
        """Get shop identity, currency, timezone and plan."""
        data = await self.query(SHOP_INFO_QUERY)
        return data["shop"]

    async def _execute(
        self, document: str, variables: dict[str, Any] | None
    ) -> dict:
        """Perform one POST and classify any failure."""
        operation = describe_operation(document)
        context = {
            "query": truncate_query(document),
            "operation": operation.name,
            "variables": variable_keys(variables),
        }

        if self.config.debug_mode:
            logger.debug(
                f"Executing GraphQL {operation.operation} {operation.name or ''} "
                f"variables={sanitize_metadata(variables)}"
            )
        else:
            logger.debug(
                f"Executing GraphQL {operation.operation} {operation.name or ''} "
                f"variables={context['variables']}"
            )

        token = self._access_token or self.token_provider.get_access_token()
        payload = {"query": document}
        if variables:
            payload["variables"] = variables

        # httpx timeouts apply per phase; the deadline bounds the whole request
        try:
            async with asyncio.timeout(self.config.timeout_seconds):
                response = await self.http_client.post(
                    self.config.graphql_url,
                    json=payload,
                    headers={ACCESS_TOKEN_HEADER: token},
                )
        except (httpx.TimeoutException, TimeoutError) as e:
            raise GraphQLError(
                f"Request timed out after {self.config.timeout_ms}ms",
                kind=ErrorKind.TRANSIENT,
                context=context,
            ) from e
        except httpx.RequestError as e:
            raise GraphQLError(
                f"Network error: {e}",
                kind=ErrorKind.TRANSIENT,
                context=context,
            ) from e

        if not response.is_success:
            status_code = response.status_code
            remote_errors = _error_messages(_safe_json(response))
            kind = ErrorKind.CLIENT if is_client_error(status_code) else ErrorKind.TRANSIENT
            detail = "; ".join(remote_errors) or response.reason_phrase
            raise GraphQLError(
                f"GraphQL {kind} error ({status_code}): {detail}",
                kind=kind,
                errors=remote_errors,
                context={**context, "status": status_code},
            )

        body = _safe_json(response)
        if not isinstance(body, dict):
            raise GraphQLError(
                "Invalid JSON response from Shopify GraphQL API",
                kind=ErrorKind.TRANSIENT,
                context={**context, "status": response.status_code},
            )

        if body.get("errors"):
            remote_errors = _error_messages(body)
            raise GraphQLError(
                f"GraphQL errors: {'; '.join(remote_errors)}",
                kind=ErrorKind.TRANSIENT,
                errors=remote_errors,
                context={**context, "status": response.status_code},
            )

        return body.get("data") or {}


def _safe_json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except ValueError:
        return None


def _error_messages(body: Any) -> list[str]:
    """Extract messages from a GraphQL ``errors`` member (list or string)."""
    if not isinstance(body, dict):
        return []
    errors = body.get("errors")
    if isinstance(errors, str):
        return [errors]
    if not isinstance(errors, list):
        return []
    return [
        error.get("message", str(error)) if isinstance(error, dict) else str(error)
        for error in errors
    ]


def _elapsed_ms(started: float) -> int:
    return int((time.monotonic() - started) * 1000)
