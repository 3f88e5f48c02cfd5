"""Shopify MCP custom exceptions.

Exception Design Principles:
1. Raise these custom exceptions where additional useful context can be provided
2. Handle exceptions as late as possible (the tool boundary converts them to results)
3. Split on domain of actionable information:
   - Recoverable by user reconfiguration outside session (ConfigError, AuthenticationError)
   - Transport failures against the Admin API (GraphQLError)
   - Potentially recoverable by LLM action in-session (UserInputError, ToolExecutionError)
"""

from enum import StrEnum


class ErrorKind(StrEnum):
    """Coarse classification of a failed Admin API request."""

    CLIENT = "client"  # HTTP 4xx: bad query, bad auth, not found
    TRANSIENT = "transient"  # 5xx, timeouts, connection resets


class ShopifyMCPError(Exception):
    """Base exception for all Shopify MCP errors.

    Provides rich context and actionable suggestions beyond standard exceptions.
    All Shopify MCP custom exceptions inherit from this base class.
    """

    code = "SHOPIFY_MCP_ERROR"

    def __init__(
        self,
        message: str,  # the error message
        *,
        errors: list[str] = None,  # detailed list of errors (if available)
        suggestions: list[str] = None,  # remedial actions
        context: dict = None,  # additional detailed context
    ):
        """Initialize ShopifyMCPError.

        Args:
            message: Primary error message for users
            errors: List of specific error details
            suggestions: List of actionable suggestions for resolution
            context: Additional context information as key-value pairs
        """
        super().__init__(message)
        self.message = message
        self.errors = errors or []
        self.suggestions = suggestions or []
        self.context = context or {}


class ConfigError(ShopifyMCPError):
    """Application configuration errors - recoverable by user reconfiguration.

    Covers setup issues that prevent startup:
    - Missing credentials (neither a static token nor a client id/secret pair)
    - Missing store domain or malformed numeric settings
    - Unknown tool package names or tool identifiers in a package definition
    """

    code = "CONFIGURATION_ERROR"


class AuthenticationError(ShopifyMCPError):
    """Credential exchange rejected by the store's OAuth endpoint.

    Fatal when raised from the initial exchange; logged and retried when
    raised from the background refresh.
    """

    code = "AUTHENTICATION_ERROR"

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        body: str | None = None,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.body = body


class GraphQLError(ShopifyMCPError):
    """Admin API request failed at the transport or GraphQL layer.

    ``kind`` is ErrorKind.CLIENT for HTTP 4xx responses, which are never
    retried, and ErrorKind.TRANSIENT for everything else (5xx, timeouts,
    connection resets, GraphQL ``errors`` in a 200 response).
    """

    code = "GRAPHQL_ERROR"

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind = ErrorKind.TRANSIENT,
        attempts: int = 1,
        **kwargs,
    ):
        super().__init__(message, **kwargs)
        self.kind = kind
        self.attempts = attempts


class UserInputError(ShopifyMCPError):
    """The Admin API accepted the request but reported ``userErrors``.

    Never retried. The message concatenates ``field: message`` pairs so the
    caller can see exactly which input was rejected.
    """

    code = "USER_ERROR"

    @classmethod
    def from_user_errors(cls, action: str, user_errors: list[dict]) -> "UserInputError":
        """Build from a remote ``userErrors`` list."""
        pairs = [_format_user_error(error) for error in user_errors]
        return cls(
            f"{action}: {', '.join(pairs)}",
            errors=pairs,
            context={"user_errors": user_errors},
        )


class ToolExecutionError(ShopifyMCPError):
    """Tool-level failure: invalid arguments or an unexpected response shape."""

    code = "TOOL_EXECUTION_ERROR"


def _format_user_error(error: dict) -> str:
    field = error.get("field")
    if isinstance(field, list):
        field = ".".join(str(part) for part in field)
    if not field:
        return str(error.get("message"))
    return f"{field}: {error.get('message')}"
