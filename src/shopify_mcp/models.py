from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, SecretStr

from .exceptions import GraphQLError, ShopifyMCPError
from .utils import sanitize_metadata

# =============================================================================
# TOOL RESULT MODEL
# =============================================================================
# Single result type returned by every tool and serialized to the MCP host


class ToolResult(BaseModel):
    """Unified result type for all tools."""

    success: bool = Field(..., description="Explicit outcome flag")
    data: Any | None = Field(None, description="Tool payload on success")
    error: str | None = Field(None, description="Human-readable failure message")
    metadata: dict[str, Any] = Field(
        default_factory=dict, description="Timing and diagnostic context"
    )

    @classmethod
    def ok(cls, data: Any, **metadata) -> "ToolResult":
        return cls(success=True, data=data, metadata=_stamp(metadata))

    @classmethod
    def from_error(cls, error: Exception, **metadata) -> "ToolResult":
        """Create a failed ToolResult from any Exception.

        Args:
            error: Any Exception instance
            **metadata: Extra context such as duration_ms

        Returns:
            ToolResult with success=False and sanitized diagnostic metadata
        """
        meta = _stamp(metadata)
        meta["errorType"] = type(error).__name__

        if isinstance(error, ShopifyMCPError):
            meta["errorCode"] = error.code
            if error.errors:
                meta["errors"] = error.errors
            if error.suggestions:
                meta["suggestions"] = error.suggestions
            if error.context:
                meta["errorDetails"] = sanitize_metadata(error.context)
            if isinstance(error, GraphQLError):
                meta["errorKind"] = str(error.kind)
                meta["attempts"] = error.attempts
            return cls(success=False, error=error.message, metadata=meta)

        return cls(
            success=False,
            error=f"Tool execution failed: {error}",
            metadata=meta,
        )


def _stamp(metadata: dict[str, Any]) -> dict[str, Any]:
    return {**metadata, "timestamp": datetime.now(UTC).isoformat()}


# =============================================================================
# CREDENTIALS AND TOKEN STATE
# =============================================================================


class StaticToken(BaseModel):
    """Pre-issued Admin API access token."""

    model_config = ConfigDict(frozen=True)

    access_token: SecretStr


class ClientCredentials(BaseModel):
    """App client id/secret pair exchanged for short-lived tokens."""

    model_config = ConfigDict(frozen=True)

    client_id: str
    client_secret: SecretStr
    shop_domain: str


Credential = StaticToken | ClientCredentials


class TokenState(BaseModel):
    """Current bearer token and its expiry; replaced whole on each refresh."""

    model_config = ConfigDict(frozen=True)

    access_token: str
    expires_at: datetime


# =============================================================================
# TOOL PACKAGES
# =============================================================================


class ToolPackage(BaseModel):
    """A named, curated subset of tools activated together."""

    name: str = Field(..., description="Display name of the package")
    description: str = Field("", description="What the package is for")
    tools: list[str] = Field(
        default_factory=list, description="Ordered tool identifiers"
    )
