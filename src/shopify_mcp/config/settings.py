"""Configuration management with Pydantic v2"""

from pydantic import Field, SecretStr, computed_field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from ..consts import DEFAULT_TOOL_PACKAGES_FILE, GRAPHQL_URL_TEMPLATE, TOKEN_URL_TEMPLATE
from ..exceptions import ConfigError
from ..models import ClientCredentials, Credential, StaticToken
from ..utils import mask_sensitive_value

CREDENTIAL_SUGGESTIONS = [
    "Set SHOPIFY_ACCESS_TOKEN (or pass --accessToken) to use a static Admin API token",
    "Or set SHOPIFY_CLIENT_ID and SHOPIFY_CLIENT_SECRET (or pass --clientId/--clientSecret) "
    "to use the client-credentials flow",
    "Set MYSHOPIFY_DOMAIN (or pass --domain), e.g. my-store.myshopify.com",
]


class Config(BaseSettings):
    """Immutable process settings with pre-computed Admin API endpoints.

    Each field reads the environment variable named by its alias; values
    passed to the constructor override the environment.
    """

    model_config = SettingsConfigDict(
        case_sensitive=False,
        extra="ignore",
        frozen=True,
        populate_by_name=True,
        env_file=".env",
        env_file_encoding="utf-8",
    )

    # Credentials
    access_token: SecretStr | None = Field(
        default=None,
        validation_alias="SHOPIFY_ACCESS_TOKEN",
        description="Static Admin API access token",
    )
    client_id: str | None = Field(
        default=None,
        validation_alias="SHOPIFY_CLIENT_ID",
        description="App client id for the client-credentials flow",
    )
    client_secret: SecretStr | None = Field(
        default=None,
        validation_alias="SHOPIFY_CLIENT_SECRET",
        description="App client secret for the client-credentials flow",
    )

    # Store
    shop_domain: str = Field(
        ...,
        validation_alias="MYSHOPIFY_DOMAIN",
        description="Store domain, e.g. my-store.myshopify.com",
    )
    api_version: str = Field(
        default="2026-01",
        pattern=r"^\d{4}-\d{2}$|^unstable$",
        validation_alias="SHOPIFY_API_VERSION",
        description="Admin API version",
    )

    # HTTP settings
    timeout_ms: int = Field(
        default=30000,
        gt=0,
        validation_alias="TIMEOUT",
        description="Per-request timeout in milliseconds",
    )
    retry_attempts: int = Field(
        default=3,
        ge=0,
        le=10,
        validation_alias="RETRY_ATTEMPTS",
        description="Retries for read queries (mutations are never retried)",
    )
    ssl_verify: bool = Field(
        default=True,
        validation_alias="SSL_VERIFY",
        description="Verify TLS certificates",
    )

    # Server behaviour
    tool_package: str = Field(
        default="full",
        validation_alias="MCP_TOOL_PACKAGE",
        description="Name of the tool package to expose",
    )
    tool_packages_file: str = Field(
        default=DEFAULT_TOOL_PACKAGES_FILE,
        validation_alias="TOOL_PACKAGES_FILE",
        description="Optional JSON file with tool package definitions",
    )
    log_level: str = Field(
        default="INFO",
        pattern=r"^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        validation_alias="LOG_LEVEL",
        description="Logging level",
    )
    debug_mode: bool = Field(
        default=False,
        validation_alias="DEBUG_MODE",
        description="Log full GraphQL variables and tool arguments",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value):
        return value.upper() if isinstance(value, str) else value

    @field_validator("shop_domain")
    @classmethod
    def _normalize_domain(cls, value: str) -> str:
        value = value.strip()
        for scheme in ("https://", "http://"):
            if value.startswith(scheme):
                value = value[len(scheme) :]
        value = value.rstrip("/")
        if not value:
            raise ValueError("shop domain must not be empty")
        return value

    @computed_field
    @property
    def graphql_url(self) -> str:
        """URL for Admin API GraphQL requests"""
        return GRAPHQL_URL_TEMPLATE.format(
            domain=self.shop_domain, version=self.api_version
        )

    @computed_field
    @property
    def token_url(self) -> str:
        """URL for the OAuth client-credentials exchange"""
        return TOKEN_URL_TEMPLATE.format(domain=self.shop_domain)

    @property
    def timeout_seconds(self) -> float:
        return self.timeout_ms / 1000

    def credential(self) -> Credential:
        """Select the single active credential.

        A static token takes precedence over a client id/secret pair.

        Raises:
            ConfigError: If neither a token nor a complete client id/secret
                pair is configured.
        """
        if self.access_token and self.access_token.get_secret_value():
            return StaticToken(access_token=self.access_token)

        if self.client_id and self.client_secret:
            return ClientCredentials(
                client_id=self.client_id,
                client_secret=self.client_secret,
                shop_domain=self.shop_domain,
            )

        missing = ["SHOPIFY_ACCESS_TOKEN"]
        if self.client_id and not self.client_secret:
            missing = ["SHOPIFY_CLIENT_SECRET"]
        elif self.client_secret and not self.client_id:
            missing = ["SHOPIFY_CLIENT_ID"]

        raise ConfigError(
            "No Shopify credentials configured: provide an access token "
            "or a client id and client secret",
            errors=[f"Missing setting: {name}" for name in missing],
            suggestions=CREDENTIAL_SUGGESTIONS,
            context={"shop_domain": self.shop_domain},
        )

    def masked_summary(self) -> dict:
        """Settings safe to log, with credentials masked."""
        return {
            "shop_domain": self.shop_domain,
            "api_version": self.api_version,
            "access_token": (
                mask_sensitive_value(self.access_token.get_secret_value())
                if self.access_token
                else None
            ),
            "client_id": self.client_id,
            "client_secret": (
                mask_sensitive_value(self.client_secret.get_secret_value())
                if self.client_secret
                else None
            ),
            "timeout_ms": self.timeout_ms,
            "retry_attempts": self.retry_attempts,
            "ssl_verify": self.ssl_verify,
            "tool_package": self.tool_package,
            "log_level": self.log_level,
            "debug_mode": self.debug_mode,
        }

    def __repr__(self) -> str:
        """String representation of the configuration"""
        return (
            f"Config(shop_domain='{self.shop_domain}', "
            f"api_version='{self.api_version}', tool_package='{self.tool_package}')"
        )
