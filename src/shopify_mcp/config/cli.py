"""Command-line overrides for Config.

Flags take precedence over environment variables, which take precedence
over defaults. Each flag's ``dest`` is the environment alias of the Config
field it overrides, so both sources populate the same key.
"""

import argparse
from collections.abc import Sequence

from pydantic import ValidationError

from ..consts import PACKAGE_VERSION, SERVER_NAME
from ..exceptions import ConfigError
from .settings import CREDENTIAL_SUGGESTIONS, Config


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog=SERVER_NAME,
        description="MCP server exposing Shopify Admin API operations as tools",
        argument_default=argparse.SUPPRESS,
    )
    parser.add_argument(
        "--accessToken", "--token", dest="SHOPIFY_ACCESS_TOKEN", help="Static Admin API token"
    )
    parser.add_argument("--clientId", dest="SHOPIFY_CLIENT_ID", help="App client id")
    parser.add_argument(
        "--clientSecret", dest="SHOPIFY_CLIENT_SECRET", help="App client secret"
    )
    parser.add_argument(
        "--domain", dest="MYSHOPIFY_DOMAIN", help="Store domain, e.g. my-store.myshopify.com"
    )
    parser.add_argument(
        "--apiVersion", dest="SHOPIFY_API_VERSION", help="Admin API version (default 2026-01)"
    )
    parser.add_argument(
        "--timeout", dest="TIMEOUT", type=int, help="Request timeout in ms (default 30000)"
    )
    parser.add_argument(
        "--retryAttempts", dest="RETRY_ATTEMPTS", type=int, help="Query retries (default 3)"
    )
    parser.add_argument(
        "--toolPackage", dest="MCP_TOOL_PACKAGE", help="Tool package to expose (default full)"
    )
    parser.add_argument(
        "--toolPackagesFile", dest="TOOL_PACKAGES_FILE", help="Tool package definition file"
    )
    parser.add_argument("--logLevel", dest="LOG_LEVEL", help="Log level (default INFO)")
    parser.add_argument(
        "--sslVerify",
        dest="SSL_VERIFY",
        action=argparse.BooleanOptionalAction,
        help="Verify TLS certificates (default on)",
    )
    parser.add_argument(
        "--debug", dest="DEBUG_MODE", action="store_true", help="Verbose debug logging"
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {PACKAGE_VERSION}"
    )
    return parser


def load_config(argv: Sequence[str] | None = None) -> Config:
    """Resolve flags, environment and defaults into a validated Config.

    Raises:
        ConfigError: If any setting is invalid or no usable credential exists.
    """
    overrides = vars(build_arg_parser().parse_args(argv))

    try:
        config = Config(**overrides)
    except ValidationError as e:
        errors = [
            f"{'.'.join(str(part) for part in err['loc'])}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigError(
            "Configuration validation failed",
            errors=errors,
            suggestions=CREDENTIAL_SUGGESTIONS,
        ) from e

    # Fail fast: a missing credential is fatal before any network activity
    config.credential()
    return config
