"""Shopify MCP Server Package

A Model Context Protocol (MCP) server exposing Shopify Admin GraphQL
operations (products, variants, options, customers, orders) as tools.
"""

from .client import ShopifyClient
from .config import Config, load_config
from .consts import PACKAGE_VERSION
from .exceptions import (
    AuthenticationError,
    ConfigError,
    ErrorKind,
    GraphQLError,
    ShopifyMCPError,
    ToolExecutionError,
    UserInputError,
)
from .models import ToolResult
from .packages import ToolPackageRegistry

__version__ = PACKAGE_VERSION

__all__ = [
    "__version__",
    "load_config",
    "Config",
    "ShopifyClient",
    "ToolPackageRegistry",
    "ToolResult",
    "ShopifyMCPError",
    "ConfigError",
    "AuthenticationError",
    "GraphQLError",
    "ErrorKind",
    "UserInputError",
    "ToolExecutionError",
]
