"""Tool package registry: decides which tools a process exposes."""

import json
import logging
from pathlib import Path

from pydantic import TypeAdapter, ValidationError

from .config import Config
from .exceptions import ConfigError
from .models import ToolPackage
from .utils import suggest_similar_strings

logger = logging.getLogger("shopify-mcp.packages")

_PACKAGES_ADAPTER = TypeAdapter(dict[str, ToolPackage])

NO_TOOLS_PACKAGE = "none"

READ_ONLY_TOOLS = [
    "get-products",
    "get-product-by-id",
    "get-customers",
    "get-orders",
    "get-order-by-id",
]

DEFAULT_TOOL_PACKAGES: dict[str, ToolPackage] = {
    NO_TOOLS_PACKAGE: ToolPackage(name="None", description="No tools loaded", tools=[]),
    "basic": ToolPackage(
        name="Basic",
        description="Essential read-only tools for basic store information",
        tools=READ_ONLY_TOOLS,
    ),
    "full": ToolPackage(
        name="Full",
        description="All available tools for complete store management",
        tools=[
            "get-products",
            "get-product-by-id",
            "create-product",
            "update-product",
            "delete-product",
            "manage-product-variants",
            "delete-product-variants",
            "manage-product-options",
            "get-customers",
            "get-customer-orders",
            "update-customer",
            "get-orders",
            "get-order-by-id",
        ],
    ),
    "product_management": ToolPackage(
        name="Product Management",
        description="Tools focused on product, variant and option operations",
        tools=[
            "get-products",
            "get-product-by-id",
            "create-product",
            "update-product",
            "delete-product",
            "manage-product-variants",
            "delete-product-variants",
            "manage-product-options",
        ],
    ),
    "customer_service": ToolPackage(
        name="Customer Service",
        description="Tools for customer and order management",
        tools=[
            "get-customers",
            "get-customer-orders",
            "get-orders",
            "get-order-by-id",
            "update-customer",
        ],
    ),
    "order_management": ToolPackage(
        name="Order Management",
        description="Tools specifically for order operations",
        tools=["get-orders", "get-order-by-id"],
    ),
}


class ToolPackageRegistry:
    """Loaded package definitions plus the one package active in this process.

    Package selection is a coarse capability scope, not a security boundary:
    the access token's API scopes are the real authorization.
    """

    def __init__(self, config: Config, packages_file: str | Path | None = None):
        """Initialize ToolPackageRegistry.

        Args:
            config: Config naming the active package.
            packages_file: Definition file; defaults to config.tool_packages_file.
        """
        self.config = config
        self.packages_file = Path(packages_file or config.tool_packages_file)
        self.active_package = config.tool_package
        self._packages: dict[str, ToolPackage] | None = None

    def load(self) -> dict[str, ToolPackage]:
        """Read package definitions, falling back to the built-in set.

        A missing or unreadable file is not an error.
        """
        try:
            raw = json.loads(self.packages_file.read_text(encoding="utf-8"))
            packages = _PACKAGES_ADAPTER.validate_python(raw)
        except FileNotFoundError:
            logger.debug(
                f"No tool package file at {self.packages_file}, using defaults"
            )
            packages = dict(DEFAULT_TOOL_PACKAGES)
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(
                f"Failed to load tool packages from {self.packages_file}, "
                f"using defaults: {e}"
            )
            packages = dict(DEFAULT_TOOL_PACKAGES)
        else:
            logger.debug(f"Loaded tool packages from {self.packages_file}")

        self._packages = packages
        return dict(packages)

    @property
    def packages(self) -> dict[str, ToolPackage]:
        if self._packages is None:
            self.load()
        return self._packages

    def all_packages(self) -> dict[str, ToolPackage]:
        return dict(self.packages)

    def package_info(self, name: str) -> ToolPackage | None:
        return self.packages.get(name)

    def get_active_tools(self) -> list[str]:
        """Ordered tool identifiers of the active package.

        Raises:
            ConfigError: If the active package name is not defined.
        """
        if self.active_package == NO_TOOLS_PACKAGE:
            return []

        package = self.packages.get(self.active_package)
        if package is None:
            available = sorted(self.packages)
            raise ConfigError(
                f"Invalid tool package '{self.active_package}'. "
                f"Available packages: {', '.join(available)}",
                suggestions=[
                    f"Did you mean '{s}'?"
                    for s in suggest_similar_strings(self.active_package, available)
                ]
                or [f"Set MCP_TOOL_PACKAGE to one of: {', '.join(available)}"],
                context={"tool_package": self.active_package, "available": available},
            )
        return list(package.tools)

    def is_tool_enabled(self, name: str) -> bool:
        return name in self.get_active_tools()

    def describe(self) -> str:
        """One-line summary of the active package for the startup log."""
        if self.active_package == NO_TOOLS_PACKAGE:
            return f"Tool package '{NO_TOOLS_PACKAGE}': no tools"
        package = self.packages.get(self.active_package)
        if package is None:
            return f"Tool package '{self.active_package}' (undefined)"
        return (
            f"Tool package '{self.active_package}' ({package.name}): "
            f"{len(package.tools)} tools - {', '.join(package.tools) or 'none'}"
        )
