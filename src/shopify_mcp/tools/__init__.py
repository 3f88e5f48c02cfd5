"""Shopify tools and the name-to-class mapping used at startup."""

from enum import StrEnum

from ..exceptions import ConfigError
from ..utils import suggest_similar_strings
from .base import BaseTool, ToolContext, ToolInput
from .customers import GetCustomerOrdersTool, GetCustomersTool, UpdateCustomerTool
from .options import ManageProductOptionsTool
from .orders import GetOrderByIdTool, GetOrdersTool
from .products import (
    CreateProductTool,
    DeleteProductTool,
    GetProductByIdTool,
    GetProductsTool,
    UpdateProductTool,
)
from .variants import DeleteProductVariantsTool, ManageProductVariantsTool


class ToolName(StrEnum):
    GET_PRODUCTS = "get-products"
    GET_PRODUCT_BY_ID = "get-product-by-id"
    CREATE_PRODUCT = "create-product"
    UPDATE_PRODUCT = "update-product"
    DELETE_PRODUCT = "delete-product"
    MANAGE_PRODUCT_VARIANTS = "manage-product-variants"
    DELETE_PRODUCT_VARIANTS = "delete-product-variants"
    MANAGE_PRODUCT_OPTIONS = "manage-product-options"
    GET_CUSTOMERS = "get-customers"
    GET_CUSTOMER_ORDERS = "get-customer-orders"
    UPDATE_CUSTOMER = "update-customer"
    GET_ORDERS = "get-orders"
    GET_ORDER_BY_ID = "get-order-by-id"


TOOL_CLASSES: dict[ToolName, type[BaseTool]] = {
    ToolName.GET_PRODUCTS: GetProductsTool,
    ToolName.GET_PRODUCT_BY_ID: GetProductByIdTool,
    ToolName.CREATE_PRODUCT: CreateProductTool,
    ToolName.UPDATE_PRODUCT: UpdateProductTool,
    ToolName.DELETE_PRODUCT: DeleteProductTool,
    ToolName.MANAGE_PRODUCT_VARIANTS: ManageProductVariantsTool,
    ToolName.DELETE_PRODUCT_VARIANTS: DeleteProductVariantsTool,
    ToolName.MANAGE_PRODUCT_OPTIONS: ManageProductOptionsTool,
    ToolName.GET_CUSTOMERS: GetCustomersTool,
    ToolName.GET_CUSTOMER_ORDERS: GetCustomerOrdersTool,
    ToolName.UPDATE_CUSTOMER: UpdateCustomerTool,
    ToolName.GET_ORDERS: GetOrdersTool,
    ToolName.GET_ORDER_BY_ID: GetOrderByIdTool,
}


def build_tools(context: ToolContext, names: list[str]) -> dict[str, BaseTool]:
    """Instantiate the named tools, preserving order.

    Raises:
        ConfigError: If any name is not a known tool identifier.
    """
    known = [str(name) for name in ToolName]
    unknown = [name for name in names if name not in known]
    if unknown:
        suggestions = [
            f"Did you mean '{match}' instead of '{name}'?"
            for name in unknown
            for match in suggest_similar_strings(name, known, max_results=1)
        ]
        raise ConfigError(
            f"Unknown tool identifier(s) in package: {', '.join(unknown)}",
            errors=[f"Valid tools: {', '.join(known)}"],
            suggestions=suggestions,
            context={"unknown": unknown},
        )

    tools = {}
    for name in names:
        tool_cls = TOOL_CLASSES[ToolName(name)]
        tools[tool_cls.name] = tool_cls(context)
        context.logger.debug(f"Registered tool '{tool_cls.name}'")
    return tools


__all__ = [
    "BaseTool",
    "TOOL_CLASSES",
    "ToolContext",
    "ToolInput",
    "ToolName",
    "build_tools",
]
