"""MCP protocol front end: exposes the active tools over the low-level server."""

import json
import logging
from collections.abc import Mapping

import mcp.types as types
from mcp.server.lowlevel import Server

from .consts import PACKAGE_VERSION, SERVER_NAME
from .exceptions import ToolExecutionError
from .models import ToolResult
from .tools import BaseTool

logger = logging.getLogger("shopify-mcp.server")

INSTRUCTIONS = """
Shopify MCP server.

This MCP server allows you to:
1. Browse and search products, customers and orders in a Shopify store.
2. Create, update and delete products, variants and options.
3. Update customer details.

Identifiers may be bare numeric ids ("123") or Shopify GIDs
("gid://shopify/Product/123").
"""


def tool_definitions(tools: Mapping[str, BaseTool]) -> list[types.Tool]:
    return [
        types.Tool(
            name=tool.name,
            description=tool.description,
            inputSchema=tool.input_schema(),
        )
        for tool in tools.values()
    ]


async def dispatch(
    tools: Mapping[str, BaseTool], name: str, arguments: dict | None
) -> ToolResult:
    """Run the named tool; an unknown name is a failed result, not an exception."""
    tool = tools.get(name)
    if tool is None:
        logger.warning(f"Call to unknown tool '{name}'")
        return ToolResult.from_error(
            ToolExecutionError(
                f"Unknown tool: {name}",
                suggestions=[f"Available tools: {', '.join(tools) or 'none'}"],
            )
        )
    return await tool.execute(arguments or {})


def to_text_content(result: ToolResult) -> list[types.TextContent]:
    text = json.dumps(result.model_dump(mode="json"), indent=2)
    return [types.TextContent(type="text", text=text)]


def create_server(tools: Mapping[str, BaseTool]) -> Server:
    """Create the MCP server with one command per active tool.

    Args:
        tools: Active tool instances keyed by identifier, in package order.
    """
    server = Server(SERVER_NAME, version=PACKAGE_VERSION, instructions=INSTRUCTIONS)

    @server.list_tools()
    async def list_tools() -> list[types.Tool]:
        return tool_definitions(tools)

    # argument validation happens in the tools so failures carry field violations
    @server.call_tool(validate_input=False)
    async def call_tool(name: str, arguments: dict) -> list[types.TextContent]:
        logger.debug(f"call_tool: {name}")
        result = await dispatch(tools, name, arguments)
        return to_text_content(result)

    logger.info(f"MCP server created with {len(tools)} tools")
    return server
