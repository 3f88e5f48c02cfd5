"""Process entry point: configuration, startup checks and the stdio server."""

import asyncio
import contextlib
import logging
import signal
import sys
from collections.abc import Sequence

from mcp.server.stdio import stdio_server

from .client import ShopifyClient
from .config import Config, load_config, setup_logging
from .consts import PACKAGE_VERSION, SERVER_NAME
from .exceptions import ShopifyMCPError
from .packages import ToolPackageRegistry
from .server import create_server
from .tools import ToolContext, build_tools

logger = logging.getLogger("shopify-mcp.main")


class FatalLoopError(RuntimeError):
    """An exception escaped a background task."""


async def serve(config: Config) -> None:
    """Run the server until stdin closes or a shutdown signal arrives.

    Raises:
        ShopifyMCPError: If authentication, the connectivity check, or tool
            package selection fails at startup.
        FatalLoopError: If an unhandled exception reaches the event loop.
    """
    loop = asyncio.get_running_loop()
    main_task = asyncio.current_task()
    fatal: list[dict] = []

    def on_loop_exception(loop: asyncio.AbstractEventLoop, context: dict) -> None:
        logger.critical(
            f"Unhandled exception in event loop: {context.get('message')}",
            exc_info=context.get("exception"),
        )
        fatal.append(context)
        main_task.cancel()

    loop.set_exception_handler(on_loop_exception)
    # not available on Windows event loops
    with contextlib.suppress(NotImplementedError):
        loop.add_signal_handler(signal.SIGTERM, main_task.cancel)

    try:
        await _serve(config)
    except asyncio.CancelledError:
        if fatal:
            raise FatalLoopError(str(fatal[0].get("message"))) from None
        logger.info("Shutdown signal received")


async def _serve(config: Config) -> None:
    logger.info(f"Starting {SERVER_NAME} v{PACKAGE_VERSION}")
    logger.info(f"Configuration: {config.masked_summary()}")

    client = ShopifyClient(config)
    try:
        await client.start()

        if not await client.health_check():
            raise ShopifyMCPError(
                f"Failed to connect to Shopify store {config.shop_domain}",
                suggestions=[
                    "Check MYSHOPIFY_DOMAIN and the API version",
                    "Verify the access token has Admin API access",
                ],
                context={"shop_domain": config.shop_domain},
            )
        logger.info(f"Connected to Shopify store {config.shop_domain}")

        registry = ToolPackageRegistry(config)
        tool_names = registry.get_active_tools()
        logger.info(registry.describe())

        tools = build_tools(ToolContext(config=config, client=client), tool_names)
        server = create_server(tools)

        async with stdio_server() as (read_stream, write_stream):
            logger.info("MCP server listening on stdio")
            await server.run(
                read_stream, write_stream, server.create_initialization_options()
            )
    finally:
        await client.aclose()
        logger.debug("Shopify client closed")


def run(argv: Sequence[str] | None = None) -> int:
    """Run the server and return the process exit code."""
    try:
        config = load_config(argv)
    except ShopifyMCPError as e:
        _report(e)
        return 1

    setup_logging(config.log_level)

    try:
        asyncio.run(serve(config))
    except KeyboardInterrupt:
        logger.info("Interrupted, shutting down")
        return 0
    except ShopifyMCPError as e:
        logger.error(f"Startup failed: {e.message}")
        _report(e)
        return 1
    except Exception as e:
        logger.critical(f"Server failed: {e}", exc_info=True)
        return 1

    logger.info("Server stopped")
    return 0


def main(argv: Sequence[str] | None = None) -> None:
    """Main entry point."""
    sys.exit(run(argv))


def _report(error: ShopifyMCPError) -> None:
    """Print a startup failure with remediation hints to stderr."""
    lines = [f"Error: {error.message}"]
    lines += [f"  - {detail}" for detail in error.errors]
    if error.suggestions:
        lines.append("Suggestions:")
        lines += [f"  - {suggestion}" for suggestion in error.suggestions]
    print("\n".join(lines), file=sys.stderr)


if __name__ == "__main__":
    main()
