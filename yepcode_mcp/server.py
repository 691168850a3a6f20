#!/usr/bin/env python3
"""
YepCode MCP Server - exposes the YepCode platform as MCP tools.

Usage:
    python -m yepcode_mcp.server
    python -m yepcode_mcp.server --transport http --port 8080

Configuration comes from YEPCODE_* environment variables (and a .env file).
"""

from __future__ import annotations

import argparse
import asyncio
from dataclasses import replace
import logging
import signal
import sys

from mcp import types
from mcp.server import Server
from mcp.server.stdio import stdio_server

from yepcode_mcp import __version__
from yepcode_mcp.clients import YepCodeClients, build_clients
from yepcode_mcp.config import YepCodeMcpConfig, load_config
from yepcode_mcp.context import ToolContext
from yepcode_mcp.dispatch import Dispatcher
from yepcode_mcp.errors import ConfigError, InitializationError
from yepcode_mcp.observability import setup_logging
from yepcode_mcp.prompts import SERVER_INSTRUCTIONS
from yepcode_mcp.registry import ToolRegistry
from yepcode_mcp.resolver import ExecutionResolver

SERVER_NAME = "yepcode-mcp-server"

logger = logging.getLogger("yepcode-mcp")


class YepCodeMcpServer:
    """YepCode MCP Server implementation."""

    def __init__(self, config: YepCodeMcpConfig, clients: YepCodeClients | None = None):
        self.config = config
        self.clients = clients if clients is not None else build_clients(config)
        self.registry = ToolRegistry()
        self.ctx = ToolContext(
            clients=self.clients,
            resolver=ExecutionResolver(self.clients.run, timeout=config.execution_timeout),
            config=config,
        )
        self.dispatcher = Dispatcher(self.registry, self.ctx)
        self.server = Server(SERVER_NAME, version=__version__, instructions=SERVER_INSTRUCTIONS)

        self._register_handlers()
        logger.info(
            f"YepCode MCP Server initialized (groups={sorted(config.tools.groups)}, "
            f"process_mode={config.tools.mode.value})"
        )

    def _register_handlers(self):
        """Register MCP protocol handlers."""

        @self.server.list_tools()
        async def list_tools() -> list[types.Tool]:
            return await self.dispatcher.list_tools()

        @self.server.list_resources()
        async def list_resources() -> list[types.Resource]:
            return []

        @self.server.list_resource_templates()
        async def list_resource_templates() -> list[types.ResourceTemplate]:
            return []

        # Registered directly: the call_tool() decorator would turn McpError
        # (unknown tool, invalid params) into an isError result.
        async def call_tool(req: types.CallToolRequest) -> types.ServerResult:
            result = await self.dispatcher.call_tool(req.params.name, req.params.arguments)
            return types.ServerResult(result)

        self.server.request_handlers[types.CallToolRequest] = call_tool

    async def run(self):
        """Run the server with stdio transport."""
        logger.info("Starting YepCode MCP server (stdio transport)")
        async with stdio_server() as (read_stream, write_stream):
            await self.server.run(
                read_stream,
                write_stream,
                self.server.create_initialization_options(),
            )


async def serve_stdio(server: YepCodeMcpServer) -> None:
    """Serve until stdin closes or SIGINT/SIGTERM arrives."""
    loop = asyncio.get_running_loop()
    task = asyncio.current_task()
    for sig in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(sig, task.cancel)
        except NotImplementedError:
            # Windows: Ctrl+C still raises KeyboardInterrupt
            logger.debug(f"Signal handler for {sig.name} unavailable")
    try:
        await server.run()
    except asyncio.CancelledError:
        logger.info("Shutdown signal received, stopping server")


def main():
    """Entry point for the YepCode MCP server."""
    parser = argparse.ArgumentParser(description="YepCode MCP Server")
    parser.add_argument(
        "--transport",
        "-t",
        choices=["stdio", "http"],
        default=None,
        help="Override transport (default: YEPCODE_MCP_TRANSPORT or stdio)",
    )
    parser.add_argument("--host", default=None, help="HTTP bind address")
    parser.add_argument("--port", "-p", type=int, default=None, help="HTTP port")
    parser.add_argument(
        "--log-level",
        "-l",
        choices=["debug", "info", "warning", "error"],
        default=None,
        help="Override log level",
    )
    parser.add_argument(
        "--log-format", choices=["json", "text"], default=None, help="Override log format"
    )
    args = parser.parse_args()

    try:
        config = load_config()
    except ConfigError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        sys.exit(2)

    overrides = {
        "transport": args.transport,
        "host": args.host,
        "port": args.port,
        "log_level": args.log_level,
        "log_format": args.log_format,
    }
    server_config = replace(
        config.server, **{name: value for name, value in overrides.items() if value is not None}
    )
    config = replace(config, server=server_config)

    setup_logging(config.server.log_level, config.server.log_format)

    try:
        config.validate()
        server = YepCodeMcpServer(config)
    except (ConfigError, InitializationError) as e:
        logger.error(str(e))
        sys.exit(1)

    if config.server.transport == "http":
        from yepcode_mcp.transport.http_server import YepCodeHttpServer

        YepCodeHttpServer(server).run()
    else:
        asyncio.run(serve_stdio(server))


if __name__ == "__main__":
    main()
