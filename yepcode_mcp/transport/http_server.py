"""HTTP server with SSE transport for hosted mode."""

from __future__ import annotations

from contextlib import asynccontextmanager
import logging
from typing import TYPE_CHECKING

from mcp.server.sse import SseServerTransport
from starlette.applications import Starlette
from starlette.responses import JSONResponse, Response
from starlette.routing import Mount, Route

from yepcode_mcp import __version__

if TYPE_CHECKING:
    from starlette.requests import Request

    from yepcode_mcp.server import YepCodeMcpServer

logger = logging.getLogger("yepcode-mcp")


class YepCodeHttpServer:
    """
    HTTP server that exposes MCP over SSE transport.

    A connection may narrow or change the tool selection and options for its
    own session through query parameters, e.g.
    ``/sse?tools=run_code,my-tag&options=skipCodingRules``. Those sessions get
    their own MCP server sharing the YepCode clients built at startup.

    Example:
        server = YepCodeHttpServer(mcp_server, host="127.0.0.1", port=8080)
        server.run()  # Blocks, serving HTTP/SSE
    """

    def __init__(
        self,
        mcp_server: YepCodeMcpServer,
        host: str | None = None,
        port: int | None = None,
    ):
        self.mcp_server = mcp_server
        self.host = host or mcp_server.config.server.host
        self.port = port or mcp_server.config.server.port

        self.sse_transport = SseServerTransport("/messages/")
        self.app = self._create_app()

        logger.info(f"HTTP server initialized (will bind to {self.host}:{self.port})")

    def _create_app(self) -> Starlette:
        @asynccontextmanager
        async def lifespan(app: Starlette):
            logger.info("HTTP server starting up")
            yield
            logger.info("HTTP server shutting down")

        return Starlette(
            routes=[
                Route("/health", endpoint=self._health, methods=["GET"]),
                Route("/sse", endpoint=self._handle_sse, methods=["GET"]),
                Mount("/messages/", app=self.sse_transport.handle_post_message),
            ],
            lifespan=lifespan,
        )

    async def _health(self, request: Request) -> JSONResponse:
        """Health check endpoint: {"status": "ok", ...}."""
        return JSONResponse(
            {
                "status": "ok",
                "transport": "http",
                "server": "yepcode-mcp-server",
                "version": __version__,
            }
        )

    def server_for(self, request: Request) -> YepCodeMcpServer:
        """MCP server for one connection, applying ``tools``/``options`` query overrides."""
        tools = request.query_params.get("tools")
        options = request.query_params.get("options")
        if tools is None and options is None:
            return self.mcp_server

        from yepcode_mcp.server import YepCodeMcpServer

        config = self.mcp_server.config.with_overrides(tools=tools, options=options)
        return YepCodeMcpServer(config, clients=self.mcp_server.clients)

    async def _handle_sse(self, request: Request) -> Response:
        """Run the MCP protocol over one SSE connection."""
        mcp_server = self.server_for(request)
        logger.info(f"SSE connection from {request.client}")
        async with self.sse_transport.connect_sse(
            request.scope, request.receive, request._send
        ) as (read_stream, write_stream):
            await mcp_server.server.run(
                read_stream,
                write_stream,
                mcp_server.server.create_initialization_options(),
            )

        logger.info(f"SSE connection closed from {request.client}")
        return Response()

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Run the HTTP server (blocks)."""
        import uvicorn

        bind_host = host or self.host
        bind_port = port or self.port
        logger.info(f"Starting HTTP server on {bind_host}:{bind_port}")
        uvicorn.run(
            self.app,
            host=bind_host,
            port=bind_port,
            log_level=self.mcp_server.config.server.log_level,
        )
