"""MCP transport layer - HTTP/SSE support for hosted mode."""

from yepcode_mcp.transport.http_server import YepCodeHttpServer

__all__ = ["YepCodeHttpServer"]
