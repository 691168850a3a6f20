"""YepCode MCP Server - Model Context Protocol interface for the YepCode platform."""

__version__ = "1.0.0"
