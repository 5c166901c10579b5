"""MCP stdio server exposing Kiwi flight search as the ``plan_trip`` tool."""

__version__ = "0.1.0"
