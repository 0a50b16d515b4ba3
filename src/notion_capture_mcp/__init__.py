"""Notion capture MCP server — turn raw notes and files into Notion pages."""

__version__ = "0.1.0"
