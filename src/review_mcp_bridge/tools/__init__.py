"""MCP tool registration for the review bridge."""

from src.review_mcp_bridge.tools.locations import register_location_tools
from src.review_mcp_bridge.tools.reviews import register_review_tools

__all__ = ["register_location_tools", "register_review_tools"]
