"""Google Business Profile Review MCP Bridge.

Note: Nothing is imported here so that test collection does not pull in the
MCP SDK or FastAPI. Use explicit imports:
`from src.review_mcp_bridge.service import ReviewService`
"""
