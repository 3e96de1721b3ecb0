"""Google Business Profile Review MCP Bridge Server.

FastMCP server exposing review management tools:
- list_locations, get_business_profile
- get_reviews, get_review_day_stats, post_reply
- auth_status

Runs over stdio (default) or streamable HTTP behind FastAPI, which also
serves the OAuth login and callback endpoints.
"""

import logging
from contextlib import asynccontextmanager
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, RedirectResponse
from mcp.server.fastmcp import FastMCP

from src.exceptions import ExchangeFailedError
from src.review_mcp_bridge.auth import TokenLifecycleManager
from src.review_mcp_bridge.config import BridgeConfig
from src.review_mcp_bridge.service import ReviewService
from src.review_mcp_bridge.token_store import TokenStore
from src.review_mcp_bridge.tools import register_location_tools, register_review_tools

logger = logging.getLogger(__name__)

INSTRUCTIONS = (
    "Tools for reading and replying to Google Business Profile reviews. "
    "Use list_locations to find location names, get_reviews to fetch reviews "
    "that still need a reply, and post_reply to answer them."
)


def build_token_manager(config: BridgeConfig) -> TokenLifecycleManager:
    """Create the token manager and restore any persisted tokens."""
    token_manager = TokenLifecycleManager(config, TokenStore(config.token_file))
    if not token_manager.restore():
        logger.warning("No OAuth tokens available; complete the OAuth flow before using tools")
    return token_manager


def create_mcp_server(service: ReviewService, config: BridgeConfig) -> FastMCP:
    """Create the FastMCP server with all tools registered.

    Args:
        service: Review service backing the tools
        config: Bridge configuration

    Returns:
        FastMCP server instance
    """
    mcp = FastMCP(name=config.server_name, instructions=INSTRUCTIONS)

    register_location_tools(mcp, service)
    register_review_tools(mcp, service)

    @mcp.tool()
    async def auth_status() -> dict[str, Any]:
        """Check Google OAuth authentication status.

        Returns:
            Whether a valid token is held, and whether it can be refreshed
        """
        return {**service.auth_status(), "scopes": config.scopes}

    logger.info("Registered review bridge MCP tools")
    return mcp


def create_app(config: BridgeConfig, service: ReviewService, mcp: FastMCP) -> FastAPI:
    """Create FastAPI application with the MCP server mounted at /mcp.

    Returns:
        FastAPI application instance
    """
    mcp_app = mcp.streamable_http_app()
    token_manager = service.token_manager

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Starting Google Business Profile review bridge")
        logger.info(f"Config status: {config.to_dict()}")
        async with mcp.session_manager.run():
            yield
        logger.info("Shutting down Google Business Profile review bridge")

    app = FastAPI(
        title="Google Business Profile Review MCP Bridge",
        version=config.server_version,
        lifespan=lifespan,
    )

    @app.get("/health")
    async def health_check():
        return {
            "status": "healthy",
            "service": config.server_name,
            "version": config.server_version,
            "authenticated": token_manager.is_valid(),
        }

    @app.get("/auth/login")
    async def auth_login():
        return RedirectResponse(token_manager.build_authorization_url())

    @app.get("/auth/callback")
    async def auth_callback(code: str = "", error: str = ""):
        if error or not code:
            return JSONResponse(
                status_code=400,
                content={"success": False, "error": error or "Authorization code not provided"},
            )
        try:
            await token_manager.exchange_code(code)
        except ExchangeFailedError as e:
            return JSONResponse(status_code=400, content={"success": False, "error": str(e)})
        return {"success": True, "message": "Authentication successful"}

    @app.middleware("http")
    async def auth_middleware(request: Request, call_next):
        if request.url.path.startswith("/mcp") and config.bridge_token:
            auth_header = request.headers.get("Authorization", "")
            if not auth_header.startswith("Bearer "):
                return JSONResponse(
                    status_code=401,
                    content={"detail": "Missing Authorization header"},
                )
            if auth_header[7:] != config.bridge_token:
                return JSONResponse(
                    status_code=401,
                    content={"detail": "Invalid bridge token"},
                )
        return await call_next(request)

    # The MCP app serves its own /mcp route; explicit routes above take precedence
    app.mount("/", mcp_app)

    return app


def build_bridge(config: BridgeConfig) -> tuple[ReviewService, FastMCP]:
    """Wire token manager, service and MCP server from configuration."""
    token_manager = build_token_manager(config)
    service = ReviewService.create(
        token_manager, timeout=config.http_timeout, max_pages=config.max_pages
    )
    return service, create_mcp_server(service, config)


def run(config: BridgeConfig) -> None:
    """Run the bridge with the configured transport (blocking)."""
    service, mcp = build_bridge(config)

    if config.transport == "stdio":
        logger.info("Starting MCP server with STDIO transport")
        mcp.run(transport="stdio")
        return

    import uvicorn

    app = create_app(config, service, mcp)
    logger.info(f"MCP endpoint available at http://{config.host}:{config.port}/mcp")
    logger.info(f"OAuth callback URL: http://{config.host}:{config.port}/auth/callback")
    uvicorn.run(app, host=config.host, port=config.port, log_config=None)
