"""Google Business Profile review management over the Model Context Protocol.

Components:
    - auth: OAuth token lifecycle (TokenLifecycleManager)
    - api_client: Authenticated HTTP access (ApiRequestExecutor)
    - resolver: Short to fully-qualified location paths (LocationPathResolver)
    - paginator: Unreplied-review pagination (ReviewPaginator)
    - service: Public operations returning ServiceResult (ReviewService)

Usage:
    from src.review_mcp_bridge.service import ReviewService
    from src.review_mcp_bridge.server import build_bridge
"""
