"""Review MCP tools.

Provides:
- get_reviews: Next page of reviews still awaiting a reply
- get_review_day_stats: Per-day review statistics for a location
- post_reply: Post a reply to a review
"""

import logging
from typing import Any

from src.review_mcp_bridge.constants import DEFAULT_PAGE_SIZE
from src.review_mcp_bridge.service import ReviewService

logger = logging.getLogger(__name__)


def register_review_tools(mcp: Any, service: ReviewService) -> None:
    """Register review tools with the MCP server.

    Args:
        mcp: FastMCP server instance
        service: Review service backing the tools
    """

    @mcp.tool()
    async def get_reviews(
        location_name: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: str = "",
    ) -> dict[str, Any]:
        """Fetch reviews that have not been replied to yet.

        Pages where every review already has a reply are skipped
        automatically.

        Args:
            location_name: Location resource name (e.g. "accounts/123/locations/456")
            page_size: Number of reviews per upstream page (max 50)
            page_token: Token from a previous call's next_page_token

        Returns:
            Unreplied reviews, next_page_token and total_size
        """
        logger.info("Executing get_reviews tool", extra={"location": location_name})
        result = await service.get_reviews(location_name, page_size, page_token or None)
        return result.to_dict()

    @mcp.tool()
    async def get_review_day_stats(location_name: str) -> dict[str, Any]:
        """Get review statistics grouped by day, most recent day first.

        Args:
            location_name: Location resource name

        Returns:
            Per-day review count, average rating, rating distribution and comments
        """
        logger.info("Executing get_review_day_stats tool", extra={"location": location_name})
        result = await service.get_review_stats(location_name)
        return result.to_dict()

    @mcp.tool()
    async def post_reply(location_name: str, review_id: str, reply_text: str) -> dict[str, Any]:
        """Post a reply to a customer review.

        Args:
            location_name: Location resource name
            review_id: ID of the review to reply to
            reply_text: Reply text (max 4096 characters)

        Returns:
            reply_id and posted_at on success
        """
        logger.info(
            "Executing post_reply tool",
            extra={"location": location_name, "review_id": review_id},
        )
        result = await service.post_reply(location_name, review_id, reply_text)
        return result.to_dict()
