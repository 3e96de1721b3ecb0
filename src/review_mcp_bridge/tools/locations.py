"""Business location MCP tools.

Provides:
- list_locations: List every location across the user's accounts
- get_business_profile: Profile details for one location
- gbp://business-profile resource: Profile of the default location
"""

import json
import logging
from typing import Any

from src.review_mcp_bridge.service import ReviewService

logger = logging.getLogger(__name__)

BUSINESS_PROFILE_URI = "gbp://business-profile"


def register_location_tools(mcp: Any, service: ReviewService) -> None:
    """Register location tools and resources with the MCP server.

    Args:
        mcp: FastMCP server instance
        service: Review service backing the tools
    """

    @mcp.tool()
    async def list_locations() -> dict[str, Any]:
        """List all Google Business Profile locations for the authenticated account.

        Returns:
            Locations with their resource names, titles, phones and addresses
        """
        logger.info("Executing list_locations tool", extra={"operation": "list_locations"})
        result = await service.list_locations()
        return result.to_dict()

    @mcp.tool()
    async def get_business_profile(location_name: str = "") -> dict[str, Any]:
        """Get business profile details for a location.

        Args:
            location_name: Location resource name (e.g. "locations/456" or
                "accounts/123/locations/456"); empty uses the first location

        Returns:
            Business profile with type, language, description and categories
        """
        result = await service.get_business_profile(location_name or None)
        return result.to_dict()

    @mcp.resource(
        BUSINESS_PROFILE_URI,
        name="business_profile",
        description="Business profile of the default Google Business Profile location",
        mime_type="application/json",
    )
    async def business_profile_resource() -> str:
        result = await service.get_business_profile()
        return json.dumps(result.to_dict(), indent=2)
