"""Resolution of short location references to fully-qualified paths."""

import logging

from src.exceptions import ValidationError
from src.review_mcp_bridge.api_client import ApiRequestExecutor
from src.review_mcp_bridge.paths import build_full_location_path, is_fully_qualified

logger = logging.getLogger(__name__)


class LocationPathResolver:
    """Turns ``locations/{id}`` into ``accounts/{accountId}/locations/{id}``.

    Fully-qualified input is returned unchanged without any network call.
    Short input always consults the account list (first account only); the
    result is not cached.
    """

    def __init__(self, executor: ApiRequestExecutor):
        self.executor = executor

    async def resolve(self, location_ref: str) -> str:
        """Resolve a location reference.

        Args:
            location_ref: Short or fully-qualified location reference

        Returns:
            Fully-qualified location path

        Raises:
            ValidationError: If the reference is empty
            NoAccountsFoundError: If the user has no accounts
        """
        location_ref = (location_ref or "").strip()
        if not location_ref:
            raise ValidationError("locationName is required", field="location_name")

        if is_fully_qualified(location_ref):
            return location_ref

        account = await self.executor.get_first_account()
        full_path = build_full_location_path(location_ref, account["name"])
        logger.debug(
            f"Path resolved: {location_ref} -> {full_path}",
            extra={"location": full_path},
        )
        return full_path
