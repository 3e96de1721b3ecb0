"""Review management service.

``ReviewService`` is the public surface consumed by the MCP tools. Every
operation returns a ``ServiceResult``; errors are converted into failed
results with a stable error code and never propagate to the caller.
"""

import logging
from typing import Any

from src.exceptions import APIClientError, ValidationError
from src.review_mcp_bridge.api_client import ApiRequestExecutor
from src.review_mcp_bridge.auth import TokenLifecycleManager
from src.review_mcp_bridge.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, MAX_REPLY_LENGTH
from src.review_mcp_bridge.models import (
    BusinessLocation,
    BusinessProfile,
    DayStat,
    ErrorCode,
    ReviewPage,
    ServiceResult,
    map_business_profile,
    map_location,
    utc_now_iso,
)
from src.review_mcp_bridge.paginator import ReviewPaginator
from src.review_mcp_bridge.paths import build_full_location_path, build_review_path
from src.review_mcp_bridge.resolver import LocationPathResolver
from src.review_mcp_bridge.stats import aggregate_by_day

logger = logging.getLogger(__name__)


def _failure(exc: Exception, default_code: ErrorCode, operation: str) -> ServiceResult[Any]:
    """Convert an exception into a failed result."""
    if isinstance(exc, APIClientError):
        logger.error(f"{operation} failed: {exc}", extra={"operation": operation})
        return ServiceResult.fail(str(exc), exc.error_code)
    logger.exception(f"{operation} failed unexpectedly", extra={"operation": operation})
    return ServiceResult.fail(str(exc) or type(exc).__name__, default_code)


class ReviewService:
    """Google Business Profile review operations.

    Example:
        >>> service = ReviewService.create(token_manager, max_pages=100)
        >>> result = await service.get_reviews("locations/456")
        >>> if result.success:
        ...     for review in result.data.reviews:
        ...         print(review.review_id)
    """

    def __init__(
        self,
        token_manager: TokenLifecycleManager,
        executor: ApiRequestExecutor,
        resolver: LocationPathResolver,
        paginator: ReviewPaginator,
    ):
        self.token_manager = token_manager
        self.executor = executor
        self.resolver = resolver
        self.paginator = paginator

    @classmethod
    def create(
        cls,
        token_manager: TokenLifecycleManager,
        timeout: float = 30.0,
        max_pages: int | None = None,
    ) -> "ReviewService":
        """Wire the default executor, resolver and paginator."""
        executor = ApiRequestExecutor(token_manager, timeout=timeout)
        resolver = LocationPathResolver(executor)
        paginator = ReviewPaginator(executor, resolver)
        if max_pages is not None:
            paginator.max_pages = max_pages
        return cls(token_manager, executor, resolver, paginator)

    async def list_locations(self) -> ServiceResult[dict[str, Any]]:
        """List locations across every account of the authenticated user.

        A failure for one account is logged and that account is skipped.
        """
        try:
            accounts = await self.executor.list_accounts()
            if not accounts:
                return ServiceResult.fail(
                    "No business accounts found. Please ensure your Google account "
                    "has a Google Business Profile.",
                    ErrorCode.NO_ACCOUNTS_FOUND,
                )

            locations: list[BusinessLocation] = []
            failed_accounts = 0
            for account in accounts:
                account_name = account.get("name", "")
                try:
                    raw_locations = await self.executor.list_account_locations(account_name)
                except APIClientError as e:
                    failed_accounts += 1
                    logger.warning(f"Error fetching locations for account {account_name}: {e}")
                    continue
                locations.extend(map_location(raw, account_name) for raw in raw_locations)

            if failed_accounts == len(accounts):
                return ServiceResult.fail(
                    "Failed to fetch locations for every business account",
                    ErrorCode.LOCATIONS_FETCH_ERROR,
                )

            logger.info(f"Found {len(locations)} business location(s) total")
            return ServiceResult.ok({"locations": locations, "next_page_token": None})

        except Exception as e:
            return _failure(e, ErrorCode.LOCATIONS_FETCH_ERROR, "list_locations")

    async def get_reviews(
        self,
        location_ref: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: str | None = None,
    ) -> ServiceResult[ReviewPage]:
        """Get the next page of reviews that still need a reply."""
        try:
            if not 1 <= page_size <= MAX_PAGE_SIZE:
                raise ValidationError(
                    f"pageSize must be between 1 and {MAX_PAGE_SIZE}",
                    field="page_size",
                    value=page_size,
                )

            page = await self.paginator.get_unreplied_reviews(
                location_ref, page_size, page_token or None
            )
            logger.info(
                f"Fetched {len(page.reviews)} unreplied review(s)",
                extra={"location": location_ref},
            )
            return ServiceResult.ok(page)

        except Exception as e:
            return _failure(e, ErrorCode.REVIEWS_FETCH_ERROR, "get_reviews")

    async def get_review_stats(self, location_ref: str) -> ServiceResult[list[DayStat]]:
        """Per-day statistics over every review of a location."""
        try:
            reviews = await self.paginator.get_all_reviews(location_ref)
            day_stats = aggregate_by_day(reviews)
            logger.info(
                f"Generated stats for {len(day_stats)} days from {len(reviews)} reviews",
                extra={"location": location_ref},
            )
            return ServiceResult.ok(day_stats)

        except Exception as e:
            return _failure(e, ErrorCode.STATS_FETCH_ERROR, "get_review_stats")

    async def post_reply(
        self,
        location_ref: str,
        review_id: str,
        reply_text: str,
    ) -> ServiceResult[dict[str, Any]]:
        """Post (or overwrite) the owner reply to a review.

        Input is validated before any network call.
        """
        try:
            if not (review_id or "").strip():
                raise ValidationError("reviewId is required and cannot be empty", field="review_id")
            if not (reply_text or "").strip():
                raise ValidationError("replyText is required and cannot be empty", field="reply_text")
            if len(reply_text) > MAX_REPLY_LENGTH:
                raise ValidationError(
                    f"replyText cannot exceed {MAX_REPLY_LENGTH} characters "
                    f"(got {len(reply_text)})",
                    field="reply_text",
                )

            full_path = await self.resolver.resolve(location_ref)
            review_path = build_review_path(full_path, review_id.strip())
            response = await self.executor.put(f"{review_path}/reply", {"comment": reply_text})

            logger.info("Reply posted successfully", extra={"review_id": review_id})
            return ServiceResult.ok(
                {
                    "reply_id": review_id,
                    "posted_at": response.get("updateTime") or utc_now_iso(),
                }
            )

        except Exception as e:
            return _failure(e, ErrorCode.REPLY_POST_ERROR, "post_reply")

    async def get_business_profile(
        self, location_ref: str | None = None
    ) -> ServiceResult[BusinessProfile]:
        """Business profile of a location, or of the first location found."""
        try:
            target = location_ref
            if not target:
                locations_result = await self.list_locations()
                if not locations_result.success:
                    return ServiceResult.fail(
                        locations_result.error or "No business locations found",
                        locations_result.error_code or ErrorCode.NO_LOCATIONS,
                    )
                locations = locations_result.data["locations"]
                if not locations:
                    return ServiceResult.fail(
                        "No business locations found", ErrorCode.NO_LOCATIONS
                    )
                first = locations[0]
                if first.account_name:
                    target = build_full_location_path(first.name, first.account_name)
                else:
                    target = first.name

            full_path = await self.resolver.resolve(target)
            raw = await self.executor.get_location(full_path)
            profile = map_business_profile(raw)
            if not profile.name:
                profile.name = full_path

            logger.info("Business profile fetched", extra={"location": full_path})
            return ServiceResult.ok(profile)

        except Exception as e:
            return _failure(e, ErrorCode.PROFILE_FETCH_ERROR, "get_business_profile")

    def auth_status(self) -> dict[str, Any]:
        return self.token_manager.status()
