"""Cursor pagination over the upstream review listing.

Two read paths share one page walker:

- ``get_unreplied_reviews`` returns the next page that contains at least one
  review without a reply, skipping over pages where every review has already
  been answered. Callers never have to loop over sparse pages themselves.
- ``get_all_reviews`` drains every page without filtering (statistics need
  replied reviews too).

Cursors are opaque: they are only ever passed back to upstream unchanged.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import aclosing

from src.exceptions import PaginationExhaustedError
from src.review_mcp_bridge.api_client import ApiRequestExecutor
from src.review_mcp_bridge.constants import DEFAULT_MAX_PAGES, DEFAULT_PAGE_SIZE
from src.review_mcp_bridge.models import ReviewPage, ReviewRecord, map_review
from src.review_mcp_bridge.resolver import LocationPathResolver

logger = logging.getLogger(__name__)


class ReviewPaginator:
    """Walks review pages for a location.

    Attributes:
        executor: Authenticated request surface
        resolver: Location path resolver
        max_pages: Upstream pages one call may consume before giving up
    """

    def __init__(
        self,
        executor: ApiRequestExecutor,
        resolver: LocationPathResolver,
        max_pages: int = DEFAULT_MAX_PAGES,
    ):
        self.executor = executor
        self.resolver = resolver
        self.max_pages = max_pages

    async def fetch_page(
        self,
        full_location_path: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: str | None = None,
    ) -> ReviewPage:
        """Fetch and map a single upstream page."""
        data = await self.executor.get(
            f"{full_location_path}/reviews",
            params={"pageSize": page_size, "pageToken": page_token},
        )
        reviews = [map_review(raw) for raw in data.get("reviews") or []]
        return ReviewPage(
            reviews=reviews,
            next_page_token=data.get("nextPageToken") or None,
            total_size=data.get("totalReviewCount") or len(reviews),
        )

    async def iter_pages(
        self,
        full_location_path: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: str | None = None,
    ) -> AsyncIterator[ReviewPage]:
        """Yield pages in order until upstream stops issuing cursors.

        Stops early (without error) if upstream hands back a cursor already
        used in this walk.

        Raises:
            PaginationExhaustedError: After ``max_pages`` pages with a cursor
                still pending
        """
        seen = {page_token}
        cursor = page_token

        for _ in range(self.max_pages):
            page = await self.fetch_page(full_location_path, page_size, cursor)
            yield page

            cursor = page.next_page_token
            if not cursor:
                return
            if cursor in seen:
                logger.warning(
                    "Upstream repeated a page cursor; treating reviews as exhausted",
                    extra={"location": full_location_path},
                )
                return
            seen.add(cursor)

        raise PaginationExhaustedError(
            f"Review pagination exceeded {self.max_pages} pages for {full_location_path}",
            max_pages=self.max_pages,
        )

    async def get_unreplied_reviews(
        self,
        location_ref: str,
        page_size: int = DEFAULT_PAGE_SIZE,
        page_token: str | None = None,
    ) -> ReviewPage:
        """Return the next page of reviews that have no reply yet.

        The returned list is empty only when upstream has nothing further to
        give; ``next_page_token`` is whatever upstream returned with that page.
        """
        full_path = await self.resolver.resolve(location_ref)
        total_size = 0

        async with aclosing(self.iter_pages(full_path, page_size, page_token)) as pages:
            async for page in pages:
                total_size = page.total_size
                unreplied = [review for review in page.reviews if not review.has_reply]
                if unreplied or not page.next_page_token:
                    return ReviewPage(unreplied, page.next_page_token, page.total_size)
                logger.debug(
                    "No unreplied reviews on this page, fetching next page",
                    extra={"location": full_path},
                )

        return ReviewPage([], None, total_size)

    async def get_all_reviews(
        self,
        location_ref: str,
        page_size: int = DEFAULT_PAGE_SIZE,
    ) -> list[ReviewRecord]:
        """Collect every review of a location, replied or not."""
        full_path = await self.resolver.resolve(location_ref)
        reviews: list[ReviewRecord] = []
        async for page in self.iter_pages(full_path, page_size):
            reviews.extend(page.reviews)
        return reviews
