"""Data model for the review bridge.

Upstream JSON is loosely shaped: every field may be missing. Defaults are
applied in exactly one mapping function per entity (``map_review``,
``map_location``, ``map_business_profile``); the rest of the code works with
the dataclasses below and never reads raw upstream dicts.
"""

import logging
from dataclasses import asdict, dataclass, field
from datetime import UTC, datetime
from enum import Enum
from typing import Any, Generic, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")


def utc_now_iso() -> str:
    """Current UTC time as an ISO-8601 string with a ``Z`` suffix."""
    return datetime.now(UTC).isoformat().replace("+00:00", "Z")


# =============================================================================
# OAuth
# =============================================================================


@dataclass
class OAuthTokenSet:
    """OAuth credentials held by the token manager.

    ``expires_at`` is an absolute epoch-millisecond timestamp, always computed
    locally from ``expires_in`` at the moment the token was issued.
    """

    access_token: str
    expires_at: int
    refresh_token: str | None = None
    scope: str = ""
    token_type: str = "Bearer"

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "OAuthTokenSet":
        return cls(
            access_token=data["access_token"],
            expires_at=int(data.get("expires_at") or 0),
            refresh_token=data.get("refresh_token") or None,
            scope=data.get("scope") or "",
            token_type="Bearer",
        )


# =============================================================================
# Reviews
# =============================================================================


class StarRating(str, Enum):
    """Star rating as reported by upstream."""

    ONE = "ONE"
    TWO = "TWO"
    THREE = "THREE"
    FOUR = "FOUR"
    FIVE = "FIVE"
    UNSPECIFIED = "STAR_RATING_UNSPECIFIED"

    @property
    def numeric(self) -> int | None:
        """1..5 for a real rating, None when unspecified."""
        return _STAR_VALUES.get(self)


_STAR_VALUES = {
    StarRating.ONE: 1,
    StarRating.TWO: 2,
    StarRating.THREE: 3,
    StarRating.FOUR: 4,
    StarRating.FIVE: 5,
}


@dataclass
class Reviewer:
    display_name: str = "Anonymous"
    profile_photo_url: str | None = None
    is_anonymous: bool = False


@dataclass
class ReviewReply:
    comment: str
    update_time: str


@dataclass
class ReviewRecord:
    """A single customer review.

    ``review_reply`` being present is the only signal that a review has
    already been answered.
    """

    review_id: str
    star_rating: StarRating
    create_time: str
    update_time: str
    reviewer: Reviewer = field(default_factory=Reviewer)
    comment: str = ""
    review_reply: ReviewReply | None = None
    name: str = ""

    @property
    def has_reply(self) -> bool:
        return self.review_reply is not None

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        data["star_rating"] = self.star_rating.value
        return data


@dataclass
class ReviewPage:
    """One page of reviews plus the opaque upstream continuation cursor."""

    reviews: list[ReviewRecord]
    next_page_token: str | None = None
    total_size: int = 0

    def to_dict(self) -> dict[str, Any]:
        return {
            "reviews": [review.to_dict() for review in self.reviews],
            "next_page_token": self.next_page_token,
            "total_size": self.total_size,
        }


def map_review(raw: dict[str, Any]) -> ReviewRecord:
    """Map an upstream review entry to a ReviewRecord.

    Args:
        raw: One element of the upstream ``reviews`` array

    Returns:
        ReviewRecord with defaults applied
    """
    name = raw.get("name") or ""
    review_id = raw.get("reviewId") or (name.rsplit("/", 1)[-1] if name else "")

    raw_rating = raw.get("starRating")
    try:
        star_rating = StarRating(raw_rating)
    except ValueError:
        star_rating = StarRating.UNSPECIFIED
    if star_rating is StarRating.UNSPECIFIED:
        logger.warning(
            f"Review {review_id or '<unknown>'} has no usable star rating: {raw_rating!r}",
            extra={"review_id": review_id},
        )

    reviewer_raw = raw.get("reviewer") or {}
    reviewer = Reviewer(
        display_name=reviewer_raw.get("displayName") or "Anonymous",
        profile_photo_url=reviewer_raw.get("profilePhotoUrl"),
        is_anonymous=bool(reviewer_raw.get("isAnonymous", False)),
    )

    reply_raw = raw.get("reviewReply")
    reply = None
    if reply_raw is not None:
        reply = ReviewReply(
            comment=reply_raw.get("comment") or "",
            update_time=reply_raw.get("updateTime") or utc_now_iso(),
        )

    now = utc_now_iso()
    return ReviewRecord(
        review_id=review_id,
        name=name,
        reviewer=reviewer,
        star_rating=star_rating,
        comment=raw.get("comment") or "",
        create_time=raw.get("createTime") or now,
        update_time=raw.get("updateTime") or now,
        review_reply=reply,
    )


# =============================================================================
# Locations
# =============================================================================


@dataclass
class PostalAddress:
    address_lines: list[str] = field(default_factory=list)
    locality: str = ""
    administrative_area: str = ""
    postal_code: str = ""
    region_code: str = ""


@dataclass
class BusinessLocation:
    name: str
    location_name: str
    primary_phone: str | None = None
    website_uri: str | None = None
    address: PostalAddress | None = None
    account_name: str = ""

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass
class BusinessProfile(BusinessLocation):
    business_type: str = "business"
    language: str = "en"
    description: str = ""
    categories: list[str] = field(default_factory=list)


def map_location(raw: dict[str, Any], account_name: str = "") -> BusinessLocation:
    """Map an upstream location entry to a BusinessLocation.

    Args:
        raw: One element of the upstream ``locations`` array
        account_name: Account the location was listed under
    """
    return BusinessLocation(**_location_fields(raw), account_name=account_name)


def map_business_profile(raw: dict[str, Any]) -> BusinessProfile:
    """Map a detailed upstream location to a BusinessProfile.

    Categories come from ``categories.primaryCategory`` /
    ``categories.additionalCategories`` (business information v1) or from the
    top-level ``primaryCategory`` / ``additionalCategories`` fields of older
    payloads.
    """
    categories_raw = raw.get("categories") or {}
    primary = categories_raw.get("primaryCategory") or raw.get("primaryCategory") or {}
    additional = (
        categories_raw.get("additionalCategories") or raw.get("additionalCategories") or []
    )
    profile_raw = raw.get("profile") or {}

    return BusinessProfile(
        **_location_fields(raw),
        business_type=primary.get("displayName") or "business",
        language=raw.get("languageCode") or "en",
        description=profile_raw.get("description") or raw.get("title") or "",
        categories=[c["displayName"] for c in additional if c.get("displayName")],
    )


def _location_fields(raw: dict[str, Any]) -> dict[str, Any]:
    phones = raw.get("phoneNumbers") or {}
    # v1 returns {"primaryPhone": ...}; older payloads a list of {"phoneNumber": ...}
    if isinstance(phones, list):
        primary_phone = phones[0].get("phoneNumber") if phones else None
    else:
        primary_phone = phones.get("primaryPhone")

    address_raw = raw.get("storefrontAddress")
    address = None
    if address_raw:
        address = PostalAddress(
            address_lines=list(address_raw.get("addressLines") or []),
            locality=address_raw.get("locality") or "",
            administrative_area=address_raw.get("administrativeArea") or "",
            postal_code=address_raw.get("postalCode") or "",
            region_code=address_raw.get("regionCode") or "",
        )

    name = raw.get("name") or ""
    return {
        "name": name,
        "location_name": raw.get("title") or name,
        "primary_phone": primary_phone,
        "website_uri": raw.get("websiteUri"),
        "address": address,
    }


# =============================================================================
# Statistics
# =============================================================================


@dataclass
class RatingDistribution:
    ONE: int = 0
    TWO: int = 0
    THREE: int = 0
    FOUR: int = 0
    FIVE: int = 0


@dataclass
class DayStat:
    """Aggregated review metrics for one calendar date (YYYY-MM-DD)."""

    date: str
    total_review_count: int
    average_rating: float
    rating_distribution: RatingDistribution
    comments: list[str] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


# =============================================================================
# Service results
# =============================================================================


class ErrorCode(str, Enum):
    """Stable error tags returned in failed service results."""

    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    NOT_AUTHENTICATED = "NOT_AUTHENTICATED"
    NO_REFRESH_TOKEN = "NO_REFRESH_TOKEN"
    REFRESH_FAILED = "REFRESH_FAILED"
    EXCHANGE_FAILED = "EXCHANGE_FAILED"
    INVALID_LOCATION = "INVALID_LOCATION"
    NO_ACCOUNTS_FOUND = "NO_ACCOUNTS_FOUND"
    NO_LOCATIONS = "NO_LOCATIONS_ERROR"
    API_REQUEST_FAILED = "API_REQUEST_FAILED"
    PAGINATION_EXHAUSTED = "PAGINATION_EXHAUSTED"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    CONFIGURATION_ERROR = "CONFIGURATION_ERROR"
    LOCATIONS_FETCH_ERROR = "LOCATIONS_FETCH_ERROR"
    REVIEWS_FETCH_ERROR = "REVIEWS_FETCH_ERROR"
    STATS_FETCH_ERROR = "STATS_FETCH_ERROR"
    REPLY_POST_ERROR = "REPLY_POST_ERROR"
    PROFILE_FETCH_ERROR = "PROFILE_FETCH_ERROR"


@dataclass(frozen=True)
class ServiceResult(Generic[T]):
    """Outcome of a public service operation.

    Build with ``ok`` or ``fail``; check ``success`` before reading ``data``.
    """

    success: bool
    data: T | None = None
    error: str | None = None
    error_code: ErrorCode | None = None

    @classmethod
    def ok(cls, data: T) -> "ServiceResult[T]":
        return cls(success=True, data=data)

    @classmethod
    def fail(cls, error: str, error_code: ErrorCode | str) -> "ServiceResult[T]":
        return cls(success=False, error=error, error_code=ErrorCode(error_code))

    def to_dict(self) -> dict[str, Any]:
        """Render for an MCP tool response."""
        if not self.success:
            return {
                "success": False,
                "error": self.error,
                "error_code": self.error_code.value if self.error_code else None,
            }
        return {"success": True, "data": _to_plain(self.data)}


def _to_plain(value: Any) -> Any:
    if hasattr(value, "to_dict"):
        return value.to_dict()
    if isinstance(value, list):
        return [_to_plain(item) for item in value]
    if isinstance(value, dict):
        return {key: _to_plain(item) for key, item in value.items()}
    return value
