"""Per-day review statistics."""

import math
from collections import defaultdict

from src.review_mcp_bridge.models import DayStat, RatingDistribution, ReviewRecord


def _round_half_up(value: float, digits: int = 1) -> float:
    factor = 10**digits
    return math.floor(value * factor + 0.5) / factor


def aggregate_by_day(reviews: list[ReviewRecord]) -> list[DayStat]:
    """Group reviews by creation date and compute per-day metrics.

    Reviews without a usable star rating count toward the day's total but
    not toward its average or distribution.

    Args:
        reviews: Every review of a location, replied or not

    Returns:
        One DayStat per date, most recent date first
    """
    by_date: dict[str, list[ReviewRecord]] = defaultdict(list)
    for review in reviews:
        by_date[review.create_time[:10]].append(review)

    day_stats = []
    for date, day_reviews in by_date.items():
        distribution = RatingDistribution()
        ratings = []
        for review in day_reviews:
            value = review.star_rating.numeric
            if value is None:
                continue
            ratings.append(value)
            bucket = review.star_rating.value
            setattr(distribution, bucket, getattr(distribution, bucket) + 1)

        average = sum(ratings) / len(ratings) if ratings else 0.0
        day_stats.append(
            DayStat(
                date=date,
                total_review_count=len(day_reviews),
                average_rating=_round_half_up(average),
                rating_distribution=distribution,
                comments=[r.comment for r in day_reviews if r.comment and r.comment.strip()],
            )
        )

    # Fixed-width ISO dates sort correctly as strings
    day_stats.sort(key=lambda stat: stat.date, reverse=True)
    return day_stats
