"""Resource path helpers for Business Profile locations and reviews.

A location is referenced either in short form (``locations/{id}``) or fully
qualified (``accounts/{accountId}/locations/{id}``). Only fully-qualified
paths can be used against the reviews API.
"""


def is_fully_qualified(location_ref: str) -> bool:
    return "accounts/" in location_ref


def build_full_location_path(location_ref: str, account_name: str) -> str:
    """Prefix a short location reference with its account path.

    Fully-qualified references are returned unchanged.
    """
    if is_fully_qualified(location_ref):
        return location_ref
    return f"{account_name.rstrip('/')}/{location_ref.lstrip('/')}"


def build_review_path(full_location_path: str, review_id: str) -> str:
    """Path of a single review; a review id that is already a path is kept."""
    if "/reviews/" in review_id:
        return review_id
    return f"{full_location_path}/reviews/{review_id}"

