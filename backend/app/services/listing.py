"""
In-memory filtering, sorting and pagination over fully loaded record lists.

`Model.all()` has no LIMIT; list endpoints load every row and page the
result here. Used by UserService.list_users and PostService.list_posts.
"""

import math
from typing import Any, Iterable, List, Optional, Sequence, Tuple

from app.orm import Record
from app.schemas.common import Pagination


def search(records: Iterable[Record], term: Optional[str], fields: Sequence[str]) -> List[Record]:
    """Case-insensitive substring match over any of `fields`."""
    records = list(records)
    if not term:
        return records
    needle = term.lower()
    return [
        record for record in records
        if any(needle in str(record.get_attribute(f) or "").lower() for f in fields)
    ]


def filter_equal(records: Iterable[Record], field: str, value: Any) -> List[Record]:
    """Keep records whose `field` equals `value`; None means no filter."""
    records = list(records)
    if value is None:
        return records
    return [record for record in records if record.get_attribute(field) == value]


def sort_records(records: Iterable[Record], key: str, order: str = "asc") -> List[Record]:
    """Sort by one attribute; rows missing it go last in either direction."""
    records = list(records)
    present = [r for r in records if r.get_attribute(key) is not None]
    missing = [r for r in records if r.get_attribute(key) is None]
    present.sort(key=lambda r: r.get_attribute(key), reverse=order == "desc")
    return present + missing


def paginate(records: Sequence[Record], page: int, limit: int) -> Tuple[List[Record], Pagination]:
    """
    Slice one page out of `records` (pages start at 1).

    Returns:
        (page items, Pagination block for the response envelope). A page
        past the end yields an empty list with the real totals.
    """
    total = len(records)
    start = (page - 1) * limit
    end = start + limit
    pagination = Pagination(
        current_page=page,
        per_page=limit,
        total=total,
        total_pages=math.ceil(total / limit),
        has_next_page=end < total,
        has_prev_page=page > 1,
    )
    return list(records[start:end]), pagination
