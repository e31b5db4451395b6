# medistore/utils/pagination.py
from dataclasses import dataclass

from medistore.domain.errors import ErrorKind, ServiceError
from medistore.utils.settings import DEFAULT_PAGE_LIMIT, MAX_PAGE_LIMIT

SORT_ORDERS = ("asc", "desc")


@dataclass(frozen=True)
class Page:
    page: int
    limit: int
    skip: int
    sort_by: str
    sort_order: str

    def meta(self, total: int) -> dict:
        return {"page": self.page, "limit": self.limit, "total": total}


def paginate(
    page: int | None = None,
    limit: int | None = None,
    sort_by: str | None = None,
    sort_order: str | None = None,
    allowed_sort: tuple[str, ...] = ("createdAt",),
) -> Page:
    """
    Normalizes paging/sorting query params.
    Missing or non-positive page/limit fall back to defaults, limit is capped.
    """
    page = page if page and page > 0 else 1
    limit = limit if limit and limit > 0 else DEFAULT_PAGE_LIMIT
    limit = min(limit, MAX_PAGE_LIMIT)

    sort_by = sort_by or allowed_sort[0]
    if sort_by not in allowed_sort:
        raise ServiceError(
            ErrorKind.VALIDATION,
            f"sortBy must be one of: {', '.join(allowed_sort)}",
        )

    sort_order = (sort_order or "desc").lower()
    if sort_order not in SORT_ORDERS:
        raise ServiceError(ErrorKind.VALIDATION, "sortOrder must be 'asc' or 'desc'")

    return Page(
        page=page,
        limit=limit,
        skip=(page - 1) * limit,
        sort_by=sort_by,
        sort_order=sort_order,
    )
