import math

from sqlalchemy.orm import Query

from app.schemas.common import PageQuery


def page_offset(page: int, limit: int) -> int:
    return (page - 1) * limit


def total_pages(total: int, limit: int) -> int:
    return math.ceil(total / limit) if total else 0


def paginate(query: Query, params: PageQuery, *order_by) -> tuple[list, dict]:
    """
    Run the count and the page slice for ``query`` under the same filters.

    Returns ``(rows, pagination)`` where pagination is the envelope block
    ``{page, limit, total, totalPages}``. Grouped queries are counted per group.
    """
    total = query.order_by(None).count()

    rows = (
        query.order_by(*order_by)
        .limit(params.limit)
        .offset(page_offset(params.page, params.limit))
        .all()
    )

    pagination = {
        "page": params.page,
        "limit": params.limit,
        "total": total,
        "total_pages": total_pages(total, params.limit),
    }
    return rows, pagination


def contains(column, term: str):
    """Case-insensitive substring match."""
    return column.icontains(term, autoescape=True)
