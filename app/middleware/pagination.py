"""Pagination, filtering and sorting for list endpoints.

Routes declare which columns may be sorted on and which columns free-text
search covers; the raw query string is normalized into a PageRequest and a
FilterSet before any store call is made.

    @router.get("")
    async def list_things(
        page: PageRequest = Depends(pagination_params(["created_at", "name"])),
        filters: FilterSet = Depends(filter_params),
        db: Client = Depends(get_supabase),
    ):
        return await paginate_results(
            db.table("things").select("*"),
            db.table("things").select("id", count="exact"),
            page, filters, search_fields=["name"],
        )
"""
import re
from collections.abc import Mapping, Sequence
from datetime import datetime, timezone
from fastapi import Request
from loguru import logger
from app.database import run_query
from app.errors import ValidationError
from app.models.shared import FilterSet, PageRequest, PageResult, PaginationMeta

DEFAULT_LIMIT = 20
MAX_LIMIT = 100
DEFAULT_OFFSET = 0
DEFAULT_SORT_FIELDS = ["created_at", "updated_at", "id"]
VALID_ORDERS = ("asc", "desc")

# Characters that must be double-quoted inside a PostgREST or=() expression
_RESERVED_FILTER_CHARS = set(',.:()"\\')
_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")


def parse_int_or_default(value: str | None, default: int) -> int:
    """Lenient integer parse: leading digits win, anything else (or 0) is the default.

    "25" -> 25, "10abc" -> 10, "abc" -> default, "" -> default, "0" -> default.
    """
    if value is None:
        return default
    match = _LEADING_INT.match(str(value))
    if not match:
        return default
    return int(match.group(1)) or default


def parse_pagination_params(
    raw_query: Mapping[str, str],
    allowed_sort_fields: Sequence[str] | None = None,
) -> PageRequest:
    """Normalize limit/offset/page/sort/order. Raises ValidationError on bad sort/order."""
    limit = parse_int_or_default(raw_query.get("limit"), DEFAULT_LIMIT)
    if limit < 1:
        limit = DEFAULT_LIMIT
    if limit > MAX_LIMIT:
        limit = MAX_LIMIT

    raw_page = raw_query.get("page")
    if raw_page:
        page = parse_int_or_default(raw_page, 1)
        if page < 1:
            page = 1
        offset = (page - 1) * limit
    else:
        offset = parse_int_or_default(raw_query.get("offset"), DEFAULT_OFFSET)
        if offset < 0:
            offset = DEFAULT_OFFSET
        page = offset // limit + 1

    sort_fields = list(allowed_sort_fields or DEFAULT_SORT_FIELDS)
    sort = raw_query.get("sort") or None
    order = raw_query.get("order") or None

    if sort and sort not in sort_fields:
        logger.warning(f"Rejected sort field {sort!r}")
        raise ValidationError(
            "Validation failed",
            details=[f"Invalid sort field. Valid options: {', '.join(sort_fields)}"],
        )
    if order and order.lower() not in VALID_ORDERS:
        logger.warning(f"Rejected order value {order!r}")
        raise ValidationError(
            "Validation failed",
            details=["Invalid order value. Valid options: asc, desc"],
        )

    return PageRequest(
        limit=limit,
        offset=offset,
        page=page,
        sort=sort or "created_at",
        order=(order or "desc").lower(),
    )


def _to_iso_utc(value: str) -> str | None:
    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc).isoformat()


def parse_filter_params(raw_query: Mapping[str, str]) -> FilterSet:
    """Pick the recognized filter keys. Unknown keys and bad dates are ignored."""
    filters: dict[str, str] = {}

    for key in ("status", "created_by", "assigned_to"):
        if raw_query.get(key):
            filters[key] = raw_query[key]

    search = (raw_query.get("search") or "").strip()
    if search:
        filters["search"] = search

    for key in ("date_from", "date_to"):
        if raw_query.get(key):
            parsed = _to_iso_utc(raw_query[key])
            if parsed:
                filters[key] = parsed

    return FilterSet(**filters)


def _ilike_pattern(term: str) -> str:
    pattern = f"%{term}%"
    if any(c in _RESERVED_FILTER_CHARS for c in pattern):
        escaped = pattern.replace("\\", "\\\\").replace('"', '\\"')
        return f'"{escaped}"'
    return pattern


def apply_filters(query, filters: FilterSet, search_fields: Sequence[str] = ()):
    """Apply the filter predicates to a postgrest request builder."""
    if filters.status:
        query = query.eq("status", filters.status)

    if filters.search and search_fields:
        pattern = _ilike_pattern(filters.search)
        query = query.or_(",".join(f"{field}.ilike.{pattern}" for field in search_fields))

    if filters.date_from:
        query = query.gte("created_at", filters.date_from)

    if filters.date_to:
        query = query.lte("created_at", filters.date_to)

    if filters.created_by:
        query = query.eq("created_by", filters.created_by)

    if filters.assigned_to:
        query = query.eq("assigned_to", filters.assigned_to)

    return query


def build_paginated_query(query, page: PageRequest):
    """Apply ordering and the inclusive [offset, offset+limit-1] range."""
    query = query.order(page.sort, desc=page.order == "desc")
    return query.range(page.offset, page.offset + page.limit - 1)


def create_pagination_meta(total: int, limit: int, offset: int) -> PaginationMeta:
    return PaginationMeta(
        total=total,
        limit=limit,
        offset=offset,
        page=offset // limit + 1,
        total_pages=-(-total // limit),
        has_next=offset + limit < total,
        has_previous=offset > 0,
    )


async def paginate_results(
    data_query,
    count_query,
    page: PageRequest,
    filters: FilterSet,
    search_fields: Sequence[str] = (),
) -> PageResult:
    """Run the filtered count, then the filtered, ordered and ranged data query.

    Both queries must be distinct request builders. Store failures surface
    as DatabaseError from either phase.
    """
    data_query = apply_filters(data_query, filters, search_fields)
    count_query = apply_filters(count_query, filters, search_fields)

    count_result = await run_query(count_query, action="count")
    total = count_result.count or 0

    data_query = build_paginated_query(data_query, page)
    data_result = await run_query(data_query, action="select")

    return PageResult(
        data=data_result.data or [],
        pagination=create_pagination_meta(total, page.limit, page.offset),
        filters=filters.model_dump(exclude_none=True),
    )


def pagination_params(allowed_sort_fields: Sequence[str] | None = None):
    """FastAPI dependency factory binding the sortable columns of a listing."""

    def dependency(request: Request) -> PageRequest:
        return parse_pagination_params(request.query_params, allowed_sort_fields)

    return dependency


def filter_params(request: Request) -> FilterSet:
    return parse_filter_params(request.query_params)
