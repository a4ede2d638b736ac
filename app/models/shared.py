from pydantic import BaseModel
from typing import Literal
from uuid import UUID


class PageRequest(BaseModel):
    """Normalized limit/offset/page/sort/order directive for a listing query."""
    limit: int = 20
    offset: int = 0
    page: int = 1
    sort: str = "created_at"
    order: Literal["asc", "desc"] = "desc"


class FilterSet(BaseModel):
    """Recognized filter parameters. Absent filters stay None."""
    status: str | None = None
    search: str | None = None
    date_from: str | None = None
    date_to: str | None = None
    created_by: str | None = None
    assigned_to: str | None = None


class PaginationMeta(BaseModel):
    total: int
    limit: int
    offset: int
    page: int
    total_pages: int
    has_next: bool
    has_previous: bool


class PageResult(BaseModel):
    data: list
    pagination: PaginationMeta
    filters: dict


class StateTransitionCreate(BaseModel):
    entity_type: str  # 'strategy_call' | 'client'
    entity_id: UUID
    from_status: str | None = None
    to_status: str
    actor_id: UUID | None = None
    actor_type: str  # 'system' | 'admin' | 'client'
    reason: str | None = None
    metadata: dict = {}
