"""Paginated dashboard listings for clients and applications."""
from fastapi import APIRouter, Depends
from supabase import Client
from app.auth import require_admin, require_client
from app.database import get_supabase
from app.middleware.pagination import filter_params, pagination_params, paginate_results
from app.models.shared import FilterSet, PageRequest, PageResult

router = APIRouter(tags=["listings"])

CLIENT_SORT_FIELDS = ["created_at", "updated_at", "full_name", "email"]
CLIENT_SEARCH_FIELDS = ["full_name", "email"]
CLIENT_COLUMNS = (
    "id, email, full_name, status, onboarding_completed, is_active, "
    "unlocked_at, assigned_to, created_at, updated_at"
)

APPLICATION_SORT_FIELDS = ["created_at", "updated_at", "company_name", "job_title", "status"]
APPLICATION_SEARCH_FIELDS = ["company_name", "job_title"]


@router.get("/api/admin/clients", response_model=PageResult)
async def list_clients(
    page: PageRequest = Depends(pagination_params(CLIENT_SORT_FIELDS)),
    filters: FilterSet = Depends(filter_params),
    admin: dict = Depends(require_admin),
    db: Client = Depends(get_supabase),
):
    return await paginate_results(
        db.table("registered_users").select(CLIENT_COLUMNS).eq("role", "client"),
        db.table("registered_users").select("id", count="exact").eq("role", "client"),
        page,
        filters,
        search_fields=CLIENT_SEARCH_FIELDS,
    )


@router.get("/api/admin/applications", response_model=PageResult)
async def list_all_applications(
    page: PageRequest = Depends(pagination_params(APPLICATION_SORT_FIELDS)),
    filters: FilterSet = Depends(filter_params),
    admin: dict = Depends(require_admin),
    db: Client = Depends(get_supabase),
):
    return await paginate_results(
        db.table("applications").select("*"),
        db.table("applications").select("id", count="exact"),
        page,
        filters,
        search_fields=APPLICATION_SEARCH_FIELDS,
    )


@router.get("/api/applications", response_model=PageResult)
async def list_my_applications(
    page: PageRequest = Depends(pagination_params(APPLICATION_SORT_FIELDS)),
    filters: FilterSet = Depends(filter_params),
    user: dict = Depends(require_client),
    db: Client = Depends(get_supabase),
):
    # Clients only ever see their own rows, whatever filters they pass
    return await paginate_results(
        db.table("applications").select("*").eq("client_id", user["user_id"]),
        db.table("applications").select("id", count="exact").eq("client_id", user["user_id"]),
        page,
        filters,
        search_fields=APPLICATION_SEARCH_FIELDS,
    )
