from fastapi import APIRouter, Depends
from uuid import UUID
from supabase import Client
from app.auth import require_admin, require_client
from app.database import get_supabase
from app.middleware.pagination import filter_params, pagination_params, paginate_results
from app.models.shared import FilterSet, PageRequest, PageResult
from app.models.strategy_call import (
    ConfirmResult,
    StrategyCallCancel,
    StrategyCallConfirm,
    StrategyCallCreate,
    StrategyCallResponse,
    StrategyCallStatusResponse,
)
from app.services import strategy_calls as service

router = APIRouter(prefix="/api/strategy-calls", tags=["strategy-calls"])

SORT_FIELDS = ["created_at", "updated_at", "confirmed_time", "status"]
SEARCH_FIELDS = ["client_name", "client_email"]


@router.post("", response_model=StrategyCallResponse, status_code=201)
async def book_strategy_call(
    body: StrategyCallCreate,
    user: dict = Depends(require_client),
    db: Client = Depends(get_supabase),
):
    return await service.book_strategy_call(
        db, user["user_id"], body.preferred_slots, body.message
    )


@router.get("/status", response_model=StrategyCallStatusResponse)
async def strategy_call_status(
    user: dict = Depends(require_client),
    db: Client = Depends(get_supabase),
):
    return await service.get_strategy_call_status(db, user["user_id"])


# ADMIN ROUTES

@router.get("/admin", response_model=PageResult)
async def list_strategy_calls(
    admin_status: str | None = None,
    page: PageRequest = Depends(pagination_params(SORT_FIELDS)),
    filters: FilterSet = Depends(filter_params),
    admin: dict = Depends(require_admin),
    db: Client = Depends(get_supabase),
):
    data_query = db.table("strategy_calls").select("*")
    count_query = db.table("strategy_calls").select("id", count="exact")
    if admin_status:
        data_query = data_query.eq("admin_status", admin_status)
        count_query = count_query.eq("admin_status", admin_status)

    return await paginate_results(
        data_query,
        count_query,
        page,
        filters,
        search_fields=SEARCH_FIELDS,
    )


@router.post("/admin/{call_id}/confirm", response_model=ConfirmResult)
async def confirm_strategy_call(
    call_id: UUID,
    body: StrategyCallConfirm,
    admin: dict = Depends(require_admin),
    db: Client = Depends(get_supabase),
):
    return await service.confirm_strategy_call(
        db,
        call_id,
        body.selected_slot_index,
        actor_id=admin["user_id"],
        meeting_link=body.meeting_link,
        admin_notes=body.admin_notes,
    )


@router.post("/admin/{call_id}/cancel")
async def cancel_strategy_call(
    call_id: UUID,
    body: StrategyCallCancel | None = None,
    admin: dict = Depends(require_admin),
    db: Client = Depends(get_supabase),
):
    result = await service.cancel_strategy_call(
        db, call_id, actor_id=admin["user_id"], reason=body.reason if body else None
    )
    return {
        "strategy_call": StrategyCallResponse.model_validate(result["strategy_call"]),
        "email_sent": result["email_sent"],
    }


@router.post("/admin/{call_id}/complete")
async def complete_strategy_call(
    call_id: UUID,
    admin: dict = Depends(require_admin),
    db: Client = Depends(get_supabase),
):
    result = await service.complete_strategy_call(db, call_id, actor_id=admin["user_id"])
    return {"strategy_call": StrategyCallResponse.model_validate(result["strategy_call"])}
