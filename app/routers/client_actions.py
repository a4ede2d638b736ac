"""Admin actions on a client: confirm their strategy call, unlock their account."""
from fastapi import APIRouter, Depends
from supabase import Client
from app.auth import require_admin
from app.database import get_supabase
from app.models.client import UnlockRequest, UnlockResult
from app.models.strategy_call import ClientActionConfirm, ConfirmResult
from app.services.accounts import unlock_account
from app.services.strategy_calls import confirm_strategy_call

router = APIRouter(prefix="/api/client-actions", tags=["client-actions"])


@router.post("/confirm-strategy-call", response_model=ConfirmResult)
async def confirm_client_strategy_call(
    body: ClientActionConfirm,
    admin: dict = Depends(require_admin),
    db: Client = Depends(get_supabase),
):
    return await confirm_strategy_call(
        db,
        body.strategy_call_id,
        body.selected_slot_index,
        actor_id=admin["user_id"],
        meeting_link=body.meeting_link,
        admin_notes=body.admin_notes,
    )


@router.post("/unlock-account", response_model=UnlockResult)
async def unlock_client_account(
    body: UnlockRequest,
    admin: dict = Depends(require_admin),
    db: Client = Depends(get_supabase),
):
    return await unlock_account(
        db,
        body.client_id,
        actor_id=admin["user_id"],
        send_notification=body.send_notification,
    )
