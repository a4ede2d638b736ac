"""Admin unlock of client accounts.

Unlocking is idempotent: the onboarding flag is forced true, ``unlocked_at``
and ``unlocked_by`` are only ever written once, and a repeated call still
reports success. When ``send_notification`` is set the approval email is sent
on every call, including repeats.
"""
from datetime import datetime, timezone
from loguru import logger
from app.database import run_query
from app.errors import NotFoundError
from app.notifications.service import send_onboarding_approved
from app.services.transitions import record_transition

CLIENT_COLUMNS = "id, email, full_name, onboarding_completed, is_active, unlocked_at, unlocked_by"


async def _fetch_client(db, client_id) -> dict | None:
    result = await run_query(
        db.table("registered_users")
        .select(CLIENT_COLUMNS)
        .eq("id", str(client_id))
        .maybe_single(),
        action="fetch client",
    )
    return result.data if result else None


async def unlock_account(
    db,
    client_id,
    actor_id: str | None,
    send_notification: bool = True,
) -> dict:
    client = await _fetch_client(db, client_id)
    if not client:
        raise NotFoundError("Client not found")

    already_unlocked = bool(client.get("onboarding_completed"))
    needs_write = not (
        already_unlocked and client.get("is_active") and client.get("unlocked_at")
    )

    if needs_write:
        now = datetime.now(timezone.utc).isoformat()
        payload = {"onboarding_completed": True, "is_active": True, "updated_at": now}
        query = db.table("registered_users")

        if client.get("unlocked_at"):
            query = query.update(payload).eq("id", str(client_id))
        else:
            payload.update({"unlocked_at": now, "unlocked_by": actor_id})
            # Only the first unlock stamps the row
            query = (
                query.update(payload)
                .eq("id", str(client_id))
                .is_("unlocked_at", "null")
            )

        result = await run_query(query, action="unlock client")
        if result.data:
            client = result.data[0]
            if not already_unlocked:
                await record_transition(
                    db,
                    entity_type="client",
                    entity_id=client["id"],
                    from_status="locked",
                    to_status="unlocked",
                    actor_type="admin",
                    actor_id=actor_id,
                )
            logger.info(f"Account unlocked for client {client_id} (by {actor_id})")
        else:
            # Another request stamped unlocked_at between our read and write
            client = await _fetch_client(db, client_id) or client
            already_unlocked = True
    else:
        logger.info(f"Account for client {client_id} already unlocked, no change")

    email_sent = False
    if send_notification:
        email_sent = await send_onboarding_approved(client)

    return {
        "client": {
            "id": client["id"],
            "email": client["email"],
            "full_name": client.get("full_name"),
            "onboarding_complete": True,
        },
        "email_sent": email_sent,
        "already_unlocked": already_unlocked,
        "unlocked_by": client.get("unlocked_by"),
        "unlocked_at": client.get("unlocked_at"),
    }
