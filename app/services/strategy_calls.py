"""Strategy-call booking and admin transitions.

A client books a call with up to three preferred slots; an admin then
confirms one of them, cancels the request, or marks a confirmed call as
completed. Status writes are conditional on the status that was read, so a
concurrent change surfaces as a ConflictError instead of being overwritten.
Emails go out after the write and their failure only flips ``email_sent``.
"""
from datetime import date, datetime, time, timezone
from zoneinfo import ZoneInfo
from loguru import logger
from app.config import get_settings
from app.database import run_query
from app.errors import ConflictError, InvalidSlotError, NotFoundError
from app.models.strategy_call import TimeSlot
from app.notifications.service import (
    send_request_received,
    send_new_request_admin,
    send_call_confirmed,
    send_call_cancelled,
)
from app.services.transitions import (
    PENDING,
    CONFIRMED,
    CANCELLED,
    COMPLETED,
    OPEN_STATUSES,
    ensure_transition,
    record_transition,
)

MAX_SLOTS = 3


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


async def _fetch_call(db, call_id) -> dict:
    result = await run_query(
        db.table("strategy_calls").select("*").eq("id", str(call_id)).maybe_single(),
        action="fetch strategy call",
    )
    if not result or not result.data:
        raise NotFoundError("Strategy call request not found")
    return result.data


def resolve_slot(call: dict, slot_index: int) -> tuple[dict, datetime]:
    """Return the chosen slot and its start time in UTC.

    The slot date/time is read in the configured scheduling timezone.
    """
    slots = call.get("preferred_slots") or []
    available = min(len(slots), MAX_SLOTS)
    if not 0 <= slot_index < available:
        raise InvalidSlotError(
            "Invalid slot index",
            details=[
                f"selected_slot_index must be in [0, {available - 1}]"
                if available
                else "This request has no preferred slots"
            ],
        )

    slot = slots[slot_index]
    if not isinstance(slot, dict):
        raise InvalidSlotError("Invalid slot index", details=["Stored slot is malformed"])
    try:
        day = date.fromisoformat(str(slot.get("date")))
        at = time.fromisoformat(str(slot.get("time")))
    except ValueError:
        raise InvalidSlotError(
            "Invalid slot index",
            details=[f"Stored slot {slot_index} has an unparseable date or time"],
        )

    tz = ZoneInfo(get_settings().scheduling_timezone)
    start = datetime.combine(day, at, tzinfo=tz).astimezone(timezone.utc)
    return slot, start


async def _write_transition(
    db,
    call: dict,
    target: str,
    actor_id: str | None,
    changes: dict | None = None,
    reason: str | None = None,
    metadata: dict | None = None,
) -> dict:
    ensure_transition(call["status"], target)

    now = _now()
    payload = {
        **(changes or {}),
        "status": target,
        "admin_status": target,
        "admin_action_by": actor_id,
        "admin_action_at": now,
        "updated_at": now,
    }
    result = await run_query(
        db.table("strategy_calls")
        .update(payload)
        .eq("id", str(call["id"]))
        .eq("status", call["status"]),
        action="update strategy call",
    )
    if not result.data:
        raise ConflictError(
            "Strategy call was modified by another request",
            details=[f"Expected status '{call['status']}' when moving to '{target}'"],
        )

    await record_transition(
        db,
        entity_type="strategy_call",
        entity_id=call["id"],
        from_status=call["status"],
        to_status=target,
        actor_type="admin",
        actor_id=actor_id,
        reason=reason,
        metadata=metadata,
    )
    logger.info(f"Strategy call {call['id']}: {call['status']} -> {target} (by {actor_id})")
    return result.data[0]


async def book_strategy_call(
    db,
    client_id: str,
    preferred_slots: list[TimeSlot],
    message: str | None = None,
) -> dict:
    """Create a pending request for the client and notify client and admin."""
    user = await run_query(
        db.table("registered_users")
        .select("id, email, full_name")
        .eq("id", str(client_id))
        .maybe_single(),
        action="fetch client",
    )
    if not user or not user.data:
        raise NotFoundError("Client not found")
    client = user.data

    existing = await run_query(
        db.table("strategy_calls")
        .select("id, status")
        .eq("client_id", str(client_id))
        .in_("status", sorted(OPEN_STATUSES)),
        action="fetch open strategy calls",
    )
    if existing.data:
        raise ConflictError(
            "You already have an open strategy call request",
            details=[f"Open request: {existing.data[0]['id']}"],
        )

    now = _now()
    created = await run_query(
        db.table("strategy_calls").insert(
            {
                "client_id": str(client_id),
                "client_name": client.get("full_name"),
                "client_email": client["email"],
                "preferred_slots": [s.model_dump() for s in preferred_slots],
                "message": message or None,
                "status": PENDING,
                "admin_status": PENDING,
                "created_at": now,
                "updated_at": now,
            }
        ),
        action="create strategy call",
    )
    call = created.data[0]

    await record_transition(
        db,
        entity_type="strategy_call",
        entity_id=call["id"],
        from_status=None,
        to_status=PENDING,
        actor_type="client",
        actor_id=str(client_id),
    )
    logger.info(f"Strategy call {call['id']} booked by client {client_id}")

    await send_request_received(call)
    await send_new_request_admin(call)
    return call


async def get_strategy_call_status(db, client_id: str) -> dict:
    result = await run_query(
        db.table("strategy_calls")
        .select("*")
        .eq("client_id", str(client_id))
        .order("created_at", desc=True),
        action="fetch strategy calls",
    )
    calls = result.data or []
    latest = calls[0] if calls else None
    return {
        "has_booked_call": bool(calls),
        "has_confirmed_call": any(c.get("admin_status") == CONFIRMED for c in calls),
        "latest_call": latest,
        "total_calls": len(calls),
        "can_book_new_call": latest is None or latest.get("status") not in OPEN_STATUSES,
    }


async def confirm_strategy_call(
    db,
    call_id,
    slot_index: int,
    actor_id: str | None,
    meeting_link: str | None = None,
    admin_notes: str | None = None,
) -> dict:
    """Confirm one of the client's proposed slots.

    Raises InvalidSlotError before any write when the index does not point at
    a stored slot, NotFoundError for an unknown id and ConflictError when the
    call is not pending.
    """
    if not 0 <= slot_index < MAX_SLOTS:
        raise InvalidSlotError(
            "Invalid slot index",
            details=["selected_slot_index must be 0, 1, or 2"],
        )

    call = await _fetch_call(db, call_id)
    slot, start = resolve_slot(call, slot_index)

    updated = await _write_transition(
        db,
        call,
        CONFIRMED,
        actor_id,
        changes={
            "confirmed_time": start.isoformat(),
            "meeting_link": meeting_link or None,
            "admin_notes": admin_notes or None,
        },
        metadata={"selected_slot_index": slot_index},
    )

    email_sent = await send_call_confirmed(updated, slot)
    return {
        "strategy_call": updated,
        "confirmed_slot": slot,
        "confirmed_time": start,
        "email_sent": email_sent,
    }


async def cancel_strategy_call(db, call_id, actor_id: str | None, reason: str | None = None) -> dict:
    call = await _fetch_call(db, call_id)
    updated = await _write_transition(
        db,
        call,
        CANCELLED,
        actor_id,
        changes={"cancellation_reason": reason or None},
        reason=reason,
    )
    email_sent = await send_call_cancelled(updated)
    return {"strategy_call": updated, "email_sent": email_sent}


async def complete_strategy_call(db, call_id, actor_id: str | None) -> dict:
    call = await _fetch_call(db, call_id)
    updated = await _write_transition(db, call, COMPLETED, actor_id)
    return {"strategy_call": updated}
