"""Strategy-call status machine and the state_transitions audit trail."""
from loguru import logger
from app.database import run_query
from app.errors import ConflictError, DatabaseError
from app.models.shared import StateTransitionCreate

PENDING = "pending"
CONFIRMED = "confirmed"
CANCELLED = "cancelled"
COMPLETED = "completed"

STRATEGY_CALL_TRANSITIONS: dict[str, frozenset[str]] = {
    PENDING: frozenset({CONFIRMED, CANCELLED}),
    CONFIRMED: frozenset({COMPLETED, CANCELLED}),
    COMPLETED: frozenset(),
    CANCELLED: frozenset(),
}

OPEN_STATUSES = frozenset({PENDING, CONFIRMED})


def can_transition(current: str | None, target: str) -> bool:
    return target in STRATEGY_CALL_TRANSITIONS.get(current or "", frozenset())


def ensure_transition(current: str | None, target: str) -> None:
    """Raise ConflictError unless current -> target is allowed."""
    if not can_transition(current, target):
        allowed = sorted(STRATEGY_CALL_TRANSITIONS.get(current or "", frozenset()))
        raise ConflictError(
            f"Cannot move strategy call from '{current}' to '{target}'",
            details=[f"Allowed from '{current}': {', '.join(allowed) or 'none (terminal)'}"],
        )


async def record_transition(
    db,
    entity_type: str,
    entity_id: str,
    from_status: str | None,
    to_status: str,
    actor_type: str,
    actor_id: str | None = None,
    reason: str | None = None,
    metadata: dict | None = None,
):
    """Record a state transition."""
    row = StateTransitionCreate(
        entity_type=entity_type,
        entity_id=entity_id,
        from_status=from_status,
        to_status=to_status,
        actor_type=actor_type,
        actor_id=actor_id,
        reason=reason,
        metadata=metadata or {},
    )
    try:
        await run_query(
            db.table("state_transitions").insert(row.model_dump(mode="json")),
            action="record transition",
        )
    except DatabaseError as e:
        # The status write has already committed
        logger.error(
            f"Failed to record {entity_type} {entity_id} transition "
            f"{from_status} -> {to_status}: {e.message}"
        )
        return
    logger.debug(f"{entity_type} {entity_id}: {from_status} -> {to_status} by {actor_type}")
