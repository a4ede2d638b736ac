from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from uuid import UUID


class TimeSlot(BaseModel):
    """A client-proposed slot, e.g. {"date": "2024-01-15", "time": "14:00"}."""
    date: str
    time: str

    @field_validator("date", "time")
    @classmethod
    def not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("must not be empty")
        return v.strip()


class StrategyCallCreate(BaseModel):
    preferred_slots: list[TimeSlot] = Field(min_length=1, max_length=3)
    message: str | None = None


class StrategyCallConfirm(BaseModel):
    selected_slot_index: int
    meeting_link: str | None = None
    admin_notes: str | None = None


class ClientActionConfirm(StrategyCallConfirm):
    """Body of POST /api/client-actions/confirm-strategy-call."""
    strategy_call_id: UUID


class StrategyCallCancel(BaseModel):
    reason: str | None = None


class StrategyCallResponse(BaseModel):
    id: UUID
    client_id: UUID | None = None
    client_name: str | None = None
    client_email: str | None = None
    preferred_slots: list[dict] = []
    message: str | None = None
    status: str
    admin_status: str | None = None
    confirmed_time: datetime | None = None
    meeting_link: str | None = None
    admin_notes: str | None = None
    admin_action_by: UUID | None = None
    admin_action_at: datetime | None = None
    cancellation_reason: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    model_config = {"from_attributes": True}


class ConfirmResult(BaseModel):
    strategy_call: StrategyCallResponse
    confirmed_slot: dict
    confirmed_time: datetime
    email_sent: bool


class StrategyCallStatusResponse(BaseModel):
    has_booked_call: bool
    has_confirmed_call: bool
    latest_call: StrategyCallResponse | None = None
    total_calls: int
    can_book_new_call: bool
