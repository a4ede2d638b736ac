from pydantic import BaseModel
from datetime import datetime
from uuid import UUID


class UnlockRequest(BaseModel):
    client_id: UUID
    send_notification: bool = True


class ClientSummary(BaseModel):
    id: UUID
    email: str
    full_name: str | None = None
    onboarding_complete: bool = True


class UnlockResult(BaseModel):
    client: ClientSummary
    email_sent: bool
    already_unlocked: bool
    unlocked_by: UUID | None = None
    unlocked_at: datetime | None = None
