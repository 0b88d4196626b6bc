from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, Field

from evaltrack.schemas.common import BaseSchema


class AttemptCreate(BaseModel):
    # Checked by scope_service.resolve.
    subject_kind: str | None = None
    subject_id: UUID | None = None
    event_id: UUID | None = None
    started_at: datetime | None = None
    total_items: int = Field(default=0, ge=0)


class AttemptComplete(BaseModel):
    completed_items: int = Field(ge=0)
    passed: bool
    score: float | None = None
    completed_at: datetime | None = None


class AttemptOut(BaseSchema):
    id: UUID
    subject_kind: str
    subject_id: UUID
    user_id: UUID
    event_id: UUID | None
    started_at: datetime
    completed_at: datetime | None
    total_items: int
    completed_items: int
    completion_percentage: float
    passed: bool
    score: float | None
    is_completed: bool


class AttemptHistoryResponse(BaseModel):
    items: list[AttemptOut]


class AttemptSummaryOut(BaseSchema):
    has_attempted: bool
    attempt_count: int
    last_attempt: AttemptOut | None


class UserSummaryOut(BaseSchema):
    user_id: UUID
    display_name: str | None
    avatar_ref: str | None


class LeaderboardEntryOut(BaseSchema):
    rank: int
    attempt: AttemptOut
    user: UserSummaryOut


class LeaderboardResponse(BaseModel):
    event_id: UUID
    items: list[LeaderboardEntryOut]
