from datetime import datetime
from uuid import UUID

from pydantic import BaseModel

from evaltrack.schemas.common import BaseSchema


class ContentUploadRewardRequest(BaseModel):
    content_id: UUID


class PathCompletionRewardRequest(BaseModel):
    path_id: UUID


class ActionRewardRequest(BaseModel):
    content_id: UUID
    action: str


class GrantOutcomeOut(BaseSchema):
    status: str
    amount: int
    grant_id: UUID | None = None


class XpLevelOut(BaseSchema):
    name: str
    xp_required: int
    benefits: list[str]


class XpStatusOut(BaseModel):
    experience_points: int
    level: XpLevelOut
    next_level: XpLevelOut | None
    level_progress: int
    xp_to_next_level: int


class RewardGrantOut(BaseSchema):
    id: UUID
    content_id: UUID
    reason_code: str
    amount: int
    granted_at: datetime


class RewardHistoryResponse(BaseModel):
    items: list[RewardGrantOut]
    total_gained: int
