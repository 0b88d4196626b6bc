from datetime import UTC, datetime, timedelta
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.orm import Session

from evaltrack.api.deps import get_current_user_id
from evaltrack.db.session import get_db
from evaltrack.schemas.reward import (
    ActionRewardRequest,
    ContentUploadRewardRequest,
    GrantOutcomeOut,
    PathCompletionRewardRequest,
    RewardGrantOut,
    RewardHistoryResponse,
    XpLevelOut,
    XpStatusOut,
)
from evaltrack.services import reward_ledger, xp_levels
from evaltrack.services.reward_ledger import GrantOutcome


router = APIRouter(prefix='/rewards', tags=['rewards'])


def _outcome_response(outcome: GrantOutcome, response: Response) -> GrantOutcomeOut:
    if outcome.is_granted:
        response.status_code = status.HTTP_201_CREATED
    return GrantOutcomeOut.model_validate(outcome)


@router.post('/content-upload', response_model=GrantOutcomeOut)
def grant_content_upload_reward(
    payload: ContentUploadRewardRequest,
    response: Response,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> GrantOutcomeOut:
    outcome = reward_ledger.grant_upload_reward(db, user_id=user_id, content_id=payload.content_id)
    return _outcome_response(outcome, response)


@router.post('/path-completion', response_model=GrantOutcomeOut)
def grant_path_completion_reward(
    payload: PathCompletionRewardRequest,
    response: Response,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> GrantOutcomeOut:
    outcome = reward_ledger.grant_path_completion_reward(db, user_id=user_id, path_id=payload.path_id)
    return _outcome_response(outcome, response)


@router.post('/actions', response_model=GrantOutcomeOut)
def grant_action_reward(
    payload: ActionRewardRequest,
    response: Response,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> GrantOutcomeOut:
    outcome = reward_ledger.grant_action_reward(db, user_id=user_id, content_id=payload.content_id, action=payload.action)
    return _outcome_response(outcome, response)


@router.get('/me', response_model=XpStatusOut)
def my_xp(
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> XpStatusOut:
    points = reward_ledger.get_balance(db, user_id)
    upcoming = xp_levels.get_next_level(points)
    return XpStatusOut(
        experience_points=points,
        level=XpLevelOut.model_validate(xp_levels.get_user_level(points)),
        next_level=XpLevelOut.model_validate(upcoming) if upcoming else None,
        level_progress=xp_levels.get_level_progress(points),
        xp_to_next_level=xp_levels.get_xp_to_next_level(points),
    )


@router.get('/me/history', response_model=RewardHistoryResponse)
def my_reward_history(
    days: int = Query(default=30, ge=1, le=365),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> RewardHistoryResponse:
    since = datetime.now(UTC) - timedelta(days=days)
    grants = reward_ledger.list_grants(db, user_id=user_id, since=since)
    return RewardHistoryResponse(
        items=[RewardGrantOut.model_validate(grant) for grant in grants],
        total_gained=sum(grant.amount for grant in grants),
    )
