from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from evaltrack.api.deps import get_current_user_id, get_profile_directory
from evaltrack.db.session import get_db
from evaltrack.schemas.attempt import AttemptOut, LeaderboardEntryOut, LeaderboardResponse, UserSummaryOut
from evaltrack.services import leaderboard_service
from evaltrack.services.profile_service import ProfileDirectory


router = APIRouter(prefix='/events', tags=['events'])


@router.get('/{event_id}/leaderboard', response_model=LeaderboardResponse)
def event_leaderboard(
    event_id: UUID,
    db: Session = Depends(get_db),
    profiles: ProfileDirectory = Depends(get_profile_directory),
    _: UUID = Depends(get_current_user_id),
) -> LeaderboardResponse:
    entries = leaderboard_service.leaderboard(db, event_id, profiles=profiles)
    return LeaderboardResponse(
        event_id=event_id,
        items=[
            LeaderboardEntryOut(
                rank=index,
                attempt=AttemptOut.model_validate(entry.attempt),
                user=UserSummaryOut.model_validate(entry.user),
            )
            for index, entry in enumerate(entries, start=1)
        ],
    )
