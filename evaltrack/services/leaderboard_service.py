from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from evaltrack.models.attempt import AttemptRecord
from evaltrack.services.attempt_service import ATTEMPT_ORDERING
from evaltrack.services.profile_service import ProfileDirectory, UserSummary


@dataclass(frozen=True)
class LeaderboardEntry:
    attempt: AttemptRecord
    user: UserSummary


def leaderboard(db: Session, event_id: UUID, *, profiles: ProfileDirectory) -> list[LeaderboardEntry]:
    """Ranked attempts for an evaluation event.

    Finished attempts come first, most recently completed on top; attempts
    still in progress follow, most recently started on top. An unknown event
    simply has no rows.
    """
    attempts = db.scalars(
        select(AttemptRecord).where(AttemptRecord.event_id == event_id).order_by(*ATTEMPT_ORDERING)
    ).all()
    if not attempts:
        return []

    summaries = profiles.lookup({attempt.user_id for attempt in attempts})
    return [
        LeaderboardEntry(attempt=attempt, user=summaries.get(attempt.user_id, UserSummary(user_id=attempt.user_id)))
        for attempt in attempts
    ]
