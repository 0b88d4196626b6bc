"""XP reward ledger.

Each grant is keyed by (user, content, reason code). The unique constraint on
that key is the commit point: the grant row and the balance increment are
written in one transaction, and a concurrent duplicate either sees the
committed grant up front or loses on the constraint and rolls back. Either way
it reports ``already_granted`` and the balance moves exactly once.

Only lock and serialization failures are retried. Any other storage error is
reported as unavailable on the first occurrence.

The ledger owns its transaction: it commits on success and rolls back on
failure, so callers must hand it a session without unrelated pending changes.
"""

from __future__ import annotations

import enum
import logging
import time
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Any
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, OperationalError
from sqlalchemy.orm import Session

from evaltrack.core.config import settings
from evaltrack.core.errors import ConflictRetryable, InvalidRewardAction, StorageUnavailable, Unauthenticated
from evaltrack.models.attempt import AttemptRecord
from evaltrack.models.constants import (
    ACTION_REWARD_XP,
    REASON_COMMENT,
    REASON_CONTENT_UPLOAD,
    REASON_LIKE,
    REASON_PATH_COMPLETE,
    REASON_SAVE,
    REASON_VIEW_COMPLETE,
)
from evaltrack.models.reward import RewardGrant, XpBalance
from evaltrack.services.scope_service import SubjectKind


logger = logging.getLogger(__name__)

GRANTED = 'granted'
ALREADY_GRANTED = 'already_granted'
NOT_ELIGIBLE = 'not_eligible'


@dataclass(frozen=True)
class GrantOutcome:
    status: str
    amount: int = 0
    grant_id: UUID | None = None

    @classmethod
    def granted(cls, grant: RewardGrant) -> GrantOutcome:
        return cls(status=GRANTED, amount=grant.amount, grant_id=grant.id)

    @classmethod
    def already_granted(cls) -> GrantOutcome:
        return cls(status=ALREADY_GRANTED)

    @classmethod
    def not_eligible(cls) -> GrantOutcome:
        return cls(status=NOT_ELIGIBLE)

    @property
    def is_granted(self) -> bool:
        return self.status == GRANTED


# serialization_failure, deadlock_detected, lock_not_available
RETRYABLE_SQLSTATES = frozenset({'40001', '40P01', '55P03'})
SQLITE_LOCK_MESSAGES = ('database is locked', 'database table is locked')


class RewardAction(str, enum.Enum):
    VIEW_COMPLETE = 'view_complete'
    LIKE = 'like'
    SAVE = 'save'
    COMMENT = 'comment'

    @property
    def reason_code(self) -> str:
        return ACTION_REASON_CODES[self]

    @classmethod
    def parse(cls, value: Any) -> RewardAction:
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value or '').strip().lower())
        except ValueError as exc:
            raise InvalidRewardAction(f'Unknown reward action: {value!r}') from exc


ACTION_REASON_CODES = {
    RewardAction.VIEW_COMPLETE: REASON_VIEW_COMPLETE,
    RewardAction.LIKE: REASON_LIKE,
    RewardAction.SAVE: REASON_SAVE,
    RewardAction.COMMENT: REASON_COMMENT,
}


def is_lock_conflict(exc: OperationalError) -> bool:
    orig = exc.orig
    sqlstate = getattr(orig, 'sqlstate', None) or getattr(orig, 'pgcode', None)
    if sqlstate in RETRYABLE_SQLSTATES:
        return True
    message = str(orig).lower()
    return any(marker in message for marker in SQLITE_LOCK_MESSAGES)


def find_grant(db: Session, *, user_id: UUID, content_id: UUID, reason_code: str) -> RewardGrant | None:
    return db.scalar(
        select(RewardGrant).where(
            RewardGrant.user_id == user_id,
            RewardGrant.content_id == content_id,
            RewardGrant.reason_code == reason_code,
        )
    )


def _increment_balance(db: Session, *, user_id: UUID, amount: int) -> None:
    result = db.execute(
        update(XpBalance)
        .where(XpBalance.user_id == user_id)
        .values(experience_points=XpBalance.experience_points + amount, updated_at=func.now())
        .execution_options(synchronize_session=False)
    )
    if result.rowcount:
        return
    # First grant for this user; a concurrent first grant collides on the
    # primary key and is retried through the update branch.
    db.add(XpBalance(user_id=user_id, experience_points=amount))
    db.flush()


def _grant_once(db: Session, *, user_id: UUID, content_id: UUID, reason_code: str, amount: int) -> GrantOutcome:
    try:
        if find_grant(db, user_id=user_id, content_id=content_id, reason_code=reason_code):
            return GrantOutcome.already_granted()

        grant = RewardGrant(
            user_id=user_id,
            content_id=content_id,
            reason_code=reason_code,
            amount=amount,
            granted_at=datetime.now(UTC),
        )
        db.add(grant)
        db.flush()
        _increment_balance(db, user_id=user_id, amount=amount)
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        if find_grant(db, user_id=user_id, content_id=content_id, reason_code=reason_code):
            return GrantOutcome.already_granted()
        raise ConflictRetryable('Reward grant collided with a concurrent write') from exc
    except OperationalError as exc:
        db.rollback()
        if exc.connection_invalidated:
            raise StorageUnavailable('Reward store is unreachable') from exc
        if not is_lock_conflict(exc):
            logger.error('Reward grant %s/%s/%s failed: %s', user_id, content_id, reason_code, exc.orig)
            raise StorageUnavailable('Reward store rejected the grant') from exc
        raise ConflictRetryable('Reward grant could not acquire the store') from exc

    return GrantOutcome.granted(grant)


def grant_reward(db: Session, *, user_id: UUID | None, content_id: UUID, reason_code: str, amount: int) -> GrantOutcome:
    if user_id is None:
        raise Unauthenticated('An authenticated user is required')

    max_attempts = settings.REWARD_GRANT_MAX_ATTEMPTS
    backoff_seconds = settings.REWARD_GRANT_RETRY_BACKOFF_MS / 1000
    last_error: ConflictRetryable | None = None
    for attempt_number in range(1, max_attempts + 1):
        try:
            outcome = _grant_once(
                db, user_id=user_id, content_id=content_id, reason_code=reason_code, amount=amount
            )
        except ConflictRetryable as exc:
            last_error = exc
            logger.warning(
                'Reward grant %s/%s/%s conflicted (attempt %s of %s): %s',
                user_id,
                content_id,
                reason_code,
                attempt_number,
                max_attempts,
                exc.__cause__ or exc,
            )
            if attempt_number < max_attempts:
                time.sleep(backoff_seconds * attempt_number)
            continue

        if outcome.is_granted:
            logger.info('Granted %s XP to %s for %s %s', outcome.amount, user_id, reason_code, content_id)
        else:
            logger.debug('Reward %s for %s on %s already granted', reason_code, user_id, content_id)
        return outcome

    raise StorageUnavailable('Reward grant retries exhausted') from last_error


def grant_upload_reward(db: Session, *, user_id: UUID | None, content_id: UUID) -> GrantOutcome:
    return grant_reward(
        db,
        user_id=user_id,
        content_id=content_id,
        reason_code=REASON_CONTENT_UPLOAD,
        amount=settings.UPLOAD_REWARD_XP,
    )


def grant_action_reward(db: Session, *, user_id: UUID | None, content_id: UUID, action: Any) -> GrantOutcome:
    """Credit an engagement action (view, like, save, comment) once per content item."""
    reward_action = RewardAction.parse(action)
    reason_code = reward_action.reason_code
    return grant_reward(
        db,
        user_id=user_id,
        content_id=content_id,
        reason_code=reason_code,
        amount=ACTION_REWARD_XP[reason_code],
    )


def has_completed_path(db: Session, *, user_id: UUID, path_id: UUID) -> bool:
    found = db.scalar(
        select(AttemptRecord.id)
        .where(
            AttemptRecord.subject_kind == SubjectKind.PATH.value,
            AttemptRecord.subject_id == path_id,
            AttemptRecord.user_id == user_id,
            AttemptRecord.completed_at.is_not(None),
            AttemptRecord.total_items > 0,
            AttemptRecord.completed_items == AttemptRecord.total_items,
        )
        .limit(1)
    )
    return found is not None


def grant_path_completion_reward(db: Session, *, user_id: UUID | None, path_id: UUID) -> GrantOutcome:
    if user_id is None:
        raise Unauthenticated('An authenticated user is required')
    if not has_completed_path(db, user_id=user_id, path_id=path_id):
        return GrantOutcome.not_eligible()
    return grant_reward(
        db,
        user_id=user_id,
        content_id=path_id,
        reason_code=REASON_PATH_COMPLETE,
        amount=settings.PATH_COMPLETION_REWARD_XP,
    )


def get_balance(db: Session, user_id: UUID) -> int:
    points = db.scalar(select(XpBalance.experience_points).where(XpBalance.user_id == user_id))
    return int(points or 0)


def list_grants(db: Session, *, user_id: UUID, since: datetime | None = None) -> list[RewardGrant]:
    query = select(RewardGrant).where(RewardGrant.user_id == user_id)
    if since:
        query = query.where(RewardGrant.granted_at >= since)
    return list(db.scalars(query.order_by(RewardGrant.granted_at.desc(), RewardGrant.id.desc())).all())
