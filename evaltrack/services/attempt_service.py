from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import UTC, datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.orm import Session

from evaltrack.core.errors import AttemptAlreadyCompleted, InvalidAttempt, InvalidScope, NotFound, Unauthenticated
from evaltrack.models.attempt import AttemptRecord
from evaltrack.services.scope_service import ScopeFilter


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttemptSummary:
    has_attempted: bool
    attempt_count: int
    last_attempt: AttemptRecord | None = None


# Newest first: completed rows by completion time, in-progress rows after them
# by start time, id as the final tie-break.
ATTEMPT_ORDERING = (
    AttemptRecord.completed_at.desc().nulls_last(),
    AttemptRecord.started_at.desc(),
    AttemptRecord.id.desc(),
)


def as_utc(value: datetime) -> datetime:
    # SQLite hands back naive datetimes; everything stored is UTC.
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def _require_user(user_id: UUID | None) -> UUID:
    if user_id is None:
        raise Unauthenticated('An authenticated user is required')
    return user_id


def _user_scope(scope: ScopeFilter, user_id: UUID | None) -> ScopeFilter:
    return scope.for_user(_require_user(user_id))


def submit_attempt(
    db: Session,
    *,
    scope: ScopeFilter,
    user_id: UUID | None,
    total_items: int,
    started_at: datetime | None = None,
) -> AttemptRecord:
    actor_id = _require_user(user_id)
    if scope.subject_id is None:
        raise InvalidScope('subject_id is required to record an attempt')
    if total_items < 0:
        raise InvalidAttempt('total_items must be non-negative')

    attempt = AttemptRecord(
        subject_kind=scope.subject_kind.value,
        subject_id=scope.subject_id,
        user_id=actor_id,
        event_id=scope.event_id,
        started_at=as_utc(started_at) if started_at else datetime.now(UTC),
        total_items=total_items,
        completed_items=0,
        passed=False,
    )
    db.add(attempt)
    db.flush()
    logger.info(
        'Attempt %s started by %s on %s %s (event=%s)',
        attempt.id,
        actor_id,
        scope.subject_kind.value,
        scope.subject_id,
        scope.event_id,
    )
    return attempt


def get_attempt(db: Session, attempt_id: UUID) -> AttemptRecord:
    attempt = db.scalar(select(AttemptRecord).where(AttemptRecord.id == attempt_id))
    if not attempt:
        raise NotFound('Attempt not found')
    return attempt


def complete_attempt(
    db: Session,
    *,
    attempt_id: UUID,
    user_id: UUID | None,
    completed_items: int,
    passed: bool,
    score: float | None = None,
    completed_at: datetime | None = None,
) -> AttemptRecord:
    actor_id = _require_user(user_id)
    attempt = get_attempt(db, attempt_id)
    if attempt.user_id != actor_id:
        # Other users' attempts are indistinguishable from missing ones.
        raise NotFound('Attempt not found')
    if attempt.completed_at is not None:
        raise AttemptAlreadyCompleted('Attempt already completed')
    if completed_items < 0 or completed_items > attempt.total_items:
        raise InvalidAttempt(f'completed_items must be between 0 and {attempt.total_items}')

    finished_at = as_utc(completed_at) if completed_at else datetime.now(UTC)
    if finished_at < as_utc(attempt.started_at):
        raise InvalidAttempt('completed_at cannot precede started_at')

    # Only a still-pending row is written; a racing completion matches nothing.
    result = db.execute(
        update(AttemptRecord)
        .where(AttemptRecord.id == attempt.id, AttemptRecord.completed_at.is_(None))
        .values(
            completed_items=completed_items,
            passed=passed,
            score=score,
            completed_at=finished_at,
            updated_at=func.now(),
        )
        .execution_options(synchronize_session=False)
    )
    if result.rowcount != 1:
        raise AttemptAlreadyCompleted('Attempt already completed')
    db.refresh(attempt)
    logger.info('Attempt %s completed (passed=%s, items=%s/%s)', attempt.id, passed, completed_items, attempt.total_items)
    return attempt


def history(db: Session, scope: ScopeFilter, *, user_id: UUID | None) -> list[AttemptRecord]:
    user_scope = _user_scope(scope, user_id)
    return list(db.scalars(select(AttemptRecord).where(*user_scope.clauses()).order_by(*ATTEMPT_ORDERING)).all())


def last_attempt(db: Session, scope: ScopeFilter, *, user_id: UUID | None) -> AttemptRecord | None:
    user_scope = _user_scope(scope, user_id)
    return db.scalar(select(AttemptRecord).where(*user_scope.clauses()).order_by(*ATTEMPT_ORDERING).limit(1))


def attempt_count(db: Session, scope: ScopeFilter, *, user_id: UUID | None) -> int:
    user_scope = _user_scope(scope, user_id)
    total = db.scalar(select(func.count()).select_from(AttemptRecord).where(*user_scope.clauses()))
    return int(total or 0)


def has_attempted(db: Session, scope: ScopeFilter, *, user_id: UUID | None) -> bool:
    user_scope = _user_scope(scope, user_id)
    found = db.scalar(select(AttemptRecord.id).where(*user_scope.clauses()).limit(1))
    return found is not None


def summarize(db: Session, scope: ScopeFilter, *, user_id: UUID | None) -> AttemptSummary:
    count = attempt_count(db, scope, user_id=user_id)
    return AttemptSummary(
        has_attempted=count > 0,
        attempt_count=count,
        last_attempt=last_attempt(db, scope, user_id=user_id) if count else None,
    )
