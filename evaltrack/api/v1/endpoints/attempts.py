from uuid import UUID

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from evaltrack.api.deps import get_current_user_id
from evaltrack.core.errors import NotFound
from evaltrack.db.session import get_db
from evaltrack.schemas.attempt import (
    AttemptComplete,
    AttemptCreate,
    AttemptHistoryResponse,
    AttemptOut,
    AttemptSummaryOut,
)
from evaltrack.services import attempt_service, scope_service
from evaltrack.services.scope_service import ScopeFilter


router = APIRouter(prefix='/attempts', tags=['attempts'])


def get_scope(
    subject_kind: str | None = Query(default=None),
    subject_id: str | None = Query(default=None),
    event_id: str | None = Query(default=None),
) -> ScopeFilter:
    return scope_service.resolve(subject_kind, subject_id, event_id)


@router.post('', response_model=AttemptOut, status_code=status.HTTP_201_CREATED)
def submit_attempt(
    payload: AttemptCreate,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> AttemptOut:
    scope = scope_service.resolve(payload.subject_kind, payload.subject_id, payload.event_id)
    attempt = attempt_service.submit_attempt(
        db,
        scope=scope,
        user_id=user_id,
        total_items=payload.total_items,
        started_at=payload.started_at,
    )
    db.commit()
    return AttemptOut.model_validate(attempt)


@router.post('/{attempt_id}/complete', response_model=AttemptOut)
def complete_attempt(
    attempt_id: UUID,
    payload: AttemptComplete,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> AttemptOut:
    attempt = attempt_service.complete_attempt(
        db,
        attempt_id=attempt_id,
        user_id=user_id,
        completed_items=payload.completed_items,
        passed=payload.passed,
        score=payload.score,
        completed_at=payload.completed_at,
    )
    db.commit()
    return AttemptOut.model_validate(attempt)


@router.get('', response_model=AttemptHistoryResponse)
def attempt_history(
    scope: ScopeFilter = Depends(get_scope),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> AttemptHistoryResponse:
    items = attempt_service.history(db, scope, user_id=user_id)
    return AttemptHistoryResponse(items=[AttemptOut.model_validate(item) for item in items])


@router.get('/last', response_model=AttemptOut | None)
def last_attempt(
    scope: ScopeFilter = Depends(get_scope),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> AttemptOut | None:
    attempt = attempt_service.last_attempt(db, scope, user_id=user_id)
    return AttemptOut.model_validate(attempt) if attempt else None


@router.get('/summary', response_model=AttemptSummaryOut)
def attempt_summary(
    scope: ScopeFilter = Depends(get_scope),
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> AttemptSummaryOut:
    summary = attempt_service.summarize(db, scope, user_id=user_id)
    return AttemptSummaryOut.model_validate(summary)


@router.get('/{attempt_id}', response_model=AttemptOut)
def get_attempt(
    attempt_id: UUID,
    db: Session = Depends(get_db),
    user_id: UUID = Depends(get_current_user_id),
) -> AttemptOut:
    attempt = attempt_service.get_attempt(db, attempt_id)
    if attempt.user_id != user_id:
        raise NotFound('Attempt not found')
    return AttemptOut.model_validate(attempt)
