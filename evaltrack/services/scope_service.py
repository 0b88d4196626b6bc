"""Attempt scoping.

A scope is the (subject kind, subject id, optional event id) tuple that
partitions attempts into disjoint groups:

* event scope: every attempt recorded under that event, whatever the subject;
* standalone scope: attempts at the subject that carry no event at all.

Event leaderboards must never see a user's standalone practice, and standalone
statistics must never count event participation, so the two predicates are
deliberately asymmetric.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any
from uuid import UUID

from sqlalchemy import ColumnElement

from evaltrack.core.errors import InvalidScope
from evaltrack.models.attempt import AttemptRecord


class SubjectKind(str, enum.Enum):
    QUIZ = 'quiz'
    GAME = 'game'
    PATH = 'path'

    @classmethod
    def parse(cls, value: Any) -> SubjectKind:
        if isinstance(value, cls):
            return value
        normalized = str(value or '').strip().lower()
        try:
            return cls(normalized)
        except ValueError as exc:
            raise InvalidScope(f'Unknown subject kind: {value!r}') from exc


@dataclass(frozen=True)
class ScopeFilter:
    subject_kind: SubjectKind
    subject_id: UUID | None
    event_id: UUID | None
    user_id: UUID | None = None

    @property
    def is_event_scope(self) -> bool:
        return self.event_id is not None

    def clauses(self) -> list[ColumnElement[bool]]:
        if self.event_id is not None:
            clauses = [AttemptRecord.event_id == self.event_id]
        else:
            clauses = [
                AttemptRecord.subject_kind == self.subject_kind.value,
                AttemptRecord.subject_id == self.subject_id,
                AttemptRecord.event_id.is_(None),
            ]
        if self.user_id is not None:
            clauses.append(AttemptRecord.user_id == self.user_id)
        return clauses

    def matches(self, record: AttemptRecord) -> bool:
        if self.user_id is not None and record.user_id != self.user_id:
            return False
        if self.event_id is not None:
            return record.event_id == self.event_id
        return (
            record.event_id is None
            and record.subject_kind == self.subject_kind.value
            and record.subject_id == self.subject_id
        )

    def for_user(self, user_id: UUID) -> ScopeFilter:
        return ScopeFilter(
            subject_kind=self.subject_kind,
            subject_id=self.subject_id,
            event_id=self.event_id,
            user_id=user_id,
        )


def _coerce_uuid(value: Any, field: str) -> UUID | None:
    if value is None or value == '':
        return None
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise InvalidScope(f'{field} is not a valid identifier') from exc


def resolve(
    subject_kind: Any,
    subject_id: Any = None,
    event_id: Any = None,
    *,
    user_id: UUID | None = None,
) -> ScopeFilter:
    kind = SubjectKind.parse(subject_kind)
    resolved_subject = _coerce_uuid(subject_id, 'subject_id')
    resolved_event = _coerce_uuid(event_id, 'event_id')

    if resolved_event is None and resolved_subject is None:
        raise InvalidScope('A standalone scope requires subject_id')

    return ScopeFilter(
        subject_kind=kind,
        subject_id=resolved_subject,
        event_id=resolved_event,
        user_id=user_id,
    )
