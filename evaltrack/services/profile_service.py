from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import Protocol
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from evaltrack.models.profile import Profile


@dataclass(frozen=True)
class UserSummary:
    user_id: UUID
    display_name: str | None = None
    avatar_ref: str | None = None


class ProfileDirectory(Protocol):
    def lookup(self, user_ids: Iterable[UUID]) -> dict[UUID, UserSummary]: ...


class SqlProfileDirectory:
    """Profile lookups against the ``profiles`` table. Never writes."""

    def __init__(self, db: Session) -> None:
        self.db = db

    def lookup(self, user_ids: Iterable[UUID]) -> dict[UUID, UserSummary]:
        wanted = set(user_ids)
        if not wanted:
            return {}
        rows = self.db.scalars(select(Profile).where(Profile.user_id.in_(wanted))).all()
        found = {
            row.user_id: UserSummary(user_id=row.user_id, display_name=row.display_name, avatar_ref=row.avatar_ref)
            for row in rows
        }
        for user_id in wanted - found.keys():
            found[user_id] = UserSummary(user_id=user_id)
        return found
