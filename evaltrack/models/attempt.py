import uuid
from datetime import datetime

from sqlalchemy import Boolean, CheckConstraint, DateTime, Float, Index, Integer, String, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from evaltrack.db.base_class import Base
from evaltrack.models.mixins import TimestampMixin, UUIDPrimaryKeyMixin


class AttemptRecord(UUIDPrimaryKeyMixin, TimestampMixin, Base):
    __tablename__ = 'attempt_records'
    __table_args__ = (
        CheckConstraint(
            "subject_kind in ('quiz', 'game', 'path')",
            name='attempt_record_subject_kind_values',
        ),
        CheckConstraint('total_items >= 0', name='attempt_record_total_items_non_negative'),
        CheckConstraint(
            'completed_items >= 0 and completed_items <= total_items',
            name='attempt_record_completed_items_range',
        ),
    )

    subject_kind: Mapped[str] = mapped_column(String(20), nullable=False)
    subject_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    event_id: Mapped[uuid.UUID | None] = mapped_column(Uuid(as_uuid=True), nullable=True)
    started_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())
    completed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    total_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed_items: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    passed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    score: Mapped[float | None] = mapped_column(Float, nullable=True)

    @property
    def is_completed(self) -> bool:
        return self.completed_at is not None

    @property
    def completion_percentage(self) -> float:
        if not self.total_items:
            return 0.0
        return (self.completed_items / self.total_items) * 100


Index(
    'ix_attempt_records_scope',
    AttemptRecord.subject_kind,
    AttemptRecord.subject_id,
    AttemptRecord.event_id,
    AttemptRecord.completed_at,
)
Index('ix_attempt_records_event_id', AttemptRecord.event_id)
Index('ix_attempt_records_user_id', AttemptRecord.user_id)
