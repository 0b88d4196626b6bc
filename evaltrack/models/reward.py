import uuid
from datetime import datetime

from sqlalchemy import CheckConstraint, DateTime, Index, Integer, String, UniqueConstraint, Uuid, func
from sqlalchemy.orm import Mapped, mapped_column

from evaltrack.db.base_class import Base
from evaltrack.models.mixins import UUIDPrimaryKeyMixin


class RewardGrant(UUIDPrimaryKeyMixin, Base):
    __tablename__ = 'reward_grants'
    __table_args__ = (
        UniqueConstraint('user_id', 'content_id', 'reason_code', name='uq_reward_grants_idempotency'),
        CheckConstraint('amount > 0', name='reward_grant_amount_positive'),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    content_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    reason_code: Mapped[str] = mapped_column(String(50), nullable=False)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    granted_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False, server_default=func.now())


class XpBalance(Base):
    __tablename__ = 'xp_balances'
    __table_args__ = (
        CheckConstraint('experience_points >= 0', name='xp_balance_non_negative'),
    )

    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    experience_points: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(), onupdate=func.now()
    )


Index('ix_reward_grants_user_granted', RewardGrant.user_id, RewardGrant.granted_at)
