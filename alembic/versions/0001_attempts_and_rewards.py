"""attempt records, reward grants and xp balances

Revision ID: 0001_attempts_and_rewards
Revises:
Create Date: 2026-10-17 00:00:00.000000
"""

from collections.abc import Sequence

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql


revision: str = '0001_attempts_and_rewards'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        'attempt_records',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('subject_kind', sa.String(length=20), nullable=False),
        sa.Column('subject_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('event_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('completed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('total_items', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('completed_items', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('passed', sa.Boolean(), nullable=False, server_default=sa.text('false')),
        sa.Column('score', sa.Float(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint(
            "subject_kind in ('quiz', 'game', 'path')",
            name='attempt_record_subject_kind_values',
        ),
        sa.CheckConstraint('total_items >= 0', name='attempt_record_total_items_non_negative'),
        sa.CheckConstraint(
            'completed_items >= 0 and completed_items <= total_items',
            name='attempt_record_completed_items_range',
        ),
    )
    op.create_index(
        'ix_attempt_records_scope',
        'attempt_records',
        ['subject_kind', 'subject_id', 'event_id', 'completed_at'],
    )
    op.create_index('ix_attempt_records_event_id', 'attempt_records', ['event_id'])
    op.create_index('ix_attempt_records_user_id', 'attempt_records', ['user_id'])

    op.create_table(
        'reward_grants',
        sa.Column('id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('content_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('reason_code', sa.String(length=50), nullable=False),
        sa.Column('amount', sa.Integer(), nullable=False),
        sa.Column('granted_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.UniqueConstraint('user_id', 'content_id', 'reason_code', name='uq_reward_grants_idempotency'),
        sa.CheckConstraint('amount > 0', name='reward_grant_amount_positive'),
    )
    op.create_index('ix_reward_grants_user_granted', 'reward_grants', ['user_id', 'granted_at'])

    op.create_table(
        'xp_balances',
        sa.Column('user_id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('experience_points', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('experience_points >= 0', name='xp_balance_non_negative'),
    )

    op.create_table(
        'profiles',
        sa.Column('user_id', postgresql.UUID(as_uuid=True), primary_key=True, nullable=False),
        sa.Column('display_name', sa.String(length=200), nullable=True),
        sa.Column('avatar_ref', sa.String(length=2000), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
    )


def downgrade() -> None:
    op.drop_table('profiles')
    op.drop_table('xp_balances')
    op.drop_index('ix_reward_grants_user_granted', table_name='reward_grants')
    op.drop_table('reward_grants')
    op.drop_index('ix_attempt_records_user_id', table_name='attempt_records')
    op.drop_index('ix_attempt_records_event_id', table_name='attempt_records')
    op.drop_index('ix_attempt_records_scope', table_name='attempt_records')
    op.drop_table('attempt_records')
