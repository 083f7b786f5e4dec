"""initial sleep schema

Revision ID: 001
Revises:
Create Date: 2025-02-10 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

JSONType = sa.JSON().with_variant(postgresql.JSONB(), "postgresql")


def upgrade() -> None:
    op.create_table(
        'users',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(100), nullable=False),
        sa.Column('email', sa.String(255), nullable=False, unique=True),
        sa.Column('age', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    )

    op.create_table(
        'sleep_profile',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('bedtime_goal', sa.String(5), nullable=True),
        sa.Column('wakeup_goal', sa.String(5), nullable=True),
        sa.Column('sleep_challenges', JSONType, nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_sleep_profile_user_id', 'sleep_profile', ['user_id'])

    op.create_table(
        'sleep_checkin',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('checkin_date', sa.Date(), nullable=False),
        sa.Column('bedtime', sa.String(5), nullable=False),
        sa.Column('wakeup_time', sa.String(5), nullable=False),
        sa.Column('sleep_quality', sa.Integer(), nullable=False),
        sa.Column('mood', sa.Integer(), nullable=False),
        sa.Column('phone_before_bed', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('sleep_hours', sa.Numeric(4, 2), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.CheckConstraint('sleep_quality BETWEEN 1 AND 5', name='ck_sleep_checkin_quality'),
        sa.CheckConstraint('mood BETWEEN 1 AND 5', name='ck_sleep_checkin_mood'),
    )
    op.create_index('ix_sleep_checkin_user_id', 'sleep_checkin', ['user_id'])
    op.create_index('uq_sleep_checkin_user_date', 'sleep_checkin', ['user_id', 'checkin_date'], unique=True)

    op.create_table(
        'weekly_report',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('report_text', sa.Text(), nullable=False),
        sa.Column('stats', JSONType, nullable=False),
        sa.Column('week_start', sa.Date(), nullable=False),
        sa.Column('week_end', sa.Date(), nullable=False),
        sa.Column('schema_version', sa.Integer(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_weekly_report_user_id', 'weekly_report', ['user_id'])
    op.create_index('ix_weekly_report_user_created', 'weekly_report', ['user_id', 'created_at'])

    op.create_table(
        'feedback',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('user_id', sa.Uuid(), nullable=False),
        sa.Column('message', sa.Text(), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='ck_feedback_rating'),
    )
    op.create_index('ix_feedback_user_id', 'feedback', ['user_id'])


def downgrade() -> None:
    op.drop_index('ix_feedback_user_id', table_name='feedback')
    op.drop_table('feedback')
    op.drop_index('ix_weekly_report_user_created', table_name='weekly_report')
    op.drop_index('ix_weekly_report_user_id', table_name='weekly_report')
    op.drop_table('weekly_report')
    op.drop_index('uq_sleep_checkin_user_date', table_name='sleep_checkin')
    op.drop_index('ix_sleep_checkin_user_id', table_name='sleep_checkin')
    op.drop_table('sleep_checkin')
    op.drop_index('ix_sleep_profile_user_id', table_name='sleep_profile')
    op.drop_table('sleep_profile')
    op.drop_table('users')
