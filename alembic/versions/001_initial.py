# alembic/versions/001_initial.py

"""Initial schema: plan, portfolio, execution, notification_log

Revision ID: 001
Revises:
Create Date: 2026-10-19
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


execution_status = sa.Enum('GENERATED', 'SENT', 'CONFIRMED', name='executionstatusenum')
notification_status = sa.Enum('SUCCESS', 'FAIL', name='notificationstatusenum')


def upgrade():
    op.create_table('plan',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('plan_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('monthly_budget', sa.Numeric(precision=18, scale=2), nullable=False),
        sa.Column('currency', sa.String(length=3), nullable=False),
        sa.Column('cycle_count', sa.Integer(), nullable=False),
        sa.Column('cycle_weights', sa.JSON(), nullable=False),
        sa.Column('schedule_days', sa.JSON(), nullable=False),
        sa.Column('schedule_timezone', sa.String(length=64), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('notification_channels', sa.JSON(), nullable=False),
        sa.Column('telegram_chat_id', sa.String(length=64), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('plan_id')
    )
    op.create_index('ix_plan_user_id', 'plan', ['user_id'])
    op.create_index('ix_plan_user_active', 'plan', ['user_id', 'is_active'])

    op.create_table('portfolio',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('portfolio_id', sa.String(length=64), nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('name', sa.String(length=120), nullable=False),
        sa.Column('holdings', sa.JSON(), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('portfolio_id')
    )
    op.create_index('ix_portfolio_user_id', 'portfolio', ['user_id'])
    op.create_index('ix_portfolio_user_active', 'portfolio', ['user_id', 'is_active'])

    op.create_table('execution',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('ym_cycle', sa.String(length=16), nullable=False),
        sa.Column('year_month', sa.String(length=7), nullable=False),
        sa.Column('cycle_index', sa.Integer(), nullable=False),
        sa.Column('portfolio_id', sa.String(length=64), nullable=False),
        sa.Column('plan_id', sa.String(length=64), nullable=False),
        sa.Column('as_of_date', sa.DateTime(timezone=True), nullable=False),
        sa.Column('cycle_weight', sa.String(length=32), nullable=False),
        sa.Column('total_budget', sa.String(length=64), nullable=False),
        sa.Column('cycle_budget', sa.String(length=64), nullable=False),
        sa.Column('items', sa.JSON(), nullable=False),
        sa.Column('carry_by_ticker', sa.JSON(), nullable=False),
        sa.Column('exchange_rates', sa.JSON(), nullable=False),
        sa.Column('status', execution_status, nullable=False),
        sa.Column('confirmed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('confirm_note', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=False),
        sa.Column('deleted_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('user_id', 'ym_cycle', name='uq_execution_user_ym_cycle')
    )
    op.create_index('ix_execution_user_year_month', 'execution', ['user_id', 'year_month'])

    op.create_table('notification_log',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('user_id', sa.String(length=64), nullable=False),
        sa.Column('execution_key', sa.String(length=16), nullable=False),
        sa.Column('channel', sa.String(length=16), nullable=False),
        sa.Column('recipient', sa.String(length=255), nullable=False),
        sa.Column('status', notification_status, nullable=False),
        sa.Column('error_message', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notification_log_user_id', 'notification_log', ['user_id'])


def downgrade():
    op.drop_index('ix_notification_log_user_id', table_name='notification_log')
    op.drop_table('notification_log')
    op.drop_index('ix_execution_user_year_month', table_name='execution')
    op.drop_table('execution')
    op.drop_index('ix_portfolio_user_active', table_name='portfolio')
    op.drop_index('ix_portfolio_user_id', table_name='portfolio')
    op.drop_table('portfolio')
    op.drop_index('ix_plan_user_active', table_name='plan')
    op.drop_index('ix_plan_user_id', table_name='plan')
    op.drop_table('plan')
    execution_status.drop(op.get_bind(), checkfirst=True)
    notification_status.drop(op.get_bind(), checkfirst=True)
