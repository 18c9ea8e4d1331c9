"""coaching schema

Revision ID: 3b7e1c9d4a20
Revises: 
Create Date: 2026-10-19 09:12:40.511203

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b7e1c9d4a20'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'campaigns',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_campaigns_id', 'campaigns', ['id'])

    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('email', sa.String(), nullable=False),
        sa.Column('full_name', sa.String(), nullable=True),
        sa.Column('hashed_password', sa.String(), nullable=False),
        sa.Column('role', sa.String(), nullable=False, server_default='Unassigned'),
        sa.Column('manager_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=True),
        sa.Column('campaign_id', sa.Integer(), sa.ForeignKey('campaigns.id'), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_users_id', 'users', ['id'])
    op.create_index('ix_users_email', 'users', ['email'], unique=True)

    op.create_table(
        'kpis',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('name', sa.String(), nullable=False, unique=True),
        sa.Column('kpi_type', sa.String(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index('ix_kpis_id', 'kpis', ['id'])

    op.create_table(
        'campaign_kpis',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('campaign_id', sa.Integer(), sa.ForeignKey('campaigns.id'), nullable=False),
        sa.Column('kpi_id', sa.Integer(), sa.ForeignKey('kpis.id'), nullable=False),
        sa.Column('enabled', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint('campaign_id', 'kpi_id', name='uq_campaign_kpi'),
    )
    op.create_index('ix_campaign_kpis_id', 'campaign_kpis', ['id'])

    op.create_table(
        'coaching_logs',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('agent_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('coach_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('coach_name', sa.String(), nullable=False),
        sa.Column('campaign_id', sa.Integer(), sa.ForeignKey('campaigns.id'), nullable=False),
        sa.Column('action_plan', sa.Text(), nullable=False),
        sa.Column('overall_rating', sa.Float(), nullable=False),
        sa.Column('idempotency_key', sa.String(length=128), nullable=True, unique=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_coaching_logs_id', 'coaching_logs', ['id'])
    op.create_index('ix_coaching_logs_agent_id', 'coaching_logs', ['agent_id'])

    op.create_table(
        'agent_scores',
        sa.Column('id', sa.Integer(), primary_key=True),
        sa.Column('coaching_log_id', sa.Integer(), sa.ForeignKey('coaching_logs.id'), nullable=False),
        sa.Column('agent_id', sa.Integer(), sa.ForeignKey('users.id'), nullable=False),
        sa.Column('kpi_id', sa.Integer(), sa.ForeignKey('kpis.id'), nullable=False),
        sa.Column('campaign_id', sa.Integer(), sa.ForeignKey('campaigns.id'), nullable=False),
        sa.Column('score', sa.Float(), nullable=False),
        sa.Column('target', sa.Float(), nullable=False),
        sa.Column('weight', sa.Float(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=False),
    )
    op.create_index('ix_agent_scores_id', 'agent_scores', ['id'])
    op.create_index('ix_agent_scores_agent_id', 'agent_scores', ['agent_id'])
    op.create_index('ix_agent_scores_coaching_log_id', 'agent_scores', ['coaching_log_id'])


def downgrade() -> None:
    op.drop_table('agent_scores')
    op.drop_table('coaching_logs')
    op.drop_table('campaign_kpis')
    op.drop_table('kpis')
    op.drop_table('users')
    op.drop_table('campaigns')
