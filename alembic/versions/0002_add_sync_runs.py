"""Add sync_runs table for sync observability

Revision ID: 0002_add_sync_runs
Revises: 0001_create_tokens
Create Date: 2025-11-09

Each migration sync (auto or baseline) records its counters here so /stats
and /health can report on recent runs. The sync engine itself never reads
this table; its watermark comes from tokens.migration_date.
"""

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = '0002_add_sync_runs'
down_revision = '0001_create_tokens'
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        'sync_runs',
        sa.Column('run_id', sa.Uuid(), primary_key=True),
        sa.Column('mode', sa.String(20), nullable=False),
        sa.Column('status', sa.String(20), nullable=False),
        sa.Column('imported', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('error_message', sa.String(), nullable=True),
        sa.Column('report', sa.JSON(), nullable=True),
        sa.Column('started_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('ended_at', sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index('ix_sync_runs_started_at', 'sync_runs', ['started_at'])


def downgrade() -> None:
    op.drop_index('ix_sync_runs_started_at', 'sync_runs')
    op.drop_table('sync_runs')
