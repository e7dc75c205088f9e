"""create tokens, token_events and token_media

Revision ID: 0001_create_tokens
Revises:
Create Date: 2025-11-02 10:15:00.000000
"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = "0001_create_tokens"
down_revision = None
branch_labels = None
depends_on = None


def upgrade() -> None:
    op.create_table(
        "tokens",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("slug", sa.String(200), nullable=False, comment="URL-safe public identifier"),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("symbol", sa.String(50), nullable=False),
        sa.Column("contract_address", sa.String(100), nullable=False, comment="Mint address on chain"),
        sa.Column("chain", sa.String(50), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("lore", sa.Text(), nullable=True),
        sa.Column("origin_story", sa.Text(), nullable=True),
        sa.Column("logo_url", sa.String(500), nullable=True),
        sa.Column("twitter_url", sa.String(500), nullable=True),
        sa.Column("telegram_url", sa.String(500), nullable=True),
        sa.Column("website_url", sa.String(500), nullable=True),
        sa.Column("launch_date", sa.DateTime(timezone=True), nullable=True),
        sa.Column("launch_price", sa.Numeric(), nullable=True),
        sa.Column("current_price", sa.Numeric(), nullable=True),
        sa.Column("market_cap", sa.Numeric(), nullable=True),
        sa.Column("volume_24h", sa.Numeric(), nullable=True),
        sa.Column("sentiment", sa.String(50), nullable=True),
        sa.Column("is_pump_fun", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("migrated", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("migration_date", sa.DateTime(timezone=True), nullable=True, comment="When the token graduated to a DEX; drives the sync watermark"),
        sa.Column("migration_dex", sa.String(100), nullable=True),
        sa.Column("published", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("slug", name="uq_tokens_slug"),
        sa.UniqueConstraint("contract_address", "chain", name="uq_tokens_contract_address_chain"),
    )
    op.create_index("ix_tokens_symbol", "tokens", ["symbol"])
    op.create_index("ix_tokens_migration_date", "tokens", ["migration_date"])

    op.create_table(
        "token_events",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("token_id", sa.Uuid(), sa.ForeignKey("tokens.id", ondelete="CASCADE"), nullable=False),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("type", sa.String(50), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_token_events_token_id", "token_events", ["token_id"])

    op.create_table(
        "token_media",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("token_id", sa.Uuid(), sa.ForeignKey("tokens.id", ondelete="CASCADE"), nullable=False),
        sa.Column("url", sa.String(500), nullable=False),
        sa.Column("type", sa.String(20), nullable=False),
        sa.Column("caption", sa.String(500), nullable=True),
        sa.Column("position", sa.Integer(), nullable=False, server_default="0"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_token_media_token_id", "token_media", ["token_id"])


def downgrade() -> None:
    op.drop_index("ix_token_media_token_id", "token_media")
    op.drop_table("token_media")
    op.drop_index("ix_token_events_token_id", "token_events")
    op.drop_table("token_events")
    op.drop_index("ix_tokens_migration_date", "tokens")
    op.drop_index("ix_tokens_symbol", "tokens")
    op.drop_table("tokens")
