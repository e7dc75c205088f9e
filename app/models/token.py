"""Canonical token catalogue with owned timeline events and gallery media.

A token is identified publicly by its ``slug`` and on-chain by the
``(contract_address, chain)`` pair. Both are unique, and the sync pipeline
relies on these constraints as the final arbiter when runs overlap.
"""

import uuid
from datetime import datetime

from sqlalchemy import (
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    Uuid,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base

ADDRESS_CONSTRAINT = "uq_tokens_contract_address_chain"
SLUG_CONSTRAINT = "uq_tokens_slug"


class Token(Base):
    __tablename__ = "tokens"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    slug: Mapped[str] = mapped_column(String(200), nullable=False, comment="URL-safe public identifier")
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    symbol: Mapped[str] = mapped_column(String(50), nullable=False, index=True)

    contract_address: Mapped[str] = mapped_column(String(100), nullable=False, comment="Mint address on chain")
    chain: Mapped[str] = mapped_column(String(50), nullable=False)

    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    lore: Mapped[str | None] = mapped_column(Text, nullable=True)
    origin_story: Mapped[str | None] = mapped_column(Text, nullable=True)

    logo_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    twitter_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    telegram_url: Mapped[str | None] = mapped_column(String(500), nullable=True)
    website_url: Mapped[str | None] = mapped_column(String(500), nullable=True)

    # Market data, maintained through the admin API
    launch_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    launch_price: Mapped[float | None] = mapped_column(Numeric, nullable=True)
    current_price: Mapped[float | None] = mapped_column(Numeric, nullable=True)
    market_cap: Mapped[float | None] = mapped_column(Numeric, nullable=True)
    volume_24h: Mapped[float | None] = mapped_column(Numeric, nullable=True)
    sentiment: Mapped[str | None] = mapped_column(String(50), nullable=True)

    # Provenance
    is_pump_fun: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    migrated: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    migration_date: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True),
        nullable=True,
        index=True,
        comment="When the token graduated to a DEX; drives the sync watermark",
    )
    migration_dex: Mapped[str | None] = mapped_column(String(100), nullable=True)

    published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
    )

    events: Mapped[list["TokenEvent"]] = relationship(
        back_populates="token",
        cascade="all, delete-orphan",
        order_by="TokenEvent.date",
    )

    gallery: Mapped[list["TokenMedia"]] = relationship(
        back_populates="token",
        cascade="all, delete-orphan",
        order_by="TokenMedia.position",
    )

    __table_args__ = (
        UniqueConstraint("slug", name=SLUG_CONSTRAINT),
        UniqueConstraint("contract_address", "chain", name=ADDRESS_CONSTRAINT),
    )


class TokenEvent(Base):
    """A dated entry on a token's timeline (launch, listing, partnership...)."""

    __tablename__ = "token_events"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    token_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tokens.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    type: Mapped[str] = mapped_column(String(50), nullable=False, default="Other")

    token: Mapped[Token] = relationship(back_populates="events")


class TokenMedia(Base):
    __tablename__ = "token_media"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    token_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("tokens.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    url: Mapped[str] = mapped_column(String(500), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False, default="image")
    caption: Mapped[str | None] = mapped_column(String(500), nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    token: Mapped[Token] = relationship(back_populates="gallery")
