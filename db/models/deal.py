"""
db/models/deal.py

Deal model: a Brand/Partner occupying a Position with an affiliate link.
"""

from __future__ import annotations

import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class DealStatus:
    UNSURE = "Unsure"
    IN_CONTACT = "InContact"
    APPROVED = "Approved"
    AWAITING_POSTBACK = "AwaitingPostback"
    FULLY_IMPLEMENTED = "FullyImplemented"
    LIVE = "Live"
    INACTIVE = "Inactive"


DEAL_STATUSES: tuple[str, ...] = (
    DealStatus.UNSURE,
    DealStatus.IN_CONTACT,
    DealStatus.APPROVED,
    DealStatus.AWAITING_POSTBACK,
    DealStatus.FULLY_IMPLEMENTED,
    DealStatus.LIVE,
    DealStatus.INACTIVE,
)

# Every status except the terminal one keeps the position taken.
OCCUPYING_STATUSES: tuple[str, ...] = tuple(
    status for status in DEAL_STATUSES if status != DealStatus.INACTIVE
)

# Status a direct partner's deal starts in while its SOP checklist is incomplete.
PENDING_APPROVAL_STATUS = DealStatus.APPROVED

_OCCUPYING_PREDICATE = text(f"status <> '{DealStatus.INACTIVE}'")


class Deal(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    A commercial placement.

    ``replaced_deal_id`` points at the deal this one superseded. It is written
    once at creation and never updated, so replacement chains cannot cycle;
    the unique constraint gives every deal at most one successor.
    """

    __tablename__ = "deals"

    partner_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("partners.id"), nullable=False)
    brand_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("brands.id"), nullable=False)
    asset_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("assets.id"), nullable=False)
    page_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("pages.id"), nullable=False)
    position_id: Mapped[uuid.UUID] = mapped_column(ForeignKey("positions.id"), nullable=False)

    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=DealStatus.LIVE,
    )
    geo: Mapped[str | None] = mapped_column(String(2), nullable=True)
    affiliate_link: Mapped[str | None] = mapped_column(Text, nullable=True)
    tracking_domain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    is_direct: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    start_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    replaced_deal_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("deals.id"),
        nullable=True,
        unique=True,
    )
    created_by_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    updated_by_id: Mapped[str | None] = mapped_column(String(255), nullable=True)

    replaced_deal: Mapped[Deal | None] = relationship(
        "Deal",
        remote_side="Deal.id",
        back_populates="replaced_by",
    )
    replaced_by: Mapped[Deal | None] = relationship(
        "Deal",
        back_populates="replaced_deal",
        uselist=False,
    )

    __table_args__ = (
        Index("ix_deals_asset_id_status", "asset_id", "status"),
        Index("ix_deals_brand_id", "brand_id"),
        Index("ix_deals_partner_id", "partner_id"),
        Index(
            "uq_deals_position_occupying",
            "position_id",
            unique=True,
            postgresql_where=_OCCUPYING_PREDICATE,
            sqlite_where=_OCCUPYING_PREDICATE,
        ),
    )

    @property
    def is_occupying(self) -> bool:
        return self.status in OCCUPYING_STATUSES

    def __repr__(self) -> str:
        return f"<Deal id={self.id} position_id={self.position_id} status={self.status!r}>"
