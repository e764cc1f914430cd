"""
db/models/scan_result.py

Scan results: one row per asset scan plus its classified findings.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Float, ForeignKey, Index, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, UUIDPrimaryKeyMixin


class ScanItemType:
    VERIFIED = "Verified"
    NEW_UNMATCHED = "NewUnmatched"
    MISSING = "Missing"
    REPLACEMENT = "Replacement"


SCAN_ITEM_TYPES: tuple[str, ...] = (
    ScanItemType.VERIFIED,
    ScanItemType.NEW_UNMATCHED,
    ScanItemType.MISSING,
    ScanItemType.REPLACEMENT,
)


class ScanItemAction:
    PENDING = "Pending"
    CONFIRMED = "Confirmed"
    IGNORED = "Ignored"


class ScanResult(Base, UUIDPrimaryKeyMixin):
    """
    One execution of the scanner against one asset. Immutable after
    creation except for each item's ``action``.
    """

    __tablename__ = "scan_results"

    asset_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("assets.id", ondelete="CASCADE"),
        nullable=False,
    )
    scanned_url: Mapped[str] = mapped_column(Text, nullable=False)
    total_links: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    affiliate_links: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    user_id: Mapped[str | None] = mapped_column(String(255), nullable=True)
    scanned_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        server_default=func.now(),
    )

    items: Mapped[list[ScanResultItem]] = relationship(
        "ScanResultItem",
        back_populates="scan",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ScanResultItem.ordinal",
    )

    __table_args__ = (Index("ix_scan_results_asset_id_scanned_at", "asset_id", "scanned_at"),)


class ScanResultItem(Base, UUIDPrimaryKeyMixin):
    __tablename__ = "scan_result_items"

    scan_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("scan_results.id", ondelete="CASCADE"),
        nullable=False,
    )
    ordinal: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    type: Mapped[str] = mapped_column(String(32), nullable=False)
    found_url: Mapped[str | None] = mapped_column(Text, nullable=True)
    found_anchor: Mapped[str | None] = mapped_column(Text, nullable=True)
    matched_deal_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("deals.id"),
        nullable=True,
    )
    matched_brand_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("brands.id"),
        nullable=True,
    )
    confidence: Mapped[float | None] = mapped_column(Float, nullable=True)
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    action: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=ScanItemAction.PENDING,
    )

    scan: Mapped[ScanResult] = relationship("ScanResult", back_populates="items")

    __table_args__ = (
        Index("ix_scan_result_items_scan_id", "scan_id"),
        Index("ix_scan_result_items_action", "action"),
    )

    def __repr__(self) -> str:
        return f"<ScanResultItem id={self.id} type={self.type!r} action={self.action!r}>"
