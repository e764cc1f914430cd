"""
db/models/brand.py

Brand model. Brands with a registered domain take part in link scanning.
"""

import uuid
from typing import TYPE_CHECKING

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from db.models.partner import Partner


class BrandStatus:
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ARCHIVED = "Archived"


class Brand(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "brands"

    partner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("partners.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    brand_domain: Mapped[str | None] = mapped_column(
        String(255),
        nullable=True,
        comment="Registered domain used for heuristic link matching",
    )
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=BrandStatus.ACTIVE,
    )

    partner: Mapped["Partner"] = relationship("Partner", back_populates="brands")

    __table_args__ = (
        Index("ix_brands_partner_id", "partner_id"),
        Index("ix_brands_status", "status"),
    )

    def __repr__(self) -> str:
        return f"<Brand id={self.id} name={self.name!r} domain={self.brand_domain!r}>"
