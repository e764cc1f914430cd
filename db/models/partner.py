"""
db/models/partner.py

Partner model: the commercial counterparty that owns brands and signs deals.
"""

from typing import TYPE_CHECKING

from sqlalchemy import Boolean, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin

if TYPE_CHECKING:
    from db.models.brand import Brand


class Partner(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    An affiliate partner.

    Direct partners must complete the SOP checklist (contract, license,
    banking) before any of their deals may start at full Live status.
    """

    __tablename__ = "partners"

    name: Mapped[str] = mapped_column(String(255), nullable=False)

    is_direct: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        comment="Direct partners are subject to SOP gating",
    )
    has_contract: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_license: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    has_banking: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    brands: Mapped[list["Brand"]] = relationship(
        "Brand",
        back_populates="partner",
    )

    __table_args__ = (Index("ix_partners_name", "name"),)

    @property
    def sop_complete(self) -> bool:
        return bool(self.has_contract and self.has_license and self.has_banking)

    def __repr__(self) -> str:
        return f"<Partner id={self.id} name={self.name!r} is_direct={self.is_direct}>"
