"""
db/models/asset.py

Asset hierarchy: an Asset (managed website) owns Pages, a Page owns
Positions. A Position is the slot a Deal occupies.
"""

import uuid

from sqlalchemy import ForeignKey, Index, String
from sqlalchemy.orm import Mapped, mapped_column, relationship

from db.base import Base, TimestampMixin, UUIDPrimaryKeyMixin


class AssetStatus:
    ACTIVE = "Active"
    INACTIVE = "Inactive"
    ARCHIVED = "Archived"


class Asset(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    A managed website. ``asset_domain`` is both the scan target and the
    basis for excluding internal links.
    """

    __tablename__ = "assets"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    asset_domain: Mapped[str | None] = mapped_column(String(255), nullable=True)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=AssetStatus.ACTIVE,
    )

    pages: Mapped[list["Page"]] = relationship(
        "Page",
        back_populates="asset",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("ix_assets_status", "status"),)

    def __repr__(self) -> str:
        return f"<Asset id={self.id} name={self.name!r} domain={self.asset_domain!r}>"


class Page(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    __tablename__ = "pages"

    asset_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("assets.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    path: Mapped[str] = mapped_column(String(1024), nullable=False, default="/")

    asset: Mapped["Asset"] = relationship("Asset", back_populates="pages")
    positions: Mapped[list["Position"]] = relationship(
        "Position",
        back_populates="page",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )

    __table_args__ = (Index("ix_pages_asset_id", "asset_id"),)


class Position(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """
    A named slot on a page, e.g. "Top Banner". At most one occupying deal
    may reference a position at any time.
    """

    __tablename__ = "positions"

    page_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("pages.id", ondelete="CASCADE"),
        nullable=False,
    )
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    status: Mapped[str] = mapped_column(
        String(32),
        nullable=False,
        default=AssetStatus.ACTIVE,
    )

    page: Mapped["Page"] = relationship("Page", back_populates="positions")

    __table_args__ = (Index("ix_positions_page_id", "page_id"),)

    def __repr__(self) -> str:
        return f"<Position id={self.id} name={self.name!r}>"
