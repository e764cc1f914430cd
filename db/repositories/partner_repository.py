"""
Partner and brand lookups used by scanning and deal lifecycle rules.
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.domain.deal_reconciliation import BrandInfo
from db.models.brand import Brand, BrandStatus
from db.models.partner import Partner


class PartnerRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_partner(self, partner_id: uuid.UUID) -> Partner | None:
        return self._session.get(Partner, partner_id)

    def get_brand(self, brand_id: uuid.UUID) -> Brand | None:
        return self._session.get(Brand, brand_id)

    def list_scannable_brands(self) -> list[BrandInfo]:
        """
        Active brands with a registered domain, oldest first.
        """

        stmt = (
            select(Brand)
            .where(Brand.status == BrandStatus.ACTIVE)
            .where(Brand.brand_domain.is_not(None))
            .where(Brand.brand_domain != "")
            .order_by(Brand.created_at, Brand.name)
        )
        return [
            BrandInfo(
                brand_id=brand.id,
                partner_id=brand.partner_id,
                name=brand.name,
                brand_domain=brand.brand_domain,
            )
            for brand in self._session.scalars(stmt).all()
        ]
