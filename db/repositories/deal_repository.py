"""
db/repositories/deal_repository.py

Persistence layer for Deal records.

All methods are transaction-safe. The caller controls commit/rollback;
this repository never commits on its own.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.domain.deal_reconciliation import DealInfo
from db.models.deal import OCCUPYING_STATUSES, Deal, DealStatus


class DealRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    # ------------------------------------------------------------------
    # Read
    # ------------------------------------------------------------------

    def get_deal(self, deal_id: uuid.UUID, *, for_update: bool = False) -> Deal | None:
        stmt = (
            select(Deal)
            .where(Deal.id == deal_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self._session.scalars(stmt).first()

    def find_occupying_deal(self, position_id: uuid.UUID) -> Deal | None:
        stmt = (
            select(Deal)
            .where(Deal.position_id == position_id)
            .where(Deal.status.in_(OCCUPYING_STATUSES))
            .limit(1)
        )
        return self._session.scalars(stmt).first()

    def list_occupying_deals(self, asset_id: uuid.UUID) -> list[DealInfo]:
        """
        Snapshot of every occupying deal on an asset, oldest first.
        """

        stmt = (
            select(Deal)
            .where(Deal.asset_id == asset_id)
            .where(Deal.status.in_(OCCUPYING_STATUSES))
            .order_by(Deal.created_at, Deal.id)
            .execution_options(populate_existing=True)
        )
        return [
            DealInfo(
                deal_id=deal.id,
                partner_id=deal.partner_id,
                brand_id=deal.brand_id,
                affiliate_link=deal.affiliate_link,
                tracking_domain=deal.tracking_domain,
                position_id=deal.position_id,
            )
            for deal in self._session.scalars(stmt).all()
        ]

    def get_successor(self, deal_id: uuid.UUID) -> Deal | None:
        stmt = select(Deal).where(Deal.replaced_deal_id == deal_id)
        return self._session.scalars(stmt).first()

    # ------------------------------------------------------------------
    # Write
    # ------------------------------------------------------------------

    def add_deal(self, **fields: Any) -> Deal:
        deal = Deal(**fields)
        self._session.add(deal)
        self._session.flush()
        return deal

    def end_deal(
        self,
        deal: Deal,
        *,
        ended_at: datetime,
        user_id: str | None = None,
    ) -> Deal:
        deal.status = DealStatus.INACTIVE
        deal.end_date = ended_at
        deal.updated_by_id = user_id
        self._session.flush()
        return deal

    def set_status(
        self,
        deal: Deal,
        *,
        status: str,
        user_id: str | None = None,
    ) -> Deal:
        deal.status = status
        deal.updated_by_id = user_id
        self._session.flush()
        return deal
