"""
Repository for scan results and their items.
"""

from __future__ import annotations

import uuid
from collections.abc import Sequence

from sqlalchemy import Select, select, update
from sqlalchemy.orm import Session, selectinload

from app.domain.deal_reconciliation import ScanItemDraft
from db.models.scan_result import ScanItemAction, ScanResult, ScanResultItem


class ScanResultRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_scan_result(
        self,
        *,
        asset_id: uuid.UUID,
        scanned_url: str,
        total_links: int,
        affiliate_links: int,
        user_id: str | None,
        items: Sequence[ScanItemDraft],
    ) -> ScanResult:
        """
        Insert a scan result together with its items, all Pending.
        """

        scan = ScanResult(
            asset_id=asset_id,
            scanned_url=scanned_url,
            total_links=total_links,
            affiliate_links=affiliate_links,
            user_id=user_id,
        )
        scan.items = [
            ScanResultItem(
                ordinal=ordinal,
                type=draft.type,
                found_url=draft.found_url,
                found_anchor=draft.found_anchor,
                matched_deal_id=draft.matched_deal_id,
                matched_brand_id=draft.matched_brand_id,
                confidence=draft.confidence,
                notes=draft.notes,
                action=ScanItemAction.PENDING,
            )
            for ordinal, draft in enumerate(items)
        ]
        self._session.add(scan)
        self._session.flush()
        return scan

    def get_scan_result(self, scan_id: uuid.UUID) -> ScanResult | None:
        stmt = (
            select(ScanResult)
            .options(selectinload(ScanResult.items))
            .where(ScanResult.id == scan_id)
            .execution_options(populate_existing=True)
        )
        return self._session.scalars(stmt).first()

    def list_scan_results(
        self,
        *,
        asset_id: uuid.UUID | None = None,
        limit: int = 20,
    ) -> list[ScanResult]:
        stmt: Select[tuple[ScanResult]] = select(ScanResult).options(
            selectinload(ScanResult.items)
        )
        if asset_id is not None:
            stmt = stmt.where(ScanResult.asset_id == asset_id)
        stmt = (
            stmt.order_by(ScanResult.scanned_at.desc())
            .limit(max(1, limit))
            .execution_options(populate_existing=True)
        )
        return list(self._session.scalars(stmt).all())

    def get_item(self, item_id: uuid.UUID) -> ScanResultItem | None:
        stmt = (
            select(ScanResultItem)
            .options(selectinload(ScanResultItem.scan))
            .where(ScanResultItem.id == item_id)
            .execution_options(populate_existing=True)
        )
        return self._session.scalars(stmt).first()

    def claim_item(
        self,
        item_id: uuid.UUID,
        *,
        action: str,
        matched_deal_id: uuid.UUID | None = None,
    ) -> bool:
        """
        Move a Pending item to ``action``.

        The update is conditional on the row still being Pending, so of two
        concurrent claims exactly one sees a changed row. Returns False when
        the item was already processed.
        """

        values: dict[str, object] = {"action": action}
        if matched_deal_id is not None:
            values["matched_deal_id"] = matched_deal_id
        stmt = (
            update(ScanResultItem)
            .where(ScanResultItem.id == item_id)
            .where(ScanResultItem.action == ScanItemAction.PENDING)
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return result.rowcount == 1

    def set_matched_deal(self, item_id: uuid.UUID, deal_id: uuid.UUID) -> None:
        stmt = (
            update(ScanResultItem)
            .where(ScanResultItem.id == item_id)
            .values(matched_deal_id=deal_id)
            .execution_options(synchronize_session=False)
        )
        self._session.execute(stmt)
