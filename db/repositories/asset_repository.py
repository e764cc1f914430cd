"""
Lookups for assets, pages and positions.
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.orm import Session

from db.models.asset import Asset, Page, Position


class AssetRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def get_asset(self, asset_id: uuid.UUID) -> Asset | None:
        return self._session.get(Asset, asset_id)

    def get_page(self, page_id: uuid.UUID) -> Page | None:
        return self._session.get(Page, page_id)

    def get_position(
        self,
        position_id: uuid.UUID,
        *,
        for_update: bool = False,
    ) -> Position | None:
        """
        Load a position, optionally taking a row lock for the rest of the
        transaction. Dialects without ``FOR UPDATE`` (SQLite) ignore the lock.
        """

        stmt = (
            select(Position)
            .where(Position.id == position_id)
            .execution_options(populate_existing=True)
        )
        if for_update:
            stmt = stmt.with_for_update()
        return self._session.scalars(stmt).first()
