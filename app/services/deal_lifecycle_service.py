"""
app/services/deal_lifecycle_service.py

Deal lifecycle rules: occupancy, SOP-gated initial status, creation,
replacement, ending and explicit status transitions.

Public methods own their transaction. The ``lock_free_position``,
``open_deal`` and ``close_deal`` building blocks run inside a transaction
opened by ``position_transaction`` and are shared with the scan
confirmation workflow.
"""

from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from datetime import datetime, timezone
from functools import lru_cache

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.domain.deals import DealCreateInput, DealReplaceInput, DealWithChain
from app.domain.errors import (
    BrandNotFound,
    BrandPartnerMismatch,
    DealNotActive,
    DealNotFound,
    PartnerNotFound,
    PositionNotFound,
    PositionOccupied,
    ValidationError,
)
from app.scanning.logging_utils import log_event
from app.services.audit_service import AuditRecorder
from app.services.position_locks import PositionLockRegistry, get_position_lock_registry
from db.models.asset import Position
from db.models.brand import Brand
from db.models.deal import DEAL_STATUSES, PENDING_APPROVAL_STATUS, Deal, DealStatus
from db.models.partner import Partner
from db.repositories.asset_repository import AssetRepository
from db.repositories.deal_repository import DealRepository
from db.repositories.partner_repository import PartnerRepository

logger = logging.getLogger(__name__)

DEAL_ENTITY = "Deal"

_OCCUPANCY_INDEX = "uq_deals_position_occupying"


def resolve_initial_status(partner: Partner) -> str:
    """
    Direct partners without a complete SOP checklist start in the reduced
    pending-approval status; everyone else goes straight to Live.
    """

    if partner.is_direct and not partner.sop_complete:
        return PENDING_APPROVAL_STATUS
    return DealStatus.LIVE


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _normalize_geo(geo: str | None) -> str | None:
    if geo is None:
        return None
    cleaned = geo.strip().upper()
    if not cleaned:
        return None
    if len(cleaned) != 2 or not cleaned.isalpha():
        raise ValidationError("geo must be a two-letter country code.", geo=geo)
    return cleaned


def _is_occupancy_conflict(exc: IntegrityError) -> bool:
    message = str(exc.orig)
    return _OCCUPANCY_INDEX in message or "deals.position_id" in message


class DealLifecycleService:
    def __init__(self, *, locks: PositionLockRegistry | None = None) -> None:
        self._locks = locks or get_position_lock_registry()

    @contextmanager
    def position_transaction(
        self,
        db: Session,
        *position_ids: uuid.UUID | None,
    ) -> Iterator[None]:
        """
        Open a transaction while holding the in-process locks of the given
        positions. The locks are released only after commit or rollback.
        """

        with self._locks.hold(*position_ids):
            with db.begin():
                yield

    # ------------------------------------------------------------------
    # In-transaction building blocks
    # ------------------------------------------------------------------

    def require_brand_of_partner(
        self,
        db: Session,
        *,
        partner_id: uuid.UUID,
        brand_id: uuid.UUID,
    ) -> tuple[Partner, Brand]:
        repository = PartnerRepository(db)
        brand = repository.get_brand(brand_id)
        if brand is None:
            raise BrandNotFound("Brand not found.", brand_id=brand_id)
        if brand.partner_id != partner_id:
            raise BrandPartnerMismatch(
                "Brand does not belong to the given partner.",
                brand_id=brand_id,
                partner_id=partner_id,
                brand_partner_id=brand.partner_id,
            )
        partner = repository.get_partner(partner_id)
        if partner is None:
            raise PartnerNotFound("Partner not found.", partner_id=partner_id)
        return partner, brand

    def lock_free_position(self, db: Session, position_id: uuid.UUID) -> Position:
        """
        Row-lock the position and verify no occupying deal sits on it.
        """

        position = AssetRepository(db).get_position(position_id, for_update=True)
        if position is None:
            raise PositionNotFound("Position not found.", position_id=position_id)
        occupant = DealRepository(db).find_occupying_deal(position_id)
        if occupant is not None:
            raise PositionOccupied(
                "Position already has an active deal.",
                position_id=position_id,
                deal_id=occupant.id,
            )
        return position

    def open_deal(
        self,
        db: Session,
        *,
        partner: Partner,
        brand: Brand,
        position: Position,
        user_id: str,
        asset_id: uuid.UUID | None = None,
        geo: str | None = None,
        affiliate_link: str | None = None,
        tracking_domain: str | None = None,
        start_date: datetime | None = None,
        end_date: datetime | None = None,
        notes: str | None = None,
        replaced_deal_id: uuid.UUID | None = None,
    ) -> Deal:
        page = position.page
        if asset_id is not None and page.asset_id != asset_id:
            raise ValidationError(
                "Position does not belong to the given asset.",
                position_id=position.id,
                asset_id=asset_id,
            )
        try:
            return DealRepository(db).add_deal(
                partner_id=partner.id,
                brand_id=brand.id,
                asset_id=page.asset_id,
                page_id=page.id,
                position_id=position.id,
                status=resolve_initial_status(partner),
                geo=_normalize_geo(geo),
                affiliate_link=affiliate_link,
                tracking_domain=tracking_domain,
                is_direct=partner.is_direct,
                start_date=start_date or _utcnow(),
                end_date=end_date,
                notes=notes,
                replaced_deal_id=replaced_deal_id,
                created_by_id=user_id,
                updated_by_id=user_id,
            )
        except IntegrityError as exc:
            if _is_occupancy_conflict(exc):
                raise PositionOccupied(
                    "Position already has an active deal.",
                    position_id=position.id,
                ) from exc
            raise

    def close_deal(self, db: Session, deal: Deal, *, user_id: str) -> Deal:
        return DealRepository(db).end_deal(deal, ended_at=_utcnow(), user_id=user_id)

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    def create_deal(self, *, db: Session, data: DealCreateInput, user_id: str) -> Deal:
        with self.position_transaction(db, data.position_id):
            partner, brand = self.require_brand_of_partner(
                db,
                partner_id=data.partner_id,
                brand_id=data.brand_id,
            )
            position = self.lock_free_position(db, data.position_id)
            deal = self.open_deal(
                db,
                partner=partner,
                brand=brand,
                position=position,
                user_id=user_id,
                asset_id=data.asset_id,
                geo=data.geo,
                affiliate_link=data.affiliate_link,
                tracking_domain=data.tracking_domain,
                start_date=data.start_date,
                end_date=data.end_date,
                notes=data.notes,
            )
            AuditRecorder(db).record(
                user_id=user_id,
                entity=DEAL_ENTITY,
                entity_id=deal.id,
                action="CREATE",
                details={
                    "partner_id": deal.partner_id,
                    "brand_id": deal.brand_id,
                    "position_id": deal.position_id,
                    "status": deal.status,
                },
            )
        log_event(
            logger,
            logging.INFO,
            "deal_created",
            deal_id=deal.id,
            position_id=deal.position_id,
            status=deal.status,
        )
        return deal

    def replace_deal(
        self,
        *,
        db: Session,
        data: DealReplaceInput,
        user_id: str,
    ) -> tuple[Deal, Deal]:
        """
        End an occupying deal and create its successor on the same position.

        Returns ``(ended_deal, new_deal)``.
        """

        with db.begin():
            existing = DealRepository(db).get_deal(data.existing_deal_id)
            if existing is None:
                raise DealNotFound("Deal not found.", deal_id=data.existing_deal_id)
            position_id = existing.position_id

        with self.position_transaction(db, position_id):
            existing = DealRepository(db).get_deal(data.existing_deal_id, for_update=True)
            if existing is None:
                raise DealNotFound("Deal not found.", deal_id=data.existing_deal_id)
            if not existing.is_occupying:
                raise DealNotActive(
                    "Only an active deal can be replaced.",
                    deal_id=existing.id,
                    status=existing.status,
                )
            replaced_by = DealRepository(db).get_successor(existing.id)
            if replaced_by is not None:
                raise DealNotActive(
                    "Deal has already been replaced.",
                    deal_id=existing.id,
                    replaced_by=replaced_by.id,
                )
            partner, brand = self.require_brand_of_partner(
                db,
                partner_id=data.partner_id,
                brand_id=data.brand_id,
            )
            position = AssetRepository(db).get_position(existing.position_id, for_update=True)
            if position is None:
                raise PositionNotFound("Position not found.", position_id=existing.position_id)

            self.close_deal(db, existing, user_id=user_id)
            successor = self.open_deal(
                db,
                partner=partner,
                brand=brand,
                position=position,
                user_id=user_id,
                geo=data.geo if data.geo is not None else existing.geo,
                affiliate_link=data.affiliate_link,
                tracking_domain=data.tracking_domain,
                notes=data.notes,
                replaced_deal_id=existing.id,
            )
            audit = AuditRecorder(db)
            audit.record(
                user_id=user_id,
                entity=DEAL_ENTITY,
                entity_id=existing.id,
                action="ENDED_BY_REPLACEMENT",
                details={"replaced_by": successor.id},
            )
            audit.record(
                user_id=user_id,
                entity=DEAL_ENTITY,
                entity_id=successor.id,
                action="CREATE_REPLACEMENT",
                details={"replaced_deal_id": existing.id, "status": successor.status},
            )
        log_event(
            logger,
            logging.INFO,
            "deal_replaced",
            ended_deal_id=existing.id,
            deal_id=successor.id,
            position_id=successor.position_id,
        )
        return existing, successor

    def change_deal_status(
        self,
        *,
        db: Session,
        deal_id: uuid.UUID,
        status: str,
        user_id: str,
    ) -> Deal:
        if status not in DEAL_STATUSES:
            raise ValidationError(
                "Unknown deal status.",
                status=status,
                allowed=", ".join(DEAL_STATUSES),
            )

        with db.begin():
            deal = DealRepository(db).get_deal(deal_id)
            if deal is None:
                raise DealNotFound("Deal not found.", deal_id=deal_id)
            position_id = deal.position_id

        with self.position_transaction(db, position_id):
            repository = DealRepository(db)
            deal = repository.get_deal(deal_id, for_update=True)
            if deal is None:
                raise DealNotFound("Deal not found.", deal_id=deal_id)
            previous = deal.status
            if previous == status:
                return deal

            if previous == DealStatus.INACTIVE:
                raise DealNotActive(
                    "An ended deal cannot change status.",
                    deal_id=deal.id,
                    status=previous,
                    requested_status=status,
                )

            if status == DealStatus.INACTIVE:
                repository.end_deal(deal, ended_at=_utcnow(), user_id=user_id)
            else:
                repository.set_status(deal, status=status, user_id=user_id)

            AuditRecorder(db).record(
                user_id=user_id,
                entity=DEAL_ENTITY,
                entity_id=deal.id,
                action="UPDATE",
                details={"from_status": previous, "to_status": status},
            )
        log_event(
            logger,
            logging.INFO,
            "deal_status_changed",
            deal_id=deal.id,
            from_status=previous,
            to_status=status,
        )
        return deal

    def get_deal(self, *, db: Session, deal_id: uuid.UUID) -> DealWithChain:
        with db.begin():
            repository = DealRepository(db)
            deal = repository.get_deal(deal_id)
            if deal is None:
                raise DealNotFound("Deal not found.", deal_id=deal_id)
            predecessor = (
                repository.get_deal(deal.replaced_deal_id)
                if deal.replaced_deal_id is not None
                else None
            )
            successor = repository.get_successor(deal.id)
        return DealWithChain(deal=deal, replaced_deal=predecessor, replaced_by=successor)


@lru_cache(maxsize=1)
def get_deal_lifecycle_service() -> DealLifecycleService:
    """
    Build and cache deal lifecycle service.
    """

    return DealLifecycleService()
