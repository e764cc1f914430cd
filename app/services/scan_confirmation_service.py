"""
app/services/scan_confirmation_service.py

Operator decisions on scan findings.

Preconditions (item exists, still Pending, required ids supplied) are checked
in a read transaction before anything is written. The mutation then runs in
its own transaction, under the position lock where occupancy is involved, and
moves the item out of Pending with a compare-and-set update so a concurrent
second decision fails with AlreadyProcessed.
"""

from __future__ import annotations

import logging
import uuid
from functools import lru_cache

from sqlalchemy.orm import Session

from app.domain.deal_reconciliation import ConfirmOutcome
from app.domain.errors import (
    AlreadyProcessed,
    ScanItemNotFound,
    ValidationError,
)
from app.scanning.logging_utils import log_event
from app.services.audit_service import AuditRecorder
from app.services.deal_lifecycle_service import DEAL_ENTITY, DealLifecycleService
from db.models.scan_result import ScanItemAction, ScanItemType
from db.repositories.deal_repository import DealRepository
from db.repositories.scan_result_repository import ScanResultRepository

logger = logging.getLogger(__name__)

SCAN_ITEM_ENTITY = "ScanResultItem"

DECISIONS: tuple[str, ...] = (ScanItemAction.CONFIRMED, ScanItemAction.IGNORED)


def _already_processed(item_id: uuid.UUID, action: str | None = None) -> AlreadyProcessed:
    return AlreadyProcessed("Scan item already processed.", item_id=item_id, action=action)


class ScanConfirmationService:
    def __init__(self, *, lifecycle: DealLifecycleService | None = None) -> None:
        self._lifecycle = lifecycle or DealLifecycleService()

    def confirm(
        self,
        *,
        db: Session,
        item_id: uuid.UUID,
        decision: str,
        user_id: str,
        partner_id: uuid.UUID | None = None,
        brand_id: uuid.UUID | None = None,
        position_id: uuid.UUID | None = None,
    ) -> ConfirmOutcome:
        if decision not in DECISIONS:
            raise ValidationError(
                "Decision must be Confirmed or Ignored.",
                decision=decision,
            )

        with db.begin():
            item = ScanResultRepository(db).get_item(item_id)
            if item is None:
                raise ScanItemNotFound("Scan item not found.", item_id=item_id)
            if item.action != ScanItemAction.PENDING:
                raise _already_processed(item_id, item.action)
            item_type = item.type
            scan_id = item.scan_id
            scan_asset_id = item.scan.asset_id
            found_url = item.found_url
            matched_deal_id = item.matched_deal_id
            matched_position_id = None
            if matched_deal_id is not None:
                matched_deal = DealRepository(db).get_deal(matched_deal_id)
                if matched_deal is not None:
                    matched_position_id = matched_deal.position_id

        if decision == ScanItemAction.IGNORED:
            outcome = self._acknowledge(db, item_id=item_id, action=ScanItemAction.IGNORED)
        elif item_type == ScanItemType.MISSING and matched_deal_id is not None:
            outcome = self._end_missing_deal(
                db,
                item_id=item_id,
                scan_id=scan_id,
                deal_id=matched_deal_id,
                position_id=matched_position_id,
                user_id=user_id,
            )
        elif item_type == ScanItemType.NEW_UNMATCHED:
            missing = [
                name
                for name, value in (
                    ("partner_id", partner_id),
                    ("brand_id", brand_id),
                    ("position_id", position_id),
                )
                if value is None
            ]
            if missing:
                raise ValidationError(
                    "partner_id, brand_id and position_id are required to confirm a new link.",
                    item_id=item_id,
                    missing=", ".join(missing),
                )
            outcome = self._create_deal_from_item(
                db,
                item_id=item_id,
                scan_id=scan_id,
                asset_id=scan_asset_id,
                found_url=found_url,
                partner_id=partner_id,
                brand_id=brand_id,
                position_id=position_id,
                user_id=user_id,
            )
        else:
            outcome = self._acknowledge(db, item_id=item_id, action=ScanItemAction.CONFIRMED)

        log_event(
            logger,
            logging.INFO,
            "scan_item_decided",
            item_id=item_id,
            item_type=item_type,
            decision=decision,
            outcome=outcome.outcome,
            deal_id=outcome.deal_id,
            user_id=user_id,
        )
        return outcome

    def _acknowledge(self, db: Session, *, item_id: uuid.UUID, action: str) -> ConfirmOutcome:
        with db.begin():
            if not ScanResultRepository(db).claim_item(item_id, action=action):
                raise _already_processed(item_id)
        outcome = "ignored" if action == ScanItemAction.IGNORED else "acknowledged"
        return ConfirmOutcome(item_id=item_id, item_action=action, outcome=outcome)

    def _end_missing_deal(
        self,
        db: Session,
        *,
        item_id: uuid.UUID,
        scan_id: uuid.UUID,
        deal_id: uuid.UUID,
        position_id: uuid.UUID | None,
        user_id: str,
    ) -> ConfirmOutcome:
        with self._lifecycle.position_transaction(db, position_id):
            if not ScanResultRepository(db).claim_item(item_id, action=ScanItemAction.CONFIRMED):
                raise _already_processed(item_id)
            deal = DealRepository(db).get_deal(deal_id, for_update=True)
            if deal is None or not deal.is_occupying:
                # Ended elsewhere since the scan; nothing left to end.
                ended = False
            else:
                self._lifecycle.close_deal(db, deal, user_id=user_id)
                AuditRecorder(db).record(
                    user_id=user_id,
                    entity=DEAL_ENTITY,
                    entity_id=deal.id,
                    action="ENDED_BY_SCAN",
                    details={
                        "scan_id": scan_id,
                        "item_id": item_id,
                        "reason": "Link not found on asset page",
                    },
                )
                ended = True
        return ConfirmOutcome(
            item_id=item_id,
            item_action=ScanItemAction.CONFIRMED,
            outcome="deal_ended" if ended else "acknowledged",
            deal_id=deal_id,
        )

    def _create_deal_from_item(
        self,
        db: Session,
        *,
        item_id: uuid.UUID,
        scan_id: uuid.UUID,
        asset_id: uuid.UUID,
        found_url: str | None,
        partner_id: uuid.UUID,
        brand_id: uuid.UUID,
        position_id: uuid.UUID,
        user_id: str,
    ) -> ConfirmOutcome:
        with self._lifecycle.position_transaction(db, position_id):
            repository = ScanResultRepository(db)
            if not repository.claim_item(item_id, action=ScanItemAction.CONFIRMED):
                raise _already_processed(item_id)
            partner, brand = self._lifecycle.require_brand_of_partner(
                db,
                partner_id=partner_id,
                brand_id=brand_id,
            )
            position = self._lifecycle.lock_free_position(db, position_id)
            deal = self._lifecycle.open_deal(
                db,
                partner=partner,
                brand=brand,
                position=position,
                user_id=user_id,
                asset_id=asset_id,
                affiliate_link=found_url,
                notes="Created from deal scan",
            )
            repository.set_matched_deal(item_id, deal.id)

            audit = AuditRecorder(db)
            audit.record(
                user_id=user_id,
                entity=DEAL_ENTITY,
                entity_id=deal.id,
                action="CREATE_FROM_SCAN",
                details={"scan_id": scan_id, "item_id": item_id, "status": deal.status},
            )
            audit.record(
                user_id=user_id,
                entity=SCAN_ITEM_ENTITY,
                entity_id=item_id,
                action="CONFIRM_SCAN_ITEM",
                details={"deal_id": deal.id},
            )
        return ConfirmOutcome(
            item_id=item_id,
            item_action=ScanItemAction.CONFIRMED,
            outcome="deal_created",
            deal_id=deal.id,
        )


@lru_cache(maxsize=1)
def get_scan_confirmation_service() -> ScanConfirmationService:
    """
    Build and cache scan confirmation service.
    """

    return ScanConfirmationService()
