"""
tests/test_scan_confirmation_service.py

Confirmation workflow: item state machine, deal creation from scan findings,
ending missing deals and position occupancy under concurrency.
"""

from __future__ import annotations

import threading
import uuid

import pytest

from app.domain.errors import (
    AlreadyProcessed,
    BrandNotFound,
    BrandPartnerMismatch,
    PositionNotFound,
    PositionOccupied,
    ScanItemNotFound,
    ValidationError,
)
from db.models.deal import DealStatus
from db.models.scan_result import ScanItemAction, ScanItemType, ScanResultItem

CONFIRMED = ScanItemAction.CONFIRMED
IGNORED = ScanItemAction.IGNORED


@pytest.fixture()
def world(seed):
    partner_id = seed.partner("Acme Partners")
    brand_id = seed.brand(partner_id, "Acme", "acme.com")
    asset = seed.asset("site.com", positions=3)
    deal_id = seed.deal(
        asset=asset,
        position_id=asset.position_ids[0],
        partner_id=partner_id,
        brand_id=brand_id,
        affiliate_link="https://aff.acme.com/go?btag=5",
    )
    return {"partner_id": partner_id, "brand_id": brand_id, "asset": asset, "deal_id": deal_id}


def _scan(scan_service, fake_http, db, world, html: str):
    fake_http.html = html
    return scan_service.scan(db=db, asset_id=world["asset"].asset_id, user_id="scanner")


def _item(scan, item_type: str) -> ScanResultItem:
    return next(item for item in scan.items if item.type == item_type)


def _action_of(session_factory, item_id: uuid.UUID) -> str:
    with session_factory() as session:
        return session.get(ScanResultItem, item_id).action


UNKNOWN_HTML = '<a href="https://aff.acme.com/go?btag=5">Play</a><a href="https://aff.unknown.com/offer?ref=9">Try</a>'


class TestItemStateMachine:
    def test_unknown_item_is_not_found(self, db, confirmation_service) -> None:
        with pytest.raises(ScanItemNotFound):
            confirmation_service.confirm(db=db, item_id=uuid.uuid4(), decision=CONFIRMED, user_id="u")

    def test_ignore_marks_item_ignored(
        self, db, session_factory, scan_service, fake_http, confirmation_service, world
    ) -> None:
        scan = _scan(scan_service, fake_http, db, world, UNKNOWN_HTML)
        item = _item(scan, ScanItemType.NEW_UNMATCHED)

        outcome = confirmation_service.confirm(db=db, item_id=item.id, decision=IGNORED, user_id="u")

        assert outcome.outcome == "ignored"
        assert _action_of(session_factory, item.id) == IGNORED

    def test_second_decision_is_already_processed(
        self, db, session_factory, scan_service, fake_http, confirmation_service, world
    ) -> None:
        scan = _scan(scan_service, fake_http, db, world, UNKNOWN_HTML)
        item = _item(scan, ScanItemType.VERIFIED)

        first = confirmation_service.confirm(db=db, item_id=item.id, decision=CONFIRMED, user_id="u")
        with pytest.raises(AlreadyProcessed):
            confirmation_service.confirm(db=db, item_id=item.id, decision=IGNORED, user_id="u")

        assert first.outcome == "acknowledged"
        assert _action_of(session_factory, item.id) == CONFIRMED

    def test_unknown_decision_is_rejected(
        self, db, scan_service, fake_http, confirmation_service, world
    ) -> None:
        scan = _scan(scan_service, fake_http, db, world, UNKNOWN_HTML)

        with pytest.raises(ValidationError):
            confirmation_service.confirm(db=db, item_id=scan.items[0].id, decision="Pending", user_id="u")

    def test_concurrent_decisions_on_one_item_yield_one_success(
        self, session_factory, scan_service, fake_http, confirmation_service, world
    ) -> None:
        with session_factory() as session:
            scan = _scan(scan_service, fake_http, session, world, UNKNOWN_HTML)
        item_id = _item(scan, ScanItemType.NEW_UNMATCHED).id
        position_id = world["asset"].position_ids[1]
        results: list[object] = []
        barrier = threading.Barrier(2)

        def decide() -> None:
            with session_factory() as session:
                barrier.wait()
                try:
                    results.append(
                        confirmation_service.confirm(
                            db=session,
                            item_id=item_id,
                            decision=CONFIRMED,
                            user_id="u",
                            partner_id=world["partner_id"],
                            brand_id=world["brand_id"],
                            position_id=position_id,
                        )
                    )
                except (AlreadyProcessed, PositionOccupied) as exc:
                    results.append(exc)

        threads = [threading.Thread(target=decide) for _ in range(2)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        successes = [result for result in results if not isinstance(result, Exception)]
        assert len(successes) == 1
        assert isinstance(next(r for r in results if isinstance(r, Exception)), AlreadyProcessed)


class TestMissingConfirmation:
    def test_confirming_missing_ends_the_deal(
        self, db, seed, session_factory, scan_service, fake_http, confirmation_service, world
    ) -> None:
        scan = _scan(scan_service, fake_http, db, world, "<p>no links</p>")
        item = _item(scan, ScanItemType.MISSING)

        outcome = confirmation_service.confirm(db=db, item_id=item.id, decision=CONFIRMED, user_id="ops")

        deal = seed.get_deal(world["deal_id"])
        assert outcome.outcome == "deal_ended"
        assert outcome.deal_id == world["deal_id"]
        assert deal.status == DealStatus.INACTIVE
        assert deal.end_date is not None
        assert deal.updated_by_id == "ops"
        assert _action_of(session_factory, item.id) == CONFIRMED
        assert "ENDED_BY_SCAN" in seed.audit_actions(world["deal_id"])
        assert seed.occupying_deals(world["asset"].position_ids[0]) == []

    def test_ignoring_missing_keeps_the_deal(
        self, db, seed, scan_service, fake_http, confirmation_service, world
    ) -> None:
        scan = _scan(scan_service, fake_http, db, world, "<p>no links</p>")
        item = _item(scan, ScanItemType.MISSING)

        confirmation_service.confirm(db=db, item_id=item.id, decision=IGNORED, user_id="ops")

        assert seed.get_deal(world["deal_id"]).status == DealStatus.LIVE


class TestReplacementConfirmation:
    def test_confirming_replacement_leaves_deals_untouched(
        self, db, seed, session_factory, scan_service, fake_http, confirmation_service, world
    ) -> None:
        scan = _scan(
            scan_service,
            fake_http,
            db,
            world,
            '<a href="https://promo.acme.com/welcome?ref=3">Bonus</a>',
        )
        item = _item(scan, ScanItemType.REPLACEMENT)
        before = seed.get_deal(world["deal_id"])

        outcome = confirmation_service.confirm(db=db, item_id=item.id, decision=CONFIRMED, user_id="ops")

        after = seed.get_deal(world["deal_id"])
        assert outcome.outcome == "acknowledged"
        assert outcome.deal_id is None
        assert _action_of(session_factory, item.id) == CONFIRMED
        assert item.matched_deal_id == world["deal_id"]
        assert after.status == DealStatus.LIVE
        assert after.affiliate_link == before.affiliate_link
        assert after.end_date is None
        assert after.updated_by_id == before.updated_by_id
        assert [deal.id for deal in seed.occupying_deals(world["asset"].position_ids[0])] == [
            world["deal_id"]
        ]
        assert seed.occupying_deals(world["asset"].position_ids[1]) == []
        assert seed.audit_actions(world["deal_id"]) == []


class TestNewUnmatchedConfirmation:
    def _new_item(self, db, scan_service, fake_http, world) -> ScanResultItem:
        scan = _scan(scan_service, fake_http, db, world, UNKNOWN_HTML)
        return _item(scan, ScanItemType.NEW_UNMATCHED)

    def test_creates_live_deal_from_found_url(
        self, db, seed, session_factory, scan_service, fake_http, confirmation_service, world
    ) -> None:
        item = self._new_item(db, scan_service, fake_http, world)
        position_id = world["asset"].position_ids[1]

        outcome = confirmation_service.confirm(
            db=db,
            item_id=item.id,
            decision=CONFIRMED,
            user_id="ops",
            partner_id=world["partner_id"],
            brand_id=world["brand_id"],
            position_id=position_id,
        )

        deal = seed.get_deal(outcome.deal_id)
        assert outcome.outcome == "deal_created"
        assert deal.status == DealStatus.LIVE
        assert deal.affiliate_link == "https://aff.unknown.com/offer?ref=9"
        assert deal.asset_id == world["asset"].asset_id
        assert deal.page_id == world["asset"].page_id
        assert deal.position_id == position_id
        assert deal.created_by_id == "ops"
        with session_factory() as session:
            stored = session.get(ScanResultItem, item.id)
            assert stored.action == CONFIRMED
            assert stored.matched_deal_id == deal.id
        assert seed.audit_actions(deal.id) == ["CREATE_FROM_SCAN"]
        assert seed.audit_actions(item.id) == ["CONFIRM_SCAN_ITEM"]

    def test_direct_partner_without_sop_gets_pending_approval_status(
        self, db, seed, scan_service, fake_http, confirmation_service, world
    ) -> None:
        partner_id = seed.partner("Direct Co", is_direct=True, has_banking=False)
        brand_id = seed.brand(partner_id, "Direct Brand", "direct.example")
        item = self._new_item(db, scan_service, fake_http, world)

        outcome = confirmation_service.confirm(
            db=db,
            item_id=item.id,
            decision=CONFIRMED,
            user_id="ops",
            partner_id=partner_id,
            brand_id=brand_id,
            position_id=world["asset"].position_ids[1],
        )

        deal = seed.get_deal(outcome.deal_id)
        assert deal.status == DealStatus.APPROVED
        assert deal.is_direct is True

    @pytest.mark.parametrize("missing_field", ["partner_id", "brand_id", "position_id"])
    def test_missing_ids_fail_validation_without_mutation(
        self, db, session_factory, scan_service, fake_http, confirmation_service, world, missing_field
    ) -> None:
        item = self._new_item(db, scan_service, fake_http, world)
        ids = {
            "partner_id": world["partner_id"],
            "brand_id": world["brand_id"],
            "position_id": world["asset"].position_ids[1],
        }
        ids[missing_field] = None

        with pytest.raises(ValidationError) as excinfo:
            confirmation_service.confirm(db=db, item_id=item.id, decision=CONFIRMED, user_id="ops", **ids)

        assert missing_field in excinfo.value.details["missing"]
        assert _action_of(session_factory, item.id) == ScanItemAction.PENDING

    def test_brand_of_other_partner_is_rejected_and_rolled_back(
        self, db, seed, session_factory, scan_service, fake_http, confirmation_service, world
    ) -> None:
        other_partner = seed.partner("Other")
        item = self._new_item(db, scan_service, fake_http, world)

        with pytest.raises(BrandPartnerMismatch):
            confirmation_service.confirm(
                db=db,
                item_id=item.id,
                decision=CONFIRMED,
                user_id="ops",
                partner_id=other_partner,
                brand_id=world["brand_id"],
                position_id=world["asset"].position_ids[1],
            )

        assert _action_of(session_factory, item.id) == ScanItemAction.PENDING
        assert seed.occupying_deals(world["asset"].position_ids[1]) == []

    def test_unknown_brand_and_position_are_not_found(
        self, db, scan_service, fake_http, confirmation_service, world
    ) -> None:
        item = self._new_item(db, scan_service, fake_http, world)

        with pytest.raises(BrandNotFound):
            confirmation_service.confirm(
                db=db,
                item_id=item.id,
                decision=CONFIRMED,
                user_id="ops",
                partner_id=world["partner_id"],
                brand_id=uuid.uuid4(),
                position_id=world["asset"].position_ids[1],
            )
        with pytest.raises(PositionNotFound):
            confirmation_service.confirm(
                db=db,
                item_id=item.id,
                decision=CONFIRMED,
                user_id="ops",
                partner_id=world["partner_id"],
                brand_id=world["brand_id"],
                position_id=uuid.uuid4(),
            )

    def test_occupied_position_is_rejected(
        self, db, session_factory, scan_service, fake_http, confirmation_service, world
    ) -> None:
        item = self._new_item(db, scan_service, fake_http, world)

        with pytest.raises(PositionOccupied) as excinfo:
            confirmation_service.confirm(
                db=db,
                item_id=item.id,
                decision=CONFIRMED,
                user_id="ops",
                partner_id=world["partner_id"],
                brand_id=world["brand_id"],
                position_id=world["asset"].position_ids[0],
            )

        assert excinfo.value.details["deal_id"] == str(world["deal_id"])
        assert _action_of(session_factory, item.id) == ScanItemAction.PENDING

    def test_position_on_another_asset_is_rejected(
        self, db, seed, scan_service, fake_http, confirmation_service, world
    ) -> None:
        other_asset = seed.asset("elsewhere.com")
        item = self._new_item(db, scan_service, fake_http, world)

        with pytest.raises(ValidationError):
            confirmation_service.confirm(
                db=db,
                item_id=item.id,
                decision=CONFIRMED,
                user_id="ops",
                partner_id=world["partner_id"],
                brand_id=world["brand_id"],
                position_id=other_asset.position_ids[0],
            )

    def test_concurrent_confirmations_on_one_position_leave_one_deal(
        self, session_factory, seed, scan_service, fake_http, confirmation_service, world
    ) -> None:
        html = (
            '<a href="https://aff.unknown.com/offer?ref=9">One</a>'
            '<a href="https://track.other.net/r?pid=4">Two</a>'
        )
        with session_factory() as session:
            scan = _scan(scan_service, fake_http, session, world, html)
        item_ids = [item.id for item in scan.items if item.type == ScanItemType.NEW_UNMATCHED]
        assert len(item_ids) == 2
        position_id = world["asset"].position_ids[2]
        results: list[object] = []
        barrier = threading.Barrier(len(item_ids))

        def decide(item_id: uuid.UUID) -> None:
            with session_factory() as session:
                barrier.wait()
                try:
                    results.append(
                        confirmation_service.confirm(
                            db=session,
                            item_id=item_id,
                            decision=CONFIRMED,
                            user_id="ops",
                            partner_id=world["partner_id"],
                            brand_id=world["brand_id"],
                            position_id=position_id,
                        )
                    )
                except PositionOccupied as exc:
                    results.append(exc)

        threads = [threading.Thread(target=decide, args=(item_id,)) for item_id in item_ids]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(results) == 2
        assert sum(isinstance(result, PositionOccupied) for result in results) == 1
        assert len(seed.occupying_deals(position_id)) == 1
