"""
app/services/deal_scan_service.py

Service orchestration for asset deal scans.
"""

from __future__ import annotations

import logging
import uuid
from functools import lru_cache

from sqlalchemy.orm import Session

from app.config import DealScanSettings, get_deal_scan_settings
from app.domain.errors import (
    AssetNotFound,
    InternalReconciliationError,
    ReconciliationError,
    ScanNotFound,
)
from app.scanning.engine import DealScanEngine
from app.scanning.fetcher import PageFetcher
from app.scanning.logging_utils import log_event
from app.services.audit_service import AuditRecorder
from db.models.scan_result import ScanItemType, ScanResult
from db.repositories.asset_repository import AssetRepository
from db.repositories.deal_repository import DealRepository
from db.repositories.partner_repository import PartnerRepository
from db.repositories.scan_result_repository import ScanResultRepository

logger = logging.getLogger(__name__)

SCAN_ENTITY = "ScanResult"


class DealScanService:
    """
    Scans an asset's live page and stores the reconciliation diff.

    The page fetch runs outside any database transaction. The brand/deal
    snapshot, the stored result and its audit entry share one transaction.
    """

    def __init__(
        self,
        *,
        settings: DealScanSettings | None = None,
        engine: DealScanEngine | None = None,
    ) -> None:
        self._settings = settings or get_deal_scan_settings()
        self._engine = engine or DealScanEngine(fetcher=PageFetcher(settings=self._settings))

    def scan(self, *, db: Session, asset_id: uuid.UUID, user_id: str) -> ScanResult:
        with db.begin():
            asset = AssetRepository(db).get_asset(asset_id)
            if asset is None:
                raise AssetNotFound("Asset not found.", asset_id=asset_id)
            asset_domain = (asset.asset_domain or "").strip()
        if not asset_domain:
            raise AssetNotFound("Asset has no domain to scan.", asset_id=asset_id)

        try:
            harvest = self._engine.harvest(asset_domain)
            with db.begin():
                brands = PartnerRepository(db).list_scannable_brands()
                deals = DealRepository(db).list_occupying_deals(asset_id)
                analysis = self._engine.analyze(harvest, brands=brands, deals=deals)
                scan = ScanResultRepository(db).create_scan_result(
                    asset_id=asset_id,
                    scanned_url=analysis.scanned_url,
                    total_links=analysis.total_links,
                    affiliate_links=analysis.affiliate_links,
                    user_id=user_id,
                    items=analysis.items,
                )
                counts = analysis.counts()
                AuditRecorder(db).record(
                    user_id=user_id,
                    entity=SCAN_ENTITY,
                    entity_id=scan.id,
                    action="SCAN",
                    details={
                        "asset_id": asset_id,
                        "total_links": analysis.total_links,
                        "affiliate_links": analysis.affiliate_links,
                        "verified": counts.get(ScanItemType.VERIFIED, 0),
                        "new_unmatched": counts.get(ScanItemType.NEW_UNMATCHED, 0),
                        "missing": counts.get(ScanItemType.MISSING, 0),
                        "replacements": counts.get(ScanItemType.REPLACEMENT, 0),
                    },
                )
        except ReconciliationError:
            raise
        except Exception as exc:
            logger.exception("Deal scan failed for asset_id=%s", asset_id)
            raise InternalReconciliationError(
                "Failed to scan asset.",
                asset_id=asset_id,
            ) from exc

        log_event(
            logger,
            logging.INFO,
            "asset_scan_completed",
            asset_id=asset_id,
            scan_id=scan.id,
            total_links=analysis.total_links,
            affiliate_links=analysis.affiliate_links,
            **counts,
        )
        return scan

    def list_scans(
        self,
        *,
        db: Session,
        asset_id: uuid.UUID | None = None,
        limit: int | None = None,
    ) -> list[ScanResult]:
        with db.begin():
            return ScanResultRepository(db).list_scan_results(
                asset_id=asset_id,
                limit=limit or self._settings.history_limit,
            )

    def get_scan(self, *, db: Session, scan_id: uuid.UUID) -> ScanResult:
        with db.begin():
            scan = ScanResultRepository(db).get_scan_result(scan_id)
        if scan is None:
            raise ScanNotFound("Scan result not found.", scan_id=scan_id)
        return scan


@lru_cache(maxsize=1)
def get_deal_scan_service() -> DealScanService:
    """
    Build and cache deal scan service.
    """

    return DealScanService()
