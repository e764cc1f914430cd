"""
app/api/routers/deal_finder.py

Asset scan and scan item decision endpoints.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_current_user_id, to_http_exception
from app.domain.errors import ReconciliationError
from app.schemas.deal_finder import (
    ConfirmRequest,
    ConfirmResponse,
    ScanRequest,
    ScanResultResponse,
)
from app.services.deal_scan_service import DealScanService, get_deal_scan_service
from app.services.scan_confirmation_service import (
    ScanConfirmationService,
    get_scan_confirmation_service,
)
from db.session import get_db

router = APIRouter(prefix="/deal-finder", tags=["deal-finder"])


@router.post(
    "/scan",
    response_model=ScanResultResponse,
    status_code=status.HTTP_201_CREATED,
)
def scan_asset(
    body: ScanRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    scan_service: DealScanService = Depends(get_deal_scan_service),
) -> ScanResultResponse:
    """
    Scan an asset's live page and store the reconciliation diff.
    """

    try:
        scan = scan_service.scan(db=db, asset_id=body.asset_id, user_id=user_id)
    except ReconciliationError as exc:
        raise to_http_exception(exc) from exc
    return ScanResultResponse.model_validate(scan)


@router.post("/confirm", response_model=ConfirmResponse)
def confirm_scan_item(
    body: ConfirmRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    confirmation_service: ScanConfirmationService = Depends(get_scan_confirmation_service),
) -> ConfirmResponse:
    """
    Confirm or ignore one scan finding.
    """

    try:
        outcome = confirmation_service.confirm(
            db=db,
            item_id=body.item_id,
            decision=body.action,
            user_id=user_id,
            partner_id=body.partner_id,
            brand_id=body.brand_id,
            position_id=body.position_id,
        )
    except ReconciliationError as exc:
        raise to_http_exception(exc) from exc
    return ConfirmResponse(
        item_id=outcome.item_id,
        action=outcome.item_action,
        outcome=outcome.outcome,
        deal_id=outcome.deal_id,
    )


@router.get("/scans", response_model=list[ScanResultResponse])
def list_scans(
    asset_id: uuid.UUID | None = Query(default=None, description="Optional asset filter"),
    limit: int | None = Query(default=None, ge=1, le=200),
    db: Session = Depends(get_db),
    scan_service: DealScanService = Depends(get_deal_scan_service),
) -> list[ScanResultResponse]:
    scans = scan_service.list_scans(db=db, asset_id=asset_id, limit=limit)
    return [ScanResultResponse.model_validate(scan) for scan in scans]


@router.get("/scans/{scan_id}", response_model=ScanResultResponse)
def get_scan(
    scan_id: uuid.UUID,
    db: Session = Depends(get_db),
    scan_service: DealScanService = Depends(get_deal_scan_service),
) -> ScanResultResponse:
    try:
        scan = scan_service.get_scan(db=db, scan_id=scan_id)
    except ReconciliationError as exc:
        raise to_http_exception(exc) from exc
    return ScanResultResponse.model_validate(scan)
