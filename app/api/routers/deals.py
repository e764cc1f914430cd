"""
app/api/routers/deals.py

Deal lifecycle endpoints.
"""

from __future__ import annotations

import uuid

from fastapi import APIRouter, Depends, status
from sqlalchemy.orm import Session

from app.api.dependencies import get_current_user_id, to_http_exception
from app.domain.deals import DealCreateInput, DealReplaceInput
from app.domain.errors import ReconciliationError
from app.schemas.deals import (
    DealCreateRequest,
    DealDetailResponse,
    DealReplaceRequest,
    DealReplaceResponse,
    DealResponse,
    DealStatusUpdateRequest,
)
from app.services.deal_lifecycle_service import (
    DealLifecycleService,
    get_deal_lifecycle_service,
)
from db.session import get_db

router = APIRouter(prefix="/deals", tags=["deals"])


@router.post(
    "",
    response_model=DealResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_deal(
    body: DealCreateRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    lifecycle: DealLifecycleService = Depends(get_deal_lifecycle_service),
) -> DealResponse:
    """
    Create a deal on a free position.

    Raises HTTP 409 when the position already has an active deal.
    """

    try:
        deal = lifecycle.create_deal(
            db=db,
            data=DealCreateInput(**body.model_dump()),
            user_id=user_id,
        )
    except ReconciliationError as exc:
        raise to_http_exception(exc) from exc
    return DealResponse.model_validate(deal)


@router.post(
    "/replace",
    response_model=DealReplaceResponse,
    status_code=status.HTTP_201_CREATED,
)
def replace_deal(
    body: DealReplaceRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    lifecycle: DealLifecycleService = Depends(get_deal_lifecycle_service),
) -> DealReplaceResponse:
    try:
        ended, successor = lifecycle.replace_deal(
            db=db,
            data=DealReplaceInput(**body.model_dump()),
            user_id=user_id,
        )
    except ReconciliationError as exc:
        raise to_http_exception(exc) from exc
    return DealReplaceResponse(
        ended_deal=DealResponse.model_validate(ended),
        deal=DealResponse.model_validate(successor),
    )


@router.patch("/{deal_id}/status", response_model=DealResponse)
def change_deal_status(
    deal_id: uuid.UUID,
    body: DealStatusUpdateRequest,
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
    lifecycle: DealLifecycleService = Depends(get_deal_lifecycle_service),
) -> DealResponse:
    try:
        deal = lifecycle.change_deal_status(
            db=db,
            deal_id=deal_id,
            status=body.status,
            user_id=user_id,
        )
    except ReconciliationError as exc:
        raise to_http_exception(exc) from exc
    return DealResponse.model_validate(deal)


@router.get("/{deal_id}", response_model=DealDetailResponse)
def get_deal(
    deal_id: uuid.UUID,
    db: Session = Depends(get_db),
    lifecycle: DealLifecycleService = Depends(get_deal_lifecycle_service),
) -> DealDetailResponse:
    try:
        chain = lifecycle.get_deal(db=db, deal_id=deal_id)
    except ReconciliationError as exc:
        raise to_http_exception(exc) from exc
    return DealDetailResponse(
        deal=DealResponse.model_validate(chain.deal),
        replaced_deal=(
            DealResponse.model_validate(chain.replaced_deal) if chain.replaced_deal else None
        ),
        replaced_by=(
            DealResponse.model_validate(chain.replaced_by) if chain.replaced_by else None
        ),
    )
