"""
app/api/dependencies.py

Shared FastAPI dependencies and error translation.
"""

from __future__ import annotations

from fastapi import Header, HTTPException, status

from app.domain.errors import (
    AlreadyProcessed,
    BrandPartnerMismatch,
    DealNotActive,
    FetchFailure,
    NotFoundError,
    PositionOccupied,
    ReconciliationError,
    ValidationError,
)

DEFAULT_USER_ID = "system"

_STATUS_BY_ERROR: tuple[tuple[type[ReconciliationError], int], ...] = (
    (NotFoundError, status.HTTP_404_NOT_FOUND),
    (FetchFailure, status.HTTP_502_BAD_GATEWAY),
    (ValidationError, status.HTTP_400_BAD_REQUEST),
    (AlreadyProcessed, status.HTTP_400_BAD_REQUEST),
    (BrandPartnerMismatch, status.HTTP_400_BAD_REQUEST),
    (DealNotActive, status.HTTP_400_BAD_REQUEST),
    (PositionOccupied, status.HTTP_409_CONFLICT),
)


def get_current_user_id(
    x_user_id: str | None = Header(default=None, alias="X-User-Id"),
) -> str:
    """
    Resolve the acting user from the ``X-User-Id`` header.
    """

    user_id = (x_user_id or "").strip()
    return user_id or DEFAULT_USER_ID


def to_http_exception(exc: ReconciliationError) -> HTTPException:
    """
    Translate a domain error into an HTTP error carrying its code and ids.
    """

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for error_type, mapped_status in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            status_code = mapped_status
            break
    return HTTPException(status_code=status_code, detail=exc.to_dict())
