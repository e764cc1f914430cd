"""
app/schemas/deals.py

Request and response schemas for deal lifecycle endpoints.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DealStatusValue = Literal[
    "Unsure",
    "InContact",
    "Approved",
    "AwaitingPostback",
    "FullyImplemented",
    "Live",
    "Inactive",
]

GEO_PATTERN = r"^[A-Za-z]{2}$"


class DealCreateRequest(BaseModel):
    partner_id: uuid.UUID
    brand_id: uuid.UUID
    position_id: uuid.UUID
    asset_id: uuid.UUID | None = None
    geo: str | None = Field(default=None, pattern=GEO_PATTERN)
    affiliate_link: str | None = None
    tracking_domain: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    notes: str | None = None


class DealReplaceRequest(BaseModel):
    existing_deal_id: uuid.UUID
    partner_id: uuid.UUID
    brand_id: uuid.UUID
    geo: str | None = Field(default=None, pattern=GEO_PATTERN)
    affiliate_link: str | None = None
    tracking_domain: str | None = None
    notes: str | None = None


class DealStatusUpdateRequest(BaseModel):
    status: DealStatusValue


class DealResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    partner_id: uuid.UUID
    brand_id: uuid.UUID
    asset_id: uuid.UUID
    page_id: uuid.UUID
    position_id: uuid.UUID
    status: str
    geo: str | None = None
    affiliate_link: str | None = None
    tracking_domain: str | None = None
    is_direct: bool
    start_date: datetime | None = None
    end_date: datetime | None = None
    notes: str | None = None
    replaced_deal_id: uuid.UUID | None = None
    created_by_id: str | None = None
    updated_by_id: str | None = None


class DealReplaceResponse(BaseModel):
    ended_deal: DealResponse
    deal: DealResponse


class DealDetailResponse(BaseModel):
    """
    A deal with its immediate replacement chain neighbours.
    """

    deal: DealResponse
    replaced_deal: DealResponse | None = None
    replaced_by: DealResponse | None = None
