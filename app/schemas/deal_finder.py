"""
app/schemas/deal_finder.py

Request and response schemas for asset scans and scan item decisions.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field


class ScanRequest(BaseModel):
    asset_id: uuid.UUID


class ScanItemResponse(BaseModel):
    """
    One classified finding of a scan.
    """

    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    ordinal: int = Field(..., ge=0)
    type: str
    found_url: str | None = None
    found_anchor: str | None = None
    matched_deal_id: uuid.UUID | None = None
    matched_brand_id: uuid.UUID | None = None
    confidence: float | None = None
    notes: str | None = None
    action: str


class ScanResultResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    asset_id: uuid.UUID
    scanned_url: str
    total_links: int = Field(..., ge=0)
    affiliate_links: int = Field(..., ge=0)
    user_id: str | None = None
    scanned_at: datetime
    items: list[ScanItemResponse] = Field(default_factory=list)


class ConfirmRequest(BaseModel):
    """
    Operator decision on one scan item.

    ``partner_id``, ``brand_id`` and ``position_id`` are required only when
    confirming a NewUnmatched item.
    """

    item_id: uuid.UUID
    action: Literal["Confirmed", "Ignored"]
    partner_id: uuid.UUID | None = None
    brand_id: uuid.UUID | None = None
    position_id: uuid.UUID | None = None


class ConfirmResponse(BaseModel):
    item_id: uuid.UUID
    action: str
    outcome: str
    deal_id: uuid.UUID | None = None
