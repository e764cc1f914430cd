"""
app/domain/deals.py

Input models for deal lifecycle operations.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from db.models.deal import Deal


@dataclass(frozen=True)
class DealCreateInput:
    partner_id: uuid.UUID
    brand_id: uuid.UUID
    position_id: uuid.UUID
    asset_id: uuid.UUID | None = None
    geo: str | None = None
    affiliate_link: str | None = None
    tracking_domain: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    notes: str | None = None


@dataclass(frozen=True)
class DealReplaceInput:
    """
    Replace an occupying deal with a new one on the same position.

    ``geo`` falls back to the replaced deal's geo when omitted.
    """

    existing_deal_id: uuid.UUID
    partner_id: uuid.UUID
    brand_id: uuid.UUID
    geo: str | None = None
    affiliate_link: str | None = None
    tracking_domain: str | None = None
    notes: str | None = None


@dataclass(frozen=True)
class DealWithChain:
    """
    A deal plus its immediate neighbours in the replacement chain.
    """

    deal: Deal
    replaced_deal: Deal | None = None
    replaced_by: Deal | None = None
