"""Shared error code constants for reconciliation and deal lifecycle failures."""

ASSET_NOT_FOUND = "asset_not_found"
SCAN_NOT_FOUND = "scan_not_found"
SCAN_ITEM_NOT_FOUND = "scan_item_not_found"
PARTNER_NOT_FOUND = "partner_not_found"
BRAND_NOT_FOUND = "brand_not_found"
POSITION_NOT_FOUND = "position_not_found"
DEAL_NOT_FOUND = "deal_not_found"

FETCH_FAILURE = "fetch_failure"
VALIDATION_ERROR = "validation_error"
ALREADY_PROCESSED = "already_processed"
BRAND_PARTNER_MISMATCH = "brand_partner_mismatch"
POSITION_OCCUPIED = "position_occupied"
DEAL_NOT_ACTIVE = "deal_not_active"
INTERNAL_ERROR = "internal_error"

