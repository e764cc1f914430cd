"""
Run a deal scan for one asset from CLI.
"""

from __future__ import annotations

import argparse
import json
import uuid

from app.domain.errors import ReconciliationError
from app.services.deal_scan_service import DealScanService
from db.session import SessionLocal


def main() -> int:
    parser = argparse.ArgumentParser(description="Scan an asset page for affiliate deals.")
    parser.add_argument("asset_id", type=uuid.UUID, help="Asset id to scan.")
    parser.add_argument(
        "--user-id",
        dest="user_id",
        default="cli",
        help="User id recorded on the scan and its audit entry.",
    )
    args = parser.parse_args()

    service = DealScanService()
    with SessionLocal() as db:
        try:
            scan = service.scan(db=db, asset_id=args.asset_id, user_id=args.user_id)
        except ReconciliationError as exc:
            print(json.dumps(exc.to_dict(), indent=2))
            return 1

        payload = {
            "scan_id": str(scan.id),
            "scanned_url": scan.scanned_url,
            "total_links": scan.total_links,
            "affiliate_links": scan.affiliate_links,
            "items": [
                {
                    "id": str(item.id),
                    "type": item.type,
                    "found_url": item.found_url,
                    "matched_deal_id": str(item.matched_deal_id) if item.matched_deal_id else None,
                    "confidence": item.confidence,
                    "notes": item.notes,
                }
                for item in scan.items
            ],
        }
    print(json.dumps(payload, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
