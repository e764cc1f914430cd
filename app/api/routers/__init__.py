"""
app/api/routers package marker.
"""

from app.api.routers.deal_finder import router as deal_finder_router
from app.api.routers.deals import router as deals_router

__all__ = [
    "deal_finder_router",
    "deals_router",
]
