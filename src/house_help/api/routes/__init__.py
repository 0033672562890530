"""API routes."""

from house_help.api.routes.health import router as health_router
from house_help.api.routes.ledger import router as ledger_router
from house_help.api.routes.share import public_router as share_public_router
from house_help.api.routes.share import router as share_links_router

__all__ = ["health_router", "ledger_router", "share_links_router", "share_public_router"]
