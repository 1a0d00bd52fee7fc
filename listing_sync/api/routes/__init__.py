from listing_sync.api.routes.health import router as health_router
from listing_sync.api.routes.stats import router as stats_router
from listing_sync.api.routes.sync import router as sync_router

__all__ = ["health_router", "stats_router", "sync_router"]
