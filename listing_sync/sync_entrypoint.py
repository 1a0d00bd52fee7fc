"""Sync entrypoint - Standalone script for running one listing sync.

Usage:
    python -m listing_sync.sync_entrypoint

Exit codes:
    0  every listing synced (or nothing to sync)
    1  missing configuration, unexpected error, or at least one failed listing
"""

import asyncio
import sys

from listing_sync.core.config import settings
from listing_sync.core.exceptions import ConfigurationError
from listing_sync.core.logging import get_logger
from listing_sync.services.sync_service import run_configured_sync

logger = get_logger("sync_entrypoint")


def log_startup_config() -> None:
    logger.info(f"HUBSPOT_API_KEY set: {bool(settings.HUBSPOT_API_KEY)}")
    logger.info(f"APPFOLIO_CLIENT_ID: {(settings.APPFOLIO_CLIENT_ID or '')[:8]}")
    logger.info(f"HUBDB_TABLE_ID (internal): {settings.HUBDB_TABLE_ID}")
    logger.info(f"HUBDB_TABLE_ID_PUBLIC: {settings.HUBDB_TABLE_ID_PUBLIC}")


def main() -> int:
    """Main entry point for the sync job."""
    try:
        settings.require_sync_settings()
    except ConfigurationError as exc:
        logger.error(str(exc))
        return 1

    log_startup_config()
    logger.info("Listing sync starting...")

    try:
        result = asyncio.run(run_configured_sync(settings))
    except Exception as exc:  # noqa: BLE001
        logger.exception(f"Listing sync aborted: {exc}")
        return 1

    logger.info(
        f"Listing sync completed | fetched={result.fetched} active={result.active} "
        f"postable={result.postable} failed={len(result.failed_listings)}"
    )
    return 0 if result.success else 1


if __name__ == "__main__":
    sys.exit(main())
