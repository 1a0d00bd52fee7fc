# Services package
from listing_sync.services.key_matcher import KeyMatcher
from listing_sync.services.mutation_executor import FailureClass, MutationExecutor, classify_failure
from listing_sync.services.sync_service import SyncService, run_configured_sync

__all__ = [
    "KeyMatcher",
    "FailureClass",
    "MutationExecutor",
    "classify_failure",
    "SyncService",
    "run_configured_sync",
]
