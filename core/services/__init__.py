# =============================================================================
# core/services/__init__.py - Service Layer Exports
# =============================================================================

from .storage_service import StorageService
from .asset_resolver import AssetReferenceResolver, ResolvedUpdate
from .upload_coordinator import UploadBatch, UploadCoordinator
from .cleanup_executor import CleanupExecutor, CleanupFailure, CleanupReport
from .record_service import MutationResult, RecordService

__all__ = [
    "StorageService",
    "AssetReferenceResolver",
    "ResolvedUpdate",
    "UploadBatch",
    "UploadCoordinator",
    "CleanupExecutor",
    "CleanupFailure",
    "CleanupReport",
    "MutationResult",
    "RecordService",
]
