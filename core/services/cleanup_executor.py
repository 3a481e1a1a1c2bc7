# =============================================================================
# core/services/cleanup_executor.py - Cleanup Executor
# =============================================================================
# Deletes stored objects that no record references anymore.
#
# Only ever called after the record write that dropped the references has
# been persisted. Each deletion is independent, failures are logged and
# reported, never raised: a leftover object is a leak, not a corruption.
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from app.exceptions import ObjectNotFoundError, PortfolioException
from core.models.assets import AssetReference
from core.services.storage_service import StorageService

logger = logging.getLogger(__name__)


@dataclass
class CleanupFailure:
    """A reference that could not be deleted (left as a leaked orphan)."""
    reference: AssetReference
    reason: str

    def to_dict(self) -> dict[str, Any]:
        return {"bucket": self.reference.bucket, "key": self.reference.key, "reason": self.reason}


@dataclass
class CleanupReport:
    """
    Partial-success report of a reconcile pass.

    Attributes:
        deleted: Objects removed (or already gone)
        failed: Objects left behind, with the reason
        skipped: References not eligible (external, or still referenced)
    """
    deleted: list[AssetReference] = field(default_factory=list)
    failed: list[CleanupFailure] = field(default_factory=list)
    skipped: list[AssetReference] = field(default_factory=list)

    @property
    def deleted_keys(self) -> list[str]:
        return [ref.key for ref in self.deleted]

    def to_dict(self) -> dict[str, Any]:
        return {
            "deleted": self.deleted_keys,
            "failed": [failure.to_dict() for failure in self.failed],
            "skipped": [ref.stored_value for ref in self.skipped],
        }


class CleanupExecutor:
    """
    Best-effort deletion of orphaned objects.

    Args:
        objects: Object store (StorageService or a test double)
        is_referenced: Optional guard asked before each deletion; a True
            answer skips the object, an exception fails it. Used to make
            sure no other record still names the key.

    Example:
        executor = CleanupExecutor(is_referenced=record_service.is_referenced)
        report = executor.reconcile(resolved.references_to_orphan)
        report.to_dict()  # {"deleted": [...], "failed": [], "skipped": []}
    """

    def __init__(
        self,
        objects=StorageService,
        is_referenced: Callable[[AssetReference], bool] | None = None,
    ):
        self.objects = objects
        self.is_referenced = is_referenced

    def reconcile(self, references: Iterable[AssetReference]) -> CleanupReport:
        """Delete each reference independently and report the outcome."""
        report = CleanupReport()
        seen: set[tuple[str, str]] = set()

        for ref in references:
            if ref.identity in seen:
                continue
            seen.add(ref.identity)

            if not ref.managed:
                report.skipped.append(ref)
                continue

            if self.is_referenced is not None:
                try:
                    in_use = self.is_referenced(ref)
                except Exception as e:
                    logger.warning(f"Could not check usage of {ref.bucket}/{ref.key}, keeping it: {e}")
                    report.failed.append(CleanupFailure(ref, f"usage check failed: {e}"))
                    continue
                if in_use:
                    logger.info(f"Keeping {ref.bucket}/{ref.key}: still referenced by a record")
                    report.skipped.append(ref)
                    continue

            try:
                self.objects.delete_file(ref.bucket, ref.key)
                report.deleted.append(ref)
            except ObjectNotFoundError:
                logger.info(f"Orphan {ref.bucket}/{ref.key} was already gone")
                report.deleted.append(ref)
            except PortfolioException as e:
                logger.warning(f"Leaked orphan {ref.bucket}/{ref.key}: {e.message}")
                report.failed.append(CleanupFailure(ref, e.message))

        if report.deleted or report.failed:
            logger.info(
                f"Cleanup finished: {len(report.deleted)} deleted, "
                f"{len(report.failed)} failed, {len(report.skipped)} skipped"
            )
        return report
