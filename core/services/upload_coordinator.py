# =============================================================================
# core/services/upload_coordinator.py - Upload Coordinator
# =============================================================================
# Validates incoming files against their slot and stores them.
#
# Validation always runs before the first put: a bad file in an edit means
# nothing is uploaded and no record is touched.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from app.config import settings
from app.exceptions import PortfolioException, ValidationFailedError
from core.models.assets import AssetReference, IncomingFile, Replace, SlotRule
from core.models.schemas import EntitySchema, RecordPayload
from core.services.storage_service import StorageService

logger = logging.getLogger(__name__)


@dataclass
class UploadBatch:
    """
    Result of storing several files into one slot.

    On partial failure `stored` holds the files that made it and `error`
    the failure that stopped the batch; the caller decides whether to keep
    or delete the stored subset.
    """
    stored: list[AssetReference] = field(default_factory=list)
    error: PortfolioException | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class UploadCoordinator:
    """
    Validates and stores uploads for asset slots.

    Example:
        coordinator = UploadCoordinator()
        ref = coordinator.store(PROFILE.slot("cv_pdf_url"), IncomingFile("cv.pdf", data, "application/pdf"))
        ref.key  # "1b9d...-cv.pdf"
    """

    def __init__(self, objects=StorageService, max_upload_bytes: int | None = None):
        self.objects = objects
        self.max_upload_bytes = max_upload_bytes or settings.max_upload_size_bytes

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def validate(self, slot: SlotRule, file: IncomingFile) -> None:
        """
        Check content type and size for a slot.

        Raises:
            ValidationFailedError: Wrong type, empty or oversized file
        """
        if not slot.accepts(file.content_type):
            raise ValidationFailedError(
                f"{file.filename} must be {slot.accepted_label}, got {file.content_type or 'unknown'}",
                code="INVALID_FILE_TYPE",
                suggestion=f"Upload a {slot.kind.value} file for {slot.field}",
                details={
                    "field": slot.field,
                    "filename": file.filename,
                    "content_type": file.content_type,
                    "allowed": slot.accepted_label,
                },
            )

        if file.size == 0:
            raise ValidationFailedError(
                f"{file.filename} is empty",
                code="EMPTY_FILE",
                details={"field": slot.field, "filename": file.filename},
            )

        if file.size > self.max_upload_bytes:
            size_mb = file.size / (1024 * 1024)
            max_mb = self.max_upload_bytes / (1024 * 1024)
            raise ValidationFailedError(
                f"File too large: {size_mb:.1f}MB (max: {max_mb:.0f}MB)",
                code="FILE_TOO_LARGE",
                suggestion=f"Upload a file smaller than {max_mb:.0f}MB",
                details={
                    "field": slot.field,
                    "filename": file.filename,
                    "size_bytes": file.size,
                    "max_bytes": self.max_upload_bytes,
                },
            )

    def validate_payload(self, schema: EntitySchema, payload: RecordPayload) -> None:
        """Validate every file an edit carries, before anything is stored."""
        for field_name, change in payload.assets.items():
            if isinstance(change, Replace):
                slot = schema.slot(field_name)
                for file in change.files:
                    self.validate(slot, file)

    # -------------------------------------------------------------------------
    # Storing
    # -------------------------------------------------------------------------

    def store(self, slot: SlotRule, file: IncomingFile) -> AssetReference:
        """
        Validate and store one file.

        Raises:
            ValidationFailedError: See validate()
            StoreUnavailableError: If the upload fails
        """
        self.validate(slot, file)
        key = self.objects.generate_key(file.filename)
        return self.objects.upload_file(slot.bucket, key, file.content, file.content_type)

    def store_many(self, slot: SlotRule, files: list[IncomingFile]) -> UploadBatch:
        """
        Store several files into one slot.

        All files are validated first; a validation failure raises and
        nothing is stored. Storage then proceeds file by file and stops at
        the first failure, which is returned in the batch, not raised.
        """
        if not files:
            raise ValidationFailedError("No files provided", code="NO_FILES", details={"field": slot.field})

        for file in files:
            self.validate(slot, file)

        batch = UploadBatch()
        for file in files:
            try:
                batch.stored.append(self.store(slot, file))
            except PortfolioException as e:
                logger.warning(
                    f"Upload of {file.filename} to {slot.bucket} failed after "
                    f"{len(batch.stored)} stored file(s): {e.message}"
                )
                batch.error = e
                break

        return batch

    def store_payload(
        self,
        schema: EntitySchema,
        payload: RecordPayload,
    ) -> tuple[dict[str, list[AssetReference]], PortfolioException | None]:
        """
        Store every file an edit carries, slot by slot.

        Returns:
            (stored references per field, first error or None). On error the
            mapping holds everything stored before the failure.
        """
        stored: dict[str, list[AssetReference]] = {}
        for field_name, change in payload.assets.items():
            if not isinstance(change, Replace) or not change.files:
                continue
            batch = self.store_many(schema.slot(field_name), change.files)
            stored[field_name] = batch.stored
            if not batch.ok:
                return stored, batch.error
        return stored, None
