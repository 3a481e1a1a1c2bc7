# =============================================================================
# core/services/record_service.py - Record Business Logic
# =============================================================================
# Generic CRUD for profile, projects and certificates, driven by their slot
# schemas. Coordinates the record store and the object store by ordering,
# since the two share no transaction:
#
#   1. validate the edit             (nothing touched yet)
#   2. load the current record
#   3. upload new files              (Stored)
#   4. resolve merged fields/orphans
#   5. persist the record            (Referenced)
#   6. delete orphans                (Deleted | LeakedOrphan)
#
# If 3 or 5 fails, files stored for this request are removed again and the
# raised error lists them in details["orphaned_uploads"]. Step 6 never fails
# the request.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from app.exceptions import (
    AssetInUseError,
    PersistFailedError,
    PortfolioException,
    RecordNotFoundError,
    StoreUnavailableError,
    ValidationFailedError,
)
from core.models.assets import AssetReference, IncomingFile, Replace, StoredObject
from core.models.schemas import SCHEMAS, EntitySchema, RecordPayload
from core.services.asset_resolver import AssetReferenceResolver
from core.services.cleanup_executor import CleanupExecutor, CleanupReport
from core.services.storage_service import StorageService
from core.services.upload_coordinator import UploadCoordinator
from lib.supabase_client import SupabaseClient, SupabaseClientError

logger = logging.getLogger(__name__)


@dataclass
class MutationResult:
    """A persisted record plus what happened to the files it stopped using."""
    record: dict[str, Any] | None
    cleanup: CleanupReport = field(default_factory=CleanupReport)


class RecordService:
    """
    Service for portfolio record operations.

    Provides a clean interface between API routes and the two stores.

    Args:
        records: Record store (SupabaseClient or a test double)
        objects: Object store (StorageService or a test double)

    Example:
        service = RecordService()
        result = service.update(PROFILE, None, RecordPayload(assets={"cv_pdf_url": Clear()}))
        result.cleanup.deleted_keys  # ["1b9d...-cv.pdf"]
    """

    def __init__(
        self,
        records=SupabaseClient,
        objects=StorageService,
        coordinator: UploadCoordinator | None = None,
        resolver: AssetReferenceResolver | None = None,
        executor: CleanupExecutor | None = None,
    ):
        self.records = records
        self.objects = objects
        self.coordinator = coordinator or UploadCoordinator(objects)
        self.resolver = resolver or AssetReferenceResolver(objects)
        self.executor = executor or CleanupExecutor(objects, is_referenced=self.is_referenced)
        # Rollback of this request's own uploads: those keys are fresh, so no usage check
        self._rollback_executor = CleanupExecutor(objects)

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------

    def find(self, schema: EntitySchema, record_id: str | int | None = None) -> dict[str, Any] | None:
        """
        Fetch a record, or None if it doesn't exist.

        Raises:
            StoreUnavailableError: If the record store fails
        """
        record_id = self._record_id(schema, record_id)
        try:
            return self.records.fetch_record(schema.table, record_id)
        except SupabaseClientError as e:
            raise StoreUnavailableError(f"fetch {schema.name}", e.message, details={"id": str(record_id)})

    def get(self, schema: EntitySchema, record_id: str | int | None = None) -> dict[str, Any]:
        """
        Fetch a record.

        Raises:
            RecordNotFoundError: If it doesn't exist
            StoreUnavailableError: If the record store fails
        """
        record = self.find(schema, record_id)
        if record is None:
            raise RecordNotFoundError(schema.table, self._record_id(schema, record_id))
        return record

    def list_records(
        self,
        schema: EntitySchema,
        filters: dict[str, Any] | None = None,
    ) -> list[dict[str, Any]]:
        """List records newest first, optionally filtered by column equality."""
        try:
            return self.records.list_records(schema.table, filters=filters, order_by="created_at", descending=True)
        except SupabaseClientError as e:
            raise StoreUnavailableError(f"list {schema.name} records", e.message)

    def present(self, schema: EntitySchema, record: dict[str, Any] | None) -> dict[str, Any]:
        """
        Public view of a record: asset columns turned into public URLs.

        A missing record (only possible for the singleton profile) is shown
        with every field empty.
        """
        if record is None:
            view: dict[str, Any] = {name: "" for name in schema.scalar_fields}
            view.update({slot.field: slot.empty_value for slot in schema.slots})
            return view

        view = dict(record)
        for slot in schema.slots:
            urls = [ref.public_url for ref in self.resolver.slot_references(slot, record.get(slot.field))]
            view[slot.field] = urls if slot.multiple else (urls[0] if urls else "")
        return view

    # -------------------------------------------------------------------------
    # Writes
    # -------------------------------------------------------------------------

    def create(self, schema: EntitySchema, payload: RecordPayload) -> MutationResult:
        """
        Create a record, uploading any files it carries first.

        For the singleton profile this is an update of its fixed row.

        Raises:
            ValidationFailedError: Missing required field or bad file
            StoreUnavailableError: Upload or insert failed
        """
        if schema.is_singleton:
            return self.update(schema, schema.singleton_id, payload)

        self._validate(schema, payload, creating=True)
        return self._apply(schema, None, None, payload)

    def update(
        self,
        schema: EntitySchema,
        record_id: str | int | None,
        payload: RecordPayload,
    ) -> MutationResult:
        """
        Apply a partial edit.

        Fields absent from the payload keep their value; cleared or replaced
        files are deleted once the record no longer names them.

        Raises:
            ValidationFailedError: Bad input (nothing is touched)
            RecordNotFoundError: No such record
            StoreUnavailableError: Upload or persist failed
        """
        self._validate(schema, payload, creating=False)
        record_id = self._record_id(schema, record_id)
        current = self._load_for_update(schema, record_id)
        return self._apply(schema, record_id, current, payload)

    def add_assets(
        self,
        schema: EntitySchema,
        record_id: str | int | None,
        field_name: str,
        files: list[IncomingFile],
    ) -> MutationResult:
        """
        Upload files into one slot of an existing record.

        List slots get the files appended; single slots get replaced.
        """
        slot = schema.slot(field_name)
        if not files:
            raise ValidationFailedError("No files provided", code="NO_FILES", details={"field": field_name})
        if not slot.multiple and len(files) != 1:
            raise ValidationFailedError(
                f"{field_name} holds exactly one file, got {len(files)}",
                details={"field": field_name},
            )
        for file in files:
            self.coordinator.validate(slot, file)

        record_id = self._record_id(schema, record_id)
        current = self._load_for_update(schema, record_id)

        items: tuple = tuple(files)
        if slot.multiple:
            existing = [ref.stored_value for ref in self.resolver.slot_references(slot, (current or {}).get(field_name))]
            items = tuple(existing) + items

        return self._apply(schema, record_id, current, RecordPayload(assets={field_name: Replace(items=items)}))

    def delete(self, schema: EntitySchema, record_id: str | int) -> MutationResult:
        """
        Delete a record, then every file it held.

        Raises:
            ValidationFailedError: For the singleton profile
            RecordNotFoundError: No such record
            StoreUnavailableError: If the delete fails
        """
        if schema.is_singleton:
            raise ValidationFailedError(
                f"The {schema.name} record cannot be deleted",
                suggestion="Clear its fields with an update instead",
            )

        current = self.get(schema, record_id)
        references = self.resolver.references_for(schema, current)

        try:
            deleted = self.records.delete_record(schema.table, record_id)
        except SupabaseClientError as e:
            raise StoreUnavailableError(f"delete {schema.name}", e.message, details={"id": str(record_id)})
        if deleted is None:
            raise RecordNotFoundError(schema.table, record_id)

        logger.info(f"Deleted {schema.name} {record_id}, cleaning up {len(references)} file(s)")
        cleanup = self.executor.reconcile(references)
        return MutationResult(record=deleted, cleanup=cleanup)

    # -------------------------------------------------------------------------
    # Files not yet attached to a record
    # -------------------------------------------------------------------------

    def stage_uploads(
        self,
        schema: EntitySchema,
        field_name: str,
        files: list[IncomingFile],
    ) -> list[AssetReference]:
        """
        Store files for a record that will be saved later.

        The returned keys go into the create/update payload. If one file
        fails, the ones already stored are removed and the error is raised.
        """
        slot = schema.slot(field_name)
        batch = self.coordinator.store_many(slot, files)
        if not batch.ok:
            self._rollback_uploads({field_name: batch.stored}, batch.error)
            raise batch.error
        return batch.stored

    def list_files(self, bucket: str, prefix: str = "") -> list[StoredObject]:
        """List one page of a managed bucket for the file manager."""
        self._check_bucket(bucket)
        return self.objects.list_files(bucket, prefix=prefix)

    def delete_file(self, bucket: str, key: str) -> None:
        """
        Delete a stored object by hand.

        Raises:
            AssetInUseError: If any record still references it
            ObjectNotFoundError: If it doesn't exist
        """
        self._check_bucket(bucket)
        reference = self.objects.resolve_reference(bucket, key)
        if not reference.managed:
            raise ValidationFailedError(f"Not a file of bucket {bucket}: {key}")
        try:
            in_use = self.is_referenced(reference)
        except SupabaseClientError as e:
            raise StoreUnavailableError("check file usage", e.message)
        if in_use:
            raise AssetInUseError(bucket, reference.key)
        self.objects.delete_file(bucket, reference.key)

    def is_referenced(self, reference: AssetReference) -> bool:
        """
        Check whether any record of any table still names this object.

        Asks the record store, per slot on the reference's bucket, for a row
        holding the key or its legacy public-URL form.
        """
        if not reference.managed:
            return False
        values = [reference.key, self.objects.get_public_url(reference.bucket, reference.key)]
        for schema in SCHEMAS.values():
            for slot in schema.slots:
                if slot.bucket != reference.bucket:
                    continue
                if self.records.any_record_holds(schema.table, slot.field, values, array=slot.multiple):
                    return True
        return False

    # -------------------------------------------------------------------------
    # Internals
    # -------------------------------------------------------------------------

    def _apply(
        self,
        schema: EntitySchema,
        record_id: str | int | None,
        current: dict[str, Any] | None,
        payload: RecordPayload,
    ) -> MutationResult:
        uploads, error = self.coordinator.store_payload(schema, payload)
        if error is not None:
            self._rollback_uploads(uploads, error)
            raise error

        resolved = self.resolver.resolve(schema, current, payload, uploads)

        try:
            record = self._persist(schema, record_id, current, resolved.fields_to_persist)
        except PortfolioException as e:
            self._rollback_uploads(uploads, e)
            raise

        cleanup = self.executor.reconcile(resolved.references_to_orphan)
        return MutationResult(record=record, cleanup=cleanup)

    def _persist(
        self,
        schema: EntitySchema,
        record_id: str | int | None,
        current: dict[str, Any] | None,
        fields: dict[str, Any],
    ) -> dict[str, Any]:
        if current is not None and not fields:
            return current

        try:
            if schema.is_singleton:
                record = self.records.upsert_record(schema.table, {"id": record_id, **fields})
            elif current is None:
                record = self.records.insert_record(schema.table, {**schema.defaults, **fields})
            else:
                record = self.records.update_record(schema.table, record_id, fields)
        except SupabaseClientError as e:
            raise PersistFailedError(schema.table, e.message)

        if record is None:
            raise RecordNotFoundError(schema.table, record_id)

        logger.info(f"Saved {schema.name} {record.get('id')}: {sorted(fields)}")
        return record

    def _rollback_uploads(
        self,
        uploads: dict[str, list[AssetReference]],
        error: PortfolioException,
    ) -> None:
        """Remove this request's uploads and attach the outcome to the error."""
        stored = [ref for refs in uploads.values() for ref in refs]
        if not stored:
            return

        logger.warning(f"Removing {len(stored)} upload(s) orphaned by failure: {error.message}")
        report = self._rollback_executor.reconcile(stored)
        error.details["orphaned_uploads"] = [ref.key for ref in stored]
        error.details["cleanup"] = report.to_dict()

    def _load_for_update(self, schema: EntitySchema, record_id: str | int) -> dict[str, Any] | None:
        # The singleton row may not exist yet; the first save creates it
        if schema.is_singleton:
            return self.find(schema, record_id)
        return self.get(schema, record_id)

    def _validate(self, schema: EntitySchema, payload: RecordPayload, creating: bool) -> None:
        for name in schema.not_null:
            if name in payload.scalars and payload.scalars[name] is None:
                raise ValidationFailedError(
                    f"{name} cannot be null",
                    suggestion=f"Omit {name} to keep its value",
                    details={"field": name, "entity": schema.name},
                )
        for name in schema.required_on_create:
            if not creating and name not in payload.scalars:
                continue
            value = payload.scalars.get(name)
            if not isinstance(value, str) or not value.strip():
                raise ValidationFailedError(
                    f"{name} is required",
                    code="MISSING_FIELD",
                    details={"field": name, "entity": schema.name},
                )
        self.resolver.check_shape(schema, payload)
        self.coordinator.validate_payload(schema, payload)

    def _record_id(self, schema: EntitySchema, record_id: str | int | None) -> str | int:
        if schema.is_singleton:
            return schema.singleton_id
        if record_id is None:
            raise ValidationFailedError(f"{schema.name} id is required")
        return record_id

    def _check_bucket(self, bucket: str) -> None:
        managed = {b for schema in SCHEMAS.values() for b in schema.buckets}
        if bucket not in managed:
            raise ValidationFailedError(
                f"Unknown bucket: {bucket}",
                details={"allowed": sorted(managed)},
            )
