# =============================================================================
# core/services/asset_resolver.py - Asset Reference Resolver
# =============================================================================
# Decides, for one create/update, which column values to write, which stored
# objects become newly referenced, and which become orphans.
#
# Rules:
# - NoChange keeps the stored value; Clear and Replace overwrite it.
# - A replaced or cleared value is only an orphan if no other slot of the
#   merged record (or other index of the same list) still names it.
# - External URLs are never orphans; only keys of our buckets are.
# =============================================================================

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

from app.exceptions import ValidationFailedError
from core.models.assets import (
    AssetReference,
    Clear,
    IncomingFile,
    NoChange,
    Replace,
    SlotRule,
)
from core.models.schemas import LABEL_FIELDS, EntitySchema, RecordPayload
from core.services.storage_service import StorageService
from lib.utils import dedupe_labels

logger = logging.getLogger(__name__)


@dataclass
class ResolvedUpdate:
    """
    Outcome of resolving an edit against the current record.

    Attributes:
        fields_to_persist: Columns to write (only those the edit touched)
        new_references: References the record did not hold before
        references_to_orphan: Managed references nothing on the record names anymore
    """
    fields_to_persist: dict[str, Any] = field(default_factory=dict)
    new_references: list[AssetReference] = field(default_factory=list)
    references_to_orphan: list[AssetReference] = field(default_factory=list)


class AssetReferenceResolver:
    """
    Computes (fields_to_persist, new_references, references_to_orphan).

    Example:
        resolver = AssetReferenceResolver()
        resolved = resolver.resolve(PROFILE, current, RecordPayload(assets={"cv_pdf_url": Clear()}))
        resolved.fields_to_persist        # {"cv_pdf_url": ""}
        resolved.references_to_orphan     # [AssetReference(bucket="profile", key="a.pdf", ...)]
    """

    def __init__(self, objects=StorageService):
        self.objects = objects

    # -------------------------------------------------------------------------
    # Reading references off a record
    # -------------------------------------------------------------------------

    def slot_references(self, slot: SlotRule, value: Any) -> list[AssetReference]:
        """References held by one column value (str or list of str)."""
        if not value:
            return []
        values = value if isinstance(value, (list, tuple)) else [value]
        return [
            self.objects.resolve_reference(slot.bucket, item)
            for item in values
            if isinstance(item, str) and item.strip()
        ]

    def references_for(
        self,
        schema: EntitySchema,
        record: dict[str, Any] | None,
    ) -> list[AssetReference]:
        """Every reference a record holds, across all its slots."""
        references: list[AssetReference] = []
        for slot in schema.slots:
            references.extend(self.slot_references(slot, (record or {}).get(slot.field)))
        return references

    # -------------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------------

    def check_shape(self, schema: EntitySchema, payload: RecordPayload) -> None:
        """
        Reject changes a slot cannot hold.

        Raises:
            ValidationFailedError: Unknown slot, or several items for a single slot
        """
        for field_name, change in payload.assets.items():
            slot = schema.slot(field_name)
            if isinstance(change, Replace) and not slot.multiple and len(change.items) != 1:
                raise ValidationFailedError(
                    f"{field_name} holds exactly one file, got {len(change.items)}",
                    details={"field": field_name},
                )

    # -------------------------------------------------------------------------
    # Resolution
    # -------------------------------------------------------------------------

    def resolve(
        self,
        schema: EntitySchema,
        current: dict[str, Any] | None,
        payload: RecordPayload,
        uploads: dict[str, list[AssetReference]] | None = None,
    ) -> ResolvedUpdate:
        """
        Merge an edit into the current record.

        Args:
            schema: Entity slot schema
            current: Stored record, or None for a create
            payload: Parsed edit
            uploads: References already stored for the edit's IncomingFile
                items, per field, in the order the files appear

        Returns:
            ResolvedUpdate
        """
        current = current or {}
        pending = {name: list(refs) for name, refs in (uploads or {}).items()}

        fields = dict(payload.scalars)
        for label_field in LABEL_FIELDS:
            if label_field in fields and fields[label_field] is not None:
                fields[label_field] = dedupe_labels(fields[label_field])

        merged = {**current, **fields}
        candidates: list[AssetReference] = []
        new_references: list[AssetReference] = []

        for slot in schema.slots:
            change = payload.change_for(slot.field)
            if isinstance(change, NoChange):
                continue

            old_refs = self.slot_references(slot, current.get(slot.field))
            if isinstance(change, Clear):
                new_refs = []
            else:
                new_refs = self._materialize(slot, change, pending.get(slot.field, []))

            if slot.multiple:
                value = [ref.stored_value for ref in new_refs]
            else:
                value = new_refs[0].stored_value if new_refs else slot.empty_value
            fields[slot.field] = value
            merged[slot.field] = value

            old_ids = {ref.identity for ref in old_refs}
            new_ids = {ref.identity for ref in new_refs}
            candidates.extend(ref for ref in old_refs if ref.identity not in new_ids)
            new_references.extend(ref for ref in new_refs if ref.identity not in old_ids)

        still_referenced = {ref.identity for ref in self.references_for(schema, merged)}
        orphans: list[AssetReference] = []
        seen: set[tuple[str, str]] = set()
        for ref in candidates:
            if not ref.managed or ref.identity in still_referenced or ref.identity in seen:
                continue
            seen.add(ref.identity)
            orphans.append(ref)

        if orphans:
            logger.debug(f"{schema.name}: {len(orphans)} reference(s) orphaned by edit")

        return ResolvedUpdate(
            fields_to_persist=fields,
            new_references=new_references,
            references_to_orphan=orphans,
        )

    def _materialize(
        self,
        slot: SlotRule,
        change: Replace,
        stored: list[AssetReference],
    ) -> list[AssetReference]:
        """Turn Replace items into references, in order, without duplicates."""
        uploaded = iter(stored)
        refs: list[AssetReference] = []
        seen: set[tuple[str, str]] = set()

        for item in change.items:
            if isinstance(item, IncomingFile):
                ref = next(uploaded, None)
                if ref is None:
                    raise ValueError(f"{item.filename} for {slot.field} was not stored before resolving")
            else:
                ref = self.objects.resolve_reference(slot.bucket, item)

            if ref.identity in seen:
                continue
            seen.add(ref.identity)
            refs.append(ref)

        return refs
