# =============================================================================
# core/models/schemas.py - Entity Slot Schemas
# =============================================================================
# One generic description per entity type instead of one handler per entity:
# table, scalar columns, asset slots (field -> kind -> bucket), fields that
# must be present on create, and the fixed id for singleton tables.
#
# Usage:
#   from core.models.schemas import get_schema, RecordPayload
#   schema = get_schema("certificate")
#   payload = RecordPayload.from_fields(schema, {"title": "AWS", "cert_url": ""})
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from app.config import settings
from app.exceptions import ValidationFailedError
from core.models.assets import (
    AssetChange,
    AssetKind,
    NoChange,
    SlotRule,
    change_from_value,
)

# Label fields are de-duplicated on every write
LABEL_FIELDS = ("technologies",)


@dataclass(frozen=True)
class EntitySchema:
    """
    Description of one record type.

    Attributes:
        name: Entity name used in routes and logs ("project")
        table: Record store table
        scalar_fields: Plain columns an edit may set
        slots: Asset-bearing columns
        required_on_create: Scalars that must be non-blank on create
        singleton_id: Fixed id when the table has exactly one permitted row
        defaults: Column values applied on create when not supplied
        not_null: Scalars an edit may omit but never set to null
    """
    name: str
    table: str
    scalar_fields: tuple[str, ...]
    slots: tuple[SlotRule, ...]
    required_on_create: tuple[str, ...] = ()
    singleton_id: int | None = None
    defaults: dict[str, Any] = field(default_factory=dict)
    not_null: tuple[str, ...] = ()

    @property
    def is_singleton(self) -> bool:
        return self.singleton_id is not None

    @property
    def buckets(self) -> set[str]:
        return {slot.bucket for slot in self.slots}

    def slot(self, field_name: str) -> SlotRule:
        for slot in self.slots:
            if slot.field == field_name:
                return slot
        raise ValidationFailedError(
            f"{self.name} has no file field named {field_name}",
            details={"allowed": [s.field for s in self.slots]},
        )


@dataclass
class RecordPayload:
    """
    A create/update request after boundary parsing.

    `scalars` only holds fields the client actually sent (omitted fields are
    absent, which keeps the stored value). `assets` maps every slot the
    client touched to its explicit change.
    """
    scalars: dict[str, Any] = field(default_factory=dict)
    assets: dict[str, AssetChange] = field(default_factory=dict)

    def change_for(self, field_name: str) -> AssetChange:
        return self.assets.get(field_name, NoChange())

    @classmethod
    def from_fields(cls, schema: EntitySchema, fields: dict[str, Any]) -> "RecordPayload":
        """
        Split a dict of supplied fields into scalars and asset changes.

        Pass `model.model_dump(exclude_unset=True)` so omitted fields stay
        omitted. Unknown keys are ignored.
        """
        slot_names = {slot.field for slot in schema.slots}
        scalars = {
            name: value for name, value in fields.items()
            if name in schema.scalar_fields
        }
        assets = {
            name: change_from_value(value) for name, value in fields.items()
            if name in slot_names
        }
        return cls(scalars=scalars, assets=assets)


# =============================================================================
# Entity registry
# =============================================================================

PROFILE = EntitySchema(
    name="profile",
    table="profile",
    scalar_fields=("full_name", "professional_title", "bio", "linkedin_url", "github_url"),
    slots=(
        SlotRule("profile_image_url", AssetKind.IMAGE, settings.PROFILE_BUCKET),
        SlotRule("cv_pdf_url", AssetKind.PDF, settings.PROFILE_BUCKET),
    ),
    singleton_id=settings.PROFILE_RECORD_ID,
)

PROJECT = EntitySchema(
    name="project",
    table="projects",
    scalar_fields=(
        "title", "github_link", "demo_link", "technologies",
        "ai_summary", "ai_description",
    ),
    slots=(
        SlotRule("file_paths", AssetKind.IMAGE, settings.PROJECT_FILES_BUCKET, multiple=True),
    ),
    required_on_create=("title",),
    defaults={"technologies": [], "file_paths": []},
    not_null=("title", "technologies"),
)

CERTIFICATE = EntitySchema(
    name="certificate",
    table="certificates",
    scalar_fields=("title", "description", "technologies", "is_published"),
    slots=(
        SlotRule("cert_url", AssetKind.PDF, settings.CERTIFICATES_BUCKET),
    ),
    required_on_create=("title",),
    defaults={"technologies": [], "is_published": True, "cert_url": ""},
    not_null=("title", "technologies", "is_published"),
)

SCHEMAS: dict[str, EntitySchema] = {
    schema.name: schema for schema in (PROFILE, PROJECT, CERTIFICATE)
}


def get_schema(name: str) -> EntitySchema:
    """Look up an entity schema by name."""
    try:
        return SCHEMAS[name]
    except KeyError:
        raise ValidationFailedError(
            f"Unknown entity type: {name}",
            details={"allowed": sorted(SCHEMAS)},
        )
