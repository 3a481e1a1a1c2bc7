# =============================================================================
# core/models/assets.py - Asset Value Types
# =============================================================================
# Value types shared by the asset lifecycle services:
# - AssetKind / SlotRule: what a record field may hold and where it is stored
# - IncomingFile: an upload as received from the client
# - AssetReference: a stored object (bucket + key) or an external URL
# - NoChange / Clear / Replace: the explicit per-field change of an edit
# - StoredObject: one entry of a bucket listing
#
# Slot lifetime:
#   Empty -> Stored (upload) -> Referenced (record persisted)
#         -> Orphaned (replacing update persisted)
#         -> Deleted (cleanup ok) | LeakedOrphan (cleanup failed)
# =============================================================================

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Union


class AssetKind(str, Enum):
    """Content family a slot accepts."""
    IMAGE = "image"
    PDF = "pdf"


@dataclass(frozen=True)
class SlotRule:
    """
    One asset-bearing field of an entity.

    Attributes:
        field: Column name on the record
        kind: Accepted content family
        bucket: Storage bucket the field's objects live in
        multiple: True for list-valued slots (project images)
    """
    field: str
    kind: AssetKind
    bucket: str
    multiple: bool = False

    def accepts(self, content_type: str | None) -> bool:
        """Check a declared content type against this slot's kind."""
        content_type = (content_type or "").split(";")[0].strip().lower()
        if self.kind is AssetKind.PDF:
            return content_type == "application/pdf"
        return content_type.startswith("image/") and len(content_type) > len("image/")

    @property
    def accepted_label(self) -> str:
        return "application/pdf" if self.kind is AssetKind.PDF else "image/*"

    @property
    def empty_value(self) -> Any:
        """Value a cleared slot is persisted as."""
        return [] if self.multiple else ""


@dataclass(frozen=True)
class IncomingFile:
    """An uploaded file, fully read into memory."""
    filename: str
    content: bytes = field(repr=False)
    content_type: str

    @property
    def size(self) -> int:
        return len(self.content)


@dataclass(frozen=True)
class AssetReference:
    """
    A value held by an asset slot.

    Managed references name an object in one of our buckets and carry its
    key; only those are ever deleted. External references (a link typed in
    by hand) have no key and are left alone.
    """
    bucket: str
    key: str | None
    public_url: str

    @property
    def managed(self) -> bool:
        return self.key is not None

    @property
    def stored_value(self) -> str:
        """What the record column holds for this reference."""
        return self.key if self.key is not None else self.public_url

    @property
    def identity(self) -> tuple[str, str]:
        return (self.bucket, self.stored_value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "bucket": self.bucket,
            "key": self.key,
            "url": self.public_url,
        }


@dataclass(frozen=True)
class StoredObject:
    """One object of a bucket listing."""
    key: str
    size: int
    created_at: str | None
    public_url: str

    @property
    def file_type(self) -> str:
        return "pdf" if self.key.lower().endswith(".pdf") else "image"

    def to_dict(self) -> dict[str, Any]:
        return {
            "name": self.key,
            "size": self.size,
            "created_at": self.created_at,
            "url": self.public_url,
            "type": self.file_type,
        }


# =============================================================================
# Per-field change
# =============================================================================

@dataclass(frozen=True)
class NoChange:
    """Field omitted from the edit: keep the stored value."""


@dataclass(frozen=True)
class Clear:
    """Field explicitly emptied: the old value becomes an orphan candidate."""


@dataclass(frozen=True)
class Replace:
    """
    Field set to new content.

    Each item is either a new upload or an existing reference (bucket key
    or URL). Single-value slots take exactly one item.
    """
    items: tuple[Union[IncomingFile, str], ...]

    @classmethod
    def upload(cls, *files: IncomingFile) -> "Replace":
        return cls(items=tuple(files))

    @classmethod
    def reference(cls, *values: str) -> "Replace":
        return cls(items=tuple(values))

    @property
    def files(self) -> list[IncomingFile]:
        return [item for item in self.items if isinstance(item, IncomingFile)]


AssetChange = Union[NoChange, Clear, Replace]


def change_from_value(value: Any) -> AssetChange:
    """
    Map a JSON field value onto an explicit change.

    "" / None / [] clear the field; any other string or list replaces it.
    Omitted fields never reach this function (they are NoChange).
    """
    if value is None:
        return Clear()
    if isinstance(value, str):
        return Replace.reference(value) if value.strip() else Clear()
    values = [v for v in value if isinstance(v, str) and v.strip()]
    return Replace.reference(*values) if values else Clear()
