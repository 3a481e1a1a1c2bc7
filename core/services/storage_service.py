# =============================================================================
# core/services/storage_service.py - Supabase Storage Operations
# =============================================================================
# Object Store Client: put / delete / list objects in the public buckets and
# derive their public URLs.
#
# Keys are "<uuid4>-<original filename>": collisions are avoided by the random
# prefix while the suffix stays human-readable in the dashboard.
# =============================================================================

import logging
from urllib.parse import quote, unquote
from uuid import uuid4

from lib.supabase_client import SupabaseClient
from lib.utils import safe_basename
from app.config import settings
from app.exceptions import (
    InvalidContentError,
    ObjectNotFoundError,
    StoreUnavailableError,
)
from core.models.assets import AssetReference, StoredObject

logger = logging.getLogger(__name__)

# Fragments of provider errors meaning "this content type is not allowed"
MIME_REJECTION_MARKERS = ("mime type", "invalid_mime_type", "415")


class StorageService:
    """
    Service for Supabase Storage operations.

    All methods are static; the class itself is handed to the services that
    need an object store.
    """

    # -------------------------------------------------------------------------
    # Pure helpers (no network)
    # -------------------------------------------------------------------------

    @staticmethod
    def generate_key(filename: str | None) -> str:
        """Build a collision-free key that keeps the original filename."""
        return f"{uuid4()}-{safe_basename(filename)}"

    @staticmethod
    def get_public_url(bucket: str, key: str) -> str:
        """
        Get the public URL for an object.

        Pure derivation from SUPABASE_URL, bucket and key; nothing is fetched.
        """
        return f"{settings.storage_public_base}/{bucket}/{quote(key)}"

    @staticmethod
    def resolve_reference(bucket: str, value: str) -> AssetReference:
        """
        Turn a stored column value into a reference.

        - bare key                      -> managed reference
        - public URL of this bucket     -> managed reference (key extracted)
        - any other URL                 -> external reference (never deleted)
        """
        value = value.strip()
        prefix = f"{settings.storage_public_base}/{bucket}/"

        if value.startswith(prefix):
            key = unquote(value[len(prefix):].split("?")[0])
            if key:
                return AssetReference(bucket=bucket, key=key, public_url=StorageService.get_public_url(bucket, key))

        if "://" in value or value.startswith("//"):
            return AssetReference(bucket=bucket, key=None, public_url=value)

        return AssetReference(bucket=bucket, key=value, public_url=StorageService.get_public_url(bucket, value))

    # -------------------------------------------------------------------------
    # Network operations
    # -------------------------------------------------------------------------

    @staticmethod
    def upload_file(
        bucket: str,
        key: str,
        content: bytes,
        content_type: str,
    ) -> AssetReference:
        """
        Upload raw file content to storage.

        Args:
            bucket: Target bucket
            key: Object key (see generate_key)
            content: File bytes
            content_type: Declared MIME type

        Returns:
            Reference to the stored object

        Raises:
            InvalidContentError: If the bucket rejects the content type
            StoreUnavailableError: If upload fails
        """
        try:
            client = SupabaseClient.get_client()
            client.storage.from_(bucket).upload(
                path=key,
                file=content,
                file_options={"content-type": content_type, "upsert": "false"}
            )

        except Exception as e:
            if any(marker in str(e).lower() for marker in MIME_REJECTION_MARKERS):
                logger.warning(f"Storage rejected {key} as {content_type}: {e}")
                raise InvalidContentError(key, content_type, str(e))
            logger.error(f"Storage upload failed: {e}")
            raise StoreUnavailableError("upload file", str(e), details={"bucket": bucket, "key": key})

        logger.info(f"Uploaded file to storage: {bucket}/{key} ({len(content)} bytes)")
        return AssetReference(bucket=bucket, key=key, public_url=StorageService.get_public_url(bucket, key))

    @staticmethod
    def delete_file(bucket: str, key: str) -> None:
        """
        Delete a file from storage.

        Raises:
            ObjectNotFoundError: If nothing was removed
            StoreUnavailableError: If the call fails
        """
        try:
            client = SupabaseClient.get_client()
            removed = client.storage.from_(bucket).remove([key])

        except Exception as e:
            logger.error(f"Failed to delete file: {e}")
            raise StoreUnavailableError("delete file", str(e), details={"bucket": bucket, "key": key})

        if not removed:
            raise ObjectNotFoundError(bucket, key)

        logger.info(f"Deleted file from storage: {bucket}/{key}")

    @staticmethod
    def list_files(
        bucket: str,
        prefix: str = "",
        limit: int | None = None,
    ) -> list[StoredObject]:
        """
        List one page of objects in a bucket, newest first.

        Args:
            bucket: Bucket to list
            prefix: Folder prefix ("" for the bucket root)
            limit: Page size (default settings.STORAGE_LIST_LIMIT)

        Raises:
            StoreUnavailableError: If the call fails
        """
        limit = limit or settings.STORAGE_LIST_LIMIT

        try:
            client = SupabaseClient.get_client()
            entries = client.storage.from_(bucket).list(
                prefix,
                {
                    "limit": limit,
                    "offset": 0,
                    "sortBy": {"column": "created_at", "order": "desc"},
                },
            ) or []

        except Exception as e:
            logger.error(f"Failed to list files: {e}")
            raise StoreUnavailableError("list files", str(e), details={"bucket": bucket})

        objects = []
        for entry in entries:
            name = entry.get("name")
            # Folder placeholders have no id/metadata
            if not name or (entry.get("id") is None and not entry.get("metadata")):
                continue
            key = f"{prefix.rstrip('/')}/{name}" if prefix else name
            objects.append(StoredObject(
                key=key,
                size=(entry.get("metadata") or {}).get("size", 0),
                created_at=entry.get("created_at"),
                public_url=StorageService.get_public_url(bucket, key),
            ))

        logger.debug(f"Listed {len(objects)} files in {bucket}")
        return objects
