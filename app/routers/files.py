# =============================================================================
# app/routers/files.py - File Manager Endpoints
# =============================================================================
# Raw view of the managed buckets for the admin panel's file manager.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query

from app.auth import get_current_user, AuthUser
from app.dependencies import RecordServiceDep

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/{bucket}")
async def list_files(
    bucket: Annotated[str, Path(description="Bucket name")],
    service: RecordServiceDep,
    prefix: Annotated[str, Query(description="Only keys starting with this")] = "",
    user: AuthUser = Depends(get_current_user),
):
    """List one page of a bucket, newest first."""
    objects = service.list_files(bucket, prefix=prefix)
    return {
        "bucket": bucket,
        "files": [obj.to_dict() for obj in objects],
        "count": len(objects),
    }


@router.delete("/{bucket}/{key:path}")
async def delete_file(
    bucket: Annotated[str, Path(description="Bucket name")],
    key: Annotated[str, Path(description="Object key")],
    service: RecordServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Delete a stored file.

    Raises:
        400 ASSET_IN_USE: A record still references the file
        404: No such file
    """
    service.delete_file(bucket, key)

    logger.info(f"File {bucket}/{key} deleted by {user.id}")
    return {"deleted": True, "bucket": bucket, "key": key}
