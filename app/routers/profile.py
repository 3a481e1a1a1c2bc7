# =============================================================================
# app/routers/profile.py - Profile Endpoints
# =============================================================================
# The portfolio owner's profile: one fixed row with a picture and a CV.
# Reads are public; edits require the admin session.
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Path, UploadFile

from app.auth import get_current_user, AuthUser
from app.dependencies import RecordServiceDep, read_uploads
from core.models.portfolio import ProfileUpdate
from core.models.schemas import PROFILE, RecordPayload

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("")
async def get_profile(service: RecordServiceDep):
    """
    Get the profile with public file URLs.

    Returns empty fields when no profile has been saved yet.
    """
    return service.present(PROFILE, service.find(PROFILE))


@router.patch("")
async def update_profile(
    request: ProfileUpdate,
    service: RecordServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Partially update the profile.

    Only fields present in the body are written. Sending "" for
    profile_image_url or cv_pdf_url clears it and deletes the old file.
    """
    payload = RecordPayload.from_fields(PROFILE, request.model_dump(exclude_unset=True))
    result = service.update(PROFILE, None, payload)

    logger.info(f"Profile updated by {user.id}")
    return {
        **service.present(PROFILE, result.record),
        "cleanup": result.cleanup.to_dict(),
    }


@router.put("/files/{field}")
async def upload_profile_file(
    field: Annotated[str, Path(description="profile_image_url or cv_pdf_url")],
    file: Annotated[UploadFile, File(description="Image or PDF to store")],
    service: RecordServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Upload a new profile picture or CV, replacing the current one.

    The replaced file is deleted after the profile is saved.
    """
    files = await read_uploads([file])
    result = service.add_assets(PROFILE, None, field, files)

    return {
        **service.present(PROFILE, result.record),
        "cleanup": result.cleanup.to_dict(),
    }
