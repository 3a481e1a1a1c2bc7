# =============================================================================
# app/routers/projects.py - Project Endpoints
# =============================================================================
# Portfolio projects with an ordered list of screenshots.
#
# Two ways to attach images:
# - POST /projects/uploads, then send the returned keys in file_paths
# - POST /projects/{id}/images to upload and append in one step
# =============================================================================

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, File, Path, UploadFile

from app.auth import get_current_user, AuthUser
from app.dependencies import RecordServiceDep, read_uploads
from core.models.portfolio import ProjectCreate, ProjectUpdate
from core.models.schemas import PROJECT, RecordPayload

logger = logging.getLogger(__name__)

router = APIRouter()

IMAGES_FIELD = "file_paths"


@router.get("")
async def list_projects(service: RecordServiceDep):
    """List all projects, newest first, with public image URLs."""
    records = service.list_records(PROJECT)
    return {
        "projects": [service.present(PROJECT, record) for record in records],
        "count": len(records),
    }


@router.post("/uploads")
async def upload_project_images(
    files: Annotated[list[UploadFile], File(description="Images to store")],
    service: RecordServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Store images for a project that hasn't been saved yet.

    Returns a key and public URL per image. Put the keys in file_paths when
    creating or updating the project. If one image fails, none are kept.
    """
    incoming = await read_uploads(files)
    references = service.stage_uploads(PROJECT, IMAGES_FIELD, incoming)

    logger.info(f"Staged {len(references)} project image(s)")
    return {"files": [ref.to_dict() for ref in references]}


@router.get("/{project_id}")
async def get_project(
    project_id: Annotated[str, Path(description="Project ID")],
    service: RecordServiceDep,
):
    """Get one project with public image URLs."""
    return service.present(PROJECT, service.get(PROJECT, project_id))


@router.post("", status_code=201)
async def create_project(
    request: ProjectCreate,
    service: RecordServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """Create a project. Technologies are de-duplicated."""
    payload = RecordPayload.from_fields(PROJECT, request.model_dump(exclude_unset=True))
    result = service.create(PROJECT, payload)

    return {
        **service.present(PROJECT, result.record),
        "cleanup": result.cleanup.to_dict(),
    }


@router.patch("/{project_id}")
async def update_project(
    project_id: Annotated[str, Path(description="Project ID")],
    request: ProjectUpdate,
    service: RecordServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Partially update a project.

    file_paths, when sent, is the complete new image list: images left out
    of it are deleted once no record uses them.
    """
    payload = RecordPayload.from_fields(PROJECT, request.model_dump(exclude_unset=True))
    result = service.update(PROJECT, project_id, payload)

    return {
        **service.present(PROJECT, result.record),
        "cleanup": result.cleanup.to_dict(),
    }


@router.post("/{project_id}/images")
async def add_project_images(
    project_id: Annotated[str, Path(description="Project ID")],
    files: Annotated[list[UploadFile], File(description="Images to append")],
    service: RecordServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """Upload images and append them to the project's image list."""
    incoming = await read_uploads(files)
    result = service.add_assets(PROJECT, project_id, IMAGES_FIELD, incoming)

    return {
        **service.present(PROJECT, result.record),
        "cleanup": result.cleanup.to_dict(),
    }


@router.delete("/{project_id}")
async def delete_project(
    project_id: Annotated[str, Path(description="Project ID")],
    service: RecordServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """Delete a project and the images it held."""
    result = service.delete(PROJECT, project_id)

    logger.info(f"Project {project_id} deleted by {user.id}")
    return {
        "deleted": True,
        "id": project_id,
        "cleanup": result.cleanup.to_dict(),
    }
