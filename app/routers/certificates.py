# =============================================================================
# app/routers/certificates.py - Certificate Endpoints
# =============================================================================
# Certificates with one PDF each. The public list shows published ones;
# the admin panel can ask for everything.
# =============================================================================

import logging
from typing import Annotated, Optional

from fastapi import APIRouter, Depends, File, Path, Query, UploadFile

from app.auth import get_current_user, get_current_user_optional, AuthUser
from app.dependencies import RecordServiceDep, read_uploads
from core.models.portfolio import CertificateCreate, CertificateUpdate
from core.models.schemas import CERTIFICATE, RecordPayload

logger = logging.getLogger(__name__)

router = APIRouter()

PDF_FIELD = "cert_url"


@router.get("")
async def list_certificates(
    service: RecordServiceDep,
    include_unpublished: Annotated[bool, Query(description="Admin only: include drafts")] = False,
    user: Optional[AuthUser] = Depends(get_current_user_optional),
):
    """
    List certificates, newest first.

    Anonymous callers only ever see published certificates.
    """
    show_all = include_unpublished and user is not None
    filters = None if show_all else {"is_published": True}

    records = service.list_records(CERTIFICATE, filters=filters)
    return {
        "certificates": [service.present(CERTIFICATE, record) for record in records],
        "count": len(records),
    }


@router.post("/uploads")
async def upload_certificate_pdf(
    file: Annotated[UploadFile, File(description="Certificate PDF")],
    service: RecordServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Store a PDF for a certificate that hasn't been saved yet.

    Put the returned key in cert_url when creating the certificate.
    """
    incoming = await read_uploads([file])
    references = service.stage_uploads(CERTIFICATE, PDF_FIELD, incoming)
    return references[0].to_dict()


@router.get("/{certificate_id}")
async def get_certificate(
    certificate_id: Annotated[str, Path(description="Certificate ID")],
    service: RecordServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """Get one certificate, published or not."""
    return service.present(CERTIFICATE, service.get(CERTIFICATE, certificate_id))


@router.post("", status_code=201)
async def create_certificate(
    request: CertificateCreate,
    service: RecordServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """Create a certificate (published unless is_published is false)."""
    payload = RecordPayload.from_fields(CERTIFICATE, request.model_dump(exclude_unset=True))
    result = service.create(CERTIFICATE, payload)

    return {
        **service.present(CERTIFICATE, result.record),
        "cleanup": result.cleanup.to_dict(),
    }


@router.patch("/{certificate_id}")
async def update_certificate(
    certificate_id: Annotated[str, Path(description="Certificate ID")],
    request: CertificateUpdate,
    service: RecordServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """
    Partially update a certificate.

    Sending "" or null for cert_url removes the PDF.
    """
    payload = RecordPayload.from_fields(CERTIFICATE, request.model_dump(exclude_unset=True))
    result = service.update(CERTIFICATE, certificate_id, payload)

    return {
        **service.present(CERTIFICATE, result.record),
        "cleanup": result.cleanup.to_dict(),
    }


@router.put("/{certificate_id}/file")
async def replace_certificate_pdf(
    certificate_id: Annotated[str, Path(description="Certificate ID")],
    file: Annotated[UploadFile, File(description="New certificate PDF")],
    service: RecordServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """Upload a PDF and make it the certificate's file; the old one is deleted."""
    incoming = await read_uploads([file])
    result = service.add_assets(CERTIFICATE, certificate_id, PDF_FIELD, incoming)

    return {
        **service.present(CERTIFICATE, result.record),
        "cleanup": result.cleanup.to_dict(),
    }


@router.delete("/{certificate_id}")
async def delete_certificate(
    certificate_id: Annotated[str, Path(description="Certificate ID")],
    service: RecordServiceDep,
    user: AuthUser = Depends(get_current_user),
):
    """Delete a certificate and its PDF."""
    result = service.delete(CERTIFICATE, certificate_id)

    logger.info(f"Certificate {certificate_id} deleted by {user.id}")
    return {
        "deleted": True,
        "id": certificate_id,
        "cleanup": result.cleanup.to_dict(),
    }
