# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# These are injected into route handlers using Depends(), and replaced in
# tests through app.dependency_overrides.
# =============================================================================

from typing import Annotated

from fastapi import Depends, UploadFile

from agents.describer import DescriptionWriter
from core.models.assets import IncomingFile
from core.services.record_service import RecordService
from lib.supabase_client import SupabaseClient


def get_supabase_client() -> type[SupabaseClient]:
    """
    Get Supabase client instance.

    Returns the singleton client wrapper.
    """
    return SupabaseClient


def get_record_service() -> RecordService:
    """Record service wired to Supabase (records + storage)."""
    return RecordService()


def get_description_writer() -> DescriptionWriter:
    """Description writer configured from settings."""
    return DescriptionWriter()


async def read_uploads(files: list[UploadFile]) -> list[IncomingFile]:
    """Read multipart uploads into memory for validation and storage."""
    incoming = []
    for upload in files:
        content = await upload.read()
        incoming.append(IncomingFile(
            filename=upload.filename or "file",
            content=content,
            content_type=upload.content_type or "application/octet-stream",
        ))
    return incoming


# Type aliases for dependency injection
SupabaseDep = Annotated[type[SupabaseClient], Depends(get_supabase_client)]
RecordServiceDep = Annotated[RecordService, Depends(get_record_service)]
DescriptionWriterDep = Annotated[DescriptionWriter, Depends(get_description_writer)]
