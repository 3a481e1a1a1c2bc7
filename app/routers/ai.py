# =============================================================================
# app/routers/ai.py - AI Prefill Endpoints
# =============================================================================
# Drafts summary/description text for the admin forms. Always answers:
# without a working model it returns plain fallback text.
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth import get_current_user, AuthUser
from app.dependencies import DescriptionWriterDep
from core.models.portfolio import DescriptionRequest, DescriptionResponse
from lib.utils import dedupe_labels

router = APIRouter()


@router.post("/description", response_model=DescriptionResponse)
async def generate_description(
    request: DescriptionRequest,
    writer: DescriptionWriterDep,
    user: AuthUser = Depends(get_current_user),
):
    """Draft a summary and description for a project or certificate."""
    draft = writer.generate(
        request.title,
        technologies=dedupe_labels(request.technologies),
        notes=request.notes,
    )
    return DescriptionResponse(
        summary=draft.summary,
        description=draft.description,
        fallback=draft.fallback,
    )
