# =============================================================================
# core/models/portfolio.py - API Request/Response Schemas
# =============================================================================
# These models define the API contract for portfolio records:
# - ProfileUpdate: partial edit of the singleton profile row
# - ProjectCreate / ProjectUpdate
# - CertificateCreate / CertificateUpdate
# - DescriptionRequest / DescriptionResponse: AI prefill
#
# Update models have no defaults that matter: routers dump them with
# exclude_unset=True, so a field the client did not send is never written.
# Sending "" or null for a file field clears it.
# =============================================================================

from pydantic import BaseModel, Field


class ProfileUpdate(BaseModel):
    """
    Partial update of the profile.

    Example:
        {"bio": "Backend developer", "cv_pdf_url": ""}
    """
    full_name: str | None = None
    professional_title: str | None = None
    bio: str | None = None
    linkedin_url: str | None = None
    github_url: str | None = None
    profile_image_url: str | None = Field(
        default=None,
        description="Bucket key or URL; empty string clears the image"
    )
    cv_pdf_url: str | None = Field(
        default=None,
        description="Bucket key or URL; empty string clears the CV"
    )


class ProjectCreate(BaseModel):
    """Schema for creating a project."""
    title: str = Field(..., min_length=1, max_length=255)
    github_link: str | None = None
    demo_link: str | None = None
    technologies: list[str] = Field(default_factory=list)
    ai_summary: str | None = None
    ai_description: str | None = None
    file_paths: list[str] = Field(
        default_factory=list,
        description="Keys returned by POST /projects/uploads"
    )

    model_config = {
        "json_schema_extra": {
            "example": {
                "title": "Portfolio API",
                "github_link": "https://github.com/me/portfolio",
                "technologies": ["Python", "FastAPI"],
                "file_paths": ["3f1c...-screenshot.png"],
            }
        }
    }


class ProjectUpdate(BaseModel):
    """Partial update of a project. Omitted fields keep their value."""
    title: str | None = Field(default=None, min_length=1, max_length=255)
    github_link: str | None = None
    demo_link: str | None = None
    technologies: list[str] | None = None
    ai_summary: str | None = None
    ai_description: str | None = None
    file_paths: list[str] | None = None


class CertificateCreate(BaseModel):
    """Schema for creating a certificate."""
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    technologies: list[str] = Field(default_factory=list)
    cert_url: str | None = Field(
        default=None,
        description="Key returned by POST /certificates/uploads"
    )
    is_published: bool = True


class CertificateUpdate(BaseModel):
    """Partial update of a certificate. Omitted fields keep their value."""
    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    technologies: list[str] | None = None
    cert_url: str | None = None
    is_published: bool | None = None


class DescriptionRequest(BaseModel):
    """Input for the AI description prefill."""
    title: str = Field(..., min_length=1)
    technologies: list[str] = Field(default_factory=list)
    notes: str | None = None


class DescriptionResponse(BaseModel):
    """Drafted text; `fallback` is true when the AI call was skipped or failed."""
    summary: str
    description: str
    fallback: bool = False
