# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class AuthUser(BaseModel):
    """
    Authenticated admin extracted from a Supabase JWT.

    Only what the token itself carries; no database lookup.
    """
    model_config = ConfigDict(frozen=True)

    id: UUID
    email: Optional[str] = None
