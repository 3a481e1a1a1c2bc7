# =============================================================================
# app/auth/routes.py - Authentication Routes
# =============================================================================
# Login and logout are handled by Supabase Auth client-side. This route lets
# the admin panel check whether a stored token is still valid before
# showing protected pages.
# =============================================================================

from fastapi import APIRouter, Depends

from app.auth.dependencies import get_current_user
from app.auth.models import AuthUser

router = APIRouter()


@router.get("/verify")
async def verify_token(
    user: AuthUser = Depends(get_current_user)
) -> dict:
    """
    Verify that the current token is valid.

    Raises:
        401: If token is missing, invalid or expired
    """
    return {
        "valid": True,
        "user_id": str(user.id),
        "email": user.email
    }
