# =============================================================================
# app/ - FastAPI Application Package
# =============================================================================
# This package contains the portfolio web API:
# - main.py: App entry point, middleware setup, error handlers
# - config.py: Environment variable loading and settings
# - exceptions.py: Error taxonomy and JSON error responses
# - auth/: Supabase session token checks
# - routers/: API endpoint definitions organized by feature
#
# The app layer is thin - it parses HTTP input into record payloads and
# delegates to core/services/record_service.py.
# =============================================================================
