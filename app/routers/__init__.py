# =============================================================================
# app/routers/ - API Route Definitions
# =============================================================================
# This package contains FastAPI routers organized by feature:
# - health.py: Health check endpoints
# - profile.py: The singleton profile (picture, CV, links)
# - projects.py: Projects and their screenshots
# - certificates.py: Certificates and their PDFs
# - files.py: File manager over the storage buckets
# - ai.py: AI description prefill
#
# Each router is mounted in main.py with a URL prefix.
# =============================================================================

from . import health
from . import profile
from . import projects
from . import certificates
from . import files
from . import ai

__all__ = [
    "health",
    "profile",
    "projects",
    "certificates",
    "files",
    "ai",
]
