# =============================================================================
# lib/ - Standalone Utility Modules
# =============================================================================
# This package contains reusable utilities:
# - supabase_client.py: Supabase singleton + generic record operations
# - utils.py: Shared helpers (label de-duplication, filename sanitizing)
#
# These modules are self-contained and can be tested in isolation.
# =============================================================================

from lib.supabase_client import SupabaseClient, SupabaseClientError
from lib.utils import dedupe_labels, safe_basename

__all__ = [
    # Supabase
    "SupabaseClient",
    "SupabaseClientError",
    # Utils
    "dedupe_labels",
    "safe_basename",
]
