# =============================================================================
# tests/ - Test Suite
# =============================================================================
# This package contains all tests for the Portfolio API:
# - fakes.py: In-memory record and object stores with failure injection
# - test_models.py: Value types, slot schemas, request models
# - test_asset_resolver.py / test_upload_coordinator.py /
#   test_cleanup_executor.py: the asset lifecycle pieces in isolation
# - test_record_service.py: end-to-end edits against the fakes
# - test_storage_service.py / test_supabase_client.py: Supabase calls (mocked)
# - test_describer.py: AI description writer (mocked OpenAI)
# - test_routers.py: HTTP layer via TestClient
#
# Run tests with: pytest
# =============================================================================
