# =============================================================================
# tests/conftest.py - Pytest Configuration
# =============================================================================
# This module provides pytest fixtures and configuration for all tests.
#
# Key features:
# - Sets up mock environment variables before any imports
# - Provides in-memory stores and a RecordService wired to them
# =============================================================================

import os

# =============================================================================
# Set up test environment BEFORE any imports
# =============================================================================
# This must happen before importing app.config which loads settings immediately

os.environ.setdefault("SUPABASE_URL", "https://test-project.supabase.co")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
os.environ.setdefault("SUPABASE_SERVICE_KEY", "test-service-key")
os.environ.setdefault("SUPABASE_JWT_SECRET", "test-jwt-secret")
os.environ.setdefault("OPENAI_API_KEY", "test-openai-key")
os.environ.setdefault("ENVIRONMENT", "development")
os.environ.setdefault("DEBUG", "true")

import pytest

from core.models.assets import IncomingFile
from core.services.record_service import RecordService
from tests.fakes import InMemoryObjectStore, InMemoryRecordStore


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def records():
    """Empty in-memory record store."""
    return InMemoryRecordStore()


@pytest.fixture
def objects():
    """Empty in-memory object store."""
    return InMemoryObjectStore()


@pytest.fixture
def service(records, objects):
    """RecordService over the in-memory stores."""
    return RecordService(records=records, objects=objects)


@pytest.fixture
def pdf_file():
    """A small valid PDF upload."""
    return IncomingFile(filename="cv.pdf", content=b"%PDF-1.4 test", content_type="application/pdf")


@pytest.fixture
def png_file():
    """A small valid PNG upload."""
    return IncomingFile(filename="me.png", content=b"\x89PNG test", content_type="image/png")
