# =============================================================================
# tests/test_routers.py - HTTP Layer Tests
# =============================================================================
# Runs the FastAPI app with TestClient. The record service is overridden with
# one over in-memory stores; auth uses real HS256 tokens signed with the test
# SUPABASE_JWT_SECRET.
# =============================================================================

import time
from types import SimpleNamespace
from unittest.mock import MagicMock
from uuid import uuid4

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from agents.describer import DescriptionWriter
from app.config import settings
from app.dependencies import get_description_writer, get_record_service, get_supabase_client
from app.main import app
from core.services.storage_service import StorageService


def make_token(**claims):
    payload = {
        "sub": str(uuid4()),
        "email": "admin@example.com",
        "aud": "authenticated",
        "exp": int(time.time()) + 3600,
        **claims,
    }
    return jwt.encode(payload, settings.SUPABASE_JWT_SECRET, algorithm="HS256")


@pytest.fixture
def auth():
    return {"Authorization": f"Bearer {make_token()}"}


@pytest.fixture
def client(service):
    app.dependency_overrides[get_record_service] = lambda: service
    yield TestClient(app)
    app.dependency_overrides.clear()


# =============================================================================
# Auth
# =============================================================================

class TestAuth:
    """Session checks happen before any route logic."""

    def test_mutation_without_token_is_401(self, client, records):
        response = client.patch("/api/v1/profile", json={"bio": "Hi"})

        assert response.status_code == 401
        assert response.json()["code"] == "UNAUTHORIZED"
        assert records.rows("profile") == []

    def test_garbage_token_is_401(self, client):
        response = client.post(
            "/api/v1/projects",
            json={"title": "API"},
            headers={"Authorization": "Bearer not-a-jwt"},
        )

        assert response.status_code == 401

    def test_expired_token_is_401(self, client):
        token = make_token(exp=int(time.time()) - 60)

        response = client.get("/api/v1/auth/verify", headers={"Authorization": f"Bearer {token}"})

        assert response.status_code == 401
        assert "expired" in response.json()["detail"].lower()

    def test_verify(self, client, auth):
        response = client.get("/api/v1/auth/verify", headers=auth)

        assert response.status_code == 200
        assert response.json()["valid"] is True
        assert response.json()["email"] == "admin@example.com"


# =============================================================================
# Profile
# =============================================================================

class TestProfileRoutes:
    """GET/PATCH /profile and file replacement."""

    def test_get_profile_without_row(self, client):
        response = client.get("/api/v1/profile")

        assert response.status_code == 200
        assert response.json()["cv_pdf_url"] == ""
        assert response.json()["full_name"] == ""

    def test_patch_clears_cv(self, client, auth, records, objects):
        objects.seed("profile", "old.pdf")
        records.seed("profile", {"id": 1, "cv_pdf_url": "old.pdf", "bio": "Hi"})

        response = client.patch("/api/v1/profile", json={"cv_pdf_url": ""}, headers=auth)

        body = response.json()
        assert response.status_code == 200
        assert body["cv_pdf_url"] == ""
        assert body["bio"] == "Hi"
        assert body["cleanup"]["deleted"] == ["old.pdf"]

    def test_upload_replaces_cv(self, client, auth, records, objects):
        objects.seed("profile", "old.pdf")
        records.seed("profile", {"id": 1, "cv_pdf_url": "old.pdf"})

        response = client.put(
            "/api/v1/profile/files/cv_pdf_url",
            files={"file": ("cv.pdf", b"%PDF-1.4", "application/pdf")},
            headers=auth,
        )

        assert response.status_code == 200
        assert response.json()["cv_pdf_url"] == StorageService.get_public_url("profile", "k1-cv.pdf")
        assert objects.keys("profile") == {"k1-cv.pdf"}

    def test_upload_to_unknown_field_is_400(self, client, auth):
        response = client.put(
            "/api/v1/profile/files/avatar",
            files={"file": ("me.png", b"\x89PNG", "image/png")},
            headers=auth,
        )

        assert response.status_code == 400


# =============================================================================
# Projects
# =============================================================================

class TestProjectRoutes:
    """Project CRUD and image uploads."""

    def test_create_project(self, client, auth):
        response = client.post(
            "/api/v1/projects",
            json={"title": "Portfolio API", "technologies": ["Python", "FastAPI", "Python"]},
            headers=auth,
        )

        body = response.json()
        assert response.status_code == 201
        assert body["technologies"] == ["Python", "FastAPI"]
        assert body["file_paths"] == []
        assert body["cleanup"] == {"deleted": [], "failed": [], "skipped": []}

    def test_create_without_title_is_400(self, client, auth):
        response = client.post("/api/v1/projects", json={"technologies": []}, headers=auth)

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_FAILED"

    def test_get_missing_project_is_404(self, client):
        response = client.get("/api/v1/projects/missing")

        assert response.status_code == 404
        assert response.json()["code"] == "RECORD_NOT_FOUND"

    def test_stage_then_create(self, client, auth, objects):
        staged = client.post(
            "/api/v1/projects/uploads",
            files=[
                ("files", ("a.png", b"\x89PNG", "image/png")),
                ("files", ("b.png", b"\x89PNG", "image/png")),
            ],
            headers=auth,
        ).json()["files"]

        response = client.post(
            "/api/v1/projects",
            json={"title": "API", "file_paths": [f["key"] for f in staged]},
            headers=auth,
        )

        assert response.status_code == 201
        assert response.json()["file_paths"] == [f["url"] for f in staged]

    def test_patch_removes_images(self, client, auth, records, objects):
        objects.seed("project-files", "a.png")
        objects.seed("project-files", "b.png")
        project = records.seed("projects", {"title": "API", "file_paths": ["a.png", "b.png"]})

        response = client.patch(
            f"/api/v1/projects/{project['id']}",
            json={"file_paths": ["b.png"]},
            headers=auth,
        )

        assert response.status_code == 200
        assert response.json()["cleanup"]["deleted"] == ["a.png"]
        assert objects.keys("project-files") == {"b.png"}

    def test_delete_project(self, client, auth, records, objects):
        objects.seed("project-files", "a.png")
        project = records.seed("projects", {"title": "API", "file_paths": ["a.png"]})

        response = client.delete(f"/api/v1/projects/{project['id']}", headers=auth)

        assert response.status_code == 200
        assert response.json()["cleanup"]["deleted"] == ["a.png"]


# =============================================================================
# Certificates
# =============================================================================

class TestCertificateRoutes:
    """Published filtering and PDF validation."""

    @pytest.fixture
    def certificates(self, records):
        records.seed("certificates", {"title": "Public", "is_published": True})
        records.seed("certificates", {"title": "Draft", "is_published": False})

    def test_anonymous_sees_published_only(self, client, certificates):
        response = client.get("/api/v1/certificates", params={"include_unpublished": "true"})

        assert [c["title"] for c in response.json()["certificates"]] == ["Public"]

    def test_admin_can_include_unpublished(self, client, auth, certificates):
        response = client.get(
            "/api/v1/certificates",
            params={"include_unpublished": "true"},
            headers=auth,
        )

        assert response.json()["count"] == 2

    def test_patch_null_is_published_is_400(self, client, auth, records):
        cert = records.seed("certificates", {"title": "AWS", "is_published": True})

        response = client.patch(
            f"/api/v1/certificates/{cert['id']}",
            json={"is_published": None},
            headers=auth,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "VALIDATION_FAILED"
        assert records.fetch_record("certificates", cert["id"])["is_published"] is True

    def test_non_pdf_upload_is_400(self, client, auth, objects):
        response = client.post(
            "/api/v1/certificates/uploads",
            files={"file": ("notes.txt", b"hello", "text/plain")},
            headers=auth,
        )

        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FILE_TYPE"
        assert objects.uploads == []


# =============================================================================
# Files and AI
# =============================================================================

class TestFileRoutes:
    """File manager."""

    def test_list_bucket(self, client, auth, objects):
        objects.seed("certificates", "a.pdf")

        response = client.get("/api/v1/files/certificates", headers=auth)

        assert response.status_code == 200
        assert response.json()["files"][0]["type"] == "pdf"

    def test_delete_referenced_file_is_refused(self, client, auth, records, objects):
        objects.seed("project-files", "a.png")
        records.seed("projects", {"title": "API", "file_paths": ["a.png"]})

        response = client.delete("/api/v1/files/project-files/a.png", headers=auth)

        assert response.status_code == 400
        assert response.json()["code"] == "ASSET_IN_USE"
        assert objects.has("project-files", "a.png")

    def test_delete_missing_file_is_404(self, client, auth):
        response = client.delete("/api/v1/files/profile/nope.pdf", headers=auth)

        assert response.status_code == 404


def test_ai_description_falls_back(client, auth):
    failing = MagicMock()
    failing.chat.completions.create.side_effect = RuntimeError("quota")
    app.dependency_overrides[get_description_writer] = lambda: DescriptionWriter(client=failing)

    response = client.post(
        "/api/v1/ai/description",
        json={"title": "Portfolio API", "technologies": ["FastAPI"]},
        headers=auth,
    )

    assert response.status_code == 200
    assert response.json()["fallback"] is True
    assert response.json()["summary"] == "Portfolio API, built with FastAPI."


class TestHealthRoutes:
    """Liveness and readiness."""

    def test_health(self, client):
        response = client.get("/api/v1/health")

        body = response.json()
        assert response.status_code == 200
        assert body["status"] == "healthy"
        assert body["service"] == "portfolio-api"
        assert body["buckets"] == ["profile", "certificates", "project-files"]
        assert body["max_upload_mb"] == 10

    def test_live(self, client):
        body = client.get("/api/v1/health/live").json()

        assert body == {"status": "alive", "service": "portfolio-api", "timestamp": body["timestamp"]}

    def test_ready_reports_missing_bucket(self, client):
        supabase = MagicMock()
        supabase.get_client.return_value.storage.list_buckets.return_value = [
            SimpleNamespace(name="profile", id="profile"),
            SimpleNamespace(name="certificates", id="certificates"),
        ]
        app.dependency_overrides[get_supabase_client] = lambda: supabase

        body = client.get("/api/v1/health/ready").json()

        assert body["status"] == "degraded"
        assert body["checks"]["database"] == "healthy"
        assert body["checks"]["storage"] == "missing buckets: project-files"
