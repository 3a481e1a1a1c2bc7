# =============================================================================
# tests/test_models.py - Model Tests
# =============================================================================
# This module contains tests for:
# - Slot rules and per-field changes
# - Slot schemas and payload parsing
# - API request models
# - Label/filename utilities
# =============================================================================

import pytest
from pydantic import ValidationError

from app.exceptions import ValidationFailedError
from core.models.assets import (
    AssetKind,
    Clear,
    IncomingFile,
    NoChange,
    Replace,
    SlotRule,
    change_from_value,
)
from core.models.portfolio import CertificateCreate, ProfileUpdate, ProjectCreate, ProjectUpdate
from core.models.schemas import CERTIFICATE, PROFILE, PROJECT, RecordPayload, get_schema
from lib.utils import dedupe_labels, safe_basename


class TestSlotRule:
    """Content type checks per slot kind."""

    def test_pdf_slot(self):
        slot = SlotRule("cv", AssetKind.PDF, "profile")

        assert slot.accepts("application/pdf")
        assert not slot.accepts("application/x-pdf")
        assert not slot.accepts(None)
        assert slot.empty_value == ""

    def test_image_slot(self):
        slot = SlotRule("shots", AssetKind.IMAGE, "project-files", multiple=True)

        assert slot.accepts("image/webp")
        assert slot.accepts("IMAGE/PNG")
        assert not slot.accepts("image/")
        assert not slot.accepts("application/pdf")
        assert slot.empty_value == []


class TestChangeFromValue:
    """JSON value -> explicit change."""

    @pytest.mark.parametrize("value", [None, "", "   ", [], ["", " "]])
    def test_empty_values_clear(self, value):
        assert change_from_value(value) == Clear()

    def test_string_replaces(self):
        assert change_from_value("a.pdf") == Replace.reference("a.pdf")

    def test_list_replaces_in_order(self):
        assert change_from_value(["b.png", "a.png"]).items == ("b.png", "a.png")


class TestRecordPayload:
    """Splitting request fields into scalars and asset changes."""

    def test_from_fields(self):
        payload = RecordPayload.from_fields(PROFILE, {"bio": "", "cv_pdf_url": None, "unknown": 1})

        assert payload.scalars == {"bio": ""}
        assert payload.assets == {"cv_pdf_url": Clear()}
        assert isinstance(payload.change_for("profile_image_url"), NoChange)

    def test_replace_files(self):
        upload = IncomingFile("a.png", b"x", "image/png")
        change = Replace(items=("old.png", upload))

        assert change.files == [upload]


class TestSchemas:
    """Entity registry."""

    def test_get_schema(self):
        assert get_schema("certificate") is CERTIFICATE

    def test_unknown_schema(self):
        with pytest.raises(ValidationFailedError):
            get_schema("blog")

    def test_profile_is_singleton(self):
        assert PROFILE.is_singleton
        assert PROFILE.singleton_id == 1
        assert not PROJECT.is_singleton

    def test_buckets(self):
        assert PROFILE.buckets == {"profile"}
        assert PROJECT.slot("file_paths").multiple
        assert CERTIFICATE.defaults["is_published"] is True


class TestRequestModels:
    """Pydantic request models."""

    def test_update_keeps_only_sent_fields(self):
        update = ProjectUpdate.model_validate({"demo_link": "", "file_paths": []})

        assert update.model_dump(exclude_unset=True) == {"demo_link": "", "file_paths": []}

    def test_profile_update_null_is_sent(self):
        update = ProfileUpdate.model_validate({"cv_pdf_url": None})

        assert update.model_dump(exclude_unset=True) == {"cv_pdf_url": None}

    def test_project_requires_title(self):
        with pytest.raises(ValidationError):
            ProjectCreate.model_validate({"technologies": ["Python"]})

    def test_certificate_defaults_not_sent(self):
        cert = CertificateCreate.model_validate({"title": "AWS"})

        assert cert.is_published is True
        assert cert.model_dump(exclude_unset=True) == {"title": "AWS"}


class TestUtils:
    """lib/utils.py"""

    def test_dedupe_labels(self):
        assert dedupe_labels(["AWS", "Cloud", "AWS"]) == ["AWS", "Cloud"]
        assert dedupe_labels(["React", "react"]) == ["React", "react"]
        assert dedupe_labels(None) == []

    @pytest.mark.parametrize("filename, expected", [
        ("cv.pdf", "cv.pdf"),
        ("../../etc/passwd", "passwd"),
        ("C:\\Users\\me\\photo.png", "photo.png"),
        ("", "file"),
        (None, "file"),
    ])
    def test_safe_basename(self, filename, expected):
        assert safe_basename(filename) == expected
