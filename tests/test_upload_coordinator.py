# =============================================================================
# tests/test_upload_coordinator.py - Upload Coordinator Tests
# =============================================================================
# This module contains tests for:
# - Content type / size validation per slot
# - Validation before any store call
# - Partial batch failures
# =============================================================================

import pytest

from app.exceptions import InvalidContentError, StoreUnavailableError, ValidationFailedError
from core.models.assets import Clear, IncomingFile, Replace
from core.models.schemas import CERTIFICATE, PROFILE, PROJECT, RecordPayload
from core.services.upload_coordinator import UploadCoordinator


def image(name="shot.png", content=b"\x89PNG", content_type="image/png"):
    return IncomingFile(filename=name, content=content, content_type=content_type)


@pytest.fixture
def coordinator(objects):
    return UploadCoordinator(objects, max_upload_bytes=64)


class TestValidation:
    """Checks done before anything is stored."""

    def test_pdf_slot_rejects_image(self, coordinator):
        with pytest.raises(ValidationFailedError) as exc_info:
            coordinator.validate(CERTIFICATE.slot("cert_url"), image())

        assert exc_info.value.code == "INVALID_FILE_TYPE"
        assert exc_info.value.status_code == 400

    def test_image_slot_rejects_pdf(self, coordinator):
        pdf = IncomingFile("cv.pdf", b"%PDF", "application/pdf")

        with pytest.raises(ValidationFailedError):
            coordinator.validate(PROFILE.slot("profile_image_url"), pdf)

    def test_content_type_parameters_ignored(self, coordinator):
        coordinator.validate(PROJECT.slot("file_paths"), image(content_type="image/png; charset=binary"))

    def test_empty_file_rejected(self, coordinator):
        with pytest.raises(ValidationFailedError) as exc_info:
            coordinator.validate(PROJECT.slot("file_paths"), image(content=b""))

        assert exc_info.value.code == "EMPTY_FILE"

    def test_oversized_file_rejected(self, coordinator):
        with pytest.raises(ValidationFailedError) as exc_info:
            coordinator.validate(PROJECT.slot("file_paths"), image(content=b"x" * 65))

        assert exc_info.value.code == "FILE_TOO_LARGE"
        assert exc_info.value.details["max_bytes"] == 64

    def test_default_limit_is_ten_mib(self, objects):
        default = UploadCoordinator(objects)
        slot = PROJECT.slot("file_paths")

        default.validate(slot, image(content=b"x" * (10 * 1024 * 1024)))
        with pytest.raises(ValidationFailedError) as exc_info:
            default.validate(slot, image(content=b"x" * (12 * 1024 * 1024)))

        assert exc_info.value.code == "FILE_TOO_LARGE"
        assert exc_info.value.details["max_bytes"] == 10 * 1024 * 1024

    def test_validate_payload_checks_every_file(self, coordinator, objects):
        payload = RecordPayload(assets={
            "profile_image_url": Replace.upload(image()),
            "cv_pdf_url": Replace.upload(image("cv.png")),
        })

        with pytest.raises(ValidationFailedError):
            coordinator.validate_payload(PROFILE, payload)
        assert objects.uploads == []


class TestStoreMany:
    """Batch uploads into one slot."""

    def test_all_stored_in_order(self, coordinator, objects):
        batch = coordinator.store_many(PROJECT.slot("file_paths"), [image("a.png"), image("b.png")])

        assert batch.ok
        assert [ref.key for ref in batch.stored] == ["k1-a.png", "k2-b.png"]
        assert objects.keys("project-files") == {"k1-a.png", "k2-b.png"}

    def test_invalid_file_stores_nothing(self, coordinator, objects):
        files = [image("a.png"), image("b.txt", content_type="text/plain")]

        with pytest.raises(ValidationFailedError):
            coordinator.store_many(PROJECT.slot("file_paths"), files)
        assert objects.uploads == []

    def test_no_files_rejected(self, coordinator):
        with pytest.raises(ValidationFailedError) as exc_info:
            coordinator.store_many(PROJECT.slot("file_paths"), [])

        assert exc_info.value.code == "NO_FILES"

    def test_partial_failure_reports_stored_subset(self, coordinator, objects):
        objects.fail_upload_after = 1

        batch = coordinator.store_many(
            PROJECT.slot("file_paths"),
            [image("a.png"), image("b.png"), image("c.png")],
        )

        assert not batch.ok
        assert isinstance(batch.error, StoreUnavailableError)
        assert [ref.key for ref in batch.stored] == ["k1-a.png"]

    def test_provider_rejection_is_a_validation_error(self, coordinator, objects):
        objects.reject_content_types.add("image/svg+xml")

        batch = coordinator.store_many(PROJECT.slot("file_paths"), [image("a.svg", content_type="image/svg+xml")])

        assert isinstance(batch.error, InvalidContentError)
        assert batch.error.status_code == 400


def test_store_payload_skips_fields_without_files(coordinator, objects, pdf_file):
    payload = RecordPayload(assets={
        "cv_pdf_url": Replace.upload(pdf_file),
        "profile_image_url": Clear(),
    })

    stored, error = coordinator.store_payload(PROFILE, payload)

    assert error is None
    assert list(stored) == ["cv_pdf_url"]
    assert stored["cv_pdf_url"][0].bucket == "profile"
