# =============================================================================
# tests/test_cleanup_executor.py - Cleanup Executor Tests
# =============================================================================
# Deletion is best effort: every reference is tried, failures are reported.
# =============================================================================

from unittest.mock import MagicMock

from core.models.assets import AssetReference
from core.services.cleanup_executor import CleanupExecutor, CleanupReport
from core.services.storage_service import StorageService


def ref(key, bucket="profile"):
    return StorageService.resolve_reference(bucket, key)


def test_deletes_managed_references(objects):
    objects.seed("profile", "a.pdf")
    objects.seed("profile", "b.png")

    report = CleanupExecutor(objects).reconcile([ref("a.pdf"), ref("b.png")])

    assert report.deleted_keys == ["a.pdf", "b.png"]
    assert objects.keys("profile") == set()


def test_external_references_skipped(objects):
    external = ref("https://cdn.example.com/a.pdf")

    report = CleanupExecutor(objects).reconcile([external])

    assert report.skipped == [external]
    assert objects.deletes == []


def test_failure_does_not_stop_other_deletions(objects):
    objects.seed("profile", "a.pdf")
    objects.seed("profile", "b.png")
    objects.fail_delete_keys.add("a.pdf")

    report = CleanupExecutor(objects).reconcile([ref("a.pdf"), ref("b.png")])

    assert report.deleted_keys == ["b.png"]
    assert [f.reference.key for f in report.failed] == ["a.pdf"]
    assert objects.has("profile", "a.pdf")


def test_already_missing_object_counts_as_deleted(objects):
    report = CleanupExecutor(objects).reconcile([ref("gone.pdf")])

    assert report.deleted_keys == ["gone.pdf"]
    assert report.failed == []


def test_still_referenced_object_is_kept(objects):
    objects.seed("profile", "a.pdf")
    guard = MagicMock(return_value=True)

    report = CleanupExecutor(objects, is_referenced=guard).reconcile([ref("a.pdf")])

    assert report.skipped[0].key == "a.pdf"
    assert objects.has("profile", "a.pdf")


def test_guard_error_keeps_object_and_reports_failure(objects):
    objects.seed("profile", "a.pdf")
    guard = MagicMock(side_effect=RuntimeError("db down"))

    report = CleanupExecutor(objects, is_referenced=guard).reconcile([ref("a.pdf")])

    assert "db down" in report.failed[0].reason
    assert objects.has("profile", "a.pdf")


def test_duplicate_references_deleted_once(objects):
    objects.seed("profile", "a.pdf")

    report = CleanupExecutor(objects).reconcile([ref("a.pdf"), ref("a.pdf")])

    assert report.deleted_keys == ["a.pdf"]
    assert objects.deletes == [("profile", "a.pdf")]


def test_report_to_dict():
    deleted = AssetReference(bucket="profile", key="a.pdf", public_url="u")
    external = AssetReference(bucket="profile", key=None, public_url="https://x/y.png")

    report = CleanupReport(deleted=[deleted], skipped=[external])

    assert report.to_dict() == {
        "deleted": ["a.pdf"],
        "failed": [],
        "skipped": ["https://x/y.png"],
    }
