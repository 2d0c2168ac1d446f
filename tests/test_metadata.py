"""Tests for metadata.py"""

import itertools
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from docwiki.core.metadata import Metadata, MetadataResolver, MetadataTier
from docwiki.providers.content_types import FileMetadata, Person, Revision

T1 = datetime(2024, 5, 1, tzinfo=timezone.utc)
T2 = datetime(2024, 5, 2, tzinfo=timezone.utc)


@pytest.fixture
def store():
    store = MagicMock()
    store.get_last_updated.return_value = T1
    store.list_revisions.return_value = []
    return store


class TestTiers:
    """Each tier wins when the previous ones yield no editor."""

    def test_primary(self, store):
        store.get_metadata.return_value = FileMetadata(
            modified_time=T2,
            last_modifying_user=Person(display_name="Ana", photo_link="https://a/ana.png"),
        )
        meta = MetadataResolver(store).resolve("f")
        assert meta.tier == MetadataTier.PRIMARY
        assert meta.updated_by == "Ana"
        assert meta.updated_by_avatar == "https://a/ana.png"
        assert meta.updated_at == T2
        store.list_revisions.assert_not_called()

    def test_revision(self, store):
        store.get_metadata.return_value = FileMetadata(modified_time=T2)
        store.list_revisions.return_value = [
            Revision(id="1", modified_time=T1, last_modifying_user=Person(display_name="Old")),
            Revision(id="2", modified_time=T2, last_modifying_user=Person(display_name="Luis")),
        ]
        meta = MetadataResolver(store).resolve("f")
        assert meta.tier == MetadataTier.REVISION
        assert meta.updated_by == "Luis"

    def test_revision_backfills_timestamp(self, store):
        store.get_metadata.return_value = FileMetadata(modified_time=None)
        store.list_revisions.return_value = [
            Revision(id="2", modified_time=T2, last_modifying_user=Person(display_name="Luis")),
        ]
        meta = MetadataResolver(store).resolve("f")
        assert meta.updated_at == T2
        store.get_last_updated.assert_not_called()

    def test_owner_display_name(self, store):
        store.get_metadata.return_value = FileMetadata(
            modified_time=T2,
            owners=(Person(display_name="Owner", email_address="o@x.org"),),
        )
        meta = MetadataResolver(store).resolve("f")
        assert meta.tier == MetadataTier.OWNER_FALLBACK
        assert meta.updated_by == "Owner"

    def test_owner_email(self, store):
        store.get_metadata.return_value = FileMetadata(
            modified_time=T2,
            owners=(Person(email_address="o@x.org"), Person(display_name="Second")),
        )
        meta = MetadataResolver(store).resolve("f")
        assert meta.updated_by == "o@x.org"

    def test_nothing_found_reports_last_tier(self, store):
        store.get_metadata.return_value = FileMetadata(modified_time=T2)
        meta = MetadataResolver(store).resolve("f")
        assert meta.tier == MetadataTier.OWNER_FALLBACK
        assert meta.updated_by == ""
        assert meta.updated_at == T2


class TestBasicFallback:
    """Failures collapse to the basic tier instead of raising."""

    def test_primary_failure(self, store):
        store.get_metadata.side_effect = PermissionError("advanced access disabled")
        meta = MetadataResolver(store).resolve("f")
        assert meta.tier == MetadataTier.BASIC
        assert meta.updated_at == T1
        assert meta.updated_by == ""
        assert meta.updated_by_avatar == ""
        assert "advanced access disabled" in meta.diagnostics

    def test_revision_failure(self, store):
        store.get_metadata.return_value = FileMetadata(modified_time=T2)
        store.list_revisions.side_effect = RuntimeError("revisions down")
        meta = MetadataResolver(store).resolve("f")
        assert meta.tier == MetadataTier.BASIC
        assert "revision: revisions down" in meta.diagnostics

    def test_both_messages_kept(self, store):
        store.get_metadata.side_effect = RuntimeError("first")
        store.get_last_updated.side_effect = RuntimeError("second")
        meta = MetadataResolver(store).resolve("f")
        assert meta.tier == MetadataTier.BASIC
        assert meta.updated_at is None
        assert meta.diagnostics == "primary: first; basic: second"
        assert meta.source == "basic: primary: first; basic: second"

    def test_source_without_diagnostics(self):
        assert Metadata(updated_at=T1, tier=MetadataTier.PRIMARY).source == "primary"


@pytest.mark.parametrize(
    "primary_fails,revision_fails,basic_fails",
    list(itertools.product([False, True], repeat=3)),
)
def test_resolution_is_total(store, primary_fails, revision_fails, basic_fails):
    """Every failure combination returns a Metadata with the right tier."""
    if primary_fails:
        store.get_metadata.side_effect = RuntimeError("primary")
    else:
        store.get_metadata.return_value = FileMetadata(modified_time=T2)
    if revision_fails:
        store.list_revisions.side_effect = RuntimeError("revision")
    if basic_fails:
        store.get_last_updated.side_effect = RuntimeError("basic")

    meta = MetadataResolver(store).resolve("f")

    assert isinstance(meta, Metadata)
    if primary_fails or revision_fails:
        assert meta.tier == MetadataTier.BASIC
    else:
        assert meta.tier == MetadataTier.OWNER_FALLBACK
