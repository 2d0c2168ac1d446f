"""Shared fixtures: an in-memory ContentStore and a controllable clock."""

from datetime import datetime, timezone

import pytest

from docwiki.core.cache import TTLCache
from docwiki.core.settings import Settings
from docwiki.providers.content_types import (
    ContentStore,
    FileEntry,
    FileMetadata,
    RICH_DOCUMENT_MIME,
)

ROOT_ID = "root-folder"


def ts(day: int) -> datetime:
    return datetime(2024, 5, day, 12, 0, tzinfo=timezone.utc)


class FakeStore(ContentStore):
    """ContentStore backed by dicts, counting folder listings."""

    def __init__(self):
        self.files: dict[str, FileEntry] = {}
        self.folders: dict[str, list[str]] = {}
        self.data: dict[str, tuple[bytes, str]] = {}
        self.documents: dict[str, list] = {}
        self.metadata: dict[str, FileMetadata] = {}
        self.revisions: dict[str, list] = {}
        self.parents: dict[str, list[str]] = {}
        self.list_calls = 0

    def add(self, file_id, name, modified, *, folder=ROOT_ID, text=None, data=None,
            content_type="text/markdown", document=None):
        mime = RICH_DOCUMENT_MIME if document is not None else content_type
        self.files[file_id] = FileEntry(id=file_id, name=name, mime_type=mime, modified_time=modified)
        self.folders.setdefault(folder, []).append(file_id)
        self.parents[file_id] = [folder]
        if document is not None:
            self.documents[file_id] = document
        elif text is not None:
            self.data[file_id] = (text.encode("utf-8"), content_type)
        elif data is not None:
            self.data[file_id] = (data, content_type)

    def list_files(self, folder_id):
        self.list_calls += 1
        return [self.files[file_id] for file_id in self.folders.get(folder_id, [])]

    def get_file(self, file_id):
        return self.files[file_id]

    def read_bytes(self, file_id):
        return self.data[file_id]

    def get_document(self, file_id):
        return self.documents[file_id]

    def get_metadata(self, file_id):
        return self.metadata.get(file_id, FileMetadata(modified_time=self.files[file_id].modified_time))

    def list_revisions(self, file_id):
        return self.revisions.get(file_id, [])

    def get_last_updated(self, file_id):
        return self.files[file_id].modified_time

    def get_parents(self, file_id):
        return self.parents.get(file_id, [])


class FakeClock:
    def __init__(self, now: float = 1000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def store():
    return FakeStore()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def cache(clock):
    return TTLCache(ttl_seconds=60, namespace="test", clock=clock)


@pytest.fixture
def settings():
    return Settings(
        app_title="Docs",
        content_root_id=ROOT_ID,
        drive_access_token="token",
        debug_metadata=False,
        advanced_metadata=True,
        cache_namespace="test",
    )
