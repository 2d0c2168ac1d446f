"""Provider-agnostic content types for files, document trees and metadata."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Union

RICH_DOCUMENT_MIME = "application/vnd.google-apps.document"
PDF_MIME = "application/pdf"


@dataclass(frozen=True)
class FileEntry:
    """A file as listed inside a content-store folder."""

    id: str
    name: str
    mime_type: str
    modified_time: datetime | None = None

    @property
    def is_rich_document(self) -> bool:
        return self.mime_type == RICH_DOCUMENT_MIME


@dataclass(frozen=True)
class Person:
    """A user as reported by the content store."""

    display_name: str = ""
    email_address: str = ""
    photo_link: str = ""


@dataclass(frozen=True)
class FileMetadata:
    """Advanced per-file metadata: modification time, last editor and owners."""

    modified_time: datetime | None = None
    last_modifying_user: Person | None = None
    owners: tuple[Person, ...] = ()


@dataclass(frozen=True)
class Revision:
    id: str
    modified_time: datetime | None = None
    last_modifying_user: Person | None = None


# Rich document elements. The converter only understands these three shapes.


@dataclass(frozen=True)
class TextSpan:
    """A run of characters sharing one font family."""

    text: str
    font_family: str = ""


@dataclass(frozen=True)
class Paragraph:
    spans: tuple[TextSpan, ...] = ()
    heading_level: int = 0  # 0 = body text, 1-6 = heading

    @property
    def text(self) -> str:
        return "".join(span.text for span in self.spans)


@dataclass(frozen=True)
class ListItem:
    text: str
    nesting_level: int = 0
    ordered: bool = False


@dataclass(frozen=True)
class Table:
    rows: tuple[tuple[str, ...], ...] = field(default_factory=tuple)


DocumentElement = Union[Paragraph, ListItem, Table]


class ContentStore(ABC):
    """Read-only access to a hierarchical content store."""

    @abstractmethod
    def list_files(self, folder_id: str) -> list[FileEntry]:
        """List files directly inside a folder."""
        ...

    @abstractmethod
    def get_file(self, file_id: str) -> FileEntry:
        """Fetch the listing entry of a single file."""
        ...

    @abstractmethod
    def read_bytes(self, file_id: str) -> tuple[bytes, str]:
        """Return the raw bytes and the content type of a file."""
        ...

    @abstractmethod
    def get_document(self, file_id: str) -> list[DocumentElement]:
        """Return the top-level structural elements of a rich document."""
        ...

    @abstractmethod
    def get_metadata(self, file_id: str) -> FileMetadata:
        """Advanced metadata. May fail when advanced access is unavailable."""
        ...

    @abstractmethod
    def list_revisions(self, file_id: str) -> list[Revision]:
        """Revisions, oldest first."""
        ...

    @abstractmethod
    def get_last_updated(self, file_id: str) -> datetime:
        """Basic last-modified time."""
        ...

    @abstractmethod
    def get_parents(self, file_id: str) -> list[str]:
        """Identifiers of the folders directly containing a file."""
        ...
