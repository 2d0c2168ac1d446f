"""Google Drive / Google Docs REST client implementing ContentStore."""

from __future__ import annotations

import logging
from datetime import datetime
from typing import Any, Iterator

import httpx

from docwiki.providers.content_types import (
    ContentStore,
    DocumentElement,
    FileEntry,
    FileMetadata,
    ListItem,
    Paragraph,
    Person,
    Revision,
    Table,
    TextSpan,
)

logger = logging.getLogger(__name__)

DRIVE_BASE_URL = "https://www.googleapis.com/drive/v3"
DOCS_BASE_URL = "https://docs.googleapis.com/v1"

FILE_FIELDS = "id,name,mimeType,modifiedTime"
PERSON_FIELDS = "displayName,emailAddress,photoLink"
METADATA_FIELDS = f"modifiedTime,lastModifyingUser({PERSON_FIELDS}),owners({PERSON_FIELDS})"
REVISION_FIELDS = f"nextPageToken,revisions(id,modifiedTime,lastModifyingUser({PERSON_FIELDS}))"

# Docs API glyph types rendered as numbered lists
ORDERED_GLYPH_TYPES = {"DECIMAL", "ZERO_DECIMAL", "ALPHA", "UPPER_ALPHA", "ROMAN", "UPPER_ROMAN"}


class DriveError(Exception):
    """Base exception for Drive API errors."""


class DriveAuthError(DriveError):
    """Authentication failed."""


class DrivePermissionError(DriveError):
    """The token may not access the requested resource."""


class DriveNotFoundError(DriveError):
    """The requested file does not exist (or is invisible to the token)."""


class AdvancedMetadataDisabled(DriveError):
    """Advanced metadata access is turned off in settings."""


def parse_timestamp(value: str | None) -> datetime | None:
    """Parse an RFC 3339 timestamp as returned by Drive ("2024-05-01T10:00:00.000Z")."""
    if not value:
        return None
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def parse_person(data: dict[str, Any] | None) -> Person | None:
    if not data:
        return None
    return Person(
        display_name=data.get("displayName", "") or "",
        email_address=data.get("emailAddress", "") or "",
        photo_link=data.get("photoLink", "") or "",
    )


def parse_file(data: dict[str, Any]) -> FileEntry:
    return FileEntry(
        id=data["id"],
        name=data.get("name", ""),
        mime_type=data.get("mimeType", ""),
        modified_time=parse_timestamp(data.get("modifiedTime")),
    )


def _parse_spans(paragraph: dict[str, Any]) -> tuple[TextSpan, ...]:
    spans = []
    for element in paragraph.get("elements", []):
        run = element.get("textRun")
        if not run:
            continue
        # \v is a soft line break inside a paragraph
        text = run.get("content", "").replace("\u000b", "\n")
        if not text:
            continue
        family = run.get("textStyle", {}).get("weightedFontFamily", {}).get("fontFamily", "")
        spans.append(TextSpan(text=text, font_family=family))

    # Only the paragraph terminator at the very end is dropped; inner breaks stay
    while spans and spans[-1].text.endswith("\n"):
        last = spans.pop()
        text = last.text.rstrip("\n")
        if text:
            spans.append(TextSpan(text=text, font_family=last.font_family))
            break
    return tuple(spans)


def _heading_level(paragraph: dict[str, Any]) -> int:
    style = paragraph.get("paragraphStyle", {}).get("namedStyleType", "")
    if style.startswith("HEADING_"):
        try:
            level = int(style[len("HEADING_"):])
        except ValueError:
            return 0
        return level if 1 <= level <= 6 else 0
    return 0


def _is_ordered(lists: dict[str, Any], list_id: str, level: int) -> bool:
    levels = lists.get(list_id, {}).get("listProperties", {}).get("nestingLevels", [])
    if level >= len(levels):
        return False
    return levels[level].get("glyphType") in ORDERED_GLYPH_TYPES


def _cell_text(cell: dict[str, Any]) -> str:
    lines = []
    for item in cell.get("content", []):
        if "paragraph" in item:
            lines.append("".join(span.text for span in _parse_spans(item["paragraph"])))
    return "\n".join(lines).strip()


def parse_document(document: dict[str, Any]) -> list[DocumentElement]:
    """Turn a Docs API document resource into Paragraph / ListItem / Table elements.

    Section breaks, tables of contents and other structural elements are dropped.
    """
    lists = document.get("lists", {})
    elements: list[DocumentElement] = []

    for item in document.get("body", {}).get("content", []):
        if "paragraph" in item:
            paragraph = item["paragraph"]
            spans = _parse_spans(paragraph)
            bullet = paragraph.get("bullet")
            if bullet:
                level = bullet.get("nestingLevel", 0)
                elements.append(
                    ListItem(
                        text="".join(span.text for span in spans),
                        nesting_level=level,
                        ordered=_is_ordered(lists, bullet.get("listId", ""), level),
                    )
                )
            else:
                elements.append(Paragraph(spans=spans, heading_level=_heading_level(paragraph)))
        elif "table" in item:
            rows = tuple(
                tuple(_cell_text(cell) for cell in row.get("tableCells", []))
                for row in item["table"].get("tableRows", [])
            )
            elements.append(Table(rows=rows))

    return elements


class DriveClient(ContentStore):
    """Client for Google Drive v3 and Google Docs v1."""

    def __init__(
        self,
        token: str,
        *,
        advanced_metadata: bool = True,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        if not token:
            raise ValueError("Drive access token is required")
        self._advanced_metadata = advanced_metadata
        self._client = httpx.Client(
            base_url=DRIVE_BASE_URL,
            headers={"Authorization": f"Bearer {token}"},
            timeout=30.0,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "DriveClient":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def _get(self, url: str, params: dict[str, str] | None = None) -> httpx.Response:
        """GET a resource, mapping auth/permission/missing responses to DriveError.

        No retries: a failed read is fatal for the calling operation.
        """
        resp = self._client.get(url, params=params)

        if resp.status_code == 401:
            raise DriveAuthError("Invalid or expired Drive access token")
        if resp.status_code == 403:
            raise DrivePermissionError(f"Access denied for {url}")
        if resp.status_code == 404:
            raise DriveNotFoundError(f"Not found: {url}")

        resp.raise_for_status()
        return resp

    def _paginate(self, url: str, params: dict[str, str], key: str) -> Iterator[dict[str, Any]]:
        page_token: str | None = None
        while True:
            page_params = dict(params)
            if page_token:
                page_params["pageToken"] = page_token
            data = self._get(url, params=page_params).json()
            yield from data.get(key, [])
            page_token = data.get("nextPageToken")
            if not page_token:
                return

    def list_files(self, folder_id: str) -> list[FileEntry]:
        params = {
            "q": f"'{folder_id}' in parents and trashed = false",
            "fields": f"nextPageToken,files({FILE_FIELDS})",
            "pageSize": "1000",
            "supportsAllDrives": "true",
            "includeItemsFromAllDrives": "true",
        }
        files = [parse_file(item) for item in self._paginate("/files", params, "files")]
        logger.info(f"Listed {len(files)} files in folder {folder_id}")
        return files

    def get_file(self, file_id: str) -> FileEntry:
        data = self._get(
            f"/files/{file_id}",
            params={"fields": FILE_FIELDS, "supportsAllDrives": "true"},
        ).json()
        return parse_file(data)

    def read_bytes(self, file_id: str) -> tuple[bytes, str]:
        resp = self._get(f"/files/{file_id}", params={"alt": "media", "supportsAllDrives": "true"})
        content_type = resp.headers.get("content-type", "application/octet-stream")
        return resp.content, content_type.split(";")[0].strip()

    def get_document(self, file_id: str) -> list[DocumentElement]:
        data = self._get(f"{DOCS_BASE_URL}/documents/{file_id}").json()
        return parse_document(data)

    def get_metadata(self, file_id: str) -> FileMetadata:
        if not self._advanced_metadata:
            raise AdvancedMetadataDisabled("Advanced metadata access is not enabled")
        data = self._get(
            f"/files/{file_id}",
            params={"fields": METADATA_FIELDS, "supportsAllDrives": "true"},
        ).json()
        owners = tuple(p for p in (parse_person(o) for o in data.get("owners", [])) if p)
        return FileMetadata(
            modified_time=parse_timestamp(data.get("modifiedTime")),
            last_modifying_user=parse_person(data.get("lastModifyingUser")),
            owners=owners,
        )

    def list_revisions(self, file_id: str) -> list[Revision]:
        if not self._advanced_metadata:
            raise AdvancedMetadataDisabled("Advanced metadata access is not enabled")
        params = {"fields": REVISION_FIELDS, "pageSize": "1000"}
        return [
            Revision(
                id=item.get("id", ""),
                modified_time=parse_timestamp(item.get("modifiedTime")),
                last_modifying_user=parse_person(item.get("lastModifyingUser")),
            )
            for item in self._paginate(f"/files/{file_id}/revisions", params, "revisions")
        ]

    def get_last_updated(self, file_id: str) -> datetime:
        data = self._get(
            f"/files/{file_id}",
            params={"fields": "modifiedTime", "supportsAllDrives": "true"},
        ).json()
        updated = parse_timestamp(data.get("modifiedTime"))
        if updated is None:
            raise DriveError(f"No modifiedTime for file {file_id}")
        return updated

    def get_parents(self, file_id: str) -> list[str]:
        data = self._get(
            f"/files/{file_id}",
            params={"fields": "parents", "supportsAllDrives": "true"},
        ).json()
        return list(data.get("parents", []))
