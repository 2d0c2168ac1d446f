"""Last-modified / last-editor resolution with tiered fallbacks.

Advanced metadata (editor identity, revisions, owners) is an optional
capability of the content store. Resolution never raises: when the advanced
tiers fail, the result degrades to the basic last-modified time.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Callable

from docwiki.providers.content_types import ContentStore, Person

logger = logging.getLogger(__name__)


class MetadataTier(str, Enum):
    """Which data source produced the editor identity."""

    PRIMARY = "primary"
    REVISION = "revision"
    OWNER_FALLBACK = "owner-fallback"
    BASIC = "basic"


@dataclass(frozen=True)
class Metadata:
    updated_at: datetime | None
    updated_by: str = ""
    updated_by_avatar: str = ""
    tier: MetadataTier = MetadataTier.BASIC
    diagnostics: str = ""  # concatenated failure messages

    @property
    def source(self) -> str:
        """Tier tag, with failure messages appended when there were any."""
        if self.diagnostics:
            return f"{self.tier.value}: {self.diagnostics}"
        return self.tier.value


@dataclass
class AttemptResult:
    """Outcome of one tier. Empty fields mean the tier had nothing to add."""

    updated_at: datetime | None = None
    updated_by: str = ""
    updated_by_avatar: str = ""
    owners: tuple[Person, ...] = ()


@dataclass
class _Draft:
    """Accumulated state while folding over the tiers."""

    updated_at: datetime | None = None
    updated_by: str = ""
    updated_by_avatar: str = ""
    owners: tuple[Person, ...] = ()
    tier: MetadataTier = MetadataTier.BASIC
    errors: list[str] = field(default_factory=list)

    def merge(self, tier: MetadataTier, result: AttemptResult) -> None:
        self.tier = tier
        self.updated_at = self.updated_at or result.updated_at
        self.owners = self.owners or result.owners
        if result.updated_by:
            self.updated_by = result.updated_by
            self.updated_by_avatar = result.updated_by_avatar or self.updated_by_avatar

    def to_metadata(self) -> Metadata:
        return Metadata(
            updated_at=self.updated_at,
            updated_by=self.updated_by,
            updated_by_avatar=self.updated_by_avatar,
            tier=self.tier,
            diagnostics="; ".join(self.errors),
        )


Attempt = Callable[[str, _Draft], AttemptResult]


class MetadataResolver:
    """Resolve Metadata for a file by folding over ordered attempt functions.

    Tiers run in order until one yields an editor name:

    1. primary: advanced metadata query (time, last editor, owners)
    2. revision: editor of the most recent revision
    3. owner-fallback: first owner's display name or email

    Any exception in these tiers collapses the result to the basic tier
    (last-modified time only) with the failure messages kept as diagnostics.
    """

    def __init__(self, store: ContentStore) -> None:
        self.store = store
        self.attempts: list[tuple[MetadataTier, Attempt]] = [
            (MetadataTier.PRIMARY, self._primary),
            (MetadataTier.REVISION, self._revision),
            (MetadataTier.OWNER_FALLBACK, self._owner_fallback),
        ]

    def resolve(self, file_id: str) -> Metadata:
        """Resolve metadata for file_id. Never raises."""
        draft = _Draft()

        for tier, attempt in self.attempts:
            try:
                result = attempt(file_id, draft)
            except Exception as e:
                logger.warning(f"Metadata tier '{tier.value}' failed for {file_id}: {e}")
                draft.errors.append(f"{tier.value}: {e}")
                return self._basic(file_id, draft)

            draft.merge(tier, result)
            if draft.updated_by:
                break

        if draft.updated_at is None:
            try:
                draft.updated_at = self.store.get_last_updated(file_id)
            except Exception as e:
                logger.warning(f"Basic last-updated read failed for {file_id}: {e}")

        return draft.to_metadata()

    def _primary(self, file_id: str, draft: _Draft) -> AttemptResult:
        meta = self.store.get_metadata(file_id)
        user = meta.last_modifying_user
        return AttemptResult(
            updated_at=meta.modified_time,
            updated_by=user.display_name if user else "",
            updated_by_avatar=user.photo_link if user else "",
            owners=meta.owners,
        )

    def _revision(self, file_id: str, draft: _Draft) -> AttemptResult:
        revisions = self.store.list_revisions(file_id)
        if not revisions:
            return AttemptResult()
        latest = revisions[-1]
        user = latest.last_modifying_user
        if not user or not user.display_name:
            return AttemptResult(updated_at=latest.modified_time)
        return AttemptResult(
            updated_at=latest.modified_time,
            updated_by=user.display_name,
            updated_by_avatar=user.photo_link,
        )

    def _owner_fallback(self, file_id: str, draft: _Draft) -> AttemptResult:
        if not draft.owners:
            return AttemptResult()
        owner = draft.owners[0]
        return AttemptResult(
            updated_by=owner.display_name or owner.email_address,
            updated_by_avatar=owner.photo_link,
        )

    def _basic(self, file_id: str, draft: _Draft) -> Metadata:
        """Last-modified time only, empty editor fields."""
        updated_at = draft.updated_at
        try:
            updated_at = self.store.get_last_updated(file_id)
        except Exception as e:
            logger.warning(f"Basic last-updated read failed for {file_id}: {e}")
            draft.errors.append(f"basic: {e}")
        return Metadata(
            updated_at=updated_at,
            tier=MetadataTier.BASIC,
            diagnostics="; ".join(draft.errors),
        )
