from __future__ import annotations

import os
from dataclasses import dataclass

# Index and word-cloud entries live this long in the cache
CACHE_TTL_SECONDS = 60


@dataclass(frozen=True)
class Settings:
    app_title: str
    content_root_id: str
    drive_access_token: str
    debug_metadata: bool
    advanced_metadata: bool
    cache_namespace: str
    cache_ttl_seconds: int = CACHE_TTL_SECONDS

    @staticmethod
    def from_env() -> "Settings":
        def _b(name: str, default: str) -> bool:
            return os.getenv(name, default).strip() in ("1", "true", "True", "yes", "YES")

        return Settings(
            app_title=os.getenv("APP_TITLE", "Docs").strip(),
            content_root_id=os.getenv("CONTENT_ROOT_ID", "").strip(),
            drive_access_token=os.getenv("DRIVE_ACCESS_TOKEN", "").strip(),
            debug_metadata=_b("DEBUG_METADATA", "0"),
            advanced_metadata=_b("ADVANCED_METADATA", "1"),
            cache_namespace=os.getenv("CACHE_NAMESPACE", "docwiki").strip(),
        )
