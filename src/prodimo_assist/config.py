"""Service configuration from the environment."""
from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path

from prodimo_assist.hover import DEFAULT_WIKI_BASE_URL

CATALOG_ENV = "PRODIMO_PARAMLIST"
WIKI_BASE_URL_ENV = "PRODIMO_WIKI_BASE_URL"

DEFAULT_CATALOG_PATH = Path(__file__).resolve().parent / "data" / "paramlist.json"


@dataclass(frozen=True, slots=True)
class ServiceConfig:
    catalog_path: Path = DEFAULT_CATALOG_PATH
    wiki_base_url: str = DEFAULT_WIKI_BASE_URL

    @classmethod
    def from_env(cls) -> ServiceConfig:
        """Build a config from ``PRODIMO_PARAMLIST`` / ``PRODIMO_WIKI_BASE_URL``."""
        catalog = os.environ.get(CATALOG_ENV, "")
        base_url = os.environ.get(WIKI_BASE_URL_ENV, "")
        return cls(
            catalog_path=Path(catalog).expanduser() if catalog else DEFAULT_CATALOG_PATH,
            wiki_base_url=base_url or DEFAULT_WIKI_BASE_URL,
        )

    def with_overrides(
        self,
        *,
        catalog_path: Path | None = None,
        wiki_base_url: str | None = None,
    ) -> ServiceConfig:
        """Return a copy with any non-None override applied (CLI flags)."""
        changes: dict[str, object] = {}
        if catalog_path is not None:
            changes["catalog_path"] = catalog_path
        if wiki_base_url:
            changes["wiki_base_url"] = wiki_base_url
        return replace(self, **changes)
