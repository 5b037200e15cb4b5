"""Provider facade: one catalog, loaded once, shared by all request types.

``LanguageService`` is what an outer surface (the HTTP API, the CLI)
talks to. Every request first makes sure the catalog is loaded; a catalog
that failed to load is fatal for the service instance, so outline,
completion and hover requests all re-raise the original
``CatalogLoadError`` from then on.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path

from prodimo_assist.catalog import CatalogLoadError, ParameterCatalog, load_catalog
from prodimo_assist.completion import (
    CompletionListBuilder,
    CompletionSuggestion,
    clear_suggestion_cache,
)
from prodimo_assist.completion_context import (
    CompletionContext,
    TriggerKind,
    TriggerSituation,
    resolve_situation,
)
from prodimo_assist.config import ServiceConfig
from prodimo_assist.hover import HoverResolver, HoverResult
from prodimo_assist.outline import extract_outline
from prodimo_assist.symbols import CancellationToken, Symbol

log = logging.getLogger(__name__)


class LazyCatalog:
    """Ensure-loaded guard around ``load_catalog``.

    The first ``get()`` reads the source under a lock; later calls return
    the same catalog. A load failure is remembered and re-raised.
    """

    def __init__(self, source: Path) -> None:
        self.source = source
        self._lock = threading.Lock()
        self._catalog: ParameterCatalog | None = None
        self._error: CatalogLoadError | None = None
        self._generation = 0

    @property
    def loaded(self) -> bool:
        return self._catalog is not None

    def get(self) -> ParameterCatalog:
        catalog = self._catalog
        if catalog is not None:
            return catalog
        with self._lock:
            if self._catalog is None:
                self._load_locked()
            assert self._catalog is not None
            return self._catalog

    def reload(self) -> ParameterCatalog:
        """Re-read the source and bump the catalog generation."""
        with self._lock:
            self._generation += 1
            self._catalog = None
            clear_suggestion_cache()
            self._load_locked()
            assert self._catalog is not None
            return self._catalog

    def _load_locked(self) -> None:
        if self._error is not None:
            raise self._error
        try:
            self._catalog = load_catalog(self.source, generation=self._generation)
        except CatalogLoadError as exc:
            log.error("Parameter catalog unavailable: %s", exc)
            self._error = exc
            raise


class LanguageService:
    """Outline, completion and hover for ProDiMo parameter and log files."""

    def __init__(self, config: ServiceConfig | None = None) -> None:
        self.config = config or ServiceConfig()
        self.catalog = LazyCatalog(self.config.catalog_path)

    def outline(
        self,
        text: str,
        content_type: str,
        cancel: CancellationToken | None = None,
    ) -> list[Symbol]:
        self.catalog.get()
        return extract_outline(text, content_type, cancel)

    def situation(self, ctx: CompletionContext) -> TriggerSituation:
        return resolve_situation(ctx)

    def complete(
        self,
        line_text: str,
        cursor_offset: int,
        trigger_char: str | None = None,
        trigger_kind: TriggerKind = TriggerKind.KEYBOARD_INVOKED,
    ) -> list[CompletionSuggestion]:
        ctx = CompletionContext(line_text, cursor_offset, trigger_char, trigger_kind)
        builder = CompletionListBuilder(self.catalog.get())
        return builder.complete(ctx)

    def hover(self, line_text: str, cursor_offset: int) -> HoverResult | None:
        resolver = HoverResolver(self.catalog.get(), self.config.wiki_base_url)
        return resolver.resolve(line_text, cursor_offset)
