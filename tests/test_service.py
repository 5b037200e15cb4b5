"""Tests for prodimo_assist.service, outline dispatch and config."""
from __future__ import annotations

import json
import threading
from pathlib import Path

import pytest

from prodimo_assist import service as service_mod
from prodimo_assist.catalog import CatalogLoadError, load_catalog
from prodimo_assist.completion_context import TriggerKind, TriggerSituation
from prodimo_assist.config import (
    CATALOG_ENV,
    DEFAULT_CATALOG_PATH,
    WIKI_BASE_URL_ENV,
    ServiceConfig,
)
from prodimo_assist.hover import DEFAULT_WIKI_BASE_URL
from prodimo_assist.outline import (
    LOG_CONTENT_TYPE,
    PARAM_CONTENT_TYPE,
    UnknownContentTypeError,
    content_type_for_path,
    extract_outline,
)
from prodimo_assist.service import LanguageService, LazyCatalog


def _catalog_file(tmp_path: Path, entries: dict | None = None) -> Path:
    path = tmp_path / "paramlist.json"
    path.write_text(json.dumps(entries or {
        "Mdisk": {"desc": "disk mass", "type": "real", "default": "0.01",
                  "unit": "Msun", "wiki": ["DiskMass.md"]},
    }))
    return path


def _counting_loader(monkeypatch) -> list[Path]:
    calls: list[Path] = []

    def _load(source: Path, *, generation: int = 0):
        calls.append(source)
        return load_catalog(source, generation=generation)

    monkeypatch.setattr(service_mod, "load_catalog", _load)
    return calls


class TestLazyCatalog:
    def test_loads_once(self, tmp_path: Path, monkeypatch) -> None:
        calls = _counting_loader(monkeypatch)
        lazy = LazyCatalog(_catalog_file(tmp_path))
        assert not lazy.loaded
        first = lazy.get()
        second = lazy.get()
        assert first is second
        assert len(calls) == 1

    def test_concurrent_first_use_loads_once(self, tmp_path: Path, monkeypatch) -> None:
        calls = _counting_loader(monkeypatch)
        lazy = LazyCatalog(_catalog_file(tmp_path))
        barrier = threading.Barrier(8)
        results = []

        def _worker() -> None:
            barrier.wait()
            results.append(lazy.get())

        threads = [threading.Thread(target=_worker) for _ in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(calls) == 1
        assert all(r is results[0] for r in results)

    def test_reload_bumps_generation(self, tmp_path: Path) -> None:
        path = _catalog_file(tmp_path)
        lazy = LazyCatalog(path)
        assert lazy.get().generation == 0
        path.write_text(json.dumps({"Rin": {"desc": "inner radius"}}))
        reloaded = lazy.reload()
        assert reloaded.generation == 1
        assert "Rin" in reloaded
        assert lazy.get() is reloaded

    def test_failure_is_sticky(self, tmp_path: Path, monkeypatch) -> None:
        calls = _counting_loader(monkeypatch)
        lazy = LazyCatalog(tmp_path / "missing.json")
        with pytest.raises(CatalogLoadError) as first:
            lazy.get()
        (tmp_path / "missing.json").write_text("{}")
        with pytest.raises(CatalogLoadError) as second:
            lazy.get()
        assert second.value is first.value
        assert len(calls) == 1


class TestLanguageService:
    def _service(self, tmp_path: Path) -> LanguageService:
        return LanguageService(ServiceConfig(catalog_path=_catalog_file(tmp_path)))

    def test_outline_param(self, tmp_path: Path) -> None:
        symbols = self._service(tmp_path).outline("--- disk ---\n0.01 ! Mdisk", PARAM_CONTENT_TYPE)
        assert [s.title for s in symbols] == ["disk"]

    def test_outline_log(self, tmp_path: Path) -> None:
        symbols = self._service(tmp_path).outline("", LOG_CONTENT_TYPE)
        assert [s.title for s in symbols] == ["INIT"]

    def test_complete_explicit_bang(self, tmp_path: Path) -> None:
        items = self._service(tmp_path).complete(
            "0.01  !", 7, "!", TriggerKind.CHARACTER_INVOKED,
        )
        assert [i.insert_text for i in items] == [" Mdisk    [Msun]    : disk mass"]

    def test_complete_implicit_bang(self, tmp_path: Path) -> None:
        items = self._service(tmp_path).complete("0.01  ", 6)
        assert items[0].insert_text.startswith("! Mdisk ")

    def test_situation(self, tmp_path: Path) -> None:
        from prodimo_assist.completion_context import CompletionContext

        ctx = CompletionContext(".", 1, ".", TriggerKind.CHARACTER_INVOKED)
        assert self._service(tmp_path).situation(ctx) is TriggerSituation.BOOLEAN_LITERAL

    def test_hover_uses_configured_base_url(self, tmp_path: Path) -> None:
        config = ServiceConfig(
            catalog_path=_catalog_file(tmp_path), wiki_base_url="https://w/",
        )
        result = LanguageService(config).hover("0.01  ! Mdisk", 9)
        assert result is not None
        assert "(https://w/DiskMass.html)" in result.markdown

    def test_failed_catalog_blocks_every_request(self, tmp_path: Path) -> None:
        svc = LanguageService(ServiceConfig(catalog_path=tmp_path / "missing.json"))
        with pytest.raises(CatalogLoadError):
            svc.complete("0.01 !", 6, "!", TriggerKind.CHARACTER_INVOKED)
        with pytest.raises(CatalogLoadError):
            svc.hover("0.01 ! Mdisk", 8)
        with pytest.raises(CatalogLoadError):
            svc.outline("--- disk ---", PARAM_CONTENT_TYPE)


class TestOutlineDispatch:
    def test_unknown_content_type(self) -> None:
        with pytest.raises(UnknownContentTypeError):
            extract_outline("text", "fortran")

    def test_content_type_for_path(self) -> None:
        assert content_type_for_path("prodimo.log") == LOG_CONTENT_TYPE
        assert content_type_for_path("RUN.OUT") == LOG_CONTENT_TYPE
        assert content_type_for_path("Parameter.in") == PARAM_CONTENT_TYPE


class TestServiceConfig:
    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv(CATALOG_ENV, raising=False)
        monkeypatch.delenv(WIKI_BASE_URL_ENV, raising=False)
        config = ServiceConfig.from_env()
        assert config.catalog_path == DEFAULT_CATALOG_PATH
        assert config.wiki_base_url == DEFAULT_WIKI_BASE_URL

    def test_from_env(self, monkeypatch, tmp_path: Path) -> None:
        monkeypatch.setenv(CATALOG_ENV, str(tmp_path / "p.json"))
        monkeypatch.setenv(WIKI_BASE_URL_ENV, "https://w/")
        config = ServiceConfig.from_env()
        assert config.catalog_path == tmp_path / "p.json"
        assert config.wiki_base_url == "https://w/"

    def test_overrides(self, tmp_path: Path) -> None:
        config = ServiceConfig().with_overrides(catalog_path=tmp_path / "x.json")
        assert config.catalog_path == tmp_path / "x.json"
        assert config.wiki_base_url == DEFAULT_WIKI_BASE_URL
        assert ServiceConfig().with_overrides() == ServiceConfig()
