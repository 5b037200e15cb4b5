"""FastAPI server exposing outline, completion and hover over HTTP.

Editors and notebooks that cannot embed the Python package call these
JSON endpoints instead. The parameter catalog path and reference base URL
come from the environment (see ``prodimo_assist.config``).

Usage:
    cd /path/to/prodimo-assist
    PYTHONPATH=src uvicorn api.server:app --port 8000
"""
from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Literal

from fastapi import FastAPI, HTTPException
from fastapi.responses import ORJSONResponse
from pydantic import BaseModel, Field

# Add src to path so the service imports without an install
_src = Path(__file__).resolve().parents[1] / "src"
if str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from prodimo_assist.catalog import CatalogLoadError, definition_to_dict  # noqa: E402
from prodimo_assist.completion import suggestion_to_dict  # noqa: E402
from prodimo_assist.completion_context import CompletionContext, TriggerKind  # noqa: E402
from prodimo_assist.config import ServiceConfig  # noqa: E402
from prodimo_assist.hover import hover_to_dict  # noqa: E402
from prodimo_assist.outline import UnknownContentTypeError  # noqa: E402
from prodimo_assist.service import LanguageService  # noqa: E402
from prodimo_assist.symbols import symbol_to_dict  # noqa: E402

# ---------------------------------------------------------------------------
# Globals
# ---------------------------------------------------------------------------
_service: LanguageService | None = None


def _get_service() -> LanguageService:
    """Get the language service, creating it from the environment on first use."""
    global _service  # noqa: PLW0603
    if _service is None:
        _service = LanguageService(ServiceConfig.from_env())
    return _service


app = FastAPI(
    title="ProDiMo Language API",
    version="0.1.0",
    default_response_class=ORJSONResponse,
)


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------
class OutlineRequest(BaseModel):
    text: str
    content_type: str = "prodimoparam"


class CompletionRequest(BaseModel):
    line_text: str
    cursor_offset: int = Field(ge=0)
    trigger_char: Literal["!", "."] | None = None
    trigger_kind: Literal["keyboard", "character"] = "keyboard"


class HoverRequest(BaseModel):
    line_text: str
    cursor_offset: int = Field(ge=0)


def _unavailable(exc: CatalogLoadError) -> HTTPException:
    return HTTPException(status_code=503, detail=f"Parameter catalog unavailable: {exc}")


# ---------------------------------------------------------------------------
# Routes
# ---------------------------------------------------------------------------
@app.get("/api/health")
async def health():
    service = _get_service()
    try:
        catalog = service.catalog.get()
    except CatalogLoadError as exc:
        return {"status": "degraded", "catalog_loaded": False, "error": str(exc)}
    return {
        "status": "ok",
        "catalog_loaded": True,
        "parameter_count": len(catalog),
        "catalog_generation": catalog.generation,
    }


@app.post("/api/outline")
async def outline(req: OutlineRequest) -> dict[str, Any]:
    service = _get_service()
    try:
        symbols = service.outline(req.text, req.content_type)
    except CatalogLoadError as exc:
        raise _unavailable(exc) from exc
    except UnknownContentTypeError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {
        "content_type": req.content_type,
        "symbols": [symbol_to_dict(s) for s in symbols],
    }


@app.post("/api/completion")
async def completion(req: CompletionRequest) -> dict[str, Any]:
    service = _get_service()
    kind = TriggerKind(req.trigger_kind)
    situation = service.situation(
        CompletionContext(req.line_text, req.cursor_offset, req.trigger_char, kind),
    )
    try:
        items = service.complete(req.line_text, req.cursor_offset, req.trigger_char, kind)
    except CatalogLoadError as exc:
        raise _unavailable(exc) from exc
    return {
        "situation": situation.value,
        "items": [suggestion_to_dict(i) for i in items],
    }


@app.post("/api/hover")
async def hover(req: HoverRequest) -> dict[str, Any]:
    service = _get_service()
    try:
        result = service.hover(req.line_text, req.cursor_offset)
    except CatalogLoadError as exc:
        raise _unavailable(exc) from exc
    return {"hover": hover_to_dict(result)}


@app.get("/api/parameters/{name}")
async def parameter(name: str) -> dict[str, Any]:
    service = _get_service()
    try:
        definition = service.catalog.get().lookup(name)
    except CatalogLoadError as exc:
        raise _unavailable(exc) from exc
    if definition is None:
        raise HTTPException(status_code=404, detail=f"Unknown parameter: {name}")
    return definition_to_dict(definition)
