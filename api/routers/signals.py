# api/routers/signals.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from fastapi import APIRouter, Body, HTTPException, Path
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from app.core.logging import get_logger
from app.models.entrypoints import EntrypointInfo, InvokeRequest
from services.entrypoints import EntrypointRegistry, UnknownEntrypoint
from services.json_fetcher import SignalsFetchError, UpstreamError

logger = get_logger(module="signals_router")

router = APIRouter(prefix="/entrypoints", tags=["entrypoints"])

# Replaced in tests with a registry backed by a mock transport.
registry = EntrypointRegistry()


def upstream_failure_response(key: str, exc: SignalsFetchError) -> JSONResponse:
    content: Dict[str, Any] = {
        "detail": f"Upstream failure while running '{key}'",
        "error": exc.kind,
    }
    if isinstance(exc, UpstreamError) and exc.status_code is not None:
        content["upstream_status"] = exc.status_code
    return JSONResponse(status_code=502, content=content)


@router.get("", response_model=List[EntrypointInfo])
async def list_entrypoints() -> List[EntrypointInfo]:
    return registry.describe()


@router.post("/{key}/invoke")
async def invoke_entrypoint(
    key: str = Path(..., description="Entrypoint key, e.g. hn-top"),
    body: Optional[InvokeRequest] = Body(default=None),
):
    try:
        entry = registry.get(key)
    except UnknownEntrypoint:
        raise HTTPException(status_code=404, detail=f"Unknown entrypoint '{key}'")

    try:
        return await entry.invoke(body.input if body else None)
    except ValidationError as exc:
        raise HTTPException(
            status_code=422,
            detail=exc.errors(include_url=False, include_context=False),
        ) from exc
    except SignalsFetchError as exc:
        logger.warning(
            "entrypoint_upstream_failure",
            key=key,
            error=exc.kind,
            url=exc.url,
            message=str(exc),
        )
        return upstream_failure_response(key, exc)
