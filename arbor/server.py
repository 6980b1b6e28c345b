"""FastAPI router for Arbor.

Accepts a CSV body and answers with the category tree as JSON. Endpoints
are registered on an ``APIRouter`` so that ``arbor_server.py`` can mount
them; ``configure()`` must be called before requests are served.

    POST /            sequential extraction
    POST /concurrent  concurrent extraction
    GET  /health      service health
"""

from __future__ import annotations

import io
import logging
from typing import Any

from fastapi import APIRouter, HTTPException, Request
from fastapi.concurrency import run_in_threadpool
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from arbor import __version__
from arbor.config import ArborSettings
from arbor.hierarchy import (
    ExtractionStrategy,
    HierarchyError,
    TreeNode,
    build_hierarchy,
)
from shared.hardening import ErrorFormatter, InputValidator, ValidationError, check_extraction

logger = logging.getLogger(__name__)

# ===================================================================
# Module state (injected by configure)
# ===================================================================

_state: dict[str, Any] = {
    "settings": None,
}

_formatter = ErrorFormatter()
_validator = InputValidator()


def configure(settings: ArborSettings | None = None) -> ArborSettings:
    """Inject settings into the module-level state.

    Args:
        settings: Service settings; defaults to ``ArborSettings()``.

    Returns:
        The active settings.
    """
    _state["settings"] = settings or ArborSettings()
    return _state["settings"]


def get_settings() -> ArborSettings:
    """Return the configured settings or raise.

    Raises:
        HTTPException: If configure() has not been called.
    """
    settings = _state.get("settings")
    if settings is None:
        raise HTTPException(status_code=500, detail="Arbor is not configured")
    return settings


# ===================================================================
# Pydantic response models
# ===================================================================


class HealthResponse(BaseModel):
    """Response body for the health endpoint."""

    status: str
    version: str
    check: dict[str, Any]


# ===================================================================
# Router
# ===================================================================

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Return Arbor service health status.

    Returns:
        Status, version, and the extraction component check.
    """
    settings = _state.get("settings")
    check = check_extraction(settings.limits if settings else None)
    return HealthResponse(
        status="ok" if check.status == "healthy" else "error",
        version=__version__,
        check=check.to_dict(),
    )


@router.post("/")
async def build_sequential(request: Request) -> JSONResponse:
    """Build the tree from a CSV body, reading rows in order."""
    return await _handle(request, ExtractionStrategy.SEQUENTIAL)


@router.post("/concurrent")
async def build_concurrent(request: Request) -> JSONResponse:
    """Build the tree from a CSV body, extracting rows on a worker pool."""
    return await _handle(request, ExtractionStrategy.CONCURRENT)


# -------------------------------------------------------------------
# Helpers
# -------------------------------------------------------------------


async def _handle(request: Request, strategy: ExtractionStrategy) -> JSONResponse:
    settings = get_settings()

    try:
        _validator.validate_content_type(request.headers.get("content-type"))
    except ValidationError as exc:
        logger.info("Rejected request: %s", exc)
        raise HTTPException(status_code=415, detail="Invalid content type") from exc

    body = await _read_body(request, settings.limits.max_upload_bytes)

    try:
        text = body.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise _bad_request(exc) from exc

    try:
        tree = await run_in_threadpool(_build, text, strategy, settings)
    except HierarchyError as exc:
        raise _bad_request(exc) from exc

    return JSONResponse(content=tree.to_dict())


async def _read_body(request: Request, limit: int) -> bytes:
    """Read the request body, stopping as soon as it exceeds *limit* bytes.

    Raises:
        HTTPException: 413 when the declared or received size is over the limit.
    """
    declared = request.headers.get("content-length")
    if declared is not None and declared.isdigit() and int(declared) > limit:
        raise HTTPException(status_code=413, detail="Request body too large")

    chunks: list[bytes] = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise HTTPException(status_code=413, detail="Request body too large")
        chunks.append(chunk)
    return b"".join(chunks)


def _build(text: str, strategy: ExtractionStrategy, settings: ArborSettings) -> TreeNode:
    return build_hierarchy(
        io.StringIO(text),
        strategy=strategy,
        max_workers=settings.limits.max_concurrent_operations,
        max_pending=settings.limits.max_pending_lines,
    )


def _bad_request(error: Exception) -> HTTPException:
    friendly = _formatter.format_hierarchy_error(error)
    logger.info("Rejected input (%s): %s", friendly.error_code, friendly.technical_detail)
    return HTTPException(status_code=400, detail=friendly.to_dict())
