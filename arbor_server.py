"""Arbor backend server.

Mounts the Arbor router on a FastAPI application configured from
``ARBOR_*`` environment variables.

Usage::

    # Development (auto-reload)
    uvicorn arbor_server:app --reload --port 8080

    # Production
    uvicorn arbor_server:app --host 0.0.0.0 --port 8080

    # Or run directly
    python arbor_server.py
"""

from __future__ import annotations

import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from arbor import __version__
from arbor.config import ArborSettings
from arbor.server import configure, router

logger = logging.getLogger("arbor")

# ---------------------------------------------------------------------------
# Application
# ---------------------------------------------------------------------------

settings = configure(ArborSettings.from_env())

app = FastAPI(
    title="Arbor API",
    description="Converts flat CSV category rows into a nested JSON tree.",
    version=__version__,
)

# ---------------------------------------------------------------------------
# CORS -- allow local dev origins
# ---------------------------------------------------------------------------

_ALLOWED_ORIGINS = [
    "http://localhost:5173",   # Vite dev server
    "http://localhost:8080",   # Self (for Swagger UI)
    "http://127.0.0.1:5173",
    "http://127.0.0.1:8080",
]

app.add_middleware(
    CORSMiddleware,
    allow_origins=_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["POST", "GET"],
    allow_headers=["*"],
)

app.include_router(router, tags=["arbor"])
logger.info(
    "Arbor router mounted (default strategy %s, %d workers)",
    settings.default_strategy.value,
    settings.limits.max_concurrent_operations,
)


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def run_server(host: str = "127.0.0.1", port: int = 8080) -> None:
    """Start the Arbor server via uvicorn.

    Args:
        host: Bind address. Defaults to localhost.
        port: Port number. Defaults to 8080.
    """
    import uvicorn

    uvicorn.run(app, host=host, port=port)


if __name__ == "__main__":
    logging.basicConfig(
        level=settings.logging_level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )
    run_server()
