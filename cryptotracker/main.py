"""FastAPI application main module."""

import asyncio
import contextlib
import logging
import typing as t
from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from . import __version__, config
from .api.routes import assets as r_assets
from .api.routes import search as r_search
from .api.routes import sources as r_sources
from .controller import build_tracker
from .logging_config import configure_logging
from .render import SnapshotRenderer

logger = logging.getLogger(__name__)

STARTED_AT = datetime.now(timezone.utc).isoformat()


def version_payload() -> dict:
    """Return version information as a dictionary.

    :return: Package version, git revision and build time.
    """
    return {
        "version": __version__,
        "git": config.GIT_SHA,
        "builtAt": config.BUILT_AT or STARTED_AT,
    }


@asynccontextmanager
async def lifespan(app_: FastAPI) -> t.AsyncGenerator[None, None]:
    """Wire the tracker, load the first page and run the refresh loop.

    :param app_: FastAPI app instance.
    :yield: None.
    """
    tracker = getattr(app_.state, "tracker", None)
    if tracker is None:
        configure_logging()
        tracker = build_tracker(SnapshotRenderer())
        app_.state.tracker = tracker
    await tracker.load_more()

    refresher: asyncio.Task | None = None
    if config.REFRESH_INTERVAL_SECONDS > 0:
        refresher = asyncio.create_task(
            tracker.run_auto_refresh(config.REFRESH_INTERVAL_SECONDS),
        )
    try:
        yield
    finally:
        if refresher is not None:
            refresher.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await refresher
        await tracker.aclose()


def _parse_origins() -> list[str]:
    raw = (config.FRONTEND_ORIGINS or "").strip()
    return [o.strip() for o in raw.split(",") if o.strip()]


app = FastAPI(title="Crypto Tracker API", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=_parse_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# prometheus metrics at /metrics (exclude noise)
Instrumentator(
    should_group_status_codes=False,
    excluded_handlers=["/metrics", "/healthz"],
).instrument(app).expose(app, include_in_schema=False)


# standardized error envelope
@app.exception_handler(HTTPException)
async def http_exc_handler(_: Request, exc: HTTPException) -> JSONResponse:
    """Handle HTTP exceptions with standardized error envelope.

    :param _: The request object.
    :param exc: The HTTP exception.
    :return: Standardized error envelope.
    """
    return JSONResponse(
        status_code=exc.status_code,
        content={"ok": False, "error": str(exc.detail)},
    )


@app.exception_handler(Exception)
async def unhandled_exc_handler(_: Request, exc: Exception) -> JSONResponse:
    """Handle unhandled exceptions with standardized error envelope.

    :param _: The request object.
    :param exc: The unhandled exception.
    :return: Standardized error envelope.
    """
    logger.exception("unhandled error", exc_info=exc)
    return JSONResponse(
        status_code=500,
        content={"ok": False, "error": "internal_error"},
    )


# routes
app.include_router(r_assets.router)
app.include_router(r_sources.router)
app.include_router(r_search.router)


@app.get("/healthz")
def health() -> dict:
    """Health check endpoint.

    :return: Health status.
    """
    return {"ready": True}


@app.get("/version")
def version() -> dict:
    """Version information endpoint.

    :return: Version information.
    """
    return {"version": version_payload()}
