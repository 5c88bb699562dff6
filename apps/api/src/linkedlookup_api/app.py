from __future__ import annotations

import logging
import os
from contextlib import asynccontextmanager
from datetime import UTC, datetime
from importlib.metadata import PackageNotFoundError, version

import httpx
from fastapi import FastAPI

from linkedlookup_api.routes.health import router as health_router
from linkedlookup_api.routes.lookups import router as lookups_router
from linkedlookup_api.routes.version import router as version_router
from linkedlookup_core import SERVICE_API, Settings, get_settings
from linkedlookup_observability import request_id_middleware, setup_logging
from linkedlookup_observability.context import bind

logger = logging.getLogger(__name__)

DISTRIBUTION = "linkedlookup"


def _package_version() -> str | None:
    try:
        return version(DISTRIBUTION)
    except PackageNotFoundError:
        return None


def _build_info() -> dict[str, str | None]:
    return {
        "version": _package_version(),
        "git_sha": os.getenv("GIT_SHA"),
        "build_time": os.getenv("BUILD_TIME") or datetime.now(UTC).isoformat(),
    }


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    setup_logging(SERVICE_API, level=settings.log_level, log_format=settings.log_format)
    bind(service=SERVICE_API)

    @asynccontextmanager
    async def lifespan(app_: FastAPI):
        # an injected client belongs to whoever injected it
        if getattr(app_.state, "http_client", None) is not None:
            yield
            return
        client = httpx.AsyncClient(timeout=settings.http_timeout_seconds)
        app_.state.http_client = client
        logger.info("upstream_client_opened")
        try:
            yield
        finally:
            app_.state.http_client = None
            await client.aclose()
            logger.info("upstream_client_closed")

    app = FastAPI(title="Linked Lookup API", lifespan=lifespan)
    app.state.settings = settings
    app.state.build_info = _build_info()

    app.middleware("http")(request_id_middleware(SERVICE_API))

    app.include_router(health_router)
    app.include_router(version_router)
    app.include_router(lookups_router)

    logger.info("api_started", extra={"port": settings.api_port})
    return app
