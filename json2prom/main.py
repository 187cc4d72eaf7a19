from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Response
from fastapi.responses import HTMLResponse
from prometheus_client import CONTENT_TYPE_LATEST, generate_latest
from pydantic import ValidationError
from pydantic_settings import SettingsError

from .config import Settings, split_host_port
from .metrics.registry import build_registry
from .services.collector import SourceScraper

logger = logging.getLogger(__name__)

INDEX_HTML = """<html><head><title>{name}</title></head>
<body><h1>{name}</h1><p><a href="/metrics">Metrics</a></p></body></html>
"""


def create_app(settings: Settings, scraper: Optional[SourceScraper] = None) -> FastAPI:
    scraper = scraper or SourceScraper(
        settings.sources, timeout_seconds=settings.request_timeout_seconds
    )
    registry = build_registry(settings, scraper)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        try:
            yield
        finally:
            scraper.close()

    app = FastAPI(title=settings.app_name, lifespan=lifespan)
    app.state.registry = registry
    app.state.scraper = scraper

    @app.get("/", include_in_schema=False)
    async def index() -> HTMLResponse:
        return HTMLResponse(INDEX_HTML.format(name=settings.app_name))

    @app.get("/metrics")
    def metrics() -> Response:
        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    return app


def main() -> int:
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        settings = Settings()
    except (ValidationError, SettingsError) as exc:
        logger.error("invalid configuration (SOURCES is required): %s", exc)
        return 1
    logging.getLogger().setLevel(settings.log_level)

    app = create_app(settings)
    host, port = split_host_port(settings.http_addr)
    logger.info("listening on %s", settings.http_addr)
    uvicorn.run(app, host=host, port=port, log_level=settings.log_level.lower())
    return 0
