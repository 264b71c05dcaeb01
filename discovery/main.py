"""Discovery telegraf sink FastAPI application.

Creates the sink service, wires routes, configures logging, and exposes
health and Prometheus metrics endpoints.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI

from discovery.api.routes import router
from discovery.core.config import Settings, load_settings
from discovery.core.logging import SERVICE_NAME, setup_logging
from discovery.core.observability import Observability
from discovery.metrics.prometheus import metrics_router
from discovery.services.sink import TelegrafSink

__version__ = "0.1.0"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan: logs boot and shutdown of the sink."""
    logger = app.state.observability.logs()
    logger.info("Booting...")
    yield
    logger.info("Exiting...")


def create_app(settings: Optional[Settings] = None, observability: Optional[Observability] = None) -> FastAPI:
    """Build the app with an app-scoped observability context and sink."""
    settings = settings or load_settings()
    observability = observability or Observability(logging.getLogger(SERVICE_NAME))

    app = FastAPI(title="Discovery Telegraf Sink", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.observability = observability
    app.state.sink = TelegrafSink(settings.telegraf, observability)
    app.include_router(router)
    app.include_router(metrics_router)
    return app


def run() -> None:
    """Serve the sink with uvicorn using environment settings."""
    settings = load_settings()
    setup_logging(settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    run()
