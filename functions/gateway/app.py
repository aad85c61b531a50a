"""
FastAPI application entry point for the analysis gateway.

Run locally:
  cd functions
  uvicorn gateway.app:app --reload --port 3001
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from gateway.config import GatewayConfig, Settings, get_settings
from gateway.dependencies import build_http_client
from gateway.routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.http_client = build_http_client()
    logger.info(
        "Gateway started with backends: %s",
        ", ".join(app.state.gateway_config.backends),
    )
    try:
        yield
    finally:
        await app.state.http_client.aclose()
        logger.info("Gateway stopped")


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or get_settings()
    logging.basicConfig(
        level=getattr(logging, settings.log_level.upper(), logging.INFO),
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    app = FastAPI(title="Chat Analysis Gateway", version="0.1.0", lifespan=lifespan)
    app.state.gateway_config = GatewayConfig.from_settings(settings)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origin_list(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
