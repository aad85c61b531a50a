"""
Dependency wiring for the FastAPI app.
"""

from __future__ import annotations

import httpx
from fastapi import Depends, Request

from gateway.backend_client import BackendClient
from gateway.config import GatewayConfig, get_settings
from gateway.service import BackendGateway


def build_http_client() -> httpx.AsyncClient:
    """
    Connection pool shared by all requests. Per-attempt deadlines are
    enforced by the gateway, so httpx itself only guards connect time.
    """
    return httpx.AsyncClient(timeout=httpx.Timeout(None, connect=10.0))


def get_gateway_config(request: Request) -> GatewayConfig:
    config = getattr(request.app.state, "gateway_config", None)
    if config is None:
        config = GatewayConfig.from_settings(get_settings())
    return config


def get_http_client(request: Request) -> httpx.AsyncClient:
    client = getattr(request.app.state, "http_client", None)
    if client is None:
        raise RuntimeError("HTTP client is not initialized")
    return client


def get_gateway(
    config: GatewayConfig = Depends(get_gateway_config),
    http: httpx.AsyncClient = Depends(get_http_client),
) -> BackendGateway:
    return BackendGateway(config, BackendClient(http))
