"""
Probe the configured backend analysis services the same way the dashboard
does and print the health body the gateway would return.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from dataclasses import replace
from pathlib import Path
from typing import Optional

import httpx

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from gateway.backend_client import BackendClient
from gateway.config import GatewayConfig, get_settings, normalize_backends
from gateway.service import BackendGateway, GatewayResponse

logger = logging.getLogger(__name__)


async def run_probe(config: GatewayConfig) -> GatewayResponse:
    async with httpx.AsyncClient() as http:
        gateway = BackendGateway(config, BackendClient(http))
        return await gateway.probe_health()


def build_config(backends: list[str], timeout: Optional[float]) -> GatewayConfig:
    config = GatewayConfig.from_settings(get_settings())
    if backends:
        config = replace(config, backends=normalize_backends(backends))
    if timeout is not None:
        config = replace(config, health_timeout=timeout)
    return config


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(description="Probe backend health")
    parser.add_argument(
        "--backend",
        action="append",
        default=[],
        help="Backend base URL; repeat to probe several in order",
    )
    parser.add_argument(
        "--timeout",
        type=float,
        default=None,
        help="Per-backend timeout in seconds",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(level=logging.INFO, format="%(levelname)s:%(message)s")
    config = build_config(args.backend, args.timeout)
    logger.info("Probing %s", ", ".join(config.backends))

    result = asyncio.run(run_probe(config))
    print(json.dumps(result.body, indent=2))
    return 0 if result.status_code < 400 else 1


if __name__ == "__main__":
    sys.exit(main())
