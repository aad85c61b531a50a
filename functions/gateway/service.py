"""
BackendGateway: health probing and upload forwarding across backend replicas.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

from gateway.backend_client import BackendClient, UploadPayload
from gateway.config import GatewayConfig
from gateway.fanout import first_success, order_candidates
from gateway.schemas import HealthFailureResponse, UploadErrorResponse

logger = logging.getLogger(__name__)

HEALTH_FAILURE_MESSAGE = "Failed to fetch health from any backend server."
HEALTH_FAILURE_DETAILS = (
    "No backend server is currently available or responding correctly to "
    "health checks."
)
NO_FILE_MESSAGE = "No file uploaded."
MISSING_API_KEY_MESSAGE = "API key configuration missing for backend communication."
UNKNOWN_UPLOAD_ERROR = UploadErrorResponse(
    message=(
        "An unknown error occurred after attempting backend communication for "
        "upload."
    ),
    error="Unknown backend error",
)


@dataclass
class GatewayResponse:
    """JSON body plus the HTTP status the route should answer with."""

    body: Any
    status_code: int


class BackendGateway:
    def __init__(self, config: GatewayConfig, client: BackendClient):
        self.config = config
        self.client = client

    async def probe_health(self) -> GatewayResponse:
        config = self.config

        async def attempt(url: str, role: str):
            return await self.client.probe_health(url, config.health_timeout)

        result = await first_success(
            config.backends, attempt, operation="Health check"
        )
        if result.success is not None:
            logger.info("Selected backend for health: %s", result.success.backend_url)
            return GatewayResponse(
                body=result.success.to_body(), status_code=result.success.status_code
            )

        logger.error("All backend health checks failed or returned invalid data.")
        failure = HealthFailureResponse(
            message=HEALTH_FAILURE_MESSAGE,
            details=HEALTH_FAILURE_DETAILS,
            status_code=503,
            selected_backend=config.primary,
        )
        return GatewayResponse(body=failure.model_dump(), status_code=503)

    async def forward_upload(
        self, upload: Optional[UploadPayload], preferred_url: Optional[str] = None
    ) -> GatewayResponse:
        """
        Send the file to the preferred (or first configured) backend and fall
        back to the remaining ones in order. The analysis payload is returned
        untouched; on total failure the most recent failure is reported.
        """
        if upload is None:
            return GatewayResponse(
                body=UploadErrorResponse(message=NO_FILE_MESSAGE).model_dump(
                    exclude_none=True
                ),
                status_code=400,
            )

        logger.info(
            "Received file for upload: %s, Size: %d, Type: %s",
            upload.filename,
            len(upload.content),
            upload.content_type,
        )

        api_key = self.config.api_key
        if not api_key:
            logger.error("VAL_API_KEY not configured; refusing to forward upload.")
            return GatewayResponse(
                body=UploadErrorResponse(message=MISSING_API_KEY_MESSAGE).model_dump(
                    exclude_none=True
                ),
                status_code=500,
            )

        candidates = order_candidates(self.config.backends, preferred_url)

        async def attempt(url: str, role: str):
            logger.info("Attempting upload to %s backend: %s/analyze/", role, url)
            return await self.client.post_analysis(
                url,
                upload,
                api_key=api_key,
                timeout=self.config.upload_timeout,
                role=role,
            )

        result = await first_success(candidates, attempt, operation="Upload")
        if result.success is not None:
            if len(result.attempted) > 1:
                logger.info(
                    "Upload to fallback backend (%s) successful.",
                    result.success.backend_url,
                )
            return GatewayResponse(body=result.success.payload, status_code=200)

        failure = result.last_failure
        logger.error(
            "All backend upload attempts failed or the single attempt failed: %s",
            failure,
        )
        if failure is None:
            return GatewayResponse(body=UNKNOWN_UPLOAD_ERROR.model_dump(), status_code=500)
        return GatewayResponse(
            body=UploadErrorResponse(
                message=failure.message, error=failure.error
            ).model_dump(),
            status_code=failure.status_code,
        )
