"""
Outbound HTTP calls to a single backend analysis replica.

Every call runs under its own deadline. When the deadline expires the
awaiting task is cancelled, which makes httpx close the connection instead
of leaving the request running in the background.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Union

import httpx
from pydantic import ValidationError

from gateway.schemas import BackendHealth, HealthResponse

logger = logging.getLogger(__name__)

BODY_SNIPPET_LENGTH = 500


@dataclass
class UploadPayload:
    """A file received from the dashboard, forwarded as-is."""

    filename: str
    content_type: str
    content: bytes

    def as_multipart(self) -> tuple[str, bytes, str]:
        return (self.filename, self.content, self.content_type)


@dataclass
class AttemptFailure:
    """Why one attempt against one backend failed."""

    message: str
    error: str
    status_code: int


@dataclass
class HealthProbeResult:
    backend_url: str
    status_code: int
    health: BackendHealth

    def to_body(self) -> dict:
        return HealthResponse.model_validate(
            {**self.health.model_dump(), "selected_backend": self.backend_url}
        ).model_dump()


@dataclass
class AnalysisSuccess:
    backend_url: str
    status_code: int
    payload: Any


HealthAttempt = Union[HealthProbeResult, AttemptFailure]
UploadAttempt = Union[AnalysisSuccess, AttemptFailure]


def _snippet(text: str) -> str:
    return text[:BODY_SNIPPET_LENGTH]


def _describe(exc: BaseException) -> str:
    return str(exc) or exc.__class__.__name__


class BackendClient:
    """Issues health probes and analysis uploads against backend replicas."""

    def __init__(self, http: httpx.AsyncClient):
        self._http = http

    async def probe_health(self, url: str, timeout: float) -> HealthAttempt:
        endpoint = f"{url}/health"
        try:
            async with asyncio.timeout(timeout):
                response = await self._http.get(
                    endpoint, headers={"Accept": "application/json"}
                )
        except TimeoutError:
            logger.warning(
                "Health check to %s timed out after %dms", endpoint, timeout * 1000
            )
            return AttemptFailure(
                message=f"Health check to {endpoint} timed out.",
                error=f"Timed out after {int(timeout * 1000)}ms",
                status_code=503,
            )
        except httpx.HTTPError as exc:
            logger.warning("Health check to %s failed: %s", endpoint, _describe(exc))
            return AttemptFailure(
                message=f"Health check to {endpoint} failed.",
                error=_describe(exc),
                status_code=503,
            )

        if not response.is_success:
            logger.warning(
                "Health check to %s returned status %s. Body: %s",
                endpoint,
                response.status_code,
                _snippet(response.text),
            )
            return AttemptFailure(
                message=f"Health check to {endpoint} returned an error status.",
                error=_snippet(response.text),
                status_code=response.status_code,
            )

        try:
            health = BackendHealth.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.warning(
                "Health check to %s returned malformed data: %s",
                endpoint,
                _snippet(response.text),
            )
            return AttemptFailure(
                message=f"Health check to {endpoint} returned malformed data.",
                error=_describe(exc),
                status_code=503,
            )

        return HealthProbeResult(
            backend_url=url, status_code=response.status_code, health=health
        )

    async def post_analysis(
        self,
        url: str,
        upload: UploadPayload,
        *,
        api_key: str,
        timeout: float,
        role: str = "primary",
    ) -> UploadAttempt:
        endpoint = f"{url}/analyze/"
        label = role.capitalize()
        try:
            async with asyncio.timeout(timeout):
                response = await self._http.post(
                    endpoint,
                    headers={"X-API-Key": api_key},
                    files={"file": upload.as_multipart()},
                )
        except TimeoutError:
            error = f"Request to {endpoint} timed out after {int(timeout * 1000)}ms."
            logger.error(
                "Error connecting to %s backend (%s) for upload: %s", role, url, error
            )
            return AttemptFailure(
                message=f"Error connecting to {role} backend ({url}) for upload.",
                error=error,
                status_code=503,
            )
        except httpx.HTTPError as exc:
            logger.error(
                "Error connecting to %s backend (%s) for upload: %s",
                role,
                url,
                _describe(exc),
            )
            return AttemptFailure(
                message=f"Error connecting to {role} backend ({url}) for upload.",
                error=_describe(exc),
                status_code=503,
            )

        if not response.is_success:
            logger.error(
                "%s backend (%s) upload error: %s - %s",
                label,
                url,
                response.status_code,
                _snippet(response.text),
            )
            if role == "primary":
                message = f"Primary backend ({url}) failed to process file."
            else:
                message = f"{label} backend ({url}) also failed to process file."
            return AttemptFailure(
                message=message,
                error=response.text,
                status_code=response.status_code,
            )

        try:
            payload = response.json()
        except ValueError as exc:
            logger.error(
                "%s backend (%s) returned a non-JSON analysis body: %s",
                label,
                url,
                _snippet(response.text),
            )
            # Reported like a connection failure so the dashboard sees one shape.
            return AttemptFailure(
                message=f"Error connecting to {role} backend ({url}) for upload.",
                error=_describe(exc),
                status_code=503,
            )

        return AnalysisSuccess(
            backend_url=url, status_code=response.status_code, payload=payload
        )
