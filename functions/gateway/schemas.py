"""
Pydantic schemas for the gateway's inbound and outbound payloads.
"""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel, ConfigDict, StrictInt, StrictStr


class BackendHealth(BaseModel):
    """Health payload a backend replica must return to count as available."""

    model_config = ConfigDict(extra="allow")

    ai_tasks_processing: StrictInt
    ai_tasks_queued: StrictInt
    ai_tasks_worker_capacity: StrictInt
    status: StrictStr


class HealthResponse(BackendHealth):
    selected_backend: str


class HealthFailureResponse(BaseModel):
    message: str
    details: str
    status_code: int
    selected_backend: str


class UploadErrorResponse(BaseModel):
    message: str
    error: Optional[str] = None
