"""
HTTP routes exposed to the dashboard.
"""

from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile
from fastapi.responses import JSONResponse

from gateway.backend_client import UploadPayload
from gateway.dependencies import get_gateway
from gateway.schemas import UploadErrorResponse
from gateway.service import BackendGateway

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health(gateway: BackendGateway = Depends(get_gateway)):
    """Report the capacity of the first healthy backend."""
    result = await gateway.probe_health()
    return JSONResponse(result.body, status_code=result.status_code)


@router.post("/upload")
async def upload(
    file: Optional[UploadFile] = File(None),
    preferred_url: Optional[str] = Query(None, alias="preferredUrl"),
    gateway: BackendGateway = Depends(get_gateway),
):
    """
    Forward a chat export to a backend for analysis and relay its result.
    """
    try:
        payload = None
        if file is not None:
            payload = UploadPayload(
                filename=file.filename or "upload",
                content_type=file.content_type or "application/octet-stream",
                content=await file.read(),
            )
        result = await gateway.forward_upload(payload, preferred_url)
    except Exception as exc:
        logger.exception("Upload route failed before reaching a backend")
        body = UploadErrorResponse(
            message="Failed to process upload request.", error=str(exc)
        )
        return JSONResponse(body.model_dump(), status_code=500)
    return JSONResponse(result.body, status_code=result.status_code)
