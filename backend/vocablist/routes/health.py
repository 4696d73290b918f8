"""
VocabList Backend - Health Check Route
========================================

What:  Health check endpoint for monitoring and load balancer checks.
How:   Runs SELECT 1 through the document store.

Status levels:
    - healthy:   document store reachable (HTTP 200)
    - unhealthy: document store unreachable (HTTP 503, stop routing traffic)
"""

import time

from fastapi import APIRouter, Depends, Response

from vocablist import __version__
from vocablist.schemas.lists import HealthResponse
from vocablist.services.document_store import DocumentStore
from vocablist.routes.dependencies import get_document_store

router = APIRouter(tags=["Health"])

_start_time = time.time()


@router.get(
    "/health",
    response_model=HealthResponse,
    summary="Service health check",
)
async def health_check(
    response: Response,
    store: DocumentStore = Depends(get_document_store),
) -> HealthResponse:
    connected = await store.health_check()
    if not connected:
        response.status_code = 503

    return HealthResponse(
        status="healthy" if connected else "unhealthy",
        version=__version__,
        database="connected" if connected else "disconnected",
        uptime_seconds=round(time.time() - _start_time, 2),
    )
