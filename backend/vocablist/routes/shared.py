"""
VocabList Backend - Shared List Route Handlers
================================================

What:  Read a shared list by its code, and import it into the caller's lists.
Who:   Anyone holding a share code may read; importing requires X-Owner-Id.

Caching:
    GET /api/shared/{code} sends Cache-Control: no-store. A revoked code must
    stop resolving immediately, so no intermediary may keep the payload.
"""

from fastapi import APIRouter, Depends, Response

from vocablist.schemas.lists import ErrorResponse, ImportResult, SharedListView
from vocablist.services.import_engine import ImportEngine
from vocablist.services.share_registry import ShareCodeRegistry
from vocablist.routes.dependencies import get_import_engine, get_owner_id, get_share_registry

router = APIRouter(prefix="/api/shared", tags=["Sharing"])


@router.get(
    "/{code}",
    response_model=SharedListView,
    responses={404: {"description": "Unknown or revoked code", "model": ErrorResponse}},
    summary="Resolve a share code",
)
async def get_shared_list(
    code: str,
    response: Response,
    shares: ShareCodeRegistry = Depends(get_share_registry),
) -> SharedListView:
    view = await shares.resolve(code)
    response.headers["Cache-Control"] = "no-store"
    return view


@router.post(
    "/{code}/import",
    status_code=201,
    response_model=ImportResult,
    responses={
        401: {"description": "Missing X-Owner-Id", "model": ErrorResponse},
        404: {"description": "Unknown or revoked code", "model": ErrorResponse},
        409: {"description": "Already imported", "model": ErrorResponse},
    },
    summary="Import a shared list as a private copy",
)
async def import_shared_list(
    code: str,
    owner: str = Depends(get_owner_id),
    engine: ImportEngine = Depends(get_import_engine),
) -> ImportResult:
    return await engine.import_list(owner, code)
