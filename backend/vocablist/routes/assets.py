"""
VocabList Backend - Asset Route Handler
=========================================

What:  Serves cover images stored by LocalAssetStore.
How:   The asset id is resolved inside STORAGE_ROOT (ids escaping it are
       rejected) and streamed with FileResponse.
"""

from pathlib import Path

from fastapi import APIRouter, Depends
from fastapi.responses import FileResponse

from vocablist.schemas.lists import ErrorResponse
from vocablist.services.asset_store import MEDIA_TYPES, LocalAssetStore
from vocablist.routes.dependencies import get_asset_store

router = APIRouter(prefix="/api/assets", tags=["Assets"])


@router.get(
    "/{asset_id:path}",
    responses={
        200: {"description": "Image file"},
        400: {"description": "Invalid asset id", "model": ErrorResponse},
        404: {"description": "Asset not found", "model": ErrorResponse},
    },
    summary="Serve a cover image",
)
async def serve_asset(
    asset_id: str,
    assets: LocalAssetStore = Depends(get_asset_store),
) -> FileResponse:
    path = await assets.open_asset(asset_id)
    return FileResponse(
        path=str(path),
        media_type=MEDIA_TYPES.get(Path(path).suffix.lower(), "application/octet-stream"),
        # asset ids are never reused, so the bytes behind a URL never change
        headers={"Cache-Control": "public, max-age=86400"},
    )
