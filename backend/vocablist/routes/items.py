"""
VocabList Backend - Add-Item Route Handler
============================================

What:  POST /api/items adds a translated word to several lists at once.
How:   Delegates to MultiListInserter. The response is 200 even when some
       targets failed; per-target outcomes are in the body.
"""

from fastapi import APIRouter, Depends

from vocablist.schemas.lists import AddItemRequest, AddItemResult, ErrorResponse
from vocablist.services.multi_list_inserter import MultiListInserter
from vocablist.routes.dependencies import get_multi_list_inserter, get_owner_id

router = APIRouter(prefix="/api", tags=["Items"])


@router.post(
    "/items",
    response_model=AddItemResult,
    responses={
        400: {"description": "Invalid arguments (nothing was written)", "model": ErrorResponse},
        401: {"description": "Missing X-Owner-Id", "model": ErrorResponse},
        404: {"description": "Unknown capture, word or translation", "model": ErrorResponse},
        502: {"description": "Translation lookup failed", "model": ErrorResponse},
    },
    summary="Add a word to up to K lists and to its language list",
)
async def add_item(
    body: AddItemRequest,
    owner: str = Depends(get_owner_id),
    inserter: MultiListInserter = Depends(get_multi_list_inserter),
) -> AddItemResult:
    return await inserter.add_item(
        owner,
        body.word_id,
        body.source_asset_id,
        body.target_list_ids,
    )
