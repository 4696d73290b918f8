"""
VocabList Backend - List Route Handlers
=========================================

What:  List CRUD, cover images, item removal and share codes of the caller's lists.
How:   Thin handlers: read the owner from X-Owner-Id, delegate to the
       services, return the service result. Errors are turned into JSON by
       the global exception handlers in main.py.

Endpoints:
    POST   /api/lists                          create a list (201)
    GET    /api/lists                          all lists of the caller
    POST   /api/lists/default                  ensure the default list
    GET    /api/lists/{listId}                 list + items (reconciles wordCount)
    PATCH  /api/lists/{listId}                 rename / re-describe
    PUT    /api/lists/{listId}/cover           replace the cover image
    DELETE /api/lists/{listId}                 delete with cascade (204)
    DELETE /api/lists/{listId}/items/{wordId}  remove one item (204)
    POST   /api/lists/{listId}/share           issue a share code (201)
    DELETE /api/lists/{listId}/share           revoke the list's share codes
"""

import logging
from typing import List

from fastapi import APIRouter, Depends, File, Response, UploadFile

from vocablist.config import settings
from vocablist.schemas.lists import (
    CreateListRequest,
    ErrorResponse,
    ListDetail,
    RevokeResponse,
    ShareResult,
    UpdateListRequest,
    WordList,
)
from vocablist.services.item_store import ItemStore
from vocablist.services.list_store import ListStore
from vocablist.services.share_registry import ShareCodeRegistry
from vocablist.routes.dependencies import (
    get_item_store,
    get_list_store,
    get_owner_id,
    get_share_registry,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/lists", tags=["Lists"])

_ERRORS = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Missing X-Owner-Id", "model": ErrorResponse},
    404: {"description": "List not found", "model": ErrorResponse},
}


@router.post(
    "",
    status_code=201,
    response_model=WordList,
    responses={**_ERRORS, 409: {"description": "Name already taken", "model": ErrorResponse}},
    summary="Create a list",
    description="JSON body only. Set a cover afterwards with PUT /api/lists/{list_id}/cover.",
)
async def create_list(
    body: CreateListRequest,
    owner: str = Depends(get_owner_id),
    lists: ListStore = Depends(get_list_store),
) -> WordList:
    return await lists.create(
        owner,
        body.list_name,
        description=body.description,
        languages=body.list_language,
    )


@router.get("", response_model=List[WordList], summary="List the caller's lists")
async def list_lists(
    owner: str = Depends(get_owner_id),
    lists: ListStore = Depends(get_list_store),
) -> List[WordList]:
    return await lists.list(owner)


@router.post(
    "/default",
    response_model=WordList,
    summary="Ensure the default list exists",
    description="Idempotent; called once when an account is created.",
)
async def ensure_default_list(
    owner: str = Depends(get_owner_id),
    lists: ListStore = Depends(get_list_store),
) -> WordList:
    return await lists.ensure_default(owner)


@router.get(
    "/{list_id}",
    response_model=ListDetail,
    responses=_ERRORS,
    summary="Get a list and its items",
)
async def get_list(
    list_id: str,
    owner: str = Depends(get_owner_id),
    lists: ListStore = Depends(get_list_store),
    items: ItemStore = Depends(get_item_store),
) -> ListDetail:
    word_items = await items.list_items(owner, list_id, reconcile=settings.reconcile_on_read)
    # read after reconciling so wordCount reflects the items returned
    word_list = await lists.get(owner, list_id)
    return ListDetail(word_list=word_list, items=word_items)


@router.patch(
    "/{list_id}",
    response_model=WordList,
    responses=_ERRORS,
    summary="Rename or re-describe a list",
)
async def update_list(
    list_id: str,
    body: UpdateListRequest,
    owner: str = Depends(get_owner_id),
    lists: ListStore = Depends(get_list_store),
) -> WordList:
    return await lists.update(owner, list_id, name=body.list_name, description=body.description)


@router.put(
    "/{list_id}/cover",
    response_model=WordList,
    responses={**_ERRORS, 502: {"description": "Asset storage failed", "model": ErrorResponse}},
    summary="Replace the cover image of a list",
)
async def set_cover_image(
    list_id: str,
    file: UploadFile = File(..., description="PNG, JPG, JPEG or WEBP image"),
    owner: str = Depends(get_owner_id),
    lists: ListStore = Depends(get_list_store),
) -> WordList:
    try:
        content = await file.read()
        logger.info("Cover upload for list %s: %s (%d bytes)", list_id, file.filename, len(content))
        return await lists.set_cover_image(owner, list_id, content, file.filename or "")
    finally:
        await file.close()


@router.delete(
    "/{list_id}",
    status_code=204,
    responses=_ERRORS,
    summary="Delete a list, its items, cover image and share codes",
)
async def delete_list(
    list_id: str,
    owner: str = Depends(get_owner_id),
    lists: ListStore = Depends(get_list_store),
) -> Response:
    await lists.delete(owner, list_id)
    return Response(status_code=204)


@router.delete(
    "/{list_id}/items/{word_id}",
    status_code=204,
    responses=_ERRORS,
    summary="Remove one item from a list",
)
async def remove_item(
    list_id: str,
    word_id: str,
    owner: str = Depends(get_owner_id),
    items: ItemStore = Depends(get_item_store),
) -> Response:
    await items.remove(owner, list_id, word_id)
    return Response(status_code=204)


@router.post(
    "/{list_id}/share",
    status_code=201,
    response_model=ShareResult,
    responses=_ERRORS,
    summary="Issue a share code and make the list public",
)
async def share_list(
    list_id: str,
    owner: str = Depends(get_owner_id),
    shares: ShareCodeRegistry = Depends(get_share_registry),
) -> ShareResult:
    return await shares.issue(owner, list_id)


@router.delete(
    "/{list_id}/share",
    response_model=RevokeResponse,
    responses=_ERRORS,
    summary="Revoke every share code of a list",
)
async def revoke_share(
    list_id: str,
    owner: str = Depends(get_owner_id),
    lists: ListStore = Depends(get_list_store),
    shares: ShareCodeRegistry = Depends(get_share_registry),
) -> RevokeResponse:
    await lists.get(owner, list_id)
    revoked = await shares.revoke_for_list(owner, list_id)
    return RevokeResponse(list_id=list_id, revoked=revoked)
